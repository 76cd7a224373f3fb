"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fitness_companion.adapters.openai_chat_client import OpenAIChatClient
from fitness_companion.adapters.supabase_key_value_store import SupabaseKeyValueStore
from fitness_companion.config import Settings
from fitness_companion.services.ai_gateway import AIGatewayService
from fitness_companion.services.chat_sessions import ChatSessionService
from fitness_companion.services.food_catalog import FoodCatalogService
from fitness_companion.services.key_value import InMemoryKeyValueStore, KeyValueStore
from fitness_companion.services.nutrition_ledger import NutritionLedgerService
from fitness_companion.services.progress import ProgressService
from fitness_companion.services.trainer import TrainerService
from fitness_companion.services.users import UserProfileService
from fitness_companion.services.widget import KeyValueWidgetBridge, WidgetSyncService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    ledger: NutritionLedgerService
    food_catalog: FoodCatalogService
    chat_sessions: ChatSessionService
    users: UserProfileService
    progress: ProgressService
    gateway: AIGatewayService
    trainer: TrainerService
    widget_sync: WidgetSyncService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by ``storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "supabase_url and supabase_service_key are required for Supabase storage"
        )
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return SupabaseKeyValueStore(client, table=settings.supabase_table)


def build_container(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_store = store or build_store(resolved_settings)
    ledger = NutritionLedgerService(resolved_store, resolved_settings.timezone)
    users = UserProfileService(resolved_store)
    chat_sessions = ChatSessionService(resolved_store)
    openai_client = OpenAIChatClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.ai_timeout_seconds,
    )
    gateway = AIGatewayService(
        client=openai_client,
        chat_model=resolved_settings.openai_chat_model,
        reasoning_model=resolved_settings.openai_reasoning_model,
        transcription_model=resolved_settings.openai_transcription_model,
        timeout_seconds=resolved_settings.ai_timeout_seconds,
        temperature=resolved_settings.ai_temperature,
        max_tokens=resolved_settings.ai_max_tokens,
        top_p=resolved_settings.ai_top_p,
        frequency_penalty=resolved_settings.ai_frequency_penalty,
        presence_penalty=resolved_settings.ai_presence_penalty,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
    )
    trainer = TrainerService(
        chat_sessions=chat_sessions,
        gateway=gateway,
        users=users,
        ledger=ledger,
        context_window_size=resolved_settings.context_window_size,
    )
    widget_sync = WidgetSyncService(
        bridge=KeyValueWidgetBridge(resolved_store),
        ledger=ledger,
        users=users,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=resolved_store,
        ledger=ledger,
        food_catalog=FoodCatalogService(resolved_store),
        chat_sessions=chat_sessions,
        users=users,
        progress=ProgressService(resolved_store, resolved_settings.timezone),
        gateway=gateway,
        trainer=trainer,
        widget_sync=widget_sync,
        close_resources=close_resources,
    )
