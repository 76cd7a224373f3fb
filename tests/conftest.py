"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from fitness_companion.config import Settings
from fitness_companion.containers import AppContainer
from fitness_companion.domain.nutrition import FoodItem, MacroNutrients
from fitness_companion.services.ai_gateway import AIGatewayService, ChatCompletionClient
from fitness_companion.services.chat_sessions import ChatSessionService
from fitness_companion.services.food_catalog import FoodCatalogService
from fitness_companion.services.key_value import InMemoryKeyValueStore
from fitness_companion.services.nutrition_ledger import NutritionLedgerService
from fitness_companion.services.progress import ProgressService
from fitness_companion.services.trainer import TrainerService
from fitness_companion.services.users import UserProfileService
from fitness_companion.services.widget import (
    NutritionData,
    WidgetBridge,
    WidgetSyncService,
)

NOW = datetime(2024, 5, 14, 12, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return NOW


def make_food(  # noqa: PLR0913
    food_id: str = "food_oats",
    name: str = "Oats",
    calories: float = 200,
    protein: float = 10,
    carbs: float = 20,
    fat: float = 5,
    serving_size: float = 100,
    is_per_serving: bool = False,
) -> FoodItem:
    return FoodItem(
        id=food_id,
        name=name,
        calories=calories,
        macros=MacroNutrients(protein=protein, carbs=carbs, fat=fat),
        serving_size=serving_size,
        is_per_serving=is_per_serving,
    )


@dataclass
class FakeChatClient(ChatCompletionClient):
    """Fake provider that records requests and replays canned replies."""

    content: str | None = "Keep going!"
    tool_calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None
    delay: float = 0.0
    transcript: str = "two eggs and toast"
    calls: list[dict[str, object]] = field(default_factory=list)
    transcriptions: list[dict[str, object]] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        params: dict[str, object],
    ) -> dict[str, object]:
        self.calls.append({"model": model, "messages": messages, "params": params})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {"content": self.content, "tool_calls": self.tool_calls}

    async def transcribe(
        self,
        *,
        model: str,
        audio: bytes,
        filename: str,
        language: str | None,
    ) -> str:
        self.transcriptions.append(
            {"model": model, "audio": audio, "filename": filename}
        )
        if self.error is not None:
            raise self.error
        return self.transcript


@dataclass
class FakeWidgetBridge(WidgetBridge):
    """Widget bridge that records what was published."""

    targets: list[NutritionData] = field(default_factory=list)
    consumed: list[NutritionData] = field(default_factory=list)
    fail: bool = False

    async def set_target_nutrition(self, data: NutritionData) -> None:
        if self.fail:
            raise RuntimeError("widget storage unavailable")
        self.targets.append(data)

    async def set_consumed_nutrition(self, data: NutritionData) -> None:
        self.consumed.append(data)


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(store: InMemoryKeyValueStore) -> NutritionLedgerService:
    return NutritionLedgerService(store)


@pytest.fixture
def food_catalog(store: InMemoryKeyValueStore) -> FoodCatalogService:
    return FoodCatalogService(store)


@pytest.fixture
def chat_sessions(store: InMemoryKeyValueStore) -> ChatSessionService:
    return ChatSessionService(store, clock=fixed_clock)


@pytest.fixture
def users(store: InMemoryKeyValueStore) -> UserProfileService:
    return UserProfileService(store, clock=fixed_clock)


@pytest.fixture
def progress(store: InMemoryKeyValueStore) -> ProgressService:
    return ProgressService(store, clock=fixed_clock)


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def gateway(chat_client: FakeChatClient) -> AIGatewayService:
    return AIGatewayService(
        client=chat_client,
        chat_model="gpt-4o",
        reasoning_model="o4-mini",
        transcription_model="gpt-4o-mini-transcribe",
        timeout_seconds=1.0,
    )


@pytest.fixture
def trainer(
    chat_sessions: ChatSessionService,
    gateway: AIGatewayService,
    users: UserProfileService,
    ledger: NutritionLedgerService,
) -> TrainerService:
    return TrainerService(
        chat_sessions=chat_sessions,
        gateway=gateway,
        users=users,
        ledger=ledger,
        clock=fixed_clock,
    )


@pytest.fixture
def widget_bridge() -> FakeWidgetBridge:
    return FakeWidgetBridge()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    store: InMemoryKeyValueStore,
    ledger: NutritionLedgerService,
    food_catalog: FoodCatalogService,
    chat_sessions: ChatSessionService,
    users: UserProfileService,
    progress: ProgressService,
    gateway: AIGatewayService,
    trainer: TrainerService,
    widget_bridge: FakeWidgetBridge,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        ledger=ledger,
        food_catalog=food_catalog,
        chat_sessions=chat_sessions,
        users=users,
        progress=progress,
        gateway=gateway,
        trainer=trainer,
        widget_sync=WidgetSyncService(
            bridge=widget_bridge, ledger=ledger, users=users
        ),
        close_resources=close_resources,
    )
