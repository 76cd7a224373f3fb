"""Trainer conversation flow on top of the chat store and AI gateway."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from fitness_companion.domain.ai import AIResponse, TodayIntake, UserContext
from fitness_companion.domain.chat import (
    Attachment,
    AttachmentType,
    ChatMessage,
    MessageRole,
    NewMessage,
)
from fitness_companion.services.ai_gateway import AIGatewayService, GatewayError
from fitness_companion.services.chat_sessions import (
    DEFAULT_CONTEXT_SIZE,
    ChatSessionService,
)
from fitness_companion.services.nutrition_ledger import NutritionLedgerService
from fitness_companion.services.users import UserProfileService

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class TrainerReply:
    """Outcome of one chat turn."""

    message_id: str
    reply_id: str | None
    response: AIResponse | None
    error: str | None = None


@dataclass
class TrainerService:  # noqa: PLR0913
    """Runs chat turns and personalised AI requests.

    A failed provider call never loses the user's message: it stays in the
    session flagged with ``error=True`` and the turn reports the error instead
    of raising.
    """

    chat_sessions: ChatSessionService
    gateway: AIGatewayService
    users: UserProfileService
    ledger: NutritionLedgerService
    context_window_size: int = DEFAULT_CONTEXT_SIZE
    clock: Callable[[], datetime] = _utcnow

    async def send_message(
        self,
        content: str,
        attachments: Sequence[Attachment] | None = None,
    ) -> TrainerReply:
        """Store the user message, ask the trainer and store its reply."""
        history = self.chat_sessions.get_context_for_ai(self.context_window_size)
        now = self.clock()
        message_id = self.chat_sessions.add_message(
            NewMessage(
                role=MessageRole.USER,
                content=content,
                timestamp=now,
                attachments=tuple(attachments) if attachments else None,
            )
        )
        pending = ChatMessage(
            id=message_id, role=MessageRole.USER, content=content, timestamp=now
        )
        user_context = self.build_user_context()
        try:
            if attachments and attachments[0].type == AttachmentType.IMAGE:
                response = await self.gateway.analyze_food_from_text(
                    f"Image of food with description: {content}", user_context
                )
            else:
                response = await self.gateway.send_chat_request(
                    [*history, pending], user_context=user_context
                )
        except GatewayError as exc:
            _logger.warning("Trainer reply failed: message_id=%s: %s", message_id, exc)
            self.chat_sessions.update_message(message_id, error=True)
            return TrainerReply(
                message_id=message_id, reply_id=None, response=None, error=str(exc)
            )
        reply_id = self.chat_sessions.add_message(
            NewMessage(
                role=MessageRole.ASSISTANT,
                content=response.text,
                timestamp=self.clock(),
            )
        )
        return TrainerReply(message_id=message_id, reply_id=reply_id, response=response)

    async def start_initial_assessment(self) -> AIResponse:
        """Open onboarding in the user's language and post it to the chat."""
        user = self.users.get_user()
        language = user.preferences.language if user else "en"
        response = await self.gateway.get_initial_assessment(language)
        self.chat_sessions.add_message(
            NewMessage(
                role=MessageRole.ASSISTANT,
                content=response.text,
                timestamp=self.clock(),
            )
        )
        return response

    async def analyze_food_from_text(self, description: str) -> AIResponse:
        """Personalised nutrition estimate for a described food."""
        return await self.gateway.analyze_food_from_text(
            description, self.build_user_context()
        )

    async def analyze_food_from_image(
        self, image_bytes: bytes, additional_text: str = ""
    ) -> AIResponse:
        """Personalised nutrition estimate for a pictured meal."""
        return await self.gateway.analyze_food_from_image(
            image_bytes, additional_text, self.build_user_context()
        )

    async def get_workout_recommendations(self, goals: str) -> AIResponse:
        """Workout plan shaped by the stored training preferences."""
        user = self.users.get_user()
        user_context = None
        if user is not None:
            user_context = UserContext(
                anthropometry=_plain(asdict(user.anthropometry)),
                preferences={
                    "fitness_goal": str(user.preferences.fitness_goal),
                    "preferred_workout_duration": (
                        user.preferences.preferred_workout_duration
                    ),
                    "preferred_workout_days": list(
                        user.preferences.preferred_workout_days
                    ),
                },
            )
        return await self.gateway.get_workout_recommendations(goals, user_context)

    async def transcribe_audio(
        self, audio: bytes, filename: str = "recording.m4a"
    ) -> str:
        """Speech to text for voice messages."""
        return await self.gateway.transcribe_audio(audio, filename)

    def build_user_context(self, day: datetime | None = None) -> UserContext | None:
        """Profile and today's intake for personalising AI replies."""
        user = self.users.get_user()
        if user is None:
            return None
        entry = self.ledger.get_daily_nutrition(day or self.clock())
        today_intake = None
        if entry is not None:
            today_intake = TodayIntake(
                calories=entry.total_calories,
                protein=entry.total_macros.protein,
                carbs=entry.total_macros.carbs,
                fat=entry.total_macros.fat,
                meals=[meal.name for meal in entry.meals],
            )
        return UserContext(
            anthropometry=_plain(asdict(user.anthropometry)),
            nutrition_goals=_plain(asdict(user.nutrition_goals)),
            preferences=_plain(asdict(user.preferences)),
            today_intake=today_intake,
        )


def _plain(values: dict[str, object]) -> dict[str, object]:
    """Drop unset fields so the prompt only carries known facts."""
    return {key: value for key, value in values.items() if value is not None}
