"""Tests for the trainer chat flow."""

import asyncio
from datetime import UTC, datetime

from fitness_companion.domain.ai import SystemPrompt
from fitness_companion.domain.chat import Attachment, AttachmentType, MessageRole
from fitness_companion.domain.nutrition import MealType, NewMeal, consume
from fitness_companion.services.chat_sessions import ChatSessionService
from fitness_companion.services.nutrition_ledger import NutritionLedgerService
from fitness_companion.services.prompts import SYSTEM_PROMPTS
from fitness_companion.services.trainer import TrainerService
from fitness_companion.services.users import UserProfileService
from tests.conftest import NOW, FakeChatClient, make_food


def test_send_message_stores_both_sides(
    trainer: TrainerService,
    chat_sessions: ChatSessionService,
    chat_client: FakeChatClient,
) -> None:
    reply = asyncio.run(trainer.send_message("How much protein do I need?"))

    assert reply.error is None
    assert reply.response is not None
    assert reply.response.text == "Keep going!"
    messages = chat_sessions.get_context_for_ai()
    assert [(message.role, message.content) for message in messages] == [
        (MessageRole.USER, "How much protein do I need?"),
        (MessageRole.ASSISTANT, "Keep going!"),
    ]
    assert messages[0].id == reply.message_id
    assert messages[1].id == reply.reply_id
    sent = chat_client.calls[0]["messages"]
    assert sent[-1] == {"role": "user", "content": "How much protein do I need?"}


def test_history_is_sent_oldest_first(
    trainer: TrainerService, chat_client: FakeChatClient
) -> None:
    asyncio.run(trainer.send_message("first"))
    asyncio.run(trainer.send_message("second"))

    sent = chat_client.calls[1]["messages"]
    assert [message["content"] for message in sent[1:]] == [
        "first",
        "Keep going!",
        "second",
    ]


def test_failed_reply_flags_user_message(
    trainer: TrainerService,
    chat_sessions: ChatSessionService,
    chat_client: FakeChatClient,
) -> None:
    chat_client.error = RuntimeError("provider down")

    reply = asyncio.run(trainer.send_message("hello?"))

    assert reply.response is None
    assert reply.reply_id is None
    assert reply.error is not None
    messages = chat_sessions.get_context_for_ai()
    assert len(messages) == 1
    assert messages[0].content == "hello?"
    assert messages[0].error


def test_image_attachment_asks_for_food_analysis(
    trainer: TrainerService, chat_client: FakeChatClient
) -> None:
    attachment = Attachment(type=AttachmentType.IMAGE, uri="file:///lunch.jpg")

    asyncio.run(trainer.send_message("my lunch", [attachment]))

    call = chat_client.calls[0]
    assert call["model"] == "o4-mini"
    assert call["messages"][0]["content"] == SYSTEM_PROMPTS[SystemPrompt.FOOD_ANALYSIS]
    assert "Image of food with description: my lunch" in call["messages"][-1]["content"]


def test_user_context_includes_today_intake(
    trainer: TrainerService,
    users: UserProfileService,
    ledger: NutritionLedgerService,
) -> None:
    assert trainer.build_user_context() is None

    users.initialize_user("Alex")
    ledger.add_meal(
        NewMeal(
            type=MealType.BREAKFAST,
            name="Oats",
            date=NOW,
            time=NOW,
            foods=(consume(make_food(), 150),),
        )
    )

    context = trainer.build_user_context()

    assert context is not None
    assert context.nutrition_goals is not None
    assert context.nutrition_goals["calories"] == 2000
    assert context.today_intake is not None
    assert context.today_intake.calories == 300
    assert context.today_intake.meals == ["Oats"]
    assert trainer.build_user_context(datetime(2024, 1, 1, tzinfo=UTC)) is not None


def test_initial_assessment_posts_to_chat(
    trainer: TrainerService,
    users: UserProfileService,
    chat_sessions: ChatSessionService,
    chat_client: FakeChatClient,
) -> None:
    users.initialize_user("Alex")
    users.update_preferences(language="es")
    chat_client.content = "Hola! Let's get started."

    response = asyncio.run(trainer.start_initial_assessment())

    assert response.text == "Hola! Let's get started."
    assert "(Language: es)" in chat_client.calls[0]["messages"][-1]["content"]
    messages = chat_sessions.get_context_for_ai()
    assert messages[0].role == MessageRole.ASSISTANT


def test_workout_recommendations_use_training_preferences(
    trainer: TrainerService,
    users: UserProfileService,
    chat_client: FakeChatClient,
) -> None:
    users.initialize_user("Alex")

    asyncio.run(trainer.get_workout_recommendations("build strength"))

    context_message = chat_client.calls[0]["messages"][1]["content"]
    assert '"preferred_workout_days":[1,3,5]' in context_message
    assert '"fitness_goal":"maintenance"' in context_message
