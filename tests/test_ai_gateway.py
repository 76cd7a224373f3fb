"""Tests for the AI gateway."""

import asyncio
from datetime import UTC, datetime

import httpx
import pytest

from fitness_companion.domain.ai import (
    ChatRequestOptions,
    ResponseType,
    SystemPrompt,
    TodayIntake,
    UserContext,
)
from fitness_companion.domain.chat import ChatMessage, MessageRole
from fitness_companion.services.ai_gateway import (
    AIGatewayService,
    GatewayError,
    _to_data_url,
    parse_ai_response,
)
from fitness_companion.services.prompts import SYSTEM_PROMPTS
from tests.conftest import FakeChatClient

STRUCTURED_REPLY = """Here is your estimate.

```json
{"type": "nutrition", "calories": 350, "nextSteps": ["Log it"], "questions": []}
```"""


def _message(content: str, role: MessageRole = MessageRole.USER) -> ChatMessage:
    return ChatMessage(
        id=f"msg_{content}",
        role=role,
        content=content,
        timestamp=datetime(2024, 5, 14, tzinfo=UTC),
    )


def test_parse_extracts_json_block() -> None:
    response = parse_ai_response(STRUCTURED_REPLY)

    assert response.text == "Here is your estimate."
    assert response.type == ResponseType.NUTRITION
    assert response.data is not None
    assert response.data["calories"] == 350
    assert response.next_steps == ["Log it"]
    assert response.questions == []


def test_parse_leaves_malformed_json_in_text() -> None:
    text = "Try this:\n```json\n{not json}\n```"

    response = parse_ai_response(text)

    assert response.text == text
    assert response.data is None
    assert response.type is None


def test_parse_unknown_type_is_general() -> None:
    response = parse_ai_response('Ok\n```json\n{"type": "sleep"}\n```')

    assert response.type == ResponseType.GENERAL


def test_send_chat_request_builds_payload(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    context = UserContext(
        nutrition_goals={"calories": 2000},
        today_intake=TodayIntake(
            calories=500, protein=30, carbs=60, fat=10, meals=["Oats"]
        ),
    )

    response = asyncio.run(
        gateway.send_chat_request(
            [_message("hi"), _message("hello", MessageRole.ASSISTANT)],
            user_context=context,
        )
    )

    assert response.text == "Keep going!"
    call = chat_client.calls[0]
    assert call["model"] == "gpt-4o"
    messages = call["messages"]
    assert messages[0] == {
        "role": "system",
        "content": SYSTEM_PROMPTS[SystemPrompt.FITNESS_TRAINER],
    }
    assert messages[1]["content"].startswith("User context: ")
    assert '"today_intake"' in messages[1]["content"]
    assert messages[2:] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]
    assert call["params"] == {
        "temperature": 0.7,
        "max_tokens": 1000,
        "top_p": 1.0,
        "frequency_penalty": 0.0,
        "presence_penalty": 0.0,
    }


def test_options_override_defaults(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    asyncio.run(
        gateway.send_chat_request(
            [_message("hi")],
            options=ChatRequestOptions(model="gpt-4o-mini", temperature=0.2),
        )
    )

    call = chat_client.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["params"]["temperature"] == 0.2
    assert len(call["messages"]) == 2


def test_empty_reply_raises_gateway_error(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    chat_client.content = ""

    with pytest.raises(GatewayError):
        asyncio.run(gateway.send_chat_request([_message("hi")]))


def test_tool_calls_are_parsed(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    chat_client.content = None
    chat_client.tool_calls = [
        {
            "id": "call_1",
            "function": {"name": "log_meal", "arguments": '{"calories": 300}'},
        }
    ]

    response = asyncio.run(gateway.send_chat_request([_message("log it")]))

    assert response.text == ""
    assert response.tool_calls[0].function.name == "log_meal"


def test_provider_error_carries_status_code(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    chat_client.error = httpx.HTTPStatusError(
        "rate limited", request=request, response=httpx.Response(429, request=request)
    )

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(gateway.send_chat_request([_message("hi")]))

    assert exc_info.value.status_code == 429


def test_timeout_raises_gateway_error(chat_client: FakeChatClient) -> None:
    chat_client.delay = 0.5
    gateway = AIGatewayService(
        client=chat_client,
        chat_model="gpt-4o",
        reasoning_model="o4-mini",
        transcription_model="gpt-4o-mini-transcribe",
        timeout_seconds=0.05,
    )

    with pytest.raises(GatewayError, match="timed out"):
        asyncio.run(gateway.send_chat_request([_message("hi")]))


def test_food_analysis_uses_reasoning_model(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    chat_client.content = STRUCTURED_REPLY

    response = asyncio.run(gateway.analyze_food_from_text("a bowl of oats"))

    call = chat_client.calls[0]
    assert call["model"] == "o4-mini"
    assert call["messages"][0]["content"] == SYSTEM_PROMPTS[SystemPrompt.FOOD_ANALYSIS]
    assert "a bowl of oats" in call["messages"][-1]["content"]
    assert response.type == ResponseType.NUTRITION


def test_food_image_analysis_sends_data_url(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    asyncio.run(gateway.analyze_food_from_image(b"\x89PNG\r\n\x1a\nrest", "lunch"))

    content = chat_client.calls[0]["messages"][-1]["content"]
    assert "lunch" in content[0]["text"]
    assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")


def test_assessment_and_workout_prompts(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    asyncio.run(gateway.get_initial_assessment("de"))
    asyncio.run(gateway.get_workout_recommendations("run a 10k"))

    assessment, workout = chat_client.calls
    assert assessment["messages"][0]["content"] == (
        SYSTEM_PROMPTS[SystemPrompt.INITIAL_ASSESSMENT]
    )
    assert "(Language: de)" in assessment["messages"][-1]["content"]
    assert workout["messages"][0]["content"] == (
        SYSTEM_PROMPTS[SystemPrompt.WORKOUT_ADVICE]
    )
    assert "run a 10k" in workout["messages"][-1]["content"]


def test_transcribe_audio(
    gateway: AIGatewayService, chat_client: FakeChatClient
) -> None:
    text = asyncio.run(gateway.transcribe_audio(b"audio", "note.m4a"))

    assert text == "two eggs and toast"
    assert chat_client.transcriptions[0]["model"] == "gpt-4o-mini-transcribe"
    assert chat_client.transcriptions[0]["filename"] == "note.m4a"


def test_to_data_url_defaults_to_jpeg() -> None:
    assert _to_data_url(b"unknown").startswith("data:image/jpeg;base64,")


def test_reasoning_model_gets_completion_cap_only(
    chat_client: FakeChatClient,
) -> None:
    gateway = AIGatewayService(
        client=chat_client,
        chat_model="gpt-4o",
        reasoning_model="o4-mini",
        transcription_model="gpt-4o-mini-transcribe",
        reasoning_effort="medium",
    )

    asyncio.run(gateway.analyze_food_from_text("two eggs"))
    asyncio.run(
        gateway.send_chat_request(
            [_message("hi")],
            options=ChatRequestOptions(
                model="o4-mini", temperature=0.2, max_tokens=300
            ),
        )
    )

    analysis, chat = chat_client.calls
    assert analysis["params"] == {
        "max_completion_tokens": 1000,
        "reasoning_effort": "medium",
    }
    assert chat["params"] == {
        "max_completion_tokens": 300,
        "reasoning_effort": "medium",
    }
