"""AI gateway: prompt assembly, provider calls and reply parsing."""

import asyncio
import base64
import json
import logging
import re
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, TypeVar
from uuid import uuid4

from pydantic import ValidationError

from fitness_companion.domain.ai import (
    AIResponse,
    ChatRequestOptions,
    ResponseType,
    SystemPrompt,
    ToolCall,
    UserContext,
)
from fitness_companion.domain.chat import ChatMessage, MessageRole
from fitness_companion.services.prompts import SYSTEM_PROMPTS

T = TypeVar("T")

_JSON_BLOCK = re.compile(r"```json\n([\s\S]*?)\n```")

_logger = logging.getLogger(__name__)


class GatewayError(RuntimeError):
    """The AI provider failed, timed out or returned an unusable reply."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatCompletionClient(Protocol):
    """Interface for the LLM provider."""

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        params: dict[str, object],
    ) -> dict[str, object]:
        """Return ``{"content": str | None, "tool_calls": [...]}``."""

    async def transcribe(
        self,
        *,
        model: str,
        audio: bytes,
        filename: str,
        language: str | None,
    ) -> str:
        """Return the transcript of an audio clip."""


@dataclass
class AIGatewayService:  # noqa: PLR0902
    """Builds provider requests and turns replies into ``AIResponse``.

    Every provider call is bounded by ``timeout_seconds``. Provider errors,
    timeouts and empty replies all surface as ``GatewayError``.
    """

    client: ChatCompletionClient
    chat_model: str
    reasoning_model: str
    transcription_model: str
    timeout_seconds: float = 30.0
    temperature: float | None = 0.7
    max_tokens: int | None = 1000
    top_p: float | None = 1.0
    frequency_penalty: float | None = 0.0
    presence_penalty: float | None = 0.0
    reasoning_effort: str | None = None
    transcription_language: str | None = None

    async def send_chat_request(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: SystemPrompt = SystemPrompt.FITNESS_TRAINER,
        user_context: UserContext | None = None,
        options: ChatRequestOptions | None = None,
    ) -> AIResponse:
        """Send a conversation with the selected persona and parse the reply."""
        payload = _system_messages(system_prompt, user_context)
        payload.extend(
            {"role": str(message.role), "content": message.content}
            for message in messages
        )
        return await self._complete(payload, options or ChatRequestOptions())

    async def transcribe_audio(
        self, audio: bytes, filename: str = "recording.m4a"
    ) -> str:
        """Turn speech into text."""
        return await self._guard(
            self.client.transcribe(
                model=self.transcription_model,
                audio=audio,
                filename=filename,
                language=self.transcription_language,
            ),
            action="transcribe",
        )

    async def analyze_food_from_text(
        self, description: str, user_context: UserContext | None = None
    ) -> AIResponse:
        """Estimate the nutrition of a described food."""
        message = _prompt_message(
            f"Please analyze this food: {description}. Provide nutritional "
            "information and how it fits my goals."
        )
        return await self.send_chat_request(
            [message],
            SystemPrompt.FOOD_ANALYSIS,
            user_context,
            ChatRequestOptions(model=self.reasoning_model),
        )

    async def analyze_food_from_image(
        self,
        image_bytes: bytes,
        additional_text: str = "",
        user_context: UserContext | None = None,
    ) -> AIResponse:
        """Estimate the nutrition of a pictured meal."""
        suffix = f": {additional_text}" if additional_text else ""
        payload = _system_messages(SystemPrompt.FOOD_ANALYSIS, user_context)
        payload.append(
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": f"Analyze this food image{suffix}. Provide "
                        "nutritional information and how it fits my goals.",
                    },
                    {
                        "type": "image_url",
                        "image_url": {"url": _to_data_url(image_bytes)},
                    },
                ],
            }
        )
        return await self._complete(
            payload, ChatRequestOptions(model=self.reasoning_model)
        )

    async def get_initial_assessment(self, language: str = "en") -> AIResponse:
        """Open the onboarding conversation."""
        message = _prompt_message(
            "I'm new to fitness and nutrition. Can you help me get started? "
            f"(Language: {language})"
        )
        return await self.send_chat_request(
            [message],
            SystemPrompt.INITIAL_ASSESSMENT,
            options=ChatRequestOptions(model=self.reasoning_model),
        )

    async def get_workout_recommendations(
        self, goals: str, user_context: UserContext | None = None
    ) -> AIResponse:
        """Ask for a workout plan for the stated goals."""
        message = _prompt_message(
            f"I need workout recommendations for my goal: {goals}"
        )
        return await self.send_chat_request(
            [message],
            SystemPrompt.WORKOUT_ADVICE,
            user_context,
            ChatRequestOptions(model=self.reasoning_model),
        )

    async def _complete(
        self, payload: list[dict[str, object]], options: ChatRequestOptions
    ) -> AIResponse:
        model = options.model or self.chat_model
        if model == self.reasoning_model:
            params = _reasoning_params(
                _pick(options.max_tokens, self.max_tokens), self.reasoning_effort
            )
        else:
            params = _sampling_params(options, self)
        raw = await self._guard(
            self.client.complete(model=model, messages=payload, params=params),
            action=f"chat:{model}",
        )
        content = raw.get("content") or ""
        tool_calls = raw.get("tool_calls") or []
        if not isinstance(content, str) or (not content and not tool_calls):
            raise GatewayError("AI provider returned an empty response")
        try:
            parsed_calls = [
                ToolCall.model_validate(call)
                for call in tool_calls  # type: ignore[union-attr]
            ]
        except ValidationError as exc:
            raise GatewayError("AI provider returned malformed tool calls") from exc
        response = parse_ai_response(content)
        return response.model_copy(update={"tool_calls": parsed_calls})

    async def _guard(self, call: Awaitable[T], *, action: str) -> T:
        """Bound a provider call in time and normalise its failures."""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError as exc:
            _logger.warning("AI %s timed out after %ss", action, self.timeout_seconds)
            raise GatewayError(f"AI {action} timed out") from exc
        except GatewayError:
            raise
        except Exception as exc:
            status_code = _status_code_from_exception(exc)
            _logger.warning("AI %s failed (status=%s): %s", action, status_code, exc)
            raise GatewayError(f"AI {action} failed", status_code=status_code) from exc


def parse_ai_response(text: str) -> AIResponse:
    """Split an optional fenced JSON block out of a reply.

    Malformed or non-object JSON leaves the reply as plain text.
    """
    match = _JSON_BLOCK.search(text)
    if match is None:
        return AIResponse(text=text)
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        _logger.info("Ignoring malformed JSON block in AI reply")
        return AIResponse(text=text)
    if not isinstance(data, dict):
        return AIResponse(text=text)
    return AIResponse(
        text=_JSON_BLOCK.sub("", text, count=1).strip(),
        data=data,
        type=_response_type(data.get("type")),
        next_steps=_strings(data.get("nextSteps")),
        questions=_strings(data.get("questions")),
    )


def _system_messages(
    system_prompt: SystemPrompt, user_context: UserContext | None
) -> list[dict[str, object]]:
    messages: list[dict[str, object]] = [
        {"role": "system", "content": SYSTEM_PROMPTS[system_prompt]}
    ]
    if user_context is not None:
        context_json = user_context.model_dump_json(exclude_none=True)
        messages.append({"role": "system", "content": f"User context: {context_json}"})
    return messages


def _prompt_message(content: str) -> ChatMessage:
    return ChatMessage(
        id=f"prompt_{uuid4().hex}",
        role=MessageRole.USER,
        content=content,
        timestamp=datetime.now(tz=UTC),
    )


def _pick(value: T | None, default: T | None) -> T | None:
    return default if value is None else value


def _sampling_params(
    options: ChatRequestOptions, gateway: AIGatewayService
) -> dict[str, object]:
    params = {
        "temperature": _pick(options.temperature, gateway.temperature),
        "max_tokens": _pick(options.max_tokens, gateway.max_tokens),
        "top_p": _pick(options.top_p, gateway.top_p),
        "frequency_penalty": _pick(
            options.frequency_penalty, gateway.frequency_penalty
        ),
        "presence_penalty": _pick(options.presence_penalty, gateway.presence_penalty),
    }
    return {key: value for key, value in params.items() if value is not None}


def _reasoning_params(
    max_tokens: int | None, reasoning_effort: str | None
) -> dict[str, object]:
    """Reasoning models take no sampling knobs and cap completion tokens."""
    params: dict[str, object] = {}
    if max_tokens is not None:
        params["max_completion_tokens"] = max_tokens
    if reasoning_effort:
        params["reasoning_effort"] = reasoning_effort
    return params


def _response_type(value: object) -> ResponseType:
    try:
        return ResponseType(str(value))
    except ValueError:
        return ResponseType.GENERAL


def _strings(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _status_code_from_exception(exc: Exception) -> int | None:
    """Extract an HTTP status code from a provider exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{_detect_mime_type(image_bytes)};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
