"""OpenAI Chat Completions and transcription client."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from fitness_companion.services.ai_gateway import ChatCompletionClient


@dataclass
class OpenAIChatClient(ChatCompletionClient):
    """Chat client backed by the OpenAI SDK."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout: float = 30.0) -> "OpenAIChatClient":
        """Create an OpenAI client with a managed httpx session."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                http_client=httpx.AsyncClient(timeout=timeout),
            )
        )

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        params: dict[str, object],
    ) -> dict[str, object]:
        """Call Chat Completions and flatten the first choice."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,  # type: ignore[arg-type]
            **params,  # type: ignore[arg-type]
        )
        if not response.choices:
            raise RuntimeError("OpenAI returned no choices")
        message = response.choices[0].message
        return {
            "content": message.content,
            "tool_calls": [
                {
                    "id": call.id,
                    "function": {
                        "name": call.function.name,
                        "arguments": call.function.arguments,
                    },
                }
                for call in message.tool_calls or []
            ],
        }

    async def transcribe(
        self,
        *,
        model: str,
        audio: bytes,
        filename: str,
        language: str | None,
    ) -> str:
        """Transcribe an audio clip to text."""
        request_payload: dict[str, object] = {
            "model": model,
            "file": (filename, audio),
        }
        if language:
            request_payload["language"] = language
        transcription = await self.client.audio.transcriptions.create(
            **request_payload  # type: ignore[arg-type]
        )
        return transcription.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
