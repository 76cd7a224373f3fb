"""Trainer chat, chat history and stateless AI endpoints."""

from __future__ import annotations

import base64
import binascii
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from fitness_companion.api.schemas import (
    AudioIn,
    ChatRequestIn,
    FoodDescriptionIn,
    FoodImageIn,
    MessageIn,
    MessageUpdate,
    WorkoutGoalsIn,
)
from fitness_companion.domain.chat import ChatMessage, MessageRole
from fitness_companion.services.chat_sessions import DEFAULT_CONTEXT_SIZE

if TYPE_CHECKING:
    from fitness_companion.containers import AppContainer

router = APIRouter(tags=["chat"])


def _decode(value: str, field_name: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{field_name} is not valid base64",
        ) from exc


@router.post("/chat/messages")
async def send_message(payload: MessageIn, request: Request) -> dict[str, object]:
    """Send a message to the trainer; failures are reported, not raised."""
    container: AppContainer = request.app.state.container
    reply = await container.trainer.send_message(payload.content, payload.attachments)
    return {
        "message_id": reply.message_id,
        "reply_id": reply.reply_id,
        "response": reply.response,
        "error": reply.error,
    }


@router.patch("/chat/messages/{message_id}")
async def update_message(
    message_id: str, payload: MessageUpdate, request: Request
) -> dict[str, str]:
    """Edit a stored message."""
    container: AppContainer = request.app.state.container
    if not container.chat_sessions.update_message(message_id, **payload.changes()):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Message not found"
        )
    return {"status": "ok"}


@router.delete("/chat/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: str, request: Request) -> None:
    """Delete a stored message."""
    container: AppContainer = request.app.state.container
    if not container.chat_sessions.delete_message(message_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Message not found"
        )


@router.get("/chat/sessions")
async def list_sessions(request: Request) -> dict[str, object]:
    """All sessions and the current session id."""
    container: AppContainer = request.app.state.container
    return {
        "sessions": container.chat_sessions.list_sessions(),
        "current_session_id": container.chat_sessions.current_session_id,
    }


@router.post("/chat/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(request: Request) -> dict[str, str]:
    """Start a new current session."""
    container: AppContainer = request.app.state.container
    return {"session_id": container.chat_sessions.create_session()}


@router.get("/chat/sessions/current")
async def current_session(request: Request) -> dict[str, object]:
    """The current session, if any."""
    container: AppContainer = request.app.state.container
    return {"session": container.chat_sessions.get_current_session()}


@router.get("/chat/sessions/{session_id}/messages")
async def session_messages(session_id: str, request: Request) -> dict[str, object]:
    """Messages of a session in chronological order."""
    container: AppContainer = request.app.state.container
    if container.chat_sessions.get_session(session_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return {"messages": container.chat_sessions.get_session_messages(session_id)}


@router.post("/chat/sessions/{session_id}/switch")
async def switch_session(session_id: str, request: Request) -> dict[str, str]:
    """Make a session current."""
    container: AppContainer = request.app.state.container
    if not container.chat_sessions.switch_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return {"status": "ok"}


@router.delete("/chat/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, request: Request) -> None:
    """Delete a session."""
    container: AppContainer = request.app.state.container
    if not container.chat_sessions.delete_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )


@router.get("/chat/context")
async def chat_context(
    request: Request, max_messages: int = DEFAULT_CONTEXT_SIZE
) -> dict[str, object]:
    """The context window sent with the next trainer request."""
    container: AppContainer = request.app.state.container
    return {"messages": container.chat_sessions.get_context_for_ai(max_messages)}


@router.post("/ai/chat")
async def chat_completion(
    payload: ChatRequestIn, request: Request
) -> dict[str, object]:
    """One-off trainer request that does not touch the chat history."""
    container: AppContainer = request.app.state.container
    message = ChatMessage(
        id="request",
        role=MessageRole.USER,
        content=payload.content,
        timestamp=datetime.now(tz=UTC),
    )
    response = await container.gateway.send_chat_request(
        [message],
        user_context=container.trainer.build_user_context(),
        options=payload.options,
    )
    return {"response": response}


@router.post("/ai/food-analysis")
async def analyze_food(
    payload: FoodDescriptionIn, request: Request
) -> dict[str, object]:
    """Nutrition estimate for a described food."""
    container: AppContainer = request.app.state.container
    response = await container.trainer.analyze_food_from_text(payload.description)
    return {"response": response}


@router.post("/ai/food-image-analysis")
async def analyze_food_image(
    payload: FoodImageIn, request: Request
) -> dict[str, object]:
    """Nutrition estimate for a meal photo."""
    container: AppContainer = request.app.state.container
    image_bytes = _decode(payload.image_base64, "image_base64")
    response = await container.trainer.analyze_food_from_image(
        image_bytes, payload.additional_text
    )
    return {"response": response}


@router.post("/ai/assessment")
async def initial_assessment(request: Request) -> dict[str, object]:
    """Start onboarding; the opening message is added to the chat."""
    container: AppContainer = request.app.state.container
    response = await container.trainer.start_initial_assessment()
    return {"response": response}


@router.post("/ai/workout-recommendations")
async def workout_recommendations(
    payload: WorkoutGoalsIn, request: Request
) -> dict[str, object]:
    """Workout plan for the stated goals."""
    container: AppContainer = request.app.state.container
    response = await container.trainer.get_workout_recommendations(payload.goals)
    return {"response": response}


@router.post("/ai/transcriptions")
async def transcribe(payload: AudioIn, request: Request) -> dict[str, str]:
    """Speech to text."""
    container: AppContainer = request.app.state.container
    audio = _decode(payload.audio_base64, "audio_base64")
    text = await container.trainer.transcribe_audio(audio, payload.filename)
    return {"text": text}
