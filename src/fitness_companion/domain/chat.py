"""Domain models for chat sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class MessageRole(StrEnum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class AttachmentType(StrEnum):
    """Kind of media attached to a message."""

    IMAGE = "image"
    AUDIO = "audio"


@dataclass(frozen=True)
class Attachment:
    """Reference to media sent along with a message."""

    type: AttachmentType
    uri: str


@dataclass(frozen=True)
class ChatMessage:
    """A single message in a chat session."""

    id: str
    role: MessageRole
    content: str
    timestamp: datetime
    attachments: tuple[Attachment, ...] | None = None
    error: bool = False


@dataclass(frozen=True)
class NewMessage:
    """Message payload before it has an id."""

    role: MessageRole
    content: str
    timestamp: datetime
    attachments: tuple[Attachment, ...] | None = None
    error: bool = False


@dataclass(frozen=True)
class ChatSession:
    """Ordered conversation; message order is chronological order."""

    id: str
    created_at: datetime
    updated_at: datetime
    messages: tuple[ChatMessage, ...] = ()
