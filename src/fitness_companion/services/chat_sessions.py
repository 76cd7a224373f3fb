"""Chat session store with a bounded context window for AI calls."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

from fitness_companion.domain.chat import ChatMessage, ChatSession, NewMessage
from fitness_companion.services.key_value import JsonDocument, KeyValueStore

SESSIONS_KEY = "chat.sessions"
CURRENT_SESSION_KEY = "chat.current_session_id"
DEFAULT_CONTEXT_SIZE = 10

_UPDATABLE_MESSAGE_FIELDS = frozenset(
    {"role", "content", "timestamp", "attachments", "error"}
)

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ChatSessionService:
    """Owns chat sessions and tracks which one is current.

    Messages are only ever appended, so a session's message order is its
    chronological order. The current session id always points at an
    existing session or is None.
    """

    store: KeyValueStore
    clock: Callable[[], datetime] = _utcnow
    _sessions: JsonDocument[tuple[ChatSession, ...]] = field(init=False, repr=False)
    _current: JsonDocument[str | None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._sessions = JsonDocument(
            self.store, SESSIONS_KEY, tuple[ChatSession, ...], ()
        )
        self._current = JsonDocument(self.store, CURRENT_SESSION_KEY, str | None, None)

    @property
    def current_session_id(self) -> str | None:
        """Id of the current session, if any."""
        return self._current.load()

    def create_session(self) -> str:
        """Start an empty session and make it current."""
        now = self.clock()
        session = ChatSession(
            id=f"session_{uuid4().hex}", created_at=now, updated_at=now
        )
        self._sessions.save((*self._sessions.load(), session))
        self._current.save(session.id)
        _logger.info("Chat session created: session_id=%s", session.id)
        return session.id

    def switch_session(self, session_id: str) -> bool:
        """Make an existing session current."""
        if self.get_session(session_id) is None:
            return False
        self._current.save(session_id)
        return True

    def delete_session(self, session_id: str) -> bool:
        """Delete a session, falling back to the newest remaining one."""
        sessions = self._sessions.load()
        remaining = tuple(session for session in sessions if session.id != session_id)
        if len(remaining) == len(sessions):
            return False
        self._sessions.save(remaining)
        if self.current_session_id == session_id:
            self._current.save(remaining[-1].id if remaining else None)
        return True

    def add_message(self, message: NewMessage) -> str:
        """Append a message to the current session, creating one if needed."""
        current_id = self.current_session_id
        if current_id is None or self.get_session(current_id) is None:
            current_id = self.create_session()
        message_id = f"msg_{uuid4().hex}"
        created = ChatMessage(
            id=message_id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            attachments=message.attachments,
            error=message.error,
        )
        sessions = tuple(
            replace(
                session,
                messages=(*session.messages, created),
                updated_at=self.clock(),
            )
            if session.id == current_id
            else session
            for session in self._sessions.load()
        )
        self._sessions.save(sessions)
        return message_id

    def update_message(self, message_id: str, **changes: object) -> bool:
        """Shallow-merge fields into a message in any session."""
        unknown = set(changes) - _UPDATABLE_MESSAGE_FIELDS
        if unknown:
            raise TypeError(
                f"Unsupported message fields: {', '.join(sorted(unknown))}"
            )
        return self._rewrite_message(
            message_id,
            lambda message: replace(message, **changes),  # type: ignore[arg-type]
        )

    def delete_message(self, message_id: str) -> bool:
        """Remove a message from whichever session holds it."""
        return self._rewrite_message(message_id, lambda _message: None)

    def get_current_session(self) -> ChatSession | None:
        """Return the current session."""
        current_id = self.current_session_id
        return None if current_id is None else self.get_session(current_id)

    def get_session(self, session_id: str) -> ChatSession | None:
        """Return a session by id."""
        return next(
            (session for session in self._sessions.load() if session.id == session_id),
            None,
        )

    def get_session_messages(self, session_id: str) -> list[ChatMessage]:
        """Return a session's messages, or nothing for an unknown id."""
        session = self.get_session(session_id)
        return list(session.messages) if session else []

    def list_sessions(self) -> list[ChatSession]:
        """Return every session in creation order."""
        return list(self._sessions.load())

    def get_context_for_ai(
        self, max_messages: int = DEFAULT_CONTEXT_SIZE
    ) -> list[ChatMessage]:
        """Return the newest ``max_messages`` of the current session, oldest first."""
        session = self.get_current_session()
        if session is None or max_messages <= 0:
            return []
        return list(session.messages[-max_messages:])

    def clear_all_data(self) -> None:
        """Drop every session."""
        self._sessions.clear()
        self._current.clear()

    def _rewrite_message(
        self,
        message_id: str,
        rewrite: Callable[[ChatMessage], ChatMessage | None],
    ) -> bool:
        sessions = list(self._sessions.load())
        for index, session in enumerate(sessions):
            for position, message in enumerate(session.messages):
                if message.id != message_id:
                    continue
                messages = list(session.messages)
                rewritten = rewrite(message)
                if rewritten is None:
                    del messages[position]
                else:
                    messages[position] = rewritten
                sessions[index] = replace(
                    session, messages=tuple(messages), updated_at=self.clock()
                )
                self._sessions.save(tuple(sessions))
                return True
        _logger.debug("Message %s not found", message_id)
        return False
