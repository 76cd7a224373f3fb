"""Key-value persistence shared by every store."""

import logging
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Synchronous string store keyed by name."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous one."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used by default and in tests."""

    _values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        """Return a stored value."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value."""
        self._values[key] = value

    def delete(self, key: str) -> None:
        """Drop a value."""
        self._values.pop(key, None)


class JsonDocument(Generic[T]):
    """A whole collection stored as one JSON string under a fixed key."""

    def __init__(
        self, store: KeyValueStore, key: str, type_: type[T] | object, default: T
    ) -> None:
        self.store = store
        self.key = key
        self.default = default
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def load(self) -> T:
        """Return the stored value or the default when the key is unset."""
        raw = self.store.get(self.key)
        if raw is None:
            return self.default
        return self._adapter.validate_json(raw)

    def save(self, value: T) -> None:
        """Replace the stored value."""
        payload = self._adapter.dump_json(value).decode("utf-8")
        self.store.set(self.key, payload)
        _logger.debug("Persisted %s (%s bytes)", self.key, len(payload))

    def clear(self) -> None:
        """Remove the stored value."""
        self.store.delete(self.key)
