"""Supabase-backed key-value store."""

from dataclasses import dataclass

from supabase import Client

from fitness_companion.services.key_value import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Key-value rows in a Supabase table with ``key`` and ``value`` columns."""

    client: Client
    table: str = "key_value_store"

    def get(self, key: str) -> str | None:
        """Return the value stored under a key, if present."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if response.data:
            return response.data[0]["value"]
        return None

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table).upsert(
            {"key": key, "value": value}, on_conflict="key"
        ).execute()

    def delete(self, key: str) -> None:
        """Delete the row for a key."""
        self.client.table(self.table).delete().eq("key", key).execute()
