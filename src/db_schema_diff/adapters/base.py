"""Protocols the diff engine and history service depend on.

``ConnectionProvider`` maps instance names to connection URLs.
``HistoryStore`` persists comparison history; all its methods are
``async def``, the library is async-first.

Usage:
    from db_schema_diff.adapters.base import ConnectionProvider, HistoryStore

    async def latest(store: HistoryStore) -> None:
        records = await store.find_recent(10)
        previous = await store.find_most_recent("prod", "staging")
        removed = await store.delete_older_than(90)
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from db_schema_diff.history.models import HistoryRecord


class ConnectionProvider(Protocol):
    """Resolves a configured instance name to a PostgreSQL connection URL."""

    def resolve_url(self, instance: str) -> str:
        """Return the connection URL for ``instance``.

        Args:
            instance: Instance name, e.g. ``"prod"``.

        Returns:
            A ``postgresql://`` URL with any password placeholder filled in.

        Raises:
            InstanceNotFoundError: If ``instance`` is not configured.

        Example:
            url = provider.resolve_url("staging")
        """
        ...


class HistoryStore(Protocol):
    """Storage interface for comparison history records.

    Implementations return records newest first (by ``compared_at``).
    Instance-pair lookups are directional: (a, b) does not match (b, a).
    """

    async def save(self, record: "HistoryRecord") -> "HistoryRecord":
        """Persist ``record`` and return it with its assigned ``id``.

        Example:
            saved = await store.save(HistoryRecord.from_result(result))
            saved.id
            # 42
        """
        ...

    async def find_by_id(self, record_id: int) -> "HistoryRecord | None":
        """Return the record with ``record_id``, or None."""
        ...

    async def find_recent(self, limit: int) -> "list[HistoryRecord]":
        """Return up to ``limit`` most recent records across all pairs."""
        ...

    async def find_by_instances(
        self,
        source_instance: str,
        destination_instance: str,
        days: int,
    ) -> "list[HistoryRecord]":
        """Return records for one pair compared within the last ``days`` days."""
        ...

    async def find_most_recent(
        self,
        source_instance: str,
        destination_instance: str,
    ) -> "HistoryRecord | None":
        """Return the latest record for one pair, or None if there is none."""
        ...

    async def count(self) -> int:
        """Total number of stored records."""
        ...

    async def delete_older_than(self, days: int) -> int:
        """Delete records compared more than ``days`` days ago.

        Returns:
            Number of records deleted.
        """
        ...
