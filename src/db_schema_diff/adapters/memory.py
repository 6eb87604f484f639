"""In-process ``HistoryStore`` for embedding and tests.

Usage:
    from db_schema_diff.adapters.memory import InMemoryHistoryStore

    store = InMemoryHistoryStore()
    saved = await store.save(record)
    await store.find_by_id(saved.id)
"""

from datetime import datetime, timedelta, timezone

from db_schema_diff.history.models import HistoryRecord


class InMemoryHistoryStore:
    """Keeps history records in a list; ids count up from 1."""

    def __init__(self) -> None:
        self._records: list[HistoryRecord] = []
        self._next_id = 1

    def _newest_first(self, records: list[HistoryRecord]) -> list[HistoryRecord]:
        return sorted(records, key=lambda r: r.compared_at, reverse=True)

    def _for_pair(self, source_instance: str, destination_instance: str) -> list[HistoryRecord]:
        return [
            r
            for r in self._records
            if r.source_instance == source_instance and r.destination_instance == destination_instance
        ]

    async def save(self, record: HistoryRecord) -> HistoryRecord:
        saved = record.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._records.append(saved)
        return saved

    async def find_by_id(self, record_id: int) -> HistoryRecord | None:
        return next((r for r in self._records if r.id == record_id), None)

    async def find_recent(self, limit: int) -> list[HistoryRecord]:
        return self._newest_first(self._records)[:limit]

    async def find_by_instances(
        self,
        source_instance: str,
        destination_instance: str,
        days: int,
    ) -> list[HistoryRecord]:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        return self._newest_first(
            [r for r in self._for_pair(source_instance, destination_instance) if r.compared_at >= cutoff]
        )

    async def find_most_recent(self, source_instance: str, destination_instance: str) -> HistoryRecord | None:
        records = self._newest_first(self._for_pair(source_instance, destination_instance))
        return records[0] if records else None

    async def count(self) -> int:
        return len(self._records)

    async def delete_older_than(self, days: int) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        kept = [r for r in self._records if r.compared_at >= cutoff]
        deleted = len(self._records) - len(kept)
        self._records = kept
        return deleted
