"""Comparison history recording, drift detection, and retention.

Usage:
    from db_schema_diff.adapters import InMemoryHistoryStore
    from db_schema_diff.history import ComparisonHistoryService

    service = ComparisonHistoryService(InMemoryHistoryStore(), retention_days=30)

    result = await engine.compare("prod", "staging")
    drift = await service.get_drift_summary(result, "prod", "staging")
    if drift and drift.has_drift():
        print(drift.describe())          # e.g. "+1 missing, -2 extra"
    await service.record(result, username="ci")

    # Background retention job
    stop = asyncio.Event()
    task = asyncio.create_task(service.run_retention(interval_seconds=3600, stop_event=stop))
"""

import asyncio
import logging

from db_schema_diff.adapters.base import HistoryStore
from db_schema_diff.history.models import DriftSummary, HistoryRecord
from db_schema_diff.schema.differences import SchemaComparisonResult

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 90


class ComparisonHistoryService:
    """Records comparison runs and compares new runs against the last one.

    Drift checks read the most recent record for the instance pair, so call
    ``detect_drift`` / ``get_drift_summary`` before ``record`` for the same
    result.

    Args:
        store: Persistence backend implementing ``HistoryStore``.
        retention_days: Default age limit used by ``cleanup_old_history``.
    """

    def __init__(self, store: HistoryStore, retention_days: int = DEFAULT_RETENTION_DAYS) -> None:
        self._store = store
        self.retention_days = retention_days

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    async def record(
        self,
        result: SchemaComparisonResult,
        username: str | None = None,
        profile_name: str | None = None,
    ) -> HistoryRecord | None:
        """Persist a comparison run.

        Failures are logged and swallowed so that recording never breaks
        the comparison that produced ``result``.

        Returns:
            The saved record (with its id), or None if saving failed.
        """
        logger.info(
            f"Recording comparison history: {result.source_instance}.{result.source_schema} -> "
            f"{result.destination_instance}.{result.destination_schema} by {username or 'unknown'}"
        )
        record = HistoryRecord.from_result(result, performed_by=username, profile_name=profile_name)
        try:
            return await self._store.save(record)
        except Exception as e:
            logger.warning(f"Failed to record comparison history: {e}")
            return None

    # ------------------------------------------------------------------
    # Drift
    # ------------------------------------------------------------------

    async def detect_drift(
        self,
        current: SchemaComparisonResult,
        source_instance: str,
        destination_instance: str,
    ) -> bool:
        """True if any difference count changed since the last recorded run.

        Returns False when there is no previous run for the pair.
        """
        summary = await self.get_drift_summary(current, source_instance, destination_instance)
        return summary is not None and summary.has_drift()

    async def get_drift_summary(
        self,
        current: SchemaComparisonResult,
        source_instance: str,
        destination_instance: str,
    ) -> DriftSummary | None:
        previous = await self._store.find_most_recent(source_instance, destination_instance)
        if previous is None:
            return None
        return DriftSummary(
            missing_delta=current.missing_count - previous.missing_count,
            extra_delta=current.extra_count - previous.extra_count,
            modified_delta=current.modified_count - previous.modified_count,
            previous_compared_at=previous.compared_at,
        )

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    async def cleanup_old_history(self, days: int | None = None) -> int:
        """Delete records older than ``days`` (default ``retention_days``)."""
        days = self.retention_days if days is None else days
        deleted = await self._store.delete_older_than(days)
        if deleted:
            logger.info(f"Deleted {deleted} comparison history records older than {days} days")
        return deleted

    async def run_retention(
        self,
        interval_seconds: float = 86400,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Run ``cleanup_old_history`` every ``interval_seconds`` until stopped.

        A failed run is logged and retried at the next interval.
        """
        stop_event = stop_event or asyncio.Event()
        while not stop_event.is_set():
            try:
                await self.cleanup_old_history()
            except Exception as e:
                logger.warning(f"Comparison history retention failed: {e}")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except TimeoutError:
                continue

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    async def get_recent(self, limit: int = 50) -> list[HistoryRecord]:
        return await self._store.find_recent(limit)

    async def get_for_instances(
        self,
        source_instance: str,
        destination_instance: str,
        days: int = 30,
    ) -> list[HistoryRecord]:
        return await self._store.find_by_instances(source_instance, destination_instance, days)

    async def get_most_recent(self, source_instance: str, destination_instance: str) -> HistoryRecord | None:
        return await self._store.find_most_recent(source_instance, destination_instance)

    async def get_by_id(self, record_id: int) -> HistoryRecord | None:
        return await self._store.find_by_id(record_id)

    async def count(self) -> int:
        return await self._store.count()
