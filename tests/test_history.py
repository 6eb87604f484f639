"""Tests for comparison history: records, drift, retention, in-memory store."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from db_schema_diff.adapters.memory import InMemoryHistoryStore
from db_schema_diff.history import ComparisonHistoryService, DriftSummary, HistoryRecord
from db_schema_diff.schema.differences import ObjectDifference, ObjectKey, SchemaComparisonResult
from db_schema_diff.schema.filter import ComparisonFilter
from db_schema_diff.schema.kinds import DifferenceType, ObjectType


def _result(missing: int = 0, extra: int = 0, source: str = "prod", destination: str = "staging", **kwargs):
    differences = [
        ObjectDifference(
            key=ObjectKey(object_type=ObjectType.TABLE, name=f"missing_{i}"),
            difference_type=DifferenceType.MISSING,
        )
        for i in range(missing)
    ] + [
        ObjectDifference(
            key=ObjectKey(object_type=ObjectType.TABLE, name=f"extra_{i}"),
            difference_type=DifferenceType.EXTRA,
        )
        for i in range(extra)
    ]
    return SchemaComparisonResult(
        source_instance=source,
        destination_instance=destination,
        source_schema="public",
        destination_schema="public",
        differences=differences,
        **kwargs,
    )


def _record(days_ago: float, source: str = "prod", destination: str = "staging") -> HistoryRecord:
    return HistoryRecord(
        compared_at=datetime.now(timezone.utc) - timedelta(days=days_ago),
        source_instance=source,
        destination_instance=destination,
        source_schema="public",
        destination_schema="public",
    )


# ============================================================================
# Test: Models
# ============================================================================


class TestHistoryRecord:
    """Verify conversion from a comparison result."""

    def test_from_result(self) -> None:
        flt = ComparisonFilter(include_views=False)
        record = HistoryRecord.from_result(
            _result(missing=2, extra=1, filter=flt),
            performed_by="ci",
            profile_name="nightly",
        )
        assert record.id is None
        assert record.missing_count == 2
        assert record.extra_count == 1
        assert record.total_differences == 3
        assert record.performed_by == "ci"
        assert record.profile_name == "nightly"
        assert record.filter_config["include_views"] is False
        assert record.result_snapshot["missing"] == 2

    def test_no_filter_config(self) -> None:
        assert HistoryRecord.from_result(_result()).filter_config is None


class TestDriftSummary:
    """Verify drift reporting."""

    def test_no_drift(self) -> None:
        summary = DriftSummary(previous_compared_at=datetime.now(timezone.utc))
        assert not summary.has_drift()
        assert summary.total_drift() == 0
        assert summary.describe() == "No drift"

    def test_describe(self) -> None:
        summary = DriftSummary(
            missing_delta=1,
            extra_delta=-2,
            previous_compared_at=datetime.now(timezone.utc),
        )
        assert summary.has_drift()
        assert summary.total_drift() == 3
        assert summary.describe() == "+1 missing, -2 extra"


# ============================================================================
# Test: In-memory store
# ============================================================================


class TestInMemoryHistoryStore:
    """Verify the in-process store."""

    def test_save_assigns_ids(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            first = await store.save(_record(1))
            second = await store.save(_record(0))
            return first, second, await store.count()

        first, second, count = asyncio.run(run())
        assert (first.id, second.id) == (1, 2)
        assert count == 2

    def test_find_recent_newest_first(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            for days_ago in (3, 1, 2):
                await store.save(_record(days_ago))
            return await store.find_recent(2)

        recent = asyncio.run(run())
        assert [r.id for r in recent] == [2, 3]

    def test_pair_lookup_is_directional(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.save(_record(1, "prod", "staging"))
            await store.save(_record(0, "staging", "prod"))
            return (
                await store.find_most_recent("prod", "staging"),
                await store.find_by_instances("prod", "staging", days=30),
                await store.find_most_recent("dev", "prod"),
            )

        most_recent, listed, absent = asyncio.run(run())
        assert most_recent.id == 1
        assert [r.id for r in listed] == [1]
        assert absent is None

    def test_find_by_instances_respects_days(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.save(_record(40))
            await store.save(_record(5))
            return await store.find_by_instances("prod", "staging", days=30)

        assert [r.id for r in asyncio.run(run())] == [2]

    def test_delete_older_than(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.save(_record(100))
            await store.save(_record(10))
            deleted = await store.delete_older_than(90)
            return deleted, await store.count(), await store.find_by_id(1)

        deleted, remaining, old = asyncio.run(run())
        assert deleted == 1
        assert remaining == 1
        assert old is None


# ============================================================================
# Test: History service
# ============================================================================


class TestComparisonHistoryService:
    """Verify recording, drift detection and retention."""

    def test_record_saves(self) -> None:
        service = ComparisonHistoryService(InMemoryHistoryStore())

        async def run():
            saved = await service.record(_result(missing=1), username="ci", profile_name="nightly")
            return saved, await service.get_by_id(saved.id), await service.count()

        saved, fetched, count = asyncio.run(run())
        assert saved.id == 1
        assert fetched.performed_by == "ci"
        assert count == 1

    def test_record_failure_returns_none(self, caplog: pytest.LogCaptureFixture) -> None:
        store = AsyncMock()
        store.save.side_effect = ConnectionError("history database down")
        service = ComparisonHistoryService(store)

        with caplog.at_level(logging.WARNING, logger="db_schema_diff.history.service"):
            assert asyncio.run(service.record(_result())) is None
        assert "Failed to record comparison history" in caplog.text

    def test_first_run_has_no_drift(self) -> None:
        service = ComparisonHistoryService(InMemoryHistoryStore())

        async def run():
            return (
                await service.detect_drift(_result(missing=1), "prod", "staging"),
                await service.get_drift_summary(_result(missing=1), "prod", "staging"),
            )

        drifted, summary = asyncio.run(run())
        assert drifted is False
        assert summary is None

    def test_unchanged_counts_no_drift(self) -> None:
        service = ComparisonHistoryService(InMemoryHistoryStore())

        async def run():
            await service.record(_result(missing=1))
            return await service.detect_drift(_result(missing=1), "prod", "staging")

        assert asyncio.run(run()) is False

    def test_changed_counts_drift(self) -> None:
        service = ComparisonHistoryService(InMemoryHistoryStore())

        async def run():
            await service.record(_result(missing=1, extra=2))
            current = _result(missing=2)
            return (
                await service.detect_drift(current, "prod", "staging"),
                await service.get_drift_summary(current, "prod", "staging"),
            )

        drifted, summary = asyncio.run(run())
        assert drifted is True
        assert summary.missing_delta == 1
        assert summary.extra_delta == -2
        assert summary.describe() == "+1 missing, -2 extra"

    def test_drift_uses_pair_direction(self) -> None:
        service = ComparisonHistoryService(InMemoryHistoryStore())

        async def run():
            await service.record(_result(missing=3, source="staging", destination="prod"))
            return await service.detect_drift(_result(), "prod", "staging")

        assert asyncio.run(run()) is False

    def test_cleanup_uses_retention_default(self) -> None:
        store = AsyncMock()
        store.delete_older_than.return_value = 4
        service = ComparisonHistoryService(store, retention_days=30)

        assert asyncio.run(service.cleanup_old_history()) == 4
        store.delete_older_than.assert_awaited_once_with(30)

        asyncio.run(service.cleanup_old_history(days=7))
        store.delete_older_than.assert_awaited_with(7)

    def test_run_retention_stops_on_event(self) -> None:
        store = AsyncMock()
        store.delete_older_than.return_value = 0
        service = ComparisonHistoryService(store)

        async def run():
            stop = asyncio.Event()
            task = asyncio.create_task(service.run_retention(interval_seconds=0.01, stop_event=stop))
            await asyncio.sleep(0.05)
            stop.set()
            await asyncio.wait_for(task, timeout=1)

        asyncio.run(run())
        assert store.delete_older_than.await_count >= 2

    def test_run_retention_survives_failures(self) -> None:
        store = AsyncMock()
        store.delete_older_than.side_effect = [ConnectionError("down"), 0, 0, 0, 0, 0, 0, 0, 0, 0]
        service = ComparisonHistoryService(store)

        async def run():
            stop = asyncio.Event()
            task = asyncio.create_task(service.run_retention(interval_seconds=0.01, stop_event=stop))
            await asyncio.sleep(0.05)
            stop.set()
            await asyncio.wait_for(task, timeout=1)

        asyncio.run(run())
        assert store.delete_older_than.await_count >= 2

    def test_readers_delegate(self) -> None:
        store = AsyncMock()
        store.find_recent.return_value = []
        store.find_by_instances.return_value = []
        service = ComparisonHistoryService(store)

        asyncio.run(service.get_recent())
        asyncio.run(service.get_for_instances("prod", "staging"))
        store.find_recent.assert_awaited_once_with(50)
        store.find_by_instances.assert_awaited_once_with("prod", "staging", 30)
