"""Tests for PostgresHistoryStore with a mocked SQLAlchemy async engine."""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from db_schema_diff.adapters.postgres import (
    PostgresHistoryStore,
    create_async_engine_pooled,
    normalize_async_url,
)
from db_schema_diff.history.models import HistoryRecord

COMPARED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record() -> HistoryRecord:
    return HistoryRecord(
        compared_at=COMPARED_AT,
        source_instance="prod",
        destination_instance="staging",
        source_schema="public",
        destination_schema="public",
        missing_count=2,
        result_snapshot={"missing": 2},
    )


def _mock_engine(result: MagicMock) -> MagicMock:
    """Engine whose begin()/connect() yield a connection returning ``result``."""
    mock_conn = AsyncMock()
    mock_conn.execute.return_value = result

    mock_ctx = MagicMock()
    mock_ctx.__aenter__ = AsyncMock(return_value=mock_conn)
    mock_ctx.__aexit__ = AsyncMock(return_value=None)

    engine = MagicMock()
    engine.begin.return_value = mock_ctx
    engine.connect.return_value = mock_ctx
    engine.dispose = AsyncMock()
    engine.conn = mock_conn
    return engine


def _store(result: MagicMock, table_name: str = "comparison_history") -> tuple[PostgresHistoryStore, MagicMock]:
    engine = _mock_engine(result)
    with patch("db_schema_diff.adapters.postgres.create_async_engine_pooled", return_value=engine):
        store = PostgresHistoryStore("postgresql://localhost/ops", table_name=table_name)
    return store, engine


# ============================================================================
# Test: Engine and URL
# ============================================================================


class TestEngineSetup:
    """Verify URL normalization and pool defaults."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u@h/db", "postgresql+asyncpg://u@h/db"),
            ("postgresql://u@h/db", "postgresql+asyncpg://u@h/db"),
            ("postgresql+asyncpg://u@h/db", "postgresql+asyncpg://u@h/db"),
        ],
    )
    def test_normalize(self, url: str, expected: str) -> None:
        assert normalize_async_url(url) == expected

    def test_store_uses_asyncpg_url(self) -> None:
        with patch("db_schema_diff.adapters.postgres.create_async_engine_pooled") as mock_create:
            PostgresHistoryStore("postgres://u@h/db", pool_size=2)
        mock_create.assert_called_once_with("postgresql+asyncpg://u@h/db", pool_size=2)

    def test_pool_defaults(self) -> None:
        with patch("db_schema_diff.adapters.postgres.create_async_engine") as mock_create:
            create_async_engine_pooled("postgresql+asyncpg://u@h/db", pool_size=1)
        kwargs = mock_create.call_args.kwargs
        assert kwargs["pool_size"] == 1
        assert kwargs["max_overflow"] == 10
        assert kwargs["pool_pre_ping"] is True
        assert kwargs["connect_args"] == {"timeout": 5}

    @pytest.mark.parametrize("table_name", ["history; DROP TABLE x", "1table", "a.b.c", ""])
    def test_invalid_table_name(self, table_name: str) -> None:
        with pytest.raises(ValueError, match="Invalid history table name"):
            PostgresHistoryStore("postgresql://localhost/ops", table_name=table_name)


# ============================================================================
# Test: Queries
# ============================================================================


class TestQueries:
    """Verify SQL issued and row conversion."""

    def test_save_returns_id(self) -> None:
        result = MagicMock()
        result.scalar_one.return_value = 17
        store, engine = _store(result)

        saved = asyncio.run(store.save(_record()))

        assert saved.id == 17
        query, params = engine.conn.execute.call_args.args
        sql = str(query)
        assert "INSERT INTO comparison_history" in sql
        assert "CAST(:result_snapshot AS jsonb)" in sql
        assert "RETURNING id" in sql
        assert json.loads(params["result_snapshot"]) == {"missing": 2}
        assert params["filter_config"] is None
        assert "id" not in params

    def test_find_most_recent_parses_jsonb_text(self) -> None:
        row = (
            5, COMPARED_AT, "prod", "staging", "public", "public", "ci",
            1, 0, 0, 4, None, '{"missing": 1}', None,
        )
        result = MagicMock()
        result.keys.return_value = [
            "id", "compared_at", "source_instance", "destination_instance",
            "source_schema", "destination_schema", "performed_by",
            "missing_count", "extra_count", "modified_count", "matching_count",
            "profile_name", "result_snapshot", "filter_config",
        ]
        result.fetchall.return_value = [row]
        store, engine = _store(result)

        record = asyncio.run(store.find_most_recent("prod", "staging"))

        assert record.id == 5
        assert record.result_snapshot == {"missing": 1}
        assert record.performed_by == "ci"
        query, params = engine.conn.execute.call_args.args
        assert "ORDER BY compared_at DESC LIMIT 1" in str(query)
        assert params == {"source": "prod", "destination": "staging"}

    def test_find_by_id_none(self) -> None:
        result = MagicMock()
        result.keys.return_value = []
        result.fetchall.return_value = []
        store, _ = _store(result)
        assert asyncio.run(store.find_by_id(99)) is None

    def test_delete_returns_rowcount(self) -> None:
        result = MagicMock()
        result.rowcount = 3
        store, engine = _store(result, table_name="ops.history")

        assert asyncio.run(store.delete_older_than(90)) == 3
        query, params = engine.conn.execute.call_args.args
        assert "DELETE FROM ops.history" in str(query)
        assert params["cutoff"].tzinfo is not None

    def test_count(self) -> None:
        result = MagicMock()
        result.scalar.return_value = 12
        store, _ = _store(result)
        assert asyncio.run(store.count()) == 12

    def test_ensure_table(self) -> None:
        store, engine = _store(MagicMock(), table_name="ops.history")
        asyncio.run(store.ensure_table())

        statements = [str(call.args[0]) for call in engine.conn.execute.call_args_list]
        assert "CREATE TABLE IF NOT EXISTS ops.history" in statements[0]
        assert "BIGSERIAL" in statements[0]
        assert "idx_ops_history_pair_time" in statements[1]

    def test_close_disposes_engine(self) -> None:
        store, engine = _store(MagicMock())
        asyncio.run(store.close())
        engine.dispose.assert_awaited_once()
