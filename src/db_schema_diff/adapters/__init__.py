"""Connection and history storage adapters.

Provides the ``ConnectionProvider`` and ``HistoryStore`` Protocols plus
two history stores: PostgreSQL (SQLAlchemy async + asyncpg) and in-memory.

Usage:
    from db_schema_diff.adapters import HistoryStore, PostgresHistoryStore, InMemoryHistoryStore
"""

from db_schema_diff.adapters.base import ConnectionProvider, HistoryStore
from db_schema_diff.adapters.memory import InMemoryHistoryStore
from db_schema_diff.adapters.postgres import PostgresHistoryStore, create_async_engine_pooled

__all__ = [
    "ConnectionProvider",
    "HistoryStore",
    "InMemoryHistoryStore",
    "PostgresHistoryStore",
    "create_async_engine_pooled",
]
