"""db-schema-diff: Async PostgreSQL schema comparison and migration generation.

Extracts schemas from live instances, compares them object by object,
generates ordered migration DDL, and records comparison history for drift
detection.

Usage:
    from db_schema_diff import create_diff_engine, generate_migration_script
    from db_schema_diff import ComparisonFilter, FilterPreset, WrapOption
    from db_schema_diff import ComparisonHistoryService, InMemoryHistoryStore
    from db_schema_diff import load_config, ComparisonProfile
"""

__version__ = "0.1.0"

# Adapters
from db_schema_diff.adapters.base import ConnectionProvider, HistoryStore
from db_schema_diff.adapters.memory import InMemoryHistoryStore
from db_schema_diff.adapters.postgres import PostgresHistoryStore

# Config
from db_schema_diff.config.loader import load_config
from db_schema_diff.config.models import ComparisonProfile, DiffConfig, HistorySettings, InstanceProfile

# Factory
from db_schema_diff.factory import (
    InstanceNotFoundError,
    ProfileConnectionProvider,
    create_diff_engine,
    create_history_service,
    resolve_url,
    start_history_retention,
)

# History
from db_schema_diff.history.models import DriftSummary, HistoryRecord
from db_schema_diff.history.service import ComparisonHistoryService

# Schema
from db_schema_diff.schema.comparator import SchemaDiffEngine, compare_snapshots
from db_schema_diff.schema.differences import ObjectDifference, SchemaComparisonResult
from db_schema_diff.schema.filter import ComparisonFilter, FilterPreset
from db_schema_diff.schema.introspector import SchemaIntrospector
from db_schema_diff.schema.kinds import DifferenceType, ObjectType, Severity
from db_schema_diff.schema.migration import MigrationScript, WrapOption, generate_migration_script

__all__ = [
    # Adapters
    "ConnectionProvider",
    "HistoryStore",
    "InMemoryHistoryStore",
    "PostgresHistoryStore",
    # Config
    "load_config",
    "DiffConfig",
    "InstanceProfile",
    "HistorySettings",
    "ComparisonProfile",
    # Factory
    "create_diff_engine",
    "create_history_service",
    "start_history_retention",
    "ProfileConnectionProvider",
    "InstanceNotFoundError",
    "resolve_url",
    # History
    "ComparisonHistoryService",
    "HistoryRecord",
    "DriftSummary",
    # Schema
    "SchemaIntrospector",
    "SchemaDiffEngine",
    "compare_snapshots",
    "ComparisonFilter",
    "FilterPreset",
    "SchemaComparisonResult",
    "ObjectDifference",
    "ObjectType",
    "DifferenceType",
    "Severity",
    "generate_migration_script",
    "MigrationScript",
    "WrapOption",
]
