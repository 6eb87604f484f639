"""Schema extraction, comparison, and migration generation.

Provides live catalog extraction (``SchemaIntrospector``), object filtering
(``ComparisonFilter``), structural comparison (``SchemaDiffEngine``,
``compare_snapshots``), and DDL generation (``generate_migration_script``).

Usage:
    from db_schema_diff.schema import SchemaIntrospector, compare_snapshots
    from db_schema_diff.schema import ComparisonFilter, FilterPreset
    from db_schema_diff.schema import generate_migration_script, WrapOption
"""

from db_schema_diff.schema.comparator import (
    CategoryOutcome,
    SchemaDiffEngine,
    compare_extensions,
    compare_functions,
    compare_sequences,
    compare_snapshots,
    compare_tables,
    compare_types,
    compare_views,
)
from db_schema_diff.schema.differences import (
    AttributeDifference,
    ComparisonSummary,
    ObjectDifference,
    ObjectKey,
    SchemaComparisonResult,
)
from db_schema_diff.schema.filter import ComparisonFilter, FilterPreset
from db_schema_diff.schema.introspector import SchemaIntrospector
from db_schema_diff.schema.kinds import DifferenceType, ObjectType, Severity
from db_schema_diff.schema.migration import (
    TYPE_PRECEDENCE,
    MigrationScript,
    MigrationStatement,
    StatementKind,
    WrapOption,
    generate_migration_script,
)
from db_schema_diff.schema.models import (
    CallableKind,
    CheckConstraintSchema,
    ColumnSchema,
    CompositeAttribute,
    ExtensionSchema,
    ForeignKeySchema,
    FunctionSchema,
    IndexSchema,
    PrimaryKeySchema,
    SchemaSnapshot,
    SequenceSchema,
    TableSchema,
    TriggerSchema,
    TypeKind,
    TypeSchema,
    UniqueConstraintSchema,
    ViewColumn,
    ViewSchema,
    Volatility,
)

__all__ = [
    # Extraction
    "SchemaIntrospector",
    # Models
    "SchemaSnapshot",
    "TableSchema",
    "ColumnSchema",
    "PrimaryKeySchema",
    "ForeignKeySchema",
    "UniqueConstraintSchema",
    "CheckConstraintSchema",
    "IndexSchema",
    "TriggerSchema",
    "ViewSchema",
    "ViewColumn",
    "FunctionSchema",
    "CallableKind",
    "Volatility",
    "SequenceSchema",
    "TypeSchema",
    "TypeKind",
    "CompositeAttribute",
    "ExtensionSchema",
    # Kinds
    "ObjectType",
    "DifferenceType",
    "Severity",
    # Filter
    "ComparisonFilter",
    "FilterPreset",
    # Comparison
    "SchemaDiffEngine",
    "CategoryOutcome",
    "compare_snapshots",
    "compare_tables",
    "compare_views",
    "compare_functions",
    "compare_sequences",
    "compare_types",
    "compare_extensions",
    "ObjectKey",
    "ObjectDifference",
    "AttributeDifference",
    "ComparisonSummary",
    "SchemaComparisonResult",
    # Migration
    "generate_migration_script",
    "MigrationScript",
    "MigrationStatement",
    "StatementKind",
    "WrapOption",
    "TYPE_PRECEDENCE",
]
