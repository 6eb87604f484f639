"""Pydantic models for extracted PostgreSQL schema snapshots.

Every model is frozen and uses tuples for nested collections, so a
``SchemaSnapshot`` cannot change once the introspector has built it and may
be shared freely between concurrent comparisons.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    """Base for immutable catalog models."""

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Table Members
# ============================================================================


class ColumnSchema(_FrozenModel):
    """Schema for a table column."""

    name: str
    data_type: str
    nullable: bool = True
    default: str | None = None  # Generation expression when generated is set
    identity: str | None = None  # ALWAYS, BY DEFAULT
    generated: str | None = None  # STORED
    ordinal_position: int = 0
    comment: str | None = None


class PrimaryKeySchema(_FrozenModel):
    """Schema for a primary key constraint."""

    name: str
    columns: tuple[str, ...] = ()


class ForeignKeySchema(_FrozenModel):
    """Schema for a foreign key constraint."""

    name: str
    columns: tuple[str, ...] = ()
    referenced_schema: str = "public"
    referenced_table: str = ""
    referenced_columns: tuple[str, ...] = ()
    on_update: str = "NO ACTION"
    on_delete: str = "NO ACTION"


class UniqueConstraintSchema(_FrozenModel):
    """Schema for a unique constraint."""

    name: str
    columns: tuple[str, ...] = ()


class CheckConstraintSchema(_FrozenModel):
    """Schema for a check constraint (``expression`` is the full ``CHECK (...)`` text)."""

    name: str
    expression: str


class IndexSchema(_FrozenModel):
    """Schema for a non-primary index."""

    name: str
    index_type: str = "btree"
    columns: tuple[str, ...] = ()
    is_unique: bool = False
    where_clause: str | None = None
    definition: str | None = None


class TriggerSchema(_FrozenModel):
    """Schema for a table trigger."""

    name: str
    definition: str | None = None
    enabled: bool = True


class TableSchema(_FrozenModel):
    """Schema for a table with all of its nested objects."""

    name: str
    owner: str | None = None
    comment: str | None = None
    is_partition: bool = False
    partition_key: str | None = None
    columns: tuple[ColumnSchema, ...] = ()
    primary_key: PrimaryKeySchema | None = None
    foreign_keys: tuple[ForeignKeySchema, ...] = ()
    unique_constraints: tuple[UniqueConstraintSchema, ...] = ()
    check_constraints: tuple[CheckConstraintSchema, ...] = ()
    indexes: tuple[IndexSchema, ...] = ()
    triggers: tuple[TriggerSchema, ...] = ()

    def get_column(self, name: str) -> ColumnSchema | None:
        """Return the column called ``name``, or None."""
        for column in self.columns:
            if column.name == name:
                return column
        return None


# ============================================================================
# Views, Routines, Sequences
# ============================================================================


class ViewColumn(_FrozenModel):
    """Output column of a view."""

    name: str
    data_type: str
    position: int = 0


class ViewSchema(_FrozenModel):
    """Schema for a view or materialized view."""

    name: str
    definition: str | None = None
    is_materialized: bool = False
    owner: str | None = None
    comment: str | None = None
    columns: tuple[ViewColumn, ...] = ()
    indexes: tuple[str, ...] = ()  # Materialized views only


class CallableKind(str, Enum):
    """Kind of routine stored in ``pg_proc``."""

    FUNCTION = "FUNCTION"
    PROCEDURE = "PROCEDURE"
    AGGREGATE = "AGGREGATE"
    WINDOW = "WINDOW"


class Volatility(str, Enum):
    """Routine volatility class."""

    IMMUTABLE = "IMMUTABLE"
    STABLE = "STABLE"
    VOLATILE = "VOLATILE"


class FunctionSchema(_FrozenModel):
    """Schema for a function or procedure.

    Functions are identified by ``signature`` so overloads stay distinct.
    """

    name: str
    arguments: str = ""
    return_type: str | None = None
    language: str | None = None
    kind: CallableKind = CallableKind.FUNCTION
    volatility: Volatility = Volatility.VOLATILE
    is_strict: bool = False
    security_definer: bool = False
    definition: str | None = None
    owner: str | None = None
    comment: str | None = None

    @property
    def signature(self) -> str:
        """Name plus identity arguments, e.g. ``total(integer, text)``."""
        return f"{self.name}({self.arguments})"

    @property
    def is_procedure(self) -> bool:
        return self.kind == CallableKind.PROCEDURE


class SequenceSchema(_FrozenModel):
    """Schema for a sequence."""

    name: str
    data_type: str = "bigint"
    start_value: int = 1
    increment: int = 1
    min_value: int = 1
    max_value: int = 9223372036854775807
    cache_size: int = 1
    cycle: bool = False
    owned_by: str | None = None  # table.column
    owner: str | None = None
    comment: str | None = None


# ============================================================================
# User-Defined Types and Extensions
# ============================================================================


class TypeKind(str, Enum):
    """Kind of user-defined type."""

    ENUM = "ENUM"
    COMPOSITE = "COMPOSITE"
    DOMAIN = "DOMAIN"
    RANGE = "RANGE"


class CompositeAttribute(_FrozenModel):
    """One attribute of a composite type."""

    name: str
    data_type: str
    position: int = 0


class TypeSchema(_FrozenModel):
    """Schema for an enum, composite, domain or range type.

    Only the fields relevant to ``kind`` are populated.
    """

    name: str
    kind: TypeKind
    labels: tuple[str, ...] = ()
    attributes: tuple[CompositeAttribute, ...] = ()
    base_type: str | None = None
    default: str | None = None
    not_null: bool = False
    constraints: tuple[str, ...] = ()
    subtype: str | None = None
    owner: str | None = None
    comment: str | None = None


class ExtensionSchema(_FrozenModel):
    """An installed extension."""

    name: str
    version: str | None = None


# ============================================================================
# Snapshot
# ============================================================================


class SchemaSnapshot(_FrozenModel):
    """Everything extracted for one schema on one instance at one instant."""

    instance: str = ""
    schema_name: str = "public"
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tables: tuple[TableSchema, ...] = ()
    views: tuple[ViewSchema, ...] = ()
    functions: tuple[FunctionSchema, ...] = ()
    sequences: tuple[SequenceSchema, ...] = ()
    types: tuple[TypeSchema, ...] = ()
    extensions: tuple[ExtensionSchema, ...] = ()

    @property
    def extension_versions(self) -> dict[str, str | None]:
        """Extension name to installed version."""
        return {ext.name: ext.version for ext in self.extensions}

    def get_table(self, name: str) -> TableSchema | None:
        """Return the table called ``name``, or None."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def summary(self) -> dict[str, int]:
        """Per-kind object counts."""
        return {
            "tables": len(self.tables),
            "views": sum(1 for v in self.views if not v.is_materialized),
            "materialized_views": sum(1 for v in self.views if v.is_materialized),
            "functions": len(self.functions),
            "sequences": len(self.sequences),
            "types": len(self.types),
            "extensions": len(self.extensions),
            "indexes": sum(len(t.indexes) for t in self.tables),
        }
