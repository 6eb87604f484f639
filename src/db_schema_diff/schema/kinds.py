"""Closed enumerations shared by the diff engine and the DDL generator.

``ObjectType`` is the sum type over every object kind the comparison
understands. Tables keyed by it (display names, statement precedence) must
list every member; they are checked at import time.
"""

from collections.abc import Iterable
from enum import Enum


class ObjectType(str, Enum):
    """Kind of database object a difference or statement refers to."""

    TABLE = "TABLE"
    COLUMN = "COLUMN"
    CONSTRAINT_PRIMARY = "CONSTRAINT_PRIMARY"
    CONSTRAINT_FOREIGN = "CONSTRAINT_FOREIGN"
    CONSTRAINT_UNIQUE = "CONSTRAINT_UNIQUE"
    CONSTRAINT_CHECK = "CONSTRAINT_CHECK"
    INDEX = "INDEX"
    TRIGGER = "TRIGGER"
    VIEW = "VIEW"
    MATERIALIZED_VIEW = "MATERIALIZED_VIEW"
    FUNCTION = "FUNCTION"
    PROCEDURE = "PROCEDURE"
    SEQUENCE = "SEQUENCE"
    TYPE_ENUM = "TYPE_ENUM"
    TYPE_COMPOSITE = "TYPE_COMPOSITE"
    TYPE_DOMAIN = "TYPE_DOMAIN"
    EXTENSION = "EXTENSION"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_table_scoped(self) -> bool:
        """True for kinds identified by (owning table, name)."""
        return self in _TABLE_SCOPED


class DifferenceType(str, Enum):
    """How an object differs between source and destination."""

    MISSING = "MISSING"  # In source, not in destination
    EXTRA = "EXTRA"  # In destination, not in source
    MODIFIED = "MODIFIED"


class Severity(str, Enum):
    """Risk classification, ordered INFO < WARNING < BREAKING."""

    INFO = "INFO"
    WARNING = "WARNING"
    BREAKING = "BREAKING"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities: Iterable["Severity"]) -> "Severity":
        """Return the most severe value, INFO for an empty iterable."""
        return max(severities, key=lambda s: s.rank, default=cls.INFO)


_DISPLAY_NAMES: dict[ObjectType, str] = {
    ObjectType.TABLE: "Table",
    ObjectType.COLUMN: "Column",
    ObjectType.CONSTRAINT_PRIMARY: "Primary Key",
    ObjectType.CONSTRAINT_FOREIGN: "Foreign Key",
    ObjectType.CONSTRAINT_UNIQUE: "Unique Constraint",
    ObjectType.CONSTRAINT_CHECK: "Check Constraint",
    ObjectType.INDEX: "Index",
    ObjectType.TRIGGER: "Trigger",
    ObjectType.VIEW: "View",
    ObjectType.MATERIALIZED_VIEW: "Materialized View",
    ObjectType.FUNCTION: "Function",
    ObjectType.PROCEDURE: "Procedure",
    ObjectType.SEQUENCE: "Sequence",
    ObjectType.TYPE_ENUM: "Enum Type",
    ObjectType.TYPE_COMPOSITE: "Composite Type",
    ObjectType.TYPE_DOMAIN: "Domain",
    ObjectType.EXTENSION: "Extension",
}

_TABLE_SCOPED = frozenset({
    ObjectType.COLUMN,
    ObjectType.CONSTRAINT_PRIMARY,
    ObjectType.CONSTRAINT_FOREIGN,
    ObjectType.CONSTRAINT_UNIQUE,
    ObjectType.CONSTRAINT_CHECK,
    ObjectType.INDEX,
    ObjectType.TRIGGER,
})

_SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.BREAKING: 2,
}

if set(_DISPLAY_NAMES) != set(ObjectType):
    raise RuntimeError("Every ObjectType needs a display name")
