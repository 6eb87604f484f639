"""Declarative selection of which objects take part in a comparison.

A ``ComparisonFilter`` combines per-kind toggles with a name predicate built
from include/exclude patterns. Patterns are shell-style wildcards (``*`` and
``?``) unless ``use_regex`` is set; matching is full-string and
case-insensitive.

Usage:
    from db_schema_diff.schema.filter import ComparisonFilter, FilterPreset

    flt = ComparisonFilter.from_preset(FilterPreset.EXCLUDE_TEMP_TABLES)
    flt.matches("tmp_import")      # False
    flt.matches("orders")          # True

    flt = ComparisonFilter(include_table_patterns=ComparisonFilter.parse_patterns("order*, invoice*"))
"""

import fnmatch
import re
from enum import Enum
from typing import Any, assert_never

from pydantic import BaseModel, ConfigDict

from db_schema_diff.schema.kinds import ObjectType

TEMP_TABLE_PATTERNS: tuple[str, ...] = ("temp_*", "tmp_*", "*_backup", "*_bak", "zz_*")
SYSTEM_SCHEMA_PATTERNS: tuple[str, ...] = ("pg_*", "information_schema")


class FilterPreset(str, Enum):
    """Named starting points for a filter."""

    NONE = "NONE"
    EXCLUDE_TEMP_TABLES = "EXCLUDE_TEMP_TABLES"
    EXCLUDE_SYSTEM_SCHEMAS = "EXCLUDE_SYSTEM_SCHEMAS"
    PRODUCTION_SAFE = "PRODUCTION_SAFE"


class ComparisonFilter(BaseModel):
    """Object-kind toggles plus a name predicate.

    Passing no filter to the diff engine is the same as passing
    ``ComparisonFilter()``: everything is included.
    """

    model_config = ConfigDict(frozen=True)

    # Top-level kinds
    include_tables: bool = True
    include_views: bool = True
    include_functions: bool = True
    include_sequences: bool = True
    include_types: bool = True
    include_extensions: bool = True

    # Table sub-kinds
    include_columns: bool = True
    include_primary_keys: bool = True
    include_foreign_keys: bool = True
    include_unique_constraints: bool = True
    include_check_constraints: bool = True
    include_indexes: bool = True
    include_triggers: bool = True

    # Name predicate
    include_table_patterns: tuple[str, ...] = ()
    exclude_table_patterns: tuple[str, ...] = ()
    exclude_schema_patterns: tuple[str, ...] = ()
    use_regex: bool = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_preset(cls, preset: FilterPreset | str, **overrides: Any) -> "ComparisonFilter":
        """Build a filter from a preset, then apply keyword overrides.

        Raises:
            ValueError: If ``preset`` is not a known preset name.
        """
        preset = FilterPreset(preset)
        match preset:
            case FilterPreset.NONE:
                base: dict[str, Any] = {}
            case FilterPreset.EXCLUDE_TEMP_TABLES:
                base = {"exclude_table_patterns": TEMP_TABLE_PATTERNS}
            case FilterPreset.EXCLUDE_SYSTEM_SCHEMAS:
                base = {"exclude_schema_patterns": SYSTEM_SCHEMA_PATTERNS}
            case FilterPreset.PRODUCTION_SAFE:
                base = {
                    "exclude_table_patterns": TEMP_TABLE_PATTERNS,
                    "exclude_schema_patterns": SYSTEM_SCHEMA_PATTERNS,
                    "include_extensions": False,
                }
            case _:
                assert_never(preset)
        return cls(**{**base, **overrides})

    @classmethod
    def from_pattern_string(cls, patterns: str, exclude: bool = True) -> "ComparisonFilter":
        """Build a filter from a comma-separated pattern list.

        Args:
            patterns: e.g. ``"temp_*, audit_log"``.
            exclude: Treat the patterns as exclusions (default) or inclusions.
        """
        parsed = cls.parse_patterns(patterns)
        if exclude:
            return cls(exclude_table_patterns=parsed)
        return cls(include_table_patterns=parsed)

    @staticmethod
    def parse_patterns(patterns: str | None) -> tuple[str, ...]:
        """Split a comma-separated list, dropping blanks."""
        if not patterns:
            return ()
        return tuple(p.strip() for p in patterns.split(",") if p.strip())

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def matches(self, name: str) -> bool:
        """True if an object called ``name`` takes part in the comparison."""
        if self.include_table_patterns and not self._any_match(name, self.include_table_patterns):
            return False
        return not self._any_match(name, self.exclude_table_patterns)

    def matches_schema(self, schema_name: str) -> bool:
        """True unless ``schema_name`` hits an exclude-schema pattern."""
        return not self._any_match(schema_name, self.exclude_schema_patterns)

    def includes(self, object_type: ObjectType) -> bool:
        """True if objects of ``object_type`` are compared."""
        match object_type:
            case ObjectType.TABLE:
                return self.include_tables
            case ObjectType.COLUMN:
                return self.include_columns
            case ObjectType.CONSTRAINT_PRIMARY:
                return self.include_primary_keys
            case ObjectType.CONSTRAINT_FOREIGN:
                return self.include_foreign_keys
            case ObjectType.CONSTRAINT_UNIQUE:
                return self.include_unique_constraints
            case ObjectType.CONSTRAINT_CHECK:
                return self.include_check_constraints
            case ObjectType.INDEX:
                return self.include_indexes
            case ObjectType.TRIGGER:
                return self.include_triggers
            case ObjectType.VIEW | ObjectType.MATERIALIZED_VIEW:
                return self.include_views
            case ObjectType.FUNCTION | ObjectType.PROCEDURE:
                return self.include_functions
            case ObjectType.SEQUENCE:
                return self.include_sequences
            case ObjectType.TYPE_ENUM | ObjectType.TYPE_COMPOSITE | ObjectType.TYPE_DOMAIN:
                return self.include_types
            case ObjectType.EXTENSION:
                return self.include_extensions
            case _:
                assert_never(object_type)

    def _any_match(self, name: str, patterns: tuple[str, ...]) -> bool:
        return any(self._match_one(name, pattern) for pattern in patterns)

    def _match_one(self, name: str, pattern: str) -> bool:
        if self.use_regex:
            return re.fullmatch(pattern, name, re.IGNORECASE) is not None
        return fnmatch.fnmatchcase(name.lower(), pattern.lower())

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @property
    def has_filters(self) -> bool:
        """True if this filter excludes anything at all."""
        return self != ComparisonFilter()

    def describe(self) -> str:
        """One-line human-readable description."""
        if not self.has_filters:
            return "No filters"

        parts: list[str] = []
        excluded_kinds = [
            name.removeprefix("include_").replace("_", " ")
            for name, value in self.model_dump().items()
            if name.startswith("include_") and isinstance(value, bool) and not value
        ]
        if excluded_kinds:
            parts.append(f"excluding {', '.join(excluded_kinds)}")
        if self.include_table_patterns:
            parts.append(f"only {', '.join(self.include_table_patterns)}")
        if self.exclude_table_patterns:
            parts.append(f"skip {', '.join(self.exclude_table_patterns)}")
        if self.exclude_schema_patterns:
            parts.append(f"skip schemas {', '.join(self.exclude_schema_patterns)}")
        if self.use_regex:
            parts.append("regex patterns")
        return "; ".join(parts)

    def to_config(self) -> dict[str, Any]:
        """JSON-ready representation for history records."""
        return self.model_dump(mode="json")
