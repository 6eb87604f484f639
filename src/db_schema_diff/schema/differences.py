"""Comparison output models: object keys, differences, and the run result."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from db_schema_diff.schema.filter import ComparisonFilter
from db_schema_diff.schema.kinds import DifferenceType, ObjectType, Severity


# ============================================================================
# Identity
# ============================================================================


class ObjectKey(BaseModel):
    """Structured identity of a compared object.

    ``table`` is set for table-scoped kinds (columns, constraints, indexes,
    triggers) and ``None`` otherwise. Functions use their full signature as
    ``name``.
    """

    model_config = ConfigDict(frozen=True)

    object_type: ObjectType
    name: str
    table: str | None = None

    @property
    def display_name(self) -> str:
        # Index names are schema-unique, so they are shown bare
        if self.table and self.object_type != ObjectType.INDEX:
            return f"{self.table}.{self.name}"
        return self.name


# ============================================================================
# Differences
# ============================================================================


class AttributeDifference(BaseModel):
    """One differing property of a MODIFIED object."""

    model_config = ConfigDict(frozen=True)

    attribute_name: str
    source_value: str | None = None
    destination_value: str | None = None
    removed: bool = False

    @classmethod
    def of(cls, attribute_name: str, source_value: Any, destination_value: Any) -> "AttributeDifference":
        """Build from raw values; ``removed`` is set when only the destination has a value."""
        src = _render(source_value)
        dst = _render(destination_value)
        return cls(
            attribute_name=attribute_name,
            source_value=src,
            destination_value=dst,
            removed=src is None and dst is not None,
        )


def _render(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(v) for v in value) + "]"
    return str(value)


class ObjectDifference(BaseModel):
    """One structural discrepancy between source and destination.

    Example:
        ObjectDifference(
            key=ObjectKey(object_type=ObjectType.COLUMN, table="orders", name="total"),
            difference_type=DifferenceType.MISSING,
            severity=Severity.INFO,
            source_definition="numeric NOT NULL DEFAULT 0",
        ).object_name
        # 'orders.total'
    """

    model_config = ConfigDict(frozen=True)

    key: ObjectKey
    difference_type: DifferenceType
    severity: Severity = Severity.INFO
    attribute_differences: tuple[AttributeDifference, ...] = ()
    source_definition: str | None = None
    destination_definition: str | None = None

    @model_validator(mode="after")
    def _modified_needs_attributes(self) -> "ObjectDifference":
        if self.difference_type == DifferenceType.MODIFIED and not self.attribute_differences:
            raise ValueError(
                f"MODIFIED difference for {self.key.display_name} has no attribute differences"
            )
        return self

    @property
    def object_type(self) -> ObjectType:
        return self.key.object_type

    @property
    def object_name(self) -> str:
        return self.key.display_name

    def get_attribute(self, attribute_name: str) -> AttributeDifference | None:
        for attr in self.attribute_differences:
            if attr.attribute_name == attribute_name:
                return attr
        return None


# ============================================================================
# Comparison Result
# ============================================================================


class ComparisonSummary(BaseModel):
    """Objects compared per category and how many matched exactly."""

    tables_compared: int = 0
    views_compared: int = 0
    functions_compared: int = 0
    sequences_compared: int = 0
    types_compared: int = 0
    extensions_compared: int = 0
    matching_count: int = 0

    def add(self, category: str, compared: int, matching: int) -> None:
        field_name = f"{category}_compared"
        setattr(self, field_name, getattr(self, field_name) + compared)
        self.matching_count += matching


class SchemaComparisonResult(BaseModel):
    """Result of comparing one schema on two instances.

    ``success`` is False when orchestration stopped early (for example, an
    instance was unreachable); ``differences`` still holds whatever was
    collected before that point.
    """

    source_instance: str
    destination_instance: str
    source_schema: str
    destination_schema: str
    compared_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    success: bool = True
    error_message: str | None = None
    differences: list[ObjectDifference] = Field(default_factory=list)
    filter: ComparisonFilter | None = None
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    def _count(self, difference_type: DifferenceType) -> int:
        return sum(1 for d in self.differences if d.difference_type == difference_type)

    @property
    def missing_count(self) -> int:
        return self._count(DifferenceType.MISSING)

    @property
    def extra_count(self) -> int:
        return self._count(DifferenceType.EXTRA)

    @property
    def modified_count(self) -> int:
        return self._count(DifferenceType.MODIFIED)

    @property
    def matching_count(self) -> int:
        return self.summary.matching_count

    @property
    def is_identical(self) -> bool:
        """True for a successful run with no differences."""
        return self.success and not self.differences

    @property
    def has_breaking_changes(self) -> bool:
        return any(d.severity == Severity.BREAKING for d in self.differences)

    def severity_counts(self) -> dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for diff in self.differences:
            counts[diff.severity] += 1
        return counts

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def differences_by_type(self, object_type: ObjectType) -> list[ObjectDifference]:
        return [d for d in self.differences if d.object_type == object_type]

    def differences_by_severity(self, severity: Severity) -> list[ObjectDifference]:
        return [d for d in self.differences if d.severity == severity]

    def differences_by_difference_type(self, difference_type: DifferenceType) -> list[ObjectDifference]:
        return [d for d in self.differences if d.difference_type == difference_type]

    # ------------------------------------------------------------------
    # Serialization and reporting
    # ------------------------------------------------------------------

    def summary_snapshot(self) -> dict[str, Any]:
        """Compact JSON-ready summary stored with each history record."""
        return {
            "source": f"{self.source_instance}.{self.source_schema}",
            "destination": f"{self.destination_instance}.{self.destination_schema}",
            "compared_at": self.compared_at.isoformat(),
            "success": self.success,
            "error_message": self.error_message,
            "missing": self.missing_count,
            "extra": self.extra_count,
            "modified": self.modified_count,
            "matching": self.matching_count,
            "severity": {s.value: n for s, n in self.severity_counts().items()},
            "compared": self.summary.model_dump(exclude={"matching_count"}),
            "differences": [
                {
                    "type": d.object_type.value,
                    "name": d.object_name,
                    "difference": d.difference_type.value,
                    "severity": d.severity.value,
                }
                for d in self.differences
            ],
        }

    def format_report(self) -> str:
        """Format the comparison as a human-readable report."""
        header = (
            f"{self.source_instance}.{self.source_schema} -> "
            f"{self.destination_instance}.{self.destination_schema}"
        )
        if not self.success:
            lines = [f"Comparison incomplete: {header}", f"  Error: {self.error_message}"]
        elif self.is_identical:
            return f"Schemas identical: {header}"
        else:
            lines = [f"Schema differences: {header}"]

        for difference_type in DifferenceType:
            diffs = self.differences_by_difference_type(difference_type)
            if not diffs:
                continue
            lines.append(f"\n  {difference_type.value.capitalize()} ({len(diffs)}):")
            for diff in diffs:
                lines.append(
                    f"    - [{diff.severity.value}] {diff.object_type.display_name}: {diff.object_name}"
                )
                for attr in diff.attribute_differences:
                    lines.append(
                        f"        {attr.attribute_name}: {attr.destination_value!r} -> {attr.source_value!r}"
                    )

        return "\n".join(lines)
