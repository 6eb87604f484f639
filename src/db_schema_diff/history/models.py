"""Pydantic models for comparison history and drift."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from db_schema_diff.schema.differences import SchemaComparisonResult


# ============================================================================
# History Record
# ============================================================================


class HistoryRecord(BaseModel):
    """One persisted comparison run.

    ``id`` is assigned by the store on save. Only counts and a compact
    summary are kept; full snapshots and differences are never persisted.
    """

    id: int | None = None
    compared_at: datetime
    source_instance: str
    destination_instance: str
    source_schema: str
    destination_schema: str
    performed_by: str | None = None
    missing_count: int = 0
    extra_count: int = 0
    modified_count: int = 0
    matching_count: int = 0
    profile_name: str | None = None
    result_snapshot: dict[str, Any] = Field(default_factory=dict)
    filter_config: dict[str, Any] | None = None

    @classmethod
    def from_result(
        cls,
        result: SchemaComparisonResult,
        performed_by: str | None = None,
        profile_name: str | None = None,
    ) -> "HistoryRecord":
        return cls(
            compared_at=result.compared_at,
            source_instance=result.source_instance,
            destination_instance=result.destination_instance,
            source_schema=result.source_schema,
            destination_schema=result.destination_schema,
            performed_by=performed_by,
            missing_count=result.missing_count,
            extra_count=result.extra_count,
            modified_count=result.modified_count,
            matching_count=result.matching_count,
            profile_name=profile_name,
            result_snapshot=result.summary_snapshot(),
            filter_config=result.filter.to_config() if result.filter is not None else None,
        )

    @property
    def total_differences(self) -> int:
        return self.missing_count + self.extra_count + self.modified_count


# ============================================================================
# Drift
# ============================================================================


class DriftSummary(BaseModel):
    """Change in difference counts since the previous recorded run.

    Deltas are ``current - previous``; a positive ``missing_delta`` means
    more objects are missing than last time.
    """

    missing_delta: int = 0
    extra_delta: int = 0
    modified_delta: int = 0
    previous_compared_at: datetime

    def has_drift(self) -> bool:
        return bool(self.missing_delta or self.extra_delta or self.modified_delta)

    def total_drift(self) -> int:
        """Sum of absolute deltas."""
        return abs(self.missing_delta) + abs(self.extra_delta) + abs(self.modified_delta)

    def describe(self) -> str:
        """Short description, e.g. ``"+1 missing, -2 extra"``."""
        if not self.has_drift():
            return "No drift"
        parts = [
            f"{delta:+d} {label}"
            for delta, label in (
                (self.missing_delta, "missing"),
                (self.extra_delta, "extra"),
                (self.modified_delta, "modified"),
            )
            if delta
        ]
        return ", ".join(parts)
