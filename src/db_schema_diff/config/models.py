"""Pydantic models for db-schema-diff.toml configuration."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from db_schema_diff.schema.filter import ComparisonFilter


# ============================================================================
# Instances and History
# ============================================================================


class InstanceProfile(BaseModel):
    """A named PostgreSQL instance from ``[instances.<name>]``."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    connect_timeout: int = 10


class HistorySettings(BaseModel):
    """Where comparison history lives and how long it is kept.

    ``instance`` names an entry under ``[instances]``; ``url`` is used
    instead when no instance is given.
    """

    instance: str | None = None
    url: str | None = None
    table: str = "comparison_history"
    retention_days: int = 90
    cleanup_interval_hours: float = 24

    @property
    def enabled(self) -> bool:
        return bool(self.instance or self.url)

    @property
    def cleanup_interval_seconds(self) -> float:
        return self.cleanup_interval_hours * 3600


# ============================================================================
# Comparison Profiles
# ============================================================================


class ComparisonProfile(BaseModel):
    """A saved comparison: instance pair, schemas, and filter.

    ``filter`` accepts a ``ComparisonFilter`` or a mapping; a mapping with a
    ``preset`` key starts from that preset and applies the remaining keys
    as overrides.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    source_instance: str
    destination_instance: str
    source_schema: str = "public"
    destination_schema: str | None = None
    filter: ComparisonFilter | None = None
    is_default: bool = Field(default=False, validation_alias=AliasChoices("is_default", "default"))
    created_by: str | None = None
    created_at: datetime | None = None
    last_run_at: datetime | None = None
    last_run_summary: dict[str, int] | None = None

    @field_validator("filter", mode="before")
    @classmethod
    def _filter_from_preset(cls, value: Any) -> Any:
        if isinstance(value, dict) and "preset" in value:
            overrides = {k: v for k, v in value.items() if k != "preset"}
            return ComparisonFilter.from_preset(value["preset"], **overrides)
        return value

    @property
    def comparison_description(self) -> str:
        destination_schema = self.destination_schema or self.source_schema
        return (
            f"{self.source_instance}.{self.source_schema} -> "
            f"{self.destination_instance}.{destination_schema}"
        )

    def has_been_run(self) -> bool:
        return self.last_run_at is not None

    def last_run_summary_text(self) -> str:
        if not self.last_run_summary:
            return "Never run"
        s = self.last_run_summary
        return f"{s.get('missing', 0)} missing, {s.get('extra', 0)} extra, {s.get('modified', 0)} modified"


# ============================================================================
# Top-level Config
# ============================================================================


class DiffConfig(BaseModel):
    """Complete configuration from db-schema-diff.toml."""

    instances: dict[str, InstanceProfile] = Field(default_factory=dict)
    history: HistorySettings = Field(default_factory=HistorySettings)
    comparisons: dict[str, ComparisonProfile] = Field(default_factory=dict)
