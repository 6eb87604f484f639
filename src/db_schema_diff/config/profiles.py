"""Saved comparison profiles: lookup, defaults, JSON export/import.

Profiles are immutable pydantic models; every function that "changes" a
profile or config returns an updated copy.

Usage:
    from db_schema_diff.config.profiles import get_default_profile, export_profiles, import_profiles

    profile = get_default_profile(config)
    result = await engine.compare_profile(profile)
    profile = with_last_run(profile, result)

    text = export_profiles(config.comparisons.values())
    imported = import_profiles(text)    # names gain " (imported)"
"""

import json
from collections.abc import Iterable
from datetime import datetime, timezone

from db_schema_diff.config.models import ComparisonProfile, DiffConfig
from db_schema_diff.schema.differences import SchemaComparisonResult

IMPORTED_SUFFIX = " (imported)"


def get_profile(config: DiffConfig, name: str) -> ComparisonProfile:
    """Return the named comparison profile.

    Raises:
        KeyError: If no profile called ``name`` exists.
    """
    if name not in config.comparisons:
        raise KeyError(
            f"Comparison profile '{name}' not found.\n"
            f"Available profiles: {', '.join(config.comparisons) or 'none'}"
        )
    return config.comparisons[name]


def get_default_profile(config: DiffConfig) -> ComparisonProfile | None:
    """Return the profile marked ``default``, or None."""
    return next((p for p in config.comparisons.values() if p.is_default), None)


def set_default_profile(config: DiffConfig, name: str) -> DiffConfig:
    """Return a copy of ``config`` where exactly ``name`` is the default.

    Raises:
        KeyError: If no profile called ``name`` exists.
    """
    get_profile(config, name)
    comparisons = {
        key: profile.model_copy(update={"is_default": key == name})
        for key, profile in config.comparisons.items()
    }
    return config.model_copy(update={"comparisons": comparisons})


def export_profiles(profiles: Iterable[ComparisonProfile]) -> str:
    """Serialize profiles to a JSON array."""
    return json.dumps([p.model_dump(mode="json") for p in profiles], indent=2)


def import_profiles(text: str) -> list[ComparisonProfile]:
    """Parse profiles exported by ``export_profiles``.

    Accepts a JSON array or a single JSON object. Imported profiles get
    ``" (imported)"`` appended to their name, are never the default, and
    carry no run history.

    Raises:
        ValueError: If ``text`` is not valid JSON or a profile is invalid.
    """
    data = json.loads(text)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError("Expected a JSON object or array of comparison profiles")

    imported = []
    for item in data:
        profile = ComparisonProfile.model_validate(item)
        imported.append(
            profile.model_copy(
                update={
                    "name": profile.name + IMPORTED_SUFFIX,
                    "is_default": False,
                    "last_run_at": None,
                    "last_run_summary": None,
                }
            )
        )
    return imported


def _run_summary(result: SchemaComparisonResult) -> dict[str, int]:
    return {
        "missing": result.missing_count,
        "extra": result.extra_count,
        "modified": result.modified_count,
        "matching": result.matching_count,
    }


def profile_from_result(
    name: str,
    result: SchemaComparisonResult,
    created_by: str | None = None,
) -> ComparisonProfile:
    """Capture a finished comparison as a reusable profile."""
    return ComparisonProfile(
        name=name,
        source_instance=result.source_instance,
        destination_instance=result.destination_instance,
        source_schema=result.source_schema,
        destination_schema=result.destination_schema,
        filter=result.filter,
        created_by=created_by,
        created_at=datetime.now(timezone.utc),
        last_run_at=result.compared_at,
        last_run_summary=_run_summary(result),
    )


def with_last_run(profile: ComparisonProfile, result: SchemaComparisonResult) -> ComparisonProfile:
    """Return ``profile`` updated with the time and counts of ``result``."""
    return profile.model_copy(
        update={"last_run_at": result.compared_at, "last_run_summary": _run_summary(result)}
    )
