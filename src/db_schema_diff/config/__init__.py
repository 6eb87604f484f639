"""Configuration management: TOML loading, config models, comparison profiles.

Usage:
    >>> from db_schema_diff.config import load_config, DiffConfig, ComparisonProfile
"""

from db_schema_diff.config.loader import load_config
from db_schema_diff.config.models import (
    ComparisonProfile,
    DiffConfig,
    HistorySettings,
    InstanceProfile,
)
from db_schema_diff.config.profiles import (
    export_profiles,
    get_default_profile,
    get_profile,
    import_profiles,
    profile_from_result,
    set_default_profile,
    with_last_run,
)

__all__ = [
    "load_config",
    "DiffConfig",
    "InstanceProfile",
    "HistorySettings",
    "ComparisonProfile",
    "get_profile",
    "get_default_profile",
    "set_default_profile",
    "export_profiles",
    "import_profiles",
    "profile_from_result",
    "with_last_run",
]
