"""TOML configuration loader for db-schema-diff."""

import tomllib
from pathlib import Path

from db_schema_diff.config.models import (
    ComparisonProfile,
    DiffConfig,
    HistorySettings,
    InstanceProfile,
)


def load_config(config_path: Path | None = None) -> DiffConfig:
    """Load instance, history, and comparison settings from a TOML file.

    Args:
        config_path: Path to the config file (default:
            ``Path.cwd() / "db-schema-diff.toml"``).

    Returns:
        DiffConfig with instances, history settings, and comparison profiles.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the TOML is malformed or a section is invalid.
    """
    if config_path is None:
        config_path = Path.cwd() / "db-schema-diff.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Schema diff config not found: {config_path}\n"
            f"Create db-schema-diff.toml with at least one [instances.<name>] section."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    # Parse instances
    instances = {}
    for name, instance_data in data.get("instances", {}).items():
        instances[name] = InstanceProfile(**instance_data)

    # Parse comparison profiles; the table key is the profile name
    comparisons = {}
    for name, profile_data in data.get("comparisons", {}).items():
        comparisons[name] = ComparisonProfile(**{**profile_data, "name": name})

    history = HistorySettings(**data.get("history", {}))
    if history.instance and history.instance not in instances:
        raise ValueError(
            f"[history] instance '{history.instance}' is not defined under [instances]. "
            f"Available: {', '.join(instances) or 'none'}"
        )

    return DiffConfig(instances=instances, history=history, comparisons=comparisons)
