"""Verify the public import surface of each package."""

import importlib

import pytest

import db_schema_diff


class TestTopLevelExports:
    """Every name in ``__all__`` must resolve."""

    @pytest.mark.parametrize(
        "module_name",
        [
            "db_schema_diff",
            "db_schema_diff.adapters",
            "db_schema_diff.config",
            "db_schema_diff.history",
            "db_schema_diff.schema",
        ],
    )
    def test_all_names_resolve(self, module_name: str) -> None:
        module = importlib.import_module(module_name)
        for name in module.__all__:
            assert hasattr(module, name), f"{module_name}.{name} listed in __all__ but missing"

    def test_version(self) -> None:
        assert db_schema_diff.__version__ == "0.1.0"

    def test_core_entry_points(self) -> None:
        from db_schema_diff import (
            ComparisonFilter,
            SchemaDiffEngine,
            compare_snapshots,
            generate_migration_script,
        )

        assert callable(compare_snapshots)
        assert callable(generate_migration_script)
        assert SchemaDiffEngine is db_schema_diff.schema.SchemaDiffEngine
        assert ComparisonFilter is db_schema_diff.schema.ComparisonFilter
