"""Tests for migration script generation.

Tests cover:
1. CREATE / DROP / ALTER statement text for each difference type
2. Statement ordering by TYPE_PRECEDENCE
3. include_drops handling and BREAKING tagging
4. Enum ADD VALUE anchoring
5. to_sql() wrapping options
6. Structural check that precedence lookups have no silent fallback
7. Missing tables: deferred foreign keys and destination schema targeting
"""

import ast
import inspect

import pytest

from db_schema_diff.schema import migration
from db_schema_diff.schema.comparator import compare_snapshots
from db_schema_diff.schema.differences import (
    AttributeDifference,
    ObjectDifference,
    ObjectKey,
    SchemaComparisonResult,
)
from db_schema_diff.schema.kinds import DifferenceType, ObjectType, Severity
from db_schema_diff.schema.migration import (
    DROP_WARNING,
    MANUAL_WARNING,
    REMOVAL_WARNING,
    TYPE_PRECEDENCE,
    MigrationScript,
    MigrationStatement,
    StatementKind,
    WrapOption,
    generate_migration_script,
)
from db_schema_diff.schema.models import (
    ColumnSchema,
    ExtensionSchema,
    ForeignKeySchema,
    IndexSchema,
    SchemaSnapshot,
    SequenceSchema,
    TableSchema,
    TypeKind,
    TypeSchema,
    ViewSchema,
)

ID = ColumnSchema(name="id", data_type="bigint", nullable=False)


def _result(*differences: ObjectDifference, schema: str = "public") -> SchemaComparisonResult:
    return SchemaComparisonResult(
        source_instance="prod",
        destination_instance="staging",
        source_schema="public",
        destination_schema=schema,
        differences=list(differences),
    )


def _snapshots(source: dict, destination: dict) -> SchemaComparisonResult:
    return compare_snapshots(
        SchemaSnapshot(instance="prod", **source),
        SchemaSnapshot(instance="staging", **destination),
    )


def _modified(object_type: ObjectType, name: str, *attrs: AttributeDifference, **kwargs) -> ObjectDifference:
    return ObjectDifference(
        key=ObjectKey(object_type=object_type, name=name, table=kwargs.pop("table", None)),
        difference_type=DifferenceType.MODIFIED,
        attribute_differences=attrs,
        **kwargs,
    )


# ============================================================================
# Test: Worked Scenarios
# ============================================================================


class TestScenarios:
    """End-to-end: snapshots -> comparison -> script."""

    def test_missing_column_adds_column(self) -> None:
        result = _snapshots(
            {"tables": (TableSchema(name="orders", columns=(ID, ColumnSchema(
                name="total", data_type="numeric", nullable=False, default="0"
            ))),)},
            {"tables": (TableSchema(name="orders", columns=(ID,)),)},
        )
        script = generate_migration_script(result, include_drops=False)

        assert script.statement_count == 1
        statement = script.statements[0]
        assert statement.ddl == "ALTER TABLE public.orders ADD COLUMN total numeric NOT NULL DEFAULT 0"
        assert statement.kind == StatementKind.CREATE
        assert statement.severity == Severity.INFO
        assert statement.to_sql() == "ALTER TABLE public.orders ADD COLUMN total numeric NOT NULL DEFAULT 0;"

    def test_extra_index_drop(self) -> None:
        idx = IndexSchema(
            name="idx_orders_total",
            columns=("total",),
            definition="CREATE INDEX idx_orders_total ON public.orders USING btree (total)",
        )
        result = _snapshots(
            {"tables": (TableSchema(name="orders", columns=(ID,)),)},
            {"tables": (TableSchema(name="orders", columns=(ID,), indexes=(idx,)),)},
        )

        with_drops = generate_migration_script(result, include_drops=True)
        assert with_drops.statement_count == 1
        drop = with_drops.statements[0]
        assert drop.ddl == "DROP INDEX IF EXISTS public.idx_orders_total"
        assert drop.severity == Severity.BREAKING
        assert drop.warning == DROP_WARNING
        assert with_drops.has_breaking_changes

        without_drops = generate_migration_script(result, include_drops=False)
        assert without_drops.statements == []
        assert result.extra_count == 1

    def test_enum_add_value_after_predecessor(self) -> None:
        result = _snapshots(
            {"types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("A", "B", "C")),)},
            {"types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("A", "C")),)},
        )
        script = generate_migration_script(result)

        assert [s.ddl for s in script.statements] == ["ALTER TYPE public.status ADD VALUE 'B' AFTER 'A'"]
        assert script.statements[0].kind == StatementKind.ALTER

    def test_enum_new_first_label_goes_before(self) -> None:
        result = _snapshots(
            {"types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("Z", "A")),)},
            {"types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("A",)),)},
        )
        script = generate_migration_script(result)
        assert script.statements[0].ddl == "ALTER TYPE public.status ADD VALUE 'Z' BEFORE 'A'"

    def test_enum_removed_label_is_placeholder(self) -> None:
        result = _snapshots(
            {"types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("A",)),)},
            {"types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("A", "B")),)},
        )
        statement = generate_migration_script(result).statements[0]
        assert statement.is_placeholder
        assert statement.warning == MANUAL_WARNING

    def test_identical_schemas_produce_empty_script(self) -> None:
        snap = {"tables": (TableSchema(name="orders", columns=(ID,)),)}
        script = generate_migration_script(_snapshots(snap, snap))
        assert script.statements == []
        assert "-- No changes required" in script.to_sql()


# ============================================================================
# Test: Ordering
# ============================================================================


class TestOrdering:
    """Verify DROP -> CREATE -> ALTER grouping and precedence sorting."""

    def test_precedence_covers_every_type(self) -> None:
        assert set(TYPE_PRECEDENCE) == set(ObjectType)

    def test_creates_follow_dependency_order(self) -> None:
        result = _snapshots(
            {
                "tables": (TableSchema(name="orders", columns=(ID,)),),
                "views": (ViewSchema(name="v", definition=" SELECT 1"),),
                "sequences": (SequenceSchema(name="order_seq"),),
                "types": (TypeSchema(name="status", kind=TypeKind.ENUM, labels=("a",)),),
                "extensions": (ExtensionSchema(name="citext"),),
            },
            {},
        )
        script = generate_migration_script(result)
        assert [s.object_type for s in script.statements] == [
            ObjectType.EXTENSION,
            ObjectType.TYPE_ENUM,
            ObjectType.SEQUENCE,
            ObjectType.TABLE,
            ObjectType.VIEW,
        ]
        assert [s.order for s in script.statements] == [0, 1, 2, 3, 4]

    def test_drops_reverse_order_and_come_first(self) -> None:
        result = _snapshots(
            {"tables": (TableSchema(name="orders", columns=(ID,)),)},
            {
                "views": (ViewSchema(name="old_view", definition="SELECT 1"),),
                "types": (TypeSchema(name="old_status", kind=TypeKind.ENUM, labels=("a",)),),
            },
        )
        script = generate_migration_script(result, include_drops=True)
        assert [(s.kind, s.object_type) for s in script.statements] == [
            (StatementKind.DROP, ObjectType.VIEW),
            (StatementKind.DROP, ObjectType.TYPE_ENUM),
            (StatementKind.CREATE, ObjectType.TABLE),
        ]
        assert len(script.drop_statements()) == 2
        assert len(script.create_statements()) == 1

    def test_alters_come_last(self) -> None:
        alter = _modified(
            ObjectType.SEQUENCE, "order_seq", AttributeDifference.of("increment", 2, 1)
        )
        create = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.TRIGGER, table="orders", name="trg"),
            difference_type=DifferenceType.MISSING,
            source_definition="CREATE TRIGGER trg BEFORE INSERT ON public.orders",
        )
        script = generate_migration_script(_result(alter, create))
        assert [s.kind for s in script.statements] == [StatementKind.CREATE, StatementKind.ALTER]
        assert script.alter_statements()[0].ddl == "ALTER SEQUENCE public.order_seq INCREMENT BY 2"

    def test_precedence_lookup_has_no_fallback(self) -> None:
        """TYPE_PRECEDENCE must be indexed directly, never with .get() and a default."""
        tree = ast.parse(inspect.getsource(migration))
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "get"
                and isinstance(node.func.value, ast.Name)
                and node.func.value.id == "TYPE_PRECEDENCE"
            ):
                pytest.fail("TYPE_PRECEDENCE.get() found; unknown kinds must not fall back silently")


# ============================================================================
# Test: Statement Text
# ============================================================================


class TestStatementText:
    """Verify DDL for individual difference kinds."""

    def test_column_alters(self) -> None:
        diff = _modified(
            ObjectType.COLUMN,
            "email",
            AttributeDifference.of("data_type", "text", "varchar(100)"),
            AttributeDifference.of("nullable", False, True),
            AttributeDifference.of("default", None, "''::text"),
            table="users",
            severity=Severity.WARNING,
        )
        statements = generate_migration_script(_result(diff)).statements
        assert [s.ddl for s in statements] == [
            "ALTER TABLE public.users ALTER COLUMN email TYPE text",
            "ALTER TABLE public.users ALTER COLUMN email SET NOT NULL",
            "ALTER TABLE public.users ALTER COLUMN email DROP DEFAULT",
        ]
        assert statements[0].severity == Severity.WARNING
        assert statements[2].severity == Severity.BREAKING
        assert statements[2].warning == REMOVAL_WARNING

    def test_targets_destination_schema(self) -> None:
        diff = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.COLUMN, table="orders", name="total"),
            difference_type=DifferenceType.MISSING,
            source_definition="numeric",
        )
        script = generate_migration_script(_result(diff, schema="staging"))
        assert script.statements[0].ddl == "ALTER TABLE staging.orders ADD COLUMN total numeric"

    def test_missing_index_if_not_exists(self) -> None:
        diff = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.INDEX, table="orders", name="idx_u"),
            difference_type=DifferenceType.MISSING,
            source_definition="CREATE UNIQUE INDEX idx_u ON public.orders USING btree (code)",
        )
        statement = generate_migration_script(_result(diff)).statements[0]
        assert statement.ddl == "CREATE UNIQUE INDEX IF NOT EXISTS idx_u ON public.orders USING btree (code)"

    def test_missing_without_definition_is_placeholder(self) -> None:
        diff = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.FUNCTION, name="f(integer)"),
            difference_type=DifferenceType.MISSING,
        )
        statement = generate_migration_script(_result(diff)).statements[0]
        assert statement.ddl.startswith("-- MANUAL:")
        assert statement.to_sql() == statement.ddl

    def test_drop_function_uses_signature(self) -> None:
        diff = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.FUNCTION, name="f(integer)"),
            difference_type=DifferenceType.EXTRA,
            severity=Severity.BREAKING,
        )
        statement = generate_migration_script(_result(diff), include_drops=True).statements[0]
        assert statement.ddl == "DROP FUNCTION IF EXISTS public.f(integer) CASCADE"

    def test_drop_domain(self) -> None:
        diff = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.TYPE_DOMAIN, name="email"),
            difference_type=DifferenceType.EXTRA,
            severity=Severity.BREAKING,
            destination_definition="CREATE DOMAIN public.email AS text;",
        )
        statement = generate_migration_script(_result(diff), include_drops=True).statements[0]
        assert statement.ddl == "DROP DOMAIN IF EXISTS public.email CASCADE"

    def test_view_recreate(self) -> None:
        diff = _modified(
            ObjectType.VIEW,
            "active_users",
            AttributeDifference.of("definition", " SELECT 2", " SELECT 1"),
            severity=Severity.WARNING,
            source_definition=" SELECT 2",
            destination_definition=" SELECT 1",
        )
        statement = generate_migration_script(_result(diff)).statements[0]
        assert statement.ddl == "CREATE OR REPLACE VIEW public.active_users AS\n SELECT 2"
        assert statement.severity == Severity.WARNING

    def test_constraint_recreate(self) -> None:
        diff = _modified(
            ObjectType.CONSTRAINT_UNIQUE,
            "uq_code",
            AttributeDifference.of("columns", ("code", "region"), ("code",)),
            table="orders",
            source_definition="UNIQUE (code, region)",
        )
        statement = generate_migration_script(_result(diff)).statements[0]
        assert statement.ddl == (
            "ALTER TABLE public.orders DROP CONSTRAINT IF EXISTS uq_code;\n"
            "ALTER TABLE public.orders ADD CONSTRAINT uq_code UNIQUE (code, region)"
        )

    def test_extension_update(self) -> None:
        diff = _modified(ObjectType.EXTENSION, "pgcrypto", AttributeDifference.of("version", "1.3", "1.2"))
        statement = generate_migration_script(_result(diff)).statements[0]
        assert statement.ddl == "ALTER EXTENSION pgcrypto UPDATE TO '1.3'"


# ============================================================================
# Test: Missing Tables
# ============================================================================


def _table(name: str, *foreign_keys: ForeignKeySchema, **kwargs) -> TableSchema:
    columns = (ID, ColumnSchema(name="user_id", data_type="bigint"))
    return TableSchema(name=name, columns=columns, foreign_keys=foreign_keys, **kwargs)


def _fk(name: str, referenced_table: str, referenced_schema: str = "public") -> ForeignKeySchema:
    return ForeignKeySchema(
        name=name,
        columns=("user_id",),
        referenced_schema=referenced_schema,
        referenced_table=referenced_table,
        referenced_columns=("id",),
    )


class TestMissingTables:
    """Verify CREATE TABLE statements for tables absent from the destination."""

    def test_foreign_key_runs_after_referenced_table(self) -> None:
        result = _snapshots(
            {"tables": (_table("accounts", _fk("accounts_user_fk", "users")), _table("users"))},
            {},
        )
        script = generate_migration_script(result)
        names = [s.object_name for s in script.statements]

        assert names == ["accounts", "users", "accounts.accounts_user_fk"]
        assert "FOREIGN KEY" not in script.statements[0].ddl
        fk = script.statements[2]
        assert fk.object_type == ObjectType.CONSTRAINT_FOREIGN
        assert fk.kind == StatementKind.CREATE
        assert fk.ddl == (
            "ALTER TABLE public.accounts ADD CONSTRAINT accounts_user_fk "
            "FOREIGN KEY (user_id) REFERENCES public.users (id);"
        )

    def test_mutually_referencing_tables(self) -> None:
        result = _snapshots(
            {"tables": (_table("a", _fk("a_b_fk", "b")), _table("b", _fk("b_a_fk", "a")))},
            {},
        )
        kinds = [s.object_type for s in generate_migration_script(result).statements]
        assert kinds == [
            ObjectType.TABLE,
            ObjectType.TABLE,
            ObjectType.CONSTRAINT_FOREIGN,
            ObjectType.CONSTRAINT_FOREIGN,
        ]

    def test_table_statement_keeps_indexes(self) -> None:
        idx = IndexSchema(
            name="idx_users_id",
            definition="CREATE INDEX idx_users_id ON public.users USING btree (id)",
        )
        script = generate_migration_script(_snapshots({"tables": (_table("users", indexes=(idx,)),)}, {}))

        assert script.statement_count == 1
        ddl = script.statements[0].ddl
        assert ddl.startswith("CREATE TABLE public.users (")
        assert ddl.endswith("CREATE INDEX idx_users_id ON public.users USING btree (id);")
        assert "\n\n\n" not in ddl

    def test_cross_schema_script_targets_destination(self) -> None:
        serial = ColumnSchema(
            name="id", data_type="bigint", nullable=False, default="nextval('app.orders_id_seq'::regclass)"
        )
        orders = TableSchema(
            name="orders",
            columns=(serial, ColumnSchema(name="user_id", data_type="bigint")),
            foreign_keys=(_fk("orders_user_fk", "users", referenced_schema="app"),),
            indexes=(
                IndexSchema(
                    name="idx_orders_id",
                    definition="CREATE INDEX idx_orders_id ON app.orders USING btree (id)",
                ),
            ),
        )
        result = _snapshots(
            {
                "schema_name": "app",
                "tables": (orders, _table("users")),
                "views": (ViewSchema(name="v_orders", definition="SELECT id FROM app.orders"),),
            },
            {"schema_name": "staging"},
        )
        sql = generate_migration_script(result).to_sql()

        assert "app." not in sql.replace("-- Migration: prod.app", "")
        assert "CREATE TABLE staging.orders (" in sql
        assert "DEFAULT nextval('staging.orders_id_seq'::regclass)" in sql
        assert "CREATE INDEX idx_orders_id ON staging.orders USING btree (id);" in sql
        assert "REFERENCES staging.users (id)" in sql
        assert "CREATE VIEW staging.v_orders AS\nSELECT id FROM staging.orders;" in sql


# ============================================================================
# Test: Rendering
# ============================================================================


class TestToSql:
    """Verify script rendering for each WrapOption."""

    def _script(self, wrap_option: WrapOption) -> MigrationScript:
        statements = [
            MigrationStatement(
                ddl="ALTER TABLE public.orders ADD COLUMN total numeric",
                object_type=ObjectType.COLUMN,
                object_name="orders.total",
            ),
            MigrationStatement(
                ddl="DROP INDEX IF EXISTS public.idx_old",
                object_type=ObjectType.INDEX,
                object_name="idx_old",
                severity=Severity.BREAKING,
                kind=StatementKind.DROP,
                warning=DROP_WARNING,
                order=1,
            ),
        ]
        return MigrationScript(
            source_instance="prod",
            destination_instance="staging",
            source_schema="public",
            destination_schema="public",
            statements=statements,
            wrap_option=wrap_option,
        )

    def test_single_transaction(self) -> None:
        sql = self._script(WrapOption.SINGLE_TRANSACTION).to_sql()
        assert "BEGIN;" in sql
        assert sql.rstrip().endswith("COMMIT;")
        assert "SAVEPOINT" not in sql
        assert "-- Statements: 2 (1 breaking)" in sql
        assert f"-- WARNING: {DROP_WARNING}" in sql
        assert "-- [BREAKING] DROP Index: idx_old" in sql

    def test_individual_statements(self) -> None:
        sql = self._script(WrapOption.INDIVIDUAL_STATEMENTS).to_sql()
        assert "BEGIN;" not in sql
        assert "COMMIT;" not in sql
        assert "ALTER TABLE public.orders ADD COLUMN total numeric;" in sql

    def test_savepoint_per_object(self) -> None:
        sql = self._script(WrapOption.SAVEPOINT_PER_OBJECT).to_sql()
        assert "BEGIN;" in sql
        assert "SAVEPOINT sp_1;" in sql
        assert "RELEASE SAVEPOINT sp_2;" in sql
        assert sql.index("SAVEPOINT sp_1;") < sql.index("ADD COLUMN total") < sql.index("RELEASE SAVEPOINT sp_1;")

    def test_statement_terminator_not_doubled(self) -> None:
        statement = MigrationStatement(
            ddl="CREATE TYPE public.s AS ENUM ('a');",
            object_type=ObjectType.TYPE_ENUM,
            object_name="s",
        )
        assert statement.to_sql() == "CREATE TYPE public.s AS ENUM ('a');"

    def test_generation_is_deterministic(self) -> None:
        diff = ObjectDifference(
            key=ObjectKey(object_type=ObjectType.COLUMN, table="orders", name="total"),
            difference_type=DifferenceType.MISSING,
            source_definition="numeric",
        )
        result = _result(diff)
        first = generate_migration_script(result, WrapOption.SAVEPOINT_PER_OBJECT).to_sql()
        second = generate_migration_script(result, WrapOption.SAVEPOINT_PER_OBJECT).to_sql()
        assert first == second
