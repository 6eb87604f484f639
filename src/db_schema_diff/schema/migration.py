"""Migration script generation from a comparison result.

Turns the differences of a ``SchemaComparisonResult`` into an ordered list
of DDL statements that move the destination toward the source. Generation
is pure: nothing is executed, and the same result always yields the same
script (the script timestamp is the comparison's ``compared_at``).

Statements are grouped DROP, then CREATE, then ALTER. CREATEs are sorted by
``TYPE_PRECEDENCE`` (extensions before types before tables ...) and DROPs by
the reverse, so dependents are dropped first and created last.

Usage:
    from db_schema_diff.schema.migration import WrapOption, generate_migration_script

    script = generate_migration_script(result, WrapOption.SAVEPOINT_PER_OBJECT, include_drops=True)
    if script.has_breaking_changes:
        print(f"{script.breaking_count} breaking statements")
    Path("migrate.sql").write_text(script.to_sql())
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import assert_never

from db_schema_diff.schema.ddl import qualified, quote_literal
from db_schema_diff.schema.differences import (
    AttributeDifference,
    ObjectDifference,
    SchemaComparisonResult,
)
from db_schema_diff.schema.kinds import DifferenceType, ObjectType, Severity

DROP_WARNING = "DROP statement - potential data loss"
REMOVAL_WARNING = "Removing attribute - verify data impact"
MANUAL_WARNING = "No DDL generated - manual completion required"


class WrapOption(str, Enum):
    """How ``MigrationScript.to_sql()`` wraps the statements."""

    SINGLE_TRANSACTION = "SINGLE_TRANSACTION"
    INDIVIDUAL_STATEMENTS = "INDIVIDUAL_STATEMENTS"
    SAVEPOINT_PER_OBJECT = "SAVEPOINT_PER_OBJECT"


class StatementKind(str, Enum):
    CREATE = "CREATE"
    DROP = "DROP"
    ALTER = "ALTER"


# Dependency rank for CREATE ordering (ascending) and DROP ordering (descending)
TYPE_PRECEDENCE: dict[ObjectType, int] = {
    ObjectType.EXTENSION: 10,
    ObjectType.TYPE_ENUM: 20,
    ObjectType.TYPE_COMPOSITE: 21,
    ObjectType.TYPE_DOMAIN: 22,
    ObjectType.SEQUENCE: 30,
    ObjectType.TABLE: 40,
    ObjectType.COLUMN: 50,
    ObjectType.CONSTRAINT_PRIMARY: 60,
    ObjectType.CONSTRAINT_UNIQUE: 61,
    ObjectType.CONSTRAINT_CHECK: 62,
    ObjectType.CONSTRAINT_FOREIGN: 70,
    ObjectType.INDEX: 80,
    ObjectType.VIEW: 90,
    ObjectType.MATERIALIZED_VIEW: 91,
    ObjectType.FUNCTION: 100,
    ObjectType.PROCEDURE: 101,
    ObjectType.TRIGGER: 110,
}

if set(TYPE_PRECEDENCE) != set(ObjectType):
    raise RuntimeError(
        f"TYPE_PRECEDENCE is missing {sorted(t.value for t in set(ObjectType) - set(TYPE_PRECEDENCE))}"
    )


# ------------------------------------------------------------------
# Statement and script
# ------------------------------------------------------------------


@dataclass(frozen=True)
class MigrationStatement:
    """One DDL step of a migration script.

    ``ddl`` carries no trailing semicolon unless it bundles several
    statements (drop-and-recreate, full table DDL). ``to_sql()`` adds the
    terminator.

    Example:
        MigrationStatement(
            ddl="ALTER TABLE public.orders ADD COLUMN total numeric",
            object_type=ObjectType.COLUMN,
            object_name="orders.total",
        ).to_sql()
        # 'ALTER TABLE public.orders ADD COLUMN total numeric;'
    """

    ddl: str
    object_type: ObjectType
    object_name: str
    severity: Severity = Severity.INFO
    kind: StatementKind = StatementKind.CREATE
    warning: str | None = None
    order: int = 0

    @property
    def is_placeholder(self) -> bool:
        """True for comment-only statements that need manual completion."""
        return self.ddl.lstrip().startswith("--")

    def to_sql(self) -> str:
        sql = self.ddl.rstrip()
        if self.is_placeholder or sql.endswith(";"):
            return sql
        return sql + ";"


@dataclass
class MigrationScript:
    """Ordered migration statements plus how to wrap them.

    Attributes:
        statements: Statements in execution order; ``order`` matches position.
        wrap_option: Transaction wrapping used by ``to_sql()``.
        include_drops: Whether EXTRA objects produced DROP statements.
        generated_at: Timestamp of the comparison the script came from.
    """

    source_instance: str
    destination_instance: str
    source_schema: str
    destination_schema: str
    statements: list[MigrationStatement] = field(default_factory=list)
    wrap_option: WrapOption = WrapOption.SINGLE_TRANSACTION
    include_drops: bool = False
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def _of_kind(self, kind: StatementKind) -> list[MigrationStatement]:
        return [s for s in self.statements if s.kind == kind]

    def create_statements(self) -> list[MigrationStatement]:
        return self._of_kind(StatementKind.CREATE)

    def drop_statements(self) -> list[MigrationStatement]:
        return self._of_kind(StatementKind.DROP)

    def alter_statements(self) -> list[MigrationStatement]:
        return self._of_kind(StatementKind.ALTER)

    @property
    def statement_count(self) -> int:
        return len(self.statements)

    @property
    def breaking_count(self) -> int:
        return sum(1 for s in self.statements if s.severity == Severity.BREAKING)

    @property
    def has_breaking_changes(self) -> bool:
        return self.breaking_count > 0

    def to_sql(self) -> str:
        """Render the script as executable SQL text.

        SINGLE_TRANSACTION wraps everything in ``BEGIN``/``COMMIT``.
        SAVEPOINT_PER_OBJECT does the same and additionally brackets each
        statement with ``SAVEPOINT sp_N``/``RELEASE SAVEPOINT sp_N``.
        INDIVIDUAL_STATEMENTS adds no wrapping.
        """
        lines = [
            f"-- Migration: {self.source_instance}.{self.source_schema} -> "
            f"{self.destination_instance}.{self.destination_schema}",
            f"-- Generated: {self.generated_at.isoformat()}",
            f"-- Statements: {self.statement_count} ({self.breaking_count} breaking)",
            "",
        ]
        if not self.statements:
            lines.append("-- No changes required")
            return "\n".join(lines) + "\n"

        wrapped = self.wrap_option != WrapOption.INDIVIDUAL_STATEMENTS
        savepoints = self.wrap_option == WrapOption.SAVEPOINT_PER_OBJECT

        if wrapped:
            lines += ["BEGIN;", ""]
        for number, statement in enumerate(self.statements, start=1):
            lines.append(
                f"-- [{statement.severity.value}] {statement.kind.value} "
                f"{statement.object_type.display_name}: {statement.object_name}"
            )
            if statement.warning:
                lines.append(f"-- WARNING: {statement.warning}")
            if savepoints:
                lines.append(f"SAVEPOINT sp_{number};")
            lines.append(statement.to_sql())
            if savepoints:
                lines.append(f"RELEASE SAVEPOINT sp_{number};")
            lines.append("")
        if wrapped:
            lines.append("COMMIT;")
        return "\n".join(lines) + "\n"


# ============================================================================
# Generation
# ============================================================================


def generate_migration_script(
    result: SchemaComparisonResult,
    wrap_option: WrapOption = WrapOption.SINGLE_TRANSACTION,
    include_drops: bool = False,
) -> MigrationScript:
    """Build a migration script from a comparison result.

    Args:
        result: Comparison whose differences drive the script.
        wrap_option: Wrapping hint stored on the script.
        include_drops: Emit DROP statements for EXTRA objects. EXTRA
            differences are otherwise skipped (they stay in ``result``).

    Returns:
        MigrationScript targeting ``result.destination_schema``.
    """
    schema_name = result.destination_schema
    statements: list[MigrationStatement] = []
    for diff in result.differences:
        match diff.difference_type:
            case DifferenceType.MISSING:
                statements.extend(_create_statements(diff, schema_name))
            case DifferenceType.EXTRA:
                if include_drops:
                    statements.append(_drop_statement(diff, schema_name))
            case DifferenceType.MODIFIED:
                statements.extend(_alter_statements(diff, schema_name))
            case _:
                assert_never(diff.difference_type)

    return MigrationScript(
        source_instance=result.source_instance,
        destination_instance=result.destination_instance,
        source_schema=result.source_schema,
        destination_schema=schema_name,
        statements=reorder(statements),
        wrap_option=wrap_option,
        include_drops=include_drops,
        generated_at=result.compared_at,
    )


def reorder(statements: list[MigrationStatement]) -> list[MigrationStatement]:
    """Group DROP, CREATE, ALTER; sort by precedence; renumber from 0.

    Sorting is stable, so statements of equal precedence keep the order in
    which the differences were reported.
    """
    drops = sorted(
        (s for s in statements if s.kind == StatementKind.DROP),
        key=lambda s: TYPE_PRECEDENCE[s.object_type],
        reverse=True,
    )
    creates = sorted(
        (s for s in statements if s.kind == StatementKind.CREATE),
        key=lambda s: TYPE_PRECEDENCE[s.object_type],
    )
    alters = [s for s in statements if s.kind == StatementKind.ALTER]
    return [replace(s, order=i) for i, s in enumerate(drops + creates + alters)]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _table_target(diff: ObjectDifference, schema_name: str) -> str:
    return qualified(schema_name, diff.key.table or "")


def _placeholder(diff: ObjectDifference, kind: StatementKind, detail: str) -> MigrationStatement:
    return MigrationStatement(
        ddl=f"-- MANUAL: {diff.object_type.display_name} {diff.object_name}: {detail}",
        object_type=diff.object_type,
        object_name=diff.object_name,
        severity=diff.severity,
        kind=kind,
        warning=MANUAL_WARNING,
    )


def _statement(diff: ObjectDifference, ddl: str, kind: StatementKind, **kwargs) -> MigrationStatement:
    kwargs.setdefault("severity", diff.severity)
    return MigrationStatement(
        ddl=ddl,
        object_type=diff.object_type,
        object_name=diff.object_name,
        kind=kind,
        **kwargs,
    )


_TABLE_FOREIGN_KEY = re.compile(r"^ALTER TABLE \S+ ADD CONSTRAINT (\S+) FOREIGN KEY .*;$", re.MULTILINE)
_CREATE_INDEX = re.compile(r"^CREATE (UNIQUE )?INDEX (?!IF NOT EXISTS)", re.IGNORECASE)
_QUOTED = re.compile(r"'((?:[^']|'')*)'")


def _index_if_not_exists(definition: str) -> str:
    return _CREATE_INDEX.sub(lambda m: f"CREATE {m.group(1) or ''}INDEX IF NOT EXISTS ", definition, count=1)


def _enum_labels(definition: str | None) -> list[str]:
    """Labels from ``CREATE TYPE ... AS ENUM ('a', 'b')`` text."""
    if not definition or "(" not in definition:
        return []
    body = definition[definition.index("(") :]
    return [label.replace("''", "'") for label in _QUOTED.findall(body)]


# ============================================================================
# CREATE (missing objects)
# ============================================================================


def _create_statements(diff: ObjectDifference, schema_name: str) -> list[MigrationStatement]:
    if diff.object_type == ObjectType.TABLE and diff.source_definition:
        return _table_create_statements(diff)
    return [_create_statement(diff, schema_name)]


def _table_create_statements(diff: ObjectDifference) -> list[MigrationStatement]:
    """CREATE TABLE plus one deferred statement per foreign key.

    Foreign keys sort at constraint precedence, after every missing table.
    """
    definition = diff.source_definition or ""
    foreign_keys = [
        MigrationStatement(
            ddl=match.group(0),
            object_type=ObjectType.CONSTRAINT_FOREIGN,
            object_name=f"{diff.key.name}.{match.group(1)}",
            severity=diff.severity,
        )
        for match in _TABLE_FOREIGN_KEY.finditer(definition)
    ]
    table = re.sub(r"\n{3,}", "\n\n", _TABLE_FOREIGN_KEY.sub("", definition)).strip()
    return [_statement(diff, table, StatementKind.CREATE), *foreign_keys]


def _create_statement(diff: ObjectDifference, schema_name: str) -> MigrationStatement:
    definition = diff.source_definition
    kind = StatementKind.CREATE
    name = diff.key.name

    if not definition and diff.object_type != ObjectType.EXTENSION:
        return _placeholder(diff, kind, "definition not captured")

    match diff.object_type:
        case (
            ObjectType.TABLE
            | ObjectType.SEQUENCE
            | ObjectType.TYPE_ENUM
            | ObjectType.TYPE_COMPOSITE
            | ObjectType.TYPE_DOMAIN
        ):
            ddl = definition
        case ObjectType.COLUMN:
            ddl = f"ALTER TABLE {_table_target(diff, schema_name)} ADD COLUMN {name} {definition}"
        case (
            ObjectType.CONSTRAINT_PRIMARY
            | ObjectType.CONSTRAINT_FOREIGN
            | ObjectType.CONSTRAINT_UNIQUE
            | ObjectType.CONSTRAINT_CHECK
        ):
            ddl = f"ALTER TABLE {_table_target(diff, schema_name)} ADD CONSTRAINT {name} {definition}"
        case ObjectType.INDEX:
            ddl = _index_if_not_exists(definition)
        case ObjectType.VIEW:
            ddl = f"CREATE VIEW {qualified(schema_name, name)} AS\n{definition}"
        case ObjectType.MATERIALIZED_VIEW:
            ddl = f"CREATE MATERIALIZED VIEW {qualified(schema_name, name)} AS\n{definition}"
        case ObjectType.FUNCTION | ObjectType.PROCEDURE | ObjectType.TRIGGER:
            ddl = definition
        case ObjectType.EXTENSION:
            ddl = definition or f"CREATE EXTENSION IF NOT EXISTS {name}"
        case _:
            assert_never(diff.object_type)

    return _statement(diff, ddl, kind)


# ============================================================================
# DROP (extra objects)
# ============================================================================


def _drop_statement(diff: ObjectDifference, schema_name: str) -> MigrationStatement:
    name = diff.key.name
    target = qualified(schema_name, name)

    match diff.object_type:
        case ObjectType.TABLE:
            ddl = f"DROP TABLE IF EXISTS {target} CASCADE"
        case ObjectType.COLUMN:
            ddl = f"ALTER TABLE {_table_target(diff, schema_name)} DROP COLUMN IF EXISTS {name}"
        case ObjectType.INDEX:
            ddl = f"DROP INDEX IF EXISTS {target}"
        case (
            ObjectType.CONSTRAINT_PRIMARY
            | ObjectType.CONSTRAINT_FOREIGN
            | ObjectType.CONSTRAINT_UNIQUE
            | ObjectType.CONSTRAINT_CHECK
        ):
            ddl = f"ALTER TABLE {_table_target(diff, schema_name)} DROP CONSTRAINT IF EXISTS {name}"
        case ObjectType.TRIGGER:
            ddl = f"DROP TRIGGER IF EXISTS {name} ON {_table_target(diff, schema_name)}"
        case ObjectType.VIEW:
            ddl = f"DROP VIEW IF EXISTS {target} CASCADE"
        case ObjectType.MATERIALIZED_VIEW:
            ddl = f"DROP MATERIALIZED VIEW IF EXISTS {target} CASCADE"
        case ObjectType.FUNCTION:
            ddl = f"DROP FUNCTION IF EXISTS {target} CASCADE"
        case ObjectType.PROCEDURE:
            ddl = f"DROP PROCEDURE IF EXISTS {target} CASCADE"
        case ObjectType.SEQUENCE:
            ddl = f"DROP SEQUENCE IF EXISTS {target} CASCADE"
        case ObjectType.TYPE_ENUM | ObjectType.TYPE_COMPOSITE:
            ddl = f"DROP TYPE IF EXISTS {target} CASCADE"
        case ObjectType.TYPE_DOMAIN:
            # Domains need DROP DOMAIN; range types share this kind
            is_domain = (diff.destination_definition or "").startswith("CREATE DOMAIN")
            ddl = f"DROP {'DOMAIN' if is_domain else 'TYPE'} IF EXISTS {target} CASCADE"
        case ObjectType.EXTENSION:
            ddl = f"DROP EXTENSION IF EXISTS {name} CASCADE"
        case _:
            assert_never(diff.object_type)

    return _statement(diff, ddl, StatementKind.DROP, severity=Severity.BREAKING, warning=DROP_WARNING)


# ============================================================================
# ALTER (modified objects)
# ============================================================================


def _attribute_severity(diff: ObjectDifference, attr: AttributeDifference) -> tuple[Severity, str | None]:
    if attr.removed:
        return Severity.BREAKING, REMOVAL_WARNING
    if attr.attribute_name == "data_type":
        return Severity.WARNING, None
    if attr.attribute_name == "nullable" and attr.source_value == "false":
        return Severity.WARNING, None
    return diff.severity, None


def _alter_statements(diff: ObjectDifference, schema_name: str) -> list[MigrationStatement]:
    match diff.object_type:
        case (
            ObjectType.CONSTRAINT_PRIMARY
            | ObjectType.CONSTRAINT_FOREIGN
            | ObjectType.CONSTRAINT_UNIQUE
            | ObjectType.CONSTRAINT_CHECK
            | ObjectType.INDEX
            | ObjectType.TRIGGER
            | ObjectType.VIEW
            | ObjectType.MATERIALIZED_VIEW
            | ObjectType.FUNCTION
            | ObjectType.PROCEDURE
        ):
            return [_recreate_statement(diff, schema_name)]
        case ObjectType.TYPE_ENUM:
            return _enum_statements(diff, schema_name)
        case (
            ObjectType.TABLE
            | ObjectType.COLUMN
            | ObjectType.SEQUENCE
            | ObjectType.TYPE_COMPOSITE
            | ObjectType.TYPE_DOMAIN
            | ObjectType.EXTENSION
        ):
            statements = []
            for attr in diff.attribute_differences:
                ddl = _attribute_ddl(diff, attr, schema_name)
                if ddl is None:
                    statements.append(
                        _placeholder(
                            diff,
                            StatementKind.ALTER,
                            f"{attr.attribute_name} {attr.destination_value!r} -> {attr.source_value!r}",
                        )
                    )
                    continue
                severity, warning = _attribute_severity(diff, attr)
                statements.append(_statement(diff, ddl, StatementKind.ALTER, severity=severity, warning=warning))
            return statements
        case _:
            assert_never(diff.object_type)


def _attribute_ddl(diff: ObjectDifference, attr: AttributeDifference, schema_name: str) -> str | None:
    """Single-attribute ALTER for in-place changes, or None when there is no DDL form."""
    name = diff.key.name
    value = attr.source_value
    attribute = attr.attribute_name

    if attribute == "kind":
        return None

    match diff.object_type:
        case ObjectType.TABLE:
            target = qualified(schema_name, name)
            if attribute == "comment":
                return f"COMMENT ON TABLE {target} IS {quote_literal(value)}"
            if attribute == "owner" and value:
                return f"ALTER TABLE {target} OWNER TO {value}"
        case ObjectType.COLUMN:
            table = _table_target(diff, schema_name)
            alter = f"ALTER TABLE {table} ALTER COLUMN {name}"
            if attribute == "data_type":
                return f"{alter} TYPE {value}"
            if attribute == "nullable":
                return f"{alter} SET NOT NULL" if value == "false" else f"{alter} DROP NOT NULL"
            if attribute == "default":
                return f"{alter} SET DEFAULT {value}" if value is not None else f"{alter} DROP DEFAULT"
            if attribute == "comment":
                return f"COMMENT ON COLUMN {table}.{name} IS {quote_literal(value)}"
            if attribute == "identity":
                if value is None:
                    return f"{alter} DROP IDENTITY IF EXISTS"
                if attr.destination_value is None:
                    return f"{alter} ADD GENERATED {value} AS IDENTITY"
                return f"{alter} SET GENERATED {value}"
        case ObjectType.SEQUENCE:
            clause = _sequence_clause(attribute, value)
            if clause:
                return f"ALTER SEQUENCE {qualified(schema_name, name)} {clause}"
        case ObjectType.EXTENSION:
            if attribute == "version" and value:
                return f"ALTER EXTENSION {name} UPDATE TO {quote_literal(value)}"
        case ObjectType.TYPE_DOMAIN:
            target = qualified(schema_name, name)
            if attribute == "default":
                return f"ALTER DOMAIN {target} SET DEFAULT {value}" if value else f"ALTER DOMAIN {target} DROP DEFAULT"
            if attribute == "not_null":
                return f"ALTER DOMAIN {target} {'SET' if value == 'true' else 'DROP'} NOT NULL"
        case ObjectType.TYPE_COMPOSITE:
            if attribute.startswith("attribute."):
                target = qualified(schema_name, name)
                member = attribute.removeprefix("attribute.")
                if value is None:
                    return f"ALTER TYPE {target} DROP ATTRIBUTE IF EXISTS {member}"
                if attr.destination_value is None:
                    return f"ALTER TYPE {target} ADD ATTRIBUTE {member} {value}"
                return f"ALTER TYPE {target} ALTER ATTRIBUTE {member} TYPE {value}"
        case _:
            return None
    return None


def _sequence_clause(attribute: str, value: str | None) -> str | None:
    if value is None:
        return None
    clauses = {
        "data_type": f"AS {value}",
        "start_value": f"START WITH {value}",
        "increment": f"INCREMENT BY {value}",
        "min_value": f"MINVALUE {value}",
        "max_value": f"MAXVALUE {value}",
        "cache_size": f"CACHE {value}",
        "cycle": "CYCLE" if value == "true" else "NO CYCLE",
    }
    return clauses.get(attribute)


def _enum_statements(diff: ObjectDifference, schema_name: str) -> list[MigrationStatement]:
    """One ``ADD VALUE`` per label present only in the source.

    Each new label is anchored AFTER its immediate predecessor in the source
    list; a new first label goes BEFORE the destination's first label.
    Labels are never removed.
    """
    if diff.get_attribute("labels") is None:
        return [_placeholder(diff, StatementKind.ALTER, "type kind changed")]

    source_labels = _enum_labels(diff.source_definition)
    destination_labels = _enum_labels(diff.destination_definition)
    existing = set(destination_labels)
    target = qualified(schema_name, diff.key.name)

    statements = []
    for position, label in enumerate(source_labels):
        if label in existing:
            continue
        ddl = f"ALTER TYPE {target} ADD VALUE {quote_literal(label)}"
        if position > 0:
            ddl += f" AFTER {quote_literal(source_labels[position - 1])}"
        elif destination_labels:
            ddl += f" BEFORE {quote_literal(destination_labels[0])}"
        statements.append(_statement(diff, ddl, StatementKind.ALTER))

    if not statements:
        return [_placeholder(diff, StatementKind.ALTER, "labels removed or reordered; enum values cannot be dropped")]
    return statements


def _recreate_statement(diff: ObjectDifference, schema_name: str) -> MigrationStatement:
    """Drop-and-recreate (or CREATE OR REPLACE) for kinds without in-place ALTERs."""
    definition = diff.source_definition
    if not definition:
        return _placeholder(diff, StatementKind.ALTER, "definition not captured")

    name = diff.key.name
    target = qualified(schema_name, name)
    kind_changed = diff.get_attribute("materialized") is not None

    match diff.object_type:
        case ObjectType.VIEW:
            prefix = f"DROP MATERIALIZED VIEW IF EXISTS {target};\n" if kind_changed else ""
            verb = "CREATE VIEW" if kind_changed else "CREATE OR REPLACE VIEW"
            ddl = f"{prefix}{verb} {target} AS\n{definition}"
        case ObjectType.MATERIALIZED_VIEW:
            drop = "VIEW" if kind_changed else "MATERIALIZED VIEW"
            ddl = f"DROP {drop} IF EXISTS {target};\nCREATE MATERIALIZED VIEW {target} AS\n{definition}"
        case ObjectType.FUNCTION | ObjectType.PROCEDURE:
            # CREATE OR REPLACE cannot change a return type
            if diff.get_attribute("return_type") is not None:
                keyword = "PROCEDURE" if diff.object_type == ObjectType.PROCEDURE else "FUNCTION"
                ddl = f"DROP {keyword} IF EXISTS {target};\n{definition}"
            else:
                ddl = definition
        case ObjectType.INDEX:
            ddl = f"DROP INDEX IF EXISTS {target};\n{definition}"
        case ObjectType.TRIGGER:
            ddl = f"DROP TRIGGER IF EXISTS {name} ON {_table_target(diff, schema_name)};\n{definition}"
        case (
            ObjectType.CONSTRAINT_PRIMARY
            | ObjectType.CONSTRAINT_FOREIGN
            | ObjectType.CONSTRAINT_UNIQUE
            | ObjectType.CONSTRAINT_CHECK
        ):
            table = _table_target(diff, schema_name)
            ddl = (
                f"ALTER TABLE {table} DROP CONSTRAINT IF EXISTS {name};\n"
                f"ALTER TABLE {table} ADD CONSTRAINT {name} {definition}"
            )
        case _:
            return _placeholder(diff, StatementKind.ALTER, "no recreate form")

    graded = [_attribute_severity(diff, attr) for attr in diff.attribute_differences]
    severity = Severity.highest([diff.severity, *(s for s, _ in graded)])
    warning = next((w for _, w in graded if w), None)
    return _statement(diff, ddl, StatementKind.ALTER, severity=severity, warning=warning)
