"""Deterministic DDL builders for extracted schema models.

Each builder is a plain string constructor: the same model and schema name
always yield byte-identical text. The diff engine uses them to capture
``source_definition`` for missing objects, and the migration generator
reuses the fragment builders.

Usage:
    from db_schema_diff.schema.ddl import table_ddl, column_definition

    column_definition(ColumnSchema(name="total", data_type="numeric", nullable=False, default="0"))
    # 'numeric NOT NULL DEFAULT 0'
"""

from typing import assert_never

from db_schema_diff.schema.models import (
    ColumnSchema,
    ForeignKeySchema,
    FunctionSchema,
    PrimaryKeySchema,
    SequenceSchema,
    TableSchema,
    TypeKind,
    TypeSchema,
    UniqueConstraintSchema,
    ViewSchema,
)


def quote_literal(value: str | None) -> str:
    """Render ``value`` as a SQL string literal, doubling single quotes."""
    if value is None:
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


def qualified(schema_name: str, name: str) -> str:
    return f"{schema_name}.{name}"


# ------------------------------------------------------------------
# Fragments
# ------------------------------------------------------------------


def column_definition(column: ColumnSchema) -> str:
    """Column type and modifiers, without the column name."""
    parts = [column.data_type]
    if not column.nullable:
        parts.append("NOT NULL")
    if column.generated and column.default:
        parts.append(f"GENERATED ALWAYS AS ({column.default}) {column.generated}")
    elif column.default:
        parts.append(f"DEFAULT {column.default}")
    if column.identity:
        parts.append(f"GENERATED {column.identity} AS IDENTITY")
    return " ".join(parts)


def primary_key_clause(pk: PrimaryKeySchema) -> str:
    return f"PRIMARY KEY ({', '.join(pk.columns)})"


def unique_clause(uc: UniqueConstraintSchema) -> str:
    return f"UNIQUE ({', '.join(uc.columns)})"


def foreign_key_clause(fk: ForeignKeySchema) -> str:
    """``FOREIGN KEY (...) REFERENCES s.t (...)`` with non-default actions."""
    clause = (
        f"FOREIGN KEY ({', '.join(fk.columns)}) "
        f"REFERENCES {qualified(fk.referenced_schema, fk.referenced_table)} "
        f"({', '.join(fk.referenced_columns)})"
    )
    if fk.on_update != "NO ACTION":
        clause += f" ON UPDATE {fk.on_update}"
    if fk.on_delete != "NO ACTION":
        clause += f" ON DELETE {fk.on_delete}"
    return clause


def _terminated(statement: str) -> str:
    statement = statement.rstrip()
    return statement if statement.endswith(";") else statement + ";"


# ------------------------------------------------------------------
# Full definitions
# ------------------------------------------------------------------


def table_ddl(table: TableSchema, schema_name: str) -> str:
    """Complete DDL for a table: CREATE TABLE, then FKs, indexes and comments.

    Primary key, unique and check constraints are inline. Foreign keys are
    separate one-line ALTER statements after the CREATE TABLE; the
    migration generator splits them out and runs them after every table.
    """
    target = qualified(schema_name, table.name)
    lines = [f"    {col.name} {column_definition(col)}" for col in table.columns]

    if table.primary_key is not None:
        lines.append(f"    CONSTRAINT {table.primary_key.name} {primary_key_clause(table.primary_key)}")
    for uc in table.unique_constraints:
        lines.append(f"    CONSTRAINT {uc.name} {unique_clause(uc)}")
    for cc in table.check_constraints:
        lines.append(f"    CONSTRAINT {cc.name} {cc.expression}")

    sql = f"CREATE TABLE {target} (\n" + ",\n".join(lines) + "\n)"
    if table.partition_key:
        sql += f" PARTITION BY {table.partition_key}"
    sql += ";\n"

    for fk in table.foreign_keys:
        sql += f"\nALTER TABLE {target} ADD CONSTRAINT {fk.name} {foreign_key_clause(fk)};\n"

    for idx in table.indexes:
        if idx.definition:
            sql += f"\n{_terminated(idx.definition)}\n"

    if table.comment:
        sql += f"\nCOMMENT ON TABLE {target} IS {quote_literal(table.comment)};\n"
    for col in table.columns:
        if col.comment:
            sql += f"COMMENT ON COLUMN {target}.{col.name} IS {quote_literal(col.comment)};\n"

    return sql


def view_ddl(view: ViewSchema, schema_name: str) -> str:
    """CREATE [MATERIALIZED] VIEW with the captured query, terminated."""
    keyword = "MATERIALIZED VIEW" if view.is_materialized else "VIEW"
    body = view.definition or "    SELECT -- query not captured"
    return _terminated(f"CREATE {keyword} {qualified(schema_name, view.name)} AS\n{body}")


def enum_type_ddl(type_: TypeSchema, schema_name: str) -> str:
    labels = ", ".join(quote_literal(label) for label in type_.labels)
    return f"CREATE TYPE {qualified(schema_name, type_.name)} AS ENUM ({labels});"


def composite_type_ddl(type_: TypeSchema, schema_name: str) -> str:
    attributes = ", ".join(f"{a.name} {a.data_type}" for a in type_.attributes)
    return f"CREATE TYPE {qualified(schema_name, type_.name)} AS ({attributes});"


def domain_ddl(type_: TypeSchema, schema_name: str) -> str:
    sql = f"CREATE DOMAIN {qualified(schema_name, type_.name)} AS {type_.base_type}"
    if type_.default:
        sql += f" DEFAULT {type_.default}"
    if type_.not_null:
        sql += " NOT NULL"
    for constraint in type_.constraints:
        sql += f" {constraint}"
    return sql + ";"


def range_type_ddl(type_: TypeSchema, schema_name: str) -> str:
    return f"CREATE TYPE {qualified(schema_name, type_.name)} AS RANGE (SUBTYPE = {type_.subtype});"


def sequence_ddl(seq: SequenceSchema, schema_name: str) -> str:
    sql = f"CREATE SEQUENCE {qualified(schema_name, seq.name)}"
    if seq.data_type and seq.data_type != "bigint":
        sql += f" AS {seq.data_type}"
    sql += (
        f" INCREMENT BY {seq.increment}"
        f" MINVALUE {seq.min_value}"
        f" MAXVALUE {seq.max_value}"
        f" START WITH {seq.start_value}"
        f" CACHE {seq.cache_size}"
    )
    sql += " CYCLE" if seq.cycle else " NO CYCLE"
    return sql + ";"


def function_ddl(function: FunctionSchema, schema_name: str) -> str:
    """The catalog definition text, or a placeholder comment when absent."""
    if function.definition:
        return function.definition
    return f"-- {function.kind.value.lower()} {qualified(schema_name, function.signature)}: definition not available"


def type_ddl(type_: TypeSchema, schema_name: str) -> str:
    """Dispatch to the builder for ``type_.kind``."""
    match type_.kind:
        case TypeKind.ENUM:
            return enum_type_ddl(type_, schema_name)
        case TypeKind.COMPOSITE:
            return composite_type_ddl(type_, schema_name)
        case TypeKind.DOMAIN:
            return domain_ddl(type_, schema_name)
        case TypeKind.RANGE:
            return range_type_ddl(type_, schema_name)
        case _:
            assert_never(type_.kind)
