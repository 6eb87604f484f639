"""PostgreSQL schema extraction via pg_catalog.

This module queries a live database to build a ``SchemaSnapshot``:
- Tables with columns, primary/foreign/unique/check constraints,
  indexes and triggers
- Views and materialized views
- Functions and procedures (keyed by signature)
- Sequences
- Enum, composite, domain and range types
- Installed extensions

Uses psycopg (v3) async connections in autocommit mode, so a failed
catalog query never aborts the ones that follow it.

Extraction is best-effort: when the query for one object kind fails, that
kind comes back empty and a warning is logged. Only connection problems
raise.
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

import psycopg
from psycopg import AsyncConnection

from db_schema_diff.schema.filter import ComparisonFilter
from db_schema_diff.schema.models import (
    CallableKind,
    CheckConstraintSchema,
    ColumnSchema,
    CompositeAttribute,
    ExtensionSchema,
    ForeignKeySchema,
    FunctionSchema,
    IndexSchema,
    PrimaryKeySchema,
    SchemaSnapshot,
    SequenceSchema,
    TableSchema,
    TriggerSchema,
    TypeKind,
    TypeSchema,
    UniqueConstraintSchema,
    ViewColumn,
    ViewSchema,
    Volatility,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_IDENTITY = {"a": "ALWAYS", "d": "BY DEFAULT"}
_GENERATED = {"s": "STORED"}
_FK_ACTIONS = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}
_CALLABLE_KINDS = {
    "f": CallableKind.FUNCTION,
    "p": CallableKind.PROCEDURE,
    "a": CallableKind.AGGREGATE,
    "w": CallableKind.WINDOW,
}
_VOLATILITY = {"i": Volatility.IMMUTABLE, "s": Volatility.STABLE, "v": Volatility.VOLATILE}


class SchemaIntrospector:
    """Extracts one PostgreSQL schema into immutable models.

    Usage:
        async with SchemaIntrospector(database_url) as introspector:
            # Everything at once
            snapshot = await introspector.extract_snapshot("public")

            # Or one kind at a time
            tables = await introspector.extract_tables("public")
            extensions = await introspector.extract_extensions()
    """

    # Default tables to skip (tooling and extension bookkeeping)
    EXCLUDED_TABLES_DEFAULT: set[str] = {
        "schema_migrations",
        "pg_stat_statements",
        "spatial_ref_sys",
    }

    def __init__(
        self,
        database_url: str,
        excluded_tables: set[str] | None = None,
        connect_timeout: int = 10,
    ):
        """Initialize with database connection URL.

        Args:
            database_url: PostgreSQL connection URL
            excluded_tables: Table names to skip. ``None`` uses
                ``EXCLUDED_TABLES_DEFAULT``; pass an empty set to keep all.
            connect_timeout: Seconds to wait for the connection.
        """
        self._database_url = database_url
        self._excluded_tables = (
            set(self.EXCLUDED_TABLES_DEFAULT) if excluded_tables is None else set(excluded_tables)
        )
        self._connect_timeout = connect_timeout
        self._conn: AsyncConnection | None = None

    async def __aenter__(self) -> "SchemaIntrospector":
        """Open the connection."""
        self._conn = await psycopg.AsyncConnection.connect(
            self._database_url,
            connect_timeout=self._connect_timeout,
            autocommit=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_connection(self) -> AsyncConnection:
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use async with statement.")
        return self._conn

    async def _fetch(self, query: str, params: tuple | None = None) -> list[tuple]:
        conn = self._require_connection()
        async with conn.cursor() as cur:
            await cur.execute(query, params)
            return await cur.fetchall()

    async def _best_effort(self, kind: str, schema_name: str, fetch: Callable[[], Awaitable[T]], empty: T) -> T:
        """Run one extraction, returning ``empty`` and logging if it fails."""
        self._require_connection()
        try:
            return await fetch()
        except (psycopg.Error, ValueError) as e:
            logger.warning(f"Failed to extract {kind} from schema '{schema_name}': {e}")
            return empty

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def test_connection(self) -> bool:
        """Run ``SELECT 1``.

        Raises:
            ConnectionError: If the query fails.
        """
        conn = self._require_connection()
        try:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()
        except psycopg.Error as e:
            raise ConnectionError(f"Connection test failed: {e}") from e
        return True

    async def extract_snapshot(self, schema_name: str = "public", instance: str = "") -> SchemaSnapshot:
        """Extract every supported object kind for ``schema_name``."""
        extracted_at = datetime.now(timezone.utc)
        return SchemaSnapshot(
            instance=instance,
            schema_name=schema_name,
            extracted_at=extracted_at,
            tables=tuple(await self.extract_tables(schema_name)),
            views=tuple(await self.extract_views(schema_name)),
            functions=tuple(await self.extract_functions(schema_name)),
            sequences=tuple(await self.extract_sequences(schema_name)),
            types=tuple(await self.extract_types(schema_name)),
            extensions=tuple(await self.extract_extensions()),
        )

    async def extract_tables(self, schema_name: str = "public") -> list[TableSchema]:
        """Extract tables with all nested columns, constraints, indexes and triggers."""
        rows = await self._best_effort("tables", schema_name, lambda: self._get_tables(schema_name), [])
        if not rows:
            return []

        columns = await self._best_effort("columns", schema_name, lambda: self._get_columns(schema_name), {})
        primary_keys = await self._best_effort(
            "primary keys", schema_name, lambda: self._get_primary_keys(schema_name), {}
        )
        foreign_keys = await self._best_effort(
            "foreign keys", schema_name, lambda: self._get_foreign_keys(schema_name), {}
        )
        unique_constraints = await self._best_effort(
            "unique constraints", schema_name, lambda: self._get_unique_constraints(schema_name), {}
        )
        check_constraints = await self._best_effort(
            "check constraints", schema_name, lambda: self._get_check_constraints(schema_name), {}
        )
        indexes = await self._best_effort("indexes", schema_name, lambda: self._get_indexes(schema_name), {})
        triggers = await self._best_effort("triggers", schema_name, lambda: self._get_triggers(schema_name), {})

        tables = []
        for name, owner, comment, is_partition, partition_key in rows:
            if name in self._excluded_tables:
                continue
            tables.append(
                TableSchema(
                    name=name,
                    owner=owner,
                    comment=comment,
                    is_partition=bool(is_partition),
                    partition_key=partition_key,
                    columns=tuple(columns.get(name, ())),
                    primary_key=primary_keys.get(name),
                    foreign_keys=tuple(foreign_keys.get(name, ())),
                    unique_constraints=tuple(unique_constraints.get(name, ())),
                    check_constraints=tuple(check_constraints.get(name, ())),
                    indexes=tuple(indexes.get(name, ())),
                    triggers=tuple(triggers.get(name, ())),
                )
            )
        return tables

    async def extract_views(self, schema_name: str = "public") -> list[ViewSchema]:
        """Extract views and materialized views."""
        return await self._best_effort("views", schema_name, lambda: self._get_views(schema_name), [])

    async def extract_functions(self, schema_name: str = "public") -> list[FunctionSchema]:
        """Extract functions and procedures, ordered by signature."""
        return await self._best_effort("functions", schema_name, lambda: self._get_functions(schema_name), [])

    async def extract_sequences(self, schema_name: str = "public") -> list[SequenceSchema]:
        """Extract sequences with their owning column."""
        return await self._best_effort("sequences", schema_name, lambda: self._get_sequences(schema_name), [])

    async def extract_types(self, schema_name: str = "public") -> list[TypeSchema]:
        """Extract enum, composite, domain and range types, ordered by name."""
        types: list[TypeSchema] = []
        types += await self._best_effort("enum types", schema_name, lambda: self._get_enum_types(schema_name), [])
        types += await self._best_effort(
            "composite types", schema_name, lambda: self._get_composite_types(schema_name), []
        )
        types += await self._best_effort("domains", schema_name, lambda: self._get_domains(schema_name), [])
        types += await self._best_effort("range types", schema_name, lambda: self._get_range_types(schema_name), [])
        return sorted(types, key=lambda t: t.name)

    async def extract_extensions(self) -> list[ExtensionSchema]:
        """Extract installed extensions (database-wide)."""
        return await self._best_effort("extensions", "*", self._get_extensions, [])

    async def list_schemas(self, filter: ComparisonFilter | None = None) -> list[str]:
        """List non-system schemas, minus any the filter excludes."""
        query = """
            SELECT nspname
            FROM pg_namespace
            WHERE nspname NOT LIKE 'pg\\_%'
              AND nspname <> 'information_schema'
            ORDER BY nspname
        """
        rows = await self._best_effort("schemas", "*", lambda: self._fetch(query), [])
        schemas = [row[0] for row in rows]
        if filter is not None:
            schemas = [s for s in schemas if filter.matches_schema(s)]
        return schemas

    async def get_schema_summary(self, schema_name: str = "public") -> dict[str, int]:
        """Count objects per kind straight from the catalog."""
        query = """
            SELECT
                (SELECT COUNT(*) FROM pg_class c
                 WHERE c.relnamespace = n.oid AND c.relkind IN ('r', 'p')) AS tables,
                (SELECT COUNT(*) FROM pg_class c
                 WHERE c.relnamespace = n.oid AND c.relkind = 'v') AS views,
                (SELECT COUNT(*) FROM pg_class c
                 WHERE c.relnamespace = n.oid AND c.relkind = 'm') AS materialized_views,
                (SELECT COUNT(*) FROM pg_class c
                 WHERE c.relnamespace = n.oid AND c.relkind = 'S') AS sequences,
                (SELECT COUNT(*) FROM pg_class c
                 WHERE c.relnamespace = n.oid AND c.relkind = 'i') AS indexes,
                (SELECT COUNT(*) FROM pg_proc p WHERE p.pronamespace = n.oid) AS functions,
                (SELECT COUNT(*) FROM pg_type t
                 WHERE t.typnamespace = n.oid AND t.typtype IN ('e', 'c', 'd', 'r')
                   AND NOT EXISTS (
                       SELECT 1 FROM pg_class c
                       WHERE c.reltype = t.oid AND c.relkind IN ('r', 'v', 'm', 'f', 'p')
                   )) AS types
            FROM pg_namespace n
            WHERE n.nspname = %s
        """
        keys = ("tables", "views", "materialized_views", "sequences", "indexes", "functions", "types")
        rows = await self._best_effort("summary", schema_name, lambda: self._fetch(query, (schema_name,)), [])
        if not rows:
            return {}
        return {key: int(value) for key, value in zip(keys, rows[0])}

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def _get_tables(self, schema_name: str) -> list[tuple]:
        """Get (name, owner, comment, is_partition, partition_key) rows."""
        query = """
            SELECT c.relname,
                   pg_get_userbyid(c.relowner),
                   d.description,
                   c.relispartition,
                   pg_get_partkeydef(c.oid)
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_description d
                ON d.objoid = c.oid AND d.classoid = 'pg_class'::regclass AND d.objsubid = 0
            WHERE n.nspname = %s
              AND c.relkind IN ('r', 'p')
            ORDER BY c.relname
        """
        return await self._fetch(query, (schema_name,))

    async def _get_columns(self, schema_name: str) -> dict[str, list[ColumnSchema]]:
        """Get columns for every table in schema, in ordinal order."""
        query = """
            SELECT c.relname,
                   a.attname,
                   pg_catalog.format_type(a.atttypid, a.atttypmod),
                   NOT a.attnotnull,
                   pg_get_expr(ad.adbin, ad.adrelid),
                   a.attidentity,
                   a.attgenerated,
                   a.attnum,
                   col_description(c.oid, a.attnum)
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_attrdef ad ON ad.adrelid = a.attrelid AND ad.adnum = a.attnum
            WHERE n.nspname = %s
              AND c.relkind IN ('r', 'p')
              AND a.attnum > 0
              AND NOT a.attisdropped
            ORDER BY c.relname, a.attnum
        """
        columns: dict[str, list[ColumnSchema]] = defaultdict(list)
        for row in await self._fetch(query, (schema_name,)):
            table, name, data_type, nullable, default, identity, generated, position, comment = row
            columns[table].append(
                ColumnSchema(
                    name=name,
                    data_type=data_type,
                    nullable=nullable,
                    default=default,
                    identity=_IDENTITY.get(identity or ""),
                    generated=_GENERATED.get(generated or ""),
                    ordinal_position=position,
                    comment=comment,
                )
            )
        return columns

    async def _get_primary_keys(self, schema_name: str) -> dict[str, PrimaryKeySchema]:
        query = """
            SELECT t.relname,
                   c.conname,
                   array_agg(a.attname::text ORDER BY array_position(c.conkey, a.attnum))
            FROM pg_constraint c
            JOIN pg_class t ON t.oid = c.conrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(c.conkey)
            WHERE c.contype = 'p'
              AND n.nspname = %s
            GROUP BY t.relname, c.conname
        """
        return {
            table: PrimaryKeySchema(name=name, columns=tuple(cols))
            for table, name, cols in await self._fetch(query, (schema_name,))
        }

    async def _get_foreign_keys(self, schema_name: str) -> dict[str, list[ForeignKeySchema]]:
        query = """
            SELECT t1.relname,
                   c.conname,
                   ARRAY(
                       SELECT a.attname::text
                       FROM unnest(c.conkey) WITH ORDINALITY AS k(attnum, ord)
                       JOIN pg_attribute a ON a.attrelid = c.conrelid AND a.attnum = k.attnum
                       ORDER BY k.ord
                   ),
                   n2.nspname,
                   t2.relname,
                   ARRAY(
                       SELECT a.attname::text
                       FROM unnest(c.confkey) WITH ORDINALITY AS k(attnum, ord)
                       JOIN pg_attribute a ON a.attrelid = c.confrelid AND a.attnum = k.attnum
                       ORDER BY k.ord
                   ),
                   c.confupdtype,
                   c.confdeltype
            FROM pg_constraint c
            JOIN pg_class t1 ON t1.oid = c.conrelid
            JOIN pg_namespace n1 ON n1.oid = t1.relnamespace
            JOIN pg_class t2 ON t2.oid = c.confrelid
            JOIN pg_namespace n2 ON n2.oid = t2.relnamespace
            WHERE c.contype = 'f'
              AND n1.nspname = %s
            ORDER BY t1.relname, c.conname
        """
        foreign_keys: dict[str, list[ForeignKeySchema]] = defaultdict(list)
        for row in await self._fetch(query, (schema_name,)):
            table, name, cols, ref_schema, ref_table, ref_cols, on_update, on_delete = row
            foreign_keys[table].append(
                ForeignKeySchema(
                    name=name,
                    columns=tuple(cols),
                    referenced_schema=ref_schema,
                    referenced_table=ref_table,
                    referenced_columns=tuple(ref_cols),
                    on_update=_FK_ACTIONS.get(on_update, "NO ACTION"),
                    on_delete=_FK_ACTIONS.get(on_delete, "NO ACTION"),
                )
            )
        return foreign_keys

    async def _get_unique_constraints(self, schema_name: str) -> dict[str, list[UniqueConstraintSchema]]:
        query = """
            SELECT t.relname,
                   c.conname,
                   array_agg(a.attname::text ORDER BY array_position(c.conkey, a.attnum))
            FROM pg_constraint c
            JOIN pg_class t ON t.oid = c.conrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(c.conkey)
            WHERE c.contype = 'u'
              AND n.nspname = %s
            GROUP BY t.relname, c.conname
            ORDER BY t.relname, c.conname
        """
        constraints: dict[str, list[UniqueConstraintSchema]] = defaultdict(list)
        for table, name, cols in await self._fetch(query, (schema_name,)):
            constraints[table].append(UniqueConstraintSchema(name=name, columns=tuple(cols)))
        return constraints

    async def _get_check_constraints(self, schema_name: str) -> dict[str, list[CheckConstraintSchema]]:
        query = """
            SELECT t.relname,
                   c.conname,
                   pg_get_constraintdef(c.oid, true)
            FROM pg_constraint c
            JOIN pg_class t ON t.oid = c.conrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            WHERE c.contype = 'c'
              AND n.nspname = %s
              AND c.conname NOT LIKE '%%\\_not\\_null'
            ORDER BY t.relname, c.conname
        """
        constraints: dict[str, list[CheckConstraintSchema]] = defaultdict(list)
        for table, name, expression in await self._fetch(query, (schema_name,)):
            constraints[table].append(CheckConstraintSchema(name=name, expression=expression))
        return constraints

    async def _get_indexes(self, schema_name: str) -> dict[str, list[IndexSchema]]:
        """Get indexes for every table (excluding primary keys)."""
        query = """
            SELECT t.relname,
                   i.relname,
                   am.amname,
                   ARRAY(
                       SELECT a.attname::text
                       FROM unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord)
                       JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
                       ORDER BY k.ord
                   ),
                   ix.indisunique,
                   pg_get_expr(ix.indpred, ix.indrelid),
                   pg_get_indexdef(i.oid)
            FROM pg_index ix
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN pg_class t ON t.oid = ix.indrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_am am ON am.oid = i.relam
            WHERE n.nspname = %s
              AND t.relkind IN ('r', 'p')
              AND NOT ix.indisprimary
            ORDER BY t.relname, i.relname
        """
        indexes: dict[str, list[IndexSchema]] = defaultdict(list)
        for row in await self._fetch(query, (schema_name,)):
            table, name, index_type, cols, is_unique, where_clause, definition = row
            indexes[table].append(
                IndexSchema(
                    name=name,
                    index_type=index_type,
                    columns=tuple(cols),
                    is_unique=is_unique,
                    where_clause=where_clause,
                    definition=definition,
                )
            )
        return indexes

    async def _get_triggers(self, schema_name: str) -> dict[str, list[TriggerSchema]]:
        query = """
            SELECT c.relname,
                   tg.tgname,
                   pg_get_triggerdef(tg.oid, true),
                   tg.tgenabled
            FROM pg_trigger tg
            JOIN pg_class c ON c.oid = tg.tgrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE n.nspname = %s
              AND NOT tg.tgisinternal
            ORDER BY c.relname, tg.tgname
        """
        triggers: dict[str, list[TriggerSchema]] = defaultdict(list)
        for table, name, definition, enabled in await self._fetch(query, (schema_name,)):
            triggers[table].append(
                TriggerSchema(name=name, definition=definition, enabled=enabled in ("O", "A"))
            )
        return triggers

    # ------------------------------------------------------------------
    # Views, routines, sequences
    # ------------------------------------------------------------------

    async def _get_views(self, schema_name: str) -> list[ViewSchema]:
        query = """
            SELECT c.relname,
                   pg_get_viewdef(c.oid, true),
                   c.relkind = 'm',
                   pg_get_userbyid(c.relowner),
                   d.description,
                   ARRAY(
                       SELECT ROW(a.attname::text, pg_catalog.format_type(a.atttypid, a.atttypmod), a.attnum)
                       FROM pg_attribute a
                       WHERE a.attrelid = c.oid AND a.attnum > 0 AND NOT a.attisdropped
                       ORDER BY a.attnum
                   ),
                   ARRAY(
                       SELECT i.relname::text
                       FROM pg_index ix
                       JOIN pg_class i ON i.oid = ix.indexrelid
                       WHERE ix.indrelid = c.oid
                       ORDER BY i.relname
                   )
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_description d
                ON d.objoid = c.oid AND d.classoid = 'pg_class'::regclass AND d.objsubid = 0
            WHERE n.nspname = %s
              AND c.relkind IN ('v', 'm')
            ORDER BY c.relname
        """
        views = []
        for name, definition, is_materialized, owner, comment, cols, idx_names in await self._fetch(
            query, (schema_name,)
        ):
            views.append(
                ViewSchema(
                    name=name,
                    definition=definition,
                    is_materialized=is_materialized,
                    owner=owner,
                    comment=comment,
                    columns=tuple(ViewColumn(name=c[0], data_type=c[1], position=c[2]) for c in cols),
                    indexes=tuple(idx_names) if is_materialized else (),
                )
            )
        return views

    async def _get_functions(self, schema_name: str) -> list[FunctionSchema]:
        """Get user-defined routines in schema.

        Note: pg_get_functiondef() rejects aggregates, so their definition is
        NULL. Routines owned by an extension are skipped.
        """
        query = """
            SELECT p.proname,
                   pg_get_function_identity_arguments(p.oid),
                   pg_get_function_result(p.oid),
                   l.lanname,
                   p.prokind,
                   p.provolatile,
                   p.proisstrict,
                   p.prosecdef,
                   CASE WHEN p.prokind IN ('f', 'p', 'w') THEN pg_get_functiondef(p.oid) END,
                   pg_get_userbyid(p.proowner),
                   d.description
            FROM pg_proc p
            JOIN pg_namespace n ON n.oid = p.pronamespace
            JOIN pg_language l ON l.oid = p.prolang
            LEFT JOIN pg_description d
                ON d.objoid = p.oid AND d.classoid = 'pg_proc'::regclass
            WHERE n.nspname = %s
              AND p.prokind IN ('f', 'p', 'a', 'w')
              AND NOT EXISTS (
                  SELECT 1 FROM pg_depend dep
                  WHERE dep.objid = p.oid AND dep.deptype = 'e'
              )
            ORDER BY p.proname, pg_get_function_identity_arguments(p.oid)
        """
        functions = []
        for row in await self._fetch(query, (schema_name,)):
            (
                name,
                arguments,
                return_type,
                language,
                kind,
                volatility,
                is_strict,
                security_definer,
                definition,
                owner,
                comment,
            ) = row
            functions.append(
                FunctionSchema(
                    name=name,
                    arguments=arguments or "",
                    return_type=return_type,
                    language=language,
                    kind=_CALLABLE_KINDS.get(kind, CallableKind.FUNCTION),
                    volatility=_VOLATILITY.get(volatility, Volatility.VOLATILE),
                    is_strict=is_strict,
                    security_definer=security_definer,
                    definition=definition,
                    owner=owner,
                    comment=comment,
                )
            )
        return functions

    async def _get_sequences(self, schema_name: str) -> list[SequenceSchema]:
        query = """
            SELECT c.relname,
                   pg_catalog.format_type(s.seqtypid, NULL),
                   s.seqstart,
                   s.seqincrement,
                   s.seqmin,
                   s.seqmax,
                   s.seqcache,
                   s.seqcycle,
                   (
                       SELECT t.relname || '.' || a.attname
                       FROM pg_depend dep
                       JOIN pg_class t ON t.oid = dep.refobjid
                       JOIN pg_attribute a ON a.attrelid = dep.refobjid AND a.attnum = dep.refobjsubid
                       WHERE dep.objid = c.oid
                         AND dep.classid = 'pg_class'::regclass
                         AND dep.deptype IN ('a', 'i')
                       LIMIT 1
                   ),
                   pg_get_userbyid(c.relowner),
                   d.description
            FROM pg_sequence s
            JOIN pg_class c ON c.oid = s.seqrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_description d
                ON d.objoid = c.oid AND d.classoid = 'pg_class'::regclass AND d.objsubid = 0
            WHERE n.nspname = %s
            ORDER BY c.relname
        """
        sequences = []
        for row in await self._fetch(query, (schema_name,)):
            name, data_type, start, increment, min_value, max_value, cache, cycle, owned_by, owner, comment = row
            sequences.append(
                SequenceSchema(
                    name=name,
                    data_type=data_type,
                    start_value=start,
                    increment=increment,
                    min_value=min_value,
                    max_value=max_value,
                    cache_size=cache,
                    cycle=cycle,
                    owned_by=owned_by,
                    owner=owner,
                    comment=comment,
                )
            )
        return sequences

    # ------------------------------------------------------------------
    # Types and extensions
    # ------------------------------------------------------------------

    async def _get_enum_types(self, schema_name: str) -> list[TypeSchema]:
        query = """
            SELECT t.typname,
                   array_agg(e.enumlabel::text ORDER BY e.enumsortorder),
                   pg_get_userbyid(t.typowner),
                   obj_description(t.oid, 'pg_type')
            FROM pg_enum e
            JOIN pg_type t ON t.oid = e.enumtypid
            JOIN pg_namespace n ON n.oid = t.typnamespace
            WHERE n.nspname = %s
            GROUP BY t.oid, t.typname, t.typowner
            ORDER BY t.typname
        """
        return [
            TypeSchema(name=name, kind=TypeKind.ENUM, labels=tuple(labels), owner=owner, comment=comment)
            for name, labels, owner, comment in await self._fetch(query, (schema_name,))
        ]

    async def _get_composite_types(self, schema_name: str) -> list[TypeSchema]:
        """Get standalone composite types (not the row types of relations)."""
        query = """
            SELECT t.typname,
                   ARRAY(
                       SELECT ROW(a.attname::text, pg_catalog.format_type(a.atttypid, a.atttypmod), a.attnum)
                       FROM pg_attribute a
                       WHERE a.attrelid = t.typrelid AND a.attnum > 0 AND NOT a.attisdropped
                       ORDER BY a.attnum
                   ),
                   pg_get_userbyid(t.typowner),
                   obj_description(t.oid, 'pg_type')
            FROM pg_type t
            JOIN pg_namespace n ON n.oid = t.typnamespace
            JOIN pg_class c ON c.oid = t.typrelid
            WHERE n.nspname = %s
              AND t.typtype = 'c'
              AND c.relkind = 'c'
            ORDER BY t.typname
        """
        return [
            TypeSchema(
                name=name,
                kind=TypeKind.COMPOSITE,
                attributes=tuple(CompositeAttribute(name=a[0], data_type=a[1], position=a[2]) for a in attrs),
                owner=owner,
                comment=comment,
            )
            for name, attrs, owner, comment in await self._fetch(query, (schema_name,))
        ]

    async def _get_domains(self, schema_name: str) -> list[TypeSchema]:
        query = """
            SELECT t.typname,
                   pg_catalog.format_type(t.typbasetype, t.typtypmod),
                   t.typnotnull,
                   t.typdefault,
                   ARRAY(
                       SELECT pg_get_constraintdef(c.oid, true)
                       FROM pg_constraint c
                       WHERE c.contypid = t.oid AND c.contype = 'c'
                       ORDER BY c.conname
                   ),
                   pg_get_userbyid(t.typowner),
                   obj_description(t.oid, 'pg_type')
            FROM pg_type t
            JOIN pg_namespace n ON n.oid = t.typnamespace
            WHERE n.nspname = %s
              AND t.typtype = 'd'
            ORDER BY t.typname
        """
        return [
            TypeSchema(
                name=name,
                kind=TypeKind.DOMAIN,
                base_type=base_type,
                not_null=not_null,
                default=default,
                constraints=tuple(constraints),
                owner=owner,
                comment=comment,
            )
            for name, base_type, not_null, default, constraints, owner, comment in await self._fetch(
                query, (schema_name,)
            )
        ]

    async def _get_range_types(self, schema_name: str) -> list[TypeSchema]:
        query = """
            SELECT t.typname,
                   pg_catalog.format_type(r.rngsubtype, NULL),
                   pg_get_userbyid(t.typowner),
                   obj_description(t.oid, 'pg_type')
            FROM pg_range r
            JOIN pg_type t ON t.oid = r.rngtypid
            JOIN pg_namespace n ON n.oid = t.typnamespace
            WHERE n.nspname = %s
            ORDER BY t.typname
        """
        return [
            TypeSchema(name=name, kind=TypeKind.RANGE, subtype=subtype, owner=owner, comment=comment)
            for name, subtype, owner, comment in await self._fetch(query, (schema_name,))
        ]

    async def _get_extensions(self) -> list[ExtensionSchema]:
        query = """
            SELECT extname, extversion
            FROM pg_extension
            ORDER BY extname
        """
        return [ExtensionSchema(name=name, version=version) for name, version in await self._fetch(query)]
