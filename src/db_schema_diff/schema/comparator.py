"""Structural comparison of two extracted schemas.

The pure functions here (``compare_snapshots`` and one ``compare_*`` per
category) turn two sets of models into a flat list of ``ObjectDifference``.
``SchemaDiffEngine`` adds orchestration on top: it extracts each category
from both instances through short-lived connections and keeps whatever it
has collected if an instance becomes unreachable part way through.

Usage:
    from db_schema_diff.schema.comparator import SchemaDiffEngine, compare_snapshots

    # Offline, from snapshots you already hold
    result = compare_snapshots(source_snapshot, destination_snapshot, filter=flt)

    # Live, through a connection provider
    engine = SchemaDiffEngine(provider)
    result = await engine.compare("prod", "staging", "public")
    if not result.success:
        print(result.error_message)
"""

import logging
import re
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple, TypeVar, assert_never

from db_schema_diff.schema.ddl import (
    column_definition,
    foreign_key_clause,
    primary_key_clause,
    sequence_ddl,
    table_ddl,
    type_ddl,
    unique_clause,
)
from db_schema_diff.schema.differences import (
    AttributeDifference,
    ObjectDifference,
    ObjectKey,
    SchemaComparisonResult,
)
from db_schema_diff.schema.filter import ComparisonFilter
from db_schema_diff.schema.introspector import SchemaIntrospector
from db_schema_diff.schema.kinds import DifferenceType, ObjectType, Severity
from db_schema_diff.schema.models import (
    ExtensionSchema,
    FunctionSchema,
    SchemaSnapshot,
    SequenceSchema,
    TableSchema,
    TypeKind,
    TypeSchema,
    ViewSchema,
)

if TYPE_CHECKING:
    from db_schema_diff.adapters.base import ConnectionProvider
    from db_schema_diff.config.models import ComparisonProfile

logger = logging.getLogger(__name__)

M = TypeVar("M")

_NO_FILTER = ComparisonFilter()

# MODIFIED severity floor for kinds whose change means drop-and-recreate
_RECREATE_FLOOR: dict[ObjectType, Severity] = {
    ObjectType.CONSTRAINT_FOREIGN: Severity.WARNING,
    ObjectType.TRIGGER: Severity.WARNING,
    ObjectType.VIEW: Severity.WARNING,
    ObjectType.MATERIALIZED_VIEW: Severity.WARNING,
    ObjectType.FUNCTION: Severity.WARNING,
    ObjectType.PROCEDURE: Severity.WARNING,
    ObjectType.TYPE_ENUM: Severity.WARNING,
    ObjectType.TYPE_COMPOSITE: Severity.WARNING,
    ObjectType.TYPE_DOMAIN: Severity.WARNING,
}

# Kinds whose absence dependents rely on
_MISSING_WARNING = frozenset({
    ObjectType.CONSTRAINT_PRIMARY,
    ObjectType.CONSTRAINT_FOREIGN,
    ObjectType.TRIGGER,
    ObjectType.EXTENSION,
})


class CategoryOutcome(NamedTuple):
    """Differences for one category plus counts for the summary."""

    differences: list[ObjectDifference]
    compared: int
    matching: int


# ------------------------------------------------------------------
# Shared helpers
# ------------------------------------------------------------------


def _attrs(*pairs: tuple[str, Any, Any]) -> list[AttributeDifference]:
    """Build attribute differences for every (name, source, destination) that differs."""
    return [AttributeDifference.of(name, src, dst) for name, src, dst in pairs if src != dst]


def _modified_severity(object_type: ObjectType, attributes: Iterable[AttributeDifference]) -> Severity:
    severities = [_RECREATE_FLOOR.get(object_type, Severity.INFO)]
    for attr in attributes:
        if attr.removed or attr.attribute_name == "data_type":
            severities.append(Severity.WARNING)
        elif attr.attribute_name == "nullable" and attr.source_value == "false":
            # Adding NOT NULL
            severities.append(Severity.WARNING)
    return Severity.highest(severities)


def _missing_severity(object_type: ObjectType) -> Severity:
    return Severity.WARNING if object_type in _MISSING_WARNING else Severity.INFO


def _normalize_whitespace(text: str | None) -> str | None:
    if text is None:
        return None
    return " ".join(text.split())


_LITERAL = re.compile(r"'(?:[^']|'')*'(::reg\w+)?")


def _replace_qualifier(text: str, schema_name: str, replacement: str) -> str:
    """Replace ``schema_name.`` where it starts an identifier.

    String literals are left alone unless cast to an object identifier
    type (``'app.orders_id_seq'::regclass``), since those name objects.
    """
    qualifier = re.compile(rf'(?<![\w"$]){re.escape(schema_name)}\.')

    def rewrite(segment: str) -> str:
        return qualifier.sub(lambda _: replacement, segment)

    parts = []
    pos = 0
    for match in _LITERAL.finditer(text):
        parts.append(rewrite(text[pos : match.start()]))
        parts.append(rewrite(match.group(0)) if match.group(1) else match.group(0))
        pos = match.end()
    parts.append(rewrite(text[pos:]))
    return "".join(parts)


def _unqualify(text: str | None, schema_name: str) -> str | None:
    """Strip ``schema.`` qualifiers so definitions compare across schemas."""
    if text is None:
        return None
    return _replace_qualifier(text, schema_name, "")


def _retarget(text: str | None, source_schema: str, destination_schema: str) -> str | None:
    """Point catalog definition text at the destination schema."""
    if text is None or source_schema == destination_schema:
        return text
    return _replace_qualifier(text, source_schema, f"{destination_schema}.")


def _compare_keyed(
    source: dict[ObjectKey, M],
    destination: dict[ObjectKey, M],
    *,
    definition: Callable[[M], str | None],
    attributes: Callable[[M, M], list[AttributeDifference]],
) -> CategoryOutcome:
    """Classify keys as MISSING, EXTRA or MODIFIED.

    Source-only keys come first (in source order), then destination-only,
    then modified ones.
    """
    differences: list[ObjectDifference] = []
    matching = 0

    for key, item in source.items():
        if key not in destination:
            differences.append(
                ObjectDifference(
                    key=key,
                    difference_type=DifferenceType.MISSING,
                    severity=_missing_severity(key.object_type),
                    source_definition=definition(item),
                )
            )

    for key, item in destination.items():
        if key not in source:
            differences.append(
                ObjectDifference(
                    key=key,
                    difference_type=DifferenceType.EXTRA,
                    severity=Severity.BREAKING,
                    destination_definition=definition(item),
                )
            )

    for key, item in source.items():
        if key not in destination:
            continue
        attribute_diffs = attributes(item, destination[key])
        if not attribute_diffs:
            matching += 1
            continue
        differences.append(
            ObjectDifference(
                key=key,
                difference_type=DifferenceType.MODIFIED,
                severity=_modified_severity(key.object_type, attribute_diffs),
                attribute_differences=tuple(attribute_diffs),
                source_definition=definition(item),
                destination_definition=definition(destination[key]),
            )
        )

    compared = len(source.keys() | destination.keys())
    return CategoryOutcome(differences, compared, matching)


# ============================================================================
# Tables
# ============================================================================


def compare_tables(
    source: Sequence[TableSchema],
    destination: Sequence[TableSchema],
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> CategoryOutcome:
    """Compare tables and, for tables on both sides, every nested collection.

    A table missing from the destination produces one TABLE difference
    carrying its full DDL; its columns and constraints are not listed
    separately.
    """
    flt = filter or _NO_FILTER
    if not flt.includes(ObjectType.TABLE):
        return CategoryOutcome([], 0, 0)

    def keyed(tables: Sequence[TableSchema]) -> dict[ObjectKey, TableSchema]:
        return {
            ObjectKey(object_type=ObjectType.TABLE, name=t.name): t
            for t in tables
            if flt.matches(t.name)
        }

    source_map = keyed(source)
    destination_map = keyed(destination)

    outcome = _compare_keyed(
        source_map,
        destination_map,
        definition=lambda t: _retarget(table_ddl(t, source_schema), source_schema, destination_schema),
        attributes=lambda s, d: _attrs(("owner", s.owner, d.owner), ("comment", s.comment, d.comment)),
    )
    differences = list(outcome.differences)
    matching = 0
    for key, table in source_map.items():
        other = destination_map.get(key)
        if other is None:
            continue
        nested = compare_table_structure(table, other, flt, source_schema, destination_schema)
        differences.extend(nested)
        table_modified = any(d.key == key for d in outcome.differences)
        if not nested and not table_modified:
            matching += 1

    return CategoryOutcome(differences, outcome.compared, matching)


def compare_table_structure(
    source: TableSchema,
    destination: TableSchema,
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> list[ObjectDifference]:
    """Compare the nested collections of one table present on both sides."""
    flt = filter or _NO_FILTER
    table = source.name
    differences: list[ObjectDifference] = []

    def key(object_type: ObjectType, name: str) -> ObjectKey:
        return ObjectKey(object_type=object_type, name=name, table=table)

    if flt.includes(ObjectType.COLUMN):
        differences += _compare_keyed(
            {key(ObjectType.COLUMN, c.name): c for c in source.columns},
            {key(ObjectType.COLUMN, c.name): c for c in destination.columns},
            definition=lambda c: _retarget(column_definition(c), source_schema, destination_schema),
            attributes=lambda s, d: _attrs(
                ("data_type", s.data_type, d.data_type),
                ("nullable", s.nullable, d.nullable),
                ("default", s.default, d.default),
                ("comment", s.comment, d.comment),
                ("identity", s.identity, d.identity),
                ("generated", s.generated, d.generated),
            ),
        ).differences

    if flt.includes(ObjectType.CONSTRAINT_PRIMARY):
        src_pk = source.primary_key
        dst_pk = destination.primary_key
        differences += _compare_keyed(
            {key(ObjectType.CONSTRAINT_PRIMARY, src_pk.name): src_pk} if src_pk else {},
            {key(ObjectType.CONSTRAINT_PRIMARY, dst_pk.name): dst_pk} if dst_pk else {},
            definition=primary_key_clause,
            attributes=lambda s, d: _attrs(("columns", s.columns, d.columns)),
        ).differences

    if flt.includes(ObjectType.CONSTRAINT_FOREIGN):
        differences += _compare_keyed(
            {key(ObjectType.CONSTRAINT_FOREIGN, fk.name): fk for fk in source.foreign_keys},
            {key(ObjectType.CONSTRAINT_FOREIGN, fk.name): fk for fk in destination.foreign_keys},
            definition=lambda fk: _retarget(foreign_key_clause(fk), source_schema, destination_schema),
            attributes=lambda s, d: _attrs(
                ("columns", s.columns, d.columns),
                ("referenced_table", s.referenced_table, d.referenced_table),
                ("referenced_columns", s.referenced_columns, d.referenced_columns),
                ("on_update", s.on_update, d.on_update),
                ("on_delete", s.on_delete, d.on_delete),
            ),
        ).differences

    if flt.includes(ObjectType.CONSTRAINT_UNIQUE):
        differences += _compare_keyed(
            {key(ObjectType.CONSTRAINT_UNIQUE, uc.name): uc for uc in source.unique_constraints},
            {key(ObjectType.CONSTRAINT_UNIQUE, uc.name): uc for uc in destination.unique_constraints},
            definition=unique_clause,
            attributes=lambda s, d: _attrs(("columns", s.columns, d.columns)),
        ).differences

    if flt.includes(ObjectType.CONSTRAINT_CHECK):
        differences += _compare_keyed(
            {key(ObjectType.CONSTRAINT_CHECK, cc.name): cc for cc in source.check_constraints},
            {key(ObjectType.CONSTRAINT_CHECK, cc.name): cc for cc in destination.check_constraints},
            definition=lambda cc: cc.expression,
            attributes=lambda s, d: _attrs(("expression", s.expression, d.expression)),
        ).differences

    if flt.includes(ObjectType.INDEX):
        differences += _compare_keyed(
            {key(ObjectType.INDEX, idx.name): idx for idx in source.indexes},
            {key(ObjectType.INDEX, idx.name): idx for idx in destination.indexes},
            definition=lambda idx: _retarget(idx.definition, source_schema, destination_schema),
            attributes=lambda s, d: _attrs(
                ("index_type", s.index_type, d.index_type),
                ("columns", s.columns, d.columns),
                ("unique", s.is_unique, d.is_unique),
                ("where_clause", _normalize_whitespace(s.where_clause), _normalize_whitespace(d.where_clause)),
                (
                    "definition",
                    _unqualify(s.definition, source_schema),
                    _unqualify(d.definition, destination_schema),
                ),
            ),
        ).differences

    if flt.includes(ObjectType.TRIGGER):
        differences += _compare_keyed(
            {key(ObjectType.TRIGGER, tg.name): tg for tg in source.triggers},
            {key(ObjectType.TRIGGER, tg.name): tg for tg in destination.triggers},
            definition=lambda tg: _retarget(tg.definition, source_schema, destination_schema),
            attributes=lambda s, d: _attrs(
                (
                    "definition",
                    _unqualify(s.definition, source_schema),
                    _unqualify(d.definition, destination_schema),
                ),
                ("enabled", s.enabled, d.enabled),
            ),
        ).differences

    return differences


# ============================================================================
# Views, Functions, Sequences
# ============================================================================


def _view_type(view: ViewSchema) -> ObjectType:
    return ObjectType.MATERIALIZED_VIEW if view.is_materialized else ObjectType.VIEW


def compare_views(
    source: Sequence[ViewSchema],
    destination: Sequence[ViewSchema],
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> CategoryOutcome:
    """Compare views by name; the definition is the view's query text."""
    flt = filter or _NO_FILTER
    if not flt.includes(ObjectType.VIEW):
        return CategoryOutcome([], 0, 0)

    source_types = {v.name: _view_type(v) for v in source}

    def keyed(views: Sequence[ViewSchema]) -> dict[ObjectKey, ViewSchema]:
        # Both sides share the source's kind so a view turned materialized is MODIFIED
        return {
            ObjectKey(object_type=source_types.get(v.name, _view_type(v)), name=v.name): v
            for v in views
            if flt.matches(v.name)
        }

    return _compare_keyed(
        keyed(source),
        keyed(destination),
        definition=lambda v: _retarget(v.definition, source_schema, destination_schema),
        attributes=lambda s, d: _attrs(
            ("definition", _unqualify(s.definition, source_schema), _unqualify(d.definition, destination_schema)),
            ("materialized", s.is_materialized, d.is_materialized),
        ),
    )


def _function_type(function: FunctionSchema) -> ObjectType:
    return ObjectType.PROCEDURE if function.is_procedure else ObjectType.FUNCTION


def compare_functions(
    source: Sequence[FunctionSchema],
    destination: Sequence[FunctionSchema],
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> CategoryOutcome:
    """Compare routines keyed by signature, so overloads stay distinct."""
    flt = filter or _NO_FILTER
    if not flt.includes(ObjectType.FUNCTION):
        return CategoryOutcome([], 0, 0)

    def keyed(functions: Sequence[FunctionSchema]) -> dict[ObjectKey, FunctionSchema]:
        return {
            ObjectKey(object_type=_function_type(f), name=f.signature): f
            for f in functions
            if flt.matches(f.name)
        }

    return _compare_keyed(
        keyed(source),
        keyed(destination),
        definition=lambda f: _retarget(f.definition, source_schema, destination_schema),
        attributes=lambda s, d: _attrs(
            ("return_type", s.return_type, d.return_type),
            ("definition", _unqualify(s.definition, source_schema), _unqualify(d.definition, destination_schema)),
            ("language", s.language, d.language),
            ("volatility", s.volatility.value, d.volatility.value),
            ("strict", s.is_strict, d.is_strict),
            ("security_definer", s.security_definer, d.security_definer),
        ),
    )


def compare_sequences(
    source: Sequence[SequenceSchema],
    destination: Sequence[SequenceSchema],
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> CategoryOutcome:
    flt = filter or _NO_FILTER
    if not flt.includes(ObjectType.SEQUENCE):
        return CategoryOutcome([], 0, 0)

    def keyed(sequences: Sequence[SequenceSchema]) -> dict[ObjectKey, SequenceSchema]:
        return {
            ObjectKey(object_type=ObjectType.SEQUENCE, name=s.name): s
            for s in sequences
            if flt.matches(s.name)
        }

    return _compare_keyed(
        keyed(source),
        keyed(destination),
        definition=lambda s: sequence_ddl(s, destination_schema),
        attributes=lambda s, d: _attrs(
            ("data_type", s.data_type, d.data_type),
            ("start_value", s.start_value, d.start_value),
            ("increment", s.increment, d.increment),
            ("min_value", s.min_value, d.min_value),
            ("max_value", s.max_value, d.max_value),
            ("cache_size", s.cache_size, d.cache_size),
            ("cycle", s.cycle, d.cycle),
        ),
    )


# ============================================================================
# Types and Extensions
# ============================================================================


def type_object_type(type_: TypeSchema) -> ObjectType:
    """ObjectType for a user-defined type; range types report as domains."""
    match type_.kind:
        case TypeKind.ENUM:
            return ObjectType.TYPE_ENUM
        case TypeKind.COMPOSITE:
            return ObjectType.TYPE_COMPOSITE
        case TypeKind.DOMAIN | TypeKind.RANGE:
            return ObjectType.TYPE_DOMAIN
        case _:
            assert_never(type_.kind)


def _type_attributes(source: TypeSchema, destination: TypeSchema) -> list[AttributeDifference]:
    if source.kind != destination.kind:
        return _attrs(("kind", source.kind.value, destination.kind.value))

    match source.kind:
        case TypeKind.ENUM:
            return _attrs(("labels", source.labels, destination.labels))
        case TypeKind.COMPOSITE:
            src_attrs = {a.name: a.data_type for a in source.attributes}
            dst_attrs = {a.name: a.data_type for a in destination.attributes}
            ordered = [a.name for a in source.attributes] + [
                a.name for a in destination.attributes if a.name not in src_attrs
            ]
            return _attrs(*((f"attribute.{name}", src_attrs.get(name), dst_attrs.get(name)) for name in ordered))
        case TypeKind.DOMAIN:
            return _attrs(
                ("base_type", source.base_type, destination.base_type),
                ("default", source.default, destination.default),
                ("not_null", source.not_null, destination.not_null),
                ("constraints", source.constraints, destination.constraints),
            )
        case TypeKind.RANGE:
            return _attrs(("subtype", source.subtype, destination.subtype))
        case _:
            assert_never(source.kind)


def compare_types(
    source: Sequence[TypeSchema],
    destination: Sequence[TypeSchema],
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> CategoryOutcome:
    """Compare user-defined types by name.

    A type whose kind differs between sides (say enum vs domain) reports a
    single ``kind`` attribute rather than kind-specific ones.
    """
    flt = filter or _NO_FILTER
    if not flt.includes(ObjectType.TYPE_ENUM):
        return CategoryOutcome([], 0, 0)

    source_types = {t.name: type_object_type(t) for t in source}

    def keyed(types: Sequence[TypeSchema]) -> dict[ObjectKey, TypeSchema]:
        return {
            ObjectKey(object_type=source_types.get(t.name, type_object_type(t)), name=t.name): t
            for t in types
            if flt.matches(t.name)
        }

    return _compare_keyed(
        keyed(source),
        keyed(destination),
        definition=lambda t: type_ddl(t, destination_schema),
        attributes=_type_attributes,
    )


def compare_extensions(
    source: Sequence[ExtensionSchema],
    destination: Sequence[ExtensionSchema],
    filter: ComparisonFilter | None = None,
    source_schema: str = "public",
    destination_schema: str = "public",
) -> CategoryOutcome:
    flt = filter or _NO_FILTER
    if not flt.includes(ObjectType.EXTENSION):
        return CategoryOutcome([], 0, 0)

    def keyed(extensions: Sequence[ExtensionSchema]) -> dict[ObjectKey, ExtensionSchema]:
        return {ObjectKey(object_type=ObjectType.EXTENSION, name=e.name): e for e in extensions}

    return _compare_keyed(
        keyed(source),
        keyed(destination),
        definition=lambda e: f"CREATE EXTENSION IF NOT EXISTS {e.name}",
        attributes=lambda s, d: _attrs(("version", s.version, d.version)),
    )


# ============================================================================
# Snapshot Comparison
# ============================================================================

CompareFn = Callable[..., CategoryOutcome]
ExtractFn = Callable[[SchemaIntrospector, str], Awaitable[Sequence[Any]]]

# Category name, top-level kind, extraction call, comparison. Dependency order.
_CATEGORIES: tuple[tuple[str, ObjectType, ExtractFn, CompareFn, str], ...] = (
    ("extensions", ObjectType.EXTENSION, lambda i, s: i.extract_extensions(), compare_extensions, "extensions"),
    ("types", ObjectType.TYPE_ENUM, lambda i, s: i.extract_types(s), compare_types, "types"),
    ("sequences", ObjectType.SEQUENCE, lambda i, s: i.extract_sequences(s), compare_sequences, "sequences"),
    ("tables", ObjectType.TABLE, lambda i, s: i.extract_tables(s), compare_tables, "tables"),
    ("views", ObjectType.VIEW, lambda i, s: i.extract_views(s), compare_views, "views"),
    ("functions", ObjectType.FUNCTION, lambda i, s: i.extract_functions(s), compare_functions, "functions"),
)


def compare_snapshots(
    source: SchemaSnapshot,
    destination: SchemaSnapshot,
    filter: ComparisonFilter | None = None,
) -> SchemaComparisonResult:
    """Compare two snapshots already in memory.

    Args:
        source: Snapshot describing the desired state.
        destination: Snapshot to be brought in line with ``source``.
        filter: Optional filter; ``None`` compares everything.

    Returns:
        SchemaComparisonResult with every difference found.

    Example:
        >>> result = compare_snapshots(snap, snap)
        >>> result.is_identical
        True
    """
    result = SchemaComparisonResult(
        source_instance=source.instance,
        destination_instance=destination.instance,
        source_schema=source.schema_name,
        destination_schema=destination.schema_name,
        filter=filter,
    )
    flt = filter or _NO_FILTER
    for category, object_type, _, compare_fn, attr in _CATEGORIES:
        if not flt.includes(object_type):
            continue
        outcome = compare_fn(
            getattr(source, attr),
            getattr(destination, attr),
            flt,
            source.schema_name,
            destination.schema_name,
        )
        result.differences.extend(outcome.differences)
        result.summary.add(category, outcome.compared, outcome.matching)
    return result


# ============================================================================
# Live Comparison
# ============================================================================


class SchemaDiffEngine:
    """Compares one schema across two live instances.

    Each category is extracted through its own short-lived connection per
    instance. Query failures inside a category are absorbed by the
    introspector (that category is simply empty). A failure to reach an
    instance stops the run with ``success=False`` and keeps the differences
    from categories already processed.

    Args:
        connection_provider: Resolves an instance name to a connection URL.
        introspector_factory: Callable building an async-context-manager
            introspector from a URL. Defaults to ``SchemaIntrospector``.
        connect_timeout: Seconds allowed per connection attempt.
        excluded_tables: Forwarded to each introspector.
    """

    def __init__(
        self,
        connection_provider: "ConnectionProvider",
        introspector_factory: Callable[..., SchemaIntrospector] = SchemaIntrospector,
        connect_timeout: int = 10,
        excluded_tables: set[str] | None = None,
    ) -> None:
        self._provider = connection_provider
        self._introspector_factory = introspector_factory
        self._connect_timeout = connect_timeout
        self._excluded_tables = excluded_tables

    async def _extract(self, instance: str, schema_name: str, extract: ExtractFn) -> Sequence[Any]:
        url = self._provider.resolve_url(instance)
        introspector = self._introspector_factory(
            url,
            excluded_tables=self._excluded_tables,
            connect_timeout=self._connect_timeout,
        )
        async with introspector:
            return await extract(introspector, schema_name)

    async def compare(
        self,
        source_instance: str,
        destination_instance: str,
        source_schema: str = "public",
        destination_schema: str | None = None,
        filter: ComparisonFilter | None = None,
    ) -> SchemaComparisonResult:
        """Compare ``source_schema`` on one instance with ``destination_schema`` on another.

        Args:
            source_instance: Instance holding the desired state.
            destination_instance: Instance to be reconciled.
            source_schema: Schema name on the source.
            destination_schema: Schema name on the destination (defaults to
                ``source_schema``).
            filter: Optional filter; ``None`` compares everything.

        Returns:
            SchemaComparisonResult. Never raises for connection problems;
            check ``success`` and ``error_message``.
        """
        destination_schema = destination_schema or source_schema
        flt = filter or _NO_FILTER
        result = SchemaComparisonResult(
            source_instance=source_instance,
            destination_instance=destination_instance,
            source_schema=source_schema,
            destination_schema=destination_schema,
            filter=filter,
        )
        logger.info(
            f"Comparing {source_instance}.{source_schema} -> {destination_instance}.{destination_schema}"
        )

        for category, object_type, extract, compare_fn, _ in _CATEGORIES:
            if not flt.includes(object_type):
                continue
            try:
                source_items = await self._extract(source_instance, source_schema, extract)
                destination_items = await self._extract(destination_instance, destination_schema, extract)
            except Exception as e:
                logger.error(f"Comparison stopped while extracting {category}: {e}")
                result.success = False
                result.error_message = f"Failed to extract {category}: {e}"
                break

            outcome = compare_fn(source_items, destination_items, flt, source_schema, destination_schema)
            result.differences.extend(outcome.differences)
            result.summary.add(category, outcome.compared, outcome.matching)
            logger.debug(
                f"{category}: {outcome.compared} compared, {len(outcome.differences)} differences"
            )

        logger.info(
            f"Comparison finished: {result.missing_count} missing, {result.extra_count} extra, "
            f"{result.modified_count} modified"
        )
        return result

    async def compare_profile(self, profile: "ComparisonProfile") -> SchemaComparisonResult:
        """Run the comparison a stored profile describes."""
        return await self.compare(
            profile.source_instance,
            profile.destination_instance,
            profile.source_schema,
            profile.destination_schema,
            profile.filter,
        )
