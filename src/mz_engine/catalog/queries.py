"""
Catalog introspection SQL builders.

Two symmetric queries per object type:
- forward: name parts -> id (used right after CREATE)
- reverse: id -> name parts + computed columns (refresh / import)

plus a listing query that returns the reverse-lookup columns for every object
of a type, optionally narrowed to one database, schema or cluster.

Conventions:
- Name parts are passed outermost first, exactly as the statement builders
  produce them: (database, schema, name), (database, name), (cluster, name)
  or (name,).
- Every value in a WHERE clause goes through `quote_literal`.
- Output columns are aliased: id, name, schema_name, database_name,
  cluster_name (replicas only), then the relation's computed columns.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.enums import NameScope, ObjectType
from src.mz_engine.catalog.relations import CatalogRelation, relation_for
from src.mz_engine.identifiers import ObjectIdentity, quote_literal

_EXPECTED_PARTS = {
    NameScope.ROOT: 1,
    NameScope.DATABASE: 2,
    NameScope.CLUSTER: 2,
    NameScope.SCHEMA: 3,
}


def sql_select_identity(object_type: ObjectType, name_parts: Sequence[str]) -> str:
    """
    Return the forward lookup for one object.

    Zero rows: not found. More than one row: names are not unique, which the
    caller treats as an error.
    """
    relation = relation_for(object_type)
    parts = tuple(name_parts)
    expected = _EXPECTED_PARTS[relation.scope]
    if len(parts) != expected:
        raise ValueError(
            f"{object_type} names have {expected} part(s), got {len(parts)}: {parts!r}"
        )

    conditions = [f"{relation.table}.name = {quote_literal(parts[-1])}"]
    if relation.scope == NameScope.SCHEMA:
        conditions.append(f"mz_schemas.name = {quote_literal(parts[1])}")
        conditions.append(f"mz_databases.name = {quote_literal(parts[0])}")
    elif relation.scope == NameScope.DATABASE:
        conditions.append(f"mz_databases.name = {quote_literal(parts[0])}")
    elif relation.scope == NameScope.CLUSTER:
        conditions.append(f"mz_clusters.name = {quote_literal(parts[0])}")

    return _select(
        [f"{relation.table}.id AS id"],
        _parent_joins(relation),
        relation,
        conditions,
    )


def sql_select_attributes(object_type: ObjectType, identity: ObjectIdentity) -> str:
    """Return the reverse lookup: current name parts and computed columns for `identity`."""
    relation = relation_for(object_type)
    return _select(
        _attribute_projection(relation),
        _attribute_joins(relation),
        relation,
        [f"{relation.table}.id = {quote_literal(str(identity))}"],
    )


def sql_select_list(
    object_type: ObjectType,
    *,
    database: str | None = None,
    schema: str | None = None,
    cluster: str | None = None,
) -> str:
    """
    Return every object of one type, with the same columns as the reverse lookup.

    Filters are optional and only apply where the type's name scope has that
    parent: `database` and `schema` for schema-scoped objects, `database` for
    schemas, `cluster` for replicas. Rows are ordered by name parts.
    """
    relation = relation_for(object_type)
    filters = {"database": database, "schema": schema, "cluster": cluster}
    allowed = _LIST_FILTERS[relation.scope]
    unsupported = sorted(key for key, value in filters.items() if value and key not in allowed)
    if unsupported:
        raise ValueError(f"{object_type} cannot be filtered by: {', '.join(unsupported)}")

    conditions = [
        f"{allowed[key]}.name = {quote_literal(value)}"
        for key, value in filters.items()
        if value and key in allowed
    ]
    order = [*allowed.values(), relation.table]
    return _select(
        _attribute_projection(relation),
        _attribute_joins(relation),
        relation,
        conditions,
        order_by=[f"{table}.name" for table in order],
    )


# ---------- helpers ----------

# Filter keyword -> catalog table whose name it matches, outermost first.
_LIST_FILTERS = {
    NameScope.ROOT: {},
    NameScope.DATABASE: {"database": "mz_databases"},
    NameScope.CLUSTER: {"cluster": "mz_clusters"},
    NameScope.SCHEMA: {"database": "mz_databases", "schema": "mz_schemas"},
}


def _attribute_projection(relation: CatalogRelation) -> list[str]:
    projection = [f"{relation.table}.id AS id", f"{relation.table}.name AS name"]
    if relation.scope == NameScope.SCHEMA:
        projection += ["mz_schemas.name AS schema_name", "mz_databases.name AS database_name"]
    elif relation.scope == NameScope.DATABASE:
        projection.append("mz_databases.name AS database_name")
    elif relation.scope == NameScope.CLUSTER:
        projection.append("mz_clusters.name AS cluster_name")
    projection += [f"{column.expression} AS {column.alias}" for column in relation.columns]
    return projection


def _attribute_joins(relation: CatalogRelation) -> list[str]:
    joins = _parent_joins(relation)
    joins += [f"LEFT JOIN {join.table} ON {join.on}" for join in relation.optional_joins]
    return joins


def _parent_joins(relation: CatalogRelation) -> list[str]:
    joins: list[str] = []
    if relation.owner is not None:
        joins.append(f"JOIN {relation.owner.table} ON {relation.owner.on}")
    if relation.scope == NameScope.SCHEMA:
        joins.append(f"JOIN mz_schemas ON {relation.schema_holder}.schema_id = mz_schemas.id")
        joins.append("JOIN mz_databases ON mz_schemas.database_id = mz_databases.id")
    elif relation.scope == NameScope.DATABASE:
        joins.append(f"JOIN mz_databases ON {relation.table}.database_id = mz_databases.id")
    elif relation.scope == NameScope.CLUSTER:
        joins.append(f"JOIN mz_clusters ON {relation.table}.cluster_id = mz_clusters.id")
    return joins


def _select(
    projection: list[str],
    joins: list[str],
    relation: CatalogRelation,
    conditions: list[str],
    *,
    order_by: list[str] | None = None,
) -> str:
    pieces = [f"SELECT {', '.join(projection)}", f"FROM {relation.table}", *joins]
    if conditions:
        pieces.append(f"WHERE {' AND '.join(conditions)}")
    if order_by:
        pieces.append(f"ORDER BY {', '.join(order_by)}")
    return " ".join(pieces) + ";"
