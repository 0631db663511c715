"""
Catalog relations per object type.

Each entry says which introspection table holds the object, how to reach its
schema (directly, or through an owning relation), and which computed columns
to read back. Computed columns whose relationship is optional (an object may
have no cluster or no connection) come through LEFT JOINs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from src.enums import NameScope, ObjectType


@dataclass(frozen=True)
class Join:
    table: str
    on: str


@dataclass(frozen=True)
class Column:
    expression: str
    alias: str


@dataclass(frozen=True)
class CatalogRelation:
    """Where one object type lives in the catalog."""

    table: str
    scope: NameScope
    owner: Join | None = None  # relation carrying schema_id when `table` has none
    columns: tuple[Column, ...] = ()
    optional_joins: tuple[Join, ...] = ()

    @property
    def schema_holder(self) -> str:
        return self.owner.table if self.owner else self.table


def _cluster_of(table: str) -> Join:
    return Join("mz_clusters", f"{table}.cluster_id = mz_clusters.id")


CATALOG_RELATIONS: Mapping[ObjectType, CatalogRelation] = MappingProxyType(
    {
        ObjectType.DATABASE: CatalogRelation("mz_databases", NameScope.ROOT),
        ObjectType.SCHEMA: CatalogRelation("mz_schemas", NameScope.DATABASE),
        ObjectType.CLUSTER: CatalogRelation(
            "mz_clusters",
            NameScope.ROOT,
            columns=(
                Column("mz_clusters.size", "size"),
                Column("mz_clusters.replication_factor", "replication_factor"),
                Column("mz_clusters.managed", "managed"),
            ),
        ),
        ObjectType.CLUSTER_REPLICA: CatalogRelation(
            "mz_cluster_replicas",
            NameScope.CLUSTER,
            columns=(
                Column("mz_cluster_replicas.size", "size"),
                Column("mz_cluster_replicas.availability_zone", "availability_zone"),
            ),
        ),
        ObjectType.SECRET: CatalogRelation("mz_secrets", NameScope.SCHEMA),
        ObjectType.CONNECTION: CatalogRelation(
            "mz_connections",
            NameScope.SCHEMA,
            columns=(Column("mz_connections.type", "connection_type"),),
        ),
        ObjectType.SOURCE: CatalogRelation(
            "mz_sources",
            NameScope.SCHEMA,
            columns=(
                Column("mz_sources.type", "source_type"),
                Column("mz_sources.size", "size"),
                Column("mz_connections.name", "connection_name"),
                Column("mz_clusters.name", "cluster_name"),
            ),
            optional_joins=(
                Join("mz_connections", "mz_sources.connection_id = mz_connections.id"),
                _cluster_of("mz_sources"),
            ),
        ),
        ObjectType.SINK: CatalogRelation(
            "mz_sinks",
            NameScope.SCHEMA,
            columns=(
                Column("mz_sinks.type", "sink_type"),
                Column("mz_sinks.size", "size"),
                Column("mz_connections.name", "connection_name"),
                Column("mz_clusters.name", "cluster_name"),
            ),
            optional_joins=(
                Join("mz_connections", "mz_sinks.connection_id = mz_connections.id"),
                _cluster_of("mz_sinks"),
            ),
        ),
        ObjectType.VIEW: CatalogRelation("mz_views", NameScope.SCHEMA),
        ObjectType.MATERIALIZED_VIEW: CatalogRelation(
            "mz_materialized_views",
            NameScope.SCHEMA,
            columns=(Column("mz_clusters.name", "cluster_name"),),
            optional_joins=(_cluster_of("mz_materialized_views"),),
        ),
        ObjectType.TABLE: CatalogRelation("mz_tables", NameScope.SCHEMA),
        ObjectType.INDEX: CatalogRelation(
            "mz_indexes",
            NameScope.SCHEMA,
            owner=Join("mz_objects", "mz_indexes.on_id = mz_objects.id"),
            columns=(
                Column("mz_objects.name", "on_name"),
                Column("mz_clusters.name", "cluster_name"),
            ),
            optional_joins=(_cluster_of("mz_indexes"),),
        ),
    }
)


def relation_for(object_type: ObjectType) -> CatalogRelation:
    return CATALOG_RELATIONS[ObjectType(object_type)]
