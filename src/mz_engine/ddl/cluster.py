"""
Cluster and cluster replica statements.

Clusters are managed when they have a size; a cluster without a size is
created with an empty replica set and accepts no other options. Replicas are
named within their cluster ("cluster"."replica").
"""

from __future__ import annotations

from src.enums import ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import Clause, check_fields, render_clauses, statement
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import quote_literal, quote_literal_list
from src.mz_engine.models import ClusterReplicaSpec, ClusterSpec, populated_fields


def _bool(value: bool) -> str:
    return "TRUE" if value else "FALSE"


_CLUSTER_OPTIONS: tuple[Clause, ...] = (
    Clause(("size",), lambda s: f"SIZE {quote_literal(s.size)}"),
    Clause(("disk",), lambda s: "DISK"),
    Clause(("replication_factor",), lambda s: f"REPLICATION FACTOR {int(s.replication_factor)}"),
    Clause(
        ("availability_zones",),
        lambda s: f"AVAILABILITY ZONES = [{quote_literal_list(s.availability_zones)}]",
    ),
    Clause(
        ("introspection_interval",),
        lambda s: f"INTROSPECTION INTERVAL = {quote_literal(s.introspection_interval)}",
    ),
    Clause(("introspection_debugging",), lambda s: "INTROSPECTION DEBUGGING = TRUE"),
)

_REPLICA_OPTIONS: tuple[Clause, ...] = (
    Clause(("size",), lambda s: f"SIZE = {quote_literal(s.size)}", required=True),
    Clause(
        ("availability_zone",),
        lambda s: f"AVAILABILITY ZONE = {quote_literal(s.availability_zone)}",
    ),
    Clause(
        ("introspection_interval",),
        lambda s: f"INTROSPECTION INTERVAL = {quote_literal(s.introspection_interval)}",
    ),
    Clause(("introspection_debugging",), lambda s: "INTROSPECTION DEBUGGING = TRUE"),
    Clause(
        ("idle_arrangement_merge_effort",),
        lambda s: f"IDLE ARRANGEMENT MERGE EFFORT = {int(s.idle_arrangement_merge_effort)}",
    ),
)


class ClusterBuilder(StatementBuilder[ClusterSpec]):
    object_type = ObjectType.CLUSTER
    resizable = True

    def validate(self) -> None:
        ensure_spec_type(self.spec, ClusterSpec, type(self).__name__)
        options = [name for name in populated_fields(self.spec) if name not in ("name", "size")]
        if self.spec.size is None and options:
            raise SpecError(f"Cluster options require a size: {', '.join(options)}")

    def create(self) -> str:
        """CREATE CLUSTER "c" (SIZE 's', ...); or (REPLICAS ()) without a size."""
        if self.spec.size is None:
            return statement(f"CREATE CLUSTER {self.qualified_name()}", "(REPLICAS ())")
        options = render_clauses(self.spec, _CLUSTER_OPTIONS)
        return statement(f"CREATE CLUSTER {self.qualified_name()}", f"({', '.join(options)})")

    def update_size(self, new_size: str) -> str:
        return self.alter_set(f"SIZE {quote_literal(new_size)}")

    def update_replication_factor(self, replication_factor: int) -> str:
        return self.alter_set(f"REPLICATION FACTOR {int(replication_factor)}")

    def update_availability_zones(self, zones: tuple[str, ...]) -> str:
        return self.alter_set(f"AVAILABILITY ZONES = [{quote_literal_list(zones)}]")

    def update_introspection_interval(self, interval: str | None) -> str:
        # An empty interval disables introspection.
        return self.alter_set(f"INTROSPECTION INTERVAL = {quote_literal(interval or '')}")

    def update_introspection_debugging(self, enabled: bool) -> str:
        return self.alter_set(f"INTROSPECTION DEBUGGING = {_bool(enabled)}")


class ClusterReplicaBuilder(StatementBuilder[ClusterReplicaSpec]):
    object_type = ObjectType.CLUSTER_REPLICA

    def validate(self) -> None:
        ensure_spec_type(self.spec, ClusterReplicaSpec, type(self).__name__)
        check_fields(
            self.spec,
            _REPLICA_OPTIONS,
            label="Cluster replica",
            common=("name", "cluster_name"),
        )

    def _parent_cluster(self) -> str:
        return self.spec.cluster_name

    def create(self) -> str:
        """CREATE CLUSTER REPLICA "c"."r" SIZE = 's'[, ...];"""
        options = render_clauses(self.spec, _REPLICA_OPTIONS)
        return statement(f"CREATE CLUSTER REPLICA {self.qualified_name()}", ", ".join(options))
