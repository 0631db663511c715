"""
Desired-state resource specifications.

Each spec is a frozen dataclass describing one catalog object. A field is
*populated* when its value differs from the field's declared default; the
statement builders only render clauses for populated fields.

Composite types (connections, sources) carry an explicit `kind`. Which fields
belong to which kind is declared by the builders' clause tables, not here.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from functools import cache
from typing import Any

from src.constants import DEFAULT_DATABASE, DEFAULT_SCHEMA
from src.enums import ConnectionKind, SourceKind


# -----------------------------
# Names and references
# -----------------------------


@dataclass(frozen=True, slots=True)
class ObjectName:
    """Name triple of a catalog object. Not stable across renames."""

    name: str
    schema_name: str = DEFAULT_SCHEMA
    database_name: str = DEFAULT_DATABASE

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise ValueError("Object name must not be empty.")

    def renamed(self, new_name: str) -> ObjectName:
        return dataclasses.replace(self, name=new_name)


@dataclass(frozen=True, slots=True)
class ValueOrSecret:
    """Either an inline text value or a reference to a secret."""

    text: str | None = None
    secret: ObjectName | None = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.secret is None):
            raise ValueError("Exactly one of text or secret must be set.")


@dataclass(frozen=True, slots=True)
class KafkaBroker:
    """One Kafka broker, optionally reached through an AWS PrivateLink."""

    address: str
    privatelink: ObjectName | None = None
    target_group_port: int | None = None
    availability_zone: str | None = None


@dataclass(frozen=True, slots=True)
class SourceTable:
    """Upstream table to ingest, with an optional local alias."""

    name: str
    alias: str | None = None


@dataclass(frozen=True, slots=True)
class TableColumn:
    name: str
    type: str
    nullable: bool = True


@dataclass(frozen=True, slots=True)
class IndexColumn:
    name: str
    descending: bool = False


# -----------------------------
# Resource specs
# -----------------------------


@dataclass(frozen=True)
class DatabaseSpec:
    name: ObjectName


@dataclass(frozen=True)
class SchemaSpec:
    name: ObjectName


@dataclass(frozen=True)
class ClusterSpec:
    """Managed cluster. Without a size it is created with no replicas."""

    name: ObjectName
    size: str | None = None
    disk: bool = False
    replication_factor: int | None = None
    availability_zones: tuple[str, ...] = ()
    introspection_interval: str | None = None
    introspection_debugging: bool = False


@dataclass(frozen=True)
class ClusterReplicaSpec:
    name: ObjectName
    cluster_name: str
    size: str | None = None
    availability_zone: str | None = None
    introspection_interval: str | None = None
    introspection_debugging: bool = False
    idle_arrangement_merge_effort: int | None = None


@dataclass(frozen=True)
class SecretSpec:
    name: ObjectName
    value: str = field(repr=False)


@dataclass(frozen=True)
class ConnectionSpec:
    """
    Connection of one `kind`. Only the fields of that kind may be populated.

    Field use by kind:
    - KAFKA: brokers, ssh_tunnel, progress_topic, ssl_*, sasl_*, validate
    - POSTGRES: host, port, user, password, database, ssl_mode, ssh_tunnel,
      ssl_*, aws_privatelink, validate
    - SSH TUNNEL: host, user, port
    - CONFLUENT SCHEMA REGISTRY: url, user, password, ssl_*, aws_privatelink,
      ssh_tunnel, validate
    - AWS PRIVATELINK: service_name, availability_zones
    """

    name: ObjectName
    kind: ConnectionKind
    host: str | None = None
    port: int | None = None
    user: ValueOrSecret | None = None
    password: ObjectName | None = None
    database: str | None = None
    ssl_mode: str | None = None
    ssh_tunnel: ObjectName | None = None
    ssl_certificate_authority: ValueOrSecret | None = None
    ssl_certificate: ValueOrSecret | None = None
    ssl_key: ObjectName | None = None
    aws_privatelink: ObjectName | None = None
    brokers: tuple[KafkaBroker, ...] = ()
    progress_topic: str | None = None
    sasl_mechanisms: str | None = None
    sasl_username: ValueOrSecret | None = None
    sasl_password: ObjectName | None = None
    url: str | None = None
    service_name: str | None = None
    availability_zones: tuple[str, ...] = ()
    validate: bool = True


@dataclass(frozen=True)
class SourceSpec:
    """
    Source of one `kind`. Only the fields of that kind may be populated.

    Field use by kind:
    - KAFKA: connection, topic, format, schema_registry_connection,
      include_key/partition/offset/timestamp, envelope
    - POSTGRES: connection, publication, text_columns, tables
    - LOAD GENERATOR: load_generator_type, tick_interval, scale_factor,
      max_cardinality, tables
    """

    name: ObjectName
    kind: SourceKind
    cluster_name: str | None = None
    size: str | None = None
    connection: ObjectName | None = None
    topic: str | None = None
    format: str | None = None
    schema_registry_connection: ObjectName | None = None
    include_key: bool = False
    include_partition: bool = False
    include_offset: bool = False
    include_timestamp: bool = False
    envelope: str | None = None
    publication: str | None = None
    text_columns: tuple[str, ...] = ()
    tables: tuple[SourceTable, ...] = ()
    load_generator_type: str | None = None
    tick_interval: str | None = None
    scale_factor: float | None = None
    max_cardinality: int | None = None


@dataclass(frozen=True)
class SinkSpec:
    """Kafka sink reading from `from_item`."""

    name: ObjectName
    from_item: ObjectName
    connection: ObjectName
    topic: str
    cluster_name: str | None = None
    size: str | None = None
    key: tuple[str, ...] = ()
    format: str | None = None
    schema_registry_connection: ObjectName | None = None
    avro_key_fullname: str | None = None
    avro_value_fullname: str | None = None
    envelope: str | None = None
    snapshot: bool = True


@dataclass(frozen=True)
class ViewSpec:
    name: ObjectName
    statement: str


@dataclass(frozen=True)
class MaterializedViewSpec:
    name: ObjectName
    statement: str
    cluster_name: str | None = None


@dataclass(frozen=True)
class TableSpec:
    name: ObjectName
    columns: tuple[TableColumn, ...]


@dataclass(frozen=True)
class IndexSpec:
    """Index on `on`. Indexes live in the schema of the indexed object."""

    name: ObjectName
    on: ObjectName
    cluster_name: str
    columns: tuple[IndexColumn, ...] = ()
    method: str = "ARRANGEMENT"


ResourceSpec = (
    DatabaseSpec
    | SchemaSpec
    | ClusterSpec
    | ClusterReplicaSpec
    | SecretSpec
    | ConnectionSpec
    | SourceSpec
    | SinkSpec
    | ViewSpec
    | MaterializedViewSpec
    | TableSpec
    | IndexSpec
)


# -----------------------------
# Field helpers
# -----------------------------

_MISSING = object()


@cache
def _field_defaults(spec_type: type) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for spec_field in dataclasses.fields(spec_type):
        if spec_field.default is not dataclasses.MISSING:
            defaults[spec_field.name] = spec_field.default
        elif spec_field.default_factory is not dataclasses.MISSING:
            defaults[spec_field.name] = spec_field.default_factory()
        else:
            defaults[spec_field.name] = _MISSING
    return defaults


def is_populated(spec: Any, field_name: str) -> bool:
    """True if `field_name` holds something other than its declared default."""
    default = _field_defaults(type(spec))[field_name]
    value = getattr(spec, field_name)
    if default is _MISSING:
        return value is not None
    return value != default


def populated_fields(spec: Any) -> tuple[str, ...]:
    """Names of all populated fields, in declaration order."""
    return tuple(name for name in _field_defaults(type(spec)) if is_populated(spec, name))
