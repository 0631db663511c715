"""Enumerations used throughout the engine."""

from enum import StrEnum


class NameScope(StrEnum):
    """Where an object's name lives, which fixes how many parts it is quoted with."""

    ROOT = "root"  # "name"
    DATABASE = "database"  # "database"."name"
    SCHEMA = "schema"  # "database"."schema"."name"
    CLUSTER = "cluster"  # "cluster"."name"


class ObjectType(StrEnum):
    """Catalog object types; the value is the SQL keyword."""

    DATABASE = "DATABASE"
    SCHEMA = "SCHEMA"
    CLUSTER = "CLUSTER"
    CLUSTER_REPLICA = "CLUSTER REPLICA"
    SECRET = "SECRET"
    CONNECTION = "CONNECTION"
    SOURCE = "SOURCE"
    SINK = "SINK"
    VIEW = "VIEW"
    MATERIALIZED_VIEW = "MATERIALIZED VIEW"
    TABLE = "TABLE"
    INDEX = "INDEX"

    @property
    def scope(self) -> NameScope:
        """Name scope of this object type."""
        mapping = {
            ObjectType.DATABASE: NameScope.ROOT,
            ObjectType.CLUSTER: NameScope.ROOT,
            ObjectType.SCHEMA: NameScope.DATABASE,
            ObjectType.CLUSTER_REPLICA: NameScope.CLUSTER,
        }
        return mapping.get(self, NameScope.SCHEMA)


class ConnectionKind(StrEnum):
    """Connection kinds; the value follows `TO` in CREATE CONNECTION."""

    KAFKA = "KAFKA"
    POSTGRES = "POSTGRES"
    SSH_TUNNEL = "SSH TUNNEL"
    CONFLUENT_SCHEMA_REGISTRY = "CONFLUENT SCHEMA REGISTRY"
    AWS_PRIVATELINK = "AWS PRIVATELINK"


class SourceKind(StrEnum):
    """Source kinds; the value follows `FROM` in CREATE SOURCE."""

    KAFKA = "KAFKA"
    POSTGRES = "POSTGRES"
    LOAD_GENERATOR = "LOAD GENERATOR"


class DropBehavior(StrEnum):
    """Dependent-object handling for DROP."""

    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"


class ProviderMode(StrEnum):
    """How the provider reaches the control plane."""

    SELF_HOSTED = "self-hosted"
    SAAS = "saas"
