"""Map resource specs to their statement builders."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from src.mz_engine.ddl.base import StatementBuilder
from src.mz_engine.ddl.cluster import ClusterBuilder, ClusterReplicaBuilder
from src.mz_engine.ddl.connection import ConnectionBuilder
from src.mz_engine.ddl.database import DatabaseBuilder, SchemaBuilder
from src.mz_engine.ddl.secret import SecretBuilder
from src.mz_engine.ddl.sink import SinkBuilder
from src.mz_engine.ddl.source import SourceBuilder
from src.mz_engine.ddl.table import IndexBuilder, TableBuilder
from src.mz_engine.ddl.view import MaterializedViewBuilder, ViewBuilder
from src.mz_engine.errors import SpecError
from src.mz_engine.models import (
    ClusterReplicaSpec,
    ClusterSpec,
    ConnectionSpec,
    DatabaseSpec,
    IndexSpec,
    MaterializedViewSpec,
    SchemaSpec,
    SecretSpec,
    SinkSpec,
    SourceSpec,
    TableSpec,
    ViewSpec,
)

BUILDERS: Mapping[type, type[StatementBuilder[Any]]] = MappingProxyType(
    {
        DatabaseSpec: DatabaseBuilder,
        SchemaSpec: SchemaBuilder,
        ClusterSpec: ClusterBuilder,
        ClusterReplicaSpec: ClusterReplicaBuilder,
        SecretSpec: SecretBuilder,
        ConnectionSpec: ConnectionBuilder,
        SourceSpec: SourceBuilder,
        SinkSpec: SinkBuilder,
        ViewSpec: ViewBuilder,
        MaterializedViewSpec: MaterializedViewBuilder,
        TableSpec: TableBuilder,
        IndexSpec: IndexBuilder,
    }
)


def builder_for(spec: Any) -> StatementBuilder[Any]:
    """Return a fresh builder for `spec`. Raises SpecError for unknown spec types."""
    try:
        builder_class = BUILDERS[type(spec)]
    except KeyError:
        raise SpecError(f"No statement builder for {type(spec).__name__}") from None
    return builder_class(spec)
