from __future__ import annotations

from typing import Any

import pytest

from src.enums import ObjectType
from src.mz_engine.catalog.reader import CatalogReader
from src.mz_engine.catalog.states import CanonicalAttributes
from src.mz_engine.errors import AmbiguousIdentityError
from src.mz_engine.identifiers import ObjectIdentity

# ---------- fakes ----------


class ScriptedConnection:
    """Returns queued result sets for query() and records every call."""

    def __init__(self, *results: list[dict[str, Any]]) -> None:
        self._results = list(results)
        self.queries: list[str] = []

    def execute(self, statement: str) -> None:
        raise AssertionError("the reader never executes statements")

    def query(self, query: str) -> list[dict[str, Any]]:
        self.queries.append(query)
        return self._results.pop(0)


# ---------- tests ----------


def test_resolve_identity_returns_opaque_identity():
    connection = ScriptedConnection([{"id": "u42"}])
    identity = CatalogReader(connection).resolve_identity(
        ObjectType.SECRET, ("materialize", "public", "pw")
    )
    assert identity == ObjectIdentity("u42")
    assert "mz_secrets.name = 'pw'" in connection.queries[0]


def test_resolve_identity_none_when_missing():
    reader = CatalogReader(ScriptedConnection([]))
    assert reader.resolve_identity(ObjectType.CLUSTER, ("c",)) is None


def test_resolve_identity_rejects_duplicates():
    reader = CatalogReader(ScriptedConnection([{"id": "u1"}, {"id": "u2"}]))
    with pytest.raises(AmbiguousIdentityError) as excinfo:
        reader.resolve_identity(ObjectType.CLUSTER, ("c",))
    assert excinfo.value.row_count == 2


def test_read_builds_canonical_attributes():
    row = {
        "id": "u3",
        "name": "events",
        "schema_name": "public",
        "database_name": "materialize",
        "source_type": "kafka",
        "size": None,
        "connection_name": "kafka_conn",
        "cluster_name": "ingest",
    }
    attributes = CatalogReader(ScriptedConnection([row])).read(
        ObjectType.SOURCE, ObjectIdentity("u3")
    )

    assert isinstance(attributes, CanonicalAttributes)
    assert attributes.identity == ObjectIdentity("u3")
    assert attributes.name == "events"
    assert attributes.get("cluster_name") == "ingest"
    assert attributes.get("connection_name") == "kafka_conn"
    assert "name" not in attributes.properties
    assert attributes.object_name().name == "events"


def test_read_returns_none_when_dropped_out_of_band():
    reader = CatalogReader(ScriptedConnection([]))
    assert reader.read(ObjectType.VIEW, ObjectIdentity("u9")) is None


def test_list_objects_returns_every_row():
    rows = [
        {"id": "u1", "name": "a", "schema_name": "public", "database_name": "materialize"},
        {"id": "u2", "name": "b", "schema_name": "staging", "database_name": "materialize"},
    ]
    connection = ScriptedConnection(rows)
    secrets = CatalogReader(connection).list_objects(ObjectType.SECRET, database="materialize")

    assert [secret.identity for secret in secrets] == [ObjectIdentity("u1"), ObjectIdentity("u2")]
    assert [secret.schema_name for secret in secrets] == ["public", "staging"]
    assert "WHERE mz_databases.name = 'materialize'" in connection.queries[0]


def test_list_objects_empty_catalog():
    reader = CatalogReader(ScriptedConnection([]))
    assert reader.list_objects(ObjectType.CLUSTER_REPLICA, cluster="c") == []
