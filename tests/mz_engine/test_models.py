import dataclasses

import pytest

from src.enums import ConnectionKind, NameScope, ObjectType, SourceKind
from src.mz_engine.models import (
    ClusterSpec,
    ConnectionSpec,
    ObjectName,
    SecretSpec,
    SourceSpec,
    ValueOrSecret,
    is_populated,
    populated_fields,
)


def test_object_name_defaults_and_rename():
    name = ObjectName("orders")
    assert (name.database_name, name.schema_name) == ("materialize", "public")

    renamed = name.renamed("orders_v2")
    assert renamed == ObjectName("orders_v2")
    assert name.name == "orders"  # original untouched


@pytest.mark.parametrize("bad", ["", "   "])
def test_object_name_rejects_empty(bad):
    with pytest.raises(ValueError):
        ObjectName(bad)


def test_value_or_secret_requires_exactly_one():
    assert ValueOrSecret(text="u").text == "u"
    assert ValueOrSecret(secret=ObjectName("pw")).secret == ObjectName("pw")
    with pytest.raises(ValueError):
        ValueOrSecret()
    with pytest.raises(ValueError):
        ValueOrSecret(text="u", secret=ObjectName("pw"))


def test_specs_are_frozen():
    spec = ClusterSpec(name=ObjectName("c"), size="25cc")
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.size = "50cc"  # type: ignore[misc]


def test_secret_value_is_not_in_repr():
    spec = SecretSpec(name=ObjectName("pw"), value="hunter2")
    assert "hunter2" not in repr(spec)


def test_populated_means_different_from_default():
    spec = ConnectionSpec(
        name=ObjectName("c"),
        kind=ConnectionKind.POSTGRES,
        host="h",
        validate=True,  # equal to the default, so not populated
    )
    assert is_populated(spec, "host")
    assert not is_populated(spec, "port")
    assert not is_populated(spec, "validate")
    assert populated_fields(spec) == ("name", "kind", "host")


def test_populated_booleans_and_tuples():
    spec = SourceSpec(
        name=ObjectName("s"),
        kind=SourceKind.KAFKA,
        include_key=True,
        text_columns=(),
    )
    assert is_populated(spec, "include_key")
    assert not is_populated(spec, "include_offset")
    assert not is_populated(spec, "text_columns")


@pytest.mark.parametrize(
    "object_type,scope",
    [
        (ObjectType.DATABASE, NameScope.ROOT),
        (ObjectType.CLUSTER, NameScope.ROOT),
        (ObjectType.SCHEMA, NameScope.DATABASE),
        (ObjectType.CLUSTER_REPLICA, NameScope.CLUSTER),
        (ObjectType.SOURCE, NameScope.SCHEMA),
        (ObjectType.INDEX, NameScope.SCHEMA),
    ],
)
def test_object_type_scope(object_type, scope):
    assert object_type.scope == scope
