import pytest

from src.enums import SourceKind
from src.mz_engine.ddl.source import SOURCE_CLAUSES, SourceBuilder
from src.mz_engine.errors import SpecError
from src.mz_engine.models import ObjectName, SourceSpec, SourceTable


def _name(name: str) -> ObjectName:
    return ObjectName(name, schema_name="s", database_name="d")


# ---------- kafka ----------


def test_kafka_source_full():
    spec = SourceSpec(
        name=_name("events"),
        kind=SourceKind.KAFKA,
        cluster_name="ingest",
        connection=_name("kafka_conn"),
        topic="events",
        format="AVRO",
        schema_registry_connection=_name("csr"),
        include_key=True,
        include_timestamp=True,
        envelope="UPSERT",
    )
    assert SourceBuilder(spec).create() == (
        'CREATE SOURCE "d"."s"."events" IN CLUSTER "ingest" FROM '
        'KAFKA CONNECTION "d"."s"."kafka_conn" (TOPIC \'events\') FORMAT AVRO '
        'USING CONFLUENT SCHEMA REGISTRY CONNECTION "d"."s"."csr" '
        "INCLUDE KEY, TIMESTAMP ENVELOPE UPSERT;"
    )


def test_kafka_source_with_size():
    spec = SourceSpec(
        name=_name("events"),
        kind=SourceKind.KAFKA,
        size="3xsmall",
        connection=_name("kafka_conn"),
        topic="events",
    )
    assert SourceBuilder(spec).create() == (
        'CREATE SOURCE "d"."s"."events" FROM KAFKA CONNECTION "d"."s"."kafka_conn" '
        "(TOPIC 'events') WITH (SIZE = '3xsmall');"
    )


def test_kafka_source_requires_topic():
    spec = SourceSpec(name=_name("events"), kind=SourceKind.KAFKA, connection=_name("k"))
    with pytest.raises(SpecError, match="requires: topic"):
        SourceBuilder(spec)


def test_kafka_source_rejects_publication():
    spec = SourceSpec(
        name=_name("events"),
        kind=SourceKind.KAFKA,
        connection=_name("k"),
        topic="t",
        publication="mz_source",
    )
    with pytest.raises(SpecError, match="does not accept: publication"):
        SourceBuilder(spec)


def test_kafka_source_rejects_bad_format_keyword():
    spec = SourceSpec(
        name=_name("events"),
        kind=SourceKind.KAFKA,
        connection=_name("k"),
        topic="t",
        format="JSON; DROP",
    )
    with pytest.raises(ValueError, match="Invalid format"):
        SourceBuilder(spec).create()


# ---------- postgres ----------


def test_postgres_source_tables_sorted_with_aliases():
    spec = SourceSpec(
        name=_name("pg"),
        kind=SourceKind.POSTGRES,
        connection=_name("pg_conn"),
        publication="mz_source",
        text_columns=("public.orders.status",),
        tables=(
            SourceTable("public.shipments"),
            SourceTable("public.orders", alias="pg_orders"),
        ),
    )
    assert SourceBuilder(spec).create() == (
        'CREATE SOURCE "d"."s"."pg" FROM POSTGRES CONNECTION "d"."s"."pg_conn" '
        "(PUBLICATION 'mz_source', TEXT COLUMNS (\"public\".\"orders\".\"status\")) "
        'FOR TABLES ("public"."orders" AS "pg_orders", '
        '"public"."shipments" AS "shipments");'
    )


def test_postgres_source_without_tables_takes_all():
    spec = SourceSpec(
        name=_name("pg"),
        kind=SourceKind.POSTGRES,
        connection=_name("pg_conn"),
        publication="mz_source",
    )
    assert SourceBuilder(spec).create().endswith("(PUBLICATION 'mz_source') FOR ALL TABLES;")


def test_postgres_source_order_does_not_depend_on_input():
    tables = (SourceTable("public.b"), SourceTable("public.a"))
    first = SourceSpec(
        name=_name("pg"),
        kind=SourceKind.POSTGRES,
        connection=_name("c"),
        publication="p",
        tables=tables,
    )
    second = SourceSpec(
        name=_name("pg"),
        kind=SourceKind.POSTGRES,
        connection=_name("c"),
        publication="p",
        tables=tuple(reversed(tables)),
    )
    assert SourceBuilder(first).create() == SourceBuilder(second).create()


# ---------- load generator ----------


def test_counter_load_generator():
    spec = SourceSpec(
        name=_name("ticks"),
        kind=SourceKind.LOAD_GENERATOR,
        load_generator_type="COUNTER",
        tick_interval="500ms",
        max_cardinality=8,
    )
    assert SourceBuilder(spec).create() == (
        'CREATE SOURCE "d"."s"."ticks" FROM LOAD GENERATOR COUNTER '
        "(TICK INTERVAL '500ms', MAX CARDINALITY 8);"
    )


def test_tpch_load_generator_takes_all_tables():
    spec = SourceSpec(
        name=_name("tpch"),
        kind=SourceKind.LOAD_GENERATOR,
        load_generator_type="TPCH",
        scale_factor=0.01,
    )
    assert SourceBuilder(spec).create() == (
        'CREATE SOURCE "d"."s"."tpch" FROM LOAD GENERATOR TPCH '
        "(SCALE FACTOR 0.01) FOR ALL TABLES;"
    )


@pytest.mark.parametrize("scale_factor", [0.001, 0.0, -1.0])
def test_scale_factor_must_stay_positive_at_two_decimals(scale_factor):
    spec = SourceSpec(
        name=_name("tpch"),
        kind=SourceKind.LOAD_GENERATOR,
        load_generator_type="TPCH",
        scale_factor=scale_factor,
    )
    with pytest.raises(SpecError, match="use at least 0.01"):
        SourceBuilder(spec)


def test_load_generator_rejects_connection():
    spec = SourceSpec(
        name=_name("tpch"),
        kind=SourceKind.LOAD_GENERATOR,
        load_generator_type="TPCH",
        connection=_name("k"),
    )
    with pytest.raises(SpecError, match="does not accept: connection"):
        SourceBuilder(spec)


# ---------- alters ----------


def test_source_resize_and_every_kind_has_clauses():
    spec = SourceSpec(
        name=_name("ticks"), kind=SourceKind.LOAD_GENERATOR, load_generator_type="COUNTER"
    )
    assert SourceBuilder(spec).update_size("xsmall") == (
        "ALTER SOURCE \"d\".\"s\".\"ticks\" SET (SIZE = 'xsmall');"
    )
    assert set(SOURCE_CLAUSES) == set(SourceKind)
