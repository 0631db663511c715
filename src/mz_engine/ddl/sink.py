"""Kafka sink statements."""

from __future__ import annotations

from src.enums import ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import Clause, object_name, render_clauses, statement
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import quote_identifier, quote_literal, require_keyword
from src.mz_engine.models import SinkSpec


def _schema_registry(spec: SinkSpec) -> str:
    text = (
        "USING CONFLUENT SCHEMA REGISTRY CONNECTION "
        f"{object_name(spec.schema_registry_connection)}"
    )
    if spec.avro_key_fullname and spec.avro_value_fullname:
        text += (
            f" (AVRO KEY FULLNAME {quote_literal(spec.avro_key_fullname)}"
            f" AVRO VALUE FULLNAME {quote_literal(spec.avro_value_fullname)})"
        )
    return text


def _with_options(spec: SinkSpec) -> str:
    options: list[str] = []
    if spec.size:
        options.append(f"SIZE = {quote_literal(spec.size)}")
    if not spec.snapshot:
        options.append("SNAPSHOT = false")
    return f"WITH ({', '.join(options)})"


_SINK: tuple[Clause, ...] = (
    Clause(("cluster_name",), lambda s: f"IN CLUSTER {quote_identifier(s.cluster_name)}"),
    Clause(("from_item",), lambda s: f"FROM {object_name(s.from_item)}", required=True),
    Clause(
        ("connection",),
        lambda s: f"INTO KAFKA CONNECTION {object_name(s.connection)}",
        required=True,
    ),
    Clause(("key",), lambda s: f"KEY ({', '.join(quote_identifier(k) for k in s.key)})"),
    Clause(("topic",), lambda s: f"(TOPIC {quote_literal(s.topic)})", required=True),
    Clause(("format",), lambda s: f"FORMAT {require_keyword(s.format, what='format')}"),
    Clause(
        ("schema_registry_connection", "avro_key_fullname", "avro_value_fullname"),
        _schema_registry,
    ),
    Clause(("envelope",), lambda s: f"ENVELOPE {require_keyword(s.envelope, what='envelope')}"),
    Clause(("size", "snapshot"), _with_options),
)


class SinkBuilder(StatementBuilder[SinkSpec]):
    object_type = ObjectType.SINK
    resizable = True

    def validate(self) -> None:
        ensure_spec_type(self.spec, SinkSpec, type(self).__name__)
        avro_names = (self.spec.avro_key_fullname, self.spec.avro_value_fullname)
        if any(avro_names) and not all(avro_names):
            raise SpecError("Avro key and value fullnames must be set together")
        if any(avro_names) and self.spec.schema_registry_connection is None:
            raise SpecError("Avro fullnames require a schema registry connection")

    def create(self) -> str:
        """CREATE SINK qn [IN CLUSTER c] FROM item INTO KAFKA CONNECTION ... ;"""
        return statement(
            f"CREATE SINK {self.qualified_name()}", *render_clauses(self.spec, _SINK)
        )
