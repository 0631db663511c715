"""
Source statements.

Rendered shape:
    CREATE SOURCE qn [IN CLUSTER "c"] FROM <kind-specific body> [WITH (SIZE = 's')];

Kind-specific bodies are ordered clause tables, joined with spaces. Upstream
table references are dotted names; each part is quoted as an identifier.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from src.enums import ObjectType, SourceKind
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import (
    Clause,
    check_fields,
    object_name,
    render_clauses,
    statement,
)
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import (
    qualified_name,
    quote_identifier,
    quote_literal,
    require_keyword,
)
from src.mz_engine.models import SourceSpec, SourceTable

_COUNTER = "COUNTER"


def _upstream(name: str) -> str:
    return qualified_name(*name.split("."))


def _table(table: SourceTable) -> str:
    alias = table.alias or table.name.split(".")[-1]
    return f"{_upstream(table.name)} AS {quote_identifier(alias)}"


def _for_tables(tables: tuple[SourceTable, ...]) -> str:
    if not tables:
        return "FOR ALL TABLES"
    return f"FOR TABLES ({', '.join(_table(table) for table in tables)})"


def _include(spec: SourceSpec) -> str:
    flags = (
        (spec.include_key, "KEY"),
        (spec.include_partition, "PARTITION"),
        (spec.include_offset, "OFFSET"),
        (spec.include_timestamp, "TIMESTAMP"),
    )
    return "INCLUDE " + ", ".join(keyword for enabled, keyword in flags if enabled)


def _publication(spec: SourceSpec) -> str:
    options = [f"PUBLICATION {quote_literal(spec.publication)}"]
    if spec.text_columns:
        columns = ", ".join(_upstream(column) for column in spec.text_columns)
        options.append(f"TEXT COLUMNS ({columns})")
    return f"({', '.join(options)})"


def _postgres_tables(spec: SourceSpec) -> str:
    # Sorted by upstream name so the statement does not depend on input order.
    return _for_tables(tuple(sorted(spec.tables, key=lambda table: table.name)))


def _generator_options(spec: SourceSpec) -> str:
    options: list[str] = []
    if spec.tick_interval is not None:
        options.append(f"TICK INTERVAL {quote_literal(spec.tick_interval)}")
    if spec.scale_factor is not None:
        options.append(f"SCALE FACTOR {spec.scale_factor:.2f}")
    if spec.max_cardinality is not None:
        options.append(f"MAX CARDINALITY {int(spec.max_cardinality)}")
    return f"({', '.join(options)})"


def _generator_tables(spec: SourceSpec) -> str:
    if spec.load_generator_type.upper() == _COUNTER:
        return ""
    return _for_tables(spec.tables)


_KAFKA: tuple[Clause, ...] = (
    Clause(
        ("connection",),
        lambda s: f"KAFKA CONNECTION {object_name(s.connection)}",
        required=True,
    ),
    Clause(("topic",), lambda s: f"(TOPIC {quote_literal(s.topic)})", required=True),
    Clause(("format",), lambda s: f"FORMAT {require_keyword(s.format, what='format')}"),
    Clause(
        ("schema_registry_connection",),
        lambda s: (
            "USING CONFLUENT SCHEMA REGISTRY CONNECTION "
            f"{object_name(s.schema_registry_connection)}"
        ),
    ),
    Clause(
        ("include_key", "include_partition", "include_offset", "include_timestamp"), _include
    ),
    Clause(("envelope",), lambda s: f"ENVELOPE {require_keyword(s.envelope, what='envelope')}"),
)

_POSTGRES: tuple[Clause, ...] = (
    Clause(
        ("connection",),
        lambda s: f"POSTGRES CONNECTION {object_name(s.connection)}",
        required=True,
    ),
    Clause(("publication", "text_columns"), _publication, required=True),
    Clause(("tables",), _postgres_tables, always=True),
)

_LOAD_GENERATOR: tuple[Clause, ...] = (
    Clause(
        ("load_generator_type",),
        lambda s: (
            "LOAD GENERATOR "
            f"{require_keyword(s.load_generator_type, what='load generator type')}"
        ),
        required=True,
    ),
    Clause(("tick_interval", "scale_factor", "max_cardinality"), _generator_options),
    Clause(("tables",), _generator_tables, always=True),
)

SOURCE_CLAUSES: Mapping[SourceKind, tuple[Clause, ...]] = MappingProxyType(
    {
        SourceKind.KAFKA: _KAFKA,
        SourceKind.POSTGRES: _POSTGRES,
        SourceKind.LOAD_GENERATOR: _LOAD_GENERATOR,
    }
)


class SourceBuilder(StatementBuilder[SourceSpec]):
    object_type = ObjectType.SOURCE
    resizable = True

    def validate(self) -> None:
        ensure_spec_type(self.spec, SourceSpec, type(self).__name__)
        check_fields(
            self.spec,
            SOURCE_CLAUSES[self.kind],
            label=f"{self.kind} source",
            common=("name", "kind", "cluster_name", "size"),
        )
        # SCALE FACTOR renders with two decimals; it must stay positive after that.
        scale_factor = self.spec.scale_factor
        if scale_factor is not None and float(f"{scale_factor:.2f}") <= 0:
            raise SpecError(
                f"Scale factor {scale_factor} renders as {scale_factor:.2f}; use at least 0.01"
            )

    @property
    def kind(self) -> SourceKind:
        return SourceKind(self.spec.kind)

    def create(self) -> str:
        cluster = (
            f"IN CLUSTER {quote_identifier(self.spec.cluster_name)}"
            if self.spec.cluster_name
            else ""
        )
        body = render_clauses(self.spec, SOURCE_CLAUSES[self.kind])
        size = f"WITH (SIZE = {quote_literal(self.spec.size)})" if self.spec.size else ""
        return statement(
            f"CREATE SOURCE {self.qualified_name()}", cluster, "FROM", *body, size
        )
