"""
Connection statements.

A connection spec selects one `ConnectionKind`. Each kind has its own ordered
clause table; the builder renders exactly that table and rejects specs that
populate fields belonging to another kind.

Rendered shape:
    CREATE CONNECTION "db"."schema"."name" TO <KIND> (<clauses>)[ WITH (VALIDATE = false)];
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from src.constants import DEFAULT_POSTGRES_PORT, DEFAULT_SSH_PORT
from src.enums import ConnectionKind, ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import (
    Clause,
    check_fields,
    object_name,
    render_clauses,
    secret,
    statement,
    value_or_secret,
)
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import quote_literal, quote_literal_list
from src.mz_engine.models import ConnectionSpec, KafkaBroker, ObjectName


def _broker(broker: KafkaBroker, ssh_tunnel: ObjectName | None) -> str:
    address = quote_literal(broker.address)
    if ssh_tunnel is not None:
        return f"{address} USING SSH TUNNEL {object_name(ssh_tunnel)}"
    if broker.privatelink is not None:
        return (
            f"{address} USING AWS PRIVATELINK {object_name(broker.privatelink)} "
            f"(PORT {int(broker.target_group_port)}, "
            f"AVAILABILITY ZONE {quote_literal(broker.availability_zone)})"
        )
    return address


def _check_brokers(spec: ConnectionSpec) -> None:
    for broker in spec.brokers:
        if broker.privatelink is None:
            continue
        if spec.ssh_tunnel is not None:
            raise SpecError(
                f"Broker {broker.address} cannot use AWS PrivateLink when the connection "
                "uses an SSH tunnel"
            )
        if broker.target_group_port is None or broker.availability_zone is None:
            raise SpecError(
                f"Broker {broker.address} needs a target group port and availability zone "
                "to use AWS PrivateLink"
            )


def _brokers(spec: ConnectionSpec) -> str:
    rendered = ", ".join(_broker(broker, spec.ssh_tunnel) for broker in spec.brokers)
    return f"BROKERS ({rendered})"


_KAFKA: tuple[Clause, ...] = (
    Clause(("brokers", "ssh_tunnel"), _brokers, required=True),
    Clause(("progress_topic",), lambda s: f"PROGRESS TOPIC {quote_literal(s.progress_topic)}"),
    Clause(
        ("ssl_certificate_authority",),
        lambda s: f"SSL CERTIFICATE AUTHORITY = {value_or_secret(s.ssl_certificate_authority)}",
    ),
    Clause(
        ("ssl_certificate",),
        lambda s: f"SSL CERTIFICATE = {value_or_secret(s.ssl_certificate)}",
    ),
    Clause(("ssl_key",), lambda s: f"SSL KEY = {secret(s.ssl_key)}"),
    Clause(
        ("sasl_mechanisms",),
        lambda s: f"SASL MECHANISMS = {quote_literal(s.sasl_mechanisms)}",
    ),
    Clause(("sasl_username",), lambda s: f"SASL USERNAME = {value_or_secret(s.sasl_username)}"),
    Clause(("sasl_password",), lambda s: f"SASL PASSWORD = {secret(s.sasl_password)}"),
)

_POSTGRES: tuple[Clause, ...] = (
    Clause(("host",), lambda s: f"HOST {quote_literal(s.host)}", required=True),
    Clause(("port",), lambda s: f"PORT {int(s.port or DEFAULT_POSTGRES_PORT)}", always=True),
    Clause(("user",), lambda s: f"USER {value_or_secret(s.user)}"),
    Clause(("password",), lambda s: f"PASSWORD {secret(s.password)}"),
    Clause(("ssl_mode",), lambda s: f"SSL MODE {quote_literal(s.ssl_mode)}"),
    Clause(("ssh_tunnel",), lambda s: f"SSH TUNNEL {object_name(s.ssh_tunnel)}"),
    Clause(
        ("ssl_certificate_authority",),
        lambda s: f"SSL CERTIFICATE AUTHORITY {value_or_secret(s.ssl_certificate_authority)}",
    ),
    Clause(
        ("ssl_certificate",),
        lambda s: f"SSL CERTIFICATE {value_or_secret(s.ssl_certificate)}",
    ),
    Clause(("ssl_key",), lambda s: f"SSL KEY {secret(s.ssl_key)}"),
    Clause(("aws_privatelink",), lambda s: f"AWS PRIVATELINK {object_name(s.aws_privatelink)}"),
    Clause(("database",), lambda s: f"DATABASE {quote_literal(s.database)}", required=True),
)

_SSH_TUNNEL: tuple[Clause, ...] = (
    Clause(("host",), lambda s: f"HOST {quote_literal(s.host)}", required=True),
    Clause(("user",), lambda s: f"USER {_inline_user(s)}", required=True),
    Clause(("port",), lambda s: f"PORT {int(s.port or DEFAULT_SSH_PORT)}", always=True),
)

_CONFLUENT_SCHEMA_REGISTRY: tuple[Clause, ...] = (
    Clause(("url",), lambda s: f"URL {quote_literal(s.url)}", required=True),
    Clause(("user",), lambda s: f"USERNAME = {value_or_secret(s.user)}"),
    Clause(("password",), lambda s: f"PASSWORD = {secret(s.password)}"),
    Clause(
        ("ssl_certificate_authority",),
        lambda s: f"SSL CERTIFICATE AUTHORITY = {value_or_secret(s.ssl_certificate_authority)}",
    ),
    Clause(
        ("ssl_certificate",),
        lambda s: f"SSL CERTIFICATE = {value_or_secret(s.ssl_certificate)}",
    ),
    Clause(("ssl_key",), lambda s: f"SSL KEY = {secret(s.ssl_key)}"),
    Clause(("aws_privatelink",), lambda s: f"AWS PRIVATELINK {object_name(s.aws_privatelink)}"),
    Clause(("ssh_tunnel",), lambda s: f"SSH TUNNEL {object_name(s.ssh_tunnel)}"),
)

_AWS_PRIVATELINK: tuple[Clause, ...] = (
    Clause(
        ("service_name",), lambda s: f"SERVICE NAME {quote_literal(s.service_name)}", required=True
    ),
    Clause(
        ("availability_zones",),
        lambda s: f"AVAILABILITY ZONES ({quote_literal_list(s.availability_zones)})",
        required=True,
    ),
)

CONNECTION_CLAUSES: Mapping[ConnectionKind, tuple[Clause, ...]] = MappingProxyType(
    {
        ConnectionKind.KAFKA: _KAFKA,
        ConnectionKind.POSTGRES: _POSTGRES,
        ConnectionKind.SSH_TUNNEL: _SSH_TUNNEL,
        ConnectionKind.CONFLUENT_SCHEMA_REGISTRY: _CONFLUENT_SCHEMA_REGISTRY,
        ConnectionKind.AWS_PRIVATELINK: _AWS_PRIVATELINK,
    }
)

# Kinds whose connection can skip validation at creation time.
_VALIDATING_KINDS = frozenset(
    {ConnectionKind.KAFKA, ConnectionKind.POSTGRES, ConnectionKind.CONFLUENT_SCHEMA_REGISTRY}
)


def _inline_user(spec: ConnectionSpec) -> str:
    return quote_literal(spec.user.text)


class ConnectionBuilder(StatementBuilder[ConnectionSpec]):
    object_type = ObjectType.CONNECTION

    def validate(self) -> None:
        ensure_spec_type(self.spec, ConnectionSpec, type(self).__name__)
        kind = ConnectionKind(self.spec.kind)
        common = ("name", "kind", "validate") if kind in _VALIDATING_KINDS else ("name", "kind")
        check_fields(
            self.spec, CONNECTION_CLAUSES[kind], label=f"{kind} connection", common=common
        )
        if kind == ConnectionKind.KAFKA:
            _check_brokers(self.spec)
        elif kind == ConnectionKind.SSH_TUNNEL and self.spec.user.text is None:
            raise SpecError("SSH tunnel user must be a plain value, not a secret")

    @property
    def kind(self) -> ConnectionKind:
        return ConnectionKind(self.spec.kind)

    def create(self) -> str:
        clauses = render_clauses(self.spec, CONNECTION_CLAUSES[self.kind])
        suffix = "" if self.spec.validate else "WITH (VALIDATE = false)"
        return statement(
            f"CREATE CONNECTION {self.qualified_name()} TO {self.kind} ({', '.join(clauses)})",
            suffix,
        )
