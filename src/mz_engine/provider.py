"""
Provider wiring: configuration -> per-region connections -> reconcilers.

Two modes:

- self-hosted: MZ_HOST is set; one connection under the region name
  "self-hosted", authenticated with MZ_USERNAME / MZ_PASSWORD.
- managed (SaaS): MZ_PASSWORD is an app password. The token client
  authenticates, the fleet-management API lists regions, and one pooled
  connection is opened per resolvable region with the token's email as user.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import requests

from src import constants, settings
from src.enums import ProviderMode
from src.logger import get_logger
from src.mz_engine.clients.auth import TokenClient
from src.mz_engine.clients.cloud import CloudClient, split_host_port
from src.mz_engine.errors import CloudError, RegionError
from src.mz_engine.execute.connection import PooledConnection, build_connection_string
from src.mz_engine.execute.ports import SqlConnection
from src.mz_engine.reconcile.reconciler import Reconciler

LOGGER = get_logger("provider")


@dataclass(frozen=True)
class ProviderConfig:
    host: str | None = None
    port: int = constants.DEFAULT_SQL_PORT
    username: str = "materialize"
    password: str = field(default="", repr=False)
    database: str = constants.DEFAULT_DATABASE
    sslmode: str = "require"
    endpoint: str = "https://admin.cloud.materialize.com"
    cloud_endpoint: str = "https://api.cloud.materialize.com"
    default_region: str = "aws/us-east-1"
    application_name_suffix: str | None = None
    http_timeout: float = 30.0
    connect_timeout: int | None = 10
    pool_max_size: int = 4

    @classmethod
    def from_settings(cls) -> ProviderConfig:
        return cls(
            host=settings.MZ_HOST,
            port=settings.MZ_PORT,
            username=settings.MZ_USERNAME,
            password=settings.MZ_PASSWORD,
            database=settings.MZ_DATABASE,
            sslmode=settings.MZ_SSLMODE,
            endpoint=settings.MZ_ENDPOINT,
            cloud_endpoint=settings.MZ_CLOUD_ENDPOINT,
            default_region=settings.MZ_DEFAULT_REGION,
            application_name_suffix=settings.MZ_APPLICATION_NAME_SUFFIX,
            http_timeout=settings.MZ_HTTP_TIMEOUT,
            connect_timeout=settings.MZ_CONNECT_TIMEOUT,
            pool_max_size=settings.MZ_POOL_MAX_SIZE,
        )

    @property
    def self_hosted(self) -> bool:
        return bool(self.host)

    @property
    def mode(self) -> ProviderMode:
        return ProviderMode.SELF_HOSTED if self.self_hosted else ProviderMode.SAAS

    def application_name(self) -> str:
        name = f"{constants.APPLICATION_NAME} v{constants.VERSION}"
        if self.application_name_suffix:
            name = f"{name} {self.application_name_suffix}"
        return name


@dataclass
class Provider:
    """Per-region connections plus the clients used to build them."""

    mode: ProviderMode
    connections: dict[str, SqlConnection]
    default_region: str
    regions_enabled: dict[str, bool] = field(default_factory=dict)
    token_client: TokenClient | None = None
    cloud_client: CloudClient | None = None

    def connection(self, region: str | None = None) -> SqlConnection:
        key = region or self.default_region
        try:
            return self.connections[key]
        except KeyError:
            available = ", ".join(sorted(self.connections)) or "none"
            raise RegionError(
                f"no connection for region '{key}' (available: {available})"
            ) from None

    def reconciler(self, region: str | None = None) -> Reconciler:
        return Reconciler(self.connection(region))

    def close(self) -> None:
        for region, connection in self.connections.items():
            close = getattr(connection, "close", None)
            if close is not None:
                LOGGER.debug("Closing connection for region %s.", region)
                close()


ConnectionFactory = Callable[..., Any]


def configure(
    config: ProviderConfig,
    *,
    connection_factory: ConnectionFactory = PooledConnection,
    session: requests.Session | None = None,
) -> Provider:
    """Open connections for the configured mode."""
    if config.self_hosted:
        return _configure_self_hosted(config, connection_factory)
    return _configure_saas(config, connection_factory, session)


def _open(
    config: ProviderConfig,
    connection_factory: ConnectionFactory,
    *,
    host: str,
    port: int,
    user: str,
    password: str,
) -> SqlConnection:
    conninfo = build_connection_string(
        host=host,
        port=port,
        user=user,
        password=password,
        database=config.database,
        application_name=config.application_name(),
        sslmode=config.sslmode,
        connect_timeout=config.connect_timeout,
    )
    return connection_factory(conninfo, max_size=config.pool_max_size)


def _configure_self_hosted(
    config: ProviderConfig, connection_factory: ConnectionFactory
) -> Provider:
    host = config.host or ""
    LOGGER.info("Connecting to self-hosted instance at %s:%d.", host, config.port)
    connection = _open(
        config,
        connection_factory,
        host=host,
        port=config.port,
        user=config.username,
        password=config.password,
    )
    return Provider(
        mode=ProviderMode.SELF_HOSTED,
        connections={constants.SELF_HOSTED_REGION: connection},
        default_region=constants.SELF_HOSTED_REGION,
        regions_enabled={constants.SELF_HOSTED_REGION: True},
    )


def _configure_saas(
    config: ProviderConfig,
    connection_factory: ConnectionFactory,
    session: requests.Session | None,
) -> Provider:
    token_client = TokenClient(
        config.password, config.endpoint, session=session, timeout=config.http_timeout
    )
    cloud_client = CloudClient(
        token_client, config.cloud_endpoint, session=session, timeout=config.http_timeout
    )
    user = token_client.email

    connections: dict[str, SqlConnection] = {}
    regions_enabled: dict[str, bool] = {}
    for cloud_provider in cloud_client.list_cloud_providers():
        try:
            region = cloud_client.get_region_details(cloud_provider)
        except CloudError as error:
            LOGGER.warning("Skipping region %s: %s", cloud_provider.id, error)
            continue
        regions_enabled[cloud_provider.id] = region.resolvable
        if region.region_info is None or not region.resolvable:
            LOGGER.info("Region %s is not enabled.", cloud_provider.id)
            continue
        host, port = split_host_port(region.region_info.sql_address)
        connections[cloud_provider.id] = _open(
            config,
            connection_factory,
            host=host,
            port=port,
            user=user,
            password=config.password,
        )
        LOGGER.info("Connected to region %s at %s:%d.", cloud_provider.id, host, port)

    if not connections:
        raise RegionError("no region could be connected")

    return Provider(
        mode=ProviderMode.SAAS,
        connections=connections,
        default_region=config.default_region,
        regions_enabled=regions_enabled,
        token_client=token_client,
        cloud_client=cloud_client,
    )
