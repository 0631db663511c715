"""
Fleet-management API client.

Resolves logical regions ("aws/us-east-1") to SQL endpoints:

- list_cloud_providers: GET {endpoint}/api/cloud-regions
- get_region_details:   GET {provider.url}/api/region
- enable_region:        PATCH {provider.url}/api/region
- get_host:             region id -> SQL address of a resolvable region

Every call carries a fresh bearer header from the token client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from src import constants
from src.logger import get_logger
from src.mz_engine.clients.auth import TokenClient
from src.mz_engine.errors import CloudAPIError, CloudTransportError, RegionError

LOGGER = get_logger("cloud")


@dataclass(frozen=True)
class CloudProvider:
    id: str
    name: str
    url: str
    cloud_provider: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CloudProvider:
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            url=str(payload.get("url", "")).rstrip("/"),
            cloud_provider=str(payload.get("cloudProvider", "")),
        )


@dataclass(frozen=True)
class RegionInfo:
    sql_address: str
    http_address: str
    resolvable: bool
    enabled_at: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RegionInfo:
        return cls(
            sql_address=str(payload.get("sqlAddress", "")),
            http_address=str(payload.get("httpAddress", "")),
            resolvable=bool(payload.get("resolvable", False)),
            enabled_at=payload.get("enabledAt"),
        )


@dataclass(frozen=True)
class CloudRegion:
    region_info: RegionInfo | None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CloudRegion:
        info = payload.get("regionInfo")
        return cls(region_info=RegionInfo.from_payload(info) if info else None)

    @property
    def resolvable(self) -> bool:
        return self.region_info is not None and self.region_info.resolvable


def split_host_port(address: str, default_port: int = constants.DEFAULT_SQL_PORT) -> tuple[str, int]:
    """'host[:port]' -> (host, port); the port defaults to the SQL port."""
    parts = address.split(":")
    if len(parts) == 1:
        return parts[0], default_port
    if len(parts) == 2:
        host, port = parts
        try:
            return host, int(port)
        except ValueError as error:
            raise ValueError(f"invalid port in {address!r}") from error
    raise ValueError(f"invalid host:port format: {address!r}")


class CloudClient:
    """Thin wrapper over the fleet-management REST API."""

    def __init__(
        self,
        token_client: TokenClient,
        endpoint: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._token_client = token_client
        self._endpoint = endpoint.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def list_cloud_providers(self) -> list[CloudProvider]:
        payload = self._request(
            "GET", f"{self._endpoint}{constants.CLOUD_REGIONS_PATH}", ok=(200,)
        )
        providers = [CloudProvider.from_payload(item) for item in payload.get("data") or []]
        LOGGER.debug("Found %d cloud provider region(s).", len(providers))
        return providers

    def get_region_details(self, provider: CloudProvider) -> CloudRegion:
        payload = self._request("GET", f"{provider.url}{constants.REGION_PATH}", ok=(200,))
        return CloudRegion.from_payload(payload)

    def enable_region(self, provider: CloudProvider) -> CloudRegion:
        LOGGER.info("Enabling region %s.", provider.id)
        payload = self._request(
            "PATCH", f"{provider.url}{constants.REGION_PATH}", ok=(200, 201), data="{}"
        )
        return CloudRegion.from_payload(payload)

    def get_host(self, region_id: str) -> str:
        """SQL address of `region_id`; the region must exist and be resolvable."""
        provider = next(
            (p for p in self.list_cloud_providers() if p.id == region_id),
            None,
        )
        if provider is None:
            raise RegionError(f"provider for region '{region_id}' not found")
        region = self.get_region_details(provider)
        if region.region_info is None or not region.region_info.resolvable:
            raise RegionError(f"region '{region_id}' is not enabled")
        return region.region_info.sql_address

    # ---------- helpers ----------

    def _request(
        self, method: str, url: str, *, ok: tuple[int, ...], data: str | None = None
    ) -> dict[str, Any]:
        headers = self._token_client.authorization_headers()
        try:
            response = self._session.request(
                method, url, headers=headers, data=data, timeout=self._timeout
            )
        except requests.RequestException as error:
            raise CloudTransportError(str(error), url=url) from error
        if response.status_code not in ok:
            raise CloudAPIError(response.status_code, response.text, url=url)
        if not response.text:
            return {}
        try:
            payload = response.json()
        except ValueError as error:
            raise CloudTransportError(f"response is not JSON: {error}", url=url) from error
        return payload if isinstance(payload, dict) else {}
