"""Shared constant values used across the engine."""

from typing import Final

VERSION: Final[str] = "0.1.0"
APPLICATION_NAME: Final[str] = "mz-engine"

DEFAULT_DATABASE: Final[str] = "materialize"
DEFAULT_SCHEMA: Final[str] = "public"
DEFAULT_SQL_PORT: Final[int] = 6875
DEFAULT_POSTGRES_PORT: Final[int] = 5432
DEFAULT_SSH_PORT: Final[int] = 22
SELF_HOSTED_REGION: Final[str] = "self-hosted"

API_TOKEN_PATH: Final[str] = "/identity/resources/auth/v1/api-token"
CLOUD_REGIONS_PATH: Final[str] = "/api/cloud-regions"
REGION_PATH: Final[str] = "/api/region"

APP_PASSWORD_PREFIX: Final[str] = "mzp_"
DEFAULT_TOKEN_LIFETIME_SECONDS: Final[int] = 3600
TOKEN_REFRESH_FRACTION: Final[float] = 0.5
