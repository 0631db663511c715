"""Configuration values sourced from environment variables."""

import os
from typing import Final

from src import constants

_host = os.getenv(key="MZ_HOST", default="")
_suffix = os.getenv(key="MZ_APPLICATION_NAME_SUFFIX", default="")

MZ_HOST: Final[str | None] = _host or None
MZ_PORT: Final[int] = int(os.getenv(key="MZ_PORT", default=str(constants.DEFAULT_SQL_PORT)))
MZ_USERNAME: Final[str] = os.getenv(key="MZ_USERNAME", default="materialize")
MZ_PASSWORD: Final[str] = os.getenv(key="MZ_PASSWORD", default="")
MZ_DATABASE: Final[str] = os.getenv(key="MZ_DATABASE", default=constants.DEFAULT_DATABASE)
MZ_SSLMODE: Final[str] = os.getenv(key="MZ_SSLMODE", default="require")
MZ_ENDPOINT: Final[str] = os.getenv(
    key="MZ_ENDPOINT", default="https://admin.cloud.materialize.com"
)
MZ_CLOUD_ENDPOINT: Final[str] = os.getenv(
    key="MZ_CLOUD_ENDPOINT", default="https://api.cloud.materialize.com"
)
MZ_DEFAULT_REGION: Final[str] = os.getenv(key="MZ_DEFAULT_REGION", default="aws/us-east-1")
MZ_APPLICATION_NAME_SUFFIX: Final[str | None] = _suffix or None
MZ_HTTP_TIMEOUT: Final[float] = float(os.getenv(key="MZ_HTTP_TIMEOUT", default="30"))
MZ_CONNECT_TIMEOUT: Final[int] = int(os.getenv(key="MZ_CONNECT_TIMEOUT", default="10"))
MZ_POOL_MAX_SIZE: Final[int] = int(os.getenv(key="MZ_POOL_MAX_SIZE", default="4"))

LOG_LEVEL: Final[str] = os.getenv(key="LOG_LEVEL", default="INFO")
LOGGER_NAME: Final[str] = os.getenv(key="LOGGER_NAME", default="mz-engine")
LOG_COLOUR_ENABLED: Final[bool] = bool(
    os.getenv(key="LOG_COLOUR_ENABLED", default="True").upper() == "TRUE"
)
