"""
Authentication token client for the management API.

Exchanges an app password for a bearer token at the identity provider, keeps
it in memory, and refreshes it before it expires. The refresh point sits at a
fixed fraction of the token's lifetime, so requests never go out with a token
that is about to lapse.

Concurrency: refresh is single-flight. Callers that find the token stale
queue on one lock; whoever gets in first refreshes, the rest see the fresh
token and return without a second request.
"""

from __future__ import annotations

import base64
import json
import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import requests

from src import constants
from src.logger import get_logger
from src.mz_engine.errors import AuthenticationError

LOGGER = get_logger("auth")

_NON_HEX = re.compile(r"[^0-9a-fA-F]")


@dataclass(frozen=True)
class AppPassword:
    client_id: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class AuthToken:
    """Bearer token plus its timing; never persisted."""

    access_token: str = field(repr=False)
    email: str
    issued_at: float
    expires_at: float
    refresh_at: float


def _as_uuid(hex_digits: str) -> str:
    h = hex_digits.lower()
    return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


def parse_app_password(password: str) -> AppPassword:
    """
    Split an app password into client id and secret.

    The password is an optional 'mzp_' prefix followed by 64 hex digits (other
    characters are ignored): the first 32 are the client id, the next 32 the
    secret, each rendered as a UUID.
    """
    text = password.strip()
    if text.startswith(constants.APP_PASSWORD_PREFIX):
        text = text[len(constants.APP_PASSWORD_PREFIX) :]
    digits = _NON_HEX.sub("", text)
    if len(digits) < 64:
        raise AuthenticationError("invalid app password: expected at least 64 hex digits")
    return AppPassword(client_id=_as_uuid(digits[:32]), secret=_as_uuid(digits[32:64]))


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _jwt_claims(token: str) -> dict[str, Any]:
    parts = token.split(".")
    if len(parts) < 2:
        raise AuthenticationError("access token is not a JWT")
    try:
        claims = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as error:
        raise AuthenticationError(f"access token payload is not valid JSON: {error}") from error
    if not isinstance(claims, dict):
        raise AuthenticationError("access token payload is not an object")
    return claims


class TokenClient:
    """Holds one bearer token and keeps it fresh."""

    def __init__(
        self,
        password: str,
        endpoint: str,
        *,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        refresh_fraction: float = constants.TOKEN_REFRESH_FRACTION,
        timeout: float = 30.0,
    ) -> None:
        if not 0 < refresh_fraction < 1:
            raise ValueError("refresh_fraction must be between 0 and 1")
        self._credentials = parse_app_password(password)
        self._endpoint = endpoint.rstrip("/")
        self._session = session or requests.Session()
        self._clock = clock
        self._refresh_fraction = refresh_fraction
        self._timeout = timeout
        self._lock = threading.Lock()
        self._token: AuthToken | None = None

    # ---------- public API ----------

    @property
    def token(self) -> AuthToken | None:
        return self._token

    @property
    def email(self) -> str:
        """Email claim of the current token, acquiring one if needed."""
        return self.current_token().email

    def acquire(self) -> AuthToken:
        """Exchange the app password for a new token and store it."""
        with self._lock:
            return self._exchange()

    def needs_refresh(self) -> bool:
        token = self._token
        return token is None or self._clock() > token.refresh_at

    def refresh(self) -> AuthToken:
        """Refresh unless another caller already did while we waited for the lock."""
        with self._lock:
            token = self._token
            if token is not None and not self.needs_refresh():
                return token
            return self._exchange()

    def current_token(self) -> AuthToken:
        token = self._token
        if token is None or self.needs_refresh():
            token = self.refresh()
        return token

    def authorization_headers(self) -> dict[str, str]:
        """Headers for one outbound call, refreshing the token first if it is stale."""
        token = self.current_token()
        return {
            "Authorization": f"Bearer {token.access_token}",
            "Content-Type": "application/json",
        }

    # ---------- helpers ----------

    def _exchange(self) -> AuthToken:
        url = f"{self._endpoint}{constants.API_TOKEN_PATH}"
        LOGGER.debug("Requesting access token from %s.", url)
        try:
            response = self._session.post(
                url,
                json={
                    "clientId": self._credentials.client_id,
                    "secret": self._credentials.secret,
                },
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as error:
            raise AuthenticationError(f"authentication request failed: {error}") from error

        if response.status_code != 200:
            raise AuthenticationError(f"authentication failed: {response.text}")

        try:
            payload = response.json()
        except ValueError as error:
            raise AuthenticationError("authentication response is not JSON") from error

        access_token = payload.get("accessToken")
        if not access_token:
            raise AuthenticationError("authentication response has no access token")

        email = _jwt_claims(access_token).get("email")
        if not email:
            raise AuthenticationError("access token has no email claim")

        lifetime = float(payload.get("expiresIn") or constants.DEFAULT_TOKEN_LIFETIME_SECONDS)
        issued_at = self._clock()
        self._token = AuthToken(
            access_token=access_token,
            email=str(email),
            issued_at=issued_at,
            expires_at=issued_at + lifetime,
            refresh_at=issued_at + lifetime * self._refresh_fraction,
        )
        LOGGER.info("Acquired access token for %s (expires in %ds).", email, int(lifetime))
        return self._token
