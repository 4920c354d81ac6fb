"""GitHub App authentication: app JWTs and cached installation tokens."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import time
from typing import Callable, Optional, Protocol

import httpx
import jwt

from checksummarizer.errors import UpstreamError

logger = logging.getLogger(__name__)

JWT_BACKDATE_SECONDS = 60  # tolerate clock drift against GitHub
JWT_LIFETIME_SECONDS = 9 * 60  # GitHub caps app JWTs at 10 minutes
TOKEN_REFRESH_MARGIN = dt.timedelta(minutes=1)


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


class StaticTokenProvider:
    """Hands out one fixed token (``GITHUB_TOKEN``), for local runs."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_token(self) -> str:
        return self._token


def create_app_jwt(app_id: int, private_key: str, *, now: Optional[float] = None) -> str:
    """Sign the short-lived RS256 JWT that authenticates as the GitHub App itself."""
    issued = int(now if now is not None else time.time())
    payload = {
        "iat": issued - JWT_BACKDATE_SECONDS,
        "exp": issued + JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }
    return jwt.encode(payload, private_key, algorithm="RS256")


def _parse_expiry(raw: Optional[str]) -> dt.datetime:
    if not raw:
        # Installation tokens live for an hour; be conservative when unknown.
        return dt.datetime.now(dt.timezone.utc) + dt.timedelta(minutes=10)
    return dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))


class InstallationTokenProvider:
    """
    Exchanges the App private key for an installation access token.

    The token is reused until shortly before it expires. Concurrent requests
    that find it stale wait on a single refresh instead of each minting one.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        app_id: int,
        installation_id: int,
        private_key: str,
        api_url: str,
        clock: Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.timezone.utc),
    ) -> None:
        self._client = client
        self._app_id = app_id
        self._installation_id = installation_id
        self._private_key = private_key
        self._api_url = api_url.rstrip("/")
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: Optional[dt.datetime] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._token is not None
            and self._expires_at is not None
            and self._clock() < self._expires_at - TOKEN_REFRESH_MARGIN
        )

    async def get_token(self) -> str:
        if self._is_fresh():
            return self._token  # type: ignore[return-value]
        async with self._lock:
            if not self._is_fresh():
                await self._refresh()
        return self._token  # type: ignore[return-value]

    async def _refresh(self) -> None:
        operation = "creating installation token"
        url = f"{self._api_url}/app/installations/{self._installation_id}/access_tokens"
        headers = {
            "Authorization": f"Bearer {create_app_jwt(self._app_id, self._private_key)}",
            "Accept": "application/vnd.github+json",
        }
        try:
            resp = await self._client.post(url, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamError.transport(operation, None, exc) from exc
        if resp.status_code != httpx.codes.CREATED:
            logger.error("POST %s -> %s: %s", url, resp.status_code, resp.text[:800])
            raise UpstreamError.unexpected_status(operation, None, resp.status_code)

        try:
            data = resp.json()
            token = data["token"]
            expires_at = _parse_expiry(data.get("expires_at"))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("POST %s returned an unusable token body: %s", url, resp.text[:800])
            raise UpstreamError.malformed(operation, None, exc) from exc
        self._token = token
        self._expires_at = expires_at
        logger.info(
            "Minted installation token for installation %s, expires at %s",
            self._installation_id,
            self._expires_at.isoformat(),
        )
