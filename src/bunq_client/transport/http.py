"""
Signed REST client for the bunq API.

Every request body is signed with the client's private key; every signed
response is verified against the server's public key. HTTP 429 is retried
with exponential backoff, anything else non-2xx is raised as a typed error.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import uuid
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

import httpx

from bunq_client.errors import (
    ConnectionError,
    CryptoError,
    DecodeError,
    ResponseIntegrityError,
    SignatureInvalidError,
    BunqError,
    classify_error,
)
from bunq_client.models.session import Credentials
from bunq_client.security import sign, verify

if TYPE_CHECKING:
    from bunq_client.session import SessionGuard

logger = logging.getLogger(__name__)

USER_AGENT = "bunq-client-python/0.1.0"
GEOLOCATION = "0 0 0 0 NL"
LANGUAGE = "en_US"
REGION = "nl_NL"

HEADER_REQUEST_ID = "X-Bunq-Client-Request-Id"
HEADER_AUTHENTICATION = "X-Bunq-Client-Authentication"
HEADER_CLIENT_SIGNATURE = "X-Bunq-Client-Signature"
HEADER_RESPONSE_ID = "X-Bunq-Client-Response-Id"
HEADER_SERVER_SIGNATURE = "X-Bunq-Server-Signature"

DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_BACKOFF = 1.0


def base_headers(request_id: Optional[str] = None) -> dict[str, str]:
    """Headers every bunq request carries, signed or not."""
    return {
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
        HEADER_REQUEST_ID: request_id or str(uuid.uuid4()),
        "X-Bunq-Geolocation": GEOLOCATION,
        "X-Bunq-Language": LANGUAGE,
        "X-Bunq-Region": REGION,
        "Cache-Control": "no-cache",
    }


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        delay = float(value)
    except ValueError:
        return None
    if not math.isfinite(delay):
        return None
    return max(delay, 0.0)


class HttpClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff
        self._sleep = sleep
        self._guard: Optional[SessionGuard] = None
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def attach(self, guard: SessionGuard) -> None:
        """Route session-scoped calls through ``guard`` from now on."""
        self._guard = guard

    async def _credentials(self, explicit: Optional[Credentials]) -> Credentials:
        if explicit is not None:
            return explicit
        if self._guard is None:
            raise BunqError("no_session", "Session-scoped request issued before the session was opened")
        await self._guard.ensure_active()
        return self._guard.snapshot()

    def _headers(self, credentials: Credentials, body: bytes) -> dict[str, str]:
        headers = base_headers()
        if credentials.token:
            headers[HEADER_AUTHENTICATION] = credentials.token
            if credentials.private_key is not None:
                headers[HEADER_CLIENT_SIGNATURE] = sign(credentials.private_key, body)
        return headers

    async def _send(
        self, method: str, path: str, body: bytes, params: Optional[dict[str, str]], headers: dict[str, str],
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method, "/" + path.lstrip("/"), content=body or None, params=params, headers=headers,
            )
        except httpx.HTTPError as e:
            raise ConnectionError(f"{method} {path} failed: {e}") from e

    def _verify(self, credentials: Credentials, response: httpx.Response) -> None:
        signature = response.headers.get(HEADER_SERVER_SIGNATURE)
        if not signature or credentials.server_public_key is None:
            return
        try:
            verify(credentials.server_public_key, response.content, signature)
        except (SignatureInvalidError, CryptoError) as e:
            response_id = response.headers.get(HEADER_RESPONSE_ID)
            raise ResponseIntegrityError(
                f"Server signature verification failed for {response.request.method} "
                f"{response.request.url.path}: {e}",
                response_id=response_id,
            ) from e

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Optional[dict[str, str]] = None,
        credentials: Optional[Credentials] = None,
    ) -> httpx.Response:
        """Sign, send and verify one call.

        Without ``credentials`` the call is session-scoped: the session is
        refreshed if it is about to expire and its token is used. Passing
        credentials bypasses the session (installation handshake).
        """
        raw = json.dumps(body).encode("utf-8") if body is not None else b""

        attempt = 0
        while True:
            creds = await self._credentials(credentials)
            headers = self._headers(creds, raw)
            response = await self._send(method, path, raw, params, headers)
            logger.debug(
                "%s %s -> %d (request-id %s)", method, path, response.status_code, headers[HEADER_REQUEST_ID],
            )
            if response.status_code != 429:
                break
            if attempt >= self._max_retries:
                raise classify_error(
                    response.status_code, response.headers.get(HEADER_RESPONSE_ID), response.content, response,
                )
            delay = _retry_after(response)
            if delay is None:
                delay = self._initial_backoff * (2 ** attempt)
            attempt += 1
            logger.warning(
                "Rate limited on %s %s, retry %d/%d in %.1fs", method, path, attempt, self._max_retries, delay,
            )
            await self._sleep(delay)

        if not response.is_success:
            raise classify_error(
                response.status_code, response.headers.get(HEADER_RESPONSE_ID), response.content, response,
            )
        self._verify(creds, response)
        return response

    @staticmethod
    def _json(method: str, path: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"{method} {path} returned a non-JSON body") from e

    async def get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        response = await self.request("GET", path, params=params)
        return self._json("GET", path, response)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        response = await self.request("POST", path, body if body is not None else {})
        return self._json("POST", path, response)

    async def put(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        response = await self.request("PUT", path, body if body is not None else {})
        return self._json("PUT", path, response)

    async def delete(self, path: str) -> Any:
        response = await self.request("DELETE", path)
        return self._json("DELETE", path, response) if response.content else None

    async def close(self) -> None:
        await self._client.aclose()

