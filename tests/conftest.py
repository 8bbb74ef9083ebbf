"""Shared fixtures: RSA keys and an in-memory bunq server behind httpx.MockTransport."""

import json
from typing import Any, Optional

import httpx
import pytest

from bunq_client.config import BunqConfig, Environment
from bunq_client.security import KeyPair, encode_public_key, generate_key_pair, sign


@pytest.fixture(scope="session")
def client_keys() -> KeyPair:
    return generate_key_pair()


@pytest.fixture(scope="session")
def server_keys() -> KeyPair:
    return generate_key_pair()


@pytest.fixture
def config() -> BunqConfig:
    return BunqConfig(api_key="sandbox_test_key", environment=Environment.SANDBOX, description="pytest")


def envelope(*items: dict[str, Any], pagination: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    body: dict[str, Any] = {"Response": list(items)}
    if pagination is not None:
        body["Pagination"] = pagination
    return body


class FakeBunq:
    """Routes requests by "METHOD path" and signs every response with the server key.

    Each route is either a payload dict or a callable (request -> httpx.Response
    or payload dict). ``requests`` records everything that came in.
    """

    def __init__(self, server_keys: KeyPair, sign_responses: bool = True):
        self.server_keys = server_keys
        self.sign_responses = sign_responses
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []
        self.session_timeout = 3600
        self.session_calls = 0
        self.install_defaults()

    def install_defaults(self) -> None:
        self.routes["POST /v1/installation"] = envelope(
            {"Id": {"id": 1}},
            {"Token": {"token": "installation-token"}},
            {"ServerPublicKey": {"server_public_key": encode_public_key(self.server_keys.public_key)}},
        )
        self.routes["POST /v1/device-server"] = envelope({"Id": {"id": 2}})
        self.routes["POST /v1/session-server"] = self._session_server
        self.routes["GET /v1/user/42/monetary-account"] = envelope(
            {"MonetaryAccountBank": {"id": 7, "status": "CANCELLED"}},
            {"MonetaryAccountBank": {"id": 0, "status": "ACTIVE"}},
            {"MonetaryAccountSavings": {"id": 9, "status": "ACTIVE"}},
        )

    def _session_server(self, request: httpx.Request) -> dict[str, Any]:
        self.session_calls += 1
        return envelope(
            {"Id": {"id": 3}},
            {"Token": {"token": f"session-token-{self.session_calls}"}},
            {"UserPerson": {"id": 42, "session_timeout": self.session_timeout}},
        )

    def respond(self, payload: Any, status_code: int = 200, headers: Optional[dict[str, str]] = None) -> httpx.Response:
        content = json.dumps(payload).encode("utf-8")
        all_headers = {"X-Bunq-Client-Response-Id": f"resp-{len(self.requests)}", **(headers or {})}
        if self.sign_responses:
            all_headers["X-Bunq-Server-Signature"] = sign(self.server_keys.private_key, content)
        return httpx.Response(status_code, content=content, headers=all_headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return self.respond({"Error": [{"error_description": "Route not found"}]}, status_code=404)
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return self.respond(route)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def fake_bunq(server_keys: KeyPair) -> FakeBunq:
    return FakeBunq(server_keys)


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
