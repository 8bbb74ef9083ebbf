"""
AsyncBunq / Bunq: main SDK clients.
"""

import asyncio
from typing import Any, AsyncGenerator, Awaitable, Callable, Generator, Optional

import httpx

from bunq_client.bootstrap import Bootstrapper
from bunq_client.config import BunqConfig
from bunq_client.errors import BunqError
from bunq_client.models.session import Session
from bunq_client.pagination import Paginator
from bunq_client.resources import RESOURCES, ResourceAPI
from bunq_client.security import KeyPair
from bunq_client.session import SessionGuard
from bunq_client.transport.http import HttpClient


class AsyncBunq:
    """Async bunq client (primary). Build it with ``await AsyncBunq.create(config)``."""

    def __init__(self, config: BunqConfig, http: HttpClient, guard: SessionGuard):
        self._config = config
        self.http = http
        self._guard = guard
        self.paginator = Paginator(http, page_size=config.page_size)
        self._resources = {
            name: ResourceAPI(schema, http, self.paginator, self._scope)
            for name, schema in RESOURCES.items()
        }
        self.monetary_accounts = self._resources["monetary-account"]
        self.payments = self._resources["payment"]
        self.request_inquiries = self._resources["request-inquiry"]
        self.cards = self._resources["card"]

    @classmethod
    async def create(
        cls,
        config: BunqConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        key_pair: Optional[KeyPair] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ) -> "AsyncBunq":
        """Run the full handshake. Returns a ready client or raises; never half-built."""
        http_kwargs: dict[str, Any] = {}
        if sleep is not None:
            http_kwargs["sleep"] = sleep
        http = HttpClient(
            config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            initial_backoff=config.initial_backoff,
            transport=transport,
            **http_kwargs,
        )
        try:
            bootstrapper = Bootstrapper(http, config, key_pair)
            session = await bootstrapper.run()
        except BaseException:
            await http.close()
            raise
        guard = SessionGuard(
            session, bootstrapper.key_pair, bootstrapper.open_session,
            margin_s=config.session_refresh_margin,
        )
        http.attach(guard)
        return cls(config, http, guard)

    async def __aenter__(self) -> "AsyncBunq":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def session(self) -> Session:
        return self._guard.session

    @property
    def user_id(self) -> int:
        return self._guard.session.user_id

    @property
    def primary_monetary_account_id(self) -> int:
        return self._guard.session.primary_monetary_account_id

    def _scope(self) -> dict[str, int]:
        return {"user_id": self.user_id, "monetary_account_id": self.primary_monetary_account_id}

    def resource(self, name: str) -> ResourceAPI:
        try:
            return self._resources[name]
        except KeyError:
            raise BunqError("unknown_resource", f"Unknown resource {name!r}") from None

    async def get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        return await self.http.get(path, params=params)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self.http.post(path, body)

    async def put(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self.http.put(path, body)

    async def delete(self, path: str) -> Any:
        return await self.http.delete(path)

    async def iterate(
        self, path: str, key: Optional[str] = None, *, params: Optional[dict[str, str]] = None,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Lazily walk a cursor-paginated list endpoint."""
        async for item in self.paginator.iterate(path, key, params=params):
            yield item

    async def close(self) -> None:
        await self.http.close()


class Bunq:
    """Sync wrapper around AsyncBunq. Runs the event loop internally."""

    def __init__(self, config: BunqConfig, **kwargs: Any):
        self._loop = asyncio.new_event_loop()
        try:
            self._async = self._run(AsyncBunq.create(config, **kwargs))
        except BaseException:
            self._loop.close()
            raise

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    def _drain(self, agen: AsyncGenerator[dict[str, Any], None]) -> Generator[dict[str, Any], None, None]:
        try:
            while True:
                try:
                    yield self._run(agen.__anext__())
                except StopAsyncIteration:
                    return
        finally:
            self._run(agen.aclose())

    def __enter__(self) -> "Bunq":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def session(self) -> Session:
        return self._async.session

    @property
    def user_id(self) -> int:
        return self._async.user_id

    @property
    def primary_monetary_account_id(self) -> int:
        return self._async.primary_monetary_account_id

    def get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        return self._run(self._async.get(path, params))

    def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return self._run(self._async.post(path, body))

    def put(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return self._run(self._async.put(path, body))

    def delete(self, path: str) -> Any:
        return self._run(self._async.delete(path))

    def iterate(
        self, path: str, key: Optional[str] = None, *, params: Optional[dict[str, str]] = None,
    ) -> Generator[dict[str, Any], None, None]:
        return self._drain(self._async.iterate(path, key, params=params))

    def list(self, resource: str, monetary_account_id: Optional[int] = None, **params: str) -> Generator[dict[str, Any], None, None]:
        return self._drain(self._async.resource(resource).list(monetary_account_id, **params))

    def fetch(self, resource: str, item_id: int, monetary_account_id: Optional[int] = None) -> dict[str, Any]:
        return self._run(self._async.resource(resource).get(item_id, monetary_account_id))

    def create(self, resource: str, body: dict[str, Any], monetary_account_id: Optional[int] = None) -> int:
        return self._run(self._async.resource(resource).create(body, monetary_account_id))

    def close(self) -> None:
        if self._loop.is_closed():
            return
        self._run(self._async.close())
        self._loop.close()
