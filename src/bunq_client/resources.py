"""
Schema-driven resource API.

Each endpoint family is one ResourceSchema row; ResourceAPI turns a row into
list/page/get/create/update/delete calls. Payloads stay plain dicts.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Callable, Optional

from pydantic import BaseModel

from bunq_client.errors import BunqError
from bunq_client.pagination import ListOptions, Paginator
from bunq_client.models.pagination import Page
from bunq_client.transport.envelope import extract, extract_id
from bunq_client.transport.http import HttpClient

ALL_OPERATIONS = frozenset({"list", "get", "create", "update", "delete"})


class ResourceSchema(BaseModel):
    name: str
    path: str  # may contain {user_id} and {monetary_account_id}
    key: str  # envelope key; prefix-matched for variants
    operations: frozenset[str] = ALL_OPERATIONS


RESOURCES: dict[str, ResourceSchema] = {
    schema.name: schema
    for schema in (
        ResourceSchema(name="user", path="user", key="User", operations=frozenset({"list", "get"})),
        ResourceSchema(
            name="monetary-account", path="user/{user_id}/monetary-account",
            key="MonetaryAccount", operations=frozenset({"list", "get"}),
        ),
        ResourceSchema(
            name="monetary-account-bank", path="user/{user_id}/monetary-account-bank",
            key="MonetaryAccountBank", operations=frozenset({"list", "get", "create", "update"}),
        ),
        ResourceSchema(
            name="payment", path="user/{user_id}/monetary-account/{monetary_account_id}/payment",
            key="Payment", operations=frozenset({"list", "get", "create"}),
        ),
        ResourceSchema(
            name="request-inquiry", path="user/{user_id}/monetary-account/{monetary_account_id}/request-inquiry",
            key="RequestInquiry", operations=frozenset({"list", "get", "create", "update"}),
        ),
        ResourceSchema(
            name="card", path="user/{user_id}/card", key="Card",
            operations=frozenset({"list", "get", "update"}),
        ),
    )
}


class ResourceAPI:
    def __init__(
        self,
        schema: ResourceSchema,
        http: HttpClient,
        paginator: Paginator,
        scope: Callable[[], dict[str, int]],
    ):
        self._schema = schema
        self._http = http
        self._paginator = paginator
        self._scope = scope

    @property
    def schema(self) -> ResourceSchema:
        return self._schema

    def _path(self, monetary_account_id: Optional[int], item_id: Optional[int] = None) -> str:
        values = self._scope()
        if monetary_account_id:
            values["monetary_account_id"] = monetary_account_id
        path = self._schema.path.format(**values)
        return f"{path}/{item_id}" if item_id is not None else path

    def _check(self, operation: str) -> None:
        if operation not in self._schema.operations:
            raise BunqError(
                "unsupported_operation", f"{self._schema.name} does not support {operation}",
            )

    async def list(
        self, monetary_account_id: Optional[int] = None, **params: str,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Iterate over every item, newest first."""
        self._check("list")
        async for item in self._paginator.iterate(
            self._path(monetary_account_id), self._schema.key, params=params or None,
        ):
            yield item

    async def page(
        self, monetary_account_id: Optional[int] = None, options: Optional[ListOptions] = None,
    ) -> Page:
        self._check("list")
        return await self._paginator.page(self._path(monetary_account_id), self._schema.key, options)

    async def get(self, item_id: int, monetary_account_id: Optional[int] = None) -> dict[str, Any]:
        self._check("get")
        payload = await self._http.get(self._path(monetary_account_id, item_id))
        return extract(payload, self._schema.key)

    async def create(self, body: dict[str, Any], monetary_account_id: Optional[int] = None) -> int:
        """Create an item and return its id."""
        self._check("create")
        payload = await self._http.post(self._path(monetary_account_id), body)
        return extract_id(payload)

    async def update(
        self, item_id: int, body: dict[str, Any], monetary_account_id: Optional[int] = None,
    ) -> int:
        self._check("update")
        payload = await self._http.put(self._path(monetary_account_id, item_id), body)
        return extract_id(payload)

    async def delete(self, item_id: int, monetary_account_id: Optional[int] = None) -> None:
        self._check("delete")
        await self._http.delete(self._path(monetary_account_id, item_id))
