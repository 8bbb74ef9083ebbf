"""
Cursor pagination over list endpoints.

List endpoints take ``count``, ``older_id`` and ``newer_id`` query parameters
and answer with a Pagination object. Walking "older" pages yields the whole
list newest first.
"""

import logging
from typing import Any, AsyncGenerator, Optional

from pydantic import BaseModel, Field

from bunq_client.models.pagination import Page
from bunq_client.transport.envelope import extract_list, extract_pagination
from bunq_client.transport.http import HttpClient

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


class ListOptions(BaseModel):
    count: int = Field(default=0, ge=0, le=MAX_PAGE_SIZE)
    older_id: int = 0
    newer_id: int = 0

    def to_params(self) -> Optional[dict[str, str]]:
        """Query parameters for the set (positive) fields, or None."""
        params = {name: str(value) for name, value in self.model_dump().items() if value > 0}
        return params or None


class Paginator:
    def __init__(self, http: HttpClient, page_size: int = MAX_PAGE_SIZE):
        self._http = http
        self._page_size = page_size

    async def page(
        self, path: str, key: Optional[str] = None, options: Optional[ListOptions] = None,
    ) -> Page:
        """Fetch a single page."""
        params = options.to_params() if options else None
        payload = await self._http.get(path, params=params)
        return Page(items=extract_list(payload, key), pagination=extract_pagination(payload))

    async def iterate(
        self, path: str, key: Optional[str] = None, *, params: Optional[dict[str, str]] = None,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Yield every item of a list endpoint, fetching older pages lazily.

        Stops when the server stops handing out an older cursor, or hands out
        one that does not move backwards. Closing the generator early issues
        no further requests.
        """
        cursor: Optional[int] = None
        while True:
            query = dict(params or {})
            query["count"] = str(self._page_size)
            if cursor is not None:
                query["older_id"] = str(cursor)

            payload = await self._http.get(path, params=query)
            for item in extract_list(payload, key):
                yield item

            pagination = extract_pagination(payload)
            next_cursor = pagination.older_cursor if pagination else None
            if next_cursor is None:
                return
            if cursor is not None and next_cursor >= cursor:
                logger.warning("Cursor for %s did not decrease (%d -> %d), stopping", path, cursor, next_cursor)
                return
            cursor = next_cursor
