"""
Pagination descriptor returned next to list responses.
"""

from typing import Any, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel


def _cursor_from_url(url: Optional[str], param: str) -> Optional[int]:
    if not url:
        return None
    values = parse_qs(urlsplit(url).query).get(param)
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


class Pagination(BaseModel):
    """Cursor information for a list page.

    The live API sends ``older_url``/``newer_url``/``future_url``
    (e.g. ``/v1/user/1/monetary-account/2/payment?older_id=100&count=10``);
    some responses carry the bare ``*_id`` values instead. Both are accepted.
    """
    older_id: Optional[int] = None
    newer_id: Optional[int] = None
    future_id: Optional[int] = None
    older_url: Optional[str] = None
    newer_url: Optional[str] = None
    future_url: Optional[str] = None
    count: Optional[int] = None

    @property
    def older_cursor(self) -> Optional[int]:
        if self.older_id is not None:
            return self.older_id
        return _cursor_from_url(self.older_url, "older_id")

    @property
    def newer_cursor(self) -> Optional[int]:
        if self.newer_id is not None:
            return self.newer_id
        return _cursor_from_url(self.newer_url, "newer_id")

    @property
    def future_cursor(self) -> Optional[int]:
        if self.future_id is not None:
            return self.future_id
        return _cursor_from_url(self.future_url, "newer_id")


class Page(BaseModel):
    items: list[dict[str, Any]]
    pagination: Optional[Pagination] = None
