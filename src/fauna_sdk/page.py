"""Cursor-driven pagination over query results."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeFailure
from .query import paginate

if TYPE_CHECKING:  # pragma: no cover
    from .client import FaunaClient

logger = logging.getLogger("fauna_sdk.page")

_PASS_THROUGH = ("size", "ts", "events", "sources")


class Page(BaseModel):
    """A single page of a paginated set."""

    model_config = ConfigDict(extra="allow")

    data: List[Any] = Field(default_factory=list)
    before: Optional[Any] = None
    after: Optional[Any] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Page":
        return cls.model_validate(raw)


class PageHelper:
    """Walks a set one page at a time.

    Starting with a ``before`` cursor walks the set backwards, otherwise it is
    walked forwards from ``after`` (or the beginning). Each step is exactly one
    awaited query; the cursor only moves once a page has been received, so a
    failed step can be retried with the same cursor. Overlapping calls to
    ``next_page`` are serialized. Once a page arrives without a marker in the
    walking direction the helper is exhausted.
    """

    def __init__(
        self,
        client: "FaunaClient",
        set_expr: Any,
        params: Optional[Dict[str, Any]] = None,
        *,
        secret: Optional[str] = None,
        flatten: bool = False,
    ) -> None:
        params = dict(params or {})
        unknown = set(params) - set(_PASS_THROUGH) - {"before", "after"}
        if unknown:
            raise TypeError(f"Unexpected paginate parameters: {sorted(unknown)}")

        self._client = client
        self._set = set_expr
        self._params = {key: params[key] for key in _PASS_THROUGH if params.get(key) is not None}
        self._secret = secret
        self._flatten = flatten
        self._exhausted = False
        self._lock = asyncio.Lock()

        if params.get("before") is not None:
            self._cursor: Tuple[Optional[str], Any] = ("before", params["before"])
        elif params.get("after") is not None:
            self._cursor = ("after", params["after"])
        else:
            self._cursor = (None, None)
        self._reverse = self._cursor[0] == "before"

    @property
    def cursor(self) -> Tuple[Optional[str], Any]:
        return self._cursor

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _build_query(self) -> Any:
        direction, value = self._cursor
        cursor: Dict[str, Any] = {direction: value} if direction else {}
        return paginate(self._set, **self._params, **cursor)

    async def next_page(self) -> Optional[Page]:
        """Fetch the next page, or return ``None`` once the set is exhausted."""
        async with self._lock:
            if self._exhausted:
                return None

            raw, request_result = await self._client._query_with_result(self._build_query(), secret=self._secret)
            try:
                page = Page.from_raw(raw)
            except ValidationError as exc:
                raise DecodeFailure("Query result is not a page", request_result) from exc

            direction = "before" if self._reverse else "after"
            marker = getattr(page, direction)
            if marker is None:
                self._exhausted = True
            else:
                self._cursor = (direction, marker)
            logger.debug("Fetched page items=%d cursor=%s exhausted=%s", len(page.data), self._cursor, self._exhausted)
            return page

    async def each_page(self) -> AsyncIterator[Page]:
        while True:
            page = await self.next_page()
            if page is None:
                return
            yield page

    async def each_item(self) -> AsyncIterator[Any]:
        async for page in self.each_page():
            for item in page.data:
                yield item

    def __aiter__(self) -> AsyncIterator[Any]:
        if self._flatten:
            return self.each_item()
        return self.each_page()


__all__ = ["Page", "PageHelper"]
