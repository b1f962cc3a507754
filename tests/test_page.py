from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

import httpx
import pytest

from fauna_sdk.client import FaunaClient, secret_header
from fauna_sdk.config import ClientConfig
from fauna_sdk.errors import DecodeFailure, Unavailable
from fauna_sdk.page import Page, PageHelper
from fauna_sdk.query import index, match

USERS = match(index("all_users"))


class PagedServer:
    """Serves a scripted list of responses and records each paginate call."""

    def __init__(self, responses: List[httpx.Response]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(json.loads(request.content))
        return self.responses.pop(0)


def page(data: List[Any], **markers: Any) -> httpx.Response:
    return httpx.Response(200, json={"resource": {"data": data, **markers}})


def make_client(server: PagedServer) -> FaunaClient:
    return FaunaClient(ClientConfig(domain="db.example.com", secret="s"), transport=httpx.MockTransport(server))


@pytest.mark.asyncio
async def test_walks_forward_until_no_after_marker() -> None:
    server = PagedServer([page([1, 2], after="A"), page([3, 4], after="B", before="A"), page([5], before="B")])
    helper = make_client(server).paginate(USERS, size=2)

    pages = [p async for p in helper]

    assert [p.data for p in pages] == [[1, 2], [3, 4], [5]]
    assert len(server.calls) == 3
    assert "after" not in server.calls[0]
    assert server.calls[1]["after"] == "A"
    assert server.calls[2]["after"] == "B"
    assert all(call["size"] == 2 for call in server.calls)
    assert all(call["paginate"] == {"match": {"index": "all_users"}} for call in server.calls)
    assert helper.exhausted
    assert await helper.next_page() is None
    assert len(server.calls) == 3


@pytest.mark.asyncio
async def test_flatten_yields_items() -> None:
    server = PagedServer([page(["a", "b"], after="A"), page(["c"])])
    helper = make_client(server).paginate(USERS, flatten=True)

    items = [item async for item in helper]

    assert items == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_each_item_and_pass_through_params() -> None:
    server = PagedServer([page([{"action": "add"}])])
    helper = make_client(server).paginate(USERS, size=10, events=True, sources=True, ts=1500)

    items = [item async for item in helper.each_item()]

    assert items == [{"action": "add"}]
    call = server.calls[0]
    assert call["size"] == 10
    assert call["events"] is True
    assert call["sources"] is True
    assert call["ts"] == 1500


@pytest.mark.asyncio
async def test_before_cursor_walks_backwards() -> None:
    server = PagedServer([page([4, 5], before="C", after="Z"), page([2, 3], before="B", after="C"), page([1], after="B")])
    helper = make_client(server).paginate(USERS, before="Z")

    pages = [p async for p in helper.each_page()]

    assert [p.data for p in pages] == [[4, 5], [2, 3], [1]]
    assert [call.get("before") for call in server.calls] == ["Z", "C", "B"]
    assert all("after" not in call for call in server.calls)


@pytest.mark.asyncio
async def test_initial_after_cursor_is_sent() -> None:
    server = PagedServer([page([9])])
    helper = make_client(server).paginate(USERS, after=[{"@ref": "users/9"}])

    await helper.next_page()

    assert server.calls[0]["after"] == [{"@ref": "users/9"}]


@pytest.mark.asyncio
async def test_failed_fetch_leaves_cursor_in_place() -> None:
    server = PagedServer(
        [
            page([1], after="A"),
            httpx.Response(503, json={"errors": [{"code": "unavailable", "description": "try later"}]}),
            page([2]),
        ]
    )
    helper = make_client(server).paginate(USERS)

    first = await helper.next_page()
    assert first is not None and first.data == [1]
    assert helper.cursor == ("after", "A")

    with pytest.raises(Unavailable):
        await helper.next_page()
    assert helper.cursor == ("after", "A")
    assert not helper.exhausted

    second = await helper.next_page()
    assert second is not None and second.data == [2]
    assert server.calls[1]["after"] == server.calls[2]["after"] == "A"
    assert helper.exhausted


@pytest.mark.asyncio
async def test_per_helper_secret_is_used() -> None:
    seen: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return page([])

    client = FaunaClient(ClientConfig(domain="db.example.com", secret="s"), transport=httpx.MockTransport(handler))
    await client.paginate(USERS, secret="other").next_page()

    assert seen == [secret_header("other")]


def test_unknown_params_are_rejected() -> None:
    client = FaunaClient(ClientConfig(domain="db.example.com"), transport=httpx.MockTransport(lambda r: page([])))
    with pytest.raises(TypeError):
        PageHelper(client, USERS, {"sizee": 10})


def test_page_from_raw() -> None:
    parsed = Page.from_raw({"data": [1], "after": "A"})
    assert parsed.data == [1]
    assert parsed.after == "A"
    assert parsed.before is None


@pytest.mark.asyncio
async def test_overlapping_next_page_calls_advance_in_order() -> None:
    calls: List[Dict[str, Any]] = []
    responses = [page([1], after="A"), page([2], after="B"), page([3])]

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        await asyncio.sleep(0)
        return responses.pop(0)

    client = FaunaClient(ClientConfig(domain="db.example.com"), transport=httpx.MockTransport(handler))
    helper = client.paginate(USERS)

    first, second = await asyncio.gather(helper.next_page(), helper.next_page())

    assert [call.get("after") for call in calls] == [None, "A"]
    assert first.data == [1]
    assert second.data == [2]
    assert helper.cursor == ("after", "B")


@pytest.mark.asyncio
@pytest.mark.parametrize("resource", [[1, 2], {"data": "x"}, "not a page"])
async def test_non_page_resource_raises_decode_failure(resource: Any) -> None:
    server = PagedServer([httpx.Response(200, json={"resource": resource})])
    helper = make_client(server).paginate(USERS)

    with pytest.raises(DecodeFailure) as excinfo:
        await helper.next_page()

    assert excinfo.value.request_result.response_content == {"resource": resource}
    assert helper.cursor == (None, None)
    assert not helper.exhausted
