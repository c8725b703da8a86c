from __future__ import annotations

import pytest

from meta_ads_mcp.meta_client.paginator import after_cursor, collect_pages, has_next_page


def _page(items: list[int], after: str | None = None, next_url: str | None = None) -> dict:
    paging: dict = {}
    if after is not None:
        paging["cursors"] = {"before": "b", "after": after}
    if next_url is not None:
        paging["next"] = next_url
    page: dict = {"data": items}
    if paging:
        page["paging"] = paging
    return page


def test_cursor_helpers() -> None:
    assert after_cursor({"cursors": {"after": "A"}}) == "A"
    assert after_cursor({"cursors": {"after": ""}}) is None
    assert after_cursor(None) is None
    assert has_next_page({"next": "https://graph/next"})
    assert has_next_page({"cursors": {"after": "A"}})
    assert not has_next_page({})


@pytest.mark.asyncio
async def test_collects_all_pages() -> None:
    pages = {"A": _page([2], after="B"), "B": _page([3])}
    calls: list[str] = []

    async def fetch_next(after: str) -> dict:
        calls.append(after)
        return pages[after]

    items = await collect_pages(_page([1], after="A"), fetch_next)

    assert items == [1, 2, 3]
    assert calls == ["A", "B"]


@pytest.mark.asyncio
async def test_stops_at_max_items() -> None:
    calls: list[str] = []

    async def fetch_next(after: str) -> dict:
        calls.append(after)
        return _page([2], after="B")

    items = await collect_pages(_page([1], after="A"), fetch_next, max_items=2)

    assert items == [1, 2]
    assert calls == ["A"]


@pytest.mark.asyncio
async def test_truncates_oversized_page() -> None:
    async def fetch_next(after: str) -> dict:
        raise AssertionError("should not fetch")

    assert await collect_pages(_page([1, 2, 3, 4]), fetch_next, max_items=3) == [1, 2, 3]


@pytest.mark.asyncio
async def test_next_link_without_cursor_ends_walk() -> None:
    async def fetch_next(after: str) -> dict:
        raise AssertionError("should not fetch")

    items = await collect_pages(_page([1, 2], next_url="https://graph/next"), fetch_next)
    assert items == [1, 2]


@pytest.mark.asyncio
async def test_fetch_error_propagates() -> None:
    async def fetch_next(after: str) -> dict:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await collect_pages(_page([1], after="A"), fetch_next)
