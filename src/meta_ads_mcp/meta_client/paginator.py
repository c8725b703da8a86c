"""Cursor-based pagination over Graph API list envelopes."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, TypeVar

T = TypeVar("T")

Page = Mapping[str, Any]


def after_cursor(paging: Mapping[str, Any] | None) -> str | None:
    if not paging:
        return None
    cursors = paging.get("cursors") or {}
    after = cursors.get("after")
    return after or None


def has_next_page(paging: Mapping[str, Any] | None) -> bool:
    if not paging:
        return False
    return bool(paging.get("next")) or after_cursor(paging) is not None


async def collect_pages(
    first_page: Page,
    fetch_next: Callable[[str], Awaitable[Page]],
    max_items: int = 1000,
) -> list[T]:
    """Gather items from ``first_page`` and its successors, up to ``max_items``.

    Collection follows ``paging.cursors.after`` only: a page with a ``next``
    link but no ``after`` cursor ends the walk. Items are not deduplicated.
    """

    items: list[T] = list(first_page.get("data") or [])
    paging = first_page.get("paging")
    while len(items) < max_items and has_next_page(paging):
        after = after_cursor(paging)
        if after is None:
            break
        page = await fetch_next(after)
        items.extend(page.get("data") or [])
        paging = page.get("paging")
    return items[:max_items]


__all__ = ["after_cursor", "collect_pages", "has_next_page"]
