from __future__ import annotations

import functools
from collections.abc import MutableSequence
from typing import Protocol


class Orderable(Protocol):
    order: str | None
    slug: str
    prev: Orderable | None
    next: Orderable | None


def compare_order(a: Orderable, b: Orderable) -> int:
    """Compare two resources by order tag, then slug.

    Resources without an order tag sort before resources with one. Tags and
    slugs are compared as strings.

    Args:
        a: First resource.
        b: Second resource.

    Returns:
        Negative, zero or positive, like a classic ``cmp``.
    """
    if a.order is not None and b.order is not None:
        if a.order < b.order:
            return -1
        if a.order > b.order:
            return 1
    elif a.order is not None:
        return 1
    elif b.order is not None:
        return -1

    if a.slug < b.slug:
        return -1
    if a.slug > b.slug:
        return 1
    return 0


order_key = functools.cmp_to_key(compare_order)


def link_siblings(items: MutableSequence[Orderable]) -> None:
    """Point each item's prev/next at its neighbours; the ends get None."""
    prev = None
    for item in items:
        item.prev = prev
        item.next = None
        if prev is not None:
            prev.next = item
        prev = item


def sort_collection(items: MutableSequence[Orderable]) -> None:
    """Sort a collection in place and relink its siblings.

    The sort is stable, so items that compare equal keep insertion order.
    The list object itself is kept, since resources share it by reference.
    """
    items[:] = sorted(items, key=order_key)
    link_siblings(items)
