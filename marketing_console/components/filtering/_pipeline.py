"""
Generic filter/sort pipeline.

Every list page is a set of independent predicates followed by one stable
sort. A builder returns None when its filter is switched off (empty search,
"all"/"any" sentinel) so callers can pass its result straight to
apply_pipeline.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, tzinfo
from typing import Any

from marketing_console.domain.timeutil import parse_timestamp

from .models import SENTINELS, Page, Predicate, SortSpec, T


def text_search(
    query: str | None, fields: Callable[[Any], Iterable[str | None]]
) -> Predicate | None:
    """Case-insensitive substring match over the space-joined fields."""
    q = (query or "").strip().lower()
    if not q:
        return None

    def match(item: Any) -> bool:
        haystack = " ".join(f or "" for f in fields(item)).lower()
        return q in haystack

    return match


def equals(value: Any, get: Callable[[Any], Any]) -> Predicate | None:
    """field == value, off for the "all"/"any" sentinels."""
    if value is None or (isinstance(value, str) and value in SENTINELS):
        return None
    return lambda item: get(item) == value


def one_of(values: Iterable[Any] | None, get: Callable[[Any], Any]) -> Predicate | None:
    """field in values, off when values is empty or contains a sentinel."""
    wanted = set(values or ())
    if not wanted or wanted & SENTINELS:
        return None
    return lambda item: get(item) in wanted


def date_between(
    get: Callable[[Any], Any],
    start: datetime | None,
    end: datetime | None,
    tz: tzinfo,
) -> Predicate | None:
    """
    Inclusive timestamp bounds; unparseable timestamps fail.

    Off when both bounds are None.
    """
    if start is None and end is None:
        return None

    def match(item: Any) -> bool:
        ts = parse_timestamp(get(item), tz)
        if ts is None:
            return False
        if start is not None and ts < start:
            return False
        return end is None or ts <= end

    return match


def since(get: Callable[[Any], Any], cutoff: datetime | None, tz: tzinfo) -> Predicate | None:
    return date_between(get, cutoff, None, tz)


def sort_value(value: Any, kind: str, tz: tzinfo) -> Any:
    if kind == "text":
        return str(value or "").casefold()
    if kind == "number":
        return value or 0
    if kind == "date":
        ts = parse_timestamp(value, tz)
        return ts.timestamp() if ts is not None else 0.0
    msg = f"Unknown sort kind: {kind}"
    raise ValueError(msg)


def apply_pipeline(
    items: Iterable[T],
    predicates: Iterable[Predicate | None] = (),
    sort: SortSpec | None = None,
    tz: tzinfo | None = None,
) -> list[T]:
    """
    Filter then stable-sort, returning a new list.

    The input is never mutated; equal sort keys keep their input order, also
    when descending.
    """
    active = [p for p in predicates if p is not None]
    out = [item for item in items if all(p(item) for p in active)]
    if sort is not None:
        zone = tz or UTC
        out.sort(
            key=lambda item: sort_value(sort.key(item), sort.kind, zone),
            reverse=sort.descending,
        )
    return out


def paginate(items: Sequence[T], page: int, page_size: int) -> Page:
    """1-based page; out-of-range pages are clamped."""
    if page_size < 1:
        msg = f"page_size must be positive, got {page_size}"
        raise ValueError(msg)
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return Page(
        rows=tuple(items[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_rows=total,
        total_pages=total_pages,
    )
