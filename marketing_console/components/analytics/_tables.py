"""
Top-N tables and per-channel send series for the dashboard tabs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import tzinfo

from marketing_console.domain.entities import CHANNELS, Event, Message

from ._buckets import bucketize
from .models import BucketedSeries, DateRange, TopMessage, TopPage, TopProduct

MESSAGE_COUNTERS: dict[str, str] = {
    "message_sent": "sent",
    "message_open": "opens",
    "message_click": "clicks",
    "message_bounce": "bounces",
}

PRODUCT_EVENTS = ("add_to_cart", "purchase")


def top_pages(events: Iterable[Event], limit: int = 10) -> list[TopPage]:
    """Most viewed pages (page_view events with a page_url)."""
    views: dict[str, int] = {}
    for e in events:
        if e.event_type == "page_view" and e.page_url:
            views[e.page_url] = views.get(e.page_url, 0) + 1
    ranked = sorted(views.items(), key=lambda kv: kv[1], reverse=True)
    return [TopPage(page_url=url, views=n) for url, n in ranked[:limit]]


def top_messages(
    events: Iterable[Event], messages: Iterable[Message], limit: int = 10
) -> list[TopMessage]:
    """
    Per-message send funnel, most clicked first (then most opened).

    Messages missing from the reference list are shown under their id.
    """
    names = {m.id: m.name for m in messages}
    created = {m.id: m.created_at for m in messages}
    counters: dict[str, dict[str, int]] = {}
    for e in events:
        field = MESSAGE_COUNTERS.get(e.event_type)
        if field is None or not e.message_id:
            continue
        row = counters.setdefault(
            e.message_id, {"sent": 0, "opens": 0, "clicks": 0, "bounces": 0}
        )
        row[field] += 1

    rows = [
        TopMessage(
            id=mid,
            name=names.get(mid) or mid,
            last_created_at=_as_text(created.get(mid)),
            **c,
        )
        for mid, c in counters.items()
    ]
    rows.sort(key=lambda r: (r.clicks, r.opens), reverse=True)
    return rows[:limit]


def top_products(events: Iterable[Event], limit: int = 10) -> list[TopProduct]:
    """
    Products by revenue (then purchases).

    Only add_to_cart and purchase events open a row.
    """
    acc: dict[str, dict] = {}
    for e in events:
        if not e.product_id or e.event_type not in PRODUCT_EVENTS:
            continue
        row = acc.setdefault(e.product_id, {"adds": 0, "purchases": 0, "revenue": 0.0})
        if e.event_type == "add_to_cart":
            row["adds"] += 1
        elif e.event_type == "purchase":
            row["purchases"] += 1
            row["revenue"] += e.revenue or 0

    rows = [TopProduct(id=pid, **row) for pid, row in acc.items()]
    rows.sort(key=lambda r: (r.revenue, r.purchases), reverse=True)
    return rows[:limit]


def sends_by_channel(
    events: Sequence[Event],
    window: DateRange,
    granularity: str,
    tz: tzinfo,
    channels: Sequence[str] = CHANNELS,
) -> BucketedSeries:
    """message_sent counts per channel over the window's buckets."""
    series: dict[str, list[int]] = {}
    buckets: tuple = ()
    for channel in channels:
        on_channel = [e for e in events if e.channel == channel]
        result = bucketize(
            on_channel, ["message_sent"], window.start, window.end, granularity, tz
        )
        buckets = result.buckets
        series[channel] = result.series["message_sent"]
    return BucketedSeries(buckets=buckets, series=series)


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
