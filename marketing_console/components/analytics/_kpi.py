"""
Date windows, event scoping and KPI rollups.

Key behaviors:
- Presets cover whole local days ending today; "custom" needs both dates and
  otherwise falls back to 7 days
- The previous period ends the day before the current one starts and spans
  ceil(days)+1 days before start
- Deltas divide by max(1, previous): previous == 0 reports the raw current value
- Ratios return 0, or the "–" placeholder for display strings, when the
  denominator is 0
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, tzinfo

from marketing_console.domain.entities import Event, Message
from marketing_console.domain.timeutil import (
    add_days,
    days_spanned,
    end_of_day,
    parse_timestamp,
    start_of_day,
)

from .models import PLACEHOLDER, DateRange, EventScope, KpiRow, KpiSummary

DEFAULT_PRESETS: dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}
FALLBACK_DAYS = 7

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "CA$",
}


# --- Numeric helpers ---


def pct(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator * 100


def period_delta(current: float, previous: float) -> float:
    """Fractional change vs the previous period, denominator floored at 1."""
    return (current - previous) / max(1, previous)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_currency(amount: float, currency: str = "USD") -> str:
    """Render an amount as e.g. "$1,234.50"."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if amount < 0 else ""
    if symbol is None:
        return f"{sign}{currency.upper()} {abs(amount):,.2f}"
    return f"{sign}{symbol}{abs(amount):,.2f}"


# --- Date windows ---


def resolve_date_range(
    preset: str,
    now: datetime,
    tz: tzinfo,
    custom_start: str | datetime | None = None,
    custom_end: str | datetime | None = None,
    presets: Mapping[str, int] | None = None,
) -> DateRange:
    """
    Resolve a dashboard date preset to a closed local-day range.

    Unknown presets, and "custom" without two parseable dates, use 7 days.
    """
    if preset == "custom":
        cs = parse_timestamp(custom_start, tz)
        ce = parse_timestamp(custom_end, tz)
        if cs is not None and ce is not None:
            return DateRange(start=start_of_day(cs, tz), end=end_of_day(ce, tz))
        days = FALLBACK_DAYS
    else:
        days = (presets or DEFAULT_PRESETS).get(preset, FALLBACK_DAYS)

    end = end_of_day(now, tz)
    start = start_of_day(add_days(now, -days + 1, tz), tz)
    return DateRange(start=start, end=end)


def previous_period(current: DateRange, tz: tzinfo) -> DateRange:
    """The window of equal day length immediately before the current one."""
    span = days_spanned(current.start, current.end)
    start = add_days(current.start, -(span + 1), tz)
    end = end_of_day(add_days(current.start, -1, tz), tz)
    return DateRange(start=start, end=end)


def in_window(value: object, start: datetime, end: datetime, tz: tzinfo) -> bool:
    ts = parse_timestamp(value, tz)
    return ts is not None and start <= ts <= end


# --- Event scoping ---


def category_message_ids(messages: Iterable[Message], category_id: str) -> frozenset[str]:
    """Ids of the messages filed under a category."""
    return frozenset(m.id for m in messages if m.category_id == category_id)


def filter_events(
    events: Iterable[Event],
    window: DateRange,
    tz: tzinfo,
    scope: EventScope | None = None,
    category_messages: frozenset[str] | None = None,
) -> list[Event]:
    """
    Events inside the window that the scope does not reject.

    category_messages is the id set for scope.message_category_id; an event
    with a message id outside the set is dropped.
    """
    scope = scope or EventScope()
    out: list[Event] = []
    for e in events:
        if not in_window(e.occurred_at, window.start, window.end, tz):
            continue
        if scope.channel and e.channel and e.channel != scope.channel:
            continue
        if scope.agent_id and e.agent_id and e.agent_id != scope.agent_id:
            continue
        if scope.message_id and e.message_id and e.message_id != scope.message_id:
            continue
        if (
            scope.message_category_id
            and category_messages is not None
            and e.message_id
            and e.message_id not in category_messages
        ):
            continue
        out.append(e)
    return out


# --- Rollups ---


def summarize(events: Sequence[Event]) -> KpiSummary:
    """Scalar counts and sums for every vertical."""
    counts: dict[str, int] = {}
    revenue = 0.0
    for e in events:
        counts[e.event_type] = counts.get(e.event_type, 0) + 1
        if e.event_type == "purchase":
            revenue += e.revenue or 0

    sent = counts.get("message_sent", 0)
    bounced = counts.get("message_bounce", 0)
    purchases = counts.get("purchase", 0)
    return KpiSummary(
        page_views=counts.get("page_view", 0),
        sessions=counts.get("session_start", 0),
        form_submits=counts.get("form_submit", 0),
        sent=sent,
        opened=counts.get("message_open", 0),
        clicked=counts.get("message_click", 0),
        bounced=bounced,
        purchases=purchases,
        revenue=revenue,
        aov=revenue / purchases if purchases else 0.0,
        deliverability=1 - bounced / sent if sent else 0.0,
    )


def build_kpi_rows(
    current: KpiSummary, previous: KpiSummary, currency: str = "USD"
) -> dict[str, list[KpiRow]]:
    """KPI tiles per vertical (web, messaging, ecommerce, attribution)."""
    c, p = current, previous

    def money(v: float) -> str:
        return format_currency(v, currency)

    engagement = (
        f"{round_half_up(pct(c.opened, c.sent))}%" if c.sent else PLACEHOLDER
    )
    web = [
        KpiRow("Page views", value=c.page_views, delta=period_delta(c.page_views, p.page_views)),
        KpiRow("Sessions", value=c.sessions),
        KpiRow("Form submits", value=c.form_submits),
        KpiRow("Eng. rate", value_str=engagement),
    ]
    messaging = [
        KpiRow("Sent", value=c.sent, delta=period_delta(c.sent, p.sent)),
        KpiRow("Opened", value=c.opened),
        KpiRow("Clicked", value=c.clicked),
        KpiRow("Bounced", value=c.bounced),
    ]
    ecommerce = [
        KpiRow("Purchases", value=c.purchases),
        KpiRow(
            "Revenue",
            value=c.revenue,
            value_str=money(c.revenue),
            delta=period_delta(c.revenue, p.revenue),
        ),
        KpiRow("AOV", value_str=money(c.aov) if c.purchases else PLACEHOLDER),
        KpiRow("Conv. rate", value_str=f"{pct(c.purchases, c.sessions):.1f}%"),
    ]
    roi = f"{c.revenue / max(1, c.sent):.2f}x" if c.purchases else PLACEHOLDER
    attribution = [
        KpiRow("Revenue (attr.)", value=c.revenue, value_str=money(c.revenue)),
        KpiRow("Orders", value=c.purchases),
        KpiRow("AOV", value_str=money(c.aov) if c.purchases else PLACEHOLDER),
        KpiRow("ROI", value_str=roi),
    ]
    return {
        "web": web,
        "messaging": messaging,
        "ecommerce": ecommerce,
        "attribution": attribution,
    }

