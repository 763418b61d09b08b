"""
Attribution component - revenue credited to agents and messages.

Key behaviors:
- Events are grouped by agent_id or message_id; events without the key are skipped
- purchase adds its revenue (missing revenue counts as 0) and one order
- message_sent adds one send
- Names come from the agent/message reference list, falling back to the raw id
- Rows are sorted by revenue, highest first; ties keep first-seen order
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from marketing_console.domain.entities import Agent, Event, Message

from .models import DIMENSION_KEYS, AttributionRow, ComparePair


def attribute(
    events: Iterable[Event],
    dimension: str,
    agents: Iterable[Agent] = (),
    messages: Iterable[Message] = (),
) -> list[AttributionRow]:
    """
    Credit revenue, orders and sends to each agent or message.

    Raises:
        ValueError: if dimension is not "agent" or "message".
    """
    key_field = DIMENSION_KEYS.get(dimension)
    if key_field is None:
        msg = f"Unknown attribution dimension: {dimension}"
        raise ValueError(msg)

    reference = agents if dimension == "agent" else messages
    names = {r.id: r.name for r in reference}

    totals: dict[str, dict] = {}
    for e in events:
        key = getattr(e, key_field)
        if not key:
            continue
        acc = totals.setdefault(key, {"revenue": 0.0, "orders": 0, "sends": 0})
        if e.event_type == "purchase":
            acc["revenue"] += e.revenue or 0
            acc["orders"] += 1
        elif e.event_type == "message_sent":
            acc["sends"] += 1

    rows = [
        AttributionRow(
            id=key,
            name=names.get(key) or key,
            revenue=acc["revenue"],
            orders=acc["orders"],
            sends=acc["sends"],
            aov=acc["revenue"] / acc["orders"] if acc["orders"] else 0.0,
            roi=acc["revenue"] / acc["sends"] if acc["sends"] else 0.0,
        )
        for key, acc in totals.items()
    ]
    rows.sort(key=lambda r: r.revenue, reverse=True)
    return rows


def compare(
    rows: Sequence[AttributionRow], key_a: str | None, key_b: str | None
) -> ComparePair:
    """Look up the A and B rows by id in an already computed row list."""
    by_id = {r.id: r for r in rows}
    return ComparePair(
        a=by_id.get(key_a) if key_a else None,
        b=by_id.get(key_b) if key_b else None,
    )
