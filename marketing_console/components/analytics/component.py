"""
Analytics component - event aggregation for the dashboard.

Turns the account's event list plus a filter state into buckets, per-type
series, KPI rows with previous-period deltas, top tables and attribution.

Invariants:
- Every requested series type is present and zero-filled
- Events with unparseable timestamps fall in no window and no bucket
- Division by zero yields 0 or the "–" placeholder, never NaN/inf
- Inputs are never mutated
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, tzinfo

from marketing_console.components.attribution import attribute
from marketing_console.domain.entities import Agent, Event, Message
from marketing_console.rules.models import Rules

from ._buckets import bucketize
from ._kpi import (
    build_kpi_rows,
    category_message_ids,
    filter_events,
    previous_period,
    resolve_date_range,
    summarize,
)
from ._tables import sends_by_channel, top_messages, top_pages, top_products
from .models import (
    DEFAULT_CONFIG,
    GRANULARITIES,
    AnalyticsConfig,
    DashboardOutput,
    DashboardQuery,
)


def config_from_rules(rules: Rules) -> AnalyticsConfig:
    """Build the dashboard configuration from loaded rules."""
    a = rules.analytics
    return AnalyticsConfig(
        currency=a.currency,
        top_limit=a.top_limit,
        date_presets=dict(a.date_presets),
        web_types=frozenset(a.event_groups.web),
        messaging_types=frozenset(a.event_groups.messaging),
        ecommerce_types=frozenset(a.event_groups.ecommerce),
        web_series=tuple(a.series_types.web),
        ecommerce_series=tuple(a.series_types.ecommerce),
    )


def run_dashboard(
    query: DashboardQuery,
    events: Sequence[Event],
    *,
    now: datetime,
    tz: tzinfo,
    agents: Sequence[Agent] = (),
    messages: Sequence[Message] = (),
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> DashboardOutput:
    """
    Compute everything the dashboard shows for one filter state.

    Raises:
        ValueError: if the granularity or attribution dimension is unknown.
    """
    if query.granularity not in GRANULARITIES:
        msg = f"Unknown granularity: {query.granularity}"
        raise ValueError(msg)

    window = resolve_date_range(
        query.preset,
        now,
        tz,
        query.custom_start,
        query.custom_end,
        presets=config.date_presets,
    )
    prev_window = previous_period(window, tz)

    category_ids = None
    if query.scope.message_category_id:
        category_ids = category_message_ids(messages, query.scope.message_category_id)

    current = filter_events(events, window, tz, query.scope, category_ids)
    previous = filter_events(events, prev_window, tz, query.scope, category_ids)

    web_events = [e for e in current if e.event_type in config.web_types]
    messaging_events = [e for e in current if e.event_type in config.messaging_types]
    ecommerce_events = [e for e in current if e.event_type in config.ecommerce_types]

    summary = summarize(current)
    granularity = query.granularity

    return DashboardOutput(
        range=window,
        previous_range=prev_window,
        granularity=granularity,
        kpis=build_kpi_rows(summary, summarize(previous), config.currency),
        summary=summary,
        web_series=bucketize(
            web_events, config.web_series, window.start, window.end, granularity, tz
        ),
        sends_by_channel=sends_by_channel(messaging_events, window, granularity, tz),
        ecommerce_series=bucketize(
            ecommerce_events,
            config.ecommerce_series,
            window.start,
            window.end,
            granularity,
            tz,
        ),
        top_pages=tuple(top_pages(web_events, config.top_limit)),
        top_messages=tuple(top_messages(messaging_events, messages, config.top_limit)),
        top_products=tuple(top_products(ecommerce_events, config.top_limit)),
        attribution=tuple(
            attribute(current, query.attribution_dimension, agents, messages)
        ),
        event_count=len(current),
    )
