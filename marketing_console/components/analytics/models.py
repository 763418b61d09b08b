"""
Analytics component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from marketing_console.components.attribution.models import AttributionRow

# --- Enums ---

Granularity = Literal["hour", "day", "week"]
DatePreset = Literal["7d", "30d", "90d", "custom"]
Vertical = Literal["web", "messaging", "ecommerce", "attribution"]

GRANULARITIES: tuple[str, ...] = ("hour", "day", "week")
VERTICALS: tuple[str, ...] = ("web", "messaging", "ecommerce", "attribution")

PLACEHOLDER = "–"


# --- Configuration ---


@dataclass(frozen=True)
class AnalyticsConfig:
    """Dashboard configuration (built from rules)."""

    currency: str = "USD"
    top_limit: int = 10
    date_presets: dict[str, int] = field(
        default_factory=lambda: {"7d": 7, "30d": 30, "90d": 90}
    )
    web_types: frozenset[str] = frozenset({"page_view", "session_start", "form_submit"})
    messaging_types: frozenset[str] = frozenset(
        {
            "message_sent",
            "message_open",
            "message_click",
            "message_bounce",
            "subscriber_new",
            "subscriber_removed",
        }
    )
    ecommerce_types: frozenset[str] = frozenset(
        {"add_to_cart", "favorite", "checkout_started", "checkout_abandoned", "purchase"}
    )
    web_series: tuple[str, ...] = ("page_view", "session_start", "form_submit")
    ecommerce_series: tuple[str, ...] = (
        "add_to_cart",
        "checkout_started",
        "checkout_abandoned",
        "purchase",
    )


DEFAULT_CONFIG = AnalyticsConfig()


# --- Inputs ---


@dataclass(frozen=True)
class DateRange:
    """Closed interval [start, end] of aware datetimes."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class EventScope:
    """
    Dashboard filters applied to the event list.

    Each filter only rejects events that carry a different value; events
    without the attribute pass.
    """

    channel: str | None = None
    agent_id: str | None = None
    message_id: str | None = None
    message_category_id: str | None = None


@dataclass(frozen=True)
class DashboardQuery:
    """Filter state of the analytics dashboard."""

    preset: str = "30d"
    granularity: Granularity = "day"
    custom_start: str | None = None
    custom_end: str | None = None
    scope: EventScope = field(default_factory=EventScope)
    attribution_dimension: Literal["agent", "message"] = "agent"


# --- Outputs ---


@dataclass(frozen=True)
class BucketedSeries:
    """
    Time buckets plus per-type counts.

    series[t][i] is the number of events of type t in buckets[i]. Every
    requested type has an entry, zero-filled when no event matched.
    """

    buckets: tuple[datetime, ...]
    series: dict[str, list[int]]


@dataclass(frozen=True)
class KpiSummary:
    """Scalar rollups over one event list."""

    page_views: int = 0
    sessions: int = 0
    form_submits: int = 0
    sent: int = 0
    opened: int = 0
    clicked: int = 0
    bounced: int = 0
    purchases: int = 0
    revenue: float = 0.0
    aov: float = 0.0
    deliverability: float = 0.0


@dataclass(frozen=True)
class KpiRow:
    """One KPI tile: numeric value and/or display string, plus period delta."""

    label: str
    value: float | None = None
    value_str: str | None = None
    delta: float = 0.0


@dataclass(frozen=True)
class TopPage:
    page_url: str
    views: int


@dataclass(frozen=True)
class TopMessage:
    id: str
    name: str
    sent: int = 0
    opens: int = 0
    clicks: int = 0
    bounces: int = 0
    last_created_at: str | None = None


@dataclass(frozen=True)
class TopProduct:
    id: str
    adds: int = 0
    purchases: int = 0
    revenue: float = 0.0


@dataclass(frozen=True)
class DashboardOutput:
    """Everything the dashboard renders for one filter state."""

    range: DateRange
    previous_range: DateRange
    granularity: Granularity
    kpis: dict[str, list[KpiRow]]
    summary: KpiSummary
    web_series: BucketedSeries
    sends_by_channel: BucketedSeries
    ecommerce_series: BucketedSeries
    top_pages: tuple[TopPage, ...]
    top_messages: tuple[TopMessage, ...]
    top_products: tuple[TopProduct, ...]
    attribution: tuple[AttributionRow, ...] = ()
    event_count: int = 0
