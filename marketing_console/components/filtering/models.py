"""
Filtering component models: sort specs, subscription lookups and page filter states.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, TypeVar

from marketing_console.domain.entities import Profile

T = TypeVar("T")

Predicate = Callable[[Any], bool]

# Values that switch a categorical filter off.
SENTINELS: frozenset[str] = frozenset({"all", "any", ""})

SortKind = Literal["text", "number", "date"]
Timeframe = Literal["30d", "90d", "all"]
DecisionRange = Literal["24h", "7d", "30d", "all"]
DecisionStatus = Literal["holdout", "failed", "sent", "skipped"]

TIMEFRAME_DAYS: dict[str, int | None] = {"30d": 30, "90d": 90, "all": None}
DECISION_RANGE_HOURS: dict[str, int | None] = {
    "24h": 24,
    "7d": 7 * 24,
    "30d": 30 * 24,
    "all": None,
}
DECISION_STATUS_LABELS: dict[str, str] = {
    "holdout": "Holdout",
    "failed": "Failed",
    "sent": "Sent",
    "skipped": "Skipped",
}


# --- Pipeline ---


@dataclass(frozen=True)
class SortSpec:
    """
    Single-key sort.

    text sorts case-insensitively, number treats None as 0, date treats
    unparseable values as the epoch.
    """

    key: Callable[[Any], Any]
    kind: SortKind = "text"
    descending: bool = False


# --- Subscriptions ---


@dataclass(frozen=True)
class NoRecord:
    """No subscription row exists for the (profile, channel) pair."""


@dataclass(frozen=True)
class Explicit:
    """Statuses of the stored rows for the (profile, channel) pair, in store order."""

    statuses: tuple[str, ...]


SubscriptionLookup = NoRecord | Explicit


# --- Page filter states ---


@dataclass(frozen=True)
class ProfileFilter:
    search: str = ""


@dataclass(frozen=True)
class MemberFilter:
    """Segment membership table."""

    search: str = ""
    email: str = "any"
    sms: str = "any"
    push: str = "any"
    sort_by: Literal["name", "date_added", "ltv"] = "name"
    timeframe: Timeframe = "30d"


@dataclass(frozen=True)
class SegmentListFilter:
    search: str = ""
    sort_by: Literal["name", "profiles", "growth"] = "name"
    descending: bool = False


@dataclass(frozen=True)
class AgentFilter:
    search: str = ""
    status: Literal["all", "active", "inactive"] = "all"
    sort: Literal["created_desc", "created_asc", "name_asc", "name_desc"] = "created_desc"


@dataclass(frozen=True)
class DecisionFilter:
    date_range: DecisionRange = "7d"
    channel: str = "all"
    status: str = "all"
    search: str = ""
    sort: Literal["newest", "oldest"] = "newest"


# --- Results ---


@dataclass(frozen=True)
class MemberRow:
    """A segment member with its derived columns."""

    profile: Profile
    name: str
    added_at: Any
    ltv: float
    email_status: str
    sms_status: str
    push_status: str


@dataclass(frozen=True)
class MemberMetrics:
    """Purchase rollups for a segment's members within a timeframe."""

    orders: int = 0
    revenue: float = 0.0
    aov: float = 0.0
    status_counts: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class SegmentSummary:
    id: str
    name: str
    profiles: int = 0
    growth: int = 0
    description: str | None = None


@dataclass(frozen=True)
class Page:
    """1-based page slice of a filtered list."""

    rows: tuple
    page: int
    page_size: int
    total_rows: int
    total_pages: int
