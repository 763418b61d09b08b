"""
Concrete filter/sort pipelines for the console's list pages.

Key behaviors:
- Searches are case-insensitive substring matches over page-specific fields
- Channel status filters go through the subscription lookup, so a missing row
  matches "pending"
- Relative windows ("24h", "30d", ...) are measured back from the caller's now
- Unparseable dates fail date windows and sort as the epoch
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime, timedelta, tzinfo

from marketing_console.domain.entities import (
    Agent,
    AgentDecision,
    ChannelSubscription,
    Event,
    Message,
    Profile,
    Segment,
    SegmentProfile,
    full_name,
)

from ._pipeline import apply_pipeline, date_between, equals, since, text_search
from ._subscriptions import (
    display_status,
    index_subscriptions,
    lookup_subscription,
    status_counts,
    status_matches,
)
from .models import (
    DECISION_RANGE_HOURS,
    TIMEFRAME_DAYS,
    AgentFilter,
    DecisionFilter,
    MemberFilter,
    MemberMetrics,
    MemberRow,
    ProfileFilter,
    SegmentListFilter,
    SegmentSummary,
    SortSpec,
)

# --- Profiles ---


def filter_profiles(profiles: Iterable[Profile], state: ProfileFilter) -> list[Profile]:
    """Profiles list: search over name, email, phone and device id."""
    search = text_search(
        state.search, lambda p: (full_name(p), p.email, p.phone, p.device_id)
    )
    return apply_pipeline(profiles, [search])


# --- Segment members ---


def _timeframe_cutoff(timeframe: str, now: datetime) -> datetime | None:
    if timeframe not in TIMEFRAME_DAYS:
        msg = f"Unknown timeframe: {timeframe}"
        raise ValueError(msg)
    days = TIMEFRAME_DAYS[timeframe]
    return None if days is None else now - timedelta(days=days)


def _purchases_in_timeframe(
    events: Iterable[Event], timeframe: str, now: datetime, tz: tzinfo
) -> list[Event]:
    cutoff = _timeframe_cutoff(timeframe, now)
    in_frame = since(lambda e: e.occurred_at, cutoff, tz)
    purchases = (e for e in events if e.event_type == "purchase")
    return apply_pipeline(purchases, [in_frame])


def lifetime_values(
    events: Iterable[Event], timeframe: str, now: datetime, tz: tzinfo = UTC
) -> dict[str, float]:
    """Purchase revenue per profile within the timeframe ("30d", "90d" or "all")."""
    ltv: dict[str, float] = {}
    for e in _purchases_in_timeframe(events, timeframe, now, tz):
        if e.profile_id and e.revenue is not None:
            ltv[e.profile_id] = ltv.get(e.profile_id, 0.0) + e.revenue
    return ltv


def member_metrics(
    events: Iterable[Event],
    subscriptions: Iterable[ChannelSubscription],
    timeframe: str,
    now: datetime,
    tz: tzinfo = UTC,
) -> MemberMetrics:
    """Orders, revenue and AOV in the timeframe plus subscription counts."""
    purchases = _purchases_in_timeframe(events, timeframe, now, tz)
    revenue = sum(e.revenue or 0 for e in purchases)
    orders = len(purchases)
    return MemberMetrics(
        orders=orders,
        revenue=revenue,
        aov=revenue / orders if orders else 0.0,
        status_counts=status_counts(subscriptions),
    )


def filter_segment_members(
    profiles: Iterable[Profile],
    memberships: Iterable[SegmentProfile],
    subscriptions: Iterable[ChannelSubscription],
    ltv: Mapping[str, float],
    state: MemberFilter,
    tz: tzinfo = UTC,
) -> list[MemberRow]:
    """Segment membership table: search, per-channel status filters and sort."""
    added = {m.profile_id: m.added_at for m in memberships}
    subs = index_subscriptions(subscriptions)

    search = text_search(
        state.search,
        lambda p: (
            full_name(p),
            p.email,
            p.phone,
            p.device_id,
            p.company,
            p.job_title,
            p.address_city,
            p.address_state,
            p.address_country,
        ),
    )
    channel_filters = [
        lambda p, ch=ch, want=want: status_matches(lookup_subscription(subs, p.id, ch), want)
        for ch, want in (("email", state.email), ("sms", state.sms), ("push", state.push))
    ]

    if state.sort_by == "name":
        sort = SortSpec(key=full_name, kind="text")
    elif state.sort_by == "date_added":
        sort = SortSpec(key=lambda p: added.get(p.id), kind="date", descending=True)
    elif state.sort_by == "ltv":
        sort = SortSpec(key=lambda p: ltv.get(p.id, 0), kind="number", descending=True)
    else:
        msg = f"Unknown member sort: {state.sort_by}"
        raise ValueError(msg)

    selected = apply_pipeline(profiles, [search, *channel_filters], sort, tz)
    return [
        MemberRow(
            profile=p,
            name=full_name(p),
            added_at=added.get(p.id),
            ltv=ltv.get(p.id, 0.0),
            email_status=display_status(lookup_subscription(subs, p.id, "email")),
            sms_status=display_status(lookup_subscription(subs, p.id, "sms")),
            push_status=display_status(lookup_subscription(subs, p.id, "push")),
        )
        for p in selected
    ]


# --- Segments list ---


def summarize_segments(
    segments: Iterable[Segment],
    memberships: Sequence[SegmentProfile],
    now: datetime,
    growth_days: int = 30,
    tz: tzinfo = UTC,
) -> list[SegmentSummary]:
    """Member count and recent growth (members added in the last growth_days) per segment."""
    recent = since(lambda m: m.added_at, now - timedelta(days=growth_days), tz)
    totals: dict[str, int] = {}
    growth: dict[str, int] = {}
    for m in memberships:
        totals[m.segment_id] = totals.get(m.segment_id, 0) + 1
        if recent is not None and recent(m):
            growth[m.segment_id] = growth.get(m.segment_id, 0) + 1
    return [
        SegmentSummary(
            id=s.id,
            name=s.name,
            description=s.description,
            profiles=totals.get(s.id, 0),
            growth=growth.get(s.id, 0),
        )
        for s in segments
    ]


def filter_segments(
    summaries: Iterable[SegmentSummary], state: SegmentListFilter
) -> list[SegmentSummary]:
    """Segments list: name search, sort by name / profiles / growth."""
    search = text_search(state.search, lambda s: (s.name,))
    if state.sort_by == "name":
        sort = SortSpec(key=lambda s: s.name, kind="text", descending=state.descending)
    elif state.sort_by in ("profiles", "growth"):
        field_name = state.sort_by
        sort = SortSpec(
            key=lambda s: getattr(s, field_name), kind="number", descending=state.descending
        )
    else:
        msg = f"Unknown segment sort: {state.sort_by}"
        raise ValueError(msg)
    return apply_pipeline(summaries, [search], sort)


# --- Agents list ---

AGENT_SORTS: dict[str, SortSpec] = {
    "created_desc": SortSpec(key=lambda a: a.created_at, kind="date", descending=True),
    "created_asc": SortSpec(key=lambda a: a.created_at, kind="date"),
    "name_asc": SortSpec(key=lambda a: a.name, kind="text"),
    "name_desc": SortSpec(key=lambda a: a.name, kind="text", descending=True),
}


def filter_agents(
    agents: Iterable[Agent], state: AgentFilter, tz: tzinfo = UTC
) -> list[Agent]:
    """Agents list: name search, active/inactive filter, created or name sort."""
    sort = AGENT_SORTS.get(state.sort)
    if sort is None:
        msg = f"Unknown agent sort: {state.sort}"
        raise ValueError(msg)
    search = text_search(state.search, lambda a: (a.name,))
    active = equals(
        None if state.status == "all" else state.status == "active",
        lambda a: a.is_active,
    )
    return apply_pipeline(agents, [search, active], sort, tz)


# --- Agent decisions ---


def compute_status(decision: AgentDecision) -> str:
    """holdout, then failed (send error), then sent, otherwise skipped."""
    if decision.is_holdout:
        return "holdout"
    if decision.send_error:
        return "failed"
    if decision.was_sent:
        return "sent"
    return "skipped"


def filter_decisions(
    decisions: Iterable[AgentDecision],
    state: DecisionFilter,
    now: datetime,
    messages: Iterable[Message] = (),
    tz: tzinfo = UTC,
) -> list[AgentDecision]:
    """
    Agent decision log: relative date range, channel, status, search and sort.

    The channel filter value "none" selects decisions without a channel.
    """
    if state.date_range not in DECISION_RANGE_HOURS:
        msg = f"Unknown decision date range: {state.date_range}"
        raise ValueError(msg)
    hours = DECISION_RANGE_HOURS[state.date_range]
    window = (
        date_between(lambda d: d.decisioned_at, now - timedelta(hours=hours), None, tz)
        if hours is not None
        else None
    )
    names = {m.id: m.name for m in messages}

    predicates = [
        window,
        equals(state.channel, lambda d: d.channel or "none"),
        equals(state.status, compute_status),
        text_search(
            state.search,
            lambda d: (d.profile_id, d.message_id, names.get(d.message_id or "")),
        ),
    ]
    sort = SortSpec(
        key=lambda d: d.decisioned_at, kind="date", descending=state.sort == "newest"
    )
    return apply_pipeline(decisions, predicates, sort, tz)


def visible_decisions(
    decisions: Sequence[AgentDecision], page: int, page_size: int = 25
) -> tuple[list[AgentDecision], bool]:
    """
    "Load more" slice: the first page * page_size rows and whether more remain.
    """
    shown = list(decisions[: max(1, page) * page_size])
    return shown, len(shown) < len(decisions)
