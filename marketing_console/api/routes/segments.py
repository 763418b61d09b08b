"""
Segments API.

Endpoints:
- GET /api/segments - Segments with member count and recent growth
- GET /api/segments/{id}/members - Filtered, sorted, paged membership table
- GET /api/segments/{id}/members/export - Filtered membership table as CSV
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from marketing_console.api.deps import get_clock, get_rules, get_store
from marketing_console.api.routes.dashboard import account_match
from marketing_console.api.routes.exports import csv_response
from marketing_console.api.schemas import (
    ErrorResponse,
    MemberListResponse,
    MemberMetricsResponse,
    MemberResponse,
    SegmentSummaryResponse,
)
from marketing_console.components.export import export_segment_members
from marketing_console.components.filtering import (
    MemberFilter,
    MemberMetrics,
    MemberRow,
    SegmentListFilter,
    filter_segment_members,
    filter_segments,
    lifetime_values,
    member_metrics,
    paginate,
    summarize_segments,
)
from marketing_console.core.ports.store import EntityNotFoundError, EntityStorePort
from marketing_console.core.ports.time import TimePort
from marketing_console.domain.entities import (
    ChannelSubscription,
    Event,
    Profile,
    Segment,
    SegmentProfile,
)
from marketing_console.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()

StatusFilter = Literal["any", "subscribed", "unsubscribed", "bounced", "pending"]


# --- Helper Functions ---


def _get_segment(store: EntityStorePort, segment_id: str) -> Segment:
    try:
        return store.get(Segment, segment_id)
    except EntityNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Segment not found: {segment_id}",
        ) from None


def member_filter(
    search: str = Query(""),
    email: StatusFilter = Query("any"),
    sms: StatusFilter = Query("any"),
    push: StatusFilter = Query("any"),
    sort_by: Literal["name", "date_added", "ltv"] = Query("name"),
    timeframe: Literal["30d", "90d", "all"] = Query("30d"),
) -> MemberFilter:
    return MemberFilter(
        search=search, email=email, sms=sms, push=push, sort_by=sort_by, timeframe=timeframe
    )


def _members(
    segment: Segment,
    state: MemberFilter,
    store: EntityStorePort,
    clock: TimePort,
) -> tuple[list[MemberRow], MemberMetrics]:
    memberships = store.select_matches(SegmentProfile, {"segment_id": segment.id})
    member_ids = {m.profile_id for m in memberships}
    profiles = [
        p
        for p in store.select_matches(Profile, {"account_id": segment.account_id})
        if p.id in member_ids
    ]
    subscriptions = [
        s
        for s in store.select_matches(ChannelSubscription, {"account_id": segment.account_id})
        if s.profile_id in member_ids
    ]
    events = [
        e
        for e in store.select_matches(Event, {"account_id": segment.account_id})
        if e.profile_id in member_ids
    ]

    now = clock.now_utc()
    ltv = lifetime_values(events, state.timeframe, now, clock.timezone)
    rows = filter_segment_members(
        profiles, memberships, subscriptions, ltv, state, clock.timezone
    )
    metrics = member_metrics(events, subscriptions, state.timeframe, now, clock.timezone)
    return rows, metrics


def _member_response(row: MemberRow) -> MemberResponse:
    return MemberResponse(
        profile_id=row.profile.id,
        name=row.name,
        email=row.profile.email,
        phone=row.profile.phone,
        added_at=row.added_at,
        ltv=row.ltv,
        email_status=row.email_status,
        sms_status=row.sms_status,
        push_status=row.push_status,
    )


# --- Routes ---


@router.get("", response_model=list[SegmentSummaryResponse])
def list_segments(
    search: str = Query(""),
    sort_by: Literal["name", "profiles", "growth"] = Query("name"),
    descending: bool = Query(False),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> list[SegmentSummaryResponse]:
    match = account_match(account_id)
    summaries = summarize_segments(
        store.select_matches(Segment, match),
        store.select_matches(SegmentProfile, match),
        now=clock.now_utc(),
        growth_days=rules.filters.segment_growth_days,
        tz=clock.timezone,
    )
    state = SegmentListFilter(search=search, sort_by=sort_by, descending=descending)
    return [SegmentSummaryResponse.model_validate(s) for s in filter_segments(summaries, state)]


@router.get(
    "/{segment_id}/members",
    response_model=MemberListResponse,
    responses={404: {"model": ErrorResponse}},
)
def list_members(
    segment_id: str,
    state: MemberFilter = Depends(member_filter),
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=500),
    store: EntityStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> MemberListResponse:
    segment = _get_segment(store, segment_id)
    rows, metrics = _members(segment, state, store, clock)
    sliced = paginate(rows, page, page_size)
    return MemberListResponse(
        members=[_member_response(r) for r in sliced.rows],
        page=sliced.page,
        page_size=sliced.page_size,
        total_rows=sliced.total_rows,
        total_pages=sliced.total_pages,
        metrics=MemberMetricsResponse.model_validate(metrics),
    )


@router.get(
    "/{segment_id}/members/export",
    summary="Export the filtered membership table to CSV",
    responses={404: {"model": ErrorResponse}},
)
def export_members_csv(
    segment_id: str,
    state: MemberFilter = Depends(member_filter),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> StreamingResponse:
    segment = _get_segment(store, segment_id)
    rows, _ = _members(segment, state, store, clock)
    return csv_response(export_segment_members(rows, segment.name), rules)
