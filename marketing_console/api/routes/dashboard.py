"""
Analytics dashboard API.

Endpoints:
- GET /api/dashboard - KPIs, series, top tables and attribution for one filter state
- GET /api/dashboard/kpis - KPI rows with previous-period deltas
- GET /api/dashboard/attribution - attribution rows with optional A/B compare
"""

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Query, status

from marketing_console.api.deps import get_clock, get_rules, get_store
from marketing_console.api.schemas import (
    AttributionResponse,
    AttributionRowResponse,
    DashboardResponse,
    KpiResponse,
    KpiRowResponse,
    SeriesResponse,
    TopMessageResponse,
    TopPageResponse,
    TopProductResponse,
)
from marketing_console.components.analytics import (
    GRANULARITIES,
    DashboardOutput,
    DashboardQuery,
    EventScope,
    config_from_rules,
    run_dashboard,
)
from marketing_console.components.attribution import DIMENSION_KEYS, compare
from marketing_console.core.ports.store import EntityStorePort
from marketing_console.core.ports.time import TimePort
from marketing_console.domain.entities import Agent, Event, Message
from marketing_console.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Helper Functions ---


def account_match(account_id: str | None) -> dict[str, str] | None:
    return {"account_id": account_id} if account_id else None


def parse_dashboard_query(
    preset: str = Query("30d", description="7d, 30d, 90d or custom"),
    granularity: str = Query("day", description="hour, day or week"),
    start: str | None = Query(None, description="Custom range start (ISO date)"),
    end: str | None = Query(None, description="Custom range end (ISO date)"),
    channel: str | None = Query(None, description="email, sms or push"),
    agent_id: str | None = Query(None),
    message_id: str | None = Query(None),
    category_id: str | None = Query(None, description="Message category"),
    dimension: str = Query("agent", description="Attribution dimension: agent or message"),
) -> DashboardQuery:
    """Dashboard filter state from query parameters; bad values are 400s."""
    if granularity not in GRANULARITIES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid granularity: {granularity}. Must be one of: hour, day, week",
        )
    if dimension not in DIMENSION_KEYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid dimension: {dimension}. Must be one of: agent, message",
        )
    return DashboardQuery(
        preset=preset,
        granularity=granularity,  # type: ignore[arg-type]
        custom_start=start,
        custom_end=end,
        scope=EventScope(
            channel=channel or None,
            agent_id=agent_id or None,
            message_id=message_id or None,
            message_category_id=category_id or None,
        ),
        attribution_dimension=dimension,  # type: ignore[arg-type]
    )


@dataclass(frozen=True)
class DashboardData:
    """Store reads needed by the dashboard."""

    events: list[Event]
    agents: list[Agent]
    messages: list[Message]


def load_dashboard_data(
    store: EntityStorePort, rules: Rules, account_id: str | None
) -> DashboardData:
    limits = rules.analytics.fetch_limits
    match = account_match(account_id)
    return DashboardData(
        events=store.select_matches(
            Event, match, order_by="occurred_at", descending=True, limit=limits.events
        ),
        agents=store.select_matches(
            Agent, match, order_by="created_at", descending=True, limit=limits.agents
        ),
        messages=store.select_matches(
            Message, match, order_by="created_at", descending=True, limit=limits.messages
        ),
    )


def compute_dashboard(
    query: DashboardQuery,
    account_id: str | None,
    store: EntityStorePort,
    rules: Rules,
    clock: TimePort,
) -> DashboardOutput:
    data = load_dashboard_data(store, rules, account_id)
    output = run_dashboard(
        query,
        data.events,
        now=clock.now_utc(),
        tz=clock.timezone,
        agents=data.agents,
        messages=data.messages,
        config=config_from_rules(rules),
    )
    logger.debug(
        "dashboard %s/%s: %d of %d events in range",
        query.preset,
        query.granularity,
        output.event_count,
        len(data.events),
    )
    return output


def _kpi_response(output: DashboardOutput) -> dict:
    return {
        "start": output.range.start,
        "end": output.range.end,
        "previous_start": output.previous_range.start,
        "previous_end": output.previous_range.end,
        "kpis": {
            vertical: [KpiRowResponse.model_validate(r) for r in rows]
            for vertical, rows in output.kpis.items()
        },
        "deliverability": output.summary.deliverability,
    }


# --- Routes ---


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    query: DashboardQuery = Depends(parse_dashboard_query),
    account_id: str | None = Query(None, description="Scope reads to one account"),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> DashboardResponse:
    """Everything the dashboard tabs render for the filter state."""
    output = compute_dashboard(query, account_id, store, rules, clock)
    return DashboardResponse(
        **_kpi_response(output),
        granularity=output.granularity,
        web=SeriesResponse.model_validate(output.web_series),
        sends_by_channel=SeriesResponse.model_validate(output.sends_by_channel),
        ecommerce=SeriesResponse.model_validate(output.ecommerce_series),
        top_pages=[TopPageResponse.model_validate(p) for p in output.top_pages],
        top_messages=[TopMessageResponse.model_validate(m) for m in output.top_messages],
        top_products=[TopProductResponse.model_validate(p) for p in output.top_products],
        attribution=[AttributionRowResponse.model_validate(r) for r in output.attribution],
        event_count=output.event_count,
    )


@router.get("/kpis", response_model=KpiResponse)
def get_kpis(
    query: DashboardQuery = Depends(parse_dashboard_query),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> KpiResponse:
    """KPI rows per vertical with deltas against the previous period."""
    output = compute_dashboard(query, account_id, store, rules, clock)
    return KpiResponse(**_kpi_response(output))


@router.get("/attribution", response_model=AttributionResponse)
def get_attribution(
    query: DashboardQuery = Depends(parse_dashboard_query),
    a: str | None = Query(None, description="Row id for compare slot A"),
    b: str | None = Query(None, description="Row id for compare slot B"),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> AttributionResponse:
    """Attribution rows by revenue, with the A/B compare lookup."""
    output = compute_dashboard(query, account_id, store, rules, clock)
    pair = compare(output.attribution, a, b)
    return AttributionResponse(
        dimension=query.attribution_dimension,
        rows=[AttributionRowResponse.model_validate(r) for r in output.attribution],
        compare_a=AttributionRowResponse.model_validate(pair.a) if pair.a else None,
        compare_b=AttributionRowResponse.model_validate(pair.b) if pair.b else None,
    )
