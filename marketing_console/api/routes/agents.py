"""
Agents API.

Endpoints:
- GET /api/agents - List agents (search, status, sort)
- POST /api/agents - Create an agent from the wizard payload
- POST /api/agents/{id}/outcomes - Set outcome mappings
- POST /api/agents/{id}/activate, /deactivate - Toggle activation
- GET /api/agents/{id}/decisions - Filtered decision log ("load more" paging)
- GET /api/agents/{id}/decisions/export - Decision log as CSV
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from marketing_console.api.deps import get_agent_service, get_clock, get_rules, get_store
from marketing_console.api.routes.dashboard import account_match
from marketing_console.api.routes.exports import csv_response
from marketing_console.api.schemas import (
    AgentCreateRequest,
    AgentResponse,
    DecisionListResponse,
    DecisionResponse,
    ErrorResponse,
    OutcomeMappingResponse,
    OutcomesRequest,
    ValidationErrorItem,
)
from marketing_console.components.export import export_decisions
from marketing_console.components.filtering import (
    AgentFilter,
    DecisionFilter,
    compute_status,
    filter_agents,
    filter_decisions,
    visible_decisions,
)
from marketing_console.core.ports.store import EntityNotFoundError, EntityStorePort
from marketing_console.core.ports.time import TimePort
from marketing_console.domain.entities import Agent, AgentDecision, Message
from marketing_console.rules.models import Rules
from marketing_console.services.agents import AgentDraft, AgentService, AgentValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Helper Functions ---


def _get_agent(store: EntityStorePort, agent_id: str) -> Agent:
    try:
        return store.get(Agent, agent_id)
    except EntityNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Agent not found: {agent_id}",
        ) from None


def _validation_failed(errors: list[AgentValidationError]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Agent validation failed",
            "errors": [ValidationErrorItem.model_validate(e).model_dump() for e in errors],
        },
    )


def _filtered_decisions(
    agent: Agent,
    state: DecisionFilter,
    store: EntityStorePort,
    clock: TimePort,
) -> tuple[list[AgentDecision], dict[str, str]]:
    decisions = store.select_matches(AgentDecision, {"agent_id": agent.id})
    messages = store.select_matches(Message, {"category_id": agent.message_category_id})
    filtered = filter_decisions(
        decisions, state, now=clock.now_utc(), messages=messages, tz=clock.timezone
    )
    return filtered, {m.id: m.name for m in messages}


def decision_filter(
    date_range: Literal["24h", "7d", "30d", "all"] = Query("7d"),
    channel: str = Query("all", description="email, sms, push, none or all"),
    decision_status: Literal["all", "holdout", "failed", "sent", "skipped"] = Query(
        "all", alias="status"
    ),
    search: str = Query(""),
    sort: Literal["newest", "oldest"] = Query("newest"),
) -> DecisionFilter:
    return DecisionFilter(
        date_range=date_range,
        channel=channel,
        status=decision_status,
        search=search,
        sort=sort,
    )


# --- Routes ---


@router.get("", response_model=list[AgentResponse])
def list_agents(
    search: str = Query(""),
    agent_status: Literal["all", "active", "inactive"] = Query("all", alias="status"),
    sort: Literal["created_desc", "created_asc", "name_asc", "name_desc"] = Query(
        "created_desc"
    ),
    account_id: str | None = Query(None),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> list[AgentResponse]:
    agents = store.select_matches(
        Agent,
        account_match(account_id),
        order_by="created_at",
        descending=True,
        limit=rules.analytics.fetch_limits.agents,
    )
    state = AgentFilter(search=search, status=agent_status, sort=sort)
    return [AgentResponse.model_validate(a) for a in filter_agents(agents, state, clock.timezone)]


@router.post(
    "",
    response_model=AgentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
def create_agent(
    body: AgentCreateRequest,
    service: AgentService = Depends(get_agent_service),
) -> AgentResponse | JSONResponse:
    """Create an active agent and its four outcome mappings."""
    agent, errors = service.create_agent(AgentDraft(**body.model_dump()))
    if agent is None:
        return _validation_failed(errors)
    return AgentResponse.model_validate(agent)


@router.post(
    "/{agent_id}/outcomes",
    response_model=list[OutcomeMappingResponse],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def set_outcomes(
    agent_id: str,
    body: OutcomesRequest,
    service: AgentService = Depends(get_agent_service),
) -> list[OutcomeMappingResponse] | JSONResponse:
    """Set outcome mappings; the agent's ranks must stay mapped to distinct events."""
    try:
        written, errors = service.record_outcomes(agent_id, body.outcomes)
    except EntityNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Agent not found: {agent_id}",
        ) from None
    if errors:
        return _validation_failed(errors)
    return [OutcomeMappingResponse.model_validate(m) for m in written]


@router.post("/{agent_id}/activate", response_model=AgentResponse)
def activate_agent(
    agent_id: str,
    store: EntityStorePort = Depends(get_store),
    service: AgentService = Depends(get_agent_service),
) -> AgentResponse:
    _get_agent(store, agent_id)
    return AgentResponse.model_validate(service.set_active(agent_id, True))


@router.post("/{agent_id}/deactivate", response_model=AgentResponse)
def deactivate_agent(
    agent_id: str,
    store: EntityStorePort = Depends(get_store),
    service: AgentService = Depends(get_agent_service),
) -> AgentResponse:
    _get_agent(store, agent_id)
    return AgentResponse.model_validate(service.set_active(agent_id, False))


@router.get(
    "/{agent_id}/decisions",
    response_model=DecisionListResponse,
    responses={404: {"model": ErrorResponse}},
)
def list_decisions(
    agent_id: str,
    state: DecisionFilter = Depends(decision_filter),
    page: int = Query(1, ge=1, description="Pages loaded so far"),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> DecisionListResponse:
    agent = _get_agent(store, agent_id)
    filtered, names = _filtered_decisions(agent, state, store, clock)
    shown, has_more = visible_decisions(filtered, page, rules.filters.decision_page_size)
    return DecisionListResponse(
        decisions=[
            DecisionResponse(
                id=d.id,
                agent_id=d.agent_id,
                profile_id=d.profile_id,
                decisioned_at=d.decisioned_at,
                message_id=d.message_id,
                message_name=names.get(d.message_id) if d.message_id else None,
                channel=d.channel,
                is_holdout=d.is_holdout,
                was_sent=d.was_sent,
                sent_at=d.sent_at,
                send_error=d.send_error,
                reasoning=d.reasoning,
                status=compute_status(d),
            )
            for d in shown
        ],
        total=len(filtered),
        has_more=has_more,
    )


@router.get(
    "/{agent_id}/decisions/export",
    summary="Export the filtered decision log to CSV",
    responses={404: {"model": ErrorResponse}},
)
def export_decisions_csv(
    agent_id: str,
    state: DecisionFilter = Depends(decision_filter),
    store: EntityStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> StreamingResponse:
    agent = _get_agent(store, agent_id)
    filtered, _ = _filtered_decisions(agent, state, store, clock)
    return csv_response(export_decisions(filtered, agent.name or agent.id), rules)
