"""
AgentService - agent creation wizard and outcome mappings.

Validates the three wizard steps and writes the agent plus its outcome
mappings through the entity store.

Steps:
- basics: name, segment, message category, holdout percentage 0-100
- schedule: frequency, at least one send day, at least one time window
- outcomes: worst / good / very_good / best each mapped to a distinct event type

Guards:
- G1: nothing is written unless every step is valid
- G2: an agent's outcome ranks always map to distinct event types, also for
  writes that bypass the wizard (record_outcomes)
- G3: referenced segment and message category must exist
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from marketing_console.core.ports.store import EntityNotFoundError, EntityStorePort
from marketing_console.core.ports.time import TimePort
from marketing_console.domain.entities import (
    OUTCOME_RANKS,
    Agent,
    MessageCategory,
    OutcomeMapping,
    Segment,
)

logger = logging.getLogger(__name__)

SEND_FREQUENCIES: tuple[str, ...] = (
    "daily",
    "six_per_week",
    "five_per_week",
    "weekly",
    "biweekly",
    "monthly",
)
SEND_TIME_WINDOWS: tuple[str, ...] = ("morning", "afternoon", "evening")
WEEKDAYS = range(7)  # 0=Mon ... 6=Sun


# --- Models ---


@dataclass(frozen=True)
class AgentValidationError:
    """Agent wizard validation error."""

    code: str
    message: str
    field_name: str | None = None


@dataclass(frozen=True)
class AgentDraft:
    """Wizard state for a new agent."""

    account_id: str
    name: str = ""
    segment_id: str = ""
    message_category_id: str = ""
    holdout_percentage: float | None = 10
    default_email_from: str = ""
    default_sms_from: str = ""
    send_frequency: str = ""
    send_days: Sequence[int] = ()
    send_time_windows: Sequence[str] = ()
    desired_outcome_description: str = ""
    # rank -> event type
    outcomes: Mapping[str, str] = field(default_factory=dict)


# --- Validation Functions ---


def validate_basics(draft: AgentDraft) -> list[AgentValidationError]:
    """Step 1: name, segment, category and holdout percentage."""
    errors: list[AgentValidationError] = []

    if not draft.name.strip():
        errors.append(
            AgentValidationError(
                code="name_required", message="Name is required", field_name="name"
            )
        )
    if not draft.segment_id:
        errors.append(
            AgentValidationError(
                code="segment_required",
                message="Segment is required",
                field_name="segment_id",
            )
        )
    if not draft.message_category_id:
        errors.append(
            AgentValidationError(
                code="category_required",
                message="Message category is required",
                field_name="message_category_id",
            )
        )

    pct = draft.holdout_percentage
    if pct is None or math.isnan(pct) or not 0 <= pct <= 100:
        errors.append(
            AgentValidationError(
                code="holdout_out_of_range",
                message="Holdout percentage must be between 0 and 100",
                field_name="holdout_percentage",
            )
        )

    return errors


def validate_schedule(draft: AgentDraft) -> list[AgentValidationError]:
    """Step 2: frequency, send days and time windows."""
    errors: list[AgentValidationError] = []

    if not draft.send_frequency:
        errors.append(
            AgentValidationError(
                code="frequency_required",
                message="Send frequency is required",
                field_name="send_frequency",
            )
        )
    elif draft.send_frequency not in SEND_FREQUENCIES:
        errors.append(
            AgentValidationError(
                code="frequency_invalid",
                message=f"Unknown send frequency: {draft.send_frequency}",
                field_name="send_frequency",
            )
        )

    if not draft.send_days:
        errors.append(
            AgentValidationError(
                code="send_days_required",
                message="Select at least one send day",
                field_name="send_days",
            )
        )
    elif any(d not in WEEKDAYS for d in draft.send_days):
        errors.append(
            AgentValidationError(
                code="send_days_invalid",
                message="Send days must be 0 (Mon) to 6 (Sun)",
                field_name="send_days",
            )
        )

    if not draft.send_time_windows:
        errors.append(
            AgentValidationError(
                code="time_windows_required",
                message="Select at least one send time window",
                field_name="send_time_windows",
            )
        )
    elif any(w not in SEND_TIME_WINDOWS for w in draft.send_time_windows):
        errors.append(
            AgentValidationError(
                code="time_windows_invalid",
                message="Unknown send time window",
                field_name="send_time_windows",
            )
        )

    return errors


def find_duplicate_outcome(outcomes: Mapping[str, str | None]) -> str | None:
    """First event type mapped to more than one rank, in rank order."""
    seen: set[str] = set()
    for rank in OUTCOME_RANKS:
        event_type = outcomes.get(rank)
        if not event_type:
            continue
        if event_type in seen:
            return event_type
        seen.add(event_type)
    return None


def validate_outcomes(
    outcomes: Mapping[str, str | None], *, require_all: bool = True
) -> list[AgentValidationError]:
    """Step 3: every rank mapped (when require_all) and no event type reused."""
    errors: list[AgentValidationError] = []

    unknown = sorted(set(outcomes) - set(OUTCOME_RANKS))
    if unknown:
        errors.append(
            AgentValidationError(
                code="outcome_rank_invalid",
                message=f"Unknown outcome rank: {', '.join(unknown)}",
                field_name="outcomes",
            )
        )

    if require_all:
        for rank in OUTCOME_RANKS:
            if not outcomes.get(rank):
                errors.append(
                    AgentValidationError(
                        code="outcome_required",
                        message=f"Select an event for the '{rank}' outcome",
                        field_name=f"outcomes.{rank}",
                    )
                )

    duplicate = find_duplicate_outcome(outcomes)
    if duplicate:
        errors.append(
            AgentValidationError(
                code="outcome_duplicate",
                message=f"Each ranking must map to a unique event. Duplicate selected: {duplicate}",
                field_name="outcomes",
            )
        )

    return errors


def validate_draft(draft: AgentDraft) -> list[AgentValidationError]:
    """All wizard steps."""
    return [
        *validate_basics(draft),
        *validate_schedule(draft),
        *validate_outcomes(draft.outcomes),
    ]


# --- Service ---


class AgentService:
    """
    Agent configuration service.

    Writes agents and outcome mappings through the entity store, enforcing
    the outcome uniqueness rule on every mapping write.
    """

    def __init__(self, store: EntityStorePort, time_port: TimePort) -> None:
        self._store = store
        self._time = time_port

    def _now_iso(self) -> str:
        return self._time.now_utc().isoformat()

    def _check_references(self, draft: AgentDraft) -> list[AgentValidationError]:
        errors: list[AgentValidationError] = []
        references: tuple[tuple[type, str, str], ...] = (
            (Segment, draft.segment_id, "segment_id"),
            (MessageCategory, draft.message_category_id, "message_category_id"),
        )
        for entity_type, record_id, field_name in references:
            try:
                self._store.get(entity_type, record_id)
            except EntityNotFoundError:
                errors.append(
                    AgentValidationError(
                        code="reference_not_found",
                        message=f"{entity_type.__name__} not found: {record_id}",
                        field_name=field_name,
                    )
                )
        return errors

    def create_agent(
        self, draft: AgentDraft
    ) -> tuple[Agent | None, list[AgentValidationError]]:
        """
        Validate the wizard and create an active agent with its four mappings.

        Returns:
            (agent, []) on success, (None, errors) when nothing was written.
        """
        errors = validate_draft(draft)
        if not errors:
            errors = self._check_references(draft)
        if errors:
            logger.info(
                "agent draft rejected: %s", ", ".join(e.code for e in errors)
            )
            return None, errors

        payload: dict[str, Any] = {
            "account_id": draft.account_id,
            "name": draft.name.strip(),
            "default_email_from": draft.default_email_from.strip() or None,
            "default_sms_from": draft.default_sms_from.strip() or None,
            "segment_id": draft.segment_id,
            "holdout_percentage": draft.holdout_percentage or 0,
            "message_category_id": draft.message_category_id,
            "send_frequency": draft.send_frequency,
            "send_days": list(draft.send_days),
            "send_time_windows": list(draft.send_time_windows),
            "is_active": True,
            "activated_at": self._now_iso(),
            "desired_outcome_description": draft.desired_outcome_description.strip() or None,
        }
        agent = self._store.insert(Agent, payload)

        for rank in OUTCOME_RANKS:
            self._store.insert(
                OutcomeMapping,
                {
                    "account_id": draft.account_id,
                    "agent_id": agent.id,
                    "event_type": draft.outcomes[rank],
                    "outcome": rank,
                },
            )

        logger.info("created agent %s (%s)", agent.id, agent.name)
        return agent, []

    def outcomes_for(self, agent_id: str) -> dict[str, str]:
        """Current rank -> event type mapping of an agent."""
        rows = self._store.select_matches(OutcomeMapping, {"agent_id": agent_id})
        return {r.outcome: r.event_type for r in rows}

    def record_outcomes(
        self, agent_id: str, outcomes: Mapping[str, str]
    ) -> tuple[list[OutcomeMapping], list[AgentValidationError]]:
        """
        Set outcome mappings for an existing agent.

        The given ranks are merged over the stored ones and the result must
        still map distinct event types. Raises EntityNotFoundError for an
        unknown agent.
        """
        agent = self._store.get(Agent, agent_id)
        existing = {
            r.outcome: r
            for r in self._store.select_matches(OutcomeMapping, {"agent_id": agent_id})
        }
        merged = {rank: row.event_type for rank, row in existing.items()}
        merged.update(outcomes)

        errors = validate_outcomes(merged, require_all=False)
        if errors:
            logger.info(
                "outcome write rejected for agent %s: %s",
                agent_id,
                ", ".join(e.code for e in errors),
            )
            return [], errors

        written: list[OutcomeMapping] = []
        for rank, event_type in outcomes.items():
            row = existing.get(rank)
            if row is None:
                written.append(
                    self._store.insert(
                        OutcomeMapping,
                        {
                            "account_id": agent.account_id,
                            "agent_id": agent_id,
                            "event_type": event_type,
                            "outcome": rank,
                        },
                    )
                )
            elif row.event_type != event_type:
                written.append(
                    self._store.update(OutcomeMapping, row.id, {"event_type": event_type})
                )

        logger.info("recorded %d outcome mapping(s) for agent %s", len(written), agent_id)
        return written, []

    def set_active(self, agent_id: str, active: bool) -> Agent:
        """Activate or deactivate an agent, stamping the matching timestamp."""
        stamp = "activated_at" if active else "deactivated_at"
        agent = self._store.update(
            Agent, agent_id, {"is_active": active, stamp: self._now_iso()}
        )
        logger.info("agent %s %s", agent_id, "activated" if active else "deactivated")
        return agent


def create_agent_service(store: EntityStorePort, time_port: TimePort) -> AgentService:
    """Factory for AgentService."""
    return AgentService(store, time_port)
