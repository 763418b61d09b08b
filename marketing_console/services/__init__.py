"""
Services that write through the entity store.
"""

from .agents import (
    AgentDraft,
    AgentService,
    AgentValidationError,
    create_agent_service,
    find_duplicate_outcome,
    validate_basics,
    validate_draft,
    validate_outcomes,
    validate_schedule,
)

__all__ = [
    "AgentDraft",
    "AgentService",
    "AgentValidationError",
    "create_agent_service",
    "find_duplicate_outcome",
    "validate_basics",
    "validate_draft",
    "validate_outcomes",
    "validate_schedule",
]
