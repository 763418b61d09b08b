from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

from marketing_console.adapters.clock import FrozenClock
from marketing_console.adapters.memory_store import InMemoryEntityStore
from marketing_console.domain.entities import Event
from marketing_console.rules.loader import load_rules
from marketing_console.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent

# Saturday
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at NOW, UTC display timezone."""
    return FrozenClock(NOW, "UTC")


@pytest.fixture
def store(clock: FrozenClock) -> InMemoryEntityStore:
    """Empty in-memory store stamped by the frozen clock."""
    return InMemoryEntityStore(time_port=clock)


@pytest.fixture
def rules() -> Rules:
    """Rules from the project's rules.yaml."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for events; occurred_at defaults to NOW."""

    def factory(event_type: str, occurred_at: Any = None, **fields: Any) -> Event:
        return Event(
            id=fields.pop("id", str(uuid4())),
            account_id=fields.pop("account_id", "acc-1"),
            event_type=event_type,
            occurred_at=occurred_at if occurred_at is not None else NOW.isoformat(),
            **fields,
        )

    return factory
