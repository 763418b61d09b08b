from __future__ import annotations

from collections.abc import Iterator
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from marketing_console.adapters.clock import FrozenClock
from marketing_console.adapters.memory_store import InMemoryEntityStore
from marketing_console.api.deps import get_clock, get_rules, get_store
from marketing_console.api.main import app
from marketing_console.domain.entities import (
    Agent,
    AgentDecision,
    ChannelSubscription,
    Event,
    Message,
    MessageCategory,
    Profile,
    Segment,
    SegmentProfile,
)
from marketing_console.rules.models import Rules


@pytest.fixture
def seeded_store(store: InMemoryEntityStore, clock: FrozenClock) -> InMemoryEntityStore:
    """Store with one account's worth of console data, all relative to the frozen clock."""
    now = clock.now_utc()

    def ago(**delta: float) -> str:
        return (now - timedelta(**delta)).isoformat()

    store.insert(Segment, {"id": "s1", "account_id": "acc-1", "name": "VIP"})
    store.insert(MessageCategory, {"id": "c1", "account_id": "acc-1", "name": "Promos"})
    store.insert(
        Message, {"id": "m1", "account_id": "acc-1", "name": "Summer Sale", "category_id": "c1"}
    )
    store.insert(
        Agent,
        {
            "id": "a1",
            "account_id": "acc-1",
            "name": "Winback",
            "segment_id": "s1",
            "message_category_id": "c1",
            "send_frequency": "weekly",
            "is_active": True,
        },
    )

    store.insert(
        Profile,
        {"id": "p1", "account_id": "acc-1", "first_name": "Ada", "last_name": "Lovelace",
         "email": "ada@example.com"},
    )
    store.insert(
        Profile,
        {"id": "p2", "account_id": "acc-1", "first_name": "Grace", "last_name": "Hopper",
         "email": "grace@example.com"},
    )
    store.insert(SegmentProfile, {"id": "sp1", "account_id": "acc-1", "segment_id": "s1",
                                  "profile_id": "p1", "added_at": ago(days=2)})
    store.insert(SegmentProfile, {"id": "sp2", "account_id": "acc-1", "segment_id": "s1",
                                  "profile_id": "p2", "added_at": ago(days=40)})
    store.insert(ChannelSubscription, {"id": "cs1", "account_id": "acc-1", "profile_id": "p1",
                                       "channel": "email", "status": "subscribed"})

    events = [
        {"event_type": "page_view", "occurred_at": ago(hours=3), "page_url": "/home"},
        {"event_type": "page_view", "occurred_at": ago(days=1), "page_url": "/home"},
        {"event_type": "page_view", "occurred_at": ago(days=1), "page_url": "/pricing"},
        {"event_type": "message_sent", "occurred_at": ago(days=2), "channel": "email",
         "agent_id": "a1", "message_id": "m1", "profile_id": "p1"},
        {"event_type": "purchase", "occurred_at": ago(days=1), "agent_id": "a1",
         "message_id": "m1", "profile_id": "p1", "product_id": "sku-1", "revenue": 40.0},
    ]
    for i, fields in enumerate(events):
        store.insert(Event, {"id": f"e{i}", "account_id": "acc-1", **fields})
    store.insert(
        Event,
        {"id": "other", "account_id": "acc-2", "event_type": "page_view",
         "occurred_at": ago(hours=1), "page_url": "/elsewhere"},
    )

    store.insert(AgentDecision, {"id": "d1", "account_id": "acc-1", "agent_id": "a1",
                                 "profile_id": "p1", "decisioned_at": ago(hours=2),
                                 "channel": "email", "message_id": "m1", "was_sent": True})
    store.insert(AgentDecision, {"id": "d2", "account_id": "acc-1", "agent_id": "a1",
                                 "profile_id": "p2", "decisioned_at": ago(days=2),
                                 "is_holdout": True, "reasoning": "Holdout\ngroup"})
    return store


@pytest.fixture
def client(
    seeded_store: InMemoryEntityStore, clock: FrozenClock, rules: Rules
) -> Iterator[TestClient]:
    """Test client over the real app with store, clock and rules overridden."""
    app.dependency_overrides[get_store] = lambda: seeded_store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rules] = lambda: rules
    yield TestClient(app)
    app.dependency_overrides.clear()
