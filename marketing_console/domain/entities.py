"""
Domain entities for the marketing console.

These are the records the entity store hands to the console. The core treats
them as read-only values: nothing here is mutated after it is loaded.

Timestamps are kept in the shape the store returns them (ISO-8601 string or
datetime) and parsed lazily by ``marketing_console.domain.timeutil`` so that a
malformed value excludes a record from time-windowed results instead of
failing the whole load.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---

EventType = Literal[
    "page_view",
    "session_start",
    "form_submit",
    "message_sent",
    "message_open",
    "message_click",
    "message_bounce",
    "subscriber_new",
    "subscriber_removed",
    "add_to_cart",
    "favorite",
    "checkout_started",
    "checkout_abandoned",
    "purchase",
    "push_open",
]
Channel = Literal["email", "sms", "push"]
SubscriptionStatus = Literal["subscribed", "unsubscribed", "bounced", "pending"]
OutcomeRank = Literal["worst", "good", "very_good", "best"]
SendFrequency = Literal[
    "daily", "six_per_week", "five_per_week", "weekly", "biweekly", "monthly"
]
SendTimeWindow = Literal["morning", "afternoon", "evening"]

Timestamp = str | datetime

CHANNELS: tuple[str, ...] = ("email", "sms", "push")
SUBSCRIPTION_STATUSES: tuple[str, ...] = ("subscribed", "unsubscribed", "bounced", "pending")
OUTCOME_RANKS: tuple[str, ...] = ("worst", "good", "very_good", "best")


class StoreRecord(BaseModel):
    """Base for every record read from the entity store."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# --- Analytics ---


class Event(StoreRecord):
    """Analytics event used for web, messaging, ecommerce and attribution."""

    id: str
    account_id: str
    occurred_at: Timestamp
    # Not constrained to EventType: instrumentation may send types we don't chart.
    event_type: str
    channel: str | None = None
    agent_id: str | None = None
    message_id: str | None = None
    profile_id: str | None = None
    session_id: str | None = None
    product_id: str | None = None
    order_id: str | None = None
    revenue: float | None = None
    currency: str | None = None
    page_url: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    created_at: Timestamp | None = None


# --- Decisioning ---


class Agent(StoreRecord):
    """AI decisioning agent configuration."""

    id: str
    account_id: str
    name: str
    segment_id: str
    message_category_id: str
    is_active: bool = False
    holdout_percentage: float = 0
    send_frequency: str
    send_days: list[int] = Field(default_factory=list)  # 0=Mon ... 6=Sun
    send_time_windows: list[str] = Field(default_factory=list)
    default_email_from: str | None = None
    default_sms_from: str | None = None
    activated_at: Timestamp | None = None
    deactivated_at: Timestamp | None = None
    desired_outcome_description: str | None = None
    created_at: Timestamp | None = None


class AgentDecision(StoreRecord):
    """One decisioning event recorded by an agent for a profile."""

    id: str
    account_id: str
    agent_id: str
    profile_id: str
    decisioned_at: Timestamp
    message_id: str | None = None
    message_variant_id: str | None = None
    channel: str | None = None
    scheduled_send_at: Timestamp | None = None
    reasoning: str | None = None
    is_holdout: bool = False
    was_sent: bool | None = None
    sent_at: Timestamp | None = None
    send_error: str | None = None
    created_at: Timestamp | None = None


class OutcomeMapping(StoreRecord):
    """Maps an event type to an outcome rank for an agent."""

    id: str
    account_id: str
    agent_id: str
    event_type: str
    outcome: str
    weight: float | None = None
    created_at: Timestamp | None = None


# --- Content ---


class MessageCategory(StoreRecord):
    id: str
    account_id: str
    name: str
    description: str | None = None
    thumbnail_image_path: str | None = None
    created_at: Timestamp | None = None


class Message(StoreRecord):
    id: str
    account_id: str
    name: str
    category_id: str | None = None
    external_source: str = ""
    external_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: Timestamp | None = None


class MessageVariant(StoreRecord):
    """Channel-specific payload of a message."""

    id: str
    account_id: str
    message_id: str
    channel: str
    email_subject: str | None = None
    email_html: str | None = None
    email_text: str | None = None
    sms_text: str | None = None
    push_title: str | None = None
    push_body: str | None = None
    preview_image_path: str | None = None
    created_at: Timestamp | None = None


# --- Audience ---


class Profile(StoreRecord):
    """Stored customer contact record."""

    id: str
    account_id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    device_id: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_zip: str | None = None
    address_country: str | None = None
    job_title: str | None = None
    department: str | None = None
    company: str | None = None
    external_id: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    created_at: Timestamp | None = None


class Segment(StoreRecord):
    id: str
    account_id: str
    name: str
    description: str | None = None
    criteria: dict[str, Any] = Field(default_factory=dict)
    is_dynamic: bool = False
    created_at: Timestamp | None = None


class SegmentProfile(StoreRecord):
    """Membership row joining a segment and a profile."""

    id: str
    account_id: str
    segment_id: str
    profile_id: str
    added_at: Timestamp


class ChannelSubscription(StoreRecord):
    """Subscription state of a profile on one channel."""

    id: str
    account_id: str
    profile_id: str
    channel: str
    status: str = "pending"
    is_primary: bool = False
    address: str | None = None
    subscribed_at: Timestamp | None = None
    unsubscribed_at: Timestamp | None = None
    last_bounced_at: Timestamp | None = None
    created_at: Timestamp | None = None


def full_name(profile: Profile) -> str:
    """Display name for a profile, falling back through contact fields."""
    first = (profile.first_name or "").strip()
    last = (profile.last_name or "").strip()
    combined = f"{first} {last}".strip()
    if combined:
        return combined
    return (
        profile.email
        or profile.phone
        or profile.device_id
        or profile.external_id
        or "(unknown)"
    )
