"""
Export component - CSV files for every table the console can download.

Every builder goes through format_csv, so the escaping rule is identical on
all export paths.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from marketing_console.components.analytics.models import TopMessage, TopPage, TopProduct
from marketing_console.components.attribution.models import AttributionRow
from marketing_console.components.filtering import (
    DECISION_STATUS_LABELS,
    MemberRow,
    compute_status,
)
from marketing_console.domain.entities import (
    AgentDecision,
    Event,
    Profile,
    full_name,
)

from ._csv import export_filename, format_csv
from .models import CsvExport

DECISION_HEADERS = (
    "decision_id",
    "decisioned_at",
    "scheduled_send_at",
    "agent_id",
    "profile_id",
    "message_id",
    "channel",
    "is_holdout",
    "was_sent",
    "sent_at",
    "status",
    "error",
    "reasoning",
)
PROFILE_HEADERS = ("Full Name", "Email", "Phone", "Device ID", "Date Added")
MEMBER_HEADERS = (
    "Full Name",
    "Email",
    "Phone",
    "Device ID",
    "Date Added",
    "Company",
    "Job Title",
    "City",
    "State",
    "Country",
)
PROFILE_FIELDS = (
    "id",
    "created_at",
    "first_name",
    "last_name",
    "email",
    "phone",
    "device_id",
    "address_street",
    "address_city",
    "address_state",
    "address_zip",
    "address_country",
    "job_title",
    "department",
    "company",
    "external_id",
)
EVENT_HEADERS = (
    "id",
    "occurred_at",
    "event_type",
    "channel",
    "page_url",
    "message_id",
    "agent_id",
    "order_id",
    "product_id",
    "revenue",
    "currency",
    "properties",
)


def build_export(
    filename: str, headers: Sequence[Any], rows: Sequence[Sequence[Any]]
) -> CsvExport:
    return CsvExport(
        filename=filename, content=format_csv(headers, rows), row_count=len(rows)
    )


def _one_line(text: str | None) -> str:
    return (text or "").replace("\n", " ")


# --- Dashboard tables ---


def export_top_pages(pages: Iterable[TopPage]) -> CsvExport:
    rows = [(p.page_url, p.views) for p in pages]
    return build_export("top-pages.csv", ("page_url", "views"), rows)


def export_top_messages(messages: Iterable[TopMessage]) -> CsvExport:
    rows = [(m.id, m.name, m.sent, m.opens, m.clicks, m.bounces) for m in messages]
    return build_export(
        "top-messages.csv", ("id", "name", "sent", "opens", "clicks", "bounces"), rows
    )


def export_top_products(products: Iterable[TopProduct]) -> CsvExport:
    rows = [(p.id, p.adds, p.purchases, p.revenue) for p in products]
    return build_export(
        "top-products.csv", ("product_id", "adds", "purchases", "revenue"), rows
    )


def export_attribution(rows: Iterable[AttributionRow], dimension: str) -> CsvExport:
    """Attribution table; aov and roi are rendered with two decimals."""
    body = [(r.name, r.revenue, r.orders, f"{r.aov:.2f}", f"{r.roi:.2f}") for r in rows]
    return build_export(
        export_filename("attribution", dimension),
        (dimension, "revenue", "orders", "aov", "roi"),
        body,
    )


# --- Decisions ---


def export_decisions(
    decisions: Iterable[AgentDecision], agent_label: str
) -> CsvExport:
    """Decision log of one agent; newlines in error and reasoning become spaces."""
    rows = [
        (
            d.id,
            d.decisioned_at,
            d.scheduled_send_at,
            d.agent_id,
            d.profile_id,
            d.message_id,
            d.channel,
            bool(d.is_holdout),
            bool(d.was_sent),
            d.sent_at,
            DECISION_STATUS_LABELS[compute_status(d)],
            _one_line(d.send_error),
            _one_line(d.reasoning),
        )
        for d in decisions
    ]
    return build_export(
        export_filename(f"agent-{agent_label}", "decisions"), DECISION_HEADERS, rows
    )


# --- Profiles ---


def export_profiles(profiles: Iterable[Profile], *, selected: bool = False) -> CsvExport:
    """Profiles list export (selected rows or the whole filtered list)."""
    rows = [
        (full_name(p), p.email, p.phone, p.device_id, p.created_at) for p in profiles
    ]
    qualifier = "selected" if selected else "all"
    return build_export(export_filename("profiles", qualifier), PROFILE_HEADERS, rows)


def export_profile(profile: Profile) -> CsvExport:
    """Single profile record with every contact field."""
    row = [getattr(profile, f) for f in PROFILE_FIELDS]
    return build_export(export_filename("profile", profile.id), PROFILE_FIELDS, [row])


def export_segment_members(
    members: Iterable[MemberRow], segment_name: str | None
) -> CsvExport:
    """Segment membership table; Date Added is the membership timestamp."""
    rows = [
        (
            m.name,
            m.profile.email,
            m.profile.phone,
            m.profile.device_id,
            m.added_at,
            m.profile.company,
            m.profile.job_title,
            m.profile.address_city,
            m.profile.address_state,
            m.profile.address_country,
        )
        for m in members
    ]
    return build_export(
        export_filename(segment_name or "segment", "export"), MEMBER_HEADERS, rows
    )


def export_profile_events(events: Iterable[Event], profile_id: str) -> CsvExport:
    """Event history of one profile; properties are serialized as JSON."""
    rows = [
        (
            e.id,
            e.occurred_at,
            e.event_type,
            e.channel,
            e.page_url,
            e.message_id,
            e.agent_id,
            e.order_id,
            e.product_id,
            e.revenue,
            e.currency,
            _json(e.properties),
        )
        for e in events
    ]
    return build_export(export_filename("events", profile_id), EVENT_HEADERS, rows)


def _json(value: Mapping[str, Any] | None) -> str:
    return json.dumps(value or {}, separators=(",", ":"), default=str)
