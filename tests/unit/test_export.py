"""
Tests for CSV formatting and the per-table export builders.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from marketing_console.components.analytics import TopMessage, TopPage, TopProduct
from marketing_console.components.attribution import AttributionRow
from marketing_console.components.export import (
    CSV_MEDIA_TYPE,
    escape_field,
    export_attribution,
    export_decisions,
    export_filename,
    export_profile,
    export_profile_events,
    export_profiles,
    export_segment_members,
    export_top_messages,
    export_top_pages,
    export_top_products,
    format_csv,
    to_text,
)
from marketing_console.components.filtering import MemberRow
from marketing_console.domain.entities import AgentDecision, Event, Profile


class TestEscapeField:
    """Quote only when the text contains a comma, a quote or a newline."""

    def test_comma_quote_and_newline(self) -> None:
        assert escape_field('He said, "hi"\nBye') == '"He said, ""hi""\nBye"'

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("plain", "plain"),
            ("a,b", '"a,b"'),
            ('say "x"', '"say ""x"""'),
            ("line\nbreak", '"line\nbreak"'),
            ("carriage\rreturn", "carriage\rreturn"),
            ("", ""),
            (None, ""),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (2.0, "2"),
            (2.5, "2.5"),
        ],
    )
    def test_values(self, value: object, expected: str) -> None:
        assert escape_field(value) == expected

    def test_datetime_isoformat(self) -> None:
        assert to_text(datetime(2024, 6, 15, 12, 0, tzinfo=UTC)) == "2024-06-15T12:00:00+00:00"


class TestFormatCsv:
    def test_exact_bytes(self) -> None:
        """Header first, "\\n" between lines, no trailing newline."""
        text = format_csv(("a", "b"), [("1", 'x,"y"'), (None, "z")])
        assert text == 'a,b\n1,"x,""y"""\n,z'

    def test_header_only(self) -> None:
        assert format_csv(("a", "b"), []) == "a,b"

    def test_filename(self) -> None:
        assert export_filename("attribution", "agent") == "attribution-agent.csv"
        assert export_filename("top-pages") == "top-pages.csv"


class TestDashboardExports:
    def test_top_pages(self) -> None:
        export = export_top_pages([TopPage("/home", 3), TopPage("/a,b", 1)])
        assert export.filename == "top-pages.csv"
        assert export.content == 'page_url,views\n/home,3\n"/a,b",1'
        assert export.row_count == 2
        assert export.media_type == CSV_MEDIA_TYPE

    def test_top_messages(self) -> None:
        export = export_top_messages([TopMessage("m1", "Welcome", 5, 3, 1, 0)])
        assert export.content == "id,name,sent,opens,clicks,bounces\nm1,Welcome,5,3,1,0"

    def test_top_products(self) -> None:
        export = export_top_products([TopProduct("p1", 2, 1, 19.99)])
        assert export.content == "product_id,adds,purchases,revenue\np1,2,1,19.99"

    def test_attribution_two_decimals(self) -> None:
        rows = [AttributionRow(id="a1", name="Winback", revenue=40.0, orders=3, sends=7,
                               aov=40 / 3, roi=40 / 7)]
        export = export_attribution(rows, "agent")
        assert export.filename == "attribution-agent.csv"
        assert export.content == "agent,revenue,orders,aov,roi\nWinback,40,3,13.33,5.71"

    def test_encode_utf8(self) -> None:
        export = export_top_pages([TopPage("/café", 1)])
        assert export.encode() == "page_url,views\n/café,1".encode()


class TestDecisionExport:
    def test_flattens_newlines_and_labels_status(self) -> None:
        decision = AgentDecision(
            id="d1",
            account_id="acc-1",
            agent_id="a1",
            profile_id="p1",
            decisioned_at="2024-06-15T10:00:00Z",
            channel="email",
            was_sent=False,
            send_error="smtp\nrefused",
            reasoning='Chose "promo",\nhigh intent',
        )
        export = export_decisions([decision], "Winback")
        assert export.filename == "agent-Winback-decisions.csv"
        header, line = export.content.split("\n")
        assert header.startswith("decision_id,decisioned_at,scheduled_send_at,agent_id")
        assert line == (
            "d1,2024-06-15T10:00:00Z,,a1,p1,,email,false,false,,Failed,smtp refused,"
            '"Chose ""promo"", high intent"'
        )


class TestProfileExports:
    @pytest.fixture
    def profile(self) -> Profile:
        return Profile(
            id="p1",
            account_id="acc-1",
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            company="Analytical, Ltd",
            created_at="2024-06-01T00:00:00Z",
        )

    def test_profiles_list(self, profile: Profile) -> None:
        export = export_profiles([profile])
        assert export.filename == "profiles-all.csv"
        assert export.content == (
            "Full Name,Email,Phone,Device ID,Date Added\n"
            "Ada Lovelace,ada@example.com,,,2024-06-01T00:00:00Z"
        )
        assert export_profiles([profile], selected=True).filename == "profiles-selected.csv"

    def test_single_profile(self, profile: Profile) -> None:
        export = export_profile(profile)
        assert export.filename == "profile-p1.csv"
        header, line = export.content.split("\n")
        assert header.split(",")[:4] == ["id", "created_at", "first_name", "last_name"]
        assert '"Analytical, Ltd"' in line

    def test_segment_members(self, profile: Profile) -> None:
        row = MemberRow(
            profile=profile,
            name="Ada Lovelace",
            added_at="2024-06-10T00:00:00Z",
            ltv=0.0,
            email_status="subscribed",
            sms_status="pending",
            push_status="pending",
        )
        export = export_segment_members([row], "VIP")
        assert export.filename == "VIP-export.csv"
        line = export.content.split("\n")[1]
        # Date Added is the membership time, not the profile's creation time
        assert line.startswith("Ada Lovelace,ada@example.com,,,2024-06-10T00:00:00Z,")
        assert export_segment_members([], None).filename == "segment-export.csv"

    def test_profile_events(self, make_event: Callable[..., Event]) -> None:
        event = make_event(
            "purchase",
            "2024-06-15T10:00:00Z",
            id="e1",
            order_id="o1",
            revenue=12.5,
            currency="USD",
            properties={"sku": "A1", "qty": 2},
        )
        export = export_profile_events([event], "p1")
        assert export.filename == "events-p1.csv"
        assert export.content.split("\n")[1] == (
            'e1,2024-06-15T10:00:00Z,purchase,,,,,o1,,12.5,USD,"{""sku"":""A1"",""qty"":2}"'
        )
