import csv
import io
from datetime import UTC, datetime, timedelta

import pytest

from marketing_console.components.analytics import bucketize, period_delta
from marketing_console.components.attribution import attribute
from marketing_console.components.export import format_csv
from marketing_console.components.filtering import (
    Explicit,
    NoRecord,
    SortSpec,
    apply_pipeline,
    status_matches,
    text_search,
)
from marketing_console.domain.entities import Event

START = datetime(2024, 6, 1, tzinfo=UTC)
END = datetime(2024, 6, 7, 23, 59, 59, 999999, tzinfo=UTC)


@pytest.fixture
def events():
    out = []
    for i in range(40):
        out.append(
            Event(
                id=f"e{i}",
                account_id="acc-1",
                event_type="purchase" if i % 3 == 0 else "message_sent",
                occurred_at=(START + timedelta(hours=5 * i)).isoformat(),
                agent_id=f"a{i % 4}" if i % 5 else None,
                revenue=float(i),
            )
        )
    return out


# --- R1: Bucket conservation ---
def test_R1_bucket_totals_match_in_window_events(events):
    """R1: Every in-window event of a charted type lands in exactly one bucket."""
    for granularity in ("hour", "day", "week"):
        result = bucketize(events, ["purchase", "message_sent"], START, END, granularity, UTC)
        for event_type, counts in result.series.items():
            assert len(counts) == len(result.buckets)
            expected = sum(
                1
                for e in events
                if e.event_type == event_type
                and START <= datetime.fromisoformat(e.occurred_at) <= END
            )
            assert sum(counts) == expected


# --- R2: Delta never divides by zero ---
def test_R2_delta_with_empty_previous_period():
    """R2: A zero previous value yields the raw current value, never an error."""
    assert period_delta(0, 0) == 0.0
    assert period_delta(7, 0) == 7.0
    assert period_delta(3, 4) == pytest.approx(-0.25)


# --- R3: Pipeline purity ---
def test_R3_pipeline_does_not_mutate_and_is_idempotent(events):
    """R3: Filtering returns a new list and re-applying it changes nothing."""
    before = list(events)
    predicates = [text_search("a1", lambda e: [e.agent_id])]
    sort = SortSpec(key=lambda e: e.revenue, kind="number", descending=True)

    once = apply_pipeline(events, predicates, sort)
    twice = apply_pipeline(once, predicates, sort)

    assert events == before
    assert once == twice
    assert all(e.agent_id == "a1" for e in once)


# --- R4: Pending parity ---
def test_R4_missing_and_blank_subscriptions_read_as_pending():
    """R4: No row and a blank status both match the pending filter."""
    assert status_matches(NoRecord(), "pending")
    assert status_matches(Explicit(statuses=("",)), "pending")
    assert not status_matches(Explicit(statuses=("subscribed",)), "pending")


# --- R5: CSV is parseable ---
def test_R5_csv_output_parses_back():
    """R5: Escaped output reads back to the original cells."""
    rows = [["plain", 'say "hi"', "a,b"], ["multi\nline", None, 1.5]]
    text = format_csv(["x", "y", "z"], rows)
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed == [
        ["x", "y", "z"],
        ["plain", 'say "hi"', "a,b"],
        ["multi\nline", "", "1.5"],
    ]


# --- R6: Attribution conservation ---
def test_R6_attributed_revenue_sums_to_keyed_purchases(events):
    """R6: Credited revenue equals the revenue of purchases carrying an agent."""
    rows = attribute(events, "agent")
    expected = sum(e.revenue for e in events if e.event_type == "purchase" and e.agent_id)
    assert sum(r.revenue for r in rows) == pytest.approx(expected)
    assert [r.revenue for r in rows] == sorted((r.revenue for r in rows), reverse=True)
