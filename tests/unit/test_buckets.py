"""
Tests for time bucketing of event lists.

Covers:
- bucket counts per granularity
- every in-range event lands in exactly one bucket
- zero-filled series for empty input
- DST transitions for hour buckets
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from marketing_console.components.analytics import (
    bucket_start,
    bucketize,
    build_buckets,
    summarize,
)
from marketing_console.domain.entities import Event
from marketing_console.domain.timeutil import end_of_day

NEW_YORK = ZoneInfo("America/New_York")

WEEK_START = datetime(2024, 6, 9, tzinfo=UTC)
WEEK_END = end_of_day(datetime(2024, 6, 15, tzinfo=UTC), UTC)


class TestBuildBuckets:
    """Bucket boundaries per granularity."""

    def test_seven_days_gives_seven_day_buckets(self) -> None:
        buckets = build_buckets(WEEK_START, WEEK_END, "day", UTC)
        assert len(buckets) == 7
        assert buckets[0] == WEEK_START
        assert buckets[-1] == datetime(2024, 6, 15, tzinfo=UTC)

    def test_hour_buckets_over_one_day(self) -> None:
        start = datetime(2024, 6, 15, tzinfo=UTC)
        buckets = build_buckets(start, end_of_day(start, UTC), "hour", UTC)
        assert len(buckets) == 24

    def test_week_buckets_are_monday_aligned(self) -> None:
        """A Wednesday start still opens the week on its Monday."""
        start = datetime(2024, 6, 12, tzinfo=UTC)
        end = end_of_day(datetime(2024, 6, 25, tzinfo=UTC), UTC)
        buckets = build_buckets(start, end, "week", UTC)
        assert [b.date().isoformat() for b in buckets] == [
            "2024-06-10",
            "2024-06-17",
            "2024-06-24",
        ]

    def test_day_buckets_follow_local_midnight(self) -> None:
        start = datetime(2024, 6, 14, tzinfo=NEW_YORK)
        end = end_of_day(datetime(2024, 6, 15, tzinfo=NEW_YORK), NEW_YORK)
        buckets = build_buckets(start, end, "day", NEW_YORK)
        assert buckets == [
            datetime(2024, 6, 14, tzinfo=NEW_YORK),
            datetime(2024, 6, 15, tzinfo=NEW_YORK),
        ]

    def test_unknown_granularity_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown granularity"):
            build_buckets(WEEK_START, WEEK_END, "month", UTC)

    def test_bucket_start_truncates_to_hour(self) -> None:
        ts = datetime(2024, 6, 15, 14, 35, 12, tzinfo=UTC)
        assert bucket_start(ts, "hour", UTC) == datetime(2024, 6, 15, 14, tzinfo=UTC)


class TestHourBucketsAcrossDst:
    """Hour buckets step in absolute time."""

    def test_fall_back_keeps_both_one_am_hours(self) -> None:
        start = datetime(2024, 11, 3, 0, 0, tzinfo=NEW_YORK)
        end = datetime(2024, 11, 3, 3, 59, tzinfo=NEW_YORK)
        buckets = build_buckets(start, end, "hour", NEW_YORK)
        assert [b.astimezone(UTC).hour for b in buckets] == [4, 5, 6, 7, 8]

    def test_fall_back_events_land_in_distinct_hours(
        self, make_event: Callable[..., Event]
    ) -> None:
        events = [
            make_event("page_view", "2024-11-03T05:30:00Z"),  # 01:30 EDT
            make_event("page_view", "2024-11-03T06:30:00Z"),  # 01:30 EST
        ]
        start = datetime(2024, 11, 3, 0, 0, tzinfo=NEW_YORK)
        end = datetime(2024, 11, 3, 3, 59, tzinfo=NEW_YORK)
        result = bucketize(events, ["page_view"], start, end, "hour", NEW_YORK)
        assert result.series["page_view"] == [0, 1, 1, 0, 0]

    def test_spring_forward_skips_missing_hour(self) -> None:
        start = datetime(2024, 3, 10, 0, 0, tzinfo=NEW_YORK)
        end = datetime(2024, 3, 10, 3, 59, tzinfo=NEW_YORK)
        buckets = build_buckets(start, end, "hour", NEW_YORK)
        assert [b.hour for b in buckets] == [0, 1, 3]


class TestBucketize:
    """Event assignment and zero-fill."""

    def test_empty_events_zero_filled(self) -> None:
        """No events over seven days: seven buckets, all zeros per requested type."""
        result = bucketize([], ["page_view", "purchase"], WEEK_START, WEEK_END, "day", UTC)
        assert len(result.buckets) == 7
        assert result.series == {"page_view": [0] * 7, "purchase": [0] * 7}

    def test_every_in_range_event_counted_once(
        self, make_event: Callable[..., Event]
    ) -> None:
        events = [
            make_event("page_view", (WEEK_START + timedelta(hours=h * 8)).isoformat())
            for h in range(24)
        ]
        result = bucketize(events, ["page_view"], WEEK_START, WEEK_END, "day", UTC)
        # 21 events fall before 2024-06-16T00:00
        assert sum(result.series["page_view"]) == 21

    def test_out_of_range_and_malformed_events_dropped(
        self, make_event: Callable[..., Event]
    ) -> None:
        events = [
            make_event("page_view", "2024-06-01T10:00:00Z"),
            make_event("page_view", "garbage"),
            make_event("page_view", "2024-06-12T10:00:00Z"),
        ]
        result = bucketize(events, ["page_view"], WEEK_START, WEEK_END, "day", UTC)
        assert result.series["page_view"] == [0, 0, 0, 1, 0, 0, 0]

    def test_unrequested_types_ignored(self, make_event: Callable[..., Event]) -> None:
        events = [make_event("session_start", "2024-06-12T10:00:00Z")]
        result = bucketize(events, ["page_view"], WEEK_START, WEEK_END, "day", UTC)
        assert set(result.series) == {"page_view"}
        assert sum(result.series["page_view"]) == 0

    def test_two_purchases_same_day(self, make_event: Callable[..., Event]) -> None:
        """Two purchases on one day: one bucket, count 2, revenue 150, AOV 75."""
        day = datetime(2024, 6, 15, tzinfo=UTC)
        events = [
            make_event("purchase", day.isoformat(), revenue=100),
            make_event("purchase", day.isoformat(), revenue=50),
        ]
        result = bucketize(events, ["purchase"], day, end_of_day(day, UTC), "day", UTC)
        assert len(result.buckets) == 1
        assert result.series["purchase"] == [2]

        summary = summarize(events)
        assert summary.revenue == 150
        assert summary.aov == 75

    def test_input_not_mutated(self, make_event: Callable[..., Event]) -> None:
        events = [make_event("page_view", "2024-06-12T10:00:00Z")]
        snapshot = list(events)
        bucketize(events, ["page_view"], WEEK_START, WEEK_END, "day", UTC)
        assert events == snapshot

    def test_partial_week_buckets_exclude_events_outside_window(
        self, make_event: Callable[..., Event]
    ) -> None:
        """A Saturday-to-Friday window spans two Monday weeks; only its own days count."""
        start = datetime(2024, 6, 1, tzinfo=UTC)
        end = end_of_day(datetime(2024, 6, 7, tzinfo=UTC), UTC)
        events = [
            make_event("purchase", "2024-05-28T10:00:00Z"),  # Tuesday before start
            make_event("purchase", "2024-05-31T23:59:59Z"),  # just before start
            make_event("purchase", "2024-06-08T00:00:00Z"),  # just after end
            make_event("purchase", "2024-06-09T10:00:00Z"),  # Sunday after end
            make_event("purchase", "2024-06-01T00:00:00Z"),
            make_event("purchase", "2024-06-07T23:59:59Z"),
        ]
        result = bucketize(events, ["purchase"], start, end, "week", UTC)
        assert [b.date().isoformat() for b in result.buckets] == ["2024-05-27", "2024-06-03"]
        assert result.series["purchase"] == [1, 1]

    def test_mid_hour_window_edges_exclude_outside_events(
        self, make_event: Callable[..., Event]
    ) -> None:
        start = datetime(2024, 6, 12, 10, 30, tzinfo=UTC)
        end = datetime(2024, 6, 12, 11, 15, tzinfo=UTC)
        events = [
            make_event("page_view", "2024-06-12T10:10:00Z"),
            make_event("page_view", "2024-06-12T10:45:00Z"),
            make_event("page_view", "2024-06-12T11:40:00Z"),
        ]
        result = bucketize(events, ["page_view"], start, end, "hour", UTC)
        assert result.series["page_view"] == [1, 0]
