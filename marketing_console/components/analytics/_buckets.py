"""
Time bucketing of event lists.

Key behaviors:
- hour: one bucket per local hour from start (truncated) through end
- day: one bucket per local calendar day from start's midnight through end
- week: one bucket per Monday-aligned week starting on or before start
- Events are assigned by equality of period (same hour / day / week), not by
  nearest bucket; events with no matching bucket or an unparseable timestamp
  are dropped from the series

Hour buckets advance in absolute time so a DST change neither skips nor
repeats an hour; day and week buckets advance in calendar days.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from datetime import UTC, datetime, timedelta, tzinfo

from marketing_console.domain.entities import Event
from marketing_console.domain.timeutil import (
    localize,
    monday_of,
    parse_timestamp,
    to_local,
)

from .models import GRANULARITIES, BucketedSeries

HOUR = timedelta(hours=1)


def _check_granularity(granularity: str) -> None:
    if granularity not in GRANULARITIES:
        msg = f"Unknown granularity: {granularity}"
        raise ValueError(msg)


def bucket_start(ts: datetime, granularity: str, tz: tzinfo) -> datetime:
    """Start of the local period containing ts."""
    _check_granularity(granularity)
    local = to_local(ts, tz)
    if granularity == "hour":
        return local.replace(minute=0, second=0, microsecond=0)
    if granularity == "day":
        return localize(local.date(), tz)
    return localize(monday_of(local.date()), tz)


def bucket_key(ts: datetime, granularity: str, tz: tzinfo) -> Hashable:
    """
    Equality key of the period containing ts.

    Hours are keyed by the UTC instant of the truncated local hour so the two
    wall-clock 01:00 hours of a DST fall-back stay distinct.
    """
    start = bucket_start(ts, granularity, tz)
    if granularity == "hour":
        return start.astimezone(UTC)
    return start.date()


def build_buckets(
    start: datetime, end: datetime, granularity: str, tz: tzinfo
) -> list[datetime]:
    """Bucket start times covering [start, end], in local time."""
    _check_granularity(granularity)
    buckets: list[datetime] = []

    if granularity == "hour":
        cur = bucket_start(start, "hour", tz).astimezone(UTC)
        while cur <= end:
            buckets.append(cur.astimezone(tz))
            cur += HOUR
        return buckets

    step = 1 if granularity == "day" else 7
    day = bucket_start(start, granularity, tz).date()
    while (b := localize(day, tz)) <= end:
        buckets.append(b)
        day += timedelta(days=step)
    return buckets


def bucketize(
    events: Iterable[Event],
    types: Sequence[str],
    start: datetime,
    end: datetime,
    granularity: str,
    tz: tzinfo,
) -> BucketedSeries:
    """
    Count events of each requested type per bucket.

    Only events with start <= occurred_at <= end are counted, also when the
    first or last bucket extends past the window. Returns zero-filled series
    for every requested type, also when the event list is empty.
    """
    buckets = build_buckets(start, end, granularity, tz)
    index = {bucket_key(b, granularity, tz): i for i, b in enumerate(buckets)}
    series: dict[str, list[int]] = {t: [0] * len(buckets) for t in types}

    for event in events:
        counts = series.get(event.event_type)
        if counts is None:
            continue
        ts = parse_timestamp(event.occurred_at, tz)
        if ts is None or not start <= ts <= end:
            continue
        i = index.get(bucket_key(ts, granularity, tz))
        if i is not None:
            counts[i] += 1

    return BucketedSeries(buckets=tuple(buckets), series=series)
