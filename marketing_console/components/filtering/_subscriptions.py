"""
Channel subscription status lookup.

A (profile, channel) pair with no stored row has the implied status
"pending". lookup_subscription reports NoRecord for that case and
normalize_status is the only function that turns NoRecord into "pending";
every filter, badge and counter goes through it, so "no record" and an
explicit "pending" row are indistinguishable downstream.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from marketing_console.domain.entities import (
    CHANNELS,
    SUBSCRIPTION_STATUSES,
    ChannelSubscription,
)

from .models import SENTINELS, Explicit, NoRecord, SubscriptionLookup

PENDING = "pending"

SubscriptionIndex = Mapping[tuple[str, str], Sequence[ChannelSubscription]]


def index_subscriptions(
    subscriptions: Iterable[ChannelSubscription],
) -> dict[tuple[str, str], list[ChannelSubscription]]:
    """Group rows by (profile_id, channel), keeping store order."""
    index: dict[tuple[str, str], list[ChannelSubscription]] = {}
    for s in subscriptions:
        index.setdefault((s.profile_id, s.channel), []).append(s)
    return index


def lookup_subscription(
    index: SubscriptionIndex, profile_id: str, channel: str
) -> SubscriptionLookup:
    rows = index.get((profile_id, channel), ())
    if not rows:
        return NoRecord()
    return Explicit(statuses=tuple(r.status for r in rows))


def normalize_status(lookup: SubscriptionLookup) -> tuple[str, ...]:
    """Effective statuses; NoRecord and blank statuses read as "pending"."""
    if isinstance(lookup, NoRecord):
        return (PENDING,)
    return tuple(s or PENDING for s in lookup.statuses)


def display_status(lookup: SubscriptionLookup) -> str:
    """Badge status: the first stored row's status, or "pending"."""
    return normalize_status(lookup)[0]


def status_matches(lookup: SubscriptionLookup, want: str | None) -> bool:
    """True when any effective status equals want; "any"/"all" match everything."""
    if want is None or want in SENTINELS:
        return True
    return want in normalize_status(lookup)


def status_counts(
    subscriptions: Iterable[ChannelSubscription],
    channels: Sequence[str] = CHANNELS,
) -> dict[str, dict[str, int]]:
    """
    Row counts per channel and status.

    Counts stored rows only; rows on unknown channels are ignored.
    """
    counts = {ch: {st: 0 for st in SUBSCRIPTION_STATUSES} for ch in channels}
    for s in subscriptions:
        per_channel = counts.get(s.channel)
        if per_channel is None:
            continue
        status = normalize_status(Explicit(statuses=(s.status,)))[0]
        per_channel[status] = per_channel.get(status, 0) + 1
    return counts
