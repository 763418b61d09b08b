"""
Filtering component - list page filter/sort pipelines and subscription status lookup.
"""

from ._pages import (
    compute_status,
    filter_agents,
    filter_decisions,
    filter_profiles,
    filter_segment_members,
    filter_segments,
    lifetime_values,
    member_metrics,
    summarize_segments,
    visible_decisions,
)
from ._pipeline import (
    apply_pipeline,
    date_between,
    equals,
    one_of,
    paginate,
    since,
    sort_value,
    text_search,
)
from ._subscriptions import (
    PENDING,
    display_status,
    index_subscriptions,
    lookup_subscription,
    normalize_status,
    status_counts,
    status_matches,
)
from .models import (
    DECISION_STATUS_LABELS,
    SENTINELS,
    AgentFilter,
    DecisionFilter,
    Explicit,
    MemberFilter,
    MemberMetrics,
    MemberRow,
    NoRecord,
    Page,
    ProfileFilter,
    SegmentListFilter,
    SegmentSummary,
    SortSpec,
    SubscriptionLookup,
)

__all__ = [
    # Pipeline
    "apply_pipeline",
    "date_between",
    "equals",
    "one_of",
    "paginate",
    "since",
    "sort_value",
    "text_search",
    # Subscriptions
    "PENDING",
    "display_status",
    "index_subscriptions",
    "lookup_subscription",
    "normalize_status",
    "status_counts",
    "status_matches",
    # Pages
    "compute_status",
    "filter_agents",
    "filter_decisions",
    "filter_profiles",
    "filter_segment_members",
    "filter_segments",
    "lifetime_values",
    "member_metrics",
    "summarize_segments",
    "visible_decisions",
    # Models
    "AgentFilter",
    "DECISION_STATUS_LABELS",
    "DecisionFilter",
    "Explicit",
    "MemberFilter",
    "MemberMetrics",
    "MemberRow",
    "NoRecord",
    "Page",
    "ProfileFilter",
    "SENTINELS",
    "SegmentListFilter",
    "SegmentSummary",
    "SortSpec",
    "SubscriptionLookup",
]
