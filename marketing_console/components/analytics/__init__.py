"""
Analytics component - buckets, series, KPIs and top tables.
"""

from ._buckets import bucket_key, bucket_start, build_buckets, bucketize
from ._kpi import (
    build_kpi_rows,
    category_message_ids,
    filter_events,
    format_currency,
    pct,
    period_delta,
    previous_period,
    resolve_date_range,
    summarize,
)
from ._tables import sends_by_channel, top_messages, top_pages, top_products
from .component import config_from_rules, run_dashboard
from .models import (
    DEFAULT_CONFIG,
    GRANULARITIES,
    PLACEHOLDER,
    AnalyticsConfig,
    BucketedSeries,
    DashboardOutput,
    DashboardQuery,
    DateRange,
    EventScope,
    Granularity,
    KpiRow,
    KpiSummary,
    TopMessage,
    TopPage,
    TopProduct,
)

__all__ = [
    # Entry points
    "run_dashboard",
    "config_from_rules",
    # Buckets
    "bucket_key",
    "bucket_start",
    "build_buckets",
    "bucketize",
    # KPIs
    "build_kpi_rows",
    "category_message_ids",
    "filter_events",
    "format_currency",
    "pct",
    "period_delta",
    "previous_period",
    "resolve_date_range",
    "summarize",
    # Tables
    "sends_by_channel",
    "top_messages",
    "top_pages",
    "top_products",
    # Models
    "AnalyticsConfig",
    "BucketedSeries",
    "DashboardOutput",
    "DashboardQuery",
    "DateRange",
    "DEFAULT_CONFIG",
    "EventScope",
    "GRANULARITIES",
    "Granularity",
    "KpiRow",
    "KpiSummary",
    "PLACEHOLDER",
    "TopMessage",
    "TopPage",
    "TopProduct",
]
