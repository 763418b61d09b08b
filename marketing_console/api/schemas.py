"""
Shared request/response models for the console API.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Analytics ---


class KpiRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    value: float | None = None
    value_str: str | None = None
    delta: float = 0.0


class SeriesResponse(BaseModel):
    """Bucket start times plus one count list per series key."""

    model_config = ConfigDict(from_attributes=True)

    buckets: list[datetime]
    series: dict[str, list[int]]


class TopPageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    page_url: str
    views: int


class TopMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    sent: int
    opens: int
    clicks: int
    bounces: int


class TopProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    adds: int
    purchases: int
    revenue: float


class AttributionRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    revenue: float
    orders: int
    sends: int
    aov: float
    roi: float = Field(..., description="Revenue per send")


class AttributionResponse(BaseModel):
    dimension: str
    rows: list[AttributionRowResponse]
    compare_a: AttributionRowResponse | None = None
    compare_b: AttributionRowResponse | None = None


class KpiResponse(BaseModel):
    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime
    kpis: dict[str, list[KpiRowResponse]]
    deliverability: float


class DashboardResponse(KpiResponse):
    granularity: str
    web: SeriesResponse
    sends_by_channel: SeriesResponse
    ecommerce: SeriesResponse
    top_pages: list[TopPageResponse]
    top_messages: list[TopMessageResponse]
    top_products: list[TopProductResponse]
    attribution: list[AttributionRowResponse]
    event_count: int


# --- Agents ---


class AgentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    segment_id: str
    message_category_id: str
    is_active: bool
    holdout_percentage: float
    send_frequency: str
    send_days: list[int]
    send_time_windows: list[str]
    created_at: Any = None
    activated_at: Any = None
    deactivated_at: Any = None


class AgentCreateRequest(BaseModel):
    account_id: str
    name: str = ""
    segment_id: str = ""
    message_category_id: str = ""
    holdout_percentage: float | None = 10
    default_email_from: str = ""
    default_sms_from: str = ""
    send_frequency: str = ""
    send_days: list[int] = Field(default_factory=list)
    send_time_windows: list[str] = Field(default_factory=list)
    desired_outcome_description: str = ""
    outcomes: dict[str, str] = Field(default_factory=dict, description="rank -> event type")


class OutcomesRequest(BaseModel):
    outcomes: dict[str, str] = Field(..., description="rank -> event type")


class OutcomeMappingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    agent_id: str
    event_type: str
    outcome: str


class ValidationErrorItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    field_name: str | None = None


class DecisionResponse(BaseModel):
    id: str
    agent_id: str
    profile_id: str
    decisioned_at: Any
    message_id: str | None = None
    message_name: str | None = None
    channel: str | None = None
    is_holdout: bool = False
    was_sent: bool | None = None
    sent_at: Any = None
    send_error: str | None = None
    reasoning: str | None = None
    status: str


class DecisionListResponse(BaseModel):
    decisions: list[DecisionResponse]
    total: int = Field(..., description="Decisions matching the filters")
    has_more: bool


# --- Segments ---


class SegmentSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    profiles: int
    growth: int


class MemberResponse(BaseModel):
    profile_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    added_at: Any = None
    ltv: float
    email_status: str
    sms_status: str
    push_status: str


class MemberMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    orders: int
    revenue: float
    aov: float
    status_counts: dict[str, dict[str, int]]


class MemberListResponse(BaseModel):
    members: list[MemberResponse]
    page: int
    page_size: int
    total_rows: int
    total_pages: int
    metrics: MemberMetricsResponse


# --- Profiles ---


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    device_id: str | None = None
    created_at: Any = None


class ProfileListResponse(BaseModel):
    profiles: list[ProfileResponse]
    page: int
    page_size: int
    total_rows: int
    total_pages: int


class ProfileImportRequest(BaseModel):
    account_id: str
    content: str = Field(..., description="CSV text with a header row")


class ProfileImportResponse(BaseModel):
    imported: int
    skipped: int
    profile_ids: list[str]


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str
