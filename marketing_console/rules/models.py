from pydantic import BaseModel, Field, field_validator

from marketing_console.domain.timeutil import get_timezone


class ProjectRules(BaseModel):
    slug: str = "marketing-console"
    rules_version: str = "1"


class EventGroups(BaseModel):
    web: list[str] = Field(default_factory=lambda: ["page_view", "session_start", "form_submit"])
    messaging: list[str] = Field(
        default_factory=lambda: [
            "message_sent",
            "message_open",
            "message_click",
            "message_bounce",
            "subscriber_new",
            "subscriber_removed",
        ]
    )
    ecommerce: list[str] = Field(
        default_factory=lambda: [
            "add_to_cart",
            "favorite",
            "checkout_started",
            "checkout_abandoned",
            "purchase",
        ]
    )


class SeriesTypes(BaseModel):
    """Event types charted per dashboard tab, in display order."""

    web: list[str] = Field(default_factory=lambda: ["page_view", "session_start", "form_submit"])
    ecommerce: list[str] = Field(
        default_factory=lambda: ["add_to_cart", "checkout_started", "checkout_abandoned", "purchase"]
    )


class FetchLimits(BaseModel):
    events: int = 5000
    agents: int = 200
    messages: int = 500


class AnalyticsRules(BaseModel):
    timezone: str = "UTC"
    currency: str = "USD"
    default_preset: str = "30d"
    default_granularity: str = "day"
    date_presets: dict[str, int] = Field(
        default_factory=lambda: {"7d": 7, "30d": 30, "90d": 90}
    )
    top_limit: int = 10
    event_groups: EventGroups = Field(default_factory=EventGroups)
    series_types: SeriesTypes = Field(default_factory=SeriesTypes)
    fetch_limits: FetchLimits = Field(default_factory=FetchLimits)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        get_timezone(v)
        return v

    @field_validator("default_granularity")
    @classmethod
    def _known_granularity(cls, v: str) -> str:
        if v not in ("hour", "day", "week"):
            raise ValueError(f"Unknown granularity: {v}")
        return v


class FilterRules(BaseModel):
    decision_page_size: int = 25
    segment_growth_days: int = 30


class ExportRules(BaseModel):
    media_type: str = "text/csv; charset=utf-8"


class Rules(BaseModel):
    project: ProjectRules = Field(default_factory=ProjectRules)
    analytics: AnalyticsRules = Field(default_factory=AnalyticsRules)
    filters: FilterRules = Field(default_factory=FilterRules)
    exports: ExportRules = Field(default_factory=ExportRules)
