"""Pydantic models describing tool inputs and outputs."""

from __future__ import annotations

from typing import Any, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .client import is_absolute_url

CampaignObjective = Literal[
    "OUTCOME_AWARENESS",
    "OUTCOME_ENGAGEMENT",
    "OUTCOME_LEADS",
    "OUTCOME_SALES",
    "OUTCOME_TRAFFIC",
    "OUTCOME_APP_PROMOTION",
]
CampaignStatus = Literal["ACTIVE", "PAUSED", "DELETED", "ARCHIVED"]
BidStrategy = Literal[
    "LOWEST_COST_WITHOUT_CAP",
    "LOWEST_COST_WITH_BID_CAP",
    "COST_CAP",
    "LOWEST_COST_WITH_MIN_ROAS",
]
SpecialAdCategory = Literal["NONE", "EMPLOYMENT", "HOUSING", "CREDIT", "ISSUES_ELECTIONS_POLITICS"]
InsightsLevel = Literal["ad", "adset", "campaign", "account"]
DatePreset = Literal[
    "today",
    "yesterday",
    "this_month",
    "last_month",
    "this_quarter",
    "maximum",
    "last_3d",
    "last_7d",
    "last_14d",
    "last_28d",
    "last_30d",
    "last_90d",
    "last_week_mon_sun",
    "last_week_sun_sat",
    "last_quarter",
    "last_year",
    "this_week_mon_today",
    "this_week_sun_today",
    "this_year",
]
AttributionWindow = Literal["1d_click", "7d_click", "1d_view", "28d_click"]
OptimizationGoal = Literal[
    "NONE",
    "APP_INSTALLS",
    "AD_RECALL_LIFT",
    "ENGAGED_USERS",
    "EVENT_RESPONSES",
    "IMPRESSIONS",
    "LEAD_GENERATION",
    "QUALITY_LEAD",
    "LINK_CLICKS",
    "OFFSITE_CONVERSIONS",
    "PAGE_LIKES",
    "POST_ENGAGEMENT",
    "QUALITY_CALL",
    "REACH",
    "LANDING_PAGE_VIEWS",
    "VISIT_INSTAGRAM_PROFILE",
    "VALUE",
    "THRUPLAY",
    "DERIVED_EVENTS",
    "APP_INSTALLS_AND_OFFSITE_CONVERSIONS",
    "CONVERSATIONS",
    "IN_APP_VALUE",
    "MESSAGING_PURCHASE_CONVERSION",
    "MESSAGING_APPOINTMENT_CONVERSION",
    "SUBSCRIBERS",
    "REMINDERS_SET",
]
BillingEvent = Literal["IMPRESSIONS", "LINK_CLICKS", "POST_ENGAGEMENT", "THRUPLAY"]


class GraphRequestInput(BaseModel):
    method: Literal["GET", "POST", "DELETE"]
    path: str = Field(..., description="Graph API path relative to the versioned root, e.g. /me/adaccounts")
    query: dict[str, Any] | None = None
    body: dict[str, Any] | None = None

    @field_validator("path")
    @classmethod
    def _relative_path(cls, value: str) -> str:
        if is_absolute_url(value):
            raise ValueError("path must be relative to the Graph API root, not an absolute URL")
        return value


class TokensListRequest(BaseModel):
    pass


class TokenSetActiveRequest(BaseModel):
    bm_name: str = Field(..., min_length=1, description="Name of the registered token to activate")


class TokenRegisterRequest(BaseModel):
    bm_name: str = Field(..., min_length=1, max_length=64, description="Friendly name, e.g. 'client_acme'")
    access_token: str = Field(..., min_length=10, description="Meta API access token to register")


class AccountsListRequest(BaseModel):
    user_id: str = Field(default="me", description="User ID or 'me' for the authenticated user")
    limit: int = Field(default=100, ge=1, le=500, description="Maximum number of accounts to return")
    fields: Sequence[str] | None = None


class AccountGetRequest(BaseModel):
    account_id: str = Field(..., description="Ad account ID (with or without 'act_' prefix)")


class PagesListRequest(BaseModel):
    account_id: str | None = Field(default=None, description="Ad account ID; omit for the user's own pages")


class CampaignsListRequest(BaseModel):
    account_id: str
    limit: int = Field(default=25, ge=1, le=100, description="Page size")
    status_filter: Sequence[CampaignStatus] | None = None
    fields: Sequence[str] | None = None
    max_items: int | None = Field(
        default=None,
        ge=1,
        le=5000,
        description="Follow pagination until this many campaigns are collected",
    )


class CampaignGetRequest(BaseModel):
    campaign_id: str
    fields: Sequence[str] | None = None


class CampaignCreateRequest(BaseModel):
    account_id: str
    name: str = Field(..., min_length=1, max_length=400)
    objective: CampaignObjective
    status: Literal["ACTIVE", "PAUSED"] = "PAUSED"
    special_ad_categories: list[SpecialAdCategory] = Field(default_factory=lambda: ["NONE"])
    daily_budget: int | None = Field(default=None, ge=0, description="Daily budget in cents")
    lifetime_budget: int | None = Field(default=None, ge=0, description="Lifetime budget in cents")
    bid_strategy: BidStrategy | None = None
    buying_type: Literal["AUCTION", "RESERVED"] = "AUCTION"


class CampaignUpdateRequest(BaseModel):
    campaign_id: str
    name: str | None = None
    status: CampaignStatus | None = None
    daily_budget: int | None = Field(default=None, ge=0)
    lifetime_budget: int | None = Field(default=None, ge=0)
    bid_strategy: BidStrategy | None = None


class CampaignDeleteRequest(BaseModel):
    campaign_id: str


class TargetingSpec(BaseModel):
    """Ad set targeting. Keys not modelled here are passed through to Meta unchanged."""

    model_config = ConfigDict(extra="allow")

    geo_locations: dict[str, Any] | None = Field(default=None, description='e.g. {"countries": ["US"]}')
    age_min: int | None = Field(default=None, ge=13, le=65)
    age_max: int | None = Field(default=None, ge=13, le=65)
    genders: list[int] | None = Field(default=None, description="0=all, 1=male, 2=female")
    interests: list[dict[str, Any]] | None = None
    behaviors: list[dict[str, Any]] | None = None
    custom_audiences: list[dict[str, Any]] | None = None
    excluded_custom_audiences: list[dict[str, Any]] | None = None
    publisher_platforms: list[str] | None = None
    device_platforms: list[str] | None = None


class AdSetsListRequest(BaseModel):
    account_id: str
    campaign_id: str | None = Field(default=None, description="Only list ad sets of this campaign")
    limit: int = Field(default=25, ge=1, le=100)
    status_filter: Sequence[CampaignStatus] | None = None
    fields: Sequence[str] | None = None


class AdSetGetRequest(BaseModel):
    adset_id: str
    fields: Sequence[str] | None = None


class AdSetCreateRequest(BaseModel):
    account_id: str
    campaign_id: str = Field(..., description="Parent campaign ID")
    name: str = Field(..., min_length=1, max_length=400)
    optimization_goal: OptimizationGoal
    targeting: TargetingSpec
    status: Literal["ACTIVE", "PAUSED"] = "PAUSED"
    billing_event: BillingEvent = "IMPRESSIONS"
    daily_budget: int | None = Field(default=None, ge=0, description="Daily budget in cents")
    lifetime_budget: int | None = Field(default=None, ge=0, description="Lifetime budget in cents")
    bid_amount: int | None = Field(default=None, ge=0, description="Bid cap in cents")
    bid_strategy: BidStrategy | None = None
    start_time: str | None = Field(default=None, description="ISO 8601 start time")
    end_time: str | None = Field(default=None, description="ISO 8601 end time, required with lifetime_budget")
    promoted_object: dict[str, Any] | None = Field(default=None, description='e.g. {"page_id": "123"}')


class AdSetUpdateRequest(BaseModel):
    adset_id: str
    name: str | None = None
    status: CampaignStatus | None = None
    daily_budget: int | None = Field(default=None, ge=0)
    lifetime_budget: int | None = Field(default=None, ge=0)
    targeting: TargetingSpec | None = None
    bid_amount: int | None = Field(default=None, ge=0)
    bid_strategy: BidStrategy | None = None
    end_time: str | None = None


class AdsListRequest(BaseModel):
    account_id: str
    campaign_id: str | None = None
    adset_id: str | None = Field(default=None, description="Takes precedence over campaign_id")
    limit: int = Field(default=25, ge=1, le=100)
    status_filter: Sequence[CampaignStatus] | None = None
    fields: Sequence[str] | None = None


class AdGetRequest(BaseModel):
    ad_id: str
    fields: Sequence[str] | None = None


class AdCreateRequest(BaseModel):
    account_id: str
    name: str = Field(..., min_length=1, max_length=400)
    adset_id: str = Field(..., description="Ad set that will hold the ad")
    creative_id: str = Field(..., description="Existing creative to use")
    status: Literal["ACTIVE", "PAUSED"] = "PAUSED"
    tracking_specs: list[dict[str, Any]] | None = None


class AdUpdateRequest(BaseModel):
    ad_id: str
    name: str | None = None
    status: CampaignStatus | None = None
    creative_id: str | None = Field(default=None, description="Swap in a different creative")


class AudiencesListRequest(BaseModel):
    account_id: str
    limit: int = Field(default=25, ge=1, le=100)
    fields: Sequence[str] | None = None


class AudienceDeleteRequest(BaseModel):
    audience_id: str


class TimeRange(BaseModel):
    since: str = Field(..., description="Start date YYYY-MM-DD")
    until: str = Field(..., description="End date YYYY-MM-DD")


class InsightsRequest(BaseModel):
    object_id: str = Field(..., description="Campaign, ad set, ad, or account ID (act_XXX for accounts)")
    level: InsightsLevel | None = None
    time_range: TimeRange | None = None
    date_preset: DatePreset | None = None
    breakdowns: Sequence[str] | None = None
    fields: Sequence[str] | None = None
    action_attribution_windows: Sequence[AttributionWindow] | None = None
    time_increment: int | Literal["monthly", "all_days"] | None = None
    limit: int = Field(default=100, ge=1, le=1000)


class BillingAccountRequest(BaseModel):
    account_id: str


class SpendCapUpdateRequest(BaseModel):
    account_id: str
    spend_cap: int = Field(..., ge=0, description="New spend cap in cents; 0 removes the cap")


class ImageUploadRequest(BaseModel):
    account_id: str
    image_url: HttpUrl
    name: str | None = None


__all__ = tuple(name for name in globals() if name[0].isupper())
