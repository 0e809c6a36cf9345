"""Contracts for advertisements, ad requests and performance rows."""

from __future__ import annotations

import re
from datetime import date as _date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.utils.datetime_utils import ensure_utc, utc_now

_HH_MM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
Device = Literal["mobile", "desktop", "tablet"]
PricingModel = Literal["cpm", "cpc", "cpa", "fixed"]


class AdType(str, Enum):
    BANNER = "banner"
    NATIVE = "native"
    VIDEO = "video"
    SPONSORED_ARTICLE = "sponsored_article"
    POPUP = "popup"
    SIDEBAR = "sidebar"
    INTERSTITIAL = "interstitial"


class AdPlacement(str, Enum):
    HEADER = "header"
    SIDEBAR = "sidebar"
    ARTICLE_TOP = "article_top"
    ARTICLE_MIDDLE = "article_middle"
    ARTICLE_BOTTOM = "article_bottom"
    BETWEEN_ARTICLES = "between_articles"
    FOOTER = "footer"
    MOBILE_STICKY = "mobile_sticky"


class AdStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    EXPIRED = "expired"
    PENDING = "pending"
    REJECTED = "rejected"


class CamelModel(BaseModel):
    """Base for models exchanged as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContactInfo(CamelModel):
    phone: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    postal_code: str = ""


class BillingInfo(CamelModel):
    payment_method: Literal["credit_card", "paypal", "bank_transfer"] = "credit_card"
    billing_cycle: Literal["monthly", "quarterly", "yearly"] = "monthly"
    currency: str = "EUR"


class Advertiser(CamelModel):
    id: str = ""
    name: str = Field(min_length=1)
    email: str = ""
    company: str = ""
    website: str = ""
    logo: Optional[str] = None
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    billing_info: BillingInfo = Field(default_factory=BillingInfo)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    is_verified: bool = False


class Campaign(CamelModel):
    id: str = ""
    name: str = ""
    description: str = ""
    budget: float = Field(ge=0)
    daily_budget: float = Field(default=0.0, ge=0)
    spent_amount: float = Field(default=0.0, ge=0)
    impressions: int = Field(default=0, ge=0)
    clicks: int = Field(default=0, ge=0)
    conversions: int = Field(default=0, ge=0)
    start_date: UtcDatetime = Field(default_factory=utc_now)
    end_date: UtcDatetime
    status: AdStatus = AdStatus.ACTIVE


class TimeWindow(CamelModel):
    """Daily serving window, ``HH:mm`` bounds inclusive, in site time."""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        if not _HH_MM.match(value):
            raise ValueError("time must use the HH:mm format")
        return value

    def contains(self, minutes_of_day: int) -> bool:
        return _to_minutes(self.start) <= minutes_of_day <= _to_minutes(self.end)


def _to_minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


class AdTargeting(CamelModel):
    categories: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    countries: List[str] = Field(default_factory=list)
    devices: List[Device] = Field(default_factory=list)
    time_of_day: Optional[TimeWindow] = None
    # 0 = Sunday
    days_of_week: Optional[List[Annotated[int, Field(ge=0, le=6)]]] = None
    keywords: List[str] = Field(default_factory=list)


class AdPricing(CamelModel):
    model: PricingModel
    rate: float = Field(ge=0)
    currency: str = "EUR"
    min_budget: float = Field(default=0.0, ge=0)


class Advertisement(CamelModel):
    id: str = Field(min_length=1)
    type: AdType
    title: str
    content: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    target_url: str
    custom_code: Optional[str] = None
    advertiser: Advertiser
    campaign: Campaign
    targeting: AdTargeting
    placement: AdPlacement
    pricing: AdPricing
    status: AdStatus = AdStatus.PENDING
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    start_date: UtcDatetime
    end_date: UtcDatetime

    def is_running(self, now: datetime) -> bool:
        return self.status == AdStatus.ACTIVE and self.start_date <= now <= self.end_date

    def budget_exhausted(self) -> bool:
        return self.campaign.spent_amount >= self.campaign.budget


class AdPerformance(CamelModel):
    """Counters for one ad on one UTC day."""

    ad_id: str
    date: _date
    impressions: int = 0
    clicks: int = 0
    conversions: int = 0
    revenue: float = 0.0
    ctr: float = 0.0
    cpm: float = 0.0
    cpc: float = 0.0


class UserContext(CamelModel):
    language: str
    country: Optional[str] = None
    device: Device
    categories: List[str] = Field(default_factory=list)
    current_url: str = ""


class SlotDimensions(CamelModel):
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class AdSlot(CamelModel):
    id: str
    placement: AdPlacement
    dimensions: SlotDimensions
    is_responsive: bool = False
    max_ads: int = Field(default=1, ge=1)
    rotation_interval: Optional[int] = Field(default=None, ge=1)


class AdRequest(CamelModel):
    placement: AdPlacement
    user_context: UserContext
    slot_info: AdSlot


class AdTracking(CamelModel):
    impression_url: str
    click_url: str


class AdResponse(CamelModel):
    ad: Advertisement
    tracking: AdTracking
    refresh_after: Optional[int] = None


__all__ = [
    "AdPerformance",
    "AdPlacement",
    "AdPricing",
    "AdRequest",
    "AdResponse",
    "AdSlot",
    "AdStatus",
    "AdTargeting",
    "AdTracking",
    "AdType",
    "Advertisement",
    "Advertiser",
    "BillingInfo",
    "Campaign",
    "ContactInfo",
    "SlotDimensions",
    "TimeWindow",
    "UserContext",
]
