# =============================================================================
# core/models/partner.py - Partner Schemas
# =============================================================================
# These models define what the API exposes about a partner:
# - ServiceCategory / Service: what a partner offers
# - VisitingFee: optional home-visit fee configuration
# - DirectoryFilter: optional, AND-ed predicates for nearby search
# - PartnerSummary: one directory search result
# - PartnerDetail: the public profile page
#
# None of these models has a password field. Sensitive columns never reach
# Python because the store projects them away, and the models could not
# carry them even if they did.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .asset import AssetDescriptor
from .geo import GeoPoint
from .portfolio import PortfolioItem


class ServiceCategory(str, Enum):
    """Fixed set of service categories partners can list under."""
    HOME_REPAIR = "home_repair"
    CLEANING = "cleaning"
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    PAINTING = "painting"
    CARPENTRY = "carpentry"
    GARDENING = "gardening"
    PEST_CONTROL = "pest_control"
    AC_REPAIR = "ac_repair"
    APPLIANCE_REPAIR = "appliance_repair"
    AUTOMOTIVE = "automotive"
    BEAUTY = "beauty"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"


class Service(BaseModel):
    """
    One service offered by a partner.

    Example:
        {"name": "Leak repair", "category": "plumbing", "price": 499, "duration": 60}
    """

    name: str = Field(..., min_length=1, max_length=120)
    category: ServiceCategory
    description: str | None = Field(default=None, max_length=1000)
    price: float | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=15, description="Minutes")
    is_active: bool = True


class VisitingFee(BaseModel):
    """Fee charged for a home visit."""

    amount: float = Field(default=0, ge=0)
    currency: str = Field(default="INR", min_length=3, max_length=3)
    description: str = Field(default="Home visit fee", max_length=200)
    is_active: bool = True


class VisitingFeeUpdate(BaseModel):
    """Partial visiting fee update; absent fields keep their stored value."""

    amount: float | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    description: str | None = Field(default=None, max_length=200)
    is_active: bool | None = None


class DirectoryFilter(BaseModel):
    """
    Optional predicates for nearby search, AND-ed when present.

    - category: exact match on any of the partner's services
    - service_name: case-insensitive substring of any service name
    - min_rating: rating floor (inclusive)
    """

    category: ServiceCategory | None = None
    service_name: str | None = Field(default=None, min_length=1, max_length=120)
    min_rating: float | None = Field(default=None, ge=0, le=5)


class PartnerSummary(BaseModel):
    """
    A directory search result.

    distance_m is only set by nearby search.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    business_name: str | None = None
    location: GeoPoint | None = None
    rating: float = 0
    total_reviews: int = 0
    services: list[Service] = Field(default_factory=list)
    avatar_url: str | None = None
    visiting_fee: VisitingFee | None = None
    distance_m: float | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PartnerSummary:
        """Build a summary from a store projection row."""
        return cls.model_validate(_normalize_row(row))


class PartnerDetail(BaseModel):
    """Public profile of one partner."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    business_name: str | None = None
    description: str | None = None
    location: GeoPoint | None = None
    rating: float = 0
    total_reviews: int = 0
    services: list[Service] = Field(default_factory=list)
    visiting_fee: VisitingFee | None = None
    avatar: AssetDescriptor | None = None
    banner_image: AssetDescriptor | None = None
    portfolio_images: list[PortfolioItem] = Field(default_factory=list)
    is_verified: bool = False
    is_active: bool = True

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PartnerDetail:
        return cls.model_validate(_normalize_row(row))


def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """
    Map store columns onto model fields.

    The store exposes coordinates as flat longitude/latitude columns and
    the avatar as a JSON document; summaries only need its URL.
    """
    data = dict(row)
    longitude = data.pop("longitude", None)
    latitude = data.pop("latitude", None)
    if longitude is not None and latitude is not None:
        data["location"] = {"longitude": longitude, "latitude": latitude}
    avatar = data.get("avatar")
    if isinstance(avatar, dict) and "avatar_url" not in data:
        data["avatar_url"] = avatar.get("url")
    if data.get("id") is not None:
        data["id"] = str(data["id"])
    return data
