# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - geo.py: GeoPoint and lenient location parsing
# - asset.py: ImageUpload and AssetDescriptor
# - portfolio.py: Portfolio items, patches and the ordered collection
# - partner.py: Services, visiting fee, directory filter and results
#
# These models define the "contract" between API and clients.
# =============================================================================

from .geo import GeoPoint, parse_location
from .asset import AssetDescriptor, ImageUpload
from .portfolio import Portfolio, PortfolioItem, PortfolioItemPatch, PortfolioKind
from .partner import (
    DirectoryFilter,
    PartnerDetail,
    PartnerSummary,
    Service,
    ServiceCategory,
    VisitingFee,
    VisitingFeeUpdate,
)

__all__ = [
    # Geo
    "GeoPoint",
    "parse_location",
    # Assets
    "AssetDescriptor",
    "ImageUpload",
    # Portfolio
    "Portfolio",
    "PortfolioItem",
    "PortfolioItemPatch",
    "PortfolioKind",
    # Partner
    "DirectoryFilter",
    "PartnerDetail",
    "PartnerSummary",
    "Service",
    "ServiceCategory",
    "VisitingFee",
    "VisitingFeeUpdate",
]
