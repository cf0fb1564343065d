# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .asset_validator import AssetValidator
from .asset_store import AssetStore, CleanupOutcome
from .portfolio_manager import PortfolioManager
from .geo_directory import GeoDirectory
from .partner_profile import PartnerProfileService

__all__ = [
    "AssetValidator",
    "AssetStore",
    "CleanupOutcome",
    "PortfolioManager",
    "GeoDirectory",
    "PartnerProfileService",
]
