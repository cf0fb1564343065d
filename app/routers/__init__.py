# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - directory.py: Public partner search and profile endpoints
# - partner_media.py: Partner-owned images, portfolio and settings
# - responses.py: Success envelope shared by all routers
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import directory
from . import partner_media

__all__ = [
    "health",
    "directory",
    "partner_media",
]
