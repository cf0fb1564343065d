# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides bearer-token authentication for partner-owned routes.
#
# Usage:
#   from app.auth import get_current_partner, AuthPartner
#
#   @router.put("/me/avatar")
#   async def update_avatar(partner: AuthPartner = Depends(get_current_partner)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_partner
from app.auth.models import AuthPartner

__all__ = [
    "get_current_partner",
    "AuthPartner",
]
