# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Partner tokens are HS256 JWTs issued by the account service and signed
# with JWT_SECRET. The partner id is read from the `partnerId` claim, or
# from `sub` when `partnerId` is absent.
#
# Usage:
#   from app.auth import get_current_partner, AuthPartner
#
#   @router.get("/me")
#   async def me(partner: AuthPartner = Depends(get_current_partner)):
#       return {"partner_id": partner.id}
# =============================================================================

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from app.auth.models import AuthPartner, TokenPayload
from app.config import settings

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"

# HTTP Bearer token extractor; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_partner(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthPartner:
    """
    Extract and validate the partner from a bearer token.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the HS256 signature and expiry
    3. Returns an AuthPartner with the partner's id

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        AuthPartner: The authenticated partner

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise _unauthorized("Not authorized to access this route")

    try:
        claims = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[TOKEN_ALGORITHM],
        )
        payload = TokenPayload.model_validate(claims)
    except ExpiredSignatureError:
        logger.warning("Partner token has expired")
        raise _unauthorized("Token has expired")
    except (JWTError, ValidationError) as e:
        logger.warning(f"Partner token validation failed: {e}")
        raise _unauthorized("Invalid token")

    if not payload.partner_id:
        logger.warning("Partner token missing partnerId/sub claim")
        raise _unauthorized("Invalid token: missing partner ID")

    logger.debug(f"Authenticated partner: {payload.partner_id}")
    return AuthPartner(id=payload.partner_id)
