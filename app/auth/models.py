# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict


class AuthPartner(BaseModel):
    """
    Authenticated partner extracted from a bearer token.

    This is the minimal identity available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: str


class TokenPayload(BaseModel):
    """Claims read from a partner token. Unknown claims are ignored."""
    partnerId: str | None = None
    sub: str | None = None
    exp: int | None = None

    @property
    def partner_id(self) -> str | None:
        return self.partnerId or self.sub
