# =============================================================================
# app/routers/responses.py - Response Envelope
# =============================================================================
# Every successful response uses the same envelope:
#   {"success": true, "message"?: str, "data"?: any, "count"?: int}
# Errors use the envelope rendered by the handlers in app/exceptions.py.
# =============================================================================

from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Success envelope; documented in the OpenAPI schema."""
    success: bool = True
    message: str | None = None
    data: Any = None
    count: int | None = None


def envelope(
    data: Any = None,
    message: str | None = None,
    count: int | None = None,
) -> dict[str, Any]:
    """Build a success envelope, leaving out fields that weren't given."""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if count is not None:
        body["count"] = count
    return body


def listing(items: list[Any]) -> dict[str, Any]:
    """Envelope for a list result, with its count."""
    return envelope(data=items, count=len(items))
