# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception taxonomy for the API.
# Every error carries a machine-readable code and, where possible, a
# suggestion telling the caller how to fix the request.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class PartnerHubException(Exception):
    """
    Base exception for the PartnerHub API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PARTNERHUB_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the API response envelope."""
        result = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Image Validation Exceptions
# =============================================================================

class AssetValidationError(PartnerHubException):
    """Raised when an uploaded image is rejected before any network call."""

    def __init__(
        self,
        message: str,
        code: str = "ASSET_VALIDATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        index: int | None = None,
    ):
        details = dict(details or {})
        if index is not None:
            details["index"] = index
            message = f"Image {index + 1}: {message}"
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            suggestion=suggestion,
            details=details,
        )
        self.index = index


class InvalidImageTypeError(AssetValidationError):
    """Raised when an image's MIME type is not on the whitelist."""

    def __init__(self, filename: str, content_type: str, allowed: list[str], index: int | None = None):
        super().__init__(
            message="Invalid image type. Only JPEG, PNG, and WebP are allowed.",
            code="INVALID_IMAGE_TYPE",
            suggestion=f"Upload one of: {', '.join(allowed)}",
            details={"filename": filename, "content_type": content_type, "allowed_types": allowed},
            index=index,
        )


class ImageTooLargeError(AssetValidationError):
    """Raised when an image exceeds the per-file size limit."""

    def __init__(self, filename: str, size_bytes: int, max_mb: int, index: int | None = None):
        size_mb = size_bytes / (1024 * 1024)
        super().__init__(
            message=f"Image size too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="IMAGE_TOO_LARGE",
            suggestion=f"Upload an image smaller than {max_mb}MB",
            details={"filename": filename, "size_bytes": size_bytes, "max_mb": max_mb},
            index=index,
        )


class TooManyImagesError(AssetValidationError):
    """Raised when a batch holds more images than allowed."""

    def __init__(self, count: int, max_files: int):
        super().__init__(
            message=f"Too many images. Maximum {max_files} images allowed.",
            code="TOO_MANY_IMAGES",
            suggestion=f"Split the upload into batches of at most {max_files} images",
            details={"count": count, "max_files": max_files},
        )


class MissingImageError(AssetValidationError):
    """Raised when an upload request carries no image at all."""

    def __init__(self, field: str):
        super().__init__(
            message=f"{field} image is required",
            code="MISSING_IMAGE",
            suggestion=f"Attach at least one file in the '{field.lower()}' form field",
            details={"field": field},
        )


# =============================================================================
# Input Exceptions
# =============================================================================

class InvalidLocationError(PartnerHubException):
    """Raised when coordinates are malformed or out of range."""

    def __init__(self, raw: Any, reason: str):
        super().__init__(
            message=f"Invalid location: {reason}",
            code="INVALID_LOCATION",
            status_code=400,
            suggestion="Send {\"type\": \"Point\", \"coordinates\": [longitude, latitude]}",
            details={"location": repr(raw)[:200], "reason": reason},
        )


class InvalidPortfolioKindError(PartnerHubException):
    """Raised when a portfolio image kind is neither 'before' nor 'after'."""

    def __init__(self, value: str, index: int):
        super().__init__(
            message=f"Image {index + 1}: invalid portfolio type '{value}'",
            code="INVALID_PORTFOLIO_KIND",
            status_code=400,
            suggestion="Use 'before' or 'after'",
            details={"value": value, "index": index},
        )


class CaptionTooLongError(PartnerHubException):
    """Raised when a portfolio caption exceeds the length limit."""

    def __init__(self, length: int, max_length: int, index: int):
        super().__init__(
            message=f"Image {index + 1}: caption too long ({length} characters, max: {max_length})",
            code="CAPTION_TOO_LONG",
            status_code=400,
            suggestion=f"Shorten the caption to at most {max_length} characters",
            details={"length": length, "max_length": max_length, "index": index},
        )


class InvalidSearchError(PartnerHubException):
    """Raised when a directory query is missing or out of bounds."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_SEARCH",
            status_code=400,
            details=details,
        )


class NoImageError(PartnerHubException):
    """Raised when deleting an avatar or banner that was never set."""

    def __init__(self, field: str):
        super().__init__(
            message=f"No {field} to delete",
            code="NO_IMAGE",
            status_code=400,
            details={"field": field},
        )


# =============================================================================
# Not Found Exceptions
# =============================================================================

class PartnerNotFoundError(PartnerHubException):
    """Raised when a partner ID doesn't exist."""

    def __init__(self, partner_id: str):
        super().__init__(
            message="Partner not found",
            code="PARTNER_NOT_FOUND",
            status_code=404,
            suggestion="Check that the partner_id is correct",
            details={"partner_id": partner_id}
        )


class PortfolioItemNotFoundError(PartnerHubException):
    """Raised when a portfolio item ID isn't in the partner's collection."""

    def __init__(self, partner_id: str, item_id: str):
        super().__init__(
            message="Portfolio image not found",
            code="PORTFOLIO_ITEM_NOT_FOUND",
            status_code=404,
            suggestion="List the partner's portfolio to get current item ids",
            details={"partner_id": partner_id, "item_id": item_id}
        )


class AssetNotFoundError(PartnerHubException):
    """Raised when the remote repository has nothing at a storage path."""

    def __init__(self, storage_path: str):
        super().__init__(
            message=f"Asset not found: {storage_path}",
            code="ASSET_NOT_FOUND",
            status_code=404,
            details={"storage_path": storage_path}
        )


# =============================================================================
# Remote Repository Exceptions
# =============================================================================

class ConcurrencyConflictError(PartnerHubException):
    """Raised when the supplied content hash is stale."""

    def __init__(self, storage_path: str, expected_hash: str):
        super().__init__(
            message=f"Asset was changed concurrently: {storage_path}",
            code="CONCURRENCY_CONFLICT",
            status_code=409,
            suggestion="Reload the profile to get the current content hash and retry",
            details={"storage_path": storage_path, "expected_hash": expected_hash}
        )


class AssetUploadError(PartnerHubException):
    """Raised when writing to the content repository fails."""

    def __init__(self, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to upload image: {error}",
            code="ASSET_UPLOAD_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error, **(details or {})}
        )


class AssetDeleteError(PartnerHubException):
    """Raised when deleting from the content repository fails."""

    def __init__(self, storage_path: str, error: str):
        super().__init__(
            message=f"Failed to delete image: {error}",
            code="ASSET_DELETE_ERROR",
            status_code=502,
            details={"storage_path": storage_path, "error": error}
        )


class PersistenceError(PartnerHubException):
    """Raised when the partner document store rejects a read or write."""

    def __init__(self, operation: str, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to {operation}: {error}",
            code="PERSISTENCE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, **(details or {})}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def partnerhub_exception_handler(
    request: Request,
    exc: PartnerHubException
) -> JSONResponse:
    """Convert PartnerHubException to the JSON envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Malformed input is the caller's fault, so it maps to 400 rather
    than FastAPI's default 422.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        }
    )
