# =============================================================================
# core/services/asset_validator.py - Image Upload Validation
# =============================================================================
# Checks MIME type, per-file size and batch count before any network call,
# so a rejected request never leaves anything behind in the repository.
# =============================================================================

import logging
from collections.abc import Sequence

from core.models.asset import ImageUpload
from app.exceptions import (
    ImageTooLargeError,
    InvalidImageTypeError,
    MissingImageError,
    TooManyImagesError,
)

logger = logging.getLogger(__name__)

# image/jpg is not a registered type but browsers send it; treat it as jpeg
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")


class AssetValidator:
    """
    Validates images against the upload whitelist and limits.

    Example:
        validator = AssetValidator(max_size_bytes=5 * 1024 * 1024, max_batch=10)
        validator.validate_batch(uploads)
    """

    def __init__(
        self,
        max_size_bytes: int = 5 * 1024 * 1024,
        max_batch: int = 10,
        allowed_types: Sequence[str] = ALLOWED_IMAGE_TYPES,
    ):
        self.max_size_bytes = max_size_bytes
        self.max_batch = max_batch
        self.allowed_types = tuple(t.lower() for t in allowed_types)

    @property
    def max_size_mb(self) -> int:
        return self.max_size_bytes // (1024 * 1024)

    def validate(self, upload: ImageUpload, index: int | None = None) -> None:
        """
        Validate a single image.

        Args:
            upload: The image to check
            index: Position in a batch, reported in the error if given

        Raises:
            InvalidImageTypeError: If the MIME type is not allowed
            ImageTooLargeError: If the image exceeds the size limit
        """
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in self.allowed_types:
            raise InvalidImageTypeError(
                upload.filename, upload.content_type, list(self.allowed_types), index=index
            )

        if upload.size > self.max_size_bytes:
            raise ImageTooLargeError(upload.filename, upload.size, self.max_size_mb, index=index)

    def validate_batch(self, uploads: Sequence[ImageUpload]) -> None:
        """
        Validate a batch of images, failing on the first bad one.

        Raises:
            MissingImageError: If the batch is empty
            TooManyImagesError: If the batch exceeds the count limit
            InvalidImageTypeError / ImageTooLargeError: For the first bad
                image, tagged with its index
        """
        if not uploads:
            raise MissingImageError("Portfolio")

        if len(uploads) > self.max_batch:
            raise TooManyImagesError(len(uploads), self.max_batch)

        for index, upload in enumerate(uploads):
            self.validate(upload, index=index)

        logger.debug(f"Validated batch of {len(uploads)} images")
