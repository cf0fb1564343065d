# =============================================================================
# core/services/partner_profile.py - Partner Profile Business Logic
# =============================================================================
# Handles the partner-owned parts of the profile that affect how the partner
# looks and whether they are discoverable:
# - avatar and banner images (replace / delete)
# - visiting fee, services, location, active flag
#
# Image replace order: upload new -> persist new -> delete old (best-effort).
# The old image is never deleted before the new one is attached, so a
# partner always has a valid image during a replace.
# =============================================================================

import logging
from typing import Any, NamedTuple

from pydantic import ValidationError

from core.models.asset import AssetDescriptor, ImageUpload
from core.models.geo import GeoPoint
from core.models.partner import PartnerDetail, Service, ServiceCategory, VisitingFee, VisitingFeeUpdate
from core.ports import PartnerStore
from core.services.asset_store import AssetStore
from core.services.asset_validator import AssetValidator
from app.exceptions import NoImageError, PartnerNotFoundError

logger = logging.getLogger(__name__)


class ImageSlot(NamedTuple):
    """A single-image profile field and the repository folder it uses."""
    field: str
    folder: str
    label: str


AVATAR = ImageSlot(field="avatar", folder="partners/avatars", label="avatar")
BANNER = ImageSlot(field="banner_image", folder="partners/banners", label="banner")


def _stored_descriptor(value: Any, partner_id: str, slot: ImageSlot) -> AssetDescriptor | None:
    """Parse a stored descriptor; records without a hash can't be deleted."""
    if not value:
        return None
    try:
        return AssetDescriptor.model_validate(value)
    except ValidationError:
        logger.warning(f"Partner {partner_id} has an incomplete {slot.label} record; old image will not be deleted")
        return None


class PartnerProfileService:
    """
    Service for partner profile media and configuration.

    Example:
        profile = PartnerProfileService(store, assets, validator)
        descriptor = await profile.update_avatar(partner_id, upload)
    """

    def __init__(self, store: PartnerStore, assets: AssetStore, validator: AssetValidator):
        self._store = store
        self._assets = assets
        self._validator = validator

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _fetch(self, partner_id: str) -> dict[str, Any]:
        row = await self._store.fetch_partner(partner_id)
        if not row:
            raise PartnerNotFoundError(partner_id)
        return row

    async def _update(self, partner_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        row = await self._store.update_partner(partner_id, changes)
        if row is None:
            raise PartnerNotFoundError(partner_id)
        return row

    async def _replace_image(
        self,
        partner_id: str,
        upload: ImageUpload,
        slot: ImageSlot,
    ) -> AssetDescriptor:
        self._validator.validate(upload)
        row = await self._fetch(partner_id)
        previous = _stored_descriptor(row.get(slot.field), partner_id, slot)

        descriptor = await self._assets.upload(upload.content, upload.filename, slot.folder)

        try:
            await self._update(partner_id, {slot.field: descriptor.model_dump()})
        except Exception:
            logger.error(f"Failed to attach new {slot.label} for {partner_id}; discarding upload")
            await self._assets.discard(descriptor)
            raise

        if previous is not None:
            await self._assets.discard(previous)

        logger.info(f"Replaced {slot.label} for partner {partner_id}")
        return descriptor

    async def _remove_image(self, partner_id: str, slot: ImageSlot) -> None:
        row = await self._fetch(partner_id)
        if not row.get(slot.field):
            raise NoImageError(slot.label)

        previous = _stored_descriptor(row.get(slot.field), partner_id, slot)
        await self._update(partner_id, {slot.field: None})

        if previous is not None:
            await self._assets.discard(previous)

        logger.info(f"Removed {slot.label} for partner {partner_id}")

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    async def get_details(self, partner_id: str) -> PartnerDetail:
        """
        Get a partner's public profile.

        Raises:
            PartnerNotFoundError: If the partner doesn't exist
        """
        return PartnerDetail.from_row(await self._fetch(partner_id))

    @staticmethod
    def service_categories() -> list[str]:
        """All service categories, in declaration order."""
        return [category.value for category in ServiceCategory]

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    async def update_avatar(self, partner_id: str, upload: ImageUpload) -> AssetDescriptor:
        """
        Replace the partner's avatar.

        The previous avatar is deleted only after the new one is saved;
        failing to delete it doesn't fail the update.

        Returns:
            Descriptor of the new avatar

        Raises:
            AssetValidationError: If the image is rejected
            PartnerNotFoundError: If the partner doesn't exist
            AssetUploadError: If the upload fails (profile unchanged)
        """
        return await self._replace_image(partner_id, upload, AVATAR)

    async def update_banner(self, partner_id: str, upload: ImageUpload) -> AssetDescriptor:
        """Replace the partner's banner. Same guarantees as update_avatar."""
        return await self._replace_image(partner_id, upload, BANNER)

    async def delete_avatar(self, partner_id: str) -> None:
        """
        Clear the avatar, then best-effort delete the image.

        Raises:
            NoImageError: If no avatar is set
        """
        await self._remove_image(partner_id, AVATAR)

    async def delete_banner(self, partner_id: str) -> None:
        await self._remove_image(partner_id, BANNER)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    async def get_visiting_fee(self, partner_id: str) -> VisitingFee:
        row = await self._fetch(partner_id)
        return VisitingFee.model_validate(row.get("visiting_fee") or {})

    async def update_visiting_fee(self, partner_id: str, patch: VisitingFeeUpdate) -> VisitingFee:
        """
        Merge a partial update into the stored visiting fee.

        Returns:
            The full visiting fee after the update
        """
        current = await self.get_visiting_fee(partner_id)
        merged = current.model_copy(update=patch.model_dump(exclude_none=True))
        await self._update(partner_id, {"visiting_fee": merged.model_dump()})
        logger.info(f"Updated visiting fee for partner {partner_id}")
        return merged

    async def update_services(self, partner_id: str, services: list[Service]) -> list[Service]:
        """Replace the partner's list of services."""
        await self._update(
            partner_id,
            {"services": [service.model_dump(mode="json") for service in services]},
        )
        logger.info(f"Updated {len(services)} services for partner {partner_id}")
        return services

    async def update_location(self, partner_id: str, point: GeoPoint) -> GeoPoint:
        """Move the partner's searchable location."""
        await self._update(partner_id, {"longitude": point.longitude, "latitude": point.latitude})
        logger.info(f"Updated location for partner {partner_id}")
        return point

    async def deactivate(self, partner_id: str) -> None:
        """Hide the partner from every directory query."""
        await self._update(partner_id, {"is_active": False})
        logger.info(f"Deactivated partner {partner_id}")
