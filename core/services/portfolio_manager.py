# =============================================================================
# core/services/portfolio_manager.py - Portfolio Image Lifecycle
# =============================================================================
# Owns the ordered collection of before/after photos inside a partner
# document. Each item is addressed by its id and has its own lifecycle:
#
#   add (batch)  -> validate, upload all, then append and persist
#   update       -> patch kind / caption / location in place
#   delete       -> remove and persist, then best-effort delete the image
# =============================================================================

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from core.models.asset import ImageUpload
from core.models.geo import parse_location
from core.models.portfolio import (
    MAX_CAPTION_LENGTH,
    Portfolio,
    PortfolioItem,
    PortfolioItemPatch,
    PortfolioKind,
)
from core.ports import PartnerStore
from core.services.asset_store import AssetStore
from core.services.asset_validator import AssetValidator
from app.exceptions import (
    CaptionTooLongError,
    InvalidPortfolioKindError,
    PartnerNotFoundError,
    PortfolioItemNotFoundError,
)

logger = logging.getLogger(__name__)

PORTFOLIO_FOLDER = "partners/portfolio"


def _at(values: Sequence[Any] | None, index: int) -> Any:
    """Value at index of a parallel input sequence, or None if it is short."""
    if not values or index >= len(values):
        return None
    return values[index]


class PortfolioManager:
    """
    Add, update and delete portfolio images for a partner.

    Example:
        items = await manager.add_batch(partner_id, uploads, kinds=["before", "after"])
        await manager.update_item(partner_id, items[0].id, PortfolioItemPatch(caption=""))
        await manager.delete_item(partner_id, items[1].id)
    """

    def __init__(self, store: PartnerStore, assets: AssetStore, validator: AssetValidator):
        self._store = store
        self._assets = assets
        self._validator = validator

    # -------------------------------------------------------------------------
    # Persistence helpers
    # -------------------------------------------------------------------------

    async def _load(self, owner_id: str) -> Portfolio:
        row = await self._store.fetch_partner(owner_id)
        if not row:
            raise PartnerNotFoundError(owner_id)
        return Portfolio.from_rows(row.get("portfolio_images"))

    async def _save(self, owner_id: str, portfolio: Portfolio) -> None:
        updated = await self._store.update_partner(
            owner_id, {"portfolio_images": portfolio.to_rows()}
        )
        if updated is None:
            raise PartnerNotFoundError(owner_id)

    @staticmethod
    def _resolve_kinds(kinds: Sequence[Any] | None, count: int) -> list[PortfolioKind]:
        """Missing or empty kinds default to 'before'; unknown values are rejected."""
        resolved = []
        for index in range(count):
            raw = _at(kinds, index)
            if isinstance(raw, PortfolioKind):
                resolved.append(raw)
            elif not raw:
                resolved.append(PortfolioKind.BEFORE)
            else:
                try:
                    resolved.append(PortfolioKind(raw.strip().lower()))
                except (ValueError, AttributeError):
                    raise InvalidPortfolioKindError(str(raw), index)
        return resolved

    @staticmethod
    def _resolve_captions(captions: Sequence[str | None] | None, count: int) -> list[str]:
        """Missing captions become ""; over-long ones are rejected."""
        resolved = []
        for index in range(count):
            caption = _at(captions, index) or ""
            if len(caption) > MAX_CAPTION_LENGTH:
                raise CaptionTooLongError(len(caption), MAX_CAPTION_LENGTH, index)
            resolved.append(caption)
        return resolved

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def list_items(self, owner_id: str) -> list[PortfolioItem]:
        """Return the partner's portfolio in display order."""
        return list(await self._load(owner_id))

    async def add_batch(
        self,
        owner_id: str,
        uploads: Sequence[ImageUpload],
        kinds: Sequence[Any] | None = None,
        captions: Sequence[str | None] | None = None,
        locations: Sequence[Any] | None = None,
    ) -> list[PortfolioItem]:
        """
        Upload images and append them to the portfolio.

        kinds, captions and locations are parallel to uploads and may be
        shorter. A missing kind defaults to 'before', a missing caption to
        "". A malformed location is dropped for that item only.

        Nothing is appended unless every upload succeeds.

        Args:
            owner_id: Partner id
            uploads: Images, in display order
            kinds: Per-image 'before'/'after'
            captions: Per-image captions
            locations: Per-image locations (GeoPoint, dict, list or JSON string)

        Returns:
            The new items, in the same order as uploads

        Raises:
            AssetValidationError: If the batch fails validation (no upload happens)
            InvalidPortfolioKindError: If a kind is not before/after (no upload happens)
            CaptionTooLongError: If a caption is over the length limit (no upload happens)
            PartnerNotFoundError: If the partner doesn't exist
            AssetUploadError: If any upload fails (portfolio unchanged)
        """
        self._validator.validate_batch(uploads)
        resolved_kinds = self._resolve_kinds(kinds, len(uploads))
        resolved_captions = self._resolve_captions(captions, len(uploads))
        portfolio = await self._load(owner_id)

        descriptors = await self._assets.upload_batch(uploads, PORTFOLIO_FOLDER)

        items = []
        for index, descriptor in enumerate(descriptors):
            raw_location = _at(locations, index)
            location = parse_location(raw_location)
            if raw_location not in (None, "") and location is None:
                logger.warning(f"Invalid location data for image {index}; storing it without a location")

            items.append(PortfolioItem(
                kind=resolved_kinds[index],
                descriptor=descriptor,
                caption=resolved_captions[index],
                location=location,
            ))

        portfolio.add(items)

        try:
            await self._save(owner_id, portfolio)
        except Exception:
            logger.error(f"Failed to persist {len(items)} portfolio images for {owner_id}; discarding uploads")
            await asyncio.gather(*(self._assets.discard(d) for d in descriptors))
            raise

        logger.info(f"Added {len(items)} portfolio images for partner {owner_id}")
        return items

    async def update_item(
        self,
        owner_id: str,
        item_id: str,
        patch: PortfolioItemPatch,
    ) -> PortfolioItem:
        """
        Apply a partial update to one item.

        An empty patch returns the item unchanged without writing.

        Raises:
            PartnerNotFoundError: If the partner doesn't exist
            PortfolioItemNotFoundError: If item_id isn't in the portfolio
        """
        portfolio = await self._load(owner_id)
        item = portfolio.get(item_id)
        if item is None:
            raise PortfolioItemNotFoundError(owner_id, item_id)

        changes = patch.changes()
        if not changes:
            return item

        updated = item.model_copy(update=changes)
        portfolio.replace(updated)
        await self._save(owner_id, portfolio)

        logger.info(f"Updated portfolio item {item_id} ({', '.join(sorted(changes))})")
        return updated

    async def delete_item(self, owner_id: str, item_id: str) -> PortfolioItem:
        """
        Remove one item, then best-effort delete its image.

        The collection change is persisted before the remote delete, the
        same order used when replacing an avatar or banner.

        Returns:
            The removed item

        Raises:
            PartnerNotFoundError: If the partner doesn't exist
            PortfolioItemNotFoundError: If item_id isn't in the portfolio
        """
        portfolio = await self._load(owner_id)
        if item_id not in portfolio:
            raise PortfolioItemNotFoundError(owner_id, item_id)

        removed = portfolio.remove(item_id)
        await self._save(owner_id, portfolio)
        await self._assets.discard(removed.descriptor)

        logger.info(f"Deleted portfolio item {item_id} for partner {owner_id}")
        return removed
