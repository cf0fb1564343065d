# =============================================================================
# app/routers/partner_media.py - Partner-Owned Profile Endpoints
# =============================================================================
# Endpoints a signed-in partner uses to manage their own profile:
# - avatar and banner (replace / delete)
# - portfolio images (list / add batch / update / delete)
# - visiting fee, services, location, deactivation
#
# All endpoints require a partner bearer token and act on that partner.
# Images arrive as multipart/form-data and are held in memory.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Body, Depends, File, Form, Path, UploadFile
from pydantic import BaseModel, Field

from app.auth import AuthPartner, get_current_partner
from app.dependencies import ContainerDep
from app.exceptions import MissingImageError
from app.routers.responses import envelope, listing
from core.models import GeoPoint, ImageUpload, PortfolioItemPatch, Service, VisitingFeeUpdate

router = APIRouter()

CurrentPartner = Annotated[AuthPartner, Depends(get_current_partner)]


# =============================================================================
# Request Models
# =============================================================================

class ServicesUpdateRequest(BaseModel):
    """Replacement list of services."""
    services: list[Service] = Field(..., description="Every service the partner offers")

    model_config = {
        "json_schema_extra": {
            "example": {
                "services": [
                    {"name": "Leak repair", "category": "plumbing", "price": 499, "duration": 60},
                ]
            }
        }
    }


# =============================================================================
# Helper Functions
# =============================================================================

async def _to_upload(file: UploadFile) -> ImageUpload:
    """Read a multipart file into memory."""
    content = await file.read()
    return ImageUpload(
        filename=file.filename or "image",
        content_type=file.content_type or "",
        content=content,
    )


# =============================================================================
# Avatar and Banner
# =============================================================================

@router.put("/avatar")
async def update_avatar(
    partner: CurrentPartner,
    container: ContainerDep,
    avatar: UploadFile | None = File(default=None, description="JPEG, PNG or WebP, max 5 MB"),
):
    """Replace the avatar. The previous image is deleted once the new one is saved."""
    if avatar is None:
        raise MissingImageError("Avatar")
    descriptor = await container.profile.update_avatar(partner.id, await _to_upload(avatar))
    return envelope(data={"avatar": descriptor}, message="Avatar updated successfully")


@router.delete("/avatar")
async def delete_avatar(partner: CurrentPartner, container: ContainerDep):
    await container.profile.delete_avatar(partner.id)
    return envelope(message="Avatar deleted successfully")


@router.put("/banner")
async def update_banner(
    partner: CurrentPartner,
    container: ContainerDep,
    banner: UploadFile | None = File(default=None, description="JPEG, PNG or WebP, max 5 MB"),
):
    """Replace the banner. The previous image is deleted once the new one is saved."""
    if banner is None:
        raise MissingImageError("Banner")
    descriptor = await container.profile.update_banner(partner.id, await _to_upload(banner))
    return envelope(data={"banner_image": descriptor}, message="Banner updated successfully")


@router.delete("/banner")
async def delete_banner(partner: CurrentPartner, container: ContainerDep):
    await container.profile.delete_banner(partner.id)
    return envelope(message="Banner deleted successfully")


# =============================================================================
# Portfolio
# =============================================================================

@router.get("/portfolio")
async def list_portfolio(partner: CurrentPartner, container: ContainerDep):
    """List portfolio images in display order."""
    items = await container.portfolio.list_items(partner.id)
    return listing(items)


@router.post("/portfolio")
async def add_portfolio_images(
    partner: CurrentPartner,
    container: ContainerDep,
    portfolio: list[UploadFile] | None = File(default=None, description="Up to 10 images"),
    types: list[str] | None = Form(default=None, description="Per image: before or after"),
    captions: list[str] | None = Form(default=None, description="Per image caption"),
    locs: list[str] | None = Form(default=None, description="Per image GeoJSON Point as JSON text"),
):
    """
    Upload a batch of portfolio images.

    types, captions and locs are matched to images by position and may be
    shorter than the image list. Nothing is added unless every image
    uploads successfully.
    """
    uploads = [await _to_upload(file) for file in portfolio or []]
    items = await container.portfolio.add_batch(
        partner.id,
        uploads,
        kinds=types,
        captions=captions,
        locations=locs,
    )
    return envelope(data=items, count=len(items), message="Portfolio images added successfully")


@router.put("/portfolio/{item_id}")
async def update_portfolio_image(
    partner: CurrentPartner,
    container: ContainerDep,
    patch: PortfolioItemPatch,
    item_id: str = Path(..., description="Portfolio item ID"),
):
    """Update kind, caption or location of one portfolio image."""
    item = await container.portfolio.update_item(partner.id, item_id, patch)
    return envelope(data=item, message="Portfolio image updated successfully")


@router.delete("/portfolio/{item_id}")
async def delete_portfolio_image(
    partner: CurrentPartner,
    container: ContainerDep,
    item_id: str = Path(..., description="Portfolio item ID"),
):
    await container.portfolio.delete_item(partner.id, item_id)
    return envelope(message="Portfolio image deleted successfully")


# =============================================================================
# Configuration
# =============================================================================

@router.get("/visiting-fee")
async def get_visiting_fee(partner: CurrentPartner, container: ContainerDep):
    fee = await container.profile.get_visiting_fee(partner.id)
    return envelope(data=fee)


@router.put("/visiting-fee")
async def update_visiting_fee(
    partner: CurrentPartner,
    container: ContainerDep,
    patch: VisitingFeeUpdate,
):
    """Merge the given fields into the stored visiting fee."""
    fee = await container.profile.update_visiting_fee(partner.id, patch)
    return envelope(data=fee, message="Visiting fee updated successfully")


@router.put("/services")
async def update_services(
    partner: CurrentPartner,
    container: ContainerDep,
    request: ServicesUpdateRequest,
):
    services = await container.profile.update_services(partner.id, request.services)
    return envelope(data=services, message="Services updated successfully")


@router.put("/location")
async def update_location(
    partner: CurrentPartner,
    container: ContainerDep,
    location: GeoPoint = Body(..., embed=True),
):
    """
    Move the partner's searchable location.

    Accepts {"location": {"type": "Point", "coordinates": [lon, lat]}} or
    {"location": {"longitude": lon, "latitude": lat}}.
    """
    point = await container.profile.update_location(partner.id, location)
    return envelope(data={"location": point.to_geojson()}, message="Location updated successfully")


@router.put("/deactivate")
async def deactivate_account(partner: CurrentPartner, container: ContainerDep):
    """Hide the partner from all directory searches."""
    await container.profile.deactivate(partner.id)
    return envelope(message="Account deactivated successfully")
