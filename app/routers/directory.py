# =============================================================================
# app/routers/directory.py - Public Partner Directory Endpoints
# =============================================================================
# Read-only endpoints customers use to find partners:
# - categories, nearby search, category listing, service-name search
# - a single partner's public profile
#
# None of these require authentication.
# =============================================================================

from fastapi import APIRouter, Path, Query
from pydantic import ValidationError

from app.dependencies import ContainerDep
from app.exceptions import InvalidLocationError, InvalidSearchError
from app.routers.responses import envelope, listing
from core.models import DirectoryFilter, GeoPoint

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/categories")
async def get_service_categories(container: ContainerDep):
    """List every service category a partner can offer."""
    return envelope(data=container.profile.service_categories())


@router.get("/nearby")
async def get_nearby_partners(
    container: ContainerDep,
    longitude: float | None = Query(default=None, description="Search origin longitude"),
    latitude: float | None = Query(default=None, description="Search origin latitude"),
    max_distance: float | None = Query(default=None, alias="maxDistance", description="Radius in meters"),
    category: str | None = Query(default=None),
    service_name: str | None = Query(default=None, alias="serviceName"),
    min_rating: float | None = Query(default=None, alias="minRating"),
):
    """
    Find active, verified partners near a point, nearest first.

    Filters are optional and combined with AND:
    - **category**: partner offers a service in this category
    - **serviceName**: a service name contains this text (case-insensitive)
    - **minRating**: rating is at least this value
    """
    if longitude is None or latitude is None:
        raise InvalidSearchError("Longitude and latitude are required")

    try:
        point = GeoPoint(longitude=longitude, latitude=latitude)
    except ValidationError as e:
        raise InvalidLocationError([longitude, latitude], e.errors()[0]["msg"])

    try:
        directory_filter = DirectoryFilter(
            category=category or None,
            service_name=service_name or None,
            min_rating=min_rating,
        )
    except ValidationError as e:
        raise InvalidSearchError(
            "Invalid search filters",
            details={"errors": [error["msg"] for error in e.errors()]},
        )

    partners = await container.directory.find_nearby(point, max_distance, directory_filter)
    return listing(partners)


@router.get("/category/{category}")
async def get_partners_by_category(
    container: ContainerDep,
    category: str = Path(..., description="Service category"),
    limit: int | None = Query(default=None, description="Maximum results (1-100)"),
):
    """Best-rated partners offering a service in a category."""
    partners = await container.directory.find_by_category(category, limit)
    return listing(partners)


@router.get("/search")
async def search_partners(
    container: ContainerDep,
    q: str | None = Query(default=None, description="Service name to search for"),
    limit: int | None = Query(default=None, description="Maximum results (1-100)"),
):
    """Best-rated partners with a service whose name contains q."""
    partners = await container.directory.search_by_service_name(q or "", limit)
    return listing(partners)


@router.get("/{partner_id}")
async def get_partner_details(
    container: ContainerDep,
    partner_id: str = Path(..., description="Partner ID"),
):
    """Get a partner's public profile."""
    partner = await container.profile.get_details(partner_id)
    return envelope(data=partner)
