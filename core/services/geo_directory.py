# =============================================================================
# core/services/geo_directory.py - Partner Directory Search
# =============================================================================
# Finds partners for customers:
# - find_nearby: proximity search with category / service name / rating filters
# - find_by_category: best-rated partners offering a category
# - search_by_service_name: best-rated partners with a matching service
#
# All queries only return active, verified partners. Distance ordering and
# the active/verified restriction are enforced by the store's spatial query;
# this service validates input and shapes the results.
# =============================================================================

import logging

from core.models.geo import GeoPoint
from core.models.partner import DirectoryFilter, PartnerSummary, ServiceCategory
from core.ports import PartnerStore
from app.exceptions import InvalidSearchError

logger = logging.getLogger(__name__)

MAX_RESULT_LIMIT = 100
# half the Earth's circumference; anything larger means "everywhere"
MAX_SEARCH_RADIUS_M = 20_037_508


class GeoDirectory:
    """
    Directory queries over the partner collection.

    Example:
        directory = GeoDirectory(store)
        partners = await directory.find_nearby(
            GeoPoint(longitude=77.59, latitude=12.97),
            max_distance_m=5000,
            directory_filter=DirectoryFilter(category="plumbing", min_rating=4),
        )
    """

    def __init__(
        self,
        store: PartnerStore,
        default_radius_m: float = 10000,
        default_limit: int = 20,
    ):
        self._store = store
        self.default_radius_m = default_radius_m
        self.default_limit = default_limit

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.default_limit
        if not 1 <= limit <= MAX_RESULT_LIMIT:
            raise InvalidSearchError(
                f"limit must be between 1 and {MAX_RESULT_LIMIT}",
                details={"limit": limit},
            )
        return limit

    async def find_nearby(
        self,
        point: GeoPoint,
        max_distance_m: float | None = None,
        directory_filter: DirectoryFilter | None = None,
    ) -> list[PartnerSummary]:
        """
        Find partners within max_distance_m of point, nearest first.

        Args:
            point: Search origin
            max_distance_m: Search radius in meters (default 10 km)
            directory_filter: Optional category / service name / rating filters

        Returns:
            Partner summaries ordered by increasing distance

        Raises:
            InvalidSearchError: If the radius is not positive
        """
        radius = self.default_radius_m if max_distance_m is None else max_distance_m
        if radius <= 0:
            raise InvalidSearchError(
                "maxDistance must be a positive number of meters",
                details={"max_distance_m": radius},
            )
        radius = min(radius, MAX_SEARCH_RADIUS_M)
        directory_filter = directory_filter or DirectoryFilter()

        rows = await self._store.nearby_partners(
            longitude=point.longitude,
            latitude=point.latitude,
            max_distance_m=radius,
            category=directory_filter.category.value if directory_filter.category else None,
            service_name=directory_filter.service_name,
            min_rating=directory_filter.min_rating,
        )

        partners = [PartnerSummary.from_row(row) for row in rows]
        logger.debug(
            f"Nearby search at ({point.longitude}, {point.latitude}) r={radius}m "
            f"returned {len(partners)} partners"
        )
        return partners

    async def find_by_category(
        self,
        category: ServiceCategory | str,
        limit: int | None = None,
    ) -> list[PartnerSummary]:
        """
        Best-rated partners offering a service in category.

        Ties in rating come back in store order (unspecified).

        Raises:
            InvalidSearchError: If category is unknown or limit is out of range
        """
        try:
            category = ServiceCategory(category)
        except ValueError:
            raise InvalidSearchError(
                f"Unknown service category: {category}",
                details={"allowed": [c.value for c in ServiceCategory]},
            )
        rows = await self._store.partners_by_category(category.value, self._resolve_limit(limit))
        return [PartnerSummary.from_row(row) for row in rows]

    async def search_by_service_name(
        self,
        substring: str,
        limit: int | None = None,
    ) -> list[PartnerSummary]:
        """
        Best-rated partners with a service whose name contains substring
        (case-insensitive).

        Raises:
            InvalidSearchError: If substring is blank or limit is out of range
        """
        query = (substring or "").strip()
        if not query:
            raise InvalidSearchError("Search query is required")
        rows = await self._store.search_partners(query, self._resolve_limit(limit))
        return [PartnerSummary.from_row(row) for row in rows]
