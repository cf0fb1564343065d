# =============================================================================
# lib/supabase_client.py - Supabase Partner Store
# =============================================================================
# This module implements the PartnerStore port on top of Supabase
# (Postgres + PostGIS behind PostgREST), using the async client.
#
# Reads go through the `partner_profiles` view and the directory RPC
# functions defined in supabase/migrations/. Neither exposes the password
# column, so credentials never leave the database on these paths.
#
# Usage:
#   client = await acreate_client(url, key)
#   store = SupabasePartnerStore(client)
#   row = await store.fetch_partner(partner_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from postgrest.types import CountMethod, ReturnMethod
from supabase import AsyncClient

from app.exceptions import PersistenceError

# Set up logging for this module
logger = logging.getLogger(__name__)

PARTNERS_TABLE = "partners"
PROFILE_VIEW = "partner_profiles"

# Columns of the public profile view; keep in sync with the migration
PROFILE_COLUMNS = (
    "id, name, business_name, description, services, visiting_fee, "
    "longitude, latitude, avatar, banner_image, portfolio_images, "
    "rating, total_reviews, is_verified, is_active"
)

# Columns partners may change through this store
WRITABLE_COLUMNS = frozenset({
    "avatar",
    "banner_image",
    "portfolio_images",
    "services",
    "visiting_fee",
    "location",
    "is_active",
})


def _normalize_uuid(value: str | UUID) -> str | None:
    """
    Canonical string form of a partner id, or None if it isn't a UUID.

    partners.id is a uuid column; PostgREST rejects any other filter value
    with a 400 (22P02), so such ids are treated as unknown partners.
    """
    if isinstance(value, UUID):
        return str(value)
    try:
        return str(UUID(str(value)))
    except ValueError:
        return None


class SupabasePartnerStore:
    """
    Partner documents in Supabase.

    One instance wraps one AsyncClient, created at application startup and
    shared by all requests.

    Example:
        rows = await store.nearby_partners(
            longitude=77.59, latitude=12.97, max_distance_m=5000,
            category="plumbing",
        )
    """

    def __init__(self, client: AsyncClient):
        self._client = client

    # -------------------------------------------------------------------------
    # Partner documents
    # -------------------------------------------------------------------------

    async def fetch_partner(self, partner_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch one partner's profile row.

        Returns:
            Row dict (no credential columns), or None if not found

        Raises:
            PersistenceError: If the query fails
        """
        partner_id_str = _normalize_uuid(partner_id)
        if partner_id_str is None:
            logger.debug(f"Partner id {partner_id!r} is not a UUID; treating as not found")
            return None

        try:
            response = await (
                self._client.table(PROFILE_VIEW)
                .select(PROFILE_COLUMNS)
                .eq("id", partner_id_str)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to fetch partner {partner_id_str}: {e}")
            raise PersistenceError("fetch partner", str(e), details={"partner_id": partner_id_str})

        rows = response.data or []
        return rows[0] if rows else None

    async def update_partner(
        self,
        partner_id: str | UUID,
        changes: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Apply a partial update to a partner document.

        Coordinates are given as flat longitude/latitude keys (the same
        shape reads use) and written to the geography column.

        Returns:
            The updated profile row, or None if the partner doesn't exist

        Raises:
            PersistenceError: If the update fails
        """
        partner_id_str = _normalize_uuid(partner_id)
        data = dict(changes)

        longitude = data.pop("longitude", None)
        latitude = data.pop("latitude", None)
        if longitude is not None and latitude is not None:
            data["location"] = f"SRID=4326;POINT({longitude} {latitude})"

        unknown = set(data) - WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not writable through the partner store: {sorted(unknown)}")

        if partner_id_str is None:
            return None

        try:
            response = await (
                self._client.table(PARTNERS_TABLE)
                .update(data, returning=ReturnMethod.minimal, count=CountMethod.exact)
                .eq("id", partner_id_str)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update partner {partner_id_str}: {e}")
            raise PersistenceError("update partner", str(e), details={"partner_id": partner_id_str})

        if not response.count:
            return None

        logger.debug(f"Updated partner {partner_id_str}: {sorted(data)}")
        return await self.fetch_partner(partner_id_str)

    # -------------------------------------------------------------------------
    # Directory queries
    # -------------------------------------------------------------------------

    async def _rpc(self, function: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            response = await self._client.rpc(function, params).execute()
        except Exception as e:
            logger.error(f"Directory query {function} failed: {e}")
            raise PersistenceError(f"run {function}", str(e))
        return response.data or []

    async def nearby_partners(
        self,
        *,
        longitude: float,
        latitude: float,
        max_distance_m: float,
        category: str | None = None,
        service_name: str | None = None,
        min_rating: float | None = None,
    ) -> list[dict[str, Any]]:
        """
        Active, verified partners within max_distance_m, nearest first.

        Backed by the partners_nearby function, which uses the GiST index
        on partners.location.
        """
        return await self._rpc("partners_nearby", {
            "lon": longitude,
            "lat": latitude,
            "max_distance_m": max_distance_m,
            "category": category,
            "service_name": service_name,
            "min_rating": min_rating,
        })

    async def partners_by_category(self, category: str, limit: int) -> list[dict[str, Any]]:
        """Active, verified partners offering category, best rated first."""
        return await self._rpc("partners_by_category", {"category": category, "max_results": limit})

    async def search_partners(self, service_name: str, limit: int) -> list[dict[str, Any]]:
        """Active, verified partners with a service name containing service_name."""
        return await self._rpc("partners_search_service", {"service_name": service_name, "max_results": limit})

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def ping(self) -> None:
        """Run a trivial query against the profile view; raises on failure."""
        await self._client.table(PROFILE_VIEW).select("id").limit(1).execute()
