"""
Collaborator interfaces used by the core services.

Kept small and framework-agnostic so tests can supply simple fakes.
lib.supabase_client.SupabasePartnerStore is the production implementation.
"""
from __future__ import annotations

from typing import Any, Protocol


class PartnerStore(Protocol):
    """Partner document collection with a spatial index on location.

    Every row returned is a projection without credential columns.
    Rows carry coordinates as flat ``longitude``/``latitude`` values.
    """

    async def fetch_partner(self, partner_id: str) -> dict[str, Any] | None: ...

    async def update_partner(self, partner_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Apply ``changes`` and return the updated row, or None if absent."""
        ...

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
        """Active, verified partners within range, nearest first."""
        ...

    async def partners_by_category(self, category: str, limit: int) -> list[dict[str, Any]]:
        """Active, verified partners offering ``category``, best rated first."""
        ...

    async def search_partners(self, service_name: str, limit: int) -> list[dict[str, Any]]:
        """Active, verified partners with a matching service name, best rated first."""
        ...

    async def ping(self) -> None:
        """Raise if the store can't be queried."""
        ...


__all__ = ["PartnerStore"]
