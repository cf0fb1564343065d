# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
#
# Services are built once per application (in the lifespan handler) and
# stored on app.state. Route handlers receive them through Depends(), so
# tests can swap the whole container with app.dependency_overrides.
# =============================================================================

from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request
from supabase import AsyncClient

from app.config import Settings
from core.ports import PartnerStore
from core.services import (
    AssetStore,
    AssetValidator,
    GeoDirectory,
    PartnerProfileService,
    PortfolioManager,
)
from lib.supabase_client import SupabasePartnerStore


@dataclass(frozen=True)
class ServiceContainer:
    """All services used by the routers, wired to one set of clients."""
    settings: Settings
    store: PartnerStore
    assets: AssetStore
    validator: AssetValidator
    portfolio: PortfolioManager
    directory: GeoDirectory
    profile: PartnerProfileService


def build_services(
    settings: Settings,
    store: PartnerStore,
    http_client: httpx.AsyncClient,
) -> ServiceContainer:
    """
    Wire the services around a partner store and a content repository client.

    Args:
        settings: Application settings (limits, repository, defaults)
        store: Partner persistence
        http_client: Client whose base_url and auth point at the content API

    Returns:
        ServiceContainer ready to be stored on app.state
    """
    assets = AssetStore(
        http_client,
        repository=settings.GITHUB_REPO,
        branch=settings.GITHUB_BRANCH,
        max_concurrency=settings.UPLOAD_CONCURRENCY,
    )
    validator = AssetValidator(
        max_size_bytes=settings.max_image_size_bytes,
        max_batch=settings.MAX_BATCH_IMAGES,
    )
    return ServiceContainer(
        settings=settings,
        store=store,
        assets=assets,
        validator=validator,
        portfolio=PortfolioManager(store, assets, validator),
        directory=GeoDirectory(
            store,
            default_radius_m=settings.DEFAULT_SEARCH_RADIUS_M,
            default_limit=settings.DEFAULT_RESULT_LIMIT,
        ),
        profile=PartnerProfileService(store, assets, validator),
    )


def build_container(
    settings: Settings,
    http_client: httpx.AsyncClient,
    supabase_client: AsyncClient,
) -> ServiceContainer:
    """Production wiring: Supabase persistence plus the content API client."""
    return build_services(settings, SupabasePartnerStore(supabase_client), http_client)


def get_container(request: Request) -> ServiceContainer:
    """
    Get the service container for this application.

    Built by the lifespan handler in app/main.py.
    """
    return request.app.state.container


# Type alias for dependency injection
ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
