# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the PartnerHub API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import acreate_client

from app.config import settings
from app.dependencies import build_container
from app.exceptions import (
    PartnerHubException,
    partnerhub_exception_handler,
    validation_exception_handler,
)
from app.routers import directory, health, partner_media

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


def create_repository_client() -> httpx.AsyncClient:
    """HTTP client for the GitHub Contents API, authenticated with GITHUB_TOKEN."""
    return httpx.AsyncClient(
        base_url=settings.GITHUB_API_BASE,
        headers={
            "Authorization": f"Bearer {settings.GITHUB_TOKEN}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        },
        timeout=httpx.Timeout(settings.GITHUB_TIMEOUT_SECONDS),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: open the repository and database clients, build the services
    - Shutdown: close the repository client
    """
    # Startup
    logger.info(f"Starting PartnerHub API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Image repository: {settings.GITHUB_REPO}@{settings.GITHUB_BRANCH}")

    http_client = create_repository_client()
    supabase_client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
    app.state.container = build_container(settings, http_client, supabase_client)

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down PartnerHub API")
        await http_client.aclose()


# Create FastAPI application
app = FastAPI(
    title="PartnerHub API",
    description="""
## Service Partner Directory API

PartnerHub lets service partners (plumbers, electricians, cleaners, ...)
publish a profile with images and lets customers find them by location,
category or service name.

### Public endpoints

- **Categories** - list the service categories
- **Nearby** - partners within a radius, nearest first
- **Category / Search** - best-rated partners by category or service name
- **Profile** - a partner's public profile

### Partner endpoints (bearer token)

- **Avatar / Banner** - replace or delete profile images
- **Portfolio** - upload before/after photos in batches, edit, delete
- **Visiting fee / Services / Location** - profile configuration
- **Deactivate** - hide the profile from all searches

### Quick Start

```bash
# Find plumbers within 5 km
curl "http://localhost:8000/api/v1/partners/nearby?longitude=77.59&latitude=12.97&maxDistance=5000&category=plumbing"

# Upload portfolio photos
curl -X POST http://localhost:8000/api/v1/partners/me/portfolio \\
  -H "Authorization: Bearer $TOKEN" \\
  -F "portfolio=@before.jpg" -F "types=before" \\
  -F "portfolio=@after.jpg" -F "types=after"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Directory",
            "description": "Find partners by location, category or service",
        },
        {
            "name": "Partner",
            "description": "Manage the signed-in partner's images and settings",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(PartnerHubException)
async def handle_partnerhub_exception(request: Request, exc: PartnerHubException):
    """Handle custom PartnerHub exceptions."""
    return await partnerhub_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle malformed query, path, form and body input."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Partner-owned endpoints (mounted before the public /{partner_id} route)
app.include_router(
    partner_media.router,
    prefix="/api/v1/partners/me",
    tags=["Partner"]
)

# Public directory endpoints
app.include_router(
    directory.router,
    prefix="/api/v1/partners",
    tags=["Directory"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "PartnerHub API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
