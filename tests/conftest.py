# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Wires the real services to in-memory collaborators (tests/fakes.py)
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("GITHUB_TOKEN", "test-github-token")
os.environ.setdefault("GITHUB_REPO", "acme/media")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-partner-tokens")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import httpx
import pytest

from core.models import ImageUpload
from core.services import AssetStore, AssetValidator
from tests.fakes import PNG_BYTES, FakeContentRepository, InMemoryPartnerStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def repository():
    """Fake GitHub Contents API."""
    return FakeContentRepository(repository="acme/media", branch="main")


@pytest.fixture
async def http_client(repository):
    """httpx client whose requests are answered by the fake repository."""
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(repository),
        base_url="https://api.github.test",
    )
    yield client
    await client.aclose()


@pytest.fixture
def asset_store(http_client):
    return AssetStore(http_client, repository="acme/media", branch="main", max_concurrency=4)


@pytest.fixture
def validator():
    return AssetValidator(max_size_bytes=5 * 1024 * 1024, max_batch=10)


@pytest.fixture
def partner_store():
    return InMemoryPartnerStore()


@pytest.fixture
def make_upload():
    """Factory for in-memory image uploads."""

    def _make(
        filename: str = "photo.png",
        content_type: str = "image/png",
        content: bytes = PNG_BYTES,
    ) -> ImageUpload:
        return ImageUpload(filename=filename, content_type=content_type, content=content)

    return _make
