# =============================================================================
# core/services/asset_store.py - Remote Content Repository Operations
# =============================================================================
# Stores partner images in a GitHub repository through the Contents API.
#
# The repository guards every mutation with the object's current blob hash
# (optimistic concurrency): updates and deletes must present the hash from
# the last known descriptor, and a stale hash is rejected with 409.
# This store never guesses a hash; callers persist the descriptor returned
# by each successful write and use it for the next mutation.
# =============================================================================

import asyncio
import base64
import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import quote
from uuid import uuid4

import httpx

from core.models.asset import AssetDescriptor, ImageUpload
from app.exceptions import (
    AssetDeleteError,
    AssetNotFoundError,
    AssetUploadError,
    ConcurrencyConflictError,
)

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class CleanupOutcome:
    """
    Result of a best-effort delete.

    Cleanup never raises; callers get this value back and the failure is
    already logged.
    """
    storage_path: str
    ok: bool
    error: str | None = None


def _response_error(response: httpx.Response) -> str:
    """Extract GitHub's error message, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"{response.status_code} {body['message']}"
    return f"{response.status_code} {response.text[:200]}"


class AssetStore:
    """
    Upload, replace and delete images in the content repository.

    One instance is built at startup around a shared httpx.AsyncClient
    whose base_url and auth headers point at the GitHub API.

    Example:
        store = AssetStore(client, repository="acme/media", branch="main")
        descriptor = await store.upload(data, "shop.png", "partners/avatars")
        await store.delete(descriptor.storage_path, descriptor.content_hash)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        repository: str,
        branch: str = "main",
        max_concurrency: int = 4,
    ):
        self._client = client
        self.repository = repository
        self.branch = branch
        self.max_concurrency = max_concurrency

    # -------------------------------------------------------------------------
    # Paths and payloads
    # -------------------------------------------------------------------------

    @staticmethod
    def build_storage_path(original_name: str, folder: str) -> str:
        """
        Generate a unique storage path for a new object.

        Format: {folder}/{epoch_ms}_{random8}_{sanitized name}
        The random suffix keeps concurrent uploads of the same file in the
        same millisecond apart.
        """
        name = PurePosixPath(original_name.replace("\\", "/")).name
        name = _UNSAFE_NAME_CHARS.sub("_", name).strip("._") or "image"
        name = name[-_MAX_NAME_LENGTH:]
        timestamp = time.time_ns() // 1_000_000
        return f"{folder.strip('/')}/{timestamp}_{uuid4().hex[:8]}_{name}"

    def _contents_url(self, storage_path: str) -> str:
        return f"/repos/{self.repository}/contents/{quote(storage_path, safe='/')}"

    def _payload(self, message: str, **fields) -> dict:
        return {"message": message, "branch": self.branch, **fields}

    @staticmethod
    def _encode(content: bytes) -> str:
        return base64.b64encode(content).decode("ascii")

    @staticmethod
    def _descriptor(response: httpx.Response, storage_path: str) -> AssetDescriptor:
        """Build a descriptor from a Contents API write response."""
        try:
            content = response.json().get("content") or {}
            return AssetDescriptor(
                url=content["download_url"],
                storage_path=content.get("path") or storage_path,
                content_hash=content["sha"],
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise AssetUploadError(
                f"Unexpected repository response: {e}",
                details={"storage_path": storage_path},
            )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def upload(
        self,
        content: bytes,
        original_name: str,
        folder: str = "images",
    ) -> AssetDescriptor:
        """
        Upload a new object under a freshly generated path.

        Args:
            content: Raw bytes
            original_name: Client filename, used as the path suffix
            folder: Repository folder, e.g. "partners/avatars"

        Returns:
            Descriptor with the public URL and the object's hash

        Raises:
            AssetUploadError: If the repository rejects the write or is unreachable
        """
        storage_path = self.build_storage_path(original_name, folder)
        payload = self._payload(f"Upload image: {storage_path}", content=self._encode(content))

        try:
            response = await self._client.put(self._contents_url(storage_path), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Repository upload failed for {storage_path}: {e}")
            raise AssetUploadError(str(e), details={"storage_path": storage_path})

        if response.status_code not in (200, 201):
            error = _response_error(response)
            logger.error(f"Repository upload rejected for {storage_path}: {error}")
            raise AssetUploadError(error, details={"storage_path": storage_path})

        descriptor = self._descriptor(response, storage_path)
        logger.info(f"Uploaded image to repository: {descriptor.storage_path}")
        return descriptor

    async def upload_batch(
        self,
        uploads: Sequence[ImageUpload],
        folder: str = "images",
    ) -> list[AssetDescriptor]:
        """
        Upload several images concurrently.

        At most max_concurrency uploads are in flight at once. The result
        list lines up index-for-index with ``uploads`` regardless of the
        order in which uploads finish.

        If any upload fails the whole batch fails with one AssetUploadError.
        Siblings that already succeeded are NOT rolled back; their paths are
        logged and reported in the error details as orphaned.

        Raises:
            AssetUploadError: If one or more uploads failed
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _upload_one(index: int, upload: ImageUpload) -> AssetDescriptor:
            async with semaphore:
                return await self.upload(
                    upload.content,
                    upload.filename or f"image_{index}.jpg",
                    folder,
                )

        results = await asyncio.gather(
            *(_upload_one(index, upload) for index, upload in enumerate(uploads)),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, AssetUploadError):
                raise result

        failed = [index for index, result in enumerate(results) if isinstance(result, AssetUploadError)]
        if failed:
            orphaned = [result.storage_path for result in results if isinstance(result, AssetDescriptor)]
            if orphaned:
                logger.warning(f"Batch upload failed; leaving {len(orphaned)} uploaded images orphaned: {orphaned}")
            first_error = results[failed[0]]
            raise AssetUploadError(
                f"{len(failed)} of {len(uploads)} uploads failed ({first_error.details.get('error')})",
                details={"failed_indices": failed, "orphaned_paths": orphaned},
            )

        logger.info(f"Uploaded batch of {len(results)} images to {folder}")
        return list(results)

    async def update(
        self,
        storage_path: str,
        content: bytes,
        expected_hash: str,
    ) -> AssetDescriptor:
        """
        Overwrite an existing object in place.

        Args:
            storage_path: Path from the object's current descriptor
            content: New bytes
            expected_hash: content_hash from the current descriptor

        Returns:
            New descriptor; its content_hash is the one to use next time

        Raises:
            ConcurrencyConflictError: If expected_hash is stale
            AssetUploadError: For any other failure
        """
        if not expected_hash:
            raise ValueError("expected_hash is required to update an asset")

        payload = self._payload(
            f"Update image: {storage_path}",
            content=self._encode(content),
            sha=expected_hash,
        )

        try:
            response = await self._client.put(self._contents_url(storage_path), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Repository update failed for {storage_path}: {e}")
            raise AssetUploadError(str(e), details={"storage_path": storage_path})

        if response.status_code == 409:
            logger.warning(f"Stale hash on update of {storage_path}")
            raise ConcurrencyConflictError(storage_path, expected_hash)
        if response.status_code not in (200, 201):
            error = _response_error(response)
            logger.error(f"Repository update rejected for {storage_path}: {error}")
            raise AssetUploadError(error, details={"storage_path": storage_path})

        descriptor = self._descriptor(response, storage_path)
        logger.info(f"Updated image in repository: {storage_path}")
        return descriptor

    async def delete(self, storage_path: str, expected_hash: str) -> None:
        """
        Delete an object.

        Raises:
            ConcurrencyConflictError: If expected_hash is stale
            AssetNotFoundError: If nothing is stored at storage_path
            AssetDeleteError: For any other failure
        """
        if not expected_hash:
            raise ValueError("expected_hash is required to delete an asset")

        payload = self._payload(f"Delete image: {storage_path}", sha=expected_hash)

        try:
            response = await self._client.request(
                "DELETE", self._contents_url(storage_path), json=payload
            )
        except httpx.HTTPError as e:
            logger.error(f"Repository delete failed for {storage_path}: {e}")
            raise AssetDeleteError(storage_path, str(e))

        if response.status_code == 409:
            raise ConcurrencyConflictError(storage_path, expected_hash)
        if response.status_code == 404:
            raise AssetNotFoundError(storage_path)
        if response.status_code != 200:
            raise AssetDeleteError(storage_path, _response_error(response))

        logger.info(f"Deleted image from repository: {storage_path}")

    async def discard(self, descriptor: AssetDescriptor) -> CleanupOutcome:
        """
        Best-effort delete of a superseded or removed object.

        Failures are logged and returned, never raised, so the caller's
        primary operation still succeeds. A failed discard leaves an
        orphaned object in the repository.
        """
        try:
            await self.delete(descriptor.storage_path, descriptor.content_hash)
        except (AssetDeleteError, AssetNotFoundError, ConcurrencyConflictError) as e:
            logger.warning(f"Best-effort delete failed for {descriptor.storage_path}: {e.message}")
            return CleanupOutcome(descriptor.storage_path, ok=False, error=e.code)
        return CleanupOutcome(descriptor.storage_path, ok=True)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def ping(self) -> None:
        """
        Check that the repository is readable with the configured token.

        Raises:
            httpx.HTTPError: If the repository is unreachable or denies access
        """
        response = await self._client.get(f"/repos/{self.repository}")
        response.raise_for_status()
