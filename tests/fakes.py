# =============================================================================
# tests/fakes.py - In-Memory Collaborators
# =============================================================================
# Test doubles for the two external systems:
# - InMemoryPartnerStore: PartnerStore protocol over a dict, with haversine
#   distance standing in for the spatial index
# - FakeContentRepository: GitHub Contents API handler for httpx.MockTransport,
#   tracking a content hash per path
# =============================================================================

import asyncio
import copy
import hashlib
import itertools
import json
import math
from typing import Any
from uuid import uuid4

import httpx

from app.exceptions import PersistenceError

EARTH_RADIUS_M = 6_371_008.8

# PNG signature plus padding; content is never decoded
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

# Columns that never leave the store
HIDDEN_COLUMNS = ("password_hash",)


def haversine_m(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Great-circle distance in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


# =============================================================================
# Partner Store
# =============================================================================

class InMemoryPartnerStore:
    """PartnerStore backed by a dict of partner documents."""

    def __init__(self):
        self.partners: dict[str, dict[str, Any]] = {}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_updates = False

    def add_partner(self, **fields) -> str:
        """Insert a partner document with sensible defaults; returns its id."""
        partner_id = fields.pop("id", None) or str(uuid4())
        document = {
            "id": partner_id,
            "name": "Test Partner",
            "business_name": "Test Services",
            "description": None,
            "password_hash": "$2b$10$not-a-real-hash",
            "services": [{"name": "General repair", "category": "home_repair", "is_active": True}],
            "visiting_fee": {"amount": 0, "currency": "INR", "description": "Home visit fee", "is_active": True},
            "longitude": 77.5946,
            "latitude": 12.9716,
            "avatar": None,
            "banner_image": None,
            "portfolio_images": [],
            "rating": 0.0,
            "total_reviews": 0,
            "is_verified": True,
            "is_active": True,
        }
        document.update(fields)
        self.partners[partner_id] = document
        return partner_id

    def _project(self, document: dict[str, Any]) -> dict[str, Any]:
        return {key: copy.deepcopy(value) for key, value in document.items() if key not in HIDDEN_COLUMNS}

    def _summary(self, document: dict[str, Any], distance_m: float | None = None) -> dict[str, Any]:
        avatar = document.get("avatar") or {}
        return {
            "id": document["id"],
            "name": document["name"],
            "business_name": document["business_name"],
            "longitude": document["longitude"],
            "latitude": document["latitude"],
            "rating": document["rating"],
            "total_reviews": document["total_reviews"],
            "services": copy.deepcopy(document["services"]),
            "avatar_url": avatar.get("url"),
            "visiting_fee": copy.deepcopy(document["visiting_fee"]),
            "distance_m": distance_m,
        }

    def _discoverable(self) -> list[dict[str, Any]]:
        return [d for d in self.partners.values() if d["is_active"] and d["is_verified"]]

    @staticmethod
    def _offers_category(document: dict[str, Any], category: str) -> bool:
        return any(service.get("category") == category for service in document["services"])

    @staticmethod
    def _offers_service_named(document: dict[str, Any], name: str) -> bool:
        needle = name.lower()
        return any(needle in (service.get("name") or "").lower() for service in document["services"])

    # -------------------------------------------------------------------------
    # PartnerStore protocol
    # -------------------------------------------------------------------------

    async def fetch_partner(self, partner_id: str) -> dict[str, Any] | None:
        document = self.partners.get(str(partner_id))
        return self._project(document) if document else None

    async def update_partner(self, partner_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        if self.fail_updates:
            raise PersistenceError("update partner", "simulated outage")
        document = self.partners.get(str(partner_id))
        if document is None:
            return None
        self.updates.append((str(partner_id), copy.deepcopy(changes)))
        document.update(copy.deepcopy(changes))
        return self._project(document)

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
        matches = []
        for document in self._discoverable():
            distance = haversine_m(longitude, latitude, document["longitude"], document["latitude"])
            if distance > max_distance_m:
                continue
            if category is not None and not self._offers_category(document, category):
                continue
            if service_name is not None and not self._offers_service_named(document, service_name):
                continue
            if min_rating is not None and document["rating"] < min_rating:
                continue
            matches.append((distance, document))
        matches.sort(key=lambda match: match[0])
        return [self._summary(document, distance) for distance, document in matches]

    async def partners_by_category(self, category: str, limit: int) -> list[dict[str, Any]]:
        matches = [d for d in self._discoverable() if self._offers_category(d, category)]
        matches.sort(key=lambda d: d["rating"], reverse=True)
        return [self._summary(d) for d in matches[:limit]]

    async def search_partners(self, service_name: str, limit: int) -> list[dict[str, Any]]:
        matches = [d for d in self._discoverable() if self._offers_service_named(d, service_name)]
        matches.sort(key=lambda d: d["rating"], reverse=True)
        return [self._summary(d) for d in matches[:limit]]

    async def ping(self) -> None:
        return None


# =============================================================================
# Content Repository
# =============================================================================

class FakeContentRepository:
    """
    GitHub Contents API stand-in, used as an httpx.MockTransport handler.

    Files are kept as {path: {"sha": ..., "content": ...}}. Writes to an
    existing path and deletes must present the current sha, as GitHub
    requires.
    """

    def __init__(self, repository: str = "acme/media", branch: str = "main"):
        self.repository = repository
        self.branch = branch
        self.files: dict[str, dict[str, str]] = {}
        self.requests: list[tuple[str, str]] = []
        # filenames (path suffixes) whose upload answers 500
        self.fail_uploads: set[str] = set()
        self.fail_deletes = False
        self.in_flight = 0
        self.max_in_flight = 0
        self._counter = itertools.count(1)

    @property
    def contents_prefix(self) -> str:
        return f"/repos/{self.repository}/contents/"

    def seed(self, path: str, content: str = "c2VlZA==") -> dict[str, str]:
        """Put a file in place; returns its descriptor fields."""
        sha = self._sha(path, content)
        self.files[path] = {"sha": sha, "content": content}
        return {"url": self._download_url(path), "storage_path": path, "content_hash": sha}

    def _sha(self, path: str, content: str) -> str:
        seed = f"{path}:{content}:{next(self._counter)}".encode()
        return hashlib.sha1(seed).hexdigest()

    def _download_url(self, path: str) -> str:
        return f"https://raw.githubusercontent.com/{self.repository}/{self.branch}/{path}"

    def _writes(self, method: str) -> list[str]:
        return [path for m, path in self.requests if m == method]

    @property
    def put_paths(self) -> list[str]:
        return self._writes("PUT")

    @property
    def delete_paths(self) -> list[str]:
        return self._writes("DELETE")

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == f"/repos/{self.repository}" and request.method == "GET":
            return httpx.Response(200, json={"full_name": self.repository})
        if not path.startswith(self.contents_prefix):
            return httpx.Response(404, json={"message": "Not Found"})

        storage_path = path[len(self.contents_prefix):]
        self.requests.append((request.method, storage_path))
        payload = json.loads(request.content or b"{}")

        if request.method == "PUT":
            return await self._put(storage_path, payload)
        if request.method == "DELETE":
            return self._delete(storage_path, payload)
        return httpx.Response(405, json={"message": "Method Not Allowed"})

    async def _put(self, storage_path: str, payload: dict[str, Any]) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # let sibling uploads start so concurrency is observable
            await asyncio.sleep(0.001)

            if any(storage_path.endswith(name) for name in self.fail_uploads):
                return httpx.Response(500, json={"message": "Server Error"})

            current = self.files.get(storage_path)
            sha = payload.get("sha")
            if current is not None and sha is None:
                return httpx.Response(422, json={"message": "\"sha\" wasn't supplied."})
            if current is None and sha is not None:
                return httpx.Response(404, json={"message": "Not Found"})
            if current is not None and current["sha"] != sha:
                return httpx.Response(409, json={"message": f"{storage_path} does not match {sha}"})

            new_sha = self._sha(storage_path, payload["content"])
            self.files[storage_path] = {"sha": new_sha, "content": payload["content"]}
            return httpx.Response(
                201 if current is None else 200,
                json={
                    "content": {
                        "path": storage_path,
                        "sha": new_sha,
                        "download_url": self._download_url(storage_path),
                    },
                    "commit": {"message": payload.get("message")},
                },
            )
        finally:
            self.in_flight -= 1

    def _delete(self, storage_path: str, payload: dict[str, Any]) -> httpx.Response:
        if self.fail_deletes:
            return httpx.Response(503, json={"message": "Service Unavailable"})
        current = self.files.get(storage_path)
        if current is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if current["sha"] != payload.get("sha"):
            return httpx.Response(409, json={"message": f"{storage_path} does not match"})
        del self.files[storage_path]
        return httpx.Response(200, json={"content": None, "commit": {"message": payload.get("message")}})
