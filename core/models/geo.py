# =============================================================================
# core/models/geo.py - Geographic Point Schema
# =============================================================================
# GeoPoint is the only coordinate type in the system. It is validated at
# every write boundary (partner location, portfolio item location) and is
# always (longitude, latitude) ordered, matching GeoJSON.
#
# Accepted input shapes:
#   {"longitude": 77.59, "latitude": 12.97}
#   {"type": "Point", "coordinates": [77.59, 12.97]}
#   [77.59, 12.97]
# =============================================================================

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


class GeoPoint(BaseModel):
    """
    A longitude/latitude pair.

    Example:
        GeoPoint(longitude=77.5946, latitude=12.9716)
        GeoPoint.model_validate({"type": "Point", "coordinates": [77.5946, 12.9716]})
    """

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")

    @model_validator(mode="before")
    @classmethod
    def _coerce_shapes(cls, data: Any) -> Any:
        """Normalize GeoJSON points and bare coordinate pairs."""
        if isinstance(data, dict) and "coordinates" in data:
            if data.get("type", "Point") != "Point":
                raise ValueError("only Point geometries are supported")
            data = data["coordinates"]

        if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            if len(data) != 2:
                raise ValueError("exactly two coordinates are required: [longitude, latitude]")
            for value in data:
                # bool is an int subclass; "true" is not a coordinate
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError("coordinates must be numbers")
            return {"longitude": data[0], "latitude": data[1]}

        return data

    @property
    def coordinates(self) -> list[float]:
        """GeoJSON coordinate order."""
        return [self.longitude, self.latitude]

    def to_geojson(self) -> dict[str, Any]:
        return {"type": "Point", "coordinates": self.coordinates}

    def to_ewkt(self) -> str:
        """PostGIS text input for geography(Point, 4326) columns."""
        return f"SRID=4326;POINT({self.longitude} {self.latitude})"


def parse_location(raw: Any) -> GeoPoint | None:
    """
    Leniently parse a location for batch contexts.

    Returns None for absent, unparseable or out-of-range input instead of
    raising, so one bad location only affects its own item.

    Args:
        raw: A GeoPoint, a dict/list in any accepted shape, or a JSON string

    Returns:
        The parsed GeoPoint, or None
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, GeoPoint):
        return raw

    data = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.debug(f"Dropping unparseable location {raw!r:.80}: {e}")
            return None

    try:
        return GeoPoint.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Dropping malformed location {raw!r:.80}: {e.error_count()} error(s)")
        return None
