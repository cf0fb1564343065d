# =============================================================================
# core/models/portfolio.py - Portfolio Schemas
# =============================================================================
# A partner's portfolio is an ordered collection of before/after photos.
# Items are addressed by id, never by position, so concurrent edits stay
# stable when other items are removed.
#
# - PortfolioKind: before/after marker
# - PortfolioItem: one stored photo with caption and optional location
# - PortfolioItemPatch: partial update (absent vs. provided fields)
# - Portfolio: insertion-ordered map of items keyed by id
# =============================================================================

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, Field

from .asset import AssetDescriptor
from .geo import GeoPoint


class PortfolioKind(str, Enum):
    """Whether a portfolio photo shows the job before or after the work."""
    BEFORE = "before"
    AFTER = "after"


MAX_CAPTION_LENGTH = 500


def _new_item_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PortfolioItem(BaseModel):
    """
    One portfolio photo.

    Only kind, caption and location change after creation; the descriptor
    is fixed for the item's lifetime and deleted with it.
    """

    id: str = Field(default_factory=_new_item_id, description="Stable item id")
    kind: PortfolioKind = Field(default=PortfolioKind.BEFORE)
    descriptor: AssetDescriptor
    caption: str = Field(default="", max_length=MAX_CAPTION_LENGTH)
    location: GeoPoint | None = None
    uploaded_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PortfolioItem:
        """Build an item from its stored JSON form."""
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        """JSON-safe form stored inside the partner document."""
        return self.model_dump(mode="json", exclude_none=True)


class PortfolioItemPatch(BaseModel):
    """
    Partial update for a portfolio item.

    Only fields present in the request are applied; an explicit empty
    caption clears it. A malformed location fails validation here, before
    anything is read or written.

    Example:
        {"caption": ""}
        {"kind": "after", "location": {"type": "Point", "coordinates": [77.59, 12.97]}}
        {"type": "after", "loc": {"type": "Point", "coordinates": [77.59, 12.97]}}
    """

    kind: PortfolioKind | None = Field(default=None, validation_alias=AliasChoices("kind", "type"))
    caption: str | None = Field(default=None, max_length=MAX_CAPTION_LENGTH)
    location: GeoPoint | None = Field(default=None, validation_alias=AliasChoices("location", "loc"))

    def changes(self) -> dict[str, Any]:
        """Fields that were provided with a value."""
        provided = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            # null kind/location means "leave as is"; null caption too
            if value is None:
                continue
            provided[name] = value
        return provided


class Portfolio:
    """
    Ordered map of portfolio items keyed by id.

    Wraps the list stored in the partner document; iteration follows
    insertion order, new items are appended at the end.
    """

    def __init__(self, items: Iterable[PortfolioItem] = ()):
        self._items: dict[str, PortfolioItem] = {}
        for item in items:
            self._items[item.id] = item

    @classmethod
    def from_rows(cls, rows: list[dict[str, Any]] | None) -> Portfolio:
        return cls(PortfolioItem.from_row(row) for row in rows or [])

    def to_rows(self) -> list[dict[str, Any]]:
        return [item.to_row() for item in self._items.values()]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PortfolioItem]:
        return iter(self._items.values())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> PortfolioItem | None:
        return self._items.get(item_id)

    def add(self, items: Iterable[PortfolioItem]) -> None:
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate portfolio item id: {item.id}")
            self._items[item.id] = item

    def replace(self, item: PortfolioItem) -> None:
        """Swap in a new version of an existing item, keeping its position."""
        if item.id not in self._items:
            raise KeyError(item.id)
        self._items[item.id] = item

    def remove(self, item_id: str) -> PortfolioItem:
        return self._items.pop(item_id)
