# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the core models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Stored rows round into the right fields
# - No model can carry a password
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import pytest
from pydantic import ValidationError

from core.models import (
    AssetDescriptor,
    DirectoryFilter,
    GeoPoint,
    ImageUpload,
    PartnerDetail,
    PartnerSummary,
    Portfolio,
    PortfolioItem,
    PortfolioItemPatch,
    PortfolioKind,
    Service,
    ServiceCategory,
    VisitingFee,
    parse_location,
)


def _descriptor(name: str = "a.png") -> AssetDescriptor:
    return AssetDescriptor(
        url=f"https://raw.githubusercontent.com/acme/media/main/partners/portfolio/{name}",
        storage_path=f"partners/portfolio/{name}",
        content_hash="3d21ec53a331a6f037a91c368710b99387d012c1",
    )


# =============================================================================
# GeoPoint Tests
# =============================================================================

class TestGeoPoint:
    """Tests for GeoPoint and its accepted input shapes."""

    def test_from_fields(self):
        point = GeoPoint(longitude=77.5946, latitude=12.9716)
        assert point.coordinates == [77.5946, 12.9716]

    def test_from_geojson(self):
        point = GeoPoint.model_validate({"type": "Point", "coordinates": [77.5946, 12.9716]})
        assert point.longitude == 77.5946
        assert point.latitude == 12.9716

    def test_from_pair(self):
        point = GeoPoint.model_validate([-0.1276, 51.5072])
        assert point == GeoPoint(longitude=-0.1276, latitude=51.5072)

    def test_boundaries_are_inclusive(self):
        GeoPoint(longitude=180, latitude=90)
        GeoPoint(longitude=-180, latitude=-90)

    @pytest.mark.parametrize("data", [
        {"longitude": 180.01, "latitude": 0},
        {"longitude": 0, "latitude": -90.5},
        [1.0],
        [1.0, 2.0, 3.0],
        ["77.5", "12.9"],
        [True, 12.0],
        {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
    ])
    def test_rejects_malformed_or_out_of_range(self, data):
        with pytest.raises(ValidationError):
            GeoPoint.model_validate(data)

    def test_is_immutable(self):
        point = GeoPoint(longitude=1, latitude=2)
        with pytest.raises(ValidationError):
            point.longitude = 3

    def test_geojson_and_ewkt(self):
        point = GeoPoint(longitude=77.5, latitude=12.25)
        assert point.to_geojson() == {"type": "Point", "coordinates": [77.5, 12.25]}
        assert point.to_ewkt() == "SRID=4326;POINT(77.5 12.25)"


class TestParseLocation:
    """Tests for the lenient parser used by batch uploads."""

    def test_json_string(self):
        point = parse_location('{"type": "Point", "coordinates": [77.59, 12.97]}')
        assert point == GeoPoint(longitude=77.59, latitude=12.97)

    def test_passthrough(self):
        point = GeoPoint(longitude=1, latitude=1)
        assert parse_location(point) is point

    @pytest.mark.parametrize("raw", [None, "", "not json", '{"coordinates": [500, 0]}', "[1]", 42])
    def test_returns_none_for_bad_input(self, raw):
        assert parse_location(raw) is None


# =============================================================================
# Asset Model Tests
# =============================================================================

class TestAssetModels:
    """Tests for AssetDescriptor and ImageUpload."""

    def test_descriptor_requires_hash(self):
        with pytest.raises(ValidationError):
            AssetDescriptor(url="https://x/y.png", storage_path="y.png", content_hash="")

    def test_upload_size(self):
        upload = ImageUpload(filename="a.png", content_type="image/png", content=b"12345")
        assert upload.size == 5

    def test_upload_repr_hides_content(self):
        upload = ImageUpload(filename="a.png", content_type="image/png", content=b"secret-bytes")
        assert "secret-bytes" not in repr(upload)


# =============================================================================
# Portfolio Model Tests
# =============================================================================

class TestPortfolioItem:
    """Tests for PortfolioItem defaults and stored form."""

    def test_defaults(self):
        item = PortfolioItem(descriptor=_descriptor())
        assert item.kind == PortfolioKind.BEFORE
        assert item.caption == ""
        assert item.location is None
        assert item.id

    def test_ids_are_unique(self):
        assert PortfolioItem(descriptor=_descriptor()).id != PortfolioItem(descriptor=_descriptor()).id

    def test_row_omits_missing_location(self):
        row = PortfolioItem(descriptor=_descriptor()).to_row()
        assert "location" not in row
        assert row["kind"] == "before"
        assert row["descriptor"]["content_hash"] == _descriptor().content_hash

    def test_row_round_trip_keeps_location(self):
        item = PortfolioItem(
            kind=PortfolioKind.AFTER,
            descriptor=_descriptor(),
            caption="Kitchen sink",
            location=GeoPoint(longitude=77.6, latitude=12.9),
        )
        restored = PortfolioItem.from_row(item.to_row())
        assert restored == item


class TestPortfolioItemPatch:
    """Tests for partial update semantics."""

    def test_absent_fields_are_not_changes(self):
        assert PortfolioItemPatch().changes() == {}

    def test_empty_caption_is_a_change(self):
        patch = PortfolioItemPatch.model_validate({"caption": ""})
        assert patch.changes() == {"caption": ""}

    def test_null_location_is_ignored(self):
        patch = PortfolioItemPatch.model_validate({"location": None, "caption": "x"})
        assert patch.changes() == {"caption": "x"}

    def test_accepts_request_aliases(self):
        patch = PortfolioItemPatch.model_validate({
            "type": "after",
            "loc": {"type": "Point", "coordinates": [77.59, 12.97]},
        })
        assert patch.changes() == {
            "kind": PortfolioKind.AFTER,
            "location": GeoPoint(longitude=77.59, latitude=12.97),
        }

    def test_malformed_location_rejected(self):
        with pytest.raises(ValidationError):
            PortfolioItemPatch.model_validate({"location": {"coordinates": [77.59]}})

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            PortfolioItemPatch.model_validate({"kind": "during"})


class TestPortfolio:
    """Tests for the ordered item collection."""

    def test_preserves_insertion_order(self):
        items = [PortfolioItem(descriptor=_descriptor(f"{i}.png")) for i in range(3)]
        portfolio = Portfolio(items)
        assert [item.id for item in portfolio] == [item.id for item in items]
        assert len(portfolio) == 3

    def test_replace_keeps_position(self):
        first, second, third = (PortfolioItem(descriptor=_descriptor(f"{i}.png")) for i in range(3))
        portfolio = Portfolio([first, second, third])
        portfolio.replace(second.model_copy(update={"caption": "new"}))
        assert [item.caption for item in portfolio] == ["", "new", ""]
        assert [item.id for item in portfolio] == [first.id, second.id, third.id]

    def test_remove_and_contains(self):
        item = PortfolioItem(descriptor=_descriptor())
        portfolio = Portfolio([item])
        assert item.id in portfolio
        assert portfolio.remove(item.id) == item
        assert item.id not in portfolio

    def test_add_rejects_duplicate_ids(self):
        item = PortfolioItem(descriptor=_descriptor())
        portfolio = Portfolio([item])
        with pytest.raises(ValueError):
            portfolio.add([item])

    def test_replace_unknown_raises(self):
        with pytest.raises(KeyError):
            Portfolio().replace(PortfolioItem(descriptor=_descriptor()))


# =============================================================================
# Partner Model Tests
# =============================================================================

class TestPartnerModels:
    """Tests for services, fees and directory results."""

    def test_service_limits(self):
        Service(name="Leak repair", category="plumbing", price=0, duration=15)
        with pytest.raises(ValidationError):
            Service(name="Leak repair", category="plumbing", price=-1)
        with pytest.raises(ValidationError):
            Service(name="Leak repair", category="plumbing", duration=10)
        with pytest.raises(ValidationError):
            Service(name="Leak repair", category="spaceflight")

    def test_fifteen_categories(self):
        assert len(ServiceCategory) == 15
        assert ServiceCategory("ac_repair") == ServiceCategory.AC_REPAIR

    def test_visiting_fee_defaults(self):
        fee = VisitingFee()
        assert fee.amount == 0
        assert fee.currency == "INR"
        assert fee.description == "Home visit fee"
        assert fee.is_active is True

    def test_directory_filter_rating_range(self):
        with pytest.raises(ValidationError):
            DirectoryFilter(min_rating=5.5)

    def test_summary_from_row(self):
        summary = PartnerSummary.from_row({
            "id": 7,
            "name": "Asha",
            "business_name": "Asha Plumbing",
            "longitude": 77.59,
            "latitude": 12.97,
            "rating": 4.5,
            "services": [{"name": "Leak repair", "category": "plumbing"}],
            "avatar": {"url": "https://cdn/a.png", "storage_path": "a.png", "content_hash": "abc"},
            "distance_m": 120.5,
        })
        assert summary.id == "7"
        assert summary.location == GeoPoint(longitude=77.59, latitude=12.97)
        assert summary.avatar_url == "https://cdn/a.png"
        assert summary.distance_m == 120.5

    def test_password_never_carried(self):
        row = {"id": "p1", "name": "Asha", "password_hash": "$2b$10$x", "password": "hunter2"}
        for model in (PartnerSummary, PartnerDetail):
            dumped = model.from_row(row).model_dump()
            assert "password" not in dumped
            assert "password_hash" not in dumped
