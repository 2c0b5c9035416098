"""Unit tests for Product request serializers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.serializers import NearbyQuerySerializer, ProductWriteSerializer

pytestmark = pytest.mark.unit


def _payload(**overrides):
    data = {
        "name": "Plantain",
        "price": "4.50",
        "quantity": 12,
        "category": "Fruit",
    }
    data.update(overrides)
    return data


class TestProductWriteSerializer:
    def test_valid_input_with_defaults(self):
        serializer = ProductWriteSerializer(data=_payload())
        assert serializer.is_valid(), serializer.errors
        data = serializer.validated_data
        assert data["price"] == Decimal("4.50")
        assert data["images"] == []
        assert data["lat"] is None
        assert data["description"] == ""

    def test_missing_required_field(self):
        payload = _payload()
        del payload["category"]
        serializer = ProductWriteSerializer(data=payload)
        assert not serializer.is_valid()
        assert "category" in serializer.errors

    @pytest.mark.parametrize(
        "overrides", [{"price": "-1"}, {"quantity": -1}, {"lat": "91", "lng": "0"}]
    )
    def test_out_of_range_rejected(self, overrides):
        assert not ProductWriteSerializer(data=_payload(**overrides)).is_valid()

    def test_lat_without_lng_rejected(self):
        serializer = ProductWriteSerializer(data=_payload(lat="5.6"))
        assert not serializer.is_valid()
        assert "non_field_errors" in serializer.errors

    def test_partial_update_skips_defaults(self):
        serializer = ProductWriteSerializer(data={"quantity": 3}, partial=True)
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data == {"quantity": 3}


class TestNearbyQuerySerializer:
    def test_no_location_is_valid(self):
        serializer = NearbyQuerySerializer(data={})
        assert serializer.is_valid()
        assert serializer.validated_data == {}

    def test_default_radius(self, settings):
        settings.DEFAULT_SEARCH_RADIUS_KM = 25
        serializer = NearbyQuerySerializer(data={"lat": "5.6", "lng": "-0.18"})
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data["distance"] == 25

    def test_explicit_radius(self):
        serializer = NearbyQuerySerializer(
            data={"lat": "5.6", "lng": "-0.18", "distance": "7.5"}
        )
        assert serializer.is_valid()
        assert serializer.validated_data["distance"] == 7.5

    def test_lng_without_lat_rejected(self):
        assert not NearbyQuerySerializer(data={"lng": "1"}).is_valid()
