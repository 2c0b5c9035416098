"""Product request serializers (camelCase wire format).

Shape validation only; business rules live in ``ProductService``.
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers


def _coordinate(limit: int, **kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(
        max_digits=12,
        decimal_places=8,
        min_value=-limit,
        max_value=limit,
        **kwargs,
    )


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, default="", allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=0)
    category = serializers.CharField(max_length=100)
    images = serializers.ListField(
        child=serializers.CharField(max_length=500), required=False, default=list
    )
    lat = _coordinate(90, required=False, allow_null=True, default=None)
    lng = _coordinate(180, required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if self.partial:
            return attrs
        if (attrs.get("lat") is None) != (attrs.get("lng") is None):
            raise serializers.ValidationError("Provide both lat and lng, or neither.")
        return attrs


class NearbyQuerySerializer(serializers.Serializer):
    """``?lat=&lng=&distance=`` of the catalog radius search (km)."""

    lat = _coordinate(90, required=False)
    lng = _coordinate(180, required=False)
    distance = serializers.FloatField(required=False, min_value=0.001)

    def validate(self, attrs):
        if ("lat" in attrs) != ("lng" in attrs):
            raise serializers.ValidationError("Provide both lat and lng, or neither.")
        if "lat" in attrs:
            attrs.setdefault("distance", settings.DEFAULT_SEARCH_RADIUS_KM)
        return attrs
