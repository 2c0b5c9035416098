"""Great-circle helpers for the catalog's radius search."""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, degrees, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance (km)."""
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(a)))


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """Lat/lng box that contains every point within ``radius_km``.

    Used as an indexable pre-filter; exact distances are computed with
    ``haversine_km`` afterwards.  Near the poles, or when the box would
    cross the antimeridian, the longitude range covers the whole globe.
    """
    dlat = degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(-90.0, lat - dlat)
    max_lat = min(90.0, lat + dlat)

    cos_lat = cos(radians(lat))
    if cos_lat <= 1e-9 or max_lat >= 90.0 or min_lat <= -90.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    dlng = degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    min_lng, max_lng = lng - dlng, lng + dlng
    if min_lng < -180.0 or max_lng > 180.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)
