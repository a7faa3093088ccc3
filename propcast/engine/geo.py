"""Great-circle distance and coordinate validation."""

import math

from propcast.errors import ValidationError

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.0
DEFAULT_RADIUS_KM = 5.0
MAX_RADIUS_KM = 50.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in kilometres between two WGS84 points."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the radius; a coarse prefilter only."""
    d_lat = radius_km / KM_PER_DEGREE_LAT
    # cos() shrinks toward the poles; clamp so the box never collapses to a line
    d_lng = radius_km / (KM_PER_DEGREE_LAT * max(math.cos(math.radians(lat)), 0.01))
    return lat - d_lat, lat + d_lat, lng - d_lng, lng + d_lng


def validate_coordinates(lat: float | None, lng: float | None, radius_km: float) -> tuple[float, float, float]:
    """Return (lat, lng, radius_km), or raise ValidationError."""
    if lat is None or lng is None:
        raise ValidationError("Both lat and lng are required")
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValidationError("Coordinates out of range")
    if not 0 < radius_km <= MAX_RADIUS_KM:
        raise ValidationError(f"Radius must be between 0 and {MAX_RADIUS_KM:g} km")
    return lat, lng, radius_km
