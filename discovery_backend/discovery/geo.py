from __future__ import annotations

import math
from typing import NamedTuple

from geopy.distance import geodesic

from .errors import InvalidCoordinatesError
from .models import User


class LatLon(NamedTuple):
    latitude: float
    longitude: float


def validate_coordinate(latitude: float | str, longitude: float | str) -> LatLon:
    """Reject non-finite or out-of-range coordinates before any query runs."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinatesError() from None

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinatesError()
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise InvalidCoordinatesError("Coordinates out of range")
    return LatLon(lat, lon)


def to_coordinate(user: User) -> LatLon | None:
    """Return the user's last known position, or ``None`` if not shared."""
    if user.location_latitude is None or user.location_longitude is None:
        return None
    return LatLon(user.location_latitude, user.location_longitude)


def apply_coordinate(user: User, coord: LatLon | None) -> User:
    """Return a copy of *user* positioned at *coord* (``None`` clears it)."""
    if coord is None:
        return user.model_copy(update={"location_latitude": None, "location_longitude": None})
    checked = validate_coordinate(coord.latitude, coord.longitude)
    return user.model_copy(
        update={"location_latitude": checked.latitude, "location_longitude": checked.longitude}
    )


def distance_meters(a: LatLon, b: LatLon) -> float:
    """Geodesic distance on the WGS-84 ellipsoid."""
    return geodesic(a, b).meters


def round_km(meters: float) -> float:
    return round(meters / 1000.0, 1)
