"""Great-circle distance helpers."""

import math
from typing import Iterable

from shallwewalk.core.constants import EARTH_RADIUS_KM
from shallwewalk.schemas.geo import Coordinate


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return great-circle distance in kilometres between two WGS84 points.

    Uses the standard haversine formula; sufficient for per-point distances
    over a walk or run. `a` is clamped to [0, 1] so rounding noise on
    near-identical points gives 0.0 instead of NaN.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def path_length_km(path: Iterable[Coordinate]) -> float:
    """Sum of distances over consecutive pairs of `path`."""
    total = 0.0
    prev = None
    for point in path:
        if prev is not None:
            total += distance_km(prev, point)
        prev = point
    return total


def is_finite_coordinate(latitude: float, longitude: float) -> bool:
    try:
        return math.isfinite(latitude) and math.isfinite(longitude)
    except TypeError:
        return False
