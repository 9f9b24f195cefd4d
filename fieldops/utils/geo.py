"""Great-circle distance helpers."""
import math
from typing import Iterable, Tuple

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two WGS84 points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def route_distance_km(points: Iterable[Tuple[float, float]]) -> float:
    """Total length of a polyline of (lat, lon) points."""
    total = 0.0
    previous = None
    for point in points:
        if previous is not None:
            total += haversine_km(previous[0], previous[1], point[0], point[1])
        previous = point
    return total


def bounding_box(lat: float, lon: float, radius_km: float) -> Tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lon, max_lon) enclosing a circle of ``radius_km``."""
    lat_delta = radius_km / 111.0
    cos_lat = math.cos(math.radians(lat))
    lon_delta = radius_km / (111.0 * cos_lat) if cos_lat > 1e-9 else 180.0
    return lat - lat_delta, lat + lat_delta, lon - lon_delta, lon + lon_delta
