# region Imports
import math
from typing import Sequence

from drone_pathfinder.config import EARTH_R
from drone_pathfinder.models import LatLng
# endregion


# region Great-circle Distance
def haversine_m(a: LatLng, b: LatLng) -> float:
    to_rad = math.pi / 180.0
    dlat = (b.lat - a.lat) * to_rad
    dlng = (b.lng - a.lng) * to_rad
    h = (math.sin(dlat / 2) ** 2
         + math.cos(a.lat * to_rad) * math.cos(b.lat * to_rad) * math.sin(dlng / 2) ** 2)
    return 2.0 * EARTH_R * math.asin(min(1.0, math.sqrt(h)))


def path_length_km(points: Sequence[LatLng]) -> float:
    return sum(haversine_m(p, q) for p, q in zip(points, points[1:])) / 1000.0
# endregion


# region Point in Polygon
def point_in_polygon(point: LatLng, polygon: Sequence[LatLng]) -> bool:
    """Even-odd rule: cast a ray along lat and count edge crossings."""
    x, y = point.lat, point.lng
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].lat, polygon[i].lng
        xj, yj = polygon[j].lat, polygon[j].lng
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside
# endregion


# region Interpolation
def lerp(a: LatLng, b: LatLng, t: float) -> LatLng:
    return LatLng(a.lat + (b.lat - a.lat) * t, a.lng + (b.lng - a.lng) * t)
# endregion
