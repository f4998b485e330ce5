"""Geographic primitives — pure Python, no external deps."""

from __future__ import annotations

import math
from typing import Sequence

from store_boundary.models import Coordinate

# Mean Earth radius (IUGG)
EARTH_RADIUS_M = 6_371_008.8

# Rings at or below this area (square degrees, about 0.01 m² at the equator) are degenerate
MIN_RING_AREA = 1e-12


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points on Earth in meters.

    Uses the Haversine formula. Inputs are WGS84 decimal degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)

    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1

    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    # Rounding can push `a` a hair past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)


def _unwrap(longitude: float, reference: float) -> float:
    """Shift a longitude by ±360 so it lies within 180° of the reference."""
    delta = longitude - reference
    if delta > 180.0:
        return longitude - 360.0
    if delta < -180.0:
        return longitude + 360.0
    return longitude


def point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    """Even-odd ray casting test over the implicitly closed ring.

    Longitude is treated as x and latitude as y. Each edge is taken the short
    way round, so rings crossing the antimeridian work. Points on an edge or a
    vertex count as inside. Rings with fewer than three vertices or with no
    area (repeated or collinear vertices) never contain anything.
    """
    n = len(polygon)
    if n < 3:
        return False

    ring: list[tuple[float, float]] = []
    prev_lon: float | None = None
    for v in polygon:
        lon = v.longitude if prev_lon is None else _unwrap(v.longitude, prev_lon)
        ring.append((lon, v.latitude))
        prev_lon = lon

    if abs(_ring_area(ring)) <= MIN_RING_AREA:
        return False

    lons = [lon for lon, _ in ring]
    x = _unwrap(point.longitude, (min(lons) + max(lons)) / 2)
    y = point.latitude
    inside = False

    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[i - 1]

        if _on_segment(x, y, xi, yi, xj, yj):
            return True

        if (yi > y) != (yj > y):
            intersect_x = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < intersect_x:
                inside = not inside

    return inside


def _ring_area(ring: Sequence[tuple[float, float]]) -> float:
    """Signed shoelace area in square degrees."""
    # Measured from the first vertex to keep rounding error small
    x0, y0 = ring[0]
    total = 0.0
    for i in range(len(ring)):
        xi, yi = ring[i][0] - x0, ring[i][1] - y0
        xj, yj = ring[i - 1][0] - x0, ring[i - 1][1] - y0
        total += xj * yi - xi * yj
    return total / 2


def _on_segment(x: float, y: float, xi: float, yi: float, xj: float, yj: float) -> bool:
    cross = (xj - xi) * (y - yi) - (yj - yi) * (x - xi)
    if cross != 0.0:
        return False
    return min(xi, xj) <= x <= max(xi, xj) and min(yi, yj) <= y <= max(yi, yj)
