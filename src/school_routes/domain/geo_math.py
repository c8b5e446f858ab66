"""Great-circle distance helpers on latitude/longitude pairs."""

from __future__ import annotations

import math
from collections.abc import Sequence

from school_routes.domain.models import Coordinate, RoadRoute

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates using the mean Earth radius."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlmb = math.radians(b.longitude - a.longitude)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(s), math.sqrt(1 - s))


def path_length_meters(points: Sequence[Coordinate]) -> float:
    """Sum of haversine legs along an ordered sequence of coordinates."""
    total = 0.0
    for i in range(1, len(points)):
        total += haversine_distance_meters(points[i - 1], points[i])
    return total


def straight_line_route(waypoints: Sequence[Coordinate]) -> RoadRoute:
    """Waypoints joined by straight segments, used when a road path is unavailable."""
    return RoadRoute(polyline=tuple(waypoints), distance_meters=path_length_meters(waypoints))
