"""Leg-by-leg routing that stitches consecutive waypoint pairs together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from school_routes.domain.errors import RoutingLookupError
from school_routes.domain.geo_math import haversine_distance_meters
from school_routes.domain.models import Coordinate, RoadRoute

if TYPE_CHECKING:
    from school_routes.domain.ports import RoutingLookup

logger = logging.getLogger(__name__)


class SegmentedRouteLookup:
    """Resolves a multi-stop route one leg at a time.

    Each consecutive waypoint pair is looked up separately so every leg
    follows roads on its own; the legs are joined without repeating the
    shared junction point. With ``straight_line_fallback`` a leg that cannot
    be resolved is drawn as a straight segment, as long as at least one leg
    did resolve. If no leg resolves the lookup fails as a whole.
    """

    def __init__(self, inner: RoutingLookup, straight_line_fallback: bool = True) -> None:
        self._inner = inner
        self.straight_line_fallback = straight_line_fallback

    async def lookup_route(self, waypoints: list[Coordinate]) -> RoadRoute:
        if len(waypoints) <= 2:
            return await self._inner.lookup_route(waypoints)

        stitched: list[Coordinate] = []
        total_distance = 0.0
        resolved_legs = 0

        for i in range(len(waypoints) - 1):
            leg_start, leg_end = waypoints[i], waypoints[i + 1]
            leg = await self._lookup_leg(i, leg_start, leg_end)
            if leg is None:
                leg_points: tuple[Coordinate, ...] = (leg_start, leg_end)
                total_distance += haversine_distance_meters(leg_start, leg_end)
            else:
                leg_points = leg.polyline
                total_distance += leg.distance_meters
                resolved_legs += 1

            # The first point of each later leg is the last point of the previous one
            stitched.extend(leg_points if i == 0 else leg_points[1:])

        if resolved_legs == 0:
            raise RoutingLookupError(f"None of the {len(waypoints) - 1} route legs could be resolved")

        return RoadRoute(polyline=tuple(stitched), distance_meters=total_distance)

    async def _lookup_leg(self, index: int, start: Coordinate, end: Coordinate) -> RoadRoute | None:
        try:
            leg = await self._inner.lookup_route([start, end])
        except RoutingLookupError as e:
            if not self.straight_line_fallback:
                raise
            logger.warning(f"Route leg {index + 1} unresolved, using straight segment: {e}")
            return None
        if not leg.polyline:
            if not self.straight_line_fallback:
                raise RoutingLookupError(f"Route leg {index + 1} has no geometry")
            return None
        return leg
