"""Nearest-neighbor ordering of route stops."""

import logging

from school_routes.domain.errors import InsufficientWaypoints
from school_routes.domain.geo_math import haversine_distance_meters
from school_routes.domain.models import AnchorRole, Stop
from school_routes.domain.route_state import RouteState

logger = logging.getLogger(__name__)

MIN_STOPS_TO_OPTIMIZE = 2


class StopSequencer:
    """Orders stops by greedy nearest-neighbor tour construction.

    The tour starts at the Start anchor and repeatedly moves to the closest
    unvisited stop; ties go to the stop listed first. The End anchor is the
    fixed destination and never takes part in the ordering.

    This is a heuristic. It is fast for the few dozen stops of a bus route but
    the resulting tour is not guaranteed to be the shortest one.
    """

    def optimize(self, state: RouteState) -> list[Stop]:
        """Return the stops of ``state`` in visiting order.

        The state itself is not modified; apply the result with
        ``RouteState.reorder_stops``.

        Raises:
            InsufficientWaypoints: If an anchor is missing or there are fewer than two stops.
        """
        self._check_preconditions(state)

        unvisited = list(state.stops)
        ordered: list[Stop] = []
        current = state.start
        assert current is not None

        while unvisited:
            nearest_index = 0
            nearest_distance = haversine_distance_meters(current, unvisited[0].position)
            for index in range(1, len(unvisited)):
                distance = haversine_distance_meters(current, unvisited[index].position)
                # Strict comparison keeps the lower index on ties
                if distance < nearest_distance:
                    nearest_distance = distance
                    nearest_index = index

            nearest = unvisited.pop(nearest_index)
            ordered.append(nearest)
            current = nearest.position

        logger.debug(f"Ordered {len(ordered)} stops by nearest neighbor")
        return ordered

    @staticmethod
    def _check_preconditions(state: RouteState) -> None:
        if state.start is None or state.end is None:
            # Name the anchor the user still has to place; the pinned one follows the school
            if state.pinned_role is AnchorRole.END:
                message = (
                    "Please set the start point on the map. "
                    "End point (school) will be set automatically."
                )
            else:
                message = (
                    "Please set the end point on the map. "
                    "Start point (school) will be set automatically."
                )
            raise InsufficientWaypoints(message)

        if len(state.stops) < MIN_STOPS_TO_OPTIMIZE:
            raise InsufficientWaypoints(
                f"Need at least {MIN_STOPS_TO_OPTIMIZE} stops to optimize route"
            )
