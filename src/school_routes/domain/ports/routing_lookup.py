"""Road routing lookup port."""

from typing import Protocol

from school_routes.domain.models import Coordinate, RoadRoute


class RoutingLookup(Protocol):
    """Port for resolving a road-following path through ordered waypoints."""

    async def lookup_route(self, waypoints: list[Coordinate]) -> RoadRoute:
        """Return the road path through at least two waypoints.

        Raises:
            RoutingLookupError: If no route could be obtained.
        """
        ...
