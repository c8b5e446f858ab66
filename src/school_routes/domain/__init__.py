"""Domain layer - route geometry, state and fare rules."""

from school_routes.domain.errors import (
    AnchorLocked,
    InsufficientWaypoints,
    InvalidReorder,
    RoutePlanningError,
    RoutingLookupError,
)
from school_routes.domain.models import (
    AnchorRole,
    Coordinate,
    RoadRoute,
    RouteDirection,
    RouteMetrics,
    RoutingRequest,
    Stop,
)
from school_routes.domain.ports import RoutingLookup, SchoolLocationProvider
from school_routes.domain.route_state import RouteState

__all__ = [
    "AnchorLocked",
    "AnchorRole",
    "Coordinate",
    "InsufficientWaypoints",
    "InvalidReorder",
    "RoadRoute",
    "RouteDirection",
    "RouteMetrics",
    "RoutePlanningError",
    "RouteState",
    "RoutingLookup",
    "RoutingLookupError",
    "RoutingRequest",
    "SchoolLocationProvider",
    "Stop",
]
