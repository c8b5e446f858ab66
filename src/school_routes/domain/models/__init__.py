"""Domain models for school transport routes."""

from school_routes.domain.models.anchor_role import AnchorRole
from school_routes.domain.models.coordinate import Coordinate
from school_routes.domain.models.road_route import RoadRoute
from school_routes.domain.models.route_direction import RouteDirection
from school_routes.domain.models.route_metrics import RouteMetrics
from school_routes.domain.models.routing_request import RoutingRequest
from school_routes.domain.models.stop import Stop

__all__ = [
    "AnchorRole",
    "Coordinate",
    "RoadRoute",
    "RouteDirection",
    "RouteMetrics",
    "RoutingRequest",
    "Stop",
]
