"""Application services (use cases) for route planning."""

from school_routes.application.services.route_editing_session import RouteEditingSession
from school_routes.application.services.routing_lookup_coordinator import (
    CoordinatorPhase,
    RoutingLookupCoordinator,
)
from school_routes.application.services.stop_sequencer import StopSequencer

__all__ = [
    "CoordinatorPhase",
    "RouteEditingSession",
    "RoutingLookupCoordinator",
    "StopSequencer",
]
