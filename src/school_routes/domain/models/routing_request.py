"""Routing request model."""

from dataclasses import dataclass

from school_routes.domain.models.coordinate import Coordinate


@dataclass(frozen=True)
class RoutingRequest:
    """A single road-route lookup issued by the coordinator."""

    waypoints: tuple[Coordinate, ...]
    request_token: int  # Monotonically increasing per coordinator
