"""Errors raised by route planning operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from school_routes.domain.models import AnchorRole, RouteDirection


class RoutePlanningError(Exception):
    """Base class for route planning errors."""


class InvalidReorder(RoutePlanningError):
    """Raised when a reorder request is not a permutation of the current stop ids."""


class AnchorLocked(RoutePlanningError):
    """Raised when a user tries to move an anchor pinned to the school location."""

    def __init__(self, role: AnchorRole, direction: RouteDirection) -> None:
        self.role = role
        self.direction = direction
        route_label = "shift start" if direction.value == "shift_start" else "shift end"
        super().__init__(
            f"{role.value.capitalize()} point is fixed to school location "
            f"for {route_label} routes"
        )


class InsufficientWaypoints(RoutePlanningError):
    """Raised when stop optimization is requested without both anchors or enough stops."""


class RoutingLookupError(RoutePlanningError):
    """Raised by routing adapters when no road route could be obtained."""
