"""Editing session that keeps route state, metrics and road path in step."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from school_routes.application.services.routing_lookup_coordinator import (
    DEFAULT_DEBOUNCE_SECONDS,
    RoutingLookupCoordinator,
)
from school_routes.application.services.stop_sequencer import StopSequencer
from school_routes.domain.geo_math import path_length_meters

if TYPE_CHECKING:
    from school_routes.domain.models import AnchorRole, Coordinate, RouteDirection, Stop
    from school_routes.domain.ports import RoutingLookup, SchoolLocationProvider
    from school_routes.domain.route_state import RouteState

logger = logging.getLogger(__name__)


class RouteEditingSession:
    """One user's editing session for a single route.

    Every change that moves a waypoint is applied to the route state (which
    recomputes distance and fare synchronously) and then reported to the
    routing coordinator, which refreshes the road path after the debounce
    window. The session owns its state; nothing here is shared between
    sessions.
    """

    def __init__(
        self,
        route_state: RouteState,
        route_lookup: RoutingLookup,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        sequencer: StopSequencer | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            route_state: The route being edited (new or hydrated).
            route_lookup: Port for road-route lookups.
            debounce_seconds: Debounce window for road-route lookups.
            sequencer: Stop ordering strategy; defaults to nearest neighbor.
        """
        self.route_state = route_state
        self.coordinator = RoutingLookupCoordinator(
            route_lookup, route_state, debounce_seconds=debounce_seconds
        )
        self.sequencer = sequencer or StopSequencer()

    def place_stop(self, position: Coordinate) -> Stop:
        stop = self.route_state.add_stop(position)
        self.coordinator.notify_changed()
        return stop

    def rename_stop(self, stop_id: str, name: str) -> None:
        """Rename a stop, falling back to its default name when left blank."""
        if not name.strip():
            default_name = self.route_state.default_stop_name(stop_id)
            if default_name is None:
                return
            name = default_name
        self.route_state.rename_stop(stop_id, name)

    def remove_stop(self, stop_id: str) -> None:
        before = len(self.route_state.stops)
        self.route_state.remove_stop(stop_id)
        if len(self.route_state.stops) != before:
            self.coordinator.notify_changed()

    def reorder_stops(self, new_order: Sequence[str]) -> None:
        self.route_state.reorder_stops(new_order)
        self.coordinator.notify_changed()

    def move_anchor(self, role: AnchorRole, position: Coordinate) -> None:
        """Place the user-controlled anchor.

        Raises:
            AnchorLocked: If the anchor is pinned to the school.
        """
        self.route_state.set_anchor(role, position)
        self.coordinator.notify_changed()

    def change_direction(self, direction: RouteDirection) -> None:
        if direction is self.route_state.direction:
            return
        self.route_state.set_direction(direction)
        self.coordinator.notify_changed()

    def set_fare_per_km(self, fare_per_km: float) -> None:
        # Fare does not move any waypoint, so the road path stays valid
        self.route_state.set_fare_per_km(fare_per_km)

    def set_school_location(self, location: Coordinate) -> None:
        self.route_state.set_school_location(location)
        self.coordinator.notify_changed()

    async def load_school_location(self, provider: SchoolLocationProvider) -> Coordinate | None:
        """Fetch the school location from a provider and apply it if present."""
        location = await provider.get_school_location()
        if location is None:
            logger.info("School location not configured; distances and fare stay at zero")
            return None
        self.set_school_location(location)
        return location

    def optimize_stops(self) -> list[Stop]:
        """Reorder stops by nearest neighbor from the start anchor.

        Raises:
            InsufficientWaypoints: If an anchor is missing or there are fewer than two stops.
        """
        before = path_length_meters(self.route_state.waypoints())
        ordered = self.sequencer.optimize(self.route_state)
        self.reorder_stops([stop.id for stop in ordered])
        after = path_length_meters(self.route_state.waypoints())
        logger.info(
            f"Reordered {len(ordered)} stops, straight-line tour "
            f"{before / 1000:.2f} km -> {after / 1000:.2f} km"
        )
        return ordered

    def validation_errors(self) -> dict[str, str]:
        """Check that the route can be submitted.

        Returns:
            Field name to message; empty when the route is ready to save.
        """
        errors: dict[str, str] = {}
        if self.route_state.start is None or self.route_state.end is None:
            errors["map"] = "Please set both start and end points on the map"
        if self.route_state.fare_per_km <= 0:
            errors["fare_per_km"] = "Fare per kilometer must be greater than 0"
        return errors

    async def close(self) -> None:
        """Cancel pending lookups when the session is discarded."""
        await self.coordinator.stop()
