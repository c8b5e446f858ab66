"""In-memory model of a transport route being authored."""

from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from school_routes.domain.contracts.fare_policy import FarePolicyProtocol
from school_routes.domain.errors import AnchorLocked, InvalidReorder
from school_routes.domain.fare_calculator import FareCalculator
from school_routes.domain.geo_math import haversine_distance_meters
from school_routes.domain.models import (
    AnchorRole,
    Coordinate,
    RoadRoute,
    RouteDirection,
    RouteMetrics,
    Stop,
)

logger = logging.getLogger(__name__)

DEFAULT_FARE_PER_KM = 10.0


class RouteState:
    """Anchors, ordered stops and derived metrics of one route.

    All mutation goes through the methods below. Derived fields
    (``max_distance_from_school_meters``, ``fare``, ``road_polyline``) are
    recomputed or replaced by their owners, never edited directly.
    """

    def __init__(
        self,
        direction: RouteDirection = RouteDirection.TO_SCHOOL,
        fare_per_km: float = DEFAULT_FARE_PER_KM,
        school_location: Coordinate | None = None,
        fare_policy: FarePolicyProtocol | None = None,
    ) -> None:
        """Create an empty route.

        Args:
            direction: Whether the route runs to or from the school.
            fare_per_km: Rate used for the fare calculation.
            school_location: School coordinate, if already known.
            fare_policy: Fare strategy; defaults to FareCalculator.
        """
        self._direction = direction
        self._fare_per_km = fare_per_km
        self._fare_policy: FarePolicyProtocol = fare_policy or FareCalculator()
        self._school_location: Coordinate | None = None
        self._anchors: dict[AnchorRole, Coordinate | None] = {
            AnchorRole.START: None,
            AnchorRole.END: None,
        }
        self._stops: list[Stop] = []
        self._id_sequence = itertools.count(1)
        self._max_distance_from_school_meters = 0.0
        self._fare = 0.0
        self._road_polyline: tuple[Coordinate, ...] | None = None
        self._road_distance_meters: float | None = None
        # UI-only viewport, carried for the persisted record
        self.map_bounds: Mapping[str, Any] | None = None

        if school_location is not None:
            self.set_school_location(school_location)
        else:
            self.recompute_derived_metrics()

    @classmethod
    def hydrate(
        cls,
        *,
        direction: RouteDirection,
        fare_per_km: float,
        start: Coordinate | None,
        end: Coordinate | None,
        stops: Iterable[tuple[str, Coordinate]],
        road_route: RoadRoute | None = None,
        map_bounds: Mapping[str, Any] | None = None,
        school_location: Coordinate | None = None,
        fare_policy: FarePolicyProtocol | None = None,
    ) -> RouteState:
        """Rebuild a route from persisted data.

        Both anchors are restored as stored, including the one pinned to the
        school. A school location supplied here is recorded without re-pinning
        an anchor that is already set.
        """
        state = cls(direction=direction, fare_per_km=fare_per_km, fare_policy=fare_policy)
        state._anchors[AnchorRole.START] = start
        state._anchors[AnchorRole.END] = end
        for name, position in stops:
            state._stops.append(Stop(id=state._next_stop_id(), name=name, position=position))
        if road_route is not None:
            state.apply_road_route(road_route)
        state.map_bounds = map_bounds
        if school_location is not None:
            state.set_school_location(school_location)
        else:
            state.recompute_derived_metrics()
        return state

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def direction(self) -> RouteDirection:
        return self._direction

    @property
    def fare_per_km(self) -> float:
        return self._fare_per_km

    @property
    def school_location(self) -> Coordinate | None:
        return self._school_location

    @property
    def start(self) -> Coordinate | None:
        return self._anchors[AnchorRole.START]

    @property
    def end(self) -> Coordinate | None:
        return self._anchors[AnchorRole.END]

    @property
    def stops(self) -> tuple[Stop, ...]:
        """Stops in traversal order."""
        return tuple(self._stops)

    @property
    def max_distance_from_school_meters(self) -> float:
        return self._max_distance_from_school_meters

    @property
    def fare(self) -> float:
        return self._fare

    @property
    def road_polyline(self) -> tuple[Coordinate, ...] | None:
        return self._road_polyline

    @property
    def road_distance_meters(self) -> float | None:
        return self._road_distance_meters

    @property
    def pinned_role(self) -> AnchorRole:
        """The anchor fixed to the school for the current direction."""
        return self._direction.pinned_role

    def anchor(self, role: AnchorRole) -> Coordinate | None:
        """Return the anchor for a role, or None if it is unset."""
        return self._anchors[role]

    def is_pinned(self, role: AnchorRole) -> bool:
        """Whether the anchor for a role is locked to the school location."""
        return role is self.pinned_role

    def find_stop(self, stop_id: str) -> Stop | None:
        """Return the stop with the given id, or None."""
        for stop in self._stops:
            if stop.id == stop_id:
                return stop
        return None

    def default_stop_name(self, stop_id: str) -> str | None:
        """Default name for a stop at its current position ("Stop 3")."""
        for index, stop in enumerate(self._stops):
            if stop.id == stop_id:
                return f"Stop {index + 1}"
        return None

    def waypoints(self) -> list[Coordinate]:
        """Start anchor, stops in order, then end anchor; unset anchors are skipped."""
        points: list[Coordinate] = []
        if self.start is not None:
            points.append(self.start)
        points.extend(stop.position for stop in self._stops)
        if self.end is not None:
            points.append(self.end)
        return points

    # ------------------------------------------------------------------
    # Stops
    # ------------------------------------------------------------------

    def add_stop(self, position: Coordinate) -> Stop:
        """Append a stop named after its position in the list."""
        stop = Stop(
            id=self._next_stop_id(),
            name=f"Stop {len(self._stops) + 1}",
            position=position,
        )
        self._stops.append(stop)
        self.recompute_derived_metrics()
        return stop

    def rename_stop(self, stop_id: str, name: str) -> None:
        """Rename a stop. Unknown ids are ignored; empty names are stored as given."""
        for index, stop in enumerate(self._stops):
            if stop.id == stop_id:
                self._stops[index] = replace(stop, name=name)
                return

    def remove_stop(self, stop_id: str) -> None:
        """Remove a stop if present."""
        remaining = [stop for stop in self._stops if stop.id != stop_id]
        if len(remaining) == len(self._stops):
            return
        self._stops = remaining
        self.recompute_derived_metrics()

    def reorder_stops(self, new_order: Sequence[str]) -> None:
        """Replace the stop order.

        Raises:
            InvalidReorder: If new_order is not a permutation of the current stop ids.
        """
        new_order = list(new_order)
        by_id = {stop.id: stop for stop in self._stops}
        if len(new_order) != len(self._stops) or set(new_order) != set(by_id):
            raise InvalidReorder(
                f"Reorder must list each of the {len(self._stops)} current stop ids exactly once"
            )
        self._stops = [by_id[stop_id] for stop_id in new_order]
        self.recompute_derived_metrics()

    # ------------------------------------------------------------------
    # Anchors, direction, school, fare
    # ------------------------------------------------------------------

    def set_anchor(self, role: AnchorRole, position: Coordinate) -> None:
        """Place a user-controlled anchor.

        Raises:
            AnchorLocked: If the anchor is pinned to the school for the current direction.
        """
        if self.is_pinned(role):
            raise AnchorLocked(role, self._direction)
        self._anchors[role] = position
        self.recompute_derived_metrics()

    def set_direction(self, direction: RouteDirection) -> None:
        """Switch direction and re-pin the school anchor.

        The previously pinned anchor is cleared only while it still sits on the
        school; an anchor the user placed is kept.
        """
        if direction is self._direction:
            return
        old_role = self._direction.pinned_role
        self._direction = direction
        school = self._school_location
        if school is not None:
            if self._anchors[old_role] == school:
                self._anchors[old_role] = None
            self._anchors[direction.pinned_role] = school
        self.recompute_derived_metrics()

    def set_school_location(self, location: Coordinate) -> None:
        """Record the school location and pin the fixed anchor to it.

        The pinned anchor follows the school only while it is unset or still
        equal to the previous school location.
        """
        previous = self._school_location
        self._school_location = location
        role = self.pinned_role
        current = self._anchors[role]
        if current is None or (previous is not None and current == previous):
            self._anchors[role] = location
        self.recompute_derived_metrics()

    def set_fare_per_km(self, fare_per_km: float) -> None:
        self._fare_per_km = fare_per_km
        self.recompute_derived_metrics()

    # ------------------------------------------------------------------
    # Derived fields
    # ------------------------------------------------------------------

    def recompute_derived_metrics(self) -> RouteMetrics:
        """Recompute the furthest distance from the school and the resulting fare."""
        school = self._school_location
        distances: list[float] = []
        if school is not None:
            for role in (AnchorRole.START, AnchorRole.END):
                anchor = self._anchors[role]
                if anchor is not None and anchor != school:
                    distances.append(haversine_distance_meters(school, anchor))
            distances.extend(haversine_distance_meters(school, stop.position) for stop in self._stops)

        self._max_distance_from_school_meters = max(distances, default=0.0)
        self._fare = self._fare_policy.calculate(
            self._max_distance_from_school_meters, self._fare_per_km
        )
        return RouteMetrics(
            max_distance_from_school_meters=self._max_distance_from_school_meters,
            fare=self._fare,
        )

    def apply_road_route(self, route: RoadRoute) -> None:
        """Store the road-following path for the current waypoints."""
        self._road_polyline = route.polyline
        self._road_distance_meters = route.distance_meters
        logger.debug(f"Stored road polyline with {len(route.polyline)} points")

    def clear_road_polyline(self) -> None:
        self._road_polyline = None
        self._road_distance_meters = None

    def _next_stop_id(self) -> str:
        return f"stop-{next(self._id_sequence)}"
