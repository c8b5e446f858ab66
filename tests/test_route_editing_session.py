"""Tests for the route editing session."""

import math
from unittest.mock import AsyncMock

import pytest

from school_routes.application.services import CoordinatorPhase, RouteEditingSession
from school_routes.domain.errors import AnchorLocked, InsufficientWaypoints
from school_routes.domain.geo_math import EARTH_RADIUS_METERS, straight_line_route
from school_routes.domain.models import AnchorRole, Coordinate, RouteDirection
from school_routes.domain.route_state import RouteState

SCHOOL = Coordinate(0.0, 0.0)
DEBOUNCE = 0.01


class StubSchoolProvider:
    def __init__(self, location: Coordinate | None) -> None:
        self.location = location

    async def get_school_location(self) -> Coordinate | None:
        return self.location


@pytest.fixture
def route_lookup() -> AsyncMock:
    """Routing lookup that answers with the straight line through the waypoints."""
    lookup = AsyncMock()
    lookup.lookup_route.side_effect = lambda waypoints: straight_line_route(waypoints)
    return lookup


@pytest.fixture
def session(route_lookup: AsyncMock) -> RouteEditingSession:
    return RouteEditingSession(
        RouteState(school_location=SCHOOL), route_lookup, debounce_seconds=DEBOUNCE
    )


@pytest.mark.asyncio
async def test_placing_stops_updates_metrics_and_road_path(
    session: RouteEditingSession, route_lookup: AsyncMock
) -> None:
    """Given a start and a stop, when the window expires, then metrics and the road path are current."""
    stop_lat = math.degrees(5_000 / EARTH_RADIUS_METERS)
    session.move_anchor(AnchorRole.START, Coordinate(0.01, 0.0))
    session.place_stop(Coordinate(stop_lat, 0.0))

    assert session.route_state.fare == pytest.approx(50.0)

    await session.coordinator.flush()

    route_lookup.lookup_route.assert_awaited_once()
    assert session.route_state.road_polyline == tuple(session.route_state.waypoints())
    await session.close()


@pytest.mark.asyncio
async def test_blank_rename_restores_default_name(session: RouteEditingSession) -> None:
    """Given a renamed stop, when renamed to whitespace, then it gets its default name back."""
    stop = session.place_stop(Coordinate(1.0, 1.0))
    session.rename_stop(stop.id, "Library")
    assert session.route_state.stops[0].name == "Library"

    session.rename_stop(stop.id, "   ")

    assert session.route_state.stops[0].name == "Stop 1"
    await session.close()


@pytest.mark.asyncio
async def test_removing_unknown_stop_does_not_trigger_lookup(session: RouteEditingSession) -> None:
    """Given no matching stop, when removing, then the coordinator stays idle."""
    session.remove_stop("missing")

    assert session.coordinator.phase is CoordinatorPhase.IDLE
    await session.close()


@pytest.mark.asyncio
async def test_moving_pinned_anchor_is_rejected_without_lookup(
    session: RouteEditingSession,
) -> None:
    """Given End pinned to the school, when moving it, then AnchorLocked is raised and nothing is scheduled."""
    with pytest.raises(AnchorLocked):
        session.move_anchor(AnchorRole.END, Coordinate(1.0, 1.0))

    assert session.route_state.end == SCHOOL
    assert session.coordinator.phase is CoordinatorPhase.IDLE
    await session.close()


@pytest.mark.asyncio
async def test_changing_direction_repins_and_schedules_lookup(
    session: RouteEditingSession,
) -> None:
    """Given a to-school route, when switching direction, then Start is the school and a lookup is scheduled."""
    session.change_direction(RouteDirection.FROM_SCHOOL)

    assert session.route_state.start == SCHOOL
    assert session.route_state.end is None
    assert session.coordinator.phase is CoordinatorPhase.DEBOUNCING
    await session.close()


@pytest.mark.asyncio
async def test_fare_rate_change_does_not_trigger_lookup(session: RouteEditingSession) -> None:
    """Given a stop, when the fare rate changes, then the fare updates without a road lookup."""
    session.route_state.add_stop(Coordinate(math.degrees(5_000 / EARTH_RADIUS_METERS), 0.0))

    session.set_fare_per_km(2.0)

    assert session.route_state.fare == pytest.approx(10.0)
    assert session.coordinator.phase is CoordinatorPhase.IDLE
    await session.close()


@pytest.mark.asyncio
async def test_load_school_location_pins_anchor(route_lookup: AsyncMock) -> None:
    """Given a provider with a school, when loading, then the pinned anchor moves there."""
    session = RouteEditingSession(RouteState(), route_lookup, debounce_seconds=DEBOUNCE)

    location = await session.load_school_location(StubSchoolProvider(SCHOOL))

    assert location == SCHOOL
    assert session.route_state.school_location == SCHOOL
    assert session.route_state.end == SCHOOL
    await session.close()


@pytest.mark.asyncio
async def test_load_school_location_without_school_leaves_state(route_lookup: AsyncMock) -> None:
    """Given a provider without a school, when loading, then nothing changes."""
    session = RouteEditingSession(RouteState(), route_lookup, debounce_seconds=DEBOUNCE)

    assert await session.load_school_location(StubSchoolProvider(None)) is None
    assert session.route_state.end is None
    assert session.coordinator.phase is CoordinatorPhase.IDLE


@pytest.mark.asyncio
async def test_optimize_applies_order_and_refreshes_road_path(
    session: RouteEditingSession, route_lookup: AsyncMock
) -> None:
    """Given stops out of order, when optimizing, then they are reordered and the road path follows."""
    session.move_anchor(AnchorRole.START, Coordinate(0.0, -1.0))
    far = session.place_stop(Coordinate(0.0, 10.0))
    near = session.place_stop(Coordinate(0.0, 0.5))

    ordered = session.optimize_stops()
    await session.coordinator.flush()

    assert [s.id for s in ordered] == [near.id, far.id]
    assert [s.id for s in session.route_state.stops] == [near.id, far.id]
    route_lookup.lookup_route.assert_awaited_once()
    assert session.route_state.road_polyline == tuple(session.route_state.waypoints())


@pytest.mark.asyncio
async def test_optimize_without_start_raises(session: RouteEditingSession) -> None:
    """Given no Start anchor, when optimizing, then InsufficientWaypoints is raised."""
    session.place_stop(Coordinate(1.0, 1.0))
    session.place_stop(Coordinate(2.0, 2.0))

    with pytest.raises(InsufficientWaypoints):
        session.optimize_stops()
    await session.close()


def test_validation_errors_for_incomplete_route(route_lookup: AsyncMock) -> None:
    """Given no anchors and a zero rate, then both problems are reported."""
    session = RouteEditingSession(RouteState(fare_per_km=0.0), route_lookup)

    errors = session.validation_errors()

    assert errors == {
        "map": "Please set both start and end points on the map",
        "fare_per_km": "Fare per kilometer must be greater than 0",
    }


@pytest.mark.asyncio
async def test_validation_passes_for_complete_route(session: RouteEditingSession) -> None:
    """Given both anchors and a positive rate, then there are no errors."""
    session.move_anchor(AnchorRole.START, Coordinate(1.0, 1.0))

    assert session.validation_errors() == {}
    await session.close()
