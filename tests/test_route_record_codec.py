"""Tests for converting between route state and persisted route records."""

import json
import logging

import pytest
from pydantic import ValidationError

from school_routes.adapters.persistence import FALLBACK_STOP_POSITION, RouteRecordCodec
from school_routes.domain.models import AnchorRole, Coordinate, RoadRoute, RouteDirection
from school_routes.domain.route_state import RouteState

SCHOOL = Coordinate(28.6139, 77.2090)
HOME = Coordinate(28.7041, 77.1025)


@pytest.fixture
def codec() -> RouteRecordCodec:
    return RouteRecordCodec()


@pytest.fixture
def planned_route() -> RouteState:
    """A to-school route with two named stops and a road path."""
    state = RouteState(fare_per_km=12.0, school_location=SCHOOL)
    state.set_anchor(AnchorRole.START, HOME)
    gate = state.add_stop(Coordinate(28.68, 77.12))
    state.rename_stop(gate.id, "Gate")
    state.add_stop(Coordinate(28.65, 77.16))
    state.apply_road_route(
        RoadRoute(polyline=(HOME, Coordinate(28.69, 77.11), SCHOOL), distance_meters=15_000.0)
    )
    state.map_bounds = {"north": 28.8, "south": 28.5, "east": 77.3, "west": 77.0}
    return state


def test_encode_writes_each_stop_as_json_string(
    codec: RouteRecordCodec, planned_route: RouteState
) -> None:
    """Given a route, when encoding, then every stop is a compact JSON string."""
    record = codec.encode(planned_route)

    assert record["stops"][0] == '{"name":"Gate","lat":28.68,"lng":77.12}'
    assert json.loads(record["stops"][1]) == {"name": "Stop 2", "lat": 28.65, "lng": 77.16}


def test_encode_writes_derived_fields(codec: RouteRecordCodec, planned_route: RouteState) -> None:
    """Given a route, when encoding, then type, anchors, path and fare fields are filled."""
    record = codec.encode(planned_route)

    assert record["route_type"] == "shift_start"
    assert record["start_coordinates"] == {"lat": HOME.latitude, "lng": HOME.longitude}
    assert record["end_coordinates"] == {"lat": SCHOOL.latitude, "lng": SCHOOL.longitude}
    assert len(record["route_coordinates"]) == 3
    assert record["fare_per_km"] == 12.0
    assert record["max_distance_from_school"] == pytest.approx(
        planned_route.max_distance_from_school_meters
    )
    assert record["fare_per_month"] == pytest.approx(planned_route.fare)
    assert record["map_bounds"] == planned_route.map_bounds


def test_encode_without_road_path_stores_waypoints(codec: RouteRecordCodec) -> None:
    """Given no road path, when encoding, then route_coordinates are the raw waypoints."""
    state = RouteState(school_location=SCHOOL)
    state.set_anchor(AnchorRole.START, HOME)

    record = codec.encode(state)

    assert record["route_coordinates"] == [
        {"lat": HOME.latitude, "lng": HOME.longitude},
        {"lat": SCHOOL.latitude, "lng": SCHOOL.longitude},
    ]


def test_round_trip_preserves_route(codec: RouteRecordCodec, planned_route: RouteState) -> None:
    """Given an encoded route, when decoding it, then names, positions, order and anchors match."""
    restored = codec.decode(codec.encode(planned_route), school_location=SCHOOL)

    assert [(s.name, s.position) for s in restored.stops] == [
        (s.name, s.position) for s in planned_route.stops
    ]
    assert restored.start == planned_route.start
    assert restored.end == planned_route.end
    assert restored.direction is planned_route.direction
    assert restored.fare_per_km == planned_route.fare_per_km
    assert restored.road_polyline == planned_route.road_polyline
    assert restored.map_bounds == planned_route.map_bounds
    assert restored.fare == pytest.approx(planned_route.fare)


def test_malformed_stop_becomes_placeholder(
    codec: RouteRecordCodec, caplog: pytest.LogCaptureFixture
) -> None:
    """Given one undecodable stop among good ones, when decoding, then it becomes a placeholder."""
    record = {
        "route_type": "shift_start",
        "stops": [
            '{"name":"Gate","lat":28.68,"lng":77.12}',
            "{not json",
            '{"name":"Park","lat":28.65,"lng":77.16}',
        ],
    }

    with caplog.at_level(logging.WARNING):
        state = codec.decode(record)

    assert [s.name for s in state.stops] == ["Gate", "Stop 2", "Park"]
    assert state.stops[1].position == FALLBACK_STOP_POSITION
    assert "Could not decode stop 2" in caplog.text


@pytest.mark.parametrize(
    "entry",
    [
        '["not", "an", "object"]',
        '{"name":"No lat","lng":77.1}',
        '{"name":"Bad lat","lat":"north","lng":77.1}',
        '{"name":"Off map","lat":128.6,"lng":77.1}',
        '{"name":"Null lng","lat":28.6,"lng":null}',
        42,
    ],
)
def test_invalid_stop_shapes_become_placeholders(codec: RouteRecordCodec, entry: object) -> None:
    """Given a stop that is not a valid coordinate object, when decoding, then decoding still succeeds."""
    state = codec.decode({"stops": [entry]})

    assert state.stops[0].name == "Stop 1"
    assert state.stops[0].position == FALLBACK_STOP_POSITION


def test_missing_stop_name_gets_default(codec: RouteRecordCodec) -> None:
    """Given a stop without a name, when decoding, then it is named after its position."""
    state = codec.decode({"stops": ['{"lat":28.6,"lng":77.1}', '{"name":"","lat":28.7,"lng":77.2}']})

    assert [s.name for s in state.stops] == ["Stop 1", "Stop 2"]
    assert state.stops[0].position == Coordinate(28.6, 77.1)


def test_stop_objects_are_accepted(codec: RouteRecordCodec) -> None:
    """Given stops stored as objects rather than strings, when decoding, then they are read as is."""
    state = codec.decode({"stops": [{"name": "Gate", "lat": 28.68, "lng": 77.12}]})

    assert state.stops[0].name == "Gate"
    assert state.stops[0].position == Coordinate(28.68, 77.12)


def test_custom_fallback_position(codec: RouteRecordCodec) -> None:
    """Given a configured fallback, when a stop is malformed, then the fallback is used."""
    fallback = Coordinate(48.137, 11.575)
    custom = RouteRecordCodec(fallback_position=fallback)

    state = custom.decode({"stops": ["{}"]})

    assert state.stops[0].position == fallback


def test_missing_fare_uses_default() -> None:
    """Given a record without a rate, when decoding, then the default rate is used."""
    codec = RouteRecordCodec(default_fare_per_km=7.5)

    assert codec.decode({}).fare_per_km == 7.5
    assert codec.decode({"fare_per_km": 0}).fare_per_km == 7.5
    assert codec.decode({"fare_per_km": 3}).fare_per_km == 3.0


def test_missing_route_type_defaults_to_shift_start(codec: RouteRecordCodec) -> None:
    """Given a record without a route type, when decoding, then it is a to-school route."""
    assert codec.decode({"route_type": None}).direction is RouteDirection.TO_SCHOOL


def test_unknown_route_type_is_rejected(codec: RouteRecordCodec) -> None:
    """Given an unknown route type, when decoding, then a validation error is raised."""
    with pytest.raises(ValidationError):
        codec.decode({"route_type": "midday"})


def test_route_coordinates_as_pairs_are_accepted(codec: RouteRecordCodec) -> None:
    """Given route coordinates stored as [lat, lng] pairs, when decoding, then they become the road path."""
    state = codec.decode({"route_coordinates": [[28.70, 77.10], [28.61, 77.20]]})

    assert state.road_polyline == (Coordinate(28.70, 77.10), Coordinate(28.61, 77.20))
    assert state.road_distance_meters is not None
    assert state.road_distance_meters > 0


def test_hydrated_anchor_is_kept_when_school_is_supplied(codec: RouteRecordCodec) -> None:
    """Given a stored end that differs from the school, when decoding with the school, then it is kept."""
    stored_end = Coordinate(28.62, 77.21)
    record = {
        "route_type": "shift_start",
        "start_coordinates": {"lat": HOME.latitude, "lng": HOME.longitude},
        "end_coordinates": {"lat": stored_end.latitude, "lng": stored_end.longitude},
    }

    state = codec.decode(record, school_location=SCHOOL)

    assert state.end == stored_end
    assert state.school_location == SCHOOL


def test_out_of_range_route_coordinates_are_dropped(
    codec: RouteRecordCodec, caplog: pytest.LogCaptureFixture
) -> None:
    """Given a polyline stored longitude first, when decoding, then the route loads without a road path."""
    record = {
        "stops": ['{"name":"Gate","lat":37.77,"lng":-122.41}'],
        "route_coordinates": [[-122.41, 37.77], [-122.40, 37.78]],
    }

    with caplog.at_level(logging.WARNING):
        state = codec.decode(record)

    assert state.road_polyline is None
    assert state.stops[0].name == "Gate"
    assert "Ignoring stored route coordinates" in caplog.text
    assert codec.encode(state)["route_coordinates"] == [{"lat": 37.77, "lng": -122.41}]


def test_out_of_range_anchor_is_left_unset(
    codec: RouteRecordCodec, caplog: pytest.LogCaptureFixture
) -> None:
    """Given a stored start outside the valid range, when decoding, then it is unset and the end is kept."""
    record = {
        "start_coordinates": {"lat": 177.10, "lng": 28.70},
        "end_coordinates": {"lat": SCHOOL.latitude, "lng": SCHOOL.longitude},
    }

    with caplog.at_level(logging.WARNING):
        state = codec.decode(record, school_location=SCHOOL)

    assert state.start is None
    assert state.end == SCHOOL
    assert "Ignoring stored start point" in caplog.text
