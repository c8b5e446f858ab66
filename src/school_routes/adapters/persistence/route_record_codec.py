"""Conversion between RouteState and the persisted route record."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from school_routes.adapters.persistence.route_record import LatLng, PersistedRouteRecord
from school_routes.domain.geo_math import path_length_meters
from school_routes.domain.models import Coordinate, RoadRoute, RouteDirection
from school_routes.domain.route_state import DEFAULT_FARE_PER_KM, RouteState

if TYPE_CHECKING:
    from school_routes.adapters.config.app_config import AppConfig
    from school_routes.domain.contracts.fare_policy import FarePolicyProtocol

logger = logging.getLogger(__name__)

# Where undecodable stops are placed so they stay visible and editable
FALLBACK_STOP_POSITION = Coordinate(latitude=28.6139, longitude=77.2090)


class RouteRecordCodec:
    """Decodes persisted route records into RouteState and back.

    Stops are stored as a list of independently JSON-encoded strings. Existing
    records depend on that shape, so it is kept for new records as well.
    Decoding is total: a stop that cannot be read becomes a placeholder at a
    fixed position instead of failing the whole route.
    """

    def __init__(
        self,
        default_fare_per_km: float = DEFAULT_FARE_PER_KM,
        fallback_position: Coordinate = FALLBACK_STOP_POSITION,
        fare_policy: FarePolicyProtocol | None = None,
    ) -> None:
        """Initialize the codec.

        Args:
            default_fare_per_km: Rate used when a record has none.
            fallback_position: Position given to stops that cannot be decoded.
            fare_policy: Fare strategy for decoded states.
        """
        self.default_fare_per_km = default_fare_per_km
        self.fallback_position = fallback_position
        self.fare_policy = fare_policy

    @classmethod
    def from_config(cls, config: AppConfig) -> RouteRecordCodec:
        return cls(
            default_fare_per_km=config.default_fare_per_km,
            fallback_position=Coordinate(
                latitude=config.fallback_stop_latitude,
                longitude=config.fallback_stop_longitude,
            ),
        )

    def decode(
        self,
        record: Mapping[str, Any] | PersistedRouteRecord,
        school_location: Coordinate | None = None,
    ) -> RouteState:
        """Hydrate a RouteState from a persisted record.

        Raises:
            pydantic.ValidationError: If the record structure itself is invalid.
        """
        if not isinstance(record, PersistedRouteRecord):
            record = PersistedRouteRecord.model_validate(record)

        stops = [self.decode_stop(entry, index) for index, entry in enumerate(record.stops)]

        road_route = self._decode_road_route(record.route_coordinates)

        return RouteState.hydrate(
            direction=RouteDirection(record.route_type),
            fare_per_km=record.fare_per_km or self.default_fare_per_km,
            start=self._decode_anchor(record.start_coordinates, "start"),
            end=self._decode_anchor(record.end_coordinates, "end"),
            stops=stops,
            road_route=road_route,
            map_bounds=record.map_bounds,
            school_location=school_location,
            fare_policy=self.fare_policy,
        )

    @staticmethod
    def _decode_anchor(point: LatLng | None, label: str) -> Coordinate | None:
        """Anchors outside the WGS-84 range are left unset for the user to place again."""
        if point is None:
            return None
        try:
            return _to_coordinate(point)
        except ValueError as e:
            logger.warning(f"Ignoring stored {label} point: {e}")
            return None

    @staticmethod
    def _decode_road_route(points: list[LatLng]) -> RoadRoute | None:
        """The stored polyline is display-only; an unusable one is dropped and re-fetched later."""
        if not points:
            return None
        try:
            polyline = tuple(_to_coordinate(point) for point in points)
        except ValueError as e:
            logger.warning(f"Ignoring stored route coordinates, using straight lines: {e}")
            return None
        return RoadRoute(polyline=polyline, distance_meters=path_length_meters(polyline))

    def decode_stop(self, entry: Any, index: int) -> tuple[str, Coordinate]:
        """Decode one stored stop into (name, position), substituting a placeholder if malformed."""
        default_name = f"Stop {index + 1}"
        try:
            data = json.loads(entry) if isinstance(entry, str) else entry
            if not isinstance(data, Mapping):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            position = Coordinate(latitude=float(data["lat"]), longitude=float(data["lng"]))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Could not decode stop {index + 1}, using placeholder: {e!r}")
            return default_name, self.fallback_position

        name = data.get("name")
        return (name if isinstance(name, str) and name else default_name), position

    def encode(self, state: RouteState) -> dict[str, Any]:
        """Build the persisted record for a route state.

        Every stop is written as its own compact JSON string. The road polyline
        is stored when known, otherwise the raw waypoints.
        """
        metrics = state.recompute_derived_metrics()
        path = state.road_polyline if state.road_polyline else state.waypoints()
        record = PersistedRouteRecord(
            route_type=state.direction.value,
            start_coordinates=_to_optional_lat_lng(state.start),
            end_coordinates=_to_optional_lat_lng(state.end),
            stops=[
                json.dumps(
                    {
                        "name": stop.name,
                        "lat": stop.position.latitude,
                        "lng": stop.position.longitude,
                    },
                    separators=(",", ":"),
                    ensure_ascii=False,
                )
                for stop in state.stops
            ],
            route_coordinates=[_to_lat_lng(point) for point in path],
            map_bounds=dict(state.map_bounds) if state.map_bounds is not None else None,
            fare_per_km=state.fare_per_km,
            fare_per_month=metrics.fare,
            max_distance_from_school=metrics.max_distance_from_school_meters,
        )
        return record.model_dump()


def _to_coordinate(point: LatLng) -> Coordinate:
    return Coordinate(latitude=point.lat, longitude=point.lng)


def _to_lat_lng(point: Coordinate) -> LatLng:
    return LatLng(lat=point.latitude, lng=point.longitude)


def _to_optional_lat_lng(point: Coordinate | None) -> LatLng | None:
    return None if point is None else _to_lat_lng(point)
