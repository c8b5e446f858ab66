"""Road route domain model."""

from dataclasses import dataclass

from school_routes.domain.models.coordinate import Coordinate


@dataclass(frozen=True)
class RoadRoute:
    """A road-following path returned by a routing lookup."""

    polyline: tuple[Coordinate, ...]
    distance_meters: float
