"""Coordinate domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """A WGS-84 latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        # NaN compares false everywhere, so it passes through untouched
        if self.latitude < -90.0 or self.latitude > 90.0:
            raise ValueError(f"latitude out of range [-90, 90]: {self.latitude}")
        if self.longitude < -180.0 or self.longitude > 180.0:
            raise ValueError(f"longitude out of range [-180, 180]: {self.longitude}")
