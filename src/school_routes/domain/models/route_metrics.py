"""Derived route metrics model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteMetrics:
    """Distance and fare derived from the current route geometry."""

    max_distance_from_school_meters: float
    fare: float
