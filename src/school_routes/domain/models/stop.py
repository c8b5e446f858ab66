"""Stop domain model."""

from dataclasses import dataclass

from school_routes.domain.models.coordinate import Coordinate


@dataclass(frozen=True)
class Stop:
    """An intermediate, user-placed point the vehicle visits in sequence.

    Immutable; RouteState replaces a stop when it is renamed.
    """

    id: str  # Generated by the owning RouteState, never reused within a session
    name: str
    position: Coordinate
