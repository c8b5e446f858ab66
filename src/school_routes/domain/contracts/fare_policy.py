"""Protocol for turning a route distance into a fare."""

from typing import Protocol


class FarePolicyProtocol(Protocol):
    """Protocol for fare calculation strategies."""

    def calculate(self, max_distance_meters: float, fare_per_km: float) -> float:
        """Calculate the monthly fare.

        Args:
            max_distance_meters: Distance of the furthest route point from the school.
            fare_per_km: Rate charged per kilometer.

        Returns:
            The monthly fare.
        """
        ...
