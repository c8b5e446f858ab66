"""Monthly fare derived from the furthest distance from the school."""

from school_routes.domain.contracts.fare_policy import FarePolicyProtocol


def monthly_fare(max_distance_meters: float, fare_per_km: float) -> float:
    """Fare is the per-km rate applied to the furthest distance in kilometers.

    The rate is not validated here; non-positive rates are rejected where the
    user enters them.
    """
    return fare_per_km * max_distance_meters / 1000


class FareCalculator(FarePolicyProtocol):
    """Default fare policy: rate times maximum distance from the school."""

    def calculate(self, max_distance_meters: float, fare_per_km: float) -> float:
        """Calculate the monthly fare."""
        return monthly_fare(max_distance_meters, fare_per_km)
