"""School location port."""

from typing import Protocol

from school_routes.domain.models import Coordinate


class SchoolLocationProvider(Protocol):
    """Port for looking up the configured school location."""

    async def get_school_location(self) -> Coordinate | None:
        """Return the school coordinate, or None if it is not configured."""
        ...
