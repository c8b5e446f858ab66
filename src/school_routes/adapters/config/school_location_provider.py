"""School location provider backed by application configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from school_routes.domain.models import Coordinate

if TYPE_CHECKING:
    from school_routes.adapters.config.app_config import AppConfig


class ConfiguredSchoolLocationProvider:
    """Reads the school location from AppConfig."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    async def get_school_location(self) -> Coordinate | None:
        """Return the configured school coordinate, or None if not set."""
        if self._config.school_latitude is None or self._config.school_longitude is None:
            return None
        return Coordinate(
            latitude=self._config.school_latitude,
            longitude=self._config.school_longitude,
        )
