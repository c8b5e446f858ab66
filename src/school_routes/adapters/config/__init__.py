"""Configuration adapters."""

from school_routes.adapters.config.app_config import AppConfig
from school_routes.adapters.config.school_location_provider import (
    ConfiguredSchoolLocationProvider,
)

__all__ = ["AppConfig", "ConfiguredSchoolLocationProvider"]
