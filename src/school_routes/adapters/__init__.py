"""Adapters layer - external system integrations."""

from school_routes.adapters.config import AppConfig, ConfiguredSchoolLocationProvider
from school_routes.adapters.osrm import OsrmRouteLookup, SegmentedRouteLookup
from school_routes.adapters.persistence import PersistedRouteRecord, RouteRecordCodec

__all__ = [
    "AppConfig",
    "ConfiguredSchoolLocationProvider",
    "OsrmRouteLookup",
    "PersistedRouteRecord",
    "RouteRecordCodec",
    "SegmentedRouteLookup",
]
