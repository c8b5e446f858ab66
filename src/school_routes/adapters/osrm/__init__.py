"""OSRM routing engine adapters."""

from school_routes.adapters.osrm.osrm_route_lookup import OsrmRouteLookup
from school_routes.adapters.osrm.segmented_route_lookup import SegmentedRouteLookup

__all__ = ["OsrmRouteLookup", "SegmentedRouteLookup"]
