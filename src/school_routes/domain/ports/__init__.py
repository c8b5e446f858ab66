"""Ports (interfaces) for the ports-and-adapters architecture."""

from school_routes.domain.ports.routing_lookup import RoutingLookup
from school_routes.domain.ports.school_location_provider import SchoolLocationProvider

__all__ = [
    "RoutingLookup",
    "SchoolLocationProvider",
]
