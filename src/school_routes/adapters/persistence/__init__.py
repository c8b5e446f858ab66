"""Persisted route record adapters."""

from school_routes.adapters.persistence.route_record import LatLng, PersistedRouteRecord
from school_routes.adapters.persistence.route_record_codec import (
    FALLBACK_STOP_POSITION,
    RouteRecordCodec,
)

__all__ = [
    "FALLBACK_STOP_POSITION",
    "LatLng",
    "PersistedRouteRecord",
    "RouteRecordCodec",
]
