"""Pydantic models for the persisted transport route record."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LatLng(BaseModel):
    """A coordinate as stored in route records."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class PersistedRouteRecord(BaseModel):
    """Route fields exchanged with the route persistence endpoints.

    Fields outside the planning core (route name, driver, vehicle, ...) are
    kept as extra fields so they survive a decode/encode cycle untouched.
    """

    model_config = ConfigDict(extra="allow")

    route_type: Literal["shift_start", "shift_end"] = "shift_start"
    start_coordinates: LatLng | None = None
    end_coordinates: LatLng | None = None
    # Each entry is an independently JSON-encoded {"name", "lat", "lng"} string
    stops: list[Any] = Field(default_factory=list)
    route_coordinates: list[LatLng] = Field(default_factory=list)
    map_bounds: dict[str, Any] | None = None  # UI-only, never interpreted
    fare_per_km: float | None = None
    fare_per_month: float | None = None
    max_distance_from_school: float | None = None

    @field_validator("route_type", mode="before")
    @classmethod
    def default_route_type(cls, v: Any) -> Any:
        """Older records may carry no route type; they were created as shift start routes."""
        return "shift_start" if v is None else v

    @field_validator("stops", "route_coordinates", mode="before")
    @classmethod
    def default_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("route_coordinates", mode="before")
    @classmethod
    def accept_lat_lng_pairs(cls, v: Any) -> Any:
        """Accept [lat, lng] pairs as written by the map widget alongside {lat, lng} objects."""
        if not isinstance(v, list):
            return v
        return [
            {"lat": point[0], "lng": point[1]}
            if isinstance(point, (list, tuple)) and len(point) == 2
            else point
            for point in v
        ]
