"""Road routing lookup backed by an OSRM server.

Uses the OSRM HTTP route service:
GET {base_url}/route/v1/{profile}/{lng,lat;lng,lat;...}?overview=full&geometries=geojson
API documentation: https://project-osrm.org/docs/v5.24.0/api/#route-service
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import aiohttp

from school_routes.adapters.api_rate_limiter import RoutingRateLimiter
from school_routes.adapters.api_request_logger import log_routing_request
from school_routes.domain.errors import RoutingLookupError
from school_routes.domain.models import Coordinate, RoadRoute

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession

    from school_routes.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_OSRM_URL = "https://router.project-osrm.org"


class OsrmRouteLookup:
    """Resolves road routes through an OSRM server using aiohttp."""

    def __init__(
        self,
        session: ClientSession,
        base_url: str = DEFAULT_OSRM_URL,
        profile: str = "driving",
        timeout_seconds: float = 10.0,
        min_delay_seconds: float = 1.0,
    ) -> None:
        """Initialize the lookup.

        Args:
            session: Shared aiohttp session.
            base_url: OSRM server base URL.
            profile: OSRM profile ("driving", "walking", ...).
            timeout_seconds: Total timeout per request.
            min_delay_seconds: Minimum spacing between requests to the same host.
        """
        self._session = session
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout_seconds = timeout_seconds
        self.min_delay_seconds = min_delay_seconds
        self._rate_limiter: RoutingRateLimiter | None = None

    @classmethod
    def from_config(cls, session: ClientSession, config: AppConfig) -> OsrmRouteLookup:
        return cls(
            session,
            base_url=config.osrm_base_url,
            profile=config.osrm_profile,
            timeout_seconds=config.osrm_timeout_seconds,
            min_delay_seconds=config.osrm_min_delay_seconds,
        )

    async def _get_rate_limiter(self) -> RoutingRateLimiter:
        if self._rate_limiter is None:
            host = urlparse(self.base_url).netloc or self.base_url
            self._rate_limiter = await RoutingRateLimiter.for_host(host, self.min_delay_seconds)
        return self._rate_limiter

    @staticmethod
    def format_coordinates(waypoints: list[Coordinate]) -> str:
        """Convert waypoints to OSRM's 'lng,lat;lng,lat' path segment."""
        return ";".join(f"{point.longitude},{point.latitude}" for point in waypoints)

    def build_url(self, waypoints: list[Coordinate]) -> str:
        return f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(waypoints)}"

    async def lookup_route(self, waypoints: list[Coordinate]) -> RoadRoute:
        """Fetch the road route through the waypoints in order.

        Raises:
            RoutingLookupError: On fewer than two waypoints, HTTP or transport
                errors, timeouts, or an OSRM response without a route.
        """
        if len(waypoints) < 2:
            raise RoutingLookupError("At least two waypoints are required to compute a route")

        url = self.build_url(waypoints)
        params = {"overview": "full", "geometries": "geojson"}
        log_routing_request(url, params, waypoints)

        rate_limiter = await self._get_rate_limiter()
        await rate_limiter.acquire()

        try:
            async with self._session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                return await self._handle_route_response(response, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RoutingLookupError(f"OSRM request to {self.base_url} failed: {e!r}") from e

    async def _handle_route_response(self, response: ClientResponse, url: str) -> RoadRoute:
        if response.status != 200:
            error_text = await response.text()
            logger.warning(f"OSRM returned status {response.status} for {url}: {error_text[:200]}")
            raise RoutingLookupError(f"OSRM returned status {response.status}")

        try:
            data = await response.json()
            return self._parse_route(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise RoutingLookupError(f"Unreadable OSRM response from {url}: {e!r}") from e

    @staticmethod
    def _parse_route(data: Any) -> RoadRoute:
        """Convert the first OSRM route into a RoadRoute.

        GeoJSON coordinates come as [lng, lat] pairs.
        """
        if not isinstance(data, dict) or data.get("code") != "Ok":
            message = data.get("message", "Unknown error") if isinstance(data, dict) else data
            raise RoutingLookupError(f"OSRM error: {message}")

        routes = data.get("routes")
        if not isinstance(routes, list) or not routes:
            raise RoutingLookupError("OSRM returned no routes")

        route = routes[0]
        if not isinstance(route, dict):
            raise RoutingLookupError(f"Malformed OSRM route: {route!r}")
        geometry = route.get("geometry") or {}
        try:
            polyline = tuple(
                Coordinate(latitude=float(lat), longitude=float(lng))
                for lng, lat in geometry.get("coordinates", [])
            )
            distance = float(route.get("distance", 0.0))
        except (TypeError, ValueError) as e:
            raise RoutingLookupError(f"Malformed OSRM route geometry: {e}") from e

        if not polyline:
            raise RoutingLookupError("OSRM route has no geometry")

        return RoadRoute(polyline=polyline, distance_meters=distance)
