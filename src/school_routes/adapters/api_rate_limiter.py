"""Rate limiter for outgoing routing-engine requests.

Public routing engines (the OSRM demo server in particular) ask clients to
stay around one request per second. All lookups against the same host share
one limiter, so several editing sessions in one process cannot exceed it
together.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import ClassVar

logger = logging.getLogger(__name__)


class RoutingRateLimiter:
    """Enforces a minimum spacing between requests to one routing host."""

    _instances: ClassVar[dict[str, RoutingRateLimiter]] = {}
    _registry_lock: ClassVar[asyncio.Lock | None] = None

    def __init__(self, host: str, min_delay_seconds: float = 1.0) -> None:
        """Initialize the rate limiter.

        Args:
            host: Routing host the limiter guards (for logging and sharing).
            min_delay_seconds: Minimum delay between requests in seconds.
        """
        self.host = host
        self.min_delay_seconds = min_delay_seconds
        self._next_allowed_at: float = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    async def for_host(cls, host: str, min_delay_seconds: float = 1.0) -> RoutingRateLimiter:
        """Get or create the shared limiter for a routing host."""
        if cls._registry_lock is None:
            cls._registry_lock = asyncio.Lock()

        async with cls._registry_lock:
            limiter = cls._instances.get(host)
            if limiter is None:
                limiter = cls(host, min_delay_seconds)
                cls._instances[host] = limiter
                logger.info(f"Rate limiting {host} to one request per {min_delay_seconds}s")
            return limiter

    async def acquire(self) -> None:
        """Wait until the next request to the host is allowed."""
        async with self._lock:
            wait_time = self._next_allowed_at - time.monotonic()
            if wait_time > 0:
                logger.debug(f"{self.host}: waiting {wait_time:.2f}s before next routing request")
                await asyncio.sleep(wait_time)
            self._next_allowed_at = time.monotonic() + self.min_delay_seconds

    async def __aenter__(self) -> RoutingRateLimiter:
        await self.acquire()
        return self

    async def __aexit__(
        self, _exc_type: type | None, _exc_val: Exception | None, _exc_tb: object
    ) -> None:
        """Nothing to release; spacing is time based."""
