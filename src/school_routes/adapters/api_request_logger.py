"""Logging of outgoing routing requests when SCHOOL_ROUTES_LOG_REQUESTS is enabled."""

import logging
import os
from collections.abc import Sequence
from typing import Any

logger = logging.getLogger(__name__)

LOG_REQUESTS_ENV = "SCHOOL_ROUTES_LOG_REQUESTS"


def should_log_requests() -> bool:
    """Check whether request logging is enabled via the environment."""
    return os.getenv(LOG_REQUESTS_ENV, "").lower() == "true"


def _build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return f"{url}&{param_str}" if "?" in url else f"{url}?{param_str}"


def log_routing_request(
    url: str,
    params: dict[str, Any] | None = None,
    waypoints: Sequence[Any] | None = None,
) -> None:
    """Log a routing request if logging is enabled.

    Args:
        url: Request URL (coordinates are part of the path for OSRM).
        params: Query parameters (optional).
        waypoints: Waypoints the request was built from (optional, only counted).
    """
    if not should_log_requests():
        return

    log_parts = [f"GET {_build_url_with_params(url, params)}"]
    if waypoints is not None:
        log_parts.append(f"Waypoints: {len(waypoints)}")

    logger.info("Routing request:\n" + "\n".join(log_parts))
