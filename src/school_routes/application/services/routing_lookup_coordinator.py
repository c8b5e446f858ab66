"""Debounced, token-ordered road-route lookups for an editing session."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from school_routes.domain.models import RoutingRequest

if TYPE_CHECKING:
    from school_routes.domain.ports import RoutingLookup
    from school_routes.domain.route_state import RouteState

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3
MIN_WAYPOINTS = 2


class CoordinatorPhase(Enum):
    """Where the coordinator is in its lookup cycle."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    AWAITING_RESPONSE = "awaiting_response"


class RoutingLookupCoordinator:
    """Turns a stream of route edits into road-route lookups.

    Two rules keep the displayed path consistent with the edits:

    - Every change restarts the debounce window, so a burst of edits results
      in one lookup made with the latest waypoints.
    - Every lookup carries a token. Only the response to the highest token
      issued so far may touch the route state; earlier responses that arrive
      late are dropped.

    Restarting the window cancels only the timer. Lookups already in flight
    run to completion and are filtered by their token.
    """

    def __init__(
        self,
        route_lookup: RoutingLookup,
        route_state: RouteState,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        """Initialize the coordinator.

        Args:
            route_lookup: Port used to resolve road routes.
            route_state: The route whose polyline is kept up to date.
            debounce_seconds: Quiet period after the last change before a lookup.
        """
        self.route_lookup = route_lookup
        self.route_state = route_state
        self.debounce_seconds = debounce_seconds
        self.discarded_responses = 0
        self._highest_token = 0
        self._debounce_task: asyncio.Task[None] | None = None
        self._latest_lookup: asyncio.Task[None] | None = None
        self._lookup_tasks: set[asyncio.Task[None]] = set()

    @property
    def highest_token(self) -> int:
        """The most recent token handed out (0 before the first lookup)."""
        return self._highest_token

    @property
    def phase(self) -> CoordinatorPhase:
        if self._debounce_task is not None and not self._debounce_task.done():
            return CoordinatorPhase.DEBOUNCING
        if self._latest_lookup is not None and not self._latest_lookup.done():
            return CoordinatorPhase.AWAITING_RESPONSE
        return CoordinatorPhase.IDLE

    def notify_changed(self) -> None:
        """Record that anchors or stops changed and (re)start the debounce window.

        Must be called from a running event loop.
        """
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
            logger.debug("Route changed during debounce window, restarting timer")
        self._debounce_task = asyncio.create_task(self._debounce_then_lookup())

    async def flush(self) -> None:
        """Wait until no debounce window is open and no lookup is in flight."""
        while True:
            pending = self._pending_tasks()
            if not pending:
                return
            await asyncio.wait(pending)

    async def stop(self) -> None:
        """Cancel the debounce timer and all in-flight lookups."""
        pending = self._pending_tasks()
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if pending:
            logger.info(f"Routing coordinator stopped, cancelled {len(pending)} task(s)")

    def _pending_tasks(self) -> list[asyncio.Task[None]]:
        tasks = [task for task in self._lookup_tasks if not task.done()]
        if self._debounce_task is not None and not self._debounce_task.done():
            tasks.append(self._debounce_task)
        return tasks

    async def _debounce_then_lookup(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._issue_lookup()

    def _issue_lookup(self) -> None:
        waypoints = self.route_state.waypoints()
        if len(waypoints) < MIN_WAYPOINTS:
            # Advance the token so a response still in flight cannot resurrect a path
            self._highest_token += 1
            self._latest_lookup = None
            self.route_state.clear_road_polyline()
            logger.debug(f"Only {len(waypoints)} waypoint(s), cleared road polyline")
            return

        self._highest_token += 1
        request = RoutingRequest(waypoints=tuple(waypoints), request_token=self._highest_token)
        task = asyncio.create_task(self._run_lookup(request))
        self._lookup_tasks.add(task)
        task.add_done_callback(self._lookup_tasks.discard)
        self._latest_lookup = task

    async def _run_lookup(self, request: RoutingRequest) -> None:
        logger.debug(
            f"Routing lookup #{request.request_token} for {len(request.waypoints)} waypoints"
        )
        try:
            route = await self.route_lookup.lookup_route(list(request.waypoints))
        except Exception as e:
            if self._is_superseded(request):
                self._discard(request, "failure")
                return
            # No automatic retry; the next edit triggers a fresh lookup
            logger.warning(
                f"Routing lookup #{request.request_token} failed, "
                f"falling back to straight-line display: {e}"
            )
            self.route_state.clear_road_polyline()
            return

        if self._is_superseded(request):
            self._discard(request, "response")
            return
        self.route_state.apply_road_route(route)

    def _is_superseded(self, request: RoutingRequest) -> bool:
        return request.request_token != self._highest_token

    def _discard(self, request: RoutingRequest, outcome: str) -> None:
        self.discarded_responses += 1
        logger.debug(
            f"Discarded stale routing {outcome} #{request.request_token} "
            f"(latest is #{self._highest_token})"
        )
