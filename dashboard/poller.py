"""
Dashboard poller for the WebPlot server.

Pulls ``/latest-webhook`` and ``/all-webhooks`` on a fixed interval and
publishes the result as an immutable ``DashboardState``. A failed tick is
logged and skipped; the previous state stays in place until the next
successful one.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from api.shared.logger import get_logger

from .sorting import sort_by_iteration

logger = get_logger(__name__)

LATEST_PATH = "/latest-webhook"
ALL_PATH = "/all-webhooks"

StateCallback = Callable[["DashboardState"], None]


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of the server data as last seen by the dashboard."""

    latest: Optional[Dict[str, Any]] = None
    history: Tuple[Dict[str, Any], ...] = ()
    updated_at: Optional[datetime] = None

    @property
    def has_data(self) -> bool:
        return self.latest is not None

    def sorted_history(self) -> List[Dict[str, Any]]:
        """History in iteration order, the canonical order for time-series plots."""
        return sort_by_iteration(self.history)


class PollError(Exception):
    """A response could not be turned into dashboard state."""


def _parse_latest(payload: Any) -> Optional[Dict[str, Any]]:
    """The latest record, or None for the server's "no data yet" message."""
    if not isinstance(payload, dict):
        raise PollError(f"Expected an object from {LATEST_PATH}, got {type(payload).__name__}")
    if "ID" not in payload:
        return None
    return payload


def _parse_history(payload: Any) -> Tuple[Dict[str, Any], ...]:
    if not isinstance(payload, list):
        raise PollError(f"Expected a list from {ALL_PATH}, got {type(payload).__name__}")
    return tuple(payload)


class WebhookPoller:
    """
    Periodically pulls the WebPlot query endpoints.

    Each tick issues both reads concurrently and waits for both before
    swapping in a new state. Every request carries a timeout so a stalled
    server cannot hold up the loop.
    """

    def __init__(
        self,
        base_url: str,
        interval: float = 2.0,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the poller.

        Args:
            base_url: Server root, e.g. ``http://localhost:3001``.
            interval: Seconds between ticks.
            timeout: Per-request timeout in seconds.
            client: Optional client to use; the poller does not close it.
        """
        self.base_url = base_url.rstrip("/")
        self.interval = interval
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._state = DashboardState()
        self._callbacks: List[StateCallback] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """Register a state listener. Returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _get_json(self, path: str) -> Any:
        response = await self._get_client().get(self.base_url + path, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def poll_once(self) -> bool:
        """Run a single tick.

        Returns:
            True if the state was updated, False if the tick was abandoned.
        """
        try:
            latest_payload, all_payload = await asyncio.gather(
                self._get_json(LATEST_PATH),
                self._get_json(ALL_PATH),
            )
            new_state = DashboardState(
                latest=_parse_latest(latest_payload),
                history=_parse_history(all_payload),
                updated_at=datetime.now(),
            )
        except (httpx.HTTPError, ValueError, PollError) as e:
            logger.error("Error fetching webhook data from %s: %s", self.base_url, e)
            return False

        self._state = new_state
        self._notify(new_state)
        return True

    def _notify(self, state: DashboardState) -> None:
        for callback in list(self._callbacks):
            try:
                callback(state)
            except Exception as e:
                logger.error("Error in dashboard state callback: %s", e)

    async def run(self) -> None:
        """Poll immediately, then every ``interval`` seconds until cancelled."""
        logger.info("Polling %s every %.1fs", self.base_url, self.interval)
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        """Start polling in a background task on the running loop."""
        if self.running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Stop polling and release the HTTP client if the poller created it."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WebhookPoller":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
