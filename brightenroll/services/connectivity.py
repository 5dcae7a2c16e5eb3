"""
Connectivity Service

Tracks whether the network (and therefore the cloud store) is reachable.
Reachability is probed with a lightweight HTTP request; monitoring polls the
probe in the background and notifies listeners when the state flips.
"""

import asyncio
import logging
from typing import Callable, List, Optional

import aiohttp

from brightenroll.core.config import settings

logger = logging.getLogger(__name__)


ConnectivityListener = Callable[[bool], None]


class ConnectivityService:
    """Network reachability monitor used as a gate by the sync service."""

    def __init__(
        self,
        probe_url: str = None,
        timeout_seconds: float = None,
        poll_interval_seconds: int = None,
        initially_connected: bool = False
    ):
        self.probe_url = probe_url or settings.CONNECTIVITY_PROBE_URL
        self.timeout_seconds = timeout_seconds or settings.CONNECTIVITY_TIMEOUT_SECONDS
        self.poll_interval_seconds = poll_interval_seconds or settings.CONNECTIVITY_POLL_INTERVAL_SECONDS

        self._is_connected = initially_connected
        self._listeners: List[ConnectivityListener] = []
        self._monitor_task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    @property
    def is_monitoring(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    def add_listener(self, listener: ConnectivityListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ConnectivityListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_connected(self, is_connected: bool) -> None:
        if self._is_connected == is_connected:
            return
        self._is_connected = is_connected
        logger.info(f"Connectivity changed: {'online' if is_connected else 'offline'}")
        for listener in list(self._listeners):
            try:
                listener(is_connected)
            except Exception as e:
                logger.error(f"Connectivity listener failed: {e}")

    async def _probe(self) -> bool:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.head(self.probe_url, allow_redirects=False):
                # Any HTTP response at all means the network is reachable
                return True

    async def check_connectivity(self) -> bool:
        """Probe the network once and update ``is_connected``."""
        try:
            is_connected = await self._probe()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"Connectivity probe to {self.probe_url} failed: {e}")
            is_connected = False
        except Exception as e:
            logger.warning(f"Unexpected error probing {self.probe_url}, assuming offline: {e}")
            is_connected = False

        self._set_connected(is_connected)
        return is_connected

    async def start_monitoring(self) -> None:
        if self.is_monitoring:
            return

        self._shutdown_event.clear()
        await self.check_connectivity()
        self._monitor_task = asyncio.create_task(self._monitor_loop())
        logger.info("Connectivity monitoring started")

    async def stop_monitoring(self) -> None:
        if not self.is_monitoring:
            return

        self._shutdown_event.set()
        self._monitor_task.cancel()
        try:
            await self._monitor_task
        except asyncio.CancelledError:
            pass
        self._monitor_task = None
        logger.info("Connectivity monitoring stopped")

    async def _monitor_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=self.poll_interval_seconds
                )
                break  # Shutdown event was set
            except asyncio.TimeoutError:
                pass

            try:
                await self.check_connectivity()
            except Exception as e:
                # Keep polling after unexpected errors
                logger.error(f"Error in connectivity monitor loop: {e}")
