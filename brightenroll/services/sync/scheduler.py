"""
Background scheduler that runs a full sync at a fixed interval.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from brightenroll.core.config import settings
from brightenroll.services.connectivity import ConnectivityService
from brightenroll.services.sync.service import DatabaseSyncService
from brightenroll.services.sync.state import SyncResult
from brightenroll.services.sync.status import SyncStatusService

logger = logging.getLogger(__name__)


class AutoSyncScheduler:
    """
    Periodically pushes local changes and pulls cloud changes.

    A run is skipped while another sync is in progress, while offline, or
    when less than one interval has passed since the last successful run.
    """

    def __init__(
        self,
        sync_service: DatabaseSyncService,
        connectivity: ConnectivityService,
        status: SyncStatusService,
        interval_minutes: int = None,
        error_backoff_seconds: int = 60
    ):
        self.sync_service = sync_service
        self.connectivity = connectivity
        self.status = status
        self.interval = timedelta(minutes=interval_minutes or settings.AUTO_SYNC_INTERVAL_MINUTES)
        self.error_backoff_seconds = error_backoff_seconds

        self.last_sync_time: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            return

        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._scheduler_loop())
        logger.info(f"AutoSyncScheduler started. Sync interval: {self.interval}")

    async def stop(self) -> None:
        if not self.is_running:
            return

        self._shutdown_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("AutoSyncScheduler stopped")

    def should_sync(self, now: Optional[datetime] = None) -> bool:
        if self.sync_service.is_syncing:
            logger.debug("Sync already in progress, skipping")
            return False

        if not self.connectivity.is_connected:
            logger.debug("Offline, skipping sync")
            return False

        now = now or datetime.now()
        if self.last_sync_time is not None and now - self.last_sync_time < self.interval:
            logger.debug("Not enough time since last sync, skipping")
            return False

        return True

    async def perform_sync(self) -> SyncResult:
        logger.info("Starting automatic sync")
        result = await self.sync_service.full_sync()

        if result.success:
            self.last_sync_time = result.completed_at
            self.status.clear_errors()
            logger.info(
                f"Automatic sync completed successfully. "
                f"Pushed: {result.records_pushed}, Pulled: {result.records_pulled}"
            )
        elif result.skipped:
            logger.info(f"Automatic sync skipped: {result.message}")
        else:
            logger.warning(f"Automatic sync completed with errors: {result.message}")

        return result

    async def force_sync(self) -> SyncResult:
        return await self.perform_sync()

    async def _wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True if shutdown was requested meanwhile."""
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def _scheduler_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                if await self._wait(self.interval.total_seconds()):
                    break

                if self.should_sync():
                    await self.perform_sync()

            except Exception as e:
                logger.error(f"Error in AutoSyncScheduler loop: {e}")
                if await self._wait(self.error_backoff_seconds):
                    break
