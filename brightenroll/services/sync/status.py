"""
Sync Status Service

Tracks sync status (online, syncing, last sync time, recent errors) and
notifies listeners such as the API layer or UI when it changes.
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from brightenroll.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class SyncStatusChanged:
    """Snapshot delivered to status listeners."""
    is_online: bool
    is_syncing: bool
    last_sync_time: Optional[datetime]
    pending_operations_count: int


StatusListener = Callable[[SyncStatusChanged], None]


class SyncStatusService:
    """Process-wide sync status shared by the scheduler, API and sync service."""

    def __init__(self, max_errors: int = None):
        self._is_online = True
        self._is_syncing = False
        self._last_sync_time: Optional[datetime] = None
        self._pending_operations_count = 0
        self._errors = deque(maxlen=max_errors or settings.SYNC_STATUS_MAX_ERRORS)
        self._listeners: List[StatusListener] = []

    @property
    def is_online(self) -> bool:
        return self._is_online

    @property
    def is_syncing(self) -> bool:
        return self._is_syncing

    @property
    def last_sync_time(self) -> Optional[datetime]:
        return self._last_sync_time

    @property
    def pending_operations_count(self) -> int:
        return self._pending_operations_count

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_online(self, is_online: bool) -> None:
        if self._is_online != is_online:
            self._is_online = is_online
            self._notify()

    def set_syncing(self, is_syncing: bool) -> None:
        if self._is_syncing != is_syncing:
            self._is_syncing = is_syncing
            self._notify()

    def update_last_sync_time(self, time: datetime) -> None:
        self._last_sync_time = time
        self._notify()

    def add_error(self, error: str) -> None:
        # Oldest errors fall off once the cap is reached
        self._errors.append(error)
        self._notify()

    def clear_errors(self) -> None:
        self._errors.clear()
        self._notify()

    def update_pending_count(self, count: int) -> None:
        if self._pending_operations_count != count:
            self._pending_operations_count = count
            self._notify()

    def snapshot(self) -> SyncStatusChanged:
        return SyncStatusChanged(
            is_online=self._is_online,
            is_syncing=self._is_syncing,
            last_sync_time=self._last_sync_time,
            pending_operations_count=self._pending_operations_count
        )

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Sync status listener failed: {e}")
