"""
Sync pass state machine and typed pass results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class SyncPhase(str, Enum):
    """Two-state machine guarding overlapping sync passes."""
    IDLE = "idle"
    SYNCING = "syncing"


class SyncDirection(str, Enum):
    TO_CLOUD = "to_cloud"
    FROM_CLOUD = "from_cloud"
    FULL = "full"
    INCREMENTAL = "incremental"


class SyncOutcome(str, Enum):
    """How a sync attempt ended."""
    SUCCESS = "success"
    SKIPPED_OFFLINE = "skipped_offline"
    SKIPPED_ALREADY_RUNNING = "skipped_already_running"
    FAILED = "failed"


class SyncState:
    """
    In-process guard shared by every caller of one sync service.

    Transitions happen without an intervening await, so they are atomic with
    respect to the event loop. Separate processes are not coordinated.
    """

    def __init__(self):
        self._phase = SyncPhase.IDLE

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def is_syncing(self) -> bool:
        return self._phase == SyncPhase.SYNCING

    def try_acquire(self) -> bool:
        if self._phase == SyncPhase.SYNCING:
            return False
        self._phase = SyncPhase.SYNCING
        return True

    def release(self) -> None:
        self._phase = SyncPhase.IDLE


@dataclass
class SyncResult:
    """Result of one sync attempt."""
    direction: SyncDirection
    outcome: SyncOutcome = SyncOutcome.SUCCESS
    records_pushed: int = 0
    records_pulled: int = 0
    tables_pushed: Dict[str, int] = field(default_factory=dict)
    tables_pulled: Dict[str, int] = field(default_factory=dict)
    message: str = ""
    error: Optional[Exception] = None
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.outcome == SyncOutcome.SUCCESS

    @property
    def skipped(self) -> bool:
        return self.outcome in (SyncOutcome.SKIPPED_OFFLINE, SyncOutcome.SKIPPED_ALREADY_RUNNING)

    def finish(self, outcome: SyncOutcome, message: str, error: Optional[Exception] = None) -> "SyncResult":
        self.outcome = outcome
        self.message = message
        self.error = error
        self.completed_at = datetime.now()
        return self
