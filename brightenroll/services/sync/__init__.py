"""
Database Synchronization

Keeps the local (offline-capable) store and the cloud store converged by
copying rows per entity type, keyed by primary key.

Components:
- Table registry describing which entity types are synced and how
- Per-table upsert with directional last-write-wins
- Sync service with push, pull, full and incremental passes
- Sync status tracking for UI/API consumers
- Automatic sync scheduler
"""

from .errors import SyncError, TableSyncError
from .registry import SyncTable, SYNC_TABLES, EMPTINESS_PROBE_MODELS
from .upsert import upsert_table
from .state import SyncState, SyncPhase, SyncResult, SyncOutcome, SyncDirection
from .status import SyncStatusService, SyncStatusChanged
from .service import DatabaseSyncService
from .scheduler import AutoSyncScheduler

__all__ = [
    'SyncError',
    'TableSyncError',
    'SyncTable',
    'SYNC_TABLES',
    'EMPTINESS_PROBE_MODELS',
    'upsert_table',
    'SyncState',
    'SyncPhase',
    'SyncResult',
    'SyncOutcome',
    'SyncDirection',
    'SyncStatusService',
    'SyncStatusChanged',
    'DatabaseSyncService',
    'AutoSyncScheduler'
]
