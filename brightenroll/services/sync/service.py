"""
Database Sync Service

Copies every registered entity type between the local (offline-capable)
store and the cloud store, one direction at a time:

- sync_to_cloud: local -> cloud
- sync_from_cloud: cloud -> local (bootstraps a new installation)
- full_sync: push then pull
- incremental_sync: push then pull, limited to recently modified rows

Each table is upserted by primary key and committed on its own; there is no
transaction spanning tables, no conflict detection and no delete propagation.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from brightenroll.core.config import settings
from brightenroll.core.database import Base
from brightenroll.services.connectivity import ConnectivityService
from brightenroll.services.sync.registry import SyncTable, SYNC_TABLES, EMPTINESS_PROBE_MODELS
from brightenroll.services.sync.state import SyncState, SyncResult, SyncDirection, SyncOutcome
from brightenroll.services.sync.status import SyncStatusService
from brightenroll.services.sync.upsert import upsert_table

logger = logging.getLogger(__name__)


class DatabaseSyncService:
    """
    Service for synchronizing the local and cloud stores.

    The plain entry points (``sync_to_cloud``, ``sync_from_cloud``) log and
    re-raise persistence errors. The ``try_*`` variants, ``full_sync`` and
    ``incremental_sync`` never raise; failures come back as a ``SyncResult``
    with outcome ``FAILED`` and the cause attached. Skips (offline, already
    running) are results in every case.
    """

    def __init__(
        self,
        local_sessionmaker: async_sessionmaker[AsyncSession],
        cloud_sessionmaker: async_sessionmaker[AsyncSession],
        connectivity: ConnectivityService,
        state: Optional[SyncState] = None,
        status: Optional[SyncStatusService] = None,
        tables: Optional[Sequence[SyncTable]] = None
    ):
        self.local_sessionmaker = local_sessionmaker
        self.cloud_sessionmaker = cloud_sessionmaker
        self.connectivity = connectivity
        self.state = state or SyncState()
        self.status = status
        self.tables: List[SyncTable] = list(tables if tables is not None else SYNC_TABLES)
        self._cloud_schema_ready = False

    @property
    def is_syncing(self) -> bool:
        return self.state.is_syncing

    async def sync_to_cloud(self) -> SyncResult:
        """Push every local row to the cloud store."""
        return await self._run(SyncDirection.TO_CLOUD, [SyncDirection.TO_CLOUD])

    async def try_sync_to_cloud(self) -> SyncResult:
        return await self._run(SyncDirection.TO_CLOUD, [SyncDirection.TO_CLOUD], raise_errors=False)

    async def sync_from_cloud(self) -> SyncResult:
        """Pull every cloud row into the local store."""
        return await self._run(SyncDirection.FROM_CLOUD, [SyncDirection.FROM_CLOUD])

    async def try_sync_from_cloud(self) -> SyncResult:
        return await self._run(SyncDirection.FROM_CLOUD, [SyncDirection.FROM_CLOUD], raise_errors=False)

    async def full_sync(self) -> SyncResult:
        """Push local changes, then pull cloud changes, under one guard."""
        return await self._run(
            SyncDirection.FULL,
            [SyncDirection.TO_CLOUD, SyncDirection.FROM_CLOUD],
            raise_errors=False
        )

    async def incremental_sync(self, since: Optional[datetime] = None) -> SyncResult:
        """
        Push then pull only rows modified at or after ``since``.

        Tables without a modification timestamp column are copied in full.
        Defaults to the last INCREMENTAL_SYNC_DEFAULT_DAYS days.
        """
        if since is None:
            since = datetime.now() - timedelta(days=settings.INCREMENTAL_SYNC_DEFAULT_DAYS)
        return await self._run(
            SyncDirection.INCREMENTAL,
            [SyncDirection.TO_CLOUD, SyncDirection.FROM_CLOUD],
            since=since,
            raise_errors=False
        )

    async def is_local_database_empty(self) -> bool:
        """True when the local store has no users, students or employee addresses."""
        try:
            async with self.local_sessionmaker() as session:
                for model in EMPTINESS_PROBE_MODELS:
                    result = await session.execute(select(model).limit(1))
                    if result.scalars().first() is not None:
                        return False
            return True
        except SQLAlchemyError as e:
            # If we can't check, assume it's not empty
            logger.error(f"Could not inspect local database: {e}")
            return False

    async def check_cloud_connection(self) -> bool:
        try:
            async with self.cloud_sessionmaker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to connect to cloud database: {e}")
            return False

    async def ensure_cloud_schema(self) -> None:
        """Create any missing cloud tables; runs at most once successfully."""
        if self._cloud_schema_ready:
            return

        async with self.cloud_sessionmaker() as session:
            connection = await session.connection()
            await connection.run_sync(Base.metadata.create_all)
            await session.commit()

        self._cloud_schema_ready = True
        logger.info("Cloud database schema is ready")

    async def _run(
        self,
        direction: SyncDirection,
        steps: List[SyncDirection],
        since: Optional[datetime] = None,
        raise_errors: bool = True
    ) -> SyncResult:
        result = SyncResult(direction=direction)

        if self.state.is_syncing:
            logger.warning("Sync already in progress, skipping...")
            return result.finish(SyncOutcome.SKIPPED_ALREADY_RUNNING, "Sync already in progress")

        if not self.connectivity.is_connected:
            logger.info(f"No internet connection, skipping {direction.value} sync")
            return result.finish(SyncOutcome.SKIPPED_OFFLINE, "No internet connection")

        self.state.try_acquire()
        if self.status:
            self.status.set_syncing(True)

        try:
            # The cloud store may have been unreachable when the app started
            await self.ensure_cloud_schema()

            for step in steps:
                counts = await self._sync_tables(step, since)
                if step == SyncDirection.TO_CLOUD:
                    result.tables_pushed = counts
                    result.records_pushed = sum(counts.values())
                else:
                    result.tables_pulled = counts
                    result.records_pulled = sum(counts.values())

            result.finish(
                SyncOutcome.SUCCESS,
                f"{direction.value} sync completed: {result.records_pushed} pushed, "
                f"{result.records_pulled} pulled"
            )
            logger.info(result.message)
            if self.status:
                self.status.update_last_sync_time(result.completed_at)
            return result

        except Exception as e:
            logger.error(f"Error during {direction.value} sync: {e}")
            if self.status:
                self.status.add_error(f"{direction.value} sync failed: {e}")
            if raise_errors:
                raise
            return result.finish(SyncOutcome.FAILED, f"Error during {direction.value} sync: {e}", e)

        finally:
            self.state.release()
            if self.status:
                self.status.set_syncing(False)

    async def _sync_tables(self, direction: SyncDirection, since: Optional[datetime]) -> Dict[str, int]:
        if direction == SyncDirection.TO_CLOUD:
            source_maker, destination_maker = self.local_sessionmaker, self.cloud_sessionmaker
        else:
            source_maker, destination_maker = self.cloud_sessionmaker, self.local_sessionmaker

        counts: Dict[str, int] = {}
        async with source_maker() as source, destination_maker() as destination:
            for table in self.tables:
                counts[table.name] = await upsert_table(
                    source, destination, table, direction.value, since=since
                )
        return counts
