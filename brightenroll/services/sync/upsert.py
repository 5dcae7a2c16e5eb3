"""
Per-table upsert between two stores.

Rows are keyed by primary key and copied with directional last-write-wins:
absent rows are inserted, present rows have every column overwritten.
Nothing is ever deleted from the destination.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from brightenroll.services.sync.errors import TableSyncError
from brightenroll.services.sync.registry import SyncTable

logger = logging.getLogger(__name__)


def build_source_query(table: SyncTable, since: Optional[datetime] = None):
    """Full-table select, narrowed to rows touched since ``since`` when possible."""
    query = select(table.model)
    if since is None:
        return query

    columns = table.watermark_columns
    if not columns:
        # No timestamp to compare against: fall back to a full scan
        return query
    if len(columns) == 1:
        return query.where(columns[0] >= since)
    return query.where(func.coalesce(*columns) >= since)


async def upsert_table(
    source: AsyncSession,
    destination: AsyncSession,
    table: SyncTable,
    direction: str,
    since: Optional[datetime] = None
) -> int:
    """
    Copy the rows of one table from ``source`` into ``destination``.

    Args:
        source: Session on the store being read
        destination: Session on the store being written
        table: Entity type to copy
        direction: Label used in logs and errors ("to_cloud" / "from_cloud")
        since: Only copy rows whose watermark is at or after this time

    Returns:
        Number of rows inserted or overwritten

    Raises:
        TableSyncError: on any database error; the destination batch is rolled back
    """
    try:
        result = await source.execute(build_source_query(table, since))
        rows = result.scalars().all()
        logger.debug(f"Syncing {table.name} ({direction}): found {len(rows)} source records")

        upserted = 0
        for row in rows:
            existing = await destination.get(table.model, table.identity(row))
            if existing is None:
                destination.add(table.copy(row))
            else:
                table.apply(existing, row)
            upserted += 1

        await destination.commit()

    except SQLAlchemyError as e:
        logger.error(f"Error syncing table {table.name} ({direction}): {e}")
        await destination.rollback()
        raise TableSyncError(table.name, direction, e) from e

    logger.info(f"Completed syncing {table.name} ({direction}): {upserted} records")
    return upserted
