"""Shared fixtures: two throwaway SQLite stores built from the shared metadata."""

import pytest

from brightenroll.core.database import make_engine, make_sessionmaker, init_db
from brightenroll.services.connectivity import ConnectivityService
from brightenroll.services.sync import DatabaseSyncService, SyncState, SyncStatusService


@pytest.fixture
async def local_engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'local.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def cloud_engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'cloud.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def local_sessionmaker(local_engine):
    return make_sessionmaker(local_engine)


@pytest.fixture
def cloud_sessionmaker(cloud_engine):
    return make_sessionmaker(cloud_engine)


@pytest.fixture
def connectivity():
    """Online connectivity monitor that never probes the network."""
    return ConnectivityService(probe_url="http://probe.invalid", initially_connected=True)


@pytest.fixture
def sync_status():
    return SyncStatusService(max_errors=10)


@pytest.fixture
def sync_service(local_sessionmaker, cloud_sessionmaker, connectivity, sync_status):
    return DatabaseSyncService(
        local_sessionmaker,
        cloud_sessionmaker,
        connectivity,
        state=SyncState(),
        status=sync_status
    )
