"""Tests for DatabaseSyncService."""

import asyncio
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, Mock, patch

from sqlalchemy.exc import OperationalError

from brightenroll.core.database import make_engine, make_sessionmaker
from brightenroll.models import User, Guardian, Student, StudentRequirement, Fee
from brightenroll.services.connectivity import ConnectivityService
from brightenroll.services.sync.upsert import upsert_table
from brightenroll.services.sync import (
    DatabaseSyncService, SyncState, SyncOutcome, SyncDirection, TableSyncError, SYNC_TABLES
)

from factories import (
    add_rows, fetch_rows, make_user, make_guardian, make_student, make_requirement,
    make_employee_address, make_grade_level, make_fee
)


async def snapshot(sessionmaker):
    return {table.name: await fetch_rows(sessionmaker, table.model) for table in SYNC_TABLES}


@pytest.fixture
async def seeded_local(local_sessionmaker):
    await add_rows(
        local_sessionmaker,
        make_user(1),
        make_guardian(42),
        make_student("STU-0001", guardian_id=42),
        make_requirement(1, "STU-0001"),
        make_employee_address(1, user_id=1),
        make_grade_level(1),
        make_fee(1, grade_level_id=1),
    )
    return local_sessionmaker


class TestSyncToCloud:
    """Test cases for pushing local rows to the cloud store."""

    @pytest.mark.asyncio
    async def test_copies_every_table(self, sync_service, seeded_local, cloud_sessionmaker):
        result = await sync_service.sync_to_cloud()

        assert result.outcome == SyncOutcome.SUCCESS
        assert result.direction == SyncDirection.TO_CLOUD
        assert result.records_pushed == 7
        assert result.records_pulled == 0
        assert result.tables_pushed["tbl_Students"] == 1
        assert result.completed_at is not None
        assert await snapshot(cloud_sessionmaker) == await snapshot(seeded_local)

    @pytest.mark.asyncio
    async def test_idempotent(self, sync_service, seeded_local, cloud_sessionmaker):
        await sync_service.sync_to_cloud()
        first = await snapshot(cloud_sessionmaker)

        await sync_service.sync_to_cloud()
        second = await snapshot(cloud_sessionmaker)

        assert first == second

    @pytest.mark.asyncio
    async def test_local_values_win(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(local_sessionmaker, make_guardian(42, contact_num="09990000000"))
        await add_rows(cloud_sessionmaker, make_guardian(42, contact_num="09181112222"))

        await sync_service.sync_to_cloud()

        rows = await fetch_rows(cloud_sessionmaker, Guardian)
        assert rows == await fetch_rows(local_sessionmaker, Guardian)

    @pytest.mark.asyncio
    async def test_deletes_are_not_propagated(self, sync_service, seeded_local, cloud_sessionmaker):
        await sync_service.sync_to_cloud()

        async with seeded_local() as session:
            requirement = await session.get(StudentRequirement, 1)
            await session.delete(requirement)
            await session.commit()

        await sync_service.sync_to_cloud()

        assert await fetch_rows(seeded_local, StudentRequirement) == []
        cloud_requirements = await fetch_rows(cloud_sessionmaker, StudentRequirement)
        assert [row["requirement_id"] for row in cloud_requirements] == [1]

    @pytest.mark.asyncio
    async def test_string_keyed_student(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(local_sessionmaker, make_guardian(42), make_student("STU-0001", status="Enrolled"))

        result = await sync_service.sync_to_cloud()

        assert result.success
        students = await fetch_rows(cloud_sessionmaker, Student)
        assert students == await fetch_rows(local_sessionmaker, Student)
        assert students[0]["student_id"] == "STU-0001"

    @pytest.mark.asyncio
    async def test_integer_keyed_guardian(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(local_sessionmaker, make_guardian(42, relation_to_student="Mother"))

        result = await sync_service.sync_to_cloud()

        assert result.success
        guardians = await fetch_rows(cloud_sessionmaker, Guardian)
        assert guardians == await fetch_rows(local_sessionmaker, Guardian)
        assert guardians[0]["guardian_id"] == 42

    @pytest.mark.asyncio
    async def test_updates_status(self, sync_service, sync_status, seeded_local):
        result = await sync_service.sync_to_cloud()

        assert sync_status.last_sync_time == result.completed_at
        assert sync_status.is_syncing is False
        assert sync_status.errors == []


class TestCloudSchema:
    """Test cases for creating the cloud schema on first contact."""

    @pytest.fixture
    async def blank_cloud_sessionmaker(self, tmp_path):
        engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'blank_cloud.db'}")
        yield make_sessionmaker(engine)
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_first_sync_creates_missing_cloud_tables(
        self, seeded_local, blank_cloud_sessionmaker, connectivity
    ):
        service = DatabaseSyncService(seeded_local, blank_cloud_sessionmaker, connectivity)

        result = await service.sync_to_cloud()

        assert result.outcome == SyncOutcome.SUCCESS
        assert result.records_pushed == 7
        assert await snapshot(blank_cloud_sessionmaker) == await snapshot(seeded_local)

    @pytest.mark.asyncio
    async def test_schema_created_after_offline_start(
        self, seeded_local, blank_cloud_sessionmaker
    ):
        offline = ConnectivityService(probe_url="http://probe.invalid", initially_connected=False)
        service = DatabaseSyncService(seeded_local, blank_cloud_sessionmaker, offline)

        assert (await service.full_sync()).outcome == SyncOutcome.SKIPPED_OFFLINE

        with patch.object(offline, "_probe", AsyncMock(return_value=True)):
            await offline.check_connectivity()

        result = await service.full_sync()

        assert result.outcome == SyncOutcome.SUCCESS
        assert len(await fetch_rows(blank_cloud_sessionmaker, User)) == 1

    @pytest.mark.asyncio
    async def test_schema_failure_is_a_failed_attempt(self, seeded_local, connectivity):
        broken_maker = Mock(side_effect=OperationalError("connect", {}, Exception("unable to open database")))
        service = DatabaseSyncService(seeded_local, broken_maker, connectivity)

        result = await service.try_sync_to_cloud()

        assert result.outcome == SyncOutcome.FAILED
        assert not service.is_syncing

    @pytest.mark.asyncio
    async def test_schema_created_only_once(self, sync_service):
        await sync_service.ensure_cloud_schema()

        with patch("brightenroll.services.sync.service.Base") as base:
            await sync_service.full_sync()

        base.metadata.create_all.assert_not_called()


class TestSyncFromCloud:
    """Test cases for pulling cloud rows into the local store."""

    @pytest.mark.asyncio
    async def test_bootstraps_empty_local_store(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(cloud_sessionmaker, make_user(5), make_guardian(42), make_student("STU-0002"))

        assert await sync_service.is_local_database_empty() is True

        result = await sync_service.sync_from_cloud()

        assert result.outcome == SyncOutcome.SUCCESS
        assert result.records_pulled == 3
        assert result.records_pushed == 0
        assert await sync_service.is_local_database_empty() is False
        assert await fetch_rows(local_sessionmaker, User) == await fetch_rows(cloud_sessionmaker, User)

    @pytest.mark.asyncio
    async def test_cloud_values_win(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(local_sessionmaker, make_user(1, status="active"))
        await add_rows(cloud_sessionmaker, make_user(1, status="inactive"))

        await sync_service.sync_from_cloud()

        rows = await fetch_rows(local_sessionmaker, User)
        assert rows[0]["status"] == "inactive"


class TestSyncGuards:
    """Test cases for the already-running and connectivity guards."""

    @pytest.mark.asyncio
    async def test_skips_when_already_syncing(self, sync_service, seeded_local, cloud_sessionmaker):
        assert sync_service.state.try_acquire()

        result = await sync_service.sync_to_cloud()

        assert result.outcome == SyncOutcome.SKIPPED_ALREADY_RUNNING
        assert result.skipped
        assert not result.success
        assert await fetch_rows(cloud_sessionmaker, User) == []
        # The skipped call must not release a guard it never held
        assert sync_service.state.is_syncing

    @pytest.mark.asyncio
    async def test_overlapping_call_returns_immediately(self, sync_service, seeded_local, cloud_sessionmaker):
        started = asyncio.Event()
        release = asyncio.Event()
        calls = []

        async def slow_sync_tables(direction, since):
            calls.append(direction)
            started.set()
            await release.wait()
            return {}

        with patch.object(sync_service, "_sync_tables", side_effect=slow_sync_tables):
            first = asyncio.create_task(sync_service.sync_to_cloud())
            await started.wait()

            second = await sync_service.sync_to_cloud()
            assert second.outcome == SyncOutcome.SKIPPED_ALREADY_RUNNING

            release.set()
            first_result = await first

        assert first_result.outcome == SyncOutcome.SUCCESS
        assert calls == [SyncDirection.TO_CLOUD]
        assert not sync_service.is_syncing

    @pytest.mark.asyncio
    async def test_offline_touches_no_store(self):
        local_maker = Mock()
        cloud_maker = Mock()
        offline = ConnectivityService(probe_url="http://probe.invalid", initially_connected=False)
        service = DatabaseSyncService(local_maker, cloud_maker, offline)

        push = await service.sync_to_cloud()
        pull = await service.sync_from_cloud()
        full = await service.full_sync()

        assert push.outcome == SyncOutcome.SKIPPED_OFFLINE
        assert pull.outcome == SyncOutcome.SKIPPED_OFFLINE
        assert full.outcome == SyncOutcome.SKIPPED_OFFLINE
        local_maker.assert_not_called()
        cloud_maker.assert_not_called()
        assert not service.is_syncing


class TestSyncFailures:
    """Test cases for failure propagation."""

    @pytest.mark.asyncio
    async def test_plain_entry_point_raises_and_releases(self, sync_service, sync_status, seeded_local):
        error = TableSyncError("tbl_Users", "to_cloud", OperationalError("INSERT", {}, Exception("locked")))

        with patch("brightenroll.services.sync.service.upsert_table", AsyncMock(side_effect=error)):
            with pytest.raises(TableSyncError):
                await sync_service.sync_to_cloud()

        assert not sync_service.is_syncing
        assert sync_status.is_syncing is False
        assert len(sync_status.errors) == 1
        assert "tbl_Users" in sync_status.errors[0]

    @pytest.mark.asyncio
    async def test_try_variant_returns_failed_result(self, sync_service, seeded_local):
        error = TableSyncError("tbl_Guardians", "from_cloud", OperationalError("SELECT", {}, Exception("gone")))

        with patch("brightenroll.services.sync.service.upsert_table", AsyncMock(side_effect=error)):
            result = await sync_service.try_sync_from_cloud()

        assert result.outcome == SyncOutcome.FAILED
        assert result.error is error
        assert not result.success
        assert not sync_service.is_syncing

    @pytest.mark.asyncio
    async def test_try_variant_catches_unexpected_errors(self, sync_service, seeded_local):
        with patch("brightenroll.services.sync.service.upsert_table", AsyncMock(side_effect=ValueError("bad row"))):
            result = await sync_service.try_sync_to_cloud()

        assert result.outcome == SyncOutcome.FAILED
        assert isinstance(result.error, ValueError)

    @pytest.mark.asyncio
    async def test_earlier_tables_stay_committed(self, sync_service, seeded_local, cloud_sessionmaker):
        async def fail_on_students(source, destination, table, direction, since=None):
            if table.model is Student:
                raise TableSyncError(table.name, direction, OperationalError("INSERT", {}, Exception("fk")))
            return await upsert_table(source, destination, table, direction, since=since)

        with patch("brightenroll.services.sync.service.upsert_table", side_effect=fail_on_students):
            result = await sync_service.try_sync_to_cloud()

        assert result.outcome == SyncOutcome.FAILED
        assert len(await fetch_rows(cloud_sessionmaker, User)) == 1
        assert len(await fetch_rows(cloud_sessionmaker, Guardian)) == 1
        assert await fetch_rows(cloud_sessionmaker, Student) == []


class TestFullAndIncrementalSync:
    """Test cases for combined passes."""

    @pytest.mark.asyncio
    async def test_full_sync_pushes_then_pulls(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(local_sessionmaker, make_guardian(1, first_name="Local"))
        await add_rows(cloud_sessionmaker, make_guardian(2, first_name="Cloud"))

        result = await sync_service.full_sync()

        assert result.outcome == SyncOutcome.SUCCESS
        assert result.direction == SyncDirection.FULL
        assert result.records_pushed == 1
        assert result.records_pulled == 2
        local_rows = await fetch_rows(local_sessionmaker, Guardian)
        assert [row["guardian_id"] for row in local_rows] == [1, 2]
        assert local_rows == await fetch_rows(cloud_sessionmaker, Guardian)

    @pytest.mark.asyncio
    async def test_full_sync_never_raises(self, sync_service):
        with patch("brightenroll.services.sync.service.upsert_table", AsyncMock(side_effect=RuntimeError("boom"))):
            result = await sync_service.full_sync()

        assert result.outcome == SyncOutcome.FAILED
        assert "boom" in result.message

    @pytest.mark.asyncio
    async def test_incremental_sync_limits_watermarked_tables(self, sync_service, local_sessionmaker, cloud_sessionmaker):
        await add_rows(
            local_sessionmaker,
            make_guardian(42),
            make_grade_level(1),
            make_fee(1, created_date=datetime(2020, 1, 1)),
            make_fee(2, created_date=datetime(2020, 1, 1), updated_date=datetime(2024, 5, 5)),
        )

        result = await sync_service.incremental_sync(since=datetime(2024, 1, 1))

        assert result.outcome == SyncOutcome.SUCCESS
        assert result.direction == SyncDirection.INCREMENTAL
        assert result.tables_pushed["tbl_Fees"] == 1
        assert result.tables_pushed["tbl_Guardians"] == 1
        assert [row["fee_id"] for row in await fetch_rows(cloud_sessionmaker, Fee)] == [2]

    @pytest.mark.asyncio
    async def test_incremental_sync_default_window(self, sync_service):
        captured = {}

        async def record_since(direction, since):
            captured[direction] = since
            return {}

        with patch.object(sync_service, "_sync_tables", side_effect=record_since):
            await sync_service.incremental_sync()

        window = datetime.now() - captured[SyncDirection.TO_CLOUD]
        assert 6.9 < window.total_seconds() / 86400 < 7.1
        assert captured[SyncDirection.FROM_CLOUD] == captured[SyncDirection.TO_CLOUD]


class TestLocalDatabaseChecks:
    """Test cases for is_local_database_empty and check_cloud_connection."""

    @pytest.mark.asyncio
    async def test_empty_store(self, sync_service):
        assert await sync_service.is_local_database_empty() is True

    @pytest.mark.asyncio
    async def test_guardian_rows_do_not_count(self, sync_service, local_sessionmaker):
        await add_rows(local_sessionmaker, make_guardian(42))

        assert await sync_service.is_local_database_empty() is True

    @pytest.mark.asyncio
    async def test_employee_address_counts(self, sync_service, local_sessionmaker):
        await add_rows(local_sessionmaker, make_employee_address(1))

        assert await sync_service.is_local_database_empty() is False

    @pytest.mark.asyncio
    async def test_unreadable_store_is_not_empty(self, connectivity, cloud_sessionmaker):
        broken_maker = Mock(side_effect=OperationalError("connect", {}, Exception("no such database")))
        service = DatabaseSyncService(broken_maker, cloud_sessionmaker, connectivity)

        assert await service.is_local_database_empty() is False

    @pytest.mark.asyncio
    async def test_check_cloud_connection(self, sync_service):
        assert await sync_service.check_cloud_connection() is True

    @pytest.mark.asyncio
    async def test_check_cloud_connection_failure(self, connectivity, local_sessionmaker):
        broken_maker = Mock(side_effect=OperationalError("connect", {}, Exception("timeout")))
        service = DatabaseSyncService(local_sessionmaker, broken_maker, connectivity)

        assert await service.check_cloud_connection() is False


class TestSyncState:
    """Test cases for the two-state guard."""

    def test_acquire_and_release(self):
        state = SyncState()

        assert state.try_acquire() is True
        assert state.is_syncing
        assert state.try_acquire() is False

        state.release()
        assert not state.is_syncing
        assert state.try_acquire() is True
