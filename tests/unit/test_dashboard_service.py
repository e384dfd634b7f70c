"""Unit tests for the dashboard refresh cycle and state store."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.models.enums import ActiveCoursePolicy, DashboardPhase, UpcomingCoursePolicy
from app.services.dashboard_service import (
    DashboardStore,
    NO_DATA_MESSAGE,
    RefreshFailedError,
    load_snapshot,
)
from tests.conftest import TODAY, FakeDataSource, make_course


@pytest.mark.asyncio
async def test_load_snapshot_reads_all_collections(fake_source):
    snapshot = await load_snapshot(fake_source, today=TODAY)
    assert sorted(fake_source.calls) == ["courses", "enrollments", "instructors", "participants", "rooms"]
    assert snapshot.courses == 3
    assert snapshot.total_revenue == 150.0


@pytest.mark.asyncio
async def test_load_snapshot_single_failure_fails_refresh(fake_source):
    fake_source.fail = {"rooms"}
    with pytest.raises(RefreshFailedError, match="rooms unavailable"):
        await load_snapshot(fake_source, today=TODAY)


@pytest.mark.asyncio
async def test_load_snapshot_failure_cancels_sibling_reads():
    source = FakeDataSource(fail=("rooms",), delay=0.05)
    with pytest.raises(RefreshFailedError, match="rooms unavailable"):
        await load_snapshot(source, today=TODAY)

    await asyncio.sleep(0.1)
    assert len(source.calls) == 5
    assert source.finished == []


@pytest.mark.asyncio
async def test_load_snapshot_timeout_cancels_reads():
    source = FakeDataSource(delay=0.05)
    with pytest.raises(RefreshFailedError, match="timed out"):
        await load_snapshot(source, timeout=0.01, today=TODAY)

    await asyncio.sleep(0.1)
    assert source.finished == []


@pytest.mark.asyncio
async def test_load_snapshot_timeout():
    source = FakeDataSource(delay=0.5)
    with pytest.raises(RefreshFailedError, match="timed out"):
        await load_snapshot(source, timeout=0.01, today=TODAY)


@pytest.mark.asyncio
async def test_load_snapshot_passes_policies():
    source = FakeDataSource(courses=[make_course(1, start_date=TODAY)])
    snapshot = await load_snapshot(
        source,
        today=TODAY,
        active_policy=ActiveCoursePolicy.DATE_RANGE,
        upcoming_policy=UpcomingCoursePolicy.EXCLUSIVE,
    )
    assert snapshot.upcoming_courses == []
    assert snapshot.active_courses == 0


@pytest.mark.asyncio
async def test_load_snapshot_unexpected_error_wrapped():
    source = FakeDataSource()
    source.list_courses = AsyncMock(side_effect=KeyError("fields"))
    with pytest.raises(RefreshFailedError):
        await load_snapshot(source, today=TODAY)


@pytest.mark.asyncio
async def test_store_starts_uninitialized(fake_source):
    store = DashboardStore(fake_source)
    assert store.state.phase == DashboardPhase.UNINITIALIZED
    assert store.state.snapshot is None


@pytest.mark.asyncio
async def test_store_refresh_ready(fake_source):
    store = DashboardStore(fake_source)
    state = await store.refresh(today=TODAY)
    assert state.phase == DashboardPhase.READY
    assert state.snapshot.enrollments == 4
    assert state.error is None
    assert store.state is state


@pytest.mark.asyncio
async def test_store_refresh_failed_has_no_snapshot(fake_source):
    store = DashboardStore(fake_source)
    await store.refresh(today=TODAY)

    fake_source.fail = {"enrollments"}
    state = await store.refresh(today=TODAY)
    assert state.phase == DashboardPhase.FAILED
    assert state.snapshot is None
    assert state.error == NO_DATA_MESSAGE


@pytest.mark.asyncio
async def test_store_recovers_on_next_refresh(fake_source):
    fake_source.fail = {"courses"}
    store = DashboardStore(fake_source)
    assert (await store.refresh(today=TODAY)).phase == DashboardPhase.FAILED

    fake_source.fail = set()
    assert (await store.refresh(today=TODAY)).phase == DashboardPhase.READY


@pytest.mark.asyncio
async def test_store_is_loading_during_refresh():
    source = FakeDataSource(delay=0.05)
    store = DashboardStore(source)
    task = asyncio.create_task(store.refresh(today=TODAY))
    await asyncio.sleep(0.01)
    assert store.state.phase == DashboardPhase.LOADING
    await task
    assert store.state.phase == DashboardPhase.READY


@pytest.mark.asyncio
async def test_store_superseded_refresh_discarded():
    slow = FakeDataSource(courses=[make_course(1)], delay=0.1)
    store = DashboardStore(slow)

    first = asyncio.create_task(store.refresh(today=TODAY))
    await asyncio.sleep(0.01)

    store.source = FakeDataSource(courses=[make_course(1), make_course(2)])
    second = await store.refresh(today=TODAY)
    assert second.snapshot.courses == 2

    await first
    assert store.state.phase == DashboardPhase.READY
    assert store.state.snapshot.courses == 2


@pytest.mark.asyncio
async def test_store_result_after_close_discarded():
    store = DashboardStore(FakeDataSource(delay=0.05))
    task = asyncio.create_task(store.refresh(today=TODAY))
    await asyncio.sleep(0.01)
    store.close()
    await task
    assert store.closed
    assert store.state.phase == DashboardPhase.LOADING


@pytest.mark.asyncio
async def test_store_refresh_after_close_is_noop(fake_source):
    store = DashboardStore(fake_source)
    store.close()
    state = await store.refresh(today=TODAY)
    assert state.phase == DashboardPhase.UNINITIALIZED
    assert fake_source.calls == []


@pytest.mark.asyncio
async def test_load_snapshot_label_locale():
    source = FakeDataSource(courses=[make_course(1, status="aktiv")])
    snapshot = await load_snapshot(source, today=TODAY, label_locale="de")
    assert [s.name for s in snapshot.courses_by_status] == ["Aktiv"]
