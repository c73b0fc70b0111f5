import pytest
from sqlalchemy.exc import OperationalError

from paymonitor.infrastructure.database.repositories import SqlSettingRepository
from paymonitor.modules.monitor import LivenessState
from paymonitor.modules.monitor.heartbeat import HeartbeatTracker

from conftest import NOW


async def _flag(session, account_id: int) -> str | None:
    return await SqlSettingRepository(session).get_value(account_id, "jkstate")


@pytest.mark.asyncio
async def test_heartbeat_creates_record_and_marks_online(session):
    tracker = HeartbeatTracker.with_session(session)

    await tracker.record_heartbeat(7, NOW)

    status = await tracker.read_status(7, now=NOW)
    assert status.online_state is LivenessState.ONLINE
    assert status.last_heartbeat_at == NOW
    assert status.last_payment_at is None
    assert await _flag(session, 7) == "1"


@pytest.mark.asyncio
async def test_last_heartbeat_is_monotonic(session):
    tracker = HeartbeatTracker.with_session(session)

    await tracker.record_heartbeat(1, NOW)
    await tracker.record_heartbeat(1, NOW - 30)

    status = await tracker.read_status(1, now=NOW)
    assert status.last_heartbeat_at == NOW
    assert status.online_state is LivenessState.ONLINE


@pytest.mark.asyncio
async def test_heartbeat_brings_offline_account_back_online(session):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW)
    assert await tracker.sweep_one(1, NOW + 200)

    await tracker.record_heartbeat(1, NOW + 210)

    assert (await tracker.read_status(1, now=NOW + 210)).online_state is LivenessState.ONLINE


@pytest.mark.asyncio
async def test_payment_does_not_change_liveness(session):
    tracker = HeartbeatTracker.with_session(session)

    await tracker.record_payment(1, NOW)

    status = await tracker.read_status(1, now=NOW)
    assert status.last_payment_at == NOW
    assert status.online_state is LivenessState.UNKNOWN
    assert await _flag(session, 1) is None


@pytest.mark.asyncio
async def test_sweep_marks_stale_account_offline_idempotently(session):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW)

    assert await tracker.sweep_one(1, NOW + 180) is True
    assert await _flag(session, 1) == "0"
    assert await tracker.sweep_one(1, NOW + 400) is False
    assert (await tracker.read_status(1, now=NOW + 400)).online_state is LivenessState.OFFLINE


@pytest.mark.asyncio
async def test_sweep_leaves_fresh_account_online(session):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW)

    assert await tracker.sweep_one(1, NOW + 179) is False
    assert await _flag(session, 1) == "1"


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["", "garbage", "-5"])
async def test_sweep_treats_unusable_heartbeat_as_offline(session, raw):
    settings = SqlSettingRepository(session)
    await settings.set_value(3, "lastheart", raw)
    await settings.set_value(3, "jkstate", "1")
    tracker = HeartbeatTracker(settings)

    assert await tracker.sweep_one(3, NOW) is True
    assert await _flag(session, 3) == "0"


@pytest.mark.asyncio
async def test_sweep_all_only_downgrades_stale_accounts(session):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW - 600)
    await tracker.record_heartbeat(2, NOW - 10)
    await tracker.record_heartbeat(3, NOW - 181)

    assert await tracker.sweep_all(NOW) == 2
    assert await _flag(session, 1) == "0"
    assert await _flag(session, 2) == "1"
    assert await _flag(session, 3) == "0"
    assert await tracker.sweep_all(NOW) == 0


@pytest.mark.asyncio
async def test_sweep_all_continues_after_a_failing_account(session, monkeypatch):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW - 600)
    await tracker.record_heartbeat(2, NOW - 600)
    real_set_value = tracker.repository.set_value

    async def flaky_set_value(account_id, key, value):
        if account_id == 1 and key == "jkstate":
            raise OperationalError("UPDATE settings", {}, Exception("database is locked"))
        await real_set_value(account_id, key, value)

    monkeypatch.setattr(tracker.repository, "set_value", flaky_set_value)

    assert await tracker.sweep_all(NOW) == 1
    assert await _flag(session, 2) == "0"


@pytest.mark.asyncio
async def test_read_status_reports_stale_online_account_as_offline(session):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW)

    status = await tracker.read_status(1, now=NOW + 500)

    assert status.online_state is LivenessState.OFFLINE
    assert await _flag(session, 1) == "1"


@pytest.mark.asyncio
async def test_explicit_zero_timeout_is_not_replaced_by_default(session):
    tracker = HeartbeatTracker.with_session(session)
    await tracker.record_heartbeat(1, NOW)

    assert await tracker.sweep_one(1, NOW + 1, timeout=0) is True
    assert tracker.is_stale(NOW, NOW, timeout=0)
    assert not tracker.is_stale(NOW, NOW + 1)
