import asyncio

import pytest

from paymonitor import __version__
from paymonitor.infrastructure.database.repositories import (
    SqlMerchantRepository,
    SqlOrderRepository,
    SqlSettingRepository,
)
from paymonitor.interfaces.http.routers import monitor as monitor_router
from paymonitor.modules.orders import OrderStatus
from paymonitor.modules.orders.reclaimer import ExpiryReclaimer

from conftest import NOW, SHOP_APPID, SHOP_SECRET, sign_heartbeat, sign_push


@pytest.fixture
def frozen_clock(monkeypatch):
    monkeypatch.setattr(monitor_router, "utc_timestamp", lambda: NOW + 120)
    return NOW + 120


async def _setting(session_factory, account_id: int, key: str) -> str | None:
    async with session_factory() as db:
        return await SqlSettingRepository(db).get_value(account_id, key)


@pytest.mark.asyncio
async def test_heartbeat_marks_monitor_online(client, session_factory, frozen_clock):
    t = str(NOW)
    response = await client.get("/api/monitor/heart", params={"t": t, "sign": sign_heartbeat(t)})

    assert response.status_code == 200
    assert response.json() == {"code": 200, "msg": "Success", "data": None}
    assert await _setting(session_factory, 1, "jkstate") == "1"
    assert await _setting(session_factory, 1, "lastheart") == str(frozen_clock)


@pytest.mark.asyncio
async def test_heartbeat_with_appid_uses_mapped_account(client, session_factory, frozen_clock):
    t = str(NOW)
    response = await client.post(
        "/api/monitor/heart",
        data={"t": t, "appid": SHOP_APPID, "sign": sign_heartbeat(t, SHOP_SECRET)},
    )

    assert response.status_code == 200
    assert await _setting(session_factory, 2, "jkstate") == "1"
    assert await _setting(session_factory, 1, "jkstate") is None


@pytest.mark.asyncio
async def test_heartbeat_with_bad_signature_is_rejected(client, session_factory):
    response = await client.get("/api/monitor/heart", params={"t": str(NOW), "sign": "0" * 32})

    assert response.status_code == 401
    assert response.json()["code"] == 401
    assert await _setting(session_factory, 1, "lastheart") is None


@pytest.mark.asyncio
async def test_heartbeat_without_signature_is_bad_request(client):
    response = await client.get("/api/monitor/heart", params={"t": str(NOW)})

    assert response.status_code == 400
    assert response.json()["code"] == 400


@pytest.mark.asyncio
async def test_unknown_appid_is_bad_request(client):
    t = str(NOW)
    response = await client.get(
        "/api/monitor/heart",
        params={"t": t, "appid": "ghost", "sign": sign_heartbeat(t)},
    )

    assert response.status_code == 400
    assert response.json()["msg"] == "Unknown merchant"


@pytest.mark.asyncio
async def test_account_without_secret_is_server_error(client, session_factory):
    async with session_factory() as db:
        await SqlMerchantRepository(db).upsert("no-secret", 3)
        await db.commit()
    t = str(NOW)

    response = await client.get(
        "/api/monitor/heart",
        params={"t": t, "appid": "no-secret", "sign": sign_heartbeat(t, "")},
    )

    assert response.status_code == 500
    assert response.json() == {"code": 500, "msg": "Internal Server Error", "data": None}


@pytest.mark.asyncio
async def test_form_fields_override_query_parameters(client):
    t = str(NOW)
    response = await client.post(
        "/api/monitor/heart",
        params={"t": "1", "sign": "bogus"},
        data={"t": t, "sign": sign_heartbeat(t)},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_push_pays_matching_order(client, session_factory, order_factory, frozen_clock):
    order = await order_factory(requested=100, actual=101)
    t = str(NOW + 100)

    response = await client.post(
        "/api/monitor/push",
        data={"t": t, "type": "1", "price": "1.01", "sign": sign_push("1", "1.01", t)},
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"matched": True, "order_code": order.order_code}
    async with session_factory() as db:
        model = await SqlOrderRepository(db).get_by_code(order.order_code)
    assert model.status == int(OrderStatus.PAID)
    assert model.paid_at == frozen_clock
    assert await _setting(session_factory, 1, "lastpay") == str(frozen_clock)


@pytest.mark.asyncio
async def test_unmatched_push_still_records_payment_time(client, session_factory, frozen_clock):
    t = str(NOW)

    response = await client.get(
        "/api/monitor/push",
        params={"t": t, "type": "2", "price": "9.99", "sign": sign_push("2", "9.99", t)},
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"matched": False, "order_code": None}
    assert await _setting(session_factory, 1, "lastpay") == str(frozen_clock)


@pytest.mark.asyncio
async def test_push_with_tampered_price_is_rejected(client, session_factory, order_factory):
    order = await order_factory(actual=101)
    t = str(NOW)

    response = await client.get(
        "/api/monitor/push",
        params={"t": t, "type": "1", "price": "1.02", "sign": sign_push("1", "1.01", t)},
    )

    assert response.status_code == 401
    async with session_factory() as db:
        model = await SqlOrderRepository(db).get_by_code(order.order_code)
    assert model.status == int(OrderStatus.PENDING)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind, price",
    [("3", "1.00"), ("1", "abc"), ("1", "-1"), ("1", "1.001"), ("1", "1e30")],
)
async def test_push_with_invalid_payload_is_bad_request(client, session_factory, kind, price):
    t = str(NOW)

    response = await client.get(
        "/api/monitor/push",
        params={"t": t, "type": kind, "price": price, "sign": sign_push(kind, price, t)},
    )

    assert response.status_code == 400
    assert response.json()["msg"] == "Invalid push payload"
    assert await _setting(session_factory, 1, "lastpay") is None


@pytest.mark.asyncio
async def test_health_reports_version_and_idle_scheduler(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__, "scheduler_running": False}


@pytest.mark.asyncio
async def test_push_after_expiry_finds_no_order(client, session_factory, order_factory, monkeypatch):
    order = await order_factory(requested=100, actual=101)
    async with session_factory() as db:
        assert await ExpiryReclaimer.with_session(db).reclaim_all(NOW + 330) == 1
        await db.commit()
    monkeypatch.setattr(monitor_router, "utc_timestamp", lambda: NOW + 360)
    t = str(NOW + 360)

    response = await client.post(
        "/api/monitor/push",
        data={"t": t, "type": "1", "price": "1.01", "sign": sign_push("1", "1.01", t)},
    )

    assert response.json()["data"] == {"matched": False, "order_code": None}
    async with session_factory() as db:
        model = await SqlOrderRepository(db).get_by_code(order.order_code)
    assert model.status == int(OrderStatus.CLOSED)
    assert model.closed_at == NOW + 330
    assert await _setting(session_factory, 1, "lastpay") == str(NOW + 360)


@pytest.mark.asyncio
async def test_concurrent_identical_pushes_match_once(client, session_factory, order_factory, frozen_clock):
    order = await order_factory(actual=100)
    t = str(NOW)
    form = {"t": t, "type": "1", "price": "1.00", "sign": sign_push("1", "1.00", t)}

    responses = await asyncio.gather(
        client.post("/api/monitor/push", data=form),
        client.post("/api/monitor/push", data=form),
    )

    assert all(response.status_code == 200 for response in responses)
    assert sorted(response.json()["data"]["matched"] for response in responses) == [False, True]
    async with session_factory() as db:
        model = await SqlOrderRepository(db).get_by_code(order.order_code)
    assert model.status == int(OrderStatus.PAID)
    assert model.paid_at == frozen_clock
