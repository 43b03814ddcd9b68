from __future__ import annotations

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from islanders.config import Settings
from islanders.core.runtime import build_runtime
from islanders.main import app

CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.yaml"
USER = {"X-User-Id": "ayla"}


def _client() -> AsyncClient:
    app.state.runtime = build_runtime(
        Settings(catalog_path=str(CATALOG_PATH), persistence_retry_base_delay=0.0)
    )
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health_ok():
    async with _client() as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0", "storage": "memory", "lifecycle_engine": False}


@pytest.mark.asyncio
async def test_catalog_item_and_search():
    async with _client() as client:
        item = await client.get("/api/v1/catalog/items/re_0")
        missing = await client.get("/api/v1/catalog/items/nope")
        found = await client.post(
            "/api/v1/catalog/search",
            json={"domain": "Real Estate", "min_price": 50, "max_price": 150, "sort_by": "price_asc"},
        )
        bad_sort = await client.post("/api/v1/catalog/search", json={"sort_by": "random"})

    assert item.status_code == 200
    assert item.json()["price"] == 100000
    assert missing.status_code == 404
    assert found.status_code == 200
    assert [i["id"] for i in found.json()["items"]] == ["re_1"]
    assert bad_sort.status_code == 422


@pytest.mark.asyncio
async def test_short_term_booking_then_payment():
    async with _client() as client:
        created = await client.post(
            "/api/v1/bookings",
            json={"item_id": "re_1", "flow_type": "short_term_rental", "customer_name": "Ayla"},
            headers=USER,
        )
        booking_id = created.json()["booking"]["id"]
        paid = await client.post(f"/api/v1/bookings/{booking_id}/payment", headers=USER)
        paid_again = await client.post(f"/api/v1/bookings/{booking_id}/payment", headers=USER)
        other_user = await client.get(f"/api/v1/bookings/{booking_id}", headers={"X-User-Id": "mallory"})

    assert created.status_code == 201
    assert created.json()["requires_payment"] is True
    assert created.json()["card"] == "payment_form"
    assert created.json()["booking"]["status"] == "payment_pending"
    assert paid.status_code == 200
    assert paid.json()["booking"]["status"] == "confirmed"
    assert paid.json()["card"] == "receipt"
    assert paid_again.status_code == 200
    assert other_user.status_code == 404


@pytest.mark.asyncio
async def test_long_term_booking_and_owner_contact():
    async with _client() as client:
        created = await client.post(
            "/api/v1/bookings",
            json={"item_id": "re_0", "flow_type": "long_term", "viewing_time": "Sat 10:00"},
            headers=USER,
        )
        booking_id = created.json()["booking"]["id"]
        pay = await client.post(f"/api/v1/bookings/{booking_id}/payment", headers=USER)
        contacted = await client.post(f"/api/v1/bookings/{booking_id}/owner-contact", headers=USER)
        listed = await client.get("/api/v1/bookings", headers=USER)

    assert created.json()["booking"]["status"] == "viewing_requested"
    assert created.json()["booking"]["total_price"] == 100000
    assert created.json()["requires_payment"] is False
    assert pay.status_code == 409
    assert contacted.status_code == 200
    assert contacted.json()["booking"]["status"] == "viewing_awaiting_owner"
    assert contacted.json()["timeline_step"] == 3
    assert [b["booking"]["id"] for b in listed.json()] == [booking_id]


@pytest.mark.asyncio
async def test_unlisted_flow_type_takes_viewing_path():
    async with _client() as client:
        resp = await client.post(
            "/api/v1/bookings",
            json={"item_id": "re_0", "flow_type": "long_term_viewing"},
            headers=USER,
        )

    assert resp.status_code == 201
    assert resp.json()["booking"]["status"] == "viewing_requested"
    assert resp.json()["requires_payment"] is False
    assert resp.json()["card"] == "viewing_timeline"


@pytest.mark.asyncio
async def test_booking_unknown_item_is_404():
    async with _client() as client:
        resp = await client.post("/api/v1/bookings", json={"item_id": "ghost"}, headers=USER)
        listed = await client.get("/api/v1/bookings", headers=USER)

    assert resp.status_code == 404
    assert listed.json() == []


@pytest.mark.asyncio
async def test_taxi_dispatch_and_notifications():
    async with _client() as client:
        taxi = await client.post(
            "/api/v1/taxi",
            json={"destination": "Kyrenia Harbour", "customer_name": "Ayla", "latitude": 35.3, "longitude": 33.3},
            headers=USER,
        )
        notes = await client.get("/api/v1/notifications", headers=USER)
        note_id = notes.json()["items"][0]["id"]
        marked = await client.post(f"/api/v1/notifications/{note_id}/read", headers=USER)
        missing = await client.post("/api/v1/notifications/NOTIF-x/read", headers=USER)
        unread = await client.get("/api/v1/notifications", params={"unread_only": True}, headers=USER)

    body = taxi.json()
    assert taxi.status_code == 201
    assert body["booking"]["id"].startswith("TAXI-")
    assert body["booking"]["status"] == "taxi_dispatched"
    assert body["booking"]["driver_details"]["name"] in {"Mehmet Yilmaz", "Ali Can", "Sarah Jones"}
    assert body["card"] == "taxi_tracker"
    assert notes.json()["unread"] == 1
    assert marked.status_code == 200
    assert missing.status_code == 404
    assert unread.json()["items"] == []


@pytest.mark.asyncio
async def test_default_user_is_guest():
    async with _client() as client:
        await client.post("/api/v1/bookings", json={"item_id": "re_0"})
        guest = await client.get("/api/v1/bookings")
        ayla = await client.get("/api/v1/bookings", headers=USER)

    assert len(guest.json()) == 1
    assert guest.json()[0]["booking"]["user_id"] == "guest"
    assert ayla.json() == []
