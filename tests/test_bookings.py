from __future__ import annotations

import random

import pytest

from islanders.config import Settings
from islanders.core.bookings import DRIVER_ROSTER, BookingService
from islanders.core.errors import (
    BookingNotFoundError,
    InvalidTransitionError,
    ItemNotFoundError,
    PersistenceError,
)
from islanders.core.notifications import NotificationEmitter
from islanders.core.schemas import BookingStatus, CatalogItem, CustomerInfo, TaxiRequest
from islanders.core.stores import (
    InMemoryBookingStore,
    InMemoryCatalogStore,
    InMemoryNotificationStore,
    Stores,
)


def _items() -> list[CatalogItem]:
    return [
        CatalogItem(
            id="re_0",
            domain="Real Estate",
            title="Villa in Kyrenia",
            price=100000,
            image_url="https://img/villa.jpg",
            agent_phone="905330000000",
        ),
        CatalogItem(id="re_1", domain="Real Estate", title="Apartment in Famagusta", price=85),
    ]


def _service(bookings=None) -> BookingService:
    settings = Settings(persistence_retry_attempts=2, persistence_retry_base_delay=0.0)
    stores = Stores(
        catalog=InMemoryCatalogStore(_items()),
        bookings=bookings or InMemoryBookingStore(),
        notifications=InMemoryNotificationStore(),
    )
    return BookingService(stores, NotificationEmitter(stores.notifications), settings=settings, rng=random.Random(1))


class _BrokenBookingStore(InMemoryBookingStore):
    async def save(self, booking):
        raise RuntimeError("db down")


@pytest.mark.asyncio
async def test_short_term_booking_requires_payment():
    service = _service()
    result = await service.create_booking("u1", "short_term_rental", CustomerInfo(customer_name="Ayla"), "re_1")

    assert result.requires_payment is True
    assert result.booking.status == BookingStatus.PAYMENT_PENDING
    assert result.booking.requires_payment is True
    assert result.booking.id.startswith("ORD-")
    assert result.booking.total_price == 85

    stored = await service.stores.bookings.get(result.booking.id)
    assert stored is not None
    assert stored.status == BookingStatus.PAYMENT_PENDING


@pytest.mark.asyncio
async def test_long_term_booking_requests_viewing_and_snapshots_item():
    service = _service()
    customer = CustomerInfo(customer_contact="+90 533", viewing_time="Sat 10:00")
    result = await service.create_booking("u1", "long_term", customer, "re_0")

    booking = result.booking
    assert result.requires_payment is False
    assert booking.status == BookingStatus.VIEWING_REQUESTED
    assert booking.total_price == 100000
    assert booking.item_title == "Villa in Kyrenia"
    assert booking.item_image == "https://img/villa.jpg"
    assert booking.domain == "Real Estate"
    assert booking.agent_phone == "905330000000"
    assert booking.customer_name == "Guest User"
    assert booking.viewing_time == "Sat 10:00"
    assert booking.user_id == "u1"


@pytest.mark.asyncio
async def test_booking_snapshot_does_not_follow_catalog_changes():
    service = _service()
    result = await service.create_booking("u1", "long_term", CustomerInfo(), "re_0")

    # Price drift in the catalog after booking.
    service.stores.catalog._items["re_0"] = CatalogItem(id="re_0", domain="Real Estate", title="Renamed", price=1)

    stored = await service.stores.bookings.get(result.booking.id)
    assert stored.total_price == 100000
    assert stored.item_title == "Villa in Kyrenia"


@pytest.mark.asyncio
async def test_missing_item_raises_and_persists_nothing():
    service = _service()
    with pytest.raises(ItemNotFoundError):
        await service.create_booking("u1", "long_term", CustomerInfo(), "does-not-exist")
    assert await service.stores.bookings.get_all() == []


@pytest.mark.asyncio
async def test_persistence_failure_surfaces_to_caller():
    service = _service(bookings=_BrokenBookingStore())
    with pytest.raises(PersistenceError):
        await service.create_booking("u1", "long_term", CustomerInfo(), "re_0")


@pytest.mark.asyncio
async def test_complete_payment_confirms_and_is_idempotent():
    service = _service()
    result = await service.create_booking("u1", "short_term_rental", CustomerInfo(), "re_1")

    first = await service.complete_payment("u1", result.booking.id)
    second = await service.complete_payment("u1", result.booking.id)

    assert first.status == BookingStatus.CONFIRMED
    assert first.requires_payment is False
    assert second.status == BookingStatus.CONFIRMED

    notes = await service.emitter.list_for_user("u1")
    assert [n.title for n in notes] == ["Payment Received"]


@pytest.mark.asyncio
async def test_complete_payment_on_viewing_booking_is_rejected():
    service = _service()
    result = await service.create_booking("u1", "long_term", CustomerInfo(), "re_0")
    with pytest.raises(InvalidTransitionError):
        await service.complete_payment("u1", result.booking.id)


@pytest.mark.asyncio
async def test_complete_payment_for_other_user_is_not_found():
    service = _service()
    result = await service.create_booking("u1", "short_term_rental", CustomerInfo(), "re_1")
    with pytest.raises(BookingNotFoundError):
        await service.complete_payment("someone-else", result.booking.id)
    with pytest.raises(BookingNotFoundError):
        await service.complete_payment("u1", "ORD-MISSING")


@pytest.mark.asyncio
async def test_dispatch_taxi_is_immediately_dispatched():
    service = _service()
    booking = await service.dispatch_taxi(
        "u1",
        TaxiRequest(destination="Kyrenia Harbour", customer_name="Ayla", customer_phone="+90", latitude=35.34, longitude=33.32),
    )

    assert booking.id.startswith("TAXI-")
    assert booking.status == BookingStatus.TAXI_DISPATCHED
    assert booking.total_price == 0
    assert booking.item_title == "Taxi to Kyrenia Harbour"
    assert booking.driver_details.name in {d["name"] for d in DRIVER_ROSTER}
    assert booking.driver_details.eta.endswith(" mins")
    assert 5 <= int(booking.driver_details.eta.split()[0]) <= 14
    assert booking.pickup_coordinates.lat == 35.34

    stored = await service.stores.bookings.get(booking.id)
    assert stored.status == BookingStatus.TAXI_DISPATCHED

    notes = await service.emitter.list_for_user("u1")
    assert notes[0].title == "Taxi Dispatched"


@pytest.mark.asyncio
async def test_dispatch_taxi_without_destination():
    service = _service()
    booking = await service.dispatch_taxi("u1", TaxiRequest(latitude=0, longitude=0))
    assert booking.item_title == "Taxi to Current Location"
    assert booking.customer_name == "Guest User"


@pytest.mark.asyncio
async def test_request_owner_contact_marks_awaiting_owner():
    service = _service()
    result = await service.create_booking("u1", "long_term", CustomerInfo(), "re_0")

    updated = await service.request_owner_contact("u1", result.booking.id)
    again = await service.request_owner_contact("u1", result.booking.id)

    assert updated.status == BookingStatus.VIEWING_AWAITING_OWNER
    assert updated.whatsapp_status == "sent"
    assert again.status == BookingStatus.VIEWING_AWAITING_OWNER


@pytest.mark.asyncio
async def test_request_owner_contact_rejects_payment_flow():
    service = _service()
    result = await service.create_booking("u1", "short_term_rental", CustomerInfo(), "re_1")
    with pytest.raises(InvalidTransitionError):
        await service.request_owner_contact("u1", result.booking.id)


@pytest.mark.asyncio
async def test_advance_returns_none_when_status_moved():
    service = _service()
    result = await service.create_booking("u1", "short_term_rental", CustomerInfo(), "re_1")
    await service.complete_payment("u1", result.booking.id)

    moved = await service.advance(result.booking.id, BookingStatus.PAYMENT_PENDING, BookingStatus.CONFIRMED)
    assert moved is None
