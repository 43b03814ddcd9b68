"""Wires stores, emitter, booking service and lifecycle engine from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from islanders.config import Settings, get_settings
from islanders.core.bookings import BookingService
from islanders.core.catalog_loader import generate_mock_catalog, load_catalog
from islanders.core.engine import LifecycleEngine
from islanders.core.errors import OwnerAlertError
from islanders.core.notifications import NotificationEmitter
from islanders.core.schemas import Booking, BookingStatus
from islanders.core.stores import Stores, build_stores
from islanders.integrations.telegram_notify import TelegramOwnerNotifier

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    stores: Stores
    emitter: NotificationEmitter
    service: BookingService
    engine: LifecycleEngine
    owner_notifier: TelegramOwnerNotifier | None = None

    async def contact_owner(self, user_id: str, booking_id: str) -> Booking:
        """
        Alert the listing owner about a viewing request, then mark it awaiting the owner.

        Without a configured notifier the alert is simulated as delivered.
        """
        booking = await self.service.get_booking(user_id, booking_id)
        if booking.status != BookingStatus.VIEWING_REQUESTED:
            # Already contacted, confirmed, or not a viewing flow; let the service decide.
            return await self.service.request_owner_contact(user_id, booking_id)

        if self.owner_notifier is not None:
            result = await self.owner_notifier.send_viewing_request(booking)
            if not result.get("success"):
                logger.warning("Owner alert failed for booking %s: %s", booking.id, result.get("error"))
                raise OwnerAlertError(f"Owner alert failed for booking {booking.id}: {result.get('error')}")

        return await self.service.request_owner_contact(user_id, booking_id)


def build_runtime(settings: Settings | None = None, stores: Stores | None = None) -> Runtime:
    settings = settings or get_settings()

    if stores is None:
        if settings.catalog_path:
            items = load_catalog(settings.catalog_path)
        else:
            items = generate_mock_catalog()
        stores = build_stores(settings, catalog_items=items)

    emitter = NotificationEmitter(stores.notifications, settings=settings)
    service = BookingService(stores, emitter, settings=settings)
    engine = LifecycleEngine(service)

    return Runtime(
        settings=settings,
        stores=stores,
        emitter=emitter,
        service=service,
        engine=engine,
        owner_notifier=TelegramOwnerNotifier.from_settings(settings),
    )
