"""
Booking service: creates bookings and applies user-driven transitions.

Every booking write goes through `write_lock`, which the lifecycle engine
shares, so a ticker pass and a user action never interleave on one booking.
Status changes are also written with `save_if_status`, so writers in other
processes (API vs. Celery worker) cannot both apply the same transition.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid

from islanders.config import Settings, get_settings
from islanders.core import lifecycle
from islanders.core.errors import BookingNotFoundError, InvalidTransitionError, ItemNotFoundError
from islanders.core.notifications import NotificationEmitter
from islanders.core.retry import with_retry
from islanders.core.schemas import (
    Booking,
    BookingResult,
    BookingStatus,
    Coordinates,
    CustomerInfo,
    DriverDetails,
    FlowType,
    NotificationType,
    TaxiRequest,
)
from islanders.core.stores import Stores

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_NAME = "Guest User"

TAXI_ITEM_ID = "taxi-service"
TAXI_IMAGE = "https://images.unsplash.com/photo-1449965408869-eaa3f722e40d?q=80&w=2670&auto=format&fit=crop"

DRIVER_ROSTER: tuple[dict[str, str], ...] = (
    {"name": "Mehmet Yilmaz", "plate": "MH 123", "car": "Mercedes V-Class (Black)"},
    {"name": "Ali Can", "plate": "KV 882", "car": "Toyota Camry (White)"},
    {"name": "Sarah Jones", "plate": "UK 009", "car": "Ford Tourneo Custom"},
)


def new_booking_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class BookingService:
    def __init__(
        self,
        stores: Stores,
        emitter: NotificationEmitter,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.stores = stores
        self.emitter = emitter
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.write_lock = asyncio.Lock()

    # --- Persistence ---

    async def save(self, booking: Booking) -> None:
        """Persist with bounded retries. Callers must hold `write_lock`."""
        await with_retry(
            lambda: self.stores.bookings.save(booking),
            attempts=self.settings.persistence_retry_attempts,
            base_delay=self.settings.persistence_retry_base_delay,
            timeout=self.settings.persistence_timeout_seconds,
            label=f"save booking {booking.id}",
        )

    async def load(self, booking_id: str) -> Booking | None:
        return await with_retry(
            lambda: self.stores.bookings.get(booking_id),
            attempts=self.settings.persistence_retry_attempts,
            base_delay=self.settings.persistence_retry_base_delay,
            timeout=self.settings.persistence_timeout_seconds,
            label=f"load booking {booking_id}",
        )

    async def load_all(self) -> list[Booking]:
        return await with_retry(
            self.stores.bookings.get_all,
            attempts=self.settings.persistence_retry_attempts,
            base_delay=self.settings.persistence_retry_base_delay,
            timeout=self.settings.persistence_timeout_seconds,
            label="load all bookings",
        )

    async def save_transition(self, booking: Booking, expected: BookingStatus) -> bool:
        """Persist a status change only if no other writer (or process) moved the booking first."""
        return await with_retry(
            lambda: self.stores.bookings.save_if_status(booking, expected),
            attempts=self.settings.persistence_retry_attempts,
            base_delay=self.settings.persistence_retry_base_delay,
            timeout=self.settings.persistence_timeout_seconds,
            label=f"save booking {booking.id}",
        )

    async def get_booking(self, user_id: str, booking_id: str) -> Booking:
        booking = await self.load(booking_id)
        if booking is None or booking.user_id != user_id:
            raise BookingNotFoundError(booking_id)
        return booking

    async def list_bookings(self, user_id: str) -> list[Booking]:
        return await self.stores.bookings.list_for_user(user_id)

    # --- Booking Factory ---

    async def create_booking(
        self,
        user_id: str,
        flow_type: FlowType | str,
        customer: CustomerInfo,
        item_id: str,
    ) -> BookingResult:
        """
        Create and persist a booking for a catalog item.

        Short-term rentals start at `payment_pending` and require payment;
        every other flow starts at `viewing_requested`.

        Raises:
            ItemNotFoundError: the item id does not resolve (nothing is persisted).
            PersistenceError: the booking could not be stored.
        """
        item = await self.stores.catalog.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)

        needs_payment = lifecycle.requires_payment(flow_type)
        booking = Booking(
            id=new_booking_id("ORD"),
            user_id=user_id,
            item_id=item.id,
            item_title=item.title,
            item_image=item.image_url,
            domain=item.domain,
            customer_name=customer.customer_name or DEFAULT_CUSTOMER_NAME,
            customer_contact=customer.customer_contact,
            status=lifecycle.initial_status(flow_type),
            total_price=item.price,
            check_in=customer.check_in,
            check_out=customer.check_out,
            viewing_time=customer.viewing_time,
            special_requests=customer.special_requests,
            needs_pickup=customer.needs_pickup,
            agent_phone=item.agent_phone,
            requires_payment=needs_payment,
        )

        async with self.write_lock:
            await self.save(booking)

        logger.info("Booking %s created for %s (item=%s, status=%s)", booking.id, user_id, item.id, booking.status.value)
        return BookingResult(booking=booking, requires_payment=needs_payment)

    # --- User-driven transitions ---

    async def complete_payment(self, user_id: str, booking_id: str) -> Booking:
        """
        Mark a pending-payment booking as confirmed.

        Idempotent: a booking that is already `confirmed` is returned unchanged.

        Raises:
            BookingNotFoundError: unknown id or booking owned by another user.
            InvalidTransitionError: booking is in a non-payment flow.
        """
        async with self.write_lock:
            booking = await self.get_booking(user_id, booking_id)
            if booking.status == BookingStatus.CONFIRMED:
                return booking

            updated = lifecycle.transition(booking, BookingStatus.CONFIRMED)
            if not await self.save_transition(updated, expected=booking.status):
                # Confirmed elsewhere (e.g. a ticker in another process) since our read.
                current = await self.get_booking(user_id, booking_id)
                if current.status == BookingStatus.CONFIRMED:
                    return current
                raise InvalidTransitionError(booking.id, current.status.value, BookingStatus.CONFIRMED.value)

        await self.emitter.emit(
            user_id,
            NotificationType.BOOKING,
            "Payment Received",
            f"Payment for {updated.item_title} processed successfully.",
            booking_id=updated.id,
        )
        return updated

    async def request_owner_contact(self, user_id: str, booking_id: str) -> Booking:
        """Record that the owner was messaged about a viewing request."""
        async with self.write_lock:
            booking = await self.get_booking(user_id, booking_id)
            if booking.status == BookingStatus.VIEWING_AWAITING_OWNER:
                return booking
            if booking.status != BookingStatus.VIEWING_REQUESTED:
                raise InvalidTransitionError(
                    booking.id, booking.status.value, BookingStatus.VIEWING_AWAITING_OWNER.value
                )

            updated = lifecycle.transition(booking, BookingStatus.VIEWING_AWAITING_OWNER)
            updated.whatsapp_status = "sent"
            if not await self.save_transition(updated, expected=booking.status):
                current = await self.get_booking(user_id, booking_id)
                if current.status == BookingStatus.VIEWING_AWAITING_OWNER:
                    return current
                raise InvalidTransitionError(
                    booking.id, current.status.value, BookingStatus.VIEWING_AWAITING_OWNER.value
                )

        return updated

    async def advance(self, booking_id: str, source: BookingStatus, target: BookingStatus) -> Booking | None:
        """
        Move a booking from `source` to `target` under the write lock.

        Returns None when the booking is gone or no longer at `source`
        (another writer got there first). The lock covers writers in this
        process; `save_transition` covers writers in other processes.
        """
        async with self.write_lock:
            booking = await self.load(booking_id)
            if booking is None or booking.status != source:
                return None
            updated = lifecycle.transition(booking, target)
            if not await self.save_transition(updated, expected=source):
                logger.info("Booking %s moved by another writer; dropping %s -> %s", booking_id, source.value, target.value)
                return None
        return updated

    # --- Taxi dispatch ---

    async def dispatch_taxi(self, user_id: str, request: TaxiRequest) -> Booking:
        """Assign a driver and persist an already-dispatched taxi booking (no confirmation gate)."""
        driver = self.rng.choice(DRIVER_ROSTER)
        eta = f"{self.rng.randint(5, 14)} mins"

        booking = Booking(
            id=new_booking_id("TAXI"),
            user_id=user_id,
            item_id=TAXI_ITEM_ID,
            item_title=f"Taxi to {request.destination or 'Current Location'}",
            item_image=TAXI_IMAGE,
            domain="Cars",
            customer_name=request.customer_name or DEFAULT_CUSTOMER_NAME,
            customer_contact=request.customer_phone,
            status=BookingStatus.TAXI_DISPATCHED,
            total_price=0.0,
            pickup_coordinates=Coordinates(lat=request.latitude, lng=request.longitude),
            driver_details=DriverDetails(eta=eta, **driver),
        )

        async with self.write_lock:
            await self.save(booking)

        logger.info("Taxi %s dispatched for %s: driver=%s eta=%s", booking.id, user_id, driver["name"], eta)
        await self.emitter.emit(
            user_id,
            NotificationType.BOOKING,
            "Taxi Dispatched",
            f"{driver['name']} ({driver['car']}, {driver['plate']}) is on the way. ETA {eta}.",
            booking_id=booking.id,
        )
        return booking
