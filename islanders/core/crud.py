from __future__ import annotations

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from islanders.core.schemas import Booking, BookingStatus, CatalogItem, UserNotification
from islanders.core.stores import BookingStore, CatalogStore, NotificationStore
from islanders.models import BookingRecord, CatalogItemRecord, NotificationRecord

logger = logging.getLogger(__name__)

# Booking fields kept in the `details` JSONB column.
_BOOKING_DETAIL_FIELDS = (
    "check_in",
    "check_out",
    "viewing_time",
    "pickup_coordinates",
    "driver_details",
    "special_requests",
    "needs_pickup",
    "whatsapp_status",
    "agent_phone",
)

_CATALOG_ATTRIBUTE_FIELDS = (
    "category",
    "rental_type",
    "hotel_type",
    "vehicle_type",
    "tags",
    "amenities",
    "features",
    "agent_phone",
    "description",
)


# --- Mapping helpers ---


def booking_to_record(booking: Booking) -> BookingRecord:
    data = booking.model_dump(mode="json")
    return BookingRecord(
        id=booking.id,
        user_id=booking.user_id,
        item_id=booking.item_id,
        item_title=booking.item_title,
        item_image=booking.item_image,
        domain=booking.domain,
        customer_name=booking.customer_name,
        customer_contact=booking.customer_contact,
        status=booking.status.value,
        total_price=booking.total_price,
        requires_payment=booking.requires_payment,
        created_at=booking.created_at,
        details={k: data[k] for k in _BOOKING_DETAIL_FIELDS if data.get(k) is not None},
    )


def record_to_booking(rec: BookingRecord) -> Booking:
    return Booking(
        id=rec.id,
        user_id=rec.user_id,
        item_id=rec.item_id,
        item_title=rec.item_title,
        item_image=rec.item_image or "",
        domain=rec.domain,
        customer_name=rec.customer_name,
        customer_contact=rec.customer_contact,
        status=rec.status,
        total_price=rec.total_price,
        requires_payment=rec.requires_payment,
        created_at=rec.created_at,
        **(rec.details or {}),
    )


def record_to_item(rec: CatalogItemRecord) -> CatalogItem:
    return CatalogItem(
        id=rec.id,
        domain=rec.domain,
        title=rec.title,
        location=rec.location or "",
        price=rec.price,
        currency=rec.currency,
        image_url=rec.image_url or "",
        rating=rec.rating,
        **(rec.attributes or {}),
    )


def item_to_record(item: CatalogItem) -> CatalogItemRecord:
    data = item.model_dump()
    return CatalogItemRecord(
        id=item.id,
        domain=item.domain,
        title=item.title,
        location=item.location,
        price=item.price,
        currency=item.currency,
        image_url=item.image_url,
        rating=item.rating,
        attributes={k: data[k] for k in _CATALOG_ATTRIBUTE_FIELDS if data.get(k) is not None},
    )


def record_to_notification(rec: NotificationRecord) -> UserNotification:
    return UserNotification(
        id=rec.id,
        user_id=rec.user_id,
        type=rec.type,
        title=rec.title,
        message=rec.message,
        read=rec.read,
        timestamp=rec.created_at,
        booking_id=rec.booking_id,
    )


# --- Stores ---


class SqlCatalogStore(CatalogStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_item(self, item_id: str) -> CatalogItem | None:
        async with self.session_factory() as db:
            rec = await db.get(CatalogItemRecord, item_id)
            return record_to_item(rec) if rec else None

    async def list_items(self) -> list[CatalogItem]:
        async with self.session_factory() as db:
            result = await db.execute(select(CatalogItemRecord).order_by(CatalogItemRecord.id))
            return [record_to_item(r) for r in result.scalars().all()]

    async def upsert_items(self, items: list[CatalogItem]) -> int:
        async with self.session_factory() as db:
            for item in items:
                await db.merge(item_to_record(item))
            await db.commit()
        return len(items)


class SqlBookingStore(BookingStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, booking_id: str) -> Booking | None:
        async with self.session_factory() as db:
            rec = await db.get(BookingRecord, booking_id)
            return record_to_booking(rec) if rec else None

    async def get_all(self) -> list[Booking]:
        async with self.session_factory() as db:
            result = await db.execute(select(BookingRecord).order_by(BookingRecord.created_at))
            return [record_to_booking(r) for r in result.scalars().all()]

    async def list_for_user(self, user_id: str) -> list[Booking]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(BookingRecord)
                .where(BookingRecord.user_id == user_id)
                .order_by(BookingRecord.created_at.desc())
            )
            return [record_to_booking(r) for r in result.scalars().all()]

    async def save(self, booking: Booking) -> None:
        async with self.session_factory() as db:
            await db.merge(booking_to_record(booking))
            await db.commit()

    async def save_if_status(self, booking: Booking, expected: BookingStatus) -> bool:
        # Compare-and-set in one UPDATE; the row lock serialises API and worker writers.
        rec = booking_to_record(booking)
        async with self.session_factory() as db:
            result = await db.execute(
                update(BookingRecord)
                .where(BookingRecord.id == booking.id, BookingRecord.status == expected.value)
                .values(
                    status=rec.status,
                    requires_payment=rec.requires_payment,
                    details=rec.details,
                    updated_at=func.now(),
                )
            )
            await db.commit()
            return (result.rowcount or 0) > 0


class SqlNotificationStore(NotificationStore):
    """Newest-first order comes from a per-user `seq` counter, not from timestamps."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        limit: int = 200,
        seq_attempts: int = 3,
    ):
        self.session_factory = session_factory
        self.limit = limit
        self.seq_attempts = seq_attempts

    async def append(self, notification: UserNotification) -> None:
        """
        Insert with the next `seq` for the user.

        Two concurrent appends can pick the same `seq`; the unique
        (user_id, seq) index rejects the loser, which re-reads and tries again.
        """
        attempts = max(1, self.seq_attempts)
        for attempt in range(1, attempts + 1):
            async with self.session_factory() as db:
                try:
                    await self._insert(db, notification)
                    return
                except IntegrityError:
                    await db.rollback()
                    if attempt == attempts:
                        raise
                    logger.info("seq conflict appending %s for %s; retrying", notification.id, notification.user_id)

    async def _insert(self, db: AsyncSession, notification: UserNotification) -> None:
        result = await db.execute(
            select(func.coalesce(func.max(NotificationRecord.seq), 0)).where(
                NotificationRecord.user_id == notification.user_id
            )
        )
        seq = int(result.scalar_one() or 0) + 1

        db.add(
            NotificationRecord(
                id=notification.id,
                user_id=notification.user_id,
                type=notification.type.value,
                title=notification.title,
                message=notification.message,
                read=notification.read,
                booking_id=notification.booking_id,
                created_at=notification.timestamp,
                seq=seq,
            )
        )

        if self.limit > 0 and seq > self.limit:
            await db.execute(
                delete(NotificationRecord).where(
                    NotificationRecord.user_id == notification.user_id,
                    NotificationRecord.seq <= seq - self.limit,
                )
            )

        await db.commit()

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        async with self.session_factory() as db:
            result = await db.execute(
                update(NotificationRecord)
                .where(NotificationRecord.id == notification_id, NotificationRecord.user_id == user_id)
                .values(read=True)
            )
            await db.commit()
            return (result.rowcount or 0) > 0

    async def list_for_user(self, user_id: str, unread_only: bool = False) -> list[UserNotification]:
        stmt = select(NotificationRecord).where(NotificationRecord.user_id == user_id)
        if unread_only:
            stmt = stmt.where(NotificationRecord.read == False)  # noqa: E712
        async with self.session_factory() as db:
            result = await db.execute(stmt.order_by(NotificationRecord.seq.desc()))
            return [record_to_notification(r) for r in result.scalars().all()]
