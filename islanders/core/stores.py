"""
Persistence gateway: abstract stores used by the booking lifecycle.

Two backends exist:
- in-memory (below): local development, tests, single-process demos
- SQLAlchemy (islanders.core.crud): Postgres via asyncpg

To add a backend, subclass the three stores and wire it in `build_stores()`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from islanders.core.schemas import Booking, BookingStatus, CatalogItem, UserNotification


class CatalogStore(ABC):
    """Read-only access to catalog items."""

    @abstractmethod
    async def get_item(self, item_id: str) -> CatalogItem | None:
        """Return the item or None when the id does not resolve."""

    @abstractmethod
    async def list_items(self) -> list[CatalogItem]:
        """Return every item (search is a linear scan over this list)."""


class BookingStore(ABC):
    @abstractmethod
    async def get(self, booking_id: str) -> Booking | None:
        """Return a booking by id or None."""

    @abstractmethod
    async def get_all(self) -> list[Booking]:
        """Return all bookings across users."""

    @abstractmethod
    async def save(self, booking: Booking) -> None:
        """Insert or replace a booking keyed by id."""

    @abstractmethod
    async def save_if_status(self, booking: Booking, expected: BookingStatus) -> bool:
        """
        Write `booking` only while the stored copy is still at `expected`.

        Returns False (and writes nothing) when the booking is gone or another
        writer already moved it. Must be atomic across processes.
        """

    async def list_for_user(self, user_id: str) -> list[Booking]:
        return [b for b in await self.get_all() if b.user_id == user_id]


class NotificationStore(ABC):
    @abstractmethod
    async def append(self, notification: UserNotification) -> None:
        """Store a notification as the newest entry of its user's log."""

    @abstractmethod
    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        """Flip one record's read flag. Returns False if no such record."""

    @abstractmethod
    async def list_for_user(self, user_id: str, unread_only: bool = False) -> list[UserNotification]:
        """Return the user's log, most recent first."""


# --- In-memory backend ---


class InMemoryCatalogStore(CatalogStore):
    def __init__(self, items: list[CatalogItem] | None = None):
        self._items: dict[str, CatalogItem] = {i.id: i for i in (items or [])}

    async def get_item(self, item_id: str) -> CatalogItem | None:
        return self._items.get(item_id)

    async def list_items(self) -> list[CatalogItem]:
        return list(self._items.values())


class InMemoryBookingStore(BookingStore):
    def __init__(self):
        self._bookings: dict[str, Booking] = {}

    async def get(self, booking_id: str) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    async def get_all(self) -> list[Booking]:
        return [b.model_copy(deep=True) for b in self._bookings.values()]

    async def save(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking.model_copy(deep=True)

    async def save_if_status(self, booking: Booking, expected: BookingStatus) -> bool:
        current = self._bookings.get(booking.id)
        if current is None or current.status != expected:
            return False
        await self.save(booking)
        return True


class InMemoryNotificationStore(NotificationStore):
    """Per-user lists kept newest-first. Entries past `limit` are dropped on append."""

    def __init__(self, limit: int = 200):
        self.limit = limit
        self._logs: dict[str, list[UserNotification]] = {}

    async def append(self, notification: UserNotification) -> None:
        log = self._logs.setdefault(notification.user_id, [])
        log.insert(0, notification.model_copy())
        if self.limit > 0 and len(log) > self.limit:
            del log[self.limit :]

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        for n in self._logs.get(user_id, []):
            if n.id == notification_id:
                n.read = True
                return True
        return False

    async def list_for_user(self, user_id: str, unread_only: bool = False) -> list[UserNotification]:
        log = self._logs.get(user_id, [])
        return [n.model_copy() for n in log if not (unread_only and n.read)]


@dataclass
class Stores:
    catalog: CatalogStore
    bookings: BookingStore
    notifications: NotificationStore


def build_stores(settings, catalog_items: list[CatalogItem] | None = None) -> Stores:
    """Create the store bundle for the configured backend."""
    backend = (settings.storage_backend or "memory").lower()

    if backend == "memory":
        return Stores(
            catalog=InMemoryCatalogStore(catalog_items or []),
            bookings=InMemoryBookingStore(),
            notifications=InMemoryNotificationStore(limit=settings.notification_log_limit),
        )

    if backend == "database":
        from islanders.core.crud import SqlBookingStore, SqlCatalogStore, SqlNotificationStore
        from islanders.db import async_session

        return Stores(
            catalog=SqlCatalogStore(async_session),
            bookings=SqlBookingStore(async_session),
            notifications=SqlNotificationStore(async_session, limit=settings.notification_log_limit),
        )

    raise ValueError(f"Unknown storage backend: '{backend}'. Available: memory, database")
