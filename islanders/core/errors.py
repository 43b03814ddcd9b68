from __future__ import annotations


class BookingError(Exception):
    """Base class for booking lifecycle failures."""


class ItemNotFoundError(BookingError):
    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class BookingNotFoundError(BookingError):
    def __init__(self, booking_id: str):
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class InvalidTransitionError(BookingError):
    def __init__(self, booking_id: str, current: str, target: str):
        super().__init__(f"Booking {booking_id}: cannot move from '{current}' to '{target}'")
        self.booking_id = booking_id
        self.current = current
        self.target = target


class PersistenceError(BookingError):
    """A store call failed after all retries (or timed out)."""


class OwnerAlertError(BookingError):
    """The listing owner could not be alerted about a viewing request."""
