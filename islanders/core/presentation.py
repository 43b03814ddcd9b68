"""Which booking card the chat should render, as a function of booking status."""

from __future__ import annotations

from enum import Enum

from islanders.core.schemas import Booking, BookingStatus


class BookingCard(str, Enum):
    PAYMENT_FORM = "payment_form"
    RECEIPT = "receipt"
    VIEWING_TIMELINE = "viewing_timeline"
    TAXI_TRACKER = "taxi_tracker"
    NONE = "none"


_VIEWING_STATUSES = {
    BookingStatus.VIEWING_REQUESTED,
    BookingStatus.VIEWING_AWAITING_OWNER,
    BookingStatus.VIEWING_CONFIRMED,
}


def select_card(booking: Booking) -> BookingCard:
    if booking.status == BookingStatus.PAYMENT_PENDING:
        return BookingCard.PAYMENT_FORM if booking.requires_payment else BookingCard.NONE
    if booking.status == BookingStatus.CONFIRMED:
        return BookingCard.RECEIPT
    if booking.status in _VIEWING_STATUSES:
        return BookingCard.VIEWING_TIMELINE
    if booking.status == BookingStatus.TAXI_DISPATCHED:
        return BookingCard.TAXI_TRACKER
    return BookingCard.NONE


def viewing_timeline_step(booking: Booking) -> int:
    """
    Step shown on the viewing timeline card:
    1 requested, 2 owner contacted, 3 owner reviewing, 4 confirmed.
    """
    if booking.status == BookingStatus.VIEWING_CONFIRMED:
        return 4
    if booking.status == BookingStatus.VIEWING_AWAITING_OWNER:
        return 3 if booking.whatsapp_status == "sent" else 2
    if booking.whatsapp_status == "sent":
        return 2
    return 1
