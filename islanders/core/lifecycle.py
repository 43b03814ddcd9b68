"""Booking lifecycle state graph.

The transition table below is the stable contract for every flow. Ticker
edges fire on simulated backend events (payment webhook, owner approval);
user edges fire on explicit actions (payment submitted, owner contacted).
"""

from __future__ import annotations

from dataclasses import dataclass

from islanders.core.errors import InvalidTransitionError
from islanders.core.schemas import Booking, BookingStatus, FlowType

S = BookingStatus

TERMINAL_STATUSES = frozenset({S.CONFIRMED, S.VIEWING_CONFIRMED})

# Position along a flow's path. Moves must strictly increase rank.
STATUS_RANK: dict[BookingStatus, int] = {
    S.PAYMENT_PENDING: 0,
    S.CONFIRMED: 2,
    S.VIEWING_REQUESTED: 0,
    S.VIEWING_AWAITING_OWNER: 1,
    S.VIEWING_CONFIRMED: 2,
    S.TAXI_DISPATCHED: 0,
}

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    S.PAYMENT_PENDING: frozenset({S.CONFIRMED}),
    S.VIEWING_REQUESTED: frozenset({S.VIEWING_AWAITING_OWNER, S.VIEWING_CONFIRMED}),
    S.VIEWING_AWAITING_OWNER: frozenset({S.VIEWING_CONFIRMED}),
    S.CONFIRMED: frozenset(),
    S.VIEWING_CONFIRMED: frozenset(),
    S.TAXI_DISPATCHED: frozenset(),
}


@dataclass(frozen=True)
class TickerEdge:
    """One probabilistic ticker rule: fire when draw > threshold."""

    source: BookingStatus
    target: BookingStatus | None  # None: notify only, status unchanged
    threshold_key: str
    title: str
    message: str


TICKER_EDGES: tuple[TickerEdge, ...] = (
    TickerEdge(
        source=S.PAYMENT_PENDING,
        target=S.CONFIRMED,
        threshold_key="payment_confirm_threshold",
        title="Payment Confirmed",
        message="Your payment for {title} has been confirmed. Your booking is complete.",
    ),
    TickerEdge(
        source=S.VIEWING_REQUESTED,
        target=S.VIEWING_CONFIRMED,
        threshold_key="viewing_confirm_threshold",
        title="Viewing Approved",
        message="The owner approved your viewing for {title}.",
    ),
    TickerEdge(
        source=S.VIEWING_AWAITING_OWNER,
        target=S.VIEWING_CONFIRMED,
        threshold_key="viewing_confirm_threshold",
        title="Viewing Approved",
        message="The owner approved your viewing for {title}.",
    ),
    TickerEdge(
        source=S.TAXI_DISPATCHED,
        target=None,
        threshold_key="driver_arriving_threshold",
        title="Driver Arriving",
        message="{driver} is arriving now for your {title}.",
    ),
)

_EDGES_BY_SOURCE = {edge.source: edge for edge in TICKER_EDGES}


def initial_status(flow_type: FlowType | str) -> BookingStatus:
    """Short-term rentals wait for payment; every other item flow requests a viewing."""
    if requires_payment(flow_type):
        return S.PAYMENT_PENDING
    return S.VIEWING_REQUESTED


def requires_payment(flow_type: FlowType | str) -> bool:
    return flow_type == FlowType.SHORT_TERM_RENTAL


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATUSES


def ticker_edge_for(status: BookingStatus) -> TickerEdge | None:
    return _EDGES_BY_SOURCE.get(status)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        return False
    return STATUS_RANK[target] > STATUS_RANK[current]


def transition(booking: Booking, target: BookingStatus) -> Booking:
    """Return a copy of `booking` moved to `target`.

    Raises:
        InvalidTransitionError: if `target` is not a successor of the current status.
    """
    if not can_transition(booking.status, target):
        raise InvalidTransitionError(booking.id, booking.status.value, target.value)

    update: dict = {"status": target}
    if target == S.CONFIRMED:
        update["requires_payment"] = False
    return booking.model_copy(update=update)
