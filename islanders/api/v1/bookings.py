from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from islanders.core.errors import (
    BookingNotFoundError,
    InvalidTransitionError,
    ItemNotFoundError,
    OwnerAlertError,
    PersistenceError,
)
from islanders.core.presentation import BookingCard, select_card, viewing_timeline_step
from islanders.core.runtime import Runtime
from islanders.core.schemas import Booking, CustomerInfo, TaxiRequest

from .deps import get_runtime, get_user_id
from .schemas import (
    BookingCreateRequest,
    BookingCreateResponse,
    BookingDetailResponse,
    TaxiDispatchResponse,
)


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["bookings"])


def _detail(booking: Booking) -> BookingDetailResponse:
    card = select_card(booking)
    step = viewing_timeline_step(booking) if card == BookingCard.VIEWING_TIMELINE else None
    return BookingDetailResponse(booking=booking, card=card, timeline_step=step)


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (ItemNotFoundError, BookingNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, OwnerAlertError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(exc, PersistenceError):
        logger.error("Persistence failure: %s", exc)
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Booking storage unavailable")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("/bookings", response_model=BookingCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreateRequest,
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> BookingCreateResponse:
    customer = CustomerInfo(**payload.model_dump(exclude={"item_id", "flow_type"}))
    try:
        result = await runtime.service.create_booking(user_id, payload.flow_type, customer, payload.item_id)
    except (ItemNotFoundError, PersistenceError) as e:
        raise _http_error(e) from e

    return BookingCreateResponse(
        booking=result.booking,
        requires_payment=result.requires_payment,
        card=select_card(result.booking),
    )


@router.get("/bookings", response_model=list[BookingDetailResponse])
async def list_bookings(
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> list[BookingDetailResponse]:
    bookings = await runtime.service.list_bookings(user_id)
    return [_detail(b) for b in bookings]


@router.get("/bookings/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: str,
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> BookingDetailResponse:
    try:
        booking = await runtime.service.get_booking(user_id, booking_id)
    except (BookingNotFoundError, PersistenceError) as e:
        raise _http_error(e) from e
    return _detail(booking)


@router.post("/bookings/{booking_id}/payment", response_model=BookingDetailResponse)
async def complete_payment(
    booking_id: str,
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> BookingDetailResponse:
    try:
        booking = await runtime.service.complete_payment(user_id, booking_id)
    except (BookingNotFoundError, InvalidTransitionError, PersistenceError) as e:
        raise _http_error(e) from e
    return _detail(booking)


@router.post("/bookings/{booking_id}/owner-contact", response_model=BookingDetailResponse)
async def contact_owner(
    booking_id: str,
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> BookingDetailResponse:
    try:
        booking = await runtime.contact_owner(user_id, booking_id)
    except (BookingNotFoundError, InvalidTransitionError, OwnerAlertError, PersistenceError) as e:
        raise _http_error(e) from e
    return _detail(booking)


@router.post("/taxi", response_model=TaxiDispatchResponse, status_code=status.HTTP_201_CREATED)
async def dispatch_taxi(
    payload: TaxiRequest,
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> TaxiDispatchResponse:
    try:
        booking = await runtime.service.dispatch_taxi(user_id, payload)
    except PersistenceError as e:
        raise _http_error(e) from e
    return TaxiDispatchResponse(booking=booking, card=select_card(booking))
