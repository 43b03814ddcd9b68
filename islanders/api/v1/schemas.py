from __future__ import annotations

from pydantic import BaseModel, Field

from islanders.core.presentation import BookingCard
from islanders.core.schemas import Booking, CatalogItem, CustomerInfo, FlowType, UserNotification


class BookingCreateRequest(CustomerInfo):
    item_id: str
    # Free-form: anything other than short_term_rental takes the viewing path.
    flow_type: str = FlowType.LONG_TERM.value


class BookingCreateResponse(BaseModel):
    booking: Booking
    requires_payment: bool
    card: BookingCard


class BookingDetailResponse(BaseModel):
    booking: Booking
    card: BookingCard
    timeline_step: int | None = None


class TaxiDispatchResponse(BaseModel):
    booking: Booking
    card: BookingCard


class SearchResponse(BaseModel):
    items: list[CatalogItem] = Field(default_factory=list)
    total: int


class NotificationListResponse(BaseModel):
    items: list[UserNotification] = Field(default_factory=list)
    unread: int


class MarkReadResponse(BaseModel):
    id: str
    read: bool
