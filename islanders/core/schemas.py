from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    PAYMENT_PENDING = "payment_pending"
    CONFIRMED = "confirmed"
    VIEWING_REQUESTED = "viewing_requested"
    VIEWING_AWAITING_OWNER = "viewing_awaiting_owner"
    VIEWING_CONFIRMED = "viewing_confirmed"
    TAXI_DISPATCHED = "taxi_dispatched"


class FlowType(str, Enum):
    SHORT_TERM_RENTAL = "short_term_rental"
    LONG_TERM = "long_term"
    LONG_TERM_VIEWING = "long_term_viewing"
    TAXI = "taxi"


class NotificationType(str, Enum):
    BOOKING = "booking"
    SOCIAL = "social"
    SYSTEM = "system"
    PROMOTION = "promotion"


# --- Catalog ---


class CatalogItem(BaseModel):
    id: str
    domain: str
    title: str
    location: str = ""
    price: float = 0.0
    currency: str = "GBP"
    image_url: str = ""
    category: str = ""
    rental_type: Optional[str] = None
    hotel_type: Optional[str] = None
    vehicle_type: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    rating: Optional[float] = None
    agent_phone: Optional[str] = None
    description: str = ""


class SearchQuery(BaseModel):
    domain: Optional[str] = None
    sub_category: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    amenities: list[str] = Field(default_factory=list)
    query: Optional[str] = None
    sort_by: Optional[str] = None  # "price_asc" | "price_desc" | "rating"


# --- Bookings ---


class Coordinates(BaseModel):
    lat: float
    lng: float


class DriverDetails(BaseModel):
    name: str
    plate: str
    car: str
    eta: str


class Booking(BaseModel):
    id: str
    user_id: str
    item_id: str
    item_title: str
    item_image: str = ""
    domain: str
    customer_name: str
    customer_contact: Optional[str] = None
    status: BookingStatus
    total_price: float = 0.0
    created_at: datetime = Field(default_factory=utcnow)

    # Flow-specific.
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    viewing_time: Optional[str] = None
    pickup_coordinates: Optional[Coordinates] = None
    driver_details: Optional[DriverDetails] = None
    special_requests: Optional[str] = None
    needs_pickup: bool = False
    whatsapp_status: Optional[str] = None
    agent_phone: Optional[str] = None
    requires_payment: bool = False


class CustomerInfo(BaseModel):
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    viewing_time: Optional[str] = None
    special_requests: Optional[str] = None
    needs_pickup: bool = False


class BookingResult(BaseModel):
    booking: Booking
    requires_payment: bool


class TaxiRequest(BaseModel):
    destination: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    latitude: float
    longitude: float


# --- Notifications ---


class UserNotification(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    timestamp: datetime = Field(default_factory=utcnow)
    booking_id: Optional[str] = None
