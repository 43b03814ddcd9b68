from islanders.models.booking import BookingRecord
from islanders.models.catalog import CatalogItemRecord
from islanders.models.notification import NotificationRecord

__all__ = ["BookingRecord", "CatalogItemRecord", "NotificationRecord"]
