from __future__ import annotations

from sqlalchemy import Float, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from islanders.models.base import Base, TimestampMixin


class CatalogItemRecord(TimestampMixin, Base):
    __tablename__ = "catalog_items"
    __table_args__ = (Index("ix_catalog_items_domain", "domain"),)

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    domain: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), default="GBP", nullable=False)
    image_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Remaining CatalogItem fields (category, tags, amenities, ...).
    attributes: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
