"""Bakery catalog models: products and customer favourites."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

DEFAULT_LEAD_TIME_HOURS = 48


class Product(Base):
    """Menu items."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    available: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    # Minimum hours between ordering and earliest pickup
    lead_time_hours: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=DEFAULT_LEAD_TIME_HOURS
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("price > 0", name="product_positive_price"),
        CheckConstraint("cost > 0", name="product_positive_cost"),
    )

    @property
    def unit_profit(self) -> Decimal:
        return self.price - self.cost

    def __repr__(self):
        return f"<Product {self.name} ${self.price}>"


class CustomerFavorite(Base):
    """Products a customer has starred."""

    __tablename__ = "customer_favorites"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="unique_customer_favorite"),
    )
