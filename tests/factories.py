"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(name="Rye", price=Decimal("9.50"))
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _in_two_days() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=2)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@bakery.com"


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class ProfileFactory:
    @staticmethod
    def create(**overrides):
        from services.bakery_service.models import Profile, UserRole

        defaults = {
            "id": _uuid(),
            "email": _unique_email(),
            "name": "Test Customer",
            "phone": "+1 555 0199",
            "role": UserRole.CUSTOMER,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        defaults["role"] = UserRole(defaults["role"])
        return Profile(**defaults)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.bakery_service.models import Product

        defaults = {
            "id": _uuid(),
            "name": "Baguette",
            "description": "Crisp crust, open crumb",
            "price": Decimal("16.00"),
            "cost": Decimal("4.00"),
            "category": "French Breads",
            "available": True,
            "lead_time_hours": 48,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderFactory:
    @staticmethod
    def create(user_id=None, items=(), **overrides):
        """
        ``items`` is a sequence of (product, quantity); totals are derived
        from them unless given explicitly.
        """
        from services.bakery_service.models import (
            DeliveryMethod,
            Order,
            OrderItem,
            OrderStatus,
            PaymentStatus,
        )

        order_items = [
            OrderItem(
                id=_uuid(),
                product_id=product.id,
                quantity=quantity,
                price=product.price,
                created_at=_now(),
            )
            for product, quantity in items
        ]
        total = sum((p.price * q for p, q in items), Decimal("0"))
        cost = sum((p.cost * q for p, q in items), Decimal("0"))

        defaults = {
            "id": _uuid(),
            "order_number": Order.generate_order_number(),
            "user_id": user_id or _uuid(),
            "status": OrderStatus.PENDING,
            "payment_status": PaymentStatus.PENDING,
            "total": total,
            "cost": cost,
            "profit": total - cost,
            "pickup_date": _in_two_days(),
            "delivery_method": DeliveryMethod.PICKUP,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        order = Order(**defaults)
        order.items = order_items
        return order
