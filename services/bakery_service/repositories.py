"""Typed data access for products, orders and profiles.

Routers go through these classes instead of building queries inline, so
entity invariants (snapshot totals, sparse updates, single-transaction
order placement) live in one place.
"""

import uuid
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from libs.common.currency import to_money
from libs.common.datetime_utils import utc_now
from libs.common.errors import PersistenceError
from libs.common.logging import get_logger
from services.bakery_service.models import (
    DEFAULT_LEAD_TIME_HOURS,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    Profile,
)
from services.bakery_service.schemas import (
    OrderCreate,
    OrderItemCreate,
    OrderWithItems,
    ProductCreate,
    ProfileSummary,
)
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


def calculate_order_totals(
    items: Iterable[OrderItemCreate],
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Return (total, cost, profit) for the submitted cart lines.

    Prices come from the client's product snapshot, not the current catalog.
    """
    total = Decimal("0")
    cost = Decimal("0")
    for item in items:
        total += item.product.price * item.quantity
        cost += item.product.cost * item.quantity
    total, cost = to_money(total), to_money(cost)
    return total, cost, total - cost


class ProductRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_menu(self, available_only: bool = False) -> Sequence[Product]:
        query = select(Product).order_by(Product.category, Product.name)
        if available_only:
            query = query.where(Product.available.is_(True))
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get(self, product_id: uuid.UUID) -> Optional[Product]:
        return await self.db.get(Product, product_id)

    async def create(self, data: ProductCreate) -> Product:
        values = data.model_dump()
        if not values.get("lead_time_hours"):
            values["lead_time_hours"] = DEFAULT_LEAD_TIME_HOURS
        product = Product(**values)
        self.db.add(product)
        await self._commit("create product")
        await self.db.refresh(product)
        return product

    async def update(self, product: Product, changes: dict) -> Product:
        """Write only the given fields; everything else is left untouched."""
        for field, value in changes.items():
            setattr(product, field, value)
        product.updated_at = utc_now()
        await self._commit("update product")
        await self.db.refresh(product)
        return product

    async def delete(self, product: Product) -> None:
        # Order items keep their own price/quantity snapshot
        await self.db.delete(product)
        await self._commit("delete product")

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise PersistenceError(f"Failed to {action}") from exc


class ProfileRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> Optional[Profile]:
        return await self.db.get(Profile, user_id)

    async def update(self, profile: Profile, changes: dict) -> Profile:
        for field, value in changes.items():
            setattr(profile, field, value)
        profile.updated_at = utc_now()
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Error updating profile %s: %s", profile.id, exc)
            raise PersistenceError("Failed to update profile") from exc
        await self.db.refresh(profile)
        return profile

    async def summaries(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, ProfileSummary]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Profile).where(Profile.id.in_(ids)))
        return {
            profile.id: ProfileSummary.model_validate(profile)
            for profile in result.scalars().all()
        }


class OrderRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_items(self):
        # populate_existing so objects already in the session get their
        # items and products loaded too
        return (
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .execution_options(populate_existing=True)
        )

    async def get(self, order_id: uuid.UUID) -> Optional[Order]:
        return await self.db.get(Order, order_id)

    async def get_with_items(self, order_id: uuid.UUID) -> Optional[Order]:
        result = await self.db.execute(self._with_items().where(Order.id == order_id))
        return result.scalar_one_or_none()

    async def list_with_items(
        self, user_id: Optional[uuid.UUID] = None
    ) -> list[OrderWithItems]:
        """Newest first, with items, their products and the customer profile."""
        query = self._with_items().order_by(Order.created_at.desc())
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        try:
            result = await self.db.execute(query)
            orders = result.scalars().all()
            profiles = await ProfileRepository(self.db).summaries(
                order.user_id for order in orders
            )
        except SQLAlchemyError as exc:
            logger.error("Error fetching orders: %s", exc)
            raise PersistenceError("Failed to fetch orders") from exc

        return [
            OrderWithItems.model_validate(order).model_copy(
                update={"profile": profiles.get(order.user_id)}
            )
            for order in orders
        ]

    async def create(
        self, data: OrderCreate, customer: Optional[Profile] = None
    ) -> Order:
        """
        Insert the order and its items in one transaction.

        Either both land or neither does, so a failed item insert cannot
        leave an empty order behind.
        """
        total, cost, profit = calculate_order_totals(data.items)
        order = Order(
            order_number=Order.generate_order_number(),
            user_id=data.user_id,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            total=total,
            cost=cost,
            profit=profit,
            pickup_date=data.pickup_date,
            delivery_method=data.delivery_method,
            notes=data.notes,
            customer_name=customer.name if customer else None,
            customer_phone=customer.phone if customer else None,
        )
        order.items = [
            OrderItem(
                product_id=item.product.id,
                quantity=item.quantity,
                price=to_money(item.product.price),
            )
            for item in data.items
        ]
        self.db.add(order)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Order creation error for user %s: %s", data.user_id, exc)
            raise PersistenceError("Failed to create order") from exc
        await self.db.refresh(order)
        return order

    async def update_status(
        self,
        order: Order,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Order:
        """Unconditional field write; transition checks happen before this."""
        if status is not None:
            order.status = status
        if payment_status is not None:
            order.payment_status = payment_status
        order.updated_at = utc_now()
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Error updating order %s: %s", order.id, exc)
            raise PersistenceError("Failed to update order") from exc
        await self.db.refresh(order)
        return order

    async def attach_payment_link(self, order: Order, payment_link_id: str) -> Order:
        order_id = order.id
        order.stripe_payment_link_id = payment_link_id
        order.payment_status = PaymentStatus.PENDING
        order.updated_at = utc_now()
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            # The link exists at Stripe already; the caller still gets the URL
            logger.error("Error saving payment link for order %s: %s", order_id, exc)
            await self.db.refresh(order)
        return order
