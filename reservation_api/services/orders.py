"""
Order Service

Creates orders from (menu item, quantity) pairs. The total is always
computed here from the menu items' current stored prices; prices sent
by the client are never read.

An order is written only after every line has been resolved: one bad
menu item id rejects the whole order and nothing is stored.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from reservation_api.core.errors import NotFoundError, ValidationError
from reservation_api.models import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    Reservation,
)

logger = logging.getLogger(__name__)


def compute_total(lines: Iterable[tuple[int, int]], prices: Mapping[int, int]) -> int:
    """Sum of price x qty over (menu item id, qty) lines."""
    return sum(prices[item_id] * qty for item_id, qty in lines)


class OrderService:
    """Order lifecycle backed by one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        lines: Sequence[tuple[int, int]],
        customer_name: str,
        customer_phone: str,
        reservation_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """
        Place an order.

        Args:
            lines: (menu item id, qty) pairs, in display order

        Raises:
            ValidationError: no lines, missing customer details, qty < 1,
                unknown or unavailable menu item, unknown reservation
        """
        if not lines:
            raise ValidationError("Order must contain at least one item")
        if not customer_name or not customer_name.strip():
            raise ValidationError("customerName and customerPhone are required")
        if not customer_phone or not customer_phone.strip():
            raise ValidationError("customerName and customerPhone are required")
        for item_id, qty in lines:
            if qty is None or qty < 1:
                raise ValidationError(f"Quantity for menu item {item_id} must be at least 1")

        requested_ids = {item_id for item_id, _ in lines}
        result = await self.db.execute(select(MenuItem).where(MenuItem.id.in_(requested_ids)))
        menu = {item.id: item for item in result.scalars().all()}

        for item_id, _ in lines:
            menu_item = menu.get(item_id)
            if menu_item is None:
                raise ValidationError(f"Menu item with id {item_id} not found")
            if not menu_item.available:
                raise ValidationError(f"Menu item '{menu_item.title}' is not available")

        if reservation_id is not None and await self.db.get(Reservation, reservation_id) is None:
            raise ValidationError(f"Reservation with id {reservation_id} not found")

        total = compute_total(lines, {item_id: item.price for item_id, item in menu.items()})

        order = Order(
            reservation_id=reservation_id,
            total=total,
            status=OrderStatus.PLACED,
            customer_name=customer_name.strip(),
            customer_phone=customer_phone.strip(),
            notes=notes,
            items=[
                OrderItem(position=position, menu_item_id=item_id, qty=qty)
                for position, (item_id, qty) in enumerate(lines)
            ],
        )
        self.db.add(order)
        await self.db.commit()

        logger.info(
            f"Order #{order.id} placed for {order.customer_name}: "
            f"{len(lines)} line(s), total {total}"
        )
        return await self.get(order.id)

    async def update_status(self, order_id: int, status: OrderStatus) -> Order:
        """Set any status; transitions are not restricted."""
        order = await self.get(order_id)
        order.status = OrderStatus(status)
        await self.db.commit()

        logger.info(f"Order #{order_id} status -> {order.status.value}")
        return await self.get(order_id)

    async def list(
        self,
        reservation_id: Optional[int] = None,
        phone: Optional[str] = None,
    ) -> list[Order]:
        """List orders, newest first. Both filters are exact matches."""
        query = self._query().order_by(Order.created_at.desc(), Order.id.desc())
        if reservation_id is not None:
            query = query.where(Order.reservation_id == reservation_id)
        if phone:
            query = query.where(Order.customer_phone == phone)

        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    async def get(self, order_id: int) -> Order:
        result = await self.db.execute(self._query().where(Order.id == order_id))
        order = result.scalars().unique().one_or_none()
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    async def delete(self, order_id: int) -> None:
        # Line items are loaded by get() and removed with the order
        order = await self.get(order_id)
        await self.db.delete(order)
        await self.db.commit()
        logger.info(f"Order #{order_id} deleted")

    @staticmethod
    def _query():
        return (
            select(Order)
            .options(
                selectinload(Order.items).joinedload(OrderItem.menu_item),
                joinedload(Order.reservation).joinedload(Reservation.table),
            )
            .execution_options(populate_existing=True)
        )
