"""
Catalog Service

CRUD over dining tables and menu items.

Deleting a table or menu item does not touch the reservations and orders
that reference it; those keep a dangling reference which the read
projections render as null.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.core.errors import ConflictError, NotFoundError, ValidationError
from reservation_api.models import DiningTable, MenuCategory, MenuItem, TableLocation

logger = logging.getLogger(__name__)


def _table_name(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError("Table name is required")
    return value.strip()


def _table_capacity(value: Optional[int]) -> int:
    if value is None or value < 1:
        raise ValidationError("Table capacity must be at least 1")
    return value


def _menu_title(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError("Menu item title is required")
    return value.strip()


def _menu_price(value: Optional[int]) -> int:
    if value is None or value < 0:
        raise ValidationError("Menu item price must be zero or more")
    return value


def _menu_category(value: Any) -> MenuCategory:
    try:
        return MenuCategory(value)
    except ValueError:
        valid = [c.value for c in MenuCategory]
        raise ValidationError(f"Invalid category. Options: {valid}")


class CatalogService:
    """Tables and menu items, owned by the admin domain."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # TABLES
    # =========================================================================

    async def list_tables(self) -> list[DiningTable]:
        result = await self.db.execute(select(DiningTable).order_by(DiningTable.id))
        return list(result.scalars().all())

    async def get_table(self, table_id: int) -> DiningTable:
        table = await self.db.get(DiningTable, table_id)
        if table is None:
            raise NotFoundError(f"Table #{table_id} not found")
        return table

    async def create_table(
        self,
        name: str,
        capacity: int,
        location: TableLocation = TableLocation.HALL,
    ) -> DiningTable:
        name = _table_name(name)
        capacity = _table_capacity(capacity)
        await self._ensure_table_name_free(name)

        table = DiningTable(name=name, capacity=capacity, location=TableLocation(location))
        self.db.add(table)
        await self._commit_table(name)
        await self.db.refresh(table)

        logger.info(f"Table #{table.id} '{table.name}' created")
        return table

    async def update_table(self, table_id: int, changes: dict) -> DiningTable:
        """Apply a partial update; only keys present in changes are touched."""
        table = await self.get_table(table_id)

        if "name" in changes:
            name = _table_name(changes["name"])
            if name != table.name:
                await self._ensure_table_name_free(name, exclude_id=table.id)
            table.name = name
        if "capacity" in changes:
            table.capacity = _table_capacity(changes["capacity"])
        if "location" in changes:
            if changes["location"] is None:
                raise ValidationError("Table location is required")
            table.location = TableLocation(changes["location"])

        await self._commit_table(table.name)
        await self.db.refresh(table)

        logger.info(f"Table #{table.id} updated")
        return table

    async def delete_table(self, table_id: int) -> None:
        table = await self.get_table(table_id)
        await self.db.delete(table)
        await self.db.commit()
        logger.info(f"Table #{table_id} deleted")

    async def _ensure_table_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = select(DiningTable.id).where(DiningTable.name == name)
        if exclude_id is not None:
            query = query.where(DiningTable.id != exclude_id)
        result = await self.db.execute(query)
        if result.first() is not None:
            raise ConflictError(f"A table named '{name}' already exists")

    async def _commit_table(self, name: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(f"A table named '{name}' already exists")

    # =========================================================================
    # MENU
    # =========================================================================

    async def list_menu(self, category: Optional[MenuCategory] = None) -> list[MenuItem]:
        query = select(MenuItem).order_by(MenuItem.id)
        if category is not None:
            query = query.where(MenuItem.category == _menu_category(category))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_menu_item(self, item_id: int) -> MenuItem:
        item = await self.db.get(MenuItem, item_id)
        if item is None:
            raise NotFoundError(f"Menu item #{item_id} not found")
        return item

    async def create_menu_item(
        self,
        title: str,
        price: int,
        category: MenuCategory,
        image: Optional[str] = None,
        available: bool = True,
    ) -> MenuItem:
        item = MenuItem(
            title=_menu_title(title),
            price=_menu_price(price),
            category=_menu_category(category),
            image=image,
            available=available,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Menu item #{item.id} '{item.title}' created at {item.price}")
        return item

    async def update_menu_item(self, item_id: int, changes: dict) -> MenuItem:
        """Apply a partial update; only keys present in changes are touched."""
        item = await self.get_menu_item(item_id)

        if "title" in changes:
            item.title = _menu_title(changes["title"])
        if "price" in changes:
            item.price = _menu_price(changes["price"])
        if "category" in changes:
            item.category = _menu_category(changes["category"])
        if "image" in changes:
            item.image = changes["image"]
        if "available" in changes:
            if changes["available"] is None:
                raise ValidationError("available must be true or false")
            item.available = changes["available"]

        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Menu item #{item.id} updated")
        return item

    async def delete_menu_item(self, item_id: int) -> None:
        item = await self.get_menu_item(item_id)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"Menu item #{item_id} deleted")
