"""
Demo Data

Resets tables, menu items and users, then inserts the default dining
tables, the sixteen dishes of the four menu categories, one admin and
one regular user. Reservations and orders are left untouched.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.core.security import PasswordHasher
from reservation_api.models import (
    DiningTable,
    MenuCategory,
    MenuItem,
    TableLocation,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)

DEFAULT_TABLES = [
    ("Table 1", 2, TableLocation.HALL),
    ("Table 2", 4, TableLocation.HALL),
    ("Table 3", 6, TableLocation.HALL),
    ("Table 4", 2, TableLocation.VIP),
    ("Table 5", 4, TableLocation.VIP),
    ("Table 6", 8, TableLocation.OUTDOOR),
    ("Table 7", 4, TableLocation.OUTDOOR),
]

DEFAULT_MENU = [
    ("Koobideh Kebab", 45000, MenuCategory.KEBAB),
    ("Barg Kebab", 55000, MenuCategory.KEBAB),
    ("Joojeh Kebab", 40000, MenuCategory.KEBAB),
    ("Chenjeh Kebab", 60000, MenuCategory.KEBAB),
    ("Ghormeh Sabzi", 35000, MenuCategory.STEW),
    ("Gheimeh", 38000, MenuCategory.STEW),
    ("Fesenjan", 42000, MenuCategory.STEW),
    ("Bademjan", 30000, MenuCategory.STEW),
    ("Shirazi Salad", 15000, MenuCategory.APPETIZER),
    ("Mast-o-Khiar", 12000, MenuCategory.APPETIZER),
    ("Kashk-e Bademjan", 18000, MenuCategory.APPETIZER),
    ("Mirza Ghasemi", 16000, MenuCategory.APPETIZER),
    ("Doogh", 8000, MenuCategory.BEVERAGE),
    ("Sour Cherry Sharbat", 10000, MenuCategory.BEVERAGE),
    ("Tea", 5000, MenuCategory.BEVERAGE),
    ("Turkish Coffee", 15000, MenuCategory.BEVERAGE),
]

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"
USER_EMAIL = "user@example.com"
USER_PASSWORD = "user123"


@dataclass
class SeedResult:
    tables: int
    menu_items: int
    users: int


async def seed_database(db: AsyncSession, hasher: PasswordHasher) -> SeedResult:
    """Replace catalog and users with the demo data set."""
    await db.execute(delete(DiningTable))
    await db.execute(delete(MenuItem))
    await db.execute(delete(User))

    db.add_all(
        DiningTable(name=name, capacity=capacity, location=location)
        for name, capacity, location in DEFAULT_TABLES
    )
    db.add_all(
        MenuItem(title=title, price=price, category=category, available=True)
        for title, price, category in DEFAULT_MENU
    )
    db.add_all([
        User(
            email=ADMIN_EMAIL,
            password_hash=hasher.hash(ADMIN_PASSWORD),
            first_name="System",
            last_name="Admin",
            role=UserRole.ADMIN,
        ),
        User(
            email=USER_EMAIL,
            password_hash=hasher.hash(USER_PASSWORD),
            first_name="Test",
            last_name="User",
            role=UserRole.USER,
        ),
    ])
    await db.commit()

    result = SeedResult(tables=len(DEFAULT_TABLES), menu_items=len(DEFAULT_MENU), users=2)
    logger.info(
        f"Seeded {result.tables} tables, {result.menu_items} menu items "
        f"and {result.users} users"
    )
    return result
