"""
SQLAlchemy Database Models

Entities:
- User: credentials, contact info and role
- DiningTable: physical seating unit
- MenuItem: orderable dish with its authoritative price
- Reservation: a booking of one table at one instant
- Order / OrderItem: a purchase and its line items

References between entities are nullable foreign keys with ON DELETE SET
NULL: deleting a table, menu item or reservation never cascades into the
records that point at it.
"""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from reservation_api.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class TableLocation(str, enum.Enum):
    HALL = "hall"
    VIP = "vip"
    OUTDOOR = "outdoor"


class MenuCategory(str, enum.Enum):
    """The four cuisine categories of the menu."""
    KEBAB = "kebab"
    STEW = "stew"
    APPETIZER = "appetizer"
    BEVERAGE = "beverage"


class ReservationStatus(str, enum.Enum):
    """Reservation status. Transitions are not restricted."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class OrderStatus(str, enum.Enum):
    """Order status workflow. Transitions are not restricted."""
    DRAFT = "draft"
    PLACED = "placed"
    PAID = "paid"
    CANCELLED = "cancelled"


# A reservation holds its slot while in one of these statuses
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

_ACTIVE_SLOT_PREDICATE = text("status IN ('pending', 'confirmed')")


def _enum_type(enum_cls: type[enum.Enum]) -> Enum:
    """Store enums as their lowercase values in a plain VARCHAR."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True, index=True)
    role = Column(_enum_type(UserRole), default=UserRole.USER, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User #{self.id} - {self.email} - {self.role.value}>"


class DiningTable(Base):
    """A physical table that can be reserved."""
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(100), nullable=False, unique=True)
    capacity = Column(Integer, nullable=False)
    location = Column(_enum_type(TableLocation), default=TableLocation.HALL, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self):
        return f"<DiningTable #{self.id} - {self.name} ({self.capacity})>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    title = Column(String(200), nullable=False)
    price = Column(Integer, nullable=False)  # whole currency units
    category = Column(_enum_type(MenuCategory), nullable=False, index=True)
    image = Column(String(500), nullable=True)
    available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.title} - {self.price}>"


class Reservation(Base):
    """
    A booking of one table at one instant.

    The partial unique index allows at most one active (pending or
    confirmed) reservation per (table, time); cancelled rows are ignored.
    """
    __tablename__ = "reservations"
    __table_args__ = (
        Index(
            "uq_reservations_active_slot",
            "table_id",
            "time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    table_id = Column(
        Integer,
        ForeignKey("tables.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    guests = Column(Integer, nullable=False)
    time = Column(DateTime, nullable=False, index=True)  # naive UTC
    status = Column(
        _enum_type(ReservationStatus),
        default=ReservationStatus.PENDING,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    table = relationship("DiningTable")

    def __repr__(self):
        return f"<Reservation #{self.id} - table {self.table_id} @ {self.time} - {self.status.value}>"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    reservation_id = Column(
        Integer,
        ForeignKey("reservations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    total = Column(Integer, nullable=False)
    status = Column(
        _enum_type(OrderStatus),
        default=OrderStatus.DRAFT,
        nullable=False,
        index=True,
    )
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    reservation = relationship("Reservation")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.total} - {self.status.value}>"


class OrderItem(Base):
    """One line of an order: a menu item reference and a quantity."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)

    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    menu_item_id = Column(
        Integer,
        ForeignKey("menu_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    qty = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")

    # Names used by the public projection
    @property
    def item_id(self):
        return self.menu_item_id

    @property
    def item(self):
        return self.menu_item

    def __repr__(self):
        return f"<OrderItem order={self.order_id} item={self.menu_item_id} x{self.qty}>"
