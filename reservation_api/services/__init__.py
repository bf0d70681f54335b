"""
                        Services Module

Business logic, independent of HTTP. Services raise domain errors from
reservation_api.core.errors and never build responses.

Services:
    - identity: credentials, session tokens, role gates
    - users: admin user directory
    - catalog: dining tables and menu items
    - reservations: bookings and the one-active-reservation-per-slot rule
    - orders: orders priced from authoritative menu prices
"""

from reservation_api.services.catalog import CatalogService
from reservation_api.services.identity import (
    IdentityService,
    require_owner_or_admin,
    require_role,
)
from reservation_api.services.orders import OrderService
from reservation_api.services.reservations import ReservationService
from reservation_api.services.users import UserService

__all__ = [
    "IdentityService",
    "UserService",
    "CatalogService",
    "ReservationService",
    "OrderService",
    "require_role",
    "require_owner_or_admin",
]
