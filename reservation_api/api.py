"""
API Routes

JSON endpoints mounted under settings.api_prefix (default /api):
    - /auth: register, login, logout, current user, own profile
    - /tables, /menu: catalog (reads public, writes admin)
    - /reservations: bookings (session required, customers see their own)
    - /orders: food orders (session required, customers see their own)
    - /users: user administration (admin)

Every response uses the envelope {success, data?, error?, message?}.
"""

from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from reservation_api.database import get_db
from reservation_api.dependencies import get_current_user, get_identity, require_admin
from reservation_api.models import MenuCategory, ReservationStatus, User
from reservation_api.schemas import (
    ApiResponse,
    ErrorResponse,
    LoginRequest,
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
    OrderCreate,
    OrderOut,
    OrderStatusUpdate,
    ProfileUpdate,
    RegisterRequest,
    ReservationCreate,
    ReservationOut,
    ReservationStatusUpdate,
    RoleUpdate,
    TableCreate,
    TableOut,
    TableUpdate,
    UserOut,
)
from reservation_api.services import (
    CatalogService,
    IdentityService,
    OrderService,
    ReservationService,
    UserService,
    require_owner_or_admin,
)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


def respond(data: Any = None, message: Optional[str] = None) -> dict[str, Any]:
    return {"success": True, "data": data, "message": message}


# =============================================================================
# AUTH
# =============================================================================

@router.post(
    "/auth/register",
    response_model=ApiResponse[UserOut],
    status_code=201,
    tags=["Auth"],
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    identity: IdentityService = Depends(get_identity),
) -> dict[str, Any]:
    """Create an account and start a session (HTTP-only cookie)."""
    user, token = await identity.register(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
    )
    identity.set_session_cookie(response, token)
    return respond(UserOut.model_validate(user), "Registration successful")


@router.post(
    "/auth/login",
    response_model=ApiResponse[UserOut],
    tags=["Auth"],
    summary="Login",
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    identity: IdentityService = Depends(get_identity),
) -> dict[str, Any]:
    user, token = await identity.login(db, payload.email, payload.password)
    identity.set_session_cookie(response, token)
    return respond(UserOut.model_validate(user), "Login successful")


@router.post(
    "/auth/logout",
    response_model=ApiResponse,
    tags=["Auth"],
    summary="Logout",
)
async def logout(
    response: Response,
    identity: IdentityService = Depends(get_identity),
) -> dict[str, Any]:
    """Clear the session cookie. Always succeeds."""
    identity.clear_session_cookie(response)
    return respond(message="Logout successful")


@router.get(
    "/auth/me",
    response_model=ApiResponse[UserOut],
    tags=["Auth"],
    summary="Current user",
)
async def me(user: User = Depends(get_current_user)) -> dict[str, Any]:
    return respond(UserOut.model_validate(user))


@router.put(
    "/auth/me",
    response_model=ApiResponse[UserOut],
    tags=["Auth"],
    summary="Update own profile",
)
async def update_me(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    identity: IdentityService = Depends(get_identity),
) -> dict[str, Any]:
    updated = await identity.update_profile(db, user, payload.model_dump(exclude_unset=True))
    return respond(UserOut.model_validate(updated))


# =============================================================================
# TABLES
# =============================================================================

@router.get("/tables", response_model=ApiResponse[List[TableOut]], tags=["Tables"])
async def list_tables(db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    tables = await CatalogService(db).list_tables()
    return respond([TableOut.model_validate(t) for t in tables])


@router.get("/tables/{table_id}", response_model=ApiResponse[TableOut], tags=["Tables"])
async def get_table(table_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    table = await CatalogService(db).get_table(table_id)
    return respond(TableOut.model_validate(table))


@router.post(
    "/tables",
    response_model=ApiResponse[TableOut],
    status_code=201,
    tags=["Tables"],
    dependencies=[Depends(require_admin)],
)
async def create_table(payload: TableCreate, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    table = await CatalogService(db).create_table(
        name=payload.name,
        capacity=payload.capacity,
        location=payload.location,
    )
    return respond(TableOut.model_validate(table), "Table created")


@router.put(
    "/tables/{table_id}",
    response_model=ApiResponse[TableOut],
    tags=["Tables"],
    dependencies=[Depends(require_admin)],
)
async def update_table(
    table_id: int,
    payload: TableUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    table = await CatalogService(db).update_table(table_id, payload.model_dump(exclude_unset=True))
    return respond(TableOut.model_validate(table))


@router.delete(
    "/tables/{table_id}",
    response_model=ApiResponse,
    tags=["Tables"],
    dependencies=[Depends(require_admin)],
)
async def delete_table(table_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    await CatalogService(db).delete_table(table_id)
    return respond(message="Table deleted")


# =============================================================================
# MENU
# =============================================================================

@router.get("/menu", response_model=ApiResponse[List[MenuItemOut]], tags=["Menu"])
async def list_menu(
    category: Optional[MenuCategory] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    items = await CatalogService(db).list_menu(category)
    return respond([MenuItemOut.model_validate(i) for i in items])


@router.get("/menu/{item_id}", response_model=ApiResponse[MenuItemOut], tags=["Menu"])
async def get_menu_item(item_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    item = await CatalogService(db).get_menu_item(item_id)
    return respond(MenuItemOut.model_validate(item))


@router.post(
    "/menu",
    response_model=ApiResponse[MenuItemOut],
    status_code=201,
    tags=["Menu"],
    dependencies=[Depends(require_admin)],
)
async def create_menu_item(
    payload: MenuItemCreate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    item = await CatalogService(db).create_menu_item(
        title=payload.title,
        price=payload.price,
        category=payload.category,
        image=payload.image,
        available=payload.available,
    )
    return respond(MenuItemOut.model_validate(item), "Menu item created")


@router.put(
    "/menu/{item_id}",
    response_model=ApiResponse[MenuItemOut],
    tags=["Menu"],
    dependencies=[Depends(require_admin)],
)
async def update_menu_item(
    item_id: int,
    payload: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    item = await CatalogService(db).update_menu_item(item_id, payload.model_dump(exclude_unset=True))
    return respond(MenuItemOut.model_validate(item))


@router.delete(
    "/menu/{item_id}",
    response_model=ApiResponse,
    tags=["Menu"],
    dependencies=[Depends(require_admin)],
)
async def delete_menu_item(item_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    await CatalogService(db).delete_menu_item(item_id)
    return respond(message="Menu item deleted")


# =============================================================================
# RESERVATIONS
# =============================================================================

@router.get(
    "/reservations",
    response_model=ApiResponse[List[ReservationOut]],
    tags=["Reservations"],
)
async def list_reservations(
    day: Optional[date] = Query(None, alias="date"),
    status: Optional[ReservationStatus] = Query(None),
    phone: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Admins see everything; customers only reservations under their phone."""
    owner_phone = None
    if not user.is_admin:
        if not user.phone:
            return respond([])
        owner_phone = user.phone

    reservations = await ReservationService(db).list(
        day=day,
        status=status,
        phone=phone,
        name=name,
        owner_phone=owner_phone,
    )
    return respond([ReservationOut.model_validate(r) for r in reservations])


@router.get(
    "/reservations/{reservation_id}",
    response_model=ApiResponse[ReservationOut],
    tags=["Reservations"],
)
async def get_reservation(
    reservation_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    reservation = await ReservationService(db).get(reservation_id)
    require_owner_or_admin(user, reservation.phone)
    return respond(ReservationOut.model_validate(reservation))


@router.post(
    "/reservations",
    response_model=ApiResponse[ReservationOut],
    status_code=201,
    tags=["Reservations"],
    dependencies=[Depends(get_current_user)],
)
async def create_reservation(
    payload: ReservationCreate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    reservation = await ReservationService(db).create(
        table_id=payload.table,
        name=payload.name,
        phone=payload.phone,
        guests=payload.guests,
        when=payload.time,
    )
    return respond(ReservationOut.model_validate(reservation), "Reservation created")


@router.put(
    "/reservations/{reservation_id}",
    response_model=ApiResponse[ReservationOut],
    tags=["Reservations"],
    dependencies=[Depends(require_admin)],
)
async def update_reservation_status(
    reservation_id: int,
    payload: ReservationStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    reservation = await ReservationService(db).update_status(reservation_id, payload.status)
    return respond(ReservationOut.model_validate(reservation))


@router.put(
    "/reservations/{reservation_id}/cancel",
    response_model=ApiResponse[ReservationOut],
    tags=["Reservations"],
)
async def cancel_reservation(
    reservation_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    reservation = await ReservationService(db).cancel(reservation_id, actor=user)
    return respond(ReservationOut.model_validate(reservation), "Reservation cancelled")


@router.delete(
    "/reservations/{reservation_id}",
    response_model=ApiResponse,
    tags=["Reservations"],
    dependencies=[Depends(require_admin)],
)
async def delete_reservation(
    reservation_id: int,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    await ReservationService(db).delete(reservation_id)
    return respond(message="Reservation deleted")


# =============================================================================
# ORDERS
# =============================================================================

@router.get("/orders", response_model=ApiResponse[List[OrderOut]], tags=["Orders"])
async def list_orders(
    reservation: Optional[int] = Query(None),
    phone: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Admins see everything; customers only orders under their phone."""
    if not user.is_admin:
        if not user.phone or (phone and phone != user.phone):
            return respond([])
        phone = user.phone

    orders = await OrderService(db).list(reservation_id=reservation, phone=phone)
    return respond([OrderOut.model_validate(o) for o in orders])


@router.get("/orders/{order_id}", response_model=ApiResponse[OrderOut], tags=["Orders"])
async def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    order = await OrderService(db).get(order_id)
    require_owner_or_admin(user, order.customer_phone)
    return respond(OrderOut.model_validate(order))


@router.post(
    "/orders",
    response_model=ApiResponse[OrderOut],
    status_code=201,
    tags=["Orders"],
    dependencies=[Depends(get_current_user)],
)
async def create_order(payload: OrderCreate, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    """Place an order. The total is computed from current menu prices."""
    order = await OrderService(db).create(
        lines=[(line.item, line.qty) for line in payload.items],
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        reservation_id=payload.reservation,
        notes=payload.notes,
    )
    return respond(OrderOut.model_validate(order), "Order placed")


@router.put(
    "/orders/{order_id}",
    response_model=ApiResponse[OrderOut],
    tags=["Orders"],
    dependencies=[Depends(require_admin)],
)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    order = await OrderService(db).update_status(order_id, payload.status)
    return respond(OrderOut.model_validate(order))


@router.delete(
    "/orders/{order_id}",
    response_model=ApiResponse,
    tags=["Orders"],
    dependencies=[Depends(require_admin)],
)
async def delete_order(order_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    await OrderService(db).delete(order_id)
    return respond(message="Order deleted")


# =============================================================================
# USERS
# =============================================================================

@router.get(
    "/users",
    response_model=ApiResponse[List[UserOut]],
    tags=["Users"],
    dependencies=[Depends(require_admin)],
)
async def list_users(
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    users = await UserService(db).list_users(name=name, email=email, phone=phone)
    return respond([UserOut.model_validate(u) for u in users])


@router.get(
    "/users/{user_id}",
    response_model=ApiResponse[UserOut],
    tags=["Users"],
    dependencies=[Depends(require_admin)],
)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    user = await UserService(db).get_user(user_id)
    return respond(UserOut.model_validate(user))


@router.put(
    "/users/{user_id}",
    response_model=ApiResponse[UserOut],
    tags=["Users"],
    dependencies=[Depends(require_admin)],
)
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    user = await UserService(db).set_role(user_id, payload.role)
    return respond(UserOut.model_validate(user))


@router.delete(
    "/users/{user_id}",
    response_model=ApiResponse,
    tags=["Users"],
    dependencies=[Depends(require_admin)],
)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    await UserService(db).delete_user(user_id)
    return respond(message="User deleted")
