import asyncio
import time as time_module
from datetime import date, datetime, timedelta, timezone

import pytest

from reservation_api.core.config import EnvironmentMode, Settings
from reservation_api.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from reservation_api.core.security import PasswordHasher, SessionSigner
from reservation_api.database import build_engine, build_session_maker, init_db
from reservation_api.models import MenuCategory, Order, ReservationStatus, UserRole
from reservation_api.seed import DEFAULT_MENU, DEFAULT_TABLES, seed_database
from reservation_api.services import (
    CatalogService,
    IdentityService,
    OrderService,
    ReservationService,
    UserService,
)
from reservation_api.services.orders import compute_total
from reservation_api.services.reservations import day_bounds, to_utc_naive


def run_with_db(settings, scenario):
    """Run an async scenario against a fresh schema in the settings' database."""

    async def _run():
        engine = build_engine(settings.database_url)
        try:
            await init_db(engine)
            async with build_session_maker(engine)() as db:
                return await scenario(db)
        finally:
            await engine.dispose()

    return asyncio.run(_run())


# =============================================================================
# PURE HELPERS
# =============================================================================

def test_compute_total():
    assert compute_total([(1, 2), (2, 3)], {1: 45000, 2: 8000}) == 114000
    assert compute_total([], {}) == 0


def test_to_utc_naive():
    aware = datetime(2026, 5, 1, 23, 0, tzinfo=timezone(timedelta(hours=3, minutes=30)))
    assert to_utc_naive(aware) == datetime(2026, 5, 1, 19, 30)
    assert to_utc_naive(datetime(2026, 5, 1, 19, 30)) == datetime(2026, 5, 1, 19, 30)


def test_day_bounds_are_half_open():
    start, end = day_bounds(date(2026, 5, 1))
    assert start == datetime(2026, 5, 1)
    assert end == datetime(2026, 5, 2)


# =============================================================================
# CREDENTIALS
# =============================================================================

def test_password_hasher():
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("secret123")

    assert hashed != "secret123"
    assert hasher.verify("secret123", hashed)
    assert not hasher.verify("secret124", hashed)
    assert not hasher.verify("x" * 73, hashed)
    assert not hasher.verify("secret123", "not-a-bcrypt-hash")


def test_password_hasher_counts_bytes():
    hasher = PasswordHasher(rounds=4)
    fits = "é" * 36  # 72 bytes

    assert hasher.verify(fits, hasher.hash(fits))
    with pytest.raises(ValidationError):
        hasher.hash("é" * 37)


def test_session_signer_round_trip():
    signer = SessionSigner("secret-a", max_age=60)
    token = signer.issue(42)

    assert signer.resolve(token) == 42
    assert signer.resolve(None) is None
    assert signer.resolve("garbage") is None
    assert SessionSigner("secret-b", max_age=60).resolve(token) is None


def test_session_signer_expiry(monkeypatch):
    signer = SessionSigner("secret-a", max_age=7 * 24 * 60 * 60)
    token = signer.issue(42)

    later = time_module.time() + 8 * 24 * 60 * 60
    monkeypatch.setattr(time_module, "time", lambda: later)

    assert signer.resolve(token) is None


# =============================================================================
# CONFIGURATION
# =============================================================================

def test_settings_defaults_and_validation():
    settings = Settings(api_prefix="api/")
    assert settings.api_prefix == "/api"
    assert settings.session_max_age_seconds == 7 * 24 * 60 * 60
    assert settings.validate_production_config() == []

    production = Settings(env_mode="PRODUCTION")
    assert production.env_mode == EnvironmentMode.PRODUCTION
    assert production.use_secure_cookies
    assert "SESSION_SECRET" in production.validate_production_config()

    with pytest.raises(ValueError):
        Settings(env_mode="qa")


# =============================================================================
# SERVICES
# =============================================================================

def test_reservation_slot_rule(settings):
    async def scenario(db):
        catalog = CatalogService(db)
        reservations = ReservationService(db)
        table = await catalog.create_table("T1", 4)
        t0 = datetime(2026, 5, 1, 19, 30, tzinfo=timezone.utc)

        first = await reservations.create(table.id, "Sara", "09121111111", 2, t0)
        assert first.status == ReservationStatus.PENDING

        with pytest.raises(ConflictError):
            await reservations.create(table.id, "Ali", "09122222222", 3, t0)

        await reservations.update_status(first.id, ReservationStatus.CANCELLED)
        third = await reservations.create(table.id, "Ali", "09122222222", 3, t0)

        active = await reservations.list(status=ReservationStatus.PENDING)
        assert [r.id for r in active] == [third.id]

        with pytest.raises(ValidationError):
            await reservations.create(999, "Ali", "09122222222", 3, t0)
        with pytest.raises(NotFoundError):
            await reservations.get(999)

    run_with_db(settings, scenario)


def test_cancel_checks_ownership(settings):
    async def scenario(db):
        identity = IdentityService(settings)
        table = await CatalogService(db).create_table("T1", 4)
        reservations = ReservationService(db)
        reservation = await reservations.create(
            table.id, "Sara", "09121111111", 2, datetime(2026, 5, 1, 19, 30)
        )

        stranger, _ = await identity.register(db, "ali@example.com", "secret123", "Ali", "Rezaei", "0912")
        owner, _ = await identity.register(db, "sara@example.com", "secret123", "Sara", "Ahmadi", "09121111111")

        with pytest.raises(ForbiddenError):
            await reservations.cancel(reservation.id, actor=stranger)

        cancelled = await reservations.cancel(reservation.id, actor=owner)
        assert cancelled.status == ReservationStatus.CANCELLED

    run_with_db(settings, scenario)


def test_order_rejection_is_atomic(settings):
    async def scenario(db):
        catalog = CatalogService(db)
        orders = OrderService(db)
        kebab = await catalog.create_menu_item("Kebab", 45000, MenuCategory.KEBAB)

        with pytest.raises(ValidationError):
            await orders.create([(kebab.id, 1), (999, 1)], "A", "09120000000")
        assert await orders.list() == []

        order = await orders.create([(kebab.id, 2)], "A", "09120000000")
        assert order.total == 90000
        assert isinstance(order, Order)
        assert [(line.item_id, line.qty) for line in order.items] == [(kebab.id, 2)]

    run_with_db(settings, scenario)


def test_identity_and_user_admin(settings):
    async def scenario(db):
        identity = IdentityService(settings)
        user, token = await identity.register(db, "sara@example.com", "secret123", "Sara", "Ahmadi")

        resolved = await identity.resolve_session(db, token)
        assert resolved.id == user.id

        with pytest.raises(ConflictError):
            await identity.register(db, "sara@example.com", "secret123", "Sara", "Ahmadi")

        users = UserService(db)
        promoted = await users.set_role(user.id, UserRole.ADMIN)
        assert promoted.is_admin
        assert [u.email for u in await users.list_users(name="ahm")] == ["sara@example.com"]

        await users.delete_user(user.id)
        with pytest.raises(NotFoundError):
            await users.get_user(user.id)

    run_with_db(settings, scenario)


def test_seed_database(settings):
    async def scenario(db):
        hasher = PasswordHasher(rounds=4)
        await seed_database(db, hasher)
        result = await seed_database(db, hasher)

        catalog = CatalogService(db)
        tables = await catalog.list_tables()
        menu = await catalog.list_menu()
        stews = await catalog.list_menu(MenuCategory.STEW)
        users = await UserService(db).list_users()
        return result, tables, menu, stews, users

    result, tables, menu, stews, users = run_with_db(settings, scenario)

    # Seeding twice replaces rather than duplicates
    assert result.tables == len(tables) == len(DEFAULT_TABLES)
    assert result.menu_items == len(menu) == len(DEFAULT_MENU) == 16
    assert len(stews) == 4
    assert sorted(u.role.value for u in users) == ["admin", "user"]
