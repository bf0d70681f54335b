import asyncio
import os
import sys
import uuid

import pytest

# Ensure project root in path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# The module-level app in reservation_api.main is built at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from fastapi.testclient import TestClient
from sqlalchemy import update

from reservation_api.core.config import Settings
from reservation_api.database import build_engine, build_session_maker
from reservation_api.main import create_app
from reservation_api.models import User, UserRole

API = "/api"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture()
def settings(tmp_path):
    db_path = tmp_path / "test.db"
    return Settings(
        database_url=f"sqlite+aiosqlite:///{db_path}",
        session_secret=f"test-secret-{uuid.uuid4().hex}",
        bcrypt_rounds=4,
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    # Entering the context runs the lifespan, which creates the schema
    with TestClient(app) as c:
        yield c


def register(client, email, password=DEFAULT_PASSWORD, phone=None, first_name="Sara", last_name="Ahmadi"):
    payload = {
        "email": email,
        "password": password,
        "firstName": first_name,
        "lastName": last_name,
    }
    if phone is not None:
        payload["phone"] = phone
    return client.post(f"{API}/auth/register", json=payload)


def login(client, email, password=DEFAULT_PASSWORD):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def promote_to_admin(settings, email):
    """Flip a user's role directly in the database."""

    async def _promote():
        engine = build_engine(settings.database_url)
        try:
            async with build_session_maker(engine)() as db:
                await db.execute(update(User).where(User.email == email).values(role=UserRole.ADMIN))
                await db.commit()
        finally:
            await engine.dispose()

    asyncio.run(_promote())


@pytest.fixture()
def admin(client, settings):
    """Register an admin and leave the client logged in as them."""
    email = "admin@example.com"
    assert register(client, email, phone="09990000000", first_name="Root", last_name="Admin").status_code == 201
    promote_to_admin(settings, email)
    assert login(client, email).status_code == 200
    return email


@pytest.fixture()
def make_table(client):
    def _make(name="T1", capacity=4, location="hall"):
        response = client.post(
            f"{API}/tables",
            json={"name": name, "capacity": capacity, "location": location},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture()
def make_menu_item(client):
    def _make(title="Kebab", price=45000, category="kebab", available=True):
        response = client.post(
            f"{API}/menu",
            json={"title": title, "price": price, "category": category, "available": available},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
