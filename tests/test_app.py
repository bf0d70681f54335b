from conftest import API


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"


def test_root_banner(client, settings):
    body = client.get("/").json()
    assert body["message"] == f"Welcome to {settings.app_name}"
    assert body["health"] == "/health"


def test_unknown_route_uses_error_envelope(client):
    response = client.get(f"{API}/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"]


def test_cors_allows_frontend_with_credentials(client, settings):
    response = client.get(f"{API}/tables", headers={"Origin": settings.frontend_url})

    assert response.headers["access-control-allow-origin"] == settings.frontend_url
    assert response.headers["access-control-allow-credentials"] == "true"


def test_apps_do_not_share_sessions(tmp_path):
    from fastapi.testclient import TestClient

    from reservation_api.core.config import Settings
    from reservation_api.main import create_app

    def build(name, secret):
        return create_app(Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / name}",
            session_secret=secret,
            bcrypt_rounds=4,
        ))

    with TestClient(build("a.db", "secret-a")) as a, TestClient(build("b.db", "secret-b")) as b:
        a.post(f"{API}/auth/register", json={
            "email": "sara@example.com",
            "password": "secret123",
            "firstName": "Sara",
            "lastName": "Ahmadi",
        })
        b.cookies.set("token", a.cookies.get("token"))

        assert a.get(f"{API}/auth/me").status_code == 200
        assert b.get(f"{API}/auth/me").status_code == 401
