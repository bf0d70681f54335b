from conftest import API, login, register


def test_list_users_with_filters(client, admin):
    register(client, "sara@example.com", phone="09121111111", first_name="Sara", last_name="Ahmadi")
    register(client, "ali@example.com", phone="09122222222", first_name="Ali", last_name="Saraei")
    register(client, "reza@example.net", phone="09123333333", first_name="Reza", last_name="Karimi")
    login(client, admin)

    def emails(**params):
        response = client.get(f"{API}/users", params=params)
        assert response.status_code == 200
        users = response.json()["data"]
        assert all("passwordHash" not in u and "password" not in u for u in users)
        return sorted(u["email"] for u in users)

    assert len(emails()) == 4
    # name matches first or last name, case-insensitively
    assert emails(name="SARA") == ["ali@example.com", "sara@example.com"]
    assert emails(email=".net") == ["reza@example.net"]
    assert emails(phone="3333") == ["reza@example.net"]
    assert emails(name="sara", phone="2222") == ["ali@example.com"]


def test_filters_treat_wildcards_literally(client, admin):
    register(client, "sara@example.com", first_name="Sara")
    login(client, admin)

    assert client.get(f"{API}/users", params={"name": "%"}).json()["data"] == []


def test_get_user(client, admin):
    sara = register(client, "sara@example.com").json()["data"]
    login(client, admin)

    response = client.get(f"{API}/users/{sara['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "sara@example.com"
    assert client.get(f"{API}/users/999").status_code == 404


def test_promote_user_to_admin(client, admin, make_table):
    sara = register(client, "sara@example.com").json()["data"]
    assert client.post(f"{API}/tables", json={"name": "T1", "capacity": 2}).status_code == 403

    login(client, admin)
    response = client.put(f"{API}/users/{sara['id']}", json={"role": "admin"})
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"

    login(client, "sara@example.com")
    assert client.post(f"{API}/tables", json={"name": "T1", "capacity": 2}).status_code == 201

    assert client.put(f"{API}/users/{sara['id']}", json={"role": "owner"}).status_code == 400


def test_delete_user(client, admin):
    sara = register(client, "sara@example.com").json()["data"]
    login(client, admin)

    assert client.delete(f"{API}/users/{sara['id']}").status_code == 200
    assert client.get(f"{API}/users/{sara['id']}").status_code == 404
    assert client.delete(f"{API}/users/{sara['id']}").status_code == 404
    assert login(client, "sara@example.com").status_code == 401


def test_user_admin_requires_admin_role(client, admin):
    sara = register(client, "sara@example.com").json()["data"]

    assert client.get(f"{API}/users").status_code == 403
    assert client.get(f"{API}/users/{sara['id']}").status_code == 403
    assert client.put(f"{API}/users/{sara['id']}", json={"role": "admin"}).status_code == 403
    assert client.delete(f"{API}/users/{sara['id']}").status_code == 403

    client.post(f"{API}/auth/logout")
    response = client.get(f"{API}/users")
    assert response.status_code == 401

    login(client, admin)
    assert client.get(f"{API}/users/{sara['id']}").json()["data"]["role"] == "user"
