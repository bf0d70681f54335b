from conftest import API, login, register


# =============================================================================
# TABLES
# =============================================================================

def test_table_crud(client, admin, make_table):
    table = make_table("T1", 4, "vip")
    assert table["name"] == "T1"
    assert table["capacity"] == 4
    assert table["location"] == "vip"

    assert client.get(f"{API}/tables/{table['id']}").json()["data"]["name"] == "T1"

    response = client.put(f"{API}/tables/{table['id']}", json={"capacity": 6})
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["capacity"] == 6
    assert updated["name"] == "T1"
    assert updated["location"] == "vip"

    response = client.delete(f"{API}/tables/{table['id']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Table deleted"
    assert client.get(f"{API}/tables/{table['id']}").status_code == 404


def test_tables_are_public(client, admin, make_table):
    make_table("T1")
    make_table("T2", 2)
    client.post(f"{API}/auth/logout")

    response = client.get(f"{API}/tables")
    assert response.status_code == 200
    assert [t["name"] for t in response.json()["data"]] == ["T1", "T2"]


def test_duplicate_table_name_conflicts(client, admin, make_table):
    make_table("T1")
    other = make_table("T2")

    assert client.post(f"{API}/tables", json={"name": "T1", "capacity": 2}).status_code == 409
    assert client.put(f"{API}/tables/{other['id']}", json={"name": "T1"}).status_code == 409
    # Renaming a table to its own name is not a conflict
    assert client.put(f"{API}/tables/{other['id']}", json={"name": "T2"}).status_code == 200


def test_table_validation(client, admin):
    response = client.post(f"{API}/tables", json={"name": "T1", "capacity": 0})
    assert response.status_code == 400
    assert response.json()["error"] == "Table capacity must be at least 1"

    assert client.post(f"{API}/tables", json={"name": "  ", "capacity": 2}).status_code == 400
    assert client.post(f"{API}/tables", json={"capacity": 2}).status_code == 400
    assert client.post(f"{API}/tables", json={"name": "T9", "capacity": 2, "location": "roof"}).status_code == 400


def test_missing_table_is_not_found(client, admin):
    assert client.get(f"{API}/tables/999").status_code == 404
    assert client.put(f"{API}/tables/999", json={"capacity": 2}).status_code == 404

    response = client.delete(f"{API}/tables/999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Table #999 not found"}


def test_table_writes_require_admin(client, admin, make_table):
    table = make_table("T1", 4)
    register(client, "sara@example.com")

    assert client.post(f"{API}/tables", json={"name": "T2", "capacity": 2}).status_code == 403
    assert client.put(f"{API}/tables/{table['id']}", json={"capacity": 10}).status_code == 403
    assert client.delete(f"{API}/tables/{table['id']}").status_code == 403

    client.post(f"{API}/auth/logout")
    assert client.post(f"{API}/tables", json={"name": "T2", "capacity": 2}).status_code == 401

    unchanged = client.get(f"{API}/tables/{table['id']}").json()["data"]
    assert unchanged["capacity"] == 4
    assert [t["name"] for t in client.get(f"{API}/tables").json()["data"]] == ["T1"]


# =============================================================================
# MENU
# =============================================================================

def test_menu_crud(client, admin, make_menu_item):
    item = make_menu_item("Kebab", 45000, "kebab")
    assert item["price"] == 45000
    assert item["available"] is True
    assert item["image"] is None

    response = client.put(f"{API}/menu/{item['id']}", json={"price": 50000, "available": False})
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["price"] == 50000
    assert updated["available"] is False
    assert updated["title"] == "Kebab"

    assert client.delete(f"{API}/menu/{item['id']}").status_code == 200
    assert client.get(f"{API}/menu/{item['id']}").status_code == 404


def test_menu_category_filter(client, admin, make_menu_item):
    make_menu_item("Kebab", 45000, "kebab")
    make_menu_item("Ghormeh Sabzi", 35000, "stew")
    make_menu_item("Doogh", 8000, "beverage")
    client.post(f"{API}/auth/logout")

    everything = client.get(f"{API}/menu").json()["data"]
    stews = client.get(f"{API}/menu", params={"category": "stew"}).json()["data"]

    assert len(everything) == 3
    assert [i["title"] for i in stews] == ["Ghormeh Sabzi"]
    assert client.get(f"{API}/menu", params={"category": "pizza"}).status_code == 400


def test_menu_validation(client, admin):
    assert client.post(f"{API}/menu", json={"title": "Kebab", "price": -1, "category": "kebab"}).status_code == 400
    assert client.post(f"{API}/menu", json={"title": "", "price": 10, "category": "kebab"}).status_code == 400
    assert client.post(f"{API}/menu", json={"title": "Pizza", "price": 10, "category": "pizza"}).status_code == 400


def test_menu_writes_require_admin(client, admin, make_menu_item):
    item = make_menu_item("Kebab", 45000)
    register(client, "sara@example.com")

    assert client.post(f"{API}/menu", json={"title": "Tea", "price": 1, "category": "beverage"}).status_code == 403
    assert client.put(f"{API}/menu/{item['id']}", json={"price": 1}).status_code == 403
    assert client.delete(f"{API}/menu/{item['id']}").status_code == 403

    assert client.get(f"{API}/menu/{item['id']}").json()["data"]["price"] == 45000

    login(client, admin)
    assert client.put(f"{API}/menu/{item['id']}", json={"price": 1}).status_code == 200
