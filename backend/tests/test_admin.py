from datetime import datetime, timezone

from models.log import Log
from routes.admin import month_bounds, trend


def test_admin_routes_require_admin(client, buyer, farmer):
    for user in (buyer, farmer):
        assert client.get("/api/admin/stats/", headers=user["headers"]).status_code == 403
        assert client.get("/api/admin/users/", headers=user["headers"]).status_code == 403


def test_stats_counts(client, admin, farmer, buyer, create_product):
    product = create_product(farmer, name="Oignons", price=30.0, quantity=10)
    client.post("/api/cart/add/", json={"productId": product["id"]}, headers=buyer["headers"])
    sale = client.post("/api/buyer/orders/", headers=buyer["headers"]).json()["sales"][0]
    for status in ("ready_for_shipment", "shipped", "completed"):
        client.put(f"/api/farmer/sales/{sale['id']}/status/", json={"status": status}, headers=farmer["headers"])

    response = client.get("/api/admin/stats/", headers=admin["headers"])
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_users"] == 3
    assert stats["farmers"] == 1
    assert stats["buyers"] == 1
    assert stats["orders_this_month"] == 1
    assert stats["revenue"] == 30.0
    assert stats["diagnostics"] == 0
    # Nothing happened last month
    assert stats["users_trend"] == 0.0
    assert stats["revenue_trend"] == 0.0


def test_month_bounds_cross_year():
    this_month, last_month = month_bounds(datetime(2025, 1, 17, 13, 45))
    assert this_month == datetime(2025, 1, 1)
    assert last_month == datetime(2024, 12, 1)


def test_trend():
    assert trend(15, 10) == 50.0
    assert trend(5, 10) == -50.0
    assert trend(3, 0) == 0.0


def test_activities_feed(client, admin, farmer, buyer):
    client.post("/api/auth/login/", json={"email": buyer["email"], "password": "wrongpass"})

    response = client.get("/api/admin/activities/", headers=admin["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    actions = [a["action"] for a in body["results"]]
    assert actions.count("REGISTER") == 2

    failed = client.get("/api/admin/activities/", params={"status": "fail"}, headers=admin["headers"]).json()
    [entry] = failed["results"]
    assert entry["action"] == "LOGIN"
    assert entry["user_name"] == "Khadija Buyer"

    mine = client.get("/api/admin/activities/", params={"user_id": farmer["id"]}, headers=admin["headers"]).json()
    assert mine["total"] == 1


def test_activities_bad_date(client, admin):
    response = client.get("/api/admin/activities/", params={"date_from": "yesterday"}, headers=admin["headers"])
    assert response.status_code == 400


def test_activities_date_range(client, admin, farmer):
    today = datetime.now(timezone.utc).date().isoformat()
    response = client.get(
        "/api/admin/activities/", params={"date_from": "2000-01-01", "date_to": today}, headers=admin["headers"]
    )
    assert response.json()["total"] == 1

    response = client.get("/api/admin/activities/", params={"date_to": "2000-01-01"}, headers=admin["headers"])
    assert response.json()["total"] == 0


def test_user_listing_and_filters(client, admin, farmer, buyer):
    body = client.get("/api/admin/users/", headers=admin["headers"]).json()
    assert body["total"] == 3

    farmers = client.get("/api/admin/users/", params={"role": "farmer"}, headers=admin["headers"]).json()
    assert [u["email"] for u in farmers["results"]] == ["farmer@example.com"]

    found = client.get("/api/admin/users/", params={"q": "khadija"}, headers=admin["headers"]).json()
    assert [u["id"] for u in found["results"]] == [buyer["id"]]


def test_change_role(client, admin, buyer, db):
    response = client.put(f"/api/admin/users/{buyer['id']}/role/", json={"role": "farmer"}, headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["role"] == "farmer"

    # The account now reaches the farmer workspace
    assert client.get("/api/farmer/profile/", headers=buyer["headers"]).status_code == 200

    assert client.put(
        f"/api/admin/users/{buyer['id']}/role/", json={"role": "king"}, headers=admin["headers"]
    ).status_code == 422

    assert db.query(Log).filter(Log.action == "USER_ROLE").count() == 1


def test_delete_user(client, admin, buyer):
    assert client.delete(f"/api/admin/users/{admin['id']}/", headers=admin["headers"]).status_code == 400

    assert client.delete(f"/api/admin/users/{buyer['id']}/", headers=admin["headers"]).status_code == 200
    assert client.delete(f"/api/admin/users/{buyer['id']}/", headers=admin["headers"]).status_code == 404


def test_products_moderation(client, admin, farmer, create_product):
    product = create_product(farmer, name="Gomme arabique", price=150.0, quantity=0, category="Autres")

    listing = client.get("/api/admin/products/", headers=admin["headers"]).json()
    # Out of stock products are listed too
    assert [p["id"] for p in listing["results"]] == [product["id"]]

    assert client.delete(f"/api/admin/products/{product['id']}/", headers=admin["headers"]).status_code == 200
    assert client.get("/api/admin/products/", headers=admin["headers"]).json()["total"] == 0
    assert client.delete(f"/api/admin/products/{product['id']}/", headers=admin["headers"]).status_code == 404
