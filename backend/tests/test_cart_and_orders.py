import json

import pytest

from utils.cart_store import CART_KEY, ClientStateStorage


@pytest.fixture
def tomatoes(farmer, create_product):
    return create_product(farmer, name="Tomates", price=40.0, quantity=5)


def add(client, buyer, product_id):
    return client.post("/api/cart/add/", json={"productId": product_id}, headers=buyer["headers"])


def test_cart_starts_empty(client, buyer):
    response = client.get("/api/cart/", headers=buyer["headers"])
    assert response.status_code == 200
    assert response.json() == {"items": [], "count": 0, "total": 0.0}


def test_add_to_cart_counts_quantities(client, buyer, tomatoes, farmer, create_product):
    onions = create_product(farmer, name="Oignons", price=30.0, quantity=10)

    add(client, buyer, tomatoes["id"])
    add(client, buyer, str(tomatoes["id"]))
    response = add(client, buyer, onions["id"])

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert body["total"] == 110.0
    assert body["items"][0] == {"productId": tomatoes["id"], "qty": 2, "name": "Tomates", "price": 40.0}

    assert client.get("/api/cart/count/", headers=buyer["headers"]).json() == {"count": 3}


def test_add_unknown_product(client, buyer):
    assert add(client, buyer, 4242).status_code == 404
    assert add(client, buyer, "not-a-number").status_code == 404


def test_cart_is_buyer_only(client, farmer, tomatoes):
    assert add(client, farmer, tomatoes["id"]).status_code == 403


def test_clear_cart(client, buyer, tomatoes):
    add(client, buyer, tomatoes["id"])
    response = client.delete("/api/cart/", headers=buyer["headers"])
    assert response.json()["count"] == 0
    assert client.get("/api/cart/count/", headers=buyer["headers"]).json()["count"] == 0


def test_checkout_creates_pending_sales(client, buyer, farmer, tomatoes):
    add(client, buyer, tomatoes["id"])
    add(client, buyer, tomatoes["id"])

    response = client.post("/api/buyer/orders/", headers=buyer["headers"])
    assert response.status_code == 201
    body = response.json()
    assert body["totalPrice"] == 80.0
    assert body["orderRef"]
    [sale] = body["sales"]
    assert sale["productId"] == tomatoes["id"]
    assert sale["quantity"] == 2
    assert sale["unitPrice"] == 40.0
    assert sale["status"] == "pending_payment"
    assert sale["farmerId"] == farmer["id"]
    assert sale["buyerName"] == "Khadija Buyer"
    assert sale["location"] == "Trarza"

    # Stock moves and the cart is emptied
    assert client.get(f"/api/products/{tomatoes['id']}/").json()["quantity"] == 3
    assert client.get("/api/cart/count/", headers=buyer["headers"]).json()["count"] == 0

    orders = client.get("/api/buyer/orders/", headers=buyer["headers"]).json()
    assert [o["id"] for o in orders] == [sale["id"]]


def test_checkout_uses_cart_price_snapshot(client, buyer, farmer, tomatoes):
    add(client, buyer, tomatoes["id"])
    client.put(f"/api/farmer/products/{tomatoes['id']}/", data={"price": "55"}, headers=farmer["headers"])

    sale = client.post("/api/buyer/orders/", headers=buyer["headers"]).json()["sales"][0]
    assert sale["unitPrice"] == 40.0


def test_checkout_empty_cart(client, buyer):
    response = client.post("/api/buyer/orders/", headers=buyer["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Cart is empty"


def test_checkout_insufficient_stock_changes_nothing(client, buyer, farmer, tomatoes, create_product):
    onions = create_product(farmer, name="Oignons", price=30.0, quantity=1)
    add(client, buyer, tomatoes["id"])
    add(client, buyer, onions["id"])
    add(client, buyer, onions["id"])

    response = client.post("/api/buyer/orders/", headers=buyer["headers"])
    assert response.status_code == 400
    assert "Oignons" in response.json()["detail"]

    assert client.get(f"/api/products/{tomatoes['id']}/").json()["quantity"] == 5
    assert client.get("/api/cart/count/", headers=buyer["headers"]).json()["count"] == 3
    assert client.get("/api/buyer/orders/", headers=buyer["headers"]).json() == []


def test_checkout_fails_when_product_was_removed(client, buyer, farmer, tomatoes):
    add(client, buyer, tomatoes["id"])
    client.delete(f"/api/farmer/products/{tomatoes['id']}/", headers=farmer["headers"])

    response = client.post("/api/buyer/orders/", headers=buyer["headers"])
    assert response.status_code == 400


def store_raw_cart(db, buyer, lines):
    ClientStateStorage(db, buyer["id"]).set_item(CART_KEY, json.dumps(lines))


def test_cart_with_junk_stored_lines_is_readable(client, db, buyer, tomatoes):
    store_raw_cart(db, buyer, [
        {"productId": tomatoes["id"], "qty": 2, "name": "Tomates", "price": 40.0},
        {"productId": 99, "qty": "three", "name": "Oignons", "price": 30.0},
        {"productId": 98, "qty": 1, "name": ["Mil"], "price": "cheap"},
    ])

    response = client.get("/api/cart/", headers=buyer["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert body["total"] == 80.0
    assert body["items"][1] == {"productId": 98, "qty": 1, "name": None, "price": None}


def test_checkout_ignores_boolean_price(client, db, buyer, tomatoes):
    store_raw_cart(db, buyer, [{"productId": tomatoes["id"], "qty": 2, "name": "Tomates", "price": True}])

    response = client.post("/api/buyer/orders/", headers=buyer["headers"])
    assert response.status_code == 201
    [sale] = response.json()["sales"]
    assert sale["unitPrice"] == 40.0
    assert sale["totalPrice"] == 80.0
