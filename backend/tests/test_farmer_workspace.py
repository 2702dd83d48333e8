from pathlib import Path

from config import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_workspace_is_farmer_only(client, buyer):
    assert client.get("/api/farmer/products/", headers=buyer["headers"]).status_code == 403
    assert client.get("/api/farmer/parcels/", headers=buyer["headers"]).status_code == 403
    assert client.get("/api/farmer/profile/", headers=buyer["headers"]).status_code == 403


def test_create_product_with_image(client, farmer, create_product):
    product = create_product(
        farmer, name="Mangues", price=80, quantity=40, category="Fruits",
        files={"file": ("mangues.png", PNG_BYTES, "image/png")},
    )

    assert product["image_url"].startswith("/uploads/products/")
    stored = Path(settings.UPLOAD_DIR) / product["image_url"][len("/uploads/"):]
    assert stored.read_bytes() == PNG_BYTES

    listing = client.get("/api/farmer/products/", headers=farmer["headers"]).json()
    assert [p["name"] for p in listing] == ["Mangues"]


def test_create_product_rejects_non_image(client, farmer):
    response = client.post(
        "/api/farmer/products/",
        data={"name": "Oignons", "price": "30", "quantity": "10"},
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=farmer["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid file type"


def test_create_product_rejects_negative_price(client, farmer):
    response = client.post(
        "/api/farmer/products/",
        data={"name": "Oignons", "price": "-1", "quantity": "10"},
        headers=farmer["headers"],
    )
    assert response.status_code == 400


def test_create_product_rejects_non_finite_price(client, farmer, create_product):
    for price in ("inf", "nan"):
        response = client.post(
            "/api/farmer/products/",
            data={"name": "Oignons", "price": price, "quantity": "10"},
            headers=farmer["headers"],
        )
        assert response.status_code == 400

    product = create_product(farmer)
    url = f"/api/farmer/products/{product['id']}/"
    assert client.put(url, data={"price": "inf"}, headers=farmer["headers"]).status_code == 400
    assert client.get(f"/api/products/{product['id']}/").json()["price"] == 40.0


def test_image_extension_follows_content_type(client, farmer, create_product):
    product = create_product(farmer, files={"file": ("page.html", PNG_BYTES, "image/png")})

    assert product["image_url"].endswith(".png")


def test_update_and_delete_own_product(client, farmer, create_product):
    product = create_product(farmer, name="Carottes", price=35, quantity=20)

    response = client.put(
        f"/api/farmer/products/{product['id']}/",
        data={"price": "38.5", "quantity": "15"},
        headers=farmer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["price"] == 38.5
    assert response.json()["quantity"] == 15
    assert response.json()["name"] == "Carottes"

    response = client.delete(f"/api/farmer/products/{product['id']}/", headers=farmer["headers"])
    assert response.status_code == 200
    assert client.get(f"/api/products/{product['id']}/").status_code == 404


def test_cannot_touch_another_farmers_product(client, farmer, register_user, create_product):
    product = create_product(farmer)
    intruder = register_user("intruder@example.com", "farmer")

    response = client.put(
        f"/api/farmer/products/{product['id']}/", data={"price": "1"}, headers=intruder["headers"]
    )
    assert response.status_code == 404
    assert client.delete(f"/api/farmer/products/{product['id']}/", headers=intruder["headers"]).status_code == 404


def test_profile_read_and_update(client, farmer):
    response = client.get("/api/farmer/profile/", headers=farmer["headers"])
    assert response.status_code == 200
    profile = response.json()
    assert profile["name"] == "Mohamed Ould Ahmed"
    assert profile["total_sales"] == 0
    assert profile["join_date"]

    response = client.put(
        "/api/farmer/profile/",
        json={"phone": "+222 2200 0000", "region": "Gorgol"},
        headers=farmer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["region"] == "Gorgol"
    assert response.json()["phone"] == "+222 2200 0000"


def test_profile_email_must_stay_unique(client, farmer, buyer):
    response = client.put(
        "/api/farmer/profile/", json={"email": "buyer@example.com"}, headers=farmer["headers"]
    )
    assert response.status_code == 400


# === Parcels ===

def create_parcel(client, owner, **fields):
    data = {"nom": "Parcelle Nord", "culture": "Tomates", "superficie": "1.5"}
    data.update(fields)
    return client.post("/api/farmer/parcels/", data=data, headers=owner["headers"])


def test_create_and_list_parcels(client, farmer):
    response = create_parcel(
        client, farmer, localisation="Rosso", datePlantation="2024-03-01",
        stade="Floraison", etatSante="excellent", notes="Irrigation goutte à goutte",
    )
    assert response.status_code == 201
    parcel = response.json()
    assert parcel["datePlantation"] == "2024-03-01"
    assert parcel["etatSante"] == "excellent"
    assert parcel["superficie"] == 1.5

    listing = client.get("/api/farmer/parcels/", headers=farmer["headers"]).json()
    assert [p["nom"] for p in listing] == ["Parcelle Nord"]


def test_parcel_health_defaults_to_bon(client, farmer):
    response = create_parcel(client, farmer)
    assert response.json()["etatSante"] == "bon"


def test_parcel_validation(client, farmer):
    assert create_parcel(client, farmer, superficie="0").status_code == 400
    assert create_parcel(client, farmer, superficie="inf").status_code == 400
    assert create_parcel(client, farmer, superficie="nan").status_code == 400
    assert create_parcel(client, farmer, etatSante="mauvais").status_code == 400
    assert create_parcel(client, farmer, datePlantation="01/03/2024").status_code == 400


def test_update_and_delete_parcel(client, farmer, register_user):
    parcel = create_parcel(client, farmer).json()

    response = client.put(
        f"/api/farmer/parcels/{parcel['id']}/",
        data={"etatSante": "critique"},
        files={"photo": ("plot.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=farmer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["etatSante"] == "critique"
    assert response.json()["photo"].startswith("/uploads/parcels/")
    assert response.json()["photo"].endswith(".jpg")

    url = f"/api/farmer/parcels/{parcel['id']}/"
    assert client.put(url, data={"superficie": "inf"}, headers=farmer["headers"]).status_code == 400

    other = register_user("other@example.com", "farmer")
    assert client.delete(f"/api/farmer/parcels/{parcel['id']}/", headers=other["headers"]).status_code == 404

    assert client.delete(f"/api/farmer/parcels/{parcel['id']}/", headers=farmer["headers"]).status_code == 200
    assert client.get("/api/farmer/parcels/", headers=farmer["headers"]).json() == []
