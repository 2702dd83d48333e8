from models.diagnostic import ModelVersion

DISEASE = {
    "name": "Rouille",
    "description": "Pustules orangées sur les feuilles.",
    "treatment": ["Brûler les débris végétaux", "Appliquer un fongicide adapté"],
}


def test_ml_routes_require_admin(client, farmer):
    assert client.get("/api/admin/ml-model/stats/", headers=farmer["headers"]).status_code == 403


def test_stats_without_model(client, admin):
    stats = client.get("/api/admin/ml-model/stats/", headers=admin["headers"]).json()
    assert stats == {"accuracy": 87.0, "diagnosticsCount": 0, "supportedDiseases": 0, "lastUpdated": None}


def test_disease_catalogue(client, admin):
    response = client.post("/api/admin/ml-model/diseases/", json=DISEASE, headers=admin["headers"])
    assert response.status_code == 201
    disease = response.json()
    assert disease["treatment"] == DISEASE["treatment"]

    duplicate = dict(DISEASE, name="rouille")
    assert client.post("/api/admin/ml-model/diseases/", json=duplicate, headers=admin["headers"]).status_code == 400

    listing = client.get("/api/admin/ml-model/diseases/", headers=admin["headers"]).json()
    assert [d["name"] for d in listing] == ["Rouille"]

    stats = client.get("/api/admin/ml-model/stats/", headers=admin["headers"]).json()
    assert stats["supportedDiseases"] == 1

    url = f"/api/admin/ml-model/diseases/{disease['id']}/"
    assert client.delete(url, headers=admin["headers"]).status_code == 200
    assert client.delete(url, headers=admin["headers"]).status_code == 404


def test_diagnostics_are_counted(client, admin, farmer):
    client.post(
        "/api/diagnostic/",
        files={"image": ("leaf.png", b"\x89PNG", "image/png")},
        headers=farmer["headers"],
    )
    stats = client.get("/api/admin/ml-model/stats/", headers=admin["headers"]).json()
    assert stats["diagnosticsCount"] == 1


def test_training_records_a_version(client, admin):
    response = client.post("/api/admin/ml-model/train/", headers=admin["headers"])
    assert response.status_code == 201
    version = response.json()
    assert version["version"] == 1
    assert version["status"] == "trained"
    assert version["accuracy"] == 87.0
    assert version["isActive"] is True

    stats = client.get("/api/admin/ml-model/stats/", headers=admin["headers"]).json()
    assert stats["lastUpdated"] is not None


def test_download_without_file(client, admin):
    assert client.get("/api/admin/ml-model/download/", headers=admin["headers"]).status_code == 404
    client.post("/api/admin/ml-model/train/", headers=admin["headers"])
    assert client.get("/api/admin/ml-model/download/", headers=admin["headers"]).status_code == 404


def test_upload_then_download(client, admin, db):
    client.post("/api/admin/ml-model/train/", headers=admin["headers"])
    payload = b"model-weights" * 100

    response = client.post(
        "/api/admin/ml-model/upload/",
        files={"model_file": ("plant_model.pkl", payload, "application/octet-stream")},
        headers=admin["headers"],
    )
    assert response.status_code == 201
    assert response.json()["version"] == 2
    assert response.json()["status"] == "uploaded"

    active = db.query(ModelVersion).filter(ModelVersion.is_active == True).all()  # noqa: E712
    assert [v.version for v in active] == [2]

    download = client.get("/api/admin/ml-model/download/", headers=admin["headers"])
    assert download.status_code == 200
    assert download.content == payload

    # Training keeps the uploaded weights
    retrained = client.post("/api/admin/ml-model/train/", headers=admin["headers"]).json()
    assert retrained["version"] == 3
    assert client.get("/api/admin/ml-model/download/", headers=admin["headers"]).content == payload


def test_empty_model_upload_is_rejected(client, admin):
    response = client.post(
        "/api/admin/ml-model/upload/",
        files={"model_file": ("empty.pkl", b"", "application/octet-stream")},
        headers=admin["headers"],
    )
    assert response.status_code == 400
