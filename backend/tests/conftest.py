import os
import tempfile

# Settings are read at import time, so the environment is prepared first
_tmp_root = tempfile.mkdtemp(prefix="agrimarket-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_root, "uploads")
os.environ["MODEL_DIR"] = os.path.join(_tmp_root, "models")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.users import User, ADMIN
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    """Registers an account through the API and returns its id, token and headers."""
    def _register(email, user_type="buyer", name=None, region=None, phone=None):
        response = client.post("/api/auth/register/", json={
            "name": name or email.split("@")[0].title(),
            "email": email,
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "userType": user_type,
            "region": region,
            "phone": phone,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "email": body["user"]["email"],
            "token": body["token"],
            "headers": auth_headers(body["token"]),
        }
    return _register


@pytest.fixture
def farmer(register_user):
    return register_user("farmer@example.com", "farmer", name="Mohamed Ould Ahmed", region="Trarza", phone="+222 4400 0001")


@pytest.fixture
def buyer(register_user):
    return register_user("buyer@example.com", "buyer", name="Khadija Buyer", region="Nouakchott")


@pytest.fixture
def admin(db):
    # Admins cannot self-register
    user = User(email="admin@example.com", password_hash=get_password_hash(PASSWORD), role=ADMIN, name="Admin")
    db.add(user)
    db.commit()
    db.refresh(user)
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"id": user.id, "email": user.email, "token": token, "headers": auth_headers(token)}


@pytest.fixture
def create_product(client):
    def _create(owner, name="Tomates", price=40.0, quantity=100, category="Légumes", unit="kg", files=None):
        response = client.post(
            "/api/farmer/products/",
            data={
                "name": name,
                "price": str(price),
                "quantity": str(quantity),
                "category": category,
                "unit": unit,
            },
            files=files,
            headers=owner["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _create
