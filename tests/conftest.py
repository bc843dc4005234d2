from collections import namedtuple

import pytest

from storefront.app import create_app
from storefront.config.settings import Config
from storefront.models.database import db

Account = namedtuple("Account", "user token headers")


class ConfigForTests(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET = "test-secret-key-long-enough-for-hs256-signing"
    JWT_EXPIRY_MINUTES = 60
    BCRYPT_ROUNDS = 4
    RATELIMIT_ENABLED = False
    CORS_ORIGINS = ["*"]
    LOG_LEVEL = "WARNING"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def activity_log_path(tmp_path):
    return str(tmp_path / "activity.log")


@pytest.fixture
def app(activity_log_path):
    config = type("Config", (ConfigForTests,), {"ACTIVITY_LOG_PATH": activity_log_path})
    app = create_app(config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """Register and log in an account, returning its user body and token."""
    def _signup(username, email, password="Secret@123", role="CUSTOMER"):
        resp = client.post("/auth/signup", json={
            "username": username,
            "email": email,
            "password": password,
            "role": role,
        })
        assert resp.status_code == 201, resp.get_json()
        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.get_json()
        token = login.get_json()["token"]
        return Account(resp.get_json(), token, bearer(token))
    return _signup


@pytest.fixture
def admin(signup):
    return signup("admin", "admin@example.com", "Admin@1234", "ADMIN")


@pytest.fixture
def customer(signup):
    return signup("customer", "customer@example.com", "Customer@1234")


@pytest.fixture
def other_customer(signup):
    return signup("other", "other@example.com", "Other@1234")


@pytest.fixture
def create_product(client, admin):
    def _create(name="Widget", price=25.00, stock=100, description=None):
        body = {"name": name, "price": price, "stock": stock}
        if description is not None:
            body["description"] = description
        resp = client.post("/products", json=body, headers=admin.headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _create


@pytest.fixture
def product(create_product):
    return create_product()
