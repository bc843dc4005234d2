import jwt

from storefront.services.auth_service import AuthService


def test_signup_returns_user_without_password(client):
    resp = client.post("/auth/signup", json={
        "username": "alice",
        "email": "alice@example.com",
        "password": "Alice@1234",
    })

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["username"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["role"] == "CUSTOMER"
    assert "id" in body and "createdAt" in body
    assert "password" not in body


def test_signup_duplicate_email_is_checked_before_username(client, customer):
    resp = client.post("/auth/signup", json={
        "username": "customer",
        "email": "customer@example.com",
        "password": "Customer@1234",
    })

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "User with that email already exists"


def test_signup_duplicate_username(client, customer):
    resp = client.post("/auth/signup", json={
        "username": "customer",
        "email": "someone-else@example.com",
        "password": "Customer@1234",
    })

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "User with that username already exists"


def test_signup_weak_password_lists_every_violation(client):
    resp = client.post("/auth/signup", json={
        "username": "weak",
        "email": "weak@example.com",
        "password": "123456",
    })

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation failed"
    assert "password: Password must be at least 8 characters" in body["details"]
    assert any("one uppercase letter" in d for d in body["details"])


def test_signup_reports_all_invalid_fields(client):
    resp = client.post("/auth/signup", json={
        "username": "ab",
        "email": "not-an-email",
        "password": "Valid@1234",
        "role": "SUPERUSER",
    })

    assert resp.status_code == 400
    details = resp.get_json()["details"]
    assert "username: Username must be between 3 and 30 characters" in details
    assert "email: Please provide a valid email address" in details
    assert "role: Role must be either CUSTOMER or ADMIN" in details


def test_signup_missing_body(client):
    resp = client.post("/auth/signup")

    assert resp.status_code == 400
    details = resp.get_json()["details"]
    assert "username: Username is required" in details
    assert "email: Email is required" in details
    assert "password: Password is required" in details


def test_signup_can_create_admin(client):
    resp = client.post("/auth/signup", json={
        "username": "boss",
        "email": "boss@example.com",
        "password": "Boss@12345",
        "role": "ADMIN",
    })

    assert resp.status_code == 201
    assert resp.get_json()["role"] == "ADMIN"


def test_login_issues_one_hour_token(client, app, customer):
    resp = client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "Customer@1234",
    })

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "Login successful"
    assert body["user"] == {
        "id": customer.user["id"],
        "username": "customer",
        "email": "customer@example.com",
        "role": "CUSTOMER",
    }

    claims = jwt.decode(body["token"], app.config["JWT_SECRET"], algorithms=["HS256"])
    assert claims["sub"] == str(customer.user["id"])
    assert claims["email"] == "customer@example.com"
    assert claims["role"] == "CUSTOMER"
    assert claims["exp"] - claims["iat"] == 3600


def test_login_does_not_reveal_which_accounts_exist(client, customer):
    unknown = client.post("/auth/login", json={
        "email": "nobody@example.com",
        "password": "Customer@1234",
    })
    wrong = client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "Wrong@12345",
    })

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.get_json() == wrong.get_json() == {"error": "Invalid email or password"}


def test_login_without_secret_fails_to_issue_token(client, app, customer):
    app.config["JWT_SECRET"] = None

    resp = client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "Customer@1234",
    })

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to create token"}


def test_login_validation(client):
    resp = client.post("/auth/login", json={"email": "bad"})

    assert resp.status_code == 400
    details = resp.get_json()["details"]
    assert "email: Please provide a valid email address" in details
    assert "password: Password is required" in details


def test_signup_hash_failure_is_server_error(client, monkeypatch):
    def broken_hash(password, rounds=10):
        raise ValueError("invalid salt")

    monkeypatch.setattr(AuthService, "hash_password", staticmethod(broken_hash))

    resp = client.post("/auth/signup", json={
        "username": "unlucky",
        "email": "unlucky@example.com",
        "password": "Unlucky@123",
    })

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to create user"}
    assert client.post("/auth/login", json={
        "email": "unlucky@example.com",
        "password": "Unlucky@123",
    }).status_code == 401
