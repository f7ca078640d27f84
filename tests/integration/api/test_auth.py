import pytest

from leadflow.models import LoginSession


@pytest.mark.integration
def test_health_endpoint(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.integration
def test_signup_creates_user(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "New.User@Example.com", "password": "secret1", "name": " New User "},
    )

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "new.user@example.com"
    assert user["name"] == "New User"
    assert user["role"] == "user"
    assert user["twoFactorEnabled"] is False
    assert "hashedPassword" not in user and "password" not in user


@pytest.mark.integration
def test_signup_duplicate_email(client, make_user):
    make_user()
    response = client.post(
        "/api/auth/signup",
        json={"email": "user@example.com", "password": "secret1", "name": "Again"},
    )
    assert response.status_code == 400


@pytest.mark.integration
def test_signup_short_password_is_rejected(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "x@example.com", "password": "123", "name": "X"},
    )
    assert response.status_code == 422
    assert response.json()["error"] == "Please check your information and try again."


@pytest.mark.integration
def test_login_without_two_factor_returns_token(client, make_user, db_session):
    make_user()
    response = client.post("/api/auth/login", json={"email": "USER@example.com", "password": "password123"})

    assert response.status_code == 200
    body = response.json()
    assert body["requiresTwoFactor"] is False
    assert body["tokenType"] == "bearer"
    assert body["user"]["email"] == "user@example.com"
    assert body["accessToken"]

    session = db_session.query(LoginSession).one()
    assert session.is_authenticated()


@pytest.mark.integration
@pytest.mark.parametrize("password", ["wrong-password", "PASSWORD123"])
def test_login_invalid_credentials(client, make_user, password):
    make_user()
    response = client.post("/api/auth/login", json={"email": "user@example.com", "password": password})
    assert response.status_code == 401


@pytest.mark.integration
def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "password123"})
    assert response.status_code == 401


@pytest.mark.integration
def test_login_inactive_user(client, make_user, db_session):
    user = make_user()
    user.is_active = False
    db_session.commit()

    response = client.post("/api/auth/login", json={"email": "user@example.com", "password": "password123"})
    assert response.status_code == 401


@pytest.mark.integration
def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code in (401, 403)

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


@pytest.mark.integration
def test_me_returns_current_user(client, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "user@example.com"


@pytest.mark.integration
def test_logout_revokes_session(client, auth_headers):
    response = client.post("/api/auth/logout", headers=auth_headers)
    assert response.status_code == 200

    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 401
