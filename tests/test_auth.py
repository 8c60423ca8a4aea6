"""Tests for the built-in email/password session provider."""

from datetime import timedelta

from fridgechef.models import Account, AuthSession, User
from fridgechef.settings import settings

SIGN_UP = {"name": "Linus", "email": "Linus@Example.com", "password": "correct-horse"}


def test_sign_up_returns_token_and_sets_cookie(client, db_session):
    response = client.post("/api/auth/sign-up/email", json=SIGN_UP)
    assert response.status_code == 200, response.text

    data = response.json()
    assert data["token"]
    assert data["user"]["email"] == "linus@example.com"
    assert data["user"]["emailVerified"] is False
    assert response.cookies.get(settings.session_cookie_name) == data["token"]

    account = db_session.query(Account).filter_by(user_id=data["user"]["id"]).one()
    assert account.provider_id == "credential"
    assert account.password != SIGN_UP["password"]


def test_sign_up_duplicate_email_is_409(client):
    assert client.post("/api/auth/sign-up/email", json=SIGN_UP).status_code == 200
    response = client.post("/api/auth/sign-up/email", json={**SIGN_UP, "email": "linus@example.com"})
    assert response.status_code == 409
    assert "error" in response.json()


def test_sign_up_short_password_is_rejected(client):
    response = client.post("/api/auth/sign-up/email", json={**SIGN_UP, "password": "short"})
    assert response.status_code == 400
    assert "password" in response.json()["error"]


def test_sign_up_malformed_json_is_400(client):
    response = client.post(
        "/api/auth/sign-up/email",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert set(response.json()) == {"error"}


def test_sign_up_racing_an_existing_row_is_409(client, db_session):
    """The unique email index decides, not a prior lookup that both requests could pass."""
    db_session.add(User(name="Linus", email="linus@example.com"))
    db_session.commit()

    response = client.post("/api/auth/sign-up/email", json=SIGN_UP)
    assert response.status_code == 409
    assert response.json() == {"error": "An account with this email already exists"}
    assert db_session.query(Account).count() == 0


def test_sign_in_with_correct_password(client):
    client.post("/api/auth/sign-up/email", json=SIGN_UP)
    client.cookies.clear()

    response = client.post(
        "/api/auth/sign-in/email", json={"email": "linus@example.com", "password": "correct-horse"}
    )
    assert response.status_code == 200
    token = response.json()["token"]

    session = client.get("/api/auth/get-session", headers={"Authorization": f"Bearer {token}"})
    assert session.status_code == 200
    assert session.json()["user"]["email"] == "linus@example.com"


def test_sign_in_wrong_password_is_401(client):
    client.post("/api/auth/sign-up/email", json=SIGN_UP)
    client.cookies.clear()

    response = client.post(
        "/api/auth/sign-in/email", json={"email": "linus@example.com", "password": "wrong-horse"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_sign_in_unknown_email_is_401(client):
    response = client.post(
        "/api/auth/sign-in/email", json={"email": "nobody@example.com", "password": "whatever1"}
    )
    assert response.status_code == 401


def test_session_cookie_authorises_recipe_routes(client):
    client.post("/api/auth/sign-up/email", json=SIGN_UP)

    # cookie set by sign-up is sent automatically
    response = client.get("/api/recipes")
    assert response.status_code == 200
    assert response.json() == {"recipes": []}


def test_get_session_requires_token(client):
    response = client.get("/api/auth/get-session")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


def test_sign_out_revokes_session(client, db_session):
    token = client.post("/api/auth/sign-up/email", json=SIGN_UP).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    response = client.post("/api/auth/sign-out", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    client.cookies.clear()
    assert client.get("/api/auth/get-session", headers=headers).status_code == 401
    assert db_session.query(AuthSession).filter_by(token=token).first() is None


def test_expired_session_is_rejected(client, user, make_session):
    session = make_session(user, expires_in=timedelta(minutes=-5))
    headers = {"Authorization": f"Bearer {session.token}"}

    assert client.get("/api/recipes", headers=headers).status_code == 401
    assert client.get("/api/auth/get-session", headers=headers).status_code == 401


def test_malformed_authorization_header_is_401(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    assert client.get("/api/recipes", headers={"Authorization": token}).status_code == 401
    assert client.get("/api/recipes", headers={"Authorization": "Basic " + token}).status_code == 401


class _BrokenSession:
    def query(self, *args, **kwargs):
        raise RuntimeError("server closed the connection unexpectedly")

    def close(self):
        pass


def test_unexpected_error_renders_generic_json_500():
    from fastapi.testclient import TestClient

    from fridgechef.db import get_db
    from fridgechef.main import app

    def broken_db():
        yield _BrokenSession()

    app.dependency_overrides[get_db] = broken_db
    try:
        # the server error middleware re-raises after responding; keep the response
        with TestClient(app, raise_server_exceptions=False) as c:
            response = c.post(
                "/api/auth/sign-in/email", json={"email": "a@example.com", "password": "whatever1"}
            )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong. Please try again."}
