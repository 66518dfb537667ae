"""Tests for admin login and token verification."""
import base64
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from werkzeug.security import generate_password_hash

from app.guestbook import create_app
from app.guestbook.auth import AdminAuth
from app.guestbook.errors import InvalidCredentials, InvalidToken, MissingToken


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "correct-horse")
    for k in ("POSTGRES_URL", "POSTGRES_PRISMA_URL", "STORAGE_MODE", "ADMIN_PASSWORD_HASH", "TOKEN_TTL_HOURS"):
        monkeypatch.delenv(k, raising=False)
    return create_app()


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client, username="admin", password="correct-horse"):
    return client.post("/api/admin/login", json={"username": username, "password": password})


def test_login_wrong_password_is_401(client):
    r = _login(client, password="wrong-password")
    assert r.status_code == 401
    assert r.json == {"error": "Invalid credentials"}


def test_login_wrong_username_same_error(client):
    r = _login(client, username="root")
    assert r.status_code == 401
    assert r.json == {"error": "Invalid credentials"}


def test_login_missing_fields_is_401(client):
    r = client.post("/api/admin/login", json={})
    assert r.status_code == 401


def test_login_then_verify(client):
    r = _login(client)
    assert r.status_code == 200
    token = r.json["token"]
    assert token

    r = client.get("/api/admin/verify", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json == {"valid": True}


def test_login_accepts_form_post(client):
    r = client.post("/api/admin/login", data={"username": "admin", "password": "correct-horse"})
    assert r.status_code == 200
    assert r.json["token"]


def test_token_carries_username_and_24h_expiry(app, client):
    token = _login(client).json["token"]
    claims = jwt.decode(token, "test-secret", algorithms=["HS256"])
    assert claims["username"] == "admin"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_verify_accepts_query_token(client):
    token = _login(client).json["token"]
    r = client.get(f"/api/admin/verify?token={token}")
    assert r.status_code == 200


def test_verify_without_token_is_401(client):
    r = client.get("/api/admin/verify")
    assert r.status_code == 401
    assert r.json == {"error": "Access denied"}


def test_verify_corrupted_token_is_403(client):
    header, _payload, signature = _login(client).json["token"].split(".")
    tampered = base64.urlsafe_b64encode(b'{"username":"admin","iat":1,"exp":9999999999}').rstrip(b"=").decode()
    corrupted = f"{header}.{tampered}.{signature}"
    r = client.get("/api/admin/verify", headers={"Authorization": f"Bearer {corrupted}"})
    assert r.status_code == 403
    assert r.json == {"error": "Invalid token"}


def test_verify_garbage_token_is_403(client):
    r = client.get("/api/admin/verify", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 403


def test_verify_expired_token_is_403(app, client):
    auth = app.extensions["admin_auth"]
    stale = auth.issue_token("admin", now=datetime.now(timezone.utc) - timedelta(hours=25))
    r = client.get("/api/admin/verify", headers={"Authorization": f"Bearer {stale}"})
    assert r.status_code == 403


def test_verify_token_signed_with_other_secret_is_403(client):
    forged = jwt.encode(
        {
            "username": "admin",
            "iat": datetime.now(timezone.utc),
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        "some-other-secret",
        algorithm="HS256",
    )
    r = client.get("/api/admin/verify", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 403


def test_non_bearer_header_falls_back_to_query(client):
    token = _login(client).json["token"]
    r = client.get(f"/api/admin/verify?token={token}", headers={"Authorization": "Basic Zm9vOmJhcg=="})
    assert r.status_code == 200


class TestAdminAuth:
    def _auth(self, **overrides):
        config = {
            "ADMIN_USERNAME": "admin",
            "ADMIN_PASSWORD": "pw",
            "ADMIN_PASSWORD_HASH": "",
            "JWT_SECRET": "unit-secret",
            "TOKEN_TTL_HOURS": 24,
        }
        config.update(overrides)
        return AdminAuth.from_config(config)

    def test_password_is_stored_hashed(self):
        auth = self._auth()
        assert auth.password_hash != "pw"
        assert auth.check_credentials("admin", "pw")

    def test_prehashed_password(self):
        auth = self._auth(ADMIN_PASSWORD="ignored", ADMIN_PASSWORD_HASH=generate_password_hash("from-hash"))
        assert auth.check_credentials("admin", "from-hash")
        assert not auth.check_credentials("admin", "ignored")

    def test_login_and_verify(self):
        auth = self._auth()
        token = auth.login("admin", "pw")
        assert auth.verify(token) == "admin"

    @pytest.mark.parametrize("username,password", [("admin", "wrong-password"), ("Admin", "pw"), (None, None), (1, 2)])
    def test_login_rejects(self, username, password):
        with pytest.raises(InvalidCredentials):
            self._auth().login(username, password)

    @pytest.mark.parametrize("token", [None, ""])
    def test_verify_missing(self, token):
        with pytest.raises(MissingToken):
            self._auth().verify(token)

    def test_verify_expired(self):
        auth = self._auth()
        token = auth.issue_token("admin", now=datetime.now(timezone.utc) - timedelta(days=2))
        with pytest.raises(InvalidToken):
            auth.verify(token)

    def test_verify_rejects_token_for_other_principal(self):
        auth = self._auth()
        with pytest.raises(InvalidToken):
            auth.verify(auth.issue_token("someone-else"))

    def test_verify_rejects_after_secret_rotation(self):
        token = self._auth().login("admin", "pw")
        with pytest.raises(InvalidToken):
            self._auth(JWT_SECRET="rotated").verify(token)

    def test_custom_ttl(self):
        auth = self._auth(TOKEN_TTL_HOURS=1)
        claims = jwt.decode(auth.login("admin", "pw"), "unit-secret", algorithms=["HS256"])
        assert claims["exp"] - claims["iat"] == 3600
