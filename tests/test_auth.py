import pytest

from docportal.auth.jwt import OPERATOR_SCOPE, create_access_token, decode_access_token
from docportal.core import AppError, ErrorCode
from docportal.core.config import settings


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_token_carries_operator_scope():
    claims = decode_access_token(create_access_token(subject="admin"))
    assert claims["sub"] == "admin"
    assert claims["scope"] == OPERATOR_SCOPE
    assert claims["jti"]


def test_expired_token_is_rejected():
    token = create_access_token(subject="admin", expires_minutes=-1)
    with pytest.raises(AppError) as exc:
        decode_access_token(token)
    assert exc.value.status_code == 401
    assert exc.value.message == "Token expired"


def test_token_signed_with_other_key_is_rejected(monkeypatch):
    token = create_access_token(subject="admin")
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "rotated-secret")
    with pytest.raises(AppError) as exc:
        decode_access_token(token)
    assert exc.value.code == ErrorCode.UNAUTHORIZED


def test_wrong_scope_is_forbidden(client):
    token = create_access_token(subject=settings.ADMIN_USERNAME, scope="portal:reader")
    resp = client.get("/api/documents", headers=_bearer(token))
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"


def test_unknown_operator_is_forbidden(client):
    resp = client.get("/api/documents", headers=_bearer(create_access_token(subject="mallory")))
    assert resp.status_code == 403


def test_whoami(client, auth_headers):
    resp = client.get("/auth/me", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == settings.ADMIN_USERNAME
    assert body["scope"] == OPERATOR_SCOPE
    assert body["expires_at"]
