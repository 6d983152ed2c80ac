"""API tests for /api/auth and token handling."""

from knowledge_base.core.security import create_access_token, decode_access_token


def test_login_returns_token_and_user(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "Admin#123456"})
    assert resp.status_code == 200
    body = resp.json()

    assert body["success"] is True
    assert body["request_id"]
    assert body["data"]["token_type"] == "Bearer"
    assert body["data"]["expires_in"] > 0
    assert body["data"]["user"]["role"] == "admin"


def test_login_username_case_insensitive(client):
    resp = client.post("/api/auth/login", json={"username": "ADMIN", "password": "Admin#123456"})
    assert resp.status_code == 200


def test_wrong_password(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert resp.json()["error"]["code"] == "AUTH_INVALID_CREDENTIALS"


def test_missing_fields(client):
    resp = client.post("/api/auth/login", json={"username": "admin"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_me_with_and_without_token(client, admin_headers):
    assert client.get("/api/auth/me").json()["data"] == {"user": None}

    me = client.get("/api/auth/me", headers=admin_headers).json()["data"]["user"]
    assert me["username"] == "admin"

    bad = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert bad.json()["data"] == {"user": None}


def test_invalid_token_on_protected_route(client):
    resp = client.post("/api/categories", json={"name": "x"}, headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "AUTH_INVALID_CREDENTIALS"


def test_request_id_in_body_and_header(client):
    resp = client.get("/api/auth/me")
    assert resp.json()["request_id"].startswith("req_")
    assert resp.headers["X-Request-ID"] == resp.json()["request_id"]


def test_token_round_trip():
    token = create_access_token(42, "someone", "user", expires_in_seconds=60)
    payload = decode_access_token(token)
    assert payload["sub"] == "42"
    assert payload["username"] == "someone"
    assert payload["role"] == "user"
