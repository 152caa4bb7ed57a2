import json

NOW = 1700000000


def test_register_success(client, tokens):
    resp = client.post(
        "/api/v1/auth/register",
        json={"name": "  Ana  ", "email": " ana@example.com ", "password": "secret1"},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["user"] == {
        "id": "1",
        "name": "Ana",
        "email": "ana@example.com",
        "avatar": None,
        "level": "Iniciante",
        "xp": 0,
        "streak": 0,
        "joinDate": data["user"]["joinDate"],
    }
    assert "password_hash" not in data["user"]

    # 校验令牌 claims：sub 为字符串形式的用户 ID
    claims = tokens.verify(data["token"], now=NOW)
    assert claims.model_dump() == {"sub": "1", "iat": NOW, "exp": NOW + 604800}


def test_register_assigns_increasing_ids(register_user):
    first = register_user("Ana", "ana@example.com")
    second = register_user("Bruno", "bruno@example.com")
    assert first["user"]["id"] == "1"
    assert second["user"]["id"] == "2"


def test_register_duplicate_email(client, register_user):
    register_user("Ana", "ana@example.com")
    resp = client.post(
        "/api/v1/auth/register",
        json={"name": "Other", "email": "ANA@example.com", "password": "secret1"},
    )
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "message": "Email already registered"}


def test_register_invalid_email(client):
    resp = client.post("/api/v1/auth/register", json={"name": "Ana", "email": "not-an-email", "password": "secret1"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid email"}


def test_register_short_password(client):
    resp = client.post("/api/v1/auth/register", json={"name": "Ana", "email": "ana@example.com", "password": "123"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_register_blank_name(client):
    resp = client.post("/api/v1/auth/register", json={"name": "   ", "email": "ana@example.com", "password": "secret1"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Name is required"}


def test_register_missing_fields(client):
    resp = client.post("/api/v1/auth/register", json={"email": "ana@example.com"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["success"] is False
    assert "name" in data["message"] and "password" in data["message"]


def test_login_success(client, register_user, tokens):
    register_user("Ana", "ana@example.com", "secret1")
    resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "secret1"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["user"]["email"] == "ana@example.com"
    assert tokens.verify(data["token"], now=NOW).sub == "1"


def test_login_is_case_insensitive_on_email(client, register_user):
    register_user("Ana", "ana@example.com", "secret1")
    resp = client.post("/api/v1/auth/login", json={"email": "Ana@Example.com", "password": "secret1"})
    assert resp.status_code == 200


def test_login_wrong_password_and_unknown_email_look_the_same(client, register_user):
    register_user("Ana", "ana@example.com", "secret1")
    wrong = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "nope-nope"})
    unknown = client.post("/api/v1/auth/login", json={"email": "who@example.com", "password": "secret1"})

    for resp in (wrong, unknown):
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Invalid credentials"}


def test_login_missing_password(client):
    resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com"})
    assert resp.status_code == 400
    assert "password" in resp.json()["message"]


def test_login_does_not_leak_password_hash(client, register_user, db_path):
    register_user("Ana", "ana@example.com", "secret1")
    stored = json.loads(db_path.read_text(encoding="utf-8"))["users"][0]["password_hash"]
    resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "secret1"})
    assert stored not in resp.text


def test_me_returns_claims(client, register_user):
    token = register_user()["token"]
    resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "claims": {"sub": "1", "iat": NOW, "exp": NOW + 604800}}


def test_me_without_token(client):
    resp = client.get("/api/v1/auth/me")
    assert resp.status_code == 401
    assert resp.headers.get("WWW-Authenticate") == "Bearer"
    assert resp.json() == {"success": False, "message": "Unauthorized"}
