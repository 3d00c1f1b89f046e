from flask_jwt_extended import decode_token

from models import User


def test_welcome(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


# POST /auth/token

def test_token(client):
    resp = client.post("/auth/token", json={"username": "u1", "password": "password1"})
    assert resp.status_code == 200
    claims = decode_token(resp.get_json()["token"])
    assert claims["sub"] == "u1"
    assert claims["isAdmin"] is False


def test_token_for_admin_carries_admin_flag(client):
    resp = client.post("/auth/token", json={"username": "admin", "password": "password-admin"})
    assert decode_token(resp.get_json()["token"])["isAdmin"] is True


def test_token_works_on_protected_routes(client):
    token = client.post(
        "/auth/token", json={"username": "u1", "password": "password1"}
    ).get_json()["token"]
    resp = client.get("/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


def test_token_bad_password(client):
    resp = client.post("/auth/token", json={"username": "u1", "password": "wrong"})
    assert resp.status_code == 401


def test_token_unknown_user(client):
    resp = client.post("/auth/token", json={"username": "nope", "password": "password1"})
    assert resp.status_code == 401


def test_token_missing_fields(client):
    assert client.post("/auth/token", json={"username": "u1"}).status_code == 400


# POST /auth/register

def test_register(client):
    resp = client.post("/auth/register", json={
        "username": "new",
        "password": "password",
        "displayName": "New",
        "email": "new@email.com",
    })
    assert resp.status_code == 201
    claims = decode_token(resp.get_json()["token"])
    assert claims["sub"] == "new"
    assert claims["isAdmin"] is False
    assert User.get("new")["isAdmin"] is False


def test_register_cannot_make_admin(client):
    resp = client.post("/auth/register", json={
        "username": "new",
        "password": "password",
        "displayName": "New",
        "email": "new@email.com",
        "isAdmin": True,
    })
    assert resp.status_code == 400


def test_register_duplicate(client):
    resp = client.post("/auth/register", json={
        "username": "u1",
        "password": "password",
        "displayName": "New",
        "email": "new@email.com",
    })
    assert resp.status_code == 400


# passwords past bcrypt's 72-byte limit

LONG_PASSWORD = "é" * 40


def test_register_with_long_multibyte_password(client):
    resp = client.post("/auth/register", json={
        "username": "new",
        "password": LONG_PASSWORD,
        "displayName": "New",
        "email": "new@email.com",
    })
    assert resp.status_code == 201

    resp = client.post("/auth/token", json={"username": "new", "password": LONG_PASSWORD})
    assert resp.status_code == 200
    assert decode_token(resp.get_json()["token"])["sub"] == "new"


def test_token_long_wrong_password_matches_unknown_user(client):
    known = client.post("/auth/token", json={"username": "u1", "password": LONG_PASSWORD})
    unknown = client.post("/auth/token", json={"username": "nope", "password": LONG_PASSWORD})
    assert known.status_code == unknown.status_code == 401
    assert known.get_json() == unknown.get_json()
