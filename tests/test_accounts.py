import asyncio
from decimal import Decimal

import pytest

from lius_fintech_api.app.core.db import USERS
from lius_fintech_api.app.core.errors import AuthError, NotFoundError, ValidationError
from lius_fintech_api.app.core.security import verify_password
from lius_fintech_api.app.services.account_service import AccountService


def run(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "username,password,message",
    [
        ("ab", "secret123", "Username must be at least 3 characters long"),
        ("alice", "12345", "Password must be at least 6 characters long"),
        ("", "secret123", "Username and password are required"),
        ("alice", None, "Username and password are required"),
    ],
)
def test_register_rejects_bad_input(username, password, message):
    with pytest.raises(ValidationError) as excinfo:
        run(AccountService.register(username, password))
    assert excinfo.value.message == message


def test_register_rejects_duplicate_username():
    run(AccountService.register("alice", "secret123"))
    with pytest.raises(ValidationError, match="Username already exists"):
        run(AccountService.register("alice", "other-secret"))


def test_register_creates_user_with_starting_balance(store):
    user_id = run(AccountService.register("  alice  ", "secret123"))
    [row] = store.read(USERS)
    assert row["id"] == user_id
    assert row["username"] == "alice"
    assert Decimal(str(row["balance"])) == Decimal("1000.00")
    assert row["password"] != "secret123"
    assert verify_password("secret123", row["password"])
    assert "pin" not in row
    assert row["createdAt"]


def test_register_endpoint(client, store):
    resp = client.post("/api/register", json={"username": "alice", "password": "secret123"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["userId"] == store.read(USERS)[0]["id"]


def test_register_endpoint_error_envelope(client):
    resp = client.post("/api/register", json={"username": "al", "password": "secret123"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Username must be at least 3 characters long"}


def test_password_with_lone_surrogate_registers_and_logs_in(client):
    # Raw body: the escape is valid JSON but not encodable as UTF-8.
    body = b'{"username": "alice", "password": "abcdef\\ud800"}'
    headers = {"Content-Type": "application/json"}
    resp = client.post("/api/register", content=body, headers=headers)
    assert resp.status_code == 201
    resp = client.post("/api/login", content=body, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["username"] == "alice"


def test_malformed_body_is_a_400_envelope(client):
    resp = client.post("/api/register", json={"username": ["alice"], "password": "secret123"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def test_login_wrong_password():
    run(AccountService.register("alice", "secret123"))
    with pytest.raises(AuthError, match="Invalid credentials"):
        run(AccountService.login("alice", "wrong-password"))


def test_login_unknown_user():
    with pytest.raises(AuthError, match="Invalid credentials"):
        run(AccountService.login("nobody", "secret123"))


def test_login_endpoint_returns_balance_without_secrets(client, register):
    user_id = register("alice")
    resp = client.post("/api/login", json={"username": "alice", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["user"] == {"id": user_id, "username": "alice", "balance": 1000.0}
    assert "password" not in resp.text
    assert "pin" not in body["user"]


def test_login_endpoint_rejects_bad_credentials(client, register):
    register("alice")
    resp = client.post("/api/login", json={"username": "alice", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


def test_login_endpoint_requires_fields(client):
    resp = client.post("/api/login", json={"username": "alice"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Username and password are required"


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------

def test_get_balance_unknown_user():
    with pytest.raises(NotFoundError):
        run(AccountService.get_balance("missing"))


def test_balance_endpoint_is_repeatable(client, register):
    user_id = register("alice")
    first = client.get(f"/api/balance/{user_id}")
    second = client.get(f"/api/balance/{user_id}")
    assert first.status_code == 200
    assert first.json() == second.json() == {
        "success": True,
        "message": None,
        "balance": 1000.0,
        "username": "alice",
    }


def test_balance_endpoint_unknown_user(client):
    resp = client.get("/api/balance/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "User not found"}


def test_versioned_prefix_serves_same_routes(client, register):
    user_id = register("alice")
    assert client.get(f"/api/v1/balance/{user_id}").json()["balance"] == 1000.0


# ---------------------------------------------------------------------------
# Password and PIN
# ---------------------------------------------------------------------------

def test_change_password(client, register):
    user_id = register("alice")
    resp = client.post(
        f"/api/users/{user_id}/password",
        json={"currentPassword": "secret123", "newPassword": "better-secret"},
    )
    assert resp.status_code == 200
    assert client.post("/api/login", json={"username": "alice", "password": "secret123"}).status_code == 401
    assert client.post("/api/login", json={"username": "alice", "password": "better-secret"}).status_code == 200


def test_change_password_checks_current_password(client, register):
    user_id = register("alice")
    resp = client.post(
        f"/api/users/{user_id}/password",
        json={"currentPassword": "wrong-one", "newPassword": "better-secret"},
    )
    assert resp.status_code == 401


def test_change_password_enforces_length():
    user_id = run(AccountService.register("alice", "secret123"))
    with pytest.raises(ValidationError):
        run(AccountService.change_password(user_id, "secret123", "short"))


def test_change_password_unknown_user(client):
    resp = client.post(
        "/api/users/missing/password",
        json={"currentPassword": "secret123", "newPassword": "better-secret"},
    )
    assert resp.status_code == 404


def test_set_and_clear_pin(client, register, store):
    user_id = register("alice")
    resp = client.post(f"/api/users/{user_id}/pin", json={"password": "secret123", "pin": "4321"})
    assert resp.status_code == 200
    assert resp.json()["hasPin"] is True
    stored = store.read(USERS)[0]["pin"]
    assert stored != "4321"
    assert verify_password("4321", stored)

    resp = client.post(f"/api/users/{user_id}/pin", json={"password": "secret123", "pin": None})
    assert resp.json()["hasPin"] is False
    assert "pin" not in store.read(USERS)[0]


@pytest.mark.parametrize("pin", ["12", "1234567", "12ab", ""])
def test_set_pin_rejects_bad_pins(pin):
    user_id = run(AccountService.register("alice", "secret123"))
    with pytest.raises(ValidationError, match="PIN must be 4 to 6 digits"):
        run(AccountService.set_pin(user_id, "secret123", pin))


def test_set_pin_requires_password():
    user_id = run(AccountService.register("alice", "secret123"))
    with pytest.raises(AuthError):
        run(AccountService.set_pin(user_id, "not-the-password", "1234"))
