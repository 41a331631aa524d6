"""
User endpoint tests plus credential validation through the service layer.
"""
from multistore.schemas.user_schema import UserCreate
from multistore.services.user_service import user_service


async def _register(client, **overrides):
    payload = {
        "email": "Sara@Example.com",
        "password": "secret123",
        "phone": "+967711111111",
        "first_name": "Sara",
        "last_name": "Ahmed",
    }
    payload.update(overrides)
    return await client.post("/api/v1/users/register", json=payload)


# ===================== REGISTER =====================


async def test_register_user(client):
    r = await _register(client)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["email"] == "sara@example.com"
    assert data["role"] == "customer"
    assert data["is_active"] is True
    assert data["is_verified"] is False
    assert data["display_id"].startswith("USR-")
    assert "password" not in data
    assert "password_hash" not in data


async def test_register_duplicate_email_ignores_case(client):
    await _register(client)
    r = await _register(client, email="SARA@example.COM", phone=None)
    assert r.status_code == 409


async def test_register_duplicate_phone(client):
    await _register(client)
    r = await _register(client, email="other@example.com")
    assert r.status_code == 409


async def test_register_validation(client):
    r = await _register(client, password="123")
    assert r.status_code == 400
    r = await _register(client, email="nope")
    assert r.status_code == 400
    r = await _register(client, first_name="  ")
    assert r.status_code == 400


# ===================== READ / UPDATE =====================


async def test_user_lookups(client):
    user = (await _register(client)).json()["data"]

    for path in (
        f"/api/v1/users/{user['id']}",
        f"/api/v1/users/display/{user['display_id']}",
        "/api/v1/users/email/SARA@example.com",
    ):
        r = await client.get(path)
        assert r.status_code == 200, path
        assert r.json()["data"]["id"] == user["id"]

    r = await client.get("/api/v1/users/999")
    assert r.status_code == 404

    r = await client.get("/api/v1/users/")
    assert r.json()["data"]["page_info"]["total_elements"] == 1


async def test_list_users_cannot_sort_by_password_hash(client):
    await _register(client)
    r = await client.get("/api/v1/users/", params={"sort_by": "password_hash"})
    assert r.status_code == 400
    assert r.json()["success"] is False

    r = await client.get("/api/v1/users/", params={"sort_by": "email", "sort_dir": "asc"})
    assert r.status_code == 200


async def test_update_user_status_and_verify(client):
    user = (await _register(client)).json()["data"]

    r = await client.put(f"/api/v1/users/{user['id']}/status", json={"is_active": False})
    assert r.json()["data"]["is_active"] is False

    r = await client.put(f"/api/v1/users/{user['id']}/verify")
    assert r.json()["data"]["is_verified"] is True


async def test_users_health(client):
    r = await client.get("/api/v1/users/health")
    assert r.json() == {"status": "UP", "service": "users"}


# ===================== CREDENTIALS =====================


async def test_validate_login(db_session):
    user = await user_service.register_user(
        db_session,
        UserCreate(email="login@example.com", password="secret123", first_name="Omar", last_name="Nasser"),
    )
    assert user.password_hash != "secret123"

    assert await user_service.validate_login(db_session, "LOGIN@example.com", "secret123") is True
    assert await user_service.validate_login(db_session, "login@example.com", "wrong-pass") is False
    assert await user_service.validate_login(db_session, "ghost@example.com", "secret123") is False

    await user_service.update_user_status(db_session, user.id, False)
    assert await user_service.validate_login(db_session, "login@example.com", "secret123") is False
