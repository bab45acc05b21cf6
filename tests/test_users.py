"""Staff users and session authentication."""

import pytest


@pytest.mark.asyncio
async def test_admin_creates_user(client, headers):
    resp = await client.post(
        "/users",
        json={"email": "New.Estimator@VOSMOTORS.com", "firstName": "Nia", "lastName": "New", "role": "estimator"},
        headers=headers["admin"],
    )
    assert resp.status_code == 201
    user = resp.json()["data"]
    assert user["email"] == "new.estimator@vosmotors.com"
    assert user["role"] == "estimator"
    assert user["sessionToken"]

    resp = await client.get("/users/me", headers={"Authorization": f"Bearer {user['sessionToken']}"})
    assert resp.status_code == 200
    me = resp.json()["data"]
    assert me["id"] == user["id"]
    assert "sessionToken" not in me


@pytest.mark.asyncio
async def test_duplicate_email_is_conflict(client, headers):
    payload = {"email": "agent@vosmotors.com", "firstName": "Second", "lastName": "Agent"}
    resp = await client.post("/users", json=payload, headers=headers["admin"])
    assert resp.status_code == 409
    assert resp.json()["error"] == "User with email agent@vosmotors.com already exists"

    payload["email"] = "AGENT@vosmotors.com"
    resp = await client.post("/users", json=payload, headers=headers["admin"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_only_admins_create_users(client, headers):
    resp = await client.post(
        "/users",
        json={"email": "someone@vosmotors.com", "firstName": "Some", "lastName": "One"},
        headers=headers["agent"],
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "Role agent is not allowed to perform this action"


@pytest.mark.asyncio
async def test_list_users_by_role(client, headers, staff):
    resp = await client.get("/users", headers=headers["agent"])
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 4

    resp = await client.get("/users?role=inspector", headers=headers["agent"])
    inspectors = resp.json()["data"]
    assert [u["id"] for u in inspectors] == [staff["inspector"].id]
    assert inspectors[0]["firstName"] == "Ivan"


@pytest.mark.asyncio
async def test_invalid_user_payload(client, headers):
    resp = await client.post("/users", json={"email": "not-an-email", "firstName": "A", "lastName": "B"},
                             headers=headers["admin"])
    assert resp.status_code == 422
    assert "email" in resp.json()["error"]


@pytest.mark.asyncio
async def test_admin_updates_user(client, headers, staff):
    agent = staff["agent"]
    payload = {"email": "Alex.Agent@vosmotors.com", "firstName": "Alex", "lastName": "Lead",
               "role": "estimator", "location": "Uptown"}
    resp = await client.put(f"/users/{agent.id}", json=payload, headers=headers["admin"])
    assert resp.status_code == 200
    user = resp.json()["data"]
    assert user["email"] == "alex.agent@vosmotors.com"
    assert user["lastName"] == "Lead"
    assert user["role"] == "estimator"
    assert user["location"] == "Uptown"

    resp = await client.get("/users/me", headers=headers["agent"])
    assert resp.json()["data"]["role"] == "estimator"


@pytest.mark.asyncio
async def test_update_user_rules(client, headers, staff):
    payload = {"email": "inspector@vosmotors.com", "firstName": "Alex", "lastName": "Agent", "role": "agent"}
    resp = await client.put(f"/users/{staff['agent'].id}", json=payload, headers=headers["admin"])
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email is already taken by another user"

    # keeping one's own email is not a conflict
    payload["email"] = "agent@vosmotors.com"
    resp = await client.put(f"/users/{staff['agent'].id}", json=payload, headers=headers["admin"])
    assert resp.status_code == 200

    admin = staff["admin"]
    resp = await client.put(
        f"/users/{admin.id}",
        json={"email": admin.email, "firstName": "Ada", "lastName": "Admin", "role": "agent"},
        headers=headers["admin"],
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cannot change your own role from admin"

    resp = await client.put("/users/missing", json=payload, headers=headers["admin"])
    assert resp.status_code == 404

    resp = await client.put(f"/users/{staff['agent'].id}", json=payload, headers=headers["estimator"])
    assert resp.status_code == 403

    resp = await client.put(f"/users/{staff['agent'].id}", json={"email": "agent@vosmotors.com"},
                            headers=headers["admin"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_admin_deletes_user(client, headers, staff):
    inspector = staff["inspector"]
    resp = await client.delete(f"/users/{inspector.id}", headers=headers["agent"])
    assert resp.status_code == 403

    resp = await client.delete(f"/users/{inspector.id}", headers=headers["admin"])
    assert resp.status_code == 200
    assert resp.json()["message"] == "User deleted"

    resp = await client.get("/users/me", headers=headers["inspector"])
    assert resp.status_code == 401

    resp = await client.delete(f"/users/{inspector.id}", headers=headers["admin"])
    assert resp.status_code == 404

    resp = await client.delete(f"/users/{staff['admin'].id}", headers=headers["admin"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cannot delete your own account"
