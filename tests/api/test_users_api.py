"""Users API: HTTP status codes, envelopes, and list parameters for /api/users."""

import uuid

from sqlalchemy.exc import OperationalError

from tasklink.services.user_operations import UserOperations


async def _create_user(client, name="Ann", email=None, **extra):
    body = {"name": name, "email": email or f"{name.lower()}@x.com", **extra}
    resp = await client.post("/api/users", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_create_user_returns_201_with_document(client):
    resp = await client.post(
        "/api/users", json={"name": "Ann", "email": "Ann@X.com"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "User created"
    assert set(body["data"]) == {"_id", "name", "email", "pendingTasks"}
    assert body["data"]["email"] == "ann@x.com"
    assert body["data"]["pendingTasks"] == []


async def test_create_user_missing_fields_is_400(client):
    resp = await client.post("/api/users", json={"name": "Ann"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "name and email are required", "data": None}


async def test_duplicate_email_is_400(client):
    await _create_user(client, email="a@x.com")
    resp = await client.post("/api/users", json={"name": "B", "email": "A@x.com"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "A user with this email already exists"
    count = await client.get("/api/users", params={"count": "true"})
    assert count.json()["data"] == 1


async def test_get_user_not_found_and_malformed(client):
    missing = await client.get(f"/api/users/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json() == {"message": "User not found", "data": None}

    malformed = await client.get("/api/users/xyz")
    assert malformed.status_code == 400
    assert malformed.json()["data"] is None


async def test_list_users_with_filter_sort_and_select(client):
    await _create_user(client, "Bob")
    await _create_user(client, "Ann")
    resp = await client.get(
        "/api/users",
        params={"sort": '{"name": 1}', "select": '{"name": 1, "_id": 0}'},
    )
    assert resp.status_code == 200
    assert resp.json() == {"message": "OK", "data": [{"name": "Ann"}, {"name": "Bob"}]}

    filtered = await client.get("/api/users", params={"where": '{"name": "Bob"}'})
    assert [u["name"] for u in filtered.json()["data"]] == ["Bob"]


async def test_list_users_invalid_json_is_400(client):
    resp = await client.get("/api/users", params={"where": "{not json"})
    assert resp.status_code == 400
    assert resp.json()["message"] == (
        "Bad Request: one of where/sort/select contains invalid JSON"
    )


async def test_list_users_ignores_non_numeric_limit(client):
    await _create_user(client, "Ann")
    await _create_user(client, "Bob")
    resp = await client.get("/api/users", params={"limit": "lots"})
    assert len(resp.json()["data"]) == 2


async def test_get_user_with_select(client):
    user = await _create_user(client)
    resp = await client.get(
        f"/api/users/{user['_id']}", params={"select": '{"email": 0}'},
    )
    assert resp.json()["data"] == {
        "_id": user["_id"], "name": "Ann", "pendingTasks": [],
    }


async def test_replace_user_renames_owned_tasks(client):
    user = await _create_user(client)
    task = (await client.post("/api/tasks", json={
        "name": "T1", "deadline": "2025-01-01T00:00:00Z", "assignedUser": user["_id"],
    })).json()["data"]

    resp = await client.put(
        f"/api/users/{user['_id']}", json={"name": "Annie", "email": "ann@x.com"},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "User updated"
    assert resp.json()["data"]["pendingTasks"] == [task["_id"]]

    fetched = await client.get(f"/api/tasks/{task['_id']}")
    assert fetched.json()["data"]["assignedUserName"] == "Annie"


async def test_delete_user_returns_204_and_unassigns(client):
    user = await _create_user(client)
    task = (await client.post("/api/tasks", json={
        "name": "T1", "deadline": "2025-01-01", "assignedUser": user["_id"],
    })).json()["data"]

    resp = await client.delete(f"/api/users/{user['_id']}")
    assert resp.status_code == 204
    assert resp.content == b""

    fetched = (await client.get(f"/api/tasks/{task['_id']}")).json()["data"]
    assert fetched["assignedUser"] == ""
    assert fetched["assignedUserName"] == "unassigned"

    again = await client.delete(f"/api/users/{user['_id']}")
    assert again.status_code == 404


async def test_list_users_object_filter_value_is_400(client):
    resp = await client.get("/api/users", params={"where": '{"name": {"first": "Ann"}}'})
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Bad Request: unsupported query")
    assert resp.json()["data"] is None


async def test_list_users_where_id_is_case_insensitive(client):
    user = await _create_user(client)
    resp = await client.get("/api/users", params={
        "where": '{"_id": "%s"}' % user["_id"].upper(), "count": "true",
    })
    assert resp.json() == {"message": "OK", "data": 1}


async def test_database_failure_is_503(client, monkeypatch):
    async def unavailable(self, spec):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(UserOperations, "list", unavailable)
    resp = await client.get("/api/users")
    assert resp.status_code == 503
    assert resp.json()["data"] is None
    assert resp.json()["message"].startswith("Database execute failed")
