"""
UserHub Backend — Users API Tests
===================================

What:  End-to-end tests of the HTTP contract against a real (SQLite) store.
How:   HTTPX AsyncClient over ASGITransport; each test gets a fresh database.

What we test:
    ✅ Envelope shape on success and failure
    ✅ Create → get → delete → get lifecycle
    ✅ Email uniqueness leaves the first record untouched
    ✅ age follows birth on update
    ✅ Search, sort and default ordering
    ✅ 404 for unknown / malformed ids on get, update and delete
    ✅ 400 for invalid bodies
"""

from datetime import date

import pytest


def _envelope_ok(body, code):
    assert body["success"] is True
    assert body["code"] == code
    assert isinstance(body["message"], str)


def _envelope_error(body, code):
    assert body["success"] is False
    assert body["code"] == code
    assert body["data"] is None


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_create_get_delete_get(self, test_client, expected_age):
        response = await test_client.post(
            "/users",
            json={"name": "Bob", "email": "bob@example.com", "role": "user", "birth": "1990-01-01"},
        )
        assert response.status_code == 201
        body = response.json()
        _envelope_ok(body, 201)
        assert body["message"] == "User created successfully"
        created = body["data"]
        assert created["id"] > 0
        assert created["age"] == expected_age(date(1990, 1, 1))
        assert created["timestamp"]

        response = await test_client.get(f"/users/{created['id']}")
        assert response.status_code == 200
        assert response.json()["data"] == created

        response = await test_client.delete(f"/users/{created['id']}")
        assert response.status_code == 200
        body = response.json()
        _envelope_ok(body, 200)
        assert body["data"] is None

        response = await test_client.get(f"/users/{created['id']}")
        assert response.status_code == 404
        body = response.json()
        _envelope_error(body, 404)
        assert body["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_ids_are_unique_and_store_fields_ignored_from_body(self, test_client):
        response = await test_client.post(
            "/users",
            json={
                "id": 999,
                "name": "Carol",
                "email": "carol@example.com",
                "birth": "1985-06-30",
                "age": 3,
                "timestamp": "2000-01-01T00:00:00Z",
            },
        )
        carol = response.json()["data"]
        assert carol["id"] != 999
        assert carol["age"] != 3
        assert not carol["timestamp"].startswith("2000-01-01")

        dave = (await test_client.post(
            "/users", json={"name": "Dave", "email": "dave@example.com", "birth": "1970-02-02"}
        )).json()["data"]
        assert dave["id"] != carol["id"]

    @pytest.mark.asyncio
    async def test_role_defaults_to_user(self, create_user):
        user = await create_user("Erin", "erin@example.com")
        assert user["role"] == "user"

    @pytest.mark.asyncio
    async def test_deleted_id_is_not_reused(self, test_client, create_user):
        first = await create_user("Gone", "gone@example.com")
        await test_client.delete(f"/users/{first['id']}")
        second = await create_user("New", "new@example.com")
        assert second["id"] > first["id"]


class TestUniqueness:
    @pytest.mark.asyncio
    async def test_duplicate_email_create_fails_and_first_survives(self, test_client, create_user):
        first = await create_user("Alice", "alice@example.com", role="admin")

        response = await test_client.post(
            "/users", json={"name": "Impostor", "email": "alice@example.com", "birth": "2000-01-01"}
        )
        assert response.status_code == 409
        _envelope_error(response.json(), 409)

        stored = (await test_client.get(f"/users/{first['id']}")).json()["data"]
        assert stored == first

        listing = (await test_client.get("/users")).json()["data"]
        assert len(listing) == 1

    @pytest.mark.asyncio
    async def test_update_to_taken_email_conflicts(self, test_client, create_user):
        await create_user("Alice", "alice@example.com")
        bob = await create_user("Bob", "bob@example.com")

        response = await test_client.put(
            f"/users/{bob['id']}",
            json={"name": "Bob", "email": "alice@example.com", "birth": "1990-01-01"},
        )
        assert response.status_code == 409

        stored = (await test_client.get(f"/users/{bob['id']}")).json()["data"]
        assert stored["email"] == "bob@example.com"

    @pytest.mark.asyncio
    async def test_store_error_text_is_not_leaked(self, test_client, create_user):
        await create_user("Alice", "alice@example.com")
        response = await test_client.post(
            "/users", json={"name": "A2", "email": "alice@example.com", "birth": "2000-01-01"}
        )
        assert "UNIQUE constraint" not in response.json()["message"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_birth_recomputes_age(self, test_client, create_user, expected_age):
        user = await create_user("Frank", "frank@example.com", birth="1990-01-01")

        response = await test_client.put(
            f"/users/{user['id']}",
            json={"name": "Frank Jr", "email": "frank@example.com", "role": "moderator", "birth": "2010-01-01"},
        )
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["age"] == expected_age(date(2010, 1, 1))
        assert updated["age"] != user["age"]
        assert updated["name"] == "Frank Jr"
        assert updated["role"] == "moderator"
        # id and timestamp are preserved
        assert updated["id"] == user["id"]
        assert updated["timestamp"] == user["timestamp"]

        reread = (await test_client.get(f"/users/{user['id']}")).json()["data"]
        assert reread == updated

    @pytest.mark.asyncio
    async def test_update_missing_id_does_not_create(self, test_client, create_user):
        await create_user("Gina", "gina@example.com")

        response = await test_client.put(
            "/users/9999", json={"name": "Ghost", "email": "ghost@example.com", "birth": "1990-01-01"}
        )
        assert response.status_code == 404
        _envelope_error(response.json(), 404)

        listing = (await test_client.get("/users")).json()["data"]
        assert [u["email"] for u in listing] == ["gina@example.com"]


class TestNotFound:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["9999", "abc", "1e3", "0"])
    async def test_get_unknown_or_malformed_id(self, test_client, user_id):
        response = await test_client.get(f"/users/{user_id}")
        assert response.status_code == 404
        _envelope_error(response.json(), 404)

    @pytest.mark.asyncio
    async def test_delete_missing_id_leaves_store_unchanged(self, test_client, create_user):
        await create_user("Hank", "hank@example.com")

        response = await test_client.delete("/users/12345")
        assert response.status_code == 404

        listing = (await test_client.get("/users")).json()["data"]
        assert len(listing) == 1


class TestListing:
    @pytest.mark.asyncio
    async def test_empty_list_is_success(self, test_client):
        response = await test_client.get("/users")
        assert response.status_code == 200
        body = response.json()
        _envelope_ok(body, 200)
        assert body["data"] == []
        assert body["message"] == "Users fetched successfully"

    @pytest.mark.asyncio
    async def test_search_matches_name_email_or_role_case_insensitively(self, test_client, create_user):
        by_name = await create_user("ALICE Cooper", "cooper@example.com")
        by_email = await create_user("Someone", "malice.a@example.com")
        await create_user("Bob", "bob@example.com")
        await create_user("Mod", "mod@example.com", role="moderator")

        response = await test_client.get("/users", params={"search": "alice"})
        ids = {u["id"] for u in response.json()["data"]}
        assert ids == {by_name["id"], by_email["id"]}

        response = await test_client.get("/users", params={"search": "MODERATOR"})
        assert [u["name"] for u in response.json()["data"]] == ["Mod"]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, test_client, create_user):
        await create_user("100% Real", "real@example.com")
        await create_user("Plain", "plain@example.com")

        response = await test_client.get("/users", params={"search": "%"})
        assert [u["name"] for u in response.json()["data"]] == ["100% Real"]

    @pytest.mark.asyncio
    async def test_sort_by_age_ascending(self, test_client, create_user):
        await create_user("Old", "old@example.com", birth="1950-03-03")
        await create_user("Young", "young@example.com", birth="2005-07-07")
        await create_user("Mid", "mid@example.com", birth="1980-11-11")

        response = await test_client.get("/users", params={"sort": "age", "order": "asc"})
        ages = [u["age"] for u in response.json()["data"]]
        assert ages == sorted(ages)
        assert [u["name"] for u in response.json()["data"]] == ["Young", "Mid", "Old"]

    @pytest.mark.asyncio
    async def test_sort_by_name_desc(self, test_client, create_user):
        for name in ("Bravo", "Alpha", "Charlie"):
            await create_user(name, f"{name.lower()}@example.com")

        response = await test_client.get("/users", params={"sort": "name", "order": "desc"})
        assert [u["name"] for u in response.json()["data"]] == ["Charlie", "Bravo", "Alpha"]

    @pytest.mark.asyncio
    async def test_unknown_sort_falls_back_to_newest_first(self, test_client, create_user):
        created = [
            await create_user(name, f"{name.lower()}@example.com")
            for name in ("First", "Second", "Third")
        ]

        response = await test_client.get("/users", params={"sort": "password", "order": "asc"})
        assert response.status_code == 200
        listed = [u["id"] for u in response.json()["data"]]
        assert listed == [u["id"] for u in reversed(created)]


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"email": "x@example.com", "birth": "1990-01-01"},
            {"name": "", "email": "x@example.com", "birth": "1990-01-01"},
            {"name": "X", "email": "not-an-email", "birth": "1990-01-01"},
            {"name": "X", "email": "x@example.com", "birth": "1990-01-01", "role": "root"},
            {"name": "X", "email": "x@example.com"},
            {"name": "X", "email": "x@example.com", "birth": "3000-01-01"},
        ],
    )
    async def test_invalid_bodies_are_bad_requests(self, test_client, body):
        response = await test_client.post("/users", json=body)
        assert response.status_code == 400
        _envelope_error(response.json(), 400)

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client):
        response = await test_client.post(
            "/users", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        body = response.json()
        _envelope_error(body, 400)
        assert body["message"] == "Request body is not valid JSON"

    @pytest.mark.asyncio
    async def test_bad_update_body_leaves_record(self, test_client, create_user):
        user = await create_user("Ivy", "ivy@example.com")
        response = await test_client.put(f"/users/{user['id']}", json={"name": "Ivy"})
        assert response.status_code == 400

        stored = (await test_client.get(f"/users/{user['id']}")).json()["data"]
        assert stored == user
