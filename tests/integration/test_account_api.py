"""Integration tests for account management."""

import pytest
import pytest_asyncio

ACCOUNT = "/api/v1/account"


@pytest_asyncio.fixture
async def reader(make_user, login):
    await make_user("reader@example.com", name="Reader")
    return await login("reader@example.com")


@pytest.mark.asyncio
async def test_me(client, reader):
    response = await client.get(f"{ACCOUNT}/me", headers=reader)

    assert response.status_code == 200
    assert response.json()["email"] == "reader@example.com"
    assert response.json()["name"] == "Reader"


@pytest.mark.asyncio
async def test_requires_session(client):
    assert (await client.get(f"{ACCOUNT}/me")).status_code == 401


@pytest.mark.asyncio
async def test_update_name(client, reader):
    response = await client.patch(f"{ACCOUNT}/name", json={"name": "Ada"}, headers=reader)
    assert response.status_code == 200
    assert response.json()["name"] == "Ada"


class TestUpdateEmail:
    @pytest.mark.asyncio
    async def test_changes_email_and_reissues_session(self, client, reader):
        response = await client.patch(
            f"{ACCOUNT}/email",
            json={"new_email": "moved@example.com", "current_password": "Password123"},
            headers=reader,
        )

        assert response.status_code == 200
        assert response.json()["email"] == "moved@example.com"

        token = response.headers["X-Session-Token"]
        session = await client.get(
            "/api/v1/auth/session", headers={"Authorization": f"Bearer {token}"}
        )
        assert session.json()["email"] == "moved@example.com"

        login = await client.post(
            "/api/v1/auth/login", json={"email": "moved@example.com", "password": "Password123"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, reader):
        response = await client.patch(
            f"{ACCOUNT}/email",
            json={"new_email": "moved@example.com", "current_password": "Wrong1234"},
            headers=reader,
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Current password is incorrect"

        me = await client.get(f"{ACCOUNT}/me", headers=reader)
        assert me.json()["email"] == "reader@example.com"
        check = await client.get("/api/v1/auth/check-email", params={"email": "moved@example.com"})
        assert check.json() == {"exists": False}
        login = await client.post(
            "/api/v1/auth/login", json={"email": "reader@example.com", "password": "Password123"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_taken(self, client, reader, make_user):
        await make_user("taken@example.com")
        response = await client.patch(
            f"{ACCOUNT}/email",
            json={"new_email": "taken@example.com", "current_password": "Password123"},
            headers=reader,
        )
        assert response.status_code == 409


class TestUpdatePassword:
    @pytest.mark.asyncio
    async def test_changes_password(self, client, reader):
        response = await client.patch(
            f"{ACCOUNT}/password",
            json={"current_password": "Password123", "new_password": "NewPassword456"},
            headers=reader,
        )
        assert response.status_code == 200

        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "reader@example.com", "password": "NewPassword456"},
        )
        assert login.status_code == 200

        # the session that made the change stays valid
        me = await client.get(f"{ACCOUNT}/me", headers=reader)
        assert me.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, client, reader):
        response = await client.patch(
            f"{ACCOUNT}/password",
            json={"current_password": "Wrong1234", "new_password": "NewPassword456"},
            headers=reader,
        )
        assert response.status_code == 401

        old = await client.post(
            "/api/v1/auth/login", json={"email": "reader@example.com", "password": "Password123"}
        )
        assert old.status_code == 200
        new = await client.post(
            "/api/v1/auth/login", json={"email": "reader@example.com", "password": "NewPassword456"}
        )
        assert new.status_code == 401

    @pytest.mark.asyncio
    async def test_weak_new_password(self, client, reader):
        response = await client.patch(
            f"{ACCOUNT}/password",
            json={"current_password": "Password123", "new_password": "short"},
            headers=reader,
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "new_password"
