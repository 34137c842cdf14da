"""Integration tests for the scheduled token cleanup endpoint."""

import importlib
from datetime import timedelta

import pytest

from quillify.domain.entities import EmailVerificationToken, PasswordResetToken
from quillify.infrastructure.persistence.repositories import (
    EmailVerificationRepository,
    PasswordResetRepository,
)

cron_module = importlib.import_module("quillify.infrastructure.api.routes.cron_router")

URL = "/api/v1/cron/cleanup-tokens"
AUTH = {"Authorization": "Bearer test-cron-secret"}


@pytest.mark.asyncio
async def test_deletes_only_expired_tokens(client, make_user, db_session):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    resets = PasswordResetRepository(db_session)
    verifications = EmailVerificationRepository(db_session)

    await resets.create(PasswordResetToken.generate(alice.id, timedelta(minutes=-5))[0])
    live, live_raw = PasswordResetToken.generate(bob.id, timedelta(minutes=30))
    await resets.create(live)
    await verifications.create(EmailVerificationToken.generate(alice.id, timedelta(hours=-1))[0])
    await verifications.create(EmailVerificationToken.generate(bob.id, timedelta(hours=-2))[0])
    await db_session.commit()

    response = await client.get(URL, headers=AUTH)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["deleted_count"] == 3
    assert data["password_reset"] == 1
    assert data["email_verification"] == 2
    assert data["timestamp"]
    assert await resets.get_by_token(live_raw) is not None


@pytest.mark.asyncio
async def test_nothing_to_delete(client):
    response = await client.get(URL, headers=AUTH)
    assert response.status_code == 200
    assert response.json()["deleted_count"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer wrong"}, {"Authorization": "test-cron-secret"}],
)
async def test_rejects_wrong_secret(client, headers):
    response = await client.get(URL, headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized", "message": "Unauthorized"}


@pytest.mark.asyncio
async def test_missing_configuration(client, settings, monkeypatch):
    unconfigured = settings.model_copy(update={"cron_secret": None})
    monkeypatch.setattr(cron_module, "get_settings", lambda: unconfigured)

    response = await client.get(URL, headers=AUTH)

    assert response.status_code == 500
    assert response.json()["message"] == "Server configuration error"
