"""Unit tests for CredentialService."""

from datetime import datetime, timezone

import bcrypt
import pytest

from quillify.domain.exceptions import (
    BadRequestError,
    ConflictError,
    NoPasswordError,
    NotFoundError,
    PasswordPolicyError,
    UnauthorizedError,
)
from quillify.domain.services import CredentialService
from quillify.infrastructure.auth.password_hasher import verify_password
from quillify.infrastructure.persistence.repositories import UserRepository


@pytest.fixture
def credentials(db_session):
    return CredentialService(db_session, UserRepository(db_session))


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_unverified_user(self, credentials):
        user = await credentials.register("  Reader@Example.COM ", "Password123", "Ada")

        assert user.id
        assert user.email == "reader@example.com"
        assert user.name == "Ada"
        assert user.email_verified_at is None
        assert user.password_hash != "Password123"
        assert verify_password("Password123", user.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, credentials):
        await credentials.register("reader@example.com", "Password123")
        with pytest.raises(ConflictError):
            await credentials.register("READER@example.com", "Password456")

    @pytest.mark.asyncio
    async def test_weak_password_rejected(self, credentials):
        with pytest.raises(PasswordPolicyError):
            await credentials.register("reader@example.com", "weak")
        assert await credentials.check_email("reader@example.com") is False


class TestVerifyCredentials:
    @pytest.mark.asyncio
    async def test_correct_password(self, credentials, make_user):
        user = await make_user("reader@example.com")
        found = await credentials.verify_credentials("Reader@example.com", "Password123")
        assert found.id == user.id

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, credentials, make_user):
        await make_user("reader@example.com")

        with pytest.raises(UnauthorizedError) as unknown:
            await credentials.verify_credentials("nobody@example.com", "Password123")
        with pytest.raises(UnauthorizedError) as wrong:
            await credentials.verify_credentials("reader@example.com", "Password999")

        assert unknown.value.message == wrong.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_account_without_password(self, credentials, make_user):
        await make_user("oauth@example.com", password=None)
        with pytest.raises(NoPasswordError):
            await credentials.verify_credentials("oauth@example.com", "Password123")

    @pytest.mark.asyncio
    async def test_legacy_hash_is_upgraded(self, credentials, make_user, db_session):
        user = await make_user("legacy@example.com", password=None)
        legacy = "$2y$" + bcrypt.hashpw(b"Password123", bcrypt.gensalt(rounds=4)).decode()[4:]
        await UserRepository(db_session).set_password_hash(user.id, legacy)
        await db_session.commit()

        await credentials.verify_credentials("legacy@example.com", "Password123")

        await db_session.refresh(user)
        assert user.password_hash.startswith("$2b$")
        assert verify_password("Password123", user.password_hash)


@pytest.mark.asyncio
async def test_check_email(credentials, make_user):
    await make_user("reader@example.com")
    assert await credentials.check_email(" READER@example.com") is True
    assert await credentials.check_email("other@example.com") is False


@pytest.mark.asyncio
async def test_get_user_missing(credentials):
    with pytest.raises(NotFoundError):
        await credentials.get_user("missing")


class TestUpdateEmail:
    @pytest.mark.asyncio
    async def test_changes_email_and_keeps_verification(self, credentials, make_user):
        user = await make_user("old@example.com", verified_at=datetime.now(timezone.utc))

        updated = await credentials.update_email(user.id, "New@Example.com", "Password123")

        assert updated.email == "new@example.com"
        assert updated.email_verified_at is not None
        assert await credentials.check_email("old@example.com") is False

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, credentials, make_user):
        user = await make_user("old@example.com")
        with pytest.raises(UnauthorizedError, match="Current password is incorrect"):
            await credentials.update_email(user.id, "new@example.com", "Password999")

        assert await credentials.check_email("old@example.com") is True
        assert await credentials.check_email("new@example.com") is False
        await credentials.verify_credentials("old@example.com", "Password123")

    @pytest.mark.asyncio
    async def test_taken_email(self, credentials, make_user):
        user = await make_user("old@example.com")
        await make_user("taken@example.com")
        with pytest.raises(ConflictError):
            await credentials.update_email(user.id, "taken@example.com", "Password123")

    @pytest.mark.asyncio
    async def test_same_email_is_a_no_op(self, credentials, make_user):
        user = await make_user("same@example.com")
        updated = await credentials.update_email(user.id, "SAME@example.com", "Password123")
        assert updated.email == "same@example.com"

    @pytest.mark.asyncio
    async def test_account_without_password(self, credentials, make_user):
        user = await make_user("oauth@example.com", password=None)
        with pytest.raises(NoPasswordError):
            await credentials.update_email(user.id, "new@example.com", "anything")


class TestUpdatePassword:
    @pytest.mark.asyncio
    async def test_changes_password(self, credentials, make_user):
        user = await make_user("reader@example.com")

        await credentials.update_password(user.id, "Password123", "NewPassword456")

        await credentials.verify_credentials("reader@example.com", "NewPassword456")
        with pytest.raises(UnauthorizedError):
            await credentials.verify_credentials("reader@example.com", "Password123")

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, credentials, make_user):
        user = await make_user("reader@example.com")
        with pytest.raises(UnauthorizedError):
            await credentials.update_password(user.id, "Password999", "NewPassword456")

        await credentials.verify_credentials("reader@example.com", "Password123")
        with pytest.raises(UnauthorizedError):
            await credentials.verify_credentials("reader@example.com", "NewPassword456")

    @pytest.mark.asyncio
    async def test_weak_new_password(self, credentials, make_user):
        user = await make_user("reader@example.com")
        with pytest.raises(PasswordPolicyError) as exc_info:
            await credentials.update_password(user.id, "Password123", "weak")
        assert exc_info.value.details[0]["field"] == "new_password"


class TestUpdateName:
    @pytest.mark.asyncio
    async def test_changes_name(self, credentials, make_user):
        user = await make_user("reader@example.com", name="Old")
        updated = await credentials.update_name(user.id, "  New Name ")
        assert updated.name == "New Name"

    @pytest.mark.asyncio
    async def test_blank_name(self, credentials, make_user):
        user = await make_user("reader@example.com")
        with pytest.raises(BadRequestError):
            await credentials.update_name(user.id, "   ")
