"""Unit tests for single-use token entities."""

import hashlib
from datetime import datetime, timedelta, timezone

from quillify.domain.entities import EmailVerificationToken, PasswordResetToken, hash_token


def test_generate_stores_only_the_hash():
    entity, raw = PasswordResetToken.generate("user-1", timedelta(minutes=30))

    assert len(raw) == 64
    int(raw, 16)  # hex
    assert entity.token_hash == hashlib.sha256(raw.encode()).hexdigest()
    assert entity.token_hash != raw
    assert entity.user_id == "user-1"


def test_generate_sets_expiry_from_ttl():
    entity, _ = EmailVerificationToken.generate("user-1", timedelta(hours=24))
    assert entity.expires_at - entity.created_at == timedelta(hours=24)
    assert entity.expires_at.tzinfo is not None


def test_generated_tokens_are_unique():
    raws = {PasswordResetToken.generate("user-1", timedelta(minutes=1))[1] for _ in range(20)}
    assert len(raws) == 20


def test_hash_token_is_deterministic():
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")


def test_is_expired_boundary():
    expires_at = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    token = PasswordResetToken(user_id="u", token_hash="h", expires_at=expires_at)

    assert token.is_expired(expires_at - timedelta(seconds=1)) is False
    assert token.is_expired(expires_at) is False
    assert token.is_expired(expires_at + timedelta(seconds=1)) is True


def test_is_expired_defaults_to_now():
    past = PasswordResetToken(
        user_id="u", token_hash="h", expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)
    )
    assert past.is_expired()
