"""Unit tests for expired token cleanup."""

from unittest.mock import AsyncMock

import pytest

from quillify.domain.exceptions import InternalError
from quillify.domain.services import cleanup_expired_tokens


@pytest.mark.asyncio
async def test_counts_both_kinds():
    resets = AsyncMock()
    resets.cleanup_expired.return_value = 2
    verifications = AsyncMock()
    verifications.cleanup_expired.return_value = 5

    result = await cleanup_expired_tokens(resets, verifications)

    assert result.password_reset == 2
    assert result.email_verification == 5
    assert result.deleted_count == 7
    assert result.timestamp.tzinfo is not None


@pytest.mark.asyncio
async def test_store_failure_propagates():
    resets = AsyncMock()
    resets.cleanup_expired.side_effect = InternalError("Failed to clean up expired tokens")

    with pytest.raises(InternalError):
        await cleanup_expired_tokens(resets, AsyncMock())
