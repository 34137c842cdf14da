"""Removal of expired single-use tokens.

Shared by the scheduled cleanup endpoint and the ``cleanup-tokens`` CLI command.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from quillify.core.logging import get_logger
from quillify.domain.services.email_verification_service import EmailVerificationService
from quillify.domain.services.password_reset_service import PasswordResetService

logger = get_logger(__name__)


@dataclass(frozen=True)
class CleanupResult:
    password_reset: int
    email_verification: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def deleted_count(self) -> int:
        return self.password_reset + self.email_verification


async def cleanup_expired_tokens(
    resets: PasswordResetService, verifications: EmailVerificationService
) -> CleanupResult:
    """Delete expired reset and verification tokens.

    Raises:
        InternalError: If the store fails.
    """
    result = CleanupResult(
        password_reset=await resets.cleanup_expired(),
        email_verification=await verifications.cleanup_expired(),
    )
    logger.info(
        "Expired token cleanup completed",
        deleted_count=result.deleted_count,
        password_reset=result.password_reset,
        email_verification=result.email_verification,
    )
    return result
