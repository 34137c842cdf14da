"""Scheduled maintenance endpoints.

Called by an external scheduler with ``Authorization: Bearer <cron_secret>``.
"""

import secrets
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Header
from pydantic import BaseModel

from quillify.core.config import get_settings
from quillify.core.logging import get_logger
from quillify.domain.exceptions import InternalError, UnauthorizedError
from quillify.domain.services import cleanup_expired_tokens
from quillify.infrastructure.api.dependencies import EmailVerifications, PasswordResets
from quillify.infrastructure.api.schemas import ErrorResponse

logger = get_logger(__name__)

router = APIRouter()


class CleanupResponse(BaseModel):
    success: bool = True
    deleted_count: int
    password_reset: int
    email_verification: int
    timestamp: datetime


def require_cron_secret(authorization: str | None) -> None:
    """Check the scheduler's bearer secret.

    Raises:
        InternalError: If no cron secret is configured.
        UnauthorizedError: If the header does not carry the secret.
    """
    cron_secret = get_settings().cron_secret
    if not cron_secret:
        logger.error("Cron secret is not configured")
        raise InternalError("Server configuration error")

    expected = f"Bearer {cron_secret}"
    if authorization is None or not secrets.compare_digest(
        authorization.encode(), expected.encode()
    ):
        logger.warning("Cron request rejected: bad secret")
        raise UnauthorizedError("Unauthorized")


@router.get(
    "/cleanup-tokens",
    response_model=CleanupResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Wrong or missing secret"},
        500: {"model": ErrorResponse, "description": "No secret configured or cleanup failed"},
    },
)
async def cleanup_tokens(
    resets: PasswordResets,
    verifications: EmailVerifications,
    authorization: Annotated[str | None, Header()] = None,
) -> CleanupResponse:
    """Delete expired password reset and email verification tokens."""
    require_cron_secret(authorization)
    result = await cleanup_expired_tokens(resets, verifications)
    return CleanupResponse(
        deleted_count=result.deleted_count,
        password_reset=result.password_reset,
        email_verification=result.email_verification,
        timestamp=result.timestamp,
    )
