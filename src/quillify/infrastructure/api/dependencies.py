"""FastAPI dependencies for authentication and service wiring.

Provides dependencies for extracting and validating session tokens from
requests and for building services on the request's database session.
"""

from typing import Annotated

from fastapi import Depends, Header, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quillify.core.logging import get_logger
from quillify.domain.services import (
    BookService,
    CredentialService,
    EmailVerificationService,
    PasswordResetService,
)
from quillify.infrastructure.auth import (
    InvalidSessionError,
    SessionClaims,
    SessionIssuer,
    session_issuer,
)
from quillify.infrastructure.persistence.database import get_db_session
from quillify.infrastructure.persistence.repositories import (
    BookRepository,
    EmailVerificationRepository,
    PasswordResetRepository,
    UserRepository,
)
from quillify.infrastructure.services.email_service import EmailService, get_email_service

logger = get_logger(__name__)

SESSION_TOKEN_HEADER = "X-Session-Token"


def get_session_issuer() -> SessionIssuer:
    return session_issuer


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Mailer = Annotated[EmailService, Depends(get_email_service)]
Issuer = Annotated[SessionIssuer, Depends(get_session_issuer)]


async def get_current_session(
    response: Response,
    session: DbSession,
    issuer: Issuer,
    authorization: Annotated[str | None, Header()] = None,
) -> SessionClaims:
    """Extract and validate the session from the Authorization header.

    When the session was signed before the user verified their email, the
    flag is refreshed from the store and the re-signed token (same expiry)
    is returned in the ``X-Session-Token`` response header.

    Raises:
        InvalidSessionError: If the header is missing or malformed, or the token is invalid.
        SessionExpiredError: If the token has expired.
    """
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise InvalidSessionError()

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise InvalidSessionError()

    claims = issuer.decode(parts[1])

    claims, changed = await issuer.refresh_verification(claims, UserRepository(session))
    if changed:
        response.headers[SESSION_TOKEN_HEADER] = issuer.encode(claims)

    return claims


CurrentSession = Annotated[SessionClaims, Depends(get_current_session)]


def get_credential_service(session: DbSession) -> CredentialService:
    return CredentialService(session, UserRepository(session))


def get_password_reset_service(session: DbSession, email_service: Mailer) -> PasswordResetService:
    return PasswordResetService(
        session, UserRepository(session), PasswordResetRepository(session), email_service
    )


def get_email_verification_service(
    session: DbSession, email_service: Mailer
) -> EmailVerificationService:
    return EmailVerificationService(
        session, UserRepository(session), EmailVerificationRepository(session), email_service
    )


def get_book_service(session: DbSession) -> BookService:
    return BookService(session, BookRepository(session))


Credentials = Annotated[CredentialService, Depends(get_credential_service)]
PasswordResets = Annotated[PasswordResetService, Depends(get_password_reset_service)]
EmailVerifications = Annotated[
    EmailVerificationService, Depends(get_email_verification_service)
]
Books = Annotated[BookService, Depends(get_book_service)]
