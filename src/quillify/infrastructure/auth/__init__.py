"""Authentication infrastructure components.

This module provides password hashing and the session token issuer.
"""

from quillify.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from quillify.infrastructure.auth.session_issuer import (
    InvalidSessionError,
    SessionClaims,
    SessionExpiredError,
    SessionIssuer,
    session_issuer,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "InvalidSessionError",
    "SessionClaims",
    "SessionExpiredError",
    "SessionIssuer",
    "hash_password",
    "needs_rehash",
    "session_issuer",
    "verify_password",
]
