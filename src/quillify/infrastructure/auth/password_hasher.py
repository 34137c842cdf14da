"""Password hashing utility using bcrypt.

Hashes carry their own salt and cost factor. Hashes written by other bcrypt
implementations with the ``$2y$`` prefix are accepted on verification.
"""

import bcrypt

from quillify.core.config import get_settings

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

_LEGACY_PREFIX = "$2y$"
_CURRENT_PREFIX = "$2b$"

# Pre-computed bcrypt hash for timing-consistent verification of unknown accounts
DUMMY_PASSWORD_HASH = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.VTtYA9dWQ6E3Ky"


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def _normalize(hashed: str) -> str:
    if hashed.startswith(_LEGACY_PREFIX):
        return _CURRENT_PREFIX + hashed[len(_LEGACY_PREFIX):]
    return hashed


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Args:
        password: The plaintext password to hash.
        rounds: Cost factor. Defaults to the configured ``bcrypt_rounds``.

    Returns:
        The hashed password string.

    Example:
        >>> hashed = hash_password("SecureP@ss123", rounds=4)
        >>> hashed.startswith("$2b$04$")
        True
    """
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    """Verify a password against a hash.

    The stored hash is never modified; a ``$2y$`` prefix is only rewritten
    in memory for the comparison.

    Args:
        password: The plaintext password to verify.
        hashed: The stored hash.

    Returns:
        True if the password matches. False on mismatch or when the stored
        hash is empty or malformed.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(password), _normalize(hashed).encode("utf-8"))
    except ValueError:
        return False


def needs_rehash(hashed: str) -> bool:
    """Check if a password hash needs to be rehashed.

    Args:
        hashed: The stored hash.

    Returns:
        True if the hash uses the legacy prefix or a lower cost factor than configured.
    """
    if hashed.startswith(_LEGACY_PREFIX):
        return True
    try:
        cost = int(hashed.split("$")[2])
    except (IndexError, ValueError):
        return True
    return cost < get_settings().bcrypt_rounds
