"""
Credential hashing, token issuance and authorization header parsing.
"""
import base64
import hmac
import hashlib
import secrets
import uuid
from typing import Optional

from chat.core.config import get_settings

HASH_ALGORITHM = "pbkdf2_sha256"
BEARER_PREFIX = "bearer "


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def hash_password(password: str, iterations: Optional[int] = None, salt: Optional[bytes] = None) -> str:
    """
    Hash a password with PBKDF2-HMAC-SHA256.

    Args:
        password: The plain-text password
        iterations: Work factor, defaults to the configured value
        salt: Salt bytes, a random 16-byte salt when omitted

    Returns:
        Encoded hash in the form ``pbkdf2_sha256$<iterations>$<salt>$<digest>``
    """
    iterations = iterations or get_settings().password_hash_iterations
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${_b64(salt)}${_b64(digest)}"


def verify_password(password: str, encoded: str) -> bool:
    """
    Verify a password against an encoded hash using constant-time comparison.

    Malformed hashes never verify.
    """
    try:
        algorithm, iterations, salt, digest = encoded.split("$", 3)
        if algorithm != HASH_ALGORITHM:
            return False
        expected = base64.b64decode(digest)
        actual = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), base64.b64decode(salt), int(iterations)
        )
    except (ValueError, TypeError):
        return False
    return hmac.compare_digest(expected, actual)


def new_token() -> str:
    """Issue a bearer token for a fresh session."""
    return str(uuid.uuid4())


def new_session_key() -> str:
    """Issue an opaque session key for the session cookie."""
    return secrets.token_urlsafe(32)


def strip_bearer(header: str) -> str:
    """Remove an optional, case-insensitive ``Bearer`` prefix."""
    if header.lower().startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):]
    return header


def tokens_match(expected: Optional[str], presented: str) -> bool:
    """Constant-time token comparison; a missing expected token never matches."""
    if not expected:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))
