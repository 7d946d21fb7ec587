import os
import hmac
import hashlib
from dataclasses import dataclass

import bcrypt


SECRET_BYTES = 32


def new_credential(n: int = SECRET_BYTES) -> str:
    """Generate a cryptographically secure random secret, hex encoded."""
    return os.urandom(n).hex()


@dataclass(frozen=True, repr=False)
class Secrets:
    """
    Per-process secrets.

    - api_key: shared secret clients present on the x-api-key header
    - signing_secret: HMAC key for session tokens

    Both are generated once at startup, never persisted and never rotated.
    repr is disabled so the values cannot leak into logs or tracebacks.
    """
    api_key: str
    signing_secret: str

    @classmethod
    def generate(cls) -> "Secrets":
        return cls(api_key=new_credential(), signing_secret=new_credential())

    def __repr__(self) -> str:
        return "Secrets(api_key=***, signing_secret=***)"


def _prepare_password_for_bcrypt(password: str) -> bytes:
    """
    Prepare a password for bcrypt hashing.
    Bcrypt has a 72 byte limit, so we hash longer inputs with SHA256 first.
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        return hashlib.sha256(password_bytes).hexdigest().encode('utf-8')
    return password_bytes


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash
        rounds: bcrypt cost factor

    Returns:
        The bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(_prepare_password_for_bcrypt(password), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The bcrypt hash to compare against

    Returns:
        True if the password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(
            _prepare_password_for_bcrypt(plain_password),
            hashed_password.encode('utf-8'),
        )
    except (ValueError, TypeError):
        return False


def constant_time_compare(a: str, b: str) -> bool:
    """
    Perform a constant-time string comparison to prevent timing attacks.

    Args:
        a: First string to compare
        b: Second string to compare

    Returns:
        True if strings are equal, False otherwise
    """
    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))
