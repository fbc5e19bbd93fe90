"""
Password hashing service using PBKDF2-HMAC-SHA256.
"""

import base64
import hmac
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from config import settings


HASH_SCHEME = "pbkdf2_sha256"
SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode())


def hash_password(password: str) -> str:
    """
    Hash a password for storage.

    Args:
        password: Plain text password

    Returns:
        Encoded string ``scheme$iterations$salt$digest`` (salt/digest base64)
    """
    iterations = int(settings.PASSWORD_HASH_ITERATIONS)
    salt = os.urandom(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return "$".join(
        [
            HASH_SCHEME,
            str(iterations),
            base64.b64encode(salt).decode(),
            base64.b64encode(digest).decode(),
        ]
    )


def verify_password(password: str, encoded: str) -> bool:
    """
    Check a password against a stored hash in constant time.

    Args:
        password: Plain text password supplied by the caller
        encoded: Value produced by ``hash_password``

    Returns:
        True when the password matches
    """
    try:
        scheme, iterations, salt_b64, digest_b64 = (encoded or "").split("$")
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False

    try:
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        rounds = int(iterations)
    except ValueError:
        return False
    candidate = _derive(password or "", salt, rounds)
    return hmac.compare_digest(candidate, expected)
