"""Salted password hashing.

Credentials are never stored in clear text. Each user keeps a random salt and
a PBKDF2-SHA256 digest; verification compares digests in constant time.

Usage:
    from libs.auth.passwords import hash_password, verify_password

    digest, salt = hash_password("s3cret")
    assert verify_password("s3cret", salt, digest)
"""

import hashlib
import hmac
import secrets
from typing import Optional

PBKDF2_ITERATIONS = 120_000
SALT_BYTES = 16


def hash_password(password: str, salt: Optional[str] = None) -> tuple[str, str]:
    """Return ``(hex_digest, salt)``; a fresh salt is generated when none is given."""
    if not salt:
        salt = secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    return digest.hex(), salt


def verify_password(password: str, salt: str, expected_hash: str) -> bool:
    if not salt or not expected_hash:
        return False
    digest, _ = hash_password(password, salt)
    return hmac.compare_digest(digest, expected_hash)
