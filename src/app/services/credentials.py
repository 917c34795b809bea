"""
Credential hashing.

Passwords are hashed with bcrypt at write time only; raw passwords are
never persisted or logged. bcrypt reads at most 72 bytes, so every
password is first reduced to a fixed-length SHA-256 digest.
"""

import base64
import hashlib

import bcrypt

from config import ApplicationConfig


def _prehash(raw_password: str) -> bytes:
    """44-byte base64 SHA-256 digest of the password, always within bcrypt's limit."""
    return base64.b64encode(hashlib.sha256(raw_password.encode("utf-8")).digest())


def hash_password(raw_password: str, rounds: int = None) -> str:
    rounds = rounds or ApplicationConfig.BCRYPT_ROUNDS
    return bcrypt.hashpw(_prehash(raw_password), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(raw_password: str, password_hash: str) -> bool:
    if not raw_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_prehash(raw_password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# Same cost as stored hashes so the unknown-email path takes as long as a real check
_DUMMY_HASH = hash_password("dummy_password")


def burn_password_check(raw_password: str) -> None:
    """Constant-time filler for lookups that found no user."""
    bcrypt.checkpw(_prehash(raw_password or ""), _DUMMY_HASH.encode("utf-8"))
