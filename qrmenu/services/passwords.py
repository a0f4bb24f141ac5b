"""Salted one-way password hashes.

bcrypt through passlib when the backend is importable, PBKDF2-SHA256 otherwise
(and for secrets longer than bcrypt's 72-byte input limit). Both formats verify.
"""
from __future__ import annotations

import hashlib
import hmac
import os
from typing import Optional

from passlib.context import CryptContext

PBKDF2_PREFIX = "pbkdf2$"
PBKDF2_ITERATIONS = 120_000
PBKDF2_SALT_BYTES = 16
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
BCRYPT_MAX_BYTES = 72

_bcrypt: Optional[CryptContext]

try:
    _bcrypt = CryptContext(schemes=["bcrypt"], deprecated="auto")
except Exception:
    _bcrypt = None


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _pbkdf2_hash(password: str) -> str:
    salt = os.urandom(PBKDF2_SALT_BYTES)
    digest = _derive(password, salt, PBKDF2_ITERATIONS)
    return f"{PBKDF2_PREFIX}{PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"


def _fits_bcrypt(password: str) -> bool:
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def looks_hashed(value: str | None) -> bool:
    return bool(value) and value.startswith((PBKDF2_PREFIX, *BCRYPT_PREFIXES))


def hash_password(password: str) -> str:
    if _bcrypt is not None and _fits_bcrypt(password):
        try:
            return _bcrypt.hash(password)
        except (ValueError, TypeError):
            pass
    return _pbkdf2_hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False

    if password_hash.startswith(PBKDF2_PREFIX):
        try:
            _, iterations, salt_hex, digest_hex = password_hash.split("$", 3)
            expected = bytes.fromhex(digest_hex)
            computed = _derive(password, bytes.fromhex(salt_hex), int(iterations))
        except ValueError:
            return False
        return hmac.compare_digest(computed, expected)

    if _bcrypt is None or not password_hash.startswith(BCRYPT_PREFIXES):
        return False
    try:
        return _bcrypt.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def upgraded_hash(password: str, password_hash: str) -> Optional[str]:
    """A bcrypt replacement for a verified PBKDF2 hash, or None when no upgrade applies."""
    if _bcrypt is None or not password_hash.startswith(PBKDF2_PREFIX) or not _fits_bcrypt(password):
        return None
    new_hash = hash_password(password)
    return new_hash if new_hash.startswith(BCRYPT_PREFIXES) else None
