# =============================================================================
# Password Hashing
# =============================================================================
#
# PBKDF2-HMAC-SHA256 over (password, salt):
#   - 16 random salt bytes
#   - 1024 iterations
#   - 32 derived bytes
#
# The async variants push the derivation into a worker thread so a
# login does not stall the event loop.
#
# =============================================================================

from __future__ import annotations

import asyncio
import hashlib
import secrets

SALT_BYTES = 16
ITERATIONS = 1024
KEY_LENGTH = 32
DIGEST = "sha256"


def derive(password: str, salt: bytes | None = None) -> tuple[bytes, bytes]:
    """
    Derive a password hash.

    Returns: (salt, hash). A fresh random salt is generated when none
    is given.
    """
    if salt is None:
        salt = secrets.token_bytes(SALT_BYTES)
    hash_bytes = hashlib.pbkdf2_hmac(
        DIGEST,
        password.encode("utf-8"),
        salt,
        iterations=ITERATIONS,
        dklen=KEY_LENGTH,
    )
    return salt, hash_bytes


def verify(password: str, salt: bytes, expected: bytes) -> bool:
    """Verify a password against its stored salt and hash."""
    _, actual = derive(password, salt)
    return secrets.compare_digest(actual, expected)


async def derive_async(password: str, salt: bytes | None = None) -> tuple[bytes, bytes]:
    return await asyncio.to_thread(derive, password, salt)


async def verify_async(password: str, salt: bytes, expected: bytes) -> bool:
    return await asyncio.to_thread(verify, password, salt, expected)
