"""
Shared utility functions.
"""

from __future__ import annotations

import base64
import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """Generate a globally unique opaque id (uuid4, 36 chars)."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(data: str) -> bytes:
    return base64.b64decode(data.encode("ascii"))
