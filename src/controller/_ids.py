from __future__ import annotations

import secrets
from uuid import uuid4


def trace_id() -> str:
    """32 lowercase hex chars (16 random bytes)."""
    return secrets.token_hex(16)


def span_id() -> str:
    """16 lowercase hex chars (8 random bytes)."""
    return secrets.token_hex(8)


def event_id() -> str:
    # uuid4() draws from os.urandom
    return str(uuid4())
