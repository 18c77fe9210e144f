"""Prefixed ID generation.

Public-facing IDs use a ``{prefix}_{random}`` format so their origin is
visible at a glance, e.g. ``chat_a8Kx3nQ9mP2r`` for a chat session.
"""

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits  # a-z A-Z 0-9
_DEFAULT_LENGTH = 12  # ~71 bits of entropy

CHAT_SESSION_PREFIX = "chat"


def generate_id(prefix: str, length: int = _DEFAULT_LENGTH) -> str:
    """Return ``"{prefix}_{random}"`` with *length* alphanumeric characters."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"
