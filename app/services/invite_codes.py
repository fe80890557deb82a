"""
Invite code generation.

Codes are short enough to read aloud and type on a phone: six characters
from an alphabet without the look-alikes 0/O and 1/I.
"""

from __future__ import annotations

import secrets

INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6


def generate_invite_code() -> str:
    """Return a random invite code. Uniqueness is the caller's job."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def normalize_invite_code(code: str) -> str:
    """Canonical form used for lookups; codes are stored uppercase."""
    return code.strip().upper()
