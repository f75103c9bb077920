"""Request helpers: client IP, email normalization, session tokens."""

from __future__ import annotations

import re
import secrets
from typing import Mapping, Optional

SESSION_TOKEN_PATTERN = re.compile(r"^[a-f0-9]{64}$", re.IGNORECASE)


def get_client_ip(headers: Mapping[str, str]) -> str:
    """First ``x-forwarded-for`` entry, then ``x-real-ip``, else ``unknown``."""
    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    return "unknown"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_session_token(token: Optional[str]) -> bool:
    return bool(token) and SESSION_TOKEN_PATTERN.match(token) is not None


def new_session_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(32)
