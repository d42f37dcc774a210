"""One-time e-mail registration codes."""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timedelta
from typing import Any, Optional

CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_registration_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def code_expiry(ttl_minutes: int, now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) + timedelta(minutes=ttl_minutes)


def is_code_valid(record: Optional[Any], code: str, now: Optional[datetime] = None) -> bool:
    """Codes are compared case-insensitively and must not be expired."""
    if record is None or not code:
        return False
    if (now or datetime.utcnow()) > record.expires_at:
        return False
    return secrets.compare_digest(record.code.upper(), code.strip().upper())
