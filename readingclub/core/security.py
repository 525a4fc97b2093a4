"""
JWT token creation / verification and PIN hashing (bcrypt).
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from readingclub.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY
_DIGITS_RE = re.compile(r"^\d+$")


# ── PINs ────────────────────────────────────────────────────────────
def verify_pin(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def hash_pin(plain: str) -> str:
    return pwd_context.hash(plain)


def is_valid_pin(pin: str, role: str = "user") -> bool:
    """Check a PIN against the format rule for *role*.

    End users get exactly ``USER_PIN_LENGTH`` digits; admins get a longer
    range bounded by ``ADMIN_PIN_MIN_LENGTH`` / ``ADMIN_PIN_MAX_LENGTH``.
    """
    if not isinstance(pin, str) or not _DIGITS_RE.match(pin):
        return False
    if role == "admin":
        return settings.ADMIN_PIN_MIN_LENGTH <= len(pin) <= settings.ADMIN_PIN_MAX_LENGTH
    return len(pin) == settings.USER_PIN_LENGTH


def generate_pin(length: int | None = None) -> str:
    length = length or settings.RESET_PIN_LENGTH
    return "".join(secrets.choice("0123456789") for _ in range(length))


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    subject: str | Any,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {
            "exp": expire,
            "sub": str(subject),
            "email": email,
            "role": role,
            "type": "access",
        },
        _SECRET,
        algorithm=_ALGORITHM,
    )


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if *access* token is valid, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
        if payload.get("type") != "access":
            return None
        return payload
    except JWTError:
        return None
