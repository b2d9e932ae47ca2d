"""
Authentication helpers: password hashing, JWT access tokens and input normalization.
"""

import logging
import os
import re
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt

from tennis_backend.utils.constants import MIN_PASSWORD_LENGTH
from tennis_backend.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRATION_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRATION_MINUTES", "60"))

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to embed (must include "user_id")
        expires_delta: Optional lifetime, defaults to ACCESS_TOKEN_EXPIRATION_MINUTES

    Returns:
        Encoded JWT string
    """
    now = utcnow()
    payload = dict(data)
    payload["iat"] = now
    payload["exp"] = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRATION_MINUTES))
    payload["type"] = "access"
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate an access token.

    Returns:
        Token payload, or None if the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None

    if payload.get("type") != "access":
        return None
    return payload


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address."""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email.strip()) is not None


def validate_password(password: str) -> Optional[str]:
    """
    Check the password policy.

    Returns:
        An error message, or None if the password is acceptable
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if not any(ch.isdigit() for ch in password):
        return "Password must contain at least one number"
    return None
