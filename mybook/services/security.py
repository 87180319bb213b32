"""
Security Service

Credentials and tokens for MyBook accounts:

- bcrypt password hashes (passlib)
- signed JWTs (python-jose), either "access" or "refresh" as told by
  the "type" claim
- single-use email verification tokens

Access tokens carry the user id in "sub" and the is_admin flag; refresh
tokens only carry "sub" and can only be exchanged at /auth/refresh.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from mybook.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt against the stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def generate_verification_token() -> str:
    """64 hex characters, emailed to the user as part of the verification link."""
    return secrets.token_hex(32)


def _issue_token(claims: dict, token_type: str, lifetime: timedelta) -> str:
    payload = {
        **claims,
        "type": token_type,
        "exp": datetime.now(UTC) + lifetime,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Sign an access token.

    Args:
        data: Claims to embed, at least {"sub": "<user id>"}
        expires_delta: Lifetime; settings.access_token_expire_minutes when omitted
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _issue_token(data, "access", lifetime)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a refresh token, valid for settings.refresh_token_expire_days by default."""
    lifetime = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _issue_token(data, "refresh", lifetime)


def decode_token(token: str) -> dict | None:
    """Claims of a correctly signed, unexpired token; None otherwise."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        return None


def verify_token_type(token: str, expected_type: str) -> dict | None:
    """
    Decode a token and require its "type" claim to be expected_type.

    Stops a refresh token from being used as an access token and the
    other way round.
    """
    payload = decode_token(token)
    if payload is None or payload.get("type") != expected_type:
        return None
    return payload
