"""JWT token utilities."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import get_settings
from ..core.redis_client import get_redis_client

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenError(Exception):
    """Refresh token could not be decoded."""


class ExpiredTokenError(TokenError):
    """Signature is valid but the token is past its exp."""


def _encode(subject: str, token_type: str, secret: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "sub": subject,
        "type": token_type,
        # unique id, also makes two tokens issued in the same second differ
        "jti": str(uuid.uuid4()),
        "exp": expire,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.algorithm)


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token with JTI for Redis blacklisting."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(str(user_id), ACCESS_TOKEN_TYPE, settings.jwt_access_secret, expires_delta)


def create_refresh_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT refresh token signed with the refresh secret."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _encode(str(user_id), REFRESH_TOKEN_TYPE, settings.jwt_refresh_secret, expires_delta)


def access_token_lifetime_seconds() -> int:
    return get_settings().access_token_expire_minutes * 60


async def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate access token, checking Redis blacklist."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_access_secret, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None

    jti = payload.get("jti")
    redis_client = get_redis_client()
    # no Redis means no blacklist; tokens stay valid until exp
    if jti and redis_client.is_connected:
        if await redis_client.is_token_blacklisted(jti):
            return None

    return payload


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """Decode a refresh token.

    Raises ExpiredTokenError or TokenError. The type claim is returned
    unchecked so callers can report a wrong type separately.
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_refresh_secret, algorithms=[settings.algorithm])
    except ExpiredSignatureError as e:
        raise ExpiredTokenError(str(e)) from e
    except JWTError as e:
        raise TokenError(str(e)) from e


def parse_subject(payload: Dict[str, Any]) -> Optional[UUID]:
    """Return the sub claim as a UUID, or None when absent or malformed."""
    user_id = payload.get("sub")
    if not user_id:
        return None
    try:
        return UUID(user_id)
    except (ValueError, TypeError):
        return None


async def get_user_id_from_token(token: str) -> Optional[UUID]:
    """Extract user ID from an access token."""
    payload = await decode_access_token(token)
    if not payload:
        return None
    return parse_subject(payload)


async def blacklist_token(token: str) -> bool:
    """Add an access token to the Redis blacklist for the rest of its lifetime."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_access_secret, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"Not blacklisting undecodable token: {e}")
        return False

    jti = payload.get("jti")
    exp = payload.get("exp")
    if not jti or not exp:
        return False

    expire_time = datetime.fromtimestamp(exp, tz=timezone.utc)
    remaining_seconds = int((expire_time - datetime.now(timezone.utc)).total_seconds())
    if remaining_seconds <= 0:
        return False

    return await get_redis_client().add_to_blacklist(jti, remaining_seconds)
