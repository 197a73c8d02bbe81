"""Security utilities."""

from .google import GoogleIdentity, GoogleNotConfiguredError, GoogleTokenError, verify_google_token
from .jwt import (
    ExpiredTokenError,
    TokenError,
    access_token_lifetime_seconds,
    blacklist_token,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_user_id_from_token,
    parse_subject,
)
from .password import hash_password, needs_update, verify_password

__all__ = [
    "hash_password",
    "verify_password",
    "needs_update",
    "create_access_token",
    "create_refresh_token",
    "decode_access_token",
    "decode_refresh_token",
    "get_user_id_from_token",
    "parse_subject",
    "blacklist_token",
    "access_token_lifetime_seconds",
    "TokenError",
    "ExpiredTokenError",
    "GoogleIdentity",
    "GoogleTokenError",
    "GoogleNotConfiguredError",
    "verify_google_token",
]
