"""Google ID token verification through Google's tokeninfo endpoint."""

import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

from ..config import get_settings

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleTokenError(Exception):
    """The credential is not a valid Google ID token for this app."""


class GoogleNotConfiguredError(GoogleTokenError):
    """No OAuth client id is set, so no token can be checked against it."""


@dataclass
class GoogleIdentity:
    """Claims we use from a verified Google ID token."""

    sub: str
    email: Optional[str]
    name: Optional[str] = None
    picture: Optional[str] = None


async def fetch_token_info(credential: str) -> dict:
    """Ask Google to validate the ID token and return its claims."""
    settings = get_settings()
    timeout = aiohttp.ClientTimeout(total=10)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(
                settings.google_tokeninfo_url, params={"id_token": credential}
            ) as resp:
                if resp.status != 200:
                    raise GoogleTokenError(f"tokeninfo returned {resp.status}")
                return await resp.json()
    except aiohttp.ClientError as e:
        logger.error(f"Google tokeninfo request failed: {e}")
        raise GoogleTokenError("Could not reach Google") from e


def identity_from_claims(claims: dict, client_id: str) -> GoogleIdentity:
    """Check audience and issuer, then pick out the identity claims."""
    if not client_id:
        raise GoogleNotConfiguredError("Google client id is not configured")
    if claims.get("aud") != client_id:
        raise GoogleTokenError("Token was issued for another client")
    if claims.get("iss") not in GOOGLE_ISSUERS:
        raise GoogleTokenError("Unexpected token issuer")
    if not claims.get("sub"):
        raise GoogleTokenError("Token has no subject")

    return GoogleIdentity(
        sub=claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
        picture=claims.get("picture"),
    )


async def verify_google_token(credential: str) -> GoogleIdentity:
    """Verify a Google ID token. Raises GoogleTokenError when it is not valid."""
    client_id = get_settings().google_client_id
    if not client_id:
        raise GoogleNotConfiguredError("Google client id is not configured")
    claims = await fetch_token_info(credential)
    return identity_from_claims(claims, client_id)
