"""Authentication middleware."""

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..security import get_user_id_from_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class JWTBearer(HTTPBearer):
    """JWT Bearer token authentication.

    On success the raw token is kept on ``request.state.access_token`` so
    logout can blacklist it.
    """

    def __init__(self):
        # we raise our own 401s instead of HTTPBearer's errors
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> UUID:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if not credentials:
            raise _unauthorized("Not authenticated")

        if credentials.scheme.lower() != "bearer":
            raise _unauthorized("Invalid authentication scheme")

        user_id = await get_user_id_from_token(credentials.credentials)
        if not user_id:
            raise _unauthorized("Invalid or expired token")

        request.state.access_token = credentials.credentials
        request.state.user_id = user_id
        return user_id


jwt_bearer = JWTBearer()


# Dependency for getting current user ID from JWT
async def get_current_user_id(user_id: UUID = Depends(jwt_bearer)) -> UUID:
    """Get current authenticated user ID."""
    return user_id


def get_access_token(request: Request) -> Optional[str]:
    """The bearer token of an already authenticated request."""
    return getattr(request.state, "access_token", None)
