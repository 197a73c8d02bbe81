"""Authentication service implementation."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...security import (
    ExpiredTokenError,
    GoogleNotConfiguredError,
    GoogleTokenError,
    TokenError,
    access_token_lifetime_seconds,
    blacklist_token,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    needs_update,
    parse_subject,
    verify_google_token,
    verify_password,
)
from ..models.user import AuthProvider, User
from ..repositories.user_repository import UserRepository
from ..schemas.auth import (
    AuthResponse,
    GoogleAuthRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UserSummary,
)
from ..schemas.common import MessageResponse
from .interfaces import IAuthService

logger = logging.getLogger(__name__)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        bio=user.bio,
        is_private=user.is_private,
        auth_provider=user.auth_provider,
        friends_count=user.friends_count,
        created_at=user.created_at,
    )


class AuthService(IAuthService):
    """Authentication service implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.settings = get_settings()

    async def _issue_tokens(self, user: User, extra: Optional[dict] = None) -> TokenResponse:
        """Create a token pair and remember the refresh token on the user."""
        access_token = create_access_token(user.id)
        refresh_token = create_refresh_token(user.id)

        update_data = {"refresh_token": refresh_token}
        if extra:
            update_data.update(extra)
        await self.user_repo.update_user(user.id, update_data)

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=access_token_lifetime_seconds(),
        )

    async def _auth_response(self, user: User, message: str, extra: Optional[dict] = None) -> AuthResponse:
        tokens = await self._issue_tokens(user, extra)
        return AuthResponse(
            message=message,
            user=UserSummary.model_validate(user),
            **tokens.model_dump(),
        )

    async def register_user(self, request: RegisterRequest) -> AuthResponse:
        """Register new user."""
        if await self.user_repo.is_email_taken(request.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
            )

        user_data = {
            "email": request.email,
            "password_hash": hash_password(request.password),
            "name": request.name,
            "auth_provider": AuthProvider.EMAIL.value,
        }
        user = await self.user_repo.create_user(user_data)
        logger.info(f"Registered user {user.id}")

        return await self._auth_response(user, "Registration successful")

    async def authenticate_user(self, request: LoginRequest) -> AuthResponse:
        """Login user and return JWT tokens."""
        user = await self.user_repo.get_by_email(request.email)
        # Google-only accounts have no password and fail here too
        if not user or not verify_password(request.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password"
            )

        extra = None
        if needs_update(user.password_hash):
            extra = {"password_hash": hash_password(request.password)}

        return await self._auth_response(user, "Login successful", extra)

    async def authenticate_google(self, request: GoogleAuthRequest) -> AuthResponse:
        """Sign in with Google, linking or creating the account by email."""
        try:
            identity = await verify_google_token(request.credential)
        except GoogleNotConfiguredError:
            logger.error("Google sign-in attempted but GOOGLE_CLIENT_ID is not set")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Google sign-in not configured",
            )
        except GoogleTokenError as e:
            logger.warning(f"Google sign-in rejected: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token"
            )

        if not identity.email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Google account has no email"
            )

        user = await self.user_repo.get_by_email(identity.email)
        extra = {}
        if user:
            if not user.google_id:
                extra = {"google_id": identity.sub, "auth_provider": AuthProvider.GOOGLE.value}
                if identity.picture and not user.avatar:
                    extra["avatar"] = identity.picture
                logger.info(f"Linked Google account to user {user.id}")
        else:
            email = identity.email.strip().lower()
            user = await self.user_repo.create_user(
                {
                    "email": email,
                    "name": (identity.name or email.split("@")[0]).strip(),
                    "google_id": identity.sub,
                    "auth_provider": AuthProvider.GOOGLE.value,
                    "avatar": identity.picture or "",
                }
            )
            logger.info(f"Created user {user.id} from Google sign-in")

        return await self._auth_response(user, "Google login successful", extra)

    async def refresh_token(self, request: RefreshTokenRequest) -> TokenResponse:
        """Refresh JWT token. Only the most recently issued refresh token is accepted."""
        try:
            payload = decode_refresh_token(request.refresh_token)
        except (ExpiredTokenError, TokenError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"message": "Invalid or expired refresh token", "code": "REFRESH_EXPIRED"},
            )

        if payload.get("type") != "refresh":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type"
            )

        user_id = parse_subject(payload)
        user = await self.user_repo.get_by_id(user_id) if user_id else None
        if not user or user.refresh_token != request.refresh_token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token"
            )

        return await self._issue_tokens(user)

    async def get_current_user(self, user_id: UUID) -> UserResponse:
        """Get user by ID."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        return _user_response(user)

    async def update_user_profile(
        self, user_id: UUID, request: ProfileUpdateRequest
    ) -> ProfileUpdateResponse:
        """Update user profile."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        update_data = request.model_dump(exclude_none=True)
        if update_data:
            user = await self.user_repo.update_user(user_id, update_data)

        return ProfileUpdateResponse(
            message="Profile updated successfully", user=_user_response(user)
        )

    async def logout_user(self, user_id: UUID, access_token: Optional[str]) -> MessageResponse:
        """Logout user with Redis token blacklisting."""
        if access_token:
            try:
                await blacklist_token(access_token)
            except Exception as e:
                # Redis being down must not block logout
                logger.warning(f"Failed to blacklist token in Redis: {e}")

        await self.user_repo.update_user(user_id, {"refresh_token": None})
        return MessageResponse(message="Logged out successfully")
