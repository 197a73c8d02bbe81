"""Authentication API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.auth import (
    AuthResponse,
    GoogleAuthRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from ..core.schemas.common import MessageResponse
from ..core.services import AuthService
from ..database import get_db_session
from ..middleware.auth import get_access_token, get_current_user_id

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, session: AsyncSession = Depends(get_db_session)):
    """Register a new user and return tokens."""
    auth_service = AuthService(session)
    return await auth_service.register_user(request)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, session: AsyncSession = Depends(get_db_session)):
    """Login user and get JWT tokens."""
    auth_service = AuthService(session)
    return await auth_service.authenticate_user(request)


@router.post("/google", response_model=AuthResponse)
async def google_login(request: GoogleAuthRequest, session: AsyncSession = Depends(get_db_session)):
    """Sign in with a Google ID token."""
    auth_service = AuthService(session)
    return await auth_service.authenticate_google(request)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest, session: AsyncSession = Depends(get_db_session)
):
    """Exchange the current refresh token for a new token pair."""
    auth_service = AuthService(session)
    return await auth_service.refresh_token(request)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user_id: UUID = Depends(get_current_user_id),
    access_token: Optional[str] = Depends(get_access_token),
    session: AsyncSession = Depends(get_db_session),
):
    """Logout user: drop the refresh token and blacklist the access token."""
    auth_service = AuthService(session)
    return await auth_service.logout_user(current_user_id, access_token)


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Get current user profile."""
    auth_service = AuthService(session)
    return await auth_service.get_current_user(current_user_id)


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    request: ProfileUpdateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Update user profile."""
    auth_service = AuthService(session)
    return await auth_service.update_user_profile(current_user_id, request)
