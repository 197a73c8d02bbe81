"""User search, profile and friends endpoints.

Mounted under /api/auth next to the account endpoints.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import MessageResponse
from ..core.schemas.users import FriendSummary, PublicProfileResponse, UserSearchResult
from ..core.services import UserService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/auth", tags=["users"])


@router.get("/users/search", response_model=List[UserSearchResult])
async def search_users(
    q: str = Query("", description="Name or email fragment, at least 2 characters"),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Find people to add as friends."""
    user_service = UserService(session)
    return await user_service.search_users(current_user_id, q)


@router.get("/users/{user_id}", response_model=PublicProfileResponse)
async def get_user_profile(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.get_profile(current_user_id, user_id)


@router.get("/friends", response_model=List[FriendSummary])
async def list_friends(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.list_friends(current_user_id)


@router.get("/friends/requests", response_model=List[FriendSummary])
async def list_friend_requests(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Incoming friend requests."""
    user_service = UserService(session)
    return await user_service.list_friend_requests(current_user_id)


@router.post("/friends/request/{user_id}", response_model=MessageResponse)
async def send_friend_request(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.send_friend_request(current_user_id, user_id)


@router.post("/friends/accept/{user_id}", response_model=MessageResponse)
async def accept_friend_request(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.accept_friend_request(current_user_id, user_id)


@router.post("/friends/decline/{user_id}", response_model=MessageResponse)
async def decline_friend_request(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.decline_friend_request(current_user_id, user_id)


@router.delete("/friends/{user_id}", response_model=MessageResponse)
async def remove_friend(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.remove_friend(current_user_id, user_id)
