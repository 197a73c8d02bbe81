"""User search, profiles and the friend-request lifecycle."""

import logging
from typing import List, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..models.user import User
from ..repositories.user_repository import UserRepository
from ..schemas.common import MessageResponse
from ..schemas.users import FriendSummary, PublicProfileResponse, UserSearchResult
from .interfaces import IUserService

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def _without(ids: List[UUID], user_id: UUID) -> List[UUID]:
    return [i for i in (ids or []) if i != user_id]


def _with(ids: List[UUID], user_id: UUID) -> List[UUID]:
    ids = list(ids or [])
    if user_id not in ids:
        ids.append(user_id)
    return ids


class UserService(IUserService):
    """Friends graph kept symmetric by writing both users in one commit.

    List columns are always replaced with new lists so the ORM sees the change.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.settings = get_settings()

    async def _load_pair(self, user_id: UUID, other_id: UUID) -> Tuple[User, User]:
        current = await self.user_repo.get_by_id(user_id)
        other = await self.user_repo.get_by_id(other_id)
        if not current or not other:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return current, other

    async def search_users(self, user_id: UUID, query: str) -> List[UserSearchResult]:
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Search query must be at least 2 characters",
            )

        current = await self.user_repo.get_by_id(user_id)
        if not current:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        users = await self.user_repo.search_users(
            query, exclude_id=user_id, limit=self.settings.user_search_limit
        )
        return [
            UserSearchResult(
                id=u.id,
                name=u.name,
                email=u.email,
                avatar=u.avatar,
                is_friend=current.is_friend_with(u.id),
                is_pending=current.has_sent_request_to(u.id),
                has_request=current.has_request_from(u.id),
            )
            for u in users
        ]

    async def get_profile(self, user_id: UUID, target_id: UUID) -> PublicProfileResponse:
        current, target = await self._load_pair(user_id, target_id)

        is_friend = current.is_friend_with(target.id)
        is_own = current.id == target.id
        return PublicProfileResponse(
            id=target.id,
            name=target.name,
            email=target.email,
            avatar=target.avatar,
            bio=target.bio,
            is_private=target.is_private,
            friends_count=target.friends_count,
            is_friend=is_friend,
            is_own=is_own,
            can_view_notes=is_own or (is_friend and not target.is_private),
        )

    async def send_friend_request(self, user_id: UUID, target_id: UUID) -> MessageResponse:
        if user_id == target_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot send friend request to yourself",
            )

        current, target = await self._load_pair(user_id, target_id)

        if current.is_friend_with(target.id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already friends")
        if current.has_sent_request_to(target.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Friend request already sent"
            )

        current.sent_friend_requests = _with(current.sent_friend_requests, target.id)
        target.friend_requests = _with(target.friend_requests, current.id)
        await self.user_repo.save(current, target)

        logger.info(f"Friend request {current.id} -> {target.id}")
        return MessageResponse(message="Friend request sent")

    async def accept_friend_request(self, user_id: UUID, requester_id: UUID) -> MessageResponse:
        current, requester = await self._load_pair(user_id, requester_id)

        if not current.has_request_from(requester.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="No friend request from this user"
            )

        current.friend_requests = _without(current.friend_requests, requester.id)
        requester.sent_friend_requests = _without(requester.sent_friend_requests, current.id)
        current.friends = _with(current.friends, requester.id)
        requester.friends = _with(requester.friends, current.id)
        await self.user_repo.save(current, requester)

        logger.info(f"Users {current.id} and {requester.id} are now friends")
        return MessageResponse(message="Friend request accepted")

    async def decline_friend_request(self, user_id: UUID, requester_id: UUID) -> MessageResponse:
        current, requester = await self._load_pair(user_id, requester_id)

        current.friend_requests = _without(current.friend_requests, requester.id)
        requester.sent_friend_requests = _without(requester.sent_friend_requests, current.id)
        await self.user_repo.save(current, requester)

        return MessageResponse(message="Friend request declined")

    async def remove_friend(self, user_id: UUID, friend_id: UUID) -> MessageResponse:
        current, friend = await self._load_pair(user_id, friend_id)

        current.friends = _without(current.friends, friend.id)
        friend.friends = _without(friend.friends, current.id)
        await self.user_repo.save(current, friend)

        return MessageResponse(message="Friend removed")

    async def list_friends(self, user_id: UUID) -> List[FriendSummary]:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        friends = await self.user_repo.get_by_ids(user.friends)
        return [FriendSummary.model_validate(f) for f in friends]

    async def list_friend_requests(self, user_id: UUID) -> List[FriendSummary]:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        requesters = await self.user_repo.get_by_ids(user.friend_requests)
        return [FriendSummary.model_validate(r) for r in requesters]
