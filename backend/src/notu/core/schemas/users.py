"""
User search, profile and friends schemas.
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class FriendSummary(BaseModel):
    """Minimal user card used in friend and request lists."""

    id: uuid.UUID
    name: str
    email: str
    avatar: str = ""

    model_config = ConfigDict(from_attributes=True)


class UserSearchResult(FriendSummary):
    """Search hit with the caller's relationship to the user."""

    is_friend: bool = Field(description="Already friends")
    is_pending: bool = Field(description="Caller sent a request to this user")
    has_request: bool = Field(description="This user sent a request to the caller")


class PublicProfileResponse(BaseModel):
    """Another user's profile as seen by the caller."""

    id: uuid.UUID
    name: str
    email: str
    avatar: str
    bio: str
    is_private: bool
    friends_count: int
    is_friend: bool
    is_own: bool
    can_view_notes: bool
