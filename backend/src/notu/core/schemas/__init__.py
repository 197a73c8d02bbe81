"""
Pydantic schemas for validating and documenting API requests and responses.

This package exposes the Pydantic models used across the application to
define input/output contracts for authentication, notes, users/friends,
and common responses (pagination, messages, health).
"""

from .auth import (
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
from .common import HealthCheckResponse, MessageResponse, PaginationResponse
from .notes import (
    EmptyTrashResponse,
    LikeResponse,
    NoteCreate,
    NoteImage,
    NoteImageInput,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    UploadImageRequest,
    UserNoteItem,
    UserNoteListResponse,
    VisibilityResponse,
    VisibilityUpdate,
)
from .users import FriendSummary, PublicProfileResponse, UserSearchResult

__all__ = [
    # Auth schemas
    "RegisterRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "GoogleAuthRequest",
    "TokenResponse",
    "AuthResponse",
    "UserSummary",
    "UserResponse",
    "ProfileUpdateRequest",
    "ProfileUpdateResponse",
    # Note schemas
    "NoteImage",
    "NoteImageInput",
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteListResponse",
    "UserNoteItem",
    "UserNoteListResponse",
    "VisibilityUpdate",
    "VisibilityResponse",
    "LikeResponse",
    "UploadImageRequest",
    "EmptyTrashResponse",
    # User schemas
    "FriendSummary",
    "UserSearchResult",
    "PublicProfileResponse",
    # Common schemas
    "PaginationResponse",
    "MessageResponse",
    "HealthCheckResponse",
]
