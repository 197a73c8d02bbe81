"""
Service interfaces for the Notu application.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import UUID

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
)
from ..schemas.common import HealthCheckResponse, MessageResponse
from ..schemas.notes import (
    EmptyTrashResponse,
    LikeResponse,
    NoteCreate,
    NoteImage,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    UserNoteListResponse,
    VisibilityResponse,
)
from ..schemas.users import FriendSummary, PublicProfileResponse, UserSearchResult


class IAuthService(ABC):
    """Auth service for accounts and tokens."""

    @abstractmethod
    async def register_user(self, request: RegisterRequest) -> AuthResponse:
        """Register new user and sign them in."""
        pass

    @abstractmethod
    async def authenticate_user(self, request: LoginRequest) -> AuthResponse:
        """Login user and return JWT tokens."""
        pass

    @abstractmethod
    async def authenticate_google(self, request: GoogleAuthRequest) -> AuthResponse:
        """Sign in with a Google ID token."""
        pass

    @abstractmethod
    async def refresh_token(self, request: RefreshTokenRequest) -> TokenResponse:
        """Rotate the token pair."""
        pass

    @abstractmethod
    async def get_current_user(self, user_id: UUID) -> UserResponse:
        """Get user by ID."""
        pass

    @abstractmethod
    async def update_user_profile(
        self, user_id: UUID, request: ProfileUpdateRequest
    ) -> ProfileUpdateResponse:
        """Update user profile."""
        pass

    @abstractmethod
    async def logout_user(self, user_id: UUID, access_token: Optional[str]) -> MessageResponse:
        """Logout user."""
        pass


class IUserService(ABC):
    """User discovery and the friends graph."""

    @abstractmethod
    async def search_users(self, user_id: UUID, query: str) -> List[UserSearchResult]:
        pass

    @abstractmethod
    async def get_profile(self, user_id: UUID, target_id: UUID) -> PublicProfileResponse:
        pass

    @abstractmethod
    async def send_friend_request(self, user_id: UUID, target_id: UUID) -> MessageResponse:
        pass

    @abstractmethod
    async def accept_friend_request(self, user_id: UUID, requester_id: UUID) -> MessageResponse:
        pass

    @abstractmethod
    async def decline_friend_request(self, user_id: UUID, requester_id: UUID) -> MessageResponse:
        pass

    @abstractmethod
    async def remove_friend(self, user_id: UUID, friend_id: UUID) -> MessageResponse:
        pass

    @abstractmethod
    async def list_friends(self, user_id: UUID) -> List[FriendSummary]:
        pass

    @abstractmethod
    async def list_friend_requests(self, user_id: UUID) -> List[FriendSummary]:
        pass


class INoteService(ABC):
    """Note service for CRUD, trash, likes and images."""

    @abstractmethod
    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create new note."""
        pass

    @abstractmethod
    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Get note by ID."""
        pass

    @abstractmethod
    async def update_note(self, note_id: UUID, user_id: UUID, request: NoteUpdate) -> NoteResponse:
        """Update existing note."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, user_id: UUID, permanent: bool = False) -> MessageResponse:
        """Move note to trash, or delete it for good."""
        pass

    @abstractmethod
    async def restore_note(self, note_id: UUID, user_id: UUID) -> MessageResponse:
        pass

    @abstractmethod
    async def empty_trash(self, user_id: UUID) -> EmptyTrashResponse:
        pass

    @abstractmethod
    async def list_user_notes(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 50,
        archived: bool = False,
        deleted: bool = False,
    ) -> NoteListResponse:
        """List user notes with pagination."""
        pass

    @abstractmethod
    async def upload_image(self, data_uri: str) -> NoteImage:
        pass

    @abstractmethod
    async def upload_image_file(self, data: bytes, content_type: str) -> NoteImage:
        pass

    @abstractmethod
    async def toggle_like(self, note_id: UUID, user_id: UUID) -> LikeResponse:
        pass

    @abstractmethod
    async def duplicate_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        pass

    @abstractmethod
    async def set_visibility(self, note_id: UUID, user_id: UUID, is_public: bool) -> VisibilityResponse:
        pass

    @abstractmethod
    async def list_profile_notes(
        self, viewer_id: UUID, owner_id: UUID, page: int = 1, per_page: int = 50
    ) -> UserNoteListResponse:
        """Notes visible on another user's profile."""
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        pass

    @abstractmethod
    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        pass
