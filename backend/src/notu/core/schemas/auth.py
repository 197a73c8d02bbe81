"""
Authentication and profile schemas.

These schemas define the API contracts for registration, login, token
refresh, Google sign-in and the caller's own profile.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..models.user import AuthProvider

BIO_MAX_LENGTH = 200


class RegisterRequest(BaseModel):
    """User registration request schema."""

    email: EmailStr = Field(description="Email address, used to sign in")
    password: str = Field(min_length=6, max_length=128, description="User password")
    name: str = Field(min_length=1, max_length=100, description="Display name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        """Names are stored trimmed."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "budi@example.com", "password": "rahasia123", "name": "Budi"}
        }
    )


class LoginRequest(BaseModel):
    """User login request schema."""

    # plain str: a malformed address is just a failed login
    email: str = Field(min_length=1, max_length=255, description="Email address")
    password: str = Field(min_length=1, max_length=128, description="User password")

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "budi@example.com", "password": "rahasia123"}}
    )


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(min_length=1, description="JWT refresh token")


class GoogleAuthRequest(BaseModel):
    """Google sign-in request schema."""

    credential: str = Field(min_length=1, description="Google ID token from Google Identity Services")


class UserSummary(BaseModel):
    """Compact user info returned with tokens."""

    id: uuid.UUID
    email: str
    name: str
    avatar: str = ""
    auth_provider: AuthProvider = AuthProvider.EMAIL

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Token pair."""

    access_token: str = Field(description="JWT access token")
    refresh_token: str = Field(description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(description="Access token lifetime in seconds")


class AuthResponse(TokenResponse):
    """Token pair plus the signed-in user."""

    message: str = Field(description="Human-readable result")
    user: UserSummary = Field(description="User information")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Login successful",
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_in": 900,
                "user": {
                    "id": "123e4567-e89b-12d3-a456-426614174000",
                    "email": "budi@example.com",
                    "name": "Budi",
                    "avatar": "",
                    "auth_provider": "email",
                },
            }
        }
    )


class UserResponse(BaseModel):
    """The caller's own profile."""

    id: uuid.UUID = Field(description="User unique identifier")
    email: str = Field(description="Email address")
    name: str = Field(description="Display name")
    avatar: str = Field(description="Avatar URL")
    bio: str = Field(description="Short bio")
    is_private: bool = Field(description="Whether friends can browse this user's notes")
    auth_provider: AuthProvider = Field(description="Sign-in method")
    friends_count: int = Field(default=0, description="Number of friends")
    created_at: datetime = Field(description="Account creation timestamp")

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    """Profile update request schema. Omitted fields stay unchanged."""

    name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None)
    avatar: Optional[str] = Field(default=None)
    is_private: Optional[bool] = Field(default=None)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("bio")
    @classmethod
    def truncate_bio(cls, v):
        """Long bios are cut rather than rejected."""
        if v is None:
            return v
        return v[:BIO_MAX_LENGTH]

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Budi S.", "bio": "Suka menulis", "is_private": True}}
    )


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserResponse
