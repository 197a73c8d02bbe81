"""
Database models for the Notu application.

SQLAlchemy ORM models designed for async access through the repository
layer.

Models included:
    - User: account, profile and friends graph (friends, incoming and
      outgoing friend requests stored as id lists)
    - Note: note content, embedded images, trash/archive/pin flags and likes
"""

from .base import BaseModel
from .note import Note
from .user import AuthProvider, User

__all__ = [
    "BaseModel",
    "User",
    "AuthProvider",
    "Note",
]
