"""API routers for Notu."""

from .auth import router as auth_router
from .health import router as health_router
from .notes import router as notes_router
from .users import router as users_router

__all__ = ["auth_router", "users_router", "notes_router", "health_router"]
