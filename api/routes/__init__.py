"""API route handlers organized by domain."""

from .auth import router as auth_router
from .folders import router as folders_router
from .health import router as health_router
from .notes import router as notes_router

__all__ = ["auth_router", "folders_router", "health_router", "notes_router"]
