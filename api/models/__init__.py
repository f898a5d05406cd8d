"""Pydantic models for API requests and responses."""

from .auth import AuthResponse, LoginRequest
from .folders import DateEntry, FolderCreate, FolderResponse, FolderStats, FolderUpdate
from .notes import (
    Attachment,
    ExpandedFolder,
    FolderReference,
    ImagePayload,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    PaginationResponse,
)

__all__ = [
    "Attachment",
    # Auth models
    "AuthResponse",
    # Folder models
    "DateEntry",
    "ExpandedFolder",
    "FolderCreate",
    "FolderReference",
    "FolderResponse",
    "FolderStats",
    "FolderUpdate",
    # Notes models
    "ImagePayload",
    "LoginRequest",
    "NoteCreate",
    "NoteListResponse",
    "NoteResponse",
    "NoteUpdate",
    "PaginationResponse",
]
