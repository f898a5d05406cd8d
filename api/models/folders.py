"""Folder-related Pydantic models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..services.temporal import normalize

DEFAULT_FOLDER_COLOR = "#007bff"


class DateEntry(BaseModel):
    """One entry of a created/modified date override history."""

    date: datetime
    modified_at: datetime

    @classmethod
    def from_doc(cls, entry: dict) -> DateEntry:
        return cls(date=normalize(entry["date"]), modified_at=normalize(entry["modified_at"]))


class FolderCreate(BaseModel):
    """Request model for creating a folder."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    color: str = Field(default=DEFAULT_FOLDER_COLOR, pattern=r"^#[0-9a-fA-F]{6}$")
    custom_created_at: datetime | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class FolderUpdate(FolderCreate):
    """Request model for updating a folder (full field set)."""


class FolderResponse(BaseModel):
    """Response model for folder data."""

    id: str
    name: str
    description: str
    color: str
    notes_count: int
    main_created_at: datetime
    custom_created_dates: list[DateEntry]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_doc(cls, doc: dict, notes_count: int = 0):
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            description=doc.get("description", ""),
            color=doc.get("color", DEFAULT_FOLDER_COLOR),
            notes_count=notes_count,
            main_created_at=normalize(doc["main_created_at"]),
            custom_created_dates=[DateEntry.from_doc(e) for e in doc["custom_created_dates"]],
            created_at=normalize(doc["created_at"]),
            updated_at=normalize(doc["updated_at"]),
        )


class FolderStats(BaseModel):
    """Aggregate figures for one folder."""

    folder_id: str
    notes_count: int
    pinned_count: int
    image_count: int
    tag_count: int
    last_modified: datetime | None = None
