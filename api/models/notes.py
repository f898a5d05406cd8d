"""Notes-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from ..services.attachments import ImageUpload, decode_payload
from ..services.temporal import normalize
from .folders import DateEntry, FolderResponse


class ImagePayload(BaseModel):
    """An image sent by the client as a data URI or bare base64 string."""

    original_name: str = Field(..., min_length=1)
    mimetype: str
    data: str
    size: int | None = None

    def to_upload(self) -> ImageUpload:
        return ImageUpload(
            original_name=self.original_name,
            mimetype=self.mimetype,
            content=decode_payload(self.data),
        )


class Attachment(BaseModel):
    """An image embedded in a note."""

    filename: str
    original_name: str
    mimetype: str
    size: int
    data: str


class NoteFields(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=10000)
    tags: list[str] = Field(default_factory=list)
    is_pinned: bool = False
    images: list[ImagePayload] = Field(default_factory=list)

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: list[str]) -> list[str]:
        # Order and duplicates are kept; only blank entries are dropped
        return [tag.strip() for tag in tags if tag.strip()]


class NoteCreate(NoteFields):
    """Request model for creating a note."""

    folder_id: str


class NoteUpdate(NoteFields):
    """Request model for updating a note.

    Date overrides are only sent when the user supplied them; omitting one
    leaves that date and its history untouched.
    """

    remove_images: list[str] = Field(default_factory=list)
    custom_created_at: datetime | None = None
    custom_last_modified: datetime | None = None


class FolderReference(BaseModel):
    """A note's folder given by id only."""

    kind: Literal["reference"] = "reference"
    id: str


class ExpandedFolder(FolderResponse):
    """A note's folder embedded as a full snapshot."""

    kind: Literal["expanded"] = "expanded"


FolderRef = Annotated[FolderReference | ExpandedFolder, Field(discriminator="kind")]


class NoteResponse(BaseModel):
    """Response model for note data."""

    id: str
    folder: FolderRef
    title: str
    content: str
    tags: list[str]
    is_pinned: bool
    images: list[Attachment]
    main_created_at: datetime
    custom_created_dates: list[DateEntry]
    main_last_modified: datetime
    custom_last_modified_dates: list[DateEntry]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_doc(
        cls, doc: dict, folder_doc: dict | None = None, notes_count: int = 0
    ) -> NoteResponse:
        if folder_doc is not None:
            folder = ExpandedFolder.from_doc(folder_doc, notes_count=notes_count)
        else:
            folder = FolderReference(id=str(doc["folder_id"]))

        return cls(
            id=str(doc["_id"]),
            folder=folder,
            title=doc["title"],
            content=doc["content"],
            tags=doc.get("tags", []),
            is_pinned=doc.get("is_pinned", False),
            images=[Attachment(**image) for image in doc.get("images", [])],
            main_created_at=normalize(doc["main_created_at"]),
            custom_created_dates=[DateEntry.from_doc(e) for e in doc["custom_created_dates"]],
            main_last_modified=normalize(doc["main_last_modified"]),
            custom_last_modified_dates=[
                DateEntry.from_doc(e) for e in doc["custom_last_modified_dates"]
            ],
            created_at=normalize(doc["created_at"]),
            updated_at=normalize(doc["updated_at"]),
        )


class PaginationResponse(BaseModel):
    current: int
    total: int
    count: int
    total_notes: int


class NoteListResponse(BaseModel):
    """Response model for a page of notes."""

    notes: list[NoteResponse]
    pagination: PaginationResponse
