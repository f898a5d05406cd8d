"""Client-side edit session for a single note.

Opening a session proposes "now" as the new last-modified date and treats it
as user-supplied, so every saved edit appends a modified-date history entry
stamped at session start unless the user picks another value. The created
date is only sent when the user changed it.
"""

from __future__ import annotations

from datetime import datetime

from api.errors import RecordValidationError
from api.services import temporal
from api.services.attachments import ImageUpload, SelectionResult, StagedImages, upload_payload

TITLE_MAX = 200
CONTENT_MAX = 10000


def parse_tags(raw: str) -> list[str]:
    """Split comma-separated tags, keeping order and duplicates."""
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def parse_datetime(value: str) -> datetime:
    return temporal.normalize(datetime.fromisoformat(value))


def validate_note_fields(title: str, content: str) -> None:
    """Reject empty or over-length title/content before anything is sent."""
    if not title.strip():
        raise RecordValidationError("Note title is required")
    if not content.strip():
        raise RecordValidationError("Note content is required")
    if len(title.strip()) > TITLE_MAX:
        raise RecordValidationError(f"Note title must be at most {TITLE_MAX} characters")
    if len(content.strip()) > CONTENT_MAX:
        raise RecordValidationError(f"Note content must be at most {CONTENT_MAX} characters")


class NoteEditSession:
    def __init__(self, note: dict, now: datetime | None = None):
        self.note = note
        self.title = note["title"]
        self.content = note["content"]
        self.tags = list(note.get("tags", []))
        self.is_pinned = note.get("is_pinned", False)

        self.created_at = parse_datetime(note["main_created_at"])
        self.created_changed = False

        self.last_modified = temporal.normalize(now) if now else temporal.utcnow()
        self.last_modified_changed = True

        self.images = StagedImages(note.get("images", []))

    def set_created_at(self, value: datetime) -> None:
        self.created_at = temporal.normalize(value)
        self.created_changed = True

    def set_last_modified(self, value: datetime) -> None:
        self.last_modified = temporal.normalize(value)
        self.last_modified_changed = True

    def add_images(self, uploads: list[ImageUpload]) -> SelectionResult:
        return self.images.add(uploads)

    def preview(self) -> dict:
        """The note's dates as they will look once this session is saved."""
        doc = {
            key: [
                {"date": parse_datetime(e["date"]), "modified_at": parse_datetime(e["modified_at"])}
                for e in self.note[key]
            ]
            for key in (temporal.CREATED.history_key, temporal.MODIFIED.history_key)
        }
        doc[temporal.CREATED.main_key] = parse_datetime(self.note["main_created_at"])
        doc[temporal.MODIFIED.main_key] = parse_datetime(self.note["main_last_modified"])

        now = temporal.utcnow()
        if self.created_changed:
            doc = temporal.apply_to_document(doc, temporal.CREATED, self.created_at, now)
        if self.last_modified_changed:
            doc = temporal.apply_to_document(doc, temporal.MODIFIED, self.last_modified, now)
        return doc

    def build_update(self) -> dict:
        """Validate the session and build the PUT /notes/{id} body."""
        validate_note_fields(self.title, self.content)

        payload = {
            "title": self.title.strip(),
            "content": self.content.strip(),
            "tags": self.tags,
            "is_pinned": self.is_pinned,
            "images": [upload_payload(upload) for upload in self.images.added],
            "remove_images": list(self.images.pending_removal),
        }
        if self.created_changed:
            payload["custom_created_at"] = self.created_at.isoformat()
        if self.last_modified_changed:
            payload["custom_last_modified"] = self.last_modified.isoformat()
        return payload
