"""Domain exceptions for folders, notes and attachments.

Every error carries a machine-readable ``code`` so that the HTTP layer and the
CLI can tell failures apart without parsing messages.
"""

from __future__ import annotations


class NoteAppError(Exception):
    """Base class for all domain errors."""

    code = "note_app_error"
    status_code = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Serialize the error for API responses."""
        payload = {"detail": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class RecordValidationError(NoteAppError):
    """A required field is missing, empty or too long."""

    code = "validation_error"
    status_code = 422


class RecordNotFound(NoteAppError):
    """A referenced folder or note does not exist."""

    code = "not_found"
    status_code = 404

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind.capitalize()} not found", kind=kind, id=record_id)
        self.kind = kind
        self.record_id = record_id


class AttachmentError(NoteAppError):
    """Base class for image attachment failures."""

    code = "attachment_error"
    status_code = 400


class InvalidAttachmentType(AttachmentError):
    code = "invalid_type"


class AttachmentTooLarge(AttachmentError):
    code = "too_large"


class TooManyAttachments(AttachmentError):
    code = "too_many"

    def __init__(self, message: str, **details):
        super().__init__(message, **details)
        # (original_name, error) pairs dropped from the same batch before the count check
        self.rejected: list[tuple[str, AttachmentError]] = []


class InvalidAttachmentData(AttachmentError):
    code = "invalid_data"


class AttachmentReadTimeout(AttachmentError):
    code = "read_timeout"
