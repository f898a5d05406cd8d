"""Image attachment validation and inline encoding.

Images are stored inside their note as ``data:`` URIs so that a client can
render them without a separate fetch.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from ..errors import (
    AttachmentError,
    AttachmentReadTimeout,
    AttachmentTooLarge,
    InvalidAttachmentData,
    InvalidAttachmentType,
    RecordNotFound,
    TooManyAttachments,
)

logger = structlog.get_logger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_IMAGES_PER_NOTE = 5
DEFAULT_READ_TIMEOUT = 10.0

_DATA_URI_RE = re.compile(r"^data:(?P<mimetype>[^;,]*)(?:;[^,]*)?;base64,(?P<payload>.*)$", re.S)


@dataclass
class ImageUpload:
    """A user-supplied image waiting to be validated and encoded."""

    original_name: str
    mimetype: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class SelectionResult:
    """Outcome of validating a batch of selected images."""

    accepted: list[ImageUpload] = field(default_factory=list)
    rejected: list[tuple[str, AttachmentError]] = field(default_factory=list)


def validate(upload: ImageUpload) -> None:
    """Reject non-images and files larger than 5 MiB."""
    if not (upload.mimetype or "").startswith("image/"):
        raise InvalidAttachmentType(
            f"{upload.original_name} is not an image file",
            original_name=upload.original_name,
            mimetype=upload.mimetype,
        )
    if upload.size > MAX_IMAGE_BYTES:
        raise AttachmentTooLarge(
            f"{upload.original_name} is too large. Maximum size is 5MB",
            original_name=upload.original_name,
            size=upload.size,
        )


def enforce_limit(existing_count: int, pending_removal_count: int, new_count: int) -> None:
    """Raise TooManyAttachments if the note would end up with more than 5 images."""
    resulting = existing_count - pending_removal_count + new_count
    if resulting > MAX_IMAGES_PER_NOTE:
        raise TooManyAttachments(
            f"You can only have up to {MAX_IMAGES_PER_NOTE} images per note",
            resulting=resulting,
        )


def generate_filename(upload: ImageUpload) -> str:
    suffix = Path(upload.original_name).suffix.lower()
    if not suffix:
        suffix = mimetypes.guess_extension(upload.mimetype) or ""
    return f"{uuid.uuid4().hex}{suffix}"


def encode(upload: ImageUpload) -> dict:
    """Turn an upload into the embedded attachment stored on a note."""
    payload = base64.b64encode(upload.content).decode("ascii")
    return {
        "filename": generate_filename(upload),
        "original_name": upload.original_name,
        "mimetype": upload.mimetype,
        "size": upload.size,
        "data": f"data:{upload.mimetype};base64,{payload}",
    }


def encode_all(uploads: list[ImageUpload]) -> list[dict]:
    """Validate and encode every upload before anything is written."""
    for upload in uploads:
        validate(upload)
    return [encode(upload) for upload in uploads]


def upload_payload(upload: ImageUpload) -> dict:
    """Request body for sending a not-yet-stored image to the API."""
    payload = base64.b64encode(upload.content).decode("ascii")
    return {
        "original_name": upload.original_name,
        "mimetype": upload.mimetype,
        "size": upload.size,
        "data": f"data:{upload.mimetype};base64,{payload}",
    }


def decode_payload(data: str) -> bytes:
    """Decode a ``data:`` URI or bare base64 string into bytes."""
    match = _DATA_URI_RE.match(data.strip())
    payload = match.group("payload") if match else data.strip()
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidAttachmentData("Image data is not valid base64") from e


def select_images(
    uploads: list[ImageUpload],
    existing_count: int = 0,
    pending_removal_count: int = 0,
    already_selected: int = 0,
) -> SelectionResult:
    """Validate a batch of newly selected images.

    Invalid files are dropped and reported one by one without aborting the
    batch. The count limit is then checked against the files that survived.
    """
    result = SelectionResult()
    for upload in uploads:
        try:
            validate(upload)
        except AttachmentError as e:
            logger.info(
                "attachment_rejected",
                original_name=upload.original_name,
                reason=e.code,
            )
            result.rejected.append((upload.original_name, e))
            continue
        result.accepted.append(upload)

    try:
        enforce_limit(
            existing_count, pending_removal_count, already_selected + len(result.accepted)
        )
    except TooManyAttachments as e:
        e.rejected.extend(result.rejected)
        raise
    return result


def read_upload(path: str | Path, timeout: float = DEFAULT_READ_TIMEOUT) -> ImageUpload:
    """Read a local image file, failing instead of hanging on a stalled read."""
    path = Path(path)
    mimetype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    size = path.stat().st_size
    if size > MAX_IMAGE_BYTES:
        raise AttachmentTooLarge(
            f"{path.name} is too large. Maximum size is 5MB", original_name=path.name, size=size
        )

    return ImageUpload(
        original_name=path.name, mimetype=mimetype, content=_read_with_deadline(path, timeout)
    )


def _read_with_deadline(path: Path, timeout: float) -> bytes:
    # Daemon thread: a read stuck in the kernel must not block interpreter exit
    outcome: dict = {}

    def target():
        try:
            outcome["content"] = path.read_bytes()
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=target, name=f"read-upload-{path.name}", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        logger.warning("attachment_read_timeout", path=str(path), timeout=timeout)
        raise AttachmentReadTimeout(f"Timed out reading {path.name}", original_name=path.name)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["content"]


class StagedImages:
    """Pending image changes for one edit session.

    Marking an existing image for removal and staging new files only changes
    this object; nothing is deleted until the update is persisted.
    """

    def __init__(self, existing: list[dict]):
        self.existing = list(existing)
        self.pending_removal: list[str] = []
        self.added: list[ImageUpload] = []

    def _filenames(self) -> list[str]:
        return [image["filename"] for image in self.existing]

    def mark_for_removal(self, filename: str) -> None:
        if filename not in self._filenames():
            raise RecordNotFound("image", filename)
        if filename not in self.pending_removal:
            self.pending_removal.append(filename)

    def restore(self, filename: str) -> None:
        if filename in self.pending_removal:
            self.pending_removal.remove(filename)

    def add(self, uploads: list[ImageUpload]) -> SelectionResult:
        result = select_images(
            uploads,
            existing_count=len(self.existing),
            pending_removal_count=len(self.pending_removal),
            already_selected=len(self.added),
        )
        self.added.extend(result.accepted)
        return result

    def unstage(self, index: int) -> ImageUpload:
        return self.added.pop(index)

    def remaining_count(self) -> int:
        return len(self.existing) - len(self.pending_removal) + len(self.added)
