"""Local patches to cached listings between full reloads.

After a note is created or deleted the owning folder's count is adjusted by
one without asking the server. The next full folder listing is authoritative:
cached counts are overwritten, and any mismatch is logged as an inconsistency.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class FolderCountCache:
    """Per-folder note counts as last seen, plus optimistic deltas."""

    def __init__(self):
        self._counts: dict[str, int] = {}

    def count(self, folder_id: str) -> int | None:
        return self._counts.get(folder_id)

    def note_created(self, folder_id: str) -> None:
        if folder_id in self._counts:
            self._counts[folder_id] += 1

    def note_deleted(self, folder_id: str) -> None:
        if folder_id in self._counts:
            self._counts[folder_id] -= 1

    def folder_deleted(self, folder_id: str) -> None:
        self._counts.pop(folder_id, None)

    def reconcile(self, folder: dict) -> bool:
        """Overwrite one folder's count with the server's; True if they differed."""
        folder_id = folder["id"]
        actual = folder["notes_count"]
        cached = self._counts.get(folder_id)
        self._counts[folder_id] = actual

        if cached is not None and cached != actual:
            logger.warning(
                "folder_count_divergence",
                folder_id=folder_id,
                cached=cached,
                actual=actual,
            )
            return True
        return False

    def load(self, folders: list[dict]) -> list[str]:
        """Reconcile against a full folder listing and return diverged ids."""
        diverged = [folder["id"] for folder in folders if self.reconcile(folder)]

        seen = {folder["id"] for folder in folders}
        for folder_id in list(self._counts):
            if folder_id not in seen:
                del self._counts[folder_id]

        return diverged


class NoteListing:
    """The page of notes currently shown for a folder."""

    def __init__(self):
        self.notes: list[dict] = []
        self.pagination: dict = {"current": 1, "total": 1, "count": 0, "total_notes": 0}

    def replace(self, response: dict) -> None:
        self.notes = list(response["notes"])
        self.pagination = dict(response["pagination"])

    def note_created(self, note: dict) -> None:
        self.notes.insert(0, note)

    def note_updated(self, note: dict) -> None:
        self.notes = [note if existing["id"] == note["id"] else existing for existing in self.notes]

    def note_deleted(self, note_id: str) -> None:
        self.notes = [note for note in self.notes if note["id"] != note_id]
