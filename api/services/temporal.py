"""User-overridable created/modified dates with append-only history.

Each record keeps a "main" date (the effective value shown to the user) and a
history list of ``{"date", "modified_at"}`` entries. The main date always
mirrors the ``date`` of the last history entry, and history is never
reordered or pruned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class DateField:
    """Names of the main-date key and its history key on a stored document."""

    main_key: str
    history_key: str


CREATED = DateField("main_created_at", "custom_created_dates")
MODIFIED = DateField("main_last_modified", "custom_last_modified_dates")


@dataclass(frozen=True)
class HistoryRow:
    date: datetime
    modified_at: datetime
    current: bool


def normalize(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime at millisecond precision.

    BSON stores milliseconds, so truncating up front keeps values equal after
    a round trip through MongoDB. Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    else:
        value = value.astimezone(UTC)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def utcnow() -> datetime:
    return normalize(datetime.now(UTC))


def make_entry(date: datetime, now: datetime) -> dict:
    return {"date": normalize(date), "modified_at": normalize(now)}


def seed(field: DateField, initial: datetime | None = None, now: datetime | None = None) -> dict:
    """Create the initial main date and a single-entry history for ``field``."""
    now = normalize(now) if now else utcnow()
    date = normalize(initial) if initial else now
    return {field.main_key: date, field.history_key: [make_entry(date, now)]}


def apply_edit(
    field: DateField, override: datetime | None = None, now: datetime | None = None
) -> tuple[dict, dict]:
    """Compute the ``$set`` and ``$push`` parts of an update for ``field``.

    Without an override both parts are empty: a plain content edit leaves the
    main date and its history untouched.
    """
    if override is None:
        return {}, {}

    now = normalize(now) if now else utcnow()
    entry = make_entry(override, now)
    return {field.main_key: entry["date"]}, {field.history_key: entry}


def apply_to_document(
    doc: dict, field: DateField, override: datetime | None = None, now: datetime | None = None
) -> dict:
    """Apply the edit rule to an in-memory document and return the new copy."""
    set_doc, push_doc = apply_edit(field, override, now)
    updated = dict(doc)
    updated.update(set_doc)
    if push_doc:
        updated[field.history_key] = [*doc.get(field.history_key, []), push_doc[field.history_key]]
    return updated


def merge_updates(*parts: tuple[dict, dict]) -> tuple[dict, dict]:
    """Combine several ``apply_edit`` results into one ``$set``/``$push`` pair."""
    set_doc: dict = {}
    push_doc: dict = {}
    for part_set, part_push in parts:
        set_doc.update(part_set)
        push_doc.update(part_push)
    return set_doc, push_doc


def history_for_display(history: list[dict]) -> list[HistoryRow]:
    """History rows newest first; only the newest is current.

    A history with one entry or none carries no information worth showing,
    so an empty list is returned.
    """
    if len(history) <= 1:
        return []

    rows = []
    for index, entry in enumerate(reversed(history)):
        rows.append(
            HistoryRow(
                date=normalize(entry["date"]),
                modified_at=normalize(entry["modified_at"]),
                current=index == 0,
            )
        )
    return rows


def is_consistent(doc: dict, field: DateField) -> bool:
    """Check that the main date equals the date of the last history entry."""
    history = doc.get(field.history_key) or []
    main = doc.get(field.main_key)
    if not history or main is None:
        return False
    return normalize(history[-1]["date"]) == normalize(main)
