"""Folder note listings: substring search, pinned-first sort and pagination."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal

from .temporal import normalize

SortBy = Literal["created_at", "last_modified", "title"]
SortOrder = Literal["asc", "desc"]

DEFAULT_LIMIT = 12

_SORT_KEYS = {
    "created_at": lambda doc: normalize(doc["main_created_at"]),
    "last_modified": lambda doc: normalize(doc["main_last_modified"]),
    "title": lambda doc: doc["title"].casefold(),
}


@dataclass(frozen=True)
class NoteQuery:
    search: str | None = None
    sort_by: SortBy = "created_at"
    sort_order: SortOrder = "desc"
    page: int = 1
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class Pagination:
    current: int
    total: int
    count: int
    total_notes: int


@dataclass(frozen=True)
class QueryResult:
    notes: list[dict]
    pagination: Pagination


def matches(doc: dict, search: str) -> bool:
    """Case-insensitive substring match on title, content or any tag."""
    needle = search.casefold()
    if needle in doc.get("title", "").casefold():
        return True
    if needle in doc.get("content", "").casefold():
        return True
    return any(needle in tag.casefold() for tag in doc.get("tags", []))


def sort_notes(docs: list[dict], sort_by: SortBy, sort_order: SortOrder) -> list[dict]:
    """Pinned notes first, each group sorted by ``sort_by``; ties by id."""
    if sort_by not in _SORT_KEYS:
        raise ValueError(f"Unsupported sort field: {sort_by}")

    key = _SORT_KEYS[sort_by]
    reverse = sort_order == "desc"

    def ordered(group: list[dict]) -> list[dict]:
        # Sorting is stable, so the id pre-sort survives as the tie-breaker
        by_id = sorted(group, key=lambda doc: str(doc["_id"]))
        return sorted(by_id, key=key, reverse=reverse)

    pinned = [doc for doc in docs if doc.get("is_pinned")]
    unpinned = [doc for doc in docs if not doc.get("is_pinned")]
    return ordered(pinned) + ordered(unpinned)


def paginate(docs: list[dict], page: int, limit: int) -> QueryResult:
    if limit < 1:
        raise ValueError("limit must be at least 1")

    total_notes = len(docs)
    total = max(1, math.ceil(total_notes / limit))
    current = min(max(page, 1), total)

    start = (current - 1) * limit
    notes = docs[start : start + limit]
    return QueryResult(
        notes=notes,
        pagination=Pagination(
            current=current, total=total, count=len(notes), total_notes=total_notes
        ),
    )


def query_notes(docs: list[dict], query: NoteQuery) -> QueryResult:
    """Run search, pin partition, sort and pagination over one folder's notes."""
    search = (query.search or "").strip()
    if search:
        docs = [doc for doc in docs if matches(doc, search)]

    ordered = sort_notes(docs, query.sort_by, query.sort_order)
    return paginate(ordered, query.page, query.limit)


@dataclass(frozen=True)
class SortState:
    """Sort selection of a folder view.

    Selecting the current field again flips the order; choosing another field
    starts it descending. Either way the view jumps back to the first page.
    """

    sort_by: SortBy = "created_at"
    sort_order: SortOrder = "desc"
    page: int = 1

    def select(self, sort_by: SortBy) -> SortState:
        if sort_by not in _SORT_KEYS:
            raise ValueError(f"Unsupported sort field: {sort_by}")
        if sort_by == self.sort_by:
            return replace(
                self, sort_order="asc" if self.sort_order == "desc" else "desc", page=1
            )
        return SortState(sort_by=sort_by, sort_order="desc", page=1)

    def goto(self, page: int) -> SortState:
        return replace(self, page=max(page, 1))
