"""Notes endpoints."""

from typing import Literal

import structlog
from fastapi import APIRouter, Depends, Query

from ..auth import require_session
from ..config import Settings, get_settings
from ..errors import AttachmentError
from ..models import NoteCreate, NoteListResponse, NoteResponse, NoteUpdate
from ..observability import get_app_metrics, get_tracer
from ..services.query import NoteQuery
from ..services.store import NoteStore, get_note_store

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/notes", tags=["notes"], dependencies=[Depends(require_session)])

GLOBAL_SEARCH_PAGE_SIZE = 20


@router.get("/folder/{folder_id}", response_model=NoteListResponse)
async def list_folder_notes(
    folder_id: str,
    search: str | None = None,
    sort_by: Literal["created_at", "last_modified", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    store: NoteStore = Depends(get_note_store),
    settings: Settings = Depends(get_settings),
):
    """
    List the notes of a folder.

    Pinned notes always come first; each group is sorted by ``sort_by`` in
    ``sort_order``. Out-of-range pages are clamped to the last page.
    """
    with tracer.start_as_current_span("list_folder_notes") as span:
        limit = min(limit or settings.default_page_size, settings.max_page_size)

        span.set_attribute("folder.id", folder_id)
        span.set_attribute("query.sort_by", sort_by)
        span.set_attribute("query.sort_order", sort_order)
        span.set_attribute("query.page", page)
        span.set_attribute("query.limit", limit)
        span.set_attribute("query.search", bool(search and search.strip()))

        query = NoteQuery(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        result = await store.list_in_folder(folder_id, query)

        span.set_attribute("notes.count", result.pagination.count)
        span.set_attribute("notes.total", result.pagination.total_notes)
        metrics.listing_size.record(result.pagination.total_notes)

        logger.info(
            "notes_listed",
            folder_id=folder_id,
            count=result.pagination.count,
            total=result.pagination.total_notes,
            page=result.pagination.current,
        )
        return result


@router.get("/search", response_model=NoteListResponse)
async def search_notes(
    q: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    limit: int = Query(GLOBAL_SEARCH_PAGE_SIZE, ge=1),
    store: NoteStore = Depends(get_note_store),
    settings: Settings = Depends(get_settings),
):
    """Search notes across every folder, most recently modified first."""
    with tracer.start_as_current_span("search_notes") as span:
        limit = min(limit, settings.max_page_size)
        span.set_attribute("query.page", page)
        span.set_attribute("query.limit", limit)

        result = await store.search_all(q, page, limit)

        span.set_attribute("notes.total", result.pagination.total_notes)
        logger.info("notes_searched", total=result.pagination.total_notes)
        return result


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(note: NoteCreate, store: NoteStore = Depends(get_note_store)):
    """
    Create a note in a folder.

    Images are sent as data URIs (or bare base64) and stored inline. At most
    five images of up to 5MB each are accepted.
    """
    with tracer.start_as_current_span("create_note") as span:
        span.set_attribute("note.title", note.title)
        span.set_attribute("note.folder_id", note.folder_id)
        span.set_attribute("note.tags_count", len(note.tags))
        span.set_attribute("note.images_count", len(note.images))

        logger.info("note_creation_attempt", folder_id=note.folder_id, title=note.title)

        try:
            created = await store.create(note)
        except AttachmentError as e:
            metrics.attachments_rejected.add(1, {"reason": e.code})
            raise

        span.set_attribute("note.id", created.id)
        metrics.notes_created.add(1)
        logger.info("note_created_successfully", note_id=created.id, folder_id=note.folder_id)

        return created


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str, expand_folder: bool = False, store: NoteStore = Depends(get_note_store)
):
    """
    Retrieve a note by ID.

    With ``expand_folder`` the owning folder is embedded as a full snapshot;
    otherwise only its id is returned.
    """
    with tracer.start_as_current_span("get_note") as span:
        span.set_attribute("note.id", note_id)
        span.set_attribute("note.expand_folder", expand_folder)

        note = await store.get(note_id, expand_folder=expand_folder)

        logger.info("note_retrieved", note_id=note_id)
        return note


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str, note_update: NoteUpdate, store: NoteStore = Depends(get_note_store)
):
    """
    Update a note.

    Title, content, tags and pin state are replaced. Images listed in
    ``remove_images`` are dropped and new ``images`` appended. Supplied date
    overrides are appended to their history; omitted ones are left alone.
    """
    with tracer.start_as_current_span("update_note") as span:
        span.set_attribute("note.id", note_id)
        span.set_attribute("note.images_added", len(note_update.images))
        span.set_attribute("note.images_removed", len(note_update.remove_images))

        try:
            updated = await store.update(note_id, note_update)
        except AttachmentError as e:
            metrics.attachments_rejected.add(1, {"reason": e.code})
            raise

        overrides = sum(
            value is not None
            for value in (note_update.custom_created_at, note_update.custom_last_modified)
        )
        if overrides:
            metrics.date_overrides.add(overrides)

        logger.info("note_updated_successfully", note_id=note_id, date_overrides=overrides)
        return updated


@router.patch("/{note_id}/pin", response_model=NoteResponse)
async def toggle_pin(note_id: str, store: NoteStore = Depends(get_note_store)):
    """Flip the pinned flag of a note. Date histories are not touched."""
    with tracer.start_as_current_span("toggle_pin") as span:
        span.set_attribute("note.id", note_id)

        note = await store.toggle_pin(note_id)

        span.set_attribute("note.is_pinned", note.is_pinned)
        logger.info("note_pin_toggled", note_id=note_id, is_pinned=note.is_pinned)
        return note


@router.delete("/{note_id}", status_code=204)
async def delete_note(note_id: str, store: NoteStore = Depends(get_note_store)):
    """Permanently delete a note."""
    with tracer.start_as_current_span("delete_note") as span:
        span.set_attribute("note.id", note_id)

        folder_id = await store.delete(note_id)

        metrics.notes_deleted.add(1, {"reason": "direct"})
        logger.info("note_deleted_successfully", note_id=note_id, folder_id=folder_id)

        # 204 No Content - no response body needed
        return
