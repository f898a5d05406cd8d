"""Folder endpoints."""

import structlog
from fastapi import APIRouter, Depends

from ..auth import require_session
from ..models import FolderCreate, FolderResponse, FolderStats, FolderUpdate
from ..observability import get_app_metrics, get_tracer
from ..services.store import FolderStore, get_folder_store

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/folders", tags=["folders"], dependencies=[Depends(require_session)])


@router.get("", response_model=list[FolderResponse])
async def list_folders(store: FolderStore = Depends(get_folder_store)):
    """List all folders, newest creation date first, with their note counts."""
    with tracer.start_as_current_span("list_folders") as span:
        folders = await store.list_all()

        span.set_attribute("folders.count", len(folders))
        logger.info("folders_listed", count=len(folders))

        return folders


@router.post("", response_model=FolderResponse, status_code=201)
async def create_folder(folder: FolderCreate, store: FolderStore = Depends(get_folder_store)):
    """
    Create a folder.

    The creation date defaults to now; ``custom_created_at`` backdates it and
    becomes the first entry of the creation date history.
    """
    with tracer.start_as_current_span("create_folder") as span:
        span.set_attribute("folder.name", folder.name)
        span.set_attribute("folder.custom_created_at", folder.custom_created_at is not None)

        logger.info("folder_creation_attempt", name=folder.name)

        created = await store.create(folder)

        span.set_attribute("folder.id", created.id)
        metrics.folders_created.add(1)
        logger.info("folder_created_successfully", folder_id=created.id)

        return created


@router.get("/{folder_id}", response_model=FolderResponse)
async def get_folder(folder_id: str, store: FolderStore = Depends(get_folder_store)):
    """Retrieve a folder by ID."""
    with tracer.start_as_current_span("get_folder") as span:
        span.set_attribute("folder.id", folder_id)

        folder = await store.get(folder_id)

        logger.info("folder_retrieved", folder_id=folder_id)
        return folder


@router.get("/{folder_id}/stats", response_model=FolderStats)
async def get_folder_stats(folder_id: str, store: FolderStore = Depends(get_folder_store)):
    """Note, pin, image and tag counts for a folder."""
    with tracer.start_as_current_span("get_folder_stats") as span:
        span.set_attribute("folder.id", folder_id)

        stats = await store.stats(folder_id)

        logger.info("folder_stats_computed", folder_id=folder_id, notes=stats.notes_count)
        return stats


@router.put("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: str, folder: FolderUpdate, store: FolderStore = Depends(get_folder_store)
):
    """
    Update a folder.

    Name, description and color are replaced. A ``custom_created_at`` value
    is appended to the creation date history and becomes the current date;
    omitting it leaves the history untouched.
    """
    with tracer.start_as_current_span("update_folder") as span:
        span.set_attribute("folder.id", folder_id)
        span.set_attribute("folder.custom_created_at", folder.custom_created_at is not None)

        updated = await store.update(folder_id, folder)

        logger.info(
            "folder_updated_successfully",
            folder_id=folder_id,
            history_length=len(updated.custom_created_dates),
        )
        return updated


@router.delete("/{folder_id}", status_code=204)
async def delete_folder(folder_id: str, store: FolderStore = Depends(get_folder_store)):
    """Delete a folder together with every note it contains."""
    with tracer.start_as_current_span("delete_folder") as span:
        span.set_attribute("folder.id", folder_id)

        notes_deleted = await store.delete(folder_id)

        span.set_attribute("folder.notes_deleted", notes_deleted)
        metrics.folders_deleted.add(1)
        metrics.notes_deleted.add(notes_deleted, {"reason": "cascade"})
        logger.info("folder_deleted_successfully", folder_id=folder_id, notes_deleted=notes_deleted)

        return
