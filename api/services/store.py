"""MongoDB-backed storage for folders and notes."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..database import get_db
from ..errors import RecordNotFound
from ..models import (
    FolderCreate,
    FolderResponse,
    FolderStats,
    FolderUpdate,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    PaginationResponse,
)
from . import attachments, temporal
from .query import NoteQuery, query_notes

logger = structlog.get_logger(__name__)

# Listings sort and paginate without the base64 image payloads
LISTING_PROJECTION = {"images.data": 0}


def parse_object_id(value: str, kind: str) -> ObjectId:
    """Convert a path id to an ObjectId; malformed ids are simply not found."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise RecordNotFound(kind, value) from e


class FolderStore:
    """Folders, their derived note counts and cascading deletion."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def find_doc(self, folder_id: str) -> dict:
        doc = await self.db.folders.find_one({"_id": parse_object_id(folder_id, "folder")})
        if doc is None:
            raise RecordNotFound("folder", folder_id)
        return doc

    async def count_notes(self, folder_oid: ObjectId) -> int:
        return await self.db.notes.count_documents({"folder_id": folder_oid})

    async def _all_counts(self) -> dict[ObjectId, int]:
        pipeline = [{"$group": {"_id": "$folder_id", "count": {"$sum": 1}}}]
        rows = await self.db.notes.aggregate(pipeline).to_list(length=None)
        return {row["_id"]: row["count"] for row in rows}

    async def list_all(self) -> list[FolderResponse]:
        docs = await (
            self.db.folders.find({}).sort([("main_created_at", -1), ("_id", 1)]).to_list(length=None)
        )
        counts = await self._all_counts()
        return [FolderResponse.from_doc(doc, counts.get(doc["_id"], 0)) for doc in docs]

    async def get(self, folder_id: str) -> FolderResponse:
        doc = await self.find_doc(folder_id)
        return FolderResponse.from_doc(doc, await self.count_notes(doc["_id"]))

    async def create(self, data: FolderCreate) -> FolderResponse:
        now = temporal.utcnow()
        doc = {
            "name": data.name,
            "description": data.description,
            "color": data.color,
            **temporal.seed(temporal.CREATED, data.custom_created_at, now=now),
            "created_at": now,
            "updated_at": now,
        }
        result = await self.db.folders.insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info("folder_stored", folder_id=str(result.inserted_id), name=data.name)
        return FolderResponse.from_doc(doc, 0)

    async def update(self, folder_id: str, data: FolderUpdate) -> FolderResponse:
        existing = await self.find_doc(folder_id)
        now = temporal.utcnow()

        set_doc, push_doc = temporal.apply_edit(temporal.CREATED, data.custom_created_at, now=now)
        set_doc.update(
            {
                "name": data.name,
                "description": data.description,
                "color": data.color,
                "updated_at": now,
            }
        )
        update = {"$set": set_doc}
        if push_doc:
            update["$push"] = push_doc

        await self.db.folders.update_one({"_id": existing["_id"]}, update)
        return await self.get(folder_id)

    async def delete(self, folder_id: str) -> int:
        """Delete a folder and every note in it.

        Notes go first: a failure in between leaves an empty folder behind,
        never notes without a folder.
        """
        existing = await self.find_doc(folder_id)

        notes_result = await self.db.notes.delete_many({"folder_id": existing["_id"]})
        await self.db.folders.delete_one({"_id": existing["_id"]})

        logger.info(
            "folder_cascade_deleted",
            folder_id=folder_id,
            notes_deleted=notes_result.deleted_count,
        )
        return notes_result.deleted_count

    async def stats(self, folder_id: str) -> FolderStats:
        existing = await self.find_doc(folder_id)
        docs = await self.db.notes.find({"folder_id": existing["_id"]}).to_list(length=None)

        last_modified: datetime | None = None
        if docs:
            last_modified = max(temporal.normalize(doc["main_last_modified"]) for doc in docs)

        return FolderStats(
            folder_id=folder_id,
            notes_count=len(docs),
            pinned_count=sum(1 for doc in docs if doc.get("is_pinned")),
            image_count=sum(len(doc.get("images", [])) for doc in docs),
            tag_count=len({tag for doc in docs for tag in doc.get("tags", [])}),
            last_modified=last_modified,
        )


class NoteStore:
    """Notes with embedded images and date override histories."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.folders = FolderStore(db)

    async def _find(self, note_id: str) -> dict:
        doc = await self.db.notes.find_one({"_id": parse_object_id(note_id, "note")})
        if doc is None:
            raise RecordNotFound("note", note_id)
        return doc

    async def get(self, note_id: str, expand_folder: bool = False) -> NoteResponse:
        doc = await self._find(note_id)
        if not expand_folder:
            return NoteResponse.from_doc(doc)

        folder_doc = await self.db.folders.find_one({"_id": doc["folder_id"]})
        if folder_doc is None:
            raise RecordNotFound("folder", str(doc["folder_id"]))
        count = await self.folders.count_notes(folder_doc["_id"])
        return NoteResponse.from_doc(doc, folder_doc=folder_doc, notes_count=count)

    async def list_in_folder(self, folder_id: str, query: NoteQuery) -> NoteListResponse:
        folder_doc = await self.folders.find_doc(folder_id)
        return await self._list_page({"folder_id": folder_doc["_id"]}, query)

    async def search_all(self, search: str, page: int, limit: int) -> NoteListResponse:
        query = NoteQuery(
            search=search, sort_by="last_modified", sort_order="desc", page=page, limit=limit
        )
        return await self._list_page({}, query)

    async def _list_page(self, selector: dict, query: NoteQuery) -> NoteListResponse:
        docs = await self.db.notes.find(selector, LISTING_PROJECTION).to_list(length=None)
        result = query_notes(docs, query)

        ids = [doc["_id"] for doc in result.notes]
        full = {
            doc["_id"]: doc
            for doc in await self.db.notes.find({"_id": {"$in": ids}}).to_list(length=None)
        }
        page = [full[note_id] for note_id in ids if note_id in full]
        return self._to_list_response(replace(result, notes=page))

    @staticmethod
    def _to_list_response(result) -> NoteListResponse:
        return NoteListResponse(
            notes=[NoteResponse.from_doc(doc) for doc in result.notes],
            pagination=PaginationResponse(
                current=result.pagination.current,
                total=result.pagination.total,
                count=result.pagination.count,
                total_notes=result.pagination.total_notes,
            ),
        )

    async def create(self, data: NoteCreate) -> NoteResponse:
        folder_doc = await self.folders.find_doc(data.folder_id)

        attachments.enforce_limit(0, 0, len(data.images))
        images = attachments.encode_all([image.to_upload() for image in data.images])

        now = temporal.utcnow()
        doc = {
            "folder_id": folder_doc["_id"],
            "title": data.title,
            "content": data.content,
            "tags": data.tags,
            "is_pinned": data.is_pinned,
            "images": images,
            **temporal.seed(temporal.CREATED, now=now),
            **temporal.seed(temporal.MODIFIED, now=now),
            "created_at": now,
            "updated_at": now,
        }
        result = await self.db.notes.insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info(
            "note_stored",
            note_id=str(result.inserted_id),
            folder_id=data.folder_id,
            images=len(images),
        )
        return NoteResponse.from_doc(doc)

    async def update(self, note_id: str, data: NoteUpdate) -> NoteResponse:
        existing = await self._find(note_id)
        current_images = existing.get("images", [])

        known = {image["filename"] for image in current_images}
        removal = {filename for filename in data.remove_images if filename in known}
        attachments.enforce_limit(len(current_images), len(removal), len(data.images))
        added = attachments.encode_all([image.to_upload() for image in data.images])

        now = temporal.utcnow()
        set_doc, push_doc = temporal.merge_updates(
            temporal.apply_edit(temporal.CREATED, data.custom_created_at, now=now),
            temporal.apply_edit(temporal.MODIFIED, data.custom_last_modified, now=now),
        )
        set_doc.update(
            {
                "title": data.title,
                "content": data.content,
                "tags": data.tags,
                "is_pinned": data.is_pinned,
                "images": [img for img in current_images if img["filename"] not in removal]
                + added,
                "updated_at": now,
            }
        )
        update = {"$set": set_doc}
        if push_doc:
            update["$push"] = push_doc

        await self.db.notes.update_one({"_id": existing["_id"]}, update)

        logger.info(
            "note_stored",
            note_id=note_id,
            images_added=len(added),
            images_removed=len(removal),
            dates_overridden=sorted(push_doc),
        )
        return NoteResponse.from_doc(await self._find(note_id))

    async def delete(self, note_id: str) -> str:
        """Delete a note and return the id of the folder it belonged to."""
        existing = await self._find(note_id)
        await self.db.notes.delete_one({"_id": existing["_id"]})
        return str(existing["folder_id"])

    async def toggle_pin(self, note_id: str) -> NoteResponse:
        existing = await self._find(note_id)
        await self.db.notes.update_one(
            {"_id": existing["_id"]},
            {
                "$set": {
                    "is_pinned": not existing.get("is_pinned", False),
                    "updated_at": temporal.utcnow(),
                }
            },
        )
        return NoteResponse.from_doc(await self._find(note_id))


def get_folder_store() -> FolderStore:
    """FastAPI dependency returning a folder store on the live database."""
    return FolderStore(get_db())


def get_note_store() -> NoteStore:
    """FastAPI dependency returning a note store on the live database."""
    return NoteStore(get_db())
