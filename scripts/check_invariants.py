"""Report notes whose dates drifted from their history and notes without a folder."""

import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

from api.services import temporal

FIELDS = (temporal.CREATED, temporal.MODIFIED)


async def check_invariants(db) -> dict:
    """Return the ids of inconsistent folders and notes, grouped by problem."""
    report = {"folder_dates": [], "note_dates": [], "orphan_notes": []}

    folder_ids = set()
    async for folder in db.folders.find({}):
        folder_ids.add(folder["_id"])
        if not temporal.is_consistent(folder, temporal.CREATED):
            report["folder_dates"].append(str(folder["_id"]))

    async for note in db.notes.find({}):
        if not all(temporal.is_consistent(note, field) for field in FIELDS):
            report["note_dates"].append(str(note["_id"]))
        if note.get("folder_id") not in folder_ids:
            report["orphan_notes"].append(str(note["_id"]))

    return report


async def main():
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(env_path)

    mongo_url = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    db_name = os.getenv("MONGODB_DB_NAME", "foldernotes")

    print(f"Connecting to MongoDB: {db_name}")
    client = AsyncIOMotorClient(mongo_url, tz_aware=True)
    try:
        report = await check_invariants(client[db_name])
    finally:
        client.close()

    problems = 0
    for name, ids in report.items():
        problems += len(ids)
        mark = "✓" if not ids else "✗"
        print(f"{mark} {name}: {len(ids)}")
        for record_id in ids:
            print(f"    - {record_id}")

    print("\nDone!" if not problems else f"\n{problems} problem(s) found.")


if __name__ == "__main__":
    asyncio.run(main())
