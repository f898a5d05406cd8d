"""Folder command handlers."""

from .common import format_date, print_history, prompt_datetime, reports_errors, require_login
from .notes import show_listing


@reports_errors
def list_folders(ctx):
    """List folders and reconcile locally cached note counts."""
    if not require_login(ctx):
        return

    folders = ctx.api.list_folders()
    diverged = ctx.counts.load(folders)

    if not folders:
        print("\nNo folders yet. Use /mkfolder to create one.\n")
        return

    print(f"\n=== Your Folders ({len(folders)}) ===\n")
    for folder in folders:
        notes = folder["notes_count"]
        print(f"■ {folder['name']}  [{folder['color']}]")
        print(f"  ID: {folder['id']}")
        if folder.get("description"):
            print(f"  {folder['description']}")
        print(f"  Notes: {notes} | Created: {format_date(folder['main_created_at'])}\n")

    if diverged:
        print(f"(Refreshed note counts for {len(diverged)} folder(s).)\n")


@reports_errors
def create_folder(ctx):
    """Create a folder, optionally backdating its creation date."""
    if not require_login(ctx):
        return

    print("\n=== Create New Folder ===")
    name = input("Name: ").strip()
    if not name:
        print("Error: Folder name is required.\n")
        return
    description = input("Description (optional): ").strip()
    color = input("Color (#rrggbb, Enter for default): ").strip() or None
    created_at = prompt_datetime("Creation date")

    folder = ctx.api.create_folder(name, description, color, created_at)
    ctx.counts.reconcile(folder)

    print("\n✓ Folder created successfully!")
    print(f"  Folder ID: {folder['id']}")
    print(f"  Created: {format_date(folder['main_created_at'])}\n")


@reports_errors
def edit_folder(ctx, folder_id: str):
    """Edit a folder; an entered creation date is appended to its history."""
    folder_id = folder_id.strip()
    if not folder_id:
        print("Error: Usage: /editfolder <folder_id>\n")
        return
    if not require_login(ctx):
        return

    folder = ctx.api.get_folder(folder_id)
    ctx.counts.reconcile(folder)

    print(f"\n=== Edit Folder '{folder['name']}' ===")
    print("Press Enter to keep the current value.")
    name = input(f"Name [{folder['name']}]: ").strip() or folder["name"]
    description = input(f"Description [{folder['description']}]: ").strip() or folder["description"]
    color = input(f"Color [{folder['color']}]: ").strip() or folder["color"]
    print(f"Current creation date: {format_date(folder['main_created_at'])}")
    created_at = prompt_datetime("New creation date")

    updated = ctx.api.update_folder(folder_id, name, description, color, created_at)

    print("\n✓ Folder updated successfully!")
    print_history("Creation date history", updated["custom_created_dates"])
    print()


@reports_errors
def delete_folder(ctx, folder_id: str):
    """Delete a folder and all of its notes."""
    folder_id = folder_id.strip()
    if not folder_id:
        print("Error: Usage: /rmfolder <folder_id>\n")
        return
    if not require_login(ctx):
        return

    folder = ctx.api.get_folder(folder_id)
    prompt = (
        f"Delete folder '{folder['name']}' and its {folder['notes_count']} note(s)? (y/N): "
    )
    if input(prompt).strip().lower() not in ["y", "yes"]:
        print("\nDeletion cancelled.\n")
        return

    ctx.api.delete_folder(folder_id)
    ctx.counts.folder_deleted(folder_id)
    if ctx.browse.folder_id == folder_id:
        ctx.browse.folder_id = None

    print("\n✓ Folder and its notes deleted.\n")


@reports_errors
def folder_stats(ctx, folder_id: str):
    folder_id = folder_id.strip() or (ctx.browse.folder_id or "")
    if not folder_id:
        print("Error: Usage: /stats <folder_id>\n")
        return
    if not require_login(ctx):
        return

    stats = ctx.api.folder_stats(folder_id)
    last = format_date(stats["last_modified"]) if stats.get("last_modified") else "never"
    print(f"\nNotes: {stats['notes_count']} | Pinned: {stats['pinned_count']}")
    print(f"Images: {stats['image_count']} | Distinct tags: {stats['tag_count']}")
    print(f"Last modified: {last}\n")


@reports_errors
def open_folder(ctx, folder_id: str):
    """Make a folder current and show its first page of notes."""
    folder_id = folder_id.strip()
    if not folder_id:
        print("Error: Usage: /open <folder_id>\n")
        return
    if not require_login(ctx):
        return

    folder = ctx.api.get_folder(folder_id)
    ctx.counts.reconcile(folder)

    ctx.browse.folder_id = folder_id
    ctx.browse.search = None
    ctx.browse.sort = ctx.browse.sort.goto(1)
    show_listing(ctx)
