"""Notes command handlers."""

import os
import subprocess
import sys
import tempfile
from pathlib import Path

from api.errors import AttachmentError, RecordNotFound, TooManyAttachments
from api.services.attachments import MAX_IMAGES_PER_NOTE, read_upload, select_images

from ..editing import NoteEditSession, parse_tags, validate_note_fields
from .common import format_date, print_history, prompt_datetime, reports_errors, require_login

SORT_FIELDS = ["created_at", "last_modified", "title"]


def _get_editor():
    """Get the user's preferred text editor."""
    editor = os.environ.get("EDITOR") or os.environ.get("VISUAL")
    if editor:
        return editor

    if sys.platform == "win32":
        return "notepad"
    for editor_cmd in ["nano", "vim", "vi"]:
        try:
            subprocess.run(
                ["which", editor_cmd],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
            return editor_cmd
        except (subprocess.CalledProcessError, FileNotFoundError):
            continue

    return "vi"


def _edit_text(initial: str, label: str) -> str | None:
    """Open ``initial`` in the user's editor; None if the editor failed."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".md", delete=False) as tmp_file:
        tmp_file.write(initial)
        tmp_file_path = Path(tmp_file.name)

    try:
        editor = _get_editor()
        print(f"\nOpening {label} in {editor}...")
        print("Save and close the editor to continue.\n")

        try:
            subprocess.run([editor, str(tmp_file_path)], check=True)
        except subprocess.CalledProcessError:
            print(f"\nError: Editor '{editor}' exited with an error.\n")
            return None
        except FileNotFoundError:
            print(f"\nError: Editor '{editor}' not found.")
            print("You can set your preferred editor with: export EDITOR=nano\n")
            return None

        return tmp_file_path.read_text(encoding="utf-8")
    finally:
        if tmp_file_path.exists():
            tmp_file_path.unlink()


def _read_images(ctx, raw_paths: str) -> list:
    """Read comma-separated image paths, reporting unreadable files one by one."""
    uploads = []
    for raw in raw_paths.split(","):
        path = raw.strip()
        if not path:
            continue
        try:
            uploads.append(read_upload(Path(path).expanduser(), ctx.config.image_read_timeout))
        except AttachmentError as e:
            print(f"  ✗ {e.message}")
        except OSError as e:
            print(f"  ✗ Could not read {path}: {e.strerror}")
    return uploads


def _report_rejections(rejected) -> None:
    for name, error in rejected:
        print(f"  ✗ {name}: {error.message}")


def _report_selection(result) -> None:
    for upload in result.accepted:
        print(f"  ✓ {upload.original_name} ({upload.size // 1024} KB)")
    _report_rejections(result.rejected)


def _print_note_line(note: dict, sort_by: str) -> None:
    pinned = "📌 " if note.get("is_pinned") else ""
    tags = ", ".join(note["tags"]) if note.get("tags") else "no tags"
    date_key = "main_last_modified" if sort_by == "last_modified" else "main_created_at"
    date_label = "Modified" if sort_by == "last_modified" else "Created"
    images = len(note.get("images", []))

    print(f"{pinned}{note['title']}")
    print(f"  ID: {note['id']}")
    print(f"  Tags: {tags} | Images: {images} | {date_label}: {format_date(note[date_key])}\n")


@reports_errors
def show_listing(ctx):
    """Fetch and print the current page of the open folder."""
    folder_id = ctx.browse.folder_id
    if not folder_id:
        print("Error: No folder open. Use /open <folder_id>.\n")
        return
    if not require_login(ctx):
        return

    sort = ctx.browse.sort
    response = ctx.api.list_notes(
        folder_id,
        search=ctx.browse.search,
        sort_by=sort.sort_by,
        sort_order=sort.sort_order,
        page=sort.page,
        limit=ctx.config.page_size,
    )
    ctx.listing.replace(response)
    pagination = ctx.listing.pagination

    count = ctx.counts.count(folder_id)
    search = f" matching '{ctx.browse.search}'" if ctx.browse.search else ""
    print(f"\n=== Notes{search} ({pagination['total_notes']} of {count} in folder) ===")
    print(f"Sorted by {sort.sort_by} ({sort.sort_order})\n")

    if not ctx.listing.notes:
        print("No notes found.\n")
    for note in ctx.listing.notes:
        _print_note_line(note, sort.sort_by)

    print(f"Page {pagination['current']} of {pagination['total']}\n")


def search_folder(ctx, text: str):
    """Filter the open folder by title, content or tag."""
    ctx.browse.search = text.strip() or None
    ctx.browse.sort = ctx.browse.sort.goto(1)
    show_listing(ctx)


def sort_folder(ctx, field: str):
    """Sort by a field; choosing the current field flips the order."""
    field = field.strip().lower()
    if field not in SORT_FIELDS:
        print(f"Error: Usage: /sort <{'|'.join(SORT_FIELDS)}>\n")
        return
    ctx.browse.sort = ctx.browse.sort.select(field)
    show_listing(ctx)


def goto_page(ctx, page: str):
    try:
        number = int(page.strip())
    except ValueError:
        print("Error: Usage: /page <number>\n")
        return
    ctx.browse.sort = ctx.browse.sort.goto(max(1, number))
    show_listing(ctx)


@reports_errors
def search_all(ctx, query: str):
    """Search every folder, most recently modified first."""
    query = query.strip()
    if not query:
        print("Error: Usage: /find <text>\n")
        return
    if not require_login(ctx):
        return

    response = ctx.api.search_notes(query)
    notes = response["notes"]
    if not notes:
        print(f"\nNo notes match '{query}'.\n")
        return

    print(f"\n=== Search '{query}' ({response['pagination']['total_notes']} found) ===\n")
    for note in notes:
        _print_note_line(note, "last_modified")


@reports_errors
def create_note(ctx):
    """Create a note in the open folder; content is written in an external editor."""
    folder_id = ctx.browse.folder_id
    if not folder_id:
        print("Error: Open a folder first with /open <folder_id>.\n")
        return
    if not require_login(ctx):
        return

    print("\n=== Create New Note ===")
    title = input("Title: ").strip()
    if not title:
        print("Error: Title is required.\n")
        return

    tags = parse_tags(input("Tags (comma-separated, optional): "))
    is_pinned = input("Pin this note? (y/N): ").strip().lower() in ["y", "yes"]

    content = _edit_text("", "note content")
    if content is None:
        return
    content = content.strip()
    validate_note_fields(title, content)

    images = []
    raw_paths = input(f"Image paths (comma-separated, up to {MAX_IMAGES_PER_NOTE}): ").strip()
    if raw_paths:
        try:
            result = select_images(_read_images(ctx, raw_paths))
        except TooManyAttachments as e:
            _report_rejections(e.rejected)
            raise
        _report_selection(result)
        images = result.accepted

    note = ctx.api.create_note(folder_id, title, content, tags, is_pinned, images)
    ctx.counts.note_created(folder_id)
    ctx.listing.note_created(note)

    print("\n✓ Note created successfully!")
    print(f"  Note ID: {note['id']}")
    print(f"  Created: {format_date(note['main_created_at'])}\n")


@reports_errors
def view_note(ctx, note_id: str):
    """View a note with its folder and date histories."""
    note_id = note_id.strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /view <note_id>\n")
        return
    if not require_login(ctx):
        return

    note = ctx.api.get_note(note_id, expand_folder=True)
    folder = note["folder"]
    ctx.counts.reconcile(folder)

    print(f"\n{'=' * 60}")
    print(f"Title: {note['title']}")
    print(f"ID: {note['id']}")
    print(f"Folder: {folder['name']} ({folder['notes_count']} notes)")
    tags = ", ".join(note["tags"]) if note.get("tags") else "no tags"
    print(f"Tags: {tags} | Pinned: {note.get('is_pinned', False)}")
    print(f"Created: {format_date(note['main_created_at'])}")
    print(f"Last modified: {format_date(note['main_last_modified'])}")
    print_history("Creation date history", note["custom_created_dates"])
    print_history("Modification date history", note["custom_last_modified_dates"])

    for image in note.get("images", []):
        print(f"Image: {image['original_name']} [{image['filename']}] {image['size'] // 1024} KB")

    print(f"{'=' * 60}\n")
    print(note["content"])
    print(f"\n{'=' * 60}\n")


def _edit_images(ctx, session: NoteEditSession) -> None:
    staged = session.images
    for image in staged.existing:
        print(f"  [{image['filename']}] {image['original_name']}")

    for filename in input("Remove images (filenames, comma-separated): ").split(","):
        if not filename.strip():
            continue
        try:
            staged.mark_for_removal(filename.strip())
        except RecordNotFound:
            print(f"  ✗ No image named '{filename.strip()}' on this note")

    raw_paths = input("Add image paths (comma-separated): ").strip()
    if raw_paths:
        try:
            _report_selection(session.add_images(_read_images(ctx, raw_paths)))
        except TooManyAttachments as e:
            _report_rejections(e.rejected)
            print(f"  ✗ {e.message}; no images were added")

    print(f"  Images after save: {staged.remaining_count()}")


@reports_errors
def edit_note(ctx, note_id: str):
    """Edit a note; saving records a new last-modified date."""
    note_id = note_id.strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /edit <note_id>\n")
        return
    if not require_login(ctx):
        return

    note = ctx.api.get_note(note_id)
    session = NoteEditSession(note)

    print(f"\n=== Edit Note '{note['title']}' ===")
    print("Press Enter to keep the current value.")
    session.title = input(f"Title [{note['title']}]: ").strip() or note["title"]
    raw_tags = input(f"Tags [{', '.join(note['tags'])}]: ").strip()
    if raw_tags:
        session.tags = parse_tags(raw_tags)

    if input("Edit content? (y/N): ").strip().lower() in ["y", "yes"]:
        content = _edit_text(note["content"], f"note '{note['title']}'")
        if content is None:
            return
        session.content = content.strip()

    created_at = prompt_datetime("New creation date")
    if created_at is not None:
        session.set_created_at(created_at)
    print(f"Last modified will be set to {format_date(session.last_modified)}")
    last_modified = prompt_datetime("Different last modified date")
    if last_modified is not None:
        session.set_last_modified(last_modified)

    if input("Change images? (y/N): ").strip().lower() in ["y", "yes"]:
        _edit_images(ctx, session)

    updated = ctx.api.update_note(note_id, session.build_update())
    ctx.listing.note_updated(updated)

    print("\n✓ Note updated successfully!")
    print(f"  Last modified: {format_date(updated['main_last_modified'])}\n")


@reports_errors
def delete_note(ctx, note_id: str):
    note_id = note_id.strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /delete <note_id>\n")
        return
    if not require_login(ctx):
        return

    note = ctx.api.get_note(note_id)
    if input(f"Delete note '{note['title']}'? (y/N): ").strip().lower() not in ["y", "yes"]:
        print("\nDeletion cancelled.\n")
        return

    ctx.api.delete_note(note_id)
    ctx.counts.note_deleted(note["folder"]["id"])
    ctx.listing.note_deleted(note_id)
    print("\n✓ Note deleted.\n")


@reports_errors
def toggle_pin(ctx, note_id: str):
    note_id = note_id.strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /pin <note_id>\n")
        return
    if not require_login(ctx):
        return

    note = ctx.api.toggle_pin(note_id)
    ctx.listing.note_updated(note)
    state = "pinned" if note["is_pinned"] else "unpinned"
    print(f"\n✓ Note '{note['title']}' {state}.\n")
