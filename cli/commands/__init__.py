"""CLI command handlers."""

from .auth import login_user, logout_user
from .folders import create_folder, delete_folder, edit_folder, folder_stats, list_folders, open_folder
from .notes import (
    create_note,
    delete_note,
    edit_note,
    goto_page,
    search_all,
    search_folder,
    show_listing,
    sort_folder,
    toggle_pin,
    view_note,
)

__all__ = [
    # Auth commands
    "login_user",
    "logout_user",
    # Folder commands
    "create_folder",
    "delete_folder",
    "edit_folder",
    "folder_stats",
    "list_folders",
    "open_folder",
    # Notes commands
    "create_note",
    "delete_note",
    "edit_note",
    "goto_page",
    "search_all",
    "search_folder",
    "show_listing",
    "sort_folder",
    "toggle_pin",
    "view_note",
]
