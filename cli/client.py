"""Main CLI client with REPL loop."""

import os

from .commands import (
    create_folder,
    create_note,
    delete_folder,
    delete_note,
    edit_folder,
    edit_note,
    folder_stats,
    goto_page,
    list_folders,
    login_user,
    logout_user,
    open_folder,
    search_all,
    search_folder,
    show_listing,
    sort_folder,
    toggle_pin,
    view_note,
)
from .context import ClientContext

# Commands taking no argument
SIMPLE_COMMANDS = {
    "/login": login_user,
    "/logout": logout_user,
    "/folders": list_folders,
    "/mkfolder": create_folder,
    "/note": create_note,
    "/list": show_listing,
}

# Commands receiving the rest of the line as one argument
ARG_COMMANDS = {
    "/editfolder": edit_folder,
    "/rmfolder": delete_folder,
    "/stats": folder_stats,
    "/open": open_folder,
    "/search": search_folder,
    "/sort": sort_folder,
    "/page": goto_page,
    "/find": search_all,
    "/view": view_note,
    "/edit": edit_note,
    "/delete": delete_note,
    "/pin": toggle_pin,
}


def print_help():
    print("\nAuth Commands:")
    print("  /login - Login with the owner password")
    print("  /logout - Logout")
    print("\nFolder Commands:")
    print("  /folders - List folders with note counts")
    print("  /mkfolder - Create a folder")
    print("  /editfolder <id> - Edit a folder and its creation date")
    print("  /rmfolder <id> - Delete a folder and all its notes")
    print("  /stats [id] - Show folder statistics")
    print("  /open <id> - Open a folder")
    print("\nNote Commands (in the open folder):")
    print("  /list - Show the current page again")
    print("  /search [text] - Filter by title, content or tag (empty clears)")
    print("  /sort <created_at|last_modified|title> - Sort; repeat to flip order")
    print("  /page <n> - Go to page n")
    print("  /note - Create a note")
    print("  /view <id> - View a note and its date history")
    print("  /edit <id> - Edit a note")
    print("  /pin <id> - Pin or unpin a note")
    print("  /delete <id> - Delete a note")
    print("  /find <text> - Search all folders")
    print("\nUtility Commands:")
    print("  /help - Show this help")
    print("  /clear - Clear the terminal screen")
    print("\nType 'exit' or 'quit' to leave.")
    print("Note: Make sure the API server is running (python -m api.server)\n")


def dispatch(ctx: ClientContext, user_input: str) -> bool:
    """Run one REPL line; False if it was not a known command."""
    command, _, args = user_input.partition(" ")
    command = command.lower()

    if command in SIMPLE_COMMANDS:
        SIMPLE_COMMANDS[command](ctx)
        return True
    if command in ARG_COMMANDS:
        ARG_COMMANDS[command](ctx, args)
        return True
    if command == "/help":
        print_help()
        return True
    if command == "/clear":
        os.system("cls" if os.name == "nt" else "clear")
        return True
    return False


def main():
    """CLI client for the Folder Notes API."""
    print("Welcome to Folder Notes CLI!")
    print_help()

    ctx = ClientContext.start()
    if ctx.api.token:
        print("✓ You are already logged in.\n")
    else:
        print("⚠ You are not logged in. Please /login.\n")

    try:
        while True:
            try:
                user_input = input("notes> ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!")
                break

            if user_input.lower() in ["exit", "quit"]:
                print("\nGoodbye!")
                break
            if not user_input:
                continue

            if not dispatch(ctx, user_input):
                print(f"Unknown command '{user_input.split()[0]}'. Type /help for commands.\n")
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
