"""Shared helpers for CLI command handlers."""

import functools
from datetime import datetime

from api.errors import AttachmentError, NoteAppError, RecordNotFound, RecordValidationError
from api.services import temporal

from ..api_client import AuthenticationError, TransportError


def reports_errors(func):
    """Print domain errors raised by a command instead of crashing the REPL."""

    @functools.wraps(func)
    def wrapper(ctx, *args, **kwargs):
        try:
            return func(ctx, *args, **kwargs)
        except AuthenticationError:
            print("Error: Authentication failed. Please /login again.\n")
            ctx.config.delete_token()
            ctx.api.token = None
        except RecordNotFound as e:
            print(f"Error: {e.kind.capitalize()} '{e.record_id}' not found.\n")
        except RecordValidationError as e:
            print(f"Error: {e.message}\n")
        except AttachmentError as e:
            print(f"Error: {e.message}\n")
        except TransportError as e:
            print(f"Error: {e.message}")
            print("Please check that the API server is running (python -m api.server)\n")
        except NoteAppError as e:
            print(f"Error: {e.message}\n")

    return wrapper


def require_login(ctx) -> bool:
    if not ctx.api.token:
        print("Error: You must be logged in. Use /login.\n")
        return False
    return True


def format_date(value: str | datetime) -> str:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return temporal.normalize(value).astimezone().strftime("%Y-%m-%d %H:%M")


def prompt_datetime(label: str) -> datetime | None:
    """Ask for an optional ISO date; empty input means no change."""
    while True:
        raw = input(f"{label} (YYYY-MM-DD HH:MM, Enter to skip): ").strip()
        if not raw:
            return None
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            print("  Invalid date. Use e.g. 2024-03-01 14:30")
            continue
        if value.tzinfo is None:
            # Typed dates are local time
            value = value.astimezone()
        return value


def print_history(label: str, history: list[dict]) -> None:
    """Print a date override history newest first; single entries are skipped."""
    rows = temporal.history_for_display(
        [
            {
                "date": datetime.fromisoformat(entry["date"]),
                "modified_at": datetime.fromisoformat(entry["modified_at"]),
            }
            for entry in history
        ]
    )
    if not rows:
        return
    print(f"{label}:")
    for row in rows:
        marker = " (current)" if row.current else ""
        print(f"  {format_date(row.date)}{marker}  changed {format_date(row.modified_at)}")
