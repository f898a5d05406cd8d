"""Authentication command handlers."""

from getpass import getpass

from .common import reports_errors


@reports_errors
def login_user(ctx):
    """Exchange the owner password for a token and remember it."""
    print("\n=== Login ===")
    password = getpass("Password: ")
    if not password:
        print("Error: Password is required.\n")
        return

    token = ctx.api.login(password)
    ctx.config.save_token(token)
    print("\n✓ Login successful!\n")


def logout_user(ctx):
    """Forget the saved token."""
    ctx.config.delete_token()
    ctx.api.token = None
    print("\n✓ Logged out successfully.\n")
