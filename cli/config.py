"""Configuration and token storage for the CLI client."""

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8000"
CONFIG_DIR = Path.home() / ".foldernotes"


@dataclass(frozen=True)
class ClientConfig:
    """Settings resolved once when the CLI starts."""

    api_url: str = DEFAULT_API_URL
    token_file: Path = field(default_factory=lambda: CONFIG_DIR / "token")
    request_timeout: float = 10.0
    image_read_timeout: float = 10.0
    page_size: int = 12

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            api_url=os.getenv("FOLDERNOTES_API_URL", DEFAULT_API_URL),
            token_file=Path(os.getenv("FOLDERNOTES_TOKEN_FILE", str(CONFIG_DIR / "token"))),
            request_timeout=float(os.getenv("FOLDERNOTES_REQUEST_TIMEOUT", "10")),
            image_read_timeout=float(os.getenv("FOLDERNOTES_IMAGE_READ_TIMEOUT", "10")),
            page_size=int(os.getenv("FOLDERNOTES_PAGE_SIZE", "12")),
        )

    def save_token(self, token: str):
        """Save JWT token to local file."""
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(token)

    def load_token(self) -> str | None:
        """Load JWT token from local file."""
        if self.token_file.exists():
            return self.token_file.read_text().strip()
        return None

    def delete_token(self):
        """Delete JWT token file."""
        if self.token_file.exists():
            self.token_file.unlink()
