"""Per-process client state handed explicitly to every command."""

from dataclasses import dataclass, field

from api.services.query import SortState

from .api_client import NotesApiClient
from .config import ClientConfig
from .sync import FolderCountCache, NoteListing


@dataclass
class BrowseState:
    """What the user is currently looking at."""

    folder_id: str | None = None
    search: str | None = None
    sort: SortState = field(default_factory=SortState)


@dataclass
class ClientContext:
    config: ClientConfig
    api: NotesApiClient
    counts: FolderCountCache = field(default_factory=FolderCountCache)
    listing: NoteListing = field(default_factory=NoteListing)
    browse: BrowseState = field(default_factory=BrowseState)

    @classmethod
    def start(cls, config: ClientConfig | None = None) -> "ClientContext":
        """Create the context at startup, restoring a saved login token."""
        config = config or ClientConfig.from_env()
        api = NotesApiClient(
            config.api_url, token=config.load_token(), timeout=config.request_timeout
        )
        return cls(config=config, api=api)

    def close(self):
        self.api.close()
