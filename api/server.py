"""Server entry point for running the Folder Notes API."""

import asyncio
import os
import signal

import structlog
import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file before settings are read
load_dotenv()

logger = structlog.get_logger(__name__)

APP_PATH = "api.app:app"


class Server:
    """uvicorn server wrapper that stops cleanly on SIGINT/SIGTERM."""

    def __init__(self, config: uvicorn.Config):
        self.server = uvicorn.Server(config)

    def handle_exit(self, sig, _frame):
        logger.info("shutdown_signal_received", signal=signal.Signals(sig).name)
        self.server.should_exit = True

    async def serve(self):
        signal.signal(signal.SIGINT, self.handle_exit)
        signal.signal(signal.SIGTERM, self.handle_exit)

        await self.server.serve()


def run_server(host: str | None = None, port: int | None = None, reload: bool = False):
    """Run the API with uvicorn; host and port default to HOST/PORT env vars."""
    host = host or os.getenv("HOST", "127.0.0.1")
    port = port or int(os.getenv("PORT", "8000"))

    if reload:
        # Reload spawns a subprocess, so uvicorn keeps its own signal handling
        uvicorn.run(APP_PATH, host=host, port=port, reload=True, log_level="info", access_log=False)
        return

    config = uvicorn.Config(APP_PATH, host=host, port=port, log_level="info", access_log=False)
    asyncio.run(Server(config).serve())


if __name__ == "__main__":
    run_server(reload=os.getenv("RELOAD", "false").lower() == "true")
