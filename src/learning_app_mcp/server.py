"""Main FastMCP server — mounts the learning-app sub-server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .client import GeminiClient
from .tools.app import app_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — enables tracing, tears down shared Gemini clients."""
    tracing.setup()
    yield {}
    tracing.shutdown()
    closed = await GeminiClient.close_all()
    logger.info("Lifespan shutdown: closed %d client(s)", closed)


app = FastMCP(
    "learning-app",
    instructions=(
        "Turns a YouTube video into an interactive single-page learning app: "
        "derives a content spec from the video, then generates a self-contained "
        "HTML/JS document. Edit the spec to regenerate, or edit the code directly."
    ),
    lifespan=_lifespan,
)

app.mount(app_server)


def main() -> None:
    """Entry-point for ``learning-app-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
