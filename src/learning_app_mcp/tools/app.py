"""Learning-app tools — generate, inspect, edit, and render on a FastMCP sub-server."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import get_config
from ..errors import NoActiveRunError, PipelineBusyError, make_tool_error
from ..examples import ExampleLibrary
from ..render import sandboxed_iframe, write_app
from ..session import SessionController
from ..tracing import tag_run, trace
from ..youtube import embed_url, fetch_video_title, thumbnail_url

logger = logging.getLogger(__name__)
app_server = FastMCP("learning-app")

_session: SessionController | None = None

WaitParam = Annotated[bool, Field(
    description="Block until generation finishes instead of returning the loading state",
)]


def get_session() -> SessionController:
    """Return the process-wide session, loading the example feed on first use.

    Must be called from inside the event loop: pre-seeding starts a run.
    """
    global _session
    if _session is None:
        _session = SessionController(ExampleLibrary.load())
        if get_config().preseed_content:
            _session.preseed_default()
    return _session


def reset_session() -> None:
    """Drop the session singleton (for testing)."""
    global _session
    _session = None


async def _video_info(url: str) -> dict:
    """Embed URL plus oEmbed title; the title lookup is non-fatal."""
    info = {"embed_url": embed_url(url), "title": ""}
    try:
        info["title"] = await fetch_video_title(url)
    except Exception:
        logger.debug("Title lookup failed for %s", url)
    return info


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="app_generate", span_type="TOOL", attributes={"learning_app.stages": "spec,code"})
async def app_generate(
    url: Annotated[str, Field(min_length=1, description="YouTube video URL")],
    wait: WaitParam = False,
) -> dict:
    """Generate a learning app from a YouTube video.

    Derives a content spec from the video, then synthesizes a single-file
    HTML app from that spec. Any earlier run is superseded. Refused while a
    generation is in progress.

    Args:
        url: YouTube watch, youtu.be, shorts or embed URL.
        wait: Return only after both stages finish (or fail).

    Returns:
        Dict with the run snapshot (run_id, state, spec, code, error) and video info.
    """
    session = get_session()
    try:
        if session.busy:
            raise PipelineBusyError("A generation is already in progress")
        run_id = session.submit_url(url)
    except Exception as exc:
        return make_tool_error(exc)

    tag_run(run_id, url.strip())
    snapshot = await session.wait() if wait else session.snapshot()
    video = await _video_info(url.strip())
    return {**snapshot.model_dump(mode="json"), "video": video}


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="app_select_example", span_type="TOOL", attributes={"learning_app.stages": "none"})
async def app_select_example(
    title: Annotated[str, Field(min_length=1, description="Example title (or its URL)")],
) -> dict:
    """Load a pre-seeded example; no generation calls are made.

    Args:
        title: Title or URL of an entry from app_examples.

    Returns:
        Dict with the run snapshot, already in the ready state.
    """
    session = get_session()
    try:
        run_id = session.select_example(title)
        tag_run(run_id, session.basis.url)
        snapshot = await session.wait()
    except Exception as exc:
        return make_tool_error(exc)
    return snapshot.model_dump(mode="json")


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def app_examples() -> dict:
    """List the bundled examples with thumbnails.

    Returns:
        Dict with ``examples`` (title, url, thumbnail_url) and the ``default`` title.
    """
    library = get_session().library
    return {
        "examples": [
            {"title": e.title, "url": e.url, "thumbnail_url": thumbnail_url(e.url)}
            for e in library.examples
        ],
        "default": library.default_example.title,
    }


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def app_status() -> dict:
    """Report the current run: state, spec, code, error, and any transient notice."""
    return get_session().snapshot().model_dump(mode="json")


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    )
)
@trace(name="app_save_spec", span_type="TOOL", attributes={"learning_app.stages": "code"})
async def app_save_spec(
    spec: Annotated[str, Field(description="Full edited content spec")],
) -> dict:
    """Save an edited spec and regenerate the code from it.

    An edit identical to the current spec (after trimming) changes nothing.
    The edited spec is kept even when regeneration fails.

    Returns:
        Dict with ``regenerated`` plus the snapshot of the run that was
        edited. If a newer run replaced it meanwhile, that snapshot is
        flagged ``superseded`` and its regenerated code was discarded.
    """
    try:
        orchestrator = get_session().require_run()
        tag_run(orchestrator.run_id, orchestrator.basis.url)
        regenerated = await orchestrator.save_spec(spec)
    except Exception as exc:
        return make_tool_error(exc)
    return {"regenerated": regenerated, **orchestrator.snapshot().model_dump(mode="json")}


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def app_edit_code(
    code: Annotated[str, Field(description="Replacement HTML document")],
) -> dict:
    """Overwrite the generated HTML by hand; the spec and state are unchanged."""
    try:
        get_session().edit_code(code)
    except Exception as exc:
        return make_tool_error(exc)
    return get_session().snapshot().model_dump(mode="json")


@app_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def app_render(
    path: Annotated[str | None, Field(
        description="Optional file path to also write the standalone HTML document to",
    )] = None,
) -> dict:
    """Render the current code inside a script-only sandboxed iframe.

    Returns:
        Dict with ``iframe`` markup and, when *path* is given, the written ``path``.
    """
    try:
        snapshot = get_session().snapshot()
        if snapshot.state is None:
            raise NoActiveRunError("No content yet; submit a URL or select an example")
        if not snapshot.code:
            raise ValueError(f"No generated code to render (state: {snapshot.state.value})")
        result = {"run_id": snapshot.run_id, "iframe": sandboxed_iframe(snapshot.code)}
        if path:
            result["path"] = str(write_app(snapshot.code, Path(path)))
        return result
    except (ValueError, OSError, NoActiveRunError) as exc:
        return make_tool_error(exc)
