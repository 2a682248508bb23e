"""Shared test fixtures for learning-app-mcp."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import types

from learning_app_mcp.models.app import GenerationRequest


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


class FakeGenerator:
    """Scripted stand-in for ``generate_text``.

    Answers call *n* with ``responses[n]`` (raising it if it is an exception).
    ``hold(n)`` returns an event that call *n* waits on before answering.
    """

    def __init__(self, *responses: str | BaseException) -> None:
        self.responses = list(responses)
        self.requests: list[GenerationRequest] = []
        self._gates: dict[int, asyncio.Event] = {}

    def hold(self, index: int) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[index] = gate
        return gate

    async def __call__(self, request: GenerationRequest) -> str:
        index = len(self.requests)
        self.requests.append(request)
        gate = self._gates.get(index)
        if gate is not None:
            await gate.wait()
        result = self.responses[index]
        if isinstance(result, BaseException):
            raise result
        return result

    async def wait_for_calls(self, count: int) -> None:
        while len(self.requests) < count:
            await asyncio.sleep(0)


def make_response(
    text: str | None = "ok",
    *,
    finish_reason: types.FinishReason | None = types.FinishReason.STOP,
    block_reason: types.BlockedReason | None = None,
    candidates: bool = True,
) -> MagicMock:
    """Build a GenerateContentResponse-shaped mock."""
    response = MagicMock()
    response.text = text
    if block_reason is None:
        response.prompt_feedback = None
    else:
        response.prompt_feedback = MagicMock(block_reason=block_reason)
    if candidates:
        response.candidates = [MagicMock(finish_reason=finish_reason)]
    else:
        response.candidates = []
    return response


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable."""
    import importlib
    import pkgutil

    import learning_app_mcp.tools as tools_pkg

    for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + "."):
        mod = importlib.import_module(info.name)
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    monkeypatch.setenv("GEMINI_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/learning-app-mcp/.env."""
    monkeypatch.setattr(
        "learning_app_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _clean_config():
    """Reset the config singleton between tests."""
    import learning_app_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture(autouse=True)
def _clean_session():
    """Drop the tool-layer session singleton between tests."""
    from learning_app_mcp.tools.app import reset_session

    reset_session()
    yield
    reset_session()


@pytest.fixture()
def mock_genai_client():
    """Patch GeminiClient.get() to return a client whose generate_content is an AsyncMock."""
    with patch("learning_app_mcp.client.GeminiClient.get") as mock_get:
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=make_response())
        mock_get.return_value = client
        yield {
            "get": mock_get,
            "client": client,
            "generate_content": client.aio.models.generate_content,
        }
