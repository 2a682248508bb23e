"""Tests for YouTube URL validation, embedding, and oEmbed title lookup."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from learning_app_mcp.errors import ValidationError
from learning_app_mcp.youtube import (
    embed_url,
    extract_video_id,
    fetch_video_title,
    thumbnail_url,
    validate_youtube_url,
)

VID = "dQw4w9WgXcQ"


class TestExtractVideoId:
    @pytest.mark.parametrize("url", [
        f"https://www.youtube.com/watch?v={VID}",
        f"https://youtube.com/watch?v={VID}&t=30",
        f"https://m.youtube.com/watch?list=PL1&v={VID}",
        f"https://youtu.be/{VID}",
        f"https://youtu.be/{VID}?si=share",
        f"https://www.youtube.com/embed/{VID}",
        f"https://www.youtube.com/shorts/{VID}",
        f"youtube.com/watch?v={VID}",
    ])
    def test_recognized_forms(self, url: str):
        assert extract_video_id(url) == VID

    @pytest.mark.parametrize("url", [
        "https://example.com/watch",
        "https://www.youtube.com/watch?v=short",
        "https://youtu.be/",
        "not a url",
    ])
    def test_rejected_forms(self, url: str):
        assert extract_video_id(url) is None


class TestValidate:
    def test_valid(self):
        assert validate_youtube_url(f"https://youtu.be/{VID}") == VID

    def test_invalid(self):
        with pytest.raises(ValidationError, match="Invalid YouTube URL"):
            validate_youtube_url("https://vimeo.com/12345")


class TestEmbedHelpers:
    def test_embed_url(self):
        assert embed_url(f"https://youtu.be/{VID}") == f"https://www.youtube.com/embed/{VID}"

    def test_embed_url_falls_back_to_input(self):
        assert embed_url("https://example.com/x") == "https://example.com/x"

    def test_thumbnail_url(self):
        assert thumbnail_url(f"https://www.youtube.com/watch?v={VID}") == (
            f"https://img.youtube.com/vi/{VID}/mqdefault.jpg"
        )
        assert thumbnail_url("https://example.com") == ""


def _mock_httpx(status: int, payload: dict | None = None) -> MagicMock:
    response = MagicMock(status_code=status)
    response.json.return_value = payload or {}
    client = MagicMock()
    client.get = AsyncMock(return_value=response)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestFetchVideoTitle:
    async def test_returns_title(self):
        client = _mock_httpx(200, {"title": "Functional Harmony"})
        with patch("learning_app_mcp.youtube.httpx.AsyncClient", return_value=client):
            assert await fetch_video_title(f"https://youtu.be/{VID}") == "Functional Harmony"
        params = client.get.await_args.kwargs["params"]
        assert params == {"url": f"https://youtu.be/{VID}", "format": "json"}

    async def test_non_200_raises(self):
        with patch("learning_app_mcp.youtube.httpx.AsyncClient", return_value=_mock_httpx(404)):
            with pytest.raises(ValidationError, match="404"):
                await fetch_video_title("https://youtu.be/missing0000")

    async def test_missing_title_raises(self):
        with patch("learning_app_mcp.youtube.httpx.AsyncClient", return_value=_mock_httpx(200, {})):
            with pytest.raises(ValidationError, match="No title"):
                await fetch_video_title(f"https://youtu.be/{VID}")
