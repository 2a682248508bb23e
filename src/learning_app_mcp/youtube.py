"""YouTube URL validation, embedding helpers, and oEmbed title lookup."""

from __future__ import annotations

import logging
import re
from urllib.parse import parse_qs, urlparse

import httpx

from .errors import ValidationError

logger = logging.getLogger(__name__)

VIDEO_ID_LENGTH = 11
OEMBED_ENDPOINT = "https://www.youtube.com/oembed"

# Catch-all for shapes urlparse misses (missing scheme, /v/, /u/x/ paths).
_FALLBACK_ID_RE = re.compile(r"^.*(youtu.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")


def _is_youtube_host(host: str) -> bool:
    """Check if host is a youtube.com domain (including subdomains like www.youtube.com)."""
    return host == "youtube.com" or host.endswith(".youtube.com")


def _is_youtu_be_host(host: str) -> bool:
    return host in {"youtu.be", "www.youtu.be"}


def _valid_id(candidate: str | None) -> str | None:
    if candidate and len(candidate) == VIDEO_ID_LENGTH:
        return candidate
    return None


def _fallback_video_id(url: str) -> str | None:
    match = _FALLBACK_ID_RE.match(url)
    return _valid_id(match.group(2)) if match else None


def extract_video_id(url: str) -> str | None:
    """Extract the 11-character video ID from a YouTube URL.

    Handles:
    - youtube.com/watch?v=<id>
    - youtu.be/<id>
    - youtube.com/embed/<id>, /shorts/<id>, /live/<id>

    Falls back to a permissive regex for anything urlparse does not resolve.

    Returns:
        Video ID string, or None if the URL is not a recognized YouTube format.
    """
    parsed = urlparse(url.strip())
    host = (parsed.hostname or "").lower()

    if _is_youtu_be_host(host):
        vid = _valid_id(parsed.path.strip("/").split("/", 1)[0])
        if vid:
            return vid
    elif _is_youtube_host(host):
        vid = _valid_id(parse_qs(parsed.query).get("v", [None])[0])
        if vid:
            return vid
        parts = [p for p in parsed.path.split("/") if p]
        if len(parts) >= 2 and parts[0] in {"embed", "shorts", "live"}:
            vid = _valid_id(parts[1])
            if vid:
                return vid

    return _fallback_video_id(url)


def validate_youtube_url(url: str) -> str:
    """Return the video ID for *url*.

    Raises:
        ValidationError: If no video ID can be extracted.
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise ValidationError("Invalid YouTube URL")
    return video_id


def embed_url(url: str) -> str:
    """Return the ``youtube.com/embed`` player URL, or *url* unchanged."""
    video_id = _fallback_video_id(url)
    if video_id:
        return f"https://www.youtube.com/embed/{video_id}"
    logger.warning("Could not extract video ID for embedding, using original URL: %s", url)
    return url


def thumbnail_url(url: str) -> str:
    """Return the medium-quality thumbnail URL, or "" when no ID is found."""
    video_id = _fallback_video_id(url)
    return f"https://img.youtube.com/vi/{video_id}/mqdefault.jpg" if video_id else ""


async def fetch_video_title(url: str, *, timeout: float = 10.0) -> str:
    """Look up a video's title via YouTube's oEmbed endpoint.

    Raises:
        ValidationError: The endpoint rejected the URL or returned no title.
        httpx.HTTPError: Transport-level failures.
    """
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.get(OEMBED_ENDPOINT, params={"url": url, "format": "json"})
    if response.status_code != 200:
        raise ValidationError(f"Not a valid video URL (oEmbed returned {response.status_code})")
    title = response.json().get("title")
    if not title:
        raise ValidationError("No title found in the oEmbed response")
    return title
