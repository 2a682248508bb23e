"""Shared Gemini client pool and the single-call text generator."""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

from .config import get_config
from .errors import ConfigurationError, GenerationError
from .models.app import GenerationRequest

logger = logging.getLogger(__name__)

VIDEO_MIME_TYPE = "video/mp4"


def _reason_name(reason: object) -> str:
    """Render an SDK enum (or plain string) as its bare name, e.g. ``SAFETY``."""
    return str(getattr(reason, "value", reason))


class GeminiClient:
    """Process-wide Gemini client pool (one client per API key)."""

    _clients: dict[str, genai.Client] = {}

    @classmethod
    def get(cls, api_key: str | None = None) -> genai.Client:
        """Return (or create) the shared client for *api_key*.

        Raises:
            ConfigurationError: No key passed and none configured.
        """
        key = api_key or get_config().gemini_api_key
        if not key:
            raise ConfigurationError("Gemini API key is missing or empty")
        if key not in cls._clients:
            cls._clients[key] = genai.Client(api_key=key)
            logger.info("Created Gemini client (key …%s)", key[-4:])
        return cls._clients[key]

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            try:
                await client.aio.aclose()
            except Exception:
                logger.debug("Async close failed", exc_info=True)
            try:
                client.close()
            except Exception:
                logger.debug("Sync close failed", exc_info=True)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count


def build_contents(request: GenerationRequest) -> list[types.Content]:
    """Build the single user message: prompt text, then the optional video part."""
    parts = [types.Part(text=request.prompt)]
    if request.video_url:
        parts.append(
            types.Part(
                file_data=types.FileData(
                    mime_type=VIDEO_MIME_TYPE,
                    file_uri=request.video_url,
                )
            )
        )
    return [types.Content(role="user", parts=parts)]


def check_response(response: types.GenerateContentResponse) -> str:
    """Validate response health and return its text.

    Checks run in order: prompt block, missing candidates, abnormal finish
    reason of the first candidate.

    Raises:
        GenerationError: With a message naming the failed check.
    """
    feedback = response.prompt_feedback
    if feedback is not None and feedback.block_reason:
        raise GenerationError(
            "Content generation failed: Prompt blocked "
            f"(reason: {_reason_name(feedback.block_reason)})"
        )

    if not response.candidates:
        raise GenerationError("Content generation failed: No candidates returned.")

    finish_reason = response.candidates[0].finish_reason
    if finish_reason:
        name = _reason_name(finish_reason)
        if name == types.FinishReason.SAFETY.value:
            raise GenerationError(
                "Content generation failed: Response blocked due to safety settings."
            )
        if name != types.FinishReason.STOP.value:
            raise GenerationError(f"Content generation failed: Stopped due to {name}.")

    return response.text or ""


async def generate_text(request: GenerationRequest) -> str:
    """Issue exactly one ``generate_content`` call and return the response text.

    No retries: every failure propagates to the caller after being logged.

    Raises:
        ConfigurationError: No API key configured (raised before any call).
        GenerationError: Prompt blocked, no candidates, or abnormal finish.
    """
    if not get_config().gemini_api_key:
        raise ConfigurationError("Gemini API key is missing or empty")

    client = GeminiClient.get()
    config = types.GenerateContentConfig(temperature=request.temperature)

    try:
        response = await client.aio.models.generate_content(
            model=request.model_name,
            contents=build_contents(request),
            config=config,
        )
        return check_response(response)
    except Exception:
        logger.error(
            "Gemini call or response processing failed (model=%s)",
            request.model_name,
            exc_info=True,
        )
        raise
