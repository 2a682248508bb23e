"""Exception hierarchy, error categories, and the tool error model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class LearningAppError(Exception):
    """Base class for every error raised by the generation pipeline."""


class ConfigurationError(LearningAppError):
    """No Gemini credential is configured; no call can be issued."""


class GenerationError(LearningAppError):
    """The backend rejected the prompt or stopped abnormally."""


class MalformedResponseError(LearningAppError):
    """Backend text did not contain the expected JSON or HTML payload."""


class ValidationError(LearningAppError):
    """A video reference was rejected before any generation started."""


class PipelineBusyError(LearningAppError):
    """A generation is already in flight for this run."""


class NoActiveRunError(LearningAppError):
    """The session has no content basis yet."""


class ExampleNotFoundError(LearningAppError):
    """No example matches the requested title or URL."""


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    URL_INVALID = "URL_INVALID"
    PROMPT_BLOCKED = "PROMPT_BLOCKED"
    RESPONSE_BLOCKED = "RESPONSE_BLOCKED"
    GENERATION_FAILED = "GENERATION_FAILED"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    PIPELINE_BUSY = "PIPELINE_BUSY"
    NO_ACTIVE_RUN = "NO_ACTIVE_RUN"
    EXAMPLE_NOT_FOUND = "EXAMPLE_NOT_FOUND"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    NETWORK_ERROR = "NETWORK_ERROR"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, ConfigurationError):
        return (
            ErrorCategory.CONFIGURATION_MISSING,
            "Set GEMINI_API_KEY (or API_KEY) and restart the server",
        )
    if isinstance(error, ValidationError):
        return (
            ErrorCategory.URL_INVALID,
            "Use a YouTube watch, youtu.be, shorts or embed URL beginning with https://",
        )
    if isinstance(error, PipelineBusyError):
        return (
            ErrorCategory.PIPELINE_BUSY,
            "Wait for the current generation to finish, then try again",
        )
    if isinstance(error, NoActiveRunError):
        return (
            ErrorCategory.NO_ACTIVE_RUN,
            "Generate from a URL or select an example first",
        )
    if isinstance(error, ExampleNotFoundError):
        return (
            ErrorCategory.EXAMPLE_NOT_FOUND,
            "Call app_examples to list the available titles",
        )
    if isinstance(error, MalformedResponseError):
        return (
            ErrorCategory.MALFORMED_RESPONSE,
            "The model answered without the expected payload; regenerate",
        )

    s = str(error).lower()
    if isinstance(error, GenerationError):
        if "prompt blocked" in s:
            return (ErrorCategory.PROMPT_BLOCKED, "The prompt was rejected by the backend")
        if "safety" in s:
            return (
                ErrorCategory.RESPONSE_BLOCKED,
                "The response was blocked by safety settings; try another video or edit the spec",
            )
        return (ErrorCategory.GENERATION_FAILED, "Generation stopped early; regenerate")

    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (
            ErrorCategory.API_QUOTA_EXCEEDED,
            "Rate limit hit — wait and retry, or switch to a cheaper model",
        )
    if "403" in s:
        return (
            ErrorCategory.API_PERMISSION_DENIED,
            "API key lacks permission OR video is restricted (age-gated, region-locked, private)",
        )
    if isinstance(error, TimeoutError) or "timeout" in s or "timed out" in s:
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out — try again or check connectivity",
        )
    if isinstance(error, FileNotFoundError):
        return (ErrorCategory.FILE_NOT_FOUND, "File not found — check the path")

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.NETWORK_ERROR,
        ErrorCategory.PIPELINE_BUSY,
    }
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
