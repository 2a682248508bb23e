"""Server configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

DEFAULT_SPEC_MODEL = "gemini-2.0-flash"
DEFAULT_CODE_MODEL = "gemini-2.5-pro-preview-03-25"

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean env var; unset or blank falls back to *default*."""
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``GEMINI_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled only when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    spec_model: str = Field(default=DEFAULT_SPEC_MODEL)
    code_model: str = Field(default=DEFAULT_CODE_MODEL)
    default_temperature: float = Field(default=0.75)
    validate_input_url: bool = Field(default=True)
    preseed_content: bool = Field(default=False)
    examples_path: str = Field(default="")
    notice_seconds: float = Field(default=2.0)
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="learning-app-mcp")

    @field_validator("default_temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 2.0:
            raise ValueError(f"Temperature must be between 0 and 2, got {value}")
        return value

    @field_validator("notice_seconds")
    @classmethod
    def validate_notice_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("notice_seconds must be > 0")
        return value

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables.

        ``GEMINI_API_KEY`` wins over the legacy ``API_KEY`` name.
        """
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", "") or os.getenv("API_KEY", ""),
            spec_model=os.getenv("LEARNING_APP_SPEC_MODEL", DEFAULT_SPEC_MODEL),
            code_model=os.getenv("LEARNING_APP_CODE_MODEL", DEFAULT_CODE_MODEL),
            default_temperature=float(os.getenv("LEARNING_APP_TEMPERATURE", "0.75")),
            validate_input_url=_env_flag("LEARNING_APP_VALIDATE_URL", True),
            preseed_content=_env_flag("LEARNING_APP_PRESEED", False),
            examples_path=os.getenv("LEARNING_APP_EXAMPLES_PATH", ""),
            notice_seconds=float(os.getenv("LEARNING_APP_NOTICE_SECONDS", "2.0")),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("GEMINI_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "learning-app-mcp"),
        )


# Singleton, initialised once on first access.
_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/learning-app-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logging.getLogger(__name__).info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config; ``None`` values are ignored."""
    global _config
    data = get_config().model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
