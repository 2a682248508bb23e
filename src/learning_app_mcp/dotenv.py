"""Load credentials and settings from ``~/.config/learning-app-mcp/.env``.

Only fills variables the process environment leaves unset, so a key exported
in the shell always wins over the file.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "learning-app-mcp" / ".env"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _needs_value(key: str, current: str | None) -> bool:
    """True when *current* is missing, blank, or a literal ``$KEY`` placeholder."""
    if current is None:
        return True
    current = _strip_quotes(current.strip()).strip()
    return not current or current in {f"${key}", f"${{{key}}}"}


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines from *path*.

    Blank lines, ``#`` comments and an ``export`` prefix are accepted; values
    may be single- or double-quoted. A missing file yields an empty dict.
    """
    entries: dict[str, str] = {}
    if not path.is_file():
        return entries

    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").strip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        entries[key] = _strip_quotes(value.strip())
    return entries


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Copy unset variables from the env file into ``os.environ``.

    Returns:
        The variables that were injected.
    """
    injected: dict[str, str] = {}
    for key, value in parse_dotenv(path or DEFAULT_ENV_PATH).items():
        if _needs_value(key, os.environ.get(key)):
            os.environ[key] = value
            injected[key] = value
    return injected
