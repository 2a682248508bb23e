"""Static example feed — pre-seeded ``{title, url, spec, code}`` records."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from pydantic import TypeAdapter

from .config import get_config
from .errors import ExampleNotFoundError
from .models.app import Example

logger = logging.getLogger(__name__)

_EXAMPLES_ADAPTER = TypeAdapter(list[Example])


def _read_examples_text(path: str) -> str:
    if path:
        return Path(path).expanduser().read_text(encoding="utf-8")
    return resources.files("learning_app_mcp").joinpath("data/examples.json").read_text(
        encoding="utf-8"
    )


class ExampleLibrary:
    """Examples loaded once per session; the first record is the default."""

    def __init__(self, examples: list[Example] | None = None) -> None:
        self._examples: list[Example] = list(examples or [])

    @classmethod
    def load(cls, path: str | None = None) -> ExampleLibrary:
        """Load from *path*, the configured ``examples_path``, or the packaged data.

        Raises:
            FileNotFoundError: An explicit path does not exist.
            pydantic.ValidationError: The file is not a list of example records.
        """
        source = path if path is not None else get_config().examples_path
        examples = _EXAMPLES_ADAPTER.validate_python(json.loads(_read_examples_text(source)))
        logger.info("Loaded %d example(s) from %s", len(examples), source or "package data")
        return cls(examples)

    @property
    def examples(self) -> list[Example]:
        return list(self._examples)

    @property
    def default_example(self) -> Example:
        """First record, or an empty example when the feed is empty."""
        return self._examples[0] if self._examples else Example()

    def urls(self) -> set[str]:
        return {e.url for e in self._examples if e.url}

    def find(self, key: str) -> Example:
        """Look up an example by exact title, then by URL.

        Raises:
            ExampleNotFoundError: Nothing matches *key*.
        """
        for example in self._examples:
            if example.title == key:
                return example
        for example in self._examples:
            if example.url == key:
                return example
        raise ExampleNotFoundError(f"No example titled or located at {key!r}")

    def __len__(self) -> int:
        return len(self._examples)
