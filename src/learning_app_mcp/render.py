"""Rendering boundary for generated code.

Generated HTML only ever runs inside an inline iframe document sandboxed to
``allow-scripts``: scripts execute, but the frame gets an opaque origin and no
forms, popups, top navigation or same-origin access.
"""

from __future__ import annotations

import html
from pathlib import Path

SANDBOX_POLICY = "allow-scripts"


def sandboxed_iframe(code: str, *, title: str = "rendered-html") -> str:
    """Wrap *code* in an ``<iframe srcdoc>`` restricted to script execution."""
    return (
        f'<iframe sandbox="{SANDBOX_POLICY}" title="{html.escape(title)}" '
        f'style="border: none; width: 100%; height: 100%;" '
        f'srcdoc="{html.escape(code, quote=True)}"></iframe>'
    )


def write_app(code: str, path: Path) -> Path:
    """Write the generated document to *path* and return the resolved path."""
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(code, encoding="utf-8")
    return path
