"""Two-stage learning-app generation: video → content spec → HTML document.

One ``PipelineOrchestrator`` owns one run. It drives the text generator
twice (spec from video, then code from spec), tracks the loading/error
state machine, and re-runs stage two when the user saves an edited spec.

Run identity: the session hands every orchestrator a run id and an
``is_current`` predicate. After each suspension point the orchestrator asks
whether it is still the current run; if not, the completion is dropped and
nothing is committed. Stale network calls are never cancelled, only ignored.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from .client import generate_text
from .config import ServerConfig, get_config
from .errors import MalformedResponseError, PipelineBusyError
from .models.app import (
    LOADING_STATES,
    ContentBasis,
    GenerationRequest,
    PipelineSnapshot,
    PipelineState,
)
from .parse import DOCTYPE_MARKER, extract_html_document, extract_json, has_html_document
from .prompts.app import (
    CODE_REGION_CLOSER,
    CODE_REGION_OPENER,
    SPEC_ADDENDUM,
    SPEC_FROM_VIDEO_PROMPT,
)

logger = logging.getLogger(__name__)

Generator = Callable[[GenerationRequest], Awaitable[str]]

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"
CODE_UPDATED_NOTICE = "HTML updated. Changes will appear in the Render tab."
URL_SCHEME_HINT = "URL must begin with http:// or https://"


def error_message(exc: BaseException) -> str:
    """Normalize an exception to the message shown in the error state."""
    return str(exc) or UNKNOWN_ERROR_MESSAGE


class PipelineOrchestrator:
    """Generation run bound to a single, immutable content basis."""

    def __init__(
        self,
        basis: ContentBasis,
        *,
        run_id: int = 0,
        generate: Generator | None = None,
        is_current: Callable[[int], bool] | None = None,
        on_loading_change: Callable[[bool], None] | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        self.basis = basis
        self.run_id = run_id
        self._generate = generate or generate_text
        self._is_current = is_current or (lambda _run_id: True)
        self._on_loading_change = on_loading_change
        self._config = config or get_config()

        self.spec: str = basis.spec or ""
        self.code: str = basis.code or ""
        self.error: str | None = None
        self._state = PipelineState.READY if basis.preseeded else PipelineState.LOADING_SPEC
        self._notice = ""
        self._notice_deadline = 0.0

    # ── State ────────────────────────────────────────────────────────────────

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in LOADING_STATES

    @property
    def is_current(self) -> bool:
        return self._is_current(self.run_id)

    @property
    def notice(self) -> str:
        """Transient "code updated" message; empty once its window has passed."""
        if self._notice and time.monotonic() >= self._notice_deadline:
            self._notice = ""
        return self._notice

    @property
    def error_hint(self) -> str | None:
        if self._state is not PipelineState.ERROR:
            return None
        if self.basis.url.startswith(("http://", "https://")):
            return None
        return URL_SCHEME_HINT

    def _transition(self, state: PipelineState) -> None:
        was_busy = self.busy
        self._state = state
        logger.debug("Run %d → %s", self.run_id, state.value)
        if self._on_loading_change is not None and was_busy != self.busy:
            self._on_loading_change(self.busy)

    def _stale(self, stage: str) -> bool:
        if self.is_current:
            return False
        logger.debug("Run %d superseded; dropping %s result", self.run_id, stage)
        return True

    def _fail(self, exc: Exception, stage: str) -> None:
        logger.warning("Run %d failed during %s: %s", self.run_id, stage, exc)
        self.error = error_message(exc)
        self._transition(PipelineState.ERROR)

    # ── Stages ───────────────────────────────────────────────────────────────

    async def generate_spec_from_video(self, video_url: str) -> str:
        """Stage one: derive a content spec from the video, addendum appended.

        Raises:
            MalformedResponseError: The answer had no JSON object or no string
                ``spec`` field.
        """
        text = await self._generate(
            GenerationRequest(
                model_name=self._config.spec_model,
                prompt=SPEC_FROM_VIDEO_PROMPT,
                video_url=video_url,
                temperature=self._config.default_temperature,
            )
        )
        spec = extract_json(text).get("spec")
        if not isinstance(spec, str):
            raise MalformedResponseError('Model response JSON has no "spec" string field')
        return spec + SPEC_ADDENDUM

    async def generate_code_from_spec(self, spec: str) -> str:
        """Stage two: the spec text is the whole prompt; no video attached.

        Raises:
            MalformedResponseError: The answer carried no ``<!DOCTYPE html>``,
                or the extracted region does not begin with it (closing
                delimiter missing or placed before the marker).
        """
        text = await self._generate(
            GenerationRequest(
                model_name=self._config.code_model,
                prompt=spec,
                temperature=self._config.default_temperature,
            )
        )
        if not has_html_document(text):
            raise MalformedResponseError("Model response did not contain an HTML document")
        code = extract_html_document(text, CODE_REGION_OPENER, CODE_REGION_CLOSER)
        if not code.startswith(DOCTYPE_MARKER):
            raise MalformedResponseError(
                "Model response HTML document was not terminated by the closing delimiter"
            )
        return code

    # ── Operations ───────────────────────────────────────────────────────────

    async def start(self) -> PipelineState:
        """Run the pipeline for this basis; pre-seeded bases finish immediately."""
        if self.basis.preseeded:
            self.spec = self.basis.spec or ""
            self.code = self.basis.code or ""
            self.error = None
            self._transition(PipelineState.READY)
            logger.info("Run %d ready from pre-seeded example", self.run_id)
            return self._state

        self.spec = ""
        self.code = ""
        self.error = None
        self._transition(PipelineState.LOADING_SPEC)
        logger.info("Run %d generating spec for %s", self.run_id, self.basis.url)

        try:
            spec = await self.generate_spec_from_video(self.basis.url)
        except Exception as exc:
            if not self._stale("spec error"):
                self._fail(exc, "spec generation")
            return self._state
        if self._stale("spec"):
            return self._state
        self.spec = spec
        self._transition(PipelineState.LOADING_CODE)

        await self._regenerate_code(spec)
        return self._state

    async def _regenerate_code(self, spec: str) -> None:
        try:
            code = await self.generate_code_from_spec(spec)
        except Exception as exc:
            if not self._stale("code error"):
                self._fail(exc, "code generation")
            return
        if self._stale("code"):
            return
        self.code = code
        self._transition(PipelineState.READY)
        logger.info("Run %d ready (%d chars of code)", self.run_id, len(code))

    async def save_spec(self, edited_spec: str) -> bool:
        """Replace the spec with the trimmed edit and regenerate code.

        An edit identical to the current spec is discarded. The new spec is
        kept even if regeneration fails.

        Returns:
            True when regeneration ran, False when the edit was a no-op.

        Raises:
            PipelineBusyError: A stage is already in flight.
        """
        trimmed = edited_spec.strip()
        if trimmed == self.spec:
            return False
        if self.busy:
            raise PipelineBusyError(f"Run {self.run_id} is still {self._state.value}")

        self.error = None
        self.spec = trimmed
        self._transition(PipelineState.LOADING_CODE)
        logger.info("Run %d regenerating code from edited spec", self.run_id)
        await self._regenerate_code(trimmed)
        return True

    def edit_code(self, code: str | None) -> None:
        """Overwrite the generated code in place; state and spec are untouched."""
        self.code = code or ""
        self._notice = CODE_UPDATED_NOTICE
        self._notice_deadline = time.monotonic() + self._config.notice_seconds

    def snapshot(self) -> PipelineSnapshot:
        """Report this run's state; a superseded run is never reported busy."""
        superseded = not self.is_current
        return PipelineSnapshot(
            run_id=self.run_id,
            state=self._state,
            busy=self.busy and not superseded,
            url=self.basis.url,
            spec=self.spec,
            code=self.code,
            error=self.error,
            error_hint=self.error_hint,
            notice=self.notice,
            preseeded=self.basis.preseeded,
            superseded=superseded,
        )
