"""Session controller — one content basis at a time, one run per basis."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .config import get_config
from .errors import NoActiveRunError, ValidationError
from .examples import ExampleLibrary
from .models.app import ContentBasis, Example, PipelineSnapshot
from .pipeline import Generator, PipelineOrchestrator
from .youtube import validate_youtube_url

logger = logging.getLogger(__name__)


class SessionController:
    """Starts a fresh orchestrator for every submitted URL or selected example.

    The run counter only grows. Each orchestrator checks its run id against
    the counter before committing, so a superseded run's late results never
    reach the visible state. Superseded tasks are left to finish on their own.
    """

    def __init__(
        self,
        library: ExampleLibrary | None = None,
        *,
        generate: Generator | None = None,
        on_loading_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.library = library if library is not None else ExampleLibrary()
        self._generate = generate
        self._on_loading_change = on_loading_change
        self.run_counter = 0
        self.basis: ContentBasis | None = None
        self.selected_example: Example | None = None
        self._orchestrator: PipelineOrchestrator | None = None
        self._task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    # ── Run identity ─────────────────────────────────────────────────────────

    def is_current(self, run_id: int) -> bool:
        return run_id == self.run_counter

    @property
    def orchestrator(self) -> PipelineOrchestrator | None:
        return self._orchestrator

    @property
    def busy(self) -> bool:
        return self._orchestrator is not None and self._orchestrator.busy

    def _relay_loading(self, busy: bool) -> None:
        if self._on_loading_change is not None:
            self._on_loading_change(busy)

    def _start_run(self, basis: ContentBasis) -> int:
        self.run_counter += 1
        self.basis = basis
        orchestrator = PipelineOrchestrator(
            basis,
            run_id=self.run_counter,
            generate=self._generate,
            is_current=self.is_current,
            on_loading_change=self._relay_loading,
        )
        self._orchestrator = orchestrator
        self._relay_loading(orchestrator.busy)

        task = asyncio.get_running_loop().create_task(
            orchestrator.start(), name=f"learning-app-run-{self.run_counter}"
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        self._task = task
        logger.info(
            "Started run %d for %s (preseeded=%s)",
            self.run_counter,
            basis.url,
            basis.preseeded,
        )
        return self.run_counter

    # ── Inputs ───────────────────────────────────────────────────────────────

    def submit_url(self, url: str) -> int:
        """Start a fresh generation run for *url*.

        URLs belonging to a known example skip validation but still generate
        from scratch; only ``select_example`` uses the pre-seeded pair.

        Returns:
            The new run id.

        Raises:
            ValidationError: Empty input, or an invalid YouTube URL while
                ``validate_input_url`` is enabled. No run is started.
        """
        url = url.strip()
        if not url:
            raise ValidationError("Enter a YouTube URL")
        if url not in self.library.urls() and get_config().validate_input_url:
            validate_youtube_url(url)
        self.selected_example = None
        return self._start_run(ContentBasis(url=url))

    def select_example(self, example: Example | str) -> int:
        """Start a pre-seeded run from an example (or its title/URL).

        Raises:
            ExampleNotFoundError: *example* is a string matching nothing.
        """
        if isinstance(example, str):
            example = self.library.find(example)
        self.selected_example = example
        return self._start_run(ContentBasis.from_example(example))

    def preseed_default(self) -> int | None:
        """Select the default example when the library has one."""
        default = self.library.default_example
        if not default.url:
            return None
        return self.select_example(default)

    # ── Current-run operations ───────────────────────────────────────────────

    def require_run(self) -> PipelineOrchestrator:
        """Return the current orchestrator.

        Raises:
            NoActiveRunError: Nothing has been submitted or selected yet.
        """
        if self._orchestrator is None:
            raise NoActiveRunError("No content yet; submit a URL or select an example")
        return self._orchestrator

    async def save_spec(self, edited_spec: str) -> bool:
        return await self.require_run().save_spec(edited_spec)

    def edit_code(self, code: str | None) -> None:
        self.require_run().edit_code(code)

    async def wait(self) -> PipelineSnapshot:
        """Wait for the current run's initial generation and snapshot that run.

        If a newer run starts meanwhile, the returned snapshot still describes
        the awaited run, flagged ``superseded``.
        """
        orchestrator, task = self._orchestrator, self._task
        if task is not None:
            await asyncio.shield(task)
        if orchestrator is None:
            return PipelineSnapshot()
        return orchestrator.snapshot()

    def snapshot(self) -> PipelineSnapshot:
        if self._orchestrator is None:
            return PipelineSnapshot()
        return self._orchestrator.snapshot()
