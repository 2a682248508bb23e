"""Learning-app models — generation requests, content basis, pipeline snapshots."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """Lifecycle states of one generation run."""

    LOADING_SPEC = "loading-spec"
    LOADING_CODE = "loading-code"
    READY = "ready"
    ERROR = "error"


LOADING_STATES = frozenset({PipelineState.LOADING_SPEC, PipelineState.LOADING_CODE})


class GenerationRequest(BaseModel):
    """A single request/response call to the model backend."""

    model_name: str = Field(min_length=1)
    prompt: str
    video_url: str | None = Field(
        default=None,
        description="Attached as a video/mp4 file part alongside the prompt",
    )
    temperature: float = 0.75


class Example(BaseModel):
    """One record of the static example feed."""

    title: str = ""
    url: str = ""
    spec: str = ""
    code: str = ""


class ContentBasis(BaseModel):
    """The video reference (and optional pre-seeded pair) driving one run."""

    model_config = ConfigDict(frozen=True)

    url: str
    spec: str | None = None
    code: str | None = None

    @property
    def preseeded(self) -> bool:
        """True only when both spec and code are supplied and non-empty."""
        return bool(self.spec) and bool(self.code)

    @classmethod
    def from_example(cls, example: Example) -> ContentBasis:
        return cls(url=example.url, spec=example.spec, code=example.code)


class PipelineSnapshot(BaseModel):
    """Externally observed state of the current run."""

    run_id: int = 0
    state: PipelineState | None = None
    busy: bool = False
    url: str = ""
    spec: str = ""
    code: str = ""
    error: str | None = None
    error_hint: str | None = None
    notice: str = ""
    preseeded: bool = False
    superseded: bool = Field(
        default=False,
        description="A newer run replaced this one; its pending results are discarded",
    )
