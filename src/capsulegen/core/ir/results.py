"""
Generation result types for capsulegen IR.

These form the response contract handed to downstream packagers.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .capsules import Target
from .diagnostics import Diagnostic

_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TargetState(StrEnum):
    """Lifecycle of one target pipeline."""

    PENDING = "pending"
    RESOLVING = "resolving"
    EMITTING = "emitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TargetState.SUCCEEDED, TargetState.FAILED)


class GeneratedFile(BaseModel):
    """One emitted file. ``path`` is unique within a target's output."""

    path: str
    content: str
    language: str | None = None

    model_config = _MODEL_CONFIG


class GenerationStats(BaseModel):
    """Size figures for one target's output."""

    file_count: int = 0
    total_size: int = 0
    capsule_count: int = 0
    screen_count: int = 0

    model_config = _MODEL_CONFIG


class GenerationResult(BaseModel):
    """
    Terminal result of one target pipeline.

    A failed target carries its ``fatal`` diagnostic and no files.
    """

    target: Target
    state: TargetState
    files: list[GeneratedFile] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    min_version: str | None = None
    warnings: list[Diagnostic] = Field(default_factory=list)
    fatal: Diagnostic | None = None
    stats: GenerationStats = Field(default_factory=GenerationStats)

    model_config = _MODEL_CONFIG

    @property
    def success(self) -> bool:
        return self.state == TargetState.SUCCEEDED

    def file(self, path: str) -> GeneratedFile | None:
        """Get an emitted file by path."""
        for generated in self.files:
            if generated.path == path:
                return generated
        return None


class GenerationSummary(BaseModel):
    """Aggregate figures across all requested targets."""

    total_targets: int
    succeeded: list[Target] = Field(default_factory=list)
    failed: list[Target] = Field(default_factory=list)
    total_files: int = 0

    model_config = _MODEL_CONFIG


class GenerationResponse(BaseModel):
    """
    Response for a multi-target request.

    ``success`` means at least one target succeeded, never that all did.
    """

    success: bool
    results: list[GenerationResult]
    summary: GenerationSummary

    model_config = _MODEL_CONFIG

    def result_for(self, target: Target) -> GenerationResult | None:
        """Get the result for one target."""
        for result in self.results:
            if result.target == target:
                return result
        return None

    @classmethod
    def from_results(cls, results: list[GenerationResult]) -> GenerationResponse:
        succeeded = [r.target for r in results if r.success]
        failed = [r.target for r in results if not r.success]
        return cls(
            success=bool(succeeded),
            results=results,
            summary=GenerationSummary(
                total_targets=len(results),
                succeeded=succeeded,
                failed=failed,
                total_files=sum(len(r.files) for r in results),
            ),
        )
