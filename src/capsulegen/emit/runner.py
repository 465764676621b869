"""
Generation runner - orchestrates multi-target generation.

The GenerationRunner fans one ProjectSpec out to an independent
TargetPipeline per requested target and assembles the per-target terminal
results into a GenerationResponse. A failing target never affects another.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from capsulegen.core.config import GenerationConfig
from capsulegen.core.dependencies import DependencyAggregator
from capsulegen.core.errors import GenerationFailure, InvalidTransitionError
from capsulegen.core.ir import (
    Diagnostic,
    DiagnosticCode,
    GenerationResponse,
    GenerationResult,
    ProjectSpec,
    Target,
    TargetState,
    fatal,
)
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.core.request import parse_request
from capsulegen.core.resolver import TreeResolver

from .adapters import EmitterRegistry, TargetEmitter

logger = logging.getLogger(__name__)

# Legal state transitions; FAILED is reachable from every non-terminal state
TRANSITIONS: dict[TargetState, set[TargetState]] = {
    TargetState.PENDING: {TargetState.RESOLVING, TargetState.FAILED},
    TargetState.RESOLVING: {TargetState.EMITTING, TargetState.FAILED},
    TargetState.EMITTING: {TargetState.SUCCEEDED, TargetState.FAILED},
    TargetState.SUCCEEDED: set(),
    TargetState.FAILED: set(),
}


class Deadline:
    """
    Shared cancellation for one run.

    ``check`` is handed to pipelines as their stage-boundary checkpoint.
    """

    def __init__(self, seconds: float = 0):
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds if seconds > 0 else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def expired(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def remaining(self) -> float | None:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def check(self) -> None:
        """Raise DEADLINE_EXCEEDED once the deadline has passed."""
        if self.expired:
            raise GenerationFailure(self.diagnostic())

    def diagnostic(self, target: Target | None = None) -> Diagnostic:
        return fatal(
            DiagnosticCode.DEADLINE_EXCEEDED,
            f"Generation did not finish within {self.seconds:g}s",
            target=target,
        )


def configured_min_version(project: ProjectSpec, target: Target) -> str | None:
    """Minimum platform version requested by the project, if any."""
    if target == Target.IOS:
        return project.platform_config.ios.min_version
    if target == Target.ANDROID:
        min_sdk = project.platform_config.android.min_sdk
        return str(min_sdk) if min_sdk is not None else None
    return None


class TargetPipeline:
    """
    One target's generation pipeline.

    State machine: pending → resolving → emitting → succeeded, with failed
    reachable from any non-terminal state.
    """

    def __init__(
        self,
        target: Target,
        project: ProjectSpec,
        registry: CapsuleRegistry,
        emitter_class: type[TargetEmitter] | None,
        max_depth: int,
        deadline: Deadline | None = None,
    ):
        self.target = target
        self.project = project
        self.registry = registry
        self.emitter_class = emitter_class
        self.max_depth = max_depth
        self.deadline = deadline or Deadline()
        self.state = TargetState.PENDING
        self.warnings: list[Diagnostic] = []

    def transition(self, new_state: TargetState) -> None:
        """
        Move to ``new_state``.

        Raises:
            InvalidTransitionError: If the move is not allowed from the current state
        """
        if new_state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"{self.target}: illegal transition {self.state} -> {new_state}"
            )
        logger.debug("%s: %s -> %s", self.target, self.state, new_state)
        self.state = new_state

    def run(self) -> GenerationResult:
        """Run the pipeline to a terminal state. Never raises."""
        try:
            return self._run()
        except GenerationFailure as e:
            return self._fail(e.diagnostic)
        except Exception as e:
            logger.exception("%s pipeline crashed", self.target)
            return self._fail(
                fatal(
                    DiagnosticCode.INTERNAL_ERROR,
                    f"Internal error while generating {self.target}: {e}",
                )
            )

    def _run(self) -> GenerationResult:
        checkpoint = self.deadline.check

        self.transition(TargetState.RESOLVING)
        checkpoint()
        resolver = TreeResolver(self.registry, max_depth=self.max_depth)
        resolution = resolver.resolve(self.project, checkpoint=checkpoint)
        self._warn(resolution.warnings)

        self.transition(TargetState.EMITTING)
        if self.emitter_class is None:
            raise GenerationFailure(
                fatal(DiagnosticCode.INTERNAL_ERROR, f"No emitter registered for target '{self.target}'")
            )
        dependencies = DependencyAggregator(self.registry, self.target).aggregate(
            resolution.used_capsules(),
            configured_min_version(self.project, self.target),
        )
        self._warn(dependencies.warnings)

        emitter = self.emitter_class(self.project, self.registry)
        output = emitter.emit(resolution, dependencies, checkpoint=checkpoint)
        self._warn(output.warnings)
        checkpoint()

        self.transition(TargetState.SUCCEEDED)
        logger.info(
            "%s: generated %d files (%d capsules, %d screens)",
            self.target,
            output.stats.file_count,
            output.stats.capsule_count,
            output.stats.screen_count,
        )
        return GenerationResult(
            target=self.target,
            state=self.state,
            files=output.files,
            dependencies=dependencies.dependencies,
            imports=dependencies.imports,
            min_version=dependencies.min_version,
            warnings=self.warnings,
            stats=output.stats,
        )

    def _warn(self, diagnostics: list[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.warnings.append(diagnostic if diagnostic.target else diagnostic.with_target(self.target))

    def _fail(self, diagnostic: Diagnostic) -> GenerationResult:
        diagnostic = diagnostic.with_target(self.target)
        if not self.state.is_terminal:
            self.transition(TargetState.FAILED)
        logger.warning("%s failed: %s", self.target, diagnostic.format())
        return GenerationResult(
            target=self.target,
            state=TargetState.FAILED,
            warnings=self.warnings,
            fatal=diagnostic,
        )


class GenerationRunner:
    """
    Orchestrates generation across targets.

    Targets share only the immutable registry and project; each pipeline
    owns its own result accumulator, so they run safely in parallel.
    """

    def __init__(
        self,
        registry: CapsuleRegistry,
        config: GenerationConfig | None = None,
        emitters: dict[Target, type[TargetEmitter]] | None = None,
    ):
        """
        Initialize the runner.

        Args:
            registry: Capsule catalog to resolve against
            config: Engine configuration (defaults when not provided)
            emitters: Emitter per target (registered emitters when not provided)
        """
        self.registry = registry
        self.config = config or GenerationConfig()
        self.emitters = emitters if emitters is not None else EmitterRegistry.all()

    def pipeline(self, target: Target, project: ProjectSpec, deadline: Deadline) -> TargetPipeline:
        return TargetPipeline(
            target=target,
            project=project,
            registry=self.registry,
            emitter_class=self.emitters.get(target),
            max_depth=self.config.generation.max_depth,
            deadline=deadline,
        )

    def run_request(self, payload: Any) -> GenerationResponse:
        """
        Parse a request payload and run it.

        Raises:
            RequestValidationError: If the payload is rejected before any target runs
        """
        return self.run(parse_request(payload))

    def run(self, project: ProjectSpec, targets: list[Target] | None = None) -> GenerationResponse:
        """
        Generate every requested target.

        Args:
            project: Validated project
            targets: Override of ``project.targets`` (same order semantics)

        Returns:
            GenerationResponse with results in request target order
        """
        requested = list(dict.fromkeys(targets or project.targets))
        settings = self.config.generation
        deadline = Deadline(settings.deadline_seconds)
        logger.info("Generating %s for targets: %s", project.name, ", ".join(requested))

        if settings.parallel and len(requested) > 1:
            results = self._run_parallel(project, requested, deadline)
        else:
            results = [self.pipeline(target, project, deadline).run() for target in requested]

        response = GenerationResponse.from_results(results)
        logger.info(
            "Generation finished: %d/%d targets succeeded",
            len(response.summary.succeeded),
            response.summary.total_targets,
        )
        return response

    def _run_parallel(
        self,
        project: ProjectSpec,
        targets: list[Target],
        deadline: Deadline,
    ) -> list[GenerationResult]:
        executor = ThreadPoolExecutor(
            max_workers=min(self.config.generation.max_workers, len(targets)),
            thread_name_prefix="capsulegen",
        )
        try:
            futures: dict[Target, Future[GenerationResult]] = {
                target: executor.submit(self.pipeline(target, project, deadline).run)
                for target in targets
            }
            wait(futures.values(), timeout=deadline.remaining())
            deadline.cancel()

            results = []
            for target in targets:
                future = futures[target]
                if future.done():
                    results.append(future.result())
                else:
                    logger.warning("%s abandoned at deadline", target)
                    results.append(
                        GenerationResult(
                            target=target,
                            state=TargetState.FAILED,
                            fatal=deadline.diagnostic(target),
                        )
                    )
            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)