"""Tests for multi-target orchestration."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

import pytest

from capsulegen.core.config import GenerationConfig, GenerationSettings
from capsulegen.core.dependencies import AggregatedDependencies
from capsulegen.core.errors import InvalidTransitionError, RequestValidationError
from capsulegen.core.ir import DiagnosticCode, Target, TargetState
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.emit import GenerationRunner, TargetPipeline
from capsulegen.emit.adapters import IOSEmitter, WebEmitter
from capsulegen.emit.runner import TRANSITIONS, Deadline

Factory = Callable[..., Any]


class CrashingWebEmitter(WebEmitter):
    """Web emitter with a bug in its scaffold stage."""

    def scaffold(self, dependencies: AggregatedDependencies) -> list[tuple[str, str]]:
        raise RuntimeError("scaffold exploded")


class NoIOSCameraRegistry(CapsuleRegistry):
    """Catalog that withholds the camera's iOS implementation."""

    def implementation_for(self, capsule_id: str, target: Target):
        if capsule_id == "camera" and target == Target.IOS:
            return None
        return super().implementation_for(capsule_id, target)


class SlowWebEmitter(WebEmitter):
    """Web emitter that stalls after the component stage until released."""

    release = threading.Event()
    delay = 5.0

    def component_index(self, capsules):
        self.release.wait(self.delay)
        return super().component_index(capsules)


def _config(**settings: Any) -> GenerationConfig:
    return GenerationConfig(generation=GenerationSettings(**settings))


# =============================================================================
# Orchestration
# =============================================================================


class TestGenerationRunner:
    """Tests for GenerationRunner.run."""

    def test_results_in_request_order(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        project = make_project(card_with_button, targets=["desktop", "web", "ios", "android"])

        response = GenerationRunner(builtin_registry).run(project)

        assert [r.target for r in response.results] == [
            Target.DESKTOP,
            Target.WEB,
            Target.IOS,
            Target.ANDROID,
        ]
        assert response.success
        assert response.summary.succeeded == [Target.DESKTOP, Target.WEB, Target.IOS, Target.ANDROID]
        assert response.summary.total_files == sum(len(r.files) for r in response.results)

    def test_duplicate_targets_collapse(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        project = make_project(card_with_button, targets=["web", "ios", "web"])

        response = GenerationRunner(builtin_registry).run(project)

        assert [r.target for r in response.results] == [Target.WEB, Target.IOS]

    def test_output_is_deterministic(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        """Identical requests produce identical results, parallel or not."""
        root = node(
            "c",
            "card",
            node("cam", "camera"),
            node("nav", "navigation", items=["a", "b"]),
            node("bio", "biometrics"),
            title="Everything",
        )
        project = make_project(root, targets=["web", "ios", "android", "desktop"])

        first = GenerationRunner(builtin_registry).run(project)
        second = GenerationRunner(builtin_registry).run(project)
        sequential = GenerationRunner(builtin_registry, _config(parallel=False)).run(project)

        assert first.model_dump() == second.model_dump()
        assert first.model_dump() == sequential.model_dump()

    def test_one_component_file_per_used_capsule(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        root = node(
            "c",
            "card",
            node("b1", "button", text="One"),
            node("b2", "button", text="Two"),
            node("t", "text", text="Hi"),
            title="Buttons",
        )

        result = GenerationRunner(builtin_registry).run(make_project(root)).results[0]

        components = [f.path for f in result.files if f.path.endswith(".tsx") and "/components/" in f.path]
        assert components == ["src/components/Button.tsx", "src/components/Card.tsx", "src/components/Text.tsx"]
        assert result.stats.capsule_count == 3
        assert result.stats.screen_count == 1
        assert result.stats.file_count == len(result.files)

    def test_dependencies_cover_every_used_capsule(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        root = node("c", "card", node("cam", "camera"), node("img", "image", src="x.png"), title="T")

        result = GenerationRunner(builtin_registry).run(make_project(root, targets=["android"])).results[0]

        for capsule_id in ("card", "camera", "image"):
            declared = builtin_registry.implementation_for(capsule_id, Target.ANDROID).dependencies
            assert set(declared) <= set(result.dependencies)
        assert result.dependencies == sorted(result.dependencies)

    def test_missing_required_prop_fails_target(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        root = node("c", "card", node("b", "button"), title="T")

        response = GenerationRunner(builtin_registry).run(make_project(root, targets=["web", "ios"]))

        assert not response.success
        for result in response.results:
            assert result.state == TargetState.FAILED
            assert result.files == []
            assert result.fatal.code == DiagnosticCode.MISSING_REQUIRED_PROP
            assert result.fatal.target == result.target
            assert result.fatal.node_id == "b"

    def test_unknown_capsule(self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory) -> None:
        response = GenerationRunner(builtin_registry).run(make_project(node("x", "hologram"), targets=["ios"]))

        [result] = response.results
        assert result.fatal.code == DiagnosticCode.UNKNOWN_CAPSULE
        assert response.summary.failed == [Target.IOS]

    def test_unencodable_text_is_a_type_mismatch(
        self, fake_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        project = make_project(node("t", "label", text="Go\ud800"), targets=["web", "android"])

        response = GenerationRunner(fake_registry).run(project)

        for result in response.results:
            assert result.fatal.code == DiagnosticCode.PROP_TYPE_MISMATCH
            assert result.fatal.prop == "text"

    def test_crash_is_isolated(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        """An unexpected error fails only its own target."""
        runner = GenerationRunner(
            builtin_registry,
            emitters={Target.WEB: CrashingWebEmitter, Target.IOS: IOSEmitter},
        )

        response = runner.run(make_project(card_with_button, targets=["web", "ios"]))

        web, ios = response.results
        assert web.state == TargetState.FAILED
        assert web.fatal.code == DiagnosticCode.INTERNAL_ERROR
        assert "scaffold exploded" in web.fatal.message
        assert web.files == []
        assert ios.success
        assert response.success

    def test_missing_emitter(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        runner = GenerationRunner(builtin_registry, emitters={Target.WEB: WebEmitter})

        response = runner.run(make_project(card_with_button, targets=["web", "android"]))

        assert response.results[0].success
        assert response.results[1].fatal.code == DiagnosticCode.INTERNAL_ERROR

    def test_warnings_carry_target(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        root = node("c", "card", node("bio", "biometrics"), title="T", shadow=True)

        response = GenerationRunner(builtin_registry).run(make_project(root, targets=["web", "desktop"]))

        for result in response.results:
            codes = sorted(w.code for w in result.warnings)
            assert codes == [DiagnosticCode.UNKNOWN_PROP, DiagnosticCode.UNSUPPORTED]
            assert all(w.target == result.target for w in result.warnings)

    def test_run_request_validates(self, builtin_registry: CapsuleRegistry) -> None:
        with pytest.raises(RequestValidationError):
            GenerationRunner(builtin_registry).run_request({"name": "x", "targets": ["windows"], "screens": []})

    def test_very_deep_request_fails_per_target(
        self, fake_registry: CapsuleRegistry, make_request: Factory, node: Factory
    ) -> None:
        """A tree far past the depth limit is a per-target failure, not a rejected request."""
        root = node("n0", "box")
        current = root
        for index in range(1, 1000):
            child = node(f"n{index}", "box")
            current["children"].append(child)
            current = child

        response = GenerationRunner(fake_registry).run_request(make_request(root, targets=["web", "ios"]))

        assert not response.success
        assert [r.target for r in response.results] == [Target.WEB, Target.IOS]
        for result in response.results:
            assert result.state == TargetState.FAILED
            assert result.fatal.code == DiagnosticCode.TREE_TOO_DEEP
            assert result.fatal.node_id == "n64"
            assert result.files == []

    def test_implementations_come_from_registry(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        """Emitters and dependency aggregation ask the registry, not the capsule definition."""
        registry = NoIOSCameraRegistry(builtin_registry)
        root = node("c", "card", node("cam", "camera"), title="T")

        [result] = GenerationRunner(registry).run(make_project(root, targets=["ios"])).results

        assert result.success
        assert [w.capsule_id for w in result.warnings if w.code == DiagnosticCode.UNSUPPORTED] == ["camera"]
        assert not any(f.path.endswith("Components/Camera.swift") for f in result.files)
        assert any(f.path.endswith("Components/Card.swift") for f in result.files)


# =============================================================================
# Deadlines
# =============================================================================


class TestDeadline:
    """Tests for deadline handling."""

    def test_no_deadline(self) -> None:
        deadline = Deadline()
        assert deadline.remaining() is None
        assert not deadline.expired
        deadline.check()

    def test_cancel_expires(self) -> None:
        deadline = Deadline(60)
        deadline.cancel()
        assert deadline.expired

    def test_sequential_deadline(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        """A stalled stage is abandoned at the next stage boundary."""
        emitter = type("StalledWeb", (SlowWebEmitter,), {"release": threading.Event(), "delay": 0.3})
        runner = GenerationRunner(
            builtin_registry,
            config=_config(parallel=False, deadline_seconds=0.05),
            emitters={Target.WEB: emitter},
        )

        [result] = runner.run(make_project(card_with_button)).results

        assert result.state == TargetState.FAILED
        assert result.fatal.code == DiagnosticCode.DEADLINE_EXCEEDED
        assert result.files == []

    def test_parallel_deadline_keeps_finished_targets(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        release = threading.Event()
        emitter = type("StuckWeb", (SlowWebEmitter,), {"release": release, "delay": 5.0})
        runner = GenerationRunner(
            builtin_registry,
            config=_config(parallel=True, deadline_seconds=1.0),
            emitters={Target.WEB: emitter, Target.IOS: IOSEmitter},
        )

        started = time.monotonic()
        try:
            response = runner.run(make_project(card_with_button, targets=["web", "ios"]))
        finally:
            release.set()

        assert time.monotonic() - started < 4.0
        web, ios = response.results
        assert web.state == TargetState.FAILED
        assert web.fatal.code == DiagnosticCode.DEADLINE_EXCEEDED
        assert web.files == []
        assert ios.success
        assert response.success


# =============================================================================
# Pipeline state machine
# =============================================================================


class TestTargetPipeline:
    """Tests for TargetPipeline state transitions."""

    def _pipeline(self, registry: CapsuleRegistry, project) -> TargetPipeline:
        return TargetPipeline(Target.WEB, project, registry, WebEmitter, max_depth=64)

    def test_happy_path(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        pipeline = self._pipeline(builtin_registry, make_project(card_with_button))

        result = pipeline.run()

        assert pipeline.state == TargetState.SUCCEEDED
        assert result.state == TargetState.SUCCEEDED

    def test_illegal_transition(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, card_with_button: dict[str, Any]
    ) -> None:
        pipeline = self._pipeline(builtin_registry, make_project(card_with_button))

        with pytest.raises(InvalidTransitionError):
            pipeline.transition(TargetState.SUCCEEDED)

    def test_terminal_states_are_final(self) -> None:
        assert TRANSITIONS[TargetState.SUCCEEDED] == set()
        assert TRANSITIONS[TargetState.FAILED] == set()
        for state, allowed in TRANSITIONS.items():
            if not state.is_terminal:
                assert TargetState.FAILED in allowed

    def test_failed_pipeline_is_terminal(
        self, builtin_registry: CapsuleRegistry, make_project: Factory, node: Factory
    ) -> None:
        pipeline = self._pipeline(builtin_registry, make_project(node("x", "nope")))

        result = pipeline.run()

        assert pipeline.state == TargetState.FAILED
        assert result.fatal.code == DiagnosticCode.UNKNOWN_CAPSULE
        with pytest.raises(InvalidTransitionError):
            pipeline.transition(TargetState.RESOLVING)
