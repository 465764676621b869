"""Shared pytest fixtures for capsulegen tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from capsulegen.catalog import load_builtin_registry
from capsulegen.core.ir import (
    CapsuleDefinition,
    GenerationResult,
    PlatformImpl,
    ProjectSpec,
    PropSpec,
    PropType,
    Target,
)
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.emit import GenerationRunner


def _everywhere(template: str, **extra: Any) -> dict[Target, PlatformImpl]:
    return {t: PlatformImpl(source_code=template.format(target=t), **extra) for t in Target}


FAKE_CAPSULES = [
    CapsuleDefinition(
        id="box",
        name="Box",
        category="layout",
        props=[PropSpec(name="title", type=PropType.STRING)],
        platforms=_everywhere("// box for {target}"),
    ),
    CapsuleDefinition(
        id="label",
        name="Label",
        category="ui",
        tags=["text"],
        props=[
            PropSpec(name="text", type=PropType.STRING, required=True),
            PropSpec(name="size", type=PropType.NUMBER, default=14),
            PropSpec(name="bold", type=PropType.BOOLEAN, default=False),
            PropSpec(name="tone", type=PropType.SELECT, options=["plain", "muted"], default="plain"),
        ],
        platforms={
            Target.WEB: PlatformImpl(
                source_code="export function Label() { return null }",
                dependencies=["react"],
                imports=["react"],
            ),
            Target.IOS: PlatformImpl(
                source_code="struct Label: View { var body: some View { EmptyView() } }",
                imports=["SwiftUI"],
                min_version="15.0",
            ),
            Target.ANDROID: PlatformImpl(
                source_code="@Composable\nfun Label() {}",
                dependencies=["androidx.compose.ui:ui"],
                imports=["androidx.compose.runtime.Composable"],
                min_version="24",
            ),
            Target.DESKTOP: PlatformImpl(source_code="export function label() { return null }"),
        },
    ),
    CapsuleDefinition(
        id="gallery",
        name="Photo Gallery",
        category="media",
        props=[PropSpec(name="items", type=PropType.ARRAY, required=True)],
        platforms=_everywhere("// gallery for {target}"),
    ),
    CapsuleDefinition(
        id="clicker",
        name="Clicker",
        category="ui",
        props=[PropSpec(name="onTap", type=PropType.FUNCTION)],
        platforms=_everywhere("// clicker for {target}"),
    ),
    CapsuleDefinition(
        id="scanner",
        name="QR Scanner",
        category="device",
        tags=["camera"],
        platforms={
            Target.IOS: PlatformImpl(
                source_code="struct QRScanner: View { var body: some View { EmptyView() } }",
                dependencies=["ScannerKit"],
                imports=["AVFoundation", "SwiftUI"],
                min_version="16.0",
            ),
            Target.ANDROID: PlatformImpl(
                source_code="@Composable\nfun QRScanner() {}",
                dependencies=["androidx.camera:camera-core:1.3.4"],
                min_version="26",
            ),
        },
    ),
]


@pytest.fixture
def fake_registry() -> CapsuleRegistry:
    """Minimal in-memory catalog."""
    return CapsuleRegistry.from_definitions(FAKE_CAPSULES)


@pytest.fixture(scope="session")
def builtin_registry() -> CapsuleRegistry:
    """The catalog shipped with the package."""
    return load_builtin_registry()


@pytest.fixture
def node() -> Callable[..., dict[str, Any]]:
    """Factory for request-contract nodes: ``node(id, capsule, *children, **props)``."""

    def factory(node_id: str, capsule_id: str, *children: dict[str, Any], **props: Any) -> dict[str, Any]:
        return {
            "id": node_id,
            "capsuleId": capsule_id,
            "props": props,
            "children": list(children),
        }

    return factory


@pytest.fixture
def make_request() -> Callable[..., dict[str, Any]]:
    """Factory for request payloads with a single ``home`` screen by default."""

    def factory(
        root: dict[str, Any] | None = None,
        targets: list[str] | tuple[str, ...] = ("web",),
        screens: list[dict[str, Any]] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        if screens is None:
            screens = [{"id": "home", "name": "Home", "root": root}]
        return {"name": "Demo App", "version": "1.2.0", "targets": list(targets), "screens": screens, **extra}

    return factory


@pytest.fixture
def make_project(make_request: Callable[..., dict[str, Any]]) -> Callable[..., ProjectSpec]:
    """Factory for validated ProjectSpecs."""

    def factory(*args: Any, **kwargs: Any) -> ProjectSpec:
        return ProjectSpec.model_validate(make_request(*args, **kwargs))

    return factory


@pytest.fixture
def card_with_button(node: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    """A card holding one button, using the built-in catalog."""
    return node("welcome", "card", node("go", "button", text="Go"), title="Hi")


@pytest.fixture
def generate() -> Callable[..., GenerationResult]:
    """Run a single target through the full pipeline: ``generate(registry, project, target)``."""

    def factory(registry: CapsuleRegistry, project: ProjectSpec, target: Target | str) -> GenerationResult:
        return GenerationRunner(registry).run(project, [Target(target)]).results[0]

    return factory


@pytest.fixture
def two_screens(node: Callable[..., dict[str, Any]]) -> list[dict[str, Any]]:
    """Feed and profile screens built from the built-in catalog."""
    return [
        {"id": "feed", "name": "Feed", "root": node("f", "card", title="Feed")},
        {"id": "profile", "name": "Profile", "root": node("p", "text", text="Me")},
    ]
