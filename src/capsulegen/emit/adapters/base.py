"""
Base emitter classes.

One TargetEmitter per target ecosystem. Every emitter runs the same three
stages (component files, screen entry files, scaffold) and differs only in
path layout, call-site grammar and scaffold content.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

from capsulegen.core.coercion import CoercedProp
from capsulegen.core.dependencies import AggregatedDependencies
from capsulegen.core.ir import (
    CapsuleDefinition,
    Diagnostic,
    DiagnosticCode,
    GeneratedFile,
    GenerationStats,
    PlatformImpl,
    ProjectSpec,
    Screen,
    Target,
    warning,
)
from capsulegen.core.registry import CapsuleRegistry
from capsulegen.core.resolver import Resolution, ResolvedNode, ResolvedScreen
from capsulegen.core.strings import to_camel_case, to_pascal_case
from capsulegen.emit.fileset import FileSet
from capsulegen.emit.literals import LiteralStyle, comment_text

logger = logging.getLogger(__name__)

GENERATED_BANNER = "Generated by capsulegen. Do not edit by hand; regenerate instead."


@dataclass
class EmitterOutput:
    """Files and recoverable diagnostics produced by one emitter run."""

    files: list[GeneratedFile] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)
    stats: GenerationStats = field(default_factory=GenerationStats)


class TargetEmitter(ABC):
    """
    Base class for per-target emitters.

    Subclasses provide:
    - Path layout for component, screen and scaffold files
    - Call-site grammar (``render_call`` / ``argument``)
    - Scaffold and theme files
    """

    target: ClassVar[Target]
    literals: ClassVar[LiteralStyle]
    indent_unit: ClassVar[str] = "    "
    max_inline_args: ClassVar[int] = 3
    pascal_names: ClassVar[bool] = True
    # Keywords a derived identifier must not collide with
    reserved_words: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, project: ProjectSpec, registry: CapsuleRegistry):
        self.project = project
        self.registry = registry

    def emit(
        self,
        resolution: Resolution,
        dependencies: AggregatedDependencies,
        checkpoint: Callable[[], None] | None = None,
    ) -> EmitterOutput:
        """
        Run all emission stages.

        Raises:
            GenerationFailure: PATH_COLLISION if two files share a path
        """
        files = FileSet()
        warnings = self.unsupported_warnings(resolution)

        # Component library
        emitted: list[CapsuleDefinition] = []
        for capsule_id in resolution.used_capsules():
            capsule = self.registry.lookup(capsule_id)
            impl = self.registry.implementation_for(capsule_id, self.target) if capsule else None
            if impl is None:
                continue
            files.add(self.component_path(capsule), self.component_file(capsule, impl))
            emitted.append(capsule)
        for path, content in self.component_index(emitted):
            files.add(path, content)

        if checkpoint is not None:
            checkpoint()

        # Screens
        for screen in resolution.screens:
            files.add(self.screen_path(screen.screen), self.screen_file(screen))
        for path, content in self.screen_registry(resolution.screens):
            files.add(path, content)

        if checkpoint is not None:
            checkpoint()

        # Scaffold
        for path, content in self.scaffold(dependencies):
            files.add(path, content)

        logger.debug("%s emitter produced %d files", self.target, len(files))
        return EmitterOutput(
            files=files.files(),
            warnings=warnings,
            stats=files.stats(capsule_count=len(emitted), screen_count=len(resolution.screens)),
        )

    # Naming

    def component_name(self, capsule: CapsuleDefinition) -> str:
        """Identifier a capsule is called by in this target."""
        name = to_pascal_case(capsule.name) if self.pascal_names else to_camel_case(capsule.name)
        name = name or to_pascal_case(capsule.id)
        # Screen entry points own the *Screen names
        if name in self.reserved_words or name.endswith("Screen"):
            return f"{name}Capsule"
        return name

    def screen_name(self, screen: Screen) -> str:
        """Identifier of a screen's entry view/function/component."""
        name = screen.type_name
        if self.pascal_names:
            return name
        return name[0].lower() + name[1:]

    def is_supported(self, node: ResolvedNode) -> bool:
        return self.registry.supports(node.capsule_id, self.target)

    def indent(self, level: int) -> str:
        return self.indent_unit * level

    # Instantiation synthesis

    def render_node(self, node: ResolvedNode, level: int) -> list[str]:
        """Render a node and its subtree as source lines at ``level``."""
        if not self.is_supported(node):
            return [self.indent(level) + self.placeholder(node)]
        args = [self.argument(prop) for prop in node.props if prop.is_set]
        children = [self.render_node(child, level + 1) for child in node.children]
        return self.render_call(self.component_name(node.capsule), args, children, level)

    def placeholder_text(self, node: ResolvedNode) -> str:
        return comment_text(f"{node.capsule_id} ({node.id}) is not available on {self.target}")

    def placeholder(self, node: ResolvedNode) -> str:
        """Neutral stand-in for an omitted subtree."""
        return f"// {self.placeholder_text(node)}"

    def visible_components(self, screen: ResolvedScreen) -> list[str]:
        """Sorted component identifiers actually called by a screen."""
        names: set[str] = set()
        stack = [screen.root]
        while stack:
            node = stack.pop()
            if not self.is_supported(node):
                continue
            names.add(self.component_name(node.capsule))
            stack.extend(node.children)
        return sorted(names)

    def body_lines(self, screen: ResolvedScreen, level: int) -> list[str] | None:
        """Rendered root, or None when the root itself is omitted."""
        if not self.is_supported(screen.root):
            return None
        return self.render_node(screen.root, level)

    @abstractmethod
    def argument(self, prop: CoercedProp) -> str:
        """Render one named argument/attribute."""
        pass

    @abstractmethod
    def render_call(
        self,
        name: str,
        args: list[str],
        children: list[list[str]],
        level: int,
    ) -> list[str]:
        """Render one call site with its already-rendered children."""
        pass

    # Diagnostics

    def unsupported_warnings(self, resolution: Resolution) -> list[Diagnostic]:
        """One UNSUPPORTED warning per capsule, listing every omitted node."""
        dropped: dict[str, list[str]] = {}
        screens: dict[str, list[str]] = {}
        for screen in resolution.screens:
            stack = [screen.root]
            while stack:
                node = stack.pop()
                if self.is_supported(node):
                    stack.extend(reversed(node.children))
                    continue
                dropped.setdefault(node.capsule_id, []).extend(n.id for n in node.walk())
                ids = screens.setdefault(node.capsule_id, [])
                if screen.id not in ids:
                    ids.append(screen.id)

        warnings = []
        for capsule_id in sorted(dropped):
            node_ids = dropped[capsule_id]
            screen_ids = screens[capsule_id]
            message = (
                f"Capsule '{capsule_id}' has no {self.target} implementation; "
                f"omitted nodes: {', '.join(node_ids)}"
            )
            logger.warning(message)
            warnings.append(
                warning(
                    DiagnosticCode.UNSUPPORTED,
                    message,
                    target=self.target,
                    capsule_id=capsule_id,
                    screen_id=screen_ids[0] if len(screen_ids) == 1 else None,
                    node_id=node_ids[0],
                    node_ids=node_ids,
                )
            )
        return warnings

    # Stages

    @abstractmethod
    def component_path(self, capsule: CapsuleDefinition) -> str:
        pass

    @abstractmethod
    def component_file(self, capsule: CapsuleDefinition, impl: PlatformImpl) -> str:
        pass

    def component_index(self, capsules: list[CapsuleDefinition]) -> list[tuple[str, str]]:
        """Optional file(s) re-exporting every component."""
        return []

    @abstractmethod
    def screen_path(self, screen: Screen) -> str:
        pass

    @abstractmethod
    def screen_file(self, screen: ResolvedScreen) -> str:
        pass

    @abstractmethod
    def screen_registry(self, screens: list[ResolvedScreen]) -> list[tuple[str, str]]:
        """Navigation file(s) listing every screen."""
        pass

    @abstractmethod
    def scaffold(self, dependencies: AggregatedDependencies) -> list[tuple[str, str]]:
        """Project skeleton files; independent of the screen tree."""
        pass


class EmitterRegistry:
    """
    Registry for target emitters.

    Maps target ids to emitter implementations.
    """

    _emitters: dict[Target, type[TargetEmitter]] = {}

    @classmethod
    def register(cls, target: Target, emitter: type[TargetEmitter]) -> None:
        """Register an emitter for a target."""
        cls._emitters[target] = emitter

    @classmethod
    def get(cls, target: Target) -> type[TargetEmitter] | None:
        """Get the emitter for a target."""
        return cls._emitters.get(target)

    @classmethod
    def all(cls) -> dict[Target, type[TargetEmitter]]:
        """Snapshot of every registered emitter."""
        return dict(cls._emitters)

    @classmethod
    def list_targets(cls) -> list[Target]:
        """List registered targets."""
        return [t for t in Target if t in cls._emitters]
