"""
Tree Resolver.

Walks each screen's node tree depth-first, pre-order, resolving capsule
references and coercing props. Produces the resolved tree, the recorded
visit sequence and the set of capsule ids actually used.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .coercion import CoercedProp, PropCoercer
from .errors import GenerationFailure
from .ir import CapsuleDefinition, Diagnostic, DiagnosticCode, ProjectSpec, Screen, ScreenNode
from .ir import fatal
from .registry import CapsuleRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


@dataclass
class ResolvedNode:
    """A node bound to its capsule with coerced props."""

    node: ScreenNode
    capsule: CapsuleDefinition
    props: list[CoercedProp]
    depth: int
    children: list[ResolvedNode] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def capsule_id(self) -> str:
        return self.capsule.id

    def walk(self) -> list[ResolvedNode]:
        """This node and its descendants in pre-order."""
        ordered: list[ResolvedNode] = []
        stack = [self]
        while stack:
            current = stack.pop()
            ordered.append(current)
            stack.extend(reversed(current.children))
        return ordered


@dataclass
class ResolvedScreen:
    screen: Screen
    root: ResolvedNode
    visit_order: list[ResolvedNode]
    used: set[str]

    @property
    def id(self) -> str:
        return self.screen.id


@dataclass
class Resolution:
    """Resolver output for one project."""

    screens: list[ResolvedScreen] = field(default_factory=list)
    used: set[str] = field(default_factory=set)
    warnings: list[Diagnostic] = field(default_factory=list)

    def used_capsules(self) -> list[str]:
        """Used capsule ids in sorted order."""
        return sorted(self.used)


class TreeResolver:
    """
    Resolves screen trees against a capsule registry.

    Traversal is iterative so malformed deep trees fail with TREE_TOO_DEEP
    instead of exhausting the interpreter stack.
    """

    def __init__(
        self,
        registry: CapsuleRegistry,
        max_depth: int = DEFAULT_MAX_DEPTH,
        coercer: PropCoercer | None = None,
    ):
        self.registry = registry
        self.max_depth = max_depth
        self.coercer = coercer or PropCoercer()

    def resolve(
        self,
        project: ProjectSpec,
        checkpoint: Callable[[], None] | None = None,
    ) -> Resolution:
        """
        Resolve every screen of ``project``.

        Args:
            project: Project to resolve
            checkpoint: Called before each screen; may raise to abandon the work

        Raises:
            GenerationFailure: UNKNOWN_CAPSULE, MISSING_REQUIRED_PROP,
                PROP_TYPE_MISMATCH, TREE_TOO_DEEP or DUPLICATE_NODE_ID
        """
        resolution = Resolution()
        for screen in project.screens:
            if checkpoint is not None:
                checkpoint()
            resolved = self.resolve_screen(screen, resolution.warnings)
            resolution.screens.append(resolved)
            resolution.used |= resolved.used

        logger.debug(
            "Resolved %d screens using %d capsules",
            len(resolution.screens),
            len(resolution.used),
        )
        return resolution

    def resolve_screen(self, screen: Screen, warnings: list[Diagnostic]) -> ResolvedScreen:
        """Resolve one screen, appending recoverable diagnostics to ``warnings``."""
        visit_order: list[ResolvedNode] = []
        used: set[str] = set()
        seen_ids: set[str] = set()

        root: ResolvedNode | None = None
        stack: list[tuple[ScreenNode, int, ResolvedNode | None]] = [(screen.root, 1, None)]
        while stack:
            node, depth, parent = stack.pop()
            if depth > self.max_depth:
                raise GenerationFailure(
                    fatal(
                        DiagnosticCode.TREE_TOO_DEEP,
                        f"Screen '{screen.id}' nests deeper than {self.max_depth} levels at node '{node.id}'",
                        screen_id=screen.id,
                        node_id=node.id,
                    )
                )
            if node.id in seen_ids:
                raise GenerationFailure(
                    fatal(
                        DiagnosticCode.DUPLICATE_NODE_ID,
                        f"Screen '{screen.id}' contains node id '{node.id}' more than once",
                        screen_id=screen.id,
                        node_id=node.id,
                    )
                )
            seen_ids.add(node.id)

            capsule = self.registry.lookup(node.capsule_id)
            if capsule is None:
                raise GenerationFailure(
                    fatal(
                        DiagnosticCode.UNKNOWN_CAPSULE,
                        f"Node '{node.id}' references unknown capsule '{node.capsule_id}'",
                        screen_id=screen.id,
                        node_id=node.id,
                        capsule_id=node.capsule_id,
                    )
                )

            outcome = self.coercer.coerce(capsule, node, screen_id=screen.id)
            warnings.extend(outcome.warnings)

            resolved = ResolvedNode(node=node, capsule=capsule, props=outcome.props, depth=depth)
            visit_order.append(resolved)
            used.add(capsule.id)
            if parent is None:
                root = resolved
            else:
                parent.children.append(resolved)

            for child in reversed(node.children):
                stack.append((child, depth + 1, resolved))

        assert root is not None
        return ResolvedScreen(screen=screen, root=root, visit_order=visit_order, used=used)
