"""
Request contract parsing.

Turns the JSON request sent by the editor into a ProjectSpec, rejecting
malformed requests before any target pipeline starts.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from .errors import RequestValidationError
from .ir import ProjectSpec, ScreenNode, Target

REQUIRED_FIELDS = ("name", "targets", "screens")


def _format_location(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def _build_tree(root: dict[str, Any], location: tuple[Any, ...]) -> ScreenNode:
    """
    Build a screen tree bottom-up without recursing.

    Pydantic's own recursion guard rejects trees a few hundred levels deep,
    which would hide the resolver's TREE_TOO_DEEP diagnostic.

    Raises:
        RequestValidationError: With one detail line per malformed node
    """
    details: list[str] = []
    order: list[tuple[ScreenNode, int]] = []
    stack: list[tuple[Any, tuple[Any, ...]]] = [(root, location)]
    while stack:
        raw, loc = stack.pop()
        if not isinstance(raw, dict):
            details.append(f"{_format_location(loc)}: must be an object")
            continue
        children = raw.get("children", [])
        if not isinstance(children, list):
            details.append(f"{_format_location(loc + ('children',))}: must be a list")
            continue
        try:
            shell = ScreenNode.model_validate({**raw, "children": []})
        except ValidationError as e:
            details.extend(f"{_format_location(loc + tuple(err['loc']))}: {err['msg']}" for err in e.errors())
            continue
        order.append((shell, len(children)))
        for index in reversed(range(len(children))):
            stack.append((children[index], loc + ("children", index)))

    if details:
        raise RequestValidationError("Invalid request", details)

    # Pre-order reversed: a node's built children sit on top of the stack
    built: list[ScreenNode] = []
    for shell, child_count in reversed(order):
        children = [built.pop() for _ in range(child_count)]
        built.append(shell.model_copy(update={"children": children}))
    return built[0]


def _with_built_trees(payload: dict[str, Any]) -> dict[str, Any]:
    screens = payload.get("screens")
    if not isinstance(screens, list):
        return payload
    prepared = []
    for index, screen in enumerate(screens):
        if isinstance(screen, dict) and isinstance(screen.get("root"), dict):
            screen = {**screen, "root": _build_tree(screen["root"], ("screens", index, "root"))}
        prepared.append(screen)
    return {**payload, "screens": prepared}


def parse_request(payload: Any) -> ProjectSpec:
    """
    Validate a request payload and build the ProjectSpec.

    Raises:
        RequestValidationError: With one detail line per problem found
    """
    if not isinstance(payload, dict):
        raise RequestValidationError(
            "Invalid request", [f"request body must be an object, got {type(payload).__name__}"]
        )

    details = [f"missing required field '{name}'" for name in REQUIRED_FIELDS if name not in payload]

    targets = payload.get("targets")
    if "targets" in payload:
        if not isinstance(targets, list):
            details.append("'targets' must be a list")
        elif not targets:
            details.append("'targets' must name at least one target")
        else:
            known = {t.value for t in Target}
            unknown = [t for t in targets if not isinstance(t, str) or t not in known]
            if unknown:
                details.append(
                    f"unknown targets: {', '.join(repr(t) for t in unknown)} "
                    f"(expected one of {', '.join(t.value for t in Target)})"
                )

    if details:
        raise RequestValidationError("Invalid request", details)

    try:
        return ProjectSpec.model_validate(_with_built_trees(payload))
    except ValidationError as e:
        raise RequestValidationError(
            "Invalid request",
            [f"{_format_location(err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


def parse_targets(values: list[str]) -> list[Target]:
    """
    Parse target names given on the command line.

    Raises:
        RequestValidationError: If any name is not a known target
    """
    known = {t.value: t for t in Target}
    unknown = [v for v in values if v not in known]
    if unknown:
        raise RequestValidationError(
            "Invalid targets", [f"unknown target {v!r}" for v in unknown]
        )
    return list(dict.fromkeys(known[v] for v in values))
