"""
Dependency Aggregator.

Merges the dependency and import declarations of every used capsule for
one target and surfaces the highest minimum platform version any of them
requires.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .ir import Diagnostic, DiagnosticCode, Target, warning
from .registry import CapsuleRegistry

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\d+")


def version_key(version: str) -> tuple[int, ...]:
    """
    Ordering key for dotted versions.

    Each dot-separated segment contributes its leading integer (0 when it
    has none), trailing zero segments are ignored.

    >>> version_key("15.0") == version_key("15")
    True
    >>> version_key("16.4") > version_key("16.10")
    False
    >>> version_key("24")
    (24,)
    """
    parts = []
    for segment in version.strip().split("."):
        match = _LEADING_INT.match(segment.strip())
        parts.append(int(match.group()) if match else 0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def max_version(versions: Iterable[str | None]) -> str | None:
    """Highest version among ``versions``; None when none is declared."""
    best: str | None = None
    for version in versions:
        if not version:
            continue
        if best is None or version_key(version) > version_key(best):
            best = version
    return best


@dataclass
class AggregatedDependencies:
    """Sorted, de-duplicated declarations for one target."""

    dependencies: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    min_version: str | None = None
    warnings: list[Diagnostic] = field(default_factory=list)


class DependencyAggregator:
    """Aggregates per-capsule declarations for one target."""

    def __init__(self, registry: CapsuleRegistry, target: Target):
        self.registry = registry
        self.target = target

    def aggregate(
        self,
        capsule_ids: Iterable[str],
        configured_min_version: str | None = None,
    ) -> AggregatedDependencies:
        """
        Merge declarations of every listed capsule supporting this target.

        Capsules without an implementation for the target contribute
        nothing. When ``configured_min_version`` is lower than a capsule
        requires, the required version wins and a MIN_VERSION_RAISED
        warning is recorded.
        """
        dependencies: set[str] = set()
        imports: set[str] = set()
        required: list[str | None] = []
        requiring: dict[str, str] = {}

        for capsule_id in capsule_ids:
            impl = self.registry.implementation_for(capsule_id, self.target)
            if impl is None:
                continue
            dependencies.update(impl.dependencies)
            imports.update(impl.imports)
            if impl.min_version:
                required.append(impl.min_version)
                requiring.setdefault(impl.min_version, capsule_id)

        result = AggregatedDependencies(
            dependencies=sorted(dependencies),
            imports=sorted(imports),
        )
        needed = max_version(required)

        if configured_min_version and needed:
            if version_key(configured_min_version) < version_key(needed):
                message = (
                    f"Minimum {self.target} version raised from {configured_min_version} "
                    f"to {needed} (required by capsule '{requiring[needed]}')"
                )
                logger.warning(message)
                result.warnings.append(
                    warning(
                        DiagnosticCode.MIN_VERSION_RAISED,
                        message,
                        target=self.target,
                        capsule_id=requiring[needed],
                    )
                )
                result.min_version = needed
            else:
                result.min_version = configured_min_version
        else:
            result.min_version = configured_min_version or needed

        return result
