"""
Capsule Registry.

Read-only catalog of capsule definitions, loaded once from YAML assets and
injected into the runner. The engine only ever queries it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .coercion import PropCoercionError, coerce_value
from .errors import CatalogError
from .ir import CapsuleDefinition, PlatformImpl, Target

logger = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".yaml", ".yml")


def _normalize_defaults(capsule: CapsuleDefinition) -> CapsuleDefinition:
    """Check every declared default against its prop type and store the coerced form."""
    props = []
    changed = False
    for spec in capsule.props:
        if spec.default is None:
            props.append(spec)
            continue
        try:
            default = coerce_value(spec, spec.default)
        except PropCoercionError as e:
            raise CatalogError(
                f"Capsule '{capsule.id}' prop '{spec.name}' has an invalid default: {e}"
            ) from e
        if default != spec.default or type(default) is not type(spec.default):
            spec = spec.model_copy(update={"default": default})
            changed = True
        props.append(spec)
    if not changed:
        return capsule
    return capsule.model_copy(update={"props": props})


def load_capsule_file(path: Path) -> CapsuleDefinition:
    """
    Load one capsule definition from a YAML asset.

    Raises:
        CatalogError: If the file is not valid YAML or not a valid capsule
    """
    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Empty or invalid capsule asset {path}")

    try:
        capsule = CapsuleDefinition.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid capsule schema in {path}: {e}") from e

    return _normalize_defaults(capsule)


def load_catalog_dir(directory: Path) -> list[CapsuleDefinition]:
    """
    Load every capsule asset in ``directory`` (sorted by file name).

    Raises:
        CatalogError: If the directory is missing, an asset is invalid, or two
            assets declare the same capsule id
    """
    if not directory.is_dir():
        raise CatalogError(f"Catalog directory not found: {directory}")

    definitions: list[CapsuleDefinition] = []
    origins: dict[str, Path] = {}
    for path in sorted(directory.iterdir()):
        if path.suffix not in CATALOG_SUFFIXES:
            continue
        capsule = load_capsule_file(path)
        if capsule.id in origins:
            raise CatalogError(
                f"Duplicate capsule id '{capsule.id}' in {path} (already defined in {origins[capsule.id]})"
            )
        origins[capsule.id] = path
        definitions.append(capsule)

    logger.debug("Loaded %d capsules from %s", len(definitions), directory)
    return definitions


class CapsuleRegistry:
    """
    Immutable capsule catalog.

    ``lookup`` distinguishes an unknown capsule (None) from one that exists;
    ``implementation_for`` distinguishes a capsule without an implementation
    for a target (None) from an unknown capsule (KeyError).

    Usage:
        registry = CapsuleRegistry.from_directories(CATALOG_DIR)
        capsule = registry.lookup("button")
        impl = registry.implementation_for("button", Target.IOS)
    """

    def __init__(self, definitions: Iterable[CapsuleDefinition] = ()):
        capsules: dict[str, CapsuleDefinition] = {}
        for capsule in definitions:
            if capsule.id in capsules:
                raise CatalogError(f"Duplicate capsule id '{capsule.id}'")
            capsules[capsule.id] = _normalize_defaults(capsule)
        self._capsules = capsules

    @classmethod
    def from_definitions(cls, definitions: Iterable[CapsuleDefinition]) -> CapsuleRegistry:
        """Build a registry from in-memory definitions (used by tests and overlays)."""
        return cls(definitions)

    @classmethod
    def from_directories(cls, *directories: Path) -> CapsuleRegistry:
        """
        Load and layer catalog directories.

        Later directories replace earlier capsules with the same id; duplicate
        ids within one directory are an error.
        """
        layered: dict[str, CapsuleDefinition] = {}
        for directory in directories:
            for capsule in load_catalog_dir(directory):
                if capsule.id in layered:
                    logger.info("Capsule '%s' overridden by %s", capsule.id, directory)
                layered[capsule.id] = capsule
        return cls(layered.values())

    def with_overlay(self, definitions: Iterable[CapsuleDefinition]) -> CapsuleRegistry:
        """New registry with ``definitions`` replacing or adding capsules by id."""
        merged = dict(self._capsules)
        for capsule in definitions:
            merged[capsule.id] = capsule
        return CapsuleRegistry(merged.values())

    # Queries

    def lookup(self, capsule_id: str) -> CapsuleDefinition | None:
        """Get a capsule by id, or None if it is not catalogued."""
        return self._capsules.get(capsule_id)

    def implementation_for(self, capsule_id: str, target: Target) -> PlatformImpl | None:
        """
        Get a capsule's implementation for ``target``.

        Returns None when the capsule exists but is unsupported on ``target``.

        Raises:
            KeyError: If the capsule is not catalogued
        """
        capsule = self._capsules.get(capsule_id)
        if capsule is None:
            raise KeyError(capsule_id)
        return capsule.platforms.get(target)

    def supports(self, capsule_id: str, target: Target) -> bool:
        return capsule_id in self._capsules and self.implementation_for(capsule_id, target) is not None

    def list(
        self,
        category: str | None = None,
        target: Target | None = None,
        tag: str | None = None,
    ) -> list[CapsuleDefinition]:
        """List capsules sorted by id, optionally filtered."""
        result = []
        for capsule_id in self.ids():
            capsule = self._capsules[capsule_id]
            if category is not None and capsule.category != category:
                continue
            if target is not None and not self.supports(capsule_id, target):
                continue
            if tag is not None and tag not in capsule.tags:
                continue
            result.append(capsule)
        return result

    def search(self, query: str) -> list[CapsuleDefinition]:
        """Case-insensitive match on id, name, description and tags."""
        needle = query.strip().lower()
        if not needle:
            return self.list()
        return [
            capsule
            for capsule in self.list()
            if needle in capsule.id.lower()
            or needle in capsule.name.lower()
            or needle in capsule.description.lower()
            or any(needle in tag.lower() for tag in capsule.tags)
        ]

    def categories(self) -> list[str]:
        return sorted({capsule.category for capsule in self._capsules.values()})

    def ids(self) -> list[str]:
        return sorted(self._capsules)

    def __len__(self) -> int:
        return len(self._capsules)

    def __contains__(self, capsule_id: object) -> bool:
        return capsule_id in self._capsules

    def __iter__(self) -> Iterator[CapsuleDefinition]:
        return iter(self.list())
