"""
Built-in capsule catalog.

One YAML asset per capsule under ``capsules/``. Extra catalog directories
can be layered on top; a later directory replaces built-in capsules by id.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from capsulegen.core.registry import CapsuleRegistry

CATALOG_DIR = Path(__file__).parent / "capsules"


@lru_cache(maxsize=1)
def _builtin_registry() -> CapsuleRegistry:
    return CapsuleRegistry.from_directories(CATALOG_DIR)


def load_builtin_registry(extra_paths: list[Path] | None = None) -> CapsuleRegistry:
    """
    Load the built-in catalog, optionally layered with extra directories.

    The built-in registry is loaded once per process and shared; it is
    immutable.

    Raises:
        CatalogError: If any catalog asset is invalid
    """
    if not extra_paths:
        return _builtin_registry()
    return CapsuleRegistry.from_directories(CATALOG_DIR, *extra_paths)
