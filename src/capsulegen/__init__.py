"""
capsulegen - multi-target source generation from composed UI capsules.

Turns one platform-agnostic screen description into web, iOS, Android and
desktop project files.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.errors import (
    CapsuleGenError,
    CatalogError,
    ConfigError,
    GenerationFailure,
    RequestValidationError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "CapsuleGenError",
    "CatalogError",
    "ConfigError",
    "GenerationFailure",
    "RequestValidationError",
]
