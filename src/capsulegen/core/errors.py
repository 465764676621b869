"""
Error types for capsulegen catalog loading, request validation and generation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ir.diagnostics import Diagnostic


class CapsuleGenError(Exception):
    """Base exception for all capsulegen errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CatalogError(CapsuleGenError):
    """
    Raised when a capsule catalog asset cannot be loaded.

    Examples:
    - Invalid YAML
    - Duplicate capsule ids
    - Prop schema violations (select without options, bad default)
    """

    pass


class ConfigError(CapsuleGenError):
    """Raised when capsulegen.toml cannot be parsed."""

    pass


class RequestValidationError(CapsuleGenError):
    """
    Raised when a generation request is rejected before any target runs.

    Examples:
    - Missing name, targets, theme or screens
    - Unknown target ids
    - Empty target list
    """

    def __init__(self, message: str, details: list[str] | None = None):
        self.details = details or []
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return self.message + "\n" + "\n".join(f"  - {d}" for d in self.details)


class GenerationFailure(CapsuleGenError):
    """
    Raised inside a target pipeline when a fatal diagnostic is produced.

    Only the orchestrator catches this; it aborts the owning target and
    leaves every other target untouched.
    """

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)


class InvalidTransitionError(CapsuleGenError):
    """Raised when a target pipeline attempts an illegal state transition."""

    pass
