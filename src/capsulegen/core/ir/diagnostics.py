"""
Diagnostic types for capsulegen IR.

Diagnostics are the structured warnings and fatal errors a target pipeline
reports back to the caller.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .capsules import Target


class Severity(StrEnum):
    """How a diagnostic affects its target."""

    WARNING = "warning"
    FATAL = "fatal"


class DiagnosticCode(StrEnum):
    """Machine-readable diagnostic codes."""

    UNKNOWN_CAPSULE = "UNKNOWN_CAPSULE"
    UNSUPPORTED = "UNSUPPORTED"
    MISSING_REQUIRED_PROP = "MISSING_REQUIRED_PROP"
    PROP_TYPE_MISMATCH = "PROP_TYPE_MISMATCH"
    UNKNOWN_PROP = "UNKNOWN_PROP"
    TREE_TOO_DEEP = "TREE_TOO_DEEP"
    DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID"
    PATH_COLLISION = "PATH_COLLISION"
    MIN_VERSION_RAISED = "MIN_VERSION_RAISED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class Diagnostic(BaseModel):
    """
    A structured warning or fatal error.

    Attributes:
        code: Diagnostic code
        severity: warning (recoverable) or fatal (aborts the target)
        message: Human-readable explanation
        target: Target the diagnostic belongs to
        screen_id: Screen being processed, when known
        node_id: Offending node, when node-scoped
        capsule_id: Capsule involved, when known
        prop: Offending prop name, when prop-scoped
        node_ids: Every node affected (e.g. all nodes dropped for one capsule)
    """

    code: DiagnosticCode
    severity: Severity
    message: str
    target: Target | None = None
    screen_id: str | None = None
    node_id: str | None = None
    capsule_id: str | None = None
    prop: str | None = None
    node_ids: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL

    def with_target(self, target: Target) -> Diagnostic:
        """Copy of this diagnostic bound to ``target``."""
        return self.model_copy(update={"target": target})

    def format(self) -> str:
        """Format as a single line like ``[ios] UNKNOWN_CAPSULE home/n3: ...``."""
        where = "/".join(p for p in (self.screen_id, self.node_id) if p)
        prefix = f"[{self.target}] " if self.target else ""
        location = f" {where}" if where else ""
        return f"{prefix}{self.code}{location}: {self.message}"


def warning(code: DiagnosticCode, message: str, **context: object) -> Diagnostic:
    """Create a warning diagnostic."""
    return Diagnostic(code=code, severity=Severity.WARNING, message=message, **context)


def fatal(code: DiagnosticCode, message: str, **context: object) -> Diagnostic:
    """Create a fatal diagnostic."""
    return Diagnostic(code=code, severity=Severity.FATAL, message=message, **context)
