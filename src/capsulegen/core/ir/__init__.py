"""
capsulegen Intermediate Representation (IR) types.

All types are re-exported from this package.
"""

from .capsules import (
    CapsuleDefinition,
    PlatformImpl,
    PropSpec,
    PropType,
    Target,
)
from .diagnostics import (
    Diagnostic,
    DiagnosticCode,
    Severity,
    fatal,
    warning,
)
from .project import (
    DEFAULT_COLORS,
    AndroidConfig,
    DesktopConfig,
    IOSConfig,
    NavigationSpec,
    NavigationType,
    PlatformConfig,
    ProjectSpec,
    Screen,
    ScreenNode,
    ThemeSpec,
    WindowConfig,
)
from .results import (
    GeneratedFile,
    GenerationResponse,
    GenerationResult,
    GenerationStats,
    GenerationSummary,
    TargetState,
)

__all__ = [
    # Capsules
    "CapsuleDefinition",
    "PlatformImpl",
    "PropSpec",
    "PropType",
    "Target",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
    "fatal",
    "warning",
    # Project
    "DEFAULT_COLORS",
    "AndroidConfig",
    "DesktopConfig",
    "IOSConfig",
    "NavigationSpec",
    "NavigationType",
    "PlatformConfig",
    "ProjectSpec",
    "Screen",
    "ScreenNode",
    "ThemeSpec",
    "WindowConfig",
    # Results
    "GeneratedFile",
    "GenerationResponse",
    "GenerationResult",
    "GenerationStats",
    "GenerationSummary",
    "TargetState",
]
