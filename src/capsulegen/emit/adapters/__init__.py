"""
Target emitters.

Each emitter generates project files for one target ecosystem:
- web: React + Vite + TypeScript
- ios: SwiftUI (XcodeGen)
- android: Jetpack Compose (Gradle KTS)
- desktop: Tauri + vanilla JavaScript

Importing this package registers all four with the EmitterRegistry.
"""

from .android import AndroidEmitter
from .base import GENERATED_BANNER, EmitterOutput, EmitterRegistry, TargetEmitter
from .desktop import DesktopEmitter
from .ios import IOSEmitter
from .web import WebEmitter

__all__ = [
    # Base classes
    "TargetEmitter",
    "EmitterOutput",
    "EmitterRegistry",
    "GENERATED_BANNER",
    # Implementations
    "WebEmitter",
    "IOSEmitter",
    "AndroidEmitter",
    "DesktopEmitter",
]
