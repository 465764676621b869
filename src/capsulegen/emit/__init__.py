"""
Source emission.

Turns resolved screen trees into per-target project files and orchestrates
multi-target generation.

Usage:
    runner = GenerationRunner(load_builtin_registry())
    response = runner.run_request(payload)
"""

from .adapters import (
    AndroidEmitter,
    DesktopEmitter,
    EmitterOutput,
    EmitterRegistry,
    IOSEmitter,
    TargetEmitter,
    WebEmitter,
)
from .fileset import FileSet
from .runner import GenerationRunner, TargetPipeline

__all__ = [
    # Emitters
    "TargetEmitter",
    "EmitterOutput",
    "EmitterRegistry",
    "WebEmitter",
    "IOSEmitter",
    "AndroidEmitter",
    "DesktopEmitter",
    # Files
    "FileSet",
    # Runner
    "GenerationRunner",
    "TargetPipeline",
]
