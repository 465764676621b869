"""
capsulegen CLI utilities.

Shared helpers used across CLI modules.
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

import typer

from capsulegen._version import get_version
from capsulegen.catalog import load_builtin_registry
from capsulegen.cli_ui import print_error
from capsulegen.core.config import GenerationConfig, find_config, load_generation_config
from capsulegen.core.errors import CatalogError, ConfigError
from capsulegen.core.registry import CapsuleRegistry

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Configure the root logger.

    ``--verbose`` forces DEBUG; otherwise LOG_LEVEL (default WARNING) applies.
    """
    if verbose:
        level = logging.DEBUG
    else:
        name = os.environ.get("LOG_LEVEL", "WARNING").upper()
        level = logging.getLevelNamesMapping().get(name, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"capsulegen {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def load_config(project_root: Path, config_file: Path | None = None) -> GenerationConfig:
    """Load capsulegen.toml for a project, exiting with code 1 on errors."""
    try:
        return load_generation_config(config_file or find_config(project_root))
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def load_registry(config: GenerationConfig, project_root: Path) -> CapsuleRegistry:
    """Built-in catalog layered with configured catalog paths, exiting with code 1 on errors."""
    try:
        return load_builtin_registry(config.get_catalog_paths(project_root) or None)
    except CatalogError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
