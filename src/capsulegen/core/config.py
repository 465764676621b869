"""
Generation configuration models.

Parses the [generation] and [output] sections from capsulegen.toml and
provides typed configuration for the runner, CLI and API.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

CONFIG_FILENAME = "capsulegen.toml"


class GenerationSettings(BaseModel):
    """Engine configuration."""

    max_depth: int = Field(default=64, ge=1, le=256)
    parallel: bool = True
    max_workers: int = Field(default=4, ge=1)
    deadline_seconds: float = Field(default=0, ge=0)
    catalog_paths: list[str] = Field(default_factory=list)


class OutputSettings(BaseModel):
    """Output configuration."""

    directory: str = "generated/"
    clean: bool = True


class GenerationConfig(BaseModel):
    """Complete capsulegen configuration."""

    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    def get_output_path(self, project_root: Path) -> Path:
        """Get absolute output directory path."""
        output_dir = Path(self.output.directory)
        if output_dir.is_absolute():
            return output_dir
        return project_root / output_dir

    def get_catalog_paths(self, project_root: Path) -> list[Path]:
        """Extra catalog directories, resolved against the project root."""
        paths = []
        for entry in self.generation.catalog_paths:
            path = Path(entry)
            paths.append(path if path.is_absolute() else project_root / path)
        return paths


def load_generation_config(toml_path: Path) -> GenerationConfig:
    """
    Load generation configuration from capsulegen.toml.

    Args:
        toml_path: Path to capsulegen.toml file

    Returns:
        GenerationConfig with parsed values or defaults

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values
    """
    if not toml_path.exists():
        return GenerationConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {toml_path}: {e}") from e

    config_dict: dict[str, Any] = {}
    if "generation" in data:
        config_dict["generation"] = data["generation"]
    if "output" in data:
        config_dict["output"] = data["output"]

    try:
        return GenerationConfig(**config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {toml_path}: {e}") from e


def find_config(project_root: Path) -> Path:
    """Path where capsulegen.toml is expected for ``project_root``."""
    return project_root / CONFIG_FILENAME
