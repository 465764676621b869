"""
Generate command for capsulegen CLI.

Reads a request-contract JSON file, runs every requested target and writes
each succeeded target's files under ``<output>/<target>/``.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import NoReturn

import typer

from capsulegen.cli_ui import (
    console,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
    results_table,
)
from capsulegen.core.errors import RequestValidationError
from capsulegen.core.ir import GenerationResult
from capsulegen.core.request import parse_request, parse_targets
from capsulegen.emit.runner import GenerationRunner

from .utils import load_config, load_registry

logger = logging.getLogger(__name__)


def write_result(result: GenerationResult, directory: Path, clean: bool = True) -> int:
    """
    Write one target's files below ``directory``.

    Returns:
        Number of files written
    """
    if clean and directory.exists():
        shutil.rmtree(directory)
    for generated in result.files:
        path = directory / generated.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(generated.content, encoding="utf-8")
    logger.debug("Wrote %d files to %s", len(result.files), directory)
    return len(result.files)


def _reject(error: RequestValidationError) -> NoReturn:
    print_error(error.message)
    for detail in error.details:
        print_error(f"  {detail}")
    raise typer.Exit(code=2)


def generate_command(
    project_file: Path = typer.Argument(  # noqa: B008
        ...,
        exists=True,
        dir_okay=False,
        help="Request JSON describing the project, its screens and targets",
    ),
    target: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--target",
        "-t",
        help="Generate only these targets (repeatable; overrides the request)",
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None,
        "--output",
        "-o",
        help="Output directory (overrides capsulegen.toml)",
    ),
    config_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to capsulegen.toml (default: next to the project file)",
    ),
    clean: bool | None = typer.Option(
        None,
        "--clean/--no-clean",
        help="Remove each target's previous output before writing",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Generate but do not write files",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full response as JSON instead of a summary",
    ),
) -> None:
    """
    Generate native project files from a composed screen description.

    Exit code is 0 when at least one target succeeded, 1 when all failed and
    2 when the request itself is invalid.

    Examples:
        capsulegen generate app.json                  # All requested targets
        capsulegen generate app.json -t web -t ios    # Subset of targets
        capsulegen generate app.json --dry-run        # Preview only
    """
    project_root = project_file.resolve().parent
    config = load_config(project_root, config_file)

    try:
        payload = json.loads(project_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _reject(RequestValidationError("Invalid request", [f"{project_file}: {e}"]))

    try:
        project = parse_request(payload)
        targets = parse_targets(target) if target else None
    except RequestValidationError as e:
        _reject(e)

    registry = load_registry(config, project_root)
    runner = GenerationRunner(registry, config)
    response = runner.run(project, targets=targets)

    output_dir = output or config.get_output_path(project_root)
    should_clean = clean if clean is not None else config.output.clean
    written = 0
    if not dry_run:
        for result in response.results:
            if result.success:
                written += write_result(result, output_dir / str(result.target), should_clean)

    if as_json:
        typer.echo(response.model_dump_json(by_alias=True, indent=2))
    else:
        print_header(f"capsulegen: {project.name}", f"{len(project.screens)} screens")
        console.print(results_table(response))
        for result in response.results:
            for diagnostic in result.warnings:
                print_warning(diagnostic.format())
            if result.fatal:
                print_error(result.fatal.format())

        succeeded = len(response.summary.succeeded)
        total = response.summary.total_targets
        if dry_run:
            print_info(f"Dry run: {response.summary.total_files} files generated, none written")
        elif response.success:
            print_success(f"{succeeded} of {total} targets exported: {written} files written to {output_dir}")

    if not response.success:
        if not as_json:
            print_error("All targets failed")
        raise typer.Exit(code=1)
