"""
Catalog commands for capsulegen CLI.

- capsules list: List catalog capsules
- capsules show: Show one capsule's prop schema and per-target declarations
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.text import Text

from capsulegen.api.routes import capsule_detail
from capsulegen.cli_ui import capsule_table, console, print_error, print_header, print_info, prop_table
from capsulegen.core.ir import Target

from .utils import load_config, load_registry

capsules_app = typer.Typer(
    help="Browse the capsule catalog",
    no_args_is_help=True,
)


@capsules_app.command(name="list")
def capsules_list(
    target: Target | None = typer.Option(
        None,
        "--target",
        "-t",
        help="Only capsules implemented for this target",
    ),
    category: str | None = typer.Option(
        None,
        "--category",
        help="Only capsules in this category",
    ),
    search: str | None = typer.Option(
        None,
        "--search",
        "-s",
        help="Free-text search over id, name, description and tags",
    ),
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory holding capsulegen.toml",
    ),
) -> None:
    """List catalog capsules."""
    project_root = project_dir.resolve()
    registry = load_registry(load_config(project_root), project_root)

    capsules = registry.search(search) if search else registry.list(category=category, target=target)
    if search:
        capsules = [
            c
            for c in capsules
            if (target is None or registry.supports(c.id, target))
            and (category is None or c.category == category)
        ]

    if not capsules:
        print_info("No capsules match")
        return
    console.print(capsule_table(capsules))
    console.print(Text(f"{len(capsules)} of {len(registry)} capsules", style="bright_black"))


@capsules_app.command(name="show")
def capsules_show(
    capsule_id: str = typer.Argument(..., help="Capsule id"),
    as_json: bool = typer.Option(False, "--json", help="Print the full definition as JSON"),
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory holding capsulegen.toml",
    ),
) -> None:
    """Show a capsule's prop schema and per-target declarations."""
    project_root = project_dir.resolve()
    registry = load_registry(load_config(project_root), project_root)

    capsule = registry.lookup(capsule_id)
    if capsule is None:
        print_error(f"Unknown capsule: {capsule_id}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(capsule_detail(capsule), indent=2))
        return

    print_header(f"{capsule.name} ({capsule.id})", capsule.description)
    console.print(Text(f"Category: {capsule.category}   Version: {capsule.version}"))
    console.print()
    console.print(prop_table(capsule))

    for target in Target:
        impl = registry.implementation_for(capsule.id, target)
        if impl is None:
            console.print(Text(f"{target}: not available", style="bright_black"))
            continue
        parts = [f"{target}:"]
        if impl.min_version:
            parts.append(f"min {impl.min_version}")
        if impl.dependencies:
            parts.append(f"deps {', '.join(impl.dependencies)}")
        if impl.imports:
            parts.append(f"imports {', '.join(impl.imports)}")
        console.print(Text("  ".join(parts)))
