"""
Serve command for capsulegen CLI.

Runs the HTTP API with uvicorn.
"""

from __future__ import annotations

from pathlib import Path

import typer

from capsulegen.cli_ui import print_info

from .utils import load_config, load_registry


def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", help="Port to listen on"),
    project_dir: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-p",
        help="Project directory holding capsulegen.toml",
    ),
) -> None:
    """
    Serve the generation API.

    Endpoints:
        POST /api/generate          Generate project files
        GET  /api/capsules          List catalog capsules
        GET  /api/capsules/{id}     Show one capsule
    """
    import uvicorn

    from capsulegen.api.routes import create_app

    project_root = project_dir.resolve()
    config = load_config(project_root)
    registry = load_registry(config, project_root)

    print_info(f"Serving {len(registry)} capsules on http://{host}:{port}")
    uvicorn.run(create_app(registry, config), host=host, port=port)
