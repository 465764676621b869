"""
capsulegen CLI Package.

- generate.py: generate command
- capsules.py: catalog browsing commands
- serve.py: HTTP API server
- utils.py: Shared utilities
"""

import typer

from capsulegen._version import get_version

from .capsules import capsules_app
from .generate import generate_command
from .serve import serve_command
from .utils import configure_logging, version_callback

__version__ = get_version()

app = typer.Typer(
    help="""capsulegen: native project generation from composed UI capsules

Commands:
  • generate: turn a request JSON into web / ios / android / desktop projects
  • capsules: browse the capsule catalog
  • serve: run the HTTP API
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging (otherwise LOG_LEVEL applies)",
    ),
) -> None:
    """capsulegen CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="generate")(generate_command)
app.command(name="serve")(serve_command)
app.add_typer(capsules_app, name="capsules")


def main() -> None:
    app()


__all__ = [
    "__version__",
    "app",
    "main",
    "capsules_app",
    "generate_command",
    "serve_command",
    "version_callback",
]
