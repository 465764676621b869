"""
Rich console helpers for the capsulegen CLI.

Provides styled status lines and summary tables for generation results and
catalog listings.
"""

from rich import box
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from capsulegen.core.ir import CapsuleDefinition, GenerationResponse

console = Console()
err_console = Console(stderr=True)

# Style definitions
STYLES = {
    "title": Style(color="bright_cyan", bold=True),
    "subtitle": Style(color="bright_black"),
    "success": Style(color="green", bold=True),
    "error": Style(color="red", bold=True),
    "warning": Style(color="yellow"),
    "info": Style(color="cyan"),
    "muted": Style(color="bright_black"),
}


def print_header(title: str, subtitle: str = "") -> None:
    """Print a styled header."""
    console.print()
    console.print(Text(title, style=STYLES["title"]))
    if subtitle:
        console.print(Text(subtitle, style=STYLES["subtitle"]))
    console.print()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(Text(f"✓ {message}", style=STYLES["success"]))


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(Text(f"✗ {message}", style=STYLES["error"]))


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(Text(f"⚠ {message}", style=STYLES["warning"]))


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(Text(f"ℹ {message}", style=STYLES["info"]))


def results_table(response: GenerationResponse) -> Table:
    """One row per target: state, file count, dependencies, diagnostics."""
    table = Table(box=box.SIMPLE_HEAVY, show_edge=False)
    table.add_column("Target", style="bold")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    table.add_column("Dependencies", justify="right")
    table.add_column("Warnings", justify="right")
    table.add_column("Detail", style="bright_black", overflow="fold")

    for result in response.results:
        if result.success:
            status = Text("succeeded", style=STYLES["success"])
            detail = f"min version {result.min_version}" if result.min_version else ""
        else:
            status = Text("failed", style=STYLES["error"])
            detail = result.fatal.format() if result.fatal else ""
        table.add_row(
            str(result.target),
            status,
            str(len(result.files)),
            str(len(result.dependencies)),
            str(len(result.warnings)),
            Text(detail),
        )
    return table


def capsule_table(capsules: list[CapsuleDefinition]) -> Table:
    """Catalog listing."""
    table = Table(box=box.SIMPLE_HEAVY, show_edge=False)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Targets")
    table.add_column("Description", style="bright_black", overflow="fold")

    for capsule in capsules:
        table.add_row(
            capsule.id,
            capsule.name,
            capsule.category,
            ", ".join(str(t) for t in capsule.supported_targets),
            Text(capsule.description),
        )
    return table


def prop_table(capsule: CapsuleDefinition) -> Table:
    """Prop schema of one capsule, in declaration order."""
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("Prop", style="bold")
    table.add_column("Type")
    table.add_column("Required")
    table.add_column("Default")
    table.add_column("Options", overflow="fold")

    for spec in capsule.props:
        table.add_row(
            spec.name,
            str(spec.type),
            "yes" if spec.required else "",
            Text("" if spec.default is None else repr(spec.default)),
            Text(", ".join(spec.options)),
        )
    return table
