"""
Terminal output, Loguru sinks and the -v option shared by fqreport commands.
"""

import sys
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console

# stdout for results, stderr for errors
console = Console()
err_console = Console(stderr=True)

# Rich styles for FastQC verdicts
STATUS_STYLES = {
    "PASS": "bold green",
    "WARN": "bold yellow",
    "FAIL": "bold red",
}

Verbosity = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv, -vvv, -vvvv)",
        rich_help_panel="Logging",
    ),
]


# =============================================================================
# Messages
# =============================================================================


def error(message: str, exit_code: int = 1) -> None:
    """Report `message` on stderr, then exit with `exit_code` unless it is 0."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    if exit_code:
        sys.exit(exit_code)


def success(message: str) -> None:
    """Report a finished step, such as a written file."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def warning(message: str) -> None:
    """Report a problem that does not stop the command."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def styled_status(status: str | None) -> str:
    """Rich markup for a PASS/WARN/FAIL verdict; a dash if there is none."""
    if status is None:
        return "[dim]-[/dim]"
    style = STATUS_STYLES.get(status, "")
    return f"[{style}]{status}[/{style}]" if style else status


# =============================================================================
# Logging
# =============================================================================


def configure_logging(verbosity: int) -> None:
    """Configure loguru logging based on verbosity level."""
    logger.remove()

    level = {
        0: "ERROR",
        1: "WARNING",
        2: "SUCCESS",
        3: "INFO",
        4: "DEBUG",
    }.get(min(verbosity, 4), "INFO")

    logger.add(
        sys.stderr,
        colorize=True,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
    )
