"""
Command-line access to FastQC report charts and tables.

Every command takes FastQC output (zip archives, extracted directories or
bare fastqc_data.txt files) as positional arguments:

    fqreport plot dup-levels sample1_fastqc.zip sample2_fastqc.zip -o dup_levels
    fqreport summary *_fastqc.zip
    fqreport totals *_fastqc.zip --duplicated
    fqreport fasta *_fastqc.zip -o overrepresented.fa
    fqreport --help
"""

import sys

import typer
from rich.console import Console

from fqreport_cli.app import app

# Importing the command modules attaches their commands to `app`
from fqreport_cli.commands import plot, tables  # noqa: F401

__all__ = ["app", "main"]

console = Console()


def main() -> None:
    """Run the fqreport app; exits 130 on Ctrl+C and 1 on an aborted prompt."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except typer.Exit:
        raise
    except typer.Abort:
        sys.exit(1)
