# ruff: noqa: FBT002, UP045
"""
The 'summary', 'totals' and 'fasta' commands for the fqreport CLI.

These print or export tables from FastQC reports rather than charts.

Annotations stay real objects (no `from __future__ import annotations`):
Typer reads the option types from them when the command is registered.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from fqreport import FqReportError, ReportCollection, load_labels
from fqreport.visualizations import overrep_to_fasta, summary_table
from fqreport.visualizations.summary import CATEGORY_ORDER
from fqreport_cli.app import app
from fqreport_cli.utils import (
    Verbosity,
    configure_logging,
    console,
    error,
    styled_status,
    success,
    warning,
)

Reports = Annotated[
    list[Path],
    typer.Argument(
        help="FastQC reports: *_fastqc.zip archives, extracted directories or fastqc_data.txt files.",
        exists=True,
        readable=True,
        resolve_path=True,
        show_default=False,
    ),
]


@app.command("summary")
def summary(files: Reports, verbose: Verbosity = 0) -> None:
    """
    Print FastQC's [bold]PASS/WARN/FAIL[/bold] verdicts, one row per report.
    """
    configure_logging(verbose)
    try:
        collection = ReportCollection.from_paths(files)
        table = summary_table(collection)
    except FqReportError as exc:
        error(str(exc))
        return

    modules = [c for c in CATEGORY_ORDER if c in table.columns]
    rich_table = Table(title="FastQC Summary", show_lines=False)
    rich_table.add_column("Filename", style="bold")
    for module in modules:
        rich_table.add_column(module, justify="center")
    for row in table.iter_rows(named=True):
        rich_table.add_row(row["Filename"], *(styled_status(row[m]) for m in modules))
    console.print(rich_table)


def _cell(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, int):
        return f"{value:,}"
    return str(value)


@app.command("totals")
def totals(
    files: Reports,
    duplicated: Annotated[
        bool,
        typer.Option(
            "--duplicated",
            "-d",
            help="Also estimate unique and duplicated reads",
        ),
    ] = False,
    verbose: Verbosity = 0,
) -> None:
    """
    Print the total number of reads in each report.
    """
    configure_logging(verbose)
    try:
        collection = ReportCollection.from_paths(files)
        table = collection.read_totals(duplicated=duplicated)
    except FqReportError as exc:
        error(str(exc))
        return

    rich_table = Table(title="Read Totals")
    for column in table.columns:
        justify = "left" if column == "Filename" else "right"
        rich_table.add_column(column.replace("_", " "), justify=justify)
    for row in table.iter_rows():
        rich_table.add_row(*(_cell(value) for value in row))
    console.print(rich_table)


@app.command("fasta")
def fasta(
    files: Reports,
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output FASTA file path",
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    n: Annotated[
        int,
        typer.Option(
            "--top",
            "-n",
            help="Overrepresented sequences taken from each report",
            min=1,
        ),
    ] = 10,
    labels: Annotated[
        Optional[Path],
        typer.Option(
            "--labels",
            help="YAML mapping of report filename to record name prefix",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Verbosity = 0,
) -> None:
    """
    Export overrepresented sequences as [bold]FASTA[/bold].
    """
    configure_logging(verbose)
    try:
        collection = ReportCollection.from_paths(files)
        mapping = load_labels(labels) if labels else None
        text = overrep_to_fasta(collection, output, n=n, labels=mapping)
    except FqReportError as exc:
        error(str(exc))
        return

    records = text.count(">")
    if records == 0:
        warning("No overrepresented sequences found")
    success(f"Wrote {records} sequence(s) to {output}")
