# ruff: noqa: PLR0913, FBT002, UP045
"""
The 'plot' command for the fqreport CLI.

Builds one chart from one or more FastQC reports and saves it as HTML, SVG
or PNG.

Annotations stay real objects (no `from __future__ import annotations`):
Typer reads the option types from them when the command is registered.
"""

import inspect
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger

from fqreport import FqReportError, load_labels, load_pwf, load_style
from fqreport.visualizations import PLOTS, save_chart
from fqreport.visualizations.pca import FEATURES
from fqreport_cli.app import app
from fqreport_cli.utils import Verbosity, configure_logging, error, success

# =============================================================================
# Choices offered on the command line
# =============================================================================

PlotKind = Enum("PlotKind", {kind.replace("-", "_"): kind for kind in PLOTS}, type=str)
PcaModule = Enum("PcaModule", {name: name for name in FEATURES}, type=str)


class OutputFormat(str, Enum):
    """Chart file formats."""

    html = "html"
    svg = "svg"
    png = "png"


class Deduplication(str, Enum):
    """Which duplication percentage to plot."""

    pre = "pre"
    post = "post"


class PlotType(str, Enum):
    """Collection layout for charts that offer one."""

    heatmap = "heatmap"
    line = "line"


# =============================================================================
# --help panels
# =============================================================================

PANEL_OUTPUT = "Output"
PANEL_APPEARANCE = "Appearance"
PANEL_LAYOUT = "Collection Layout"
PANEL_PCA = "PCA"


def builder_options(builder, options: dict) -> dict:
    """
    Keep the options `builder` accepts.

    Options the user set that the chart kind does not take are reported and
    dropped; options left at their defaults are dropped silently.
    """
    accepted = inspect.signature(builder).parameters
    kept = {}
    for name, (value, is_set) in options.items():
        if name in accepted:
            kept[name] = value
        elif is_set:
            logger.warning(f"--{name.replace('_', '-')} does not apply to this chart; ignored")
    return kept


@app.command("plot")
def plot_reports(
    kind: Annotated[
        PlotKind,
        typer.Argument(help="Chart to draw.", show_default=False),
    ],
    files: Annotated[
        list[Path],
        typer.Argument(
            help="FastQC reports: *_fastqc.zip archives, extracted directories or fastqc_data.txt files.",
            exists=True,
            readable=True,
            resolve_path=True,
            show_default=False,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output path, without extension",
            rich_help_panel=PANEL_OUTPUT,
        ),
    ],
    formats: Annotated[
        Optional[list[OutputFormat]],
        typer.Option(
            "--format",
            "-f",
            help="Output format; repeat for several. Default: html",
            rich_help_panel=PANEL_OUTPUT,
        ),
    ] = None,
    interactive: Annotated[
        bool,
        typer.Option(
            "--interactive",
            "-i",
            help="Add tooltips and pan/zoom",
            rich_help_panel=PANEL_OUTPUT,
        ),
    ] = False,
    labels: Annotated[
        Optional[Path],
        typer.Option(
            "--labels",
            help="YAML mapping of report filename to display label",
            exists=True,
            dir_okay=False,
            readable=True,
            rich_help_panel=PANEL_APPEARANCE,
        ),
    ] = None,
    style: Annotated[
        Optional[Path],
        typer.Option(
            "--style",
            help="YAML mapping of style options (width, height, title, legend_position, ...)",
            exists=True,
            dir_okay=False,
            readable=True,
            rich_help_panel=PANEL_APPEARANCE,
        ),
    ] = None,
    colours: Annotated[
        Optional[Path],
        typer.Option(
            "--colours",
            help="YAML mapping of PASS/WARN/FAIL/MAX colours",
            exists=True,
            dir_okay=False,
            readable=True,
            rich_help_panel=PANEL_APPEARANCE,
        ),
    ] = None,
    cluster: Annotated[
        bool,
        typer.Option(
            "--cluster",
            help="Order heatmap rows by hierarchical clustering",
            rich_help_panel=PANEL_LAYOUT,
        ),
    ] = False,
    dendrogram: Annotated[
        bool,
        typer.Option(
            "--dendrogram",
            help="Draw the clustering dendrogram beside the heatmap",
            rich_help_panel=PANEL_LAYOUT,
        ),
    ] = False,
    dedup: Annotated[
        Deduplication,
        typer.Option(
            "--dedup",
            help="Duplication levels: percentage of total (pre) or deduplicated (post) sequences",
            rich_help_panel=PANEL_LAYOUT,
        ),
    ] = Deduplication.pre,
    plot_type: Annotated[
        PlotType,
        typer.Option(
            "--plot-type",
            help="Draw a collection as a heatmap or as one line per file",
            rich_help_panel=PANEL_LAYOUT,
        ),
    ] = PlotType.heatmap,
    module: Annotated[
        PcaModule,
        typer.Option(
            "--module",
            help="Module whose values describe each file in a PCA",
            rich_help_panel=PANEL_PCA,
        ),
    ] = PcaModule.Per_sequence_GC_content,
    scale: Annotated[
        bool,
        typer.Option(
            "--scale",
            help="Scale PCA features to unit variance",
            rich_help_panel=PANEL_PCA,
        ),
    ] = False,
    verbose: Verbosity = 0,
) -> None:
    """
    [bold cyan]Plot[/bold cyan] a FastQC module for one or more reports.

    One report draws that report's chart; several draw a comparison across
    files.

    [bold cyan]Examples:[/bold cyan]

    Duplication levels heatmap, clustered:
    [green]$ fqreport plot dup-levels *_fastqc.zip -o dup --cluster --dendrogram[/green]

    Interactive per base quality of one report:
    [green]$ fqreport plot base-quals sample_fastqc.zip -o quals -i[/green]

    Files on the principal components of their quality scores:
    [green]$ fqreport plot pca *_fastqc.zip -o pca --module Per_sequence_quality_scores[/green]
    """
    configure_logging(verbose)
    builder = PLOTS[kind.value]

    try:
        options = builder_options(
            builder,
            {
                "interactive": (interactive, interactive),
                "labels": (load_labels(labels) if labels else None, labels is not None),
                "style": (load_style(style) if style else None, style is not None),
                "pwf": (load_pwf(colours) if colours else None, colours is not None),
                "cluster": (cluster, cluster),
                "dendrogram": (dendrogram, dendrogram),
                "deduplication": (dedup.value, dedup is not Deduplication.pre),
                "plot_type": (plot_type.value, plot_type is not PlotType.heatmap),
                "module": (module.value, module is not PcaModule.Per_sequence_GC_content),
                "scale": (scale, scale),
            },
        )
        chart = builder(files, **options)
        output.parent.mkdir(parents=True, exist_ok=True)
        paths = save_chart(chart, output, [f.value for f in formats or [OutputFormat.html]])
    except FqReportError as exc:
        error(str(exc))
        return

    for path in paths:
        success(f"Wrote {kind.value} chart to {path}")
