"""
Sequence duplication level charts.

For a single report: the percentage of deduplicated and of total sequences
at each duplication level, drawn over PASS/WARN/FAIL bands.

For a collection: either a heatmap with one row per file, where each tile's
width is the percentage of reads at that duplication level (optionally
clustered, with a dendrogram and FastQC status strip), or one line per file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import numpy as np
import polars as pl

from ..errors import check_choice
from ..transforms import (
    add_category_index,
    category_label,
    check_thresholds,
    percentage_to_intervals,
    pivot_longer,
    status_bands,
)
from . import heatmap
from .base import ChartData, defaults, load_module, placeholder
from .utils import (
    HEATMAP_SCHEME,
    band_layer,
    finish,
    index_axis,
    index_legend,
    tooltips,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

MODULE = "Sequence_Duplication_Levels"
DEDUPLICATION = {
    "pre": "Percentage_of_total",
    "post": "Percentage_of_deduplicated",
}
PLOT_TYPES = ("heatmap", "line")
LINE_COLOURS = ("#ef4444", "#2563eb")
X_TITLE = "Sequence Duplication Levels"
Y_TITLE = "Percentage (%)"


def prepare_single(df: pl.DataFrame) -> pl.DataFrame:
    """
    Long table for the single-report line plot.

    Returns:
        DataFrame with columns: Filename, Duplication_Level, Type, Percentage, x
    """
    long = pivot_longer(df, MODULE, names_to="Type", values_to="Percentage")
    long = add_category_index(long, "Duplication_Level")
    return long.with_columns(pl.col("Percentage").round(2)).drop_nulls("Percentage")


def prepare_heatmap(
    df: pl.DataFrame,
    value_col: str,
    order: Sequence[str],
) -> pl.DataFrame:
    """
    Stacked tile geometry for the collection heatmap.

    Args:
        df: Duplication table for every file
        value_col: Percentage column drawn
        order: Filenames from the bottom row to the top

    Returns:
        DataFrame with columns: Filename, Duplication_Level, `value_col`,
        xmin, xmax, ymin, ymax
    """
    return percentage_to_intervals(
        df.select("Filename", "Duplication_Level", value_col),
        "Filename",
        value_col,
        sample_order=order,
    )


def _single(
    data: ChartData,
    interactive: bool,
    pwf: PwfColours,
    style: StyleOptions,
    warn: float,
    fail: float,
    line_colours: Sequence[str],
) -> AnyChart:
    long = prepare_single(data.table)
    levels = data.table["Duplication_Level"].to_list()
    bands = status_bands(warn, fail, 0.5, len(levels) + 0.5)

    lines = (
        alt.Chart(long)
        .mark_line()
        .encode(
            alt.X("x:Q")
            .scale(domain=[0.5, len(levels) + 0.5], nice=False, zero=False)
            .axis(index_axis(levels, X_TITLE)),
            alt.Y("Percentage:Q").scale(domain=[0, 100]).title(Y_TITLE),
            alt.Color("Type:N")
            .scale(range=list(line_colours))
            .legend(title=None, strokeColor="black", padding=6),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Type:N"),
                alt.Tooltip("Duplication_Level:N", title="Duplication Level"),
                alt.Tooltip("Percentage:Q"),
            ),
        )
    )
    label = next(iter(data.labels.values()))
    chart = alt.layer(band_layer(bands, pwf), lines).properties(
        width=style.width,
        height=style.height,
    )
    return finish(chart, style, interactive, title=label)


def _line(
    data: ChartData,
    interactive: bool,
    pwf: PwfColours,
    style: StyleOptions,
    warn: float,
    fail: float,
    value_col: str,
) -> AnyChart:
    df = add_category_index(
        data.with_labels().with_columns(pl.col(value_col).round(2)),
        "Duplication_Level",
    )
    levels = df["Duplication_Level"].unique(maintain_order=True).to_list()
    bands = status_bands(warn, fail, 0.5, len(levels) + 0.5)

    lines = (
        alt.Chart(df)
        .mark_line()
        .encode(
            alt.X("x:Q")
            .scale(domain=[0.5, len(levels) + 0.5], nice=False, zero=False)
            .axis(index_axis(levels, "Duplication Level")),
            alt.Y(f"{value_col}:Q").scale(domain=[0, 100]).title(category_label(value_col)),
            alt.Color("Label:N").sort(data.label_order).title("Filename"),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip("Duplication_Level:N", title="Duplication Level"),
                alt.Tooltip(f"{value_col}:Q", title=category_label(value_col)),
            ),
        )
    )
    chart = alt.layer(band_layer(bands, pwf), lines).properties(
        width=style.width,
        height=style.height,
    )
    return finish(chart, style, interactive)


def _heatmap(
    data: ChartData,
    interactive: bool,
    pwf: PwfColours,
    style: StyleOptions,
    value_col: str,
    cluster: bool,
    dendrogram: bool,
    heat_colours: Sequence[str] | None,
) -> AnyChart:
    df = data.table.select("Filename", "Duplication_Level", value_col)
    order, tree = heatmap.sample_order(
        data, df, "Duplication_Level", value_col, cluster, dendrogram
    )
    tiles = data.with_labels(prepare_heatmap(df, value_col, order))
    levels = df["Duplication_Level"].unique(maintain_order=True).to_list()
    if heat_colours:
        # Levels sit at 1..n; Vega interpolates between colour stops spread over them
        position = {level: i for i, level in enumerate(levels, start=1)}
        colours = list(heat_colours) if len(heat_colours) > 1 else [heat_colours[0]] * 2
        stops = np.linspace(1, max(len(levels), 2), len(colours)).tolist()
        tiles = tiles.with_columns(
            pl.col("Duplication_Level")
            .replace_strict(position, return_dtype=pl.Int64)
            .alias("Level"),
        )
        colour = (
            alt.Color("Level:Q")
            .scale(domain=stops, range=colours, interpolate="rgb")
            .legend(index_legend(levels))
        )
    else:
        colour = alt.Color("Duplication_Level:O").scale(
            domain=levels,
            scheme=HEATMAP_SCHEME,
        )

    heat = (
        alt.Chart(tiles)
        .mark_rect()
        .encode(
            alt.X("xmin:Q")
            .scale(domain=[0, 100], nice=False, zero=False)
            .title(category_label(value_col)),
            alt.X2("xmax:Q"),
            alt.Y("ymin:Q")
            .scale(heatmap.row_scale(len(order)))
            .axis(heatmap.row_axis([data.labels[f] for f in order])),
            alt.Y2("ymax:Q"),
            colour.title("Duplication Level"),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip("Duplication_Level:N", title="Duplication Level"),
                alt.Tooltip(f"{value_col}:Q", title=category_label(value_col)),
            ),
        )
        .properties(width=style.width, height=style.height)
    )
    strip = heatmap.status_strip(data, order, pwf, style, interactive)
    chart = heatmap.compose(heat, strip, tree, len(order), style)
    return finish(chart, style, interactive, title=data.title)


def plot_dup_levels(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    warn: float = 20,
    fail: float = 50,
    deduplication: str = "pre",
    plot_type: str = "heatmap",
    cluster: bool = False,
    dendrogram: bool = False,
    heat_colours: Sequence[str] | None = None,
    line_colours: Sequence[str] = LINE_COLOURS,
) -> AnyChart:
    """
    Plot sequence duplication levels.

    Args:
        source: FastQC report path(s), a RawReport or a ReportCollection
        interactive: Add tooltips and pan/zoom
        labels: Filename -> display label overrides
        pwf: Colours for PASS/WARN/FAIL
        style: Chart style overrides
        warn, fail: Percentage thresholds for the background bands
        deduplication: "pre" plots the percentage of total sequences,
            "post" the percentage of deduplicated sequences (collections only)
        plot_type: "heatmap" or "line" (collections only)
        cluster: Order heatmap rows by hierarchical clustering
        dendrogram: Draw the clustering dendrogram beside the heatmap
        heat_colours: Colours interpolated across the duplication levels
        line_colours: Colours of the two single-report lines

    Returns:
        An Altair chart; a placeholder chart if no report has the module

    Raises:
        InvalidOptionError: For an unknown `deduplication` or `plot_type`,
            or thresholds out of order
    """
    value_col = DEDUPLICATION[check_choice("deduplication", deduplication, DEDUPLICATION)]
    check_choice("plot_type", plot_type, PLOT_TYPES)
    check_thresholds(warn, fail)
    pwf, style = defaults(pwf, style)

    data = load_module(source, MODULE, labels)
    if data.is_empty:
        return placeholder(data, style)

    if not data.is_collection:
        return _single(data, interactive, pwf, style, warn, fail, line_colours)
    if plot_type == "line":
        return _line(data, interactive, pwf, style, warn, fail, value_col)
    return _heatmap(
        data, interactive, pwf, style, value_col, cluster, dendrogram, heat_colours
    )
