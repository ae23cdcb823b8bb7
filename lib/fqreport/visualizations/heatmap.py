"""
Building blocks for multi-sample heatmaps.

A heatmap draws one row per sample on a continuous y axis (sample i at
``[i - 0.5, i + 0.5)``), so the status strip and the dendrogram beside it
can share the same row positions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import polars as pl

from ..transforms import Dendrogram, base_bounds, cluster_samples, sample_positions
from .utils import index_axis, tooltips

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..config import PwfColours, StyleOptions
    from .base import ChartData
    from .utils import AnyChart


def row_scale(n: int) -> alt.Scale:
    """Y scale fitting `n` sample rows exactly."""
    return alt.Scale(domain=[0.5, n + 0.5], nice=False, zero=False)


def row_axis(labels: list[str]) -> alt.Axis:
    """Right-hand y axis naming each sample row."""
    return index_axis(labels, title=None, orient="right")


def sample_order(
    data: ChartData,
    long: pl.DataFrame,
    category_col: str,
    value_col: str,
    cluster: bool,
    dendrogram: bool,
) -> tuple[list[str], Dendrogram]:
    """
    Row order of the heatmap, as filenames, and the clustering behind it.

    Files keep collection order unless clustering or a dendrogram is
    requested, in which case they follow the dendrogram leaves.
    """
    tree = cluster_samples(long, "Filename", category_col, value_col)
    if cluster or dendrogram:
        order = tree.order
    else:
        present = set(long["Filename"].to_list())
        order = [f for f in data.labels if f in present]
    if not dendrogram:
        tree = Dendrogram(order=tree.order, segments=tree.segments.clear())
    return order, tree


def status_strip(
    data: ChartData,
    order: list[str],
    pwf: PwfColours,
    style: StyleOptions,
    interactive: bool,
) -> alt.Chart:
    """One PASS/WARN/FAIL tile per sample, from FastQC's own verdicts."""
    summary = data.source.collection.get_summary().filter(
        pl.col("Category") == data.title,
        pl.col("Filename").is_in(order),
    )
    tiles = data.with_labels(sample_positions(summary, "Filename", order)).with_columns(
        pl.lit(0.0).alias("xmin"),
        pl.lit(1.0).alias("xmax"),
    )
    domain, colours = pwf.domain_range()
    return (
        alt.Chart(tiles)
        .mark_rect(stroke="white", strokeWidth=0.5)
        .encode(
            alt.X("xmin:Q").scale(domain=[0, 1]).axis(None),
            alt.X2("xmax:Q"),
            alt.Y("ymin:Q").scale(row_scale(len(order))).axis(None),
            alt.Y2("ymax:Q"),
            alt.Fill("Status:N").scale(domain=domain, range=colours).legend(None),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="File"),
                alt.Tooltip("Status:N"),
            ),
        )
        .properties(width=style.width / style.heat_width, height=style.height)
    )


def dendrogram_panel(tree: Dendrogram, n: int, style: StyleOptions) -> alt.Chart:
    """Left-facing dendrogram whose leaves line up with the sample rows."""
    return (
        alt.Chart(tree.segments)
        .mark_rule(color="black")
        .encode(
            alt.X("y:Q").scale(reverse=True, zero=True, nice=False).axis(None),
            alt.X2("yend:Q"),
            alt.Y("x:Q").scale(row_scale(n)).axis(None),
            alt.Y2("xend:Q"),
        )
        .properties(width=style.width / style.heat_width, height=style.height)
    )


def compose(
    heat: alt.Chart,
    strip: alt.Chart,
    tree: Dendrogram,
    n: int,
    style: StyleOptions,
) -> alt.HConcatChart:
    """Dendrogram (if it has segments), status strip and heatmap, side by side."""
    panels = [strip, heat]
    if not tree.segments.is_empty():
        panels.insert(0, dendrogram_panel(tree, n, style))
    return alt.hconcat(*panels, spacing=0).resolve_scale(
        y="independent",
        fill="independent",
        color="independent",
    )


def position_tiles(
    df: pl.DataFrame,
    position_col: str,
    order: Sequence[str],
) -> pl.DataFrame:
    """
    Tile geometry for per-position values: one tile per (file, base range).

    A base range ``"10-14"`` spans x from 9.5 to 14.5; files are stacked as
    in ``sample_positions``.
    """
    return sample_positions(base_bounds(df, position_col), "Filename", order).with_columns(
        (pl.col("Start") - 0.5).alias("xmin"),
        (pl.col("End") + 0.5).alias("xmax"),
    )


def position_heatmap(
    data: ChartData,
    df: pl.DataFrame,
    position_col: str,
    value_col: str,
    colours: tuple[list[float], list[str]],
    pwf: PwfColours,
    style: StyleOptions,
    interactive: bool,
    cluster: bool,
    dendrogram: bool,
    x_title: str = "Position in read (bp)",
    value_title: str | None = None,
) -> AnyChart:
    """
    Heatmap of a per-position value with one row per file.

    Args:
        data: Chart input the rows come from
        df: Table with Filename, `position_col` and `value_col`
        position_col: Column of FastQC base labels
        value_col: Numeric column drawn as colour
        colours: Scale domain and the colours at each domain stop
        pwf, style, interactive: As for the chart builders
        cluster, dendrogram: Row clustering options
        x_title: Title of the position axis
        value_title: Legend title, default `value_col` with spaces
    """
    df = df.select("Filename", position_col, value_col)
    order, tree = sample_order(data, df, position_col, value_col, cluster, dendrogram)
    tiles = data.with_labels(position_tiles(df, position_col, order))
    domain, colour_range = colours
    value_title = value_title or value_col.replace("_", " ")

    heat = (
        alt.Chart(tiles)
        .mark_rect()
        .encode(
            alt.X("xmin:Q").scale(nice=False, zero=False).title(x_title),
            alt.X2("xmax:Q"),
            alt.Y("ymin:Q")
            .scale(row_scale(len(order)))
            .axis(row_axis([data.labels[f] for f in order])),
            alt.Y2("ymax:Q"),
            alt.Color(f"{value_col}:Q")
            .scale(domain=domain, range=colour_range, clamp=True)
            .title(value_title),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip(f"{position_col}:N", title="Position"),
                alt.Tooltip(f"{value_col}:Q", title=value_title, format=".2f"),
            ),
        )
        .properties(width=style.width, height=style.height)
    )
    strip = status_strip(data, order, pwf, style, interactive)
    return compose(heat, strip, tree, len(order), style)
