"""
Distribution charts: per sequence quality scores, per sequence GC content
and sequence length distribution.

Counts are converted to the percentage of reads in each file so files of
different depth can share an axis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import numpy as np
import polars as pl
from scipy.stats import norm

from ..transforms import base_bounds, check_thresholds, status_bands
from .base import ChartData, defaults, load_module, placeholder
from .utils import band_layer, finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

Y_TITLE = "Percentage of reads (%)"


def as_percentage(df: pl.DataFrame, count_col: str = "Count") -> pl.DataFrame:
    """Add ``Percentage``: each count as a percentage of its file's total."""
    return df.with_columns(
        (pl.col(count_col) / pl.col(count_col).sum().over("Filename") * 100)
        .alias("Percentage"),
    )


def vertical_bands(bands: pl.DataFrame) -> pl.DataFrame:
    """Swap the axes of ``status_bands`` output so bands run along x."""
    return bands.select(
        pl.col("ymin").alias("xmin"),
        pl.col("ymax").alias("xmax"),
        pl.col("xmin").alias("ymin"),
        pl.col("xmax").alias("ymax"),
        "Status",
    )


def _lines(
    data: ChartData,
    df: pl.DataFrame,
    x_col: str,
    x_title: str,
    interactive: bool,
    x_domain: list[float] | None = None,
) -> alt.Chart:
    colour = (
        alt.Color("Label:N").sort(data.label_order).title("Filename")
        if data.is_collection
        else alt.ColorValue("#2563eb")
    )
    x = alt.X(f"{x_col}:Q").title(x_title)
    if x_domain is not None:
        x = x.scale(domain=x_domain, nice=False, zero=False)
    return (
        alt.Chart(data.with_labels(df))
        .mark_line()
        .encode(
            x,
            alt.Y("Percentage:Q").title(Y_TITLE),
            color=colour,
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip(f"{x_col}:Q", title=x_title),
                alt.Tooltip("Percentage:Q", format=".2f"),
            ),
        )
    )


def _title(data: ChartData) -> str:
    return data.title if data.is_collection else next(iter(data.labels.values()))


def plot_seq_quals(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    warn: float = 27,
    fail: float = 20,
) -> AnyChart:
    """
    Plot the distribution of mean read quality scores.

    Quality bands run along the x axis: reads whose mean quality is below
    `fail` fall in the FAIL band, below `warn` in the WARN band.

    Raises:
        InvalidOptionError: If fail > warn
    """
    check_thresholds(warn, fail, higher_is_better=True)
    pwf, style = defaults(pwf, style)
    data = load_module(source, "Per_sequence_quality_scores", labels)
    if data.is_empty:
        return placeholder(data, style)

    df = as_percentage(data.table)
    x_max = max(41, df["Quality"].max() + 1)
    y_max = float(df["Percentage"].max())
    bands = vertical_bands(
        status_bands(warn, fail, 0, y_max, 0, x_max, higher_is_better=True),
    )
    x_title = "Mean sequence quality (Phred score)"
    lines = _lines(data, df, "Quality", x_title, interactive, [0, x_max])
    chart = alt.layer(band_layer(bands, pwf), lines).properties(
        width=style.width,
        height=style.height,
    )
    return finish(chart, style, interactive, title=_title(data))


def theoretical_gc(df: pl.DataFrame) -> pl.DataFrame:
    """
    Normal GC distribution with the observed mean and standard deviation.

    FastQC compares each file's GC distribution to this curve; it is scaled to
    the same total percentage as the observed one.
    """
    rows = []
    for (filename,), group in df.group_by("Filename", maintain_order=True):
        gc = group["GC_Content"].to_numpy().astype(float)
        weights = group["Percentage"].fill_null(0).to_numpy()
        if weights.sum() == 0:
            continue
        mean = np.average(gc, weights=weights)
        sd = np.sqrt(np.average((gc - mean) ** 2, weights=weights))
        if sd == 0:
            continue
        density = norm.pdf(gc, loc=mean, scale=sd)
        density = density / density.sum() * weights.sum()
        rows.extend(
            {"Filename": filename, "GC_Content": int(g), "Percentage": float(d)}
            for g, d in zip(gc, density)
        )
    return pl.DataFrame(
        rows,
        schema={"Filename": pl.Utf8, "GC_Content": pl.Int64, "Percentage": pl.Float64},
    )


def plot_gc_content(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    theoretical: bool = True,
) -> AnyChart:
    """
    Plot per sequence GC content.

    Args:
        theoretical: For a single report, overlay the normal distribution
            FastQC compares against
    """
    pwf, style = defaults(pwf, style)
    data = load_module(source, "Per_sequence_GC_content", labels)
    if data.is_empty:
        return placeholder(data, style)

    df = as_percentage(data.table)
    x_title = "Mean GC content (%)"
    observed = _lines(data, df, "GC_Content", x_title, interactive, [0, 100])
    chart = observed
    if theoretical and not data.is_collection:
        expected = (
            alt.Chart(theoretical_gc(df))
            .mark_line(strokeDash=[4, 4], color=pwf.MAX)
            .encode(alt.X("GC_Content:Q"), alt.Y("Percentage:Q"))
        )
        chart = alt.layer(observed, expected)
    chart = chart.properties(width=style.width, height=style.height)
    return finish(chart, style, interactive, title=_title(data))


def plot_seq_length_dist(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
) -> AnyChart:
    """
    Plot the distribution of read lengths.

    Length ranges such as ``"35-39"`` are placed at their lower bound.
    """
    pwf, style = defaults(pwf, style)
    data = load_module(source, "Sequence_Length_Distribution", labels)
    if data.is_empty:
        return placeholder(data, style)

    df = as_percentage(base_bounds(data.table, "Length"))
    chart = _lines(data, df, "Start", "Sequence length (bp)", interactive)
    if not data.is_collection:
        chart = chart.mark_line(point=True)
    chart = chart.properties(width=style.width, height=style.height)
    return finish(chart, style, interactive, title=_title(data))
