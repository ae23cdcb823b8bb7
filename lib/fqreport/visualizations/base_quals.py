"""
Per base sequence quality charts.

A single report is drawn the way FastQC draws it: for each base range, a
whisker from the 10th to the 90th percentile, a box over the interquartile
range, a tick at the median and a line through the means, over quality bands.
A collection becomes a heatmap of one statistic per base and file.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import altair as alt
import polars as pl

from ..errors import check_choice
from ..transforms import base_bounds, check_thresholds, status_bands
from . import heatmap
from .base import ChartData, defaults, load_module, placeholder
from .utils import band_layer, finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

MODULE = "Per_base_sequence_quality"
STATISTICS = (
    "Mean",
    "Median",
    "Lower_Quartile",
    "Upper_Quartile",
    "10th_Percentile",
    "90th_Percentile",
)
# Top of the quality axis unless the data go higher
MAX_QUALITY = 41
X_TITLE = "Position in read (bp)"
Y_TITLE = "Quality score"


def quality_limit(df: pl.DataFrame) -> float:
    """Upper end of the quality axis: at least MAX_QUALITY."""
    highest = df.select(pl.max_horizontal(*STATISTICS).max()).item()
    if highest is None or math.isnan(highest):
        return MAX_QUALITY
    return max(MAX_QUALITY, math.ceil(highest) + 1)


def _single(
    data: ChartData,
    interactive: bool,
    pwf: PwfColours,
    style: StyleOptions,
    warn: float,
    fail: float,
) -> AnyChart:
    df = base_bounds(data.table).with_columns(
        (pl.col("Start") - 0.4).alias("box_start"),
        (pl.col("End") + 0.4).alias("box_end"),
        ((pl.col("Start") + pl.col("End")) / 2).alias("Centre"),
    )
    y_max = quality_limit(df)
    x_max = df["End"].max() + 0.5
    bands = status_bands(warn, fail, 0.5, x_max, 0, y_max, higher_is_better=True)

    base = alt.Chart(df).encode(
        tooltip=tooltips(
            interactive,
            alt.Tooltip("Base:N", title="Position"),
            alt.Tooltip("Mean:Q", format=".2f"),
            alt.Tooltip("Median:Q"),
            alt.Tooltip("Lower_Quartile:Q", title="Lower quartile"),
            alt.Tooltip("Upper_Quartile:Q", title="Upper quartile"),
            alt.Tooltip("10th_Percentile:Q", title="10th percentile"),
            alt.Tooltip("90th_Percentile:Q", title="90th percentile"),
        ),
    )
    x_scale = alt.Scale(domain=[0.5, x_max], nice=False, zero=False)
    whiskers = base.mark_rule(color="black").encode(
        alt.X("Centre:Q").scale(x_scale).title(X_TITLE),
        alt.Y("10th_Percentile:Q").scale(domain=[0, y_max], nice=False).title(Y_TITLE),
        alt.Y2("90th_Percentile:Q"),
    )
    boxes = base.mark_rect(color="#fde047", stroke="black", strokeWidth=0.5).encode(
        alt.X("box_start:Q"),
        alt.X2("box_end:Q"),
        alt.Y("Lower_Quartile:Q"),
        alt.Y2("Upper_Quartile:Q"),
    )
    medians = base.mark_rule(color="#ef4444").encode(
        alt.X("box_start:Q"),
        alt.X2("box_end:Q"),
        alt.Y("Median:Q"),
    )
    means = (
        alt.Chart(df)
        .mark_line(color="#2563eb")
        .encode(alt.X("Centre:Q"), alt.Y("Mean:Q"))
    )

    chart = alt.layer(band_layer(bands, pwf, alpha=0.3), whiskers, boxes, medians, means)
    chart = chart.properties(width=style.width, height=style.height)
    return finish(chart, style, interactive, title=next(iter(data.labels.values())))


def plot_base_quals(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    warn: float = 28,
    fail: float = 20,
    stat: str = "Mean",
    cluster: bool = False,
    dendrogram: bool = False,
) -> AnyChart:
    """
    Plot per base sequence quality.

    Args:
        source: FastQC report path(s), a RawReport or a ReportCollection
        interactive: Add tooltips and pan/zoom
        labels: Filename -> display label overrides
        pwf: Colours for PASS/WARN/FAIL
        style: Chart style overrides
        warn, fail: Quality scores below which a base warns or fails
        stat: Statistic shown in the collection heatmap
        cluster: Order heatmap rows by hierarchical clustering
        dendrogram: Draw the clustering dendrogram beside the heatmap

    Returns:
        An Altair chart; a placeholder chart if no report has the module

    Raises:
        InvalidOptionError: For an unknown `stat` or fail > warn
    """
    check_choice("stat", stat, STATISTICS)
    check_thresholds(warn, fail, higher_is_better=True, y_max=math.inf)
    pwf, style = defaults(pwf, style)

    data = load_module(source, MODULE, labels)
    if data.is_empty:
        return placeholder(data, style)
    if not data.is_collection:
        return _single(data, interactive, pwf, style, warn, fail)

    y_max = quality_limit(data.table)
    chart = heatmap.position_heatmap(
        data,
        data.table,
        "Base",
        stat,
        ([0, fail, warn, y_max], [pwf.FAIL, pwf.FAIL, pwf.WARN, pwf.PASS]),
        pwf,
        style,
        interactive,
        cluster,
        dendrogram,
        value_title=f"{stat.replace('_', ' ')} quality",
    )
    return finish(chart, style, interactive, title=data.title)
