"""
Per-position content charts: N content, base composition and adapter content.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import polars as pl

from ..errors import check_choice
from ..schema import MODULES
from ..transforms import base_bounds, check_thresholds, pivot_longer, status_bands
from . import heatmap
from .base import ChartData, defaults, load_module, placeholder
from .utils import band_layer, finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

PLOT_TYPES = ("heatmap", "line")
NUCLEOTIDE_COLOURS = {"G": "#111827", "A": "#22c55e", "T": "#ef4444", "C": "#2563eb"}
X_TITLE = "Position in read (bp)"


def _position_lines(
    data: ChartData,
    df: pl.DataFrame,
    value_col: str,
    y_title: str,
    interactive: bool,
    pwf: PwfColours,
    style: StyleOptions,
    warn: float,
    fail: float,
    colour: alt.Color | alt.ColorValue | None = None,
) -> alt.LayerChart:
    """Lines of a per-position percentage over PASS/WARN/FAIL bands."""
    df = data.with_labels(base_bounds(df, _position_col(df)))
    x_max = float(df["End"].max())
    bands = status_bands(warn, fail, 1, x_max)
    if colour is None:
        colour = (
            alt.Color("Label:N").sort(data.label_order).title("Filename")
            if data.is_collection
            else alt.ColorValue("#2563eb")
        )
    lines = (
        alt.Chart(df)
        .mark_line()
        .encode(
            alt.X("Start:Q").scale(domain=[1, x_max], nice=False, zero=False).title(X_TITLE),
            alt.Y(f"{value_col}:Q").scale(domain=[0, 100]).title(y_title),
            color=colour,
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip(f"{_position_col(df)}:N", title="Position"),
                alt.Tooltip(f"{value_col}:Q", title=y_title, format=".2f"),
            ),
        )
    )
    return alt.layer(band_layer(bands, pwf), lines).properties(
        width=style.width,
        height=style.height,
    )


def _position_col(df: pl.DataFrame) -> str:
    return "Position" if "Position" in df.columns else "Base"


def _by_position(
    data: ChartData,
    df: pl.DataFrame,
    value_col: str,
    y_title: str,
    interactive: bool,
    pwf: PwfColours,
    style: StyleOptions,
    warn: float,
    fail: float,
    plot_type: str,
    cluster: bool,
    dendrogram: bool,
) -> AnyChart:
    if not data.is_collection or plot_type == "line":
        chart = _position_lines(data, df, value_col, y_title, interactive, pwf, style, warn, fail)
        title = data.title if data.is_collection else next(iter(data.labels.values()))
        return finish(chart, style, interactive, title=title)
    chart = heatmap.position_heatmap(
        data,
        df,
        _position_col(df),
        value_col,
        ([0, warn, fail], [pwf.PASS, pwf.WARN, pwf.FAIL]),
        pwf,
        style,
        interactive,
        cluster,
        dendrogram,
        value_title=y_title,
    )
    return finish(chart, style, interactive, title=data.title)


def plot_n_content(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    warn: float = 5,
    fail: float = 20,
    plot_type: str = "heatmap",
    cluster: bool = False,
    dendrogram: bool = False,
) -> AnyChart:
    """
    Plot the percentage of N calls at each position.

    Args:
        source: FastQC report path(s), a RawReport or a ReportCollection
        interactive: Add tooltips and pan/zoom
        labels: Filename -> display label overrides
        pwf: Colours for PASS/WARN/FAIL
        style: Chart style overrides
        warn, fail: N percentages at which a position warns or fails
        plot_type: "heatmap" or "line" (collections only)
        cluster: Order heatmap rows by hierarchical clustering
        dendrogram: Draw the clustering dendrogram beside the heatmap

    Raises:
        InvalidOptionError: For an unknown `plot_type` or warn > fail
    """
    check_choice("plot_type", plot_type, PLOT_TYPES)
    check_thresholds(warn, fail)
    pwf, style = defaults(pwf, style)
    data = load_module(source, "Per_base_N_content", labels)
    if data.is_empty:
        return placeholder(data, style)
    return _by_position(
        data,
        data.table,
        "N_Count",
        "N content (%)",
        interactive,
        pwf,
        style,
        warn,
        fail,
        plot_type,
        cluster,
        dendrogram,
    )


def total_adapter_content(df: pl.DataFrame) -> pl.DataFrame:
    """Add ``Total``: the summed percentage of every adapter at each position."""
    adapters = MODULES["Adapter_Content"].category_columns(df)
    return df.with_columns(pl.sum_horizontal(*adapters).alias("Total"))


def plot_adapter_content(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    warn: float = 5,
    fail: float = 10,
    adapter_type: str = "Total",
    plot_type: str = "heatmap",
    cluster: bool = False,
    dendrogram: bool = False,
) -> AnyChart:
    """
    Plot adapter content along the read.

    A single report gets one line per adapter. A collection shows, per file,
    either the summed content of all adapters (``adapter_type="Total"``) or
    one named adapter, e.g. ``"Illumina_Universal_Adapter"``.

    Raises:
        InvalidOptionError: For an unknown `plot_type`, warn > fail, or an
            `adapter_type` no report contains
    """
    check_choice("plot_type", plot_type, PLOT_TYPES)
    check_thresholds(warn, fail)
    pwf, style = defaults(pwf, style)
    data = load_module(source, "Adapter_Content", labels)
    if data.is_empty:
        return placeholder(data, style)

    y_title = "Adapter content (%)"
    if not data.is_collection:
        long = pivot_longer(data.table, data.module, names_to="Adapter", values_to="Percentage")
        chart = _position_lines(
            data,
            long,
            "Percentage",
            y_title,
            interactive,
            pwf,
            style,
            warn,
            fail,
            colour=alt.Color("Adapter:N").title(None),
        )
        return finish(chart, style, interactive, title=next(iter(data.labels.values())))

    adapters = MODULES["Adapter_Content"].category_columns(data.table)
    check_choice("adapter_type", adapter_type, ["Total", *adapters])
    df = total_adapter_content(data.table)
    if adapter_type != "Total":
        y_title = f"{adapter_type.replace('_', ' ')} (%)"
    return _by_position(
        data,
        df,
        adapter_type,
        y_title,
        interactive,
        pwf,
        style,
        warn,
        fail,
        plot_type,
        cluster,
        dendrogram,
    )


def plot_seq_content(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    columns: int = 2,
) -> AnyChart:
    """
    Plot per base sequence content: one line per nucleotide.

    A collection is faceted into one panel per file, `columns` panels wide.
    """
    pwf, style = defaults(pwf, style)
    data = load_module(source, "Per_base_sequence_content", labels)
    if data.is_empty:
        return placeholder(data, style)

    long = data.with_labels(
        base_bounds(
            pivot_longer(data.table, data.module, names_to="Nucleotide", values_to="Percentage"),
        ),
    )
    x_max = float(long["End"].max())
    chart = (
        alt.Chart(long)
        .mark_line()
        .encode(
            alt.X("Start:Q").scale(domain=[1, x_max], nice=False, zero=False).title(X_TITLE),
            alt.Y("Percentage:Q").scale(domain=[0, 100]).title("Sequence content (%)"),
            alt.Color("Nucleotide:N")
            .scale(domain=list(NUCLEOTIDE_COLOURS), range=list(NUCLEOTIDE_COLOURS.values()))
            .title(None),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip("Base:N", title="Position"),
                alt.Tooltip("Nucleotide:N"),
                alt.Tooltip("Percentage:Q", format=".2f"),
            ),
        )
    )
    if not data.is_collection:
        chart = chart.properties(width=style.width, height=style.height)
        return finish(chart, style, interactive, title=next(iter(data.labels.values())))

    chart = chart.properties(
        width=style.width / columns,
        height=style.height / columns,
    ).facet(
        alt.Facet("Label:N").sort(data.label_order).title(None),
        columns=columns,
    )
    return finish(chart, style, interactive, title=data.title)
