"""
K-mer content charts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import polars as pl

from ..transforms import base_bounds
from . import heatmap
from .base import defaults, load_module, placeholder
from .overrep import top_sequences
from .utils import finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

MODULE = "Kmer_Content"
X_TITLE = "Position in read (bp)"
Y_TITLE = "Max Obs/Exp"


def max_by_position(df: pl.DataFrame) -> pl.DataFrame:
    """Highest k-mer Obs/Exp at each position of each file."""
    return (
        base_bounds(df, "Max_Obs_Exp_Position")
        .group_by("Filename", "Max_Obs_Exp_Position", maintain_order=True)
        .agg(pl.col("Obs_Exp_Max").max(), pl.col("Start").first())
        .sort("Start", maintain_order=True)
        .drop("Start")
    )


def plot_kmers(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    n: int = 6,
    cluster: bool = False,
    dendrogram: bool = False,
) -> AnyChart:
    """
    Plot k-mer enrichment along the read.

    A single report shows where each of its `n` most enriched k-mers peaks.
    A collection becomes a heatmap of the highest Obs/Exp ratio at each
    position, one row per file.
    """
    pwf, style = defaults(pwf, style)
    data = load_module(source, MODULE, labels)
    if data.is_empty:
        return placeholder(data, style)

    if not data.is_collection:
        df = base_bounds(
            top_sequences(data.table, n, by="Obs_Exp_Max"),
            "Max_Obs_Exp_Position",
        )
        chart = (
            alt.Chart(df)
            .mark_point(filled=True, size=80)
            .encode(
                alt.X("Start:Q").scale(zero=False).title(X_TITLE),
                alt.Y("Obs_Exp_Max:Q").title(Y_TITLE),
                alt.Color("Sequence:N").sort(df["Sequence"].to_list()).title("K-mer"),
                tooltip=tooltips(
                    interactive,
                    alt.Tooltip("Sequence:N", title="K-mer"),
                    alt.Tooltip("Count:Q"),
                    alt.Tooltip("Obs_Exp_Max:Q", title=Y_TITLE, format=".2f"),
                    alt.Tooltip("Max_Obs_Exp_Position:N", title="Position"),
                ),
            )
            .properties(width=style.width, height=style.height)
        )
        return finish(chart, style, interactive, title=next(iter(data.labels.values())))

    df = max_by_position(data.table)
    highest = float(df["Obs_Exp_Max"].max())
    chart = heatmap.position_heatmap(
        data,
        df,
        "Max_Obs_Exp_Position",
        "Obs_Exp_Max",
        ([0, highest], ["#f8fafc", pwf.MAX]),
        pwf,
        style,
        interactive,
        cluster,
        dendrogram,
        value_title=Y_TITLE,
    )
    return finish(chart, style, interactive, title=data.title)
