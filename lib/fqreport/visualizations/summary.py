"""
FastQC status overview: one tile per file and module, coloured by verdict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import polars as pl

from ..schema import MODULES
from .base import defaults, load_module, placeholder
from .utils import finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

MODULE = "Summary"

# Display order of the module columns, as FastQC writes them
CATEGORY_ORDER = [
    schema.title
    for name, schema in MODULES.items()
    if name not in {"Summary", "Total_Deduplicated_Percentage"}
]


def plot_summary(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
) -> AnyChart:
    """
    Plot FastQC's PASS/WARN/FAIL verdicts as a file x module grid.

    Args:
        source: FastQC report path(s), a RawReport or a ReportCollection
        interactive: Add tooltips
        labels: Filename -> display label overrides
        pwf: Colours for PASS/WARN/FAIL
        style: Chart style overrides

    Returns:
        An Altair chart
    """
    pwf, style = defaults(pwf, style)
    data = load_module(source, MODULE, labels)
    if data.is_empty:
        return placeholder(data, style)

    df = data.with_labels()
    present = set(df["Category"].to_list())
    categories = [c for c in CATEGORY_ORDER if c in present]
    categories += [
        c for c in df["Category"].unique(maintain_order=True).to_list() if c not in categories
    ]
    domain, colours = pwf.domain_range()

    chart = (
        alt.Chart(df)
        .mark_rect(stroke="white", strokeWidth=1)
        .encode(
            alt.X("Category:N").sort(categories).title(None).axis(labelAngle=-45),
            alt.Y("Label:N").sort(data.label_order).title(None),
            alt.Fill("Status:N").scale(domain=domain, range=colours).title("Status"),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip("Category:N", title="Module"),
                alt.Tooltip("Status:N"),
            ),
        )
        .properties(
            width=style.width,
            height=max(style.height, 20 * len(data.label_order)) if data.is_collection else 60,
        )
    )
    # Nominal axes: tooltips only, no pan/zoom
    return finish(chart, style, interactive=False, title="FastQC Summary")


def summary_table(source: DataSource) -> pl.DataFrame:
    """Verdicts pivoted to one row per file and one column per module."""
    data = load_module(source, MODULE)
    if data.is_empty:
        return pl.DataFrame(schema={"Filename": pl.Utf8})
    return data.table.pivot(
        on="Category", index="Filename", values="Status", aggregate_function="first"
    )
