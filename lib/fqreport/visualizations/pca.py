"""
Principal component analysis of files over one FastQC module.

Each file becomes a vector of the module's values (per position, per GC
bin, per duplication level, ...) and files are placed on the first two
principal components, so outlying libraries stand apart from the rest.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import altair as alt
import polars as pl

from ..errors import check_choice
from ..transforms import pivot_longer, principal_components
from .base import defaults, load_module, placeholder
from .content import total_adapter_content
from .distributions import as_percentage
from .utils import empty_plot, finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

# module -> (feature column, value column) after _features()
FEATURES = {
    "Per_base_sequence_quality": ("Base", "Mean"),
    "Per_sequence_quality_scores": ("Quality", "Percentage"),
    "Per_base_sequence_content": ("Feature", "Percentage"),
    "Per_base_GC_content": ("Base", "GC"),
    "Per_sequence_GC_content": ("GC_Content", "Percentage"),
    "Per_base_N_content": ("Base", "N_Count"),
    "Sequence_Length_Distribution": ("Length", "Percentage"),
    "Sequence_Duplication_Levels": ("Duplication_Level", "Percentage_of_total"),
    "Adapter_Content": ("Position", "Total"),
}


def _features(module: str, df: pl.DataFrame) -> pl.DataFrame:
    """Reshape a module table to one row per (file, feature)."""
    if module in {
        "Per_sequence_quality_scores",
        "Per_sequence_GC_content",
        "Sequence_Length_Distribution",
    }:
        return as_percentage(df)
    if module == "Per_base_sequence_content":
        return pivot_longer(df, module, names_to="Nucleotide").with_columns(
            pl.concat_str("Base", "Nucleotide", separator=":").alias("Feature"),
        )
    if module == "Adapter_Content":
        return total_adapter_content(df)
    return df


def plot_fastqc_pca(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    style: StyleOptions | None = None,
    module: str = "Per_sequence_GC_content",
    scale: bool = False,
) -> AnyChart:
    """
    Plot files on the first two principal components of one module.

    Args:
        source: FastQC report paths, a RawReport or a ReportCollection
        interactive: Add tooltips and pan/zoom
        labels: Filename -> display label overrides
        style: Chart style overrides
        module: Module whose values describe each file
        scale: Scale every feature to unit variance before the analysis

    Raises:
        InvalidOptionError: If `module` cannot be analysed
    """
    check_choice("module", module, FEATURES)
    _, style = defaults(None, style)
    data = load_module(source, module, labels)
    if data.is_empty:
        return placeholder(data, style)

    title = f"PCA: {data.title}"
    if len(data.label_order) < 2:
        chart = empty_plot("PCA needs at least two reports with this module", style)
        return finish(chart, style, interactive=False, title=title)

    feature, value = FEATURES[module]
    pca = principal_components(
        _features(module, data.table), "Filename", feature, value, scale=scale
    )
    df = data.with_labels(pca.scores)
    pc1, pc2 = (f"PC{i + 1} ({share:.1%})" for i, share in enumerate(pca.explained))

    points = (
        alt.Chart(df)
        .mark_point(filled=True, size=90)
        .encode(
            alt.X("PC1:Q").title(pc1),
            alt.Y("PC2:Q").title(pc2),
            alt.Color("Label:N").sort(data.label_order).title("Filename"),
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip("PC1:Q", format=".3f"),
                alt.Tooltip("PC2:Q", format=".3f"),
            ),
        )
    )
    names = points.mark_text(align="left", dx=7, fontSize=style.font_size).encode(
        text="Label:N",
    )
    chart = alt.layer(points, names).properties(width=style.width, height=style.height)
    return finish(chart, style, interactive, title=title)

