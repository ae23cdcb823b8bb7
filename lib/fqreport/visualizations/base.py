"""
Chart input resolution shared by the chart builders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import polars as pl

from ..config import DEFAULT_STYLE, PWF
from ..schema import get_schema
from ..sources import ReportSource, SourceKind, resolve_source
from ..transforms import make_labels
from .utils import empty_plot, finish

if TYPE_CHECKING:
    from collections.abc import Mapping

    import altair as alt

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource


@dataclass(frozen=True)
class ChartData:
    """
    A module table ready for charting.

    Attributes:
        source: The resolved data source
        module: Module name
        table: The module's rows across the source, in collection order
        labels: Filename -> display label, in collection order
    """

    source: ReportSource
    module: str
    table: pl.DataFrame
    labels: dict[str, str]

    @property
    def is_collection(self) -> bool:
        return self.source.kind is SourceKind.COLLECTION

    @property
    def is_empty(self) -> bool:
        return self.table.is_empty()

    @property
    def title(self) -> str:
        return get_schema(self.module).title

    @property
    def label_order(self) -> list[str]:
        """Display labels of the files holding data, in collection order."""
        present = set(self.table["Filename"].to_list())
        return [label for f, label in self.labels.items() if f in present]

    def with_labels(self, df: pl.DataFrame | None = None) -> pl.DataFrame:
        """Add a ``Label`` column holding each row's display label."""
        df = self.table if df is None else df
        return df.with_columns(
            pl.col("Filename").replace_strict(self.labels, return_dtype=pl.Utf8).alias("Label"),
        )


def load_module(
    source: DataSource | ReportSource,
    module: str,
    labels: Mapping[str, str] | None = None,
) -> ChartData:
    """
    Resolve `source` and fetch `module` from it.

    Label overrides for files not in the source are ignored.
    """
    if not isinstance(source, ReportSource):
        source = resolve_source(source)
    table = source.collection.get_module(module)
    return ChartData(
        source=source,
        module=module,
        table=table,
        labels=make_labels(source.collection.filenames, labels),
    )


def defaults(
    pwf: PwfColours | None,
    style: StyleOptions | None,
) -> tuple[PwfColours, StyleOptions]:
    """Fill in the default colours and style."""
    return pwf or PWF, style or DEFAULT_STYLE


def placeholder(data: ChartData, style: StyleOptions) -> alt.Chart:
    """The "module not detected" chart for a module with no rows."""
    message = f"No {data.title} Module Detected"
    return finish(empty_plot(message, style), style, interactive=False)
