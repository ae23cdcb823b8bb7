"""
Overrepresented sequence charts and FASTA export.
"""

from __future__ import annotations

from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING

import altair as alt
import polars as pl
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from loguru import logger

from ..errors import InvalidOptionError
from ..report import fq_name
from .base import defaults, load_module, placeholder
from .utils import finish, tooltips

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..config import PwfColours, StyleOptions
    from ..sources import DataSource
    from .utils import AnyChart

MODULE = "Overrepresented_sequences"


def top_sequences(df: pl.DataFrame, n: int, by: str = "Percentage") -> pl.DataFrame:
    """
    The `n` highest-ranking sequences of each file, by column `by`.

    Adds ``Rank`` (1 = highest) and keeps files in their original order.
    """
    if n < 1:
        raise InvalidOptionError("n", n, ["a positive integer"])
    return (
        df.with_row_index("_row")
        .with_columns(
            pl.col(by)
            .rank(method="ordinal", descending=True)
            .over("Filename")
            .cast(pl.Int64)
            .alias("Rank"),
        )
        .filter(pl.col("Rank") <= n)
        .with_columns(pl.col("_row").min().over("Filename").alias("_file"))
        .sort("_file", "Rank")
        .drop("_row", "_file")
    )


def plot_overrep(
    source: DataSource,
    interactive: bool = False,
    labels: Mapping[str, str] | None = None,
    pwf: PwfColours | None = None,
    style: StyleOptions | None = None,
    n: int = 10,
) -> AnyChart:
    """
    Plot overrepresented sequences, coloured by their possible source.

    A single report shows a bar for each of its top `n` sequences; a
    collection shows, per file, the percentage of reads taken up by its top
    `n` sequences, stacked by possible source.
    """
    pwf, style = defaults(pwf, style)
    data = load_module(source, MODULE, labels)
    if data.is_empty:
        return placeholder(data, style)

    df = data.with_labels(top_sequences(data.table, n))
    colour = alt.Color("Possible_Source:N").title("Possible source")

    if not data.is_collection:
        chart = (
            alt.Chart(df)
            .mark_bar()
            .encode(
                alt.X("Percentage:Q").title("Percentage of reads (%)"),
                alt.Y("Sequence:N").sort(df["Sequence"].to_list()).title(None),
                colour,
                tooltip=tooltips(
                    interactive,
                    alt.Tooltip("Sequence:N"),
                    alt.Tooltip("Count:Q"),
                    alt.Tooltip("Percentage:Q", format=".2f"),
                    alt.Tooltip("Possible_Source:N", title="Possible source"),
                ),
            )
            .properties(width=style.width, height=style.height)
        )
        label = next(iter(data.labels.values()))
        return finish(chart, style, interactive=False, title=label)

    by_source = df.group_by(
        "Filename", "Label", "Possible_Source", maintain_order=True
    ).agg(pl.col("Percentage").sum(), pl.len().alias("Sequences"))
    chart = (
        alt.Chart(by_source)
        .mark_bar()
        .encode(
            alt.X("Percentage:Q").title("Percentage of reads (%)"),
            alt.Y("Label:N").sort(data.label_order).title(None),
            colour,
            tooltip=tooltips(
                interactive,
                alt.Tooltip("Label:N", title="Filename"),
                alt.Tooltip("Possible_Source:N", title="Possible source"),
                alt.Tooltip("Sequences:Q"),
                alt.Tooltip("Percentage:Q", format=".2f"),
            ),
        )
        .properties(width=style.width, height=style.height)
    )
    return finish(chart, style, interactive=False, title=data.title)


def overrep_to_fasta(
    source: DataSource,
    path: Path | str | None = None,
    n: int = 10,
    labels: Mapping[str, str] | None = None,
) -> str:
    """
    Export the top `n` overrepresented sequences of each file as FASTA.

    A sequence overrepresented in several files is written once, under the
    first file it appears in.

    Args:
        source: FastQC report path(s), a RawReport or a ReportCollection
        path: If given, the FASTA text is also written here
        n: Sequences taken from each file
        labels: Filename -> label overrides used in the record names

    Returns:
        The FASTA text; empty if no report has the module
    """
    data = load_module(source, MODULE, labels)
    records = []
    seen: set[str] = set()
    if not data.is_empty:
        for filename, sequence, count, percentage, origin, rank in (
            top_sequences(data.table, n)
            .select("Filename", "Sequence", "Count", "Percentage", "Possible_Source", "Rank")
            .iter_rows()
        ):
            if sequence in seen:
                continue
            seen.add(sequence)
            label = data.labels.get(filename, fq_name(filename))
            records.append(
                SeqRecord(
                    Seq(sequence),
                    id=f"{label}_overrep{rank}",
                    description=f"count={count} percentage={percentage:.2f} source={origin}",
                ),
            )

    handle = StringIO()
    SeqIO.write(records, handle, "fasta")
    text = handle.getvalue()
    if path is not None:
        with Path(path).open("w", encoding="utf8") as output_handle:
            output_handle.write(text)
        logger.info(f"Wrote {len(records)} overrepresented sequence(s) to {path}")
    return text
