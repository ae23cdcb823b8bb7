"""
Table reshaping for FastQC charts.

Pure functions from module tables to the shapes the chart builders draw:
long-format pivots, stacked tile geometry, hierarchical clustering and
principal components of samples, pass/warn/fail background bands, status
records and display labels.
None of them mutate their inputs, and all are deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import polars as pl
from scipy.cluster.hierarchy import dendrogram, linkage
from scipy.linalg import svd
from scipy.spatial.distance import pdist

from .errors import InvalidOptionError
from .report import fq_name
from .schema import MODULES, QCStatus, StatusRecord, get_schema

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from .collection import ReportCollection

PERCENTAGE_PREFIX = "Percentage_of_"
SEGMENT_SCHEMA = {
    "x": pl.Float64,
    "y": pl.Float64,
    "xend": pl.Float64,
    "yend": pl.Float64,
}
BAND_SCHEMA = {
    "xmin": pl.Float64,
    "xmax": pl.Float64,
    "ymin": pl.Float64,
    "ymax": pl.Float64,
    "Status": pl.Utf8,
}


# =============================================================================
# Long-format pivots
# =============================================================================


def category_label(column: str) -> str:
    """
    Display label for a percentage category column.

    ``Percentage_of_total`` becomes ``% Total sequences``; other columns
    have underscores replaced with spaces.
    """
    if column.startswith(PERCENTAGE_PREFIX):
        label = "% " + column[len(PERCENTAGE_PREFIX) :]
        return f"{label.title()} sequences"
    return column.replace("_", " ")


def pivot_longer(
    df: pl.DataFrame,
    module: str,
    names_to: str = "Type",
    values_to: str = "Percentage",
) -> pl.DataFrame:
    """
    Convert a module table to one row per (row, percentage category).

    The categories come from the module schema, so only genuine percentage
    columns are unpivoted. Rows keep their original order; within a row,
    categories follow the schema order.

    Args:
        df: Module table, e.g. from ``ReportCollection.get_module``
        module: Module name the table belongs to
        names_to: Name of the new category label column
        values_to: Name of the new value column

    Returns:
        DataFrame with the non-category columns, plus `names_to` and
        `values_to`
    """
    schema = get_schema(module)
    categories = schema.category_columns(df)
    if not categories:
        raise InvalidOptionError("module", module, _modules_with_categories())
    index = [c for c in df.columns if c not in categories]
    labels = {c: category_label(c) for c in categories}
    return (
        df.with_row_index("_row")
        .unpivot(on=categories, index=["_row", *index], variable_name=names_to, value_name=values_to)
        .with_columns(
            pl.col(names_to).replace_strict(labels, return_dtype=pl.Utf8),
            pl.col(names_to)
            .replace_strict({c: i for i, c in enumerate(categories)}, return_dtype=pl.Int64)
            .alias("_cat"),
        )
        .sort("_row", "_cat")
        .drop("_row", "_cat")
    )


def _modules_with_categories() -> list[str]:
    return [n for n, s in MODULES.items() if s.categories or s.open_dtype is not None]


def add_category_index(df: pl.DataFrame, column: str, name: str = "x") -> pl.DataFrame:
    """
    Number the distinct values of `column` by first appearance, from 1.

    Used to place ordered categories (duplication levels, base ranges) on a
    continuous axis.
    """
    levels = df[column].unique(maintain_order=True).to_list()
    index = {level: i for i, level in enumerate(levels, start=1)}
    return df.with_columns(
        pl.col(column).replace_strict(index, return_dtype=pl.Int64).alias(name),
    )


# =============================================================================
# Percentage to geometry
# =============================================================================


def sample_positions(
    df: pl.DataFrame,
    sample_col: str,
    sample_order: Sequence[str] | None = None,
) -> pl.DataFrame:
    """
    Give each sample a unit-high row on a continuous y axis.

    The i-th sample of `sample_order` (default: first appearance, counting
    from 1) occupies ``[i - 0.5, i + 0.5)``. Rows are sorted by sample
    position, keeping their original order within a sample.

    Returns:
        `df` with ymin and ymax added
    """
    if sample_order is None:
        sample_order = df[sample_col].unique(maintain_order=True).to_list()
    position = {s: i for i, s in enumerate(sample_order, start=1)}
    missing = set(df[sample_col].unique().to_list()) - set(position)
    if missing:
        raise InvalidOptionError("sample_order", sorted(missing), sample_order)

    return (
        df.with_row_index("_row")
        .with_columns(
            pl.col(sample_col).replace_strict(position, return_dtype=pl.Int64).alias("_sample"),
        )
        .sort("_sample", "_row")
        .with_columns((pl.col("_sample").cast(pl.Float64) + 0.5).alias("ymax"))
        .with_columns((pl.col("ymax") - 1).alias("ymin"))
        .drop("_row", "_sample")
    )


def percentage_to_intervals(
    df: pl.DataFrame,
    sample_col: str,
    value_col: str,
    sample_order: Sequence[str] | None = None,
    digits: int = 2,
    boundary_digits: int = 1,
) -> pl.DataFrame:
    """
    Convert per-sample category percentages into stacked tile geometry.

    Within each sample, percentages are rounded to `digits` places, summed
    cumulatively, and the running total rounded to `boundary_digits` to give
    ``xmax``; ``xmin`` is the previous tile's ``xmax`` (0 for the first).
    Rounding happens before the cumulative sum. Samples are stacked on the
    y axis as in ``sample_positions``.

    Args:
        df: Long table, one row per (sample, category), categories in order
        sample_col: Column identifying the sample
        value_col: Column holding the percentage
        sample_order: Order of samples from bottom to top of the y axis
        digits: Decimal places for each percentage
        boundary_digits: Decimal places for the cumulative boundaries

    Returns:
        `df` sorted by sample order, with xmin, xmax, ymin, ymax added
    """
    return (
        sample_positions(df, sample_col, sample_order)
        .with_columns(
            pl.col(value_col)
            .fill_null(0.0)
            .round(digits)
            .cum_sum()
            .over(sample_col)
            .round(boundary_digits)
            .alias("xmax"),
        )
        .with_columns(
            pl.col("xmax").shift(1, fill_value=0.0).over(sample_col).alias("xmin"),
        )
    )


def base_bounds(df: pl.DataFrame, column: str = "Base") -> pl.DataFrame:
    """
    Split FastQC base labels (``"7"`` or ``"10-14"``) into Start and End.
    """
    parts = pl.col(column).str.split_exact("-", 1)
    return df.with_columns(
        parts.struct.field("field_0").cast(pl.Int64).alias("Start"),
        pl.coalesce(parts.struct.field("field_1"), parts.struct.field("field_0"))
        .cast(pl.Int64)
        .alias("End"),
    )


# =============================================================================
# Clustering and principal components
# =============================================================================


@dataclass(frozen=True)
class Dendrogram:
    """
    Result of clustering samples.

    Attributes:
        order: Sample names in leaf order
        segments: Line segments (x, y, xend, yend) for drawing the tree, with
                  x on the leaf axis (leaf i at position i, from 1) and y the
                  merge height
    """

    order: list[str]
    segments: pl.DataFrame


def sample_matrix(
    df: pl.DataFrame,
    sample_col: str,
    category_col: str,
    value_col: str,
) -> tuple[list[str], np.ndarray]:
    """
    One row of `value_col` per sample, categories in first-appearance order.

    Missing (sample, category) pairs and nulls are 0.
    """
    samples = df[sample_col].unique(maintain_order=True).to_list()
    categories = df[category_col].unique(maintain_order=True).to_list()
    wide = (
        df.select(sample_col, category_col, value_col)
        .pivot(on=category_col, index=sample_col, values=value_col, aggregate_function="first")
    )
    wide = (
        pl.DataFrame({sample_col: samples})
        .join(wide, on=sample_col, how="left", maintain_order="left")
        .select(
            pl.col(str(c)).cast(pl.Float64).fill_nan(None).fill_null(0.0)
            for c in categories
        )
    )
    return samples, wide.to_numpy().astype(float)


def cluster_samples(
    df: pl.DataFrame,
    sample_col: str,
    category_col: str,
    value_col: str,
    method: str = "complete",
) -> Dendrogram:
    """
    Hierarchically cluster samples on their per-category values.

    Samples are compared by Euclidean distance between their value vectors
    and merged by agglomerative clustering (complete linkage by default).

    Args:
        df: Long table with one row per (sample, category)
        sample_col: Column identifying the sample
        category_col: Column identifying the category (vector position)
        value_col: Numeric column clustered on
        method: Linkage method passed to scipy

    Returns:
        Dendrogram with the leaf order and the tree segments
    """
    samples, matrix = sample_matrix(df, sample_col, category_col, value_col)
    if len(samples) < 2:
        return Dendrogram(order=samples, segments=pl.DataFrame(schema=SEGMENT_SCHEMA))

    tree = linkage(pdist(matrix, metric="euclidean"), method=method)
    layout = dendrogram(tree, no_plot=True, labels=samples)

    segments = []
    for icoord, dcoord in zip(layout["icoord"], layout["dcoord"]):
        # scipy places leaf i at 10 * i + 5
        xs = [(x - 5) / 10 + 1 for x in icoord]
        for start in range(3):
            segments.append(
                {
                    "x": xs[start],
                    "y": float(dcoord[start]),
                    "xend": xs[start + 1],
                    "yend": float(dcoord[start + 1]),
                },
            )
    return Dendrogram(
        order=list(layout["ivl"]),
        segments=pl.DataFrame(segments, schema=SEGMENT_SCHEMA),
    )


@dataclass(frozen=True)
class PrincipalComponents:
    """
    Result of a principal component analysis of samples.

    Attributes:
        scores: One row per sample: the sample column, then PC1, PC2, ...
        explained: Fraction of the total variance along each component
    """

    scores: pl.DataFrame
    explained: list[float]


def principal_components(
    df: pl.DataFrame,
    sample_col: str,
    category_col: str,
    value_col: str,
    n_components: int = 2,
    scale: bool = False,
) -> PrincipalComponents:
    """
    Project samples onto the principal components of their per-category values.

    The sample x category matrix from ``sample_matrix`` is centred on each
    category's mean, optionally divided by its standard deviation, and
    decomposed by SVD. Each component's sign is fixed so that its largest
    loading is positive. Components the data cannot support (fewer categories
    or samples than `n_components`) are returned as zeros.

    Args:
        df: Long table with one row per (sample, category)
        sample_col: Column identifying the sample
        category_col: Column identifying the category
        value_col: Numeric column analysed
        n_components: Number of components to return
        scale: Divide each category by its standard deviation; constant
               categories are left unscaled

    Returns:
        PrincipalComponents with the sample scores and explained variance

    Raises:
        ValueError: If `df` holds fewer than two samples
    """
    samples, matrix = sample_matrix(df, sample_col, category_col, value_col)
    if len(samples) < 2:
        msg = f"principal components need at least two samples, got {len(samples)}"
        raise ValueError(msg)

    centred = matrix - matrix.mean(axis=0)
    if scale:
        sd = centred.std(axis=0, ddof=1)
        centred = centred / np.where(sd > 0, sd, 1.0)

    u, s, vt = svd(centred, full_matrices=False)
    signs = np.sign(vt[np.arange(len(vt)), np.abs(vt).argmax(axis=1)])
    signs[signs == 0] = 1.0
    scores = u * signs * s
    variance = s**2
    total = variance.sum()
    explained = variance / total if total > 0 else np.zeros_like(variance)

    available = min(n_components, scores.shape[1])
    columns: dict[str, object] = {sample_col: samples}
    for i in range(n_components):
        name = f"PC{i + 1}"
        columns[name] = scores[:, i] if i < available else np.zeros(len(samples))
    return PrincipalComponents(
        scores=pl.DataFrame(columns),
        explained=[float(explained[i]) if i < available else 0.0 for i in range(n_components)],
    )


# =============================================================================
# Status bands and records
# =============================================================================


def check_thresholds(
    warn: float,
    fail: float,
    y_min: float = 0,
    y_max: float = 100,
    higher_is_better: bool = False,
) -> tuple[float, float]:
    """
    Validate warn/fail thresholds against an axis range.

    Returns:
        The (lower, upper) band boundaries

    Raises:
        InvalidOptionError: If the thresholds are out of order or outside
            the axis range
    """
    lower, upper = (fail, warn) if higher_is_better else (warn, fail)
    if not y_min <= lower <= upper <= y_max:
        expected = (
            f"y_min <= fail <= warn <= y_max ({y_min}, {y_max})"
            if higher_is_better
            else f"y_min <= warn <= fail <= y_max ({y_min}, {y_max})"
        )
        raise InvalidOptionError("warn/fail", (warn, fail), [expected])
    return lower, upper


def status_bands(
    warn: float,
    fail: float,
    x_min: float,
    x_max: float,
    y_min: float = 0,
    y_max: float = 100,
    higher_is_better: bool = False,
) -> pl.DataFrame:
    """
    PASS/WARN/FAIL background rectangles spanning the category axis.

    With ``higher_is_better=False`` (percentages of something bad) the
    bands are PASS ``[y_min, warn)``, WARN ``[warn, fail)``, FAIL
    ``[fail, y_max]``. With ``higher_is_better=True`` (quality scores) they
    are FAIL ``[y_min, fail)``, WARN ``[fail, warn)``, PASS ``[warn, y_max]``.
    """
    lower, upper = check_thresholds(warn, fail, y_min, y_max, higher_is_better)
    order = ["FAIL", "WARN", "PASS"] if higher_is_better else ["PASS", "WARN", "FAIL"]
    return pl.DataFrame(
        {
            "xmin": [float(x_min)] * 3,
            "xmax": [float(x_max)] * 3,
            "ymin": [float(y_min), float(lower), float(upper)],
            "ymax": [float(lower), float(upper), float(y_max)],
            "Status": order,
        },
        schema=BAND_SCHEMA,
    )


def classify(value: float, warn: float, fail: float) -> QCStatus:
    """Pass/warn/fail for a value where larger is worse."""
    if value >= fail:
        return QCStatus.FAIL
    if value >= warn:
        return QCStatus.WARN
    return QCStatus.PASS


def status_records(
    collection: ReportCollection,
    warn: float = 20,
    fail: float = 50,
) -> list[StatusRecord]:
    """
    Duplication status of each report from its deduplicated percentage.

    The thresholded metric is the percentage of reads that are duplicates,
    ``100 - Total_Deduplicated_Percentage``. Reports without the total
    (FastQC 0.10) are skipped.
    """
    check_thresholds(warn, fail)
    totals = collection.get_module("Total_Deduplicated_Percentage")
    records = []
    for filename, total in totals.select("Filename", "Total").iter_rows():
        if total is None or np.isnan(total):
            continue
        duplicated = 100 - total
        records.append(
            StatusRecord(
                filename=filename,
                module="Sequence_Duplication_Levels",
                metric="Percentage_duplicated",
                value=duplicated,
                status=classify(duplicated, warn, fail),
            ),
        )
    return records


# =============================================================================
# Labels
# =============================================================================


def make_labels(
    filenames: Iterable[str],
    labels: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Display labels for filenames, in filename order.

    Args:
        filenames: Filenames as recorded in the reports
        labels: Optional filename -> label overrides. Keys not among
                `filenames` are ignored.

    Returns:
        Filename -> label for every filename; filenames without an override
        use their extension-stripped name

    Raises:
        InvalidOptionError: If two filenames would share a label
    """
    labels = labels or {}
    result = {f: labels.get(f, fq_name(f)) for f in dict.fromkeys(filenames)}
    seen: dict[str, str] = {}
    for filename, label in result.items():
        if label in seen:
            raise InvalidOptionError("labels", label, ["a label unique to each file"])
        seen[label] = filename
    return result
