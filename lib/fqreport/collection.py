"""
Ordered collections of parsed FastQC reports.

A ReportCollection keeps reports in insertion order, unique by filename,
and stacks a module's rows across all members for comparison plots.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import polars as pl
from loguru import logger

from .errors import DuplicateReportError, SchemaMismatchError
from .parser import parse_report
from .report import RawReport
from .schema import MODULES, empty_table, get_schema


def _check_compatible(reports: Sequence[RawReport]) -> None:
    """All members must expose the same modules with the same fixed columns."""
    if not reports:
        return
    first = reports[0]
    for report in reports[1:]:
        if set(report.modules) != set(first.modules):
            msg = (
                f"{report.filename} exposes modules {sorted(report.modules)}, "
                f"expected {sorted(first.modules)}"
            )
            raise SchemaMismatchError(msg)
        for name, table in report.modules.items():
            schema = MODULES[name]
            fixed = schema.polars_schema
            got = {c: table.schema[c] for c in table.columns if c in fixed}
            expected = {c: first.modules[name].schema[c] for c in fixed}
            if schema.open_dtype is None and list(table.columns) != list(fixed):
                msg = f"{report.filename}: columns of {name} are {table.columns}"
                raise SchemaMismatchError(msg)
            if got != expected:
                msg = f"{report.filename}: column types of {name} differ"
                raise SchemaMismatchError(msg)


class ReportCollection(Sequence[RawReport]):
    """
    An immutable, ordered group of FastQC reports, unique by filename.

    Collections are built once and never mutated; ``add_report`` returns a
    new collection.
    """

    __slots__ = ("_reports",)

    def __init__(self, reports: Iterable[RawReport] = ()) -> None:
        ordered: list[RawReport] = []
        seen: set[str] = set()
        for report in reports:
            if report.filename in seen:
                msg = f"Duplicate report filename: {report.filename}"
                raise DuplicateReportError(msg)
            seen.add(report.filename)
            ordered.append(report)
        _check_compatible(ordered)
        self._reports = tuple(ordered)

    @classmethod
    def from_paths(cls, paths: Iterable[Path | str]) -> ReportCollection:
        """Parse each path in order and collect the reports."""
        paths = list(paths)
        logger.info(f"Loading {len(paths)} FastQC report(s)")
        return cls(parse_report(p) for p in paths)

    def __len__(self) -> int:
        return len(self._reports)

    def __iter__(self) -> Iterator[RawReport]:
        return iter(self._reports)

    def __getitem__(self, key):  # type: ignore[override]
        if isinstance(key, str):
            for report in self._reports:
                if report.filename == key:
                    return report
            raise KeyError(key)
        if isinstance(key, slice):
            return ReportCollection(self._reports[key])
        return self._reports[key]

    def __repr__(self) -> str:
        return f"ReportCollection({list(self.filenames)!r})"

    @property
    def filenames(self) -> tuple[str, ...]:
        return tuple(r.filename for r in self._reports)

    @property
    def versions(self) -> dict[str, str]:
        """FastQC version that wrote each report, keyed by filename."""
        return {r.filename: r.version for r in self._reports}

    def add_report(self, report: RawReport) -> ReportCollection:
        """Return a new collection with `report` appended."""
        return ReportCollection((*self._reports, report))

    def get_module(self, name: str) -> pl.DataFrame:
        """
        Stack module `name` across all reports in collection order.

        Columns only some reports carry (adapter sets differ between FastQC
        releases) are null-filled for the others. If no report has rows for
        the module, the canonical empty table is returned.
        """
        get_schema(name)
        tables = [r.modules[name] for r in self._reports if not r.modules[name].is_empty()]
        if not tables:
            return empty_table(name)
        if len(tables) < len(self._reports):
            logger.debug(
                f"{name} present in {len(tables)} of {len(self._reports)} reports",
            )
        return pl.concat(tables, how="diagonal_relaxed")

    def get_summary(self) -> pl.DataFrame:
        """FastQC's pass/warn/fail verdicts for every report and module."""
        return self.get_module("Summary")

    def read_totals(self, duplicated: bool = False) -> pl.DataFrame:
        """
        Total reads per report.

        Args:
            duplicated: Also estimate unique and duplicated read counts from
                        the total deduplicated percentage

        Returns:
            DataFrame with columns: Filename, Total_Sequences and, when
            requested, Unique, Duplicated
        """
        totals = self.get_module("Basic_Statistics").select(
            "Filename", "Total_Sequences"
        )
        if not duplicated:
            return totals
        dedup = self.get_module("Total_Deduplicated_Percentage")
        return (
            totals.join(dedup, on="Filename", how="left", maintain_order="left")
            .with_columns(
                (pl.col("Total_Sequences") * pl.col("Total") / 100)
                .round(0)
                .cast(pl.Int64)
                .alias("Unique"),
            )
            .with_columns(
                (pl.col("Total_Sequences") - pl.col("Unique")).alias("Duplicated"),
            )
            .drop("Total")
        )

    def max_adapter_content(self) -> pl.DataFrame:
        """Maximum percentage of each adapter type, one row per report."""
        adapters = self.get_module("Adapter_Content")
        columns = MODULES["Adapter_Content"].category_columns(adapters)
        if adapters.is_empty():
            return pl.DataFrame(schema={"Filename": pl.Utf8})
        return adapters.group_by("Filename", maintain_order=True).agg(
            pl.col(c).max() for c in columns
        )
