"""
FastQC module catalogue and report data models.

Every FastQC module has one canonical column schema. Each supported FastQC
release family has a layout describing how its raw header names map onto the
canonical columns, so tables from different FastQC versions share a schema
and can be stacked into one collection-wide table.

Module names use underscores in place of spaces, matching the section
titles written by FastQC (``>>Per base sequence quality`` becomes
``Per_base_sequence_quality``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

import polars as pl
from pydantic import BaseModel, Field

from .errors import UnknownModuleError, UnsupportedVersionError

if TYPE_CHECKING:
    from collections.abc import Mapping


class QCStatus(str, Enum):
    """FastQC verdict for a module."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"

    @classmethod
    def from_fastqc(cls, value: str) -> QCStatus:
        """Convert the lower-case status written by FastQC."""
        return cls(value.strip().upper())


@dataclass(frozen=True)
class ModuleSchema:
    """Canonical schema of one FastQC module table (excluding ``Filename``)."""

    name: str
    columns: Mapping[str, type[pl.DataType] | pl.DataType]
    # Columns holding percentages of a whole, in display order
    categories: tuple[str, ...] = ()
    # dtype for columns not listed above (adapter names vary per release)
    open_dtype: type[pl.DataType] | None = None
    title: str = ""

    @property
    def polars_schema(self) -> dict[str, type[pl.DataType] | pl.DataType]:
        """Full Polars schema including the leading ``Filename`` column."""
        return {"Filename": pl.Utf8, **self.columns}

    def dtype_of(self, column: str) -> type[pl.DataType] | pl.DataType | None:
        """Return the dtype for `column`, or None if the schema rejects it."""
        if column in self.columns:
            return self.columns[column]
        return self.open_dtype

    def category_columns(self, df: pl.DataFrame) -> list[str]:
        """
        Percentage category columns present in `df`.

        For open schemas every non-fixed column is a category, in the order
        it appears in the table.
        """
        if self.open_dtype is not None:
            fixed = set(self.polars_schema)
            return [c for c in df.columns if c not in fixed]
        return [c for c in self.categories if c in df.columns]


def _module(name: str, columns: dict, **kwargs) -> ModuleSchema:
    return ModuleSchema(
        name=name,
        columns=MappingProxyType(columns),
        title=name.replace("_", " "),
        **kwargs,
    )


MODULES: Mapping[str, ModuleSchema] = MappingProxyType(
    {
        schema.name: schema
        for schema in (
            _module("Summary", {"Status": pl.Utf8, "Category": pl.Utf8}),
            _module(
                "Basic_Statistics",
                {
                    "File_type": pl.Utf8,
                    "Encoding": pl.Utf8,
                    "Total_Sequences": pl.Int64,
                    "Total_Bases": pl.Utf8,
                    "Sequences_flagged_as_poor_quality": pl.Int64,
                    "Shortest_sequence": pl.Int64,
                    "Longest_sequence": pl.Int64,
                    "GC": pl.Int64,
                },
            ),
            _module(
                "Per_base_sequence_quality",
                {
                    "Base": pl.Utf8,
                    "Mean": pl.Float64,
                    "Median": pl.Float64,
                    "Lower_Quartile": pl.Float64,
                    "Upper_Quartile": pl.Float64,
                    "10th_Percentile": pl.Float64,
                    "90th_Percentile": pl.Float64,
                },
            ),
            _module(
                "Per_tile_sequence_quality",
                {"Tile": pl.Utf8, "Base": pl.Utf8, "Mean": pl.Float64},
            ),
            _module(
                "Per_sequence_quality_scores",
                {"Quality": pl.Int64, "Count": pl.Float64},
            ),
            _module(
                "Per_base_sequence_content",
                {
                    "Base": pl.Utf8,
                    "G": pl.Float64,
                    "A": pl.Float64,
                    "T": pl.Float64,
                    "C": pl.Float64,
                },
                categories=("G", "A", "T", "C"),
            ),
            # Written by FastQC 0.10 only
            _module("Per_base_GC_content", {"Base": pl.Utf8, "GC": pl.Float64}),
            _module(
                "Per_sequence_GC_content",
                {"GC_Content": pl.Int64, "Count": pl.Float64},
            ),
            _module("Per_base_N_content", {"Base": pl.Utf8, "N_Count": pl.Float64}),
            _module(
                "Sequence_Length_Distribution",
                {"Length": pl.Utf8, "Count": pl.Float64},
            ),
            _module("Total_Deduplicated_Percentage", {"Total": pl.Float64}),
            _module(
                "Sequence_Duplication_Levels",
                {
                    "Duplication_Level": pl.Utf8,
                    "Percentage_of_deduplicated": pl.Float64,
                    "Percentage_of_total": pl.Float64,
                },
                categories=("Percentage_of_deduplicated", "Percentage_of_total"),
            ),
            _module(
                "Overrepresented_sequences",
                {
                    "Sequence": pl.Utf8,
                    "Count": pl.Int64,
                    "Percentage": pl.Float64,
                    "Possible_Source": pl.Utf8,
                },
            ),
            _module("Adapter_Content", {"Position": pl.Utf8}, open_dtype=pl.Float64),
            _module(
                "Kmer_Content",
                {
                    "Sequence": pl.Utf8,
                    "Count": pl.Int64,
                    "PValue": pl.Float64,
                    "Obs_Exp_Overall": pl.Float64,
                    "Obs_Exp_Max": pl.Float64,
                    "Max_Obs_Exp_Position": pl.Utf8,
                },
            ),
        )
    },
)

# Modules written as ">>Section" blocks; the others are derived by the parser
SECTION_MODULES = tuple(
    name
    for name in MODULES
    if name not in {"Summary", "Total_Deduplicated_Percentage"}
)


def get_schema(name: str) -> ModuleSchema:
    """Look up a module schema, raising UnknownModuleError for bad names."""
    try:
        return MODULES[name]
    except KeyError:
        raise UnknownModuleError(name) from None


def empty_table(name: str) -> pl.DataFrame:
    """An empty table carrying the canonical schema of module `name`."""
    return pl.DataFrame(schema=get_schema(name).polars_schema)


def module_name(section_title: str) -> str:
    """Convert a FastQC section title into a module name."""
    return section_title.strip().replace(" ", "_")


def column_name(raw_header: str) -> str:
    """Default conversion of a raw FastQC column header into a column name."""
    return re.sub(r"[\s/\-]+", "_", raw_header.strip())


# Sections written by FastQC 0.11 and later
_CURRENT_MODULES = frozenset(SECTION_MODULES) - {"Per_base_GC_content"}


@dataclass(frozen=True)
class VersionLayout:
    """How one FastQC release family writes its report."""

    family: str
    # module -> {raw header: canonical column}, applied before column_name()
    renames: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    # special "#Key<TAB>value" header lines: raw key -> module storing the value
    total_lines: Mapping[str, str | None] = field(default_factory=dict)
    # module -> columns rescaled to percentages of their column total
    rescaled: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    modules: frozenset[str] = _CURRENT_MODULES


LAYOUTS: Mapping[str, VersionLayout] = MappingProxyType(
    {
        "0.10": VersionLayout(
            family="0.10",
            renames={
                "Sequence_Duplication_Levels": {
                    "Relative count": "Percentage_of_total",
                },
                "Per_base_GC_content": {"%GC": "GC"},
            },
            # Relative counts (level 1 = 100) become percentages of the total
            rescaled={"Sequence_Duplication_Levels": ("Percentage_of_total",)},
            # Total *duplicate* percentage is not the deduplicated total
            total_lines={"Total Duplicate Percentage": None},
            modules=frozenset(SECTION_MODULES)
            - {"Adapter_Content", "Per_tile_sequence_quality"},
        ),
        "0.11": VersionLayout(
            family="0.11",
            total_lines={
                "Total Deduplicated Percentage": "Total_Deduplicated_Percentage",
            },
        ),
        "0.12": VersionLayout(
            family="0.12",
            total_lines={
                "Total Deduplicated Percentage": "Total_Deduplicated_Percentage",
            },
        ),
    },
)

_VERSION_RE = re.compile(r"^(\d+\.\d+)(?:\.\d+)?[A-Za-z0-9.\-_]*$")


def detect_layout(version: str) -> VersionLayout:
    """
    Select the layout for a FastQC version string such as ``0.11.9``.

    Raises:
        UnsupportedVersionError: If the version belongs to no known family.
    """
    match = _VERSION_RE.match(version.strip())
    if match is None or match.group(1) not in LAYOUTS:
        raise UnsupportedVersionError(version, LAYOUTS)
    return LAYOUTS[match.group(1)]


# Basic Statistics keys -> canonical columns. "Sequence length" is split
# into the shortest/longest columns by the parser.
BASIC_STATISTICS_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "Filename": "Filename",
        "File type": "File_type",
        "Encoding": "Encoding",
        "Total Sequences": "Total_Sequences",
        "Total Bases": "Total_Bases",
        # FastQC 0.10 name for the poor quality count
        "Filtered Sequences": "Sequences_flagged_as_poor_quality",
        "Sequences flagged as poor quality": "Sequences_flagged_as_poor_quality",
        "Sequence length": "Sequence_length",
        "%GC": "GC",
    },
)


class StatusRecord(BaseModel):
    """Pass/warn/fail verdict for one report and module."""

    filename: str
    module: str
    metric: str = Field(description="Name of the metric that was thresholded")
    value: float
    status: QCStatus
