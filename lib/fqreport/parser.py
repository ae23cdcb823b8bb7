"""
FastQC report parser.

Reads ``fastqc_data.txt`` from a FastQC zip archive, an extracted FastQC
output directory, or the text file itself, and builds a RawReport.

The file is a sequence of sections::

    ##FastQC	0.11.9
    >>Basic Statistics	pass
    #Measure	Value
    Filename	sample_R1.fastq.gz
    ...
    >>END_MODULE
    >>Sequence Duplication Levels	warn
    #Total Deduplicated Percentage	71.3
    #Duplication Level	Percentage of deduplicated	Percentage of total
    1	85.5	60.9
    ...
    >>END_MODULE

Anything unexpected (unknown or repeated sections, bad status fields, rows
that do not fit the header, values that do not coerce) fails immediately
with MalformedReportError naming the section and line.
"""

from __future__ import annotations

import math
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

import polars as pl
from loguru import logger

from .errors import MalformedReportError
from .report import RawReport
from .schema import (
    BASIC_STATISTICS_KEYS,
    MODULES,
    ModuleSchema,
    QCStatus,
    VersionLayout,
    column_name,
    detect_layout,
    empty_table,
    module_name,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

DATA_FILE = "fastqc_data.txt"
VERSION_MARKER = "##FastQC"
SECTION_START = ">>"
SECTION_END = ">>END_MODULE"


def read_report_text(path: Path) -> str:
    """
    Load the raw ``fastqc_data.txt`` contents for a report.

    Args:
        path: A FastQC zip archive, a FastQC output directory, or the
              ``fastqc_data.txt`` file itself.

    Returns:
        The decoded file contents (UTF-8, falling back to latin-1)
    """
    path = Path(path)
    if path.is_dir():
        data = (path / DATA_FILE).read_bytes()
    elif zipfile.is_zipfile(path):
        with zipfile.ZipFile(path) as archive:
            members = [
                n for n in archive.namelist() if Path(n).name == DATA_FILE
            ]
            if not members:
                msg = f"no {DATA_FILE} inside archive {path.name}"
                raise MalformedReportError(msg)
            # The report directory is the shallowest match
            member = min(members, key=lambda n: n.count("/"))
            data = archive.read(member)
    else:
        data = path.read_bytes()

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug(f"{path} is not valid UTF-8, decoding as latin-1")
        return data.decode("latin-1")


def _coerce(
    value: str,
    dtype: type[pl.DataType] | pl.DataType,
    section: str,
    lineno: int,
) -> str | int | float | None:
    """Convert one raw field to the Python type matching `dtype`."""
    value = value.strip()
    if dtype == pl.Utf8:
        return value
    if value == "":
        return None
    try:
        if dtype == pl.Int64:
            # Counts are occasionally written as floats ("1.0")
            number = float(value)
            if not number.is_integer():
                raise ValueError(value)
            return int(number)
        return float(value)
    except ValueError:
        msg = f"cannot read {value!r} as {dtype}"
        raise MalformedReportError(msg, section=section, line=lineno) from None


class _Section:
    """Accumulates the rows of one open ``>>Section`` block."""

    def __init__(self, schema: ModuleSchema, layout: VersionLayout, lineno: int):
        self.schema = schema
        self.layout = layout
        self.start = lineno
        self.header: list[str] | None = None
        self.rows: list[list[str | int | float | None]] = []
        self.totals: dict[str, float] = {}

    @property
    def name(self) -> str:
        return self.schema.name

    def read_header(self, line: str, lineno: int) -> None:
        fields = _split(line[1:])
        key = fields[0].strip()
        if key in self.layout.total_lines:
            target = self.layout.total_lines[key]
            if target is not None:
                value = _coerce(fields[-1], pl.Float64, self.name, lineno)
                self.totals[target] = float("nan") if value is None else value
            return
        if self.header is not None:
            msg = "second table header in section"
            raise MalformedReportError(msg, section=self.name, line=lineno)

        renames = self.layout.renames.get(self.name, {})
        header = [renames.get(f.strip(), column_name(f)) for f in fields]
        if self.name == "Basic_Statistics":
            # "#Measure	Value" precedes the key-value block
            self.header = header
            return
        for column in header:
            if self.schema.dtype_of(column) is None:
                msg = f"unexpected column {column!r}"
                raise MalformedReportError(msg, section=self.name, line=lineno)
        self.header = header

    def read_row(self, line: str, lineno: int) -> None:
        if self.header is None:
            msg = "data row before table header"
            raise MalformedReportError(msg, section=self.name, line=lineno)
        fields = line.split("\t")
        if len(fields) > 1 and fields[-1] == "" and len(fields) != len(self.header):
            # FastQC 0.10 ends some rows with a tab
            fields.pop()
        if self.name == "Basic_Statistics":
            if len(fields) != 2:
                msg = "expected 'key<TAB>value'"
                raise MalformedReportError(msg, section=self.name, line=lineno)
            self.rows.append([fields[0].strip(), fields[1].strip()])
            return
        if len(fields) != len(self.header):
            msg = f"expected {len(self.header)} fields, found {len(fields)}"
            raise MalformedReportError(msg, section=self.name, line=lineno)
        self.rows.append(
            [
                _coerce(value, self.schema.dtype_of(column), self.name, lineno)
                for column, value in zip(self.header, fields)
            ],
        )

    def to_table(self, filename: str) -> pl.DataFrame:
        if self.header is None or not self.rows:
            return empty_table(self.name)
        schema = {c: self.schema.dtype_of(c) for c in self.header}
        df = pl.DataFrame(self.rows, schema=schema, orient="row")
        df = _rescale(df, self.layout.rescaled.get(self.name, ()))
        return _conform(df, self.schema, filename)


def _split(text: str) -> list[str]:
    fields = text.split("\t")
    if len(fields) > 1 and not fields[-1].strip():
        fields.pop()
    return fields


def _rescale(df: pl.DataFrame, columns: tuple[str, ...]) -> pl.DataFrame:
    """Express each column as a percentage of its own total."""
    for column in columns:
        total = df[column].sum() if column in df.columns else None
        if total:
            df = df.with_columns(pl.col(column) / total * 100)
    return df


def _conform(df: pl.DataFrame, schema: ModuleSchema, filename: str) -> pl.DataFrame:
    """Add the Filename column and null-fill canonical columns the layout lacks."""
    missing = [
        pl.lit(None, dtype=dtype).alias(column)
        for column, dtype in schema.columns.items()
        if column not in df.columns
    ]
    df = df.with_columns(*missing, pl.lit(filename).alias("Filename"))
    extra = [c for c in df.columns if c not in schema.polars_schema]
    return df.select(*schema.polars_schema, *extra)


def _basic_statistics(section: _Section, lineno: int) -> dict[str, object]:
    """Convert the Basic Statistics key-value rows into one record."""
    record: dict[str, object] = {}
    for key, value in section.rows:
        column = BASIC_STATISTICS_KEYS.get(key)
        if column is None:
            logger.debug(f"Ignoring unrecognised Basic Statistics key {key!r}")
            continue
        if column == "Sequence_length":
            shortest, _, longest = value.partition("-")
            record["Shortest_sequence"] = _coerce(
                shortest, pl.Int64, section.name, lineno
            )
            record["Longest_sequence"] = _coerce(
                longest or shortest, pl.Int64, section.name, lineno
            )
        elif column == "Filename":
            record[column] = value
        else:
            dtype = section.schema.dtype_of(column)
            record[column] = _coerce(value, dtype, section.name, lineno)
    if "Filename" not in record:
        msg = "no Filename entry"
        raise MalformedReportError(msg, section=section.name, line=section.start)
    return record


def _lines(text: str) -> Iterator[tuple[int, str]]:
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.rstrip("\r\n")
        if line.strip():
            yield lineno, line


def _read_version(lines: Iterator[tuple[int, str]]) -> tuple[str, VersionLayout]:
    try:
        lineno, line = next(lines)
    except StopIteration:
        msg = "file is empty"
        raise MalformedReportError(msg) from None
    marker, _, version = line.partition("\t")
    if marker != VERSION_MARKER or not version.strip():
        msg = f"expected '{VERSION_MARKER}<TAB>version' marker"
        raise MalformedReportError(msg, line=lineno)
    version = version.strip()
    return version, detect_layout(version)


def parse_report_text(text: str, path: Path | str = "<text>") -> RawReport:
    """
    Parse the contents of a ``fastqc_data.txt`` file.

    Args:
        text: File contents
        path: Source path recorded on the report

    Returns:
        The parsed RawReport

    Raises:
        MalformedReportError: If the text does not follow the FastQC layout
        UnsupportedVersionError: If the FastQC version has no known layout
    """
    lines = _lines(text)
    version, layout = _read_version(lines)

    sections: dict[str, _Section] = {}
    statuses: list[tuple[str, str]] = []
    current: _Section | None = None
    lineno = 0

    for lineno, line in lines:
        if line.startswith(SECTION_END):
            if current is None:
                msg = "END_MODULE without an open section"
                raise MalformedReportError(msg, line=lineno)
            logger.debug(f"Read {len(current.rows)} rows for {current.name}")
            current = None
        elif line.startswith(SECTION_START):
            title, sep, status = line[len(SECTION_START) :].partition("\t")
            name = module_name(title)
            if current is not None:
                msg = f"section '{name}' opened before END_MODULE"
                raise MalformedReportError(msg, section=current.name, line=lineno)
            if not sep or status.strip().lower() not in {"pass", "warn", "fail"}:
                msg = f"bad section header {line!r}"
                raise MalformedReportError(msg, section=name, line=lineno)
            if name not in MODULES or name not in layout.modules:
                msg = f"unknown module for FastQC {layout.family}"
                raise MalformedReportError(msg, section=name, line=lineno)
            if name in sections:
                msg = "duplicate section"
                raise MalformedReportError(msg, section=name, line=lineno)
            current = _Section(MODULES[name], layout, lineno)
            sections[name] = current
            statuses.append((QCStatus.from_fastqc(status).value, title.strip()))
        elif current is None:
            msg = f"content outside any section: {line!r}"
            raise MalformedReportError(msg, line=lineno)
        elif line.startswith("#"):
            current.read_header(line, lineno)
        else:
            current.read_row(line, lineno)

    if current is not None:
        msg = "file ended before END_MODULE"
        raise MalformedReportError(msg, section=current.name, line=lineno)
    if "Basic_Statistics" not in sections:
        msg = "no Basic Statistics section"
        raise MalformedReportError(msg)

    basic = sections.pop("Basic_Statistics")
    record = _basic_statistics(basic, basic.start)
    filename = str(record.pop("Filename"))

    modules: dict[str, pl.DataFrame] = {
        "Basic_Statistics": _conform(
            pl.DataFrame(
                [record],
                schema={c: MODULES["Basic_Statistics"].columns[c] for c in record},
            ),
            MODULES["Basic_Statistics"],
            filename,
        ),
        "Summary": pl.DataFrame(
            {
                "Filename": [filename] * len(statuses),
                "Status": [s for s, _ in statuses],
                "Category": [c for _, c in statuses],
            },
            schema=MODULES["Summary"].polars_schema,
        ),
    }
    totals: dict[str, float] = {}
    for name, section in sections.items():
        modules[name] = section.to_table(filename)
        totals.update(section.totals)
    for name, value in totals.items():
        modules[name] = pl.DataFrame(
            {"Filename": [filename], "Total": [value]},
            schema=MODULES[name].polars_schema,
        )

    return RawReport(path=Path(path), filename=filename, version=version, modules=modules)


def parse_report(path: Path | str) -> RawReport:
    """
    Parse a FastQC report from disk.

    Args:
        path: FastQC zip archive, output directory, or ``fastqc_data.txt``

    Returns:
        The parsed RawReport
    """
    path = Path(path)
    logger.debug(f"Parsing FastQC report {path}")
    report = parse_report_text(read_report_text(path), path=path)
    if any(math.isnan(v) for v in report.modules["Total_Deduplicated_Percentage"]["Total"]):
        logger.warning(f"{path.name}: total deduplicated percentage is NaN")
    return report
