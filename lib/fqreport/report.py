"""
In-memory representation of one parsed FastQC report.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

import polars as pl

from .schema import MODULES, QCStatus, empty_table, get_schema

if TYPE_CHECKING:
    from collections.abc import Mapping

# Sequence file extensions dropped from display names
_READ_FILE_SUFFIX = re.compile(r"\.(fastq|fq|bam|sam|cram)(\.(gz|bz2|xz))?$", re.I)


def fq_name(filename: str) -> str:
    """Display name for a sequence file: the filename without its read-file extension."""
    return _READ_FILE_SUFFIX.sub("", filename)


@dataclass(frozen=True)
class RawReport:
    """
    One parsed FastQC report.

    Every module of the catalogue is present in ``modules``; modules the
    report did not contain are empty tables. Every row of every table carries
    the report's ``filename``.
    """

    path: Path
    filename: str
    version: str
    modules: Mapping[str, pl.DataFrame]

    def __post_init__(self) -> None:
        tables = {name: self.modules.get(name, empty_table(name)) for name in MODULES}
        object.__setattr__(self, "modules", MappingProxyType(tables))
        object.__setattr__(self, "path", Path(self.path))

    def __repr__(self) -> str:
        return f"RawReport(filename={self.filename!r}, version={self.version!r})"

    @property
    def name(self) -> str:
        """Filename without its read-file extension."""
        return fq_name(self.filename)

    def get_module(self, name: str) -> pl.DataFrame:
        """
        Return the table for module `name`.

        Modules missing from the report come back as empty tables; names
        outside the catalogue raise UnknownModuleError.
        """
        get_schema(name)
        return self.modules[name]

    def has_module(self, name: str) -> bool:
        """True if module `name` has at least one row."""
        return not self.get_module(name).is_empty()

    def status(self, name: str) -> QCStatus | None:
        """FastQC's verdict for module `name`, or None if it was not run."""
        title = get_schema(name).title
        summary = self.modules["Summary"].filter(pl.col("Category") == title)
        if summary.is_empty():
            return None
        return QCStatus(summary["Status"][0])
