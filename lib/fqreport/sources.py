"""
Resolution of the data sources accepted by the plotting functions.

Plotting functions accept a path (or several), a single RawReport, or a
ReportCollection. The source is resolved once, at the entry point, into a
tagged ReportSource; chart builders then branch on the tag only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Union

from .collection import ReportCollection
from .errors import FqReportError
from .parser import parse_report
from .report import RawReport

DataSource = Union[str, PathLike, list, tuple, RawReport, ReportCollection]


class SourceKind(str, Enum):
    """Shape of the resolved data."""

    REPORT = "report"
    COLLECTION = "collection"


@dataclass(frozen=True)
class ReportSource:
    """A data source resolved to exactly one of a single report or a collection."""

    kind: SourceKind
    collection: ReportCollection

    @property
    def report(self) -> RawReport:
        """The single report of a REPORT source."""
        return self.collection[0]


def resolve_source(source: DataSource) -> ReportSource:
    """
    Resolve a caller-supplied data source.

    Paths are parsed. One path (alone or as a one-element list) becomes a
    REPORT source and several paths a COLLECTION.

    Raises:
        FqReportError: If the source is none of the accepted types
    """
    if isinstance(source, RawReport):
        return ReportSource(SourceKind.REPORT, ReportCollection([source]))
    if isinstance(source, ReportCollection):
        if len(source) == 0:
            msg = "Cannot plot an empty report collection"
            raise FqReportError(msg)
        return ReportSource(SourceKind.COLLECTION, source)
    if isinstance(source, (str, PathLike)):
        return resolve_source(parse_report(Path(source)))
    if isinstance(source, (list, tuple)):
        collection = ReportCollection.from_paths(source)
        if len(collection) == 1:
            return ReportSource(SourceKind.REPORT, collection)
        return resolve_source(collection)
    msg = f"Cannot plot data of type {type(source).__name__}"
    raise FqReportError(msg)
