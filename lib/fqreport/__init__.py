"""
fqreport: parsing, aggregation and charting of FastQC reports.

Subpackages:
    visualizations: Altair chart builders for each FastQC module

Modules:
    parser: FastQC report parsing (zip, directory or fastqc_data.txt)
    report: RawReport, one parsed report
    collection: ReportCollection, an ordered group of reports
    sources: Resolution of the data sources accepted by the charts
    schema: FastQC module catalogue and Pydantic models
    transforms: Table reshaping, clustering and status bands
    config: Colour and style configuration
    errors: Exception hierarchy
"""

from .collection import ReportCollection
from .config import PWF, PwfColours, StyleOptions, load_labels, load_pwf, load_style, make_style
from .errors import (
    DuplicateReportError,
    FqReportError,
    InvalidOptionError,
    MalformedReportError,
    SchemaMismatchError,
    UnknownModuleError,
    UnsupportedVersionError,
)
from .parser import parse_report
from .report import RawReport, fq_name
from .schema import MODULES, QCStatus, StatusRecord
from .sources import ReportSource, SourceKind, resolve_source
from .transforms import (
    cluster_samples,
    make_labels,
    percentage_to_intervals,
    pivot_longer,
    status_bands,
    status_records,
)

__version__ = "0.1.0"

__all__ = [
    "MODULES",
    "PWF",
    "DuplicateReportError",
    "FqReportError",
    "InvalidOptionError",
    "MalformedReportError",
    "PwfColours",
    "QCStatus",
    "RawReport",
    "ReportCollection",
    "ReportSource",
    "SchemaMismatchError",
    "SourceKind",
    "StatusRecord",
    "StyleOptions",
    "UnknownModuleError",
    "UnsupportedVersionError",
    "cluster_samples",
    "fq_name",
    "load_labels",
    "load_pwf",
    "load_style",
    "make_labels",
    "make_style",
    "parse_report",
    "percentage_to_intervals",
    "pivot_longer",
    "resolve_source",
    "status_bands",
    "status_records",
]
