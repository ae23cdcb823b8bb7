"""Tests for report collections and data source resolution."""

from pathlib import Path

import polars as pl
import pytest
from fqreport.collection import ReportCollection
from fqreport.errors import (
    DuplicateReportError,
    FqReportError,
    SchemaMismatchError,
    UnknownModuleError,
)
from fqreport.parser import parse_report
from fqreport.report import RawReport
from fqreport.schema import MODULES
from fqreport.sources import SourceKind, resolve_source


@pytest.fixture
def collection(three_reports: list[Path]) -> ReportCollection:
    """Collection of the three synthetic reports."""
    return ReportCollection.from_paths(three_reports)


class TestReportCollection:
    """Test collection construction and accessors."""

    def test_preserves_insertion_order(self, collection: ReportCollection) -> None:
        """Test that filenames come back in insertion order."""
        assert collection.filenames == (
            "sample1.fastq.gz",
            "sample2.fastq.gz",
            "sample3.fastq.gz",
        )
        assert [r.filename for r in collection] == list(collection.filenames)

    def test_reversed_order(self, three_reports: list[Path]) -> None:
        """Test that order follows the input rather than any sort."""
        collection = ReportCollection.from_paths(reversed(three_reports))

        assert collection.filenames[0] == "sample3.fastq.gz"

    def test_len_and_getitem(self, collection: ReportCollection) -> None:
        """Test sequence access by index, filename and slice."""
        assert len(collection) == 3
        assert collection[1].filename == "sample2.fastq.gz"
        assert collection["sample3.fastq.gz"].filename == "sample3.fastq.gz"
        assert isinstance(collection[:2], ReportCollection)
        assert len(collection[:2]) == 2

    def test_getitem_missing_filename(self, collection: ReportCollection) -> None:
        """Test that unknown filenames raise KeyError."""
        with pytest.raises(KeyError):
            collection["nope.fastq.gz"]

    def test_duplicate_filename(self, report_path: Path) -> None:
        """Test that the same report cannot be added twice."""
        report = parse_report(report_path)

        with pytest.raises(DuplicateReportError, match=r"sample1\.fastq\.gz"):
            ReportCollection([report, report])

    def test_add_report_returns_new_collection(self, three_reports: list[Path]) -> None:
        """Test that add_report leaves the original collection unchanged."""
        first = ReportCollection.from_paths(three_reports[:2])
        extended = first.add_report(parse_report(three_reports[2]))

        assert len(first) == 2
        assert len(extended) == 3
        assert extended.filenames[-1] == "sample3.fastq.gz"

    def test_add_report_duplicate(self, collection: ReportCollection) -> None:
        """Test that add_report rejects a filename already present."""
        with pytest.raises(DuplicateReportError):
            collection.add_report(collection[0])

    def test_schema_mismatch(self, report_path: Path) -> None:
        """Test that members with differing column types are rejected."""
        report = parse_report(report_path)
        kmers = report.get_module("Kmer_Content").with_columns(pl.col("Count").cast(pl.Float64))
        odd = RawReport(
            path=report_path,
            filename="odd.fastq.gz",
            version="0.11.9",
            modules={**report.modules, "Kmer_Content": kmers},
        )

        with pytest.raises(SchemaMismatchError, match="Kmer_Content"):
            ReportCollection([report, odd])

    def test_versions(self, make_report) -> None:
        """Test that versions are reported per filename."""
        collection = ReportCollection.from_paths(
            [make_report("old", version="0.10.1"), make_report("new", version="0.12.1")],
        )

        assert collection.versions == {"old.fastq.gz": "0.10.1", "new.fastq.gz": "0.12.1"}


class TestGetModule:
    """Test stacking module tables across a collection."""

    def test_rows_from_members_with_module(self, collection: ReportCollection) -> None:
        """Test that only members with the module contribute rows."""
        dup = collection.get_module("Sequence_Duplication_Levels")

        assert dup["Filename"].unique(maintain_order=True).to_list() == [
            "sample1.fastq.gz",
            "sample2.fastq.gz",
        ]
        assert dup.height == 32

    def test_empty_when_no_member_has_module(self, make_report) -> None:
        """Test that a module no member has comes back as an empty table."""
        collection = ReportCollection.from_paths(
            [
                make_report("a", omit=["Kmer Content"]),
                make_report("b", omit=["Kmer Content"]),
            ],
        )

        kmers = collection.get_module("Kmer_Content")
        assert kmers.is_empty()
        assert list(kmers.columns) == list(MODULES["Kmer_Content"].polars_schema)

    def test_unknown_module(self, collection: ReportCollection) -> None:
        """Test that names outside the catalogue are programming errors."""
        with pytest.raises(UnknownModuleError):
            collection.get_module("Not_A_Module")

    def test_mixed_versions_share_schema(self, make_report) -> None:
        """Test that 0.10 and 0.12 reports stack into one table."""
        collection = ReportCollection.from_paths(
            [make_report("old", version="0.10.1"), make_report("new", version="0.12.1")],
        )

        dup = collection.get_module("Sequence_Duplication_Levels")
        assert dup.filter(pl.col("Filename") == "old.fastq.gz").height == 10
        assert dup.filter(pl.col("Filename") == "new.fastq.gz").height == 16

        kmers = collection.get_module("Kmer_Content")
        assert set(kmers.columns) >= {"PValue", "Obs_Exp_Overall"}

    def test_adapter_sets_null_filled(self, make_report) -> None:
        """Test that adapter columns missing from a release are null-filled."""
        collection = ReportCollection.from_paths(
            [make_report("a", version="0.11.9"), make_report("b", version="0.12.1")],
        )

        adapters = collection.get_module("Adapter_Content")
        older = adapters.filter(pl.col("Filename") == "a.fastq.gz")
        assert older["PolyG"].null_count() == older.height


class TestCollectionSummaries:
    """Test the summary, totals and adapter accessors."""

    def test_get_summary(self, collection: ReportCollection) -> None:
        """Test that the summary holds every section verdict."""
        summary = collection.get_summary()

        sample2 = summary.filter(
            (pl.col("Filename") == "sample2.fastq.gz")
            & (pl.col("Category") == "Sequence Duplication Levels"),
        )
        assert sample2["Status"].to_list() == ["WARN"]

    def test_read_totals(self, collection: ReportCollection) -> None:
        """Test total reads per report."""
        totals = collection.read_totals()

        assert totals.columns == ["Filename", "Total_Sequences"]
        assert totals["Total_Sequences"].to_list() == [1000, 1000, 1000]

    def test_read_totals_duplicated(self, collection: ReportCollection) -> None:
        """Test unique and duplicated estimates from the deduplicated total."""
        totals = collection.read_totals(duplicated=True)

        assert totals.columns == ["Filename", "Total_Sequences", "Unique", "Duplicated"]
        assert totals["Unique"].to_list() == [713, 550, None]
        assert totals["Duplicated"].to_list() == [287, 450, None]

    def test_max_adapter_content(self, collection: ReportCollection) -> None:
        """Test the per-report maximum of each adapter."""
        maxima = collection.max_adapter_content()

        assert maxima.height == 3
        assert maxima["Illumina_Universal_Adapter"].to_list() == [2.5, 2.5, 2.5]


class TestResolveSource:
    """Test resolving caller data sources once at the entry point."""

    def test_single_path(self, report_path: Path) -> None:
        """Test that one path resolves to a single report."""
        source = resolve_source(report_path)

        assert source.kind is SourceKind.REPORT
        assert source.report.filename == "sample1.fastq.gz"

    def test_single_path_as_string(self, report_path: Path) -> None:
        """Test that string paths are accepted."""
        assert resolve_source(str(report_path)).kind is SourceKind.REPORT

    def test_one_element_list(self, report_path: Path) -> None:
        """Test that a one-element list is a single report."""
        assert resolve_source([report_path]).kind is SourceKind.REPORT

    def test_paths(self, three_reports: list[Path]) -> None:
        """Test that several paths resolve to a collection."""
        source = resolve_source(three_reports)

        assert source.kind is SourceKind.COLLECTION
        assert len(source.collection) == 3

    def test_raw_report(self, report_path: Path) -> None:
        """Test that a RawReport is a single report."""
        report = parse_report(report_path)

        assert resolve_source(report).report is report

    def test_collection(self, collection: ReportCollection) -> None:
        """Test that a collection passes through unchanged."""
        source = resolve_source(collection)

        assert source.kind is SourceKind.COLLECTION
        assert source.collection is collection

    def test_empty_collection(self) -> None:
        """Test that an empty collection cannot be plotted."""
        with pytest.raises(FqReportError, match="empty"):
            resolve_source(ReportCollection())

    def test_unsupported_type(self) -> None:
        """Test that other objects are rejected."""
        with pytest.raises(FqReportError, match="int"):
            resolve_source(42)
