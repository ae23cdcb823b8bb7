"""Shared fixtures: synthetic FastQC reports written to tmp_path."""

import zipfile
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

DUP_LEVELS = [
    *(str(i) for i in range(1, 10)),
    ">10",
    ">50",
    ">100",
    ">500",
    ">1k",
    ">5k",
    ">10k+",
]
DUP_DEDUPLICATED = [
    80.0, 10.0, 4.0, 2.0, 1.0, 0.5, 0.5, 0.5, 0.5, 0.5, 0.2, 0.1, 0.1, 0.05, 0.03, 0.02,
]
DUP_TOTAL = [60.0, 15.0, 6.0, 4.0, 3.0, 2.0, 1.5, 1.2, 1.0, 2.0, 1.5, 1.0, 0.8, 0.5, 0.3, 0.2]

ADAPTERS_011 = [
    "Illumina Universal Adapter",
    "Illumina Small RNA Adapter",
    "Nextera Transposase Sequence",
    "SOLID Small RNA Adapter",
]
ADAPTERS_012 = [
    "Illumina Universal Adapter",
    "Illumina Small RNA 3' Adapter",
    "Illumina Small RNA 5' Adapter",
    "Nextera Transposase Sequence",
    "PolyA",
    "PolyG",
]

BASES = ["1", "2", "3", "4", "5-9", "10-14"]

# FastQC 0.10 pools levels of ten and above; counts are relative to level 1 = 100
DUP_LEVELS_010 = [*(str(i) for i in range(1, 10)), "10++"]
DUP_RELATIVE_010 = [100.0, 12.5, 4.0, 1.5, 0.9, 0.6, 0.4, 0.3, 0.2, 1.1]


def section(
    title: str,
    status: str,
    header: Sequence[str],
    rows: Sequence[Sequence[object]],
    totals: Sequence[str] = (),
) -> str:
    """One ``>>Title<TAB>status`` ... ``>>END_MODULE`` block."""
    lines = [f">>{title}\t{status}", *totals, "#" + "\t".join(header)]
    lines += ["\t".join(str(v) for v in row) for row in rows]
    lines.append(">>END_MODULE")
    return "\n".join(lines)


def fastqc_text(
    filename: str = "sample1.fastq.gz",
    version: str = "0.11.9",
    total_sequences: int = 1000,
    dedup_total: str = "71.3",
    dup_total: Sequence[float] = DUP_TOTAL,
    dup_deduplicated: Sequence[float] = DUP_DEDUPLICATED,
    omit: Sequence[str] = (),
    statuses: dict[str, str] | None = None,
    n_content: Sequence[float] = (0.0, 0.0, 1.5, 0.0, 0.2, 0.0),
    adapter_scale: float = 1.0,
) -> str:
    """
    A complete ``fastqc_data.txt`` in the layout of FastQC `version`.

    Args:
        omit: Section titles to leave out
        statuses: Section title -> status overrides (default pass)
    """
    family = version.rsplit(".", 1)[0] if version.count(".") > 1 else version
    if family == "0.10":
        return fastqc_010_text(filename, version, total_sequences, omit, statuses)
    statuses = statuses or {}

    def status(title: str) -> str:
        return statuses.get(title, "pass")

    basic = [
        ("Filename", filename),
        ("File type", "Conventional base calls"),
        ("Encoding", "Sanger / Illumina 1.9"),
        ("Total Sequences", total_sequences),
    ]
    if family == "0.12":
        basic.append(("Total Bases", "150 kbp"))
    basic += [
        ("Sequences flagged as poor quality", 0),
        ("Sequence length", "35-151"),
        ("%GC", 48),
    ]

    sections = {
        "Basic Statistics": section(
            "Basic Statistics", status("Basic Statistics"), ["Measure", "Value"], basic
        ),
        "Per base sequence quality": section(
            "Per base sequence quality",
            status("Per base sequence quality"),
            [
                "Base",
                "Mean",
                "Median",
                "Lower Quartile",
                "Upper Quartile",
                "10th Percentile",
                "90th Percentile",
            ],
            [
                ("1", 32.1, 33.0, 31.0, 34.0, 28.0, 35.0),
                ("2", 32.5, 33.0, 31.0, 34.0, 28.0, 35.0),
                ("3", 33.0, 34.0, 32.0, 35.0, 29.0, 36.0),
                ("4", 33.4, 34.0, 32.0, 35.0, 29.0, 36.0),
                ("5-9", 34.0, 35.0, 33.0, 36.0, 30.0, 37.0),
                ("10-14", 30.2, 31.0, 27.0, 33.0, 19.0, 35.0),
            ],
        ),
        "Per tile sequence quality": section(
            "Per tile sequence quality",
            status("Per tile sequence quality"),
            ["Tile", "Base", "Mean"],
            [("1101", "1", 0.12), ("1101", "2", -0.05), ("1102", "1", 0.3)],
        ),
        "Per sequence quality scores": section(
            "Per sequence quality scores",
            status("Per sequence quality scores"),
            ["Quality", "Count"],
            [(20, 10.0), (25, 40.0), (30, 250.0), (35, 700.0)],
        ),
        "Per base sequence content": section(
            "Per base sequence content",
            status("Per base sequence content"),
            ["Base", "G", "A", "T", "C"],
            [
                ("1", 20.1, 30.2, 29.8, 19.9),
                ("2", 21.0, 29.0, 29.0, 21.0),
                ("3", 22.5, 27.5, 27.5, 22.5),
                ("4", 24.0, 26.0, 26.0, 24.0),
                ("5-9", 25.0, 25.0, 25.0, 25.0),
                ("10-14", 24.0, 26.0, 26.0, 24.0),
            ],
        ),
        "Per sequence GC content": section(
            "Per sequence GC content",
            status("Per sequence GC content"),
            ["GC Content", "Count"],
            [(40, 50.0), (44, 150.0), (48, 400.0), (52, 300.0), (56, 100.0)],
        ),
        "Per base N content": section(
            "Per base N content",
            status("Per base N content"),
            ["Base", "N-Count"],
            list(zip(BASES, n_content)),
        ),
        "Sequence Length Distribution": section(
            "Sequence Length Distribution",
            status("Sequence Length Distribution"),
            ["Length", "Count"],
            [("35-39", 10.0), ("100-104", 40.0), ("151", 950.0)],
        ),
    }

    sections["Sequence Duplication Levels"] = section(
        "Sequence Duplication Levels",
        status("Sequence Duplication Levels"),
        ["Duplication Level", "Percentage of deduplicated", "Percentage of total"],
        list(zip(DUP_LEVELS, dup_deduplicated, dup_total)),
        totals=[f"#Total Deduplicated Percentage\t{dedup_total}"],
    )

    sections["Overrepresented sequences"] = section(
        "Overrepresented sequences",
        status("Overrepresented sequences"),
        ["Sequence", "Count", "Percentage", "Possible Source"],
        [
            ("GATCGGAAGAGCACACGTCTGAACTCCAGTCAC", 120, 12.0, "TruSeq Adapter, Index 1 (100% over 50bp)"),
            ("AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", 30, 3.0, "No Hit"),
            (f"ACGT{filename[:4].upper()}ACGTACGTACGTACGTACGTACGT", 15, 1.5, "No Hit"),
        ],
    )

    adapters = ADAPTERS_012 if family == "0.12" else ADAPTERS_011
    sections["Adapter Content"] = section(
        "Adapter Content",
        status("Adapter Content"),
        ["Position", *adapters],
        [
            (base, *(round(i * adapter_scale * (j + 1) / 2, 3) for j in range(len(adapters))))
            for i, base in enumerate(BASES)
        ],
    )
    sections["Kmer Content"] = section(
        "Kmer Content",
        status("Kmer Content"),
        ["Sequence", "Count", "PValue", "Obs/Exp Max", "Max Obs/Exp Position"],
        [
            ("AAAAA", 410, 0.0, 12.5, "10-14"),
            ("GATCG", 300, 1.2e-5, 8.1, "1"),
            ("CCGTA", 150, 0.003, 5.5, "5-9"),
        ],
    )

    body = [text for title, text in sections.items() if title not in omit]
    return "\n".join([f"##FastQC\t{version}", *body]) + "\n"


def fastqc_010_text(
    filename: str = "sample1.fastq.gz",
    version: str = "0.10.1",
    total_sequences: int = 1000,
    omit: Sequence[str] = (),
    statuses: dict[str, str] | None = None,
    relative_counts: Sequence[float] = DUP_RELATIVE_010,
) -> str:
    """
    A ``fastqc_data.txt`` as FastQC 0.10.1 writes it.

    Basic Statistics rows end in a tab and report "Filtered Sequences";
    there is a Per base GC content section and no adapter or per-tile
    sections.
    """
    statuses = statuses or {}

    def status(title: str) -> str:
        return statuses.get(title, "pass")

    basic_rows = [
        ("Filename", filename),
        ("File type", "Conventional base calls"),
        ("Encoding", "Sanger / Illumina 1.9"),
        ("Total Sequences", total_sequences),
        ("Filtered Sequences", 0),
        ("Sequence length", "100"),
        ("%GC", 44),
    ]
    basic = "\n".join(
        [
            f">>Basic Statistics\t{status('Basic Statistics')}",
            "#Measure\tValue\t",
            *(f"{key}\t{value}\t" for key, value in basic_rows),
            ">>END_MODULE",
        ],
    )
    sections = {
        "Basic Statistics": basic,
        "Per base sequence quality": section(
            "Per base sequence quality",
            status("Per base sequence quality"),
            [
                "Base",
                "Mean",
                "Median",
                "Lower Quartile",
                "Upper Quartile",
                "10th Percentile",
                "90th Percentile",
            ],
            [
                ("1", 31.88, 33.0, 31.0, 34.0, 26.0, 34.0),
                ("2", 32.01, 34.0, 31.0, 34.0, 26.0, 34.0),
                ("3", 32.17, 34.0, 31.0, 34.0, 26.0, 34.0),
                ("4", 35.55, 37.0, 35.0, 37.0, 32.0, 37.0),
                ("5-9", 35.62, 37.0, 35.0, 37.0, 32.0, 37.0),
                ("10-14", 37.21, 39.0, 37.0, 39.0, 33.0, 39.0),
            ],
        ),
        "Per sequence quality scores": section(
            "Per sequence quality scores",
            status("Per sequence quality scores"),
            ["Quality", "Count"],
            [(18, 2.0), (25, 35.0), (32, 180.0), (37, 783.0)],
        ),
        "Per base sequence content": section(
            "Per base sequence content",
            status("Per base sequence content"),
            ["Base", "G", "A", "T", "C"],
            [
                ("1", 18.42, 27.55, 34.11, 19.92),
                ("2", 19.65, 27.66, 32.08, 20.61),
                ("3", 21.02, 26.43, 30.12, 22.43),
                ("4", 21.88, 28.97, 28.31, 20.84),
                ("5-9", 21.64, 28.82, 28.95, 20.59),
                ("10-14", 21.73, 28.55, 28.87, 20.85),
            ],
        ),
        "Per base GC content": section(
            "Per base GC content",
            status("Per base GC content"),
            ["Base", "%GC"],
            [
                ("1", 38.34),
                ("2", 40.26),
                ("3", 43.45),
                ("4", 42.72),
                ("5-9", 42.23),
                ("10-14", 42.58),
            ],
        ),
        "Per sequence GC content": section(
            "Per sequence GC content",
            status("Per sequence GC content"),
            ["GC Content", "Count"],
            [(36, 40.0), (40, 210.0), (44, 480.0), (48, 220.0), (52, 50.0)],
        ),
        "Per base N content": section(
            "Per base N content",
            status("Per base N content"),
            ["Base", "N-Count"],
            [("1", 0.12), ("2", 0.0), ("3", 0.0), ("4", 0.0), ("5-9", 0.0), ("10-14", 0.0)],
        ),
        "Sequence Length Distribution": section(
            "Sequence Length Distribution",
            status("Sequence Length Distribution"),
            ["Length", "Count"],
            [(100, 1000.0)],
        ),
        "Sequence Duplication Levels": section(
            "Sequence Duplication Levels",
            status("Sequence Duplication Levels"),
            ["Duplication Level", "Relative count"],
            list(zip(DUP_LEVELS_010, relative_counts)),
            totals=["#Total Duplicate Percentage\t28.7"],
        ),
        "Overrepresented sequences": section(
            "Overrepresented sequences",
            status("Overrepresented sequences"),
            ["Sequence", "Count", "Percentage", "Possible Source"],
            [("GATCGGAAGAGCACACGTCTGAACTCCAGTCACATCACGATCTCGTATGCCG", 48, 4.8, "No Hit")],
        ),
        "Kmer Content": section(
            "Kmer Content",
            status("Kmer Content"),
            ["Sequence", "Count", "Obs/Exp Overall", "Obs/Exp Max", "Max Obs/Exp Position"],
            [("AAAAA", 410, 3.2, 12.5, "10-14"), ("GATCG", 300, 2.1, 8.1, "1")],
        ),
    }
    body = [text for title, text in sections.items() if title not in omit]
    return "\n".join([f"##FastQC\t{version}", *body]) + "\n"


def write_report(
    directory: Path,
    text: str,
    name: str = "sample1",
    kind: str = "zip",
) -> Path:
    """Write a report as a zip archive, an output directory or a bare text file."""
    if kind == "txt":
        path = directory / f"{name}_fastqc_data.txt"
        path.write_text(text, encoding="utf-8")
        return path
    if kind == "dir":
        path = directory / f"{name}_fastqc"
        path.mkdir()
        (path / "fastqc_data.txt").write_text(text, encoding="utf-8")
        return path
    path = directory / f"{name}_fastqc.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(f"{name}_fastqc/fastqc_data.txt", text)
        archive.writestr(f"{name}_fastqc/summary.txt", "PASS\tBasic Statistics\n")
    return path


@pytest.fixture
def make_report(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory writing a synthetic FastQC report into tmp_path.

    Keyword arguments are passed to ``fastqc_text``; ``kind`` picks the
    on-disk form (zip, dir or txt).
    """

    def _make(name: str = "sample1", kind: str = "zip", **kwargs: object) -> Path:
        kwargs.setdefault("filename", f"{name}.fastq.gz")
        return write_report(tmp_path, fastqc_text(**kwargs), name=name, kind=kind)

    return _make


@pytest.fixture
def report_path(make_report: Callable[..., Path]) -> Path:
    """A single FastQC 0.11.9 report archive."""
    return make_report()


@pytest.fixture
def three_reports(make_report: Callable[..., Path]) -> list[Path]:
    """
    Three reports; the third has no Sequence Duplication Levels section.
    """
    return [
        make_report("sample1"),
        make_report(
            "sample2",
            dedup_total="55.0",
            dup_total=[
                40.0, 20.0, 10.0, 8.0, 6.0, 4.0, 3.0, 2.0, 1.5, 2.5, 1.5, 0.7, 0.4, 0.2, 0.1, 0.1,
            ],
            statuses={"Sequence Duplication Levels": "warn"},
        ),
        make_report("sample3", omit=["Sequence Duplication Levels"]),
    ]
