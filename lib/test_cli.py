"""Tests for the fqreport command-line interface."""

from pathlib import Path

import pytest
from fqreport.visualizations import plot_summary
from fqreport_cli import app
from fqreport_cli.commands.plot import builder_options
from fqreport_cli.utils import console, styled_status
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep Rich from wrapping long paths and table cells."""
    monkeypatch.setattr(console, "width", 300)


class TestHelp:
    """Test help output."""

    def test_lists_commands(self) -> None:
        """Test that every command appears in the top-level help."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("plot", "summary", "totals", "fasta"):
            assert command in result.output

    def test_plot_help_lists_kinds(self) -> None:
        """Test that the chart kinds are offered as choices."""
        result = runner.invoke(app, ["plot", "--help"])

        assert result.exit_code == 0
        assert "dup-levels" in result.output


class TestPlotCommand:
    """Test the plot command."""

    def test_writes_html(self, three_reports: list[Path], tmp_path: Path) -> None:
        """Test that a chart is saved to the output path."""
        output = tmp_path / "charts" / "dup"
        result = runner.invoke(
            app,
            ["plot", "dup-levels", *map(str, three_reports), "-o", str(output)],
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "charts" / "dup.html").exists()
        assert "Wrote dup-levels chart" in result.output

    def test_collection_options(self, three_reports: list[Path], tmp_path: Path) -> None:
        """Test the layout options for a collection."""
        labels = tmp_path / "labels.yaml"
        labels.write_text("sample1.fastq.gz: Control\n", encoding="utf-8")
        output = tmp_path / "dup"
        result = runner.invoke(
            app,
            [
                "plot",
                "dup-levels",
                *map(str, three_reports),
                "-o",
                str(output),
                "--dedup",
                "post",
                "--cluster",
                "--dendrogram",
                "--labels",
                str(labels),
                "-i",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Control" in (tmp_path / "dup.html").read_text(encoding="utf-8")

    def test_single_report(self, report_path: Path, tmp_path: Path) -> None:
        """Test one report and a chart kind without collection options."""
        result = runner.invoke(
            app,
            ["plot", "base-quals", str(report_path), "-o", str(tmp_path / "quals")],
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "quals.html").exists()

    def test_pca_module(self, three_reports: list[Path], tmp_path: Path) -> None:
        """Test the PCA chart over a chosen module."""
        result = runner.invoke(
            app,
            [
                "plot",
                "pca",
                *map(str, three_reports),
                "-o",
                str(tmp_path / "pca"),
                "--module",
                "Per_base_sequence_quality",
                "--scale",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "PCA: Per base sequence quality" in (tmp_path / "pca.html").read_text(
            encoding="utf-8"
        )

    def test_unknown_kind(self, report_path: Path, tmp_path: Path) -> None:
        """Test that unknown chart kinds are usage errors."""
        result = runner.invoke(
            app,
            ["plot", "pie-chart", str(report_path), "-o", str(tmp_path / "pie")],
        )

        assert result.exit_code == 2

    def test_bad_style_file(self, report_path: Path, tmp_path: Path) -> None:
        """Test that invalid style options exit with an error."""
        style = tmp_path / "style.yaml"
        style.write_text("colour_scheme: viridis\n", encoding="utf-8")
        result = runner.invoke(
            app,
            [
                "plot",
                "summary",
                str(report_path),
                "-o",
                str(tmp_path / "summary"),
                "--style",
                str(style),
            ],
        )

        assert result.exit_code == 1
        assert not (tmp_path / "summary.html").exists()

    def test_malformed_report(self, tmp_path: Path) -> None:
        """Test that parse failures exit with an error."""
        bad = tmp_path / "bad_fastqc_data.txt"
        bad.write_text("this is not a FastQC report\n", encoding="utf-8")
        result = runner.invoke(app, ["plot", "summary", str(bad), "-o", str(tmp_path / "s")])

        assert result.exit_code == 1


class TestBuilderOptions:
    """Test matching CLI options to chart builder parameters."""

    def test_drops_options_the_chart_lacks(self) -> None:
        """Test that unsupported options are removed."""
        options = builder_options(
            plot_summary,
            {"interactive": (True, True), "cluster": (True, True), "labels": (None, False)},
        )

        assert options == {"interactive": True, "labels": None}


class TestTableCommands:
    """Test the summary, totals and fasta commands."""

    def test_summary(self, three_reports: list[Path]) -> None:
        """Test one row per report with its verdicts."""
        result = runner.invoke(app, ["summary", *map(str, three_reports)])

        assert result.exit_code == 0, result.output
        assert "sample3.fastq.gz" in result.output
        assert "WARN" in result.output

    def test_totals(self, three_reports: list[Path]) -> None:
        """Test read totals with unique and duplicated estimates."""
        result = runner.invoke(app, ["totals", *map(str, three_reports), "--duplicated"])

        assert result.exit_code == 0, result.output
        assert "1,000" in result.output
        assert "713" in result.output
        assert "Duplicated" in result.output

    def test_fasta(self, three_reports: list[Path], tmp_path: Path) -> None:
        """Test exporting overrepresented sequences."""
        output = tmp_path / "overrep.fa"
        result = runner.invoke(
            app,
            ["fasta", *map(str, three_reports), "-o", str(output), "-n", "2"],
        )

        assert result.exit_code == 0, result.output
        assert "Wrote 2 sequence(s)" in result.output
        assert output.read_text(encoding="utf-8").count(">") == 2

    def test_fasta_top_must_be_positive(self, report_path: Path, tmp_path: Path) -> None:
        """Test that --top below 1 is a usage error."""
        result = runner.invoke(
            app,
            ["fasta", str(report_path), "-o", str(tmp_path / "x.fa"), "-n", "0"],
        )

        assert result.exit_code == 2

    def test_duplicate_reports(self, report_path: Path) -> None:
        """Test that the same report given twice exits with an error."""
        result = runner.invoke(app, ["summary", str(report_path), str(report_path)])

        assert result.exit_code == 1


@pytest.mark.parametrize(
    ("status", "expected"),
    [("PASS", "[bold green]PASS[/bold green]"), (None, "[dim]-[/dim]"), ("OTHER", "OTHER")],
)
def test_styled_status(status: str | None, expected: str) -> None:
    """Test Rich markup for verdicts."""
    assert styled_status(status) == expected
