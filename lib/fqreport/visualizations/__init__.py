"""
Chart builders for FastQC reports.

Every ``plot_*`` function accepts a report path (or several), a RawReport or
a ReportCollection, and returns an Altair chart. Charts are saved as
self-contained HTML files (with embedded Vega-Lite spec) or as static SVG/PNG
images.

Modules:
    utils: Theme registration, status bands and chart saving utilities
    heatmap: Multi-sample heatmap panels (status strip, dendrogram)
    dup_levels: Sequence duplication levels
    summary: FastQC PASS/WARN/FAIL overview
    base_quals: Per base sequence quality
    distributions: Quality score, GC content and read length distributions
    content: N content, base composition and adapter content
    overrep: Overrepresented sequences and FASTA export
    kmers: K-mer content
    pca: Principal component analysis of files over one module
"""

from .base_quals import plot_base_quals
from .content import plot_adapter_content, plot_n_content, plot_seq_content
from .distributions import plot_gc_content, plot_seq_length_dist, plot_seq_quals
from .dup_levels import plot_dup_levels
from .kmers import plot_kmers
from .overrep import overrep_to_fasta, plot_overrep
from .pca import plot_fastqc_pca
from .summary import plot_summary, summary_table
from .utils import COLORS, hide_band_tooltips, register_fqreport_theme, save_chart

# Chart kind -> builder, as named on the command line
PLOTS = {
    "dup-levels": plot_dup_levels,
    "summary": plot_summary,
    "base-quals": plot_base_quals,
    "seq-quals": plot_seq_quals,
    "gc-content": plot_gc_content,
    "n-content": plot_n_content,
    "adapter-content": plot_adapter_content,
    "seq-length-dist": plot_seq_length_dist,
    "seq-content": plot_seq_content,
    "overrep": plot_overrep,
    "kmers": plot_kmers,
    "pca": plot_fastqc_pca,
}

__all__ = [
    "COLORS",
    "PLOTS",
    "hide_band_tooltips",
    "overrep_to_fasta",
    "plot_adapter_content",
    "plot_base_quals",
    "plot_dup_levels",
    "plot_fastqc_pca",
    "plot_gc_content",
    "plot_kmers",
    "plot_n_content",
    "plot_overrep",
    "plot_seq_content",
    "plot_seq_length_dist",
    "plot_seq_quals",
    "plot_summary",
    "register_fqreport_theme",
    "save_chart",
    "summary_table",
]
