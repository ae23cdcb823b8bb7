"""
Altair theme and shared chart helpers for fqreport visualizations.

Provides the fqreport theme, the pass/warn/fail background band layer,
placeholder charts for missing modules, the final styling pass shared by all
chart builders, and chart saving in multiple formats (HTML, SVG, PNG).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Union

import altair as alt
import polars as pl
from loguru import logger

from ..config import DEFAULT_STYLE, PWF, PwfColours, StyleOptions

if TYPE_CHECKING:
    from collections.abc import Sequence

# fqreport colour palette
COLORS = {
    "primary": "#2563eb",  # Blue
    "secondary": "#64748b",  # Slate
    "pass": PWF.PASS,
    "warn": PWF.WARN,
    "fail": PWF.FAIL,
}

# Sequential colour scheme for heatmaps
HEATMAP_SCHEME = "inferno"

# Marks status-band layers so their tooltips can be stripped
BAND_DESCRIPTION = "fqreport:status-band"

# Opacity of status bands behind line plots
BAND_ALPHA = 0.1

AnyChart = Union[
    alt.Chart, alt.LayerChart, alt.HConcatChart, alt.VConcatChart, alt.FacetChart
]


@alt.theme.register("fqreport", enable=True)
def _fqreport_theme() -> alt.theme.ThemeConfig:
    """Return the fqreport Altair theme configuration."""
    return alt.theme.ThemeConfig(
        {
            "background": "#ffffff",
            "config": {
                "title": {
                    "fontSize": 14,
                    "fontWeight": "bold",
                    "anchor": "middle",
                    "color": "#1e293b",
                },
                "axis": {
                    "labelFontSize": 11,
                    "titleFontSize": 12,
                    "titleColor": "#475569",
                    "labelColor": "#64748b",
                    "gridColor": "#e2e8f0",
                    "domainColor": "#cbd5e1",
                },
                "legend": {
                    "labelFontSize": 11,
                    "titleFontSize": 12,
                    "titleColor": "#475569",
                    "labelColor": "#64748b",
                    "strokeColor": "#000000",
                    "padding": 6,
                },
                "view": {
                    "stroke": "#cbd5e1",
                },
            },
        }
    )


def register_fqreport_theme() -> None:
    """
    Enable the fqreport Altair theme.

    The theme is registered by decorator on import; this makes sure it is the
    active one when called explicitly.
    """
    alt.theme.enable("fqreport")


def index_axis(levels: Sequence[str], title: str | None, **kwargs: object) -> alt.Axis:
    """
    Axis for categories drawn at positions 1..n of a quantitative scale.

    Ticks sit on the integer positions and are labelled with `levels`.
    """
    labels = json.dumps(["", *[str(level) for level in levels]])
    return alt.Axis(
        values=list(range(1, len(levels) + 1)),
        labelExpr=f"{labels}[datum.value] || ''",
        title=title,
        grid=False,
        **kwargs,
    )


def index_legend(levels: Sequence[str]) -> alt.Legend:
    """Symbol legend for categories coloured at positions 1..n, labelled with `levels`."""
    labels = json.dumps(["", *[str(level) for level in levels]])
    return alt.Legend(
        type="symbol",
        symbolType="square",
        values=list(range(1, len(levels) + 1)),
        labelExpr=f"{labels}[datum.value] || ''",
    )


def band_layer(
    bands: pl.DataFrame,
    pwf: PwfColours,
    alpha: float = BAND_ALPHA,
) -> alt.Chart:
    """
    Background PASS/WARN/FAIL rectangles from ``transforms.status_bands``.
    """
    colours = pwf.with_alpha(alpha)
    domain = ["PASS", "WARN", "FAIL"]
    return (
        alt.Chart(bands)
        .mark_rect()
        .encode(
            alt.X("xmin:Q"),
            alt.X2("xmax:Q"),
            alt.Y("ymin:Q"),
            alt.Y2("ymax:Q"),
            alt.Fill("Status:N")
            .scale(domain=domain, range=[colours[s] for s in domain])
            .legend(None),
        )
        .properties(description=BAND_DESCRIPTION)
    )


def _strip_band_tooltips(spec: object) -> None:
    for attr in ("layer", "hconcat", "vconcat", "concat"):
        children = getattr(spec, attr, alt.Undefined)
        if children is not alt.Undefined:
            for child in children:
                _strip_band_tooltips(child)
    inner = getattr(spec, "spec", alt.Undefined)
    if isinstance(inner, (alt.Chart, alt.LayerChart)):
        _strip_band_tooltips(inner)
    if getattr(spec, "description", alt.Undefined) != BAND_DESCRIPTION:
        return
    encoding = getattr(spec, "encoding", alt.Undefined)
    if encoding is not alt.Undefined:
        encoding.tooltip = alt.Undefined
    mark = spec.mark
    props = mark.to_dict() if isinstance(mark, alt.MarkDef) else {"type": mark}
    props["tooltip"] = None
    spec.mark = alt.MarkDef(**props)


def hide_band_tooltips(chart: AnyChart) -> AnyChart:
    """
    Remove hover tooltips from every status-band layer in `chart`.

    Walks the layers of layered and concatenated charts and returns a copy;
    `chart` itself is left untouched.
    """
    chart = chart.copy(deep=True)
    _strip_band_tooltips(chart)
    return chart


def empty_plot(message: str, style: StyleOptions | None = None) -> alt.Chart:
    """Placeholder chart showing `message`, used when a module is missing."""
    style = style or DEFAULT_STYLE
    logger.warning(message)
    return (
        alt.Chart(pl.DataFrame({"message": [message]}))
        .mark_text(fontSize=style.font_size + 5, color=COLORS["secondary"])
        .encode(text="message:N")
        .properties(width=style.width, height=style.height)
    )


def tooltips(interactive: bool, *fields: alt.Tooltip) -> list[alt.Tooltip]:
    """Tooltip encodings for interactive charts; none for static ones."""
    return list(fields) if interactive else alt.Undefined


def finish(
    chart: AnyChart,
    style: StyleOptions,
    interactive: bool,
    title: str | None = None,
) -> AnyChart:
    """
    Apply the style options and interactivity shared by every chart.

    Must be the last step of a chart builder: configured charts cannot be
    layered or concatenated afterwards.
    """
    if style.title is not None or title is not None:
        chart = chart.properties(title=style.title if style.title is not None else title)
    if interactive and isinstance(chart, (alt.Chart, alt.LayerChart)):
        chart = chart.interactive()
    if interactive:
        chart = hide_band_tooltips(chart)

    chart = chart.configure_axis(labelFontSize=style.font_size).configure_axisX(
        labelAngle=style.x_label_angle,
    )
    if style.legend_position == "none":
        return chart.configure_legend(disable=True)
    return chart.configure_legend(orient=style.legend_position)


# Output format -> keyword arguments for Chart.save
SAVE_OPTIONS = {
    "html": {"embed_options": {"renderer": "svg"}},
    "svg": {},
    "png": {"scale_factor": 2},
}


def save_chart(
    chart: AnyChart,
    output_path: Path,
    formats: list[str] | None = None,
) -> list[Path]:
    """
    Write a FastQC chart next to `output_path`, once per requested format.

    The format name becomes the file suffix, so ``qc/dup`` saved as html and
    png gives ``qc/dup.html`` and ``qc/dup.png``. HTML files embed the
    Vega-Lite spec and render it as SVG; PNGs are drawn at twice the chart
    size by vl-convert.

    Args:
        chart: Chart returned by one of the ``plot_*`` builders
        output_path: Destination path; any suffix is replaced
        formats: Any of "html", "svg" and "png" (default: html only)

    Returns:
        The written paths, in the order of `formats`

    Raises:
        ValueError: For a format other than html, svg or png
    """
    output_path = Path(output_path)
    written = []
    for fmt in formats or ["html"]:
        if fmt not in SAVE_OPTIONS:
            msg = f"Unsupported format: {fmt}. Use 'html', 'svg', or 'png'."
            raise ValueError(msg)
        path = output_path.with_suffix(f".{fmt}")
        chart.save(path, **SAVE_OPTIONS[fmt])
        logger.info(f"Wrote {path}")
        written.append(path)
    return written
