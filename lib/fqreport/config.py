"""
Colour and style configuration for fqreport charts.

PwfColours gives the pass/warn/fail palette; StyleOptions is the closed set
of chart style overrides the chart builders recognise. Both can be loaded
from YAML files for use from the command line.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidOptionError

_HEX_COLOUR = re.compile(r"^#(?:[0-9a-fA-F]{6})$")


class PwfColours(BaseModel):
    """Colours for PASS, WARN and FAIL, plus MAX for the top of a scale."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    PASS: str = "#22c55e"
    WARN: str = "#f59e0b"
    FAIL: str = "#ef4444"
    MAX: str = "#64748b"

    @field_validator("PASS", "WARN", "FAIL", "MAX")
    @classmethod
    def _check_hex(cls, value: str) -> str:
        if not _HEX_COLOUR.match(value):
            msg = f"expected a '#rrggbb' colour, got {value!r}"
            raise ValueError(msg)
        return value

    def with_alpha(self, alpha: float) -> dict[str, str]:
        """Status -> ``rgba()`` colour string at the given opacity."""
        if not 0 <= alpha <= 1:
            raise InvalidOptionError("alpha", alpha, ["a number between 0 and 1"])
        colours = {}
        for status in ("PASS", "WARN", "FAIL"):
            hex_value = getattr(self, status).lstrip("#")
            r, g, b = (int(hex_value[i : i + 2], 16) for i in (0, 2, 4))
            colours[status] = f"rgba({r},{g},{b},{alpha:g})"
        return colours

    def domain_range(self) -> tuple[list[str], list[str]]:
        """Status names and colours, ready for an Altair colour scale."""
        return ["PASS", "WARN", "FAIL"], [self.PASS, self.WARN, self.FAIL]


PWF = PwfColours()

LegendPosition = Literal["top-right", "right", "bottom", "none"]


class StyleOptions(BaseModel):
    """
    Style overrides accepted by every chart builder.

    Unknown keys are rejected rather than passed through.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(default=450, gt=0)
    height: int = Field(default=300, gt=0)
    title: str | None = None
    legend_position: LegendPosition = "top-right"
    font_size: int = Field(default=11, gt=0)
    x_label_angle: int = Field(default=0, ge=-90, le=90)
    heat_width: float = Field(default=8, gt=0, description="Heatmap width relative to side panels")


DEFAULT_STYLE = StyleOptions()


def make_style(**options: object) -> StyleOptions:
    """
    Build StyleOptions, reporting unknown or invalid keys as InvalidOptionError.
    """
    unknown = set(options) - set(StyleOptions.model_fields)
    if unknown:
        key = sorted(unknown)[0]
        raise InvalidOptionError("style", key, StyleOptions.model_fields)
    try:
        return StyleOptions(**options)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0])
        allowed = [error["msg"]]
        raise InvalidOptionError(field, options.get(field), allowed) from exc


def _read_yaml(path: Path) -> dict:
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise InvalidOptionError(str(path), type(data).__name__, ["a YAML mapping"])
    return data


def load_style(path: Path | str) -> StyleOptions:
    """Read StyleOptions from a YAML mapping."""
    return make_style(**_read_yaml(Path(path)))


def load_pwf(path: Path | str) -> PwfColours:
    """Read a PASS/WARN/FAIL/MAX colour mapping from YAML."""
    data = _read_yaml(Path(path))
    try:
        return PwfColours(**{k.upper(): v for k, v in data.items()})
    except ValidationError as exc:
        error = exc.errors()[0]
        raise InvalidOptionError(str(error["loc"][0]), error.get("input"), [error["msg"]]) from exc


def load_labels(path: Path | str) -> dict[str, str]:
    """Read a filename -> display label mapping from YAML."""
    return {str(k): str(v) for k, v in _read_yaml(Path(path)).items()}
