"""
Exception hierarchy for fqreport.

Parsing and configuration failures abort the call and surface to the caller.
Missing modules are never raised; they degrade to empty tables or placeholder
charts instead.
"""

from __future__ import annotations

from collections.abc import Iterable


class FqReportError(Exception):
    """Base class for all fqreport errors."""


class MalformedReportError(FqReportError):
    """A FastQC report could not be parsed."""

    def __init__(
        self,
        message: str,
        section: str | None = None,
        line: int | None = None,
    ) -> None:
        self.section = section
        self.line = line
        where = []
        if section is not None:
            where.append(f"section '{section}'")
        if line is not None:
            where.append(f"line {line}")
        prefix = f"{', '.join(where)}: " if where else ""
        super().__init__(f"Malformed report ({prefix}{message})")


class UnsupportedVersionError(FqReportError):
    """The report was written by a FastQC version with no known layout."""

    def __init__(self, version: str, supported: Iterable[str]) -> None:
        self.version = version
        allowed = ", ".join(supported)
        super().__init__(
            f"Unsupported FastQC version '{version}'. Supported layouts: {allowed}",
        )


class UnknownModuleError(FqReportError, KeyError):
    """A module name outside the FastQC module catalogue was requested."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown FastQC module: '{name}'")

    def __str__(self) -> str:
        return str(self.args[0])


class DuplicateReportError(FqReportError):
    """A report with the same filename is already in the collection."""


class SchemaMismatchError(FqReportError):
    """Collection members disagree on module names or column schemas."""


class InvalidOptionError(FqReportError, ValueError):
    """A caller-supplied option is outside its allowed set."""

    def __init__(self, option: str, value: object, allowed: Iterable[object]) -> None:
        self.option = option
        self.value = value
        self.allowed = list(allowed)
        choices = ", ".join(repr(a) for a in self.allowed)
        super().__init__(
            f"Invalid value {value!r} for '{option}'. Must be one of: {choices}",
        )


def check_choice(option: str, value: str, allowed: Iterable[str]) -> str:
    """Return `value` if it is one of `allowed`, otherwise raise InvalidOptionError."""
    allowed = tuple(allowed)
    if value not in allowed:
        raise InvalidOptionError(option, value, allowed)
    return value
