"""
fqreport subcommands: ``plot`` for charts and ``summary``, ``totals`` and
``fasta`` for tables and sequence export.

Importing a module here is what attaches its commands to the shared app.
"""

from fqreport_cli.commands import plot, tables

__all__ = ["plot", "tables"]
