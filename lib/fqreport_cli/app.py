"""
The ``fqreport`` Typer app.

Lives apart from the package ``__init__`` so command modules can import it
without a cycle; ``fqreport_cli.commands`` decorates it with the plot and
table commands.
"""

import typer

app = typer.Typer(
    name="fqreport",
    help="fqreport: Parse, compare and chart FastQC reports.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
