"""Command line entry point for formrules."""

import click


@click.group()
def cli():
    """Inspect controllers declaring formrules validation."""


# Commands are imported after the group exists
from formrules.cli.check_cmd import check  # noqa: E402

cli.add_command(check)
