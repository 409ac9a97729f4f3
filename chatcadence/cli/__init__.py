"""
Click-based command line interface.
"""

import logging

import click

from chatcadence import __version__
from chatcadence.cli.commands.segment import segment


@click.group()
@click.version_option(version=__version__, prog_name="chatcadence")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """chatcadence: adaptive turn, volley and session segmentation of chat logs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


cli.add_command(segment)


def main():
    """Console entry point."""
    return cli()
