"""glyphvm CLI package - click command group."""

import logging

import click

from glyphvm import __version__
from glyphvm.cli.run import run_command
from glyphvm.cli.validate import validate_command


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log curses and run progress to stderr")
def main(verbose):
    """glyphvm - run decoded glyph stack-machine programs."""
    configure_logging(verbose)


@click.command()
def version_command():
    """Show version info."""
    click.echo(f"glyphvm v{__version__}")


main.add_command(run_command, "run")
main.add_command(validate_command, "validate")
main.add_command(version_command, "version")

__all__ = [
    "main",
    "run_command",
    "validate_command",
    "version_command",
]
