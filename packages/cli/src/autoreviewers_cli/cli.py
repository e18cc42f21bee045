"""CLI entry point for autoreviewers.

Commands:
  assign   — select and request reviewers for a pull request
  explain  — show which code-owner patterns match the given paths
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from autoreviewers_cli.commands.assign import assign_cmd
from autoreviewers_cli.commands.explain import explain_cmd

console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Route all library logging through rich, INFO by default and DEBUG with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    # PyGithub logs every request at DEBUG.
    logging.getLogger("github").setLevel(logging.INFO if verbose else logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("autoreviewers"),
    prog_name="autoreviewers",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Assign pull request reviewers from code ownership and recent history."""
    configure_logging(verbose)


main.add_command(assign_cmd)
main.add_command(explain_cmd)
