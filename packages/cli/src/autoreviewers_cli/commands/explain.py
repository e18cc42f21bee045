"""explain command — show which code-owner patterns match given paths."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from autoreviewers_core.config import DEFAULT_CONFIG_PATH, load_config
from autoreviewers_core.errors import ConfigError
from autoreviewers_core.ownership import get_code_owners, matching_patterns

console = Console()


@click.command("explain")
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    envvar="AUTOREVIEWERS_CONFIG",
    help="Path to the reviewer configuration file (JSON or YAML).",
)
def explain_cmd(paths: tuple[str, ...], config_path: str):
    """Show the code owners each PATH would get. Works offline."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title="Code owners", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="bold")
    table.add_column("Patterns")
    table.add_column("Owners")

    for path in paths:
        patterns = matching_patterns(path, config.code_owners)
        owners = get_code_owners(path, config.code_owners)
        table.add_row(
            path,
            "\n".join(patterns) or "[dim]none[/dim]",
            ", ".join(owners) or "[dim]none[/dim]",
        )

    console.print(table)
