"""assign command — select and request reviewers for a pull request."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from autoreviewers_cli.event import load_event
from autoreviewers_core.config import DEFAULT_CONFIG_PATH, load_config
from autoreviewers_core.errors import AutoReviewersError
from autoreviewers_core.gh.platform import GitHubPlatform
from autoreviewers_core.selector import assign_reviewers

console = Console()
logger = logging.getLogger(__name__)


@click.command("assign")
@click.option(
    "--repo",
    envvar="GITHUB_REPOSITORY",
    default=None,
    help="GitHub repository in owner/name format. Defaults to $GITHUB_REPOSITORY or the event payload.",
)
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit when running from a pull_request event.",
)
@click.option(
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    envvar="AUTOREVIEWERS_CONFIG",
    help="Path to the reviewer configuration file (JSON or YAML).",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    default=None,
    help="Path to the GitHub event payload. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the selected reviewers without requesting reviews or commenting.",
)
def assign_cmd(
    repo: str | None,
    pr_number: int | None,
    config_path: str,
    event_path: str | None,
    dry_run: bool,
):
    """Select reviewers for a pull request and request their review.

    Candidates come from code owners first, then recent authors of the
    modified files, then the configured defaults. Candidates without write
    access to the repository are dropped.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or GH_TOKEN, or use gh CLI)
    """
    from autoreviewers_cli.auth import resolve_github_token

    try:
        config = load_config(config_path)
    except AutoReviewersError as e:
        logger.error("%s", e)
        raise click.ClickException(str(e)) from e

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    event = None
    if pr_number is None:
        if not event_path:
            raise click.UsageError("--pr is required when no pull request event payload is available.")
        try:
            event = load_event(event_path)
        except AutoReviewersError as e:
            raise click.ClickException(str(e)) from e
        repo = repo or event.full_name
    if not repo:
        raise click.UsageError("--repo is required when GITHUB_REPOSITORY is not set.")

    try:
        platform = GitHubPlatform.connect(repo, token)
        if event is None:
            event = platform.get_event(pr_number)
        result = assign_reviewers(platform, event, config, dry_run=dry_run)
    except Exception as e:
        logger.error("Error in reviewer assignment: %s", e)
        raise click.ClickException(str(e)) from e

    if result.reviewers:
        console.print(f"PR #{result.pr_number}: {', '.join('@' + r for r in result.reviewers)}")
