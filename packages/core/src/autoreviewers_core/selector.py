"""Reviewer selection orchestration.

Stages run in a fixed order, each taking the current ReviewerSet and
returning the next one:

    code owners → recent authors (blame) → defaults
      → author exclusion → working hours → repository permission → max count

Earlier stages add first, so when the result is truncated to
``max_reviewers`` code owners win over blame authors, who win over defaults.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from rich.console import Console

from autoreviewers_core.blame import get_blame_reviewers
from autoreviewers_core.config import ReviewerConfig
from autoreviewers_core.filters import filter_by_permission, filter_by_timezone
from autoreviewers_core.models import ChangedFile, PullRequestEvent, ReviewerSet, SelectionResult
from autoreviewers_core.ownership import collect_owner_reviewers

console = Console()
logger = logging.getLogger(__name__)

COMMENT_FOOTER = "Reviewers were selected based on code ownership and recent contributions."


def add_blame_reviewers(
    platform,
    files: Iterable[ChangedFile],
    event: PullRequestEvent,
    config: ReviewerConfig,
    reviewers: ReviewerSet,
) -> ReviewerSet:
    """Add recent authors of modified files until max_reviewers is reached."""
    for file in files:
        if len(reviewers) >= config.max_reviewers:
            break
        if file.status != "modified":
            continue
        reviewers = reviewers.union(get_blame_reviewers(platform, file, event.base_sha, event.author))
    logger.info("After blame analysis: %s", reviewers)
    return reviewers


def add_default_reviewers(config: ReviewerConfig, reviewers: ReviewerSet, exclude: str | None = None) -> ReviewerSet:
    """Append configured defaults, in order, until min_reviewers is met."""
    added = []
    for default in config.default_reviewers:
        if len(reviewers) >= config.min_reviewers:
            break
        if default == exclude or default in reviewers:
            continue
        reviewers = reviewers.add(default)
        added.append(default)
    logger.info("Added default reviewers: %s", ", ".join(added) or "none")
    return reviewers


def select_reviewers(
    platform,
    event: PullRequestEvent,
    config: ReviewerConfig,
    now: datetime | None = None,
) -> SelectionResult:
    """Run every selection stage and return the final, truncated reviewer list."""
    files = platform.list_changed_files(event.number)
    exclude = event.author if config.exclude_authors else None
    result = SelectionResult(pr_number=event.number)

    reviewers = collect_owner_reviewers(files, config.code_owners, ReviewerSet(), exclude=exclude)
    result.owner_reviewers = reviewers.to_list()

    if len(reviewers) < config.min_reviewers:
        before = set(reviewers)
        reviewers = add_blame_reviewers(platform, files, event, config, reviewers)
        result.blame_reviewers = [r for r in reviewers if r not in before]

    if len(reviewers) < config.min_reviewers and config.default_reviewers:
        before = set(reviewers)
        reviewers = add_default_reviewers(config, reviewers, exclude=exclude)
        result.default_reviewers = [r for r in reviewers if r not in before]

    if config.exclude_authors:
        reviewers = reviewers.without(event.author)

    if config.timezone.enabled:
        reviewers = filter_by_timezone(reviewers, config.timezone, now=now)

    org = event.owner if event.owner_is_org else None
    reviewers = filter_by_permission(platform, reviewers, org=org)

    result.reviewers = reviewers.truncated(config.max_reviewers).to_list()
    return result


def build_comment(reviewers: list[str]) -> str:
    mentions = ", ".join(f"@{r}" for r in reviewers)
    return f"Auto-assigned reviewers: {mentions}\n\n{COMMENT_FOOTER}"


def assign_reviewers(
    platform,
    event: PullRequestEvent,
    config: ReviewerConfig,
    dry_run: bool = False,
    now: datetime | None = None,
) -> SelectionResult:
    """Select reviewers for a pull request and request their review.

    In dry-run mode the selection is printed but nothing is written to GitHub.
    An empty selection is a warning, not a failure. Errors from the review
    request or comment propagate to the caller.
    """
    logger.info("Processing PR #%d by %s", event.number, event.author)

    result = select_reviewers(platform, event, config, now=now)
    reviewers = result.reviewers

    if not reviewers:
        logger.warning("No suitable reviewers found for PR #%d", event.number)
        console.print("[yellow]No suitable reviewers found.[/yellow]")
        return result

    if dry_run:
        console.print(f"[bold]Dry run: would request {', '.join(reviewers)} on PR #{event.number}.[/bold]")
        return result

    platform.request_reviewers(event.number, reviewers)
    result.requested = True
    logger.info("Successfully assigned reviewers: %s", ", ".join(reviewers))
    console.print(f"[green]Assigned reviewers: {', '.join(reviewers)}[/green]")

    if config.post_comment:
        platform.create_comment(event.number, build_comment(reviewers))
        result.commented = True

    return result
