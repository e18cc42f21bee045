"""Recent-author lookup from git blame at the PR's base commit."""

from __future__ import annotations

import logging

from autoreviewers_core.models import BlameRange, ChangedFile, LookupStatus

logger = logging.getLogger(__name__)

MAX_BLAME_AUTHORS = 2


def get_changed_base_lines(patch_text: str) -> set[int]:
    """
    Return the base-version line numbers a patch touches.

    Removed lines contribute their old-file line number. An insertion with no
    removed line next to it contributes the base line it was inserted after
    (or line 1 for an insertion at the top of the file), so pure additions
    still point at the code they extend.
    """
    lines: set[int] = set()
    old_line: int | None = None

    for line in patch_text.splitlines():
        if line.startswith("@@"):
            try:
                old_range = line.split("-")[1].split(" ")[0]
                old_line = int(old_range.split(",")[0])
            except (IndexError, ValueError):
                old_line = None
            continue
        if old_line is None:
            continue

        if line.startswith("-"):
            lines.add(old_line)
            old_line += 1
        elif line.startswith("+"):
            lines.add(max(old_line - 1, 1))
        elif line.startswith("\\"):
            pass  # "\ No newline at end of file"
        else:
            old_line += 1

    return lines


def rank_recent_authors(
    ranges: list[BlameRange],
    exclude: str,
    lines: set[int] | None = None,
    limit: int = MAX_BLAME_AUTHORS,
) -> list[str]:
    """Pick up to ``limit`` distinct authors, most recent first.

    When ``lines`` is given, only ranges covering one of those base lines
    count. Ranges without a linked GitHub account and the ``exclude`` login
    are skipped.
    """
    candidates = [r for r in ranges if r.author_login]
    if lines:
        candidates = [r for r in candidates if r.overlaps(lines)]

    authors: list[str] = []
    for r in sorted(candidates, key=lambda r: r.age):
        if r.author_login == exclude or r.author_login in authors:
            continue
        authors.append(r.author_login)
        if len(authors) >= limit:
            break
    return authors


def get_blame_reviewers(platform, file: ChangedFile, base_ref: str, pr_author: str) -> list[str]:
    """Return up to two recent authors of the lines this PR changes in file.

    Never raises: a file with no history at ``base_ref`` gives an empty
    result, and any other failed lookup is logged and also gives an empty
    result.
    """
    result = platform.get_blame(file.filename, base_ref)

    if result.status is LookupStatus.NOT_FOUND:
        logger.info("%s is a new file, skipping blame", file.filename)
        return []
    if result.status is LookupStatus.ERROR:
        logger.warning("Could not get blame for %s: %s", file.filename, result.error)
        return []

    ranges = result.value or []
    logger.debug("Found %d blame ranges for %s", len(ranges), file.filename)

    lines = get_changed_base_lines(file.patch) if file.patch else set()
    authors = rank_recent_authors(ranges, exclude=pr_author, lines=lines)
    for author in authors:
        logger.info("Found recent contributor for %s: %s", file.filename, author)
    return authors
