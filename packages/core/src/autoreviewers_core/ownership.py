"""Code-owner pattern matching."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from wcmatch.glob import BRACE, CASE, GLOBSTAR, globmatch

from autoreviewers_core.models import ChangedFile, ReviewerSet

logger = logging.getLogger(__name__)

_WILDCARDS = ("*", "?", "[", "{")
_GLOB_FLAGS = GLOBSTAR | BRACE | CASE


def pattern_matches(pattern: str, filename: str) -> bool:
    """Return True if a code-owner pattern selects filename.

    Three pattern kinds, checked in this order:
    - globs (contain ``*``, ``?``, ``[`` or ``{``) match the full path with
      path-aware rules: ``*`` stays inside one directory and ``**/`` spans
      zero or more directories.
    - directory scopes (end with ``/``) match every path under that prefix.
    - anything else must equal the path exactly.
    """
    if any(w in pattern for w in _WILDCARDS):
        return globmatch(filename, pattern, flags=_GLOB_FLAGS)
    if pattern.endswith("/"):
        return filename.startswith(pattern)
    return filename == pattern


def matching_patterns(filename: str, code_owners: Mapping[str, Iterable[str]]) -> list[str]:
    return [pattern for pattern in code_owners if pattern_matches(pattern, filename)]


def get_code_owners(filename: str, code_owners: Mapping[str, Iterable[str]]) -> list[str]:
    """Owners of every pattern matching filename, in declaration order, without duplicates."""
    owners: list[str] = []
    for pattern in matching_patterns(filename, code_owners):
        owners.extend(code_owners[pattern])
    return list(dict.fromkeys(owners))


def collect_owner_reviewers(
    files: Iterable[ChangedFile],
    code_owners: Mapping[str, Iterable[str]],
    reviewers: ReviewerSet,
    exclude: str | None = None,
) -> ReviewerSet:
    """Add the code owners of every changed file, in file-list order.

    ``exclude`` (the PR author when authors are excluded) is never added, so
    an author who owns the files does not count towards the minimum.
    """
    for file in files:
        owners = [o for o in get_code_owners(file.filename, code_owners) if o != exclude]
        if owners:
            logger.debug("%s → %s", file.filename, ", ".join(owners))
        reviewers = reviewers.union(owners)
    logger.info("Domain-based reviewers: %s", reviewers)
    return reviewers
