"""Reviewer filters applied after candidates have been collected."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from autoreviewers_core.config import TimezoneConfig
from autoreviewers_core.models import LookupStatus, ReviewerSet

logger = logging.getLogger(__name__)

ELIGIBLE_PERMISSIONS = frozenset({"write", "maintain", "admin"})


def local_hour(tz_name: str, now: datetime) -> int:
    """Hour of day in tz_name at the instant ``now``.

    Raises ZoneInfoNotFoundError, ValueError or OSError for a name that is not a zone.
    """
    return now.astimezone(ZoneInfo(tz_name)).hour


def filter_by_timezone(
    reviewers: ReviewerSet,
    tz_config: TimezoneConfig,
    now: datetime | None = None,
) -> ReviewerSet:
    """Drop reviewers who are currently outside their working hours.

    Reviewers without a recorded timezone, or with one that cannot be
    resolved, are kept.
    """
    now = now or datetime.now(timezone.utc)
    hours = tz_config.working_hours

    def is_available(reviewer: str) -> bool:
        tz_name = tz_config.user_timezones.get(reviewer)
        if not tz_name:
            return True
        try:
            hour = local_hour(tz_name, now)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.warning("Invalid timezone for %s: %s", reviewer, tz_name)
            return True
        if hours.contains(hour):
            return True
        logger.info("Skipping %s - outside working hours (%02d:00 in %s)", reviewer, hour, tz_name)
        return False

    return reviewers.filter(is_available)


def _log_non_collaborator(platform, reviewer: str, org: str | None) -> None:
    # Membership is only reported; it never makes someone eligible.
    if org is None:
        logger.info("✗ %s is not a collaborator", reviewer)
        return
    membership = platform.check_org_membership(org, reviewer)
    if membership.is_found:
        logger.info("✗ %s is org member but not a collaborator", reviewer)
    elif membership.is_not_found:
        logger.info("✗ %s is not in the organization", reviewer)
    else:
        logger.info("✗ %s is not a collaborator (membership check failed: %s)", reviewer, membership.error)


def is_eligible(platform, reviewer: str, org: str | None = None) -> bool:
    """Return True if reviewer holds write, maintain or admin on the repository.

    ``org`` is the repository owner when it is an organization; it is only
    used to explain why a non-collaborator was dropped.
    """
    result = platform.get_permission(reviewer)

    if result.status is LookupStatus.FOUND:
        if result.value in ELIGIBLE_PERMISSIONS:
            logger.info("✓ %s has %s permission", reviewer, result.value)
            return True
        logger.info("✗ %s only has %s permission", reviewer, result.value)
        return False

    if result.status is LookupStatus.NOT_FOUND:
        _log_non_collaborator(platform, reviewer, org)
        return False

    logger.warning("Error checking %s: %s", reviewer, result.error)
    return False


def filter_by_permission(platform, reviewers: ReviewerSet, org: str | None = None) -> ReviewerSet:
    return reviewers.filter(lambda reviewer: is_eligible(platform, reviewer, org))
