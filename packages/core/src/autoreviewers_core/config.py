from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from autoreviewers_core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".github/reviewers-config.json"
DEFAULT_MIN_REVIEWERS = 2
DEFAULT_MAX_REVIEWERS = 3
DEFAULT_WORKING_HOURS = (9, 18)


@dataclass(frozen=True)
class WorkingHours:
    start: int = DEFAULT_WORKING_HOURS[0]
    end: int = DEFAULT_WORKING_HOURS[1]

    def contains(self, hour: int) -> bool:
        """Return True if ``hour`` falls in ``[start, end)``.

        A window with ``start > end`` wraps past midnight (e.g. 22 → 6).
        """
        if self.start <= self.end:
            return self.start <= hour < self.end
        return hour >= self.start or hour < self.end


@dataclass(frozen=True)
class TimezoneConfig:
    enabled: bool = False
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    user_timezones: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class ReviewerConfig:
    """Reviewer assignment settings, loaded once per run."""

    min_reviewers: int = DEFAULT_MIN_REVIEWERS
    max_reviewers: int = DEFAULT_MAX_REVIEWERS
    # Pattern order matters: it is the order owners are added in.
    code_owners: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    default_reviewers: tuple[str, ...] = ()
    exclude_authors: bool = False
    post_comment: bool = True
    timezone: TimezoneConfig = field(default_factory=TimezoneConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReviewerConfig:
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        min_reviewers = data.get("minReviewers")
        if min_reviewers is None:
            logger.warning("minReviewers not defined in config, defaulting to %d", DEFAULT_MIN_REVIEWERS)
            min_reviewers = DEFAULT_MIN_REVIEWERS
        max_reviewers = data.get("maxReviewers")
        if max_reviewers is None:
            logger.warning("maxReviewers not defined in config, defaulting to %d", DEFAULT_MAX_REVIEWERS)
            max_reviewers = DEFAULT_MAX_REVIEWERS

        min_reviewers = _non_negative_int("minReviewers", min_reviewers)
        max_reviewers = _non_negative_int("maxReviewers", max_reviewers)
        if min_reviewers > max_reviewers:
            logger.warning(
                "minReviewers (%d) is greater than maxReviewers (%d); at most %d reviewer(s) will be assigned",
                min_reviewers,
                max_reviewers,
                max_reviewers,
            )

        return cls(
            min_reviewers=min_reviewers,
            max_reviewers=max_reviewers,
            code_owners=_parse_code_owners(data.get("codeOwners") or {}),
            default_reviewers=_username_list("defaultReviewers", data.get("defaultReviewers") or []),
            exclude_authors=bool(data.get("excludeAuthors", False)),
            post_comment=bool(data.get("postComment", True)),
            timezone=_parse_timezone(data.get("timezone") or {}),
        )


def _non_negative_int(key: str, value: Any) -> int:
    # bool is an int subclass; `true` is not a reviewer count.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{key} must be a non-negative integer, got {value!r}")
    return value


def _username_list(key: str, value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of usernames, got {value!r}")
    return tuple(v.lstrip("@") for v in value)


def _parse_code_owners(value: Any) -> Mapping[str, tuple[str, ...]]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"codeOwners must map patterns to usernames, got {type(value).__name__}")
    return MappingProxyType(
        {str(pattern): _username_list(f"codeOwners[{pattern!r}]", owners) for pattern, owners in value.items()}
    )


def _parse_timezone(value: Any) -> TimezoneConfig:
    if not isinstance(value, Mapping):
        raise ConfigError(f"timezone must be a mapping, got {type(value).__name__}")

    hours = value.get("workingHours") or {}
    if not isinstance(hours, Mapping):
        raise ConfigError(f"timezone.workingHours must be a mapping, got {type(hours).__name__}")
    start = hours.get("start", DEFAULT_WORKING_HOURS[0])
    end = hours.get("end", DEFAULT_WORKING_HOURS[1])
    for key, hour in (("start", start), ("end", end)):
        if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
            raise ConfigError(f"timezone.workingHours.{key} must be an hour between 0 and 23, got {hour!r}")

    user_timezones = value.get("userTimezones") or {}
    if not isinstance(user_timezones, Mapping):
        raise ConfigError("timezone.userTimezones must map usernames to IANA timezone names")

    return TimezoneConfig(
        enabled=bool(value.get("enabled", False)),
        working_hours=WorkingHours(start=start, end=end),
        user_timezones=MappingProxyType({str(k).lstrip("@"): str(v) for k, v in user_timezones.items() if v}),
    )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> ReviewerConfig:
    """
    Load the reviewer configuration file.

    ``.yml``/``.yaml`` files are read with PyYAML, anything else as JSON.
    A missing, unreadable or malformed file raises ConfigError: without a
    config there is nothing sensible to assign.
    """
    path = Path(config_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}") from e

    try:
        if path.suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not parse config file {config_path}: {e}") from e

    config = ReviewerConfig.from_dict(data)
    logger.info("Config: min=%d, max=%d", config.min_reviewers, config.max_reviewers)
    return config
