"""Custom exceptions for autoreviewers."""


class AutoReviewersError(Exception):
    """Base exception for all autoreviewers errors."""


class ConfigError(AutoReviewersError):
    """The reviewer configuration file is missing, unreadable or malformed."""


class EventError(AutoReviewersError):
    """The pull request event payload is missing required fields."""
