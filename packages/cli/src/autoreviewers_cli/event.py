"""Pull request event loading from a GitHub Actions event payload."""

from __future__ import annotations

import json
from pathlib import Path

from autoreviewers_core.errors import EventError
from autoreviewers_core.models import PullRequestEvent


def parse_event(payload: dict) -> PullRequestEvent:
    """Build a PullRequestEvent from a ``pull_request`` / ``pull_request_target`` payload."""
    pr = payload.get("pull_request")
    repository = payload.get("repository")
    if not isinstance(pr, dict) or not isinstance(repository, dict):
        raise EventError("Event payload is not a pull request event")

    try:
        owner = repository["owner"]
        return PullRequestEvent(
            number=int(pr["number"]),
            author=pr["user"]["login"],
            base_sha=pr["base"]["sha"],
            owner=owner["login"],
            repo=repository["name"],
            owner_is_org=owner.get("type") == "Organization",
        )
    except (KeyError, TypeError, ValueError) as e:
        raise EventError(f"Pull request event is missing a required field: {e}") from e


def load_event(event_path: str) -> PullRequestEvent:
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise EventError(f"Could not read event payload {event_path}: {e}") from e
    if not isinstance(payload, dict):
        raise EventError(f"Event payload {event_path} is not a JSON object")
    return parse_event(payload)
