"""Shared fixtures for the core tests."""

from datetime import datetime, timezone

import pytest

from autoreviewers_core.models import BlameRange, ChangedFile, Lookup, PullRequestEvent


class FakePlatform:
    """In-memory stand-in for GitHubPlatform.

    ``blame`` maps a path to a list of BlameRange or to a ready-made Lookup;
    paths with no entry are reported as new files. ``permissions`` maps a
    username to a permission string or a Lookup; missing users are not
    collaborators. ``org_members`` lists organization members.
    """

    def __init__(self, files=None, blame=None, permissions=None, org_members=()):
        self.files = files or []
        self.blame = blame or {}
        self.permissions = permissions or {}
        self.org_members = set(org_members)
        self.blame_calls = []
        self.permission_calls = []
        self.membership_calls = []
        self.requested = []
        self.comments = []

    def list_changed_files(self, pr_number):
        return list(self.files)

    def get_blame(self, path, ref):
        self.blame_calls.append((path, ref))
        entry = self.blame.get(path)
        if entry is None:
            return Lookup.not_found(f"path does not exist: {path}")
        if isinstance(entry, Lookup):
            return entry
        return Lookup.found(entry)

    def get_permission(self, username):
        self.permission_calls.append(username)
        entry = self.permissions.get(username)
        if entry is None:
            return Lookup.not_found("Not Found")
        if isinstance(entry, Lookup):
            return entry
        return Lookup.found(entry)

    def check_org_membership(self, org, username):
        self.membership_calls.append((org, username))
        if username in self.org_members:
            return Lookup.found(True)
        return Lookup.not_found(f"{username} is not a member of {org}")

    def request_reviewers(self, pr_number, reviewers):
        self.requested.append((pr_number, list(reviewers)))

    def create_comment(self, pr_number, body):
        self.comments.append((pr_number, body))


@pytest.fixture
def make_platform():
    return FakePlatform


@pytest.fixture
def event():
    return PullRequestEvent(
        number=42,
        author="dave",
        base_sha="a" * 40,
        owner="acme",
        repo="widgets",
        owner_is_org=True,
    )


@pytest.fixture
def noon_utc():
    return datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def modified(filename, patch=None):
    return ChangedFile(filename=filename, status="modified", patch=patch)


def blame_range(login, start=1, end=10, age=1):
    return BlameRange(author_login=login, start_line=start, end_line=end, age=age)


@pytest.fixture
def make_file():
    return modified


@pytest.fixture
def make_range():
    return blame_range
