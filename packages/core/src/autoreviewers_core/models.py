"""Data types shared by the selection stages.

Everything here is rebuilt from the GitHub API on every run; nothing is
persisted between pull request events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by the pull request, as reported by the files API."""

    filename: str
    status: str  # "added" | "modified" | "removed" | "renamed" (GitHub may also report "changed", "copied")
    patch: str | None = None
    sha: str | None = None

    @classmethod
    def from_github(cls, file) -> ChangedFile:
        return cls(
            filename=file.filename,
            status=file.status,
            patch=getattr(file, "patch", None),
            sha=getattr(file, "sha", None),
        )


@dataclass(frozen=True)
class BlameRange:
    """A contiguous run of lines last touched by the same commit."""

    author_login: str | None
    start_line: int
    end_line: int
    age: int  # 1 = most recent, 10 = oldest (GitHub's blame scale)

    def overlaps(self, lines: Iterable[int]) -> bool:
        return any(self.start_line <= line <= self.end_line for line in lines)


@dataclass(frozen=True)
class PullRequestEvent:
    """The subset of a pull request event the selector needs."""

    number: int
    author: str
    base_sha: str
    owner: str
    repo: str
    owner_is_org: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Outcome of a read-only platform query.

    Callers branch on ``status`` rather than on exception types, so a missing
    resource (new file, non-collaborator) is distinguishable from a failed call.
    """

    status: LookupStatus
    value: T | None = None
    error: str | None = None

    @classmethod
    def found(cls, value: T) -> Lookup[T]:
        return cls(LookupStatus.FOUND, value=value)

    @classmethod
    def not_found(cls, message: str | None = None) -> Lookup[T]:
        return cls(LookupStatus.NOT_FOUND, error=message)

    @classmethod
    def failed(cls, message: str) -> Lookup[T]:
        return cls(LookupStatus.ERROR, error=message)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_not_found(self) -> bool:
        return self.status is LookupStatus.NOT_FOUND


@dataclass(frozen=True)
class ReviewerSet:
    """Insertion-ordered, duplicate-free set of usernames.

    Immutable: every operation returns a new set so each pipeline stage takes
    the current value and hands back the next one. Insertion order is the
    truncation priority, which is how ownership beats blame beats defaults.
    """

    members: tuple[str, ...] = ()

    @classmethod
    def of(cls, names: Iterable[str] = ()) -> ReviewerSet:
        return cls(tuple(dict.fromkeys(names)))

    def union(self, names: Iterable[str]) -> ReviewerSet:
        return ReviewerSet.of([*self.members, *names])

    def add(self, name: str) -> ReviewerSet:
        return self.union([name])

    def without(self, name: str) -> ReviewerSet:
        return ReviewerSet(tuple(m for m in self.members if m != name))

    def filter(self, predicate: Callable[[str], bool]) -> ReviewerSet:
        return ReviewerSet(tuple(m for m in self.members if predicate(m)))

    def truncated(self, limit: int) -> ReviewerSet:
        return ReviewerSet(self.members[: max(limit, 0)])

    def to_list(self) -> list[str]:
        return list(self.members)

    def __contains__(self, name: object) -> bool:
        return name in self.members

    def __iter__(self) -> Iterator[str]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def __str__(self) -> str:
        return ", ".join(self.members) or "none"


@dataclass
class SelectionResult:
    """What a run decided, stage by stage, and what it did about it."""

    pr_number: int
    reviewers: list[str] = field(default_factory=list)
    owner_reviewers: list[str] = field(default_factory=list)
    blame_reviewers: list[str] = field(default_factory=list)
    default_reviewers: list[str] = field(default_factory=list)
    requested: bool = False
    commented: bool = False
