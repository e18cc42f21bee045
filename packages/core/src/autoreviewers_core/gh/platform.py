"""GitHub access for the selection pipeline.

Every stage talks to GitHub through a ``GitHubPlatform`` passed in from the
top level, so tests can hand the stages a fake with the same methods.
Read-only lookups never raise: they return a ``Lookup`` tagged found,
not-found or error. Writes (review requests, comments) let GithubException
propagate, since a failed write is a failed run.
"""

from __future__ import annotations

import logging

from github import Auth, Github, GithubException, UnknownObjectException

from autoreviewers_core.models import BlameRange, ChangedFile, Lookup, PullRequestEvent

logger = logging.getLogger(__name__)

BLAME_QUERY = """
query($owner: String!, $repo: String!, $path: String!, $ref: String!) {
  repository(owner: $owner, name: $repo) {
    object(expression: $ref) {
      ... on Commit {
        blame(path: $path) {
          ranges {
            commit {
              author {
                user {
                  login
                }
              }
            }
            startingLine
            endingLine
            age
          }
        }
      }
    }
  }
}
"""

# GraphQL error messages GitHub uses when the path is absent at the ref.
_MISSING_PATH_MARKERS = ("path does not exist", "could not resolve")


def _error_message(e: GithubException) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    message = data.get("message")
    if not message and data.get("errors"):
        message = "; ".join(str(err.get("message", err)) for err in data["errors"] if isinstance(err, dict))
    return message or str(e)


def _is_missing_path(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _MISSING_PATH_MARKERS)


def parse_blame_ranges(payload: dict) -> list[BlameRange] | None:
    """Extract blame ranges from a GraphQL response, or None if there is no blame."""
    data = payload.get("data", payload) or {}
    obj = ((data.get("repository") or {}).get("object")) or {}
    blame = obj.get("blame")
    if blame is None:
        return None

    ranges = []
    for r in blame.get("ranges") or []:
        user = (((r.get("commit") or {}).get("author") or {}).get("user")) or {}
        ranges.append(
            BlameRange(
                author_login=user.get("login"),
                start_line=r.get("startingLine", 0),
                end_line=r.get("endingLine", 0),
                age=r.get("age", 0),
            )
        )
    return ranges


class GitHubPlatform:
    def __init__(self, repo, github: Github | None = None):
        self.repo = repo
        self.github = github

    @classmethod
    def connect(cls, repo_name: str, token: str) -> GitHubPlatform:
        github = Github(auth=Auth.Token(token))
        return cls(github.get_repo(repo_name), github=github)

    @property
    def owner(self) -> str:
        return self.repo.owner.login

    @property
    def name(self) -> str:
        return self.repo.name

    def get_event(self, pr_number: int) -> PullRequestEvent:
        """Build the event data from the API when no event payload is available."""
        pr = self.repo.get_pull(pr_number)
        return PullRequestEvent(
            number=pr_number,
            author=pr.user.login,
            base_sha=pr.base.sha,
            owner=self.owner,
            repo=self.name,
            owner_is_org=self.repo.owner.type == "Organization",
        )

    def list_changed_files(self, pr_number: int) -> list[ChangedFile]:
        return [ChangedFile.from_github(f) for f in self.repo.get_pull(pr_number).get_files()]

    def get_blame(self, path: str, ref: str) -> Lookup[list[BlameRange]]:
        if self.github is None:
            return Lookup.failed("blame requires a GitHub client for GraphQL queries")

        logger.debug("Getting blame for %s at %s", path, ref)
        variables = {"owner": self.owner, "repo": self.name, "path": path, "ref": ref}
        try:
            _, payload = self.github.requester.graphql_query(BLAME_QUERY, variables)
        except UnknownObjectException as e:
            return Lookup.not_found(_error_message(e))
        except GithubException as e:
            message = _error_message(e)
            if _is_missing_path(message):
                return Lookup.not_found(message)
            return Lookup.failed(message)

        errors = payload.get("errors") or []
        if errors:
            message = "; ".join(str(err.get("message", err)) for err in errors if isinstance(err, dict))
            if _is_missing_path(message) or any(err.get("type") == "NOT_FOUND" for err in errors):
                return Lookup.not_found(message)
            return Lookup.failed(message)

        ranges = parse_blame_ranges(payload)
        if ranges is None:
            return Lookup.not_found(f"no blame for {path} at {ref}")
        return Lookup.found(ranges)

    def get_permission(self, username: str) -> Lookup[str]:
        """Return the collaborator permission (admin, write, read or none)."""
        try:
            permission = self.repo.get_collaborator_permission(username)
        except UnknownObjectException as e:
            return Lookup.not_found(_error_message(e))
        except GithubException as e:
            if e.status == 404:
                return Lookup.not_found(_error_message(e))
            return Lookup.failed(_error_message(e))
        if permission in (None, "none"):
            return Lookup.not_found(f"{username} is not a collaborator")
        return Lookup.found(permission)

    def check_org_membership(self, org: str, username: str) -> Lookup[bool]:
        if self.github is None:
            return Lookup.failed("membership checks require a GitHub client")
        try:
            is_member = self.github.get_organization(org).has_in_members(self.github.get_user(username))
        except UnknownObjectException as e:
            return Lookup.not_found(_error_message(e))
        except GithubException as e:
            return Lookup.failed(_error_message(e))
        return Lookup.found(is_member) if is_member else Lookup.not_found(f"{username} is not a member of {org}")

    def request_reviewers(self, pr_number: int, reviewers: list[str]) -> None:
        self.repo.get_pull(pr_number).create_review_request(reviewers=reviewers)

    def create_comment(self, pr_number: int, body: str) -> None:
        self.repo.get_issue(pr_number).create_comment(body)
