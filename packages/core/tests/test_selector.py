"""Tests for the selection pipeline: select_reviewers and assign_reviewers."""

import pytest

from autoreviewers_core.config import ReviewerConfig
from autoreviewers_core.models import ChangedFile, PullRequestEvent, ReviewerSet
from autoreviewers_core.selector import (
    add_blame_reviewers,
    add_default_reviewers,
    assign_reviewers,
    build_comment,
    select_reviewers,
)

WRITE_ALL = {name: "write" for name in ("alice", "bob", "carol", "dave", "erin", "frank", "gina")}


def make_config(**overrides):
    data = {
        "minReviewers": 2,
        "maxReviewers": 3,
        "codeOwners": {"src/api/": ["alice"]},
        "defaultReviewers": ["bob", "carol"],
        "excludeAuthors": True,
    }
    data.update(overrides)
    return ReviewerConfig.from_dict(data)


class TestSelectReviewers:
    def test_owner_then_defaults_example(self, make_platform, event):
        platform = make_platform(files=[ChangedFile("src/api/x.js", "modified")], permissions=WRITE_ALL)
        result = select_reviewers(platform, event, make_config())
        assert result.owner_reviewers == ["alice"]
        assert result.blame_reviewers == []
        assert result.default_reviewers == ["bob"]
        assert result.reviewers == ["alice", "bob"]

    def test_author_as_sole_owner_falls_through_to_defaults(self, make_platform):
        event = PullRequestEvent(number=1, author="alice", base_sha="b", owner="acme", repo="w")
        platform = make_platform(files=[ChangedFile("src/api/x.js", "added")], permissions=WRITE_ALL)
        result = select_reviewers(platform, event, make_config())
        assert result.owner_reviewers == []
        assert result.reviewers == ["bob", "carol"]
        assert "alice" not in result.reviewers

    def test_author_removed_whichever_stage_added_them(self, make_platform, make_range):
        event = PullRequestEvent(number=1, author="bob", base_sha="b", owner="acme", repo="w")
        platform = make_platform(
            files=[ChangedFile("src/api/x.js", "modified")],
            blame={"src/api/x.js": [make_range("bob", age=1)]},
            permissions=WRITE_ALL,
        )
        result = select_reviewers(platform, event, make_config(codeOwners={"src/api/": ["bob"]}))
        assert "bob" not in result.reviewers
        assert result.reviewers == ["carol"]

    def test_author_kept_when_exclusion_disabled(self, make_platform):
        event = PullRequestEvent(number=1, author="alice", base_sha="b", owner="acme", repo="w")
        platform = make_platform(files=[ChangedFile("src/api/x.js", "added")], permissions=WRITE_ALL)
        result = select_reviewers(platform, event, make_config(excludeAuthors=False))
        assert result.reviewers == ["alice", "bob"]

    def test_blame_runs_only_for_modified_files(self, make_platform, event, make_range):
        files = [
            ChangedFile("new.py", "added"),
            ChangedFile("gone.py", "removed"),
            ChangedFile("lib/a.py", "modified"),
        ]
        platform = make_platform(
            files=files, blame={"lib/a.py": [make_range("erin"), make_range("frank", age=2)]}, permissions=WRITE_ALL
        )
        result = select_reviewers(platform, event, make_config(codeOwners={}))
        assert platform.blame_calls == [("lib/a.py", event.base_sha)]
        assert result.blame_reviewers == ["erin", "frank"]
        assert result.default_reviewers == []
        assert result.reviewers == ["erin", "frank"]

    def test_blame_skipped_when_owners_meet_minimum(self, make_platform, event):
        platform = make_platform(files=[ChangedFile("src/api/x.js", "modified")], permissions=WRITE_ALL)
        select_reviewers(platform, event, make_config(minReviewers=1))
        assert platform.blame_calls == []

    def test_blame_stops_once_max_reached(self, make_platform, event, make_range):
        files = [ChangedFile(f"lib/{n}.py", "modified") for n in ("a", "b", "c")]
        platform = make_platform(
            files=files,
            blame={
                "lib/a.py": [make_range("erin"), make_range("frank", age=2)],
                "lib/b.py": [make_range("gina")],
                "lib/c.py": [make_range("carol")],
            },
            permissions=WRITE_ALL,
        )
        result = select_reviewers(platform, event, make_config(codeOwners={}, minReviewers=3, maxReviewers=3))
        assert [path for path, _ in platform.blame_calls] == ["lib/a.py", "lib/b.py"]
        assert result.reviewers == ["erin", "frank", "gina"]

    def test_truncation_keeps_earlier_stages(self, make_platform, event):
        config = make_config(
            codeOwners={"src/": ["alice", "erin", "frank"]},
            minReviewers=5,
            maxReviewers=3,
        )
        platform = make_platform(files=[ChangedFile("src/x.py", "added")], permissions=WRITE_ALL)
        result = select_reviewers(platform, event, config)
        assert result.default_reviewers == ["bob", "carol"]
        assert result.reviewers == ["alice", "erin", "frank"]

    def test_never_exceeds_max(self, make_platform, event):
        config = make_config(codeOwners={"*": ["alice", "bob", "carol", "erin"]}, maxReviewers=2)
        platform = make_platform(files=[ChangedFile("a", "modified")], permissions=WRITE_ALL)
        assert len(select_reviewers(platform, event, config).reviewers) == 2

    def test_permission_filter_applied_before_truncation(self, make_platform, event):
        config = make_config(codeOwners={"src/": ["alice", "erin", "frank", "gina"]}, maxReviewers=2)
        platform = make_platform(
            files=[ChangedFile("src/x.py", "modified")],
            permissions={"alice": "read", "erin": "write", "frank": "admin", "gina": "write"},
        )
        assert select_reviewers(platform, event, config).reviewers == ["erin", "frank"]

    def test_timezone_filter_when_enabled(self, make_platform, event, noon_utc):
        config = make_config(
            timezone={
                "enabled": True,
                "workingHours": {"start": 9, "end": 18},
                "userTimezones": {"alice": "Asia/Seoul"},
            }
        )
        platform = make_platform(files=[ChangedFile("src/api/x.js", "added")], permissions=WRITE_ALL)
        result = select_reviewers(platform, event, config, now=noon_utc)
        assert result.reviewers == ["bob"]

    def test_timezone_filter_ignored_when_disabled(self, make_platform, event, noon_utc):
        config = make_config(timezone={"enabled": False, "userTimezones": {"alice": "Asia/Seoul"}})
        platform = make_platform(files=[ChangedFile("src/api/x.js", "added")], permissions=WRITE_ALL)
        assert select_reviewers(platform, event, config, now=noon_utc).reviewers == ["alice", "bob"]


class TestStages:
    def test_defaults_stop_at_minimum(self):
        config = make_config(defaultReviewers=["bob", "carol", "erin"], minReviewers=2)
        assert add_default_reviewers(config, ReviewerSet.of(["alice"])).to_list() == ["alice", "bob"]

    def test_defaults_already_present_do_not_count_twice(self):
        config = make_config(defaultReviewers=["alice", "bob"], minReviewers=2)
        assert add_default_reviewers(config, ReviewerSet.of(["alice"])).to_list() == ["alice", "bob"]

    def test_defaults_exhausted(self):
        config = make_config(defaultReviewers=["bob"], minReviewers=3)
        assert add_default_reviewers(config, ReviewerSet()).to_list() == ["bob"]

    def test_blame_stage_without_room_makes_no_calls(self, make_platform, event):
        platform = make_platform()
        config = make_config(maxReviewers=1)
        reviewers = add_blame_reviewers(
            platform, [ChangedFile("a.py", "modified")], event, config, ReviewerSet.of(["alice"])
        )
        assert reviewers.to_list() == ["alice"]
        assert platform.blame_calls == []


class TestAssignReviewers:
    def test_requests_reviewers_and_comments(self, make_platform, event):
        platform = make_platform(files=[ChangedFile("src/api/x.js", "modified")], permissions=WRITE_ALL)
        result = assign_reviewers(platform, event, make_config())
        assert platform.requested == [(42, ["alice", "bob"])]
        assert platform.comments == [(42, build_comment(["alice", "bob"]))]
        assert result.requested and result.commented

    def test_comment_can_be_disabled(self, make_platform, event):
        platform = make_platform(files=[ChangedFile("src/api/x.js", "modified")], permissions=WRITE_ALL)
        result = assign_reviewers(platform, event, make_config(postComment=False))
        assert platform.requested
        assert platform.comments == []
        assert not result.commented

    def test_empty_selection_is_a_warning_not_a_failure(self, make_platform, event, caplog):
        platform = make_platform(files=[ChangedFile("README", "modified")])
        result = assign_reviewers(platform, event, make_config(defaultReviewers=[]))
        assert result.reviewers == []
        assert platform.requested == []
        assert platform.comments == []
        assert "No suitable reviewers" in caplog.text

    def test_dry_run_does_not_write(self, make_platform, event):
        platform = make_platform(files=[ChangedFile("src/api/x.js", "modified")], permissions=WRITE_ALL)
        result = assign_reviewers(platform, event, make_config(), dry_run=True)
        assert result.reviewers == ["alice", "bob"]
        assert platform.requested == []
        assert platform.comments == []

    def test_request_failure_propagates_without_comment(self, make_platform, event):
        platform = make_platform(files=[ChangedFile("src/api/x.js", "modified")], permissions=WRITE_ALL)

        def fail(pr_number, reviewers):
            raise RuntimeError("Reviews may only be requested from collaborators")

        platform.request_reviewers = fail
        with pytest.raises(RuntimeError):
            assign_reviewers(platform, event, make_config())
        assert platform.comments == []


def test_build_comment_mentions_reviewers():
    body = build_comment(["alice", "bob"])
    assert body.startswith("Auto-assigned reviewers: @alice, @bob")
    assert "code ownership and recent contributions" in body
