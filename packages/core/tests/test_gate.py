"""Tests for run_gate: eligibility, reviews, policy and side effects together."""

from datetime import datetime, timedelta, timezone

import pytest

from release_ready_core.config import GateConfig
from release_ready_core.errors import CollaboratorFailure
from release_ready_core.gate import run_gate
from release_ready_core.models import (
    ACCEPT,
    APPROVED,
    CHANGES_REQUESTED,
    LABEL_ADD,
    LABEL_REMOVE,
    NO_REVIEWS,
    REJECT,
    SKIP,
    CheckResult,
    PullRequestEvent,
    ReviewRecord,
)

LABEL = "release-ready"
SHA = "c" * 40
T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)


class StubGateway:
    """Records writes; serves canned reviews, memberships and check runs."""

    def __init__(self, reviews=(), members=(), checks=None, fail_on=()):
        self.reviews = list(reviews)
        self.members = set(members)
        self.checks = checks or {}
        self.fail_on = set(fail_on)
        self.calls: list[tuple] = []

    def _maybe_fail(self, operation):
        if operation in self.fail_on:
            raise CollaboratorFailure(operation, RuntimeError("503 Service Unavailable"))

    def remove_label(self, label):
        self.calls.append(("remove_label", label))

    def add_labels(self, labels):
        self._maybe_fail("add_labels")
        self.calls.append(("add_labels", tuple(labels)))

    def create_comment(self, body):
        self._maybe_fail("create_comment")
        self.calls.append(("comment", body))

    def list_reviews(self):
        self._maybe_fail("list_reviews")
        self.calls.append(("list_reviews",))
        return self.reviews

    def is_team_member(self, team_id, login):
        self.calls.append(("is_team_member", team_id, login))
        return login in self.members

    def list_check_runs(self, check_name, ref):
        self._maybe_fail("list_check_runs")
        self.calls.append(("list_check_runs", check_name, ref))
        return self.checks.get(check_name, [])

    def comments(self):
        return [c[1] for c in self.calls if c[0] == "comment"]

    def writes(self):
        return [c for c in self.calls if c[0] in ("comment", "add_labels", "remove_label")]


def _make_event(**overrides):
    fields = dict(
        action="labeled",
        draft=False,
        body="fix RP-1",
        labels=frozenset({LABEL}),
        requested_reviewers=(),
        head_sha=SHA,
        repo="owner/repo",
        number=7,
    )
    fields.update(overrides)
    return PullRequestEvent(**fields)


def _config(required_checks=""):
    return GateConfig.from_dict({"label": LABEL, "leaddev_team_id": "42", "required_checks": required_checks})


def _review(reviewer, state=APPROVED, minutes=0):
    return ReviewRecord(reviewer=reviewer, submitted_at=T0 + timedelta(minutes=minutes), state=state)


class TestSkippedEvents:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"action": "opened"},
            {"action": "synchronize"},
            {"labels": frozenset({"bug"})},
            {"action": "unlabeled", "labels": frozenset()},
        ],
    )
    def test_no_side_effects(self, overrides):
        gateway = StubGateway(reviews=[_review("lead")], members={"lead"})
        verdict = run_gate(_make_event(**overrides), _config(), gateway)
        assert verdict.outcome == SKIP
        assert verdict.comment is None
        assert gateway.calls == []


class TestEligibilityRejections:
    def test_draft_with_label(self):
        gateway = StubGateway()
        verdict = run_gate(_make_event(draft=True), _config(), gateway)
        assert verdict.outcome == REJECT
        assert gateway.calls == [
            ("remove_label", LABEL),
            ("comment", ":bulb: release-ready: removing label on draft PR."),
        ]

    def test_missing_reference(self):
        gateway = StubGateway()
        verdict = run_gate(_make_event(body="no ticket"), _config(), gateway)
        assert verdict.label_action == LABEL_REMOVE
        assert gateway.comments() == [":x: release-ready: body must contain at least one JIRA reference."]

    def test_pending_reviewer(self):
        gateway = StubGateway()
        run_gate(_make_event(requested_reviewers=("bob",)), _config(), gateway)
        assert gateway.comments() == [":bulb: release-ready: 1 review is still expected."]

    def test_no_github_reads_before_eligibility_passes(self):
        gateway = StubGateway()
        run_gate(_make_event(requested_reviewers=("a", "b")), _config(), gateway)
        assert ("list_reviews",) not in gateway.calls


class TestNoReviews:
    def test_label_removed_silently(self):
        gateway = StubGateway(reviews=[])
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.outcome == NO_REVIEWS
        assert verdict.comment is None
        assert gateway.writes() == [("remove_label", LABEL)]


class TestApprovalPolicy:
    def test_accept_end_to_end(self):
        gateway = StubGateway(reviews=[_review("lead1")], members={"lead1"})
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.outcome == ACCEPT
        assert verdict.label_action == LABEL_ADD
        assert gateway.writes() == [
            ("comment", ":heavy_check_mark: release-ready: this PR can be released."),
            ("add_labels", (LABEL,)),
        ]

    def test_membership_looked_up_against_configured_team(self):
        gateway = StubGateway(reviews=[_review("lead1")], members={"lead1"})
        run_gate(_make_event(), _config(), gateway)
        assert ("is_team_member", "42", "lead1") in gateway.calls

    def test_no_lead_dev(self):
        gateway = StubGateway(reviews=[_review("dev")], members=set())
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.outcome == REJECT
        assert verdict.reason == "this PR must be reviewed by at least 1 lead dev"
        assert gateway.writes() == [
            ("remove_label", LABEL),
            ("comment", ":bulb: release-ready: this PR must be reviewed by at least 1 lead dev."),
        ]

    def test_latest_review_requests_changes(self):
        reviews = [_review("lead"), _review("lead", CHANGES_REQUESTED, minutes=5)]
        gateway = StubGateway(reviews=reviews, members={"lead"})
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.reason == "this PR is not fully approved yet"

    def test_only_comment_reviews_fail_lead_dev_rule(self):
        gateway = StubGateway(reviews=[_review("lead", "COMMENTED")], members={"lead"})
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.reason == "this PR must be reviewed by at least 1 lead dev"


class TestRequiredChecks:
    def test_checks_listed_on_head_sha(self):
        checks = {"lint": [CheckResult("lint", "completed", "success")]}
        gateway = StubGateway(reviews=[_review("lead")], members={"lead"}, checks=checks)
        verdict = run_gate(_make_event(), _config("lint"), gateway)
        assert verdict.outcome == ACCEPT
        assert ("list_check_runs", "lint", SHA) in gateway.calls

    def test_missing_check_run(self):
        gateway = StubGateway(reviews=[_review("lead")], members={"lead"})
        verdict = run_gate(_make_event(), _config("lint,test"), gateway)
        assert verdict.outcome == REJECT
        assert gateway.comments() == [":x: release-ready: check 'lint' is required and must be run."]
        assert ("add_labels", (LABEL,)) not in gateway.calls

    def test_unsuccessful_check_run(self):
        checks = {
            "lint": [CheckResult("lint", "completed", "success")],
            "test": [CheckResult("test", "completed", "failure")],
        }
        gateway = StubGateway(reviews=[_review("lead")], members={"lead"}, checks=checks)
        run_gate(_make_event(), _config("lint, test"), gateway)
        assert gateway.comments() == [":bulb: release-ready: check 'test' is required and must be successful."]


class TestCollaboratorFailures:
    def test_review_listing_failure_reported_as_comment(self):
        gateway = StubGateway(fail_on={"list_reviews"})
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.outcome == REJECT
        assert gateway.writes() == [
            ("remove_label", LABEL),
            ("comment", "list_reviews failed: 503 Service Unavailable"),
        ]

    def test_check_listing_failure_reported_as_comment(self):
        gateway = StubGateway(reviews=[_review("lead")], members={"lead"}, fail_on={"list_check_runs"})
        verdict = run_gate(_make_event(), _config("lint"), gateway)
        assert verdict.outcome == REJECT
        assert "503" in verdict.reason

    def test_add_label_failure_after_success_comment(self):
        gateway = StubGateway(reviews=[_review("lead")], members={"lead"}, fail_on={"add_labels"})
        verdict = run_gate(_make_event(), _config(), gateway)
        assert verdict.outcome == REJECT
        assert gateway.writes() == [
            ("comment", ":heavy_check_mark: release-ready: this PR can be released."),
            ("remove_label", LABEL),
            ("comment", "add_labels failed: 503 Service Unavailable"),
        ]

    def test_comment_failure_in_error_handler_propagates(self):
        gateway = StubGateway(fail_on={"create_comment"})
        with pytest.raises(CollaboratorFailure):
            run_gate(_make_event(draft=True), _config(), gateway)
