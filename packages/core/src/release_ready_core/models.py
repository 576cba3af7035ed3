"""Value objects shared by the gate stages.

Everything here is immutable: the event snapshot comes from GitHub, and every
derived value (reviewer verdicts, the final verdict) is rebuilt on each run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

APPROVED = "APPROVED"
CHANGES_REQUESTED = "CHANGES_REQUESTED"
COMMENTED = "COMMENTED"

ACCEPT = "accept"
REJECT = "reject"
SKIP = "skip"
NO_REVIEWS = "no_reviews"

LABEL_ADD = "add"
LABEL_REMOVE = "remove"


@dataclass(frozen=True)
class PullRequestEvent:
    """Snapshot of the pull_request webhook payload the gate reacts to."""

    action: str
    draft: bool
    body: str
    labels: frozenset[str]
    requested_reviewers: tuple[str, ...]
    head_sha: str
    repo: str = ""
    number: int = 0
    organization: str = ""


@dataclass(frozen=True)
class ReviewRecord:
    reviewer: str
    submitted_at: datetime
    state: str


@dataclass(frozen=True)
class ReviewerVerdict:
    """Latest meaningful review state for one reviewer."""

    reviewer: str
    state: str
    submitted_at: datetime


@dataclass(frozen=True)
class CheckResult:
    name: str
    status: str
    conclusion: str | None

    @property
    def succeeded(self) -> bool:
        return self.status == "completed" and self.conclusion == "success"


@dataclass(frozen=True)
class Verdict:
    """Outcome of one gate run and the side effects it implies.

    ``comment`` is None when nothing is posted (skip, no reviews yet).
    ``label_action`` is LABEL_ADD, LABEL_REMOVE or None.
    """

    outcome: str
    reason: str
    comment: str | None = None
    label_action: str | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome == ACCEPT
