"""Approval policy applied once the event has passed the eligibility filter."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from release_ready_core.errors import ICON_ERROR, ICON_SUCCESS, PolicyRejection, format_comment
from release_ready_core.models import ACCEPT, LABEL_ADD, CheckResult, ReviewerVerdict, Verdict
from release_ready_core.reviews import waiting_reviewers

logger = logging.getLogger(__name__)

RELEASABLE_REASON = "this PR can be released"


def count_lead_devs(verdicts: Iterable[ReviewerVerdict], is_lead_dev: Callable[[str], bool]) -> int:
    """Count reviewers belonging to the lead-dev team, one lookup at a time."""
    counted: set[str] = set()
    for verdict in verdicts:
        if verdict.reviewer in counted:
            continue
        if is_lead_dev(verdict.reviewer):
            counted.add(verdict.reviewer)
    return len(counted)


def check_required(name: str, runs: Sequence[CheckResult]) -> None:
    """Raise PolicyRejection unless at least one run of ``name`` succeeded."""
    if not runs:
        raise PolicyRejection(f"check '{name}' is required and must be run", ICON_ERROR)
    if not any(run.succeeded for run in runs):
        raise PolicyRejection(f"check '{name}' is required and must be successful")


def evaluate_approvals(
    verdicts: Sequence[ReviewerVerdict],
    is_lead_dev: Callable[[str], bool],
    required_checks: Sequence[str],
    list_check_runs: Callable[[str], Sequence[CheckResult]],
) -> Verdict:
    """Return the accept verdict, or raise PolicyRejection on the first failed rule.

    ``is_lead_dev`` must return False (not raise) when the lookup fails.
    ``list_check_runs`` receives a check name and returns its runs on the head
    commit; its failures propagate.
    """
    if not count_lead_devs(verdicts, is_lead_dev):
        raise PolicyRejection("this PR must be reviewed by at least 1 lead dev")

    waiting = waiting_reviewers(verdicts)
    if not verdicts or waiting:
        logger.info("Reviewers: %s", ", ".join(waiting))
        raise PolicyRejection("this PR is not fully approved yet")

    for name in required_checks:
        check_required(name, list_check_runs(name))

    return Verdict(
        outcome=ACCEPT,
        reason=RELEASABLE_REASON,
        comment=format_comment(RELEASABLE_REASON, ICON_SUCCESS),
        label_action=LABEL_ADD,
    )
