"""Release-ready gate orchestration."""

from __future__ import annotations

import logging

from rich.console import Console

from release_ready_core.config import GateConfig
from release_ready_core.eligibility import PROCEED, check_eligibility
from release_ready_core.errors import PolicyRejection, ReleaseReadyError
from release_ready_core.models import LABEL_REMOVE, NO_REVIEWS, REJECT, SKIP, PullRequestEvent, Verdict
from release_ready_core.policy import evaluate_approvals
from release_ready_core.reviews import aggregate_reviews

console = Console()
logger = logging.getLogger(__name__)


def _evaluate(event: PullRequestEvent, config: GateConfig, gateway) -> Verdict:
    eligibility = check_eligibility(event, config.label, config.reference_pattern)
    if eligibility.status == REJECT:
        raise PolicyRejection(eligibility.reason, eligibility.icon)
    if eligibility.status != PROCEED:
        console.print("[dim]Nothing to do.[/dim]")
        return Verdict(outcome=SKIP, reason="event does not concern the release-ready label")

    records = gateway.list_reviews()
    if not records:
        # No review at all yet: drop the label without commenting.
        gateway.remove_label(config.label)
        return Verdict(outcome=NO_REVIEWS, reason="no reviews yet", label_action=LABEL_REMOVE)

    verdicts = aggregate_reviews(records)
    verdict = evaluate_approvals(
        verdicts,
        is_lead_dev=lambda login: gateway.is_team_member(config.leaddev_team_id, login),
        required_checks=config.required_checks,
        list_check_runs=lambda name: gateway.list_check_runs(name, event.head_sha),
    )

    gateway.create_comment(verdict.comment)
    console.print(f"[green]OK! Adding label {config.label!r} to PR.[/green]")
    gateway.add_labels([config.label])
    return verdict


def run_gate(event: PullRequestEvent, config: GateConfig, gateway) -> Verdict:
    """Evaluate one pull_request event and apply the resulting label and comment.

    Policy rejections and GitHub failures are reported on the PR (label removed,
    reason commented) and returned as a reject Verdict rather than raised. Only a
    failure to post that final comment escapes.
    """
    logger.info("Triggered action: %s", event.action)

    try:
        return _evaluate(event, config, gateway)
    except ReleaseReadyError as e:
        gateway.remove_label(config.label)
        comment = e.comment()
        gateway.create_comment(comment)
        logger.info(comment)
        reason = e.reason if isinstance(e, PolicyRejection) else str(e)
        return Verdict(outcome=REJECT, reason=reason, comment=comment, label_action=LABEL_REMOVE)
