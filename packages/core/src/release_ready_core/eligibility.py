"""Structural checks on the triggering event.

These run before any GitHub call so irrelevant events cost nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from release_ready_core.errors import ICON_ERROR, ICON_INFO
from release_ready_core.models import REJECT, SKIP, PullRequestEvent

GATED_ACTIONS = ("labeled", "unlabeled")

PROCEED = "proceed"


@dataclass(frozen=True)
class Eligibility:
    status: str
    reason: str = ""
    icon: str = ICON_INFO


def _pending_reviews_reason(count: int) -> str:
    if count == 1:
        return "1 review is still expected"
    return f"{count} reviews are still expected"


def check_eligibility(event: PullRequestEvent, label: str, reference_pattern: re.Pattern) -> Eligibility:
    """Decide whether the event should be skipped, rejected, or fully evaluated.

    Rules are applied in order and the first match wins. An ``unlabeled``
    event is gated the same way as ``labeled``: if the configured label is
    no longer on the PR there is nothing to do.
    """
    has_label = label in event.labels

    if event.action not in GATED_ACTIONS or not has_label:
        return Eligibility(SKIP)

    if event.draft and has_label:
        return Eligibility(REJECT, "removing label on draft PR")

    if event.draft:
        return Eligibility(SKIP)

    if not reference_pattern.search(event.body or ""):
        return Eligibility(REJECT, "body must contain at least one JIRA reference", ICON_ERROR)

    if event.requested_reviewers:
        return Eligibility(REJECT, _pending_reviews_reason(len(event.requested_reviewers)))

    return Eligibility(PROCEED)
