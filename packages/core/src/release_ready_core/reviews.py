"""Collapse a PR's review history into one current verdict per reviewer."""

from __future__ import annotations

import logging
from functools import reduce
from typing import Iterable

from release_ready_core.models import APPROVED, COMMENTED, ReviewerVerdict, ReviewRecord

logger = logging.getLogger(__name__)


def _fold(latest: dict[str, ReviewerVerdict], record: ReviewRecord) -> dict[str, ReviewerVerdict]:
    logger.debug("Found review: %s %s %s", record.reviewer, record.submitted_at.isoformat(), record.state)
    current = latest.get(record.reviewer)
    # Strictly newer only: on equal timestamps the record folded first wins.
    if current is not None and not current.submitted_at < record.submitted_at:
        return latest
    verdict = ReviewerVerdict(reviewer=record.reviewer, state=record.state, submitted_at=record.submitted_at)
    # Re-assigning an existing key keeps its position, so the result stays
    # ordered by each reviewer's first appearance.
    return {**latest, record.reviewer: verdict}


def aggregate_reviews(records: Iterable[ReviewRecord]) -> tuple[ReviewerVerdict, ...]:
    """Return the latest non-COMMENTED verdict of every reviewer.

    Records are folded in the order given, which is GitHub's listing order and
    not necessarily chronological.
    """
    meaningful = (r for r in records if r.state != COMMENTED)
    return tuple(reduce(_fold, meaningful, {}).values())


def waiting_reviewers(verdicts: Iterable[ReviewerVerdict]) -> list[str]:
    """Logins whose latest verdict is anything but APPROVED."""
    return [v.reviewer for v in verdicts if v.state != APPROVED]
