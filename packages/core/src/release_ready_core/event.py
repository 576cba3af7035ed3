"""Build PullRequestEvent snapshots from webhook payloads or live pull requests."""

from __future__ import annotations

import json
import os
from pathlib import Path

from release_ready_core.errors import ConfigError
from release_ready_core.models import PullRequestEvent


def event_from_payload(payload: dict, fallback_sha: str | None = None) -> PullRequestEvent:
    """Read a GitHub ``pull_request`` webhook payload."""
    pr = payload.get("pull_request")
    if not pr:
        raise ConfigError("Event payload has no pull_request; trigger this on pull_request events.")

    head_sha = (pr.get("head") or {}).get("sha") or fallback_sha or os.environ.get("GITHUB_SHA", "")

    return PullRequestEvent(
        action=payload.get("action") or "",
        draft=bool(pr.get("draft")),
        body=pr.get("body") or "",
        labels=frozenset(label["name"] for label in pr.get("labels") or []),
        requested_reviewers=tuple(user["login"] for user in pr.get("requested_reviewers") or []),
        head_sha=head_sha,
        repo=(payload.get("repository") or {}).get("full_name", ""),
        number=pr.get("number") or payload.get("number") or 0,
        organization=(payload.get("organization") or {}).get("login", ""),
    )


def load_event(event_path: str) -> PullRequestEvent:
    path = Path(event_path)
    if not path.exists():
        raise ConfigError(f"Event file not found: {event_path}")
    with open(path) as f:
        return event_from_payload(json.load(f))


def event_from_pull(pr, action: str = "labeled", organization: str = "") -> PullRequestEvent:
    """Snapshot a live PyGithub pull request as if ``action`` had just fired."""
    return PullRequestEvent(
        action=action,
        draft=bool(pr.draft),
        body=pr.body or "",
        labels=frozenset(label.name for label in pr.labels),
        requested_reviewers=tuple(user.login for user in pr.requested_reviewers),
        head_sha=pr.head.sha,
        repo=pr.base.repo.full_name,
        number=pr.number,
        organization=organization,
    )
