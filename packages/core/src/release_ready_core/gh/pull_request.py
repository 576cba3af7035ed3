from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import cached_property

from github import Auth, Github, GithubException
from requests.exceptions import RequestException

from release_ready_core.errors import CollaboratorFailure
from release_ready_core.models import CheckResult, ReviewRecord

logger = logging.getLogger(__name__)

# PyGithub raises GithubException for API errors but lets transport errors
# (timeouts, dropped connections) from requests through unwrapped.
GITHUB_ERRORS = (GithubException, RequestException)


def get_client(token: str, timeout: int = 15) -> Github:
    # retry=None: a failed call is reported, never retried.
    return Github(auth=Auth.Token(token), timeout=timeout, retry=None)


def get_repo(client: Github, repo_name: str):
    return client.get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


@contextmanager
def _fatal(operation: str):
    """Re-raise GitHub and transport errors as CollaboratorFailure so run_gate reports them."""
    try:
        yield
    except GITHUB_ERRORS as e:
        raise CollaboratorFailure(operation, e) from e


def _to_review_record(review) -> ReviewRecord | None:
    # Reviews from deleted accounts have no user and pending reviews no date.
    if review.user is None or review.submitted_at is None:
        return None
    return ReviewRecord(reviewer=review.user.login, submitted_at=review.submitted_at, state=review.state)


class PullRequestGateway:
    """All GitHub reads and writes the gate performs on one pull request.

    Label removal and team membership are best-effort and never raise.
    Every other operation raises CollaboratorFailure when GitHub fails.
    """

    def __init__(self, client: Github, repo_name: str, pr_number: int, organization: str = ""):
        self._client = client
        self._repo_name = repo_name
        self._pr_number = pr_number
        self._organization = organization or repo_name.split("/")[0]
        self._teams: dict[str, object] = {}
        self._members: dict[tuple[str, str], bool] = {}

    @classmethod
    def connect(cls, token: str, repo_name: str, pr_number: int, organization: str = "", timeout: int = 15):
        return cls(get_client(token, timeout=timeout), repo_name, pr_number, organization=organization)

    # Repository and pull request are fetched on first use so events that are
    # skipped never touch the API.
    @cached_property
    def repo(self):
        with _fatal("fetching repository"):
            return get_repo(self._client, self._repo_name)

    @cached_property
    def pull(self):
        with _fatal("fetching pull request"):
            return get_pull(self.repo, self._pr_number)

    def remove_label(self, label: str) -> None:
        logger.info("Removing label %r from PR", label)
        try:
            self.pull.remove_from_labels(label)
        except (*GITHUB_ERRORS, CollaboratorFailure) as e:
            # Usually a 404 because the label is already gone.
            logger.debug("Ignoring label removal failure: %s", e)

    def add_labels(self, labels: list[str]) -> None:
        with _fatal("adding labels"):
            self.pull.add_to_labels(*labels)

    def create_comment(self, body: str) -> None:
        with _fatal("posting comment"):
            self.pull.create_issue_comment(body)

    def list_reviews(self) -> list[ReviewRecord]:
        with _fatal("listing reviews"):
            reviews = list(self.pull.get_reviews())
        return [record for record in map(_to_review_record, reviews) if record is not None]

    def _get_team(self, team_id: str):
        if team_id not in self._teams:
            org = self._client.get_organization(self._organization)
            if team_id.isdigit():
                self._teams[team_id] = org.get_team(int(team_id))
            else:
                self._teams[team_id] = org.get_team_by_slug(team_id)
        return self._teams[team_id]

    def is_team_member(self, team_id: str, login: str) -> bool:
        key = (team_id, login)
        if key not in self._members:
            self._members[key] = self._lookup_membership(team_id, login)
        return self._members[key]

    def _lookup_membership(self, team_id: str, login: str) -> bool:
        try:
            membership = self._get_team(team_id).get_team_membership(login)
        except GITHUB_ERRORS as e:
            # GitHub answers 404 for non-members; any other failure counts the same.
            logger.debug("%s is not a member of team %s: %s", login, team_id, e)
            return False
        return membership.state == "active"

    def list_check_runs(self, check_name: str, ref: str) -> list[CheckResult]:
        with _fatal(f"listing check runs for '{check_name}'"):
            runs = list(self.repo.get_commit(ref).get_check_runs(check_name=check_name))
        return [CheckResult(name=run.name, status=run.status, conclusion=run.conclusion) for run in runs]
