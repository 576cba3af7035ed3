"""Exceptions raised by the release-ready gate.

PolicyRejection and CollaboratorFailure are both caught by run_gate() and
turned into a label removal plus a comment. ConfigError is raised before any
GitHub call and is left for the CLI to report.
"""

from __future__ import annotations

ICON_INFO = ":bulb:"
ICON_ERROR = ":x:"
ICON_SUCCESS = ":heavy_check_mark:"


def format_comment(reason: str, icon: str = ICON_INFO) -> str:
    """Render the comment body posted on the pull request."""
    return f"{icon} release-ready: {reason}."


class ReleaseReadyError(Exception):
    """Base class for every error the gate converts into a PR comment."""

    def comment(self) -> str:
        return str(self)


class PolicyRejection(ReleaseReadyError):
    """A business rule failed; the PR is not release-ready."""

    def __init__(self, reason: str, icon: str = ICON_INFO):
        super().__init__(reason)
        self.reason = reason
        self.icon = icon

    def comment(self) -> str:
        return format_comment(self.reason, self.icon)


class CollaboratorFailure(ReleaseReadyError):
    """A GitHub call whose failure must abort the run.

    The message is the underlying error text, which ends up verbatim in the
    PR comment.
    """

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class ConfigError(Exception):
    """Missing or invalid configuration."""
