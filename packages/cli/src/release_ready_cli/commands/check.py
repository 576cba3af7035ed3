"""check command: evaluate the pull_request event that triggered the workflow."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from release_ready_core.config import GateConfig
from release_ready_core.errors import CollaboratorFailure, ConfigError
from release_ready_core.event import load_event
from release_ready_core.gate import run_gate
from release_ready_core.gh.pull_request import PullRequestGateway
from release_ready_core.gh.shadow import ShadowGateway
from release_ready_core.models import ACCEPT, REJECT, Verdict

console = Console()

_OUTCOME_STYLE = {ACCEPT: "green", REJECT: "red"}


def gate_options(func):
    """Options shared by every command that runs the gate."""
    for option in reversed(
        [
            click.option("--label", default=None, help="Release-ready label name. Overrides config file."),
            click.option(
                "--leaddev-team-id",
                default=None,
                help="Lead-dev team id or slug. Overrides config file.",
            ),
            click.option(
                "--required-checks",
                default=None,
                help="Comma-separated check names that must succeed. Overrides config file.",
            ),
            click.option(
                "--shadow",
                "-s",
                is_flag=True,
                help="Dry-run mode: print the decision without labeling or commenting.",
            ),
        ]
    ):
        func = option(func)
    return func


def resolve_gate_config(ctx: click.Context, overrides: dict) -> tuple[dict, GateConfig]:
    config = {**ctx.obj["config"]}
    for key, value in overrides.items():
        if value is not None:
            config[key] = value

    if not config.get("github_token"):
        raise click.UsageError(
            "No GitHub token found. Set the github_token input, GITHUB_TOKEN, or run `gh auth login` first."
        )
    try:
        return config, GateConfig.from_dict(config)
    except ConfigError as e:
        raise click.UsageError(str(e)) from e


def print_verdict(verdict: Verdict) -> None:
    style = _OUTCOME_STYLE.get(verdict.outcome, "yellow")
    console.print(f"[bold {style}]{verdict.outcome.upper()}[/bold {style}]: {escape(verdict.reason)}")


@click.command("check")
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    required=True,
    help="Path to the webhook payload. Defaults to $GITHUB_EVENT_PATH.",
)
@gate_options
@click.pass_context
def check_cmd(
    ctx,
    event_path: str,
    label: str | None,
    leaddev_team_id: str | None,
    required_checks: str | None,
    shadow: bool,
):
    """Evaluate a pull_request event and label or comment on the PR.

    Meant to run from a workflow triggered on `pull_request: [labeled, unlabeled]`.
    Rejections are reported on the PR and still exit 0.
    """
    config, gate_config = resolve_gate_config(
        ctx,
        {"label": label, "leaddev_team_id": leaddev_team_id, "required_checks": required_checks},
    )

    try:
        event = load_event(event_path)
    except ConfigError as e:
        raise click.UsageError(str(e)) from e
    if not event.repo or not event.number:
        raise click.UsageError("Event payload does not identify a repository and pull request.")

    gateway = PullRequestGateway.connect(
        config["github_token"],
        event.repo,
        event.number,
        organization=event.organization,
        timeout=config.get("timeout", 15),
    )
    if shadow:
        gateway = ShadowGateway(gateway)

    try:
        verdict = run_gate(event, gate_config, gateway)
    except CollaboratorFailure as e:
        raise click.ClickException(str(e)) from e

    print_verdict(verdict)
