"""evaluate command: run the gate against a live pull request."""

from __future__ import annotations

from dataclasses import replace

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from release_ready_cli.commands.check import gate_options, print_verdict, resolve_gate_config
from release_ready_core.errors import CollaboratorFailure
from release_ready_core.event import event_from_pull
from release_ready_core.gate import run_gate
from release_ready_core.gh.pull_request import PullRequestGateway
from release_ready_core.gh.shadow import ShadowGateway
from release_ready_core.models import APPROVED, CHANGES_REQUESTED
from release_ready_core.reviews import aggregate_reviews

console = Console()

_STATE_STYLE = {
    APPROVED: "green",
    CHANGES_REQUESTED: "red",
    "DISMISSED": "dim",
}


def _print_reviewers(gateway, team_id: str) -> None:
    verdicts = aggregate_reviews(gateway.list_reviews())
    if not verdicts:
        console.print("[yellow]No reviews yet.[/yellow]")
        return

    table = Table(title="Latest review per reviewer", show_header=True, header_style="bold cyan")
    table.add_column("Reviewer", style="bold")
    table.add_column("State", width=18)
    table.add_column("Submitted At", width=20)
    table.add_column("Lead dev", justify="center", width=9)

    for v in verdicts:
        style = _STATE_STYLE.get(v.state, "yellow")
        lead = "yes" if gateway.is_team_member(team_id, v.reviewer) else "-"
        table.add_row(
            v.reviewer,
            f"[{style}]{v.state}[/{style}]",
            v.submitted_at.isoformat()[:19].replace("T", " "),
            lead,
        )

    console.print(table)


@click.command("evaluate")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@gate_options
@click.pass_context
def evaluate_cmd(
    ctx,
    repo: str,
    pr_number: int,
    label: str | None,
    leaddev_team_id: str | None,
    required_checks: str | None,
    shadow: bool,
):
    """Evaluate a pull request as if the release-ready label had just been added.

    Without --shadow the label and comment are applied for real.
    """
    config, gate_config = resolve_gate_config(
        ctx,
        {"label": label, "leaddev_team_id": leaddev_team_id, "required_checks": required_checks},
    )

    gateway = PullRequestGateway.connect(config["github_token"], repo, pr_number, timeout=config.get("timeout", 15))

    try:
        event = event_from_pull(gateway.pull)
        event = replace(event, labels=event.labels | {gate_config.label})
        console.print(f"\n[bold]#{event.number}[/bold]  {escape(gateway.pull.title or '')}\n")
        _print_reviewers(gateway, gate_config.leaddev_team_id)
    except CollaboratorFailure as e:
        raise click.ClickException(str(e)) from e

    if shadow:
        gateway = ShadowGateway(gateway)

    try:
        verdict = run_gate(event, gate_config, gateway)
    except CollaboratorFailure as e:
        raise click.ClickException(str(e)) from e

    print_verdict(verdict)
