"""init command: interactive setup wizard.

Writes .release-ready.yml with the label, lead-dev team and required checks,
and optionally a GitHub Actions workflow that runs `release-ready check` on
every label change.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import click
import yaml
from rich.console import Console

from release_ready_core.config import parse_required_checks

console = Console()
logger = logging.getLogger(__name__)

CONFIG_FILE = ".release-ready.yml"
WORKFLOW_FILE = Path(".github/workflows/release-ready.yml")

_WORKFLOW_TEMPLATE = """\
name: Release Ready

on:
  pull_request:
    types: [labeled, unlabeled]

# One evaluation at a time per pull request.
concurrency:
  group: release-ready-${{{{ github.event.pull_request.number }}}}

jobs:
  release-ready:
    runs-on: ubuntu-latest
    permissions:
      checks: read
      issues: write
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install release-ready
        run: pip install "release-ready=={version}"

      - name: Check release readiness
        env:
          GITHUB_TOKEN: ${{{{ secrets.{token_secret} }}}}
        run: release-ready check
"""


@click.command("init")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Auto-detected from git remote.")
def init_cmd(repo: str | None):
    """Set up release-ready for a repository.

    Creates .release-ready.yml and optionally a GitHub Actions workflow.
    """
    console.print("\n[bold cyan]release-ready init[/bold cyan]: setup wizard\n")

    if repo is None:
        repo = _detect_repo_from_git()
        if repo:
            console.print(f"[dim]Detected repository: {repo}[/dim]")
        else:
            repo = click.prompt("GitHub repository (owner/name)")

    label = click.prompt("Release-ready label", default="release-ready")
    team_id = click.prompt("Lead-dev team id or slug")
    checks = click.prompt("Required checks (comma-separated, empty for none)", default="", show_default=False)

    config: dict = {
        "label": label,
        "leaddev_team_id": team_id,
        "required_checks": list(parse_required_checks(checks)),
    }
    _write_config(config)
    console.print(f"[green]Created {CONFIG_FILE}[/green]")

    setup_ci = click.confirm(f"\nGenerate {WORKFLOW_FILE} for GitHub Actions?", default=True)
    if setup_ci:
        token_secret = "RELEASE_READY_TOKEN"
        _write_workflow(token_secret)
        console.print(f"[green]Created {WORKFLOW_FILE}[/green]")
        console.print(
            f"\n[yellow]Add a token with [bold]read:org[/bold] scope as the [bold]{token_secret}[/bold] "
            "repository secret. The built-in GITHUB_TOKEN cannot read team membership.[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print(f"Try it with: [bold]release-ready evaluate --repo {repo} --pr <number> --shadow[/bold]")


def _detect_repo_from_git() -> str | None:
    """Try to detect the GitHub repo slug from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        # https://github.com/owner/repo.git  →  owner/repo
        # git@github.com:owner/repo.git      →  owner/repo
        if "github.com" not in url:
            return None
        slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
        return slug if "/" in slug else None
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _write_config(config: dict) -> None:
    """Write or update .release-ready.yml, preserving any existing keys."""
    path = Path(CONFIG_FILE)
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("release-ready")
    except PackageNotFoundError:
        logger.debug("release-ready is not installed; pinning the workflow to 0.1.0")
        return "0.1.0"


def _write_workflow(token_secret: str) -> None:
    WORKFLOW_FILE.parent.mkdir(parents=True, exist_ok=True)
    WORKFLOW_FILE.write_text(_WORKFLOW_TEMPLATE.format(version=_get_version(), token_secret=token_secret))
