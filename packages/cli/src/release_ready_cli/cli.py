"""CLI entry point for release-ready.

Commands:
  check:    evaluate a pull_request event (GitHub Actions)
  evaluate: evaluate a live pull request from your terminal
  init:     write .release-ready.yml and the Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from release_ready_cli.commands.check import check_cmd
from release_ready_cli.commands.evaluate import evaluate_cmd
from release_ready_cli.commands.init import init_cmd

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # PyGithub logs every request at DEBUG.
    logging.getLogger("github").setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("release-ready"),
    prog_name="release-ready",
)
@click.option(
    "--config",
    "config_path",
    default=".release-ready.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="RELEASE_READY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output (reviews found, lookups).")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Gate pull requests behind a release-ready label."""
    from release_ready_core.config import load_config
    from release_ready_cli.auth import resolve_github_token

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    # The token is resolved here only, so all subcommands share the same resolution.
    config["github_token"] = resolve_github_token()

    ctx.obj["config"] = config


main.add_command(check_cmd)
main.add_command(evaluate_cmd)
main.add_command(init_cmd)
