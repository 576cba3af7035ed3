"""Dry-run gateway: reads from GitHub, prints writes instead of posting them."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console()


class ShadowGateway:
    def __init__(self, gateway):
        self._gateway = gateway
        self.actions: list[tuple[str, str]] = []

    def remove_label(self, label: str) -> None:
        self.actions.append(("remove_label", label))
        console.print(f"[yellow]Shadow: would remove label [bold]{escape(label)}[/bold][/yellow]")

    def add_labels(self, labels: list[str]) -> None:
        for label in labels:
            self.actions.append(("add_label", label))
        console.print(f"[green]Shadow: would add label(s) [bold]{escape(', '.join(labels))}[/bold][/green]")

    def create_comment(self, body: str) -> None:
        self.actions.append(("comment", body))
        console.print("[cyan]Shadow: would comment:[/cyan]")
        console.print(f"  {body}", markup=False)

    def list_reviews(self):
        return self._gateway.list_reviews()

    def is_team_member(self, team_id: str, login: str) -> bool:
        return self._gateway.is_team_member(team_id, login)

    def list_check_runs(self, check_name: str, ref: str):
        return self._gateway.list_check_runs(check_name, ref)
