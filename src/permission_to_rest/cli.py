"""CLI entry point for permission-to-rest."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from permission_to_rest.abilities import Ability, AbilityBuilder, Action, SubjectResolutionError
from permission_to_rest.abilities.builder import import_subject
from permission_to_rest.abilities.models import describe_where, subject_name
from permission_to_rest.config import PermissionConfig, load_config
from permission_to_rest.config.loader import DEFAULT_CONFIG_TEMPLATE
from permission_to_rest.log import configure_logging

app = typer.Typer(
    name="permission-to-rest",
    help="Evaluate CRUD abilities declared in a permissions file.",
)

config_app = typer.Typer(help="Manage the permissions file.")
app.add_typer(config_app, name="config")

# Global state
_config: PermissionConfig | None = None

EXIT_DENIED = 1
EXIT_INVALID = 2


def _get_config() -> PermissionConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to permissions.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_INVALID)
    configure_logging(_config.log_level, _config.log_format)


def _parse_item(raw: str, option: str) -> dict[str, Any]:
    """Parse a JSON object given on the command line."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{option} is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ValueError(f"{option} must be a JSON object, got {type(value).__name__}")
    return value


def _resolve_subject_override(tag: str | None, cfg: PermissionConfig) -> Any:
    """Map a --subject tag through the configured subjects, if listed there."""
    if tag is None:
        return None
    if tag in cfg.subjects:
        return import_subject(tag, cfg.subjects[tag])
    return tag


def _rule_row(index: int, ability: Ability) -> tuple[str, ...]:
    return (
        str(index),
        ability.permission.value,
        ability.action.value,
        escape(subject_name(ability.subject)),
        escape(describe_where(ability.where)) or "-",
        escape(", ".join(ability.blacklist)) if ability.blacklist else "-",
    )


@app.command()
def check(
    action: str = typer.Argument(..., help="create | retrieve | update | delete"),
    item: str = typer.Option(..., "--item", "-i", help="Item as a JSON object"),
    updated: Annotated[
        str | None, typer.Option("--updated", "-u", help="Update payload as a JSON object")
    ] = None,
    subject: Annotated[
        str | None, typer.Option("--subject", "-s", help="Subject tag for the item")
    ] = None,
) -> None:
    """Check whether ACTION is allowed on an item. Exit 0 if allowed, 1 if denied."""
    cfg = _get_config()
    try:
        query_action = Action(action.upper())
        original = _parse_item(item, "--item")
        payload = _parse_item(updated, "--updated") if updated is not None else None
        override = _resolve_subject_override(subject, cfg)
        engine = AbilityBuilder.from_config(cfg).build()
        result = engine.decide(query_action, original, payload, subject=override)
    except ValueError as e:
        # InvalidActionError and SubjectResolutionError are ValueErrors too
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_INVALID)

    verdict = "[green]ALLOWED[/green]" if result.decision else "[red]DENIED[/red]"
    rule = escape(result.deciding_rule.describe()) if result.deciding_rule else "(no matching rule, default deny)"
    rprint(
        Panel(
            f"[dim]Action:[/dim]   {query_action.value}\n"
            f"[dim]Subject:[/dim]  {escape(subject or 'dict')}\n"
            f"[dim]Decision:[/dim] {verdict}\n"
            f"[dim]Rule:[/dim]     {rule}",
            title="Permission Check",
            border_style="green" if result.decision else "red",
        )
    )
    if not result.decision:
        raise typer.Exit(EXIT_DENIED)


@app.command()
def rules() -> None:
    """List configured rules in declaration order."""
    cfg = _get_config()
    try:
        abilities = AbilityBuilder.from_config(cfg).abilities
    except SubjectResolutionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_INVALID)

    if not abilities:
        rprint("[yellow]No rules configured; every check is denied.[/yellow]")
        return

    table = Table(title=f"Rules ({len(abilities)})")
    table.add_column("#", justify="right")
    table.add_column("Permission", style="bold")
    table.add_column("Action", style="cyan")
    table.add_column("Subject", style="green")
    table.add_column("Where")
    table.add_column("Blacklist", style="yellow")
    for index, ability in enumerate(abilities, start=1):
        table.add_row(*_rule_row(index, ability))
    rprint(table)


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing file"),
) -> None:
    """Create a default permissions.yaml in the current directory."""
    target = Path("permissions.yaml")
    if target.exists() and not force:
        rprint("[yellow]permissions.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
