"""Command line interface for inspecting grants and decisions."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer

from fieldguard import AbilityFactory, AbilitySet, Action, get_grant_source
from fieldguard.config import load_config
from fieldguard.errors import ConditionVariableError

app = typer.Typer(help="CLI for fieldguard policies")


def _parse_actor(value: Optional[str]) -> Any:
    if value is None:
        return None
    return int(value) if value.isdigit() else value


def _load_ability(actor: Optional[str], policy: Optional[Path]) -> AbilitySet:
    config = load_config()
    source = get_grant_source(
        config=config, policy_path=str(policy) if policy else None
    )
    factory = AbilityFactory(source, guest_group=config.grants.guest_group)
    try:
        return asyncio.run(factory.create_for(_parse_actor(actor)))
    except ConditionVariableError as exc:
        typer.secho(f"Invalid policy: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2)


@app.callback()
def main() -> None:
    """fieldguard CLI entry point."""
    pass


@app.command("grants")
def grants(
    actor: Optional[str] = typer.Option(None, help="Actor id (guest when omitted)"),
    policy: Optional[Path] = typer.Option(None, help="YAML policy file"),
) -> None:
    """
    List the grants effective for an actor, in declaration order.

    Later grants take priority over earlier ones.

    Example:
        fieldguard grants --policy policy.yaml --actor 7
        # Output: can read Production
        #         cannot delete BlogPost (Archive instead)
    """
    ability = _load_ability(actor, policy)
    if not len(ability):
        typer.echo("No grants found")
        return
    for grant in ability:
        typer.echo(grant.describe())


@app.command("can")
def can(
    action: str,
    subject: str,
    field: Optional[str] = typer.Option(None, help="Field to check"),
    instance: Optional[str] = typer.Option(None, help="Instance as a JSON object"),
    actor: Optional[str] = typer.Option(None, help="Actor id (guest when omitted)"),
    policy: Optional[Path] = typer.Option(None, help="YAML policy file"),
) -> None:
    """
    Check whether an actor may perform an action.

    Prints "allowed" or "denied" and exits with code 1 when denied.

    Example:
        fieldguard can read User --field email --instance '{"id": 7}' --actor 7
    """
    try:
        parsed_action = Action(action.lower())
    except ValueError:
        typer.secho(f"Unknown action: {action}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    parsed_instance = None
    if instance is not None:
        try:
            parsed_instance = json.loads(instance)
        except json.JSONDecodeError as exc:
            typer.secho(f"Instance is not valid JSON: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=2)

    ability = _load_ability(actor, policy)
    decision = ability.decide(parsed_action, subject, parsed_instance, field)
    if decision.allowed:
        typer.echo("allowed")
        return
    typer.echo(f"denied: {decision.reason}" if decision.reason else "denied")
    raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
