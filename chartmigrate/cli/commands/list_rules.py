"""CLI command for listing the migration rule catalog."""

import click

from chartmigrate.models.rule import Concern
from chartmigrate.rules import default_rule_set


@click.command("list-rules")
@click.option(
    "--concern",
    type=click.Choice([c.value for c in Concern]),
    help="Only show rules for this concern",
)
def list_rules(concern: str | None):
    """List the built-in migration rules, grouped by concern."""
    grouped = default_rule_set().by_concern()

    click.echo("Migration Rules:")
    for rule_concern, rules in grouped.items():
        if concern is not None and rule_concern.value != concern:
            continue
        click.echo(f"  {rule_concern.value}:")
        for rule in rules:
            target = f" -> {rule.target}" if rule.target else ""
            click.echo(f"    - {rule.id} [{rule.action.value}, since {rule.since}] {rule.source}{target}")
            if rule.description:
                click.echo(f"        {rule.description}")
