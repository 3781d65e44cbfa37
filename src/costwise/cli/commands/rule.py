"""Custom classification rule commands."""

import click
from costwise.cli.error_handling import handle_domain_error
from costwise.domain.entities import CostNature, CostType
from costwise.domain.errors import DomainError
from costwise.domain.rules import CustomRuleService


@click.group()
def rule_group():
    """Manage custom classification rules."""
    pass


@rule_group.command("add")
@click.argument("keyword")
@click.option(
    "--cost-type",
    required=True,
    type=click.Choice([t.value for t in CostType], case_sensitive=False),
    help="Cost type to assign",
)
@click.option(
    "--cost-nature",
    required=True,
    type=click.Choice([n.value for n in CostNature], case_sensitive=False),
    help="Cost nature to assign",
)
@click.option("--confidence", type=float, default=0.8, show_default=True, help="Confidence between 0 and 1")
@click.option("--category", help="Business category (defaults to the profile category)")
@click.pass_context
def add_rule(
    ctx,
    keyword: str,
    cost_type: str,
    cost_nature: str,
    confidence: float,
    category: str | None,
):
    """Add a keyword rule that takes precedence over the pattern library.

    Examples:
        costwise rule add "aws" --cost-type variable --cost-nature direct
        costwise rule add "lease" --cost-type fixed --cost-nature indirect --confidence 0.9
    """
    service = CustomRuleService(ctx.obj["db"])

    try:
        rule_id = service.create_rule(
            keyword=keyword,
            cost_type=cost_type,
            cost_nature=cost_nature,
            confidence=confidence,
            category=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    rule = service.get_rule(rule_id)
    click.echo(
        f"Created rule {rule_id}: '{rule.keyword}' -> {rule.cost_type.value}/"
        f"{rule.cost_nature.value} for {rule.business_category}"
    )


@rule_group.command("list")
@click.option("--category", help="Only show rules for this business category")
@click.pass_context
def list_rules(ctx, category: str | None):
    """List custom rules."""
    service = CustomRuleService(ctx.obj["db"])

    rules = service.list_rules(category)
    if not rules:
        click.echo("No custom rules found.")
        return

    click.echo(f"{'ID':>4}  {'Keyword':<24}  {'Type':<9}  {'Nature':<9}  {'Conf':>5}  Category")
    click.echo("-" * 72)
    for rule in rules:
        click.echo(
            f"{rule.id:>4}  {rule.keyword:<24}  {rule.cost_type.value:<9}  "
            f"{rule.cost_nature.value:<9}  {rule.confidence_score:>5.2f}  {rule.business_category}"
        )


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a custom rule."""
    service = CustomRuleService(ctx.obj["db"])

    try:
        service.delete_rule(rule_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted rule {rule_id}")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
