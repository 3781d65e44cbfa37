"""Cost pattern library commands."""

import click
from costwise.domain.business_context import BusinessContextService
from costwise.domain.patterns import PatternLibrary


@click.group()
def pattern_group():
    """Inspect and seed the cost pattern library."""
    pass


@pattern_group.command("seed")
@click.pass_context
def seed_patterns(ctx):
    """Load the built-in pattern catalog. Existing patterns are kept."""
    library = PatternLibrary(ctx.obj["db"])

    inserted = library.seed_defaults()
    if inserted == 0:
        click.echo("Pattern library already up to date.")
    else:
        click.echo(f"Seeded {inserted} cost patterns")


@pattern_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Show every category, not just the profile's")
@click.pass_context
def list_patterns(ctx, show_all: bool):
    """List cost patterns used for the current business category."""
    db = ctx.obj["db"]
    library = PatternLibrary(db)

    if show_all:
        patterns = library.list_patterns()
    else:
        patterns = library.patterns_for(BusinessContextService(db).business_category())

    if not patterns:
        click.echo("No cost patterns found. Run 'costwise pattern seed' to load the defaults.")
        return

    for pattern in patterns:
        click.echo(
            f"{pattern.pattern_name} [{pattern.business_category}] "
            f"{pattern.typical_cost_type.value}/{pattern.typical_cost_nature.value} "
            f"weight {pattern.relevance_weight:.2f}"
        )
        click.echo(f"    {', '.join(pattern.keywords)}")


def register_commands(cli):
    """Register pattern commands with main CLI."""
    cli.add_command(pattern_group, name="pattern")
