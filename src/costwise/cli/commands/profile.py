"""Business profile commands."""

import click
from costwise.cli.error_handling import handle_domain_error
from costwise.domain.business_context import BusinessContextService
from costwise.domain.errors import DomainError


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@click.group()
def profile_group():
    """Manage the business profile."""
    pass


@profile_group.command("set")
@click.option("--category", required=True, help="Business category (e.g., Manufacturing, Retail, Services)")
@click.option("--model", "business_model", default="", help="Business model description")
@click.option("--activities", help="Comma-separated core activities")
@click.option("--revenue-streams", help="Comma-separated revenue streams")
@click.option("--cost-centers", help="Comma-separated cost centers")
@click.option("--size", "size_scale", help="Size descriptor (e.g., small, medium)")
@click.option("--revenue-range", help="Revenue band (e.g., '100k-500k')")
@click.pass_context
def set_profile(
    ctx,
    category: str,
    business_model: str,
    activities: str | None,
    revenue_streams: str | None,
    cost_centers: str | None,
    size_scale: str | None,
    revenue_range: str | None,
):
    """Create or replace the business profile.

    Examples:
        costwise profile set --category Manufacturing --activities "assembly,machining"
        costwise profile set --category Services --revenue-streams "consulting"
    """
    service = BusinessContextService(ctx.obj["db"])

    try:
        saved = service.save_profile(
            category=category,
            business_model=business_model,
            core_activities=_split(activities),
            revenue_streams=_split(revenue_streams),
            cost_centers=_split(cost_centers),
            size_scale=size_scale,
            revenue_range=revenue_range,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Saved business profile (category: {saved.category})")


@profile_group.command("show")
@click.pass_context
def show_profile(ctx):
    """Show the business profile."""
    service = BusinessContextService(ctx.obj["db"])

    saved = service.get_profile()
    if saved is None:
        click.echo("No business profile set. Classification uses the General category.")
        return

    click.echo(f"Category:         {saved.category}")
    click.echo(f"Business model:   {saved.business_model or '-'}")
    click.echo(f"Core activities:  {', '.join(saved.core_activities) or '-'}")
    click.echo(f"Revenue streams:  {', '.join(saved.revenue_streams) or '-'}")
    click.echo(f"Cost centers:     {', '.join(saved.cost_centers) or '-'}")
    click.echo(f"Size:             {saved.size_scale or '-'}")
    click.echo(f"Revenue range:    {saved.revenue_range or '-'}")


def register_commands(cli):
    """Register profile commands with main CLI."""
    cli.add_command(profile_group, name="profile")
