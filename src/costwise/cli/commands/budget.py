"""Budget commands."""

import click
from costwise.cli.error_handling import handle_domain_error
from costwise.domain.budget import BudgetService
from costwise.domain.errors import DomainError
from costwise.utils.amount_parser import parse_amount
from costwise.utils.date_parser import BUDGET_PERIODS, parse_date


@click.group()
def budget_group():
    """Manage budgets and compare them with actual spend."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--category", required=True, help="Transaction category the budget tracks")
@click.option("--amount", required=True, help="Allocated amount")
@click.option("--start-date", required=True, help="First day covered")
@click.option("--end-date", required=True, help="Last day covered")
@click.option("--period", "period_label", default="monthly", show_default=True, help="Period label")
@click.pass_context
def create_budget(
    ctx,
    name: str,
    category: str,
    amount: str,
    start_date: str,
    end_date: str,
    period_label: str,
):
    """Create a budget for a transaction category.

    Examples:
        costwise budget create "Rent 2024" --category Facilities --amount 14400 \\
            --start-date 2024-01-01 --end-date 2024-12-31 --period yearly
    """
    service = BudgetService(ctx.obj["db"])

    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        allocated = parse_amount(amount, allow_zero=True)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        budget_id = service.create_budget(
            name=name,
            category=category,
            allocated_amount=allocated,
            start_date=start,
            end_date=end,
            period=period_label,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created budget '{name}' (ID: {budget_id})")


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List all budgets."""
    service = BudgetService(ctx.obj["db"])

    budgets = service.list_budgets()
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo(
        f"{'ID':>4}  {'Name':<20}  {'Category':<18}  {'Allocated':>12}  {'Spent':>12}  Window"
    )
    click.echo("-" * 96)
    for b in budgets:
        click.echo(
            f"{b.id:>4}  {b.name[:20]:<20}  {b.category[:18]:<18}  "
            f"${b.allocated_amount:>11,.2f}  ${b.spent_amount:>11,.2f}  "
            f"{b.start_date} to {b.end_date} ({b.period})"
        )


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Delete a budget."""
    service = BudgetService(ctx.obj["db"])

    try:
        service.delete_budget(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted budget {budget_id}")


@budget_group.command("variance")
@click.option(
    "--period",
    type=click.Choice(BUDGET_PERIODS),
    default="current-month",
    show_default=True,
)
@click.pass_context
def variance(ctx, period: str):
    """Compare budgets with actual expense spend for a calendar period."""
    service = BudgetService(ctx.obj["db"])

    try:
        rows = service.variance(period)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not rows:
        click.echo("No budgets or expenses in this period.")
        return

    click.echo(
        f"{'Category':<20}  {'Budgeted':>12}  {'Actual':>12}  {'Variance':>12}  {'%':>8}  Status"
    )
    click.echo("-" * 84)
    for row in rows:
        click.echo(
            f"{row.category[:20]:<20}  ${row.budgeted:>11,.2f}  ${row.actual:>11,.2f}  "
            f"${row.variance:>11,.2f}  {row.variance_percent:>7.1f}%  {row.status.value}"
        )


@budget_group.command("sync")
@click.pass_context
def sync(ctx):
    """Recompute each budget's spent amount from recorded expenses."""
    service = BudgetService(ctx.obj["db"])

    updated = service.sync_spent_amounts()
    click.echo(f"Updated {updated} budgets")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
