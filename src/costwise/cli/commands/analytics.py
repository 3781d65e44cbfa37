"""Financial analytics commands."""

import click
from costwise.cli.date_filters import resolve_cli_date_range
from costwise.domain.analytics import AnalyticsService
from costwise.domain.entities import Granularity
from costwise.utils.date_parser import BUDGET_PERIODS, parse_date

PERIOD_HELP = f"Calendar period ({', '.join(BUDGET_PERIODS)})"


def _money(value) -> str:
    return f"${value:,.2f}"


@click.group()
def analytics_group():
    """Margins, break-even, trends and daily metrics."""
    pass


@analytics_group.command("summary")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'this month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(BUDGET_PERIODS), help=PERIOD_HELP)
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """Show revenue, costs, margins and break-even for a date range."""
    service = AnalyticsService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    report = service.report(start, end, periods=ctx.obj["settings"].trend_periods)
    s = report.summary
    if s.transaction_count == 0:
        click.echo("No transactions found.")
        return

    click.echo(f"Transactions:            {s.transaction_count}")
    click.echo(f"Days in range:           {s.days_in_range}")
    click.echo(f"Total revenue:           {_money(s.total_revenue)}")
    click.echo(f"Total expenses:          {_money(s.total_expenses)}")
    click.echo(f"Gross profit:            {_money(s.gross_profit)} ({s.gross_profit_margin:.1f}%)")
    click.echo(f"Net profit:              {_money(s.net_profit)} ({s.net_profit_margin:.1f}%)")
    click.echo()
    click.echo(f"Fixed costs:             {_money(s.fixed_costs)}")
    click.echo(f"Variable costs:          {_money(s.variable_costs)}")
    click.echo(f"Mixed costs:             {_money(s.mixed_costs)}")
    click.echo(f"Direct costs:            {_money(s.direct_costs)}")
    click.echo(f"Indirect costs:          {_money(s.indirect_costs)}")
    if s.unclassified_costs:
        click.echo(f"Unclassified costs:      {_money(s.unclassified_costs)}")
    click.echo()
    click.echo(
        f"Contribution margin:     {_money(s.contribution_margin)} "
        f"({s.contribution_margin_ratio:.1f}%)"
    )
    click.echo(f"Average daily revenue:   {_money(s.average_daily_revenue)}")
    click.echo(f"Break-even days:         {s.break_even_days:.1f}")
    click.echo(f"Break-even revenue:      {_money(s.break_even_revenue)}")
    click.echo(
        f"Margin of safety:        {_money(s.margin_of_safety)} "
        f"({s.margin_of_safety_days:.1f} days)"
    )

    if report.insights:
        click.echo()
        for insight in report.insights:
            click.echo(f"* {insight}")


@analytics_group.command("trend")
@click.option(
    "--granularity",
    type=click.Choice([g.value for g in Granularity]),
    default=Granularity.MONTH.value,
    show_default=True,
)
@click.option("--periods", type=click.IntRange(min=1), help="Most recent buckets to show")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@click.pass_context
def trend(ctx, granularity: str, periods: int | None, start_date: str | None, end_date: str | None):
    """Show revenue, expenses and profit per day or month."""
    service = AnalyticsService(ctx.obj["db"])
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)
    if periods is None:
        periods = ctx.obj["settings"].trend_periods

    report = service.report(start, end, granularity=Granularity(granularity), periods=periods)
    if not report.trend:
        click.echo("No transactions found.")
        return

    click.echo(
        f"{'Period':<10}  {'Revenue':>12}  {'Expenses':>12}  {'Profit':>12}  "
        f"{'Fixed':>11}  {'Variable':>11}  {'Growth':>8}"
    )
    click.echo("-" * 88)
    for point in report.trend:
        click.echo(
            f"{point.period:<10}  {_money(point.revenue):>12}  {_money(point.expenses):>12}  "
            f"{_money(point.profit):>12}  {_money(point.fixed_costs):>11}  "
            f"{_money(point.variable_costs):>11}  {point.growth_rate:>7.1f}%"
        )

    growth = report.growth
    click.echo()
    click.echo(
        f"Latest growth: profit {growth.profit:.1f}%, revenue {growth.revenue:.1f}%, "
        f"expenses {growth.expenses:.1f}%"
    )


@analytics_group.command("expenses")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@click.option("--period", type=click.Choice(BUDGET_PERIODS), help=PERIOD_HELP)
@click.option("--category", help="Only include this transaction category")
@click.pass_context
def expenses(
    ctx, start_date: str | None, end_date: str | None, period: str | None, category: str | None
):
    """Break expenses down by category, cost type and cost nature."""
    service = AnalyticsService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    analysis = service.expense_analysis(start, end, category=category)
    if analysis.total_costs == 0:
        click.echo("No expenses found.")
        return

    click.echo(f"Total costs: {_money(analysis.total_costs)}")
    for title, items in (
        ("By category", analysis.by_category),
        ("By cost type", analysis.by_cost_type),
        ("By cost nature", analysis.by_cost_nature),
    ):
        click.echo(f"\n{title}:")
        for item in items:
            click.echo(f"  {item.label:<30} {_money(item.amount):>14} {item.percentage:>6.1f}%")

    if analysis.insights:
        click.echo()
        for insight in analysis.insights:
            click.echo(f"* {insight}")


@analytics_group.command("refresh")
@click.option("--start-date", help="First date (defaults to three months ago)")
@click.option("--end-date", help="Last date (defaults to today)")
@click.pass_context
def refresh(ctx, start_date: str | None, end_date: str | None):
    """Store daily metric rows for dates that have none yet."""
    service = AnalyticsService(ctx.obj["db"])
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)

    inserted = service.refresh_daily_metrics(start, end)
    click.echo(f"Inserted {inserted} daily metric rows")


@analytics_group.command("regenerate")
@click.argument("day")
@click.pass_context
def regenerate(ctx, day: str):
    """Recompute the stored metric row for one date."""
    service = AnalyticsService(ctx.obj["db"])

    try:
        metric_date = parse_date(day)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    metric = service.regenerate_daily_metric(metric_date)
    click.echo(
        f"{metric.date}: revenue {_money(metric.total_revenue)}, "
        f"expenses {_money(metric.total_expenses)}, net {_money(metric.net_profit)}"
    )


def register_commands(cli):
    """Register analytics commands with main CLI."""
    cli.add_command(analytics_group, name="analytics")
