"""Classification commands."""

import click
from costwise.cli.error_handling import handle_domain_error
from costwise.domain.classification import ClassificationService
from costwise.domain.entities import CostNature, CostType
from costwise.domain.errors import DomainError
from costwise.domain.patterns import keyword_suggestions
from costwise.utils.amount_parser import parse_amount


def _service(ctx) -> ClassificationService:
    settings = ctx.obj["settings"]
    return ClassificationService(
        ctx.obj["db"],
        max_workers=settings.max_workers,
        retries=settings.classify_retries,
    )


@click.group()
def classify_group():
    """Classify expenses by cost type and cost nature."""
    pass


@classify_group.command("run")
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads (default from COSTWISE_MAX_WORKERS)")
@click.option("--retries", type=click.IntRange(min=0), help="Extra attempts per failed transaction")
@click.pass_context
def run_classification(ctx, workers: int | None, retries: int | None):
    """Classify every expense that has no classification yet.

    Safe to re-run: classified expenses and manual overrides are skipped.
    """
    service = _service(ctx)

    result = service.classify_all(max_workers=workers, retries=retries)
    if not result.outcomes:
        click.echo("No expense transactions to classify.")
        return

    for outcome in result.failed:
        click.echo(f"✗ Transaction {outcome.transaction_id}: {outcome.error}")

    click.echo(
        f"Results: {len(result.classified)} classified, {len(result.skipped)} skipped, "
        f"{len(result.failed)} failed"
    )
    if result.failed:
        ctx.exit(1)


@classify_group.command("text")
@click.argument("description")
@click.option("--amount", help="Expense amount")
@click.option("--category", help="Expense category")
@click.pass_context
def classify_text(ctx, description: str, amount: str | None, category: str | None):
    """Classify a description without storing anything.

    Examples:
        costwise classify text "Office Rent"
        costwise classify text "Raw Materials Purchase" --amount 2500
    """
    service = _service(ctx)

    parsed_amount = None
    if amount is not None:
        try:
            parsed_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    context = service.load_context()
    result = service.classify(description, parsed_amount, category, context)

    click.echo(f"Cost type:   {result.cost_type.value}")
    click.echo(f"Cost nature: {result.cost_nature.value}")
    click.echo(f"Confidence:  {result.confidence:.2f}")
    click.echo(f"Method:      {result.method.value}")

    suggestions = keyword_suggestions(description, context.patterns)
    if suggestions:
        click.echo(f"Matched keywords: {', '.join(suggestions)}")


@classify_group.command("override")
@click.argument("transaction_id", type=int)
@click.option(
    "--cost-type",
    required=True,
    type=click.Choice([t.value for t in CostType], case_sensitive=False),
)
@click.option(
    "--cost-nature",
    required=True,
    type=click.Choice([n.value for n in CostNature], case_sensitive=False),
)
@click.pass_context
def override_classification(ctx, transaction_id: int, cost_type: str, cost_nature: str):
    """Set a manual classification that automatic runs will not replace."""
    service = _service(ctx)

    try:
        record = service.override(transaction_id, cost_type, cost_nature)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Transaction {transaction_id} manually classified as "
        f"{record.cost_type.value}/{record.cost_nature.value}"
    )


@classify_group.command("clear")
@click.argument("transaction_id", type=int)
@click.pass_context
def clear_classification(ctx, transaction_id: int):
    """Remove a stored classification so the next run classifies it again."""
    service = _service(ctx)

    if service.clear_override(transaction_id):
        click.echo(f"Cleared classification for transaction {transaction_id}")
    else:
        click.echo(f"Transaction {transaction_id} has no stored classification.")


def register_commands(cli):
    """Register classify commands with main CLI."""
    cli.add_command(classify_group, name="classify")
