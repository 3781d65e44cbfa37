"""Transaction commands."""

import click
from costwise.cli.date_filters import resolve_cli_date_range
from costwise.cli.error_handling import handle_domain_error
from costwise.domain.entities import TransactionType
from costwise.domain.errors import DomainError
from costwise.domain.transaction import TransactionService
from costwise.utils.amount_parser import parse_amount
from costwise.utils.date_parser import parse_date

TYPE_CHOICES = [t.value for t in TransactionType]


@click.command("add")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45 or $1,234.56)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(TYPE_CHOICES, case_sensitive=False),
    default=TransactionType.EXPENSE.value,
    show_default=True,
    help="Transaction type",
)
@click.option("--description", help="Transaction description")
@click.option("--category", help="Free-text category (e.g., 'Utilities')")
@click.option("--classify/--no-classify", default=False, help="Classify the expense right away")
@click.pass_context
def add_transaction(
    ctx,
    date: str,
    amount: str,
    txn_type: str,
    description: str | None,
    category: str | None,
    classify: bool,
):
    """Record a transaction.

    Examples:
        costwise add --date 2024-01-15 --amount 1200 --description "Office Rent" --category Facilities
        costwise add --date today --amount 5000 --type income --description "Consulting fee"
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = service.create_transaction(
            date=txn_date,
            amount=txn_amount,
            type=txn_type,
            description=description,
            category=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: ${txn_amount:,.2f}")
    click.echo(f"  Type: {txn_type.lower()}")
    if description:
        click.echo(f"  Description: {description}")
    if category:
        click.echo(f"  Category: {category}")

    if classify and txn_type.lower() == TransactionType.EXPENSE.value:
        from costwise.domain.classification import ClassificationService

        stored = ClassificationService(db).classify_transaction(transaction_id)
        if stored is not None:
            click.echo(
                f"  Classified: {stored.cost_type.value}/{stored.cost_nature.value} "
                f"({stored.confidence:.2f})"
            )


@click.command("transactions")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(TYPE_CHOICES, case_sensitive=False),
    help="Only show this transaction type",
)
@click.option("--category", help="Only show this category")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    txn_type: str | None,
    category: str | None,
):
    """List transactions with their classifications."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)
    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        transaction_type=txn_type,
        category=category,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    classifications = db.list_classifications([t.id for t in transactions if t.is_expense])

    click.echo(
        f"{'ID':>5}  {'Date':<10}  {'Type':<10}  {'Amount':>12}  {'Category':<18}  "
        f"{'Classification':<22}  Description"
    )
    click.echo("-" * 110)
    for txn in transactions:
        stored = classifications.get(txn.id)
        if stored is None:
            label = "-" if not txn.is_expense else "unclassified"
        else:
            label = f"{stored.cost_type.value}/{stored.cost_nature.value}"
            if stored.manual_override:
                label += " *"
        click.echo(
            f"{txn.id:>5}  {txn.date.isoformat():<10}  {txn.type.value:<10}  "
            f"${txn.amount:>11,.2f}  {(txn.category or '-')[:18]:<18}  {label:<22}  "
            f"{txn.description or ''}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(list_transactions)
