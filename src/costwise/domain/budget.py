"""Budget variance domain service."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from costwise.database.base import Database
from costwise.domain.entities import Budget, BudgetVariance, Transaction, VarianceStatus
from costwise.domain.errors import (
    NotFoundError,
    ValidationError,
    budget_not_found,
    unknown_period,
)
from costwise.utils.date_parser import BUDGET_PERIODS, period_window

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
FAVORABLE_THRESHOLD = Decimal("10")
UNFAVORABLE_THRESHOLD = Decimal("-10")


def resolve_window(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Calendar window for a budget period name.

    Raises:
        ValidationError: If the period is not supported
    """
    try:
        return period_window(period, today)
    except ValueError:
        raise ValidationError(unknown_period(period, list(BUDGET_PERIODS)))


def spend_by_category(
    transactions: Iterable[Transaction], start_date: date, end_date: date
) -> dict[str, Decimal]:
    """Sum expense amounts inside [start_date, end_date] per category."""
    spend: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for txn in transactions:
        if not txn.is_expense:
            continue
        if start_date <= txn.date <= end_date:
            spend[txn.category or UNCATEGORIZED] += txn.amount
    return dict(spend)


def variance_status(variance_percent: Decimal) -> VarianceStatus:
    """Map a variance percentage to its status."""
    if variance_percent > FAVORABLE_THRESHOLD:
        return VarianceStatus.FAVORABLE
    if variance_percent < UNFAVORABLE_THRESHOLD:
        return VarianceStatus.UNFAVORABLE
    return VarianceStatus.ON_TRACK


def calculate_variance(
    budgets: Sequence[Budget],
    transactions: Sequence[Transaction],
    period: str,
    today: Optional[date] = None,
) -> list[BudgetVariance]:
    """Compare budgeted amounts with actual expense spend for a period.

    Every budget whose interval overlaps the period window yields one entry.
    Categories with spend but no active budget are reported as untracked
    spend with a zero budget. Results are sorted by absolute variance,
    largest first.

    Args:
        budgets: Budgets to compare
        transactions: Transactions to draw actual spend from
        period: One of current-month, last-month, quarter, year
        today: Reference date (defaults to today)

    Returns:
        List of BudgetVariance

    Raises:
        ValidationError: If the period is not supported
    """
    start_date, end_date = resolve_window(period, today)
    actuals = spend_by_category(transactions, start_date, end_date)

    active = [b for b in budgets if b.start_date <= end_date and b.end_date >= start_date]
    results: list[BudgetVariance] = []

    for budget in active:
        actual = actuals.get(budget.category, Decimal("0"))
        variance = budget.allocated_amount - actual
        if budget.allocated_amount == 0:
            variance_percent = Decimal("0")
        else:
            variance_percent = variance / budget.allocated_amount * 100
        results.append(
            BudgetVariance(
                category=budget.category,
                budgeted=budget.allocated_amount,
                actual=actual,
                variance=variance,
                variance_percent=variance_percent,
                status=variance_status(variance_percent),
            )
        )

    budgeted_categories = {b.category for b in active}
    for category, actual in actuals.items():
        if category in budgeted_categories:
            continue
        results.append(
            BudgetVariance(
                category=category,
                budgeted=Decimal("0"),
                actual=actual,
                variance=-actual,
                variance_percent=Decimal("-100"),
                status=VarianceStatus.UNFAVORABLE,
            )
        )

    results.sort(key=lambda v: abs(v.variance), reverse=True)
    return results


class BudgetService:
    """Service for managing budgets and comparing them with spend."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_budget(
        self,
        name: str,
        category: str,
        allocated_amount: Decimal,
        start_date: date,
        end_date: date,
        period: str = "monthly",
    ) -> int:
        """Create a budget.

        Args:
            name: Display name
            category: Transaction category the budget tracks
            allocated_amount: Amount allocated (zero or more)
            start_date: First day covered
            end_date: Last day covered
            period: Free-text period label

        Returns:
            Budget ID

        Raises:
            ValidationError: If the values are invalid
        """
        name = (name or "").strip()
        category = (category or "").strip()
        if not name:
            raise ValidationError("Budget name must not be empty")
        if not category:
            raise ValidationError("Budget category must not be empty")
        if allocated_amount < 0:
            raise ValidationError(f"Allocated amount must not be negative, got {allocated_amount}")
        if end_date < start_date:
            raise ValidationError(
                f"Budget end date {end_date} is before its start date {start_date}"
            )

        return self.db.create_budget(
            name=name,
            category=category,
            allocated_amount=allocated_amount,
            start_date=start_date,
            end_date=end_date,
            period=period,
        )

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        return self.db.get_budget(budget_id)

    def list_budgets(self) -> list[Budget]:
        """List all budgets."""
        return self.db.list_budgets()

    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget.

        Raises:
            NotFoundError: If budget doesn't exist
        """
        if self.db.get_budget(budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self.db.delete_budget(budget_id)

    def variance(self, period: str, today: Optional[date] = None) -> list[BudgetVariance]:
        """Budget variance for a period using stored budgets and expenses."""
        start_date, end_date = resolve_window(period, today)
        transactions = self.db.list_transactions(start_date=start_date, end_date=end_date)
        return calculate_variance(self.db.list_budgets(), transactions, period, today)

    def sync_spent_amounts(self) -> int:
        """Recompute each budget's spent amount from its own date interval.

        Only budgets whose stored amount changed are written.

        Returns:
            Number of budgets updated
        """
        updated = 0
        for budget in self.db.list_budgets():
            transactions = self.db.list_transactions(
                start_date=budget.start_date,
                end_date=budget.end_date,
            )
            spent = spend_by_category(transactions, budget.start_date, budget.end_date).get(
                budget.category, Decimal("0")
            )
            if spent == budget.spent_amount:
                continue
            self.db.update_budget_spent_amount(budget.id, spent)
            updated += 1

        logger.info("Updated spent amount on %d budgets", updated)
        return updated
