"""Financial analytics domain service.

Turns classified transactions into period metrics: margins, contribution
margin, break-even and margin of safety, plus trend series and daily metric
rows. Every ratio whose denominator is zero resolves to 0.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from costwise.database.base import Database
from costwise.domain.entities import (
    AnalyticsMetric,
    AnalyticsReport,
    BreakdownItem,
    ClassifiedTransaction,
    CostBehaviorPoint,
    CostNature,
    CostType,
    ExpenseAnalysis,
    FinancialSummary,
    Granularity,
    GrowthRates,
    TransactionType,
    TrendPoint,
)
from costwise.domain.errors import ConflictError
from costwise.utils.date_parser import days_in_range, iter_days

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
UNCLASSIFIED = "unclassified"


def percent(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator, or 0 when denominator is not positive."""
    if denominator <= 0:
        return ZERO
    return numerator / denominator


@dataclass
class CostTotals:
    """Running revenue and cost totals for a group of transactions."""

    revenue: Decimal = ZERO
    expenses: Decimal = ZERO
    fixed: Decimal = ZERO
    variable: Decimal = ZERO
    mixed: Decimal = ZERO
    direct: Decimal = ZERO
    indirect: Decimal = ZERO
    unclassified: Decimal = ZERO
    count: int = 0
    dates: list[date] = field(default_factory=list)

    def add(self, item: ClassifiedTransaction) -> None:
        txn = item.transaction
        self.count += 1
        self.dates.append(txn.date)
        if txn.is_revenue:
            self.revenue += txn.amount
            return
        if txn.type != TransactionType.EXPENSE:
            return

        self.expenses += txn.amount
        classification = item.classification
        if classification is None:
            self.unclassified += txn.amount
            return

        if classification.cost_type == CostType.FIXED:
            self.fixed += txn.amount
        elif classification.cost_type == CostType.VARIABLE:
            self.variable += txn.amount
        else:
            self.mixed += txn.amount

        if classification.cost_nature == CostNature.DIRECT:
            self.direct += txn.amount
        else:
            self.indirect += txn.amount

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue - self.direct

    @property
    def net_profit(self) -> Decimal:
        return self.revenue - self.expenses


def collect_totals(classified: Iterable[ClassifiedTransaction]) -> CostTotals:
    """Fold classified transactions into a CostTotals."""
    totals = CostTotals()
    for item in classified:
        totals.add(item)
    return totals


def summarize(
    classified: Sequence[ClassifiedTransaction],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> FinancialSummary:
    """Compute financial metrics for classified transactions.

    Revenue is income plus refunds; costs are expense transactions.
    Unclassified expenses count toward total expenses and
    ``unclassified_costs`` only. The number of days used for the average
    daily revenue is the inclusive length of the range; without an explicit
    range it is the span of the transaction dates.

    Args:
        classified: Transactions paired with their classifications
        start_date: Range start (inclusive)
        end_date: Range end (inclusive)

    Returns:
        FinancialSummary
    """
    totals = collect_totals(classified)

    first = start_date or (min(totals.dates) if totals.dates else None)
    last = end_date or (max(totals.dates) if totals.dates else None)
    days = days_in_range(first, last) if first and last else 1

    revenue = totals.revenue
    contribution_margin = revenue - totals.variable
    contribution_margin_ratio = percent(contribution_margin, revenue)
    average_daily_revenue = revenue / days
    margin_of_safety = revenue - totals.fixed

    return FinancialSummary(
        start_date=start_date,
        end_date=end_date,
        days_in_range=days,
        transaction_count=totals.count,
        total_revenue=revenue,
        total_expenses=totals.expenses,
        gross_profit=totals.gross_profit,
        net_profit=totals.net_profit,
        gross_profit_margin=percent(totals.gross_profit, revenue),
        net_profit_margin=percent(totals.net_profit, revenue),
        fixed_costs=totals.fixed,
        variable_costs=totals.variable,
        mixed_costs=totals.mixed,
        direct_costs=totals.direct,
        indirect_costs=totals.indirect,
        unclassified_costs=totals.unclassified,
        contribution_margin=contribution_margin,
        contribution_margin_ratio=contribution_margin_ratio,
        average_daily_revenue=average_daily_revenue,
        break_even_days=safe_divide(totals.fixed, average_daily_revenue),
        break_even_revenue=safe_divide(totals.fixed, contribution_margin_ratio / HUNDRED),
        margin_of_safety=margin_of_safety,
        margin_of_safety_days=safe_divide(margin_of_safety, average_daily_revenue),
    )


def _period_key(day: date, granularity: Granularity) -> str:
    if granularity == Granularity.MONTH:
        return day.strftime("%Y-%m")
    return day.strftime("%Y-%m-%d")


def group_by_period(
    classified: Iterable[ClassifiedTransaction], granularity: Granularity
) -> dict[str, list[ClassifiedTransaction]]:
    """Group classified transactions by truncated date key."""
    groups: dict[str, list[ClassifiedTransaction]] = defaultdict(list)
    for item in classified:
        groups[_period_key(item.transaction.date, granularity)].append(item)
    return dict(groups)


def trend_series(
    classified: Iterable[ClassifiedTransaction],
    granularity: Granularity = Granularity.MONTH,
    limit: Optional[int] = None,
) -> list[TrendPoint]:
    """Bucket transactions by day or month, oldest first.

    Growth rate compares each bucket's profit with the previous bucket's
    and is 0 when the previous profit is not positive. When ``limit`` is
    given only the most recent buckets are kept.
    """
    groups = group_by_period(classified, Granularity(granularity))
    points: list[TrendPoint] = []
    previous_profit: Optional[Decimal] = None

    for key in sorted(groups):
        totals = collect_totals(groups[key])
        profit = totals.net_profit
        growth = ZERO
        if previous_profit is not None and previous_profit > 0:
            growth = percent(profit - previous_profit, previous_profit)
        points.append(
            TrendPoint(
                period=key,
                revenue=totals.revenue,
                expenses=totals.expenses,
                profit=profit,
                fixed_costs=totals.fixed,
                variable_costs=totals.variable,
                direct_costs=totals.direct,
                indirect_costs=totals.indirect,
                growth_rate=growth,
            )
        )
        previous_profit = profit

    if limit is not None:
        points = points[-limit:] if limit > 0 else []
    return points


def cost_behavior_series(
    classified: Iterable[ClassifiedTransaction], limit: Optional[int] = 6
) -> list[CostBehaviorPoint]:
    """Monthly fixed, variable, mixed and unclassified expense totals."""
    expenses = [item for item in classified if item.transaction.is_expense]
    groups = group_by_period(expenses, Granularity.MONTH)
    points = []
    for key in sorted(groups):
        totals = collect_totals(groups[key])
        points.append(
            CostBehaviorPoint(
                period=key,
                fixed=totals.fixed,
                variable=totals.variable,
                mixed=totals.mixed,
                unclassified=totals.unclassified,
            )
        )
    if limit is not None:
        points = points[-limit:] if limit > 0 else []
    return points


def growth_rates(points: Sequence[TrendPoint]) -> GrowthRates:
    """Growth of the latest bucket over the one before it."""
    if len(points) < 2:
        return GrowthRates(profit=ZERO, revenue=ZERO, expenses=ZERO)

    current, previous = points[-1], points[-2]

    def growth(now: Decimal, before: Decimal) -> Decimal:
        return percent(now - before, before) if before > 0 else ZERO

    return GrowthRates(
        profit=growth(current.profit, previous.profit),
        revenue=growth(current.revenue, previous.revenue),
        expenses=growth(current.expenses, previous.expenses),
    )


def _breakdown(amounts: dict[str, Decimal], total: Decimal) -> tuple[BreakdownItem, ...]:
    items = [
        BreakdownItem(label=label, amount=amount, percentage=percent(amount, total))
        for label, amount in amounts.items()
    ]
    items.sort(key=lambda item: (-item.amount, item.label))
    return tuple(items)


def expense_analysis(classified: Iterable[ClassifiedTransaction]) -> ExpenseAnalysis:
    """Break expenses down by category, cost type and cost nature."""
    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    by_type: dict[str, Decimal] = defaultdict(lambda: ZERO)
    by_nature: dict[str, Decimal] = defaultdict(lambda: ZERO)
    total = ZERO

    for item in classified:
        txn = item.transaction
        if not txn.is_expense:
            continue
        total += txn.amount
        by_category[txn.category or "Uncategorized"] += txn.amount
        classification = item.classification
        if classification is None:
            by_type[UNCLASSIFIED] += txn.amount
            by_nature[UNCLASSIFIED] += txn.amount
        else:
            by_type[classification.cost_type.value] += txn.amount
            by_nature[classification.cost_nature.value] += txn.amount

    categories = _breakdown(by_category, total)
    cost_types = _breakdown(by_type, total)
    return ExpenseAnalysis(
        total_costs=total,
        by_category=categories,
        by_cost_type=cost_types,
        by_cost_nature=_breakdown(by_nature, total),
        insights=tuple(expense_insights(categories, cost_types, total)),
    )


def expense_insights(
    categories: Sequence[BreakdownItem],
    cost_types: Sequence[BreakdownItem],
    total: Decimal,
) -> list[str]:
    """Plain-language observations about expense concentration."""
    insights = []
    if categories and categories[0].percentage > 40:
        top = categories[0]
        insights.append(
            f"Your highest expense category ({top.label}) represents "
            f"{top.percentage:.1f}% of total costs. Consider reviewing this area "
            "for potential savings."
        )

    fixed = next((item for item in cost_types if item.label == CostType.FIXED.value), None)
    if fixed is not None and fixed.percentage > 70:
        insights.append(
            f"High fixed costs ({fixed.percentage:.1f}%) may reduce flexibility. "
            "Consider strategies to convert some fixed costs to variable."
        )

    if total > 0:
        insights.append(
            "Regular expense monitoring and categorization helps identify cost "
            "optimization opportunities."
        )
    return insights


def profit_insights(summary: FinancialSummary) -> list[str]:
    """Plain-language observations about margins and break-even."""
    insights = []
    if summary.net_profit_margin > 15:
        insights.append(
            "Excellent profit margins! Your business is performing well above "
            "industry standards."
        )
    elif summary.net_profit_margin > 5:
        insights.append(
            "Healthy profit margins with room for improvement. Focus on cost "
            "optimization and revenue growth."
        )
    else:
        insights.append(
            "Profit margins are below recommended levels. Urgent attention needed "
            "for cost reduction and revenue optimization."
        )

    days = summary.break_even_days
    if days > 0:
        rounded = round(days)
        if days <= 15:
            insights.append(f"Quick break-even period ({rounded} days) indicates strong cash flow.")
        elif days <= 30:
            insights.append(f"Moderate break-even period ({rounded} days). Monitor cash flow carefully.")
        else:
            insights.append(
                f"Extended break-even period ({rounded} days) may indicate cash flow challenges."
            )
    return insights


def build_daily_metric(day: date, classified: Sequence[ClassifiedTransaction]) -> AnalyticsMetric:
    """Compute the metric row for one date from that date's transactions."""
    totals = collect_totals(item for item in classified if item.transaction.date == day)
    return AnalyticsMetric(
        date=day,
        total_revenue=totals.revenue,
        total_expenses=totals.expenses,
        gross_profit=totals.gross_profit,
        net_profit=totals.net_profit,
        fixed_costs=totals.fixed,
        variable_costs=totals.variable,
        direct_costs=totals.direct,
        indirect_costs=totals.indirect,
        transaction_count=totals.count,
    )


class AnalyticsService:
    """Service for computing analytics from stored transactions."""

    def __init__(self, db: Database):
        """Initialize analytics service.

        Args:
            db: Database instance
        """
        self.db = db

    def load_classified(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> list[ClassifiedTransaction]:
        """Load transactions in range paired with their classifications."""
        transactions = self.db.list_transactions(
            start_date=start_date, end_date=end_date, category=category
        )
        expense_ids = [t.id for t in transactions if t.is_expense]
        classifications = self.db.list_classifications(expense_ids) if expense_ids else {}
        return [
            ClassifiedTransaction(transaction=t, classification=classifications.get(t.id))
            for t in transactions
        ]

    def aggregate(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> FinancialSummary:
        """Summarize stored transactions for a date range."""
        return summarize(self.load_classified(start_date, end_date), start_date, end_date)

    def report(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        granularity: Granularity = Granularity.MONTH,
        periods: Optional[int] = 12,
    ) -> AnalyticsReport:
        """Build summary, trend series, cost behavior and insights in one pass.

        Args:
            start_date: Range start (inclusive)
            end_date: Range end (inclusive)
            granularity: Trend bucket size
            periods: Most recent trend buckets to keep

        Returns:
            AnalyticsReport
        """
        classified = self.load_classified(start_date, end_date)
        summary = summarize(classified, start_date, end_date)
        trend = trend_series(classified, granularity, periods)
        return AnalyticsReport(
            summary=summary,
            trend=tuple(trend),
            cost_behavior=tuple(cost_behavior_series(classified, periods)),
            growth=growth_rates(trend),
            insights=tuple(profit_insights(summary)),
        )

    def expense_analysis(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> ExpenseAnalysis:
        """Break down stored expenses for a date range, optionally one category."""
        return expense_analysis(self.load_classified(start_date, end_date, category))

    def list_daily_metrics(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[AnalyticsMetric]:
        """List stored daily metric rows."""
        return self.db.list_analytics_metrics(start_date=start_date, end_date=end_date)

    def refresh_daily_metrics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Insert metric rows for every date in range that has none yet.

        Existing rows are left untouched; use regenerate_daily_metric to
        recompute a date explicitly.

        Args:
            start_date: First date (defaults to three months before end_date)
            end_date: Last date (defaults to today)

        Returns:
            Number of rows inserted
        """
        if end_date is None:
            end_date = date.today()
        if start_date is None:
            start_date = end_date - relativedelta(months=3)

        existing = {m.date for m in self.db.list_analytics_metrics(start_date, end_date)}
        classified = self.load_classified(start_date, end_date)
        by_day: dict[date, list[ClassifiedTransaction]] = defaultdict(list)
        for item in classified:
            by_day[item.transaction.date].append(item)

        inserted = 0
        for day in iter_days(start_date, end_date):
            if day in existing:
                continue
            try:
                self.db.insert_analytics_metric(build_daily_metric(day, by_day.get(day, [])))
            except ConflictError:
                logger.debug("Metric row for %s was written concurrently; skipping", day)
                continue
            inserted += 1

        logger.info(
            "Inserted %d analytics metric rows for %s..%s", inserted, start_date, end_date
        )
        return inserted

    def regenerate_daily_metric(self, day: date) -> AnalyticsMetric:
        """Recompute and overwrite the metric row for one date."""
        metric = build_daily_metric(day, self.load_classified(day, day))
        self.db.replace_analytics_metric(metric)
        return metric
