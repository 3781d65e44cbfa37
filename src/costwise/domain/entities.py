"""Domain model entities for costwise.

These are pure data classes representing business concepts, independent of
database schema. The classifier, aggregator and variance engine only ever see
these types, so the store behind them can change freely.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

GENERAL_CATEGORY = "General"


class TransactionType(str, Enum):
    """Kind of money movement recorded by a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    INVESTMENT = "investment"
    REFUND = "refund"


class CostType(str, Enum):
    """Whether an expense scales with business activity."""

    FIXED = "fixed"
    VARIABLE = "variable"
    MIXED = "mixed"


class CostNature(str, Enum):
    """Whether an expense is attributable to revenue-generating activity."""

    DIRECT = "direct"
    INDIRECT = "indirect"


class ClassificationSource(str, Enum):
    """Who produced a stored classification."""

    AUTOMATIC = "automatic"
    MANUAL_OVERRIDE = "manual_override"


class ClassificationMethod(str, Enum):
    """Step of the classifier fallback chain that produced a result."""

    CUSTOM_RULE = "custom_rule"
    PATTERN = "pattern"
    BUSINESS_RULES = "business_rules"
    KEYWORD_FALLBACK = "keyword_fallback"


class VarianceStatus(str, Enum):
    """Budget variance status."""

    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    ON_TRACK = "on-track"


class Granularity(str, Enum):
    """Bucket size for trend series."""

    DAY = "day"
    MONTH = "month"


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    date: date
    description: Optional[str]
    amount: Decimal
    category: Optional[str]
    type: TransactionType
    created_at: Optional[datetime] = None

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_revenue(self) -> bool:
        return self.type in (TransactionType.INCOME, TransactionType.REFUND)


@dataclass(frozen=True)
class BusinessProfile:
    """Business profile used to bias classification."""

    category: str = GENERAL_CATEGORY
    business_model: str = ""
    core_activities: tuple[str, ...] = ()
    revenue_streams: tuple[str, ...] = ()
    cost_centers: tuple[str, ...] = ()
    size_scale: Optional[str] = None
    revenue_range: Optional[str] = None


@dataclass(frozen=True)
class CostPattern:
    """Named cost pattern from the pattern library."""

    pattern_name: str
    business_category: str
    keywords: tuple[str, ...]
    typical_cost_type: CostType
    typical_cost_nature: CostNature
    relevance_weight: float
    id: Optional[int] = None


@dataclass(frozen=True)
class CustomClassificationRule:
    """User-supplied keyword override."""

    id: int
    owner: str
    business_category: str
    keyword: str
    cost_type: CostType
    cost_nature: CostNature
    confidence_score: float
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CostClassification:
    """Result of classifying a single expense description."""

    cost_type: CostType
    cost_nature: CostNature
    confidence: float
    method: ClassificationMethod


@dataclass(frozen=True)
class Classification:
    """Stored classification, one per expense transaction."""

    transaction_id: int
    cost_type: CostType
    cost_nature: CostNature
    confidence: float
    source: ClassificationSource = ClassificationSource.AUTOMATIC
    updated_at: Optional[datetime] = None

    @property
    def manual_override(self) -> bool:
        return self.source == ClassificationSource.MANUAL_OVERRIDE


@dataclass(frozen=True)
class ClassifiedTransaction:
    """A transaction paired with its classification, if any."""

    transaction: Transaction
    classification: Optional[Classification] = None


@dataclass(frozen=True)
class AnalyticsMetric:
    """Daily analytics metric row."""

    date: date
    total_revenue: Decimal
    total_expenses: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    fixed_costs: Decimal
    variable_costs: Decimal
    direct_costs: Decimal
    indirect_costs: Decimal
    transaction_count: int
    id: Optional[int] = None


@dataclass(frozen=True)
class Budget:
    """Budget domain entity."""

    id: int
    name: str
    category: str
    allocated_amount: Decimal
    spent_amount: Decimal
    start_date: date
    end_date: date
    period: str


@dataclass(frozen=True)
class BudgetVariance:
    """Budget versus actual spend for one category."""

    category: str
    budgeted: Decimal
    actual: Decimal
    variance: Decimal
    variance_percent: Decimal
    status: VarianceStatus


@dataclass(frozen=True)
class FinancialSummary:
    """Aggregated financial metrics for a date range."""

    start_date: Optional[date]
    end_date: Optional[date]
    days_in_range: int
    transaction_count: int
    total_revenue: Decimal
    total_expenses: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    gross_profit_margin: Decimal
    net_profit_margin: Decimal
    fixed_costs: Decimal
    variable_costs: Decimal
    mixed_costs: Decimal
    direct_costs: Decimal
    indirect_costs: Decimal
    unclassified_costs: Decimal
    contribution_margin: Decimal
    contribution_margin_ratio: Decimal
    average_daily_revenue: Decimal
    break_even_days: Decimal
    break_even_revenue: Decimal
    margin_of_safety: Decimal
    margin_of_safety_days: Decimal


@dataclass(frozen=True)
class TrendPoint:
    """One bucket of a trend series."""

    period: str
    revenue: Decimal
    expenses: Decimal
    profit: Decimal
    fixed_costs: Decimal
    variable_costs: Decimal
    direct_costs: Decimal
    indirect_costs: Decimal
    growth_rate: Decimal


@dataclass(frozen=True)
class CostBehaviorPoint:
    """Monthly split of expenses by cost type."""

    period: str
    fixed: Decimal
    variable: Decimal
    mixed: Decimal
    unclassified: Decimal


@dataclass(frozen=True)
class GrowthRates:
    """Latest bucket growth versus the one before it, in percent."""

    profit: Decimal
    revenue: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class BreakdownItem:
    """Amount and share of a total for one label."""

    label: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class ExpenseAnalysis:
    """Expense totals broken down by category, cost type and cost nature."""

    total_costs: Decimal
    by_category: tuple[BreakdownItem, ...]
    by_cost_type: tuple[BreakdownItem, ...]
    by_cost_nature: tuple[BreakdownItem, ...]
    insights: tuple[str, ...] = ()


class OutcomeStatus(str, Enum):
    """Per-item status of a bulk classification run."""

    CLASSIFIED = "classified"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ClassificationOutcome:
    """Result of classifying one transaction in a bulk run."""

    transaction_id: int
    status: OutcomeStatus
    classification: Optional[CostClassification] = None
    error: Optional[str] = None
    attempts: int = 0


@dataclass(frozen=True)
class BulkClassificationResult:
    """Collected per-item outcomes of a bulk run."""

    outcomes: tuple[ClassificationOutcome, ...] = field(default_factory=tuple)

    def _with_status(self, status: OutcomeStatus) -> list[ClassificationOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def classified(self) -> list[ClassificationOutcome]:
        return self._with_status(OutcomeStatus.CLASSIFIED)

    @property
    def skipped(self) -> list[ClassificationOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[ClassificationOutcome]:
        return self._with_status(OutcomeStatus.FAILED)


@dataclass(frozen=True)
class AnalyticsReport:
    """Summary plus trend series for a date range."""

    summary: FinancialSummary
    trend: tuple[TrendPoint, ...]
    cost_behavior: tuple[CostBehaviorPoint, ...]
    growth: GrowthRates
    insights: tuple[str, ...] = ()
