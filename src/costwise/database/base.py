"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Iterable
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from costwise.domain.entities import (
    AnalyticsMetric,
    Budget,
    BusinessProfile,
    Classification,
    CostPattern,
    CustomClassificationRule,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for costwise.

    Groups the stores the engine collaborates with: transactions, the
    business profile, the pattern library, custom rules, classifications,
    daily analytics metrics and budgets. Write failures are raised as
    ``PersistenceError``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    def release_session(self) -> None:
        """Release any session held for the calling thread."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        date: date,
        amount: Decimal,
        type: TransactionType,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, oldest first."""
        pass

    # Business profile operations
    @abstractmethod
    def get_business_profile(self) -> Optional[BusinessProfile]:
        """Get the business profile, if one has been saved."""
        pass

    @abstractmethod
    def save_business_profile(self, profile: BusinessProfile) -> None:
        """Create or replace the business profile."""
        pass

    # Pattern library operations
    @abstractmethod
    def create_cost_pattern(self, pattern: CostPattern) -> int:
        """Add a pattern to the library. Returns pattern ID."""
        pass

    @abstractmethod
    def get_cost_pattern_by_name(self, pattern_name: str) -> Optional[CostPattern]:
        """Get pattern by its unique name."""
        pass

    @abstractmethod
    def list_cost_patterns(
        self, business_categories: Optional[Iterable[str]] = None
    ) -> list[CostPattern]:
        """List patterns, optionally restricted to the given business categories."""
        pass

    # Custom rule operations
    @abstractmethod
    def create_custom_rule(
        self,
        business_category: str,
        keyword: str,
        cost_type: str,
        cost_nature: str,
        confidence_score: float,
        owner: str = "default",
    ) -> int:
        """Create a custom classification rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_custom_rule(self, rule_id: int) -> Optional[CustomClassificationRule]:
        """Get custom rule by ID."""
        pass

    @abstractmethod
    def list_custom_rules(
        self, business_category: Optional[str] = None
    ) -> list[CustomClassificationRule]:
        """List custom rules, optionally filtered by business category."""
        pass

    @abstractmethod
    def delete_custom_rule(self, rule_id: int) -> None:
        """Delete a custom rule."""
        pass

    # Classification operations
    @abstractmethod
    def get_classification(self, transaction_id: int) -> Optional[Classification]:
        """Get the stored classification for a transaction."""
        pass

    @abstractmethod
    def list_classifications(
        self, transaction_ids: Optional[Iterable[int]] = None
    ) -> dict[int, Classification]:
        """Map transaction IDs to stored classifications."""
        pass

    @abstractmethod
    def save_classification(self, classification: Classification) -> bool:
        """Upsert a classification keyed by transaction ID.

        An automatic classification never replaces a stored manual override;
        in that case nothing is written and False is returned.
        """
        pass

    @abstractmethod
    def delete_classification(self, transaction_id: int) -> bool:
        """Delete the stored classification. Returns True if one existed."""
        pass

    # Analytics metric operations
    @abstractmethod
    def get_analytics_metric(self, metric_date: date) -> Optional[AnalyticsMetric]:
        """Get the metric row for a date."""
        pass

    @abstractmethod
    def list_analytics_metrics(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[AnalyticsMetric]:
        """List metric rows, oldest first."""
        pass

    @abstractmethod
    def insert_analytics_metric(self, metric: AnalyticsMetric) -> int:
        """Insert a metric row. Raises ConflictError if the date already has one."""
        pass

    @abstractmethod
    def replace_analytics_metric(self, metric: AnalyticsMetric) -> int:
        """Insert or overwrite the metric row for the metric's date."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        name: str,
        category: str,
        allocated_amount: Decimal,
        start_date: date,
        end_date: date,
        period: str = "monthly",
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self) -> list[Budget]:
        """List all budgets."""
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget."""
        pass

    @abstractmethod
    def update_budget_spent_amount(self, budget_id: int, spent_amount: Decimal) -> None:
        """Write back a recomputed spent amount."""
        pass
