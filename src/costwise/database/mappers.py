"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the string <-> enum
translation for cost types, natures and classification sources.
"""

from decimal import Decimal

from costwise.domain import entities as domain
from costwise.database.models import (
    Transaction as ORMTransaction,
    BusinessProfile as ORMBusinessProfile,
    CostPattern as ORMCostPattern,
    CustomClassificationRule as ORMCustomClassificationRule,
    TransactionClassification as ORMTransactionClassification,
    AnalyticsMetric as ORMAnalyticsMetric,
    Budget as ORMBudget,
)


def _decimal(value) -> Decimal:
    return Decimal("0") if value is None else Decimal(value)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=_decimal(orm_transaction.amount),
        category=orm_transaction.category,
        type=domain.TransactionType(orm_transaction.type),
        created_at=orm_transaction.created_at,
    )


def business_profile_to_domain(orm_profile: ORMBusinessProfile) -> domain.BusinessProfile:
    """Convert SQLAlchemy BusinessProfile model to domain BusinessProfile entity."""
    return domain.BusinessProfile(
        category=orm_profile.category or domain.GENERAL_CATEGORY,
        business_model=orm_profile.business_model or "",
        core_activities=tuple(orm_profile.core_activities or ()),
        revenue_streams=tuple(orm_profile.revenue_streams or ()),
        cost_centers=tuple(orm_profile.cost_centers or ()),
        size_scale=orm_profile.size_scale,
        revenue_range=orm_profile.revenue_range,
    )


def cost_pattern_to_domain(orm_pattern: ORMCostPattern) -> domain.CostPattern:
    """Convert SQLAlchemy CostPattern model to domain CostPattern entity."""
    return domain.CostPattern(
        id=orm_pattern.id,
        pattern_name=orm_pattern.pattern_name,
        business_category=orm_pattern.business_category,
        keywords=tuple(orm_pattern.keywords or ()),
        typical_cost_type=domain.CostType(orm_pattern.typical_cost_type),
        typical_cost_nature=domain.CostNature(orm_pattern.typical_cost_nature),
        relevance_weight=float(orm_pattern.relevance_weight),
    )


def custom_rule_to_domain(
    orm_rule: ORMCustomClassificationRule,
) -> domain.CustomClassificationRule:
    """Convert SQLAlchemy CustomClassificationRule model to domain entity."""
    return domain.CustomClassificationRule(
        id=orm_rule.id,
        owner=orm_rule.owner,
        business_category=orm_rule.business_category,
        keyword=orm_rule.keyword,
        cost_type=domain.CostType(orm_rule.cost_type),
        cost_nature=domain.CostNature(orm_rule.cost_nature),
        confidence_score=float(orm_rule.confidence_score),
        created_at=orm_rule.created_at,
    )


def classification_to_domain(
    orm_classification: ORMTransactionClassification,
) -> domain.Classification:
    """Convert SQLAlchemy TransactionClassification model to domain Classification."""
    return domain.Classification(
        transaction_id=orm_classification.transaction_id,
        cost_type=domain.CostType(orm_classification.cost_type),
        cost_nature=domain.CostNature(orm_classification.cost_nature),
        confidence=float(orm_classification.confidence),
        source=domain.ClassificationSource(orm_classification.source),
        updated_at=orm_classification.updated_at,
    )


def analytics_metric_to_domain(orm_metric: ORMAnalyticsMetric) -> domain.AnalyticsMetric:
    """Convert SQLAlchemy AnalyticsMetric model to domain AnalyticsMetric entity."""
    return domain.AnalyticsMetric(
        id=orm_metric.id,
        date=orm_metric.metric_date,
        total_revenue=_decimal(orm_metric.total_revenue),
        total_expenses=_decimal(orm_metric.total_expenses),
        gross_profit=_decimal(orm_metric.gross_profit),
        net_profit=_decimal(orm_metric.net_profit),
        fixed_costs=_decimal(orm_metric.fixed_costs),
        variable_costs=_decimal(orm_metric.variable_costs),
        direct_costs=_decimal(orm_metric.direct_costs),
        indirect_costs=_decimal(orm_metric.indirect_costs),
        transaction_count=orm_metric.transaction_count,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        name=orm_budget.name,
        category=orm_budget.category,
        allocated_amount=_decimal(orm_budget.allocated_amount),
        spent_amount=_decimal(orm_budget.spent_amount),
        start_date=orm_budget.start_date,
        end_date=orm_budget.end_date,
        period=orm_budget.period,
    )
