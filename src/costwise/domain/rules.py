"""Custom classification rule domain service."""

import logging
from typing import Optional

from costwise.database.base import Database
from costwise.domain.business_context import BusinessContextService
from costwise.domain.entities import CostNature, CostType, CustomClassificationRule
from costwise.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    invalid_choice,
    rule_not_found,
)

logger = logging.getLogger(__name__)


def parse_cost_type(value: CostType | str) -> CostType:
    """Coerce a string to CostType, raising ValidationError when invalid."""
    try:
        return CostType(value.lower() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError(invalid_choice("cost type", value, [t.value for t in CostType]))


def parse_cost_nature(value: CostNature | str) -> CostNature:
    """Coerce a string to CostNature, raising ValidationError when invalid."""
    try:
        return CostNature(value.lower() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError(
            invalid_choice("cost nature", value, [n.value for n in CostNature])
        )


class CustomRuleService:
    """Service for managing user keyword overrides."""

    def __init__(self, db: Database, owner: str = "default"):
        """Initialize custom rule service.

        Args:
            db: Database instance
            owner: Owner recorded on new rules
        """
        self.db = db
        self.owner = owner
        self.context = BusinessContextService(db)

    def create_rule(
        self,
        keyword: str,
        cost_type: CostType | str,
        cost_nature: CostNature | str,
        confidence: float = 0.8,
        category: Optional[str] = None,
    ) -> int:
        """Create a custom rule.

        Args:
            keyword: Keyword matched as a case-insensitive substring
            cost_type: Cost type to assign
            cost_nature: Cost nature to assign
            confidence: Confidence score in [0, 1]
            category: Business category the rule applies to (defaults to
                the profile category)

        Returns:
            Rule ID

        Raises:
            ValidationError: If any argument is invalid
        """
        keyword = (keyword or "").strip().lower()
        if not keyword:
            raise ValidationError("Rule keyword must not be empty")
        if not 0 <= confidence <= 1:
            raise ValidationError(f"Confidence must be between 0 and 1, got {confidence}")

        business_category = (category or "").strip() or self.context.business_category()

        return self.db.create_custom_rule(
            business_category=business_category,
            keyword=keyword,
            cost_type=parse_cost_type(cost_type).value,
            cost_nature=parse_cost_nature(cost_nature).value,
            confidence_score=float(confidence),
            owner=self.owner,
        )

    def add_custom_rule(
        self,
        category: Optional[str],
        keyword: str,
        cost_type: CostType | str,
        cost_nature: CostNature | str,
        confidence: float = 0.8,
    ) -> bool:
        """Add a custom rule, reporting success as a boolean.

        Args:
            category: Business category, or None for the profile category
            keyword: Keyword to match
            cost_type: Cost type to assign
            cost_nature: Cost nature to assign
            confidence: Confidence score in [0, 1]

        Returns:
            True if the rule was stored, False otherwise
        """
        try:
            self.create_rule(
                keyword=keyword,
                cost_type=cost_type,
                cost_nature=cost_nature,
                confidence=confidence,
                category=category,
            )
        except DomainError as e:
            logger.warning("Custom rule for keyword %r not added: %s", keyword, e)
            return False
        return True

    def get_rule(self, rule_id: int) -> Optional[CustomClassificationRule]:
        """Get rule by ID."""
        return self.db.get_custom_rule(rule_id)

    def list_rules(self, category: Optional[str] = None) -> list[CustomClassificationRule]:
        """List rules, optionally filtered by business category."""
        return self.db.list_custom_rules(business_category=category)

    def rules_for(self, business_category: str) -> list[CustomClassificationRule]:
        """Rules the classifier should consult for a business category."""
        return self.db.list_custom_rules(business_category=business_category)

    def delete_rule(self, rule_id: int) -> None:
        """Delete a rule.

        Raises:
            NotFoundError: If rule doesn't exist
        """
        if self.db.get_custom_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.delete_custom_rule(rule_id)
