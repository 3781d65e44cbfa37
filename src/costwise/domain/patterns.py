"""Pattern library domain service."""

import logging
from typing import Iterable, Optional, Sequence

from costwise.database.base import Database
from costwise.domain.entities import (
    GENERAL_CATEGORY,
    CostNature,
    CostPattern,
    CostType,
)

logger = logging.getLogger(__name__)


def _pattern(
    name: str,
    category: str,
    keywords: Sequence[str],
    cost_type: CostType,
    cost_nature: CostNature,
    weight: float,
) -> CostPattern:
    return CostPattern(
        pattern_name=name,
        business_category=category,
        keywords=tuple(keywords),
        typical_cost_type=cost_type,
        typical_cost_nature=cost_nature,
        relevance_weight=weight,
    )


# Built-in catalog. Every keyword hit adds the pattern's weight to its score,
# so broad single-word keywords get weights below the 0.5 threshold.
DEFAULT_PATTERNS: tuple[CostPattern, ...] = (
    _pattern(
        "Direct materials",
        GENERAL_CATEGORY,
        ["raw material", "materials", "inventory", "stock", "manufacturing",
         "production", "direct labor", "labor cost", "wages", "factory", "assembly"],
        CostType.VARIABLE,
        CostNature.DIRECT,
        0.6,
    ),
    _pattern(
        "Procurement",
        GENERAL_CATEGORY,
        ["cogs", "cost of goods", "purchase", "supplier", "vendor payment", "procurement"],
        CostType.VARIABLE,
        CostNature.DIRECT,
        0.4,
    ),
    _pattern(
        "Overhead and utilities",
        GENERAL_CATEGORY,
        ["overhead", "utilities", "electricity", "water", "maintenance", "repair",
         "cleaning", "security", "supervision"],
        CostType.FIXED,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Facilities",
        GENERAL_CATEGORY,
        ["facility", "building", "premises", "workshop", "office space", "factory rent"],
        CostType.FIXED,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Fixed administrative",
        GENERAL_CATEGORY,
        ["rent", "lease", "salary", "salaries", "insurance", "license", "permit",
         "subscription", "depreciation", "amortization"],
        CostType.FIXED,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Financing and professional fees",
        GENERAL_CATEGORY,
        ["loan payment", "mortgage", "interest", "bank charges", "legal fees", "audit",
         "accounting"],
        CostType.FIXED,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Variable selling",
        GENERAL_CATEGORY,
        ["commission", "shipping", "delivery", "freight", "fuel", "packaging",
         "per unit", "per piece"],
        CostType.VARIABLE,
        CostNature.DIRECT,
        0.6,
    ),
    _pattern(
        "Variable marketing",
        GENERAL_CATEGORY,
        ["marketing spend", "advertising", "promotion", "campaign", "per sale",
         "performance bonus"],
        CostType.VARIABLE,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Communication",
        GENERAL_CATEGORY,
        ["telephone", "phone", "internet", "mobile", "communication", "data plan",
         "cloud service"],
        CostType.MIXED,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Vehicles and travel",
        GENERAL_CATEGORY,
        ["vehicle", "car", "truck", "fleet", "transportation", "travel"],
        CostType.MIXED,
        CostNature.INDIRECT,
        0.4,
    ),
    _pattern(
        "Production equipment",
        "Manufacturing",
        ["machine", "equipment", "tool", "spare parts", "consumables"],
        CostType.VARIABLE,
        CostNature.DIRECT,
        0.6,
    ),
    _pattern(
        "Store operations",
        "Retail",
        ["store rent", "shop", "display", "pos", "cashier"],
        CostType.FIXED,
        CostNature.INDIRECT,
        0.6,
    ),
    _pattern(
        "Delivered expertise",
        "Services",
        ["consultant fee", "professional service", "expertise", "consultation"],
        CostType.VARIABLE,
        CostNature.DIRECT,
        0.6,
    ),
    _pattern(
        "Technology infrastructure",
        "Technology",
        ["software", "hosting", "server", "domain", "api", "cloud", "development"],
        CostType.MIXED,
        CostNature.INDIRECT,
        0.6,
    ),
)


def order_for_category(
    patterns: Iterable[CostPattern], business_category: Optional[str]
) -> list[CostPattern]:
    """Keep patterns scoped to the category or the wildcard, specific ones first."""
    category = business_category or GENERAL_CATEGORY
    scoped = [
        p for p in patterns if p.business_category in (category, GENERAL_CATEGORY)
    ]
    return sorted(
        scoped,
        key=lambda p: (p.business_category != category, p.pattern_name),
    )


def keyword_suggestions(
    description: Optional[str], patterns: Iterable[CostPattern]
) -> list[str]:
    """Distinct catalog keywords found in a description, in catalog order."""
    desc = (description or "").lower()
    matched: list[str] = []
    for pattern in patterns:
        for keyword in pattern.keywords:
            if keyword.lower() in desc and keyword not in matched:
                matched.append(keyword)
    return matched


class PatternLibrary:
    """Service for reading and seeding the cost pattern catalog."""

    def __init__(self, db: Database):
        """Initialize pattern library.

        Args:
            db: Database instance
        """
        self.db = db

    def patterns_for(self, business_category: Optional[str]) -> list[CostPattern]:
        """Get patterns applicable to a business category.

        Args:
            business_category: Profile category, or None for the wildcard only

        Returns:
            Patterns for the category followed by wildcard patterns
        """
        category = business_category or GENERAL_CATEGORY
        patterns = self.db.list_cost_patterns(
            business_categories={category, GENERAL_CATEGORY}
        )
        return order_for_category(patterns, category)

    def list_patterns(self) -> list[CostPattern]:
        """List the whole catalog."""
        return self.db.list_cost_patterns()

    def seed_defaults(self, patterns: Sequence[CostPattern] = DEFAULT_PATTERNS) -> int:
        """Insert catalog patterns that are not stored yet.

        Args:
            patterns: Patterns to seed (defaults to the built-in catalog)

        Returns:
            Number of patterns inserted
        """
        inserted = 0
        for pattern in patterns:
            if self.db.get_cost_pattern_by_name(pattern.pattern_name) is not None:
                continue
            self.db.create_cost_pattern(pattern)
            inserted += 1
        logger.info("Seeded %d cost patterns", inserted)
        return inserted
