"""Cost classifier.

Assigns a cost type (fixed/variable/mixed) and cost nature (direct/indirect)
to an expense description. The classifier is a pure function of its inputs:
the business profile, custom rules and pattern library are passed in, never
looked up.

Resolution order, first satisfied step wins:

1. custom rules whose keyword occurs in the description or category
2. pattern library scoring, when the best score clears the threshold
3. business-rule heuristics, when a profile is available
4. a keyword-only fallback with fixed confidence, when it is not

All keyword checks are case-insensitive substring matches.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from costwise.domain.entities import (
    GENERAL_CATEGORY,
    BusinessProfile,
    ClassificationMethod,
    CostClassification,
    CostNature,
    CostPattern,
    CostType,
    CustomClassificationRule,
)
from costwise.domain.patterns import order_for_category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassifierSettings:
    """Thresholds, caps and lexicons used by the classifier."""

    pattern_threshold: float = 0.5
    max_pattern_confidence: float = 0.95
    max_rule_confidence: float = 0.95
    base_confidence: float = 0.6
    max_business_confidence: float = 0.9
    context_free_confidence: float = 0.5
    lexicon_boost: float = 0.2
    context_boost: float = 0.15
    industry_boost: float = 0.2
    fixed_cost_keywords: tuple[str, ...] = (
        "rent",
        "insurance",
        "salary",
        "subscription",
        "license",
        "depreciation",
    )
    variable_cost_keywords: tuple[str, ...] = (
        "materials",
        "inventory",
        "shipping",
        "commission",
        "per unit",
    )
    direct_cost_keywords: tuple[str, ...] = (
        "materials",
        "inventory",
        "raw",
        "production",
        "labor",
        "manufacturing",
    )
    industry_direct_keywords: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("Manufacturing", ("material", "labor")),
        ("Services", ("consultant", "professional")),
    )


DEFAULT_SETTINGS = ClassifierSettings()


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword and keyword.lower() in text for keyword in keywords)


def _confidence(value: float, cap: float) -> float:
    return round(min(value, cap), 4)


class CostClassifier:
    """Classify expense descriptions into cost type and cost nature."""

    def __init__(self, settings: ClassifierSettings = DEFAULT_SETTINGS):
        """Initialize classifier.

        Args:
            settings: Thresholds and lexicons
        """
        self.settings = settings

    def classify(
        self,
        description: Optional[str],
        amount: Optional[Decimal],
        category: Optional[str],
        profile: Optional[BusinessProfile],
        rules: Sequence[CustomClassificationRule] = (),
        patterns: Sequence[CostPattern] = (),
    ) -> CostClassification:
        """Classify one expense.

        Args:
            description: Transaction description (None or empty is allowed)
            amount: Transaction amount (not weighed by the current rules)
            category: Free-text transaction category
            profile: Business profile, or None when no profile exists
            rules: Custom classification rules to consult first
            patterns: Pattern library entries

        Returns:
            CostClassification with the method that produced it
        """
        desc = (description or "").lower()
        cat = (category or "").lower()
        business_category = profile.category if profile else GENERAL_CATEGORY

        result = self.match_custom_rule(desc, cat, business_category, rules)
        if result is None:
            result = self.score_patterns(desc, cat, business_category, patterns)
        if result is None:
            if profile is not None:
                result = self.apply_business_rules(desc, profile)
            else:
                result = self.keyword_fallback(desc)

        logger.debug(
            "Classified %r as %s/%s (%.2f via %s)",
            description,
            result.cost_type.value,
            result.cost_nature.value,
            result.confidence,
            result.method.value,
        )
        return result

    def match_custom_rule(
        self,
        desc: str,
        cat: str,
        business_category: str,
        rules: Sequence[CustomClassificationRule],
    ) -> Optional[CostClassification]:
        """Apply the best matching custom rule, if any.

        Several matches are resolved by longest keyword, then highest
        confidence, then lowest rule id.
        """
        matches = [
            rule
            for rule in rules
            if rule.business_category == business_category
            and rule.keyword
            and (rule.keyword.lower() in desc or rule.keyword.lower() in cat)
        ]
        if not matches:
            return None

        best = min(
            matches,
            key=lambda r: (-len(r.keyword), -r.confidence_score, r.id),
        )
        return CostClassification(
            cost_type=best.cost_type,
            cost_nature=best.cost_nature,
            confidence=_confidence(best.confidence_score, self.settings.max_rule_confidence),
            method=ClassificationMethod.CUSTOM_RULE,
        )

    def score_patterns(
        self,
        desc: str,
        cat: str,
        business_category: str,
        patterns: Sequence[CostPattern],
    ) -> Optional[CostClassification]:
        """Score patterns by summed keyword weights and keep the best one."""
        best_pattern: Optional[CostPattern] = None
        best_score = 0.0

        for pattern in order_for_category(patterns, business_category):
            score = sum(
                pattern.relevance_weight
                for keyword in pattern.keywords
                if keyword and (keyword.lower() in desc or keyword.lower() in cat)
            )
            if score > best_score:
                best_pattern = pattern
                best_score = score

        if best_pattern is None or best_score <= self.settings.pattern_threshold:
            return None

        return CostClassification(
            cost_type=best_pattern.typical_cost_type,
            cost_nature=best_pattern.typical_cost_nature,
            confidence=_confidence(best_score, self.settings.max_pattern_confidence),
            method=ClassificationMethod.PATTERN,
        )

    def apply_business_rules(self, desc: str, profile: BusinessProfile) -> CostClassification:
        """Heuristic fallback driven by lexicons and the business profile."""
        s = self.settings
        cost_type = CostType.VARIABLE
        cost_nature = CostNature.INDIRECT
        confidence = s.base_confidence

        if _contains_any(desc, s.fixed_cost_keywords):
            cost_type = CostType.FIXED
            confidence += s.lexicon_boost

        if _contains_any(desc, s.variable_cost_keywords):
            cost_type = CostType.VARIABLE
            confidence += s.lexicon_boost

        if _contains_any(desc, profile.revenue_streams) or _contains_any(
            desc, profile.core_activities
        ):
            cost_nature = CostNature.DIRECT
            confidence += s.context_boost

        # A named cost center attributes the cost: production-type spend is
        # direct and variable, anything else is overhead of that center
        if _contains_any(desc, profile.cost_centers):
            confidence += s.context_boost
            if _contains_any(desc, s.direct_cost_keywords):
                cost_type = CostType.VARIABLE
                cost_nature = CostNature.DIRECT

        for industry, keywords in s.industry_direct_keywords:
            if profile.category == industry and _contains_any(desc, keywords):
                cost_type = CostType.VARIABLE
                cost_nature = CostNature.DIRECT
                confidence += s.industry_boost

        return CostClassification(
            cost_type=cost_type,
            cost_nature=cost_nature,
            confidence=_confidence(confidence, s.max_business_confidence),
            method=ClassificationMethod.BUSINESS_RULES,
        )

    def keyword_fallback(self, desc: str) -> CostClassification:
        """Context-free fallback used when no business profile exists."""
        s = self.settings
        cost_type = CostType.FIXED if _contains_any(desc, s.fixed_cost_keywords) else CostType.VARIABLE
        cost_nature = (
            CostNature.DIRECT if _contains_any(desc, s.direct_cost_keywords) else CostNature.INDIRECT
        )
        return CostClassification(
            cost_type=cost_type,
            cost_nature=cost_nature,
            confidence=s.context_free_confidence,
            method=ClassificationMethod.KEYWORD_FALLBACK,
        )
