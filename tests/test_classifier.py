"""Tests for the pure cost classifier."""

import pytest

from costwise.domain.classifier import ClassifierSettings, CostClassifier
from costwise.domain.entities import (
    BusinessProfile,
    ClassificationMethod,
    CostNature,
    CostType,
    CustomClassificationRule,
)
from costwise.domain.patterns import DEFAULT_PATTERNS


def _rule(rule_id, keyword, cost_type, cost_nature, confidence=0.8, category="General"):
    return CustomClassificationRule(
        id=rule_id,
        owner="default",
        business_category=category,
        keyword=keyword,
        cost_type=cost_type,
        cost_nature=cost_nature,
        confidence_score=confidence,
    )


@pytest.fixture
def classifier():
    return CostClassifier()


class TestPatternScoring:
    """Pattern library step."""

    def test_office_rent_is_fixed_indirect(self, classifier):
        result = classifier.classify("Office Rent", None, None, None, patterns=DEFAULT_PATTERNS)

        assert result.cost_type == CostType.FIXED
        assert result.cost_nature == CostNature.INDIRECT
        assert result.method == ClassificationMethod.PATTERN
        assert result.confidence == pytest.approx(0.6)

    def test_raw_materials_sum_is_capped(self, classifier):
        """Two keyword hits sum to 1.2 and are capped at 0.95."""
        result = classifier.classify(
            "Raw Materials Purchase", None, None, None, patterns=DEFAULT_PATTERNS
        )

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT
        assert result.method == ClassificationMethod.PATTERN
        assert result.confidence == pytest.approx(0.95)

    def test_category_text_is_matched(self, classifier):
        result = classifier.classify("Monthly bill", None, "Utilities", None, patterns=DEFAULT_PATTERNS)

        assert result.cost_type == CostType.FIXED
        assert result.method == ClassificationMethod.PATTERN

    def test_score_at_threshold_falls_through(self, classifier):
        """A single 0.4-weight hit does not clear the 0.5 threshold."""
        result = classifier.classify("Vendor payment", None, None, None, patterns=DEFAULT_PATTERNS)

        assert result.method == ClassificationMethod.KEYWORD_FALLBACK

    def test_threshold_is_tunable(self):
        classifier = CostClassifier(ClassifierSettings(pattern_threshold=0.3))

        result = classifier.classify("Vendor payment", None, None, None, patterns=DEFAULT_PATTERNS)

        assert result.method == ClassificationMethod.PATTERN
        assert result.cost_nature == CostNature.DIRECT
        assert result.confidence == pytest.approx(0.4)

    def test_patterns_of_other_categories_are_ignored(self, classifier):
        """'software' only appears in the Technology pattern."""
        result = classifier.classify("Software renewal", None, None, None, patterns=DEFAULT_PATTERNS)
        assert result.method == ClassificationMethod.KEYWORD_FALLBACK

        tech = BusinessProfile(category="Technology")
        result = classifier.classify("Software renewal", None, None, tech, patterns=DEFAULT_PATTERNS)
        assert result.method == ClassificationMethod.PATTERN
        assert result.cost_type == CostType.MIXED


class TestBusinessRules:
    """Profile-driven fallback step."""

    def test_office_rent_without_patterns(self, classifier):
        result = classifier.classify("Office Rent", None, None, BusinessProfile())

        assert result.cost_type == CostType.FIXED
        assert result.cost_nature == CostNature.INDIRECT
        assert result.method == ClassificationMethod.BUSINESS_RULES
        assert result.confidence == pytest.approx(0.8)

    def test_manufacturing_materials_are_direct_variable(self, classifier):
        profile = BusinessProfile(category="Manufacturing")

        result = classifier.classify("Raw Materials Purchase", None, None, profile)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT
        assert result.confidence == pytest.approx(0.9)

    def test_services_consultant_is_direct(self, classifier):
        profile = BusinessProfile(category="Services")

        result = classifier.classify("Freelance consultant", None, None, profile)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT
        assert result.confidence == pytest.approx(0.8)

    def test_revenue_stream_makes_cost_direct(self, classifier):
        profile = BusinessProfile(category="Retail", revenue_streams=("Catering",))

        result = classifier.classify("Catering supplies", None, None, profile)

        assert result.cost_nature == CostNature.DIRECT
        assert result.confidence == pytest.approx(0.75)

    def test_default_is_variable_indirect(self, classifier):
        result = classifier.classify("Miscellaneous", None, None, BusinessProfile())

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.INDIRECT
        assert result.confidence == pytest.approx(0.6)

    def test_cost_center_overhead_is_indirect(self, classifier):
        profile = BusinessProfile(category="Retail", cost_centers=("Warehouse",))

        result = classifier.classify("Warehouse cleaning", None, None, profile)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.INDIRECT
        assert result.confidence == pytest.approx(0.75)

    def test_cost_center_production_spend_is_direct_variable(self, classifier):
        profile = BusinessProfile(category="Retail", cost_centers=("bakery",))

        result = classifier.classify("Bakery inventory top-up", None, None, profile)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT
        # 0.6 + 0.2 for "inventory" + 0.15 for the cost center, capped
        assert result.confidence == pytest.approx(0.9)

    def test_cost_center_boost_is_capped(self, classifier):
        profile = BusinessProfile(
            category="Manufacturing", core_activities=("assembly",), cost_centers=("plant",)
        )

        result = classifier.classify("Plant assembly labor", None, None, profile)

        assert result.cost_nature == CostNature.DIRECT
        assert result.confidence == pytest.approx(0.9)


class TestKeywordFallback:
    """Context-free step when there is no profile."""

    def test_office_rent_without_profile(self, classifier):
        result = classifier.classify("Office Rent", None, None, None)

        assert result.cost_type == CostType.FIXED
        assert result.cost_nature == CostNature.INDIRECT
        assert result.method == ClassificationMethod.KEYWORD_FALLBACK
        assert result.confidence == pytest.approx(0.5)

    def test_production_is_direct(self, classifier):
        result = classifier.classify("Production run", None, None, None)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT

    @pytest.mark.parametrize("description", [None, ""])
    def test_empty_description_is_not_an_error(self, classifier, description):
        result = classifier.classify(description, None, None, None, patterns=DEFAULT_PATTERNS)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.INDIRECT
        assert result.confidence == pytest.approx(0.5)


class TestCustomRules:
    """Custom rules take precedence over every other step."""

    def test_rule_beats_patterns(self, classifier):
        rules = [_rule(1, "rent", CostType.VARIABLE, CostNature.DIRECT, 0.9)]

        result = classifier.classify("Office Rent", None, None, None, rules=rules, patterns=DEFAULT_PATTERNS)

        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT
        assert result.method == ClassificationMethod.CUSTOM_RULE
        assert result.confidence == pytest.approx(0.9)

    def test_rule_confidence_is_capped(self, classifier):
        rules = [_rule(1, "aws", CostType.MIXED, CostNature.INDIRECT, 1.0)]

        result = classifier.classify("AWS invoice", None, None, None, rules=rules)

        assert result.confidence == pytest.approx(0.95)

    def test_rule_matches_case_insensitively_in_category(self, classifier):
        rules = [_rule(1, "cloud", CostType.MIXED, CostNature.DIRECT)]

        result = classifier.classify("Invoice 42", None, "CLOUD Costs", None, rules=rules)

        assert result.method == ClassificationMethod.CUSTOM_RULE

    def test_rule_for_other_category_is_ignored(self, classifier):
        rules = [_rule(1, "rent", CostType.VARIABLE, CostNature.DIRECT, category="Retail")]

        result = classifier.classify("Office Rent", None, None, None, rules=rules)

        assert result.method == ClassificationMethod.KEYWORD_FALLBACK

    def test_longest_keyword_wins(self, classifier):
        rules = [
            _rule(1, "office", CostType.MIXED, CostNature.INDIRECT, 0.9),
            _rule(2, "office rent", CostType.FIXED, CostNature.DIRECT, 0.6),
        ]

        result = classifier.classify("Office Rent", None, None, None, rules=rules)

        assert result.cost_type == CostType.FIXED
        assert result.cost_nature == CostNature.DIRECT

    def test_equal_length_prefers_confidence_then_id(self, classifier):
        rules = [
            _rule(3, "rent", CostType.MIXED, CostNature.INDIRECT, 0.7),
            _rule(2, "rent", CostType.FIXED, CostNature.DIRECT, 0.7),
            _rule(1, "lent", CostType.VARIABLE, CostNature.DIRECT, 0.5),
        ]

        result = classifier.classify("Rent and lent", None, None, None, rules=rules)

        assert result.cost_type == CostType.FIXED


def test_classifier_is_deterministic(classifier):
    profile = BusinessProfile(category="Manufacturing", core_activities=("assembly",))
    first = classifier.classify("Assembly labor", None, None, profile, patterns=DEFAULT_PATTERNS)
    second = classifier.classify("Assembly labor", None, None, profile, patterns=DEFAULT_PATTERNS)

    assert first == second
