"""Tests for classification persistence and bulk classification."""

import logging
import threading
from datetime import date

import pytest

from costwise.domain.classification import ClassificationService
from costwise.domain.classifier import CostClassifier
from costwise.domain.entities import (
    ClassificationMethod,
    ClassificationSource,
    CostClassification,
    CostNature,
    CostType,
    OutcomeStatus,
    TransactionType,
)
from costwise.domain.errors import NotFoundError, ValidationError


class FailingClassifier(CostClassifier):
    """Raises for descriptions containing 'boom'."""

    def classify(self, description, amount, category, profile, rules=(), patterns=()):
        if description and "boom" in description.lower():
            raise RuntimeError("classifier exploded")
        return super().classify(description, amount, category, profile, rules, patterns)


class FlakyClassifier(CostClassifier):
    """Fails the first attempt for each 'flaky' description."""

    def __init__(self):
        super().__init__()
        self.lock = threading.Lock()
        self.seen = set()

    def classify(self, description, amount, category, profile, rules=(), patterns=()):
        if description and "flaky" in description.lower():
            with self.lock:
                first = description not in self.seen
                self.seen.add(description)
            if first:
                raise RuntimeError("transient failure")
        return super().classify(description, amount, category, profile, rules, patterns)


class TestClassifyTransaction:
    def test_classify_and_store(self, classification_service, seeded_patterns, add_txn):
        txn_id = add_txn(date(2024, 1, 1), "1200", description="Office Rent")

        stored = classification_service.classify_transaction(txn_id)

        assert stored.transaction_id == txn_id
        assert stored.cost_type == CostType.FIXED
        assert stored.cost_nature == CostNature.INDIRECT
        assert stored.source == ClassificationSource.AUTOMATIC
        assert stored.confidence == pytest.approx(0.6)

    def test_non_expense_is_rejected(self, classification_service, add_txn):
        txn_id = add_txn(date(2024, 1, 1), "500", type=TransactionType.INCOME, description="Sale")

        with pytest.raises(ValidationError, match="only expense transactions"):
            classification_service.classify_transaction(txn_id)

        assert classification_service.get_classification(txn_id) is None

    def test_missing_transaction(self, classification_service):
        with pytest.raises(NotFoundError):
            classification_service.classify_transaction(999)

    def test_classify_uses_stored_profile(
        self, classification_service, manufacturing_profile, add_txn
    ):
        result = classification_service.classify("Raw Materials Purchase", None, None)

        assert result.method == ClassificationMethod.BUSINESS_RULES
        assert result.cost_type == CostType.VARIABLE
        assert result.cost_nature == CostNature.DIRECT

    def test_classify_uses_stored_rules(self, classification_service, rule_service):
        rule_service.create_rule("aws", "variable", "direct", confidence=0.9)

        result = classification_service.classify("AWS bill", None, None)

        assert result.method == ClassificationMethod.CUSTOM_RULE
        assert result.confidence == pytest.approx(0.9)


class TestManualOverride:
    def test_automatic_save_does_not_replace_override(
        self, classification_service, add_txn, caplog
    ):
        txn_id = add_txn(date(2024, 1, 1), "80", description="Office Rent")
        classification_service.override(txn_id, "variable", "direct")

        automatic = CostClassification(
            cost_type=CostType.FIXED,
            cost_nature=CostNature.INDIRECT,
            confidence=0.6,
            method=ClassificationMethod.PATTERN,
        )
        with caplog.at_level(logging.WARNING):
            written = classification_service.save(txn_id, automatic)

        assert written is False
        assert "manual override" in caplog.text
        stored = classification_service.get_classification(txn_id)
        assert stored.manual_override
        assert stored.cost_type == CostType.VARIABLE
        assert stored.confidence == pytest.approx(1.0)

    def test_classify_transaction_keeps_override(self, classification_service, add_txn):
        txn_id = add_txn(date(2024, 1, 1), "80", description="Office Rent")
        classification_service.override(txn_id, CostType.MIXED, CostNature.DIRECT)

        stored = classification_service.classify_transaction(txn_id)

        assert stored.source == ClassificationSource.MANUAL_OVERRIDE
        assert stored.cost_type == CostType.MIXED

    def test_override_replaces_automatic(self, classification_service, add_txn):
        txn_id = add_txn(date(2024, 1, 1), "80", description="Office Rent")
        classification_service.classify_transaction(txn_id)

        classification_service.override(txn_id, "variable", "direct")

        stored = classification_service.get_classification(txn_id)
        assert stored.manual_override
        assert stored.cost_nature == CostNature.DIRECT

    def test_override_rejects_invalid_type(self, classification_service, add_txn):
        txn_id = add_txn(date(2024, 1, 1), "80", description="Office Rent")

        with pytest.raises(ValidationError, match="cost type"):
            classification_service.override(txn_id, "sometimes", "direct")

    def test_clear_override_allows_reclassification(self, classification_service, add_txn):
        txn_id = add_txn(date(2024, 1, 1), "80", description="Office Rent")
        classification_service.override(txn_id, "variable", "direct")

        assert classification_service.clear_override(txn_id) is True
        assert classification_service.get_classification(txn_id) is None
        assert classification_service.clear_override(txn_id) is False

        stored = classification_service.classify_transaction(txn_id)
        assert stored.source == ClassificationSource.AUTOMATIC
        assert stored.cost_type == CostType.FIXED


class TestClassifyAll:
    def test_only_expenses_are_classified(self, classification_service, add_txn, temp_db):
        rent = add_txn(date(2024, 1, 1), "1200", description="Office Rent")
        shipping = add_txn(date(2024, 1, 2), "40", description="Shipping to customer")
        income = add_txn(date(2024, 1, 3), "5000", type=TransactionType.INCOME, description="Sale")

        result = classification_service.classify_all()

        assert [o.transaction_id for o in result.outcomes] == [rent, shipping]
        assert len(result.classified) == 2
        assert temp_db.get_classification(income) is None
        assert temp_db.get_classification(rent).cost_type == CostType.FIXED

    def test_rerun_changes_nothing(self, classification_service, seeded_patterns, add_txn, temp_db):
        for i in range(5):
            add_txn(date(2024, 1, i + 1), "100", description=f"Raw materials batch {i}")

        first = classification_service.classify_all()
        before = temp_db.list_classifications()
        second = classification_service.classify_all()
        after = temp_db.list_classifications()

        assert len(first.classified) == 5
        assert len(second.classified) == 0
        assert len(second.skipped) == 5
        assert {k: (v.cost_type, v.cost_nature, v.confidence) for k, v in before.items()} == {
            k: (v.cost_type, v.cost_nature, v.confidence) for k, v in after.items()
        }

    def test_nothing_pending_skips_context_load(
        self, classification_service, add_txn, monkeypatch
    ):
        txn_id = add_txn(date(2024, 1, 1), "100", description="Office Rent")
        classification_service.classify_all()

        def fail_load():
            raise AssertionError("context loaded with nothing to classify")

        monkeypatch.setattr(classification_service, "load_context", fail_load)
        result = classification_service.classify_all()

        assert [o.transaction_id for o in result.skipped] == [txn_id]

    def test_manual_override_is_skipped(self, classification_service, add_txn, temp_db):
        overridden = add_txn(date(2024, 1, 1), "1200", description="Office Rent")
        other = add_txn(date(2024, 1, 2), "1200", description="Office Rent")
        classification_service.override(overridden, "variable", "direct")

        result = classification_service.classify_all()

        statuses = {o.transaction_id: o.status for o in result.outcomes}
        assert statuses == {overridden: OutcomeStatus.SKIPPED, other: OutcomeStatus.CLASSIFIED}
        assert temp_db.get_classification(overridden).cost_type == CostType.VARIABLE

    def test_partial_failure_does_not_abort_siblings(self, temp_db, add_txn):
        service = ClassificationService(temp_db, classifier=FailingClassifier(), max_workers=3, retries=1)
        ok_ids = [add_txn(date(2024, 1, i + 1), "10", description="Office Rent") for i in range(4)]
        bad_id = add_txn(date(2024, 1, 9), "10", description="Boom supplies")

        result = service.classify_all()

        assert len(result.classified) == 4
        assert [o.transaction_id for o in result.failed] == [bad_id]
        failure = result.failed[0]
        assert failure.attempts == 2
        assert "classifier exploded" in failure.error
        for txn_id in ok_ids:
            assert temp_db.get_classification(txn_id) is not None
        assert temp_db.get_classification(bad_id) is None

    def test_failed_item_is_retried(self, temp_db, add_txn):
        service = ClassificationService(temp_db, classifier=FlakyClassifier(), max_workers=2, retries=1)
        txn_id = add_txn(date(2024, 1, 1), "10", description="Flaky supplies")

        result = service.classify_all()

        assert result.failed == []
        assert result.outcomes[0].status == OutcomeStatus.CLASSIFIED
        assert result.outcomes[0].attempts == 2
        assert temp_db.get_classification(txn_id) is not None

    def test_no_retries_means_single_attempt(self, temp_db, add_txn):
        service = ClassificationService(temp_db, classifier=FlakyClassifier(), retries=0)
        add_txn(date(2024, 1, 1), "10", description="Flaky supplies")

        result = service.classify_all()

        assert len(result.failed) == 1
        assert result.failed[0].attempts == 1

    def test_explicit_transaction_list(self, classification_service, transaction_service, add_txn):
        add_txn(date(2024, 1, 1), "10", description="Office Rent")
        wanted = add_txn(date(2024, 2, 1), "10", description="Office Rent")

        february = transaction_service.list_transactions(start_date=date(2024, 2, 1))
        result = classification_service.classify_all(february)

        assert [o.transaction_id for o in result.outcomes] == [wanted]

    def test_empty_store(self, classification_service):
        result = classification_service.classify_all()

        assert result.outcomes == ()
