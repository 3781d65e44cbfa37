"""Classification persistence and bulk classification service."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from costwise.database.base import Database
from costwise.domain.business_context import BusinessContextService
from costwise.domain.classifier import CostClassifier
from costwise.domain.entities import (
    GENERAL_CATEGORY,
    BulkClassificationResult,
    BusinessProfile,
    Classification,
    ClassificationOutcome,
    ClassificationSource,
    CostClassification,
    CostNature,
    CostPattern,
    CostType,
    CustomClassificationRule,
    OutcomeStatus,
    Transaction,
    TransactionType,
)
from costwise.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    not_an_expense,
    transaction_not_found,
)
from costwise.domain.patterns import PatternLibrary
from costwise.domain.rules import CustomRuleService, parse_cost_nature, parse_cost_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationContext:
    """Profile, rules and patterns loaded once and handed to the classifier."""

    profile: Optional[BusinessProfile]
    rules: tuple[CustomClassificationRule, ...]
    patterns: tuple[CostPattern, ...]


class ClassificationService:
    """Service for classifying expense transactions and storing the results."""

    def __init__(
        self,
        db: Database,
        classifier: Optional[CostClassifier] = None,
        max_workers: int = 4,
        retries: int = 1,
    ):
        """Initialize classification service.

        Args:
            db: Database instance
            classifier: Classifier to use (defaults to CostClassifier())
            max_workers: Thread pool size for bulk classification
            retries: Extra attempts per transaction after a failure
        """
        self.db = db
        self.classifier = classifier or CostClassifier()
        self.max_workers = max_workers
        self.retries = retries
        self.context = BusinessContextService(db)
        self.rules = CustomRuleService(db)
        self.patterns = PatternLibrary(db)

    def load_context(self) -> ClassificationContext:
        """Load the business profile with its rules and patterns."""
        profile = self.context.get_profile()
        category = profile.category if profile else GENERAL_CATEGORY
        return ClassificationContext(
            profile=profile,
            rules=tuple(self.rules.rules_for(category)),
            patterns=tuple(self.patterns.patterns_for(category)),
        )

    def classify(
        self,
        description: Optional[str],
        amount: Optional[Decimal],
        category: Optional[str],
        context: Optional[ClassificationContext] = None,
    ) -> CostClassification:
        """Classify an expense using the stored business context.

        Args:
            description: Transaction description
            amount: Transaction amount
            category: Transaction category
            context: Preloaded context (loaded from the store when omitted)

        Returns:
            CostClassification
        """
        if context is None:
            context = self.load_context()
        return self.classifier.classify(
            description,
            amount,
            category,
            context.profile,
            rules=context.rules,
            patterns=context.patterns,
        )

    def get_classification(self, transaction_id: int) -> Optional[Classification]:
        """Get the stored classification for a transaction."""
        return self.db.get_classification(transaction_id)

    def save(
        self,
        transaction_id: int,
        classification: CostClassification,
        source: ClassificationSource = ClassificationSource.AUTOMATIC,
    ) -> bool:
        """Upsert a classification for a transaction.

        Automatic saves never replace a manual override.

        Args:
            transaction_id: Transaction ID
            classification: Classifier result to store
            source: Origin of the classification

        Returns:
            True if the record was written, False if it was refused or failed
        """
        record = Classification(
            transaction_id=transaction_id,
            cost_type=classification.cost_type,
            cost_nature=classification.cost_nature,
            confidence=classification.confidence,
            source=source,
        )
        try:
            written = self.db.save_classification(record)
        except DomainError as e:
            logger.warning("Saving classification for transaction %d failed: %s", transaction_id, e)
            return False

        if not written:
            logger.warning(
                "Transaction %d has a manual override; automatic classification not saved",
                transaction_id,
            )
        return written

    def _require_expense(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.type != TransactionType.EXPENSE:
            raise ValidationError(not_an_expense(transaction_id, txn.type.value))
        return txn

    def classify_transaction(self, transaction_id: int) -> Optional[Classification]:
        """Classify one stored expense transaction and save the result.

        Args:
            transaction_id: Transaction ID

        Returns:
            The stored classification after the save (a manual override
            stays in place)

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If transaction is not an expense
        """
        txn = self._require_expense(transaction_id)
        result = self.classify(txn.description, txn.amount, txn.category)
        self.save(transaction_id, result)
        return self.db.get_classification(transaction_id)

    def override(
        self,
        transaction_id: int,
        cost_type: CostType | str,
        cost_nature: CostNature | str,
    ) -> Classification:
        """Record a manual classification that automatic runs will not replace.

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If transaction is not an expense or values are invalid
        """
        self._require_expense(transaction_id)
        record = Classification(
            transaction_id=transaction_id,
            cost_type=parse_cost_type(cost_type),
            cost_nature=parse_cost_nature(cost_nature),
            confidence=1.0,
            source=ClassificationSource.MANUAL_OVERRIDE,
        )
        self.db.save_classification(record)
        return record

    def clear_override(self, transaction_id: int) -> bool:
        """Remove the stored classification so automatic runs can classify again.

        Returns:
            True if a classification was removed
        """
        return self.db.delete_classification(transaction_id)

    def classify_all(
        self,
        transactions: Optional[Sequence[Transaction]] = None,
        max_workers: Optional[int] = None,
        retries: Optional[int] = None,
    ) -> BulkClassificationResult:
        """Classify every expense transaction that has no classification yet.

        Each transaction is classified and saved independently on a thread
        pool; a failure is retried for that transaction alone and recorded
        in its outcome without affecting the others. Already-classified
        transactions are skipped, so the operation is safe to re-run.

        Args:
            transactions: Transactions to consider (defaults to all expenses)
            max_workers: Thread pool size (defaults to the service setting)
            retries: Extra attempts per failed item (defaults to the service setting)

        Returns:
            BulkClassificationResult with one outcome per expense transaction
        """
        if transactions is None:
            transactions = self.db.list_transactions(transaction_type=TransactionType.EXPENSE)
        workers = max_workers if max_workers is not None else self.max_workers
        attempts_allowed = 1 + (retries if retries is not None else self.retries)

        expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]
        if not expenses:
            return BulkClassificationResult()

        existing = self.db.list_classifications([t.id for t in expenses])
        pending = [t for t in expenses if t.id not in existing]

        def run(txn: Transaction) -> ClassificationOutcome:
            try:
                return self._classify_and_store(txn, context, attempts_allowed)
            finally:
                self.db.release_session()

        outcomes: dict[int, ClassificationOutcome] = {
            t.id: ClassificationOutcome(transaction_id=t.id, status=OutcomeStatus.SKIPPED)
            for t in expenses
            if t.id in existing
        }
        if pending:
            context = self.load_context()
            with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
                for outcome in executor.map(run, pending):
                    outcomes[outcome.transaction_id] = outcome

        result = BulkClassificationResult(outcomes=tuple(outcomes[t.id] for t in expenses))
        logger.info(
            "Bulk classification: %d classified, %d skipped, %d failed",
            len(result.classified),
            len(result.skipped),
            len(result.failed),
        )
        return result

    def _classify_and_store(
        self, txn: Transaction, context: ClassificationContext, attempts_allowed: int
    ) -> ClassificationOutcome:
        error: Optional[str] = None
        for attempt in range(1, attempts_allowed + 1):
            try:
                result = self.classify(txn.description, txn.amount, txn.category, context)
                written = self.db.save_classification(
                    Classification(
                        transaction_id=txn.id,
                        cost_type=result.cost_type,
                        cost_nature=result.cost_nature,
                        confidence=result.confidence,
                    )
                )
            except Exception as e:
                # Recorded per item; siblings keep running
                error = str(e)
                logger.warning(
                    "Classifying transaction %d failed (attempt %d/%d): %s",
                    txn.id,
                    attempt,
                    attempts_allowed,
                    e,
                )
                continue

            status = OutcomeStatus.CLASSIFIED if written else OutcomeStatus.SKIPPED
            return ClassificationOutcome(
                transaction_id=txn.id,
                status=status,
                classification=result,
                attempts=attempt,
            )

        return ClassificationOutcome(
            transaction_id=txn.id,
            status=OutcomeStatus.FAILED,
            error=error,
            attempts=attempts_allowed,
        )
