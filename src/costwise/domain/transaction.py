"""Transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from costwise.database.base import Database
from costwise.domain.entities import Transaction, TransactionType
from costwise.domain.errors import NotFoundError, ValidationError, invalid_choice, transaction_not_found


def parse_transaction_type(value: TransactionType | str) -> TransactionType:
    """Coerce a string to TransactionType, raising ValidationError when invalid."""
    try:
        return TransactionType(value.lower() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError(
            invalid_choice("transaction type", value, [t.value for t in TransactionType])
        )


class TransactionService:
    """Service for recording and querying transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        date: date,
        amount: Decimal,
        type: TransactionType | str,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        """Record a transaction.

        Args:
            date: Transaction date
            amount: Amount, always positive; direction comes from the type
            type: Transaction type
            description: Optional description
            category: Optional free-text category

        Returns:
            Transaction ID

        Raises:
            ValidationError: If amount is not positive or type is invalid
        """
        if amount is None or amount <= 0:
            raise ValidationError(f"Transaction amount must be greater than zero, got {amount}")

        return self.db.create_transaction(
            date=date,
            amount=amount,
            type=parse_transaction_type(type),
            description=(description or "").strip() or None,
            category=(category or "").strip() or None,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> Transaction:
        """Get transaction by ID.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType | str] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, oldest first."""
        if transaction_type is not None:
            transaction_type = parse_transaction_type(transaction_type)
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            transaction_type=transaction_type,
            category=category,
        )
