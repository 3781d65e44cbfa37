"""Domain layer for costwise.

Services live in their own modules (``costwise.domain.classification``,
``costwise.domain.analytics`` and so on) and are imported from there.
"""

from costwise.domain.entities import (
    Budget,
    BusinessProfile,
    Classification,
    CostClassification,
    CostNature,
    CostType,
    Transaction,
    TransactionType,
)
from costwise.domain.errors import DomainError, NotFoundError, ValidationError

__all__ = [
    "Budget",
    "BusinessProfile",
    "Classification",
    "CostClassification",
    "CostNature",
    "CostType",
    "DomainError",
    "NotFoundError",
    "Transaction",
    "TransactionType",
    "ValidationError",
]
