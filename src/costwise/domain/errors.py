"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PersistenceError(DomainError):
    """The store rejected or failed a write."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing custom rule."""
    return f"Custom rule {rule_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def not_an_expense(transaction_id: int, transaction_type: str) -> str:
    """Return message when classification is requested for a non-expense."""
    return (
        f"Transaction {transaction_id} is of type '{transaction_type}'; "
        "only expense transactions can be classified"
    )


def invalid_choice(field_name: str, value: object, choices: list[str]) -> str:
    """Return message for a value outside an allowed set."""
    return f"Invalid {field_name} '{value}'. Expected one of: {', '.join(choices)}"


def unknown_period(period: str, supported: list[str]) -> str:
    """Return message for an unsupported budget period."""
    return f"Unknown period: '{period}'. Supported periods: {', '.join(supported)}"
