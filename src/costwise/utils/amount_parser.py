"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str, allow_zero: bool = False) -> Decimal:
    """Parse a positive amount string into a Decimal.

    Handles "123.45", "$123.45", "1,234.56" and "€ 99". Transactions store
    the magnitude only; direction comes from the transaction type, so signs
    and parenthesised negatives are rejected.

    Args:
        amount_str: Amount string
        allow_zero: Accept zero (budgets may allocate nothing)

    Returns:
        Decimal amount greater than zero (or equal to it when allowed)

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[$€£¥,\s]", "", amount_str)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite() or amount < 0 or (amount == 0 and not allow_zero):
        raise ValueError(f"Amount must be greater than zero, got '{amount_str}'")
    return amount
