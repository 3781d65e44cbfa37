"""Utility functions for costwise."""

from costwise.utils.date_parser import parse_date, period_window
from costwise.utils.amount_parser import parse_amount

__all__ = ["parse_date", "period_window", "parse_amount"]
