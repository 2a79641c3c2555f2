"""Utility functions for shopledger."""

from shopledger.utils.date_parser import parse_date, parse_occurred_at, parse_period
from shopledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_occurred_at", "parse_period", "parse_amount"]
