"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> int:
    """Parse an amount string into a whole-unit integer.

    Handles various formats:
    - "150000"
    - "150,000" or "150_000"
    - "$150,000"
    - "-5000"
    - "150000.00" (a zero fraction is accepted)

    Args:
        amount_str: Amount string

    Returns:
        Integer amount

    Raises:
        ValueError: If amount string cannot be parsed or has a non-zero fraction
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥]", "", amount_str)

    # Remove grouping separators
    amount_str = amount_str.replace(",", "").replace("_", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e!r}")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if amount != amount.to_integral_value():
        raise ValueError(f"Amount '{amount_str}' must be a whole number")
    return int(amount)
