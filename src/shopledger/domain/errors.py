"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested debtor or transaction does not exist."""


class InvalidStateError(DomainError):
    """Operation not allowed in the current state of a debt account."""


def debtor_not_found(account_id: int) -> str:
    """Return message for missing debt account."""
    return f"Debtor {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing financial transaction."""
    return f"Transaction {transaction_id} not found"


def amount_not_positive(field: str, amount: int) -> str:
    """Return message for a zero or negative amount."""
    return f"{field} must be greater than zero (got {amount})"


def amount_negative(field: str, amount: int) -> str:
    """Return message for a negative amount where zero is allowed."""
    return f"{field} must not be negative (got {amount})"


def required_text_missing(field: str) -> str:
    """Return message for an empty required text field."""
    return f"{field} is required"


def nothing_to_pay_off(account_id: int, total_debt: int) -> str:
    """Return message when a payoff is requested without an outstanding balance."""
    return f"Debtor {account_id} has no outstanding debt to pay off (balance {total_debt})"


def no_credit_to_refund(account_id: int, total_debt: int) -> str:
    """Return message when a refund is requested without customer credit."""
    return f"Debtor {account_id} has no credit to refund (balance {total_debt})"


def unknown_choice(field: str, value: object, choices: list[str]) -> str:
    """Return message for a value outside an enumerated set."""
    return f"Unknown {field} '{value}'. Expected one of: {', '.join(choices)}"


def amount_not_whole(field: str, amount: object) -> str:
    """Return message for an amount that is not a whole number."""
    return f"{field} must be a whole number (got {amount!r})"
