"""Transaction journal domain service."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Optional

from shopledger.database.base import Database
from shopledger.domain.entities import (
    CategoryPrefill,
    CategoryTemplate,
    FinancialTransaction,
    JournalTotalsEntry,
    PaymentStatus,
    TransactionKind,
    coerce_choice,
    require_amount,
)
from shopledger.domain.errors import (
    NotFoundError,
    ValidationError,
    required_text_missing,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

MANUAL_CATEGORY = "manual"
FILTER_ALL = "all"


def line_profit(txn: FinancialTransaction) -> Optional[int]:
    """Gross minus cost for an income transaction, None for an expense."""
    return txn.line_profit


def apply_category_template(
    category_id: Optional[str],
    catalog: Mapping[str, CategoryTemplate] | Iterable[CategoryTemplate],
) -> CategoryPrefill:
    """Look up pre-fill values for a new transaction.

    Args:
        category_id: Template ID, "manual" or None
        catalog: Templates keyed by ID, or an iterable of templates

    Returns:
        The template's name and default amounts (missing defaults become 0),
        or blank values when no template matches
    """
    blank = CategoryPrefill(category=None, gross_amount=0, cost_amount=0)
    if not category_id or category_id == MANUAL_CATEGORY:
        return blank

    if isinstance(catalog, Mapping):
        template = catalog.get(category_id)
    else:
        template = next((t for t in catalog if t.id == category_id), None)

    if template is None:
        return blank
    return CategoryPrefill(
        category=template.name,
        gross_amount=template.default_price or 0,
        cost_amount=template.default_cost or 0,
    )


def list_by_filter(
    transactions: Iterable[FinancialTransaction],
    search_text: Optional[str] = None,
    kind_filter: TransactionKind | str | None = None,
    payment_status_filter: PaymentStatus | str | None = None,
) -> list[FinancialTransaction]:
    """Filter transactions, keeping input order.

    All given filters must match. ``search_text`` is a case-insensitive
    substring of the note or the customer name; a filter of None or "all"
    matches everything.
    """
    needle = search_text.strip().casefold() if search_text else ""
    kind = (
        None
        if kind_filter in (None, FILTER_ALL)
        else coerce_choice(TransactionKind, kind_filter, "transaction kind")
    )
    status = (
        None
        if payment_status_filter in (None, FILTER_ALL)
        else coerce_choice(PaymentStatus, payment_status_filter, "payment status")
    )

    def matches(txn: FinancialTransaction) -> bool:
        if kind is not None and txn.kind != kind:
            return False
        if status is not None and txn.payment_status != status:
            return False
        if needle:
            haystacks = (txn.note, txn.customer_name or "")
            return any(needle in text.casefold() for text in haystacks)
        return True

    return [txn for txn in transactions if matches(txn)]


def total_by_kind(
    transactions: Iterable[FinancialTransaction], kind: TransactionKind | str
) -> int:
    """Sum gross amounts of one kind."""
    kind = coerce_choice(TransactionKind, kind, "transaction kind")
    return sum(txn.gross_amount for txn in transactions if txn.kind == kind)


def total_owed(transactions: Iterable[FinancialTransaction]) -> int:
    """Sum gross amounts still owed."""
    return sum(
        txn.gross_amount
        for txn in transactions
        if txn.payment_status == PaymentStatus.OWED
    )


def running_totals(
    transactions: Sequence[FinancialTransaction],
) -> tuple[JournalTotalsEntry, ...]:
    """Chronological running totals of income, expense and income profit.

    Transactions with equal ``occurred_at`` keep their input order.
    """
    income = 0
    expense = 0
    profit = 0
    entries = []
    for txn in sorted(transactions, key=lambda t: t.occurred_at):
        if txn.kind == TransactionKind.INCOME:
            income += txn.gross_amount
            profit += txn.line_profit
        else:
            expense += txn.gross_amount
        entries.append(
            JournalTotalsEntry(
                transaction=txn,
                line_profit=txn.line_profit,
                cumulative_income=income,
                cumulative_expense=expense,
                cumulative_profit=profit,
            )
        )
    return tuple(entries)


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class JournalService:
    """Service for recording and listing income/expense transactions."""

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        """Initialize journal service.

        Args:
            db: Database instance
            clock: Callable returning the current instant (defaults to datetime.now)
        """
        self.db = db
        self.clock = clock or datetime.now

    def record_transaction(
        self,
        kind: TransactionKind | str,
        gross_amount: int,
        note: str,
        cost_amount: Optional[int] = None,
        category: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        payment_status: PaymentStatus | str = PaymentStatus.SETTLED,
        now: Optional[datetime] = None,
    ) -> FinancialTransaction:
        """Append a transaction to the journal.

        Args:
            kind: "income" or "expense"
            gross_amount: Positive amount
            note: Required description
            cost_amount: Cost of goods for income (stored but ignored for expenses)
            category: Optional free-text category label
            occurred_at: When it happened (defaults to now)
            customer_name: Optional customer name
            customer_phone: Optional customer phone
            payment_status: "settled" or "owed"
            now: Reference instant (defaults to the service clock)

        Returns:
            The recorded transaction

        Raises:
            ValidationError: If the amount is not a positive whole number, the note is empty,
                the cost is negative or a choice is unknown
        """
        kind = coerce_choice(TransactionKind, kind, "transaction kind")
        payment_status = coerce_choice(PaymentStatus, payment_status, "payment status")
        clean_note = (note or "").strip()
        require_amount(gross_amount, "Amount")
        if not clean_note:
            raise ValidationError(required_text_missing("Note"))
        if cost_amount is not None:
            require_amount(cost_amount, "Cost", allow_zero=True)

        timestamp = now if now is not None else self.clock()
        transaction_id = self.db.create_transaction(
            kind=kind,
            gross_amount=gross_amount,
            note=clean_note,
            occurred_at=occurred_at if occurred_at is not None else timestamp,
            created_at=timestamp,
            cost_amount=cost_amount,
            category=_clean_optional(category),
            customer_name=_clean_optional(customer_name),
            customer_phone=_clean_optional(customer_phone),
            payment_status=payment_status,
        )
        logger.info(
            "Recorded %s transaction %s of %s (%s)",
            kind.value,
            transaction_id,
            gross_amount,
            payment_status.value,
        )
        return self.require_transaction(transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[FinancialTransaction]:
        """Get transaction by ID.

        Returns:
            Transaction or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> FinancialTransaction:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        search_text: Optional[str] = None,
        kind_filter: TransactionKind | str | None = None,
        payment_status_filter: PaymentStatus | str | None = None,
    ) -> tuple[FinancialTransaction, ...]:
        """Snapshot the journal, optionally filtered."""
        return tuple(
            list_by_filter(
                self.db.list_transactions(),
                search_text=search_text,
                kind_filter=kind_filter,
                payment_status_filter=payment_status_filter,
            )
        )
