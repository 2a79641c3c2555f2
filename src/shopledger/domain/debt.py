"""Debt account domain service.

A debt account's ``total_debt`` is always the signed fold of its movements
(``+amount`` for give, ``-amount`` for receive). Movements are only ever
appended; corrections are new offsetting movements.
"""

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional

from shopledger.database.base import Database
from shopledger.domain.entities import (
    BalanceHistoryEntry,
    DebtAccount,
    DebtMovement,
    DebtorSortKey,
    DebtorStatusFilter,
    DebtPortfolioSummary,
    DebtStatus,
    MovementKind,
    NewDebtMovement,
    coerce_choice,
    require_amount,
)
from shopledger.domain.errors import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
    debtor_not_found,
    no_credit_to_refund,
    nothing_to_pay_off,
    required_text_missing,
)

logger = logging.getLogger(__name__)

INITIAL_DEBT_NOTE = "initial debt"
PAYOFF_NOTE = "full payoff"
REFUND_NOTE = "credit refund"


def fold_movements(movements: Iterable[DebtMovement]) -> int:
    """Return the signed sum of movements."""
    return sum(m.signed_amount for m in movements)


def is_overdue(account: DebtAccount, now: datetime) -> bool:
    """True iff a due date is set, it lies before ``now``'s date and debt remains."""
    if account.due_date is None or account.total_debt <= 0:
        return False
    return account.due_date < now.date()


def debt_status(account: DebtAccount, now: datetime) -> DebtStatus:
    """Return the lifecycle state of an account at ``now``."""
    if account.total_debt <= 0:
        return DebtStatus.PAID_OFF
    if is_overdue(account, now):
        return DebtStatus.OVERDUE
    return DebtStatus.ACTIVE


def running_balance_history(account: DebtAccount) -> tuple[BalanceHistoryEntry, ...]:
    """Pair each movement, most recent first, with the balance as of that movement.

    Movements are ordered by ``occurred_at`` descending; movements with the
    same ``occurred_at`` keep their insertion order. The balance of an entry
    is the signed sum of that movement and every movement after it in the
    returned sequence (that is, every older one). Balances are clamped at
    zero for display; ``account.total_debt`` is not affected.
    """
    ordered = sorted(account.movements, key=lambda m: m.occurred_at, reverse=True)

    balances: list[int] = []
    balance = 0
    for movement in reversed(ordered):
        balance += movement.signed_amount
        balances.append(max(0, balance))
    balances.reverse()

    return tuple(
        BalanceHistoryEntry(movement=movement, balance=shown)
        for movement, shown in zip(ordered, balances)
    )


def matches_status(account: DebtAccount, status: DebtorStatusFilter, now: datetime) -> bool:
    """Check whether an account passes a debtor listing status filter."""
    if status == DebtorStatusFilter.ACTIVE:
        return account.total_debt > 0
    if status == DebtorStatusFilter.PAID:
        return account.total_debt == 0
    if status == DebtorStatusFilter.CREDIT:
        return account.total_debt < 0
    if status == DebtorStatusFilter.OVERDUE:
        return is_overdue(account, now)
    return True


_SORT_KEYS = {
    DebtorSortKey.NAME: lambda acc: acc.customer_name.casefold(),
    DebtorSortKey.AMOUNT: lambda acc: acc.total_debt,
    DebtorSortKey.CREATED: lambda acc: acc.created_at,
}


def sort_debtors(
    accounts: Sequence[DebtAccount], sort_by: DebtorSortKey, descending: bool = False
) -> list[DebtAccount]:
    """Sort accounts for display.

    When sorting by due date, accounts without one come last in ascending
    order and first in descending order.
    """
    if sort_by == DebtorSortKey.DUE_DATE:
        dated = [acc for acc in accounts if acc.due_date is not None]
        undated = [acc for acc in accounts if acc.due_date is None]
        dated = sorted(dated, key=lambda acc: acc.due_date, reverse=descending)
        return undated + dated if descending else dated + undated

    return sorted(accounts, key=_SORT_KEYS[sort_by], reverse=descending)


def portfolio_summary(accounts: Iterable[DebtAccount], now: datetime) -> DebtPortfolioSummary:
    """Summarize balances across accounts."""
    total_receivable = 0
    total_credit = 0
    active_count = 0
    overdue_count = 0
    paid_off_count = 0
    for account in accounts:
        total_receivable += max(0, account.total_debt)
        total_credit += max(0, -account.total_debt)
        status = debt_status(account, now)
        if status == DebtStatus.PAID_OFF:
            paid_off_count += 1
        else:
            active_count += 1
            if status == DebtStatus.OVERDUE:
                overdue_count += 1
    return DebtPortfolioSummary(
        total_receivable=total_receivable,
        total_credit=total_credit,
        active_count=active_count,
        overdue_count=overdue_count,
        paid_off_count=paid_off_count,
    )


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class DebtService:
    """Service for managing customer debt accounts."""

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        """Initialize debt service.

        Args:
            db: Database instance
            clock: Callable returning the current instant (defaults to datetime.now)
        """
        self.db = db
        self.clock = clock or datetime.now
        self._locks_guard = threading.Lock()
        self._account_locks: dict[int, threading.Lock] = {}

    @contextmanager
    def _account_lock(self, account_id: int) -> Iterator[None]:
        """Serialize read-compute-append sequences on one account."""
        with self._locks_guard:
            lock = self._account_locks.setdefault(account_id, threading.Lock())
        with lock:
            yield

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock()

    def create_debtor(
        self,
        name: str,
        initial_debt_amount: int,
        phone: Optional[str] = None,
        due_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> DebtAccount:
        """Create a debtor with an opening "give" movement.

        Args:
            name: Customer name
            initial_debt_amount: Amount the customer owes from the start
            phone: Optional customer phone
            due_date: Optional due date
            now: Reference instant (defaults to the service clock)

        Returns:
            The created debt account

        Raises:
            ValidationError: If name is empty or the amount is not a positive whole number
        """
        customer_name = (name or "").strip()
        if not customer_name:
            raise ValidationError(required_text_missing("Customer name"))
        require_amount(initial_debt_amount, "Initial debt")

        timestamp = self._now(now)
        account_id = self.db.create_debt_account(
            customer_name=customer_name,
            customer_phone=_clean_optional(phone),
            due_date=due_date,
            opening_movement=NewDebtMovement(
                kind=MovementKind.GIVE,
                amount=initial_debt_amount,
                note=INITIAL_DEBT_NOTE,
                occurred_at=timestamp,
                created_at=timestamp,
            ),
            created_at=timestamp,
        )
        logger.info(
            "Created debtor %s (%s) with initial debt %s",
            account_id,
            customer_name,
            initial_debt_amount,
        )
        return self.require_debtor(account_id)

    def get_debtor(self, account_id: int) -> Optional[DebtAccount]:
        """Get debtor by ID.

        Returns:
            Debt account or None if not found
        """
        return self.db.get_debt_account(account_id)

    def require_debtor(self, account_id: int) -> DebtAccount:
        """Get debtor by ID or raise NotFoundError."""
        account = self.db.get_debt_account(account_id)
        if account is None:
            raise NotFoundError(debtor_not_found(account_id))
        return account

    def list_debtors(
        self,
        search: Optional[str] = None,
        status: DebtorStatusFilter | str = DebtorStatusFilter.ALL,
        sort_by: DebtorSortKey | str = DebtorSortKey.CREATED,
        descending: bool = False,
        now: Optional[datetime] = None,
    ) -> list[DebtAccount]:
        """List debtors with optional search, status filter and ordering.

        Args:
            search: Case-insensitive substring of the customer name
            status: Status filter
            sort_by: Sort key
            descending: Reverse the sort order
            now: Reference instant for the overdue filter

        Returns:
            List of debt accounts
        """
        status = coerce_choice(DebtorStatusFilter, status, "status filter")
        sort_by = coerce_choice(DebtorSortKey, sort_by, "sort key")
        timestamp = self._now(now)
        needle = search.strip().casefold() if search else ""

        accounts = [
            acc
            for acc in self.db.list_debt_accounts()
            if needle in acc.customer_name.casefold()
            and matches_status(acc, status, timestamp)
        ]
        return sort_debtors(accounts, sort_by, descending)

    def record_movement(
        self,
        account_id: int,
        kind: MovementKind | str,
        amount: int,
        note: str,
        occurred_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> DebtMovement:
        """Append a movement to a debtor's ledger.

        Args:
            account_id: Debt account ID
            kind: "give" (debt increases) or "receive" (customer pays)
            amount: Positive amount
            note: Required description
            occurred_at: When the movement happened (defaults to now)
            now: Reference instant (defaults to the service clock)

        Returns:
            The appended movement

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the amount is not a positive whole number, the note is empty
                or the kind is unknown
        """
        kind = coerce_choice(MovementKind, kind, "movement kind")
        with self._account_lock(account_id):
            account = self.require_debtor(account_id)
            clean_note = (note or "").strip()
            require_amount(amount, "Amount")
            if not clean_note:
                raise ValidationError(required_text_missing("Note"))
            return self._append(account, kind, amount, clean_note, occurred_at, now)

    def pay_off(self, account_id: int, now: Optional[datetime] = None) -> DebtMovement:
        """Receive exactly the outstanding balance, zeroing the account.

        Raises:
            NotFoundError: If the account does not exist
            InvalidStateError: If there is no outstanding debt
        """
        with self._account_lock(account_id):
            account = self.require_debtor(account_id)
            if account.total_debt <= 0:
                raise InvalidStateError(nothing_to_pay_off(account_id, account.total_debt))
            return self._append(
                account, MovementKind.RECEIVE, account.total_debt, PAYOFF_NOTE, None, now
            )

    def refund_credit(
        self, account_id: int, amount: int, now: Optional[datetime] = None
    ) -> DebtMovement:
        """Hand credit back to a customer the shop owes.

        The refund is capped at the credit held, so the balance never
        goes above zero through a refund.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the amount is not a positive whole number
            InvalidStateError: If the shop owes the customer nothing
        """
        with self._account_lock(account_id):
            account = self.require_debtor(account_id)
            require_amount(amount, "Refund amount")
            if account.total_debt >= 0:
                raise InvalidStateError(no_credit_to_refund(account_id, account.total_debt))
            refund = min(amount, -account.total_debt)
            return self._append(account, MovementKind.GIVE, refund, REFUND_NOTE, None, now)

    def set_due_date(
        self,
        account_id: int,
        due_date: Optional[date],
        now: Optional[datetime] = None,
    ) -> DebtAccount:
        """Set or clear a debtor's due date.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self._account_lock(account_id):
            self.require_debtor(account_id)
            self.db.update_due_date(account_id, due_date, self._now(now))
            logger.info("Set due date of debtor %s to %s", account_id, due_date)
            return self.require_debtor(account_id)

    def delete_debtor(self, account_id: int) -> None:
        """Delete a debtor and all of its movements.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self._account_lock(account_id):
            self.require_debtor(account_id)
            self.db.delete_debt_account(account_id)
        with self._locks_guard:
            self._account_locks.pop(account_id, None)
        logger.info("Deleted debtor %s", account_id)

    def summarize(self, now: Optional[datetime] = None) -> DebtPortfolioSummary:
        """Summarize all stored debtors at ``now``."""
        return portfolio_summary(self.db.list_debt_accounts(), self._now(now))

    def _append(
        self,
        account: DebtAccount,
        kind: MovementKind,
        amount: int,
        note: str,
        occurred_at: Optional[datetime],
        now: Optional[datetime],
    ) -> DebtMovement:
        timestamp = self._now(now)
        movement = NewDebtMovement(
            kind=kind,
            amount=amount,
            note=note,
            occurred_at=occurred_at if occurred_at is not None else timestamp,
            created_at=timestamp,
        )
        signed = amount if kind == MovementKind.GIVE else -amount
        total_debt = account.total_debt + signed
        movement_id = self.db.append_debt_movement(account.id, movement, total_debt)
        logger.info(
            "Debtor %s: %s %s (%s), balance %s -> %s",
            account.id,
            kind.value,
            amount,
            note,
            account.total_debt,
            total_debt,
        )
        return DebtMovement(
            id=movement_id,
            debt_account_id=account.id,
            kind=kind,
            amount=amount,
            note=note,
            occurred_at=movement.occurred_at,
            created_at=movement.created_at,
        )
