"""Domain model entities for shopledger.

These are pure data classes representing business concepts, independent of
how they are stored. Both the SQLAlchemy store and the in-memory store hand
out these frozen entities, so a caller holding one is holding a snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Optional, TypeVar

from shopledger.domain.errors import (
    ValidationError,
    amount_negative,
    amount_not_positive,
    amount_not_whole,
    unknown_choice,
)


class MovementKind(str, Enum):
    """Direction of a debt movement."""

    GIVE = "give"  # shop extends credit, customer's debt increases
    RECEIVE = "receive"  # customer pays, debt decreases


class TransactionKind(str, Enum):
    """Kind of journal transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class PaymentStatus(str, Enum):
    """Whether a journal transaction has been paid."""

    SETTLED = "settled"
    OWED = "owed"


class PeriodWindow(str, Enum):
    """Relative reporting window resolved against a reference instant."""

    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"
    THIS_YEAR = "this-year"
    ALL = "all"


class DebtStatus(str, Enum):
    """Lifecycle state of a debt account."""

    ACTIVE = "active"
    OVERDUE = "overdue"
    PAID_OFF = "paid_off"


class DebtorStatusFilter(str, Enum):
    """Status filter for debtor listings."""

    ALL = "all"
    ACTIVE = "active"
    PAID = "paid"
    CREDIT = "credit"
    OVERDUE = "overdue"


class DebtorSortKey(str, Enum):
    """Sort key for debtor listings."""

    NAME = "name"
    AMOUNT = "amount"
    CREATED = "created"
    DUE_DATE = "due_date"


E = TypeVar("E", bound=Enum)


def coerce_choice(enum_cls: type[E], value: object, field_name: str) -> E:
    """Convert a raw value into a member of ``enum_cls``.

    Raises:
        ValidationError: If the value is not a member or member value
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            unknown_choice(field_name, value, [member.value for member in enum_cls])
        ) from None


def require_amount(value: object, field_name: str, allow_zero: bool = False) -> int:
    """Check that ``value`` is a whole-unit amount above zero (or zero when allowed).

    Raises:
        ValidationError: If the value is not an int, is a bool, or is out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(amount_not_whole(field_name, value))
    if allow_zero:
        if value < 0:
            raise ValidationError(amount_negative(field_name, value))
    elif value <= 0:
        raise ValidationError(amount_not_positive(field_name, value))
    return value


@dataclass(frozen=True)
class DebtMovement:
    """One ledger line within a debt account."""

    id: int
    debt_account_id: int
    kind: MovementKind
    amount: int
    note: str
    occurred_at: datetime
    created_at: datetime

    @property
    def signed_amount(self) -> int:
        """Contribution of this movement to the account balance."""
        return self.amount if self.kind == MovementKind.GIVE else -self.amount


@dataclass(frozen=True)
class NewDebtMovement:
    """A validated movement that has not been assigned an ID yet."""

    kind: MovementKind
    amount: int
    note: str
    occurred_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class DebtAccount:
    """One customer's outstanding balance with the shop."""

    id: int
    customer_name: str
    customer_phone: Optional[str]
    due_date: Optional[date]
    total_debt: int
    created_at: datetime
    updated_at: datetime
    movements: tuple[DebtMovement, ...] = ()

    @property
    def has_credit(self) -> bool:
        """True when the shop owes the customer."""
        return self.total_debt < 0


@dataclass(frozen=True)
class FinancialTransaction:
    """One income or expense event in the journal."""

    id: int
    kind: TransactionKind
    gross_amount: int
    cost_amount: Optional[int]
    note: str
    category: Optional[str]
    occurred_at: datetime
    customer_name: Optional[str]
    customer_phone: Optional[str]
    payment_status: PaymentStatus
    created_at: datetime

    @property
    def line_profit(self) -> Optional[int]:
        """Gross minus cost for income; undefined for expenses."""
        if self.kind != TransactionKind.INCOME:
            return None
        return self.gross_amount - (self.cost_amount or 0)


@dataclass(frozen=True)
class Receipt:
    """Point-of-sale income supplied to the aggregator."""

    id: int
    total: int
    occurred_at: datetime


@dataclass(frozen=True)
class CategoryTemplate:
    """Catalog entry used to pre-fill a new transaction."""

    id: str
    name: str
    default_price: Optional[int] = None
    default_cost: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class CategoryPrefill:
    """Values suggested for a new transaction by a category template."""

    category: Optional[str]
    gross_amount: int
    cost_amount: int


@dataclass(frozen=True)
class BalanceHistoryEntry:
    """A movement paired with the display balance as of that movement."""

    movement: DebtMovement
    balance: int


@dataclass(frozen=True)
class DebtPortfolioSummary:
    """Totals across all debt accounts."""

    total_receivable: int
    total_credit: int
    active_count: int
    overdue_count: int
    paid_off_count: int


@dataclass(frozen=True)
class JournalTotalsEntry:
    """A journal transaction with cumulative totals up to and including it."""

    transaction: FinancialTransaction
    line_profit: Optional[int]
    cumulative_income: int
    cumulative_expense: int
    cumulative_profit: int


@dataclass(frozen=True)
class DailyTotals:
    """Income and expense for one calendar date."""

    date: date
    income: int
    expense: int
    cost_of_goods: int
    count: int


@dataclass(frozen=True)
class CategoryBreakdownEntry:
    """Income summed for one category label."""

    category: str
    amount: int
    count: int
    cost: int

    @property
    def profit(self) -> int:
        return self.amount - self.cost

    @property
    def margin_percent(self) -> float:
        """Profit as a percentage of the category's revenue, 0 without revenue."""
        if self.amount <= 0:
            return 0.0
        return self.profit / self.amount * 100


@dataclass(frozen=True)
class CashflowEntry:
    """One cash movement with the running cash balance after it."""

    occurred_at: datetime
    description: str
    income: int
    expense: int
    balance: int


@dataclass(frozen=True)
class FinancialSummary:
    """Report metrics for a period window."""

    window: PeriodWindow
    now: datetime
    total_revenue: int
    total_expenses: int
    total_cost_of_goods: int
    gross_profit: int
    net_profit: int
    profit_margin_percent: float
    net_margin_percent: float
    transaction_count: int
    receipt_count: int
    time_series: tuple[DailyTotals, ...] = field(default_factory=tuple)
    category_breakdown: tuple[CategoryBreakdownEntry, ...] = field(default_factory=tuple)
    cashflow: tuple[CashflowEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReminderMessage:
    """Inputs and rendered text for a payment reminder."""

    customer_name: str
    customer_phone: Optional[str]
    amount: int
    due_date: Optional[date]
    text: str
