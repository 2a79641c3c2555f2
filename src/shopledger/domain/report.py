"""Period and category aggregation for financial reports.

Everything here is a pure function of its arguments: the reference instant
is always passed in, inputs are never mutated and results are tuples of
frozen entities. ``ReportService`` only adds a snapshot of the journal.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, time, timedelta
from typing import Optional, TypeVar, Union

from shopledger.database.base import Database
from shopledger.domain.entities import (
    CashflowEntry,
    CategoryBreakdownEntry,
    DailyTotals,
    FinancialSummary,
    FinancialTransaction,
    PeriodWindow,
    Receipt,
    TransactionKind,
    coerce_choice,
)

logger = logging.getLogger(__name__)

CATEGORY_BREAKDOWN_LIMIT = 5
RECEIPT_DESCRIPTION = "Sale"

Entry = Union[FinancialTransaction, Receipt]
T = TypeVar("T", FinancialTransaction, Receipt)


def window_start(window: PeriodWindow | str, now: datetime) -> Optional[datetime]:
    """Return the first instant covered by ``window``, or None for "all".

    Weeks start on Sunday, so a Sunday ``now`` opens a new week.
    """
    window = coerce_choice(PeriodWindow, window, "period")
    today = now.date()
    if window == PeriodWindow.TODAY:
        start = today
    elif window == PeriodWindow.THIS_WEEK:
        start = today - timedelta(days=(today.weekday() + 1) % 7)
    elif window == PeriodWindow.THIS_MONTH:
        start = today.replace(day=1)
    elif window == PeriodWindow.THIS_YEAR:
        start = today.replace(month=1, day=1)
    else:
        return None
    return datetime.combine(start, time.min)


def in_window(occurred_at: datetime, window: PeriodWindow | str, now: datetime) -> bool:
    """Check whether an instant falls in ``window`` relative to ``now``."""
    window = coerce_choice(PeriodWindow, window, "period")
    if window == PeriodWindow.TODAY:
        return occurred_at.date() == now.date()
    if window == PeriodWindow.THIS_WEEK:
        return occurred_at >= window_start(window, now)
    if window == PeriodWindow.THIS_MONTH:
        return (occurred_at.year, occurred_at.month) == (now.year, now.month)
    if window == PeriodWindow.THIS_YEAR:
        return occurred_at.year == now.year
    return True


def filter_by_window(
    items: Iterable[T], window: PeriodWindow | str, now: datetime
) -> tuple[T, ...]:
    """Keep the items whose ``occurred_at`` falls in ``window``, in input order."""
    window = coerce_choice(PeriodWindow, window, "period")
    return tuple(item for item in items if in_window(item.occurred_at, window, now))


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return part / whole * 100


def build_time_series(
    transactions: Iterable[FinancialTransaction],
    receipts: Iterable[Receipt] = (),
) -> tuple[DailyTotals, ...]:
    """Group receipts and transactions by calendar date, ascending.

    Receipts and income count as income, expense transactions as expense.
    Dates without entries are omitted.
    """
    buckets: dict[date, dict[str, int]] = {}

    def bucket(day: date) -> dict[str, int]:
        return buckets.setdefault(
            day, {"income": 0, "expense": 0, "cost_of_goods": 0, "count": 0}
        )

    for receipt in receipts:
        data = bucket(receipt.occurred_at.date())
        data["income"] += receipt.total
        data["count"] += 1

    for txn in transactions:
        data = bucket(txn.occurred_at.date())
        if txn.kind == TransactionKind.INCOME:
            data["income"] += txn.gross_amount
            data["cost_of_goods"] += txn.cost_amount or 0
        else:
            data["expense"] += txn.gross_amount
        data["count"] += 1

    return tuple(
        DailyTotals(date=day, **buckets[day]) for day in sorted(buckets)
    )


def build_category_breakdown(
    transactions: Iterable[FinancialTransaction],
    limit: int = CATEGORY_BREAKDOWN_LIMIT,
) -> tuple[CategoryBreakdownEntry, ...]:
    """Top categories of income by summed gross amount.

    Only income transactions with a non-blank category count. Categories
    with equal sums keep the order in which they were first seen.
    """
    groups: dict[str, dict[str, int]] = {}
    for txn in transactions:
        if txn.kind != TransactionKind.INCOME:
            continue
        name = (txn.category or "").strip()
        if not name:
            continue
        data = groups.setdefault(name, {"amount": 0, "count": 0, "cost": 0})
        data["amount"] += txn.gross_amount
        data["count"] += 1
        data["cost"] += txn.cost_amount or 0

    ranked = sorted(groups.items(), key=lambda item: item[1]["amount"], reverse=True)
    return tuple(
        CategoryBreakdownEntry(category=name, **data) for name, data in ranked[:limit]
    )


def build_cashflow(
    transactions: Iterable[FinancialTransaction],
    receipts: Iterable[Receipt] = (),
) -> tuple[CashflowEntry, ...]:
    """Chronological cash movements with a running balance.

    Receipts and income add to the balance, expenses subtract. On equal
    ``occurred_at``, receipts come before transactions and input order is
    kept.
    """
    entries: list[Entry] = list(receipts) + list(transactions)
    balance = 0
    flow = []
    for entry in sorted(entries, key=lambda e: e.occurred_at):
        if isinstance(entry, Receipt):
            income, expense, description = entry.total, 0, RECEIPT_DESCRIPTION
        elif entry.kind == TransactionKind.INCOME:
            income, expense, description = entry.gross_amount, 0, entry.note
        else:
            income, expense, description = 0, entry.gross_amount, entry.note
        balance += income - expense
        flow.append(
            CashflowEntry(
                occurred_at=entry.occurred_at,
                description=description,
                income=income,
                expense=expense,
                balance=balance,
            )
        )
    return tuple(flow)


def summarize(
    transactions: Sequence[FinancialTransaction],
    window: PeriodWindow | str,
    now: datetime,
    receipts: Sequence[Receipt] = (),
) -> FinancialSummary:
    """Compute report metrics for ``window`` relative to ``now``.

    Args:
        transactions: Full journal
        window: Period window
        now: Reference instant
        receipts: Optional point-of-sale receipts

    Returns:
        FinancialSummary with totals, margins, time series, category
        breakdown and cashflow for the window
    """
    window = coerce_choice(PeriodWindow, window, "period")
    txns = filter_by_window(transactions, window, now)
    sales = filter_by_window(receipts, window, now)

    income = [t for t in txns if t.kind == TransactionKind.INCOME]
    total_revenue = sum(r.total for r in sales) + sum(t.gross_amount for t in income)
    total_expenses = sum(t.gross_amount for t in txns if t.kind == TransactionKind.EXPENSE)
    total_cost_of_goods = sum(t.cost_amount or 0 for t in income)
    gross_profit = total_revenue - total_cost_of_goods
    net_profit = total_revenue - total_expenses - total_cost_of_goods

    return FinancialSummary(
        window=window,
        now=now,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        total_cost_of_goods=total_cost_of_goods,
        gross_profit=gross_profit,
        net_profit=net_profit,
        profit_margin_percent=_percent(gross_profit, total_revenue),
        net_margin_percent=_percent(net_profit, total_revenue),
        transaction_count=len(txns),
        receipt_count=len(sales),
        time_series=build_time_series(txns, sales),
        category_breakdown=build_category_breakdown(txns),
        cashflow=build_cashflow(txns, sales),
    )


class ReportService:
    """Service for building reports over the stored journal."""

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        """Initialize report service.

        Args:
            db: Database instance
            clock: Callable returning the current instant (defaults to datetime.now)
        """
        self.db = db
        self.clock = clock or datetime.now

    def build_summary(
        self,
        window: PeriodWindow | str = PeriodWindow.ALL,
        now: Optional[datetime] = None,
        receipts: Sequence[Receipt] = (),
    ) -> FinancialSummary:
        """Summarize a snapshot of the journal for a period window."""
        snapshot = tuple(self.db.list_transactions())
        timestamp = now if now is not None else self.clock()
        summary = summarize(snapshot, window, timestamp, receipts=tuple(receipts))
        logger.debug(
            "Built %s summary over %d transactions", summary.window.value, len(snapshot)
        )
        return summary
