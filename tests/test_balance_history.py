"""Tests for the pure debt helpers."""

from datetime import date, datetime, timedelta

from shopledger.domain.debt import (
    fold_movements,
    is_overdue,
    portfolio_summary,
    running_balance_history,
    sort_debtors,
)
from shopledger.domain.entities import DebtAccount, DebtMovement, DebtorSortKey, MovementKind

T0 = datetime(2024, 5, 1, 9, 0)


def make_movement(movement_id, kind, amount, occurred_at, note="note"):
    return DebtMovement(
        id=movement_id,
        debt_account_id=1,
        kind=kind,
        amount=amount,
        note=note,
        occurred_at=occurred_at,
        created_at=occurred_at,
    )


def make_account(movements, due_date=None, account_id=1, name="Budi"):
    return DebtAccount(
        id=account_id,
        customer_name=name,
        customer_phone=None,
        due_date=due_date,
        total_debt=fold_movements(movements),
        created_at=T0,
        updated_at=T0,
        movements=tuple(movements),
    )


def test_fold_movements():
    movements = [
        make_movement(1, MovementKind.GIVE, 100000, T0),
        make_movement(2, MovementKind.RECEIVE, 40000, T0),
        make_movement(3, MovementKind.GIVE, 5000, T0),
    ]
    assert fold_movements(movements) == 65000
    assert fold_movements([]) == 0


def test_history_is_most_recent_first():
    movements = [
        make_movement(1, MovementKind.GIVE, 100000, T0),
        make_movement(2, MovementKind.RECEIVE, 40000, T0 + timedelta(days=2)),
        make_movement(3, MovementKind.GIVE, 10000, T0 + timedelta(days=1)),
    ]
    history = running_balance_history(make_account(movements))

    assert [entry.movement.id for entry in history] == [2, 3, 1]
    assert [entry.balance for entry in history] == [70000, 110000, 100000]


def test_history_first_entry_matches_total_when_positive():
    movements = [
        make_movement(1, MovementKind.GIVE, 50000, T0),
        make_movement(2, MovementKind.RECEIVE, 20000, T0 + timedelta(hours=1)),
    ]
    account = make_account(movements)
    history = running_balance_history(account)
    assert history[0].balance == account.total_debt == 30000


def test_history_ties_keep_insertion_order():
    movements = [
        make_movement(1, MovementKind.GIVE, 1000, T0),
        make_movement(2, MovementKind.GIVE, 2000, T0),
        make_movement(3, MovementKind.RECEIVE, 500, T0),
    ]
    history = running_balance_history(make_account(movements))

    assert [entry.movement.id for entry in history] == [1, 2, 3]
    # Folded from the last entry of the sequence
    assert [entry.balance for entry in history] == [2500, 1500, 0]


def test_history_clamps_balance_at_zero():
    movements = [
        make_movement(1, MovementKind.GIVE, 10000, T0),
        make_movement(2, MovementKind.RECEIVE, 15000, T0 + timedelta(hours=1)),
        make_movement(3, MovementKind.GIVE, 2000, T0 + timedelta(hours=2)),
    ]
    account = make_account(movements)
    history = running_balance_history(account)

    assert [entry.balance for entry in history] == [0, 0, 10000]
    assert account.total_debt == -3000


def test_history_is_deterministic_and_pure():
    movements = [
        make_movement(1, MovementKind.GIVE, 10000, T0),
        make_movement(2, MovementKind.RECEIVE, 3000, T0 + timedelta(hours=1)),
    ]
    account = make_account(movements)
    first = running_balance_history(account)
    second = running_balance_history(account)

    assert first == second
    assert [m.id for m in account.movements] == [1, 2]


def test_overdue_requires_outstanding_debt():
    now = datetime(2024, 5, 15, 12, 0)
    owing = make_account([make_movement(1, MovementKind.GIVE, 1000, T0)], due_date=date(2024, 5, 14))
    settled = make_account(
        [
            make_movement(1, MovementKind.GIVE, 1000, T0),
            make_movement(2, MovementKind.RECEIVE, 1000, T0),
        ],
        due_date=date(2024, 5, 14),
    )
    assert is_overdue(owing, now)
    assert not is_overdue(settled, now)
    assert not is_overdue(owing, datetime(2024, 5, 14, 23, 59))


def test_sort_by_due_date_descending_puts_undated_first():
    dated_early = make_account(
        [make_movement(1, MovementKind.GIVE, 1, T0)], due_date=date(2024, 1, 1), account_id=1
    )
    dated_late = make_account(
        [make_movement(2, MovementKind.GIVE, 1, T0)], due_date=date(2024, 6, 1), account_id=2
    )
    undated = make_account([make_movement(3, MovementKind.GIVE, 1, T0)], account_id=3)

    ordered = sort_debtors([dated_early, undated, dated_late], DebtorSortKey.DUE_DATE, True)
    assert [acc.id for acc in ordered] == [3, 2, 1]


def test_portfolio_summary_of_nothing():
    summary = portfolio_summary([], T0)
    assert summary.total_receivable == 0
    assert summary.total_credit == 0
    assert summary.active_count == summary.overdue_count == summary.paid_off_count == 0
