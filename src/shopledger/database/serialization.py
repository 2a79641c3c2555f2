"""Convert domain entities to and from JSON-shaped storage records.

Records use camelCase field names and ISO-8601 dates so they stay
readable by other tools working on the same store.
"""

from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser

from shopledger.domain import entities as domain


def _dump_datetime(value: datetime) -> str:
    return value.isoformat()


def _dump_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _load_datetime(value: str) -> datetime:
    """Parse an ISO timestamp into a naive local datetime.

    Records written by other tools carry a UTC offset (often a trailing
    "Z"); those are shifted into local time and the offset dropped.
    """
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _load_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    return _load_datetime(value).date()


def debt_movement_to_record(movement: domain.DebtMovement) -> dict[str, Any]:
    """Convert a DebtMovement into a storage record."""
    return {
        "id": movement.id,
        "debtAccountId": movement.debt_account_id,
        "kind": movement.kind.value,
        "amount": movement.amount,
        "note": movement.note,
        "occurredAt": _dump_datetime(movement.occurred_at),
        "createdAt": _dump_datetime(movement.created_at),
    }


def debt_movement_from_record(record: dict[str, Any]) -> domain.DebtMovement:
    """Convert a storage record into a DebtMovement."""
    return domain.DebtMovement(
        id=int(record["id"]),
        debt_account_id=int(record["debtAccountId"]),
        kind=domain.MovementKind(record["kind"]),
        amount=int(record["amount"]),
        note=record["note"],
        occurred_at=_load_datetime(record["occurredAt"]),
        created_at=_load_datetime(record["createdAt"]),
    )


def debt_account_to_record(account: domain.DebtAccount) -> dict[str, Any]:
    """Convert a DebtAccount, with its movements embedded, into a storage record."""
    return {
        "id": account.id,
        "customerName": account.customer_name,
        "customerPhone": account.customer_phone,
        "dueDate": _dump_date(account.due_date),
        "totalDebt": account.total_debt,
        "createdAt": _dump_datetime(account.created_at),
        "updatedAt": _dump_datetime(account.updated_at),
        "movements": [debt_movement_to_record(m) for m in account.movements],
    }


def debt_account_from_record(record: dict[str, Any]) -> domain.DebtAccount:
    """Convert a storage record into a DebtAccount.

    The stored ``totalDebt`` is returned as-is; callers decide what to do
    when it disagrees with the movements.
    """
    return domain.DebtAccount(
        id=int(record["id"]),
        customer_name=record["customerName"],
        customer_phone=record.get("customerPhone"),
        due_date=_load_date(record.get("dueDate")),
        total_debt=int(record.get("totalDebt", 0)),
        created_at=_load_datetime(record["createdAt"]),
        updated_at=_load_datetime(record["updatedAt"]),
        movements=tuple(
            debt_movement_from_record(m) for m in record.get("movements", [])
        ),
    )


def transaction_to_record(txn: domain.FinancialTransaction) -> dict[str, Any]:
    """Convert a FinancialTransaction into a storage record."""
    return {
        "id": txn.id,
        "kind": txn.kind.value,
        "grossAmount": txn.gross_amount,
        "costAmount": txn.cost_amount,
        "note": txn.note,
        "category": txn.category,
        "occurredAt": _dump_datetime(txn.occurred_at),
        "customerName": txn.customer_name,
        "customerPhone": txn.customer_phone,
        "paymentStatus": txn.payment_status.value,
        "createdAt": _dump_datetime(txn.created_at),
    }


def transaction_from_record(record: dict[str, Any]) -> domain.FinancialTransaction:
    """Convert a storage record into a FinancialTransaction."""
    cost_amount = record.get("costAmount")
    return domain.FinancialTransaction(
        id=int(record["id"]),
        kind=domain.TransactionKind(record["kind"]),
        gross_amount=int(record["grossAmount"]),
        cost_amount=int(cost_amount) if cost_amount is not None else None,
        note=record["note"],
        category=record.get("category"),
        occurred_at=_load_datetime(record["occurredAt"]),
        customer_name=record.get("customerName"),
        customer_phone=record.get("customerPhone"),
        payment_status=domain.PaymentStatus(record.get("paymentStatus", "settled")),
        created_at=_load_datetime(record["createdAt"]),
    )
