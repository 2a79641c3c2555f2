"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the ORM schema can change
without touching the services.
"""

from shopledger.domain import entities as domain
from shopledger.database.models import (
    DebtAccount as ORMDebtAccount,
    DebtMovement as ORMDebtMovement,
    FinancialTransaction as ORMFinancialTransaction,
)


def debt_movement_to_domain(orm_movement: ORMDebtMovement) -> domain.DebtMovement:
    """Convert SQLAlchemy DebtMovement model to domain DebtMovement entity."""
    return domain.DebtMovement(
        id=orm_movement.id,
        debt_account_id=orm_movement.debt_account_id,
        kind=domain.MovementKind(orm_movement.kind),
        amount=orm_movement.amount,
        note=orm_movement.note,
        occurred_at=orm_movement.occurred_at,
        created_at=orm_movement.created_at,
    )


def debt_account_to_domain(orm_account: ORMDebtAccount) -> domain.DebtAccount:
    """Convert SQLAlchemy DebtAccount model (with movements) to domain entity."""
    return domain.DebtAccount(
        id=orm_account.id,
        customer_name=orm_account.customer_name,
        customer_phone=orm_account.customer_phone,
        due_date=orm_account.due_date,
        total_debt=orm_account.total_debt,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
        movements=tuple(debt_movement_to_domain(m) for m in orm_account.movements),
    )


def new_movement_to_orm(movement: domain.NewDebtMovement) -> ORMDebtMovement:
    """Build an unsaved SQLAlchemy DebtMovement from a validated movement."""
    return ORMDebtMovement(
        kind=movement.kind.value,
        amount=movement.amount,
        note=movement.note,
        occurred_at=movement.occurred_at,
        created_at=movement.created_at,
    )


def transaction_to_domain(
    orm_transaction: ORMFinancialTransaction,
) -> domain.FinancialTransaction:
    """Convert SQLAlchemy FinancialTransaction model to domain entity."""
    return domain.FinancialTransaction(
        id=orm_transaction.id,
        kind=domain.TransactionKind(orm_transaction.kind),
        gross_amount=orm_transaction.gross_amount,
        cost_amount=orm_transaction.cost_amount,
        note=orm_transaction.note,
        category=orm_transaction.category,
        occurred_at=orm_transaction.occurred_at,
        customer_name=orm_transaction.customer_name,
        customer_phone=orm_transaction.customer_phone,
        payment_status=domain.PaymentStatus(orm_transaction.payment_status),
        created_at=orm_transaction.created_at,
    )
