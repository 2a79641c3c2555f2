"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime

# Import entities directly to avoid pulling services in through domain/__init__.py
from shopledger.domain.entities import (
    DebtAccount,
    FinancialTransaction,
    NewDebtMovement,
    PaymentStatus,
    TransactionKind,
)


class Database(ABC):
    """Abstract ledger store for shopledger.

    Implementations store debt accounts with their movements and the
    income/expense journal. Every mutating method is atomic: it either
    applies its full effect or raises without changing anything. The store
    enforces no business rules; services validate before calling it.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the underlying storage."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the underlying storage."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Prepare storage (create tables or load persisted records)."""
        pass

    # Debt account operations
    @abstractmethod
    def create_debt_account(
        self,
        customer_name: str,
        customer_phone: Optional[str],
        due_date: Optional[date],
        opening_movement: NewDebtMovement,
        created_at: datetime,
    ) -> int:
        """Create an account together with its opening movement. Returns account ID.

        The account's total debt is set to the opening movement's signed amount.
        """
        pass

    @abstractmethod
    def get_debt_account(self, account_id: int) -> Optional[DebtAccount]:
        """Get a debt account with its movements in insertion order."""
        pass

    @abstractmethod
    def list_debt_accounts(self) -> list[DebtAccount]:
        """List all debt accounts in creation order."""
        pass

    @abstractmethod
    def append_debt_movement(
        self, account_id: int, movement: NewDebtMovement, total_debt: int
    ) -> int:
        """Append a movement and store the account's new total. Returns movement ID.

        ``updated_at`` of the account is set to the movement's ``created_at``.
        """
        pass

    @abstractmethod
    def update_due_date(
        self, account_id: int, due_date: Optional[date], updated_at: datetime
    ) -> None:
        """Set or clear the due date of an account."""
        pass

    @abstractmethod
    def delete_debt_account(self, account_id: int) -> None:
        """Delete an account and all of its movements."""
        pass

    # Journal operations
    @abstractmethod
    def create_transaction(
        self,
        kind: TransactionKind,
        gross_amount: int,
        note: str,
        occurred_at: datetime,
        created_at: datetime,
        cost_amount: Optional[int] = None,
        category: Optional[str] = None,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        payment_status: PaymentStatus = PaymentStatus.SETTLED,
    ) -> int:
        """Append a journal transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[FinancialTransaction]:
        """Get journal transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self) -> list[FinancialTransaction]:
        """List all journal transactions in insertion order."""
        pass
