"""In-memory ledger store with optional key-value persistence."""

import logging
import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from shopledger.database.base import Database
from shopledger.database.serialization import (
    debt_account_from_record,
    debt_account_to_record,
    transaction_from_record,
    transaction_to_record,
)
from shopledger.database.storage import KeyValueStorage
from shopledger.domain.entities import (
    DebtAccount,
    DebtMovement,
    FinancialTransaction,
    NewDebtMovement,
    PaymentStatus,
    TransactionKind,
)
from shopledger.domain.errors import NotFoundError, debtor_not_found

logger = logging.getLogger(__name__)

DEBTS_KEY = "debts"
TRANSACTIONS_KEY = "transactions"


class MemoryDatabase(Database):
    """Database implementation that keeps frozen entities in dictionaries.

    Every mutation builds the new state aside, persists it through the
    storage collaborator (when one is configured) and only then swaps it in,
    all under a lock. Readers get the frozen entities themselves, which
    cannot change under them.
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None):
        """Initialize the in-memory store.

        Args:
            storage: Optional key-value collaborator to load from and save to
        """
        self.storage = storage
        self._lock = threading.RLock()
        self._accounts: dict[int, DebtAccount] = {}
        self._transactions: dict[int, FinancialTransaction] = {}
        self._next_account_id = 1
        self._next_movement_id = 1
        self._next_transaction_id = 1

    def connect(self) -> None:
        """Connect to the store."""
        # Nothing to open
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    def initialize_schema(self) -> None:
        """Load persisted accounts and transactions from storage, if any."""
        if self.storage is None:
            return

        with self._lock:
            accounts: dict[int, DebtAccount] = {}
            for record in self.storage.load(DEBTS_KEY) or []:
                account = debt_account_from_record(record)
                folded = sum(m.signed_amount for m in account.movements)
                if folded != account.total_debt:
                    logger.warning(
                        "Debtor %s stored total %s disagrees with its movements (%s); using movements",
                        account.id,
                        account.total_debt,
                        folded,
                    )
                    account = replace(account, total_debt=folded)
                accounts[account.id] = account

            transactions: dict[int, FinancialTransaction] = {}
            for record in self.storage.load(TRANSACTIONS_KEY) or []:
                txn = transaction_from_record(record)
                transactions[txn.id] = txn

            self._accounts = accounts
            self._transactions = transactions
            self._next_account_id = max(accounts, default=0) + 1
            self._next_movement_id = (
                max(
                    (m.id for acc in accounts.values() for m in acc.movements),
                    default=0,
                )
                + 1
            )
            self._next_transaction_id = max(transactions, default=0) + 1
            logger.info(
                "Loaded %d debtors and %d transactions from storage",
                len(accounts),
                len(transactions),
            )

    def _save_accounts(self, accounts: dict[int, DebtAccount]) -> None:
        if self.storage is not None:
            self.storage.save(
                DEBTS_KEY, [debt_account_to_record(acc) for acc in accounts.values()]
            )

    def _save_transactions(self, transactions: dict[int, FinancialTransaction]) -> None:
        if self.storage is not None:
            self.storage.save(
                TRANSACTIONS_KEY, [transaction_to_record(txn) for txn in transactions.values()]
            )

    def _require_account(self, account_id: int) -> DebtAccount:
        account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError(debtor_not_found(account_id))
        return account

    def _commit_accounts(self, accounts: dict[int, DebtAccount]) -> None:
        self._save_accounts(accounts)
        self._accounts = accounts

    # Debt account operations
    def create_debt_account(
        self,
        customer_name: str,
        customer_phone: Optional[str],
        due_date: Optional[date],
        opening_movement: NewDebtMovement,
        created_at: datetime,
    ) -> int:
        """Create an account together with its opening movement. Returns account ID."""
        with self._lock:
            account_id = self._next_account_id
            movement = self._materialize(account_id, self._next_movement_id, opening_movement)
            account = DebtAccount(
                id=account_id,
                customer_name=customer_name,
                customer_phone=customer_phone,
                due_date=due_date,
                total_debt=movement.signed_amount,
                created_at=created_at,
                updated_at=created_at,
                movements=(movement,),
            )
            accounts = dict(self._accounts)
            accounts[account_id] = account
            self._commit_accounts(accounts)
            self._next_account_id += 1
            self._next_movement_id += 1
            return account_id

    def get_debt_account(self, account_id: int) -> Optional[DebtAccount]:
        """Get a debt account with its movements."""
        with self._lock:
            return self._accounts.get(account_id)

    def list_debt_accounts(self) -> list[DebtAccount]:
        """List all debt accounts in creation order."""
        with self._lock:
            return list(self._accounts.values())

    def append_debt_movement(
        self, account_id: int, movement: NewDebtMovement, total_debt: int
    ) -> int:
        """Append a movement and store the account's new total. Returns movement ID."""
        with self._lock:
            account = self._require_account(account_id)
            movement_id = self._next_movement_id
            stored = self._materialize(account_id, movement_id, movement)
            accounts = dict(self._accounts)
            accounts[account_id] = replace(
                account,
                total_debt=total_debt,
                updated_at=movement.created_at,
                movements=account.movements + (stored,),
            )
            self._commit_accounts(accounts)
            self._next_movement_id += 1
            return movement_id

    def update_due_date(
        self, account_id: int, due_date: Optional[date], updated_at: datetime
    ) -> None:
        """Set or clear the due date of an account."""
        with self._lock:
            account = self._require_account(account_id)
            accounts = dict(self._accounts)
            accounts[account_id] = replace(account, due_date=due_date, updated_at=updated_at)
            self._commit_accounts(accounts)

    def delete_debt_account(self, account_id: int) -> None:
        """Delete an account and all of its movements."""
        with self._lock:
            self._require_account(account_id)
            accounts = dict(self._accounts)
            del accounts[account_id]
            self._commit_accounts(accounts)

    # Journal operations
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
        with self._lock:
            transaction_id = self._next_transaction_id
            txn = FinancialTransaction(
                id=transaction_id,
                kind=kind,
                gross_amount=gross_amount,
                cost_amount=cost_amount,
                note=note,
                category=category,
                occurred_at=occurred_at,
                customer_name=customer_name,
                customer_phone=customer_phone,
                payment_status=payment_status,
                created_at=created_at,
            )
            transactions = dict(self._transactions)
            transactions[transaction_id] = txn
            self._save_transactions(transactions)
            self._transactions = transactions
            self._next_transaction_id += 1
            return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[FinancialTransaction]:
        """Get journal transaction by ID."""
        with self._lock:
            return self._transactions.get(transaction_id)

    def list_transactions(self) -> list[FinancialTransaction]:
        """List all journal transactions in insertion order."""
        with self._lock:
            return list(self._transactions.values())

    @staticmethod
    def _materialize(
        account_id: int, movement_id: int, movement: NewDebtMovement
    ) -> DebtMovement:
        return DebtMovement(
            id=movement_id,
            debt_account_id=account_id,
            kind=movement.kind,
            amount=movement.amount,
            note=movement.note,
            occurred_at=movement.occurred_at,
            created_at=movement.created_at,
        )
