"""Tests for the transaction journal."""

from datetime import datetime, timedelta

import pytest

from shopledger.domain.entities import (
    CategoryTemplate,
    FinancialTransaction,
    PaymentStatus,
    TransactionKind,
)
from shopledger.domain.errors import NotFoundError, ValidationError
from shopledger.domain.journal import (
    apply_category_template,
    line_profit,
    list_by_filter,
    running_totals,
    total_by_kind,
    total_owed,
)

T0 = datetime(2024, 5, 1, 8, 0)


def make_txn(txn_id, kind, gross, cost=None, note="note", occurred_at=T0,
             customer=None, status=PaymentStatus.SETTLED, category=None):
    return FinancialTransaction(
        id=txn_id,
        kind=kind,
        gross_amount=gross,
        cost_amount=cost,
        note=note,
        category=category,
        occurred_at=occurred_at,
        customer_name=customer,
        customer_phone=None,
        payment_status=status,
        created_at=occurred_at,
    )


class TestRecordTransaction:
    """Tests for recording journal transactions."""

    def test_record_income(self, journal_service, now):
        txn = journal_service.record_transaction(
            kind="income",
            gross_amount=100000,
            cost_amount=60000,
            note="  Rice 10kg ",
            category="Groceries",
        )
        assert txn.id is not None
        assert txn.kind == TransactionKind.INCOME
        assert txn.note == "Rice 10kg"
        assert txn.category == "Groceries"
        assert txn.payment_status == PaymentStatus.SETTLED
        assert txn.occurred_at == now
        assert txn.created_at == now
        assert txn.line_profit == 40000
        assert journal_service.get_transaction(txn.id) == txn

    def test_record_owed_with_customer(self, journal_service):
        txn = journal_service.record_transaction(
            kind=TransactionKind.INCOME,
            gross_amount=25000,
            note="eggs",
            customer_name="Siti",
            customer_phone="0812",
            payment_status="owed",
        )
        assert txn.payment_status == PaymentStatus.OWED
        assert txn.customer_name == "Siti"
        assert txn.customer_phone == "0812"

    def test_record_expense_has_no_profit(self, journal_service):
        txn = journal_service.record_transaction(
            kind="expense", gross_amount=30000, note="Electricity", cost_amount=5000
        )
        assert txn.line_profit is None
        assert line_profit(txn) is None

    def test_backdated_occurred_at(self, journal_service, now):
        yesterday = now - timedelta(days=1)
        txn = journal_service.record_transaction(
            kind="income", gross_amount=1000, note="late entry", occurred_at=yesterday
        )
        assert txn.occurred_at == yesterday
        assert txn.created_at == now

    @pytest.mark.parametrize("amount", [0, -5])
    def test_rejects_non_positive_amount(self, journal_service, amount):
        with pytest.raises(ValidationError):
            journal_service.record_transaction(kind="income", gross_amount=amount, note="x")
        assert journal_service.list_transactions() == ()

    def test_rejects_empty_note(self, journal_service):
        with pytest.raises(ValidationError):
            journal_service.record_transaction(kind="income", gross_amount=10, note="  ")

    def test_rejects_negative_cost(self, journal_service):
        with pytest.raises(ValidationError):
            journal_service.record_transaction(
                kind="income", gross_amount=10, note="x", cost_amount=-1
            )

    @pytest.mark.parametrize(
        "gross, cost",
        [(99.5, None), (True, None), ("100", None), (100, 40.5), (100, False)],
    )
    def test_rejects_non_integer_amounts(self, journal_service, gross, cost):
        with pytest.raises(ValidationError, match="whole number"):
            journal_service.record_transaction(
                kind="income", gross_amount=gross, note="x", cost_amount=cost
            )
        assert journal_service.list_transactions() == []

    def test_zero_cost_is_allowed(self, journal_service):
        txn = journal_service.record_transaction(
            kind="income", gross_amount=10, note="gift", cost_amount=0
        )
        assert txn.cost_amount == 0

    def test_rejects_unknown_kind(self, journal_service):
        with pytest.raises(ValidationError):
            journal_service.record_transaction(kind="transfer", gross_amount=10, note="x")

    def test_rejects_unknown_payment_status(self, journal_service):
        with pytest.raises(ValidationError):
            journal_service.record_transaction(
                kind="income", gross_amount=10, note="x", payment_status="maybe"
            )

    def test_require_unknown_transaction(self, journal_service):
        assert journal_service.get_transaction(404) is None
        with pytest.raises(NotFoundError):
            journal_service.require_transaction(404)


class TestListTransactions:
    """Tests for journal filtering."""

    @pytest.fixture
    def journal(self, journal_service):
        journal_service.record_transaction(
            kind="income", gross_amount=100000, note="Rice", customer_name="Budi"
        )
        journal_service.record_transaction(
            kind="expense", gross_amount=30000, note="Electricity bill"
        )
        journal_service.record_transaction(
            kind="income", gross_amount=20000, note="Eggs", customer_name="Siti",
            payment_status="owed",
        )
        return journal_service

    def test_no_filters_returns_everything_in_order(self, journal):
        notes = [txn.note for txn in journal.list_transactions()]
        assert notes == ["Rice", "Electricity bill", "Eggs"]

    def test_kind_filter(self, journal):
        notes = [txn.note for txn in journal.list_transactions(kind_filter="income")]
        assert notes == ["Rice", "Eggs"]

    def test_status_filter(self, journal):
        notes = [txn.note for txn in journal.list_transactions(payment_status_filter="owed")]
        assert notes == ["Eggs"]

    def test_search_matches_note_or_customer(self, journal):
        assert [t.note for t in journal.list_transactions(search_text="BILL")] == [
            "Electricity bill"
        ]
        assert [t.note for t in journal.list_transactions(search_text="siti")] == ["Eggs"]

    def test_filters_combine(self, journal):
        result = journal.list_transactions(
            search_text="egg", kind_filter="income", payment_status_filter="settled"
        )
        assert result == ()

    def test_all_means_no_filter(self, journal):
        assert len(journal.list_transactions(kind_filter="all", payment_status_filter="all")) == 3

    def test_unknown_kind_filter(self, journal):
        with pytest.raises(ValidationError):
            journal.list_transactions(kind_filter="transfer")


class TestJournalHelpers:
    """Tests for the pure journal helpers."""

    def test_list_by_filter_every_result_matches(self):
        transactions = [
            make_txn(1, TransactionKind.INCOME, 100, note="Soap", customer="Ani"),
            make_txn(2, TransactionKind.INCOME, 200, note="Rice", status=PaymentStatus.OWED),
            make_txn(3, TransactionKind.EXPENSE, 50, note="soap stock"),
        ]
        result = list_by_filter(transactions, search_text="soap", kind_filter="income")
        assert [txn.id for txn in result] == [1]

    def test_totals(self):
        transactions = [
            make_txn(1, TransactionKind.INCOME, 100),
            make_txn(2, TransactionKind.INCOME, 200, status=PaymentStatus.OWED),
            make_txn(3, TransactionKind.EXPENSE, 50, status=PaymentStatus.OWED),
        ]
        assert total_by_kind(transactions, "income") == 300
        assert total_by_kind(transactions, TransactionKind.EXPENSE) == 50
        assert total_owed(transactions) == 250
        assert total_owed([]) == 0

    def test_running_totals_are_chronological(self):
        transactions = [
            make_txn(1, TransactionKind.INCOME, 1000, cost=400, occurred_at=T0 + timedelta(days=1)),
            make_txn(2, TransactionKind.EXPENSE, 300, occurred_at=T0),
            make_txn(3, TransactionKind.INCOME, 500, occurred_at=T0 + timedelta(days=1)),
        ]
        entries = running_totals(transactions)

        assert [e.transaction.id for e in entries] == [2, 1, 3]
        assert [e.cumulative_income for e in entries] == [0, 1000, 1500]
        assert [e.cumulative_expense for e in entries] == [300, 300, 300]
        assert [e.cumulative_profit for e in entries] == [0, 600, 1100]
        assert entries[0].line_profit is None


class TestCategoryTemplates:
    """Tests for category template pre-fill."""

    catalog = [
        CategoryTemplate(id="rice", name="Rice 5kg", default_price=75000, default_cost=60000),
        CategoryTemplate(id="service", name="Phone repair", default_price=50000),
    ]

    def test_known_template(self):
        prefill = apply_category_template("rice", self.catalog)
        assert prefill.category == "Rice 5kg"
        assert prefill.gross_amount == 75000
        assert prefill.cost_amount == 60000

    def test_missing_defaults_become_zero(self):
        prefill = apply_category_template("service", {t.id: t for t in self.catalog})
        assert prefill.category == "Phone repair"
        assert prefill.cost_amount == 0

    @pytest.mark.parametrize("category_id", [None, "", "manual", "unknown"])
    def test_blank_prefill(self, category_id):
        prefill = apply_category_template(category_id, self.catalog)
        assert prefill.category is None
        assert prefill.gross_amount == 0
        assert prefill.cost_amount == 0
