"""Mini README: Tests covering the personal budget ledger.

Structure:
    * signed storage of income and expenses.
    * validation of description and amount.
    * newest-first ordering and summary totals.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from roadledger.finance import BudgetLedger, Transaction, TransactionType, summarise_transactions
from roadledger.storage import InMemoryDocumentStore


@pytest.fixture()
def ledger() -> BudgetLedger:
    return BudgetLedger(InMemoryDocumentStore(), "driver-1")


def test_amounts_are_signed_by_type(ledger: BudgetLedger) -> None:
    income = ledger.add_transaction("Salary", "1500", "Income")
    expense = ledger.add_transaction("Groceries", 45.5, TransactionType.EXPENSE)

    assert income.amount == pytest.approx(1500.0)
    assert expense.amount == pytest.approx(-45.5)
    assert expense.transaction_type is TransactionType.EXPENSE


@pytest.mark.parametrize(("description", "amount"), [("", 10), ("   ", 10), ("Rent", 0), ("Rent", -5), ("Rent", "abc")])
def test_invalid_entries_are_rejected(ledger: BudgetLedger, description: str, amount: object) -> None:
    with pytest.raises(ValueError):
        ledger.add_transaction(description, amount, "expense")


def test_unknown_type_is_rejected(ledger: BudgetLedger) -> None:
    with pytest.raises(ValueError):
        ledger.add_transaction("Gift", 10, "donation")


def test_transactions_listed_newest_first(ledger: BudgetLedger) -> None:
    ledger.add_transaction("Old", 10, "income", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    ledger.add_transaction("New", 20, "income", created_at=datetime(2024, 3, 1, tzinfo=timezone.utc))

    assert [entry.description for entry in ledger.list_transactions()] == ["New", "Old"]


def test_summary_reports_balance_income_and_expense(ledger: BudgetLedger) -> None:
    ledger.add_transaction("Salary", 1000, "income")
    ledger.add_transaction("Rent", 600.10, "expense")
    ledger.add_transaction("Fuel", 99.95, "expense")

    summary = ledger.summarise()
    assert summary.income == pytest.approx(1000.0)
    assert summary.expense == pytest.approx(700.05)
    assert summary.balance == pytest.approx(299.95)


def test_empty_summary_is_zero() -> None:
    summary = summarise_transactions([])
    assert summary.as_dict() == {"balance": 0.0, "income": 0.0, "expense": 0.0}


def test_remove_transaction(ledger: BudgetLedger) -> None:
    entry = ledger.add_transaction("Salary", 1000, "income")
    ledger.remove_transaction(entry.transaction_id)
    assert ledger.list_transactions() == []
    with pytest.raises(KeyError):
        ledger.remove_transaction(entry.transaction_id)


def test_record_without_type_infers_from_sign() -> None:
    transaction = Transaction.from_record({"id": "x", "description": "Refund", "amount": -5})
    assert transaction.transaction_type is TransactionType.EXPENSE
