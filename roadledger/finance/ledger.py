"""Mini README: Personal budget ledger of income and expenses.

Structure:
    * TransactionType - enum representing income versus expense entries.
    * Transaction - dataclass storing a signed amount and creation time.
    * BudgetSummary - balance, income and expense totals for display.
    * summarise_transactions - pure totals over any transaction list.
    * BudgetLedger - per-user CRUD on top of the document store.

Amounts are stored signed: positive for income, negative for expenses. The
expense total shown to users is the negated sum of the negative amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..logging_utils import get_logger
from ..storage import InMemoryDocumentStore
from ..utils import parse_number

LOGGER = get_logger(__name__)

TRANSACTIONS = "transactions"


class TransactionType(str, Enum):
    """Enumerate the supported transaction categories."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def from_str(cls, value: str) -> "TransactionType":
        """Coerce arbitrary casing into a valid transaction type."""

        try:
            normalised = value.strip().lower()
            return cls(normalised)
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported transaction type: {value}") from error


@dataclass(slots=True)
class Transaction:
    """A ledger entry with a signed amount."""

    transaction_id: str
    description: str
    amount: float
    transaction_type: TransactionType
    created_at: Optional[datetime] = None

    def as_record(self) -> Dict[str, Any]:
        """Export the transaction with serialisable values."""

        return {
            "id": self.transaction_id,
            "description": self.description,
            "amount": self.amount,
            "type": self.transaction_type.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Transaction":
        created_at = record.get("createdAt")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        amount = parse_number(record.get("amount"))
        raw_type = record.get("type")
        if raw_type:
            transaction_type = TransactionType.from_str(str(raw_type))
        else:
            transaction_type = TransactionType.INCOME if amount >= 0 else TransactionType.EXPENSE
        return cls(
            transaction_id=str(record.get("id", "")),
            description=str(record.get("description", "")),
            amount=amount,
            transaction_type=transaction_type,
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class BudgetSummary:
    """Totals rounded to cents."""

    balance: float = 0.0
    income: float = 0.0
    expense: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {"balance": self.balance, "income": self.income, "expense": self.expense}


def summarise_transactions(transactions: Iterable[Transaction]) -> BudgetSummary:
    """Compute balance, income and expense totals from signed amounts."""

    amounts = [parse_number(transaction.amount) for transaction in transactions]
    income = sum(amount for amount in amounts if amount > 0)
    expense = -sum(amount for amount in amounts if amount < 0)
    return BudgetSummary(
        balance=float(round(sum(amounts), 2)),
        income=float(round(income, 2)),
        expense=float(round(expense, 2)),
    )


def _created_at_key(transaction: Transaction) -> datetime:
    if transaction.created_at is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if transaction.created_at.tzinfo is None:
        return transaction.created_at.replace(tzinfo=timezone.utc)
    return transaction.created_at


class BudgetLedger:
    """Manage one user's transactions in the document store."""

    def __init__(self, store: InMemoryDocumentStore, user_id: str) -> None:
        self.store = store
        self.user_id = user_id

    def add_transaction(
        self,
        description: str,
        amount: object,
        transaction_type: TransactionType | str,
        *,
        created_at: Optional[datetime] = None,
    ) -> Transaction:
        """Validate and store a new entry, signing the amount by type."""

        cleaned = (description or "").strip()
        value = parse_number(amount)
        if not cleaned or value <= 0:
            raise ValueError("Please enter a description and a positive amount.")
        if not isinstance(transaction_type, TransactionType):
            transaction_type = TransactionType.from_str(str(transaction_type))

        transaction = Transaction(
            transaction_id=self.store.new_id(),
            description=cleaned,
            amount=value if transaction_type is TransactionType.INCOME else -value,
            transaction_type=transaction_type,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.store.put(self.user_id, TRANSACTIONS, transaction.transaction_id, transaction.as_record())
        LOGGER.info(
            "Added %s transaction %s (%.2f)",
            transaction_type.value,
            transaction.transaction_id,
            transaction.amount,
        )
        return transaction

    def remove_transaction(self, transaction_id: str) -> None:
        """Delete an entry, raising ``KeyError`` when it is unknown."""

        if self.store.get(self.user_id, TRANSACTIONS, transaction_id) is None:
            raise KeyError(f"Transaction {transaction_id} not found")
        self.store.delete(self.user_id, TRANSACTIONS, transaction_id)

    def list_transactions(self) -> List[Transaction]:
        """Return transactions ordered by most recent creation first."""

        records = self.store.list(self.user_id, TRANSACTIONS)
        return sorted(
            (Transaction.from_record(record) for record in records.values()),
            key=_created_at_key,
            reverse=True,
        )

    def summarise(self) -> BudgetSummary:
        return summarise_transactions(self.list_transactions())
