"""Mini README: Personal budget tracking for RoadLedger.

The ledger records income and expenses with signed amounts and reports a
running balance. Storage is delegated to the shared document store so the
same listeners that drive the trip calculator can refresh budget views.
"""

from .ledger import (
    BudgetLedger,
    BudgetSummary,
    Transaction,
    TransactionType,
    summarise_transactions,
)

__all__ = [
    "BudgetLedger",
    "BudgetSummary",
    "Transaction",
    "TransactionType",
    "summarise_transactions",
]
