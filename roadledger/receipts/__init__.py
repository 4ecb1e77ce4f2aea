"""Mini README: Fuel receipt helpers for the trip calculator.

The OCR/AI collaborator reads a receipt photo and hands back structured
line items. This package only classifies those items and totals the fuel
and DEF spend; it never talks to the AI service itself.
"""

from .classifier import (
    DEF_KEYWORDS,
    DIESEL_KEYWORDS,
    FuelReceiptTotals,
    ItemKind,
    NoFuelItemsError,
    ReceiptItem,
    ZeroFuelExpenseError,
    classify_item,
    classify_receipt_items,
)

__all__ = [
    "DEF_KEYWORDS",
    "DIESEL_KEYWORDS",
    "FuelReceiptTotals",
    "ItemKind",
    "NoFuelItemsError",
    "ReceiptItem",
    "ZeroFuelExpenseError",
    "classify_item",
    "classify_receipt_items",
]
