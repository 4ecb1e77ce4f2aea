"""Mini README: Keyword classifier for fuel receipt line items.

Structure:
    * ReceiptItem - one product line as reported by the OCR collaborator.
    * ItemKind - diesel, DEF or ignored.
    * classify_item - case-insensitive keyword match for a product name.
    * FuelReceiptTotals - gallons, costs, discount and the final expense.
    * classify_receipt_items - totals a receipt and applies the fleet discount.
    * NoFuelItemsError / ZeroFuelExpenseError - "nothing to book" signals.

Diesel keywords are checked before DEF keywords, so a line such as
"DIESEL EXHAUST FLUID" counts as diesel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from ..logging_utils import get_logger
from ..utils import parse_number

LOGGER = get_logger(__name__)

DIESEL_KEYWORDS: Tuple[str, ...] = (
    "diesel",
    "dsl",
    "fuel",
    "reefer",
    "trkds",
    "trk dsl",
    "auto dsl",
    "trk diesel",
)
DEF_KEYWORDS: Tuple[str, ...] = ("def", "adblue")
DEFAULT_DISCOUNT_PER_GALLON = 0.60


class NoFuelItemsError(ValueError):
    """Raised when a receipt holds nothing recognisable as fuel or DEF."""


class ZeroFuelExpenseError(NoFuelItemsError):
    """Raised when fuel items were found but the expense came to zero."""


class ItemKind(str, Enum):
    DIESEL = "diesel"
    DEF = "def"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class ReceiptItem:
    """Single product line extracted from a fuel receipt."""

    product_name: str
    gallons: float = 0.0
    cost: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReceiptItem":
        """Build an item from ``{productName, gallons, cost}`` JSON."""

        return cls(
            product_name=str(payload.get("productName") or ""),
            gallons=parse_number(payload.get("gallons")),
            cost=parse_number(payload.get("cost")),
        )


def classify_item(product_name: str) -> ItemKind:
    """Return the kind of a product line by substring keyword match."""

    lowered = product_name.lower()
    if any(keyword in lowered for keyword in DIESEL_KEYWORDS):
        return ItemKind.DIESEL
    if any(keyword in lowered for keyword in DEF_KEYWORDS):
        return ItemKind.DEF
    return ItemKind.IGNORED


@dataclass(frozen=True, slots=True)
class FuelReceiptTotals:
    """Accumulated fuel and DEF spend for one receipt."""

    total_diesel_gallons: float
    total_diesel_cost: float
    total_def_cost: float
    discount: float
    diesel_cost_after_discount: float
    final_expense: float
    recognised_items: List[ReceiptItem] = field(default_factory=list)
    ignored_items: List[ReceiptItem] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "totalDieselGallons": self.total_diesel_gallons,
            "totalDieselCost": self.total_diesel_cost,
            "totalDefCost": self.total_def_cost,
            "discount": self.discount,
            "dieselCostAfterDiscount": self.diesel_cost_after_discount,
            "finalExpense": self.final_expense,
            "recognisedItems": [item.product_name for item in self.recognised_items],
            "ignoredItems": [item.product_name for item in self.ignored_items],
        }


def classify_receipt_items(
    items: Iterable[Union[ReceiptItem, Mapping[str, Any]]],
    discount_per_gallon: float = DEFAULT_DISCOUNT_PER_GALLON,
) -> FuelReceiptTotals:
    """Total the diesel and DEF lines of a receipt.

    The discount is ``gallons * discount_per_gallon`` and the discounted
    diesel cost never drops below zero. Raises ``NoFuelItemsError`` when no
    line matched and ``ZeroFuelExpenseError`` when matched lines add up to
    nothing, so callers never book an empty expense.
    """

    diesel_gallons = 0.0
    diesel_cost = 0.0
    def_cost = 0.0
    recognised: List[ReceiptItem] = []
    ignored: List[ReceiptItem] = []

    for raw in items:
        item = raw if isinstance(raw, ReceiptItem) else ReceiptItem.from_payload(raw)
        kind = classify_item(item.product_name)
        if kind is ItemKind.DIESEL:
            diesel_gallons += parse_number(item.gallons)
            diesel_cost += parse_number(item.cost)
            recognised.append(item)
        elif kind is ItemKind.DEF:
            def_cost += parse_number(item.cost)
            recognised.append(item)
        else:
            ignored.append(item)

    if not recognised:
        LOGGER.warning("No fuel or DEF lines among %s receipt items", len(ignored))
        raise NoFuelItemsError("No recognisable fuel or DEF items on this receipt.")

    discount = diesel_gallons * parse_number(discount_per_gallon)
    diesel_after_discount = max(0.0, diesel_cost - discount)
    final_expense = diesel_after_discount + def_cost
    LOGGER.debug(
        "Receipt: diesel %.3f gal $%.2f, discount $%.2f, DEF $%.2f -> $%.2f",
        diesel_gallons,
        diesel_cost,
        discount,
        def_cost,
        final_expense,
    )
    if final_expense <= 0:
        raise ZeroFuelExpenseError("Fuel items were recognised but their total is zero.")

    return FuelReceiptTotals(
        total_diesel_gallons=diesel_gallons,
        total_diesel_cost=diesel_cost,
        total_def_cost=def_cost,
        discount=discount,
        diesel_cost_after_discount=diesel_after_discount,
        final_expense=final_expense,
        recognised_items=recognised,
        ignored_items=ignored,
    )
