"""Mini README: Data structures for the trip-profit calculator.

Structure:
    * ExpenseLine - one deductible cost category (standard or custom).
    * CompanyTerms - rent, percentage and per-mile charges of the carrier.
    * UserSettings - a driver's live expense configuration.
    * ExpenseSnapshot - the configuration frozen onto a trip when recorded.
    * Trip - a recorded trip with its derived ``calculated_*`` figures.

Settings and snapshots are immutable; edits produce new values through the
reducer in ``roadledger.trips.settings``. Records exchanged with the
document store use camelCase keys, which ``as_record``/``from_record``
translate.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from ..utils import parse_number

STANDARD_EXPENSE_NAMES: Tuple[str, ...] = (
    "Fuel",
    "DEF",
    "Tolls",
    "Insurance",
    "Maintenance",
    "Food",
    "Parking",
)


def new_expense_id() -> str:
    """Generate an identifier for a custom expense line."""

    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class ExpenseLine:
    """A toggleable expense category with a non-negative amount."""

    name: str
    enabled: bool = True
    amount: float = 0.0
    expense_id: Optional[str] = None

    def contribution(self) -> float:
        """Amount counted towards additional expenses."""

        return parse_number(self.amount) if self.enabled else 0.0

    def as_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "name": self.name,
            "enabled": self.enabled,
            "amount": self.amount,
        }
        if self.expense_id is not None:
            record["id"] = self.expense_id
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ExpenseLine":
        return cls(
            name=str(record.get("name", "")),
            enabled=bool(record.get("enabled", True)),
            amount=max(0.0, parse_number(record.get("amount"))),
            expense_id=record.get("id"),
        )


def _lines_from_records(records: Optional[Iterable[Dict[str, Any]]]) -> Tuple[ExpenseLine, ...]:
    return tuple(ExpenseLine.from_record(record) for record in records or ())


@dataclass(frozen=True, slots=True)
class CompanyTerms:
    """Charges levied by the contracting company."""

    rent_per_week: float = 0.0
    percentage_from_gross: float = 0.0
    rate_per_mile_company_charge: float = 0.0

    def as_record(self) -> Dict[str, float]:
        return {
            "rentPerWeek": self.rent_per_week,
            "percentageFromGross": self.percentage_from_gross,
            "ratePerMileCompanyCharge": self.rate_per_mile_company_charge,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CompanyTerms":
        return cls(
            rent_per_week=parse_number(record.get("rentPerWeek")),
            percentage_from_gross=parse_number(record.get("percentageFromGross")),
            rate_per_mile_company_charge=parse_number(record.get("ratePerMileCompanyCharge")),
        )


@dataclass(frozen=True, slots=True)
class UserSettings:
    """Live expense configuration for one driver."""

    nickname: str = ""
    terms: CompanyTerms = field(default_factory=CompanyTerms)
    expenses: Tuple[ExpenseLine, ...] = ()
    custom_expenses: Tuple[ExpenseLine, ...] = ()

    def as_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"nickname": self.nickname}
        record.update(self.terms.as_record())
        record["expenses"] = [line.as_record() for line in self.expenses]
        record["customExpenses"] = [line.as_record() for line in self.custom_expenses]
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserSettings":
        return cls(
            nickname=str(record.get("nickname", "")),
            terms=CompanyTerms.from_record(record),
            expenses=_lines_from_records(record.get("expenses")),
            custom_expenses=_lines_from_records(record.get("customExpenses")),
        )


def default_user_settings(nickname: str = "") -> UserSettings:
    """Settings created the first time a driver opens the calculator."""

    return UserSettings(
        nickname=nickname,
        expenses=tuple(ExpenseLine(name=name) for name in STANDARD_EXPENSE_NAMES),
    )


@dataclass(frozen=True, slots=True)
class ExpenseSnapshot:
    """Expense configuration captured when a trip is recorded."""

    standard: Tuple[ExpenseLine, ...] = ()
    custom: Tuple[ExpenseLine, ...] = ()
    terms: CompanyTerms = field(default_factory=CompanyTerms)

    def as_record(self) -> Dict[str, Any]:
        return {
            "standard": [line.as_record() for line in self.standard],
            "custom": [line.as_record() for line in self.custom],
            "companyTerms": self.terms.as_record(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ExpenseSnapshot":
        return cls(
            standard=_lines_from_records(record.get("standard")),
            custom=_lines_from_records(record.get("custom")),
            terms=CompanyTerms.from_record(record.get("companyTerms") or {}),
        )


@dataclass(slots=True)
class Trip:
    """A single recorded trip and its derived financial figures."""

    trip_id: str
    date: str
    days_in_trip: int = 1
    from_location: str = ""
    to_location: str = ""
    trip_gross: float = 0.0
    trip_miles: float = 0.0
    notes: str = ""
    trip_expenses: Optional[ExpenseSnapshot] = None
    calculated_company_deductions: float = 0.0
    calculated_additional_expenses: float = 0.0
    calculated_total_expenses: float = 0.0
    calculated_net_profit: float = 0.0
    calculated_rate_per_mile: float = 0.0

    def as_record(self) -> Dict[str, Any]:
        """Export the trip using the document store's field names."""

        return {
            "id": self.trip_id,
            "date": self.date,
            "daysInTrip": self.days_in_trip,
            "fromLocation": self.from_location,
            "toLocation": self.to_location,
            "tripGross": self.trip_gross,
            "tripMiles": self.trip_miles,
            "notes": self.notes,
            "tripExpenses": self.trip_expenses.as_record() if self.trip_expenses else None,
            "calculatedCompanyDeductions": self.calculated_company_deductions,
            "calculatedAdditionalExpenses": self.calculated_additional_expenses,
            "calculatedTotalExpenses": self.calculated_total_expenses,
            "calculatedNetProfit": self.calculated_net_profit,
            "calculatedRatePerMile": self.calculated_rate_per_mile,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Trip":
        snapshot = record.get("tripExpenses")
        return cls(
            trip_id=str(record.get("id", "")),
            date=str(record.get("date") or ""),
            days_in_trip=int(parse_number(record.get("daysInTrip"))) or 1,
            from_location=str(record.get("fromLocation") or ""),
            to_location=str(record.get("toLocation") or ""),
            trip_gross=parse_number(record.get("tripGross")),
            trip_miles=parse_number(record.get("tripMiles")),
            notes=str(record.get("notes") or ""),
            trip_expenses=ExpenseSnapshot.from_record(snapshot) if snapshot else None,
            calculated_company_deductions=parse_number(record.get("calculatedCompanyDeductions")),
            calculated_additional_expenses=parse_number(record.get("calculatedAdditionalExpenses")),
            calculated_total_expenses=parse_number(record.get("calculatedTotalExpenses")),
            calculated_net_profit=parse_number(record.get("calculatedNetProfit")),
            calculated_rate_per_mile=parse_number(record.get("calculatedRatePerMile")),
        )
