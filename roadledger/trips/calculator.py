"""Mini README: Trip cost and profit calculator.

Structure:
    * TripCalculation - derived figures for one trip plus intermediate charges.
    * calculate_trip - pure breakdown of a trip against its expense configuration.
    * snapshot_expenses / record_trip / revise_trip / recalculate_trip - trip
      lifecycle helpers that keep the ``calculated_*`` fields in step.
    * apply_expense_to_snapshot - books an extra amount onto a standard line.

Every function here is referentially transparent: callers re-run them
whenever trips or settings change instead of caching partial results. A
recorded trip is always evaluated against its own snapshot so later edits
to live settings never rewrite history.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from ..logging_utils import get_logger
from ..utils import parse_number
from .models import ExpenseLine, ExpenseSnapshot, Trip, UserSettings

LOGGER = get_logger(__name__)

ExpenseSource = Union[ExpenseSnapshot, UserSettings]

# Form keys accepted by ``record_trip``/``revise_trip`` mapped to Trip attributes.
_FORM_FIELDS = {
    "date": "date",
    "daysInTrip": "days_in_trip",
    "fromLocation": "from_location",
    "toLocation": "to_location",
    "tripGross": "trip_gross",
    "tripMiles": "trip_miles",
    "notes": "notes",
}


@dataclass(frozen=True, slots=True)
class TripCalculation:
    """Cost breakdown and profit for a single trip."""

    rent_charge: float
    percentage_charge: float
    company_mile_charge: float
    company_deductions: float
    standard_expense_sum: float
    custom_expense_sum: float
    additional_expenses: float
    total_expenses: float
    net_profit: float
    rate_per_mile: float

    @property
    def profitable(self) -> bool:
        return self.net_profit >= 0

    def as_dict(self) -> Dict[str, float]:
        return {
            "rentCharge": self.rent_charge,
            "percentageCharge": self.percentage_charge,
            "companyMileCharge": self.company_mile_charge,
            "companyDeductions": self.company_deductions,
            "standardExpenseSum": self.standard_expense_sum,
            "customExpenseSum": self.custom_expense_sum,
            "additionalExpenses": self.additional_expenses,
            "totalExpenses": self.total_expenses,
            "netProfit": self.net_profit,
            "ratePerMile": self.rate_per_mile,
        }


def _enabled_sum(lines: Iterable[ExpenseLine]) -> float:
    return sum((line.contribution() for line in lines), 0.0)


def _split_source(source: ExpenseSource) -> Tuple[Any, Tuple[ExpenseLine, ...], Tuple[ExpenseLine, ...]]:
    if isinstance(source, ExpenseSnapshot):
        return source.terms, source.standard, source.custom
    return source.terms, source.expenses, source.custom_expenses


def calculate_breakdown(
    trip_gross: object,
    trip_miles: object,
    days_in_trip: object,
    source: ExpenseSource,
) -> TripCalculation:
    """Compute company deductions, expenses, net profit and rate per mile.

    Inputs are raw field values; each one goes through ``parse_number`` so
    blank or malformed entries count as zero. Zero days are treated as one.
    """

    terms, standard, custom = _split_source(source)
    gross = parse_number(trip_gross)
    miles = parse_number(trip_miles)
    days = parse_number(days_in_trip) or 1

    rent_charge = (parse_number(terms.rent_per_week) / 7) * days
    percentage_charge = gross * (parse_number(terms.percentage_from_gross) / 100)
    company_mile_charge = miles * parse_number(terms.rate_per_mile_company_charge)
    company_deductions = rent_charge + percentage_charge + company_mile_charge

    standard_sum = _enabled_sum(standard)
    custom_sum = _enabled_sum(custom)
    additional_expenses = standard_sum + custom_sum

    total_expenses = company_deductions + additional_expenses
    net_profit = gross - total_expenses
    rate_per_mile = gross / miles if miles > 0 else 0.0

    return TripCalculation(
        rent_charge=rent_charge,
        percentage_charge=percentage_charge,
        company_mile_charge=company_mile_charge,
        company_deductions=company_deductions,
        standard_expense_sum=standard_sum,
        custom_expense_sum=custom_sum,
        additional_expenses=additional_expenses,
        total_expenses=total_expenses,
        net_profit=net_profit,
        rate_per_mile=rate_per_mile,
    )


def calculate_trip(trip: Trip, settings: Optional[UserSettings] = None) -> TripCalculation:
    """Calculate a trip, preferring its snapshot over live ``settings``."""

    source: Optional[ExpenseSource] = trip.trip_expenses or settings
    if source is None:
        raise ValueError(
            f"Trip {trip.trip_id or '<new>'} has no expense snapshot and no settings were supplied."
        )
    calculation = calculate_breakdown(trip.trip_gross, trip.trip_miles, trip.days_in_trip, source)
    LOGGER.debug(
        "Calculated trip %s: gross=%.2f deductions=%.2f additional=%.2f net=%.2f",
        trip.trip_id,
        parse_number(trip.trip_gross),
        calculation.company_deductions,
        calculation.additional_expenses,
        calculation.net_profit,
    )
    return calculation


def snapshot_expenses(settings: UserSettings) -> ExpenseSnapshot:
    """Freeze the expense configuration that applies to a new trip."""

    return ExpenseSnapshot(
        standard=tuple(settings.expenses),
        custom=tuple(settings.custom_expenses),
        terms=settings.terms,
    )


def _with_calculation(trip: Trip, calculation: TripCalculation) -> Trip:
    return replace(
        trip,
        calculated_company_deductions=calculation.company_deductions,
        calculated_additional_expenses=calculation.additional_expenses,
        calculated_total_expenses=calculation.total_expenses,
        calculated_net_profit=calculation.net_profit,
        calculated_rate_per_mile=calculation.rate_per_mile,
    )


def _coerce_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate entry-form keys into parsed Trip attribute values."""

    values: Dict[str, Any] = {}
    for key, attribute in _FORM_FIELDS.items():
        if key not in form:
            continue
        raw = form[key]
        if attribute in {"trip_gross", "trip_miles"}:
            values[attribute] = parse_number(raw)
        elif attribute == "days_in_trip":
            values[attribute] = int(parse_number(raw)) or 1
        else:
            values[attribute] = "" if raw is None else str(raw).strip()
    return values


def recalculate_trip(trip: Trip) -> Trip:
    """Return a copy of ``trip`` with derived fields recomputed from its snapshot."""

    if trip.trip_expenses is None:
        raise ValueError(f"Trip {trip.trip_id} has no expense snapshot to recalculate from.")
    return _with_calculation(trip, calculate_trip(trip))


def record_trip(trip_id: str, form: Mapping[str, Any], settings: UserSettings) -> Trip:
    """Create a trip from entry-form values, snapshotting the live settings."""

    values = _coerce_form(form)
    if not values.get("date"):
        raise ValueError("A trip date is required.")
    trip = Trip(trip_id=trip_id, trip_expenses=snapshot_expenses(settings), **values)
    recorded = recalculate_trip(trip)
    LOGGER.info("Recorded trip %s with net profit %.2f", trip_id, recorded.calculated_net_profit)
    return recorded


def revise_trip(trip: Trip, changes: Mapping[str, Any]) -> Trip:
    """Apply form edits to a trip and recompute it from its own snapshot.

    ``changes`` may also carry ``tripExpenses`` (a snapshot record or an
    ``ExpenseSnapshot``) when the driver adjusts the lines of that trip.
    """

    values = _coerce_form(changes)
    if "date" in values and not values["date"]:
        raise ValueError("A trip date is required.")
    snapshot = changes.get("tripExpenses")
    if isinstance(snapshot, Mapping):
        values["trip_expenses"] = ExpenseSnapshot.from_record(snapshot)
    elif isinstance(snapshot, ExpenseSnapshot):
        values["trip_expenses"] = snapshot
    return recalculate_trip(replace(trip, **values))


def apply_expense_to_snapshot(snapshot: ExpenseSnapshot, name: str, amount: float) -> ExpenseSnapshot:
    """Add ``amount`` to the standard line called ``name`` and enable it."""

    lowered = name.strip().lower()
    standard = list(snapshot.standard)
    for index, line in enumerate(standard):
        if line.name.lower() == lowered:
            standard[index] = replace(
                line,
                enabled=True,
                amount=parse_number(line.amount) + max(0.0, parse_number(amount)),
            )
            return replace(snapshot, standard=tuple(standard))
    raise KeyError(f"Expense line '{name}' not present on this trip")
