"""Mini README: Trucking trip-profit calculator.

The package is split into ``models`` (records and settings), ``calculator``
(per-trip breakdown), ``aggregation`` (period and weekly summaries),
``settings`` (edit commands and reducer) and ``book`` (the service that
persists trips through a document store).
"""

from .aggregation import (
    PeriodSummary,
    WeekWindow,
    WeeklySummary,
    parse_trip_date,
    shift_week,
    summarise_trips,
    summarise_week,
    week_window,
)
from .book import TripBook
from .calculator import (
    TripCalculation,
    apply_expense_to_snapshot,
    calculate_breakdown,
    calculate_trip,
    recalculate_trip,
    record_trip,
    revise_trip,
    snapshot_expenses,
)
from .models import (
    CompanyTerms,
    ExpenseLine,
    ExpenseSnapshot,
    STANDARD_EXPENSE_NAMES,
    Trip,
    UserSettings,
    default_user_settings,
)
from .settings import apply_command, command_from_payload

__all__ = [
    "CompanyTerms",
    "ExpenseLine",
    "ExpenseSnapshot",
    "PeriodSummary",
    "STANDARD_EXPENSE_NAMES",
    "Trip",
    "TripBook",
    "TripCalculation",
    "UserSettings",
    "WeekWindow",
    "WeeklySummary",
    "apply_command",
    "apply_expense_to_snapshot",
    "calculate_breakdown",
    "calculate_trip",
    "command_from_payload",
    "default_user_settings",
    "parse_trip_date",
    "recalculate_trip",
    "record_trip",
    "revise_trip",
    "shift_week",
    "snapshot_expenses",
    "summarise_trips",
    "summarise_week",
    "week_window",
]
