"""Mini README: Period summaries over recorded trips.

Structure:
    * parse_trip_date - lenient conversion of stored trip dates.
    * PeriodSummary - six headline statistics for a set of trips.
    * summarise_trips - totals for all trips or an inclusive date window.
    * WeekWindow / week_window / shift_week - Monday-start ISO weeks.
    * WeeklySummary / summarise_week - the weekly dashboard card.

Trips whose date cannot be parsed never break a summary: they count in the
all-time view and are left out of every windowed view.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..logging_utils import get_logger
from ..utils import parse_number
from .models import Trip

LOGGER = get_logger(__name__)


def parse_trip_date(value: object) -> Optional[date]:
    """Return the calendar date of ``value`` or ``None`` when unusable."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class PeriodSummary:
    """Aggregate statistics for a collection of trips."""

    total_trips: int = 0
    total_gross: float = 0.0
    total_miles: float = 0.0
    total_profit: float = 0.0
    avg_rpm: float = 0.0
    avg_profit_per_trip: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "totalTrips": self.total_trips,
            "totalGross": self.total_gross,
            "totalMiles": self.total_miles,
            "totalProfit": self.total_profit,
            "avgRpm": self.avg_rpm,
            "avgProfitPerTrip": self.avg_profit_per_trip,
        }


def filter_trips(
    trips: Iterable[Trip],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Trip]:
    """Keep trips dated within ``[start, end]``, both ends inclusive.

    Without a window every trip is kept, including undated ones.
    """

    if start is None and end is None:
        return list(trips)
    selected: List[Trip] = []
    for trip in trips:
        trip_date = parse_trip_date(trip.date)
        if trip_date is None:
            LOGGER.debug("Trip %s has unparseable date %r; excluded from window", trip.trip_id, trip.date)
            continue
        if start is not None and trip_date < start:
            continue
        if end is not None and trip_date > end:
            continue
        selected.append(trip)
    return selected


def _window_bound(value: object, label: str) -> Optional[date]:
    if value is None:
        return None
    bound = parse_trip_date(value)
    if bound is None:
        raise ValueError(f"Unreadable {label} date: {value!r}")
    return bound


def summarise_trips(
    trips: Iterable[Trip],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> PeriodSummary:
    """Summarise trips, optionally restricted to a date window.

    Window bounds may be dates or date strings; a bound that cannot be read
    as a date raises ``ValueError`` instead of widening the window.
    """

    selected = filter_trips(trips, _window_bound(start, "start"), _window_bound(end, "end"))
    if not selected:
        return PeriodSummary()

    total_trips = len(selected)
    total_gross = sum(parse_number(trip.trip_gross) for trip in selected)
    total_miles = sum(parse_number(trip.trip_miles) for trip in selected)
    total_profit = sum(parse_number(trip.calculated_net_profit) for trip in selected)
    return PeriodSummary(
        total_trips=total_trips,
        total_gross=total_gross,
        total_miles=total_miles,
        total_profit=total_profit,
        avg_rpm=total_gross / total_miles if total_miles > 0 else 0.0,
        avg_profit_per_trip=total_profit / total_trips,
    )


@dataclass(frozen=True, slots=True)
class WeekWindow:
    """Monday to Sunday span containing a pivot date."""

    start: date
    end: date

    @property
    def iso_week(self) -> int:
        return self.start.isocalendar()[1]

    @property
    def label(self) -> str:
        return f"Week {self.iso_week}: {self.start:%b %d} - {self.end:%b %d, %Y}"


def week_window(pivot: Optional[date] = None) -> WeekWindow:
    """Return the ISO week (Monday start) containing ``pivot`` (default today)."""

    pivot_date = parse_trip_date(pivot) if pivot is not None else date.today()
    if pivot_date is None:
        raise ValueError(f"Cannot build a week around {pivot!r}")
    start = pivot_date - timedelta(days=pivot_date.weekday())
    return WeekWindow(start=start, end=start + timedelta(days=6))


def shift_week(pivot: date, weeks: int) -> date:
    """Move the pivot by whole weeks; negative values go back in time."""

    return pivot + timedelta(days=7 * weeks)


@dataclass(frozen=True, slots=True)
class WeeklySummary:
    """Statistics for one ISO week plus its display label."""

    window: WeekWindow
    summary: PeriodSummary

    @property
    def label(self) -> str:
        return self.window.label

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "label": self.label,
            "isoWeek": self.window.iso_week,
            "start": self.window.start.isoformat(),
            "end": self.window.end.isoformat(),
        }
        payload.update(self.summary.as_dict())
        return payload


def summarise_week(trips: Sequence[Trip], pivot: Optional[date] = None) -> WeeklySummary:
    """Summarise the trips falling in the week around ``pivot``."""

    window = week_window(pivot)
    summary = summarise_trips(trips, window.start, window.end)
    LOGGER.debug("%s -> %s trips, profit %.2f", window.label, summary.total_trips, summary.total_profit)
    return WeeklySummary(window=window, summary=summary)
