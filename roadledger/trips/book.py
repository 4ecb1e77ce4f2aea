"""Mini README: Trip book service tying calculators to storage.

Structure:
    * TripBook - per-driver facade over the document store: settings with
      debounced saves, trip CRUD, fuel receipt booking and summaries.

Every read rebuilds derived values from stored records; nothing is cached
apart from the latest settings, which may still be waiting in the
debounced writer.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from ..logging_utils import get_logger
from ..receipts import ReceiptItem, classify_receipt_items
from ..receipts.classifier import DEFAULT_DISCOUNT_PER_GALLON, FuelReceiptTotals
from ..storage import DebouncedWriter, InMemoryDocumentStore
from .aggregation import PeriodSummary, WeeklySummary, parse_trip_date, summarise_trips, summarise_week
from .calculator import apply_expense_to_snapshot, record_trip, revise_trip, snapshot_expenses
from .models import Trip, UserSettings, default_user_settings
from .settings import SettingsCommand, apply_command

LOGGER = get_logger(__name__)

TRIPS = "trips"
SETTINGS = "settings"
SETTINGS_DOC = "profile"

TripListener = Callable[[List[Trip], PeriodSummary], None]


def sort_trips(trips: Iterable[Trip]) -> List[Trip]:
    """Newest trips first; trips without a usable date go last."""

    dated = []
    undated = []
    for trip in trips:
        trip_date = parse_trip_date(trip.date)
        if trip_date is None:
            undated.append(trip)
        else:
            dated.append((trip_date, trip))
    dated.sort(key=lambda pair: (pair[0], pair[1].trip_id), reverse=True)
    return [trip for _, trip in dated] + undated


class TripBook:
    """Trip calculator operations for a single driver."""

    def __init__(
        self,
        store: InMemoryDocumentStore,
        user_id: str,
        *,
        writer: Optional[DebouncedWriter] = None,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.writer = writer
        self._settings: Optional[UserSettings] = None
        self._settings_lock = threading.RLock()

    # Settings -----------------------------------------------------------------

    def settings(self) -> UserSettings:
        """Return the driver's settings, creating defaults on first use."""

        with self._settings_lock:
            if self._settings is not None:
                return self._settings
            record = self.store.get(self.user_id, SETTINGS, SETTINGS_DOC)
            if record is None:
                self._settings = default_user_settings()
                self._save_settings_now(self._settings)
                LOGGER.info("Created default settings for user %s", self.user_id)
            else:
                self._settings = UserSettings.from_record(record)
            return self._settings

    def apply_settings_command(self, command: SettingsCommand) -> UserSettings:
        """Apply an edit and queue the save behind the debounced writer.

        Edits for one driver are serialised so concurrent commands never
        start from the same settings value.
        """

        with self._settings_lock:
            updated = apply_command(self.settings(), command)
            self._settings = updated
            if self.writer is None:
                self._save_settings_now(updated)
            else:
                self.writer.schedule(self.user_id, updated.as_record())
        return updated

    def _save_settings_now(self, settings: UserSettings) -> None:
        self.store.put(self.user_id, SETTINGS, SETTINGS_DOC, settings.as_record())

    # Trips --------------------------------------------------------------------

    def list_trips(self) -> List[Trip]:
        records = self.store.list(self.user_id, TRIPS)
        return sort_trips(Trip.from_record(record) for record in records.values())

    def get_trip(self, trip_id: str) -> Trip:
        record = self.store.get(self.user_id, TRIPS, trip_id)
        if record is None:
            raise KeyError(f"Trip {trip_id} not found")
        return Trip.from_record(record)

    def create_trip(self, form: Mapping[str, Any]) -> Trip:
        """Record a trip from entry-form values against current settings."""

        trip = record_trip(self.store.new_id(), form, self.settings())
        self._store_trip(trip)
        return trip

    def update_trip(self, trip_id: str, changes: Mapping[str, Any]) -> Trip:
        """Edit a trip and recompute it from its snapshot.

        Trips stored without a snapshot receive one from the current
        settings before the edit is applied.
        """

        trip = self._with_snapshot(self.get_trip(trip_id))
        revised = revise_trip(trip, changes)
        self._store_trip(revised)
        return revised

    def delete_trip(self, trip_id: str) -> None:
        self.store.delete(self.user_id, TRIPS, trip_id)

    def book_fuel_receipt(
        self,
        trip_id: str,
        items: Iterable[Union[ReceiptItem, Mapping[str, Any]]],
        discount_per_gallon: float = DEFAULT_DISCOUNT_PER_GALLON,
    ) -> FuelReceiptTotals:
        """Classify receipt items and add the result to the trip's fuel line.

        Classification failures propagate so the caller can ask for a
        clearer photo; the trip is left untouched in that case.
        """

        totals = classify_receipt_items(items, discount_per_gallon)
        trip = self._with_snapshot(self.get_trip(trip_id))
        snapshot = apply_expense_to_snapshot(trip.trip_expenses, "Fuel", totals.final_expense)
        self._store_trip(revise_trip(trip, {"tripExpenses": snapshot}))
        LOGGER.info("Booked $%.2f of fuel onto trip %s", totals.final_expense, trip_id)
        return totals

    def _with_snapshot(self, trip: Trip) -> Trip:
        if trip.trip_expenses is None:
            LOGGER.warning("Trip %s had no expense snapshot; capturing current settings", trip.trip_id)
            trip.trip_expenses = snapshot_expenses(self.settings())
        return trip

    def _store_trip(self, trip: Trip) -> None:
        self.store.put(self.user_id, TRIPS, trip.trip_id, trip.as_record())

    # Summaries ----------------------------------------------------------------

    def summary(self, start: Optional[date] = None, end: Optional[date] = None) -> PeriodSummary:
        return summarise_trips(self.list_trips(), start, end)

    def weekly_summary(self, pivot: Optional[date] = None) -> WeeklySummary:
        return summarise_week(self.list_trips(), pivot)

    def watch(self, listener: TripListener) -> Callable[[], None]:
        """Call ``listener`` with sorted trips and all-time totals on every change."""

        def _on_snapshot(records: Mapping[str, Mapping[str, Any]]) -> None:
            trips = sort_trips(Trip.from_record(dict(record)) for record in records.values())
            listener(trips, summarise_trips(trips))

        return self.store.subscribe(self.user_id, TRIPS, _on_snapshot)
