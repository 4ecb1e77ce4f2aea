"""Mini README: Tests for the trip book service.

Exercises settings creation and debounced saving, trip CRUD with
snapshots, fuel receipt booking, summaries and live listeners.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import List

import pytest

from roadledger.receipts import NoFuelItemsError
from roadledger.storage import DebouncedWriter, InMemoryDocumentStore
from roadledger.trips import PeriodSummary, Trip, TripBook
from roadledger.trips.book import SETTINGS, SETTINGS_DOC, TRIPS
from roadledger.trips.settings import AddCustomExpense, ToggleExpense, UpdateCompanyTerms, UpdateExpenseAmount


@pytest.fixture()
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def book(store: InMemoryDocumentStore) -> TripBook:
    trip_book = TripBook(store, "driver-1")
    trip_book.apply_settings_command(UpdateCompanyTerms(rent_per_week=700, percentage_from_gross=10, rate_per_mile_company_charge=0.05))
    return trip_book


def test_settings_are_created_on_first_use(store: InMemoryDocumentStore) -> None:
    TripBook(store, "fresh").settings()
    assert store.get("fresh", SETTINGS, SETTINGS_DOC) is not None


def test_settings_writes_are_debounced(store: InMemoryDocumentStore) -> None:
    writer = DebouncedWriter(
        lambda user_id, record: store.put(user_id, SETTINGS, SETTINGS_DOC, record), quiet_period=60
    )
    trip_book = TripBook(store, "driver-2", writer=writer)
    trip_book.apply_settings_command(UpdateExpenseAmount(name="Fuel", amount=10))
    trip_book.apply_settings_command(UpdateExpenseAmount(name="Fuel", amount=20))

    assert store.get("driver-2", SETTINGS, SETTINGS_DOC)["expenses"][0]["amount"] == 0.0
    assert trip_book.settings().expenses[0].amount == pytest.approx(20.0)
    writer.flush()
    assert store.get("driver-2", SETTINGS, SETTINGS_DOC)["expenses"][0]["amount"] == pytest.approx(20.0)


def test_create_trip_snapshots_and_persists(book: TripBook) -> None:
    trip = book.create_trip({"date": "2024-05-14", "daysInTrip": "2", "tripGross": "1000", "tripMiles": "500"})
    assert trip.calculated_net_profit == pytest.approx(675.0)

    book.apply_settings_command(UpdateCompanyTerms(rent_per_week=0))
    stored = book.get_trip(trip.trip_id)
    assert stored.calculated_net_profit == pytest.approx(675.0)
    assert stored.trip_expenses.terms.rent_per_week == pytest.approx(700.0)


def test_update_trip_uses_trip_snapshot(book: TripBook) -> None:
    trip = book.create_trip({"date": "2024-05-14", "daysInTrip": 2, "tripGross": 1000, "tripMiles": 500})
    book.apply_settings_command(ToggleExpense(name="Fuel"))
    book.apply_settings_command(UpdateCompanyTerms(percentage_from_gross=50))

    updated = book.update_trip(trip.trip_id, {"notes": "Detention paid"})
    assert updated.notes == "Detention paid"
    assert updated.calculated_net_profit == pytest.approx(675.0)


def test_legacy_trip_without_snapshot_gets_one_on_edit(book: TripBook, store: InMemoryDocumentStore) -> None:
    store.put("driver-1", TRIPS, "legacy", {"id": "legacy", "date": "2024-05-10", "tripGross": 500, "tripMiles": 0})
    updated = book.update_trip("legacy", {"tripGross": 600})
    assert updated.trip_expenses is not None
    assert updated.calculated_rate_per_mile == 0.0


def test_missing_trip_raises_key_error(book: TripBook) -> None:
    with pytest.raises(KeyError):
        book.get_trip("nope")
    with pytest.raises(KeyError):
        book.delete_trip("nope")


def test_book_fuel_receipt_adds_to_fuel_line(book: TripBook) -> None:
    trip = book.create_trip({"date": "2024-05-14", "daysInTrip": 2, "tripGross": 1000, "tripMiles": 500})
    totals = book.book_fuel_receipt(
        trip.trip_id,
        [{"productName": "TRK DSL", "gallons": 100, "cost": 400}, {"productName": "DEF", "gallons": 5, "cost": 20}],
        0.60,
    )
    assert totals.final_expense == pytest.approx(360.0)

    stored = book.get_trip(trip.trip_id)
    assert stored.calculated_additional_expenses == pytest.approx(360.0)
    assert stored.calculated_net_profit == pytest.approx(315.0)


def test_unrecognised_receipt_leaves_trip_untouched(book: TripBook) -> None:
    trip = book.create_trip({"date": "2024-05-14", "tripGross": 1000, "tripMiles": 500})
    with pytest.raises(NoFuelItemsError):
        book.book_fuel_receipt(trip.trip_id, [{"productName": "Snacks", "gallons": 0, "cost": 5}])
    assert book.get_trip(trip.trip_id).calculated_additional_expenses == 0.0


def test_list_and_summaries(book: TripBook) -> None:
    book.create_trip({"date": "2024-05-13", "tripGross": 1000, "tripMiles": 500})
    book.create_trip({"date": "2024-05-21", "tripGross": 2000, "tripMiles": 800})

    trips = book.list_trips()
    assert [trip.date for trip in trips] == ["2024-05-21", "2024-05-13"]
    assert book.summary().total_trips == 2
    assert book.summary(date(2024, 5, 20), date(2024, 5, 26)).total_gross == pytest.approx(2000.0)
    assert book.weekly_summary(date(2024, 5, 15)).summary.total_trips == 1


def test_watch_recomputes_on_every_change(book: TripBook) -> None:
    seen: List[PeriodSummary] = []

    def listener(trips: List[Trip], summary: PeriodSummary) -> None:
        seen.append(summary)

    unsubscribe = book.watch(listener)
    trip = book.create_trip({"date": "2024-05-13", "tripGross": 1000, "tripMiles": 500})
    book.delete_trip(trip.trip_id)
    unsubscribe()

    assert [summary.total_trips for summary in seen] == [0, 1, 0]


def test_concurrent_settings_commands_are_all_applied(store: InMemoryDocumentStore) -> None:
    trip_book = TripBook(store, "driver-3")
    trip_book.settings()

    def add(index: int) -> None:
        for offset in range(10):
            trip_book.apply_settings_command(AddCustomExpense(name=f"Extra {index}-{offset}", amount=1))

    threads = [threading.Thread(target=add, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(trip_book.settings().custom_expenses) == 80
    assert len(store.get("driver-3", SETTINGS, SETTINGS_DOC)["customExpenses"]) == 80
