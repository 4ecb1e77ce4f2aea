"""Mini README: FastAPI JSON API for RoadLedger.

Structure:
    * Request models - pydantic bodies for trips, receipts and transactions.
    * format_currency - ``$`` prefixed, two-decimal display strings.
    * create_application - application factory wiring routes to the trip
      book and budget ledger of the requesting user.

The caller identifies the user with the ``X-User-Id`` header; an absent
header maps to a single local user. Domain ``ValueError`` becomes 400/422
and ``KeyError`` becomes 404.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from ..configuration import RoadLedgerSettings, get_settings
from ..finance import BudgetLedger, Transaction, TransactionType
from ..logging_utils import get_logger
from ..receipts import NoFuelItemsError, ReceiptItem, classify_receipt_items
from ..storage import DebouncedWriter, InMemoryDocumentStore
from ..trips import Trip, TripBook, command_from_payload, shift_week
from ..trips.book import SETTINGS, SETTINGS_DOC

LOGGER = get_logger(__name__)

DEFAULT_USER = "local"
DEFAULT_MAX_CACHED_USERS = 256


def format_currency(value: float) -> str:
    """Render an amount as ``$1,234.50`` or ``-$12.00``."""

    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


class TripForm(BaseModel):
    """Entry-form payload; numeric fields accept raw strings such as ``"1,5"``."""

    date: Optional[str] = None
    daysInTrip: Optional[Any] = None
    fromLocation: Optional[str] = None
    toLocation: Optional[str] = None
    tripGross: Optional[Any] = None
    tripMiles: Optional[Any] = None
    notes: Optional[str] = None
    tripExpenses: Optional[Dict[str, Any]] = None


class ReceiptLine(BaseModel):
    productName: str = ""
    gallons: Any = 0
    cost: Any = 0


class ReceiptPayload(BaseModel):
    items: List[ReceiptLine] = Field(default_factory=list)
    discountPerGallon: Optional[float] = Field(None, ge=0)


class TransactionPayload(BaseModel):
    description: str
    amount: Any
    type: str


def _trip_payload(trip: Trip) -> Dict[str, Any]:
    payload = trip.as_record()
    payload["display"] = {
        "netProfit": format_currency(trip.calculated_net_profit),
        "totalExpenses": format_currency(trip.calculated_total_expenses),
        "ratePerMile": format_currency(trip.calculated_rate_per_mile),
        "profitable": trip.calculated_net_profit >= 0,
    }
    return payload


def _transaction_payload(transaction: Transaction) -> Dict[str, Any]:
    payload = transaction.as_record()
    sign = "+" if transaction.transaction_type is TransactionType.INCOME else "-"
    payload["display"] = f"{sign}{format_currency(abs(transaction.amount))}"
    return payload


def create_application(
    store: Optional[InMemoryDocumentStore] = None,
    settings: Optional[RoadLedgerSettings] = None,
    *,
    max_cached_users: int = DEFAULT_MAX_CACHED_USERS,
) -> FastAPI:
    """Create the FastAPI application with routes and collaborators.

    At most ``max_cached_users`` trip books are kept in memory; the least
    recently used one is dropped after its pending settings are written.
    """

    if max_cached_users < 1:
        raise ValueError("max_cached_users must be at least 1.")
    settings = settings or get_settings()
    store = store or InMemoryDocumentStore(app_id=settings.app_id)

    def _write_settings(user_id: str, record: Dict[str, Any]) -> None:
        store.put(user_id, SETTINGS, SETTINGS_DOC, record)

    writer = DebouncedWriter(_write_settings, quiet_period=settings.settings_write_delay_seconds)
    books: OrderedDict[str, TripBook] = OrderedDict()
    books_lock = threading.Lock()

    @asynccontextmanager
    async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        writer.flush()

    app = FastAPI(title="RoadLedger", version="0.1.0", lifespan=_lifespan)
    app.state.store = store
    app.state.settings_writer = writer

    def _book(user_id: Optional[str]) -> TripBook:
        key = user_id or DEFAULT_USER
        with books_lock:
            book = books.get(key)
            if book is not None:
                books.move_to_end(key)
                return book
            book = books[key] = TripBook(store, key, writer=writer)
            while len(books) > max_cached_users:
                evicted, _ = books.popitem(last=False)
                writer.flush(evicted)
                LOGGER.debug("Dropped cached trip book for %s", evicted)
            return book

    def _ledger(user_id: Optional[str]) -> BudgetLedger:
        return BudgetLedger(store, user_id or DEFAULT_USER)

    @app.get("/trips")
    def list_trips(x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
        """Return the user's trips, newest first, with all-time totals."""

        book = _book(x_user_id)
        trips = book.list_trips()
        LOGGER.debug("Returning %s trips for %s", len(trips), book.user_id)
        return {
            "trips": [_trip_payload(trip) for trip in trips],
            "summary": book.summary().as_dict(),
        }

    @app.post("/trips", status_code=201)
    def create_trip(form: TripForm, x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
        try:
            trip = _book(x_user_id).create_trip(form.model_dump(exclude_none=True))
        except ValueError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return _trip_payload(trip)

    @app.get("/trips/{trip_id}")
    def get_trip(trip_id: str, x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
        try:
            return _trip_payload(_book(x_user_id).get_trip(trip_id))
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error

    @app.put("/trips/{trip_id}")
    def update_trip(
        trip_id: str, form: TripForm, x_user_id: Optional[str] = Header(None)
    ) -> Dict[str, Any]:
        try:
            trip = _book(x_user_id).update_trip(trip_id, form.model_dump(exclude_none=True))
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        except ValueError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return _trip_payload(trip)

    @app.delete("/trips/{trip_id}", status_code=204)
    def delete_trip(trip_id: str, x_user_id: Optional[str] = Header(None)) -> None:
        try:
            _book(x_user_id).delete_trip(trip_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error

    @app.post("/trips/{trip_id}/fuel-receipt")
    def book_fuel_receipt(
        trip_id: str, payload: ReceiptPayload, x_user_id: Optional[str] = Header(None)
    ) -> Dict[str, Any]:
        """Classify OCR line items and add the fuel cost to the trip."""

        book = _book(x_user_id)
        discount = (
            payload.discountPerGallon
            if payload.discountPerGallon is not None
            else settings.fuel_discount_per_gallon
        )
        items = [ReceiptItem.from_payload(line.model_dump()) for line in payload.items]
        try:
            totals = book.book_fuel_receipt(trip_id, items, discount)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        except NoFuelItemsError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return {"receipt": totals.as_dict(), "trip": _trip_payload(book.get_trip(trip_id))}

    @app.post("/receipts/classify")
    def classify_receipt(payload: ReceiptPayload) -> Dict[str, Any]:
        discount = (
            payload.discountPerGallon
            if payload.discountPerGallon is not None
            else settings.fuel_discount_per_gallon
        )
        items = [ReceiptItem.from_payload(line.model_dump()) for line in payload.items]
        try:
            totals = classify_receipt_items(items, discount)
        except NoFuelItemsError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return totals.as_dict()

    @app.get("/summary")
    def summary(
        start: Optional[date] = None,
        end: Optional[date] = None,
        x_user_id: Optional[str] = Header(None),
    ) -> Dict[str, Any]:
        if start and end and start > end:
            raise HTTPException(status_code=400, detail="start must not be after end")
        return _book(x_user_id).summary(start, end).as_dict()

    @app.get("/summary/week")
    def weekly_summary(
        pivot: Optional[date] = None,
        offset: int = 0,
        x_user_id: Optional[str] = Header(None),
    ) -> Dict[str, Any]:
        """Weekly card; ``offset`` moves the pivot by whole weeks."""

        anchor = shift_week(pivot or date.today(), offset)
        return _book(x_user_id).weekly_summary(anchor).as_dict()

    @app.get("/settings")
    def read_settings(x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
        return _book(x_user_id).settings().as_record()

    @app.post("/settings/commands")
    def apply_settings_command(
        payload: Dict[str, Any], x_user_id: Optional[str] = Header(None)
    ) -> Dict[str, Any]:
        """Apply one tagged settings edit, e.g. ``{"kind": "toggleExpense", "name": "Fuel"}``."""

        try:
            command = command_from_payload(payload)
            updated = _book(x_user_id).apply_settings_command(command)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return updated.as_record()

    @app.get("/transactions")
    def list_transactions(x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
        ledger = _ledger(x_user_id)
        return {
            "transactions": [_transaction_payload(entry) for entry in ledger.list_transactions()],
            "summary": ledger.summarise().as_dict(),
        }

    @app.get("/transactions/summary")
    def transactions_summary(x_user_id: Optional[str] = Header(None)) -> Dict[str, Any]:
        summary = _ledger(x_user_id).summarise()
        payload: Dict[str, Any] = summary.as_dict()
        payload["display"] = {key: format_currency(value) for key, value in summary.as_dict().items()}
        return payload

    @app.post("/transactions", status_code=201)
    def add_transaction(
        payload: TransactionPayload, x_user_id: Optional[str] = Header(None)
    ) -> Dict[str, Any]:
        try:
            transaction = _ledger(x_user_id).add_transaction(
                payload.description, payload.amount, payload.type
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return _transaction_payload(transaction)

    @app.delete("/transactions/{transaction_id}", status_code=204)
    def remove_transaction(transaction_id: str, x_user_id: Optional[str] = Header(None)) -> None:
        try:
            _ledger(x_user_id).remove_transaction(transaction_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error

    return app
