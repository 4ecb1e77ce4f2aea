"""Mini README: In-memory document store with live listeners.

Structure:
    * Listener - callback receiving ``{doc_id: document}`` snapshots.
    * InMemoryDocumentStore - CRUD keyed by app, user and collection, plus
      ``subscribe`` which replays the current snapshot and every change.

Documents are copied on the way in and out so callers cannot mutate stored
state behind the store's back.
"""

from __future__ import annotations

import copy
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

Document = Dict[str, Any]
Listener = Callable[[Dict[str, Document]], None]
_CollectionKey = Tuple[str, str]


class InMemoryDocumentStore:
    """Per-user collections of JSON-like documents."""

    def __init__(self, app_id: str = "default-budget-app") -> None:
        self.app_id = app_id
        self._collections: Dict[_CollectionKey, Dict[str, Document]] = {}
        self._listeners: Dict[_CollectionKey, List[Listener]] = {}
        self._lock = threading.RLock()
        LOGGER.debug("Document store initialised for app '%s'", app_id)

    def path(self, user_id: str, collection: str, doc_id: Optional[str] = None) -> str:
        """Human-readable location of a collection or document."""

        base = f"artifacts/{self.app_id}/users/{user_id}/{collection}"
        return f"{base}/{doc_id}" if doc_id else base

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex[:20]

    def get(self, user_id: str, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            document = self._collections.get((user_id, collection), {}).get(doc_id)
            return copy.deepcopy(document) if document is not None else None

    def list(self, user_id: str, collection: str) -> Dict[str, Document]:
        with self._lock:
            return copy.deepcopy(self._collections.get((user_id, collection), {}))

    def put(self, user_id: str, collection: str, doc_id: str, document: Document) -> None:
        """Create or overwrite a document and notify listeners."""

        with self._lock:
            self._collections.setdefault((user_id, collection), {})[doc_id] = copy.deepcopy(document)
        LOGGER.info("Stored %s", self.path(user_id, collection, doc_id))
        self._notify(user_id, collection)

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        """Remove a document, raising ``KeyError`` when it does not exist."""

        with self._lock:
            documents = self._collections.get((user_id, collection), {})
            if doc_id not in documents:
                raise KeyError(f"Document {self.path(user_id, collection, doc_id)} not found")
            del documents[doc_id]
        LOGGER.info("Deleted %s", self.path(user_id, collection, doc_id))
        self._notify(user_id, collection)

    def subscribe(self, user_id: str, collection: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and immediately deliver the current snapshot.

        Returns a callable that removes the listener again.
        """

        key = (user_id, collection)
        with self._lock:
            self._listeners.setdefault(key, []).append(listener)
        self._deliver(listener, self.list(user_id, collection), key)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(key, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def _notify(self, user_id: str, collection: str) -> None:
        key = (user_id, collection)
        with self._lock:
            listeners = list(self._listeners.get(key, []))
        for listener in listeners:
            self._deliver(listener, self.list(user_id, collection), key)

    @staticmethod
    def _deliver(listener: Listener, snapshot: Dict[str, Document], key: _CollectionKey) -> None:
        try:
            listener(snapshot)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Listener for %s/%s failed", *key)
