"""Mini README: Persistence collaborators for RoadLedger.

``InMemoryDocumentStore`` mimics a per-user document database with live
collection listeners, and ``DebouncedWriter`` coalesces rapid edits into a
single save. Both can be replaced by a real backend exposing the same
methods without touching the calculators.
"""

from .debounce import DebouncedWriter
from .document_store import InMemoryDocumentStore, Listener

__all__ = ["DebouncedWriter", "InMemoryDocumentStore", "Listener"]
