"""Mini README: Core package initializer for RoadLedger.

RoadLedger bundles two small bookkeeping tools: a personal budget tracker
and a trucking trip-profit calculator. The calculation engine lives in
``trips`` and ``receipts`` and is free of I/O so it can be re-run every time
the surrounding data changes. Collaborators (storage, web interface) import
the helpers below rather than reaching into module internals.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
