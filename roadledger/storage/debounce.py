"""Mini README: Debounced writes for settings edits.

Structure:
    * DebouncedWriter - keeps the latest payload per key and writes it once
      the key has been quiet for ``quiet_period`` seconds, or on ``flush``.

Toggling expenses or typing amounts fires many edits per second; only the
last state of each document needs saving.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

WriteFunction = Callable[[str, Any], None]


class DebouncedWriter:
    """Coalesce writes per key behind a restartable timer."""

    def __init__(self, write: WriteFunction, quiet_period: float = 1.0) -> None:
        if quiet_period < 0:
            raise ValueError("Quiet period must be zero or positive.")
        self._write = write
        self.quiet_period = quiet_period
        self._pending: Dict[str, Tuple[Any, threading.Timer]] = {}
        self._lock = threading.Lock()

    def schedule(self, key: str, payload: Any) -> None:
        """Queue ``payload`` for ``key``, replacing and re-timing any earlier one."""

        timer = threading.Timer(self.quiet_period, self._fire, args=(key,))
        timer.daemon = True
        with self._lock:
            previous = self._pending.get(key)
            if previous is not None:
                previous[1].cancel()
            self._pending[key] = (payload, timer)
        timer.start()
        LOGGER.debug("Scheduled write for %s in %.2fs", key, self.quiet_period)

    def pending(self) -> List[str]:
        with self._lock:
            return sorted(self._pending)

    def flush(self, key: Optional[str] = None) -> int:
        """Write pending payloads now and return how many were written.

        With ``key`` only that key is written. A failing write is logged and
        skipped; the remaining keys are still written.
        """

        with self._lock:
            if key is None:
                drained = list(self._pending.items())
                self._pending.clear()
            elif key in self._pending:
                drained = [(key, self._pending.pop(key))]
            else:
                drained = []
        written = 0
        for pending_key, (payload, timer) in drained:
            timer.cancel()
            try:
                self._write(pending_key, payload)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Flushing write for %s failed", pending_key)
                continue
            written += 1
        if drained:
            LOGGER.info("Flushed %s of %s pending write(s)", written, len(drained))
        return written

    def cancel(self) -> None:
        """Drop pending payloads without writing them."""

        with self._lock:
            drained = list(self._pending.values())
            self._pending.clear()
        for _, timer in drained:
            timer.cancel()

    def _fire(self, key: str) -> None:
        with self._lock:
            entry = self._pending.get(key)
            if entry is None or entry[1] is not threading.current_thread():
                return
            del self._pending[key]
        try:
            self._write(key, entry[0])
        except Exception:  # noqa: BLE001
            LOGGER.exception("Debounced write for %s failed", key)
