"""Tracking of the freshest transaction time reported by the server."""

from __future__ import annotations

import threading
from typing import Optional


class TxnTimeTracker:
    """Monotonic watermark shared by every request issued from one client.

    The value only ever moves forward: merging a candidate that is equal to or
    older than the current watermark is a no-op.
    """

    def __init__(self) -> None:
        self._value: Optional[int] = None
        self._lock = threading.Lock()

    def read(self) -> Optional[int]:
        return self._value

    def merge(self, candidate: int) -> bool:
        with self._lock:
            if self._value is None or candidate > self._value:
                self._value = candidate
                return True
            return False


__all__ = ["TxnTimeTracker"]
