# -*- coding: utf-8 -*-
"""Quiet-period timer that fires once after the last poke."""

from __future__ import annotations

import threading
from typing import Callable


class Debouncer:
    """Re-armable single-shot timer.

    Every `poke()` cancels the armed timer and starts a new one, so `callback`
    runs once, `delay` seconds after the last poke. The callback runs on the
    timer thread.
    """

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = float(delay)
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._closed = False

    def poke(self) -> None:
        with self._lock:
            if self._closed:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.name = "shotreview-debounce"
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled after it started waking up must not fire.
            if self._closed or generation != self._generation:
                return
            self._timer = None
        self._callback()

    def armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def cancel(self) -> None:
        """Disarm without firing and refuse further pokes."""
        with self._lock:
            self._closed = True
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
