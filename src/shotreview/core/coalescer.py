# -*- coding: utf-8 -*-
"""Single-flight runner that folds overlapping triggers into one follow-up."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_RUNNING_PENDING = "running+pending"


class RunCoalescer:
    """Depth-1 work queue around a `run` callable.

    `trigger()` either runs the callable on the calling thread or, when a run
    is already in flight, records that one more run is needed and returns at
    once. The in-flight caller loops until no trigger is pending, so at most
    one run executes at a time and no trigger is lost. A failing run with a
    follow-up queued is logged and the follow-up still runs; otherwise the
    error propagates to the caller.
    """

    def __init__(self, run: Callable[[], None]) -> None:
        self._run = run
        self._lock = threading.Lock()
        self._running = False
        self._pending = False
        self._runs_started = 0
        self._coalesced = 0

    def trigger(self) -> bool:
        """Request a run. Returns True if this call executed the run loop."""
        with self._lock:
            if self._running:
                if not self._pending:
                    logger.debug("Run in flight, queueing one follow-up")
                self._pending = True
                self._coalesced += 1
                return False
            self._running = True

        while True:
            with self._lock:
                self._runs_started += 1
            try:
                self._run()
            except BaseException as exc:
                with self._lock:
                    follow_up = self._pending and isinstance(exc, Exception)
                    self._pending = False
                    if not follow_up:
                        self._running = False
                if not follow_up:
                    raise
                logger.exception("Run failed, starting the queued follow-up")
                continue
            with self._lock:
                if not self._pending:
                    self._running = False
                    return True
                self._pending = False

    @property
    def state(self) -> str:
        with self._lock:
            if not self._running:
                return STATE_IDLE
            return STATE_RUNNING_PENDING if self._pending else STATE_RUNNING

    def runs_started(self) -> int:
        with self._lock:
            return self._runs_started

    def coalesced_triggers(self) -> int:
        with self._lock:
            return self._coalesced
