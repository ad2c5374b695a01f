# -*- coding: utf-8 -*-
"""Watch the composition config and its asset folders, regenerate on change.

Filesystem callbacks only enqueue events. A single dispatcher loop drains the
queue and feeds qualifying events to a debounce timer; when the timer fires,
the run coalescer executes one generation cycle (and, when configured, a
review pass) at a time.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from shotreview.constants import DEFAULT_DEBOUNCE_MS
from shotreview.core.coalescer import RunCoalescer
from shotreview.core.debouncer import Debouncer
from shotreview.models.cycle_result import WatchCycleResult
from shotreview.pipeline.composition_config import CompositionConfigReader, YamlCompositionConfig
from shotreview.pipeline.generation_runner import CommandGenerationRunner, GenerationError, GenerationRunner
from shotreview.pipeline.review import ReviewError, ReviewRequest, generate_review
from shotreview.utils.image_utils import is_image_path

logger = logging.getLogger(__name__)


OP_CREATE = "create"
OP_WRITE = "write"
OP_RENAME = "rename"
OP_REMOVE = "remove"

QUALIFYING_OPS = frozenset({OP_CREATE, OP_WRITE, OP_RENAME})

_WATCHDOG_OPS = {
    "created": OP_CREATE,
    "modified": OP_WRITE,
    "moved": OP_RENAME,
    "deleted": OP_REMOVE,
}

CycleCallback = Callable[[list[WatchCycleResult], "Exception | None"], None]


class WatchError(RuntimeError):
    """Raised when a watch session cannot start."""


@dataclass(frozen=True)
class WatchOptions:
    """Optional review regeneration after each successful cycle."""

    review_output_dir: str | Path = ""
    review_raw_dir: str | Path = ""


@dataclass(frozen=True)
class ChangeEvent:
    path: Path
    op: str
    is_directory: bool = False


def _abspath(path: str | Path) -> Path:
    return Path(os.path.abspath(os.fsdecode(path)))


def change_event_from_watchdog(event: FileSystemEvent) -> ChangeEvent | None:
    """Map a watchdog event to a ChangeEvent; renames report the destination."""
    op = _WATCHDOG_OPS.get(event.event_type)
    if op is None:
        return None
    raw_path: Any = event.src_path
    if op == OP_RENAME and getattr(event, "dest_path", ""):
        raw_path = event.dest_path
    return ChangeEvent(path=_abspath(raw_path), op=op, is_directory=bool(event.is_directory))


def is_relevant_change(event: ChangeEvent, config_path: Path, asset_dirs: Iterable[Path]) -> bool:
    """True for create/write/rename of the config file itself, or of an image
    whose immediate parent is a tracked asset directory."""
    if event.op not in QUALIFYING_OPS or event.is_directory:
        return False
    path = _abspath(event.path)
    if path == config_path:
        return True
    if not is_image_path(path):
        return False
    return path.parent in set(asset_dirs)


class _QueueingHandler(FileSystemEventHandler):
    """Forward watchdog callbacks to the dispatcher queue."""

    def __init__(self, events: "queue.Queue[ChangeEvent | Exception]") -> None:
        super().__init__()
        self.events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            change = change_event_from_watchdog(event)
        except Exception as exc:  # handler runs on the observer thread
            self.events.put(exc)
            return
        if change is not None:
            self.events.put(change)


class RegenerationCycle:
    """One generation run followed, on any success, by a review pass."""

    def __init__(
        self,
        config_path: Path,
        runner: GenerationRunner,
        review_request: ReviewRequest | None = None,
        on_cycle: CycleCallback | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.config_path = config_path
        self.runner = runner
        self.review_request = review_request
        self.on_cycle = on_cycle
        self.stop_event = stop_event

    def __call__(self) -> None:
        if self.stop_event is not None and self.stop_event.is_set():
            logger.debug("Watch cancelled, skipping generation cycle")
            return
        try:
            results = self.runner.run(self.config_path)
        except GenerationError as exc:
            logger.error("generation error: %s", exc)
            self._notify([], exc)
            return
        except Exception as exc:
            logger.exception("generation error: unexpected failure")
            self._notify([], exc)
            return

        any_success = False
        for result in results:
            if result.success:
                any_success = True
                logger.info("  ok %s -> %s", result.name, result.path)
            else:
                logger.warning("  failed %s: %s", result.name, result.error)

        if any_success and self.review_request is not None:
            try:
                review = generate_review(self.review_request)
            except (ReviewError, OSError) as exc:
                logger.error("  review error: %s", exc)
            except Exception:
                logger.exception("  review error: unexpected failure")
            else:
                logger.info("  review -> %s (%d ready)", review.html_path, review.ready)
        elif not any_success:
            logger.warning("No screenshot generated successfully, review not regenerated")

        self._notify(results, None)

    def _notify(self, results: list[WatchCycleResult], error: Exception | None) -> None:
        if self.on_cycle is None:
            return
        try:
            self.on_cycle(results, error)
        except Exception:
            logger.exception("Cycle callback failed")


class WatchSession:
    """Own the observer, debounce timer and coalescer for one config file."""

    def __init__(
        self,
        config_path: str | Path,
        debounce: float = DEFAULT_DEBOUNCE_MS / 1000.0,
        on_cycle: CycleCallback | None = None,
        options: WatchOptions | None = None,
        runner: GenerationRunner | None = None,
        config_reader: CompositionConfigReader | None = None,
        stop_event: threading.Event | None = None,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self.config_path = _abspath(config_path)
        if not self.config_path.is_file():
            raise WatchError(f"watch: config file not found: {self.config_path}")

        self.debounce = debounce if debounce and debounce > 0 else DEFAULT_DEBOUNCE_MS / 1000.0
        self.stop_event = stop_event or threading.Event()
        self.config_reader = config_reader or YamlCompositionConfig()
        self.asset_dirs = [_abspath(path) for path in self.config_reader.asset_directories(self.config_path)]
        self.review_request = self._build_review_request(options)

        self.events: "queue.Queue[ChangeEvent | Exception]" = queue.Queue()
        self.cycle = RegenerationCycle(
            self.config_path,
            runner or CommandGenerationRunner(),
            review_request=self.review_request,
            on_cycle=on_cycle,
            stop_event=self.stop_event,
        )
        self.coalescer = RunCoalescer(self.cycle)
        self.debouncer = Debouncer(self.debounce, self._on_quiet_period)
        self._observer_factory = observer_factory
        self._observer: Any = None

    def _build_review_request(self, options: WatchOptions | None) -> ReviewRequest | None:
        if options is None or not str(options.review_output_dir or "").strip():
            return None
        framed_dir = self.config_reader.output_dir(self.config_path)
        if framed_dir is None:
            logger.warning("Composition config has no project.output_dir; review passes will fail")
        raw_dir: Path | None = Path(options.review_raw_dir) if options.review_raw_dir else None
        if raw_dir is None and self.asset_dirs:
            raw_dir = self.asset_dirs[0]
        logger.info("Review HTML will auto-regenerate in %s", options.review_output_dir)
        return ReviewRequest(
            framed_dir=framed_dir or "",
            output_dir=options.review_output_dir,
            raw_dir=raw_dir,
        )

    def _on_quiet_period(self) -> None:
        logger.info("--- change detected, regenerating ---")
        self.coalescer.trigger()

    def handle_event(self, event: ChangeEvent) -> bool:
        """Arm or re-arm the debounce timer if `event` qualifies."""
        if not is_relevant_change(event, self.config_path, self.asset_dirs):
            return False
        logger.debug("Qualifying change: %s %s", event.op, event.path)
        self.debouncer.poke()
        return True

    def start_observer(self) -> None:
        observer = self._observer_factory()
        handler = _QueueingHandler(self.events)
        config_dir = self.config_path.parent
        try:
            observer.schedule(handler, str(config_dir), recursive=False)
        except OSError as exc:
            raise WatchError(f"watch: add config dir {config_dir}: {exc}") from exc
        for directory in self.asset_dirs:
            if directory == config_dir:
                continue
            try:
                observer.schedule(handler, str(directory), recursive=False)
            except OSError as exc:
                logger.warning("watch: could not add asset dir %s: %s", directory, exc)
        observer.start()
        self._observer = observer

    def stop_observer(self) -> None:
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join()

    def run(self, poll_interval: float = 0.1) -> None:
        """Block until the stop event is set.

        One generation cycle runs before any event is looked at.
        """
        self.start_observer()
        logger.info("Watching %s for changes (debounce %.0f ms)", self.config_path, self.debounce * 1000)
        observer_lost = False
        try:
            self.coalescer.trigger()
            while not self.stop_event.is_set():
                try:
                    item = self.events.get(timeout=poll_interval)
                except queue.Empty:
                    if not observer_lost and self._observer is not None and not self._observer.is_alive():
                        logger.error("watch error: file observer stopped unexpectedly")
                        observer_lost = True
                    continue
                if isinstance(item, Exception):
                    logger.error("watch error: %s", item)
                    continue
                self.handle_event(item)
        finally:
            self.debouncer.cancel()
            self.stop_observer()
            logger.info("Watch stopped")


def watch_and_regenerate(
    config_path: str | Path,
    debounce: float = DEFAULT_DEBOUNCE_MS / 1000.0,
    on_cycle: CycleCallback | None = None,
    options: WatchOptions | None = None,
    stop_event: threading.Event | None = None,
    runner: GenerationRunner | None = None,
    config_reader: CompositionConfigReader | None = None,
) -> None:
    """Watch `config_path` and regenerate until `stop_event` is set."""
    session = WatchSession(
        config_path,
        debounce=debounce,
        on_cycle=on_cycle,
        options=options,
        runner=runner,
        config_reader=config_reader,
        stop_event=stop_event,
    )
    session.run()
