# -*- coding: utf-8 -*-
"""Tests for watch mode: event filtering, cycles and the dispatcher loop."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path

import pytest
from PIL import Image
from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from shotreview.core.coalescer import RunCoalescer
from shotreview.models.cycle_result import WatchCycleResult
from shotreview.pipeline.generation_runner import GenerationError
from shotreview.pipeline import watcher as watcher_module
from shotreview.pipeline.review import ReviewRequest
from shotreview.pipeline.watcher import (
    OP_CREATE,
    OP_REMOVE,
    OP_RENAME,
    OP_WRITE,
    ChangeEvent,
    RegenerationCycle,
    WatchError,
    WatchOptions,
    WatchSession,
    change_event_from_watchdog,
    is_relevant_change,
)


class _FakeRunner:
    def __init__(self, results: list[WatchCycleResult] | None = None, error: Exception | None = None) -> None:
        self.results = results if results is not None else [WatchCycleResult("home", "out/home.png", True)]
        self.error = error
        self.calls = 0
        self.called = threading.Event()
        self._lock = threading.Lock()

    def run(self, config_path: Path) -> list[WatchCycleResult]:
        with self._lock:
            self.calls += 1
        self.called.set()
        if self.error is not None:
            raise self.error
        return list(self.results)


class _FakeObserver:
    def __init__(self) -> None:
        self.scheduled: list[str] = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        assert recursive is False
        if not Path(path).is_dir():
            raise FileNotFoundError(path)
        self.scheduled.append(path)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        pass

    def is_alive(self) -> bool:
        return self.started and not self.stopped


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# --- event filtering -------------------------------------------------------


def test_config_write_is_relevant(tmp_path: Path) -> None:
    config = tmp_path / "koubou.yaml"
    assert is_relevant_change(ChangeEvent(config, OP_WRITE), config, [])


def test_image_in_asset_dir_is_relevant(tmp_path: Path) -> None:
    assets = tmp_path / "assets"
    for op in (OP_CREATE, OP_WRITE, OP_RENAME):
        assert is_relevant_change(ChangeEvent(assets / "home.PNG", op), tmp_path / "c.yaml", [assets])


def test_removal_is_not_relevant(tmp_path: Path) -> None:
    config = tmp_path / "koubou.yaml"
    assert not is_relevant_change(ChangeEvent(config, OP_REMOVE), config, [])


def test_non_image_in_asset_dir_is_not_relevant(tmp_path: Path) -> None:
    assets = tmp_path / "assets"
    assert not is_relevant_change(ChangeEvent(assets / "notes.txt", OP_WRITE), tmp_path / "c.yaml", [assets])


def test_nested_image_is_not_relevant(tmp_path: Path) -> None:
    assets = tmp_path / "assets"
    event = ChangeEvent(assets / "sub" / "home.png", OP_WRITE)
    assert not is_relevant_change(event, tmp_path / "c.yaml", [assets])


def test_other_file_next_to_config_is_not_relevant(tmp_path: Path) -> None:
    assert not is_relevant_change(ChangeEvent(tmp_path / "other.yaml", OP_WRITE), tmp_path / "c.yaml", [])


def test_directory_events_are_not_relevant(tmp_path: Path) -> None:
    assets = tmp_path / "assets"
    event = ChangeEvent(assets / "folder.png", OP_CREATE, is_directory=True)
    assert not is_relevant_change(event, tmp_path / "c.yaml", [assets])


def test_watchdog_events_map_to_ops(tmp_path: Path) -> None:
    created = change_event_from_watchdog(FileCreatedEvent(str(tmp_path / "a.png")))
    modified = change_event_from_watchdog(FileModifiedEvent(str(tmp_path / "a.png")))
    deleted = change_event_from_watchdog(FileDeletedEvent(str(tmp_path / "a.png")))
    moved = change_event_from_watchdog(FileMovedEvent(str(tmp_path / "a.tmp"), str(tmp_path / "a.png")))
    assert created.op == OP_CREATE
    assert modified.op == OP_WRITE
    assert deleted.op == OP_REMOVE
    assert moved.op == OP_RENAME
    assert moved.path == tmp_path / "a.png"
    assert change_event_from_watchdog(DirModifiedEvent(str(tmp_path))).is_directory is True


# --- one regeneration cycle -------------------------------------------------


def test_cycle_regenerates_review_on_success(sample_review_tree: dict[str, Path], tmp_path: Path) -> None:
    seen: list[tuple[list, Exception | None]] = []
    request = ReviewRequest(
        framed_dir=sample_review_tree["framed"],
        output_dir=sample_review_tree["output"],
        raw_dir=sample_review_tree["raw"],
    )
    cycle = RegenerationCycle(tmp_path / "c.yaml", _FakeRunner(), request, lambda r, e: seen.append((r, e)))
    cycle()
    manifest = json.loads((sample_review_tree["output"] / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["summary"]["ready"] == 1
    assert len(seen) == 1 and seen[0][1] is None
    assert seen[0][0][0].name == "home"


def test_cycle_skips_review_when_nothing_succeeded(sample_review_tree: dict[str, Path], tmp_path: Path) -> None:
    runner = _FakeRunner(results=[WatchCycleResult("home", "", False, "boom")])
    request = ReviewRequest(framed_dir=sample_review_tree["framed"], output_dir=sample_review_tree["output"])
    seen: list = []
    RegenerationCycle(tmp_path / "c.yaml", runner, request, lambda r, e: seen.append((r, e)))()
    assert not (sample_review_tree["output"] / "manifest.json").exists()
    assert seen[0][0][0].error == "boom"


def test_cycle_partial_failure_still_regenerates(sample_review_tree: dict[str, Path], tmp_path: Path) -> None:
    runner = _FakeRunner(
        results=[WatchCycleResult("home", "h.png", True), WatchCycleResult("details", "", False, "missing asset")]
    )
    request = ReviewRequest(framed_dir=sample_review_tree["framed"], output_dir=sample_review_tree["output"])
    RegenerationCycle(tmp_path / "c.yaml", runner, request)()
    assert (sample_review_tree["output"] / "manifest.json").exists()


def test_cycle_reports_generation_error(sample_review_tree: dict[str, Path], tmp_path: Path) -> None:
    runner = _FakeRunner(error=GenerationError("kou failed"))
    request = ReviewRequest(framed_dir=sample_review_tree["framed"], output_dir=sample_review_tree["output"])
    seen: list = []
    RegenerationCycle(tmp_path / "c.yaml", runner, request, lambda r, e: seen.append((r, e)))()
    assert seen == [([], runner.error)]
    assert not (sample_review_tree["output"] / "manifest.json").exists()


def test_cycle_review_failure_does_not_raise(tmp_path: Path) -> None:
    request = ReviewRequest(framed_dir=tmp_path / "missing", output_dir=tmp_path / "review")
    seen: list = []
    RegenerationCycle(tmp_path / "c.yaml", _FakeRunner(), request, lambda r, e: seen.append((r, e)))()
    assert len(seen) == 1 and seen[0][1] is None


def test_cycle_survives_undecodable_approvals(sample_review_tree: dict[str, Path], tmp_path: Path) -> None:
    (sample_review_tree["output"] / "approvals.json").write_bytes(b'["\xff\xfe"]')
    request = ReviewRequest(
        framed_dir=sample_review_tree["framed"],
        output_dir=sample_review_tree["output"],
        raw_dir=sample_review_tree["raw"],
    )
    seen: list = []
    cycle = RegenerationCycle(tmp_path / "c.yaml", _FakeRunner(), request, lambda r, e: seen.append((r, e)))
    coalescer = RunCoalescer(cycle)
    assert coalescer.trigger() is True
    assert len(seen) == 1 and seen[0][1] is None
    assert not (sample_review_tree["output"] / "manifest.json").exists()


def test_cycle_survives_unexpected_review_failure(tmp_path: Path, monkeypatch) -> None:
    def _explode(request: ReviewRequest) -> None:
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(watcher_module, "generate_review", _explode)
    request = ReviewRequest(framed_dir=tmp_path / "framed", output_dir=tmp_path / "review")
    seen: list = []
    RegenerationCycle(tmp_path / "c.yaml", _FakeRunner(), request, lambda r, e: seen.append((r, e)))()
    assert len(seen) == 1 and seen[0][1] is None


def test_cycle_skips_oversized_framed_image(tmp_path: Path, image_writer, monkeypatch) -> None:
    framed = tmp_path / "framed"
    image_writer(framed / "en" / "iPhone_Air" / "home.png", 4, 4)
    image_writer(framed / "en" / "iPhone_Air" / "huge.png", 40, 40)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    request = ReviewRequest(framed_dir=framed, output_dir=tmp_path / "review")
    RegenerationCycle(tmp_path / "c.yaml", _FakeRunner(), request)()
    manifest = json.loads((tmp_path / "review" / "manifest.json").read_text(encoding="utf-8"))
    assert [entry["screenshot_id"] for entry in manifest["entries"]] == ["home"]


def test_cycle_skipped_after_cancellation(tmp_path: Path) -> None:
    stop = threading.Event()
    stop.set()
    runner = _FakeRunner()
    RegenerationCycle(tmp_path / "c.yaml", runner, stop_event=stop)()
    assert runner.calls == 0


# --- watch session ----------------------------------------------------------


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(WatchError, match="config file not found"):
        WatchSession(tmp_path / "missing.yaml", runner=_FakeRunner())


def test_session_collects_asset_dirs_and_review_request(composition_config: Path, tmp_path: Path) -> None:
    session = WatchSession(
        composition_config,
        runner=_FakeRunner(),
        options=WatchOptions(review_output_dir=tmp_path / "review"),
    )
    assets = composition_config.parent / "assets"
    assert session.asset_dirs == [assets / "en", assets / "fr"]
    assert session.review_request.framed_dir == composition_config.parent / "output"
    assert session.review_request.raw_dir == assets / "en"


def test_session_without_review_options(composition_config: Path) -> None:
    session = WatchSession(composition_config, runner=_FakeRunner())
    assert session.review_request is None


def test_non_positive_debounce_falls_back_to_default(composition_config: Path) -> None:
    assert WatchSession(composition_config, debounce=0, runner=_FakeRunner()).debounce == 0.5


def test_start_observer_skips_missing_asset_dirs(composition_config: Path) -> None:
    (composition_config.parent / "assets" / "fr").rmdir()
    observer = _FakeObserver()
    session = WatchSession(composition_config, runner=_FakeRunner(), observer_factory=lambda: observer)
    session.start_observer()
    assert observer.started
    assert observer.scheduled == [str(composition_config.parent), str(composition_config.parent / "assets" / "en")]
    session.stop_observer()
    assert observer.stopped


def test_irrelevant_event_does_not_arm_timer(composition_config: Path) -> None:
    session = WatchSession(composition_config, debounce=5, runner=_FakeRunner())
    assert session.handle_event(ChangeEvent(composition_config.parent / "readme.md", OP_WRITE)) is False
    assert session.debouncer.armed() is False
    assert session.handle_event(ChangeEvent(composition_config, OP_WRITE)) is True
    assert session.debouncer.armed() is True
    session.debouncer.cancel()


def test_run_loop_initial_cycle_and_burst(composition_config: Path) -> None:
    runner = _FakeRunner()
    cycles: list = []
    stop = threading.Event()
    observer = _FakeObserver()
    session = WatchSession(
        composition_config,
        debounce=0.05,
        on_cycle=lambda r, e: cycles.append((r, e)),
        runner=runner,
        stop_event=stop,
        observer_factory=lambda: observer,
    )
    thread = threading.Thread(target=session.run, kwargs={"poll_interval": 0.01})
    thread.start()
    try:
        assert _wait_for(lambda: runner.calls == 1)

        asset = composition_config.parent / "assets" / "en" / "home.png"
        for _ in range(5):
            session.events.put(ChangeEvent(asset, OP_WRITE))
        session.events.put(ChangeEvent(composition_config, OP_WRITE))

        assert _wait_for(lambda: runner.calls == 2)
        time.sleep(0.2)
        assert runner.calls == 2
        assert len(cycles) == 2
    finally:
        stop.set()
        thread.join(2)
    assert not thread.is_alive()
    assert observer.stopped


def test_run_loop_survives_watch_errors(composition_config: Path) -> None:
    runner = _FakeRunner()
    stop = threading.Event()
    session = WatchSession(
        composition_config,
        debounce=0.05,
        runner=runner,
        stop_event=stop,
        observer_factory=_FakeObserver,
    )
    thread = threading.Thread(target=session.run, kwargs={"poll_interval": 0.01})
    thread.start()
    try:
        assert _wait_for(lambda: runner.calls == 1)
        session.events.put(OSError("inotify watch limit reached"))
        session.events.put(ChangeEvent(composition_config, OP_CREATE))
        assert _wait_for(lambda: runner.calls == 2)
    finally:
        stop.set()
        thread.join(2)
    assert not thread.is_alive()


def test_run_loop_continues_after_generation_error(composition_config: Path) -> None:
    runner = _FakeRunner(error=GenerationError("kou missing"))
    errors: list = []
    stop = threading.Event()
    session = WatchSession(
        composition_config,
        debounce=0.05,
        on_cycle=lambda r, e: errors.append(e),
        runner=runner,
        stop_event=stop,
        observer_factory=_FakeObserver,
    )
    thread = threading.Thread(target=session.run, kwargs={"poll_interval": 0.01})
    thread.start()
    try:
        assert _wait_for(lambda: runner.calls == 1)
        session.events.put(ChangeEvent(composition_config, OP_WRITE))
        assert _wait_for(lambda: runner.calls == 2)
        assert _wait_for(lambda: len(errors) == 2)
        assert all(isinstance(error, GenerationError) for error in errors)
    finally:
        stop.set()
        thread.join(2)
