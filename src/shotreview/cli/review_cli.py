# -*- coding: utf-8 -*-
"""CLI commands for screenshot review and watch mode."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

import typer

from shotreview.config import ConfigError, load_config
from shotreview.constants import APP_NAME
from shotreview.models.cycle_result import WatchCycleResult
from shotreview.pipeline.generation_runner import CommandGenerationRunner
from shotreview.pipeline.review import ReviewError, ReviewRequest, generate_review
from shotreview.pipeline.watcher import WatchError, WatchOptions, watch_and_regenerate
from shotreview.utils.logger import setup_session_logging

app = typer.Typer(help="App Store screenshot review and regeneration")
logger = logging.getLogger(__name__)


def _settings(settings_path: Path | None) -> dict:
    try:
        return load_config(settings_path, environ=dict(os.environ))
    except ConfigError as exc:
        typer.echo(f"Invalid settings: {exc}", err=True)
        raise typer.Exit(1)


def _setup_logging(settings: dict, verbose: bool) -> None:
    log_dir = str(settings.get("logging", {}).get("log_dir", "") or "").strip()
    setup_session_logging(log_dir or None, APP_NAME, level=logging.DEBUG if verbose else logging.INFO)


@app.command()
def review(
    framed_dir: Path = typer.Option(..., "--framed-dir", help="Directory of framed screenshots"),
    output_dir: Path = typer.Option(None, "--output-dir", help="Where manifest.json and report.html go"),
    raw_dir: Path = typer.Option(None, "--raw-dir", help="Directory of raw captures"),
    approvals: Path = typer.Option(None, "--approvals", help="Approvals JSON (default: <output-dir>/approvals.json)"),
    version: str = typer.Option("", "--version", help="Optional version label for the report"),
    settings_path: Path = typer.Option(None, "--settings", help="Settings JSON file"),
    verbose: bool = typer.Option(False, help="Verbose output"),
) -> None:
    """Cross-reference raw and framed screenshots and write the review."""
    settings = _settings(settings_path)
    _setup_logging(settings, verbose)
    review_settings = settings.get("review", {})

    resolved_output = output_dir or Path(review_settings.get("output_dir") or "review")
    resolved_raw = raw_dir or (Path(review_settings["raw_dir"]) if review_settings.get("raw_dir") else None)
    resolved_approvals = approvals or resolved_output / review_settings.get("approvals_file", "approvals.json")

    try:
        result = generate_review(
            ReviewRequest(
                framed_dir=framed_dir,
                output_dir=resolved_output,
                raw_dir=resolved_raw,
                approvals_path=resolved_approvals,
                version=version,
            )
        )
    except ReviewError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    typer.echo(
        json.dumps(
            {
                "manifest_path": str(result.manifest_path),
                "html_path": str(result.html_path),
                "ready": result.ready,
                "summary": result.manifest.summary.to_dict(),
            },
            indent=2,
        )
    )


@app.command()
def watch(
    config: Path = typer.Option(..., "--config", help="Composition tool YAML config"),
    debounce_ms: int = typer.Option(None, "--debounce-ms", help="Quiet period before regenerating"),
    review_output_dir: Path = typer.Option(None, "--review-output-dir", help="Regenerate the review here"),
    review_raw_dir: Path = typer.Option(None, "--review-raw-dir", help="Raw captures for the review"),
    settings_path: Path = typer.Option(None, "--settings", help="Settings JSON file"),
    verbose: bool = typer.Option(False, help="Verbose output"),
) -> None:
    """Regenerate screenshots whenever the config or its assets change."""
    settings = _settings(settings_path)
    _setup_logging(settings, verbose)
    review_settings = settings.get("review", {})

    debounce = (debounce_ms or settings["watch"]["debounce_ms"]) / 1000.0
    output = review_output_dir or review_settings.get("output_dir") or ""
    raw = review_raw_dir or review_settings.get("raw_dir") or ""
    runner = CommandGenerationRunner(settings["generator"]["command"])

    def _on_cycle(results: list[WatchCycleResult], error: Exception | None) -> None:
        payload = {"results": [item.to_dict() for item in results]}
        if error is not None:
            payload["error"] = str(error)
        typer.echo(json.dumps(payload))

    stop_event = threading.Event()
    try:
        watch_and_regenerate(
            config,
            debounce=debounce,
            on_cycle=_on_cycle,
            options=WatchOptions(review_output_dir=output, review_raw_dir=raw),
            stop_event=stop_event,
            runner=runner,
        )
    except WatchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        stop_event.set()
        logger.info("Interrupted")


if __name__ == "__main__":
    app()
