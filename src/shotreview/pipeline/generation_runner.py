# -*- coding: utf-8 -*-
"""Invoke the external composition tool for one generation run."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Protocol, Sequence

from shotreview.constants import DEFAULT_GENERATOR_COMMAND
from shotreview.models.cycle_result import ItemResult

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when the composition tool could not be run as a whole."""


class GenerationRunner(Protocol):
    def run(self, config_path: Path) -> list[ItemResult]:
        ...


def parse_generation_output(stdout: str) -> list[ItemResult]:
    """Parse the tool's JSON report into item results.

    Accepts a bare array or an object holding a `results` or `screenshots`
    array.
    """
    text = stdout.strip()
    if not text:
        return []
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"parse generator output: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("results", payload.get("screenshots"))
    if not isinstance(payload, list):
        raise GenerationError("generator output must be a JSON array of results")

    results: list[ItemResult] = []
    for item in payload:
        if not isinstance(item, dict):
            raise GenerationError(f"unexpected generator result item: {item!r}")
        results.append(ItemResult.from_dict(item))
    return results


class CommandGenerationRunner:
    """Run the composition tool as a subprocess.

    `command` is an argv template; a `{config}` placeholder is replaced by the
    config path, otherwise the path is appended.
    """

    def __init__(self, command: Sequence[str] | None = None, timeout: float | None = None) -> None:
        self.command = list(command or DEFAULT_GENERATOR_COMMAND)
        self.timeout = timeout

    def build_argv(self, config_path: Path) -> list[str]:
        argv = [part.replace("{config}", str(config_path)) for part in self.command]
        if not any("{config}" in part for part in self.command):
            argv.append(str(config_path))
        return argv

    def run(self, config_path: Path) -> list[ItemResult]:
        argv = self.build_argv(config_path)
        logger.debug("Running generator: %s", argv)
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GenerationError(f"generator not found: {argv[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise GenerationError(f"generator timed out after {self.timeout}s") from exc

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            raise GenerationError(f"{argv[0]} failed with exit code {completed.returncode} (stderr: {stderr})")
        return parse_generation_output(completed.stdout or "")
