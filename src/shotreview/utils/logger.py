# -*- coding: utf-8 -*-
"""Logger setup for console + session file logging."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path


def _env_level(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def setup_session_logging(
    base_dir: str | Path | None,
    app_name: str,
    level: int | None = None,
) -> Path | None:
    """Configure root logging for the app.

    Diagnostics always go to stderr so stdout stays free for structured
    output. When `base_dir` is given a session log is written under
    `<base_dir>/logs/`.
    """
    root = logging.getLogger()
    if getattr(root, "_shotreview_logging_configured", False):
        return getattr(root, "_shotreview_session_log", None)

    if level is None:
        level = _env_level("SHOTREVIEW_LOG_LEVEL", logging.INFO)
    root.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(threadName)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    if not any(isinstance(handler, logging.StreamHandler) for handler in root.handlers):
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    session_log_path: Path | None = None
    if base_dir is not None:
        logs_dir = Path(base_dir) / "logs"
        safe_app_name = app_name.lower().replace(" ", "-")
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        session_log_path = logs_dir / f"{safe_app_name}-{timestamp}.log"
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(session_log_path, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
            root.debug("Session log file established: %s", session_log_path)
        except OSError as exc:
            root.error("Failed to establish session log file: %s", exc)
            session_log_path = None

    root._shotreview_logging_configured = True  # type: ignore[attr-defined]
    root._shotreview_session_log = session_log_path  # type: ignore[attr-defined]
    return session_log_path
