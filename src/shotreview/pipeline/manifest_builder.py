# -*- coding: utf-8 -*-
"""Aggregate classified entries into a review manifest."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from shotreview.models.review_entry import (
    REVIEW_STATUSES,
    STATUS_READY,
    ReviewEntry,
    ReviewManifest,
    ReviewSummary,
)
from shotreview.utils.file_utils import write_json_file

logger = logging.getLogger(__name__)


def summarize(entries: list[ReviewEntry] | tuple[ReviewEntry, ...]) -> ReviewSummary:
    """Count entries by readiness and approval."""
    statuses = Counter(entry.status for entry in entries)
    approved = sum(1 for entry in entries if entry.approved)
    return ReviewSummary(
        total=len(entries),
        ready=statuses[STATUS_READY],
        missing_raw=sum(1 for entry in entries if entry.raw is None),
        invalid_size=sum(1 for entry in entries if not entry.valid_app_store_size),
        approved=approved,
        pending_approval=len(entries) - approved,
        status_counts={status: statuses[status] for status in REVIEW_STATUSES},
    )


def build_manifest(
    entries: list[ReviewEntry],
    *,
    framed_dir: str | Path = "",
    raw_dir: str | Path | None = None,
    version: str = "",
    generated_at: datetime | None = None,
) -> ReviewManifest:
    stamp = (generated_at or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return ReviewManifest(
        summary=summarize(entries),
        entries=tuple(entries),
        generated_at=stamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
        framed_dir=str(framed_dir),
        raw_dir=str(raw_dir) if raw_dir else "",
        version=version,
    )


def write_manifest(manifest: ReviewManifest, path: str | Path) -> Path:
    """Write the manifest JSON. OSError propagates to the caller."""
    target = write_json_file(path, manifest.to_dict())
    logger.info(
        "Manifest written: %s (%d total, %d ready)",
        target,
        manifest.summary.total,
        manifest.summary.ready,
    )
    return target
