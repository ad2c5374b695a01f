# -*- coding: utf-8 -*-
"""One-shot review pass: scan, classify, write manifest and report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from shotreview.constants import DEFAULT_APPROVALS_FILE, MANIFEST_FILE, REPORT_FILE
from shotreview.core.approvals import ApprovalError, ApprovalStore
from shotreview.core.classifier import classify_entries
from shotreview.core.folder_scanner import RawIndex, scan_images
from shotreview.models.review_entry import ReviewManifest
from shotreview.pipeline.manifest_builder import build_manifest, write_manifest
from shotreview.pipeline.report_renderer import ReportRenderer
from shotreview.utils.file_utils import ensure_dir

logger = logging.getLogger(__name__)


class ReviewError(RuntimeError):
    """Raised when a review pass cannot complete."""


class ReviewUsageError(ReviewError, ValueError):
    """Raised for malformed review inputs."""


@dataclass(frozen=True)
class ReviewRequest:
    framed_dir: str | Path
    output_dir: str | Path = ""
    raw_dir: str | Path | None = None
    approvals_path: str | Path | None = None
    version: str = ""


@dataclass(frozen=True)
class ReviewResult:
    manifest_path: Path
    html_path: Path
    ready: int
    manifest: ReviewManifest


def _validate_request(request: ReviewRequest) -> None:
    if not str(request.framed_dir or "").strip():
        raise ReviewUsageError("framed directory is required")
    version = request.version or ""
    if version and ("/" in version or "\\" in version or ".." in version):
        raise ReviewUsageError(f"invalid version {version!r}: must not contain path separators or '..'")


def generate_review(request: ReviewRequest, renderer: ReportRenderer | None = None) -> ReviewResult:
    """Run one review pass.

    The framed tree must be readable; a missing raw tree counts as empty.
    Approvals are re-read on every call.
    """
    _validate_request(request)
    framed_dir = Path(request.framed_dir)

    try:
        framed_images = scan_images(framed_dir)
    except OSError as exc:
        raise ReviewError(f"read framed directory {framed_dir}: {exc}") from exc

    if not str(request.output_dir or "").strip():
        raise ReviewUsageError("output directory is required")
    output_dir = Path(request.output_dir)

    raw_index = RawIndex()
    raw_dir: Path | None = Path(request.raw_dir) if request.raw_dir else None
    if raw_dir is not None:
        if raw_dir.is_dir():
            try:
                raw_index = RawIndex(scan_images(raw_dir))
            except OSError as exc:
                raise ReviewError(f"read raw directory {raw_dir}: {exc}") from exc
        else:
            logger.warning("Raw directory %s does not exist; every entry will be missing raw", raw_dir)

    approvals_path = Path(request.approvals_path) if request.approvals_path else output_dir / DEFAULT_APPROVALS_FILE
    try:
        approved = ApprovalStore(approvals_path).load()
    except ApprovalError as exc:
        raise ReviewError(str(exc)) from exc

    entries = classify_entries(framed_images, raw_index, approved)
    manifest = build_manifest(entries, framed_dir=framed_dir, raw_dir=raw_dir, version=request.version)

    try:
        ensure_dir(output_dir)
        manifest_path = write_manifest(manifest, output_dir / MANIFEST_FILE)
        html_path = (renderer or ReportRenderer()).write(manifest, output_dir / REPORT_FILE)
    except OSError as exc:
        raise ReviewError(f"write review output to {output_dir}: {exc}") from exc

    return ReviewResult(
        manifest_path=manifest_path,
        html_path=html_path,
        ready=manifest.summary.ready,
        manifest=manifest,
    )
