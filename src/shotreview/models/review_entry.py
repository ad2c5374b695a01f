# -*- coding: utf-8 -*-
"""Review entry and manifest data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shotreview.models.screenshot_key import ScreenshotKey


STATUS_READY = "ready"
STATUS_MISSING_RAW = "missing_raw"
STATUS_INVALID_SIZE = "invalid_size"
STATUS_MISSING_AND_INVALID = "missing_and_invalid"

REVIEW_STATUSES = (
    STATUS_READY,
    STATUS_MISSING_RAW,
    STATUS_INVALID_SIZE,
    STATUS_MISSING_AND_INVALID,
)


@dataclass(frozen=True)
class ImageAsset:
    """An image on disk with its pixel size."""

    path: Path
    relative: str
    width: int
    height: int


# Raw captures and framed output share one shape.
RawAsset = ImageAsset
FramedAsset = ImageAsset


@dataclass(frozen=True)
class ReviewEntry:
    """Classified state of one screenshot slot."""

    key: ScreenshotKey
    framed: FramedAsset | None
    raw: RawAsset | None
    status: str
    approved: bool = False
    valid_app_store_size: bool = False
    display_types: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict[str, Any]:
        return {
            "screenshot_id": self.key.screenshot_id,
            "locale": self.key.locale,
            "device": self.key.device,
            "raw_path": str(self.raw.path) if self.raw else "",
            "raw_relative": self.raw.relative if self.raw else "",
            "framed_path": str(self.framed.path) if self.framed else "",
            "framed_relative": self.framed.relative if self.framed else "",
            "width": self.framed.width if self.framed else 0,
            "height": self.framed.height if self.framed else 0,
            "status": self.status,
            "approved": self.approved,
            "valid_app_store_size": self.valid_app_store_size,
            "display_types": sorted(self.display_types),
        }


@dataclass(frozen=True)
class ReviewSummary:
    total: int = 0
    ready: int = 0
    missing_raw: int = 0
    invalid_size: int = 0
    approved: int = 0
    pending_approval: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "ready": self.ready,
            "missing_raw": self.missing_raw,
            "invalid_size": self.invalid_size,
            "approved": self.approved,
            "pending_approval": self.pending_approval,
            "status_counts": {status: self.status_counts.get(status, 0) for status in REVIEW_STATUSES},
        }


@dataclass(frozen=True)
class ReviewManifest:
    """Ordered entries plus summary counts for one review pass."""

    summary: ReviewSummary
    entries: tuple[ReviewEntry, ...]
    generated_at: str = ""
    framed_dir: str = ""
    raw_dir: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "generated_at": self.generated_at,
            "framed_dir": self.framed_dir,
            "raw_dir": self.raw_dir,
            "summary": self.summary.to_dict(),
            "entries": [entry.to_dict() for entry in self.entries],
        }
        if self.version:
            payload["version"] = self.version
        return payload
