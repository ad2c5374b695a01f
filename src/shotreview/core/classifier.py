# -*- coding: utf-8 -*-
"""Classify framed screenshots against raw captures and approvals."""

from __future__ import annotations

import logging

from shotreview.core.display_types import match_display_types
from shotreview.core.folder_scanner import RawIndex, ScannedImage
from shotreview.models.review_entry import (
    STATUS_INVALID_SIZE,
    STATUS_MISSING_AND_INVALID,
    STATUS_MISSING_RAW,
    STATUS_READY,
    ReviewEntry,
)
from shotreview.models.screenshot_key import ScreenshotKey

logger = logging.getLogger(__name__)


def classify_status(has_raw: bool, valid_size: bool) -> str:
    if has_raw and valid_size:
        return STATUS_READY
    if valid_size:
        return STATUS_MISSING_RAW
    if has_raw:
        return STATUS_INVALID_SIZE
    return STATUS_MISSING_AND_INVALID


def _sort_key(entry: ReviewEntry) -> tuple[str, str, str, str]:
    relative = entry.framed.relative if entry.framed else ""
    return (entry.key.locale, entry.key.device, entry.key.screenshot_id, relative)


def classify_entries(
    framed_images: list[ScannedImage],
    raw_index: RawIndex,
    approved_keys: frozenset[str] = frozenset(),
) -> list[ReviewEntry]:
    """Build one entry per unique framed key, sorted for stable output."""
    entries: list[ReviewEntry] = []
    seen: set[ScreenshotKey] = set()
    for image in framed_images:
        key = image.key
        if key in seen:
            logger.warning("Duplicate framed screenshot %s at %s, skipping", key.serialize(), image.asset.relative)
            continue
        seen.add(key)

        display_types = match_display_types(image.asset.width, image.asset.height)
        valid_size = bool(display_types)
        raw = raw_index.match(key)
        entries.append(
            ReviewEntry(
                key=key,
                framed=image.asset,
                raw=raw,
                status=classify_status(raw is not None, valid_size),
                approved=key.serialize() in approved_keys,
                valid_app_store_size=valid_size,
                display_types=display_types,
            )
        )
    entries.sort(key=_sort_key)
    return entries
