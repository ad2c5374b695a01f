# -*- coding: utf-8 -*-
"""Map a scan-relative image path onto a screenshot key.

Directory depth acts as the namespace:

- ``home.png``                  -> flat, no locale or device
- ``iPhone_Air/home.png``       -> device only
- ``en/iPhone_Air/home.png``    -> locale and device
- ``x/y/en/iPhone_Air/home.png`` -> nested; the two nearest parents win
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from shotreview.models.screenshot_key import ScreenshotKey


KIND_FLAT = "flat"
KIND_DEVICE = "device"
KIND_LOCALE_DEVICE = "locale_device"
KIND_NESTED = "nested"


@dataclass(frozen=True)
class ParsedPath:
    kind: str
    locale: str
    device: str
    screenshot_id: str
    relative: str

    @property
    def key(self) -> ScreenshotKey:
        return ScreenshotKey(locale=self.locale, device=self.device, screenshot_id=self.screenshot_id)

    @property
    def has_device(self) -> bool:
        return bool(self.device)


def split_segments(relative: str) -> list[str]:
    """Split a relative path on either separator, dropping empty and '.' parts."""
    return [part for part in relative.replace("\\", "/").split("/") if part and part != "."]


def parse_relative_path(relative: str) -> ParsedPath | None:
    """Return the tagged parse of `relative`, or None if it names no slot."""
    segments = split_segments(relative)
    if not segments or ".." in segments:
        return None

    screenshot_id = PurePosixPath(segments[-1]).stem
    if not screenshot_id:
        return None
    normalized = "/".join(segments)

    if len(segments) == 1:
        return ParsedPath(KIND_FLAT, "", "", screenshot_id, normalized)
    if len(segments) == 2:
        return ParsedPath(KIND_DEVICE, "", segments[0], screenshot_id, normalized)
    kind = KIND_LOCALE_DEVICE if len(segments) == 3 else KIND_NESTED
    return ParsedPath(kind, segments[-3], segments[-2], screenshot_id, normalized)
