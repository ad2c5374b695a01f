# -*- coding: utf-8 -*-
"""Screenshot key data model."""

from __future__ import annotations

from dataclasses import dataclass

from shotreview.constants import KEY_SEPARATOR


@dataclass(frozen=True, order=True)
class ScreenshotKey:
    """Identifies one logical screenshot slot.

    `locale` and `device` are empty strings when the image sits too close to
    the scan root to carry them.
    """

    locale: str
    device: str
    screenshot_id: str

    def serialize(self) -> str:
        return KEY_SEPARATOR.join((self.locale, self.device, self.screenshot_id))

    @classmethod
    def parse(cls, value: str) -> "ScreenshotKey":
        """Parse a `locale|device|screenshotID` string."""
        parts = value.split(KEY_SEPARATOR)
        if len(parts) != 3 or not parts[2]:
            raise ValueError(f"Invalid screenshot key: {value!r}")
        return cls(locale=parts[0], device=parts[1], screenshot_id=parts[2])
