# -*- coding: utf-8 -*-
"""Walk raw and framed screenshot trees and index raw captures."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from shotreview.core.path_parser import ParsedPath, parse_relative_path
from shotreview.models.review_entry import ImageAsset
from shotreview.models.screenshot_key import ScreenshotKey
from shotreview.utils.image_utils import is_image_path, read_image_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScannedImage:
    """One image found under a scan root."""

    parsed: ParsedPath
    asset: ImageAsset

    @property
    def key(self) -> ScreenshotKey:
        return self.parsed.key


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def iter_image_files(root: str | Path) -> list[Path]:
    """Return image files below `root` in a stable order.

    Raises OSError if `root` (or any directory below it) cannot be listed.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise NotADirectoryError(f"not a directory: {root_path}")

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_raise_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if is_image_path(filename):
                found.append(Path(dirpath) / filename)
    return found


def scan_images(root: str | Path) -> list[ScannedImage]:
    """Walk `root`, parse each image path and read its pixel size."""
    root_path = Path(root)
    scanned: list[ScannedImage] = []
    for file_path in iter_image_files(root_path):
        relative = file_path.relative_to(root_path).as_posix()
        parsed = parse_relative_path(relative)
        if parsed is None:
            continue
        try:
            width, height = read_image_size(file_path)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            logger.warning("Skipping unreadable image %s: %s", file_path, exc)
            continue
        asset = ImageAsset(path=file_path.resolve(), relative=parsed.relative, width=width, height=height)
        scanned.append(ScannedImage(parsed=parsed, asset=asset))
    return scanned


class RawIndex:
    """Raw captures keyed by (locale, device, screenshot ID)."""

    def __init__(self, images: list[ScannedImage] | None = None) -> None:
        self._by_key: dict[ScreenshotKey, ImageAsset] = {}
        self._by_id: dict[str, list[ScannedImage]] = {}
        for image in images or []:
            self.add(image)

    def add(self, image: ScannedImage) -> None:
        if image.key in self._by_key:
            logger.debug("Duplicate raw key %s, keeping %s", image.key.serialize(), self._by_key[image.key].relative)
            return
        self._by_key[image.key] = image.asset
        self._by_id.setdefault(image.key.screenshot_id, []).append(image)

    def __len__(self) -> int:
        return len(self._by_key)

    def devices_for(self, screenshot_id: str) -> set[str]:
        return {image.key.device for image in self._by_id.get(screenshot_id, [])}

    def match(self, key: ScreenshotKey) -> ImageAsset | None:
        """Find the raw capture for a framed key.

        A raw filed under one device never matches a framed image filed under
        another. Without framed device context the screenshot ID must be
        unique across the raw tree, otherwise nothing matches.
        """
        candidates = [key]
        if key.locale:
            candidates.append(ScreenshotKey("", key.device, key.screenshot_id))
        if key.device:
            candidates.append(ScreenshotKey("", "", key.screenshot_id))
        for candidate in candidates:
            asset = self._by_key.get(candidate)
            if asset is not None:
                return asset

        if key.device:
            return None
        same_id = self._by_id.get(key.screenshot_id, [])
        if len(same_id) == 1:
            return same_id[0].asset
        if len(same_id) > 1:
            logger.debug(
                "Raw screenshot %r is ambiguous across devices %s",
                key.screenshot_id,
                sorted(self.devices_for(key.screenshot_id)),
            )
        return None
