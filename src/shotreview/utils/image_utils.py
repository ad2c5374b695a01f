# -*- coding: utf-8 -*-
"""Image helper functions."""

from __future__ import annotations

import re
from pathlib import Path

from PIL import Image

from shotreview.constants import IMAGE_EXTENSIONS


_DRIVE_PATH = re.compile(r"^[A-Za-z]:/")


def is_image_path(path: str | Path) -> bool:
    """Return True if the path has one of the handled image extensions."""
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def read_image_size(path: str | Path) -> tuple[int, int]:
    """Return (width, height) without decoding pixel data."""
    with Image.open(path) as img:
        width, height = img.size
    return int(width), int(height)


def path_only_url_path(path: str | Path) -> str:
    """Turn a filesystem path into the path part of a file:// URL.

    Windows drive paths gain a leading slash (`C:/x` -> `/C:/x`); POSIX
    absolute paths pass through unchanged.
    """
    value = str(path).replace("\\", "/")
    if _DRIVE_PATH.match(value):
        return "/" + value
    return value


def file_url(path: str | Path) -> str:
    return "file://" + path_only_url_path(path)
