# -*- coding: utf-8 -*-
"""Read the externally maintained approval set."""

from __future__ import annotations

import logging
from pathlib import Path

from shotreview.models.screenshot_key import ScreenshotKey
from shotreview.utils.file_utils import read_json_value

logger = logging.getLogger(__name__)


class ApprovalError(ValueError):
    """Raised when an approvals file exists but cannot be used."""


def load_approvals(path: str | Path) -> frozenset[str]:
    """Load serialized `locale|device|screenshotID` keys.

    A missing file is an empty set. Anything other than a JSON array of
    strings raises ApprovalError. Strings that are not three-part keys are
    skipped with a warning.
    """
    file_path = Path(path)
    if not file_path.exists():
        logger.debug("No approvals file at %s", file_path)
        return frozenset()
    try:
        data = read_json_value(file_path)
    except ValueError as exc:
        # Covers invalid JSON and bytes that are not UTF-8.
        raise ApprovalError(f"parse approvals {file_path}: {exc}") from exc
    except OSError as exc:
        raise ApprovalError(f"read approvals {file_path}: {exc}") from exc

    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise ApprovalError(f"approvals {file_path} must be a JSON array of strings")

    approved: set[str] = set()
    for item in data:
        if not item.strip():
            continue
        try:
            key = ScreenshotKey.parse(item.strip())
        except ValueError:
            logger.warning("Ignoring malformed approval key %r in %s", item, file_path)
            continue
        approved.add(key.serialize())
    logger.debug("Loaded %d approval(s) from %s", len(approved), file_path)
    return frozenset(approved)


class ApprovalStore:
    """Read-only view over an approvals file.

    The file is re-read on every `load()` so each review pass sees the
    latest sign-off state.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> frozenset[str]:
        return load_approvals(self.path)

    def is_approved(self, key: ScreenshotKey, approved: frozenset[str] | None = None) -> bool:
        keys = self.load() if approved is None else approved
        return key.serialize() in keys
