# -*- coding: utf-8 -*-
"""Per-item outcome of one generation cycle."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class WatchCycleResult:
    """One screenshot produced (or not) by the composition tool."""

    name: str
    path: str
    success: bool
    error: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WatchCycleResult":
        return cls(
            name=str(data.get("name", "")),
            path=str(data.get("path", "") or data.get("output_path", "")),
            success=bool(data.get("success", False)),
            error=str(data.get("error", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        if not self.error:
            payload.pop("error")
        return payload


# The runner reports items in the same shape the watch loop forwards.
ItemResult = WatchCycleResult
