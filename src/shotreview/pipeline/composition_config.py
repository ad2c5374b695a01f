# -*- coding: utf-8 -*-
"""Read the bits of the composition tool's YAML config the watcher needs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Protocol

import yaml

logger = logging.getLogger(__name__)


class CompositionConfigReader(Protocol):
    def asset_directories(self, config_path: Path) -> list[Path]:
        ...

    def output_dir(self, config_path: Path) -> Path | None:
        ...


def _load_yaml(config_path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read composition config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _resolve(config_path: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = config_path.parent / path
    return Path(os.path.abspath(path))


class YamlCompositionConfig:
    """Composition config laid out as `project.output_dir` plus
    `screenshots.<name>.content[]` items of `type: image`."""

    def output_dir(self, config_path: Path) -> Path | None:
        project = _load_yaml(config_path).get("project")
        if not isinstance(project, dict):
            return None
        value = str(project.get("output_dir") or "").strip()
        if not value:
            return None
        return _resolve(config_path, value)

    def asset_directories(self, config_path: Path) -> list[Path]:
        screenshots = _load_yaml(config_path).get("screenshots")
        if not isinstance(screenshots, dict):
            return []

        seen: set[Path] = set()
        dirs: list[Path] = []
        for screenshot in screenshots.values():
            content = screenshot.get("content") if isinstance(screenshot, dict) else None
            if not isinstance(content, list):
                continue
            for item in content:
                if not isinstance(item, dict) or item.get("type") != "image":
                    continue
                asset = str(item.get("asset") or "").strip()
                if not asset:
                    continue
                directory = _resolve(config_path, asset).parent
                if directory in seen:
                    continue
                seen.add(directory)
                dirs.append(directory)
        return dirs
