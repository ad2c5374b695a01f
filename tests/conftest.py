# -*- coding: utf-8 -*-
"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from PIL import Image


SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


VALID_IPHONE_SIZE = (1320, 2868)
INVALID_SIZE = (1000, 1000)


def write_image(path: Path, width: int, height: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (width, height), (40, 120, 200)).save(path)
    return path


@pytest.fixture
def review_dirs(tmp_path: Path) -> dict[str, Path]:
    return {
        "raw": tmp_path / "raw",
        "framed": tmp_path / "framed",
        "output": tmp_path / "review",
    }


@pytest.fixture
def sample_review_tree(review_dirs: dict[str, Path]) -> dict[str, Path]:
    """Raw home at the top, framed home + details under en/iPhone_Air."""
    write_image(review_dirs["raw"] / "home.png", *VALID_IPHONE_SIZE)
    write_image(review_dirs["framed"] / "en" / "iPhone_Air" / "home.png", *VALID_IPHONE_SIZE)
    write_image(review_dirs["framed"] / "en" / "iPhone_Air" / "details.png", *INVALID_SIZE)
    review_dirs["output"].mkdir(parents=True)
    (review_dirs["output"] / "approvals.json").write_text(json.dumps(["en|iPhone_Air|home"]), encoding="utf-8")
    return review_dirs


@pytest.fixture
def composition_config(tmp_path: Path) -> Path:
    project = tmp_path / "project"
    (project / "assets" / "en").mkdir(parents=True)
    (project / "assets" / "fr").mkdir(parents=True)
    config = project / "koubou.yaml"
    config.write_text(
        "project:\n"
        "  name: demo\n"
        "  output_dir: output\n"
        "screenshots:\n"
        "  home:\n"
        "    content:\n"
        "      - type: text\n"
        "        content: Hello\n"
        "      - type: image\n"
        "        asset: assets/en/home.png\n"
        "  details:\n"
        "    content:\n"
        "      - type: image\n"
        "        asset: assets/en/details.png\n"
        "      - type: image\n"
        "        asset: assets/fr/details.png\n",
        encoding="utf-8",
    )
    return config


@pytest.fixture
def default_config() -> dict:
    from shotreview.config import get_default_config

    return get_default_config()


@pytest.fixture
def image_writer():
    return write_image
