# -*- coding: utf-8 -*-
"""Creates a demo raw/framed screenshot tree for trying the review command."""

import json
from pathlib import Path

from PIL import Image

from shotreview.config import get_default_config, save_config

SLOTS = [
    # (locale, device, screenshot id, framed size, has raw)
    ("en", "iPhone_Air", "home", (1320, 2868), True),
    ("en", "iPhone_Air", "details", (1000, 1000), False),
    ("fr", "iPhone_Air", "home", (1320, 2868), True),
    ("en", "iPad_Pro", "home", (2048, 2732), False),
]


def _write_png(path: Path, size: tuple[int, int]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, (32, 96, 160)).save(path)


def create_demo_tree(base_dir: Path) -> Path:
    demo_path = base_dir / "sample_shots"
    for locale, device, screenshot_id, size, has_raw in SLOTS:
        _write_png(demo_path / "framed" / locale / device / f"{screenshot_id}.png", size)
        if has_raw:
            _write_png(demo_path / "raw" / locale / device / f"{screenshot_id}.png", size)

    review_dir = demo_path / "review"
    review_dir.mkdir(parents=True, exist_ok=True)
    (review_dir / "approvals.json").write_text(json.dumps(["en|iPhone_Air|home"], indent=2), encoding="utf-8")

    settings = get_default_config()
    settings["review"]["output_dir"] = str(review_dir)
    settings["review"]["raw_dir"] = str(demo_path / "raw")
    settings_path = save_config(settings, demo_path / "settings.json")

    print(f"Created demo tree at: {demo_path.absolute()}")
    print(f"Try: shotreview review --framed-dir {demo_path / 'framed'} --settings {settings_path}")
    return demo_path


if __name__ == "__main__":
    create_demo_tree(Path.cwd())
