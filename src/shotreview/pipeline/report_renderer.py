# -*- coding: utf-8 -*-
"""Render a review manifest as a static HTML page."""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, StrictUndefined, select_autoescape

from shotreview.constants import REPORT_TITLE
from shotreview.models.review_entry import ReviewManifest
from shotreview.utils.file_utils import write_text_file
from shotreview.utils.image_utils import file_url

logger = logging.getLogger(__name__)


REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>
body { font-family: -apple-system, Helvetica, Arial, sans-serif; margin: 24px; color: #1d1d1f; }
.summary span { display: inline-block; margin-right: 16px; }
.grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(320px, 1fr)); gap: 16px; }
.card { border: 1px solid #d2d2d7; border-radius: 10px; padding: 12px; }
.thumbs { display: flex; gap: 8px; }
.thumbs figure { margin: 0; flex: 1; }
.thumbs img { max-width: 100%; max-height: 320px; display: block; }
.badge { display: inline-block; padding: 2px 8px; border-radius: 8px; font-size: 12px; margin-right: 4px; }
.ok { background: #d1f2d9; } .warn { background: #ffe7b3; } .bad { background: #ffd1d1; }
</style>
</head>
<body>
<h1>{{ title }}{% if manifest.version %} &middot; {{ manifest.version }}{% endif %}</h1>
<p class="summary">
  <span>Total: {{ summary.total }}</span>
  <span>Ready: {{ summary.ready }}</span>
  <span>Missing raw: {{ summary.missing_raw }}</span>
  <span>Invalid size: {{ summary.invalid_size }}</span>
  <span>Approved: {{ summary.approved }}</span>
  <span>Pending approval: {{ summary.pending_approval }}</span>
</p>
<p>Generated {{ manifest.generated_at }}</p>
<div class="grid">
{% for entry in entries %}
  <div class="card" data-key="{{ entry.key }}" data-status="{{ entry.status }}">
    <h2>{{ entry.screenshot_id }}</h2>
    <p>{{ entry.locale or "-" }} / {{ entry.device or "-" }}</p>
    <p>
      <span class="badge {{ 'ok' if entry.status == 'ready' else 'warn' if entry.status in ('missing_raw', 'invalid_size') else 'bad' }}">{{ entry.status }}</span>
      <span class="badge {{ 'ok' if entry.valid_app_store_size else 'bad' }}">{{ entry.size_label }}</span>
      <span class="badge {{ 'ok' if entry.approved else 'warn' }}">{{ "approved" if entry.approved else "pending" }}</span>
    </p>
    {% if entry.display_types %}<p>{{ entry.display_types | join(", ") }}</p>{% endif %}
    <div class="thumbs">
      <figure>
        {% if entry.framed_url %}<img src="{{ entry.framed_url }}" alt="framed {{ entry.screenshot_id }}">{% endif %}
        <figcaption>framed: {{ entry.framed_relative or "-" }}</figcaption>
      </figure>
      <figure>
        {% if entry.raw_url %}<img src="{{ entry.raw_url }}" alt="raw {{ entry.screenshot_id }}">{% endif %}
        <figcaption>raw: {{ entry.raw_relative or "-" }}</figcaption>
      </figure>
    </div>
  </div>
{% endfor %}
</div>
</body>
</html>
"""


def _build_environment() -> Environment:
    return Environment(undefined=StrictUndefined, autoescape=select_autoescape(default_for_string=True))


def _entry_context(entry) -> dict:
    data = entry.to_dict()
    data["key"] = entry.key.serialize()
    data["framed_url"] = file_url(entry.framed.path) if entry.framed else ""
    data["raw_url"] = file_url(entry.raw.path) if entry.raw else ""
    if entry.framed:
        data["size_label"] = f"{entry.framed.width}x{entry.framed.height}"
    else:
        data["size_label"] = "no image"
    return data


class ReportRenderer:
    """Turn a manifest into the review HTML page."""

    def __init__(self, title: str = REPORT_TITLE) -> None:
        self.title = title
        self._template = _build_environment().from_string(REPORT_TEMPLATE)

    def render(self, manifest: ReviewManifest) -> str:
        return self._template.render(
            title=self.title,
            manifest=manifest,
            summary=manifest.summary,
            entries=[_entry_context(entry) for entry in manifest.entries],
        )

    def write(self, manifest: ReviewManifest, path: str | Path) -> Path:
        target = write_text_file(path, self.render(manifest))
        logger.info("Review report written: %s", target)
        return target
