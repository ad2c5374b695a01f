# -*- coding: utf-8 -*-
"""Application constants."""

APP_NAME = "asc-shots-review"
APP_VERSION = "0.1.0"

DEFAULT_SETTINGS_FILE = "settings.json"

REPORT_TITLE = "ASC Shots Review"
DEFAULT_APPROVALS_FILE = "approvals.json"
MANIFEST_FILE = "manifest.json"
REPORT_FILE = "report.html"

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")

DEFAULT_DEBOUNCE_MS = 500
DEFAULT_GENERATOR_COMMAND = ("kou", "generate", "{config}", "--output", "json")

KEY_SEPARATOR = "|"
