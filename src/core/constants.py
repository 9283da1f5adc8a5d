"""Core constants used across mongo-diff modules.

This module centralizes defaults and on-disk layout names.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_MONGO_URI = "mongodb://localhost:27017"
DEFAULT_DATA_DIR = Path("./tmp")
DEFAULT_SNAPSHOT_NAME = "mongodb"
DEFAULT_CONTEXT_LINES = 2
DEFAULT_KEEP_VERSIONS = 100
DEFAULT_SAMPLE_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
VERSIONS_DIR_NAME = "versions"
STAGING_DIR_NAME = ".staging"
CONTENT_FILE_NAME = "content.txt"
MANIFEST_FILE_NAME = "manifest.json"
CONTENT_ENCODING = "utf-8"
SEQUENCE_NAME_WIDTH = 10
DEFAULT_SAVE_MAX_ATTEMPTS = 8
STALE_STAGING_SECONDS = 3600.0
STAGING_ENTRY_PREFIXES = ("stage-", "retired-")
ADMIN_DATABASE_NAME = "admin"
NO_NEWLINE_MARKER = "\\ No newline at end of file"
