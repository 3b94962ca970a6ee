# -*- coding: utf-8 -*-
import os
from pathlib import Path

WORKING_DIR = (
    Path(os.environ.get("SORABRIDGE_WORKING_DIR", "~/.sorabridge"))
    .expanduser()
    .resolve()
)

STORAGE_FILE = os.environ.get("SORABRIDGE_STORAGE_FILE", "storage.json")

# Env key for app log level (used by CLI and app load for reload child).
LOG_LEVEL_ENV = "SORABRIDGE_LOG_LEVEL"

DEFAULT_HOST = os.environ.get("SORABRIDGE_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.environ.get("SORABRIDGE_PORT", "8089"))

# Storage key under which the provider configuration record is persisted.
SORA_CONFIG_KEY = "sora_config"

# Upper bound (seconds) for the unauthenticated health check. Login, stats
# and token calls use the transport default.
HEALTH_CHECK_TIMEOUT = 5.0

# ---------------------------------------------------------------------------
# Default provider record, returned when nothing has been saved yet.
# ---------------------------------------------------------------------------
DEFAULT_SORA_ENABLED = False
DEFAULT_SORA_BASE_URL = "http://localhost:8000"
DEFAULT_SORA_ADMIN_USER = "admin"
DEFAULT_SORA_ADMIN_PASS = "admin"
