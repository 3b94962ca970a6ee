# -*- coding: utf-8 -*-
"""Durable key/value storage backed by a single JSON file (storage.json).

Values are strings, usually JSON-serialized records, stored under fixed
keys.  Read and write errors (missing permissions, corrupt file, full
disk) propagate to the caller.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from ..constant import STORAGE_FILE, WORKING_DIR

logger = logging.getLogger(__name__)


def get_storage_json_path() -> Path:
    """Return the default storage.json path."""
    return WORKING_DIR / STORAGE_FILE


class LocalStorage:
    """String values keyed by name, persisted in one JSON object."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else get_storage_json_path()

    def _read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        with open(self.path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return raw

    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under *key*, or ``None``."""
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"value under {key!r} is not a string")
        return value

    def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, keeping the other keys.

        An unparsable storage file is replaced rather than blocking writes.
        """
        try:
            items = self._read_all()
        except ValueError:
            logger.warning("Discarding unreadable storage file %s", self.path)
            items = {}
        items[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(items, fh, indent=2, ensure_ascii=False)
