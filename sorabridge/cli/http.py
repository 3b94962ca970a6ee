# -*- coding: utf-8 -*-
"""Helpers for CLI commands that talk to a running ``sorabridge app``."""
from __future__ import annotations

import json
from typing import Any

import click
import httpx
from pydantic import BaseModel

from ..constant import DEFAULT_HOST, DEFAULT_PORT

DEFAULT_BASE_URL = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"


def client(base_url: str) -> httpx.Client:
    return httpx.Client(base_url=base_url.rstrip("/"), timeout=10.0)


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_jsonable(item) for item in data]
    return data


def print_json(data: Any) -> None:
    """Echo *data* (plain JSON values or pydantic models) as indented JSON."""
    click.echo(json.dumps(_jsonable(data), ensure_ascii=False, indent=2))
