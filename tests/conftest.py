"""Shared test fixtures"""
from pathlib import Path

import pytest
import respx

from sorabridge.providers import ConfigStore, LocalStorage

BASE_URL = "http://sora.test"

STATS_PAYLOAD = {
    "total_tokens": 12,
    "active_tokens": 10,
    "total_images": 340,
    "total_videos": 56,
    "today_images": 7,
    "today_videos": 2,
}

TOKEN_PAYLOAD = {
    "id": 1,
    "email": "alice@example.com",
    "name": "alice",
    "is_active": True,
    "plan_type": "chatgpt_plus",
    "plan_title": "ChatGPT Plus",
    "sora2_supported": True,
    "sora2_remaining_count": 28,
    "image_count": 100,
    "video_count": 9,
    "created_at": "2025-10-01T08:00:00",
    "last_used_at": "2025-10-18T21:13:05",
}


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "storage.json"


@pytest.fixture
def storage(storage_path: Path) -> LocalStorage:
    return LocalStorage(storage_path)


@pytest.fixture
def store(storage: LocalStorage) -> ConfigStore:
    return ConfigStore(storage)


@pytest.fixture
def provider():
    """Mocked Sora2API service; routes are added per test."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def healthy_provider(provider):
    """Service that is up, accepts admin/admin and serves stats + tokens."""
    provider.get("/", name="health").respond(200, text="ok")
    provider.post("/api/login", name="login").respond(
        200,
        json={"success": True, "token": "tok-1"},
    )
    provider.get("/api/stats", name="stats").respond(200, json=STATS_PAYLOAD)
    provider.get("/api/tokens", name="tokens").respond(
        200,
        json=[TOKEN_PAYLOAD],
    )
    return provider
