# -*- coding: utf-8 -*-
"""Pydantic data models for the Sora2API provider."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constant import (
    DEFAULT_SORA_ADMIN_PASS,
    DEFAULT_SORA_ADMIN_USER,
    DEFAULT_SORA_BASE_URL,
    DEFAULT_SORA_ENABLED,
)


class SoraConfig(BaseModel):
    """Provider configuration record (persisted verbatim)."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = Field(
        default=DEFAULT_SORA_ENABLED,
        description="Whether the integration is switched on",
    )
    base_url: str = Field(
        default=DEFAULT_SORA_BASE_URL,
        alias="baseUrl",
        description="Sora2API base URL",
    )
    admin_user: str = Field(
        default=DEFAULT_SORA_ADMIN_USER,
        alias="adminUser",
        description="Sora2API admin username",
    )
    admin_pass: str = Field(
        default=DEFAULT_SORA_ADMIN_PASS,
        alias="adminPass",
        description="Sora2API admin password",
    )


class SoraStats(BaseModel):
    """Point-in-time usage counters reported by ``/api/stats``."""

    model_config = ConfigDict(frozen=True)

    total_tokens: int = Field(..., ge=0)
    active_tokens: int = Field(..., ge=0)
    total_images: int = Field(..., ge=0)
    total_videos: int = Field(..., ge=0)
    today_images: int = Field(..., ge=0)
    today_videos: int = Field(..., ge=0)


class SoraToken(BaseModel):
    """A remote account as listed by ``/api/tokens``. Never mutated."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    is_active: bool = False
    plan_type: Optional[str] = None
    plan_title: Optional[str] = None
    sora2_supported: bool = False
    sora2_remaining_count: int = 0
    image_count: int = 0
    video_count: int = 0
    created_at: Optional[str] = None
    last_used_at: Optional[str] = None


class ConnectionState(str, Enum):
    """Lifecycle of the connection test."""

    IDLE = "idle"
    TESTING = "testing"
    CONNECTED = "connected"
    ERROR = "error"


class ConnectionResult(BaseModel):
    """Consolidated outcome of a connection test."""

    success: bool
    message: str
    stats: Optional[SoraStats] = Field(
        default=None,
        description="Stats snapshot; omitted when it could not be fetched",
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class ProviderLinks(BaseModel):
    """External pages of the provider, opened in a new browser tab."""

    manage_url: str
    generate_url: str
