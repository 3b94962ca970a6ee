# -*- coding: utf-8 -*-
"""API routes for the Sora2API integration."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ...providers import (
    ConfigStore,
    ConnectionState,
    ProviderLinks,
    SoraConfig,
    SoraStats,
    SoraToken,
)

router = APIRouter(prefix="/sora", tags=["sora"])


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class TestConnectionRequest(BaseModel):
    """Request body for a connection test (values as edited by the user)."""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(..., alias="baseUrl", description="Sora2API URL")
    admin_user: str = Field(..., alias="adminUser", description="Username")
    admin_pass: str = Field(..., alias="adminPass", description="Password")


class StatusResponse(BaseModel):
    state: ConnectionState


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_store(request: Request) -> ConfigStore:
    return request.app.state.sora_store


# ---------------------------------------------------------------------------
# Endpoints — config
# ---------------------------------------------------------------------------


@router.get(
    "/config",
    response_model=SoraConfig,
    response_model_by_alias=True,
    summary="Get Sora2API configuration",
    description="Return the stored record, or the defaults if none "
    "has been saved yet.",
)
async def get_config(store: ConfigStore = Depends(get_store)) -> SoraConfig:
    config = store.get_config()
    if config is None:
        raise HTTPException(
            status_code=500,
            detail="Stored Sora2API configuration is unreadable",
        )
    return config


@router.put(
    "/config",
    summary="Save Sora2API configuration",
    description="Persist the record. When it is enabled the connection "
    "is tested right away and the result is returned as `connection`.",
)
async def save_config(
    body: SoraConfig = Body(..., description="Configuration record"),
    store: ConfigStore = Depends(get_store),
) -> JSONResponse:
    saved = store.save_config(body)
    content: dict = {"success": saved}
    if saved:
        result = await store.connect_if_enabled(body)
        if result is not None:
            content["connection"] = result.to_dict()
    return JSONResponse(content=content)


@router.get(
    "/links",
    response_model=ProviderLinks,
    summary="External Sora2API pages",
)
async def get_links(store: ConfigStore = Depends(get_store)) -> ProviderLinks:
    links = store.get_links()
    if links is None:
        raise HTTPException(
            status_code=500,
            detail="Stored Sora2API configuration is unreadable",
        )
    return links


# ---------------------------------------------------------------------------
# Endpoints — connection
# ---------------------------------------------------------------------------


@router.post(
    "/test",
    summary="Test the connection",
    description="Health check, login, then a best-effort stats fetch. "
    "`stats` is omitted when it could not be fetched.",
)
async def test_connection(
    body: TestConnectionRequest = Body(...),
    store: ConfigStore = Depends(get_store),
) -> JSONResponse:
    result = await store.test_connection(
        body.base_url,
        body.admin_user,
        body.admin_pass,
    )
    return JSONResponse(content=result.to_dict())


@router.get(
    "/status",
    response_model=StatusResponse,
    summary="Current connection state",
)
async def get_status(
    store: ConfigStore = Depends(get_store),
) -> StatusResponse:
    return StatusResponse(state=store.state)


@router.get(
    "/stats",
    response_model=Optional[SoraStats],
    summary="Refresh stats",
    description="Returns null until a connection test has succeeded.",
)
async def get_stats(
    store: ConfigStore = Depends(get_store),
) -> Optional[SoraStats]:
    return await store.get_stats()


@router.get(
    "/tokens",
    response_model=List[SoraToken],
    summary="List Sora2API accounts",
)
async def get_tokens(
    store: ConfigStore = Depends(get_store),
) -> List[SoraToken]:
    return await store.get_tokens()


@router.post("/sync", summary="Trigger a manual sync (not implemented)")
async def trigger_sync(store: ConfigStore = Depends(get_store)) -> JSONResponse:
    result = await store.trigger_sync()
    return JSONResponse(content=result.to_dict())
