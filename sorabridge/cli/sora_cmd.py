# -*- coding: utf-8 -*-
"""CLI commands for the Sora2API integration."""
from __future__ import annotations

import asyncio
from typing import Optional

import click
import httpx

from ..providers import (
    ConfigStore,
    ConnectionResult,
    SoraConfig,
    mask_secret,
)
from .http import DEFAULT_BASE_URL, client, print_json


def _store(ctx: click.Context) -> ConfigStore:
    return (ctx.obj or {}).get("store") or ConfigStore()


def _load_config(store: ConfigStore) -> SoraConfig:
    config = store.get_config()
    if config is None:
        raise click.ClickException(
            f"Sora2API config is unreadable: {store.storage.path}",
        )
    return config


def _echo_result(result: ConnectionResult) -> None:
    color = "green" if result.success else "red"
    mark = "✓" if result.success else "✗"
    click.echo(click.style(f"{mark} {result.message}", fg=color))


async def _connect(store: ConfigStore, config: SoraConfig) -> ConnectionResult:
    return await store.test_connection(
        config.base_url,
        config.admin_user,
        config.admin_pass,
    )


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


@click.group("sora")
def sora_group() -> None:
    """管理 Sora2API 连接配置。

    \b
    常用示例：
      sorabridge sora config show
      sorabridge sora config set --base-url http://localhost:8000
      sorabridge sora test
      sorabridge sora stats
      sorabridge sora tokens
    """


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@sora_group.group("config")
def config_group() -> None:
    """查看或修改已保存的配置。"""


@config_group.command("show")
@click.option("--show-password", is_flag=True, help="显示明文密码")
@click.pass_context
def show_config(ctx: click.Context, show_password: bool) -> None:
    """显示当前配置（未保存过时显示默认值）。"""
    config = _load_config(_store(ctx))
    data = config.model_dump(by_alias=True)
    if not show_password:
        data["adminPass"] = mask_secret(config.admin_pass)
    print_json(data)


@config_group.command("set")
@click.option("--enabled/--disabled", default=None, help="启用或停用集成")
@click.option("--base-url", default=None, help="Sora2API 地址")
@click.option("--user", "admin_user", default=None, help="管理员用户名")
@click.option(
    "--password",
    "admin_pass",
    default=None,
    help="管理员密码（传入 - 则交互输入）",
)
@click.pass_context
def set_config(
    ctx: click.Context,
    enabled: Optional[bool],
    base_url: Optional[str],
    admin_user: Optional[str],
    admin_pass: Optional[str],
) -> None:
    """修改配置中的指定字段并保存。"""
    store = _store(ctx)
    config = _load_config(store)
    if admin_pass == "-":
        admin_pass = click.prompt("Password", hide_input=True)

    updates = {
        "enabled": enabled,
        "base_url": base_url,
        "admin_user": admin_user,
        "admin_pass": admin_pass,
    }
    config = config.model_copy(
        update={k: v for k, v in updates.items() if v is not None},
    )
    if not store.save_config(config):
        raise click.ClickException(
            f"failed to save config to {store.storage.path}",
        )
    click.echo(f"✓ Saved — Base URL: {config.base_url}")
    if not config.enabled:
        return

    async def _run() -> Optional[ConnectionResult]:
        try:
            return await store.connect_if_enabled(config)
        finally:
            await store.aclose()

    result = asyncio.run(_run())
    if result is not None:
        _echo_result(result)


# ---------------------------------------------------------------------------
# test / stats / tokens
# ---------------------------------------------------------------------------


@sora_group.command("test")
@click.option("--base-url", default=None, help="覆盖已保存的 Sora2API 地址")
@click.option("--user", "admin_user", default=None, help="覆盖用户名")
@click.option("--password", "admin_pass", default=None, help="覆盖密码")
@click.pass_context
def test_cmd(
    ctx: click.Context,
    base_url: Optional[str],
    admin_user: Optional[str],
    admin_pass: Optional[str],
) -> None:
    """测试连接：健康检查 → 登录 → 获取统计信息。"""
    store = _store(ctx)
    config = _load_config(store)

    async def _run() -> ConnectionResult:
        try:
            return await store.test_connection(
                base_url or config.base_url,
                admin_user or config.admin_user,
                admin_pass or config.admin_pass,
            )
        finally:
            await store.aclose()

    result = asyncio.run(_run())
    _echo_result(result)
    if result.stats is not None:
        print_json(result.stats)
    if not result.success:
        raise SystemExit(1)


@sora_group.command("stats")
@click.pass_context
def stats_cmd(ctx: click.Context) -> None:
    """登录后输出统计信息。"""
    store = _store(ctx)
    config = _load_config(store)

    async def _run():
        try:
            result = await _connect(store, config)
            if not result.success:
                return result, None
            return result, await store.get_stats()
        finally:
            await store.aclose()

    result, stats = asyncio.run(_run())
    if not result.success:
        _echo_result(result)
        raise SystemExit(1)
    if stats is None:
        raise click.ClickException("failed to fetch Sora2API stats")
    print_json(stats)


@sora_group.command("tokens")
@click.pass_context
def tokens_cmd(ctx: click.Context) -> None:
    """登录后列出 Sora2API 账号。"""
    store = _store(ctx)
    config = _load_config(store)

    async def _run():
        try:
            result = await _connect(store, config)
            if not result.success:
                return result, []
            return result, await store.get_tokens()
        finally:
            await store.aclose()

    result, tokens = asyncio.run(_run())
    if not result.success:
        _echo_result(result)
        raise SystemExit(1)
    print_json(tokens)


@sora_group.command("links")
@click.pass_context
def links_cmd(ctx: click.Context) -> None:
    """输出 Sora2API 管理页与生成页地址。"""
    store = _store(ctx)
    links = store.get_links(_load_config(store))
    click.echo(f"{'manage':10s}: {links.manage_url}")
    click.echo(f"{'generate':10s}: {links.generate_url}")


@sora_group.command("status")
@click.option(
    "--base-url",
    default=DEFAULT_BASE_URL,
    show_default=True,
    help="正在运行的 sorabridge app 地址",
)
def status_cmd(base_url: str) -> None:
    """查询正在运行的 app 的连接状态（/sora/status）。"""
    try:
        with client(base_url) as c:
            r = c.get("/sora/status")
            r.raise_for_status()
            print_json(r.json())
    except httpx.HTTPError as exc:
        raise click.ClickException(f"cannot reach {base_url}: {exc}") from exc
