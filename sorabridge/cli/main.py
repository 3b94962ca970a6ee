# -*- coding: utf-8 -*-
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import click

from ..constant import DEFAULT_HOST, DEFAULT_PORT, LOG_LEVEL_ENV
from ..providers import ConfigStore, LocalStorage
from ..utils.logging import setup_logger
from .sora_cmd import sora_group


@click.group()
@click.option(
    "--log-level",
    default=lambda: os.environ.get(LOG_LEVEL_ENV, "info"),
    type=click.Choice(
        ["critical", "error", "warning", "info", "debug"],
        case_sensitive=False,
    ),
    help="日志级别",
)
@click.option(
    "--storage",
    "storage_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="覆盖配置存储文件路径（默认 ~/.sorabridge/storage.json）",
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str,
    storage_path: Optional[Path],
) -> None:
    """SoraBridge：Sora2API 连接配置、测试与监控。"""
    setup_logger(log_level)
    # Keep the level for the uvicorn reload child.
    os.environ[LOG_LEVEL_ENV] = log_level.lower()
    ctx.ensure_object(dict)
    ctx.obj["store"] = ConfigStore(LocalStorage(storage_path))


@cli.command("app")
@click.option("--host", default=DEFAULT_HOST, show_default=True)
@click.option("--port", default=DEFAULT_PORT, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="开发模式：代码变更自动重载")
@click.pass_context
def app_cmd(ctx: click.Context, host: str, port: int, reload: bool) -> None:
    """启动 HTTP API 服务。"""
    import uvicorn

    from ..app import create_app

    if reload:
        uvicorn.run(
            "sorabridge.app._app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
        )
        return
    uvicorn.run(create_app(ctx.obj["store"]), host=host, port=port)


cli.add_command(sora_group)


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
