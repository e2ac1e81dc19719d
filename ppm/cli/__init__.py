"""ppm 命令行接口

命令按领域拆分为子模块，每个模块注册自己的命令到 main group。
业务异常（PPMError）统一在 group 层转换为 stderr 提示 + 退出码 1。
"""

from __future__ import annotations

import os

import click

from ppm import __version__
from ppm.core.exceptions import PPMError
from ppm.utils.logger import setup_logging


class PPMGroup(click.Group):
    """捕获业务异常，输出友好提示而不是堆栈"""

    def invoke(self, ctx: click.Context):  # type: ignore[override]
        try:
            return super().invoke(ctx)
        except PPMError as e:
            click.echo(click.style(f"错误 [{e.code}]: {e}", fg="red"), err=True)
            ctx.exit(1)


@click.group(cls=PPMGroup)
@click.version_option(version=__version__)
@click.option("--config", "config_path", default="", envvar="PPM_CONFIG", help="配置文件路径（默认 ~/.ppm.yml）")
@click.option("--root", default="", help="安装根目录（覆盖配置）")
@click.pass_context
def main(ctx: click.Context, config_path: str, root: str) -> None:
    """ppm - SWI-Prolog 包管理器"""
    setup_logging(
        level=os.getenv("PPM_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("PPM_LOG_JSON", "") == "1",
    )
    if ctx.obj is not None:
        return

    from ppm.core.config import DEFAULT_CONFIG_FILE, init_config
    from ppm.services.container import ServiceContainer

    cfg = init_config(config_path or DEFAULT_CONFIG_FILE)
    if root:
        cfg.root_dir = root
    ctx.obj = ServiceContainer(config=cfg)


# 注册各领域子命令
from ppm.cli.cmd_packages import register as _reg_packages  # noqa: E402
from ppm.cli.cmd_paths import register as _reg_paths  # noqa: E402

_reg_packages(main)
_reg_paths(main)
