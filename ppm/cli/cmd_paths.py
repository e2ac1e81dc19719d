"""CLI — 搜索路径命令（sync / run）"""

from __future__ import annotations

import subprocess

import click

from ppm.core.exceptions import RepoOperationError, ValidationError
from ppm.core.models import PackageRef, PathKind
from ppm.services.container import ServiceContainer


def register(group: click.Group) -> None:
    group.add_command(sync)
    group.add_command(run)


@click.command()
@click.pass_obj
def sync(svc: ServiceContainer) -> None:
    """按磁盘上的已安装包重建 Prolog 搜索路径"""
    entries = svc.synchronizer.sync()
    if not entries:
        click.echo("没有需要发布的搜索路径。")
    for kind in (PathKind.MODULE, PathKind.NATIVE):
        for entry in entries:
            if entry.kind is kind:
                click.echo(f"  {kind.value:8s} {entry.directory}")
    export = svc.synchronizer.export_path
    if export is not None:
        click.echo(f"已写入: {export}")


@click.command()
@click.argument("owner")
@click.argument("repo")
@click.pass_context
def run(ctx: click.Context, owner: str, repo: str) -> None:
    """用 swipl 运行包中的 run.pl"""
    svc: ServiceContainer = ctx.obj
    ref = PackageRef(owner, repo)
    script = svc.store.entry_point(ref)
    if script is None:
        raise ValidationError(f"包 ‘{ref}’ 中没有 run.pl")

    svc.synchronizer.sync()
    args = [svc.config.prolog_bin]
    export = svc.synchronizer.export_path
    if export is not None:
        args.append(str(export))
    args.append(str(script))
    try:
        rc = subprocess.run(args, cwd=str(script.parent), check=False).returncode
    except OSError as e:
        raise RepoOperationError(f"无法启动 {svc.config.prolog_bin}: {e}") from e
    ctx.exit(rc)
