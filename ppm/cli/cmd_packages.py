"""CLI — 包管理命令（install / update / remove / list / updates）"""

from __future__ import annotations

import click

from ppm.core.exceptions import ManifestError
from ppm.core.models import Action, ActionReport, PackageKind, PackageRef
from ppm.core.version import Ordering, compare, format_tag, parse_tag
from ppm.services.container import ServiceContainer

_KIND_LABEL = {PackageKind.PACKAGE: "包", PackageKind.DEPENDENCY: "依赖"}


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(update)
    group.add_command(remove)
    group.add_command(list_packages)
    group.add_command(updates)


def _echo_report(r: ActionReport) -> None:
    kind = _KIND_LABEL[r.kind]
    if r.action is Action.INSTALLED and r.version is not None:
        click.secho(f"已安装{kind} ‘{r.ref}’ ({format_tag(r.version)})", fg="green")
    elif r.action is Action.UPDATED and r.version is not None and r.previous is not None:
        click.echo(f"已更新{kind} ‘{r.ref}’: {format_tag(r.previous)} → {format_tag(r.version)}")
    elif r.action is Action.UP_TO_DATE and r.kind is PackageKind.PACKAGE:
        click.echo(f"无需更新{kind} ‘{r.ref}’。")


@click.command()
@click.argument("owner")
@click.argument("repo")
@click.argument("version", required=False)
@click.pass_obj
def install(svc: ServiceContainer, owner: str, repo: str, version: str | None) -> None:
    """安装包及其依赖（默认最新版本，可指定如 V1.2.0）"""
    wanted = parse_tag(version) if version else None
    for r in svc.resolver.install(PackageRef(owner, repo), wanted):
        _echo_report(r)


@click.command()
@click.argument("owner", required=False)
@click.argument("repo", required=False)
@click.pass_obj
def update(svc: ServiceContainer, owner: str | None, repo: str | None) -> None:
    """更新指定包；不带参数时更新全部过期包"""
    if owner and repo:
        reports = svc.resolver.update(PackageRef(owner, repo))
    elif owner or repo:
        raise click.UsageError("需要同时指定 OWNER 和 REPO，或者都不指定")
    else:
        reports = svc.resolver.update_all()
        if not reports:
            click.echo("所有包都是最新版本。")
    for r in reports:
        _echo_report(r)


@click.command()
@click.argument("owner")
@click.argument("repo")
@click.pass_obj
def remove(svc: ServiceContainer, owner: str, repo: str) -> None:
    """删除包（不删除其依赖）"""
    r = svc.resolver.remove(PackageRef(owner, repo))
    suffix = f" ({format_tag(r.version)})" if r.version is not None else ""
    click.echo(f"已删除包 ‘{r.ref}’{suffix}。")


@click.command(name="list")
@click.pass_obj
def list_packages(svc: ServiceContainer) -> None:
    """列出已安装的包及其依赖"""
    packages = svc.store.list_installed()
    if not packages:
        click.echo("当前没有已安装的包。")
        return
    for pkg in packages:
        click.echo(f"{pkg.ref} ({format_tag(pkg.version)})")
        try:
            deps = svc.store.dependencies_of(pkg.directory)
        except ManifestError as e:
            click.secho(f"  ⤷ 清单无效: {e}", fg="red")
            continue
        for dep in deps:
            click.echo(f"  ⤷ {dep}")


@click.command()
@click.pass_obj
def updates(svc: ServiceContainer) -> None:
    """检查可用更新（只 fetch，不修改已安装的包）"""
    click.echo("正在检查更新…\n")
    outdated = svc.resolver.list_outdated()
    if not outdated:
        click.echo("没有可用更新。")
        return
    click.echo(f"{len(outdated)} 个可用更新:")
    for item in outdated:
        newer = compare(item.current, item.latest) is Ordering.LT
        current = click.style(format_tag(item.current), fg="red" if newer else "green")
        latest = click.style(format_tag(item.latest), fg="green" if newer else "red")
        click.echo(f"  • {item.ref}\t{current} → {latest}")
