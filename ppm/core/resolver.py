"""安装 / 更新 / 依赖解析

install 流程:
  1. 已安装则转为 update（幂等）
  2. 查询远端标签，解析并去重，选最新或校验指定版本
  3. clone 到 <root>/<owner>/<name>，检出标签
  4. 读取清单，逐个以 latest 递归安装依赖
  5. 顶层调用结束时做一次完整 sync

update 流程:
  1. 要求已安装
  2. fetch（不合并），当前版本取自检出标签，最新版本取自远端标签
  3. 相同则不检出；不同则原地检出最新标签
  4. 无论是否检出，都递归依赖并 sync

递归时携带已访问集合，同一次操作中重复出现的包（依赖环或菱形依赖）直接跳过。
依赖失败不回滚：已经完成的父包和兄弟依赖保留在磁盘上，错误向上抛出。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ppm.core.exceptions import (
    NotInstalledError,
    ParseError,
    RepoOperationError,
    VersionNotFoundError,
)
from ppm.core.models import (
    Action,
    ActionReport,
    OutdatedPackage,
    PackageKind,
    PackageRef,
)
from ppm.core.protocols import ForgeClient, RepoClient
from ppm.core.store import PackageStore
from ppm.core.sync import Synchronizer
from ppm.core.version import Version, format_tag, parse_tags

logger = logging.getLogger(__name__)


class Resolver:
    """包安装与更新的协调器"""

    def __init__(
        self,
        store: PackageStore,
        forge: ForgeClient,
        repo: RepoClient,
        synchronizer: Synchronizer,
    ) -> None:
        self.store = store
        self.forge = forge
        self.repo = repo
        self.synchronizer = synchronizer

    # ------------------------------------------------------------------
    # 版本选择
    # ------------------------------------------------------------------

    def available_versions(self, ref: PackageRef) -> set[Version]:
        """远端全部合法版本（非版本标签静默丢弃）"""
        return parse_tags(self.forge.list_tags(ref))

    def latest_version(self, ref: PackageRef) -> Version:
        versions = self.available_versions(ref)
        if not versions:
            raise VersionNotFoundError(f"在 {ref} 中找不到任何版本标签")
        return max(versions)

    def select_version(self, ref: PackageRef, version: Version | None) -> Version:
        """version 为 None 表示 latest；指定版本必须存在于远端标签中"""
        if version is None:
            return self.latest_version(ref)
        versions = self.available_versions(ref)
        if version not in versions:
            raise VersionNotFoundError(
                f"{ref} 没有版本 {format_tag(version)}，"
                f"可用: {', '.join(format_tag(v) for v in sorted(versions)) or '无'}"
            )
        return version

    # ------------------------------------------------------------------
    # 公共操作
    # ------------------------------------------------------------------

    def install(self, ref: PackageRef, version: Version | None = None) -> list[ActionReport]:
        """安装包及其依赖，已安装时等价于 update"""
        reports: list[ActionReport] = []
        try:
            self._install(ref, version, PackageKind.PACKAGE, set(), reports)
        finally:
            if reports:
                self.synchronizer.sync()
        return reports

    def update(self, ref: PackageRef) -> list[ActionReport]:
        """更新已安装包到最新版本，并递归更新/安装依赖"""
        reports: list[ActionReport] = []
        try:
            self._update(ref, PackageKind.PACKAGE, set(), reports)
        finally:
            if reports:
                self.synchronizer.sync()
        return reports

    def list_outdated(self) -> list[OutdatedPackage]:
        """列出当前版本与远端最新版本不同的包

        只 fetch，不检出，不修改任何工作目录的状态。
        """
        outdated: list[OutdatedPackage] = []
        for pkg in self.store.list_installed():
            self.repo.fetch(pkg.directory)
            latest = self.latest_version(pkg.ref)
            if pkg.version != latest:
                outdated.append(OutdatedPackage(pkg.ref, pkg.version, latest))
        return sorted(outdated)

    def update_all(self) -> list[ActionReport]:
        """更新全部过期包

        先计算过期列表再逐个 update，不保证原子性：
        计算与执行之间远端可能已变化。
        """
        reports: list[ActionReport] = []
        for item in self.list_outdated():
            reports.extend(self.update(item.ref))
        return reports

    def remove(self, ref: PackageRef) -> ActionReport:
        """删除包（不级联删除依赖）并重新 sync"""
        version: Version | None = None
        directory = self.store.directory_for(ref)
        if directory is not None:
            try:
                version = self.store.current_version(directory)
            except (RepoOperationError, ParseError) as e:
                logger.warning("无法读取 %s 的当前版本: %s", ref, e)
        removed = self.store.remove(ref)
        self.synchronizer.sync()
        return ActionReport(
            ref, PackageKind.PACKAGE, Action.REMOVED, version=version, directory=removed,
        )

    # ------------------------------------------------------------------
    # 递归实现（不 sync，由顶层调用统一 sync）
    # ------------------------------------------------------------------

    def _install(
        self,
        ref: PackageRef,
        version: Version | None,
        kind: PackageKind,
        visited: set[PackageRef],
        reports: list[ActionReport],
    ) -> None:
        if self.store.is_installed(ref):
            self._update(ref, kind, visited, reports)
            return
        if ref in visited:
            reports.append(ActionReport(ref, kind, Action.SKIPPED))
            return
        visited.add(ref)

        chosen = self.select_version(ref, version)
        self.store.ensure_root()
        dest = self.store.path_for(ref)
        dest.parent.mkdir(parents=True, exist_ok=True)

        logger.info("安装 %s %s (%s)", kind.value, ref, format_tag(chosen))
        self.repo.clone(dest, self.forge.clone_uri(ref))
        self.repo.checkout(dest, format_tag(chosen))
        reports.append(ActionReport(ref, kind, Action.INSTALLED, version=chosen, directory=dest))

        self._resolve_dependencies(dest, visited, reports)

    def _update(
        self,
        ref: PackageRef,
        kind: PackageKind,
        visited: set[PackageRef],
        reports: list[ActionReport],
    ) -> None:
        if ref in visited:
            reports.append(ActionReport(ref, kind, Action.SKIPPED))
            return
        visited.add(ref)

        directory = self.store.directory_for(ref)
        if directory is None:
            raise NotInstalledError(f"包未安装: {ref}")
        self.repo.fetch(directory)
        current = self.store.current_version(directory)
        latest = self.latest_version(ref)

        if current == latest:
            logger.info("无需更新 %s %s (%s)", kind.value, ref, format_tag(current))
            reports.append(ActionReport(
                ref, kind, Action.UP_TO_DATE, version=current, directory=directory,
            ))
        else:
            self.repo.checkout(directory, format_tag(latest))
            logger.info(
                "已更新 %s: %s -> %s", ref, format_tag(current), format_tag(latest),
            )
            reports.append(ActionReport(
                ref, kind, Action.UPDATED,
                version=latest, previous=current, directory=directory,
            ))

        self._resolve_dependencies(directory, visited, reports)

    def _resolve_dependencies(
        self,
        directory: Path,
        visited: set[PackageRef],
        reports: list[ActionReport],
    ) -> None:
        for dep in self.store.dependencies_of(directory):
            self._install(dep, None, PackageKind.DEPENDENCY, visited, reports)
