"""本地包存储

安装根目录布局: <root>/<owner>/<name>/，每个包一个 git 工作目录。
已安装包的版本不单独记录，总是通过 RepoClient 从当前检出的标签推导，
因此不会与磁盘状态不一致。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ppm.core.exceptions import (
    NotInstalledError,
    ParseError,
    RepoOperationError,
    ValidationError,
)
from ppm.core.manifest import load_manifest
from ppm.core.models import DependencyRef, InstalledPackage, Manifest, PackageRef
from ppm.core.protocols import RepoClient
from ppm.core.version import Version, parse_tag

logger = logging.getLogger(__name__)


def _visible_dirs(parent: Path) -> list[Path]:
    return sorted(
        d for d in parent.iterdir()
        if d.is_dir() and not d.name.startswith(".")
    )


class PackageStore:
    """已安装包的目录映射、枚举、清单读取与删除"""

    def __init__(
        self,
        root: Path,
        repo: RepoClient,
        manifest_name: str = "ppm.json",
    ) -> None:
        self.root = Path(root)
        self.repo = repo
        self.manifest_name = manifest_name

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def path_for(self, ref: PackageRef) -> Path:
        """包的目标目录（不论是否已安装）"""
        return self.root / ref.owner / ref.name

    def directory_for(self, ref: PackageRef) -> Path | None:
        """已安装包的目录，未安装返回 None"""
        path = self.path_for(ref)
        return path if path.is_dir() else None

    def is_installed(self, ref: PackageRef) -> bool:
        return self.directory_for(ref) is not None

    def current_version(self, directory: Path) -> Version:
        """当前检出的版本

        Raises:
            RepoOperationError: 读不到 git 标签
            ParseError: 标签不是版本格式
        """
        return parse_tag(self.repo.current_tag(directory).strip())

    def installed(self, ref: PackageRef) -> InstalledPackage:
        """获取单个已安装包

        Raises:
            NotInstalledError: 目录不存在
        """
        directory = self.directory_for(ref)
        if directory is None:
            raise NotInstalledError(f"包未安装: {ref}")
        return InstalledPackage(ref, directory, self.current_version(directory))

    def list_installed(self) -> list[InstalledPackage]:
        """扫描安装根目录

        目录存在但读不到版本（非 git 目录、检出的不是版本标签）的跳过，不报错。
        """
        if not self.root.is_dir():
            return []
        packages: list[InstalledPackage] = []
        for owner_dir in _visible_dirs(self.root):
            for pkg_dir in _visible_dirs(owner_dir):
                try:
                    ref = PackageRef(owner_dir.name, pkg_dir.name)
                except ValidationError:
                    logger.debug("跳过非包目录: %s", pkg_dir)
                    continue
                try:
                    version = self.current_version(pkg_dir)
                except (RepoOperationError, ParseError) as e:
                    logger.debug("跳过 %s: %s", ref, e)
                    continue
                packages.append(InstalledPackage(ref, pkg_dir, version))
        return packages

    def manifest_of(self, directory: Path) -> Manifest:
        return load_manifest(directory / self.manifest_name)

    def dependencies_of(self, directory: Path) -> tuple[DependencyRef, ...]:
        """读取包声明的依赖；没有清单时为空"""
        return self.manifest_of(directory).dependencies

    def entry_point(self, ref: PackageRef, filename: str = "run.pl") -> Path | None:
        """包内的启动脚本，优先包根目录，其次按路径排序的第一个匹配"""
        directory = self.directory_for(ref)
        if directory is None:
            raise NotInstalledError(f"包未安装: {ref}")
        direct = directory / filename
        if direct.is_file():
            return direct
        matches = sorted(
            p for p in directory.rglob(filename)
            if p.is_file() and ".git" not in p.relative_to(directory).parts
        )
        return matches[0] if matches else None

    def remove(self, ref: PackageRef) -> Path:
        """删除包目录（不级联删除其依赖），返回被删除的目录

        Raises:
            NotInstalledError: 包未安装
        """
        directory = self.directory_for(ref)
        if directory is None:
            raise NotInstalledError(f"包未安装: {ref}")
        shutil.rmtree(directory)
        owner_dir = directory.parent
        if not any(owner_dir.iterdir()):
            owner_dir.rmdir()
        logger.info("已删除 %s -> %s", ref, directory)
        return directory
