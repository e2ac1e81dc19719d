"""搜索路径同步

每个已安装包可能提供两类目录:
  - <root>/<owner>/<name>/prolog        -> file_search_path(library, ...)
  - <root>/<owner>/<name>/lib/<arch>    -> file_search_path(foreign, ...)

sync() 总是从当前磁盘上的已安装包集合从头计算，整体替换注册表，
因此重复执行是幂等的，并且会反映被删除的包。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ppm.core.models import InstalledPackage, PathKind, SearchPathEntry
from ppm.core.search_path import SearchPathRegistry
from ppm.core.store import PackageStore
from ppm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

MODULE_SUBDIR = "prolog"
NATIVE_SUBDIR = "lib"


class Synchronizer:
    """已安装包集合 -> 搜索路径注册表"""

    def __init__(
        self,
        store: PackageStore,
        registry: SearchPathRegistry,
        arch: str,
        export_path: Path | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.arch = arch
        self.export_path = export_path

    def candidates(self, pkg: InstalledPackage) -> list[SearchPathEntry]:
        return [
            SearchPathEntry(PathKind.MODULE, pkg.directory / MODULE_SUBDIR),
            SearchPathEntry(PathKind.NATIVE, pkg.directory / NATIVE_SUBDIR / self.arch),
        ]

    def compute(self) -> list[SearchPathEntry]:
        """计算当前应发布的全部条目（不修改注册表）"""
        entries: list[SearchPathEntry] = []
        for pkg in self.store.list_installed():
            for entry in self.candidates(pkg):
                if entry.directory.is_dir():
                    entries.append(entry)
        return entries

    def sync(self) -> list[SearchPathEntry]:
        entries = self.compute()
        self.registry.replace(entries, root=self.store.root)
        logger.info(
            "搜索路径已同步: %d 个 library, %d 个 foreign",
            len(self.registry.entries(PathKind.MODULE)),
            len(self.registry.entries(PathKind.NATIVE)),
        )
        if self.export_path is not None:
            atomic_write(self.export_path, self.registry.to_prolog())
            logger.debug("搜索路径已导出: %s", self.export_path)
        return entries
