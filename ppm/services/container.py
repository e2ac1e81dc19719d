"""服务容器 — 统一依赖注入

所有协作者通过容器获取，同一容器内的实例共享（同一个 RepoClient、同一个注册表）。
CLI 通过 get_container() 获取，测试可直接构造并替换其中的 forge / repo。

依赖关系图（→ 表示依赖）:
  resolver     → store, forge, repo, synchronizer
  synchronizer → store, registry
  store        → repo

用法:
    container = ServiceContainer()
    container.resolver.install(PackageRef("alice", "foo"))

    # 测试中注入 fake
    container = ServiceContainer(config=cfg, forge=FakeForge(...), repo=FakeRepo(...))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ppm.core.config import Config
    from ppm.core.protocols import ForgeClient, RepoClient
    from ppm.core.resolver import Resolver
    from ppm.core.search_path import SearchPathRegistry
    from ppm.core.store import PackageStore
    from ppm.core.sync import Synchronizer

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        forge: ForgeClient | None = None,
        repo: RepoClient | None = None,
        registry: SearchPathRegistry | None = None,
    ) -> None:
        if config is None:
            from ppm.core.config import get_config
            config = get_config()
        self._config = config
        self._instances: dict[str, object] = {}
        if forge is not None:
            self._instances["forge"] = forge
        if repo is not None:
            self._instances["repo"] = repo
        if registry is not None:
            self._instances["registry"] = registry

    @property
    def config(self) -> Config:
        return self._config

    # ---- 外部协作者 ----

    @property
    def forge(self) -> ForgeClient:
        if "forge" not in self._instances:
            from ppm.services.forge import GitHubForge
            self._instances["forge"] = GitHubForge(
                api_url=self._config.api_url,
                clone_base_url=self._config.clone_base_url,
                token=self._config.github_token,
                timeout=self._config.http_timeout,
            )
        return self._instances["forge"]  # type: ignore[return-value]

    @property
    def repo(self) -> RepoClient:
        if "repo" not in self._instances:
            from ppm.services.git import GitRepoClient
            self._instances["repo"] = GitRepoClient(
                git_bin=self._config.git_bin,
                timeout=self._config.git_timeout,
            )
        return self._instances["repo"]  # type: ignore[return-value]

    @property
    def registry(self) -> SearchPathRegistry:
        if "registry" not in self._instances:
            from ppm.core.search_path import get_registry
            self._instances["registry"] = get_registry()
        return self._instances["registry"]  # type: ignore[return-value]

    # ---- 核心组件 ----

    @property
    def store(self) -> PackageStore:
        if "store" not in self._instances:
            from ppm.core.store import PackageStore
            self._instances["store"] = PackageStore(
                root=self._config.root,
                repo=self.repo,
                manifest_name=self._config.manifest_name,
            )
        return self._instances["store"]  # type: ignore[return-value]

    @property
    def synchronizer(self) -> Synchronizer:
        if "synchronizer" not in self._instances:
            from ppm.core.sync import Synchronizer
            self._instances["synchronizer"] = Synchronizer(
                store=self.store,
                registry=self.registry,
                arch=self._config.arch,
                export_path=self._config.export_path,
            )
        return self._instances["synchronizer"]  # type: ignore[return-value]

    @property
    def resolver(self) -> Resolver:
        if "resolver" not in self._instances:
            from ppm.core.resolver import Resolver
            self._instances["resolver"] = Resolver(
                store=self.store,
                forge=self.forge,
                repo=self.repo,
                synchronizer=self.synchronizer,
            )
        return self._instances["resolver"]  # type: ignore[return-value]


# 全局单例
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """获取全局服务容器（懒初始化）"""
    global _container  # noqa: PLW0603
    if _container is None:
        _container = ServiceContainer()
        logger.debug("服务容器已初始化")
    return _container


def reset_container() -> None:
    """重置全局容器（用于测试或配置变更后）"""
    global _container  # noqa: PLW0603
    _container = None
