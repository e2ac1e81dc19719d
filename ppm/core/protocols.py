"""领域协议定义

核心层（Resolver / PackageStore）只依赖这里的抽象，
GitHub 和 git 的具体实现位于 ppm.services，测试时注入 fake。

使用 typing.Protocol 而非 ABC，使实现类无需继承即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ppm.core.models import PackageRef


# =========================================================================
# 代码托管平台协议
# =========================================================================

class ForgeClient(Protocol):
    """代码托管平台客户端

    只读访问：列出仓库的全部标签名，以及给出 clone 地址。
    网络或认证失败抛 ForgeUnavailableError。
    """

    def list_tags(self, ref: PackageRef) -> list[str]:
        """返回仓库的原始标签名列表（未经解析）"""
        ...

    def clone_uri(self, ref: PackageRef) -> str:
        """返回仓库的 clone 地址"""
        ...


# =========================================================================
# 版本控制协议
# =========================================================================

class RepoClient(Protocol):
    """版本控制客户端，非零退出抛 RepoOperationError"""

    def clone(self, dest: Path, uri: str) -> None:
        ...

    def fetch(self, directory: Path) -> None:
        """拉取远端引用和标签，不合并"""
        ...

    def checkout(self, directory: Path, tag: str) -> None:
        ...

    def current_tag(self, directory: Path) -> str:
        """返回当前检出提交上的标签名"""
        ...
