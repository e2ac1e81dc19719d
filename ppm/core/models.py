"""核心数据模型

包引用、已安装包、清单、搜索路径条目等领域实体集中定义，
其他模块统一从此处导入。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ppm.core.exceptions import ValidationError
from ppm.core.version import Version

# GitHub 用户名和仓库名允许的字符；"." 与 ".." 单独出现时另行拒绝
_SAFE_SEGMENT_RE = re.compile(r"[a-zA-Z0-9_.\-]+")


def validate_segment(value: str, field_name: str) -> None:
    """校验 owner / name 可以安全地作为单级目录名

    Raises:
        ValidationError: 为空、为 "." 或 ".."、或含有路径分隔符等非法字符
    """
    if value in (".", "..") or not _SAFE_SEGMENT_RE.fullmatch(value):
        raise ValidationError(f"{field_name} 名称不合法: {value!r}")


@dataclass(frozen=True, order=True)
class PackageRef:
    """远端仓库标识 (owner, name)，同时也是本地安装键"""

    owner: str
    name: str

    def __post_init__(self) -> None:
        validate_segment(self.owner, "owner")
        validate_segment(self.name, "name")

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


# 清单中声明的依赖与包引用结构一致，只是语义上由包作者声明、总是解析到最新版本
DependencyRef = PackageRef


@dataclass(frozen=True)
class InstalledPackage:
    """本地已安装的包，版本总是从 git 当前检出的标签推导"""

    ref: PackageRef
    directory: Path
    version: Version


@dataclass(frozen=True)
class Manifest:
    """包清单 ppm.json 的强类型表示"""

    dependencies: tuple[DependencyRef, ...] = ()


class PathKind(str, Enum):
    """搜索路径类别，value 即 SWI-Prolog 的 file_search_path 别名"""

    MODULE = "library"
    NATIVE = "foreign"


@dataclass(frozen=True)
class SearchPathEntry:
    kind: PathKind
    directory: Path


@dataclass(frozen=True, order=True)
class OutdatedPackage:
    """有可用更新的包"""

    ref: PackageRef
    current: Version
    latest: Version


class PackageKind(str, Enum):
    PACKAGE = "package"
    DEPENDENCY = "dependency"


class Action(str, Enum):
    INSTALLED = "installed"
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    SKIPPED = "skipped"  # 本次操作中已处理过（依赖环或重复依赖）
    REMOVED = "removed"


@dataclass
class ActionReport:
    """一次安装/更新对单个包所做操作的记录，供 CLI 输出"""

    ref: PackageRef
    kind: PackageKind
    action: Action
    version: Version | None = None
    previous: Version | None = None
    directory: Path | None = None
