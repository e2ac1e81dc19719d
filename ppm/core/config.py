"""集中配置管理

替代各模块散落的默认常量，提供统一的配置入口。
支持从 YAML 文件加载 + 环境变量覆盖 + 编程式覆盖。
"""

from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from ppm.core.exceptions import ConfigError
from ppm.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "~/.ppm.yml"


def default_arch() -> str:
    """SWI-Prolog 风格的平台标识，如 x86_64-linux"""
    machine = platform.machine().lower() or "unknown"
    system = platform.system().lower() or "unknown"
    if system == "windows":
        return f"{machine}-win64" if machine.endswith("64") else f"{machine}-win32"
    return f"{machine}-{system}"


@dataclass
class Config:
    """包管理器全局配置"""

    # 目录
    root_dir: str = "~/.ppm"
    manifest_name: str = "ppm.json"
    export_file: str = "search_path.pl"  # 相对 root_dir，留空则不导出

    # 代码托管平台
    api_url: str = "https://api.github.com"
    clone_base_url: str = "https://github.com"
    github_token: str = ""
    http_timeout: int = 30

    # 执行
    git_bin: str = "git"
    git_timeout: int | None = None
    prolog_bin: str = "swipl"
    arch: str = field(default_factory=default_arch)

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @property
    def root(self) -> Path:
        return Path(self.root_dir).expanduser()

    @property
    def export_path(self) -> Path | None:
        if not self.export_file:
            return None
        return self.root / self.export_file

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认，之后应用环境变量覆盖"""
        try:
            data = load_yaml(Path(path).expanduser())
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件无效 {path}: {e}") from e
        cfg.extra = extra
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """环境变量优先于配置文件"""
        root = os.getenv("PPM_ROOT", "")
        if root:
            self.root_dir = root
        token = os.getenv("GITHUB_TOKEN", "")
        if token and not self.github_token:
            self.github_token = token


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
        _current.apply_env()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
