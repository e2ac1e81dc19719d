"""包清单解析

每个包根目录下可以有一个 ppm.json，声明依赖:

    {
      "name": "foo",
      "dependencies": [
        {"user": "bob", "repo": "bar"},
        {"owner": "carol", "name": "baz"}
      ]
    }

清单在读取时一次性解析为 Manifest，字段缺失或类型不对立即抛 ManifestError，
而不是拖到使用时才出错。name / description 等其他字段忽略。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ppm.core.exceptions import ManifestError, ValidationError
from ppm.core.models import DependencyRef, Manifest

logger = logging.getLogger(__name__)


def _field(item: dict[str, Any], keys: tuple[str, str], where: str) -> str:
    for key in keys:
        if key in item:
            value = item[key]
            if not isinstance(value, str) or not value.strip():
                raise ManifestError(f"{where}: 字段 '{key}' 必须是非空字符串")
            return value.strip()
    raise ManifestError(f"{where}: 缺少字段 '{keys[0]}' 或 '{keys[1]}'")


def parse_manifest(data: Any, *, source: str = "ppm.json") -> Manifest:
    """将已反序列化的清单内容校验并转换为 Manifest"""
    if not isinstance(data, dict):
        raise ManifestError(f"{source}: 顶层必须是对象，实际为 {type(data).__name__}")

    raw = data.get("dependencies", [])
    if raw is None:
        raw = []
    if not isinstance(raw, list):
        raise ManifestError(f"{source}: 'dependencies' 必须是数组")

    deps: list[DependencyRef] = []
    for i, item in enumerate(raw):
        where = f"{source} dependencies[{i}]"
        if not isinstance(item, dict):
            raise ManifestError(f"{where}: 必须是对象")
        owner = _field(item, ("user", "owner"), where)
        name = _field(item, ("repo", "name"), where)
        try:
            dep = DependencyRef(owner, name)
        except ValidationError as e:
            raise ManifestError(f"{where}: {e}") from e
        if dep not in deps:
            deps.append(dep)
    return Manifest(dependencies=tuple(deps))


def load_manifest(path: Path) -> Manifest:
    """读取清单文件；文件不存在时视为没有依赖"""
    if not path.is_file():
        return Manifest()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"无法读取清单 {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"清单不是合法 JSON {path}: {e}") from e
    manifest = parse_manifest(data, source=str(path))
    logger.debug("清单 %s: %d 个依赖", path, len(manifest.dependencies))
    return manifest
