"""搜索路径注册表

保存当前发布给 Prolog 运行时的 file_search_path 条目。
每次 sync 整体替换，从不增量修补；进程启动时为空。

CLI 使用进程级默认实例（get_registry），测试直接构造独立实例。
"""

from __future__ import annotations

from pathlib import Path

from ppm.core.models import PathKind, SearchPathEntry


def _quote_atom(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class SearchPathRegistry:
    """搜索路径注册表"""

    def __init__(self) -> None:
        self._entries: tuple[SearchPathEntry, ...] = ()
        self._root: Path | None = None

    @property
    def root(self) -> Path | None:
        return self._root

    def replace(self, entries: list[SearchPathEntry], *, root: Path | None = None) -> None:
        """整体替换注册表内容，丢弃上一次 sync 的全部条目"""
        unique: list[SearchPathEntry] = []
        for entry in entries:
            if entry not in unique:
                unique.append(entry)
        self._entries = tuple(unique)
        self._root = root

    def entries(self, kind: PathKind | None = None) -> list[SearchPathEntry]:
        if kind is None:
            return list(self._entries)
        return [e for e in self._entries if e.kind is kind]

    def directories(self, kind: PathKind) -> list[Path]:
        return [e.directory for e in self.entries(kind)]

    def clear(self) -> None:
        self._entries = ()
        self._root = None

    def __len__(self) -> int:
        return len(self._entries)

    def to_prolog(self) -> str:
        """渲染为可被 swipl 加载的 file_search_path/2 子句"""
        lines = [
            "% 由 ppm sync 生成，请勿手工修改",
            ":- multifile user:file_search_path/2.",
            ":- dynamic user:file_search_path/2.",
            "",
        ]
        if self._root is not None:
            lines.append(f"user:file_search_path(ppm, {_quote_atom(self._root.as_posix())}).")
        for entry in self._entries:
            lines.append(
                f"user:file_search_path({entry.kind.value}, "
                f"{_quote_atom(entry.directory.as_posix())})."
            )
        return "\n".join(lines) + "\n"


# =========================================================================
# 进程级默认实例
# =========================================================================

_default_registry = SearchPathRegistry()


def get_registry() -> SearchPathRegistry:
    return _default_registry


def reset_registry() -> None:
    _default_registry.clear()
