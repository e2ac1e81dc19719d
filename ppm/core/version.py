"""版本标签解析

代码托管平台上的发布标签统一为 `V<major>.<minor>.<patch>` 格式，
例如 `V1.2.3`。不符合该格式的标签不是候选版本，解析时直接抛 ParseError，
由调用方决定是否忽略。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from ppm.core.exceptions import ParseError

_TAG_RE = re.compile(r"V([0-9]+)\.([0-9]+)\.([0-9]+)")


class Ordering(IntEnum):
    """版本比较结果"""

    LT = -1
    EQ = 0
    GT = 1


@dataclass(frozen=True, order=True)
class Version:
    """三段式版本号，按 (major, minor, patch) 字典序排序"""

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise ValueError(f"版本号分量不能为负数: {self.as_tuple()}")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def tag(self) -> str:
        return format_tag(self)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_tag(tag: str) -> Version:
    """将标签字符串解析为 Version

    Raises:
        ParseError: 标签不符合 V<int>.<int>.<int>
    """
    m = _TAG_RE.fullmatch(tag)
    if m is None:
        raise ParseError(f"不是版本标签: {tag!r}")
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def format_tag(version: Version) -> str:
    return f"V{version.major}.{version.minor}.{version.patch}"


def compare(a: Version, b: Version) -> Ordering:
    ta, tb = a.as_tuple(), b.as_tuple()
    if ta < tb:
        return Ordering.LT
    if ta > tb:
        return Ordering.GT
    return Ordering.EQ


def parse_tags(tags: Iterable[str]) -> set[Version]:
    """解析一组标签，静默丢弃非版本标签；多个标签解析到同一版本时去重"""
    versions: set[Version] = set()
    for tag in tags:
        try:
            versions.add(parse_tag(tag))
        except ParseError:
            continue
    return versions


def latest_version(tags: Iterable[str]) -> Version | None:
    """返回标签集合中的最高版本，没有任何合法版本标签时返回 None"""
    versions = parse_tags(tags)
    if not versions:
        return None
    return max(versions)
