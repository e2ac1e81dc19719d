"""共享 fixture — 内存中的 GitHub / git 替身

FakeForge 按 PackageRef 返回预置标签；FakeRepo 在 clone 时创建目录和 .git，
写入预置文件（如 ppm.json），并在内存中记录每个目录当前检出的标签。
两者都记录调用序列，便于断言“没有 checkout”之类的性质。
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ppm.core.exceptions import RepoOperationError
from ppm.core.models import PackageRef
from ppm.core.resolver import Resolver
from ppm.core.search_path import SearchPathRegistry
from ppm.core.store import PackageStore
from ppm.core.sync import Synchronizer

ARCH = "x86_64-linux"


class FakeForge:
    def __init__(self) -> None:
        self.tags: dict[PackageRef, list[str]] = {}
        self.calls: list[PackageRef] = []

    def list_tags(self, ref: PackageRef) -> list[str]:
        self.calls.append(ref)
        return list(self.tags.get(ref, []))

    def clone_uri(self, ref: PackageRef) -> str:
        return f"fake://{ref.owner}/{ref.name}"


class FakeRepo:
    def __init__(self) -> None:
        self.remotes: dict[str, dict[str, str]] = {}
        self.checked_out: dict[Path, str] = {}
        self.calls: list[tuple[str, Path, str]] = []
        self.fail_clone: set[str] = set()

    def clone(self, dest: Path, uri: str) -> None:
        self.calls.append(("clone", dest, uri))
        if uri in self.fail_clone or uri not in self.remotes:
            raise RepoOperationError(f"git clone 失败: {uri}", stderr="fatal: repository not found")
        (dest / ".git").mkdir(parents=True)
        for rel, content in self.remotes[uri].items():
            target = dest / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

    def fetch(self, directory: Path) -> None:
        self.calls.append(("fetch", directory, ""))

    def checkout(self, directory: Path, tag: str) -> None:
        self.calls.append(("checkout", directory, tag))
        self.checked_out[directory] = tag

    def current_tag(self, directory: Path) -> str:
        if directory not in self.checked_out:
            raise RepoOperationError(f"no tag: {directory}")
        return self.checked_out[directory]

    def ops(self, name: str) -> list[tuple[str, Path, str]]:
        return [c for c in self.calls if c[0] == name]


class World:
    """把 forge / repo / store / synchronizer / resolver 组装在一起"""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.forge = FakeForge()
        self.repo = FakeRepo()
        self.registry = SearchPathRegistry()
        self.store = PackageStore(root, self.repo)
        self.synchronizer = Synchronizer(
            self.store, self.registry, ARCH, export_path=root / "search_path.pl",
        )
        self.resolver = Resolver(self.store, self.forge, self.repo, self.synchronizer)

    def publish(
        self,
        owner: str,
        name: str,
        tags: list[str],
        *,
        deps: list[tuple[str, str]] | None = None,
        prolog: bool = False,
        native: bool = False,
        extra: dict[str, str] | None = None,
    ) -> PackageRef:
        ref = PackageRef(owner, name)
        self.forge.tags[ref] = tags
        files: dict[str, str] = dict(extra or {})
        if deps is not None:
            files["ppm.json"] = json.dumps({
                "name": name,
                "dependencies": [{"user": o, "repo": r} for o, r in deps],
            })
        if prolog:
            files[f"prolog/{name}.pl"] = f":- module({name}, []).\n"
        if native:
            files[f"lib/{ARCH}/{name}.so"] = ""
        self.repo.remotes[self.forge.clone_uri(ref)] = files
        return ref

    def dir(self, owner: str, name: str) -> Path:
        return self.root / owner / name


@pytest.fixture()
def world(tmp_path: Path) -> World:
    return World(tmp_path / "ppm")


@pytest.fixture()
def make_world(tmp_path: Path):
    """需要多个互相独立的环境时使用"""
    counter = iter(range(1000))

    def _make() -> World:
        return World(tmp_path / f"ppm{next(counter)}")

    return _make
