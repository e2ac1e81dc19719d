"""git 子进程封装

clone / fetch / checkout / 读取当前标签，全部经由 CommandExecutor 执行，
非零退出码转换为携带 stderr 的 RepoOperationError。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ppm.core.exceptions import RepoOperationError, ValidationError
from ppm.core.version import format_tag, latest_version
from ppm.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)

_SAFE_TAG_RE = re.compile(r"[a-zA-Z0-9_.\-]+")


class GitRepoClient:
    """基于 git 命令行的 RepoClient 实现"""

    def __init__(
        self,
        git_bin: str = "git",
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
    ) -> None:
        self.git_bin = git_bin
        self.executor = executor or get_executor()
        self.timeout = timeout

    def _git(self, args: list[str], *, cwd: Path | str = ".", label: str) -> CommandResult:
        cmd = [self.git_bin, *args]
        try:
            r = self.executor.execute(cmd, cwd=str(cwd), timeout=self.timeout)
        except OSError as e:
            raise RepoOperationError(f"git {label} 无法执行: {e}") from e
        if r.timed_out:
            raise RepoOperationError(
                f"git {label} 超时 ({self.timeout}s)", stderr=r.stderr, returncode=r.returncode,
            )
        if not r.success:
            raise RepoOperationError(
                f"git {label} 失败 (rc={r.returncode}): {r.stderr.strip()[:500]}",
                stderr=r.stderr, returncode=r.returncode,
            )
        return r

    def clone(self, dest: Path, uri: str) -> None:
        logger.info("git clone %s -> %s", uri, dest)
        self._git(["clone", "--quiet", uri, str(dest)], cwd=dest.parent, label="clone")

    def fetch(self, directory: Path) -> None:
        self._git(["fetch", "--quiet", "--tags", "origin"], cwd=directory, label="fetch")

    def checkout(self, directory: Path, tag: str) -> None:
        if not _SAFE_TAG_RE.fullmatch(tag):
            raise ValidationError(f"标签包含非法字符: {tag}")
        self._git(["checkout", "--quiet", f"tags/{tag}"], cwd=directory, label="checkout")

    def current_tag(self, directory: Path) -> str:
        """HEAD 上的标签；有多个时取版本最高的 V<x>.<y>.<z> 标签

        同一提交上可能同时有 latest / stable 之类的非版本标签。
        没有任何版本标签时返回第一个标签，交给调用方解析失败。
        """
        if not (directory / ".git").exists():
            raise RepoOperationError(f"不是 git 工作目录: {directory}")
        r = self._git(["tag", "--points-at", "HEAD"], cwd=directory, label="tag")
        tags = [t.strip() for t in r.stdout.splitlines() if t.strip()]
        if not tags:
            raise RepoOperationError(f"HEAD 上没有标签: {directory}")
        latest = latest_version(tags)
        return format_tag(latest) if latest is not None else tags[0]
