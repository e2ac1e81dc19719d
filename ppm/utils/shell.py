"""子进程执行工具 — 统一 git 等外部命令调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。

默认实现 LocalExecutor 同时排空 stdout 和 stderr：stderr 由后台线程逐行读取
（非空行记入 info 日志并保留全文），调用线程读取 stdout，
进程退出且线程 join 之后才检查退出码，避免任一管道写满导致子进程阻塞。
"""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    测试时可注入 fake 实现，无需 patch subprocess。
    """

    def execute(
        self,
        args: list[str],
        *,
        cwd: str = ".",
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

def _drain_stderr(stream: IO[str], sink: list[str], label: str) -> None:
    for line in stream:
        sink.append(line)
        text = line.rstrip("\n")
        if text.strip():
            logger.info("%s: %s", label, text)


class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        args: list[str],
        *,
        cwd: str = ".",
        timeout: int | None = None,
    ) -> CommandResult:
        logger.debug("执行: %s (cwd=%s)", " ".join(args), cwd)
        proc = subprocess.Popen(
            args, cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            text=True, encoding="utf-8", errors="replace",
        )
        err_lines: list[str] = []
        reader = threading.Thread(
            target=_drain_stderr,
            args=(proc.stderr, err_lines, args[0]),
            daemon=True,
        )
        reader.start()

        expired = threading.Event()

        def _kill() -> None:
            expired.set()
            proc.kill()

        timer: threading.Timer | None = None
        if timeout is not None:
            timer = threading.Timer(timeout, _kill)
            timer.start()
        try:
            assert proc.stdout is not None
            out = proc.stdout.read()
            returncode = proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            reader.join()
            proc.stdout.close()  # type: ignore[union-attr]
            proc.stderr.close()  # type: ignore[union-attr]

        return CommandResult(
            returncode=returncode,
            stdout=out,
            stderr="".join(err_lines),
            timed_out=expired.is_set(),
        )


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor
