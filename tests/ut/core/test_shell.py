"""LocalExecutor 单元测试 — 真实子进程"""

from __future__ import annotations

import logging
import sys

from ppm.utils.shell import LocalExecutor, get_executor, set_executor


class TestLocalExecutor:
    def test_captures_stdout_and_stderr(self, tmp_path) -> None:
        r = LocalExecutor().execute(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"],
            cwd=str(tmp_path),
        )
        assert r.returncode == 3
        assert not r.success
        assert r.stdout.strip() == "out"
        assert r.stderr.strip() == "err"
        assert not r.timed_out

    def test_large_stderr_does_not_stall(self, tmp_path) -> None:
        script = (
            "import sys\n"
            "for i in range(20000):\n"
            "    sys.stderr.write('e' * 80 + '\\n')\n"
            "print('done')\n"
        )
        r = LocalExecutor().execute([sys.executable, "-c", script], cwd=str(tmp_path), timeout=60)
        assert r.success
        assert r.stdout.strip() == "done"
        assert r.stderr.count("\n") == 20000

    def test_stderr_lines_logged(self, tmp_path, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="ppm.utils.shell"):
            LocalExecutor().execute(
                [sys.executable, "-c", "import sys; sys.stderr.write('warn line\\n\\n')"],
                cwd=str(tmp_path),
            )
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.endswith(": warn line") for m in messages)
        assert len([m for m in messages if m.endswith(": ")]) == 0

    def test_timeout_kills(self, tmp_path) -> None:
        r = LocalExecutor().execute(
            [sys.executable, "-c", "import time; time.sleep(30)"],
            cwd=str(tmp_path), timeout=1,
        )
        assert r.timed_out
        assert not r.success


class TestDefaultExecutor:
    def test_set_and_restore(self) -> None:
        original = get_executor()
        replacement = LocalExecutor()
        set_executor(replacement)
        try:
            assert get_executor() is replacement
        finally:
            set_executor(original)
