"""统一异常体系

所有业务异常继承 PPMError，替代散落的 ValueError / RuntimeError。
CLI 层据此输出 `错误 [code]: message` 并以非零状态退出。
"""

from __future__ import annotations


class PPMError(Exception):
    """包管理器基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PPMError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(PPMError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class ParseError(PPMError):
    """标签不符合 V<major>.<minor>.<patch> 格式"""

    code = "PARSE_ERROR"


class VersionNotFoundError(PPMError):
    """指定版本（或任何版本标签）在远端不存在"""

    code = "VERSION_NOT_FOUND"


class NotInstalledError(PPMError):
    """目标包尚未安装"""

    code = "NOT_INSTALLED"


class ForgeUnavailableError(PPMError):
    """代码托管平台请求失败（网络、认证、响应格式）"""

    code = "FORGE_UNAVAILABLE"


class RepoOperationError(PPMError):
    """git 子进程返回非零状态"""

    code = "REPO_ERROR"

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class ManifestError(PPMError):
    """包清单 ppm.json 格式错误"""

    code = "MANIFEST_ERROR"
