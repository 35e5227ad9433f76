"""异常类

包含:
- XcodeError: 错误基类
- TaskError: xcodebuild 进程错误（非零退出码 / 无法启动）
- XcodebuildTimeoutError: xcodebuild 执行超时
- MissingBuildSettingError: 缺少构建设置
- UnrecognizedValueError: 构建设置的值无法识别
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from loguru import logger


# ========== 异常层次结构 ==========

class XcodeError(Exception):
    """Xcode 构建设置错误基类

    所有构建设置相关错误的基类，提供统一的错误处理接口。

    Attributes:
        message: 错误消息
        details: 额外的错误详情
        timestamp: 错误发生时间
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] {self.message}"

    @property
    def user_friendly_message(self) -> str:
        """返回用户友好的错误消息"""
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class TaskError(XcodeError):
    """xcodebuild 进程错误

    进程返回非零退出码或无法启动时抛出。

    Attributes:
        command: 执行的命令
        exit_code: 退出码（无法启动时为 None）
        stderr: 标准错误输出
    """

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        details: dict[str, Any] = {"command": command or [], "exit_code": exit_code}
        if stderr:
            details["stderr"] = stderr[:500]
        super().__init__(message, details)
        self.command = command or []
        self.exit_code = exit_code
        self.stderr = stderr

    @property
    def user_friendly_message(self) -> str:
        if self.exit_code is None:
            return f"无法启动 xcodebuild: {self.message}"
        if self.stderr.strip():
            return f"xcodebuild 执行失败 (退出码 {self.exit_code}):\n{self.stderr.strip()}"
        return f"xcodebuild 执行失败 (退出码 {self.exit_code})"


class XcodebuildTimeoutError(XcodeError):
    """xcodebuild 执行超时

    xcodebuild -showBuildSettings 在某些工程上会无限挂起，
    超过固定期限后抛出，携带工程标识。

    Attributes:
        project: 工程标识（ProjectLocator）
        timeout: 超时时间（秒）
    """

    def __init__(self, project: Any, timeout: Optional[float] = None):
        message = f"xcodebuild 获取构建设置超时: {project}"
        if timeout is not None:
            message += f" ({timeout}s)"
        super().__init__(message, {"project": str(project), "timeout": timeout})
        self.project = project
        self.timeout = timeout

        logger.warning(message)

    @property
    def user_friendly_message(self) -> str:
        return (
            f"xcodebuild 在 {self.project} 上超时。\n"
            f"请确认工程至少共享了一个 scheme。"
        )


class MissingBuildSettingError(XcodeError):
    """缺少构建设置

    Attributes:
        key: 缺少的设置名
    """

    def __init__(self, key: str):
        super().__init__(f"缺少构建设置: {key}", {"key": key})
        self.key = key


class UnrecognizedValueError(XcodeError):
    """构建设置的值无法识别

    Attributes:
        kind: 期望的类型名（如 SDK、ProductType）
        value: 原始值
    """

    def __init__(self, kind: str, value: str):
        super().__init__(f"无法识别的 {kind}: {value!r}", {"kind": kind, "value": value})
        self.kind = kind
        self.value = value
