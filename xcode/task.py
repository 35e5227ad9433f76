"""xcodebuild 调用

单次调用 `xcrun xcodebuild archive -showBuildSettings -skipUnavailableActions <args>`，
返回捕获的标准输出字节。超时、非零退出码、无法启动均抛出对应异常，
重试由上层策略（xcode.retry）负责。
"""
import asyncio
import contextlib
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from core.config import (
    DEFAULT_XCODEBUILD_MAX_RETRIES,
    DEFAULT_XCODEBUILD_RETRY_DELAY,
    DEFAULT_XCODEBUILD_TIMEOUT,
    DEFAULT_XCRUN_PATH,
    ConfigManager,
    get_config,
)
from xcode.exceptions import TaskError, XcodebuildTimeoutError
from xcode.models import BuildArguments

# xcodebuild (Xcode 8.0) 的 -showBuildSettings 在包含 Core Data 模型的工程上
# 可能无限挂起 (rdar://27052195)，加上 "clean" 或 "archive" 动作可以绕过。
# 使用 "archive" 还能得到 archive 动作下的设置。
SHOW_BUILD_SETTINGS_ACTIONS = ["archive", "-showBuildSettings", "-skipUnavailableActions"]


class XcodebuildConfig(BaseModel):
    """xcodebuild 调用配置"""

    # xcrun 路径，xcodebuild 通过 xcrun 调用
    xcrun_path: str = DEFAULT_XCRUN_PATH

    # 工作目录（None 表示当前目录）
    working_directory: Optional[str] = None

    # 超时设置（秒）
    timeout: int = DEFAULT_XCODEBUILD_TIMEOUT

    # 重试设置（不含首次尝试）
    max_retries: int = DEFAULT_XCODEBUILD_MAX_RETRIES
    retry_delay: float = DEFAULT_XCODEBUILD_RETRY_DELAY

    # 实际传给 xcodebuild 的动作，与调用方请求的 action 无关
    workaround_actions: list[str] = Field(
        default_factory=lambda: list(SHOW_BUILD_SETTINGS_ACTIONS)
    )

    @classmethod
    def from_app_config(cls, manager: Optional[ConfigManager] = None) -> "XcodebuildConfig":
        """从 config.yaml 构建"""
        section = (manager or get_config()).xcodebuild
        return cls(
            xcrun_path=section.xcrun_path,
            timeout=section.timeout,
            max_retries=section.max_retries,
            retry_delay=section.retry_delay,
        )


class XcodebuildTask:
    """单次 xcodebuild 调用"""

    def __init__(self, config: Optional[XcodebuildConfig] = None):
        self.config = config or XcodebuildConfig()

    def build_command(self, arguments: BuildArguments) -> list[str]:
        """构建命令行"""
        return [
            self.config.xcrun_path,
            "xcodebuild",
            *self.config.workaround_actions,
            *arguments.to_cli_arguments(),
        ]

    async def run(self, arguments: BuildArguments) -> bytes:
        """执行一次 xcodebuild，返回标准输出

        Raises:
            XcodebuildTimeoutError: 超过 config.timeout 秒未结束
            TaskError: 无法启动或返回非零退出码
        """
        cmd = self.build_command(arguments)
        timeout = self.config.timeout
        logger.debug(f"执行命令: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=self.config.working_directory,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TaskError(str(e), command=cmd) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            raise XcodebuildTimeoutError(arguments.project, timeout) from None
        except asyncio.CancelledError:
            logger.debug(f"xcodebuild 调用被取消，终止进程: {arguments.project}")
            await self._kill(process)
            raise

        if process.returncode != 0:
            error_output = stderr.decode("utf-8", errors="replace")
            logger.warning(
                f"xcodebuild 返回非零退出码 {process.returncode}: {error_output.strip()[:200]}"
            )
            raise TaskError(
                f"xcodebuild 返回非零退出码 {process.returncode}",
                command=cmd,
                exit_code=process.returncode,
                stderr=error_output,
            )

        return stdout

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """终止进程并等待回收"""
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
