"""构建设置加载

BuildSettingsLoader 组合三部分:
- 单次调用（XcodebuildTask.run，可替换）
- 超时/重试策略（RetryConfig）
- 输出解析（xcode.parser）

调用 xcodebuild 时总是使用 archive 动作（见 xcode.task），
调用方请求的 action 只记录在产出的 BuildSettings 上，用于路径推导。
"""
from contextlib import aclosing
from typing import AsyncIterator, Awaitable, Callable, Optional

from loguru import logger

from xcode.build_settings import BuildSettings
from xcode.models import SDK, BuildAction, BuildArguments, ProjectLocator, Scheme
from xcode.parser import parse_build_settings
from xcode.retry import RetryConfig, retry_async
from xcode.task import XcodebuildConfig, XcodebuildTask

# 单次调用: BuildArguments -> 标准输出字节
Invoker = Callable[[BuildArguments], Awaitable[bytes]]


class BuildSettingsLoader:
    """通过 xcodebuild 加载构建设置

    使用方式:
        loader = BuildSettingsLoader()
        async for settings in loader.load(arguments, BuildAction.ARCHIVE):
            print(settings.target, settings.wrapper_url)
    """

    def __init__(
        self,
        config: Optional[XcodebuildConfig] = None,
        invoke: Optional[Invoker] = None,
    ):
        self.config = config or XcodebuildConfig()
        self._invoke = invoke or XcodebuildTask(self.config).run

    @property
    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_delay,
        )

    async def fetch_output(self, arguments: BuildArguments) -> str:
        """执行 xcodebuild（带重试）并解码输出

        输出不是合法 UTF-8 时抛出 UnicodeDecodeError，不重试。
        """
        data = await retry_async(
            lambda: self._invoke(arguments),
            self.retry_config,
        )
        return data.decode("utf-8")

    async def load(
        self,
        arguments: BuildArguments,
        action: Optional[BuildAction] = None,
    ) -> AsyncIterator[BuildSettings]:
        """逐个产生 scheme 中每个 target 的 BuildSettings"""
        output = await self.fetch_output(arguments)

        count = 0
        for build_settings in parse_build_settings(output, arguments, action):
            count += 1
            yield build_settings

        logger.debug(f"已加载 {arguments.project} 的构建设置: {count} 个 target")


async def load_build_settings(
    arguments: BuildArguments,
    action: Optional[BuildAction] = None,
    config: Optional[XcodebuildConfig] = None,
) -> AsyncIterator[BuildSettings]:
    """使用默认 loader 加载构建设置"""
    loader = BuildSettingsLoader(config)
    async with aclosing(loader.load(arguments, action)) as settings_stream:
        async for build_settings in settings_stream:
            yield build_settings


async def sdks_for_scheme(
    scheme: Scheme,
    project: ProjectLocator,
    loader: Optional[BuildSettingsLoader] = None,
) -> list[SDK]:
    """确定 scheme 默认构建的 SDK

    只读取第一个 target 的设置。没有任何 target 时返回空列表。
    """
    loader = loader or BuildSettingsLoader()
    arguments = BuildArguments(project=project, scheme=scheme)

    async with aclosing(loader.load(arguments)) as settings_stream:
        async for build_settings in settings_stream:
            return build_settings.build_sdks

    return []
