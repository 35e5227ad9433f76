"""xcodebuild -showBuildSettings 输出解析

输出格式:

    Build settings for action build and target "ReactiveCocoaLayout Mac":
        ACTION = build
        AD_HOC_CODE_SIGNING_ALLOWED = NO
        ...

    Build settings for action test and target CarthageKitTests:
        ...

每个分隔行开始一个 target 块，后续 `key = value` 行属于该 target，
直到下一个分隔行或输出结束。
"""
import re
from typing import Iterable, Iterator, Optional

from loguru import logger

from xcode.build_settings import BuildSettings
from xcode.models import BuildAction, BuildArguments

# 匹配:
#   Build settings for action build and target "ReactiveCocoaLayout Mac":
#   Build settings for action test and target CarthageKitTests:
TARGET_SETTINGS_PATTERN = re.compile(
    r'^Build settings for action (?:\S+) and target "?([^":]+)"?:$',
    re.IGNORECASE,
)

# 只在这些换行符处断行；\x0b、\x0c、\x1c-\x1e 等属于设置值的一部分
LINE_BREAK_PATTERN = re.compile(r"\r\n|[\n\r\u0085\u2028\u2029]")


class BuildSettingsParser:
    """逐行解析的累加器

    两个状态:
    - 空闲: current_target 为 None，非分隔行被丢弃
    - 累加: 正在收集 current_target 的设置

    使用方式:
        parser = BuildSettingsParser(arguments, action)
        for line in lines:
            settings = parser.feed(line)
            if settings is not None:
                ...
        last = parser.flush()
    """

    def __init__(
        self,
        arguments: Optional[BuildArguments] = None,
        action: Optional[BuildAction] = None,
    ):
        self.arguments = arguments
        self.action = action
        self.current_target: Optional[str] = None
        self.current_settings: dict[str, str] = {}

    def feed(self, line: str) -> Optional[BuildSettings]:
        """处理一行输出

        Returns:
            遇到分隔行时返回上一个 target 的设置（如有），否则 None
        """
        match = TARGET_SETTINGS_PATTERN.match(line)
        if match:
            flushed = self.flush()
            self.current_target = match.group(1)
            return flushed

        # `=` 之后没有任何字符（如 `KEY =`）的行被忽略，
        # `KEY = ` 这样带空白的行记为空值
        key, separator, value = line.partition("=")
        key = key.strip()
        if separator and key and value:
            # 重复的 key 保留最后一个值
            self.current_settings[key] = value.strip()

        return None

    def flush(self) -> Optional[BuildSettings]:
        """结束当前 target 并重置状态

        没有当前 target 时（首个分隔行之前）不产生任何值。
        """
        build_settings = None
        if self.current_target is not None:
            build_settings = BuildSettings(
                target=self.current_target,
                settings=self.current_settings,
                arguments=self.arguments,
                action=self.action,
            )

        self.current_target = None
        self.current_settings = {}
        return build_settings


def iter_build_settings(
    lines: Iterable[str],
    arguments: Optional[BuildArguments] = None,
    action: Optional[BuildAction] = None,
) -> Iterator[BuildSettings]:
    """按 target 出现顺序逐个产生 BuildSettings

    惰性求值：调用方提前停止迭代时不再解析后续行。
    """
    parser = BuildSettingsParser(arguments, action)
    count = 0

    for line in lines:
        build_settings = parser.feed(line)
        if build_settings is not None:
            count += 1
            yield build_settings

    build_settings = parser.flush()
    if build_settings is not None:
        count += 1
        yield build_settings

    logger.debug(f"解析构建设置完成: {count} 个 target")


def parse_build_settings(
    text: str,
    arguments: Optional[BuildArguments] = None,
    action: Optional[BuildAction] = None,
) -> Iterator[BuildSettings]:
    """解析 xcodebuild -showBuildSettings 的完整文本输出"""
    return iter_build_settings(LINE_BREAK_PATTERN.split(text), arguments, action)
