"""核心配置层"""
from .config import (
    # 默认值常量
    DEFAULT_XCRUN_PATH,
    DEFAULT_XCODEBUILD_TIMEOUT,
    DEFAULT_XCODEBUILD_MAX_RETRIES,
    DEFAULT_XCODEBUILD_RETRY_DELAY,
    # 配置数据类
    AppConfig,
    LoggingConfig,
    XcodebuildSection,
    # 配置管理器
    ConfigManager,
    find_config_file,
    get_config,
    parse_config,
)

__all__ = [
    "DEFAULT_XCRUN_PATH",
    "DEFAULT_XCODEBUILD_TIMEOUT",
    "DEFAULT_XCODEBUILD_MAX_RETRIES",
    "DEFAULT_XCODEBUILD_RETRY_DELAY",
    "AppConfig",
    "LoggingConfig",
    "XcodebuildSection",
    "ConfigManager",
    "find_config_file",
    "get_config",
    "parse_config",
]
