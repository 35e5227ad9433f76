"""xcodebuild 构建设置获取与查询"""
from .build_settings import BuildSettings
from .exceptions import (
    # 异常层次结构
    MissingBuildSettingError,
    TaskError,
    UnrecognizedValueError,
    XcodebuildTimeoutError,
    XcodeError,
)
from .loader import BuildSettingsLoader, load_build_settings, sdks_for_scheme
from .models import (
    SDK,
    STATIC_FOLDER_NAME,
    BuildAction,
    BuildArguments,
    FrameworkType,
    MachOType,
    ProductType,
    ProjectLocator,
    Scheme,
)
from .parser import BuildSettingsParser, iter_build_settings, parse_build_settings
from .retry import RetryConfig, retry_async, with_retry
from .task import XcodebuildConfig, XcodebuildTask

__all__ = [
    # 构建设置
    "BuildSettings",
    "BuildSettingsParser",
    "iter_build_settings",
    "parse_build_settings",
    # 加载
    "BuildSettingsLoader",
    "load_build_settings",
    "sdks_for_scheme",
    "XcodebuildConfig",
    "XcodebuildTask",
    # 重试
    "RetryConfig",
    "retry_async",
    "with_retry",
    # 类型
    "SDK",
    "STATIC_FOLDER_NAME",
    "BuildAction",
    "BuildArguments",
    "FrameworkType",
    "MachOType",
    "ProductType",
    "ProjectLocator",
    "Scheme",
    # 异常
    "XcodeError",
    "TaskError",
    "XcodebuildTimeoutError",
    "MissingBuildSettingError",
    "UnrecognizedValueError",
]
