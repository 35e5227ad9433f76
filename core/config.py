"""统一配置加载模块

本模块提供从 config.yaml 加载配置的统一接口，作为所有配置的权威来源。
其他模块应通过此模块获取配置，而非硬编码默认值。

================================================================================
配置优先级
================================================================================

1. 命令行参数（最高）
2. config.yaml
3. 代码默认值（最低）

**使用方式**:

    from core.config import get_config

    config = get_config()

    timeout = config.xcodebuild.timeout
    max_retries = config.xcodebuild.max_retries

**config.yaml 示例**:

    xcodebuild:
      xcrun_path: xcrun
      timeout: 60
      max_retries: 5
      retry_delay: 0.0

    logging:
      level: INFO
      file: logs/xcsettings.log
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from loguru import logger

# ============================================================
# 默认值常量 - 与 config.yaml 保持同步
# ============================================================

DEFAULT_XCRUN_PATH = "xcrun"
# xcodebuild -showBuildSettings 在没有共享 scheme 的工程上可能无限挂起
DEFAULT_XCODEBUILD_TIMEOUT = 60
DEFAULT_XCODEBUILD_MAX_RETRIES = 5
DEFAULT_XCODEBUILD_RETRY_DELAY = 0.0

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "logs/xcsettings.log"
DEFAULT_LOG_ROTATION = "10 MB"
DEFAULT_LOG_RETENTION = "7 days"

VALID_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


# ============================================================
# 配置数据类
# ============================================================


@dataclass
class XcodebuildSection:
    """xcodebuild 调用配置"""

    xcrun_path: str = DEFAULT_XCRUN_PATH
    timeout: int = DEFAULT_XCODEBUILD_TIMEOUT
    max_retries: int = DEFAULT_XCODEBUILD_MAX_RETRIES
    retry_delay: float = DEFAULT_XCODEBUILD_RETRY_DELAY


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = DEFAULT_LOG_LEVEL
    file: str = DEFAULT_LOG_FILE
    rotation: str = DEFAULT_LOG_ROTATION
    retention: str = DEFAULT_LOG_RETENTION


@dataclass
class AppConfig:
    """应用总配置"""

    xcodebuild: XcodebuildSection = field(default_factory=XcodebuildSection)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ============================================================
# 配置文件查找函数
# ============================================================


def find_config_file() -> Optional[Path]:
    """查找配置文件

    按以下顺序查找:
    1. 当前目录的 config.yaml
    2. 父目录的 config.yaml（遇到 .git 目录即停止）
    3. 模块所在项目根目录的 config.yaml

    Returns:
        配置文件路径，未找到时返回 None
    """
    current = Path.cwd() / "config.yaml"
    if current.exists():
        return current

    for parent in Path.cwd().parents:
        config_path = parent / "config.yaml"
        if config_path.exists():
            return config_path
        # 遇到 .git 目录，说明到了项目根
        if (parent / ".git").exists():
            break

    module_config = Path(__file__).parent.parent / "config.yaml"
    if module_config.exists():
        return module_config

    return None


# ============================================================
# 解析辅助
# ============================================================


def _positive_int(value: Any, default: int, context: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning(f"{context} 无效: {value!r}，使用默认值 {default}")
        return default
    if parsed <= 0:
        logger.warning(f"{context} 必须为正数: {parsed}，使用默认值 {default}")
        return default
    return parsed


def _non_negative_int(value: Any, default: int, context: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning(f"{context} 无效: {value!r}，使用默认值 {default}")
        return default
    if parsed < 0:
        logger.warning(f"{context} 不能为负数: {parsed}，使用默认值 {default}")
        return default
    return parsed


def _non_negative_float(value: Any, default: float, context: str) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.warning(f"{context} 无效: {value!r}，使用默认值 {default}")
        return default
    if parsed < 0:
        logger.warning(f"{context} 不能为负数: {parsed}，使用默认值 {default}")
        return default
    return parsed


def parse_config(raw_config: dict[str, Any]) -> AppConfig:
    """将 config.yaml 的原始字典转换为 AppConfig

    未知字段忽略，无效值记录 warning 并回退到默认值。
    """
    config = AppConfig()

    raw_xcodebuild = raw_config.get("xcodebuild") or {}
    if isinstance(raw_xcodebuild, dict):
        section = config.xcodebuild
        if "xcrun_path" in raw_xcodebuild:
            section.xcrun_path = str(raw_xcodebuild["xcrun_path"])
        if "timeout" in raw_xcodebuild:
            section.timeout = _positive_int(
                raw_xcodebuild["timeout"], DEFAULT_XCODEBUILD_TIMEOUT, "xcodebuild.timeout"
            )
        if "max_retries" in raw_xcodebuild:
            section.max_retries = _non_negative_int(
                raw_xcodebuild["max_retries"], DEFAULT_XCODEBUILD_MAX_RETRIES, "xcodebuild.max_retries"
            )
        if "retry_delay" in raw_xcodebuild:
            section.retry_delay = _non_negative_float(
                raw_xcodebuild["retry_delay"], DEFAULT_XCODEBUILD_RETRY_DELAY, "xcodebuild.retry_delay"
            )
    else:
        logger.warning(f"xcodebuild 配置应为映射: {raw_xcodebuild!r}，使用默认配置")

    raw_logging = raw_config.get("logging") or {}
    if isinstance(raw_logging, dict):
        logging_config = config.logging
        if "level" in raw_logging:
            level = str(raw_logging["level"]).upper()
            if level in VALID_LOG_LEVELS:
                logging_config.level = level
            else:
                logger.warning(f"logging.level 无效: {raw_logging['level']!r}，使用默认值 {DEFAULT_LOG_LEVEL}")
        if "file" in raw_logging:
            logging_config.file = str(raw_logging["file"])
        if "rotation" in raw_logging:
            logging_config.rotation = str(raw_logging["rotation"])
        if "retention" in raw_logging:
            logging_config.retention = str(raw_logging["retention"])
    else:
        logger.warning(f"logging 配置应为映射: {raw_logging!r}，使用默认配置")

    return config


# ============================================================
# 配置管理器
# ============================================================


class ConfigManager:
    """配置管理器 - 单例模式

    从 config.yaml 加载配置，提供统一的配置访问接口。

    使用方式:
        config = ConfigManager.get_instance()
        timeout = config.xcodebuild.timeout
    """

    _instance: Optional["ConfigManager"] = None
    _config: Optional[AppConfig] = None
    _config_path: Optional[Path] = None

    def __new__(cls) -> "ConfigManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        # 只在第一次初始化时加载配置
        if self._config is None:
            self._load_config()

    def _load_config(self) -> None:
        """加载配置文件"""
        config_path = find_config_file()

        if config_path and config_path.exists():
            self._config_path = config_path
            try:
                with open(config_path, encoding="utf-8") as f:
                    raw_config = yaml.safe_load(f) or {}
                if not isinstance(raw_config, dict):
                    raise ValueError(f"顶层应为映射，实际为 {type(raw_config).__name__}")
                self._config = parse_config(raw_config)
                logger.debug(f"配置已从 {config_path} 加载")
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.warning(f"加载配置文件失败: {e}，使用默认配置")
                self._config = AppConfig()
        else:
            logger.debug("未找到 config.yaml，使用默认配置")
            self._config = AppConfig()

    @property
    def config(self) -> AppConfig:
        assert self._config is not None
        return self._config

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    @property
    def xcodebuild(self) -> XcodebuildSection:
        return self.config.xcodebuild

    @property
    def logging(self) -> LoggingConfig:
        return self.config.logging

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """获取单例实例"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """重置单例实例（主要用于测试）"""
        cls._instance = None
        cls._config = None
        cls._config_path = None


# ============================================================
# 便捷函数
# ============================================================


def get_config() -> ConfigManager:
    """获取配置管理器单例

    Returns:
        ConfigManager 单例实例
    """
    return ConfigManager.get_instance()
