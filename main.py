#!/usr/bin/env python3
"""xcodebuild 构建设置查询 主入口"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Callable

from loguru import logger

# 添加项目根目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent))

from core.config import LoggingConfig, get_config
from xcode import (
    SDK,
    BuildAction,
    BuildArguments,
    BuildSettings,
    BuildSettingsLoader,
    ProjectLocator,
    Scheme,
    XcodebuildConfig,
    XcodeError,
)


def setup_logging(logging_config: LoggingConfig, verbose: bool = False) -> None:
    """配置日志"""
    logger.remove()
    level = "DEBUG" if verbose else logging_config.level
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
    )
    logger.add(
        logging_config.file,
        rotation=logging_config.rotation,
        retention=logging_config.retention,
        level="DEBUG",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="查询 xcodebuild 为每个 target 计算的构建设置",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python main.py --project App.xcodeproj --scheme App
  python main.py --workspace App.xcworkspace --scheme App --action archive --json
  python main.py --project App.xcodeproj --scheme App --target AppKit --json
        """,
    )

    project_group = parser.add_mutually_exclusive_group(required=True)
    project_group.add_argument(
        "--project",
        type=str,
        help=".xcodeproj 路径",
    )
    project_group.add_argument(
        "--workspace",
        type=str,
        help=".xcworkspace 路径",
    )

    parser.add_argument(
        "--scheme",
        type=str,
        help="共享 scheme 名",
    )

    parser.add_argument(
        "--configuration",
        type=str,
        help="构建配置 (如 Release)",
    )

    parser.add_argument(
        "--sdk",
        type=str,
        choices=[sdk.value for sdk in SDK],
        help="SDK",
    )

    parser.add_argument(
        "--action",
        type=str,
        choices=[action.value for action in BuildAction],
        help="计算路径时使用的 xcodebuild 动作",
    )

    parser.add_argument(
        "--target",
        type=str,
        help="仅输出指定 target",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        help="单次 xcodebuild 超时（秒，默认取 config.yaml）",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="输出 JSON（包含派生查询结果）",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="详细输出",
    )

    return parser.parse_args(argv)


def _query(func: Callable[[], Any]) -> Any:
    """执行单个派生查询，失败时返回错误描述而非中断整个输出"""
    try:
        value = func()
    except XcodeError as e:
        return {"error": e.to_dict()}
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, list):
        return [item.value for item in value]
    if hasattr(value, "value"):
        return value.value
    return value


def summarize(build_settings: BuildSettings) -> dict[str, Any]:
    """派生查询汇总"""
    queries: dict[str, Callable[[], Any]] = {
        "sdks": lambda: build_settings.build_sdks,
        "product_type": lambda: build_settings.product_type,
        "mach_o_type": lambda: build_settings.mach_o_type,
        "framework_type": lambda: build_settings.framework_type,
        "products_directory": lambda: build_settings.products_directory,
        "executable_url": lambda: build_settings.executable_url,
        "wrapper_url": lambda: build_settings.wrapper_url,
        "xcframework_wrapper_name": lambda: build_settings.xcframework_wrapper_name,
        "bitcode_enabled": lambda: build_settings.bitcode_enabled,
        "ad_hoc_code_signing_allowed": lambda: build_settings.ad_hoc_code_signing_allowed,
        "supports_uikit_for_mac": lambda: build_settings.supports_uikit_for_mac,
        "relative_modules_path": lambda: build_settings.relative_modules_path,
        "project_path": lambda: build_settings.project_path,
        "target_build_directory": lambda: build_settings.target_build_directory,
    }
    summary = build_settings.to_dict()
    summary["derived"] = {name: _query(func) for name, func in queries.items()}
    return summary


async def run(args: argparse.Namespace) -> int:
    """加载并输出构建设置"""
    if args.workspace:
        project = ProjectLocator.workspace(args.workspace)
    else:
        project = ProjectLocator.project_file(args.project)

    arguments = BuildArguments(
        project=project,
        scheme=Scheme(name=args.scheme) if args.scheme else None,
        configuration=args.configuration,
        sdk=SDK(args.sdk) if args.sdk else None,
    )
    action = BuildAction(args.action) if args.action else None

    config = XcodebuildConfig.from_app_config()
    if args.timeout:
        config.timeout = args.timeout

    loader = BuildSettingsLoader(config)
    results: list[dict[str, Any]] = []

    try:
        async for build_settings in loader.load(arguments, action):
            if args.target and build_settings.target != args.target:
                continue
            if args.json:
                results.append(summarize(build_settings))
            else:
                print(build_settings)
    except XcodeError as e:
        logger.error(f"获取构建设置失败: {e}")
        print(e.user_friendly_message, file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(results, ensure_ascii=False, indent=2))

    return 0


def main() -> None:
    args = parse_args()
    setup_logging(get_config().logging, verbose=args.verbose)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
