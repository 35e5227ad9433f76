"""pytest 测试配置

全局 pytest 配置，包含共享 fixtures。
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 确保项目根目录在 Python 路径中
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.config import ConfigManager
from xcode.models import BuildArguments, ProjectLocator, Scheme

# xcodebuild -showBuildSettings 的典型输出片段
SAMPLE_OUTPUT = """\
Command line invocation:
    /Applications/Xcode.app/Contents/Developer/usr/bin/xcodebuild archive -showBuildSettings -skipUnavailableActions -project ReactiveCocoaLayout.xcodeproj -scheme "ReactiveCocoaLayout Mac"

User defaults from command line:
    IDEPackageSupportUseBuiltinSCM = YES

Build settings for action archive and target "ReactiveCocoaLayout Mac":
    ACTION = archive
    BUILD_DIR = /tmp/DerivedData/Build/Intermediates.noindex/ArchiveIntermediates/ReactiveCocoaLayout Mac/BuildProductsPath
    BUILT_PRODUCTS_DIR = /tmp/DerivedData/Build/Products/Release
    CONFIGURATION = Release
    MACH_O_TYPE = mh_dylib
    PLATFORM_NAME = macosx
    PRODUCT_TYPE = com.apple.product-type.framework
    WRAPPER_NAME = ReactiveCocoaLayout.framework

Build settings for action archive and target ReactiveCocoaLayoutTests:
    ACTION = archive
    OTHER_LDFLAGS = -framework XCTest -Wl,-rpath,@loader_path/../Frameworks
    PRODUCT_TYPE = com.apple.product-type.bundle.unit-test
    SUPPORTED_PLATFORMS = macosx
"""


@pytest.fixture
def sample_output() -> str:
    """两个 target 的 xcodebuild 输出"""
    return SAMPLE_OUTPUT


@pytest.fixture
def project() -> ProjectLocator:
    return ProjectLocator.project_file("/tmp/ReactiveCocoaLayout/ReactiveCocoaLayout.xcodeproj")


@pytest.fixture
def build_arguments(project: ProjectLocator) -> BuildArguments:
    """带 scheme 的调用参数"""
    return BuildArguments(
        project=project,
        scheme=Scheme(name="ReactiveCocoaLayout Mac"),
        configuration="Release",
    )


@pytest.fixture
def reset_config_manager():
    """重置 ConfigManager 单例的 fixture

    在每个测试前后重置 ConfigManager，确保测试隔离
    """
    original_instance = ConfigManager._instance
    original_config = ConfigManager._config
    original_config_path = ConfigManager._config_path

    ConfigManager.reset_instance()

    yield

    ConfigManager._instance = original_instance
    ConfigManager._config = original_config
    ConfigManager._config_path = original_config_path
