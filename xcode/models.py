"""构建设置相关的类型定义

包含:
- SDK / ProductType / MachOType / FrameworkType: 从构建设置解码的枚举
- BuildAction: xcodebuild 动作（封闭枚举）
- ProjectLocator / Scheme / BuildArguments: xcodebuild 调用参数
"""
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from xcode.exceptions import UnrecognizedValueError


class SDK(str, Enum):
    """平台 SDK"""

    MACOSX = "macosx"
    IPHONEOS = "iphoneos"
    IPHONESIMULATOR = "iphonesimulator"
    WATCHOS = "watchos"
    WATCHSIMULATOR = "watchsimulator"
    APPLETVOS = "appletvos"
    APPLETVSIMULATOR = "appletvsimulator"
    XROS = "xros"
    XRSIMULATOR = "xrsimulator"

    @classmethod
    def from_string(cls, value: str) -> "SDK":
        """按名称解码 SDK（大小写不敏感）

        Raises:
            UnrecognizedValueError: 无法识别的平台名
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise UnrecognizedValueError("SDK", value) from None

    @property
    def is_simulator(self) -> bool:
        return self.value.endswith("simulator")


class ProductType(str, Enum):
    """PRODUCT_TYPE 取值"""

    FRAMEWORK = "com.apple.product-type.framework"
    STATIC_FRAMEWORK = "com.apple.product-type.framework.static"
    STATIC_LIBRARY = "com.apple.product-type.library.static"
    TEST_BUNDLE = "com.apple.product-type.bundle.unit-test"

    @classmethod
    def from_string(cls, value: str) -> "ProductType":
        try:
            return cls(value)
        except ValueError:
            raise UnrecognizedValueError("ProductType", value) from None


class MachOType(str, Enum):
    """MACH_O_TYPE 取值"""

    EXECUTABLE = "mh_execute"
    DYLIB = "mh_dylib"
    BUNDLE = "mh_bundle"
    RELOCATABLE = "mh_object"
    STATICLIB = "staticlib"

    @classmethod
    def from_string(cls, value: str) -> "MachOType":
        try:
            return cls(value)
        except ValueError:
            raise UnrecognizedValueError("MachOType", value) from None


class FrameworkType(str, Enum):
    """framework 类型（决定产物的目标布局）"""

    DYNAMIC = "dynamic"
    STATIC = "static"

    @classmethod
    def classify(
        cls,
        product_type: ProductType,
        mach_o_type: MachOType,
    ) -> Optional["FrameworkType"]:
        """根据 ProductType 和 MachOType 分类

        不是 framework 的组合返回 None（合法结果，不是错误）。
        """
        if product_type == ProductType.STATIC_FRAMEWORK:
            return cls.STATIC
        if product_type == ProductType.FRAMEWORK:
            if mach_o_type == MachOType.DYLIB:
                return cls.DYNAMIC
            if mach_o_type == MachOType.STATICLIB:
                return cls.STATIC
        return None


# 静态 framework 在目标目录下的子目录名
STATIC_FOLDER_NAME = "Static"


class BuildAction(str, Enum):
    """xcodebuild 动作"""

    BUILD = "build"
    TEST = "test"
    ARCHIVE = "archive"
    CLEAN = "clean"
    INSTALL = "install"
    ANALYZE = "analyze"


class ProjectLocator(BaseModel):
    """工程定位：.xcworkspace 或 .xcodeproj

    使用方式:
        ProjectLocator.workspace("App.xcworkspace")
        ProjectLocator.project_file("App.xcodeproj")
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    is_workspace: bool = False

    @classmethod
    def workspace(cls, path: "str | Path") -> "ProjectLocator":
        return cls(path=Path(path), is_workspace=True)

    @classmethod
    def project_file(cls, path: "str | Path") -> "ProjectLocator":
        return cls(path=Path(path), is_workspace=False)

    @property
    def arguments(self) -> list[str]:
        flag = "-workspace" if self.is_workspace else "-project"
        return [flag, str(self.path)]

    def __str__(self) -> str:
        return self.path.name


class Scheme(BaseModel):
    """共享 scheme"""

    model_config = ConfigDict(frozen=True)

    name: str

    def __str__(self) -> str:
        return self.name


class BuildArguments(BaseModel):
    """一次 xcodebuild 调用的参数

    对构建设置解析而言是不透明的，仅在计算 archive 路径时读取 scheme。
    """

    model_config = ConfigDict(frozen=True)

    project: ProjectLocator
    scheme: Optional[Scheme] = None
    configuration: Optional[str] = None
    derived_data_path: Optional[str] = None
    sdk: Optional[SDK] = None
    toolchain: Optional[str] = None
    destination: Optional[str] = None
    only_active_architecture: Optional[bool] = None

    def to_cli_arguments(self) -> list[str]:
        """渲染为 xcodebuild 命令行参数"""
        args = list(self.project.arguments)

        if self.scheme is not None:
            args.extend(["-scheme", self.scheme.name])

        if self.configuration is not None:
            args.extend(["-configuration", self.configuration])

        if self.derived_data_path is not None:
            args.extend(["-derivedDataPath", self.derived_data_path])

        if self.sdk is not None:
            args.extend(["-sdk", self.sdk.value])

        if self.toolchain is not None:
            args.extend(["-toolchain", self.toolchain])

        if self.destination is not None:
            args.extend(["-destination", self.destination])

        if self.only_active_architecture is not None:
            value = "YES" if self.only_active_architecture else "NO"
            args.append(f"ONLY_ACTIVE_ARCH={value}")

        return args
