"""单个 target 的构建设置

BuildSettings 是不可变值对象，所有派生查询都是其字段的纯函数，
每次调用都重新计算（不缓存）。

查询失败时抛出:
- MissingBuildSettingError: 所需设置不存在
- UnrecognizedValueError: 设置的值无法解码为期望的枚举
"""
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Any, Mapping, Optional

from xcode.exceptions import MissingBuildSettingError, UnrecognizedValueError
from xcode.models import (
    SDK,
    STATIC_FOLDER_NAME,
    BuildAction,
    BuildArguments,
    FrameworkType,
    MachOType,
    ProductType,
)

# xcodebuild 布尔设置的真值
YES = "YES"


@dataclass(frozen=True)
class BuildSettings:
    """xcodebuild 生成的构建设置

    Attributes:
        target: 设置所属的 target 名
        settings: 设置名 -> 值
        arguments: 加载设置时使用的 xcodebuild 参数
        action: 调用方指定的 xcodebuild 动作（可选）
    """

    target: str
    settings: Mapping[str, str] = field(default_factory=dict)
    arguments: Optional[BuildArguments] = None
    action: Optional[BuildAction] = None

    def __post_init__(self) -> None:
        # 冻结映射，发出后不可再修改
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))

    def __hash__(self) -> int:
        return hash((self.target, frozenset(self.settings.items()), self.arguments, self.action))

    def __reduce__(self):
        # mappingproxy 不能 pickle，用普通 dict 重建（copy / deepcopy 同样走这里）
        return (self.__class__, (self.target, dict(self.settings), self.arguments, self.action))

    # ========== 基础查找 ==========

    def __getitem__(self, key: str) -> str:
        """返回设置值

        Raises:
            MissingBuildSettingError: 设置不存在
        """
        try:
            return self.settings[key]
        except KeyError:
            raise MissingBuildSettingError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self.settings

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """可选查找，设置不存在时返回 default"""
        return self.settings.get(key, default)

    def _flag(self, key: str) -> bool:
        return self[key] == YES

    # ========== SDK / 类型 ==========

    @property
    def build_sdks(self) -> list[SDK]:
        """该 target 构建的 SDK 列表

        优先使用 SUPPORTED_PLATFORMS（空格分隔），否则回退到 PLATFORM_NAME。
        任一平台名无法识别时抛出 UnrecognizedValueError。
        """
        supported_platforms = self.get("SUPPORTED_PLATFORMS")
        if supported_platforms is not None:
            platforms = [p for p in supported_platforms.split(" ") if p]
            return [SDK.from_string(platform) for platform in platforms]

        return [SDK.from_string(self["PLATFORM_NAME"])]

    @property
    def product_type(self) -> ProductType:
        return ProductType.from_string(self["PRODUCT_TYPE"])

    @property
    def mach_o_type(self) -> MachOType:
        return MachOType.from_string(self["MACH_O_TYPE"])

    @property
    def framework_type(self) -> Optional[FrameworkType]:
        """framework 类型

        不构成 framework 的 ProductType/MachOType 组合返回 None。
        """
        return FrameworkType.classify(self.product_type, self.mach_o_type)

    # ========== 路径 ==========

    @property
    def built_products_directory(self) -> Path:
        return Path(self["BUILT_PRODUCTS_DIR"])

    @property
    def products_directory(self) -> Path:
        """产物目录（取决于 action）

        archive 时产物位于 OBJROOT 下的 ArchiveIntermediates，
        其余动作（或未指定）使用 BUILT_PRODUCTS_DIR。
        """
        action = self.action
        if action is BuildAction.ARCHIVE:
            return Path(self["OBJROOT"]) / self._archive_intermediates_build_products_path()
        elif action in (
            BuildAction.BUILD,
            BuildAction.TEST,
            BuildAction.CLEAN,
            BuildAction.INSTALL,
            BuildAction.ANALYZE,
        ):
            return self.built_products_directory
        elif action is None:
            return self.built_products_directory
        else:
            raise ValueError(f"未处理的 action: {action!r}")

    def _archive_intermediates_build_products_path(self) -> PurePosixPath:
        scheme = self.arguments.scheme if self.arguments is not None else None
        scheme_or_target = scheme.name if scheme is not None else self["TARGET_NAME"]

        base_path = PurePosixPath("ArchiveIntermediates", scheme_or_target, "BuildProductsPath")

        build_dir = self.get("BUILD_DIR")
        built_products_dir = self.get("BUILT_PRODUCTS_DIR")
        if (
            build_dir is not None
            and built_products_dir is not None
            and built_products_dir.startswith(build_dir)
        ):
            # CocoaPods 生成的工程: 例如 /Release-iphoneos/Reusable-iOS
            path_component = built_products_dir[len(build_dir):].lstrip("/")
        else:
            configuration = self["CONFIGURATION"]
            # 通常以 `-` 开头（如 -iphoneos），macOS 上为空
            effective_platform_name = self.get("EFFECTIVE_PLATFORM_NAME", "")
            path_component = f"{configuration}{effective_platform_name}"

        return base_path / path_component

    @property
    def executable_path(self) -> str:
        """可执行文件相对产物目录的路径"""
        return self["EXECUTABLE_PATH"]

    @property
    def executable_url(self) -> Path:
        """可执行文件路径（取决于 action）"""
        return self.products_directory / self.executable_path

    @property
    def wrapper_name(self) -> str:
        return self["WRAPPER_NAME"]

    @property
    def xcframework_wrapper_name(self) -> str:
        """WRAPPER_NAME 中的 .framework 替换为 .xcframework"""
        name = self.wrapper_name
        if name.endswith(".framework"):
            name = name[: -len(".framework")]
        return f"{name}.xcframework"

    @property
    def wrapper_url(self) -> Path:
        """产物 bundle 路径（取决于 action）"""
        return self.products_directory / self.wrapper_name

    @property
    def relative_modules_path(self) -> Optional[str]:
        """Swift 模块相对产物目录的路径

        不构建模块（没有 PRODUCT_MODULE_NAME）时返回 None。
        """
        module_name = self.get("PRODUCT_MODULE_NAME")
        if module_name is None:
            return None

        contents_path = self["CONTENTS_FOLDER_PATH"]
        return str(PurePosixPath(contents_path, "Modules", f"{module_name}.swiftmodule"))

    @property
    def project_path(self) -> str:
        """包含该 target 的工程路径"""
        return self["PROJECT_FILE_PATH"]

    @property
    def target_build_directory(self) -> str:
        return self["TARGET_BUILD_DIR"]

    def product_destination_path(self, destination: Path) -> Path:
        """静态 framework 放入 Static 子目录，其余原样返回

        framework 类型无法确定时视为非静态。
        """
        try:
            framework_type = self.framework_type
        except (MissingBuildSettingError, UnrecognizedValueError):
            framework_type = None

        if framework_type is FrameworkType.STATIC:
            return Path(destination) / STATIC_FOLDER_NAME
        return Path(destination)

    # ========== 签名 / 开关 ==========

    @property
    def bitcode_enabled(self) -> bool:
        return self._flag("ENABLE_BITCODE")

    @property
    def code_signing_identity(self) -> str:
        return self["CODE_SIGN_IDENTITY"]

    @property
    def ad_hoc_code_signing_allowed(self) -> bool:
        return self._flag("AD_HOC_CODE_SIGNING_ALLOWED")

    @property
    def supports_uikit_for_mac(self) -> bool:
        return self._flag("SUPPORTS_UIKITFORMAC")

    # ========== 描述 ==========

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "target": self.target,
            "action": self.action.value if self.action is not None else None,
            "settings": dict(self.settings),
        }

    def __str__(self) -> str:
        return f'Build settings for target "{self.target}": {dict(self.settings)}'
