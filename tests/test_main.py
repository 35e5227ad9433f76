"""命令行入口测试"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from main import parse_args, run, summarize
from xcode.build_settings import BuildSettings
from xcode.exceptions import XcodebuildTimeoutError
from xcode.models import BuildAction


class TestParseArgs:
    """参数解析测试"""

    def test_project_and_scheme(self):
        args = parse_args(["--project", "App.xcodeproj", "--scheme", "App", "--action", "archive"])
        assert args.project == "App.xcodeproj"
        assert args.workspace is None
        assert args.scheme == "App"
        assert args.action == "archive"
        assert args.json is False

    def test_project_required(self):
        with pytest.raises(SystemExit):
            parse_args(["--scheme", "App"])

    def test_project_and_workspace_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--project", "A.xcodeproj", "--workspace", "A.xcworkspace"])


class TestSummarize:
    """派生查询汇总测试"""

    def test_failures_are_reported_per_field(self):
        """测试单个查询失败不影响其他查询"""
        settings = BuildSettings(
            target="App",
            settings={
                "BUILT_PRODUCTS_DIR": "/build/Release",
                "WRAPPER_NAME": "App.framework",
                "PLATFORM_NAME": "iphoneos",
                "ENABLE_BITCODE": "NO",
            },
            action=BuildAction.BUILD,
        )

        summary = summarize(settings)
        derived = summary["derived"]

        assert summary["target"] == "App"
        assert derived["sdks"] == ["iphoneos"]
        assert derived["wrapper_url"] == "/build/Release/App.framework"
        assert derived["xcframework_wrapper_name"] == "App.xcframework"
        assert derived["bitcode_enabled"] is False
        assert derived["relative_modules_path"] is None
        assert derived["product_type"]["error"]["type"] == "MissingBuildSettingError"
        assert derived["product_type"]["error"]["details"]["key"] == "PRODUCT_TYPE"
        json.dumps(summary)


class TestRun:
    """run() 测试"""

    @pytest.mark.asyncio
    async def test_prints_descriptions(self, sample_output, capsys):
        args = parse_args(["--project", "App.xcodeproj", "--scheme", "App"])

        with patch(
            "xcode.task.XcodebuildTask.run",
            new_callable=AsyncMock,
            return_value=sample_output.encode(),
        ):
            exit_code = await run(args)

        out = capsys.readouterr().out
        assert exit_code == 0
        assert 'Build settings for target "ReactiveCocoaLayout Mac"' in out
        assert 'Build settings for target "ReactiveCocoaLayoutTests"' in out

    @pytest.mark.asyncio
    async def test_json_with_target_filter(self, sample_output, capsys):
        args = parse_args([
            "--workspace", "App.xcworkspace",
            "--scheme", "App",
            "--target", "ReactiveCocoaLayoutTests",
            "--json",
        ])

        with patch(
            "xcode.task.XcodebuildTask.run",
            new_callable=AsyncMock,
            return_value=sample_output.encode(),
        ):
            exit_code = await run(args)

        result = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert [item["target"] for item in result] == ["ReactiveCocoaLayoutTests"]
        assert result[0]["derived"]["sdks"] == ["macosx"]

    @pytest.mark.asyncio
    async def test_retrieval_failure_exit_code(self, capsys):
        args = parse_args(["--project", "App.xcodeproj", "--timeout", "1"])

        with patch(
            "xcode.task.XcodebuildTask.run",
            new_callable=AsyncMock,
            side_effect=XcodebuildTimeoutError("App.xcodeproj", 1),
        ), patch("core.config.ConfigManager.get_instance") as mock_config:
            mock_config.return_value.xcodebuild.xcrun_path = "xcrun"
            mock_config.return_value.xcodebuild.timeout = 60
            mock_config.return_value.xcodebuild.max_retries = 0
            mock_config.return_value.xcodebuild.retry_delay = 0.0
            exit_code = await run(args)

        assert exit_code == 1
        assert "App.xcodeproj" in capsys.readouterr().err
