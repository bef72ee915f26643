"""Unit tests for platform detection."""

from unittest.mock import patch

import pytest

from mlnbuild.errors import UnsupportedTargetError
from mlnbuild.packages.platform_utils import PlatformDetector


class TestPlatformDetector:
    """Test cases for PlatformDetector."""

    @pytest.mark.parametrize(
        "system,machine,expected",
        [
            ("Linux", "x86_64", "linux-x64"),
            ("Linux", "aarch64", "linux-arm64"),
            ("Darwin", "arm64", "macos-arm64"),
            ("Darwin", "x86_64", "macos-x64"),
            ("Windows", "AMD64", "windows-x64"),
        ],
    )
    def test_detect_target(self, system, machine, expected):
        with patch("platform.system", return_value=system), patch(
            "platform.machine", return_value=machine
        ):
            assert PlatformDetector.detect_target() == expected

    def test_unsupported_platform(self):
        with patch("platform.system", return_value="FreeBSD"), patch(
            "platform.machine", return_value="amd64"
        ):
            with pytest.raises(UnsupportedTargetError):
                PlatformDetector.detect_platform()

    def test_unsupported_architecture(self):
        with patch("platform.system", return_value="Linux"), patch(
            "platform.machine", return_value="riscv64"
        ):
            with pytest.raises(UnsupportedTargetError) as excinfo:
                PlatformDetector.detect_platform()

        assert "riscv64" in str(excinfo.value)

    @pytest.mark.parametrize(
        "system,apple,windows",
        [("Darwin", True, False), ("iOS", True, False), ("Linux", False, False), ("Windows", False, True)],
    )
    def test_platform_families(self, system, apple, windows):
        with patch("platform.system", return_value=system):
            assert PlatformDetector.is_apple() is apple
            assert PlatformDetector.is_windows() is windows
