"""Platform Detection Utilities.

This module detects the host platform and architecture for rendering-backend
defaults and precompiled-artifact selection.

Target identifiers:
    - Linux: linux-x64, linux-arm64
    - macOS: macos-x64, macos-arm64
    - Windows: windows-x64
"""

import platform
from typing import Tuple

from ..errors import UnsupportedTargetError


class PlatformDetector:
    """Detects the current platform and architecture."""

    @staticmethod
    def detect_platform() -> Tuple[str, str]:
        """Detect normalized (system, architecture).

        Returns:
            Tuple of (system, arch)
            System: 'linux', 'macos' or 'windows'
            Architecture: 'x64' or 'arm64'

        Raises:
            UnsupportedTargetError: If platform or architecture is unsupported
        """
        system = platform.system().lower()
        machine = platform.machine().lower()

        if system == "linux":
            plat = "linux"
        elif system == "darwin":
            plat = "macos"
        elif system == "windows":
            plat = "windows"
        else:
            raise UnsupportedTargetError(f"Unsupported platform: {system} {machine}")

        if machine in ("x86_64", "amd64"):
            arch = "x64"
        elif machine in ("aarch64", "arm64"):
            arch = "arm64"
        else:
            raise UnsupportedTargetError(
                f"Unsupported architecture: {machine} on {system}"
            )

        return plat, arch

    @staticmethod
    def detect_target() -> str:
        """Detect the target identifier used in artifact names.

        Returns:
            Target identifier (e.g. 'linux-x64', 'macos-arm64')

        Raises:
            UnsupportedTargetError: If platform or architecture is unsupported
        """
        plat, arch = PlatformDetector.detect_platform()
        return f"{plat}-{arch}"

    @staticmethod
    def is_apple() -> bool:
        """Whether the host belongs to the Apple platform family."""
        return platform.system().lower() in ("darwin", "ios")

    @staticmethod
    def is_windows() -> bool:
        """Whether the host is Windows."""
        return platform.system().lower() == "windows"
