"""CMake build driver.

This module wraps CMake for the two MapLibre Native targets the bridge needs:
- mbgl-core-deps: writes mbgl-core-deps.txt, the transitive link manifest
- mbgl-core: the static core library itself

Both targets share one retained binary directory so repeated builds are
incremental.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

from ..config.build_config import BuildConfig
from ..errors import MissingOutputError
from ..models import RenderingBackend
from ..packages.platform_utils import PlatformDetector
from ..process import ProcessRunner
from .manifest_parser import read_manifest_file

logger = logging.getLogger(__name__)


def cmake_bool(value: bool) -> str:
    """Render a boolean as a CMake cache value."""
    return "ON" if value else "OFF"


class CMakeDriver:
    """Configures and builds MapLibre Native targets with CMake."""

    MANIFEST_TARGET = "mbgl-core-deps"
    MANIFEST_FILE = "mbgl-core-deps.txt"
    LIBRARY_TARGET = "mbgl-core"

    def __init__(
        self,
        config: BuildConfig,
        backend: RenderingBackend,
        build_dir: Path,
        runner: Optional[ProcessRunner] = None,
        is_windows: Optional[bool] = None,
    ):
        """Initialize CMake driver.

        Args:
            config: Build configuration (profile, generator, compiler launcher)
            backend: Rendering backend to enable
            build_dir: CMake binary directory, kept across runs
            runner: Process runner for cmake invocations
            is_windows: Override host detection for the library filename
        """
        self.config = config
        self.backend = backend
        self.build_dir = Path(build_dir)
        self.runner = runner or ProcessRunner()
        self.is_windows = PlatformDetector.is_windows() if is_windows is None else is_windows
        self._configured: Set[Path] = set()

    @property
    def profile(self) -> str:
        return self.config.build_profile

    @property
    def library_filename(self) -> str:
        if self.is_windows:
            return f"{self.LIBRARY_TARGET}.lib"
        return f"lib{self.LIBRARY_TARGET}.a"

    def cache_definitions(self) -> Dict[str, str]:
        """CMake -D definitions for the configure step."""
        definitions = {"CMAKE_BUILD_TYPE": self.profile}
        if self.config.compiler_launcher:
            definitions["CMAKE_C_COMPILER_LAUNCHER"] = self.config.compiler_launcher
            definitions["CMAKE_CXX_COMPILER_LAUNCHER"] = self.config.compiler_launcher
        definitions.update(
            {
                "MLN_DRAWABLE_RENDERER": cmake_bool(True),
                "MLN_WITH_OPENGL": cmake_bool(self.backend is RenderingBackend.OPENGL),
                "MLN_WITH_METAL": cmake_bool(self.backend is RenderingBackend.METAL),
                "MLN_WITH_VULKAN": cmake_bool(self.backend is RenderingBackend.VULKAN),
                "MLN_WITH_WERROR": cmake_bool(False),
            }
        )
        return definitions

    def configure_command(self, source_dir: Path) -> List[str]:
        cmd = ["cmake", "-S", str(source_dir), "-B", str(self.build_dir)]
        if self.config.generator:
            cmd += ["-G", self.config.generator]
        cmd += [f"-D{key}={value}" for key, value in self.cache_definitions().items()]
        return cmd

    def build_command(self, target: str) -> List[str]:
        return [
            "cmake",
            "--build",
            str(self.build_dir),
            "--target",
            target,
            "--config",
            self.profile,
        ]

    def configure(self, source_dir: Path) -> None:
        """Run the CMake configure step once per source tree.

        Raises:
            ProcessFailureError: If cmake exits non-zero
        """
        source_dir = Path(source_dir)
        if source_dir in self._configured:
            return
        self.build_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"Configuring {source_dir} ({self.backend.value}, {self.profile}) in {self.build_dir}"
        )
        self.runner.run(self.configure_command(source_dir))
        self._configured.add(source_dir)

    def build_target(self, source_dir: Path, target: str) -> Path:
        """Configure (if needed) and build one target.

        Returns:
            The CMake binary directory

        Raises:
            ProcessFailureError: If cmake exits non-zero
        """
        self.configure(source_dir)
        logger.info(f"Building target {target}")
        self.runner.run(self.build_command(target))
        return self.build_dir

    def build_manifest(self, source_dir: Path) -> Path:
        """Build mbgl-core-deps and return the manifest path.

        Raises:
            ProcessFailureError: If cmake exits non-zero
            MissingOutputError: If the manifest was not written
        """
        self.build_target(source_dir, self.MANIFEST_TARGET)
        return self._expect_output(self.MANIFEST_FILE, self.MANIFEST_TARGET)

    def read_manifest(self, source_dir: Path) -> str:
        """Build mbgl-core-deps and return the manifest text.

        Raises:
            FilesystemError: If the manifest exists but cannot be read as UTF-8
        """
        return read_manifest_file(self.build_manifest(source_dir))

    def build_library(self, source_dir: Path) -> Path:
        """Build mbgl-core and return the static library path.

        Raises:
            ProcessFailureError: If cmake exits non-zero
            MissingOutputError: If the library was not produced
        """
        self.build_target(source_dir, self.LIBRARY_TARGET)
        return self._expect_output(self.library_filename, self.LIBRARY_TARGET)

    def _expect_output(self, filename: str, target: str) -> Path:
        """Locate a build output, allowing for multi-config generator subdirectories."""
        expected = self.build_dir / filename
        for candidate in (expected, self.build_dir / self.profile / filename):
            if candidate.is_file():
                return candidate
        raise MissingOutputError(expected, target)
