"""
Build configuration for mlnbuild.

Configuration is layered, later layers winning:
1. Built-in defaults
2. Optional mlnbuild.ini in the project directory ([mlnbuild] section)
3. MLN_* environment variables
4. Explicit overrides (command-line arguments)

Example mlnbuild.ini:
    [mlnbuild]
    source_dir = ../maplibre-native
    vulkan = on
    build_profile = RelWithDebInfo
"""

import configparser
import os
import shutil
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationError

CONFIG_FILENAME = "mlnbuild.ini"
CONFIG_SECTION = "mlnbuild"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: str, name: str) -> bool:
    """Parse a boolean configuration value.

    Args:
        value: Raw string value
        name: Setting name, used in the error message

    Returns:
        Parsed boolean

    Raises:
        ConfigurationError: If the value is not a recognized boolean
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean for {name}: {value!r}. "
        + f"Use one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}"
    )


@dataclass(frozen=True)
class BuildConfig:
    """Resolved configuration for one build invocation."""

    project_dir: Path
    source_dir: Optional[Path] = None
    force_clone: bool = False
    opengl: bool = False
    metal: bool = False
    vulkan: bool = False
    build_profile: str = "Release"
    skip_build: bool = False
    cache_dir: Optional[Path] = None
    strict_manifest: bool = True
    generator: Optional[str] = "Ninja"
    compiler_launcher: Optional[str] = None

    @property
    def vendored_dir(self) -> Path:
        """Location of the vendored MapLibre Native checkout (git submodule)."""
        return self.project_dir / "maplibre-native"

    @property
    def wrapper_include_dir(self) -> Path:
        """Include directory of the bridge wrapper headers."""
        return self.project_dir / "include"


class BuildConfigLoader:
    """Loads BuildConfig from defaults, mlnbuild.ini and the environment."""

    # Environment variable -> BuildConfig field
    ENV_VARS = {
        "MLN_CORE_SOURCE_DIR": "source_dir",
        "MLN_FORCE_CLONE": "force_clone",
        "MLN_FEATURE_OPENGL": "opengl",
        "MLN_FEATURE_METAL": "metal",
        "MLN_FEATURE_VULKAN": "vulkan",
        "MLN_BUILD_PROFILE": "build_profile",
        "MLN_SKIP_BUILD": "skip_build",
        "MLN_CACHE_DIR": "cache_dir",
        "MLN_STRICT_MANIFEST": "strict_manifest",
        "MLN_CMAKE_GENERATOR": "generator",
        "MLN_COMPILER_LAUNCHER": "compiler_launcher",
    }

    BOOL_FIELDS = {
        "force_clone",
        "opengl",
        "metal",
        "vulkan",
        "skip_build",
        "strict_manifest",
    }
    PATH_FIELDS = {"source_dir", "cache_dir"}
    OPTIONAL_STR_FIELDS = {"generator", "compiler_launcher"}

    @classmethod
    def load(
        cls,
        project_dir: Path,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> BuildConfig:
        """Load configuration for a project.

        Args:
            project_dir: Project root (holds mlnbuild.ini and the vendored checkout)
            environ: Environment mapping (defaults to os.environ)
            overrides: Explicit values, e.g. from the command line; None values are ignored

        Returns:
            Fully resolved BuildConfig

        Raises:
            ConfigurationError: If any value is invalid
        """
        if environ is None:
            environ = os.environ

        project_dir = Path(project_dir).resolve()
        config = BuildConfig(
            project_dir=project_dir,
            compiler_launcher="ccache" if shutil.which("ccache") else None,
        )

        config = replace(config, **cls._read_ini(project_dir))
        config = replace(config, **cls._read_env(environ, project_dir))

        # docs.rs style documentation builds never compile native code
        if environ.get("DOCS_RS"):
            config = replace(config, skip_build=True)

        if overrides:
            known = {f.name for f in fields(BuildConfig)}
            unknown = set(overrides) - known
            if unknown:
                raise ConfigurationError(
                    f"Unknown configuration keys: {', '.join(sorted(unknown))}"
                )
            config = replace(
                config, **{k: v for k, v in overrides.items() if v is not None}
            )

        if not config.build_profile:
            raise ConfigurationError("Build profile must not be empty")

        return config

    @classmethod
    def _read_ini(cls, project_dir: Path) -> Dict[str, Any]:
        ini_path = project_dir / CONFIG_FILENAME
        if not ini_path.exists():
            return {}

        parser = configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation()
        )
        try:
            parser.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Failed to parse {ini_path}: {e}") from e

        if CONFIG_SECTION not in parser:
            return {}

        known = set(cls.ENV_VARS.values())
        values: Dict[str, Any] = {}
        for key, raw in parser[CONFIG_SECTION].items():
            if key not in known:
                raise ConfigurationError(
                    f"Unknown setting '{key}' in [{CONFIG_SECTION}] of {ini_path}"
                )
            values.update(cls._convert(key, raw, key, project_dir))
        return values

    @classmethod
    def _read_env(cls, environ: Mapping[str, str], project_dir: Path) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for var, key in cls.ENV_VARS.items():
            raw = environ.get(var)
            if raw is None:
                continue
            values.update(cls._convert(key, raw, var, project_dir))
        return values

    @classmethod
    def _convert(
        cls, key: str, raw: str, name: str, project_dir: Path
    ) -> Dict[str, Any]:
        """Convert a raw string setting to its typed value.

        Empty paths are treated as unset; 'none' disables optional strings.
        """
        raw = raw.strip()
        if key in cls.BOOL_FIELDS:
            return {key: parse_bool(raw, name)}
        if key in cls.PATH_FIELDS:
            if not raw:
                return {}
            path = Path(raw).expanduser()
            if not path.is_absolute():
                path = project_dir / path
            return {key: path}
        if key in cls.OPTIONAL_STR_FIELDS:
            if not raw or raw.lower() == "none":
                return {key: None}
            return {key: raw}
        return {key: raw}
