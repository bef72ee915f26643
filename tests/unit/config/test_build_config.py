"""Unit tests for layered build configuration."""

from pathlib import Path
from unittest.mock import patch

import pytest

from mlnbuild.config.build_config import BuildConfig, BuildConfigLoader, parse_bool
from mlnbuild.errors import ConfigurationError


@pytest.fixture(autouse=True)
def no_ccache():
    with patch("mlnbuild.config.build_config.shutil.which", return_value=None):
        yield


def write_ini(project_dir, body):
    (project_dir / "mlnbuild.ini").write_text("[mlnbuild]\n" + body)


class TestParseBool:
    """Test cases for parse_bool."""

    @pytest.mark.parametrize("raw", ["1", "true", "Yes", " ON "])
    def test_true(self, raw):
        assert parse_bool(raw, "X") is True

    @pytest.mark.parametrize("raw", ["0", "false", "no", "Off"])
    def test_false(self, raw):
        assert parse_bool(raw, "X") is False

    def test_invalid(self):
        with pytest.raises(ConfigurationError) as excinfo:
            parse_bool("maybe", "MLN_FORCE_CLONE")
        assert "MLN_FORCE_CLONE" in str(excinfo.value)


class TestBuildConfigLoader:
    """Test cases for BuildConfigLoader."""

    def test_defaults(self, project_dir):
        config = BuildConfigLoader.load(project_dir, environ={})

        assert config == BuildConfig(project_dir=project_dir.resolve())
        assert config.build_profile == "Release"
        assert config.generator == "Ninja"
        assert config.vendored_dir == project_dir.resolve() / "maplibre-native"
        assert config.wrapper_include_dir == project_dir.resolve() / "include"

    def test_ccache_detected(self, project_dir):
        with patch("mlnbuild.config.build_config.shutil.which", return_value="/usr/bin/ccache"):
            config = BuildConfigLoader.load(project_dir, environ={})
        assert config.compiler_launcher == "ccache"

    def test_environment(self, project_dir, tmp_path):
        environ = {
            "MLN_CORE_SOURCE_DIR": str(tmp_path / "mln"),
            "MLN_FORCE_CLONE": "1",
            "MLN_FEATURE_OPENGL": "true",
            "MLN_BUILD_PROFILE": "Debug",
            "MLN_CACHE_DIR": "cache",
            "MLN_STRICT_MANIFEST": "off",
            "MLN_CMAKE_GENERATOR": "none",
            "MLN_COMPILER_LAUNCHER": "sccache",
        }

        config = BuildConfigLoader.load(project_dir, environ=environ)

        assert config.source_dir == tmp_path / "mln"
        assert config.force_clone is True
        assert config.opengl is True
        assert config.build_profile == "Debug"
        assert config.cache_dir == project_dir.resolve() / "cache"
        assert config.strict_manifest is False
        assert config.generator is None
        assert config.compiler_launcher == "sccache"

    def test_empty_source_dir_is_unset(self, project_dir):
        config = BuildConfigLoader.load(project_dir, environ={"MLN_CORE_SOURCE_DIR": ""})
        assert config.source_dir is None

    def test_ini_file(self, project_dir):
        write_ini(project_dir, "source_dir = ../mln\nvulkan = on\nbuild_profile = RelWithDebInfo\n")

        config = BuildConfigLoader.load(project_dir, environ={})

        assert config.source_dir == project_dir.resolve() / ".." / "mln"
        assert config.vulkan is True
        assert config.build_profile == "RelWithDebInfo"

    def test_environment_beats_ini(self, project_dir):
        write_ini(project_dir, "build_profile = RelWithDebInfo\n")

        config = BuildConfigLoader.load(project_dir, environ={"MLN_BUILD_PROFILE": "Debug"})

        assert config.build_profile == "Debug"

    def test_overrides_beat_environment(self, project_dir):
        config = BuildConfigLoader.load(
            project_dir,
            environ={"MLN_BUILD_PROFILE": "Debug", "MLN_FEATURE_METAL": "1"},
            overrides={"build_profile": "Release", "metal": None},
        )

        assert config.build_profile == "Release"
        assert config.metal is True

    def test_unknown_ini_key(self, project_dir):
        write_ini(project_dir, "colour = blue\n")

        with pytest.raises(ConfigurationError) as excinfo:
            BuildConfigLoader.load(project_dir, environ={})
        assert "colour" in str(excinfo.value)

    def test_unknown_override(self, project_dir):
        with pytest.raises(ConfigurationError):
            BuildConfigLoader.load(project_dir, environ={}, overrides={"turbo": True})

    def test_invalid_boolean_in_environment(self, project_dir):
        with pytest.raises(ConfigurationError):
            BuildConfigLoader.load(project_dir, environ={"MLN_FEATURE_VULKAN": "sometimes"})

    def test_docs_build_skips_native_code(self, project_dir):
        config = BuildConfigLoader.load(project_dir, environ={"DOCS_RS": "1"})
        assert config.skip_build is True

    def test_empty_profile_rejected(self, project_dir):
        with pytest.raises(ConfigurationError):
            BuildConfigLoader.load(project_dir, environ={"MLN_BUILD_PROFILE": " "})

    def test_other_ini_sections_ignored(self, project_dir):
        (project_dir / "mlnbuild.ini").write_text("[other]\nfoo = bar\n")
        config = BuildConfigLoader.load(project_dir, environ={})
        assert config.source_dir is None

    def test_paths_are_absolute(self, project_dir):
        config = BuildConfigLoader.load(Path(project_dir), environ={"MLN_CACHE_DIR": "~/mlncache"})
        assert config.cache_dir.is_absolute()
