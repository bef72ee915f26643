"""Unit tests for include directory assembly."""

import os

import pytest

from mlnbuild.build.include_dirs import IncludeDirectoryAssembler, find_include_dirs
from mlnbuild.models import PrecompiledArtifact, VendoredCheckout


def make_dirs(root, *relative):
    for rel in relative:
        (root / rel).mkdir(parents=True, exist_ok=True)


class TestFindIncludeDirs:
    """Test cases for find_include_dirs."""

    def test_depth_first_sorted_order(self, tmp_path):
        vendor = tmp_path / "vendor"
        make_dirs(
            vendor,
            "zlib/include",
            "boost/include",
            "boost/libs/config/include",
            "earcut/include",
            "earcut/test",
        )

        assert find_include_dirs(vendor) == [
            vendor / "boost" / "include",
            vendor / "boost" / "libs" / "config" / "include",
            vendor / "earcut" / "include",
            vendor / "zlib" / "include",
        ]

    def test_nested_include_dirs_are_reported(self, tmp_path):
        make_dirs(tmp_path, "pkg/include/include")
        assert find_include_dirs(tmp_path) == [
            tmp_path / "pkg" / "include",
            tmp_path / "pkg" / "include" / "include",
        ]

    def test_root_named_include(self, tmp_path):
        root = tmp_path / "include"
        make_dirs(root, "sub/include")
        assert find_include_dirs(root) == [root, root / "sub" / "include"]

    def test_missing_root(self, tmp_path):
        assert find_include_dirs(tmp_path / "vendor") == []

    def test_only_exact_name_matches(self, tmp_path):
        make_dirs(tmp_path, "a/includes", "b/Include", "c/include")
        assert find_include_dirs(tmp_path) == [tmp_path / "c" / "include"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlinks_are_not_followed(self, tmp_path):
        outside = tmp_path / "outside"
        make_dirs(outside, "include", "deep/include")
        vendor = tmp_path / "vendor"
        make_dirs(vendor, "real/include", "other")
        try:
            (vendor / "linked").symlink_to(outside, target_is_directory=True)
            (vendor / "other" / "include").symlink_to(outside / "include", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        assert find_include_dirs(vendor) == [vendor / "real" / "include"]

    def test_count_matches_include_dirs_on_mixed_tree(self, tmp_path):
        include_dirs = ["a/include", "b/c/include", "d/include", "d/include/e/include", "f/g/h/include"]
        other_dirs = ["a/src", "b/c/test", "d/include/e/src", "f/g", "includes", "docs/Include"]
        make_dirs(tmp_path, *include_dirs, *other_dirs)

        found = find_include_dirs(tmp_path)

        assert len(found) == len(include_dirs)
        assert set(found) == {tmp_path / rel for rel in include_dirs}

    def test_stable_across_runs(self, tmp_path):
        make_dirs(tmp_path, "b/include", "a/include", "a/x/include")
        assert find_include_dirs(tmp_path) == find_include_dirs(tmp_path)


class TestIncludeDirectoryAssembler:
    """Test cases for IncludeDirectoryAssembler."""

    def test_source_tree(self, project_dir, source_tree):
        make_dirs(source_tree, "vendor/b/include", "vendor/a/include")
        assembler = IncludeDirectoryAssembler(project_dir / "include")

        dirs = assembler.assemble(VendoredCheckout(path=source_tree))

        assert dirs == [
            project_dir / "include",
            source_tree / "include",
            source_tree / "platform" / "default" / "include",
            source_tree / "vendor" / "a" / "include",
            source_tree / "vendor" / "b" / "include",
        ]

    def test_wrapper_dir_always_first_and_unique(self, project_dir):
        # A source tree whose include dir is the wrapper dir itself
        tree = project_dir
        assembler = IncludeDirectoryAssembler(project_dir / "include")

        dirs = assembler.assemble(VendoredCheckout(path=tree))

        assert dirs[0] == project_dir / "include"
        assert len(dirs) == len(set(dirs))

    def test_precompiled_artifact(self, project_dir, tmp_path):
        headers = tmp_path / "headers"
        make_dirs(headers, "include/mbgl", "vendor/earcut/include")
        artifact = PrecompiledArtifact(
            library_file=tmp_path / "libcore.a",
            header_archive=tmp_path / "headers.tar.gz",
            headers_dir=headers,
        )

        dirs = IncludeDirectoryAssembler(project_dir / "include").assemble(artifact)

        assert dirs == [
            project_dir / "include",
            headers / "include",
            headers / "vendor" / "earcut" / "include",
        ]

    def test_precompiled_platform_headers(self, project_dir, tmp_path):
        headers = tmp_path / "headers"
        make_dirs(headers, "include", "platform/default/include")
        artifact = PrecompiledArtifact(
            library_file=tmp_path / "libcore.a",
            header_archive=tmp_path / "headers.tar.gz",
            headers_dir=headers,
        )

        dirs = IncludeDirectoryAssembler(project_dir / "include").assemble(artifact)

        assert headers / "platform" / "default" / "include" in dirs
