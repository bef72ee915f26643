"""Unit tests for precompiled artifact management."""

import io
import tarfile
from unittest.mock import MagicMock

import pytest

from mlnbuild.errors import DownloadError, UnsupportedTargetError
from mlnbuild.models import RenderingBackend
from mlnbuild.packages.artifacts import ArtifactDownloader
from mlnbuild.packages.cache import Cache
from mlnbuild.packages.downloader import PackageDownloader


def write_header_archive(path):
    """Write a small header archive with an include dir and a vendored one."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as tar:
        for name in ("include/mbgl/map.hpp", "vendor/earcut/include/earcut.hpp"):
            data = b"#pragma once\n"
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))


def fake_download(url, dest_path, show_progress=True):
    if dest_path.name.endswith(".tar.gz"):
        write_header_archive(dest_path)
    else:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(b"!<arch>\n")
    return dest_path


@pytest.fixture
def cache(tmp_path):
    return Cache(tmp_path, cache_root=tmp_path / "cache")


@pytest.fixture
def downloader():
    mock = MagicMock(spec=PackageDownloader)
    mock.download.side_effect = fake_download
    mock.extract_tar_gz.side_effect = PackageDownloader().extract_tar_gz
    return mock


class TestArtifactDownloader:
    """Test cases for ArtifactDownloader."""

    def test_asset_names(self, cache, pin):
        artifacts = ArtifactDownloader(cache, pin, downloader=MagicMock())
        assert artifacts.asset_names("linux-x64", RenderingBackend.VULKAN) == (
            "libmaplibre-native-core-linux-x64-vulkan.a",
            "maplibre-native-headers.tar.gz",
        )

    def test_unsupported_target(self, cache, pin):
        artifacts = ArtifactDownloader(cache, pin, downloader=MagicMock())

        with pytest.raises(UnsupportedTargetError) as excinfo:
            artifacts.ensure("windows-x64", RenderingBackend.OPENGL)

        assert "windows-x64" in str(excinfo.value)
        assert "MLN_CORE_SOURCE_DIR" in str(excinfo.value)
        artifacts.downloader.download.assert_not_called()

    def test_downloads_and_extracts(self, cache, pin, downloader):
        artifacts = ArtifactDownloader(cache, pin, downloader=downloader, show_progress=False)

        artifact = artifacts.ensure("linux-x64", RenderingBackend.VULKAN)

        artifact_dir = cache.get_artifact_dir(pin.commit)
        assert artifact.library_file == artifact_dir / "libmaplibre-native-core-linux-x64-vulkan.a"
        assert artifact.library_file.is_file()
        assert (artifact.headers_dir / "include" / "mbgl" / "map.hpp").is_file()

        urls = sorted(call.args[0] for call in downloader.download.call_args_list)
        assert urls == [
            f"https://example.com/releases/core-{pin.commit}/libmaplibre-native-core-linux-x64-vulkan.a",
            f"https://example.com/releases/core-{pin.commit}/maplibre-native-headers.tar.gz",
        ]

    def test_cached_artifacts_need_no_network(self, cache, pin, downloader):
        artifacts = ArtifactDownloader(cache, pin, downloader=downloader, show_progress=False)
        first = artifacts.ensure("macos-arm64", RenderingBackend.METAL)
        downloader.download.reset_mock()

        second = artifacts.ensure("macos-arm64", RenderingBackend.METAL)

        downloader.download.assert_not_called()
        assert second == first

    def test_only_missing_asset_is_downloaded(self, cache, pin, downloader):
        artifacts = ArtifactDownloader(cache, pin, downloader=downloader, show_progress=False)
        write_header_archive(cache.get_artifact_dir(pin.commit) / "maplibre-native-headers.tar.gz")

        artifacts.ensure("linux-arm64", RenderingBackend.OPENGL)

        assert downloader.download.call_count == 1
        assert downloader.download.call_args.args[1].name.endswith("-opengl.a")

    def test_failed_download_skips_extraction(self, cache, pin, downloader):
        def failing(url, dest_path, show_progress=True):
            if url.endswith(".a"):
                raise DownloadError(f"Failed to download {url}: 404")
            return fake_download(url, dest_path, show_progress)

        downloader.download.side_effect = failing
        artifacts = ArtifactDownloader(cache, pin, downloader=downloader, show_progress=False)

        with pytest.raises(DownloadError):
            artifacts.ensure("linux-x64", RenderingBackend.VULKAN)

        downloader.extract_tar_gz.assert_not_called()
        assert not (cache.get_artifact_dir(pin.commit) / "headers").exists()
