"""Precompiled artifact management.

Downloads the prebuilt MapLibre Native core library and its header archive
for a target/backend pair, caching both under the pinned revision.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Tuple

from ..config.pins import RevisionPin
from ..errors import DownloadError, UnsupportedTargetError
from ..models import PrecompiledArtifact, RenderingBackend
from .cache import Cache
from .downloader import PackageDownloader

logger = logging.getLogger(__name__)


class ArtifactDownloader:
    """Fetches and unpacks precompiled core artifacts."""

    # Release asset names
    LIBRARY_ASSET = "libmaplibre-native-core-{target}-{backend}.a"
    HEADERS_ASSET = "maplibre-native-headers.tar.gz"

    # Targets the release workflow publishes libraries for
    SUPPORTED_TARGETS = ("linux-x64", "linux-arm64", "macos-arm64")

    def __init__(
        self,
        cache: Cache,
        pin: RevisionPin,
        downloader: Optional[PackageDownloader] = None,
        show_progress: bool = True,
    ):
        """Initialize artifact downloader.

        Args:
            cache: Cache instance for storing artifacts
            pin: Pinned revision the assets are published under
            downloader: Package downloader (created on demand if None)
            show_progress: Whether to show download progress bars
        """
        self.cache = cache
        self.pin = pin
        self.downloader = downloader or PackageDownloader()
        self.show_progress = show_progress

    def asset_names(self, target: str, backend: RenderingBackend) -> Tuple[str, str]:
        """Get (library, header archive) asset filenames.

        Raises:
            UnsupportedTargetError: If no artifact is published for target
        """
        if target not in self.SUPPORTED_TARGETS:
            raise UnsupportedTargetError(
                f"No precompiled MapLibre Native core for target '{target}'. "
                + f"Available: {', '.join(self.SUPPORTED_TARGETS)}. "
                + "Build from source instead: set MLN_CORE_SOURCE_DIR, "
                + "initialize the maplibre-native submodule, or pass --force-clone."
            )
        library = self.LIBRARY_ASSET.format(target=target, backend=backend.value)
        return library, self.HEADERS_ASSET

    def artifact_dir(self) -> Path:
        """Directory holding this revision's artifacts."""
        return self.cache.get_artifact_dir(self.pin.commit)

    def ensure(self, target: str, backend: RenderingBackend) -> PrecompiledArtifact:
        """Ensure library and headers for target/backend are present and unpacked.

        Assets already in the cache are not downloaded again. Both downloads
        must succeed before the header archive is extracted.

        Args:
            target: Target identifier (e.g. 'linux-x64')
            backend: Selected rendering backend

        Returns:
            PrecompiledArtifact with library, archive and extracted headers paths

        Raises:
            UnsupportedTargetError: If target has no published artifact
            DownloadError: If any asset download fails
            ExtractionError: If the header archive cannot be unpacked
        """
        library_name, headers_name = self.asset_names(target, backend)
        artifact_dir = self.artifact_dir()
        library_file = artifact_dir / library_name
        header_archive = artifact_dir / headers_name

        pending: List[Tuple[str, Path]] = []
        for path in (library_file, header_archive):
            if path.exists():
                logger.info(f"Using cached {path.name}")
            else:
                pending.append((self.pin.asset_url(path.name), path))

        if pending:
            self._download_all(pending)

        headers_dir = artifact_dir / "headers"
        if pending or not headers_dir.is_dir():
            self.downloader.extract_tar_gz(header_archive, headers_dir)

        return PrecompiledArtifact(
            library_file=library_file,
            header_archive=header_archive,
            headers_dir=headers_dir,
        )

    def _download_all(self, pending: List[Tuple[str, Path]]) -> None:
        """Download pending assets concurrently, one worker per asset."""
        errors: List[DownloadError] = []
        with ThreadPoolExecutor(max_workers=len(pending)) as executor:
            futures = {
                executor.submit(self.downloader.download, url, path, self.show_progress): url
                for url, path in pending
            }
            for future in as_completed(futures):
                try:
                    future.result()
                except DownloadError as e:
                    errors.append(e)

        if errors:
            raise errors[0]
