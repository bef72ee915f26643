"""Package downloader with progress tracking.

This module handles downloading release assets from URLs and unpacking
gzip-compressed tar archives.
"""

import logging
import shutil
import tarfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests
from tqdm import tqdm

from ..errors import DownloadError, ExtractionError

logger = logging.getLogger(__name__)


class PackageDownloader:
    """Downloads and extracts packages with progress tracking."""

    def __init__(self, chunk_size: int = 8192, timeout: Optional[float] = 30):
        """Initialize downloader.

        Args:
            chunk_size: Size of chunks for streaming downloads
            timeout: Connect/read timeout handed to requests
        """
        self.chunk_size = chunk_size
        self.timeout = timeout

    def download(self, url: str, dest_path: Path, show_progress: bool = True) -> Path:
        """Download a file from a URL.

        The file is streamed to a temporary sibling and renamed into place,
        so an interrupted download never leaves a file that looks cached.

        Args:
            url: URL to download from
            dest_path: Destination file path
            show_progress: Whether to show progress bar

        Returns:
            Path to the downloaded file

        Raises:
            DownloadError: If download fails
        """
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)

        # Use temporary file during download
        temp_file = dest_path.with_suffix(dest_path.suffix + ".tmp")

        try:
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()

            total_size = int(response.headers.get("content-length", 0))

            progress_bar = None
            if show_progress and total_size > 0:
                filename = Path(urlparse(url).path).name
                progress_bar = tqdm(
                    total=total_size,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc=f"Downloading {filename}",
                )

            try:
                with open(temp_file, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            if progress_bar:
                                progress_bar.update(len(chunk))
            finally:
                if progress_bar:
                    progress_bar.close()

            if dest_path.exists():
                dest_path.unlink()
            temp_file.rename(dest_path)

            return dest_path

        except requests.RequestException as e:
            if temp_file.exists():
                temp_file.unlink()
            raise DownloadError(f"Failed to download {url}: {e}") from e

        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def extract_tar_gz(self, archive_path: Path, dest_dir: Path) -> Path:
        """Decompress and unpack a .tar.gz archive, overwriting existing files.

        The archive is unpacked into a temporary sibling directory first, then
        each top-level entry replaces its counterpart in dest_dir. Extracting
        the same archive twice yields the same tree.

        Args:
            archive_path: Path to the .tar.gz archive
            dest_dir: Destination directory

        Returns:
            Path to the destination directory

        Raises:
            ExtractionError: If the archive is missing or cannot be unpacked
        """
        archive_path = Path(archive_path)
        dest_dir = Path(dest_dir)

        if not archive_path.exists():
            raise ExtractionError(f"Archive not found: {archive_path}")

        temp_extract = dest_dir.parent / f"temp_extract_{archive_path.name}"
        if temp_extract.exists():
            shutil.rmtree(temp_extract)
        temp_extract.mkdir(parents=True)

        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                tar.extractall(temp_extract, filter="data")

            dest_dir.mkdir(parents=True, exist_ok=True)
            for item in sorted(temp_extract.iterdir()):
                dest = dest_dir / item.name
                if dest.is_dir() and not dest.is_symlink():
                    shutil.rmtree(dest)
                elif dest.exists() or dest.is_symlink():
                    dest.unlink()
                shutil.move(str(item), str(dest))

            return dest_dir

        except (tarfile.TarError, OSError) as e:
            raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e
        finally:
            if temp_extract.exists():
                shutil.rmtree(temp_extract, ignore_errors=True)
