"""Cache management for mlnbuild.

This module provides the on-disk layout for cloned sources, downloaded
precompiled artifacts and retained CMake build directories.

Cache Structure:
    .mlnbuild/
    ├── cache/
    │   ├── sources/
    │   │   └── maplibre-native/        # Pinned shallow clone
    │   └── artifacts/
    │       └── {revision}/             # Pinned core revision
    │           ├── libmaplibre-native-core-{target}-{backend}.a
    │           ├── maplibre-native-headers.tar.gz
    │           └── headers/            # Extracted header archive
    └── build/
        └── {backend}-{profile}-{source}/   # CMake binary dir, kept for incremental builds
            ├── mbgl-core-deps.txt
            └── libmbgl-core.a

{source} is a short hash of the source tree path, since a CMake binary dir
is bound to the source dir it was configured from.

Concurrent invocations sharing one cache directory are not guarded.
"""

import hashlib
import os
import shutil
from pathlib import Path
from typing import Optional


class Cache:
    """Manages the mlnbuild cache directory structure.

    The cache lives in the project directory (.mlnbuild/) unless a root is
    given explicitly or the MLN_CACHE_DIR environment variable is set.
    """

    def __init__(self, project_dir: Optional[Path] = None, cache_root: Optional[Path] = None):
        """Initialize cache manager.

        Args:
            project_dir: Project directory. If None, uses current directory.
            cache_root: Explicit cache root, overriding MLN_CACHE_DIR
        """
        if project_dir is None:
            project_dir = Path.cwd()

        self.project_dir = Path(project_dir).resolve()

        if cache_root is not None:
            self.cache_root = Path(cache_root).resolve()
        else:
            cache_env = os.environ.get("MLN_CACHE_DIR")
            if cache_env:
                self.cache_root = Path(cache_env).resolve()
            else:
                self.cache_root = self.project_dir / ".mlnbuild" / "cache"

        self.build_root = self.cache_root.parent / "build"

    @property
    def sources_dir(self) -> Path:
        """Directory for cloned source trees."""
        return self.cache_root / "sources"

    @property
    def artifacts_dir(self) -> Path:
        """Directory for downloaded precompiled artifacts."""
        return self.cache_root / "artifacts"

    def get_clone_dir(self, name: str = "maplibre-native") -> Path:
        """Get the scratch directory a remote clone is materialized into.

        Args:
            name: Checkout directory name

        Returns:
            Path to the clone directory
        """
        return self.sources_dir / name

    def get_artifact_dir(self, revision: str) -> Path:
        """Get the artifact directory for a pinned revision.

        Args:
            revision: Pinned commit hash

        Returns:
            Path holding the library, header archive and extracted headers
        """
        return self.artifacts_dir / revision

    @staticmethod
    def hash_source(source_dir: Path) -> str:
        """Short stable hash of a resolved source tree path."""
        resolved = str(Path(source_dir).resolve())
        return hashlib.sha256(resolved.encode("utf-8")).hexdigest()[:8]

    def get_build_dir(self, backend: str, profile: str, source_dir: Optional[Path] = None) -> Path:
        """Get the retained CMake build directory for a backend/profile pair.

        Args:
            backend: Rendering backend name (e.g. 'vulkan')
            profile: CMake build type (e.g. 'Release')
            source_dir: Source tree the directory is configured from

        Returns:
            Path to the CMake binary directory
        """
        name = f"{backend}-{profile.lower()}"
        if source_dir is not None:
            name += f"-{self.hash_source(source_dir)}"
        return self.build_root / name

    def ensure_directories(self) -> None:
        """Create all cache directories if they don't exist."""
        for directory in [
            self.sources_dir,
            self.artifacts_dir,
            self.build_root,
        ]:
            directory.mkdir(parents=True, exist_ok=True)

    def clean_build(self) -> None:
        """Remove all retained build directories."""
        if self.build_root.exists():
            shutil.rmtree(self.build_root)
