"""Package management for mlnbuild.

This module handles acquiring the MapLibre Native dependency: validating
local checkouts, cloning pinned revisions, and downloading and caching
precompiled artifacts.
"""

from .artifacts import ArtifactDownloader
from .cache import Cache
from .downloader import PackageDownloader
from .git_fetcher import RemoteFetcher
from .platform_utils import PlatformDetector
from .revision import RevisionValidator, is_populated_dir

__all__ = [
    "ArtifactDownloader",
    "Cache",
    "PackageDownloader",
    "RemoteFetcher",
    "PlatformDetector",
    "RevisionValidator",
    "is_populated_dir",
]
