"""
Source resolution for the MapLibre Native dependency.

Decides where the native core comes from for this build. Strategies, in
order of precedence:
1. Explicit override path (MLN_CORE_SOURCE_DIR), used verbatim
2. Forced remote clone into the cache, ignoring local state
3. Vendored checkout (git submodule), validated against the pinned revision
4. Precompiled artifact download for the host target and backend

Every strategy yields a SourceLocation, so later stages do not care which
one ran.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional

from ..config.build_config import BuildConfig
from ..config.pins import RevisionPin
from ..errors import ConfigurationError
from ..models import (
    ExplicitOverride,
    RemoteClone,
    RenderingBackend,
    SourceLocation,
    SourceTree,
    VendoredCheckout,
)
from ..packages.artifacts import ArtifactDownloader
from ..packages.cache import Cache
from ..packages.git_fetcher import RemoteFetcher
from ..packages.platform_utils import PlatformDetector
from ..packages.revision import RevisionValidator, is_populated_dir
from ..process import ProcessRunner

logger = logging.getLogger(__name__)

# File every usable source tree must contain
BUILD_DESCRIPTOR = "CMakeLists.txt"


class SourceStrategy(Enum):
    """How the native dependency is acquired."""

    OVERRIDE = "override"
    FORCE_CLONE = "force-clone"
    VENDORED = "vendored"
    DOWNLOAD = "download"


def require_build_descriptor(path: Path) -> None:
    """Check that path is a source tree with a CMakeLists.txt.

    Raises:
        ConfigurationError: If the marker file is missing
    """
    marker = path / BUILD_DESCRIPTOR
    if not marker.is_file():
        raise ConfigurationError(
            f"{marker} does not exist, did you forget to run "
            + "`git submodule update --init --recursive`?"
        )


class SourceResolver:
    """Resolves the MapLibre Native source for one build."""

    def __init__(
        self,
        config: BuildConfig,
        pin: RevisionPin,
        cache: Cache,
        runner: Optional[ProcessRunner] = None,
        validator: Optional[RevisionValidator] = None,
        fetcher: Optional[RemoteFetcher] = None,
        artifacts: Optional[ArtifactDownloader] = None,
        detect_target: Callable[[], str] = PlatformDetector.detect_target,
    ):
        """Initialize source resolver.

        Args:
            config: Build configuration
            pin: Pinned upstream revision
            cache: Cache for clones and downloaded artifacts
            runner: Process runner shared by git helpers
            validator: Revision validator (default built from runner)
            fetcher: Remote fetcher (default built from runner)
            artifacts: Artifact downloader (default built from cache and pin)
            detect_target: Returns the host target identifier
        """
        self.config = config
        self.pin = pin
        self.cache = cache
        runner = runner or ProcessRunner()
        self.validator = validator or RevisionValidator(runner)
        self.fetcher = fetcher or RemoteFetcher(runner, self.validator)
        self.artifacts = artifacts or ArtifactDownloader(cache, pin)
        self.detect_target = detect_target

        self._handlers: Dict[
            SourceStrategy, Callable[[RenderingBackend], SourceLocation]
        ] = {
            SourceStrategy.OVERRIDE: self._resolve_override,
            SourceStrategy.FORCE_CLONE: self._resolve_clone,
            SourceStrategy.VENDORED: self._resolve_vendored,
            SourceStrategy.DOWNLOAD: self._resolve_download,
        }

    def choose_strategy(self) -> SourceStrategy:
        """Pick the acquisition strategy from configuration and local state.

        Raises:
            ConfigurationError: If the vendored checkout exists but is empty
        """
        if self.config.source_dir is not None:
            return SourceStrategy.OVERRIDE
        if self.config.force_clone:
            return SourceStrategy.FORCE_CLONE

        vendored = self.config.vendored_dir
        if vendored.is_dir():
            if not is_populated_dir(vendored):
                raise ConfigurationError(
                    f"{vendored} exists but is empty. Run "
                    + "`git submodule update --init --recursive` to initialize it, "
                    + "or remove it to use a precompiled build."
                )
            return SourceStrategy.VENDORED

        return SourceStrategy.DOWNLOAD

    def resolve(self, backend: RenderingBackend) -> SourceLocation:
        """Resolve the source location for this build.

        Args:
            backend: Selected rendering backend (used by the download strategy)

        Returns:
            The resolved SourceLocation

        Raises:
            ConfigurationError: For bad override paths, empty checkouts or unsupported targets
            RevisionMismatchError: If the vendored checkout is not at the pinned revision
            ProcessFailureError: If git fails
            DownloadError: If an artifact download fails
        """
        strategy = self.choose_strategy()
        logger.info(f"Resolving MapLibre Native source using strategy '{strategy.value}'")
        location = self._handlers[strategy](backend)

        if isinstance(location, SourceTree):
            require_build_descriptor(location.path)
        return location

    def _resolve_override(self, backend: RenderingBackend) -> SourceLocation:
        if self.config.source_dir is None:
            raise ConfigurationError("No MLN_CORE_SOURCE_DIR override is configured")
        path = Path(self.config.source_dir).resolve()
        if not (path / BUILD_DESCRIPTOR).is_file():
            raise ConfigurationError(
                f"MLN_CORE_SOURCE_DIR={path} does not contain {BUILD_DESCRIPTOR}. "
                + "Point it at the root of a MapLibre Native checkout."
            )
        return ExplicitOverride(path=path)

    def _resolve_clone(self, backend: RenderingBackend) -> SourceLocation:
        path = self.fetcher.fetch(self.cache.get_clone_dir(), self.pin)
        return RemoteClone(path=path)

    def _resolve_vendored(self, backend: RenderingBackend) -> SourceLocation:
        path = self.config.vendored_dir
        self.validator.validate(path, self.pin)
        return VendoredCheckout(path=path)

    def _resolve_download(self, backend: RenderingBackend) -> SourceLocation:
        target = self.detect_target()
        return self.artifacts.ensure(target, backend)
