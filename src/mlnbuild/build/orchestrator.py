"""
Build orchestration for the MapLibre Native core.

This module coordinates the whole acquisition and build pipeline:
- Rendering backend selection
- Source resolution (override / clone / vendored / precompiled)
- CMake builds of the dependency manifest and the core library
- Manifest parsing into link directives
- Include directory assembly for the bridge compiler
"""

import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..config.build_config import BuildConfig
from ..config.pins import DEFAULT_PIN, RevisionPin
from ..errors import ConfigurationError
from ..models import PrecompiledArtifact, RenderingBackend, SourceLocation, SourceTree
from ..packages.cache import Cache
from ..packages.platform_utils import PlatformDetector
from ..process import ProcessRunner
from .cmake_driver import CMakeDriver
from .include_dirs import IncludeDirectoryAssembler
from .manifest_parser import LinkDirective, LinkKind, LinkLibrary, ManifestParser, SearchPath
from .precompiled_deps import system_manifest
from .source_resolver import SourceResolver
from .variant_selector import BackendSelection, select_backend

logger = logging.getLogger(__name__)

# Static library produced by the external bridge compiler
BRIDGE_ARTIFACT_NAME = "maplibre_rust_map_renderer_bindings"

# Written instead of building when native compilation is skipped
STUB_MARKER_NAME = "mbgl-core.stub"


@dataclass
class NativeBuildResult:
    """Everything the bridge compiler and final link step need."""

    selection: Optional[BackendSelection]
    source: Optional[SourceLocation]
    library_file: Optional[Path]
    link_directives: List[LinkDirective]
    core_library: Optional[LinkLibrary]
    include_dirs: List[Path]
    bridge_artifact_name: str = BRIDGE_ARTIFACT_NAME
    build_time: float = 0.0
    stub: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def backend(self) -> Optional[RenderingBackend]:
        return self.selection.backend if self.selection else None

    def emission_order(self, include_bridge: bool = True) -> List[LinkDirective]:
        """Directives in final link order.

        Search paths come first, then the bridge, then the core library, then
        the core's own dependencies in manifest order, so that each static
        library precedes the libraries resolving its undefined symbols.
        """
        paths = [d for d in self.link_directives if isinstance(d, SearchPath)]
        libs = [d for d in self.link_directives if isinstance(d, LinkLibrary)]
        ordered: List[LinkDirective] = list(paths)
        if include_bridge and not self.stub:
            ordered.append(LinkLibrary(self.bridge_artifact_name, LinkKind.STATIC))
        if self.core_library is not None:
            ordered.append(self.core_library)
        ordered.extend(lib for lib in libs if lib != self.core_library)
        return ordered


class NativeBuildOrchestrator:
    """
    Orchestrates acquisition and build of the MapLibre Native core.

    Phases:
    1. Select the rendering backend
    2. Resolve the source (override, clone, vendored checkout or download)
    3. Build mbgl-core-deps and parse its manifest
    4. Build mbgl-core (source trees only)
    5. Assemble include directories

    Example usage:
        config = BuildConfigLoader.load(Path("."))
        result = NativeBuildOrchestrator(config).build()
        LinkEmitter("cargo").emit(result.emission_order(), sys.stdout)
    """

    def __init__(
        self,
        config: BuildConfig,
        pin: RevisionPin = DEFAULT_PIN,
        cache: Optional[Cache] = None,
        runner: Optional[ProcessRunner] = None,
        resolver: Optional[SourceResolver] = None,
        is_apple: Optional[bool] = None,
        detect_target: Callable[[], str] = PlatformDetector.detect_target,
        verbose: bool = False,
    ):
        """
        Initialize build orchestrator.

        Args:
            config: Build configuration
            pin: Pinned upstream revision
            cache: Cache instance (default derived from config)
            runner: Process runner for git and cmake
            resolver: Source resolver (default built from the above)
            is_apple: Override Apple platform detection
            detect_target: Returns the host target identifier
            verbose: Print phase progress
        """
        self.config = config
        self.pin = pin
        self.cache = cache or Cache(config.project_dir, cache_root=config.cache_dir)
        self.runner = runner or ProcessRunner(verbose=verbose)
        self.detect_target = detect_target
        self.resolver = resolver or SourceResolver(
            config, pin, self.cache, runner=self.runner, detect_target=detect_target
        )
        self.is_apple = PlatformDetector.is_apple() if is_apple is None else is_apple
        self.verbose = verbose

    def select_backend(self) -> BackendSelection:
        return select_backend(
            opengl=self.config.opengl,
            metal=self.config.metal,
            vulkan=self.config.vulkan,
            is_apple=self.is_apple,
        )

    def resolve(self) -> SourceLocation:
        """Select the backend and resolve the source without building."""
        return self.resolver.resolve(self.select_backend().backend)

    def build(self) -> NativeBuildResult:
        """
        Run the full pipeline.

        Returns:
            NativeBuildResult with link directives and include directories

        Raises:
            MlnBuildError: If any phase fails; nothing is retried
        """
        start_time = time.time()
        assembler = IncludeDirectoryAssembler(self.config.wrapper_include_dir)

        if self.config.skip_build:
            return self._stub_result(start_time)

        self._progress("[1/5] Selecting rendering backend...")
        selection = self.select_backend()
        warnings = [selection.warning] if selection.warning else []
        self._progress(f"      Backend: {selection.backend.value}")

        self._progress("[2/5] Resolving MapLibre Native source...")
        source = self.resolver.resolve(selection.backend)
        self._progress(f"      Source: {source.kind.value}")

        if isinstance(source, SourceTree):
            driver = CMakeDriver(
                self.config,
                selection.backend,
                self.cache.get_build_dir(
                    selection.backend.value, self.config.build_profile, source.path
                ),
                runner=self.runner,
            )
            self._progress(f"[3/5] Building {CMakeDriver.MANIFEST_TARGET}...")
            manifest_text = driver.read_manifest(source.path)
            directives = ManifestParser(
                driver.build_dir, strict=self.config.strict_manifest
            ).parse(manifest_text)

            self._progress(f"[4/5] Building {CMakeDriver.LIBRARY_TARGET}...")
            library_file = driver.build_library(source.path)
            core_library = LinkLibrary(CMakeDriver.LIBRARY_TARGET, LinkKind.STATIC)
        elif isinstance(source, PrecompiledArtifact):
            self._progress("[3/5] Reading precompiled system dependencies...")
            target = self.detect_target()
            directives = ManifestParser(
                source.library_file.parent, strict=self.config.strict_manifest
            ).parse(system_manifest(target, selection.backend))

            self._progress("[4/5] Using precompiled core library...")
            library_file = source.library_file
            core_library = LinkLibrary(_static_library_name(library_file), LinkKind.STATIC)
        else:
            raise ConfigurationError(f"Cannot build from source location {source!r}")

        core_search = SearchPath(library_file.parent)
        if core_search not in directives:
            directives.append(core_search)

        self._progress("[5/5] Assembling include directories...")
        include_dirs = assembler.assemble(source)

        return NativeBuildResult(
            selection=selection,
            source=source,
            library_file=library_file,
            link_directives=directives,
            core_library=core_library,
            include_dirs=include_dirs,
            build_time=time.time() - start_time,
            warnings=warnings,
        )

    def _stub_result(self, start_time: float) -> NativeBuildResult:
        """Write the stub marker used by documentation-only builds."""
        self.cache.build_root.mkdir(parents=True, exist_ok=True)
        marker = self.cache.build_root / STUB_MARKER_NAME
        marker.write_text("native build skipped\n", encoding="utf-8")
        logger.warning(f"Skipping native build, wrote stub marker {marker}")
        return NativeBuildResult(
            selection=None,
            source=None,
            library_file=None,
            link_directives=[],
            core_library=None,
            include_dirs=[self.config.wrapper_include_dir],
            build_time=time.time() - start_time,
            stub=True,
        )

    def _progress(self, message: str) -> None:
        if self.verbose:
            print(message, file=sys.stderr)


def _static_library_name(library_file: Path) -> str:
    """Link name of a static library file (libfoo.a -> foo, foo.lib -> foo)."""
    name = library_file.name
    if name.endswith(".lib"):
        return name[:-4]
    if name.startswith("lib"):
        name = name[3:]
    if name.endswith(".a"):
        name = name[:-2]
    return name
