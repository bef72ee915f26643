"""
Build system components for mlnbuild.

This module provides:
- Rendering backend selection
- Source resolution
- CMake build driving
- Dependency manifest parsing and link directive emission
- Include directory assembly
"""

from .cmake_driver import CMakeDriver
from .include_dirs import IncludeDirectoryAssembler, find_include_dirs
from .link_emitter import LinkEmitter
from .manifest_parser import (
    MANIFEST_GRAMMAR_VERSION,
    LinkDirective,
    LinkKind,
    LinkLibrary,
    ManifestParser,
    SearchPath,
    parse_manifest,
    read_manifest_file,
)
from .orchestrator import NativeBuildOrchestrator, NativeBuildResult
from .source_resolver import SourceResolver, SourceStrategy
from .variant_selector import BackendSelection, select_backend

__all__ = [
    "BackendSelection",
    "select_backend",
    "SourceResolver",
    "SourceStrategy",
    "CMakeDriver",
    "ManifestParser",
    "parse_manifest",
    "read_manifest_file",
    "MANIFEST_GRAMMAR_VERSION",
    "LinkDirective",
    "LinkKind",
    "LinkLibrary",
    "SearchPath",
    "LinkEmitter",
    "IncludeDirectoryAssembler",
    "find_include_dirs",
    "NativeBuildOrchestrator",
    "NativeBuildResult",
]
