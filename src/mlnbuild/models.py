"""Shared data model: rendering backends and resolved source locations."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class RenderingBackend(Enum):
    """Graphics API the native core is compiled against. Exactly one per build."""

    METAL = "metal"
    OPENGL = "opengl"
    VULKAN = "vulkan"

    def __str__(self) -> str:
        return self.value


class SourceKind(Enum):
    """Tag of a resolved SourceLocation."""

    EXPLICIT_OVERRIDE = "explicit-override"
    VENDORED_CHECKOUT = "vendored-checkout"
    REMOTE_CLONE = "remote-clone"
    PRECOMPILED_ARTIFACT = "precompiled-artifact"


@dataclass(frozen=True)
class SourceLocation:
    """Where the native dependency comes from for this build."""

    @property
    def kind(self) -> SourceKind:
        raise NotImplementedError

    @property
    def is_source_tree(self) -> bool:
        """Whether the location is a CMake source tree that must be built."""
        return False


@dataclass(frozen=True)
class SourceTree(SourceLocation):
    """A MapLibre Native source tree containing CMakeLists.txt."""

    path: Path

    @property
    def is_source_tree(self) -> bool:
        return True


@dataclass(frozen=True)
class ExplicitOverride(SourceTree):
    """Operator-supplied source directory, used verbatim."""

    @property
    def kind(self) -> SourceKind:
        return SourceKind.EXPLICIT_OVERRIDE


@dataclass(frozen=True)
class VendoredCheckout(SourceTree):
    """The git submodule checked out next to the project."""

    @property
    def kind(self) -> SourceKind:
        return SourceKind.VENDORED_CHECKOUT


@dataclass(frozen=True)
class RemoteClone(SourceTree):
    """A pinned shallow clone in the cache."""

    @property
    def kind(self) -> SourceKind:
        return SourceKind.REMOTE_CLONE


@dataclass(frozen=True)
class PrecompiledArtifact(SourceLocation):
    """A downloaded static library plus its header archive."""

    library_file: Path
    header_archive: Path
    headers_dir: Path

    @property
    def kind(self) -> SourceKind:
        return SourceKind.PRECOMPILED_ARTIFACT
