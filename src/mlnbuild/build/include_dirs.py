"""
Include directory assembly for the bridge compiler.

The bridge translation unit needs the wrapper headers, MapLibre Native's own
include directories and the include directories of every vendored
third-party dependency. Order matters (earlier wins) and must be stable
across runs, so the vendor walk visits children in sorted order, depth-first.
"""

import os
from pathlib import Path
from typing import Iterable, List

from ..models import PrecompiledArtifact, SourceLocation, SourceTree

INCLUDE_DIR_NAME = "include"

# Include directories of a MapLibre Native tree, relative to its root
CORE_INCLUDE_DIRS = ("include", "platform/default/include")


def find_include_dirs(root: Path) -> List[Path]:
    """Collect every directory literally named 'include' below root.

    Symlinked directories are neither returned nor descended into. Results
    are in depth-first, first-seen order with children visited alphabetically.

    Args:
        root: Directory to walk (missing directories yield nothing)

    Returns:
        List of include directories
    """
    root = Path(root)
    if not root.is_dir() or root.is_symlink():
        return []

    found: List[Path] = []
    if root.name == INCLUDE_DIR_NAME:
        found.append(root)

    for dirpath, dirnames, _filenames in os.walk(root, followlinks=False):
        dirnames[:] = sorted(
            d for d in dirnames if not os.path.islink(os.path.join(dirpath, d))
        )
        for dirname in dirnames:
            if dirname == INCLUDE_DIR_NAME:
                found.append(Path(dirpath) / dirname)

    return _depth_first(found, root)


def _depth_first(found: List[Path], root: Path) -> List[Path]:
    # os.walk reports a directory's children before descending into them;
    # re-sort by path components to get pre-order depth-first order.
    return sorted(found, key=lambda p: p.relative_to(root).parts)


class IncludeDirectoryAssembler:
    """Builds the ordered include directory set for the bridge."""

    def __init__(self, wrapper_include_dir: Path):
        """Initialize include assembler.

        Args:
            wrapper_include_dir: The bridge's own header directory (highest precedence)
        """
        self.wrapper_include_dir = Path(wrapper_include_dir)

    def assemble(self, location: SourceLocation) -> List[Path]:
        """Assemble include directories for a resolved source location.

        Args:
            location: Resolved source tree or precompiled artifact

        Returns:
            Ordered, duplicate-free include directories
        """
        dirs: List[Path] = [self.wrapper_include_dir]

        if isinstance(location, SourceTree):
            dirs += [location.path / rel for rel in CORE_INCLUDE_DIRS]
            dirs += find_include_dirs(location.path / "vendor")
        elif isinstance(location, PrecompiledArtifact):
            dirs += self._artifact_dirs(location.headers_dir)

        return _unique(dirs)

    def _artifact_dirs(self, headers_dir: Path) -> List[Path]:
        dirs = [headers_dir / CORE_INCLUDE_DIRS[0]]
        platform_dir = headers_dir / CORE_INCLUDE_DIRS[1]
        if platform_dir.is_dir():
            dirs.append(platform_dir)
        dirs += find_include_dirs(headers_dir / "vendor")
        return dirs


def _unique(paths: Iterable[Path]) -> List[Path]:
    seen = set()
    result = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            result.append(path)
    return result
